"""Conversion of errors into `{success: false, message}` responses."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..errors import ErrorKind, ServiceError
from ..logging_config import get_logger

logger = get_logger(__name__)

INTERNAL_MESSAGE = "Internal Server Error"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "message": message}
    )


def internal_error(action: str, exc: Exception) -> ServiceError:
    """Log an unexpected failure and hide its details from the client."""
    logger.error(f"Error {action}: {exc}", exc_info=exc)
    return ServiceError(INTERNAL_MESSAGE, ErrorKind.INTERNAL)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.kind is not ErrorKind.INTERNAL:
        logger.info(
            f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}"
        )
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"Invalid request: {field} {first.get('msg', '')}".strip()
    else:
        message = "Invalid request"
    return error_response(400, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
