"""Error kinds shared by services and the HTTP layer."""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories established at the service boundary."""

    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """Base error raised by services; carries a user-facing message."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION


class AuthError(ServiceError):
    kind = ErrorKind.AUTH


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT


class UpstreamError(ServiceError):
    """A third-party collaborator (AI, memory, object storage) failed."""

    kind = ErrorKind.UPSTREAM
