"""Upload API routes."""

from fastapi import APIRouter, File, UploadFile

from ...app import Application
from ...errors import ServiceError
from ...uploads import UploadItem
from ..handlers import internal_error
from ..schemas import FailedFileOut, UploadedFileOut, UploadResponse


def create_uploads_router(app: Application) -> APIRouter:
    """Create uploads router."""
    router = APIRouter(prefix="/api", tags=["uploads"])

    @router.post("/upload", response_model=UploadResponse)
    async def upload(files: list[UploadFile] | None = File(None)) -> UploadResponse:
        """Upload files independently; one failure does not block the rest."""
        try:
            items = [
                UploadItem(
                    name=f.filename or "upload",
                    content=await f.read(),
                    mime_type=f.content_type or "application/octet-stream",
                )
                for f in files or []
            ]
            report = await app.uploads.upload_files(items)
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("uploading files", e) from e

        return UploadResponse(
            successful=[
                UploadedFileOut(
                    original_name=r.name,
                    size=r.size,
                    type=r.type,
                    mime_type=r.mime_type,
                    url=r.url,
                )
                for r in report.successful
            ],
            failed=[
                FailedFileOut(original_name=r.name, error=r.error or "Upload failed")
                for r in report.failed
            ],
            message=report.message,
        )

    return router
