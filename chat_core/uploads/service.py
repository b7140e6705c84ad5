"""Concurrent multi-file upload with per-file failure isolation."""

import asyncio
from dataclasses import dataclass, field

from ..errors import ValidationError
from ..logging_config import get_logger
from ..models import attachment_type_for
from .object_storage import IObjectStorage

logger = get_logger(__name__)


@dataclass
class UploadItem:
    """One file received from a client."""

    name: str
    content: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class UploadResult:
    name: str
    success: bool
    size: int = 0
    mime_type: str = ""
    url: str | None = None
    error: str | None = None

    @property
    def type(self) -> str:
        return attachment_type_for(self.mime_type)


@dataclass
class UploadReport:
    successful: list[UploadResult] = field(default_factory=list)
    failed: list[UploadResult] = field(default_factory=list)

    @property
    def message(self) -> str:
        text = f"{len(self.successful)} files uploaded successfully"
        if self.failed:
            text += f", {len(self.failed)} failed"
        return text


class UploadService:
    """Uploads every file independently and aggregates the outcomes."""

    def __init__(self, storage: IObjectStorage):
        self._storage = storage

    async def upload_files(self, items: list[UploadItem]) -> UploadReport:
        if not items:
            raise ValidationError("No files provided")

        logger.info(f"Uploading {len(items)} files")
        results = await asyncio.gather(*[self._upload_one(item) for item in items])

        report = UploadReport()
        for result in results:
            (report.successful if result.success else report.failed).append(result)

        logger.info(
            f"Upload results: {len(report.successful)} successful, "
            f"{len(report.failed)} failed"
        )
        return report

    async def _upload_one(self, item: UploadItem) -> UploadResult:
        try:
            url = await self._storage.upload(item.name, item.content, item.mime_type)
        except Exception as e:
            logger.error(f"Error uploading file {item.name}: {e}")
            return UploadResult(name=item.name, success=False, error=str(e) or "Upload failed")

        return UploadResult(
            name=item.name,
            success=True,
            size=item.size,
            mime_type=item.mime_type,
            url=url,
        )
