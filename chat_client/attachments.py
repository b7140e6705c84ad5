"""Attachments waiting to be sent with the next message."""

import uuid
from dataclasses import dataclass

from chat_core.api.schemas import FailedFileOut, UploadedFileOut
from chat_core.models import Attachment, attachment_type_for


@dataclass
class PendingAttachment:
    """A file picked by the user, uploading or uploaded."""

    id: str
    name: str
    size: int
    mime_type: str
    url: str = ""
    uploading: bool = True
    upload_failed: bool = False
    error: str | None = None

    @property
    def type(self) -> str:
        return attachment_type_for(self.mime_type)

    def to_attachment(self) -> Attachment:
        return Attachment(
            id=self.id,
            type=self.type,
            url=self.url,
            name=self.name,
            size=self.size,
            mime_type=self.mime_type,
        )


class AttachmentTray:
    """Tracks pending uploads; sending is blocked until every entry is uploaded."""

    def __init__(self):
        self._items: list[PendingAttachment] = []

    @property
    def items(self) -> list[PendingAttachment]:
        return list(self._items)

    def add(self, name: str, size: int, mime_type: str) -> PendingAttachment:
        item = PendingAttachment(
            id=str(uuid.uuid4()), name=name, size=size, mime_type=mime_type
        )
        self._items.append(item)
        return item

    def remove(self, attachment_id: str) -> None:
        self._items = [item for item in self._items if item.id != attachment_id]

    def apply_results(
        self,
        pending: list[PendingAttachment],
        successful: list[UploadedFileOut],
        failed: list[FailedFileOut],
    ) -> None:
        """Match upload results to pending entries by original file name."""
        remaining = list(successful)
        errors = {entry.original_name: entry.error for entry in failed}
        for item in pending:
            match = next(
                (entry for entry in remaining if entry.original_name == item.name),
                None,
            )
            item.uploading = False
            if match is not None:
                remaining.remove(match)
                item.url = match.url
            else:
                item.upload_failed = True
                item.error = errors.get(item.name) or "Upload failed"

    def fail(self, pending: list[PendingAttachment], error: str) -> None:
        for item in pending:
            item.uploading = False
            item.upload_failed = True
            item.error = error

    @property
    def uploading(self) -> bool:
        return any(item.uploading for item in self._items)

    @property
    def has_failures(self) -> bool:
        return any(item.upload_failed for item in self._items)

    @property
    def can_send(self) -> bool:
        """Send stays disabled while anything is uploading or failed."""
        return not self.uploading and not self.has_failures

    def attachments(self) -> list[Attachment]:
        return [
            item.to_attachment()
            for item in self._items
            if not item.uploading and not item.upload_failed
        ]
