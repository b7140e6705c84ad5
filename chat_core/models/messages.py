"""Message-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Role = Literal["user", "assistant", "system"]
AttachmentType = Literal["image", "file"]


def attachment_type_for(mime_type: str | None) -> AttachmentType:
    """Images are shown inline; everything else is a plain file link."""
    return "image" if (mime_type or "").startswith("image/") else "file"


@dataclass
class Attachment:
    """A file or image stored externally and referenced by URL."""

    id: str
    type: AttachmentType
    url: str
    name: str
    size: int = 0
    mime_type: str = "application/octet-stream"

    def markup(self) -> str:
        """Inline reference used when the attachment is shown to the model."""
        label = "Image" if self.type == "image" else "File"
        return f"[{label}: {self.name}]({self.url})"


@dataclass
class Message:
    """A single message in a conversation."""

    id: str
    role: Role
    content: str
    timestamp: datetime
    attachments: list[Attachment] = field(default_factory=list)

    def render(self) -> str:
        """Text sent to the model: content followed by attachment references."""
        if not self.attachments:
            return self.content
        references = "\n".join(att.markup() for att in self.attachments)
        return f"{self.content}\n\n{references}" if self.content else references
