"""Wire models for the HTTP API (camelCase JSON)."""

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models import (
    Attachment,
    Conversation,
    ConversationSummary,
    Memory,
    Message,
    PublicUser,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case is accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttachmentPayload(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: Literal["image", "file"]
    url: str
    name: str
    size: int = 0
    mime_type: str = "application/octet-stream"

    def to_model(self) -> Attachment:
        return Attachment(
            id=self.id,
            type=self.type,
            url=self.url,
            name=self.name,
            size=self.size,
            mime_type=self.mime_type,
        )

    @classmethod
    def from_model(cls, attachment: Attachment) -> "AttachmentPayload":
        return cls(
            id=attachment.id,
            type=attachment.type,
            url=attachment.url,
            name=attachment.name,
            size=attachment.size,
            mime_type=attachment.mime_type,
        )


class MessagePayload(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Literal["user", "assistant", "system"]
    content: str = ""
    timestamp: datetime = Field(default_factory=_now)
    attachments: list[AttachmentPayload] = Field(default_factory=list)

    def to_model(self) -> Message:
        timestamp = self.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return Message(
            id=self.id,
            role=self.role,
            content=self.content,
            timestamp=timestamp,
            attachments=[att.to_model() for att in self.attachments],
        )

    @classmethod
    def from_model(cls, message: Message) -> "MessagePayload":
        return cls(
            id=message.id,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            attachments=[AttachmentPayload.from_model(a) for a in message.attachments],
        )


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, user: PublicUser) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class SignupRequest(CamelModel):
    # Optional so that missing fields get the service's own message
    name: str | None = None
    email: str | None = None
    password: str | None = None


class SigninRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class AuthData(CamelModel):
    user: UserOut


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    data: AuthData


class ConversationSummaryOut(CamelModel):
    id: str
    title: str
    message_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, summary: ConversationSummary) -> "ConversationSummaryOut":
        return cls(
            id=summary.id,
            title=summary.title,
            message_count=summary.message_count,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
        )


class ConversationOut(CamelModel):
    id: str
    user_id: str
    title: str
    messages: list[MessagePayload]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, conversation: Conversation) -> "ConversationOut":
        return cls(
            id=conversation.id,
            user_id=conversation.user_id,
            title=conversation.title,
            messages=[MessagePayload.from_model(m) for m in conversation.messages],
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )


class SaveConversationRequest(CamelModel):
    id: str | None = None
    user_id: str | None = None
    title: str | None = None
    messages: list[MessagePayload] | None = None
    created_at: datetime | None = None


class UpdateConversationRequest(CamelModel):
    user_id: str | None = None
    title: str | None = None
    messages: list[MessagePayload] | None = None


class SaveConversationResponse(CamelModel):
    success: bool = True
    conversation: ConversationSummaryOut


class SuccessResponse(CamelModel):
    success: bool = True


class CountResponse(CamelModel):
    count: int


class CleanupResponse(CamelModel):
    deleted: int


class ChatRequest(CamelModel):
    messages: list[MessagePayload] | None = None
    user_id: str | None = None
    conversation_id: str | None = None


class MemoryOut(CamelModel):
    id: str
    text: str
    score: float | None = None

    @classmethod
    def from_model(cls, memory: Memory) -> "MemoryOut":
        return cls(id=memory.id, text=memory.text, score=memory.score)


class UploadedFileOut(CamelModel):
    success: bool = True
    original_name: str
    size: int
    type: Literal["image", "file"]
    mime_type: str
    url: str


class FailedFileOut(CamelModel):
    success: bool = False
    original_name: str
    error: str


class UploadResponse(CamelModel):
    successful: list[UploadedFileOut]
    failed: list[FailedFileOut]
    message: str
