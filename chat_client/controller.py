"""Chat orchestration controller driving the HTTP API."""

import uuid
from datetime import datetime, timezone
from typing import Callable, Protocol

import httpx

from chat_core.api.schemas import (
    ConversationOut,
    ConversationSummaryOut,
    MessagePayload,
    UploadResponse,
)
from chat_core.logging_config import get_logger
from chat_core.models import Attachment, ConversationSummary, Message, derive_title

from .attachments import AttachmentTray
from .errors import ChatClientError, raise_for_status
from .session import UserSession

logger = get_logger(__name__)

USER_NOT_FOUND = "User not found. Please sign in."
SEND_FAILED = "Failed to send message. Please try again."
LOAD_FAILED = "Failed to load conversation. Please try again."
LIST_FAILED = "Failed to load conversations. Please try again."
DELETE_FAILED = "Failed to delete conversation. Please try again."
UPLOAD_FAILED = "Upload failed. Please try again."

UploadFileSpec = tuple[str, bytes, str]  # (name, content, mime type)


class IChatController(Protocol):
    """Client-side state machine for one user's chat session."""

    async def send(self, content: str, attachments: list[Attachment] | None = None) -> None:
        ...

    async def edit(self, message_id: str, new_content: str) -> None:
        ...

    async def regenerate(self) -> None:
        ...

    async def load_conversation(self, conversation_id: str) -> None:
        ...

    async def delete_conversation(self, conversation_id: str) -> None:
        ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _payload(messages: list[Message]) -> list[dict]:
    return [
        MessagePayload.from_model(m).model_dump(mode="json", by_alias=True)
        for m in messages
    ]


def _summary(data: dict) -> ConversationSummary:
    out = ConversationSummaryOut.model_validate(data)
    return ConversationSummary(
        id=out.id,
        title=out.title,
        message_count=out.message_count,
        created_at=out.created_at,
        updated_at=out.updated_at,
    )


class ChatController:
    """
    Tracks the active conversation and its transcript.

    Every network failure is turned into `error`; no method raises for one.
    `loading` is true only while a send is in flight.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        session: UserSession | None = None,
        conversation_id: str | None = None,
        on_chunk: Callable[[str], None] | None = None,
    ):
        self._client = client
        self.session = session
        self.conversation_id = conversation_id
        self.messages: list[Message] = []
        self.conversations: list[ConversationSummary] = []
        self.loading = False
        self.error: str | None = None
        self._on_chunk = on_chunk

    @property
    def user_id(self) -> str | None:
        return self.session.user_id if self.session else None

    def clear_error(self) -> None:
        self.error = None

    # Sending

    async def send(self, content: str, attachments: list[Attachment] | None = None) -> None:
        """Append the user message, fetch the reply, persist the transcript."""
        attachments = list(attachments or [])
        text = content.strip()
        if not text and not attachments:
            return

        if not self.user_id:
            self.error = USER_NOT_FOUND
            return

        self.error = None
        self.loading = True

        try:
            if not self.conversation_id:
                self.conversation_id = str(uuid.uuid4())
            conversation_id = self.conversation_id

            user_message = Message(
                id=str(uuid.uuid4()),
                role="user",
                content=text,
                timestamp=_now(),
                attachments=attachments,
            )
            # Optimistic append; it stays even if the request fails
            self.messages = [*self.messages, user_message]

            reply = await self._complete(conversation_id, self.messages)
            assistant_message = Message(
                id=str(uuid.uuid4()),
                role="assistant",
                content=reply,
                timestamp=_now(),
            )
            self.messages = [*self.messages, assistant_message]

            await self._save(conversation_id, self.messages)
            await self.load_conversations()

        except ChatClientError as e:
            logger.error(f"Error sending message: {e.message}")
            self.error = e.message
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error sending message: {e}")
            self.error = SEND_FAILED
        finally:
            self.loading = False

    async def _complete(self, conversation_id: str, messages: list[Message]) -> str:
        body = {
            "messages": _payload(messages),
            "conversationId": conversation_id,
            "userId": self.user_id,
        }
        parts: list[str] = []
        async with self._client.stream("POST", "/api/chat", json=body) as response:
            if not response.is_success:
                await response.aread()
                raise_for_status(response)
            async for chunk in response.aiter_text():
                parts.append(chunk)
                if self._on_chunk:
                    self._on_chunk(chunk)
        return "".join(parts)

    async def _save(self, conversation_id: str, messages: list[Message]) -> None:
        response = await self._client.post(
            "/api/conversations",
            json={
                "id": conversation_id,
                "userId": self.user_id,
                "title": derive_title(messages),
                "messages": _payload(messages),
            },
        )
        raise_for_status(response)

    async def edit(self, message_id: str, new_content: str) -> None:
        """Replace a message and regenerate everything after it."""
        text = new_content.strip()
        if not text:
            return

        index = next(
            (i for i, message in enumerate(self.messages) if message.id == message_id),
            -1,
        )
        if index == -1:
            return

        if not self.user_id:
            self.error = USER_NOT_FOUND
            return

        original = self.messages[index]
        self.messages = self.messages[:index]
        await self.send(text, original.attachments)

    async def regenerate(self) -> None:
        """Drop the last reply and ask again with the most recent user message."""
        index = next(
            (
                i
                for i in range(len(self.messages) - 1, -1, -1)
                if self.messages[i].role == "user"
            ),
            -1,
        )
        if index == -1:
            return

        if not self.user_id:
            self.error = USER_NOT_FOUND
            return

        last_user = self.messages[index]
        self.messages = self.messages[:index]
        await self.send(last_user.content, last_user.attachments)

    # Conversations

    async def load_conversations(self) -> list[ConversationSummary]:
        """Refresh the summary list; auto-open the newest when none is active."""
        if not self.user_id:
            return []

        try:
            response = await self._client.get(
                "/api/conversations", params={"userId": self.user_id}
            )
            raise_for_status(response)
            self.conversations = [_summary(item) for item in response.json()]
        except (ChatClientError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Error loading conversations: {e}")
            self.error = LIST_FAILED
            return []

        if self.conversations and not self.conversation_id:
            await self.load_conversation(self.conversations[0].id)

        return self.conversations

    async def load_conversation(self, conversation_id: str) -> None:
        """Make a stored conversation active. On failure nothing changes."""
        if conversation_id == self.conversation_id:
            return

        if not self.user_id:
            self.error = USER_NOT_FOUND
            return

        self.error = None
        try:
            response = await self._client.get(
                f"/api/conversations/{conversation_id}",
                params={"userId": self.user_id},
            )
            raise_for_status(response)
            conversation = ConversationOut.model_validate(response.json())
        except (ChatClientError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Error loading conversation: {e}")
            self.error = LOAD_FAILED
            return

        self.messages = [m.to_model() for m in conversation.messages]
        self.conversation_id = conversation_id

    async def new_conversation(self) -> str:
        """Start an empty conversation and make it active."""
        self.conversation_id = str(uuid.uuid4())
        self.messages = []
        self.error = None
        await self.load_conversations()
        return self.conversation_id

    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete remotely; deleting the active one starts a fresh conversation."""
        if not self.user_id:
            self.error = USER_NOT_FOUND
            return

        try:
            response = await self._client.delete(
                f"/api/conversations/{conversation_id}",
                params={"userId": self.user_id},
            )
            raise_for_status(response)
        except (ChatClientError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Error deleting conversation: {e}")
            self.error = DELETE_FAILED
            return

        self.conversations = [c for c in self.conversations if c.id != conversation_id]
        if conversation_id == self.conversation_id:
            await self.new_conversation()
        else:
            await self.load_conversations()

    # Uploads

    async def upload(
        self, files: list[UploadFileSpec], tray: AttachmentTray | None = None
    ) -> AttachmentTray:
        """Upload files; each one ends up uploaded or flagged upload_failed."""
        tray = tray or AttachmentTray()
        pending = [tray.add(name, len(content), mime) for name, content, mime in files]
        if not pending:
            return tray

        try:
            response = await self._client.post(
                "/api/upload",
                files=[
                    ("files", (name, content, mime)) for name, content, mime in files
                ],
            )
            raise_for_status(response)
            result = UploadResponse.model_validate(response.json())
        except (ChatClientError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Upload error: {e}")
            tray.fail(pending, UPLOAD_FAILED)
            return tray

        tray.apply_results(pending, result.successful, result.failed)
        if result.failed:
            names = ", ".join(f.original_name for f in result.failed)
            logger.warning(f"Some files failed to upload: {names}")
        return tray
