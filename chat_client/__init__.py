"""Python client for the chat API."""

from .attachments import AttachmentTray, PendingAttachment
from .controller import ChatController, IChatController
from .errors import ChatClientError
from .session import UserSession, sign_in, sign_up

__all__ = [
    "AttachmentTray",
    "PendingAttachment",
    "ChatController",
    "IChatController",
    "ChatClientError",
    "UserSession",
    "sign_in",
    "sign_up",
]
