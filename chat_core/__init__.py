"""Chat service core."""

from .app import Application, IApplication
from .auth import AuthService, IAuthService
from .context import ContextManager, estimate_tokens
from .conversations import ConversationService, IConversationService
from .dialogue import DialogueAgent, IDialogueAgent
from .errors import (
    AuthError,
    ConflictError,
    ErrorKind,
    NotFoundError,
    ServiceError,
    UpstreamError,
    ValidationError,
)
from .llm import ILLMProvider, LLMProvider
from .memory import IMemoryClient, MemoryClient
from .models import (
    Attachment,
    Conversation,
    ConversationSummary,
    Memory,
    Message,
    PublicUser,
    User,
)
from .storage import IStorage, Storage
from .uploads import CloudinaryStorage, IObjectStorage, UploadService

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "Message",
    "Attachment",
    "Conversation",
    "ConversationSummary",
    "User",
    "PublicUser",
    "Memory",
    # Errors
    "ErrorKind",
    "ServiceError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "ConflictError",
    "UpstreamError",
    # Components
    "IStorage",
    "Storage",
    "ContextManager",
    "estimate_tokens",
    "IAuthService",
    "AuthService",
    "IConversationService",
    "ConversationService",
    "ILLMProvider",
    "LLMProvider",
    "IMemoryClient",
    "MemoryClient",
    "IObjectStorage",
    "CloudinaryStorage",
    "UploadService",
    "IDialogueAgent",
    "DialogueAgent",
]
