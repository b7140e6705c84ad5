"""Application bootstrap and lifecycle management."""

from typing import Protocol

from .auth import AuthService
from .config import Settings, load_settings, resolve_db_path
from .context import ContextManager
from .conversations import ConversationService
from .dialogue import DialogueAgent
from .llm import ILLMProvider, LLMProvider
from .logging_config import get_logger
from .memory import IMemoryClient, MemoryClient
from .storage import IStorage, Storage
from .uploads import CloudinaryStorage, IObjectStorage, UploadService

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Main application bootstrap. Collaborators may be injected for tests."""

    def __init__(
        self,
        settings: Settings | None = None,
        db_path: str | None = None,
        llm_provider: ILLMProvider | None = None,
        memory_client: IMemoryClient | None = None,
        object_storage: IObjectStorage | None = None,
    ):
        self._settings = settings or load_settings()
        env_db_path = self._settings.database_url if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)

        self._llm: ILLMProvider | None = llm_provider
        self._memory: IMemoryClient | None = memory_client
        self._object_storage: IObjectStorage | None = object_storage

        # Collaborators created here (not injected) are closed in stop()
        self._owned: list = []

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._auth: AuthService | None = None
        self._conversations: ConversationService | None = None
        self._dialogue_agent: DialogueAgent | None = None
        self._uploads: UploadService | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. External collaborators
        if self._llm is None:
            self._llm = self._create_llm()
            if self._llm is not None:
                self._owned.append(self._llm)
        if self._memory is None:
            self._memory = MemoryClient(
                api_key=self._settings.mem0_api_key,
                base_url=self._settings.mem0_base_url,
            )
            self._owned.append(self._memory)
        if self._object_storage is None:
            self._object_storage = CloudinaryStorage(
                cloud_name=self._settings.cloudinary_cloud_name,
                api_key=self._settings.cloudinary_api_key,
                api_secret=self._settings.cloudinary_api_secret,
                folder=self._settings.cloudinary_folder,
            )
            self._owned.append(self._object_storage)

        # 3. Services
        self._auth = AuthService(self._storage, bcrypt_rounds=self._settings.bcrypt_rounds)
        self._conversations = ConversationService(self._storage)
        self._dialogue_agent = DialogueAgent(
            llm_provider=self._llm,
            memory=self._memory,
            context_manager=ContextManager(self._settings.context_max_tokens),
        )
        self._uploads = UploadService(self._object_storage)
        logger.info("All components initialized successfully")

    def _create_llm(self) -> ILLMProvider | None:
        try:
            provider = LLMProvider(
                api_key=self._settings.anthropic_api_key,
                model=self._settings.anthropic_model,
            )
        except ValueError as e:
            logger.warning(f"LLM provider disabled: {e}")
            return None
        logger.info("LLM provider initialized")
        return provider

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        for component in reversed(self._owned):
            await component.close()
        self._owned.clear()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    def _require(self, component):
        if component is None:
            raise RuntimeError("Application not started")
        return component

    @property
    def storage(self) -> IStorage:
        return self._require(self._storage)

    @property
    def auth(self) -> AuthService:
        return self._require(self._auth)

    @property
    def conversations(self) -> ConversationService:
        return self._require(self._conversations)

    @property
    def dialogue_agent(self) -> DialogueAgent:
        return self._require(self._dialogue_agent)

    @property
    def uploads(self) -> UploadService:
        return self._require(self._uploads)

    @property
    def memory(self) -> IMemoryClient:
        return self._require(self._memory)
