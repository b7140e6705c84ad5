"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .handlers import register_exception_handlers
from .routes import auth, chat, conversations, memories, system, uploads


def create_fastapi_app(application: Application | None = None) -> FastAPI:
    """Create and configure FastAPI application around one Application."""
    application = application or Application()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Manage application lifespan."""
        await application.start()
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title="Chat API",
        description="Accounts, conversations, uploads and streaming AI chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=application.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(fastapi_app)

    fastapi_app.include_router(auth.create_auth_router(application))
    fastapi_app.include_router(conversations.create_conversations_router(application))
    fastapi_app.include_router(chat.create_chat_router(application))
    fastapi_app.include_router(uploads.create_uploads_router(application))
    fastapi_app.include_router(memories.create_memories_router(application))
    fastapi_app.include_router(system.create_system_router())

    return fastapi_app
