"""Chat API routes."""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from ...app import Application
from ...errors import ServiceError
from ..handlers import internal_error
from ..schemas import ChatRequest


def create_chat_router(app: Application) -> APIRouter:
    """Create chat router."""
    router = APIRouter(prefix="/api", tags=["chat"])

    @router.post("/chat")
    async def chat(request: ChatRequest) -> StreamingResponse:
        """Stream the assistant's reply to the transcript as plain text."""
        try:
            stream = await app.dialogue_agent.respond(
                user_id=request.user_id or "",
                messages=[m.to_model() for m in request.messages or []],
            )
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("handling chat request", e) from e

        return StreamingResponse(stream, media_type="text/plain; charset=utf-8")

    return router
