"""Conversation API routes."""

from fastapi import APIRouter, Depends, Header, Query

from ...app import Application
from ...errors import ServiceError, ValidationError
from ..deps import Session, require_session, resolve_user_id
from ..handlers import internal_error
from ..schemas import (
    CleanupResponse,
    ConversationOut,
    ConversationSummaryOut,
    CountResponse,
    SaveConversationRequest,
    SaveConversationResponse,
    SuccessResponse,
    UpdateConversationRequest,
)


def create_conversations_router(app: Application) -> APIRouter:
    """Create conversations router."""
    router = APIRouter(prefix="/api/conversations", tags=["conversations"])

    @router.get("", response_model=list[ConversationSummaryOut])
    async def list_conversations(
        limit: int | None = Query(None, ge=1, le=1000),
        session: Session = Depends(require_session),
    ) -> list[ConversationSummaryOut]:
        """The caller's conversations, most recently updated first."""
        try:
            summaries = await app.conversations.list_summaries(
                session.user_id, limit=limit
            )
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("fetching conversations", e) from e

        return [ConversationSummaryOut.from_model(s) for s in summaries]

    @router.post("", response_model=SaveConversationResponse)
    async def save_conversation(
        request: SaveConversationRequest,
    ) -> SaveConversationResponse:
        """Create a conversation or replace its transcript."""
        if not request.user_id:
            raise ValidationError("Unauthorized - userId required in body")
        if not request.id or request.messages is None:
            raise ValidationError("Missing required fields: id, messages")

        try:
            conversation = await app.conversations.save(
                conversation_id=request.id,
                user_id=request.user_id,
                messages=[m.to_model() for m in request.messages],
                title=request.title,
                created_at=request.created_at,
            )
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("saving conversation", e) from e

        return SaveConversationResponse(
            conversation=ConversationSummaryOut.from_model(conversation.summary())
        )

    @router.get("/count", response_model=CountResponse)
    async def count_conversations(
        session: Session = Depends(require_session),
    ) -> CountResponse:
        """Number of conversations the caller owns."""
        try:
            return CountResponse(count=await app.conversations.count(session.user_id))
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("counting conversations", e) from e

    @router.post("/cleanup", response_model=CleanupResponse)
    async def cleanup_conversations(
        keep: int = Query(50, ge=0),
        session: Session = Depends(require_session),
    ) -> CleanupResponse:
        """Delete all but the `keep` most recent conversations."""
        try:
            deleted = await app.conversations.cleanup(session.user_id, keep=keep)
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("cleaning up conversations", e) from e

        return CleanupResponse(deleted=deleted)

    @router.get("/{conversation_id}", response_model=ConversationOut)
    async def get_conversation(
        conversation_id: str,
        session: Session = Depends(require_session),
    ) -> ConversationOut:
        """One conversation with its messages."""
        try:
            conversation = await app.conversations.get(conversation_id, session.user_id)
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("fetching conversation", e) from e

        return ConversationOut.from_model(conversation)

    @router.patch("/{conversation_id}", response_model=SuccessResponse)
    async def update_conversation(
        conversation_id: str,
        request: UpdateConversationRequest,
        user_id: str | None = Query(None, alias="userId"),
        x_user_id: str | None = Header(None),
    ) -> SuccessResponse:
        """Merge a title and/or transcript into an owned conversation."""
        session = resolve_user_id(request.user_id, user_id, x_user_id)
        try:
            await app.conversations.update(
                conversation_id,
                session.user_id,
                title=request.title,
                messages=(
                    [m.to_model() for m in request.messages]
                    if request.messages is not None
                    else None
                ),
            )
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("updating conversation", e) from e

        return SuccessResponse()

    @router.delete("/{conversation_id}", response_model=SuccessResponse)
    async def delete_conversation(
        conversation_id: str,
        session: Session = Depends(require_session),
    ) -> SuccessResponse:
        """Delete an owned conversation."""
        try:
            await app.conversations.delete(conversation_id, session.user_id)
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("deleting conversation", e) from e

        return SuccessResponse()

    return router
