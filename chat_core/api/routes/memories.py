"""Long-term memory API routes."""

from fastapi import APIRouter, Depends

from ...app import Application
from ...errors import ServiceError
from ...logging_config import get_logger
from ..deps import Session, require_session
from ..schemas import MemoryOut

logger = get_logger(__name__)


def create_memories_router(app: Application) -> APIRouter:
    """Create memories router."""
    router = APIRouter(prefix="/api", tags=["memories"])

    @router.get("/memories", response_model=list[MemoryOut])
    async def list_memories(
        session: Session = Depends(require_session),
    ) -> list[MemoryOut]:
        """Everything remembered about the caller; empty if the service is down."""
        try:
            memories = await app.memory.get_memories(session.user_id)
        except ServiceError as e:
            logger.error(f"Error getting memories: {e.message}")
            return []

        return [MemoryOut.from_model(m) for m in memories]

    return router
