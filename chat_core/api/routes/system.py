"""Service health routes."""

from fastapi import APIRouter
from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


def create_system_router() -> APIRouter:
    """Create system router."""
    router = APIRouter(prefix="/api", tags=["system"])

    @router.get("/health", response_model=StatusResponse)
    async def health() -> dict:
        """Liveness probe."""
        return {"status": "ok"}

    return router
