"""Request-scoped dependencies."""

from dataclasses import dataclass

from fastapi import Header, Query

from ..errors import AuthError


@dataclass(frozen=True)
class Session:
    """Identity of the caller for one request."""

    user_id: str


def resolve_user_id(*candidates: str | None) -> Session:
    """First non-empty candidate wins; none means the caller is unidentified."""
    for candidate in candidates:
        if candidate:
            return Session(user_id=candidate)
    raise AuthError("Unauthorized - userId required")


async def require_session(
    user_id: str | None = Query(None, alias="userId"),
    x_user_id: str | None = Header(None),
) -> Session:
    """userId from the query string, else the x-user-id header."""
    return resolve_user_id(user_id, x_user_id)
