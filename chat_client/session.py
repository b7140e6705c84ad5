"""Signed-in user identity, passed explicitly to the controller."""

from dataclasses import dataclass

import httpx

from .errors import raise_for_status


@dataclass(frozen=True)
class UserSession:
    """Who is using the controller."""

    user_id: str
    name: str = ""
    email: str = ""

    @classmethod
    def from_auth_response(cls, payload: dict) -> "UserSession":
        user = payload["data"]["user"]
        return cls(user_id=user["id"], name=user.get("name", ""), email=user.get("email", ""))


async def sign_up(
    client: httpx.AsyncClient, name: str, email: str, password: str
) -> UserSession:
    """Create an account and return its session."""
    response = await client.post(
        "/api/auth/signup", json={"name": name, "email": email, "password": password}
    )
    raise_for_status(response)
    return UserSession.from_auth_response(response.json())


async def sign_in(client: httpx.AsyncClient, email: str, password: str) -> UserSession:
    """Sign in and return the session."""
    response = await client.post(
        "/api/auth/signin", json={"email": email, "password": password}
    )
    raise_for_status(response)
    return UserSession.from_auth_response(response.json())
