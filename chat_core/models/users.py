"""User account models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A registered account. Email is stored lowercase and is unique."""

    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    def public(self) -> "PublicUser":
        return PublicUser(
            id=self.id,
            name=self.name,
            email=self.email,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class PublicUser:
    """User data safe to return to clients."""

    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime
