"""Account sign-up and sign-in."""

import re
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Protocol

from ..errors import AuthError, ConflictError, NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models import PublicUser, User
from ..storage import IStorage
from .passwords import BCRYPT_ROUNDS, hash_password, verify_password

logger = get_logger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2

INVALID_CREDENTIALS = "Invalid email or password"


class IAuthService(Protocol):
    """Email/password accounts."""

    async def signup(self, name: str, email: str, password: str) -> PublicUser:
        """Create an account."""
        ...

    async def signin(self, email: str, password: str) -> PublicUser:
        """Check credentials and return the account."""
        ...

    async def get_user(self, user_id: str) -> PublicUser:
        """Look up an account by id."""
        ...


def _validate_email(email: str) -> None:
    if not EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email address")


class AuthService:
    """Validates credentials and stores bcrypt-hashed accounts."""

    def __init__(self, storage: IStorage, bcrypt_rounds: int = BCRYPT_ROUNDS):
        self._storage = storage
        self._rounds = bcrypt_rounds

    async def signup(self, name: str, email: str, password: str) -> PublicUser:
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")
        email = email.strip()
        _validate_email(email)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        name = name.strip()
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationError(
                f"Name must be at least {MIN_NAME_LENGTH} characters long"
            )

        if await self._storage.get_user_by_email(email):
            raise ConflictError("An account with this email already exists")

        now = datetime.now(timezone.utc)
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email.lower(),
            password_hash=hash_password(password, self._rounds),
            created_at=now,
            updated_at=now,
        )
        try:
            await self._storage.create_user(user)
        except sqlite3.IntegrityError as e:
            # Lost a race with a concurrent signup for the same email
            raise ConflictError("An account with this email already exists") from e

        logger.info("User signed up", extra={"context": {"user_id": user.id}})
        return user.public()

    async def signin(self, email: str, password: str) -> PublicUser:
        if not email or not password:
            raise ValidationError("Email and password are required")
        email = email.strip()
        _validate_email(email)

        user = await self._storage.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthError(INVALID_CREDENTIALS)

        user.updated_at = datetime.now(timezone.utc)
        await self._storage.touch_user(user.id, user.updated_at)

        logger.info("User signed in", extra={"context": {"user_id": user.id}})
        return user.public()

    async def get_user(self, user_id: str) -> PublicUser:
        user = await self._storage.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user.public()
