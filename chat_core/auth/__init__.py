"""Authentication module."""

from .passwords import hash_password, verify_password
from .service import AuthService, IAuthService

__all__ = ["AuthService", "IAuthService", "hash_password", "verify_password"]
