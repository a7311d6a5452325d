"""SQLModel database models."""

from userverify.models.account import Account
from userverify.models.user import User, UserCreate, UserRead

__all__ = [
    "Account",
    "User",
    "UserCreate",
    "UserRead",
]
