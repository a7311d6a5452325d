"""User model."""

from datetime import UTC, datetime

from nanoid import generate as nanoid_generate
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from userverify.models.account import Account


def _now() -> datetime:
    return datetime.now(UTC)


class User(SQLModel, table=True):
    """User account carrying the verification columns.

    ``verified`` and ``verification_token`` are the two columns the schema
    gate looks for; any other table can be made compliant by adding them.
    """

    __tablename__ = "users"

    id: str = Field(default_factory=nanoid_generate, primary_key=True, max_length=21)
    email: str = Field(unique=True, index=True, max_length=255)
    name: str | None = Field(default=None, max_length=255)
    verified: bool = Field(default=False)
    verification_token: str | None = Field(
        default=None, index=True, max_length=255, description="Pending verification token"
    )
    created_at: datetime = Field(
        default_factory=_now,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )
    updated_at: datetime = Field(
        default_factory=_now,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        sa_column_kwargs={"onupdate": _now},
    )

    def to_account(self) -> Account:
        """Build the verification record for this row."""
        return Account(
            id=self.id,
            email=self.email,
            table_name=self.__tablename__,
            verified=self.verified,
            verification_token=self.verification_token,
        )


class UserCreate(SQLModel):
    """Schema for creating a user."""

    email: str
    name: str | None = None


class UserRead(SQLModel):
    """Schema for reading a user."""

    id: str
    email: str
    name: str | None
    verified: bool
