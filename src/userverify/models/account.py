"""Verification record shared by every compliant table."""

from typing import Any

from sqlmodel import Field, SQLModel


class Account(SQLModel):
    """An account row as seen by the verification service.

    Not a table: the store builds it from whichever table it reads, and
    ``table_name`` records where the row lives.
    """

    id: Any
    email: str
    table_name: str = Field(description="Backing table of the row")
    verified: bool = False
    verification_token: str | None = None
