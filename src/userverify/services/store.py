"""Account persistence for any table carrying the verification columns."""

import logging
from typing import Any

from sqlalchemy import Boolean, String, column, select, table, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.expression import TableClause

from userverify.models import Account

logger = logging.getLogger(__name__)


def account_table(table_name: str) -> TableClause:
    """Lightweight table construct exposing the fixed account projection."""
    return table(
        table_name,
        column("id"),
        column("email", String),
        column("verified", Boolean),
        column("verification_token", String),
    )


class AccountStore:
    """Reads and writes account rows with Core statements.

    Writes are committed immediately unless ``autocommit`` is False, in which
    case the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession, autocommit: bool = True):
        self.session = session
        self.autocommit = autocommit

    async def _find_one(self, table_name: str, field: str, value: Any) -> Account | None:
        t = account_table(table_name)
        stmt = (
            select(t.c.id, t.c.email, t.c.verified, t.c.verification_token)
            .where(t.c[field] == value)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return Account(table_name=table_name, **row._mapping)

    async def find_by_token(self, token: str, table_name: str) -> Account | None:
        """Find the account holding the given verification token."""
        return await self._find_one(table_name, "verification_token", token)

    async def find_by_email(self, email: str, table_name: str) -> Account | None:
        return await self._find_one(table_name, "email", email)

    async def find_by_id(self, account_id: Any, table_name: str) -> Account | None:
        return await self._find_one(table_name, "id", account_id)

    async def save(self, account: Account) -> bool:
        """Persist the verification fields of the account, matched by id.

        Returns:
            True if a row was updated
        """
        t = account_table(account.table_name)
        stmt = (
            update(t)
            .where(t.c.id == account.id)
            .values(verified=account.verified, verification_token=account.verification_token)
        )
        result = await self.session.execute(stmt)
        await self._commit()

        if result.rowcount == 0:  # type: ignore[attr-defined]
            logger.warning(f"No row updated for account {account.id} in {account.table_name}")
            return False
        return True

    async def update_verification_fields(
        self,
        account: Account,
        expected_token: str | None = None,
    ) -> bool:
        """Write the verification fields of the account, matched by email.

        When ``expected_token`` is given the row is only updated if it still
        holds that token, so concurrent callers cannot both consume it.

        Returns:
            True if a row was updated
        """
        t = account_table(account.table_name)
        stmt = update(t).where(t.c.email == account.email)
        if expected_token is not None:
            stmt = stmt.where(t.c.verification_token == expected_token)
        stmt = stmt.values(
            verified=account.verified,
            verification_token=account.verification_token,
        )
        result = await self.session.execute(stmt)
        await self._commit()
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def _commit(self) -> None:
        if self.autocommit:
            await self.session.commit()
