"""Email verification token service."""

import hashlib
import logging
import time
from urllib.parse import quote, urlencode

from userverify.config import settings
from userverify.exceptions import ModelNotCompliantError, UserNotFoundError, VerificationError
from userverify.models import Account
from userverify.services.cipher import TokenCipher
from userverify.services.email import VERIFICATION_TEMPLATE, EmailService
from userverify.services.schema import SchemaInspector
from userverify.services.store import AccountStore

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("verified", "verification_token")


class VerificationService:
    """Issues and validates single-use email verification tokens.

    A token is stored on the account row. ``send`` emails a link carrying it,
    and ``process`` consumes it when the link comes back, marking the account
    as verified.
    """

    def __init__(
        self,
        store: AccountStore,
        schema: SchemaInspector,
        mailer: EmailService,
        cipher: TokenCipher | None = None,
    ):
        self.store = store
        self.schema = schema
        self.mailer = mailer
        self.cipher = cipher or TokenCipher()

    async def generate(self, account: Account) -> bool:
        """Generate and save a verification token for the account.

        Raises:
            ModelNotCompliantError: If the account table lacks the verification columns
        """
        if not await self.is_compliant(account):
            raise ModelNotCompliantError()

        account.verified = False
        account.verification_token = self.generate_token(account.email)

        saved = await self.store.save(account)
        logger.info(f"Generated verification token for {account.email} (saved={saved})")
        return saved

    async def send(self, account: Account, subject: str | None = None) -> bool:
        """Email a link containing the verification token to the account.

        Raises:
            VerificationError: If the account table lacks the verification columns
        """
        if not await self.is_compliant(account):
            raise VerificationError()

        sent = await self.mailer.send_template(
            VERIFICATION_TEMPLATE,
            to=account.email,
            context={"user": account, "link": self.verification_link(account)},
            subject=subject if subject is not None else settings.verification_subject,
        )
        if not sent:
            logger.warning(f"Verification email to {account.email} was not sent")
        return bool(sent)

    async def process(self, account: Account, token: str) -> bool:
        """Consume the token, marking the account as verified on a match."""
        if not self.compare_token(account.verification_token, token):
            return False

        verified = account.model_copy(update={"verification_token": None, "verified": True})
        if not await self.store.update_verification_fields(verified, expected_token=token):
            logger.warning(f"Verification token for {account.email} was already consumed")
            return False

        account.verification_token = None
        account.verified = True
        logger.info(f"Verified account {account.email}")
        return True

    def is_verified(self, account: Account) -> bool:
        return account.verified is True

    async def get_user(self, token: str, table_name: str) -> Account:
        """Get the account holding the given token.

        Raises:
            UserNotFoundError: If no row in the table holds the token
        """
        account = await self.store.find_by_token(token, table_name)
        if account is None:
            raise UserNotFoundError()
        return account

    async def is_compliant(self, account: Account) -> bool:
        """Check if the account table has every verification column."""
        return await self.is_table_compliant(account.table_name)

    async def is_table_compliant(self, table_name: str) -> bool:
        for column in REQUIRED_COLUMNS:
            if not await self.schema.has_column(table_name, column):
                logger.debug(f"Table {table_name!r} is missing column {column!r}")
                return False
        logger.debug(f"Table {table_name!r} is compliant")
        return True

    def generate_token(self, email: str) -> str:
        """Hash the current time with the encrypted email (40 hex chars)."""
        seed = f"{time.time_ns()}{self.cipher.encrypt(email)}"
        return hashlib.sha1(seed.encode("utf-8")).hexdigest()

    @staticmethod
    def compare_token(stored_token: str | None, request_token: str | None) -> bool:
        if stored_token is None or request_token is None:
            return False
        return stored_token == request_token

    def verification_link(self, account: Account) -> str:
        """Build the URL the account owner follows to verify."""
        token = quote(account.verification_token or "", safe="")
        query = urlencode({"table": account.table_name})
        return f"{settings.app_url}{settings.verification_path}/{token}?{query}"
