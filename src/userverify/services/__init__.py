"""Verification services and their collaborators."""

from sqlalchemy.ext.asyncio import AsyncSession

from userverify.services.cipher import TokenCipher
from userverify.services.email import EmailService, email_service
from userverify.services.schema import SchemaInspector
from userverify.services.store import AccountStore
from userverify.services.verification import VerificationService


def build_verification_service(
    session: AsyncSession,
    mailer: EmailService | None = None,
) -> VerificationService:
    """Wire a verification service against a database session."""
    return VerificationService(
        store=AccountStore(session),
        schema=SchemaInspector(session),
        mailer=mailer or email_service,
        cipher=TokenCipher(),
    )


__all__ = [
    "AccountStore",
    "EmailService",
    "SchemaInspector",
    "TokenCipher",
    "VerificationService",
    "build_verification_service",
]
