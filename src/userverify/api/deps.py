"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from userverify.database import get_session
from userverify.services import VerificationService, build_verification_service

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_verification_service(session: SessionDep) -> VerificationService:
    """Build the verification service for the current request."""
    return build_verification_service(session)


VerificationDep = Annotated[VerificationService, Depends(get_verification_service)]
