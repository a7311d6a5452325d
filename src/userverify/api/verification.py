"""Verification link endpoint."""

import logging

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from userverify.api.deps import VerificationDep
from userverify.config import settings
from userverify.exceptions import UserAlreadyValidatedError, UserNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


class VerificationResponse(BaseModel):
    """Response for a successful verification."""

    verified: bool
    email: str


@router.get("/{token}", response_model=VerificationResponse)
async def verify(
    token: str,
    verification: VerificationDep,
    table: str = Query(default=settings.default_table, description="Account table"),
):
    """
    Verify the account holding the token from a verification email.

    Only tables listed in ``verification_tables`` that carry the verification
    columns are looked up; anything else is reported as not found.
    """
    if table not in settings.verification_tables or not await verification.is_table_compliant(
        table
    ):
        logger.warning(f"Rejected verification lookup in table {table!r}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=UserNotFoundError.message,
        )

    try:
        account = await verification.get_user(token, table)
        # Only reachable for rows edited outside the service, since process
        # clears the token whenever it sets verified.
        if verification.is_verified(account):
            raise UserAlreadyValidatedError()
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except UserAlreadyValidatedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e

    if not await verification.process(account, token):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification token",
        )

    return VerificationResponse(verified=True, email=account.email)
