"""Verification errors."""


class VerificationError(Exception):
    """Verification precondition failed."""

    message = "Verification failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ModelNotCompliantError(VerificationError):
    """The account table lacks the ``verified`` or ``verification_token`` column."""

    message = "Model not compliant."


class UserNotFoundError(VerificationError):
    """No account matches the given token."""

    message = "No user found for the given token."


class UserAlreadyValidatedError(VerificationError):
    """The account has already been verified."""

    message = "User already validated."
