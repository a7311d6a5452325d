"""Single-use email verification tokens for user accounts."""

__version__ = "0.1.0"
