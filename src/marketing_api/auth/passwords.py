"""
Password hashing with bcrypt through passlib.
"""

import logging

from passlib.context import CryptContext

from marketing_api.config import Settings
from marketing_api.shared.exceptions import PasswordHashingError
from marketing_api.shared.logging import get_logger


class PasswordHasher:
    """Salted one-way hashing and constant-time verification of passwords."""

    def __init__(self, settings: Settings, logger: logging.Logger | None = None) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.bcrypt_rounds,
        )
        self._logger = logger or get_logger(__name__)

    def hash(self, plaintext: str) -> str:
        """Hash a password for storage.

        Raises:
            PasswordHashingError: If no digest could be produced.
        """
        try:
            return self._context.hash(plaintext)
        except (ValueError, TypeError) as exc:
            # Never include the plaintext here.
            self._logger.error("Password hashing failed", extra={"error_type": type(exc).__name__})
            raise PasswordHashingError() from exc

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a password against a stored digest.

        Returns False for a mismatch and for digests passlib cannot parse.
        """
        try:
            return self._context.verify(plaintext, digest)
        except (ValueError, TypeError):
            self._logger.warning("Stored password digest is malformed")
            return False

    def dummy_verify(self) -> None:
        """Spend the time of one verification without a real digest."""
        self._context.dummy_verify()
