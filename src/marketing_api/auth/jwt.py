"""JWT access token issuance and verification."""

import logging
from datetime import datetime, timedelta, timezone
from typing import NoReturn, Protocol
from uuid import UUID

import jwt
from pydantic import ValidationError as PydanticValidationError

from marketing_api.auth.schemas import TokenClaims
from marketing_api.config import Settings
from marketing_api.shared.exceptions import InvalidTokenError
from marketing_api.shared.logging import get_logger


class TokenServiceProtocol(Protocol):
    """Protocol for token operations."""

    def issue(
        self,
        subject_id: UUID | str,
        email: str,
        role: str,
        ttl: timedelta | None = None,
    ) -> str: ...

    def verify(self, token: str) -> TokenClaims: ...

    def expires_in_seconds(self) -> int: ...


class TokenService:
    """Signs and verifies time-limited HMAC access tokens."""

    def __init__(self, settings: Settings, logger: logging.Logger | None = None) -> None:
        self._secret_key = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._default_ttl = timedelta(minutes=settings.token_duration_minutes)
        self._logger = logger or get_logger(__name__)

    def issue(
        self,
        subject_id: UUID | str,
        email: str,
        role: str,
        ttl: timedelta | None = None,
    ) -> str:
        """Create a signed access token.

        Args:
            subject_id: User ID placed in ``sub``.
            email: User email.
            role: User role.
            ttl: Token lifetime; defaults to the configured duration.

        Returns:
            Encoded JWT.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "email": email,
            "role": str(getattr(role, "value", role)),
            "iat": now,
            "exp": now + (ttl if ttl is not None else self._default_ttl),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify a token and return its claims.

        Every failure raises the same ``InvalidTokenError``; the reason is
        only logged.

        Raises:
            InvalidTokenError: If the token is expired, tampered with, signed
                with another algorithm, or malformed.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
            return TokenClaims.model_validate(payload)
        except jwt.ExpiredSignatureError as e:
            self._reject("expired", e)
        except jwt.InvalidSignatureError as e:
            self._reject("bad_signature", e)
        except jwt.InvalidAlgorithmError as e:
            self._reject("algorithm", e)
        except (jwt.InvalidTokenError, PydanticValidationError) as e:
            self._reject("malformed", e)

    def _reject(self, reason: str, error: Exception) -> NoReturn:
        self._logger.warning(
            "Token rejected",
            extra={"reason": reason, "error": str(error)},
        )
        raise InvalidTokenError() from error

    def expires_in_seconds(self) -> int:
        """Default token lifetime in seconds."""
        return int(self._default_ttl.total_seconds())
