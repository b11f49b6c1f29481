"""
Account service: registration, login and profile lookup.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from marketing_api.auth.jwt import TokenServiceProtocol
from marketing_api.auth.models import User, UserRole
from marketing_api.auth.passwords import PasswordHasher
from marketing_api.auth.repository import UserRepositoryProtocol
from marketing_api.auth.schemas import LoginResponse, UserResponse
from marketing_api.shared.database import UniqueViolationError
from marketing_api.shared.exceptions import (
    InternalError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from marketing_api.shared.logging import get_logger


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountService:
    """Service for account operations."""

    def __init__(
        self,
        user_repository: UserRepositoryProtocol,
        password_hasher: PasswordHasher,
        token_service: TokenServiceProtocol,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize account service.

        Args:
            user_repository: User persistence.
            password_hasher: Password hashing.
            token_service: Access token issuance.
            logger: Logger; defaults to this module's logger.
        """
        self._users = user_repository
        self._hasher = password_hasher
        self._tokens = token_service
        self._logger = logger or get_logger(__name__)

    async def register(self, full_name: str, email: str, password: str) -> User:
        """Create a new account with the default role.

        Raises:
            UserAlreadyExistsError: If the email is taken.
            InternalError: On hashing or persistence failure.
        """
        email = normalize_email(email)
        password_hash = self._hasher.hash(password)

        try:
            user = await self._users.create_user(
                full_name=full_name,
                email=email,
                password_hash=password_hash,
                role=UserRole.USER,
            )
        except UniqueViolationError as e:
            self._logger.warning("Register failed: email duplicate", extra={"email": email})
            raise UserAlreadyExistsError() from e
        except SQLAlchemyError as e:
            self._logger.exception("Register failed: persistence error")
            raise InternalError() from e

        self._logger.info(
            "User registered",
            extra={"user_id": str(user.id), "email": user.email},
        )
        return user

    async def login(self, email: str, password: str) -> LoginResponse:
        """Check credentials and issue an access token.

        Unknown email and wrong password raise the same error.

        Raises:
            InvalidCredentialsError: If the credentials do not match an account.
            InternalError: On persistence failure.
        """
        email = normalize_email(email)
        try:
            user = await self._users.get_by_email(email)
        except SQLAlchemyError as e:
            self._logger.exception("Login failed: persistence error")
            raise InternalError() from e

        if user is None:
            self._hasher.dummy_verify()
            self._logger.warning(
                "Login failed: invalid credentials",
                extra={"email": email, "reason": "unknown_email"},
            )
            raise InvalidCredentialsError()

        if not self._hasher.verify(password, user.password_hash):
            self._logger.warning(
                "Login failed: invalid credentials",
                extra={"email": email, "reason": "password_mismatch"},
            )
            raise InvalidCredentialsError()

        access_token = self._tokens.issue(
            subject_id=user.id,
            email=user.email,
            role=user.role.value,
        )

        self._logger.info(
            "User logged in",
            extra={"user_id": str(user.id), "email": user.email},
        )

        return LoginResponse(
            access_token=access_token,
            expires_in=self._tokens.expires_in_seconds(),
            user=UserResponse.model_validate(user),
        )

    async def get_by_email(self, email: str) -> User:
        """Get a user by email.

        Raises:
            UserNotFoundError: If no account has this email.
            InternalError: On persistence failure.
        """
        try:
            user = await self._users.get_by_email(normalize_email(email))
        except SQLAlchemyError as e:
            self._logger.exception("User lookup failed: persistence error")
            raise InternalError() from e

        if user is None:
            raise UserNotFoundError()
        return user
