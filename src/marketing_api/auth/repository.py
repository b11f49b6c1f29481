"""
User repository for database operations.
"""

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_api.auth.models import User, UserRole
from marketing_api.shared.database import UniqueViolationError, is_unique_violation


class UserRepositoryProtocol(Protocol):
    """Protocol for user repository operations."""

    async def create_user(
        self,
        full_name: str,
        email: str,
        password_hash: str,
        role: UserRole,
    ) -> User: ...
    async def get_by_email(self, email: str) -> User | None: ...


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    async def create_user(
        self,
        full_name: str,
        email: str,
        password_hash: str,
        role: UserRole,
    ) -> User:
        """Insert a new user.

        Returns:
            Created user with generated ID.

        Raises:
            UniqueViolationError: If the email is already registered.
        """
        user = User(
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            role=role,
        )
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            if is_unique_violation(e):
                raise UniqueViolationError("users.email") from e
            raise
        await self._session.refresh(user)
        return user

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email.

        Returns:
            User if found, None otherwise.
        """
        result = await self._session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()
