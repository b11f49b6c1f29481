"""
Custom exception classes for the application.

Each exception carries the HTTP status the boundary layer maps it to.
Services raise these; routers and the application-level handlers in
``marketing_api.main`` turn them into response envelopes.
"""

from typing import Any
from uuid import UUID


class AppException(Exception):
    """Base exception for application errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            details: Additional error details. Only exposed for 4xx errors.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ValidationError(AppException):
    """Raised when business validation fails (distinct from pydantic ValidationError)."""

    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationError(AppException):
    """Raised when the caller's identity is unknown or cannot be established."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTH_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class InvalidTokenError(AuthenticationError):
    """Raised for any token rejection: bad signature, expiry, algorithm or format."""

    def __init__(self, message: str = "Access token is invalid or expired") -> None:
        super().__init__(message, "INVALID_TOKEN")


class AuthPayloadError(AuthenticationError):
    """Raised when the request carries no usable identity payload.

    ``reason`` says what was wrong with it and is meant for logs only.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__("Unauthorized", "UNAUTHORIZED")


class InvalidCredentialsError(AuthenticationError):
    """Raised on login with an unknown email or a wrong password."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password", "INVALID_CREDENTIALS")


class AuthorizationError(AppException):
    """Raised when a known identity lacks the privilege for an operation."""

    status_code = 403

    def __init__(
        self,
        message: str = "Forbidden",
        code: str = "FORBIDDEN",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class InsufficientRoleError(AuthorizationError):
    """Raised by the role gate when the caller's role is not allowed."""

    def __init__(self) -> None:
        super().__init__(
            "Forbidden: You don't have permission to access this resource",
            "INSUFFICIENT_PERMISSIONS",
        )


class ConflictError(AppException):
    """Raised when a uniqueness rule is violated."""

    status_code = 409

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class UserAlreadyExistsError(ConflictError):
    """Raised on registration with an email that is already taken."""

    def __init__(self) -> None:
        super().__init__("Email already exists", "EMAIL_EXISTS")


class NotFoundError(AppException):
    """Raised when a resource does not exist or is not visible to the caller."""

    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        code: str = "NOT_FOUND",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message, "USER_NOT_FOUND")


class CampaignNotFoundError(NotFoundError):
    """Raised when a campaign is missing or owned by someone else."""

    def __init__(self, campaign_id: UUID) -> None:
        self.campaign_id = campaign_id
        super().__init__("Campaign not found", "CAMPAIGN_NOT_FOUND")


class InternalError(AppException):
    """Raised for unexpected failures. The message is never sent to clients."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message, "INTERNAL_ERROR")


class PasswordHashingError(InternalError):
    """Raised when a password digest cannot be produced."""

    def __init__(self) -> None:
        super().__init__("Failed to hash password")
