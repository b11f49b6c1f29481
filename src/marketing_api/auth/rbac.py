"""
Role-based access control gate.
"""

import logging

from fastapi import Request

from marketing_api.auth.middleware import AuthPayload, get_auth_payload
from marketing_api.auth.models import UserRole
from marketing_api.shared.exceptions import AuthPayloadError, InsufficientRoleError
from marketing_api.shared.logging import get_logger


class RoleGate:
    """Dependency permitting a request only for an exact allow-listed role.

    Several gates can guard one route; each checks independently.
    """

    def __init__(self, *allowed_roles: UserRole, logger: logging.Logger | None = None) -> None:
        """Initialize role gate.

        Args:
            allowed_roles: Roles permitted through this gate.
            logger: Logger; defaults to this module's logger.
        """
        if not allowed_roles:
            raise ValueError("RoleGate needs at least one allowed role")
        self.allowed_roles = frozenset(allowed_roles)
        self._logger = logger or get_logger(__name__)

    async def __call__(self, request: Request) -> AuthPayload:
        """Check the caller's role.

        Raises:
            AuthPayloadError: No usable identity on the request (401).
            InsufficientRoleError: Role not in the allow-list (403).
        """
        try:
            payload = get_auth_payload(request)
        except AuthPayloadError as e:
            self._logger.warning(
                "Role check without identity",
                extra={"reason": e.reason, "endpoint": request.url.path},
            )
            raise

        if payload.role not in self.allowed_roles:
            self._logger.warning(
                "Access denied",
                extra={
                    "user_id": str(payload.user_id),
                    "user_role": payload.role.value,
                    "allowed_roles": sorted(r.value for r in self.allowed_roles),
                    "endpoint": request.url.path,
                    "method": request.method,
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )
            raise InsufficientRoleError()

        self._logger.debug(
            "Access granted",
            extra={
                "user_id": str(payload.user_id),
                "endpoint": request.url.path,
                "method": request.method,
            },
        )
        return payload


# Pre-configured gates
require_member = RoleGate(UserRole.USER, UserRole.ADMIN)
require_admin = RoleGate(UserRole.ADMIN)
