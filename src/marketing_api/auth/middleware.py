"""
Authentication gate for bearer tokens.

This module exposes:
- AuthPayload: the typed identity handlers work with
- RequestContext: request-scoped holder for the verified claims
- authenticate: FastAPI dependency that verifies the bearer token
- get_auth_payload: typed accessor for the identity of the current request
- CurrentUser: dependency alias resolving to the caller's AuthPayload
"""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request

from marketing_api.auth.jwt import TokenService
from marketing_api.auth.models import UserRole
from marketing_api.auth.schemas import TokenClaims
from marketing_api.shared.exceptions import AuthPayloadError, InvalidTokenError
from marketing_api.shared.logging import get_logger

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "authorization"
BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class AuthPayload:
    """Identity of the authenticated caller."""

    user_id: UUID
    email: str
    role: UserRole


@dataclass
class RequestContext:
    """Per-request state populated by the auth gate."""

    identity: TokenClaims | None = None


def get_token_service(request: Request) -> TokenService:
    """Dependency returning the application's token service."""
    return request.app.state.token_service


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _reject(request: Request, reason: str) -> InvalidTokenError:
    logger.warning(
        "Auth failed",
        extra={
            "reason": reason,
            "endpoint": request.url.path,
            "method": request.method,
            "client_ip": _client_ip(request),
        },
    )
    return InvalidTokenError()


async def authenticate(
    request: Request,
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> RequestContext:
    """Verify the bearer token and attach its claims to the request.

    Raises:
        InvalidTokenError: Header absent, malformed or not a bearer token,
            or the token failed verification.
    """
    header = request.headers.get(AUTHORIZATION_HEADER)
    if not header:
        raise _reject(request, "no_header")

    fields = header.split()
    if len(fields) != 2:
        raise _reject(request, "invalid_format")

    scheme, token = fields
    if scheme.lower() != BEARER_SCHEME:
        raise _reject(request, "unsupported_scheme")

    try:
        claims = token_service.verify(token)
    except InvalidTokenError:
        logger.warning(
            "Auth failed",
            extra={
                "reason": "invalid_token",
                "endpoint": request.url.path,
                "method": request.method,
                "client_ip": _client_ip(request),
            },
        )
        raise

    context = RequestContext(identity=claims)
    request.state.context = context
    return context


def get_request_context(request: Request) -> RequestContext | None:
    """Return the request context if the auth gate has run."""
    context = getattr(request.state, "context", None)
    return context if isinstance(context, RequestContext) else None


def get_auth_payload(request: Request) -> AuthPayload:
    """Read the caller's identity from the request context.

    Never raises anything but ``AuthPayloadError``, whatever the claims hold.

    Raises:
        AuthPayloadError: No identity, wrong type, or missing/malformed
            subject, email or role.
    """
    context = get_request_context(request)
    if context is None or context.identity is None:
        raise AuthPayloadError("authorization payload is missing")

    claims = context.identity
    if not isinstance(claims, TokenClaims):
        raise AuthPayloadError("invalid authorization payload type")

    if not claims.email:
        raise AuthPayloadError("email claim is missing")
    if not claims.role:
        raise AuthPayloadError("role claim is missing")
    if not claims.sub:
        raise AuthPayloadError("subject claim is missing")

    try:
        user_id = UUID(claims.sub)
    except ValueError:
        raise AuthPayloadError("invalid subject format")

    try:
        role = UserRole(claims.role)
    except ValueError:
        raise AuthPayloadError("unknown role")

    return AuthPayload(user_id=user_id, email=claims.email, role=role)


async def get_current_user(request: Request) -> AuthPayload:
    """Dependency resolving the caller's identity, logging lookup failures."""
    try:
        return get_auth_payload(request)
    except AuthPayloadError as e:
        logger.warning(
            "Auth payload lookup failed",
            extra={"reason": e.reason, "endpoint": request.url.path},
        )
        raise


CurrentUser = Annotated[AuthPayload, Depends(get_current_user)]
