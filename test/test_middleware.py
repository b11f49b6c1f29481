"""
Tests for the bearer-token gate and the auth payload accessor.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient
from starlette.requests import Request

from marketing_api.auth.jwt import TokenService
from marketing_api.auth.middleware import (
    AuthPayload,
    RequestContext,
    authenticate,
    get_auth_payload,
    get_request_context,
)
from marketing_api.auth.models import User, UserRole
from marketing_api.auth.schemas import TokenClaims
from marketing_api.shared.exceptions import AuthPayloadError, InvalidTokenError

GATE_MESSAGE = "Access token is invalid or expired"


def make_request(path: str = "/api/v1/campaigns", method: str = "GET") -> Request:
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [],
        }
    )


def make_claims(**overrides: Any) -> TokenClaims:
    now = datetime.now(timezone.utc)
    values: dict[str, Any] = {
        "sub": str(uuid4()),
        "email": "member@example.com",
        "role": "user",
        "iat": now,
        "exp": now + timedelta(minutes=5),
    }
    values.update(overrides)
    return TokenClaims(**values)


def with_identity(identity: Any) -> Request:
    request = make_request()
    request.state.context = RequestContext(identity=identity)
    return request


class TestAuthGate:
    """Tests for the authenticate dependency over HTTP."""

    @pytest.mark.asyncio
    async def test_missing_header(self, async_client: AsyncClient) -> None:
        """Test that a request without Authorization is rejected."""
        response = await async_client.get("/api/v1/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"message": "", "error": GATE_MESSAGE}
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, "Bearer", "Basic dXNlcjpwYXNz"])
    async def test_header_rejections_raise_invalid_token(
        self,
        token_service: TokenService,
        header: str | None,
    ) -> None:
        """Test that header problems and token problems raise the same error."""
        request = make_request()
        if header is not None:
            request = Request({**request.scope, "headers": [(b"authorization", header.encode())]})

        with pytest.raises(InvalidTokenError) as exc_info:
            await authenticate(request, token_service)

        assert exc_info.value.code == "INVALID_TOKEN"
        assert exc_info.value.message == GATE_MESSAGE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "header",
        [
            "Bearer",
            "Bearer one two",
            "Basic dXNlcjpwYXNz",
            "Token abc.def.ghi",
            "Bearer not-a-token",
        ],
    )
    async def test_rejected_headers_share_one_message(
        self,
        async_client: AsyncClient,
        header: str,
    ) -> None:
        """Test that every gate rejection looks the same to the client."""
        response = await async_client.get("/api/v1/me", headers={"Authorization": header})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == GATE_MESSAGE

    @pytest.mark.asyncio
    async def test_expired_token(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        test_user: User,
    ) -> None:
        token = token_service.issue(
            subject_id=test_user.id,
            email=test_user.email,
            role=test_user.role.value,
            ttl=timedelta(seconds=-1),
        )

        response = await async_client.get(
            "/api/v1/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == GATE_MESSAGE

    @pytest.mark.asyncio
    async def test_valid_token(
        self,
        async_client: AsyncClient,
        test_user: User,
        user_headers: dict[str, str],
    ) -> None:
        """Test that a valid token reaches the handler."""
        email = test_user.email

        response = await async_client.get("/api/v1/me", headers=user_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["email"] == email
        assert response.json()["data"]["role"] == "user"

    @pytest.mark.asyncio
    async def test_scheme_is_case_insensitive(
        self,
        async_client: AsyncClient,
        user_token: str,
    ) -> None:
        response = await async_client.get(
            "/api/v1/me", headers={"Authorization": f"bEaReR {user_token}"}
        )

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_unknown_role_claim(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
    ) -> None:
        """Test that a signed token with an unknown role has no usable payload."""
        token = token_service.issue(subject_id=uuid4(), email="x@example.com", role="superuser")

        response = await async_client.get(
            "/api/v1/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_me_for_deleted_account(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
    ) -> None:
        """Test that a valid token for an unknown account gives 404."""
        token = token_service.issue(subject_id=uuid4(), email="ghost@example.com", role="user")

        response = await async_client.get(
            "/api/v1/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "User not found"


class TestGetAuthPayload:
    """Tests for the typed payload accessor."""

    def test_valid_claims(self) -> None:
        claims = make_claims(role="admin")

        payload = get_auth_payload(with_identity(claims))

        assert payload == AuthPayload(
            user_id=payload.user_id,
            email="member@example.com",
            role=UserRole.ADMIN,
        )
        assert str(payload.user_id) == claims.sub

    def test_no_context(self) -> None:
        request = make_request()

        assert get_request_context(request) is None
        with pytest.raises(AuthPayloadError) as exc_info:
            get_auth_payload(request)

        assert exc_info.value.reason == "authorization payload is missing"

    def test_empty_context(self) -> None:
        with pytest.raises(AuthPayloadError):
            get_auth_payload(with_identity(None))

    def test_wrong_context_type(self) -> None:
        request = make_request()
        request.state.context = {"identity": make_claims()}

        with pytest.raises(AuthPayloadError):
            get_auth_payload(request)

    def test_wrong_identity_type(self) -> None:
        """Test that a non-claims identity is rejected."""
        with pytest.raises(AuthPayloadError) as exc_info:
            get_auth_payload(with_identity({"sub": str(uuid4()), "role": "user"}))

        assert exc_info.value.reason == "invalid authorization payload type"

    @pytest.mark.parametrize(
        ("overrides", "reason"),
        [
            ({"email": None}, "email claim is missing"),
            ({"email": ""}, "email claim is missing"),
            ({"role": None}, "role claim is missing"),
            ({"sub": None}, "subject claim is missing"),
            ({"sub": "not-a-uuid"}, "invalid subject format"),
            ({"role": "owner"}, "unknown role"),
            ({"role": "ADMIN"}, "unknown role"),
        ],
    )
    def test_malformed_claims(self, overrides: dict[str, Any], reason: str) -> None:
        """Test that bad claim values raise only AuthPayloadError."""
        with pytest.raises(AuthPayloadError) as exc_info:
            get_auth_payload(with_identity(make_claims(**overrides)))

        assert exc_info.value.reason == reason
        assert exc_info.value.status_code == 401
