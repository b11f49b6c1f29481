"""
Account API router: registration, login and current profile.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_api.auth.middleware import CurrentUser, authenticate
from marketing_api.auth.repository import UserRepository
from marketing_api.auth.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserResponse,
)
from marketing_api.auth.service import AccountService
from marketing_api.shared.database import get_db_session
from marketing_api.shared.schemas import APIResponse

router = APIRouter(prefix="/api/v1", tags=["auth"])


def get_account_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AccountService:
    """Dependency for account service."""
    state = request.app.state
    return AccountService(
        user_repository=UserRepository(session),
        password_hasher=state.password_hasher,
        token_service=state.token_service,
    )


AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


@router.post(
    "/register",
    response_model=APIResponse[UserResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": APIResponse, "description": "Validation error"},
        409: {"model": APIResponse, "description": "Email already exists"},
    },
)
async def register(data: RegisterRequest, service: AccountServiceDep) -> APIResponse[UserResponse]:
    """Register a new user account with the standard role."""
    user = await service.register(
        full_name=data.full_name,
        email=data.email,
        password=data.password,
    )
    return APIResponse(
        message="User registered successfully",
        data=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=APIResponse[LoginResponse],
    response_model_exclude_none=True,
    responses={
        400: {"model": APIResponse, "description": "Validation error"},
        401: {"model": APIResponse, "description": "Invalid email or password"},
    },
)
async def login(data: LoginRequest, service: AccountServiceDep) -> APIResponse[LoginResponse]:
    """Log in with email and password and receive an access token."""
    result = await service.login(email=data.email, password=data.password)
    return APIResponse(message="Login successful", data=result)


@router.get(
    "/me",
    response_model=APIResponse[UserResponse],
    response_model_exclude_none=True,
    dependencies=[Depends(authenticate)],
    responses={
        401: {"model": APIResponse, "description": "Not authenticated"},
        404: {"model": APIResponse, "description": "User not found"},
    },
)
async def get_me(current_user: CurrentUser, service: AccountServiceDep) -> APIResponse[UserResponse]:
    """Return the profile of the authenticated user."""
    user = await service.get_by_email(current_user.email)
    return APIResponse(
        message="User profile retrieved",
        data=UserResponse.model_validate(user),
    )
