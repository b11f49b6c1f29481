"""
Campaign API router.

Every route requires a bearer token; deleting additionally requires the
admin role.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_api.auth.middleware import AuthPayload, authenticate
from marketing_api.auth.rbac import require_admin, require_member
from marketing_api.campaigns.commands import CampaignPatch
from marketing_api.campaigns.repository import CampaignRepository
from marketing_api.campaigns.schemas import (
    CampaignCreate,
    CampaignResponse,
    CampaignUpdate,
)
from marketing_api.campaigns.service import CampaignService
from marketing_api.shared.database import get_db_session
from marketing_api.shared.schemas import APIResponse

router = APIRouter(
    prefix="/api/v1/campaigns",
    tags=["campaigns"],
    dependencies=[Depends(authenticate)],
    responses={
        401: {"model": APIResponse, "description": "Not authenticated"},
        403: {"model": APIResponse, "description": "Insufficient permissions"},
    },
)


def get_campaign_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> CampaignService:
    """Dependency for campaign service."""
    return CampaignService(CampaignRepository(session))


CampaignServiceDep = Annotated[CampaignService, Depends(get_campaign_service)]
Member = Annotated[AuthPayload, Depends(require_member)]
Admin = Annotated[AuthPayload, Depends(require_admin)]


@router.post(
    "",
    response_model=APIResponse[CampaignResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": APIResponse, "description": "Validation error"}},
)
async def create_campaign(
    data: CampaignCreate,
    current_user: Member,
    service: CampaignServiceDep,
) -> APIResponse[CampaignResponse]:
    """Create a new campaign in draft status."""
    campaign = await service.create_campaign(owner_id=current_user.user_id, data=data)
    return APIResponse(
        message="Campaign created successfully",
        data=CampaignResponse.model_validate(campaign),
    )


@router.get(
    "",
    response_model=APIResponse[list[CampaignResponse]],
    response_model_exclude_none=True,
)
async def list_campaigns(
    current_user: Member,
    service: CampaignServiceDep,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 10,
) -> APIResponse[list[CampaignResponse]]:
    """List the caller's campaigns, newest first."""
    campaigns = await service.list_campaigns(
        owner_id=current_user.user_id,
        page=page,
        limit=limit,
    )
    return APIResponse(
        message="Campaigns retrieved successfully",
        data=[CampaignResponse.model_validate(c) for c in campaigns],
    )


@router.get(
    "/{campaign_id}",
    response_model=APIResponse[CampaignResponse],
    response_model_exclude_none=True,
    responses={404: {"model": APIResponse, "description": "Campaign not found"}},
)
async def get_campaign(
    campaign_id: UUID,
    current_user: Member,
    service: CampaignServiceDep,
) -> APIResponse[CampaignResponse]:
    """Get one of the caller's campaigns."""
    campaign = await service.get_campaign(owner_id=current_user.user_id, campaign_id=campaign_id)
    return APIResponse(
        message="Campaign retrieved successfully",
        data=CampaignResponse.model_validate(campaign),
    )


@router.put(
    "/{campaign_id}",
    response_model=APIResponse[CampaignResponse],
    response_model_exclude_none=True,
    responses={
        400: {"model": APIResponse, "description": "Validation error"},
        404: {"model": APIResponse, "description": "Campaign not found"},
    },
)
async def update_campaign(
    campaign_id: UUID,
    data: CampaignUpdate,
    current_user: Member,
    service: CampaignServiceDep,
) -> APIResponse[CampaignResponse]:
    """Update the supplied fields of one of the caller's campaigns."""
    campaign = await service.update_campaign(
        owner_id=current_user.user_id,
        campaign_id=campaign_id,
        patch=CampaignPatch.from_update(data),
    )
    return APIResponse(
        message="Campaign updated successfully",
        data=CampaignResponse.model_validate(campaign),
    )


@router.delete(
    "/{campaign_id}",
    response_model=APIResponse[None],
    response_model_exclude_none=True,
    responses={404: {"model": APIResponse, "description": "Campaign not found"}},
)
async def delete_campaign(
    campaign_id: UUID,
    current_user: Admin,
    service: CampaignServiceDep,
) -> APIResponse[None]:
    """Delete one of the caller's campaigns. Admin only."""
    await service.delete_campaign(owner_id=current_user.user_id, campaign_id=campaign_id)
    return APIResponse(message="Campaign deleted successfully")
