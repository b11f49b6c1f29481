"""
Campaign repository for database operations.

Every query that reads or changes a single campaign is scoped by owner.
"""

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_api.campaigns.models import Campaign, CampaignStatus


class CampaignRepositoryProtocol(Protocol):
    """Protocol for campaign repository operations."""

    async def create_campaign(
        self,
        owner_id: UUID,
        title: str,
        description: str | None,
        status: CampaignStatus,
        start_date: datetime | None,
        end_date: datetime | None,
        budget: float,
    ) -> Campaign: ...
    async def list_campaigns(self, owner_id: UUID, limit: int, offset: int) -> list[Campaign]: ...
    async def get_campaign(self, campaign_id: UUID, owner_id: UUID) -> Campaign | None: ...
    async def update_campaign(
        self,
        campaign_id: UUID,
        owner_id: UUID,
        changes: dict[str, Any],
    ) -> Campaign | None: ...
    async def delete_campaign(self, campaign_id: UUID, owner_id: UUID) -> bool: ...


class CampaignRepository:
    """Repository for campaign database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self._session = session

    async def create_campaign(
        self,
        owner_id: UUID,
        title: str,
        description: str | None,
        status: CampaignStatus,
        start_date: datetime | None,
        end_date: datetime | None,
        budget: float,
    ) -> Campaign:
        """Insert a new campaign."""
        campaign = Campaign(
            user_id=owner_id,
            title=title,
            description=description,
            status=status,
            start_date=start_date,
            end_date=end_date,
            budget=budget,
        )
        self._session.add(campaign)
        await self._session.flush()
        await self._session.refresh(campaign)
        return campaign

    async def list_campaigns(self, owner_id: UUID, limit: int, offset: int) -> list[Campaign]:
        """List an owner's campaigns, newest first."""
        result = await self._session.execute(
            select(Campaign)
            .where(Campaign.user_id == owner_id)
            .order_by(Campaign.created_at.desc(), Campaign.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def get_campaign(self, campaign_id: UUID, owner_id: UUID) -> Campaign | None:
        """Get a campaign by ID if it belongs to the owner."""
        result = await self._session.execute(
            select(Campaign).where(
                Campaign.id == campaign_id,
                Campaign.user_id == owner_id,
            )
        )
        return result.scalar_one_or_none()

    async def update_campaign(
        self,
        campaign_id: UUID,
        owner_id: UUID,
        changes: dict[str, Any],
    ) -> Campaign | None:
        """Apply column changes to an owned campaign.

        Returns:
            The updated campaign, or None if it is missing or not owned.
        """
        campaign = await self.get_campaign(campaign_id, owner_id)
        if campaign is None:
            return None

        for column, value in changes.items():
            setattr(campaign, column, value)

        await self._session.flush()
        await self._session.refresh(campaign)
        return campaign

    async def delete_campaign(self, campaign_id: UUID, owner_id: UUID) -> bool:
        """Delete an owned campaign.

        Returns:
            True if a row was deleted.
        """
        result = await self._session.execute(
            delete(Campaign).where(
                Campaign.id == campaign_id,
                Campaign.user_id == owner_id,
            )
        )
        return result.rowcount > 0
