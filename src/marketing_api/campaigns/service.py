"""
Campaign service for business logic.

All operations are scoped to the owning user. Role checks happen at the
HTTP boundary, not here.
"""

import logging
import math
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from marketing_api.campaigns.commands import UNSET, CampaignPatch
from marketing_api.campaigns.models import Campaign, CampaignStatus, as_utc
from marketing_api.campaigns.repository import CampaignRepositoryProtocol
from marketing_api.campaigns.schemas import CampaignCreate
from marketing_api.shared.exceptions import (
    CampaignNotFoundError,
    InternalError,
    ValidationError,
)
from marketing_api.shared.logging import get_logger

# Columns a patch may leave out but never set to null
_REQUIRED_FIELDS = ("title", "status", "budget")


def _check_schedule(start_date: datetime | None, end_date: datetime | None) -> None:
    start_date, end_date = as_utc(start_date), as_utc(end_date)
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValidationError(
            "end_date must not be before start_date",
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )


def _check_budget(budget: float) -> None:
    if not math.isfinite(budget) or budget < 0:
        raise ValidationError("budget must be a non-negative number", details={"budget": budget})


class CampaignService:
    """Service for campaign operations."""

    def __init__(
        self,
        repository: CampaignRepositoryProtocol,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize service with repository."""
        self._repository = repository
        self._logger = logger or get_logger(__name__)

    async def create_campaign(self, owner_id: UUID, data: CampaignCreate) -> Campaign:
        """Create a new campaign in draft status.

        Raises:
            ValidationError: If the schedule is inverted or the budget negative.
            InternalError: On persistence failure.
        """
        _check_schedule(data.start_date, data.end_date)
        _check_budget(data.budget)

        try:
            campaign = await self._repository.create_campaign(
                owner_id=owner_id,
                title=data.title,
                description=data.description,
                status=CampaignStatus.DRAFT,
                start_date=data.start_date,
                end_date=data.end_date,
                budget=data.budget,
            )
        except SQLAlchemyError as e:
            self._logger.exception(
                "Campaign create failed: persistence error",
                extra={"user_id": str(owner_id)},
            )
            raise InternalError() from e

        self._logger.info(
            "Campaign created",
            extra={"campaign_id": str(campaign.id), "user_id": str(owner_id)},
        )
        return campaign

    async def list_campaigns(self, owner_id: UUID, page: int, limit: int) -> list[Campaign]:
        """List one page of the owner's campaigns, newest first.

        Pages are 1-indexed; a page past the end is empty.

        Raises:
            ValidationError: If ``page`` or ``limit`` is below 1.
        """
        if page < 1 or limit < 1:
            raise ValidationError(
                "page and limit must be positive",
                details={"page": page, "limit": limit},
            )

        try:
            return await self._repository.list_campaigns(
                owner_id=owner_id,
                limit=limit,
                offset=(page - 1) * limit,
            )
        except SQLAlchemyError as e:
            self._logger.exception(
                "Campaign list failed: persistence error",
                extra={"user_id": str(owner_id)},
            )
            raise InternalError() from e

    async def get_campaign(self, owner_id: UUID, campaign_id: UUID) -> Campaign:
        """Get an owned campaign.

        Raises:
            CampaignNotFoundError: If it does not exist or is not owned.
        """
        try:
            campaign = await self._repository.get_campaign(campaign_id, owner_id)
        except SQLAlchemyError as e:
            self._logger.exception(
                "Campaign lookup failed: persistence error",
                extra={"campaign_id": str(campaign_id)},
            )
            raise InternalError() from e

        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        return campaign

    async def update_campaign(
        self,
        owner_id: UUID,
        campaign_id: UUID,
        patch: CampaignPatch,
    ) -> Campaign:
        """Apply a partial update to an owned campaign.

        Only fields set on ``patch`` change. The resulting schedule must
        still have ``end_date >= start_date``.

        Raises:
            CampaignNotFoundError: If it does not exist or is not owned.
            ValidationError: If the merged values are invalid.
        """
        current = await self.get_campaign(owner_id, campaign_id)

        for field in _REQUIRED_FIELDS:
            if getattr(patch, field) is None:
                raise ValidationError(f"{field} cannot be null", details={"field": field})

        start_date = current.start_date if patch.start_date is UNSET else patch.start_date
        end_date = current.end_date if patch.end_date is UNSET else patch.end_date
        _check_schedule(start_date, end_date)
        if patch.budget is not UNSET:
            _check_budget(patch.budget)

        if patch.is_empty():
            return current

        changes = patch.changes()

        try:
            campaign = await self._repository.update_campaign(campaign_id, owner_id, changes)
        except SQLAlchemyError as e:
            self._logger.exception(
                "Campaign update failed: persistence error",
                extra={"campaign_id": str(campaign_id)},
            )
            raise InternalError() from e

        if campaign is None:
            raise CampaignNotFoundError(campaign_id)

        self._logger.info(
            "Campaign updated",
            extra={
                "campaign_id": str(campaign_id),
                "user_id": str(owner_id),
                "fields": sorted(changes),
            },
        )
        return campaign

    async def delete_campaign(self, owner_id: UUID, campaign_id: UUID) -> None:
        """Delete an owned campaign.

        Raises:
            CampaignNotFoundError: If no owned row was deleted.
        """
        try:
            deleted = await self._repository.delete_campaign(campaign_id, owner_id)
        except SQLAlchemyError as e:
            self._logger.exception(
                "Campaign delete failed: persistence error",
                extra={"campaign_id": str(campaign_id)},
            )
            raise InternalError() from e

        if not deleted:
            raise CampaignNotFoundError(campaign_id)

        self._logger.info(
            "Campaign deleted",
            extra={"campaign_id": str(campaign_id), "user_id": str(owner_id)},
        )
