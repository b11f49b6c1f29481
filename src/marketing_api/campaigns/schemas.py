"""
Pydantic schemas for campaign API.

Defines request/response models for campaign CRUD operations.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from marketing_api.campaigns.models import CampaignStatus, as_utc

UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]

# Fields that may be sent as null on update to clear them
NULLABLE_UPDATE_FIELDS = frozenset({"description", "start_date", "end_date"})


class CampaignCreate(BaseModel):
    """Schema for creating a new campaign."""

    title: str = Field(..., min_length=1, max_length=255, description="Campaign title")
    description: str | None = Field(None, max_length=5000, description="Campaign description")
    start_date: UtcDatetime = Field(..., description="Campaign start")
    end_date: UtcDatetime = Field(..., description="Campaign end, not before start")
    budget: float = Field(..., ge=0, allow_inf_nan=False, description="Campaign budget")

    @model_validator(mode="after")
    def validate_schedule(self) -> "CampaignCreate":
        """Validate that the campaign does not end before it starts."""
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CampaignUpdate(BaseModel):
    """Schema for updating an existing campaign. Every field is optional."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    status: CampaignStatus | None = None
    start_date: UtcDatetime | None = None
    end_date: UtcDatetime | None = None
    budget: float | None = Field(None, ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def validate_update(self) -> "CampaignUpdate":
        """Reject explicit nulls for required columns and inverted schedules."""
        for field in self.model_fields_set - NULLABLE_UPDATE_FIELDS:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date < self.start_date
        ):
            raise ValueError("end_date must not be before start_date")
        return self


class CampaignResponse(BaseModel):
    """Schema for campaign API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Campaign ID")
    user_id: UUID = Field(..., description="Owner user ID")
    title: str = Field(..., description="Campaign title")
    description: str | None = Field(None, description="Campaign description")
    status: CampaignStatus = Field(..., description="Campaign status")
    start_date: datetime | None = Field(None, description="Campaign start")
    end_date: datetime | None = Field(None, description="Campaign end")
    budget: float = Field(..., description="Campaign budget")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
