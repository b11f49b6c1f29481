"""
Partial-update command for campaigns.

``CampaignPatch`` separates "field not supplied" (``UNSET``) from "field
supplied" (any value, including ``None`` for clearable fields).
"""

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar, Union

from marketing_api.campaigns.models import CampaignStatus
from marketing_api.campaigns.schemas import CampaignUpdate


class Unset(Enum):
    """Marker type for a field the caller did not supply."""

    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = Unset.UNSET

T = TypeVar("T")
Maybe = Union[T, Unset]


@dataclass(frozen=True)
class CampaignPatch:
    """Fields to change on a campaign; ``UNSET`` fields are left alone."""

    title: Maybe[str] = UNSET
    description: Maybe[str | None] = UNSET
    status: Maybe[CampaignStatus] = UNSET
    start_date: Maybe[datetime | None] = UNSET
    end_date: Maybe[datetime | None] = UNSET
    budget: Maybe[float] = UNSET

    @classmethod
    def from_update(cls, data: CampaignUpdate) -> "CampaignPatch":
        """Build a patch from the fields present in an update request."""
        return cls(**data.model_dump(exclude_unset=True))

    def changes(self) -> dict[str, Any]:
        """Return the supplied fields as a column -> value mapping."""
        result: dict[str, Any] = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if value is not UNSET:
                result[field.name] = value
        return result

    def is_empty(self) -> bool:
        return not self.changes()
