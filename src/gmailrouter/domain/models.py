"""Domain models for Gmail Router."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class RoutingAction(str, Enum):
    """What happens to a message addressed to a blocked local-part."""

    DELETE = "delete"
    SPAM = "spam"


class RoutingRecord(BaseModel):
    """On-disk shape of routing.yaml."""

    addresses: dict[str, bool] = Field(default_factory=dict)
    updated_date: datetime = Field(default_factory=lambda: datetime.fromtimestamp(0, timezone.utc))

    @field_validator("updated_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class CycleReport(BaseModel):
    """Counts for one routing cycle."""

    found: int = 0
    processed: int = 0
    deleted: int = 0
    skipped: int = 0
    discovered: int = 0
