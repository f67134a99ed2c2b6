import datetime as dt
from pydantic import BaseModel, Field, ConfigDict, field_serializer, field_validator


def as_utc(value: dt.datetime) -> dt.datetime:
    """Treat naive datetimes as UTC; aware ones pass through."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.UTC)
    return value


class ImmutableBaseModel(BaseModel):
    """Base for records that never change after construction."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra='forbid'
    )

    created_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))
    updated_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: dt.datetime) -> dt.datetime:
        return as_utc(value)

    @field_serializer("created_at", "updated_at")
    def serialize_dt(self, value: dt.datetime):
        return value.isoformat()
