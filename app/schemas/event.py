# Pydantic schemas

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import Any

MAX_BATCH_SIZE = 1000


class EventCreate(BaseModel):
    """Schema for a single event descriptor"""

    name: str = Field(..., min_length=1, max_length=255)
    properties: dict[str, Any] = Field(default_factory=dict)
    user_id: str | None = Field(default=None, max_length=255)
    session_id: str | None = Field(default=None, max_length=255)
    timestamp: datetime | None = None

    @field_validator('name')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Field cannot be empty or whitespace')
        return v.strip()

    @field_validator('properties', mode='before')
    @classmethod
    def default_null_properties(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator('timestamp')
    @classmethod
    def normalize_to_utc(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return v
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        try:
            return v.astimezone(timezone.utc)
        except OverflowError:
            raise ValueError('Timestamp is out of range once converted to UTC')


class EventBatchCreate(BaseModel):
    """Schema for batch event creation"""

    events: list[EventCreate] = Field(..., min_length=1, max_length=MAX_BATCH_SIZE)


class BatchIngestResponse(BaseModel):
    """Response for batch ingestion"""

    ingested: int
    message: str
