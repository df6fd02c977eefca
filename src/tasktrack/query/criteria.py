"""Search criteria value objects.

Every field is optional; an absent field means "no filter on this dimension".
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..database.schema import Priority, StatusEvent
from ..utils.time import to_utc_naive


def _normalize_datetime(value):
    if isinstance(value, datetime):
        return to_utc_naive(value)
    return value


def _enum_by_name(enum_cls, value):
    """Accept enum members, values or case-insensitive names."""
    if value is None or isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return enum_cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown {enum_cls.__name__}: {value}") from None
    return value


class TaskCriteria(BaseModel):
    """Optional search inputs for tasks."""

    model_config = ConfigDict(frozen=True)

    keyword: Optional[str] = Field(default=None, description="Substring matched against title and description")
    column_id: Optional[str] = Field(default=None, description="Board column tag: todo, in-progress, done, cancel")
    priority: Optional[Priority] = None
    event_id: Optional[int] = None
    start_after: Optional[datetime] = Field(default=None, description="Inclusive lower bound on start_date")
    end_before: Optional[datetime] = Field(default=None, description="Inclusive upper bound on end_date")

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, value):
        return _enum_by_name(Priority, value)

    @field_validator("start_after", "end_before", mode="after")
    @classmethod
    def _to_utc(cls, value):
        return _normalize_datetime(value)


class EventCriteria(BaseModel):
    """Optional search inputs for events."""

    model_config = ConfigDict(frozen=True)

    keyword: Optional[str] = None
    status: Optional[StatusEvent] = None
    start_after: Optional[datetime] = Field(default=None, description="Inclusive lower bound on start_time")
    end_before: Optional[datetime] = Field(default=None, description="Inclusive upper bound on end_time")

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return _enum_by_name(StatusEvent, value)

    @field_validator("start_after", "end_before", mode="after")
    @classmethod
    def _to_utc(cls, value):
        return _normalize_datetime(value)
