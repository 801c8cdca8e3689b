"""Schemas for requeening sessions, colonies, events and alerts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SwarmSessionCreate(BaseModel):
    site_id: UUID
    label: str | None = Field(default=None, max_length=200)
    notes: str | None = None
    started_at: datetime | None = None


class SwarmSessionOut(BaseModel):
    id: UUID
    site_id: UUID
    owner_id: UUID
    label: str | None = None
    notes: str | None = None
    started_at: datetime
    ended_at: datetime | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ActiveSessionOut(BaseModel):
    session: SwarmSessionOut | None = None


class ColonyScan(BaseModel):
    """Hive reference captured when a colony arrives: direct id or scanned token."""

    hive_id: UUID | None = None
    hive_public_key: str | None = Field(default=None, min_length=1)


class SwarmColonyOut(BaseModel):
    id: UUID
    session_id: UUID
    site_id: UUID
    hive_id: UUID
    hive_code: str | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SwarmSessionDetail(BaseModel):
    session: SwarmSessionOut
    colonies: list[SwarmColonyOut] = Field(default_factory=list)
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)


class SwarmEventOut(BaseModel):
    id: UUID
    colony_id: UUID
    event_type: str
    event_date: datetime
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


class SwarmAlertOut(BaseModel):
    id: UUID
    colony_id: UUID
    site_id: UUID
    alert_type: str
    planned_for: date
    is_done: bool
    done_at: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SwarmColonyDetail(BaseModel):
    colony: SwarmColonyOut
    alerts: list[SwarmAlertOut] = Field(default_factory=list)


class IntroductionCreate(BaseModel):
    method: str
    delay_days: int | None = None
    # stored in UTC; the check day is counted from the calendar date in the given offset
    event_date: datetime | None = Field(
        default=None,
        description="Introduction time; naive values are UTC",
    )


class IntroductionResult(BaseModel):
    session_id: UUID
    method: str
    delay_days: int
    event_date: datetime
    planned_for: date
    colony_ids: list[UUID] = Field(default_factory=list)


class OutcomeCreate(BaseModel):
    status: str


class ReintroductionOut(BaseModel):
    colony: SwarmColonyOut
    alert: SwarmAlertOut


class UpcomingAlert(BaseModel):
    id: UUID
    colony_id: UUID
    session_id: UUID
    site_id: UUID
    site_name: str
    hive_id: UUID
    hive_code: str
    colony_status: str
    alert_type: str
    planned_for: date
    days_until: int
    is_overdue: bool
