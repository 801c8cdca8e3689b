"""Schemas for requeening success analytics."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .swarm import SwarmColonyOut, UpcomingAlert


class StatusBreakdown(BaseModel):
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    success: int = 0
    failures: int = 0
    waiting: int = 0
    pending: int = 0
    success_rate: float = 0.0


class SessionStats(StatusBreakdown):
    session_id: UUID


class SiteBreakdown(StatusBreakdown):
    site_id: UUID
    site_name: str


class OverviewStats(BaseModel):
    date_from: date
    date_to: date
    site_id: UUID | None = None
    global_stats: StatusBreakdown = Field(alias="global")
    by_intro_type: dict[str, StatusBreakdown] = Field(default_factory=dict)
    # omitted when the overview is already filtered to one site
    by_site: list[SiteBreakdown] | None = None

    model_config = ConfigDict(populate_by_name=True)


class SiteOverview(BaseModel):
    site_id: UUID
    site_name: str
    produced: int
    introduced: int
    success_rate: float
    due_today: int
    awaiting_introduction: list[SwarmColonyOut] = Field(default_factory=list)
    checks_due: list[UpcomingAlert] = Field(default_factory=list)
