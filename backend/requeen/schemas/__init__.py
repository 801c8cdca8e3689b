"""Pydantic schemas consolidating backend API contracts."""

# purpose: aggregate request and response schemas for FastAPI surfaces and services
# status: active

from .swarm import (
    ActiveSessionOut,
    ColonyScan,
    IntroductionCreate,
    IntroductionResult,
    OutcomeCreate,
    ReintroductionOut,
    SwarmAlertOut,
    SwarmColonyDetail,
    SwarmColonyOut,
    SwarmEventOut,
    SwarmSessionCreate,
    SwarmSessionDetail,
    SwarmSessionOut,
    UpcomingAlert,
)
from .swarm_analytics import (
    OverviewStats,
    SessionStats,
    SiteBreakdown,
    SiteOverview,
    StatusBreakdown,
)
