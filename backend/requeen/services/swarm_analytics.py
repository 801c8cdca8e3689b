"""Success-rate analytics for requeening campaigns."""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from .. import models, ownership, schemas
from ..errors import InvalidArgument
from ..lifecycle import FAILURE_STATUSES, INTRODUCTION_EVENT_TYPES, ColonyStatus
from . import alerts
from .colonies import serialize_colony

# purpose: derive success and failure rates per session, introduction method and site
# status: active
# depends_on: backend.requeen.models.SwarmColony, backend.requeen.models.SwarmEvent


def success_rate(success: int, total: int) -> float:
    if not total:
        return 0.0
    return round(100 * success / total, 1)


def summarize_statuses(statuses: Iterable[str]) -> dict:
    by_status = Counter(statuses)
    total = sum(by_status.values())
    success = by_status.get(ColonyStatus.LAYING_OK.value, 0)
    failures = sum(by_status.get(status.value, 0) for status in FAILURE_STATUSES)
    return {
        "total": total,
        "by_status": dict(by_status),
        "success": success,
        "failures": failures,
        "waiting": by_status.get(ColonyStatus.WAITING_CHECK.value, 0),
        "pending": by_status.get(ColonyStatus.PENDING.value, 0),
        "success_rate": success_rate(success, total),
    }


def session_stats(db: Session, owner_id: UUID, session_id: UUID) -> schemas.SessionStats:
    session = ownership.get_owned_session(db, owner_id, session_id)
    statuses = [
        row.status
        for row in db.query(models.SwarmColony.status)
        .filter(models.SwarmColony.session_id == session.id)
        .all()
    ]
    return schemas.SessionStats(session_id=session.id, **summarize_statuses(statuses))


def overview_stats(
    db: Session,
    owner_id: UUID,
    date_from: date,
    date_to: date,
    site_id: UUID | None = None,
) -> schemas.OverviewStats:
    """Aggregate outcomes of sessions started within ``[date_from, date_to]``."""

    if date_from > date_to:
        raise InvalidArgument("date_from must not be after date_to")
    if site_id is not None:
        ownership.get_owned_site(db, owner_id, site_id)

    window_start = datetime.combine(date_from, time.min, tzinfo=timezone.utc)
    window_end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)

    query = (
        db.query(models.SwarmColony)
        .join(models.SwarmSession, models.SwarmSession.id == models.SwarmColony.session_id)
        .join(models.Site, models.Site.id == models.SwarmColony.site_id)
        .filter(
            models.Site.owner_id == owner_id,
            models.SwarmSession.started_at >= window_start,
            models.SwarmSession.started_at < window_end,
        )
    )
    if site_id is not None:
        query = query.filter(models.SwarmColony.site_id == site_id)
    colonies: list[models.SwarmColony] = query.all()

    global_block = schemas.StatusBreakdown(**summarize_statuses(c.status for c in colonies))
    by_intro_type = _breakdown_by_intro_type(db, colonies, window_start, window_end)
    by_site = None if site_id is not None else _breakdown_by_site(db, colonies)
    return schemas.OverviewStats(
        date_from=date_from,
        date_to=date_to,
        site_id=site_id,
        global_stats=global_block,
        by_intro_type=by_intro_type,
        by_site=by_site,
    )


def _breakdown_by_intro_type(
    db: Session,
    colonies: list[models.SwarmColony],
    window_start: datetime,
    window_end: datetime,
) -> dict[str, schemas.StatusBreakdown]:
    if not colonies:
        return {}
    status_by_colony = {colony.id: colony.status for colony in colonies}
    events = (
        db.query(models.SwarmEvent)
        .filter(
            models.SwarmEvent.colony_id.in_(list(status_by_colony)),
            models.SwarmEvent.event_type.in_([t.value for t in INTRODUCTION_EVENT_TYPES]),
            models.SwarmEvent.event_date >= window_start,
            models.SwarmEvent.event_date < window_end,
        )
        .order_by(models.SwarmEvent.event_date.asc(), models.SwarmEvent.created_at.asc())
        .all()
    )
    latest_method: dict[UUID, str] = {}
    for event in events:
        method = (event.payload or {}).get("method") or event.event_type.removeprefix("intro_")
        latest_method[event.colony_id] = method

    grouped: dict[str, list[str]] = defaultdict(list)
    for colony_id, method in latest_method.items():
        grouped[method].append(status_by_colony[colony_id])
    return {
        method: schemas.StatusBreakdown(**summarize_statuses(statuses))
        for method, statuses in sorted(grouped.items())
    }


def _breakdown_by_site(
    db: Session,
    colonies: list[models.SwarmColony],
) -> list[schemas.SiteBreakdown]:
    grouped: dict[UUID, list[str]] = defaultdict(list)
    for colony in colonies:
        grouped[colony.site_id].append(colony.status)
    if not grouped:
        return []
    names = {
        site.id: site.name
        for site in db.query(models.Site).filter(models.Site.id.in_(list(grouped))).all()
    }
    breakdown = [
        schemas.SiteBreakdown(
            site_id=site_id,
            site_name=names.get(site_id, ""),
            **summarize_statuses(statuses),
        )
        for site_id, statuses in grouped.items()
    ]
    breakdown.sort(key=lambda item: item.site_name)
    return breakdown


def site_overview(
    db: Session,
    owner_id: UUID,
    site_id: UUID,
    today: date | None = None,
) -> schemas.SiteOverview:
    """Production KPIs and work backlogs for one site."""

    site = ownership.get_owned_site(db, owner_id, site_id)
    colonies = (
        db.query(models.SwarmColony)
        .filter(models.SwarmColony.site_id == site.id)
        .order_by(models.SwarmColony.created_at.asc())
        .all()
    )
    by_status = Counter(colony.status for colony in colonies)
    succeeded = by_status.get(ColonyStatus.LAYING_OK.value, 0)
    resolved = succeeded + sum(by_status.get(status.value, 0) for status in FAILURE_STATUSES)
    checks_due = alerts.due_for_site(db, site.id, today=today)

    return schemas.SiteOverview(
        site_id=site.id,
        site_name=site.name,
        produced=len(colonies),
        introduced=len(colonies) - by_status.get(ColonyStatus.PENDING.value, 0),
        success_rate=success_rate(succeeded, resolved),
        due_today=len(checks_due),
        awaiting_introduction=[
            serialize_colony(colony)
            for colony in colonies
            if colony.status == ColonyStatus.PENDING.value
        ],
        checks_due=checks_due,
    )
