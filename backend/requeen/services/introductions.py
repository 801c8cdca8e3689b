"""Queen introduction engine: the colony state machine in action."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

import sqlalchemy as sa
from prometheus_client import Counter
from sqlalchemy.orm import Session

from .. import config, models, ownership, schemas
from ..errors import InvalidArgument, InvalidSession, NoPendingColonies, StatusConflict
from ..eventlog import record_colony_event, record_introduction_event
from ..lifecycle import (
    Action,
    ColonyStatus,
    EventType,
    IntroductionMethod,
    ensure_transition,
    parse_method,
    parse_status,
)
from . import alerts

# purpose: apply introduction methods, record laying outcomes and schedule follow-up checks
# status: active
# depends_on: backend.requeen.lifecycle, backend.requeen.services.alerts, backend.requeen.eventlog

logger = logging.getLogger(__name__)

INTRODUCTIONS = Counter(
    "swarm_introductions_total",
    "Colonies moved to waiting_check by an introduction",
    ["method", "retry"],
)
OUTCOMES = Counter("swarm_outcomes_total", "Recorded laying check outcomes", ["status"])


def resolve_delay(method: IntroductionMethod, delay_days: int | None) -> int:
    """Return the check delay for ``method``, validating caller overrides."""

    if delay_days is None:
        return config.DEFAULT_CHECK_DELAYS[method.value]
    if isinstance(delay_days, bool) or not isinstance(delay_days, int):
        raise InvalidArgument("delay_days must be an integer")
    if not config.INTRO_DELAY_MIN_DAYS <= delay_days <= config.INTRO_DELAY_MAX_DAYS:
        raise InvalidArgument(
            f"delay_days must be between {config.INTRO_DELAY_MIN_DAYS} "
            f"and {config.INTRO_DELAY_MAX_DAYS}"
        )
    return delay_days


def planned_check_date(event_date: datetime, delay_days: int) -> date:
    """Check day counted from the calendar day in the caller's own offset."""

    return event_date.date() + timedelta(days=delay_days)


def _transition(
    db: Session,
    colony: models.SwarmColony,
    expected: ColonyStatus,
    target: ColonyStatus,
    now: datetime,
) -> bool:
    # only rows still in the expected status move; a concurrent writer leaves rowcount at 0
    result = db.execute(
        sa.update(models.SwarmColony)
        .where(
            models.SwarmColony.id == colony.id,
            models.SwarmColony.status == expected.value,
        )
        .values(status=target.value, updated_at=now)
    )
    return result.rowcount == 1


def introduce(
    db: Session,
    owner_id: UUID,
    session_id: UUID,
    method: str,
    *,
    delay_days: int | None = None,
    event_date: datetime | None = None,
) -> schemas.IntroductionResult:
    """Introduce queens into every pending colony of the session."""

    intro_method = parse_method(method)
    delay = resolve_delay(intro_method, delay_days)
    session = ownership.get_owned_session(db, owner_id, session_id)
    if not session.is_open:
        raise InvalidSession("Swarm session is not active")

    when = models.as_utc(event_date)
    planned_for = planned_check_date(event_date or when, delay)
    now = datetime.now(timezone.utc)

    snapshot = (
        db.query(models.SwarmColony)
        .filter(
            models.SwarmColony.session_id == session.id,
            models.SwarmColony.status == ColonyStatus.PENDING.value,
        )
        .order_by(models.SwarmColony.created_at.asc())
        .all()
    )
    if not snapshot:
        raise NoPendingColonies("No pending colonies in this session")

    ensure_transition(Action.INTRODUCE, ColonyStatus.PENDING, ColonyStatus.WAITING_CHECK)
    introduced: list[UUID] = []
    for colony in snapshot:
        if not _transition(db, colony, ColonyStatus.PENDING, ColonyStatus.WAITING_CHECK, now):
            logger.warning("colony %s left pending before introduction; skipped", colony.id)
            continue
        record_introduction_event(
            db,
            colony,
            method=intro_method.value,
            delay_days=delay,
            event_date=when,
            retry=False,
        )
        alerts.resolve(db, colony.id, now)
        alerts.schedule(db, colony, planned_for)
        introduced.append(colony.id)

    if not introduced:
        raise NoPendingColonies("No pending colonies in this session")

    INTRODUCTIONS.labels(intro_method.value, "false").inc(len(introduced))
    logger.info(
        "introduced %s into %d colonies of session %s, check on %s",
        intro_method.value,
        len(introduced),
        session.id,
        planned_for,
    )
    return schemas.IntroductionResult(
        session_id=session.id,
        method=intro_method.value,
        delay_days=delay,
        event_date=when,
        planned_for=planned_for,
        colony_ids=introduced,
    )


def record_outcome(
    db: Session,
    owner_id: UUID,
    colony_id: UUID,
    status: str,
) -> models.SwarmColony:
    """Record the laying check result and close the colony's open check."""

    target = parse_status(status)
    colony = ownership.get_owned_colony(db, owner_id, colony_id)
    current = ColonyStatus(colony.status)
    ensure_transition(Action.RECORD_OUTCOME, current, target)

    now = datetime.now(timezone.utc)
    if not _transition(db, colony, current, target, now):
        logger.warning("colony %s changed status concurrently; outcome %s rejected", colony.id, target.value)
        raise StatusConflict("Colony status changed concurrently")
    closed = alerts.resolve(db, colony.id, now)
    record_colony_event(
        db,
        colony,
        EventType.LAYING_CHECK,
        {
            "status": target.value,
            "previous_status": current.value,
            "alerts_closed": closed,
        },
        event_date=now,
    )
    db.flush()
    db.refresh(colony)
    OUTCOMES.labels(target.value).inc()
    logger.info("colony %s outcome %s (closed %d checks)", colony.id, target.value, closed)
    return colony


def reintroduce(
    db: Session,
    owner_id: UUID,
    colony_id: UUID,
    method: str,
    *,
    delay_days: int | None = None,
    event_date: datetime | None = None,
) -> tuple[models.SwarmColony, models.SwarmAlert]:
    """Retry a failed or queenless colony with a new introduction."""

    intro_method = parse_method(method)
    delay = resolve_delay(intro_method, delay_days)
    colony = ownership.get_owned_colony(db, owner_id, colony_id)
    current = ColonyStatus(colony.status)
    ensure_transition(Action.REINTRODUCE, current, ColonyStatus.WAITING_CHECK)

    when = models.as_utc(event_date)
    now = datetime.now(timezone.utc)
    if not _transition(db, colony, current, ColonyStatus.WAITING_CHECK, now):
        logger.warning("colony %s changed status concurrently; reintroduction rejected", colony.id)
        raise StatusConflict("Colony status changed concurrently")
    record_introduction_event(
        db,
        colony,
        method=intro_method.value,
        delay_days=delay,
        event_date=when,
        retry=True,
    )
    alerts.resolve(db, colony.id, now)
    alert = alerts.schedule(db, colony, planned_check_date(event_date or when, delay))
    db.refresh(colony)
    INTRODUCTIONS.labels(intro_method.value, "true").inc()
    logger.info("reintroduced %s into colony %s, check on %s", intro_method.value, colony.id, alert.planned_for)
    return colony, alert
