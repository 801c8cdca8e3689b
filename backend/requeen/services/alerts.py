"""Laying-check alert scheduling."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import Session

from .. import models, schemas
from ..lifecycle import AlertType

# purpose: create, resolve and surface laying-check alerts for introduced colonies
# status: active
# depends_on: backend.requeen.models.SwarmAlert

logger = logging.getLogger(__name__)


def schedule(
    db: Session,
    colony: models.SwarmColony,
    planned_for: date,
) -> models.SwarmAlert:
    """Create an open laying check; callers resolve the previous one first."""

    alert = models.SwarmAlert(
        colony_id=colony.id,
        site_id=colony.site_id,
        alert_type=AlertType.CHECK_LAYING.value,
        planned_for=planned_for,
        is_done=False,
        created_at=datetime.now(timezone.utc),
    )
    db.add(alert)
    db.flush()
    logger.debug("scheduled laying check %s for colony %s on %s", alert.id, colony.id, planned_for)
    return alert


def resolve(db: Session, colony_id: UUID, now: datetime | None = None) -> int:
    """Mark open laying checks of a colony as done; returns how many were closed."""

    result = db.execute(
        sa.update(models.SwarmAlert)
        .where(
            models.SwarmAlert.colony_id == colony_id,
            models.SwarmAlert.alert_type == AlertType.CHECK_LAYING.value,
            models.SwarmAlert.is_done.is_(False),
        )
        .values(is_done=True, done_at=now or datetime.now(timezone.utc))
    )
    # closed rows must be visible to the open-check index before a reschedule
    db.flush()
    return result.rowcount or 0


def upcoming(
    db: Session,
    owner_id: UUID,
    *,
    days_ahead: int,
    days_behind_grace: int,
    today: date | None = None,
) -> list[schemas.UpcomingAlert]:
    """Open alerts due between ``today - grace`` and ``today + ahead``, overdue first."""

    today = today or datetime.now(timezone.utc).date()
    window_start = today - timedelta(days=max(days_behind_grace, 0))
    window_end = today + timedelta(days=max(days_ahead, 0))
    rows = (
        _open_alert_query(db)
        .filter(
            models.Site.owner_id == owner_id,
            models.SwarmAlert.planned_for >= window_start,
            models.SwarmAlert.planned_for <= window_end,
        )
        .all()
    )
    return _serialize_rows(rows, today)


def due_for_site(db: Session, site_id: UUID, today: date | None = None) -> list[schemas.UpcomingAlert]:
    """Open checks of one site planned on or before ``today``."""

    today = today or datetime.now(timezone.utc).date()
    rows = (
        _open_alert_query(db)
        .filter(
            models.SwarmAlert.site_id == site_id,
            models.SwarmAlert.planned_for <= today,
        )
        .all()
    )
    return _serialize_rows(rows, today)


def list_colony_alerts(db: Session, colony_id: UUID) -> list[models.SwarmAlert]:
    return (
        db.query(models.SwarmAlert)
        .filter(models.SwarmAlert.colony_id == colony_id)
        .order_by(models.SwarmAlert.created_at.desc())
        .all()
    )


def _open_alert_query(db: Session):
    return (
        db.query(models.SwarmAlert, models.SwarmColony, models.Site, models.Hive)
        .join(models.SwarmColony, models.SwarmColony.id == models.SwarmAlert.colony_id)
        .join(models.Site, models.Site.id == models.SwarmAlert.site_id)
        .join(models.Hive, models.Hive.id == models.SwarmColony.hive_id)
        .filter(models.SwarmAlert.is_done.is_(False))
        .order_by(
            models.SwarmAlert.planned_for.asc(),
            models.Site.name.asc(),
            models.Hive.code.asc(),
        )
    )


def _serialize_rows(rows, today: date) -> list[schemas.UpcomingAlert]:
    return [
        schemas.UpcomingAlert(
            id=alert.id,
            colony_id=colony.id,
            session_id=colony.session_id,
            site_id=site.id,
            site_name=site.name,
            hive_id=hive.id,
            hive_code=hive.code,
            colony_status=colony.status,
            alert_type=alert.alert_type,
            planned_for=alert.planned_for,
            days_until=(alert.planned_for - today).days,
            is_overdue=alert.planned_for < today,
        )
        for alert, colony, site, hive in rows
    ]
