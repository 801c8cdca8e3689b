"""Requeening session lifecycle helpers."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from .. import audit, models, ownership, schemas
from ..errors import SessionAlreadyClosed, SessionConflict
from .colonies import serialize_colony

# purpose: open and close requeening sessions while keeping one active session per site
# status: active
# depends_on: backend.requeen.ownership, backend.requeen.models.SwarmSession

logger = logging.getLogger(__name__)


def open_session(
    db: Session,
    owner_id: UUID,
    site_id: UUID,
    *,
    label: str | None = None,
    notes: str | None = None,
    started_at: datetime | None = None,
) -> models.SwarmSession:
    """Close any open session of the site and start a new one in the same unit of work."""

    site = ownership.get_owned_site(db, owner_id, site_id, lock=True)
    now = datetime.now(timezone.utc)
    superseded = _close_open_sessions(db, site.id, now)
    session = models.SwarmSession(
        site_id=site.id,
        owner_id=owner_id,
        label=label or None,
        notes=notes or None,
        started_at=models.as_utc(started_at) if started_at else now,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(session)
    try:
        db.flush()
    except IntegrityError as exc:
        logger.warning("concurrent session open lost the race on site %s", site.id)
        raise SessionConflict("Another session was opened on this site concurrently") from exc
    audit.log_action(
        db,
        owner_id,
        "swarm_session.open",
        "swarm_session",
        session.id,
        {"site_id": str(site.id), "superseded": [str(s) for s in superseded]},
    )
    logger.info("opened swarm session %s on site %s (closed %d)", session.id, site.id, len(superseded))
    return session


def _close_open_sessions(db: Session, site_id: UUID, now: datetime) -> list[UUID]:
    open_ids = [
        row.id
        for row in db.query(models.SwarmSession.id)
        .filter(
            models.SwarmSession.site_id == site_id,
            models.SwarmSession.is_active.is_(True),
        )
        .all()
    ]
    if not open_ids:
        return []
    db.execute(
        sa.update(models.SwarmSession)
        .where(
            models.SwarmSession.id.in_(open_ids),
            models.SwarmSession.is_active.is_(True),
        )
        .values(is_active=False, ended_at=now, updated_at=now)
    )
    # the partial unique index must see the closed rows before the insert
    db.flush()
    return open_ids


def close_session(db: Session, owner_id: UUID, session_id: UUID) -> models.SwarmSession:
    session = ownership.get_owned_session(db, owner_id, session_id)
    if not session.is_open:
        raise SessionAlreadyClosed("Swarm session is already closed")
    now = datetime.now(timezone.utc)
    result = db.execute(
        sa.update(models.SwarmSession)
        .where(
            models.SwarmSession.id == session.id,
            models.SwarmSession.is_active.is_(True),
        )
        .values(is_active=False, ended_at=now, updated_at=now)
    )
    if result.rowcount != 1:
        raise SessionAlreadyClosed("Swarm session is already closed")
    db.refresh(session)
    audit.log_action(db, owner_id, "swarm_session.close", "swarm_session", session.id)
    logger.info("closed swarm session %s", session.id)
    return session


def get_active_session(db: Session, owner_id: UUID, site_id: UUID) -> models.SwarmSession | None:
    site = ownership.get_owned_site(db, owner_id, site_id)
    return (
        db.query(models.SwarmSession)
        .filter(
            models.SwarmSession.site_id == site.id,
            models.SwarmSession.is_active.is_(True),
            models.SwarmSession.ended_at.is_(None),
        )
        .order_by(models.SwarmSession.started_at.desc())
        .first()
    )


def list_site_sessions(db: Session, owner_id: UUID, site_id: UUID) -> list[models.SwarmSession]:
    site = ownership.get_owned_site(db, owner_id, site_id)
    return (
        db.query(models.SwarmSession)
        .filter(models.SwarmSession.site_id == site.id)
        .order_by(models.SwarmSession.started_at.desc())
        .all()
    )


def get_session_detail(db: Session, owner_id: UUID, session_id: UUID) -> schemas.SwarmSessionDetail:
    session = ownership.get_owned_session(db, owner_id, session_id)
    colonies = (
        db.query(models.SwarmColony)
        .options(joinedload(models.SwarmColony.hive))
        .filter(models.SwarmColony.session_id == session.id)
        .order_by(models.SwarmColony.created_at.desc())
        .all()
    )
    by_status = Counter(colony.status for colony in colonies)
    return schemas.SwarmSessionDetail(
        session=schemas.SwarmSessionOut.model_validate(session),
        colonies=[serialize_colony(colony) for colony in colonies],
        total=len(colonies),
        by_status=dict(by_status),
    )
