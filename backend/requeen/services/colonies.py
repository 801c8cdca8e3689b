"""Colony registration and lookup helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, ownership, schemas
from ..eventlog import record_colony_event
from ..errors import DuplicateColony, InvalidSession
from ..lifecycle import ColonyStatus, EventType
from . import alerts

# purpose: attach scanned hives to an open requeening session as pending colonies
# status: active
# depends_on: backend.requeen.ownership, backend.requeen.eventlog

logger = logging.getLogger(__name__)


def register_colony(
    db: Session,
    owner_id: UUID,
    session_id: UUID,
    *,
    hive_id: UUID | None = None,
    hive_public_key: str | None = None,
) -> models.SwarmColony:
    """Create a pending colony for a hive of the session's site and log its arrival."""

    session = ownership.get_owned_session(db, owner_id, session_id)
    if not session.is_open:
        raise InvalidSession("Swarm session is not active")
    hive = ownership.resolve_site_hive(
        db,
        session.site_id,
        hive_id=hive_id,
        public_key=hive_public_key,
    )
    existing = (
        db.query(models.SwarmColony.id)
        .filter(
            models.SwarmColony.session_id == session.id,
            models.SwarmColony.hive_id == hive.id,
        )
        .first()
    )
    if existing:
        raise DuplicateColony(f"Hive {hive.code} is already registered in this session")

    now = datetime.now(timezone.utc)
    colony = models.SwarmColony(
        session_id=session.id,
        site_id=session.site_id,
        hive_id=hive.id,
        status=ColonyStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )
    db.add(colony)
    try:
        db.flush()
    except IntegrityError as exc:
        raise DuplicateColony(f"Hive {hive.code} is already registered in this session") from exc
    record_colony_event(
        db,
        colony,
        EventType.SCAN_ARRIVAL,
        {
            "hive_id": str(hive.id),
            "hive_code": hive.code,
            "hive_public_key": hive_public_key,
        },
        event_date=now,
    )
    logger.info("registered hive %s as colony %s in session %s", hive.id, colony.id, session.id)
    return colony


def list_session_colonies(db: Session, owner_id: UUID, session_id: UUID) -> list[models.SwarmColony]:
    session = ownership.get_owned_session(db, owner_id, session_id)
    return (
        db.query(models.SwarmColony)
        .filter(models.SwarmColony.session_id == session.id)
        .order_by(models.SwarmColony.created_at.desc())
        .all()
    )


def get_colony_detail(db: Session, owner_id: UUID, colony_id: UUID) -> schemas.SwarmColonyDetail:
    colony = ownership.get_owned_colony(db, owner_id, colony_id)
    return schemas.SwarmColonyDetail(
        colony=serialize_colony(colony),
        alerts=[
            schemas.SwarmAlertOut.model_validate(alert)
            for alert in alerts.list_colony_alerts(db, colony.id)
        ],
    )


def list_colony_events(db: Session, owner_id: UUID, colony_id: UUID) -> list[models.SwarmEvent]:
    colony = ownership.get_owned_colony(db, owner_id, colony_id)
    return (
        db.query(models.SwarmEvent)
        .filter(models.SwarmEvent.colony_id == colony.id)
        .order_by(models.SwarmEvent.event_date.asc(), models.SwarmEvent.created_at.asc())
        .all()
    )


def serialize_colony(colony: models.SwarmColony) -> schemas.SwarmColonyOut:
    hive = colony.hive
    return schemas.SwarmColonyOut(
        id=colony.id,
        session_id=colony.session_id,
        site_id=colony.site_id,
        hive_id=colony.hive_id,
        hive_code=hive.code if hive else None,
        status=colony.status,
        created_at=colony.created_at,
        updated_at=colony.updated_at,
    )
