"""Utilities for recording colony timeline events."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from . import models
from .lifecycle import EventType

# purpose: shareable helpers for persisting append-only colony events across services
# inputs: SQLAlchemy session, colony instance, event metadata
# outputs: SwarmEvent rows staged in the caller's transaction
# status: active


def record_colony_event(
    db: Session,
    colony: models.SwarmColony,
    event_type: EventType,
    payload: dict[str, Any],
    event_date: datetime | None = None,
) -> models.SwarmEvent:
    """Persist a structured colony event for timeline replay."""

    payload_dict = payload if isinstance(payload, dict) else {}
    now = datetime.now(timezone.utc)
    event = models.SwarmEvent(
        colony_id=colony.id,
        event_type=EventType(event_type).value,
        event_date=event_date or now,
        payload=payload_dict,
        created_at=now,
    )
    db.add(event)
    return event


def record_introduction_event(
    db: Session,
    colony: models.SwarmColony,
    *,
    method: str,
    delay_days: int,
    event_date: datetime,
    retry: bool,
) -> models.SwarmEvent:
    """Persist an introduction with the method, delay and retry flag used."""

    payload = {
        "method": method,
        "delay_days": delay_days,
        "retry": retry,
    }
    return record_colony_event(
        db,
        colony,
        event_type=EventType(f"intro_{method}"),
        payload=payload,
        event_date=event_date,
    )
