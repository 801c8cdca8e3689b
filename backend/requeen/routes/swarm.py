"""Requeening session, colony and introduction API routes."""

# purpose: expose the session/colony/introduction lifecycle to beekeeping operators
# status: active
# depends_on: backend.requeen.services.swarm_sessions, backend.requeen.services.colonies, backend.requeen.services.introductions

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..errors import SwarmError
from ..services import colonies, introductions, swarm_sessions

router = APIRouter(prefix="/api/swarm", tags=["swarm"])


@router.post("/sessions", response_model=schemas.SwarmSessionOut, status_code=status.HTTP_201_CREATED)
def open_session(
    payload: schemas.SwarmSessionCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Open a session on a site, closing the site's previous one."""

    try:
        session = swarm_sessions.open_session(
            db,
            user.id,
            payload.site_id,
            label=payload.label,
            notes=payload.notes,
            started_at=payload.started_at,
        )
        db.commit()
    except SwarmError as exc:
        db.rollback()
        raise exc.to_http() from exc
    db.refresh(session)
    return session


@router.post("/sessions/{session_id}/close", response_model=schemas.SwarmSessionOut)
def close_session(
    session_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        session = swarm_sessions.close_session(db, user.id, session_id)
        db.commit()
    except SwarmError as exc:
        db.rollback()
        raise exc.to_http() from exc
    db.refresh(session)
    return session


@router.get("/sites/{site_id}/active-session", response_model=schemas.ActiveSessionOut)
def get_active_session(
    site_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        session = swarm_sessions.get_active_session(db, user.id, site_id)
    except SwarmError as exc:
        raise exc.to_http() from exc
    return schemas.ActiveSessionOut(
        session=schemas.SwarmSessionOut.model_validate(session) if session else None
    )


@router.get("/sites/{site_id}/sessions", response_model=list[schemas.SwarmSessionOut])
def list_site_sessions(
    site_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return swarm_sessions.list_site_sessions(db, user.id, site_id)
    except SwarmError as exc:
        raise exc.to_http() from exc


@router.get("/sessions/{session_id}", response_model=schemas.SwarmSessionDetail)
def get_session(
    session_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return swarm_sessions.get_session_detail(db, user.id, session_id)
    except SwarmError as exc:
        raise exc.to_http() from exc


@router.post(
    "/sessions/{session_id}/colonies",
    response_model=schemas.SwarmColonyOut,
    status_code=status.HTTP_201_CREATED,
)
def register_colony(
    session_id: UUID,
    payload: schemas.ColonyScan,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Register a scanned hive as a pending colony of the session."""

    try:
        colony = colonies.register_colony(
            db,
            user.id,
            session_id,
            hive_id=payload.hive_id,
            hive_public_key=payload.hive_public_key,
        )
        db.commit()
    except SwarmError as exc:
        db.rollback()
        raise exc.to_http() from exc
    db.refresh(colony)
    return colonies.serialize_colony(colony)


@router.get("/colonies/{colony_id}", response_model=schemas.SwarmColonyDetail)
def get_colony(
    colony_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return colonies.get_colony_detail(db, user.id, colony_id)
    except SwarmError as exc:
        raise exc.to_http() from exc


@router.get("/colonies/{colony_id}/events", response_model=list[schemas.SwarmEventOut])
def list_colony_events(
    colony_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return colonies.list_colony_events(db, user.id, colony_id)
    except SwarmError as exc:
        raise exc.to_http() from exc


@router.post("/sessions/{session_id}/introductions", response_model=schemas.IntroductionResult)
def introduce(
    session_id: UUID,
    payload: schemas.IntroductionCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Introduce queens into every pending colony of the session."""

    try:
        result = introductions.introduce(
            db,
            user.id,
            session_id,
            payload.method,
            delay_days=payload.delay_days,
            event_date=payload.event_date,
        )
        db.commit()
    except SwarmError as exc:
        db.rollback()
        raise exc.to_http() from exc
    return result


@router.post("/colonies/{colony_id}/outcome", response_model=schemas.SwarmColonyOut)
def record_outcome(
    colony_id: UUID,
    payload: schemas.OutcomeCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        colony = introductions.record_outcome(db, user.id, colony_id, payload.status)
        db.commit()
    except SwarmError as exc:
        db.rollback()
        raise exc.to_http() from exc
    db.refresh(colony)
    return colonies.serialize_colony(colony)


@router.post("/colonies/{colony_id}/reintroductions", response_model=schemas.ReintroductionOut)
def reintroduce(
    colony_id: UUID,
    payload: schemas.IntroductionCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Retry a failed or queenless colony with a new queen."""

    try:
        colony, alert = introductions.reintroduce(
            db,
            user.id,
            colony_id,
            payload.method,
            delay_days=payload.delay_days,
            event_date=payload.event_date,
        )
        db.commit()
    except SwarmError as exc:
        db.rollback()
        raise exc.to_http() from exc
    db.refresh(colony)
    db.refresh(alert)
    return schemas.ReintroductionOut(
        colony=colonies.serialize_colony(colony),
        alert=schemas.SwarmAlertOut.model_validate(alert),
    )
