from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..errors import SwarmError
from ..services import swarm_analytics

router = APIRouter(prefix="/api/swarm", tags=["swarm", "analytics"])


@router.get("/sessions/{session_id}/stats", response_model=schemas.SessionStats)
def session_stats(
    session_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return swarm_analytics.session_stats(db, user.id, session_id)
    except SwarmError as exc:
        raise exc.to_http() from exc


@router.get("/analytics/overview", response_model=schemas.OverviewStats)
def overview_stats(
    date_from: date = Query(..., description="First session start date (YYYY-MM-DD)"),
    date_to: date = Query(..., description="Last session start date, inclusive"),
    site_id: UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return swarm_analytics.overview_stats(db, user.id, date_from, date_to, site_id=site_id)
    except SwarmError as exc:
        raise exc.to_http() from exc


@router.get("/sites/{site_id}/overview", response_model=schemas.SiteOverview)
def site_overview(
    site_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return swarm_analytics.site_overview(db, user.id, site_id)
    except SwarmError as exc:
        raise exc.to_http() from exc
