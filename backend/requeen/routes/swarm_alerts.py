from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import config, models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import alerts

router = APIRouter(prefix="/api/swarm/alerts", tags=["swarm", "alerts"])


@router.get("/upcoming", response_model=list[schemas.UpcomingAlert])
def upcoming_alerts(
    days_ahead: int = Query(default=config.UPCOMING_DAYS_AHEAD, ge=0, le=365),
    grace_days: int = Query(default=config.UPCOMING_GRACE_DAYS, ge=0, le=365),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Laying checks due soon, overdue ones first."""

    return alerts.upcoming(
        db,
        user.id,
        days_ahead=days_ahead,
        days_behind_grace=grace_days,
    )
