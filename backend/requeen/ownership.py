from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import Session

from . import models
from .errors import ColonyNotFound, HiveNotFound, InvalidArgument, SessionNotFound, SiteNotFound

# purpose: verify that sites, sessions, colonies and hives belong to the calling operator
# status: active
# note: absent and foreign rows raise the same NotFound so callers cannot probe existence


def get_owned_site(db: Session, owner_id: UUID, site_id: UUID, *, lock: bool = False) -> models.Site:
    query = db.query(models.Site).filter(models.Site.id == site_id, models.Site.owner_id == owner_id)
    if lock:
        query = query.with_for_update()
    site = query.first()
    if not site:
        raise SiteNotFound("Site not found")
    return site


def get_owned_session(db: Session, owner_id: UUID, session_id: UUID) -> models.SwarmSession:
    session = (
        db.query(models.SwarmSession)
        .join(models.Site, models.Site.id == models.SwarmSession.site_id)
        .filter(models.SwarmSession.id == session_id, models.Site.owner_id == owner_id)
        .first()
    )
    if not session:
        raise SessionNotFound("Swarm session not found")
    return session


def get_owned_colony(db: Session, owner_id: UUID, colony_id: UUID) -> models.SwarmColony:
    colony = (
        db.query(models.SwarmColony)
        .join(models.Site, models.Site.id == models.SwarmColony.site_id)
        .filter(models.SwarmColony.id == colony_id, models.Site.owner_id == owner_id)
        .first()
    )
    if not colony:
        raise ColonyNotFound("Colony not found")
    return colony


def resolve_site_hive(
    db: Session,
    site_id: UUID,
    *,
    hive_id: UUID | None = None,
    public_key: str | None = None,
) -> models.Hive:
    """Return the hive referenced by id or scanned token, scoped to ``site_id``."""

    if hive_id is None and not public_key:
        raise InvalidArgument("hive_id or hive_public_key is required")
    if hive_id is not None and public_key:
        raise InvalidArgument("provide either hive_id or hive_public_key, not both")

    query = db.query(models.Hive).filter(models.Hive.site_id == site_id)
    if hive_id is not None:
        query = query.filter(models.Hive.id == hive_id)
    else:
        query = query.filter(sa.func.lower(models.Hive.public_key) == public_key.strip().lower())
    hive = query.first()
    if not hive:
        raise HiveNotFound("Hive not found in this site")
    return hive
