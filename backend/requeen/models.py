import uuid
import sqlalchemy as sa
from sqlalchemy import (
    Column,
    String,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime:
    """Return ``value`` in UTC; naive values are taken as UTC, ``None`` as now."""

    if value is None:
        return _utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False)
    full_name = Column(String)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=_utcnow)

    sites = relationship("Site", back_populates="owner")


# purpose: read-only mirror of the apiary registry used for ownership checks
# status: external
class Site(Base):
    __tablename__ = "sites"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow)

    owner = relationship("User", back_populates="sites")
    hives = relationship("Hive", back_populates="site")


# purpose: read-only mirror of the hive registry; public_key is the scanned QR token
# status: external
class Hive(Base):
    __tablename__ = "hives"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id"), nullable=False, index=True)
    code = Column(String, nullable=False)
    public_key = Column(String, unique=True, index=True)
    purpose = Column(String)
    created_at = Column(DateTime, default=_utcnow)

    site = relationship("Site", back_populates="hives")


class SwarmSession(Base):
    __tablename__ = "swarm_sessions"
    __table_args__ = (
        # at most one open session per site
        sa.Index(
            "uq_swarm_sessions_active_site",
            "site_id",
            unique=True,
            postgresql_where=sa.text("is_active"),
            sqlite_where=sa.text("is_active = 1"),
        ),
    )
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id"), nullable=False, index=True)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    label = Column(String)
    notes = Column(Text)
    started_at = Column(DateTime, nullable=False, default=_utcnow)
    ended_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    site = relationship("Site")
    colonies = relationship(
        "SwarmColony",
        back_populates="session",
        order_by="SwarmColony.created_at.desc()",
    )

    @property
    def is_open(self) -> bool:
        return bool(self.is_active) and self.ended_at is None


class SwarmColony(Base):
    __tablename__ = "swarm_colonies"
    __table_args__ = (
        sa.UniqueConstraint("session_id", "hive_id", name="uq_swarm_colonies_session_hive"),
        sa.CheckConstraint(
            "status IN ('pending', 'waiting_check', 'laying_ok', 'failed', 'queenless', 'dead')",
            name="ck_swarm_colonies_status",
        ),
    )
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(UUID(as_uuid=True), ForeignKey("swarm_sessions.id"), nullable=False, index=True)
    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id"), nullable=False, index=True)
    hive_id = Column(UUID(as_uuid=True), ForeignKey("hives.id"), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="pending", index=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    session = relationship("SwarmSession", back_populates="colonies")
    hive = relationship("Hive")
    events = relationship(
        "SwarmEvent",
        back_populates="colony",
        order_by="SwarmEvent.event_date.asc()",
    )
    alerts = relationship(
        "SwarmAlert",
        back_populates="colony",
        order_by="SwarmAlert.created_at.desc()",
    )


# purpose: append-only audit trail of colony lifecycle actions
# status: active
class SwarmEvent(Base):
    __tablename__ = "swarm_events"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    colony_id = Column(UUID(as_uuid=True), ForeignKey("swarm_colonies.id"), nullable=False, index=True)
    event_type = Column(String(32), nullable=False)
    event_date = Column(DateTime, nullable=False, default=_utcnow)
    payload = Column(JSON, default=dict)
    created_at = Column(DateTime, default=_utcnow)

    colony = relationship("SwarmColony", back_populates="events")


class SwarmAlert(Base):
    __tablename__ = "swarm_alerts"
    __table_args__ = (
        # one open check per colony and alert type
        sa.Index(
            "uq_swarm_alerts_open_check",
            "colony_id",
            "alert_type",
            unique=True,
            postgresql_where=sa.text("NOT is_done"),
            sqlite_where=sa.text("is_done = 0"),
        ),
        sa.Index("ix_swarm_alerts_site_planned", "site_id", "planned_for"),
    )
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    colony_id = Column(UUID(as_uuid=True), ForeignKey("swarm_colonies.id"), nullable=False, index=True)
    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id"), nullable=False)
    alert_type = Column(String(32), nullable=False, default="check_laying")
    planned_for = Column(Date, nullable=False)
    is_done = Column(Boolean, nullable=False, default=False)
    done_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow)

    colony = relationship("SwarmColony", back_populates="alerts")


class AuditLog(Base):
    __tablename__ = "audit_logs"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    action = Column(String, nullable=False)
    target_type = Column(String)
    target_id = Column(UUID(as_uuid=True))
    details = Column(JSON, default=dict)
    created_at = Column(DateTime, default=_utcnow)
