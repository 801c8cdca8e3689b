from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20250601_01"
down_revision: str | Sequence[str] | None = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the apiary registry mirror and requeening lifecycle tables."""

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "sites",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_sites_owner_id", "sites", ["owner_id"])
    op.create_table(
        "hives",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("public_key", sa.String(), nullable=True),
        sa.Column("purpose", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_hives_site_id", "hives", ["site_id"])
    op.create_index("ix_hives_public_key", "hives", ["public_key"], unique=True)

    op.create_table(
        "swarm_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("label", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_swarm_sessions_site_id", "swarm_sessions", ["site_id"])
    op.create_index("ix_swarm_sessions_owner_id", "swarm_sessions", ["owner_id"])
    op.create_index(
        "uq_swarm_sessions_active_site",
        "swarm_sessions",
        ["site_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "swarm_colonies",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "session_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("swarm_sessions.id"),
            nullable=False,
        ),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("hive_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("hives.id"), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("session_id", "hive_id", name="uq_swarm_colonies_session_hive"),
    )
    op.create_index("ix_swarm_colonies_session_id", "swarm_colonies", ["session_id"])
    op.create_index("ix_swarm_colonies_site_id", "swarm_colonies", ["site_id"])
    op.create_index("ix_swarm_colonies_hive_id", "swarm_colonies", ["hive_id"])
    op.create_index("ix_swarm_colonies_status", "swarm_colonies", ["status"])
    op.create_check_constraint(
        "ck_swarm_colonies_status",
        "swarm_colonies",
        "status IN ('pending', 'waiting_check', 'laying_ok', 'failed', 'queenless', 'dead')",
    )

    op.create_table(
        "swarm_events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "colony_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("swarm_colonies.id"),
            nullable=False,
        ),
        sa.Column("event_type", sa.String(length=32), nullable=False),
        sa.Column("event_date", sa.DateTime(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_swarm_events_colony_id", "swarm_events", ["colony_id"])

    op.create_table(
        "swarm_alerts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "colony_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("swarm_colonies.id"),
            nullable=False,
        ),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("alert_type", sa.String(length=32), nullable=False, server_default="check_laying"),
        sa.Column("planned_for", sa.Date(), nullable=False),
        sa.Column("is_done", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("done_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_swarm_alerts_colony_id", "swarm_alerts", ["colony_id"])
    op.create_index("ix_swarm_alerts_site_planned", "swarm_alerts", ["site_id", "planned_for"])
    op.create_index(
        "uq_swarm_alerts_open_check",
        "swarm_alerts",
        ["colony_id", "alert_type"],
        unique=True,
        postgresql_where=sa.text("NOT is_done"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("target_type", sa.String(), nullable=True),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    """Drop the requeening lifecycle tables and the registry mirror."""

    op.drop_table("audit_logs")
    op.drop_index("uq_swarm_alerts_open_check", table_name="swarm_alerts")
    op.drop_index("ix_swarm_alerts_site_planned", table_name="swarm_alerts")
    op.drop_index("ix_swarm_alerts_colony_id", table_name="swarm_alerts")
    op.drop_table("swarm_alerts")
    op.drop_index("ix_swarm_events_colony_id", table_name="swarm_events")
    op.drop_table("swarm_events")
    op.drop_constraint("ck_swarm_colonies_status", "swarm_colonies", type_="check")
    op.drop_index("ix_swarm_colonies_status", table_name="swarm_colonies")
    op.drop_index("ix_swarm_colonies_hive_id", table_name="swarm_colonies")
    op.drop_index("ix_swarm_colonies_site_id", table_name="swarm_colonies")
    op.drop_index("ix_swarm_colonies_session_id", table_name="swarm_colonies")
    op.drop_table("swarm_colonies")
    op.drop_index("uq_swarm_sessions_active_site", table_name="swarm_sessions")
    op.drop_index("ix_swarm_sessions_owner_id", table_name="swarm_sessions")
    op.drop_index("ix_swarm_sessions_site_id", table_name="swarm_sessions")
    op.drop_table("swarm_sessions")
    op.drop_index("ix_hives_public_key", table_name="hives")
    op.drop_index("ix_hives_site_id", table_name="hives")
    op.drop_table("hives")
    op.drop_index("ix_sites_owner_id", table_name="sites")
    op.drop_table("sites")
    op.drop_table("users")
