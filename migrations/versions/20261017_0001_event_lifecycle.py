"""event lifecycle: events, registrations, participations, attendances

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 12:00:00
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "20261017_0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels = None
depends_on = None


def _child_table(name: str, *columns: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", name=f"fk_{name}_event_id_events", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        *columns,
        sa.PrimaryKeyConstraint("id", name=f"pk_{name}"),
    )
    op.create_index(f"ix_{name}_event_id", name, ["event_id"])
    op.create_index(f"ix_{name}_student_id", name, ["student_id"])


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("state", sa.String(20), nullable=False, server_default="upcoming"),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("registration_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("participation_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attendance_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_events"),
        sa.CheckConstraint("end_time > start_time", name="ck_events_time_window"),
        sa.CheckConstraint("state IN ('upcoming', 'ongoing', 'past')", name="ck_events_state_domain"),
        sa.CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_events_capacity_positive"),
        sa.CheckConstraint(
            "registration_count >= 0 AND participation_count >= 0 AND attendance_count >= 0",
            name="ck_events_counters_non_negative",
        ),
    )
    # scheduler selections
    op.create_index("ix_events_state_start_time", "events", ["state", "start_time"])
    op.create_index("ix_events_state_end_time", "events", ["state", "end_time"])

    _child_table(
        "event_registrations",
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("event_id", "student_id", name="uq_registration_event_student"),
    )
    _child_table(
        "event_participations",
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("event_id", "student_id", name="uq_participation_event_student"),
    )
    _child_table(
        "event_attendances",
        sa.Column("participation_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.UniqueConstraint("event_id", "student_id", name="uq_attendance_event_student"),
        sa.CheckConstraint("duration_minutes >= 0", name="ck_event_attendances_duration_non_negative"),
    )


def downgrade() -> None:
    for name in ("event_attendances", "event_participations", "event_registrations"):
        op.drop_index(f"ix_{name}_student_id", table_name=name)
        op.drop_index(f"ix_{name}_event_id", table_name=name)
        op.drop_table(name)
    op.drop_index("ix_events_state_end_time", table_name="events")
    op.drop_index("ix_events_state_start_time", table_name="events")
    op.drop_table("events")
