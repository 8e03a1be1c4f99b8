# backend/alembic/versions/001_booking_engine.py
"""Booking engine schema

Revision ID: 001_booking_engine
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_booking_engine"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _is_postgres() -> bool:
    bind = op.get_bind()
    return bind is not None and bind.dialect.name == "postgresql"


def upgrade() -> None:
    """Create users, appointment types, availability, appointments and courses."""
    print("Creating booking engine tables...")

    op.create_table(
        "users",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("is_instructor", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("calendar_connected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "calendar_blocking_enabled", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("calendar_sync_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("calendar_primary_id", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "appointment_types",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_variable_duration", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("minimum_duration_hours", sa.Integer(), nullable=True),
        sa.Column("duration_increment_minutes", sa.Integer(), nullable=True),
        sa.Column("price_per_hour", sa.Numeric(10, 2), nullable=True),
        sa.Column("buffer_before_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("buffer_after_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_party_size", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("requires_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["instructor_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(is_variable_duration = false AND duration_minutes IS NOT NULL) "
            "OR (is_variable_duration = true AND duration_minutes IS NULL)",
            name="ck_appointment_types_single_duration_mode",
        ),
        sa.CheckConstraint("max_party_size >= 1", name="ck_appointment_types_party_size"),
    )
    op.create_index("ix_appointment_types_id", "appointment_types", ["id"])
    op.create_index(
        "idx_appointment_types_instructor_active",
        "appointment_types",
        ["instructor_id", "is_active"],
    )

    print("Creating availability tables...")
    op.create_table(
        "weekly_templates",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(8), nullable=False),
        sa.Column("end_time", sa.String(8), nullable=False),
        sa.Column("requires_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["instructor_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_weekly_templates_day_of_week"),
    )
    op.create_index(
        "idx_weekly_templates_instructor_day",
        "weekly_templates",
        ["instructor_id", "day_of_week"],
    )

    op.create_table(
        "availability_overrides",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(8), nullable=True),
        sa.Column("end_time", sa.String(8), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("requires_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["instructor_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("end_date >= start_date", name="ck_availability_overrides_date_order"),
        sa.CheckConstraint(
            "(start_time IS NULL AND end_time IS NULL) "
            "OR (start_time IS NOT NULL AND end_time IS NOT NULL)",
            name="ck_availability_overrides_time_pair",
        ),
        comment="Date-ranged exceptions to the weekly template",
    )
    op.create_index(
        "idx_availability_overrides_instructor_dates",
        "availability_overrides",
        ["instructor_id", "start_date", "end_date"],
    )

    print("Creating appointments table...")
    op.create_table(
        "appointments",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("student_id", sa.String(26), nullable=True),
        sa.Column("appointment_type_id", sa.String(26), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("party_size", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("student_notes", sa.Text(), nullable=True),
        sa.Column("actual_duration_minutes", sa.Integer(), nullable=True),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("tax_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("tax_rate", sa.Numeric(6, 4), nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_intent_id", sa.String(255), nullable=True),
        sa.Column("stripe_payment_intent_id", sa.String(255), nullable=True),
        sa.Column("external_event_id", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by_id", sa.String(26), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["instructor_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["appointment_type_id"], ["appointment_types.id"]),
        sa.ForeignKeyConstraint(["cancelled_by_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("end_time > start_time", name="ck_appointments_time_order"),
        sa.CheckConstraint("party_size >= 1", name="ck_appointments_party_size"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'rejected', 'cancelled', 'completed')",
            name="ck_appointments_status",
        ),
    )
    op.create_index("ix_appointments_id", "appointments", ["id"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index(
        "idx_appointments_instructor_start",
        "appointments",
        ["instructor_id", "start_time"],
    )

    if _is_postgres():
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            """
            ALTER TABLE appointments
              ADD CONSTRAINT appointments_no_overlap_per_instructor
              EXCLUDE USING gist (
                instructor_id WITH =,
                tstzrange(start_time, end_time, '[)') WITH &&
              )
              WHERE (status IN ('pending', 'confirmed'))
            """
        )

    print("Creating course tables...")
    op.create_table(
        "courses",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["instructor_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "course_schedules",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("course_id", sa.String(26), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("end_time > start_time", name="ck_course_schedules_time_order"),
    )
    op.create_index(
        "idx_course_schedules_course_start",
        "course_schedules",
        ["course_id", "start_time"],
    )

    print("Booking engine tables created")


def downgrade() -> None:
    """Drop booking engine tables."""
    print("Dropping booking engine tables...")

    op.drop_index("idx_course_schedules_course_start", table_name="course_schedules")
    op.drop_table("course_schedules")
    op.drop_table("courses")

    if _is_postgres():
        op.execute(
            "ALTER TABLE appointments "
            "DROP CONSTRAINT IF EXISTS appointments_no_overlap_per_instructor"
        )
    op.drop_index("idx_appointments_instructor_start", table_name="appointments")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_id", table_name="appointments")
    op.drop_table("appointments")

    op.drop_index(
        "idx_availability_overrides_instructor_dates", table_name="availability_overrides"
    )
    op.drop_table("availability_overrides")
    op.drop_index("idx_weekly_templates_instructor_day", table_name="weekly_templates")
    op.drop_table("weekly_templates")

    op.drop_index("idx_appointment_types_instructor_active", table_name="appointment_types")
    op.drop_index("ix_appointment_types_id", table_name="appointment_types")
    op.drop_table("appointment_types")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
