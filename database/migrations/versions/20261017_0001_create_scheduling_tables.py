"""create scheduling tables

Revision ID: 20261017_0001
Revises: None
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


class_status_enum = sa.Enum("active", "inactive", name="class_status")


def upgrade() -> None:
    op.create_table(
        "terms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("branch", sa.String(length=50), nullable=False),
        sa.Column("sections", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("year", "semester", "branch", name="uq_terms_year_semester_branch"),
    )

    op.create_table(
        "class_sections",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("term_id", sa.String(length=36), nullable=False),
        sa.Column("section", sa.String(length=50), nullable=False),
        sa.Column("status", class_status_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("term_id", "section", name="uq_class_sections_term_section"),
    )
    op.create_index("ix_class_sections_term_id", "class_sections", ["term_id"], unique=False)

    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_faculty_email", "faculty", ["email"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("short_name", sa.String(length=50), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("is_lab", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("term_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_courses_code", "courses", ["code"], unique=True)
    op.create_index("ix_courses_term_id", "courses", ["term_id"], unique=False)

    op.create_table(
        "time_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("day", sa.String(length=20), nullable=False),
        sa.Column("period", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("day", "period", name="uq_time_slots_day_period"),
        sa.CheckConstraint("period >= 1 and period <= 6", name="ck_time_slots_period"),
    )

    op.create_table(
        "teaching_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("course_id", "faculty_id", "class_id", name="uq_teaching_assignments_identity"),
    )
    op.create_index("ix_teaching_assignments_course_id", "teaching_assignments", ["course_id"], unique=False)
    op.create_index("ix_teaching_assignments_faculty_id", "teaching_assignments", ["faculty_id"], unique=False)
    op.create_index("ix_teaching_assignments_class_id", "teaching_assignments", ["class_id"], unique=False)

    op.create_table(
        "faculty_availability",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("timeslot_id", sa.String(length=36), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("faculty_id", "timeslot_id", name="uq_faculty_availability_faculty_slot"),
    )
    op.create_index("ix_faculty_availability_faculty_id", "faculty_availability", ["faculty_id"], unique=False)

    op.create_table(
        "timetable_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("timeslot_id", sa.String(length=36), nullable=False),
        sa.Column("room", sa.String(length=120), nullable=True),
        sa.Column("run_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("class_id", "timeslot_id", name="uq_timetable_entries_class_slot"),
        sa.UniqueConstraint("faculty_id", "timeslot_id", name="uq_timetable_entries_faculty_slot"),
    )
    op.create_index("ix_timetable_entries_class_id", "timetable_entries", ["class_id"], unique=False)
    op.create_index("ix_timetable_entries_faculty_id", "timetable_entries", ["faculty_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_timetable_entries_faculty_id", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_class_id", table_name="timetable_entries")
    op.drop_table("timetable_entries")
    op.drop_index("ix_faculty_availability_faculty_id", table_name="faculty_availability")
    op.drop_table("faculty_availability")
    op.drop_index("ix_teaching_assignments_class_id", table_name="teaching_assignments")
    op.drop_index("ix_teaching_assignments_faculty_id", table_name="teaching_assignments")
    op.drop_index("ix_teaching_assignments_course_id", table_name="teaching_assignments")
    op.drop_table("teaching_assignments")
    op.drop_table("time_slots")
    op.drop_index("ix_courses_term_id", table_name="courses")
    op.drop_index("ix_courses_code", table_name="courses")
    op.drop_table("courses")
    op.drop_index("ix_faculty_email", table_name="faculty")
    op.drop_table("faculty")
    op.drop_index("ix_class_sections_term_id", table_name="class_sections")
    op.drop_table("class_sections")
    class_status_enum.drop(op.get_bind(), checkfirst=True)
    op.drop_table("terms")
