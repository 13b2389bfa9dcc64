"""Initial schema: users, students, courses, timetable, attendance, grades,
assignments, submissions, fees.

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id(table: str) -> list:
    return [
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
    ]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _fk(table: str, column: str, target: str, *, nullable: bool = False,
        ondelete: str = "CASCADE") -> list:
    return [
        sa.Column(column, sa.Uuid(as_uuid=True), nullable=nullable),
        sa.ForeignKeyConstraint(
            [column], [f"{target}.id"],
            name=f"fk_{table}_{column}_{target}",
            ondelete=ondelete,
        ),
    ]


def upgrade() -> None:
    # ── users ───────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        *_id("users"),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("hashed_password", sa.Text(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("auth_provider", sa.String(20), nullable=False, server_default="local"),
        sa.Column("provider_sub", sa.String(255), nullable=True),
        *_timestamps(),
    )
    # Unique indexes carry the email / username uniqueness that federated
    # sign-in relies on
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_provider_sub", "users", ["provider_sub"])

    # ── students ────────────────────────────────────────────────────────────
    op.create_table(
        "students",
        *_id("students"),
        *_fk("students", "user_id", "users", nullable=True, ondelete="SET NULL"),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("roll_number", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("class_name", sa.String(50), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("enrollment_date", sa.Date(), nullable=True),
        sa.Column("guardian_name", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_students_user_id", "students", ["user_id"])
    op.create_index("ix_students_roll_number", "students", ["roll_number"], unique=True)
    op.create_index("ix_students_class_name", "students", ["class_name"])

    # ── courses ─────────────────────────────────────────────────────────────
    op.create_table(
        "courses",
        *_id("courses"),
        sa.Column("code", sa.String(30), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="0"),
        *_fk("courses", "teacher_id", "users", nullable=True, ondelete="SET NULL"),
        *_timestamps(),
    )
    op.create_index("ix_courses_code", "courses", ["code"], unique=True)
    op.create_index("ix_courses_teacher_id", "courses", ["teacher_id"])

    # ── timetable_entries ───────────────────────────────────────────────────
    op.create_table(
        "timetable_entries",
        *_id("timetable_entries"),
        *_fk("timetable_entries", "course_id", "courses"),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("room", sa.String(50), nullable=True),
        sa.Column("class_name", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_timetable_entries_course_id", "timetable_entries", ["course_id"])
    op.create_index("ix_timetable_entries_day_of_week", "timetable_entries", ["day_of_week"])

    # ── attendance ──────────────────────────────────────────────────────────
    op.create_table(
        "attendance",
        *_id("attendance"),
        *_fk("attendance", "student_id", "students"),
        *_fk("attendance", "course_id", "courses", nullable=True),
        sa.Column("attended_on", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="present"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_id", "course_id", "attended_on", name="uq_attendance_student_course_day"
        ),
    )
    op.create_index("ix_attendance_student_id", "attendance", ["student_id"])
    op.create_index("ix_attendance_course_id", "attendance", ["course_id"])
    op.create_index("ix_attendance_attended_on", "attendance", ["attended_on"])

    # ── grades ──────────────────────────────────────────────────────────────
    op.create_table(
        "grades",
        *_id("grades"),
        *_fk("grades", "student_id", "students"),
        *_fk("grades", "course_id", "courses"),
        sa.Column("assessment", sa.String(100), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("max_score", sa.Float(), nullable=False, server_default="100"),
        sa.Column("letter", sa.String(5), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_id", "course_id", "assessment", name="uq_grade_student_course_assessment"
        ),
    )
    op.create_index("ix_grades_student_id", "grades", ["student_id"])
    op.create_index("ix_grades_course_id", "grades", ["course_id"])

    # ── assignments ─────────────────────────────────────────────────────────
    op.create_table(
        "assignments",
        *_id("assignments"),
        *_fk("assignments", "course_id", "courses"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_score", sa.Float(), nullable=False, server_default="100"),
        *_timestamps(),
    )
    op.create_index("ix_assignments_course_id", "assignments", ["course_id"])

    # ── submissions ─────────────────────────────────────────────────────────
    op.create_table(
        "submissions",
        *_id("submissions"),
        *_fk("submissions", "assignment_id", "assignments"),
        *_fk("submissions", "student_id", "students"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("attachment_url", sa.String(500), nullable=True),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="submitted"),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "assignment_id", "student_id", name="uq_submission_assignment_student"
        ),
    )
    op.create_index("ix_submissions_assignment_id", "submissions", ["assignment_id"])
    op.create_index("ix_submissions_student_id", "submissions", ["student_id"])

    # ── fees ────────────────────────────────────────────────────────────────
    op.create_table(
        "fees",
        *_id("fees"),
        *_fk("fees", "student_id", "students"),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_reference", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_fees_student_id", "fees", ["student_id"])
    op.create_index("ix_fees_status", "fees", ["status"])


def downgrade() -> None:
    for table in (
        "fees",
        "submissions",
        "assignments",
        "grades",
        "attendance",
        "timetable_entries",
        "courses",
        "students",
        "users",
    ):
        op.drop_table(table)
