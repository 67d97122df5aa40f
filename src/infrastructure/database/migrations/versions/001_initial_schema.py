# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial classroom schema.

Creates users, classes, units, assignments, enrollments, submissions,
grades, notifications and the two comment tables, including the unique
constraints that keep one enrollment per (student, class), one
submission per (assignment, student) and one grade per submission.

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-02-03
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    """Create all classroom tables."""

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint("role IN ('teacher', 'student')", name="ck_users_valid_role"),
    )

    op.create_table(
        "classes",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("duration", sa.Integer, nullable=False, server_default="0"),
        sa.Column("difficulty", sa.String(20), nullable=False),
        sa.Column("objectives", JSON, nullable=False),
        sa.Column("teacher_id", sa.Integer, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.false()),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id", name="pk_classes"),
        sa.ForeignKeyConstraint(
            ["teacher_id"],
            ["users.id"],
            name="fk_classes_teacher_id_users",
        ),
        sa.CheckConstraint(
            "difficulty IN ('Beginner', 'Intermediate', 'Advanced')",
            name="ck_classes_valid_difficulty",
        ),
        sa.CheckConstraint("duration >= 0", name="ck_classes_non_negative_duration"),
    )
    op.create_index("ix_classes_teacher_id", "classes", ["teacher_id"])

    op.create_table(
        "units",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("class_id", sa.Integer, nullable=False),
        sa.Column("order", sa.Integer, nullable=False, server_default="0"),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_units"),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], name="fk_units_class_id_classes"),
    )
    op.create_index("ix_units_class_id", "units", ["class_id"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("class_id", sa.Integer, nullable=False),
        sa.Column("unit_id", sa.Integer, nullable=True),
        sa.Column("points", sa.Integer, nullable=False),
        sa.Column("is_graded", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attachments", JSON, nullable=False),
        sa.Column("details", JSON, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.false()),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id", name="pk_assignments"),
        sa.ForeignKeyConstraint(
            ["class_id"],
            ["classes.id"],
            name="fk_assignments_class_id_classes",
        ),
        sa.ForeignKeyConstraint(
            ["unit_id"],
            ["units.id"],
            name="fk_assignments_unit_id_units",
            ondelete="SET NULL",
        ),
        sa.CheckConstraint("type IN ('text', 'gis', 'mixed')", name="ck_assignments_valid_type"),
        sa.CheckConstraint("points >= 0", name="ck_assignments_non_negative_points"),
    )
    op.create_index("ix_assignments_class_id", "assignments", ["class_id"])
    op.create_index("ix_assignments_unit_id", "assignments", ["unit_id"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("student_id", sa.Integer, nullable=False),
        sa.Column("class_id", sa.Integer, nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_enrollments"),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["users.id"],
            name="fk_enrollments_student_id_users",
        ),
        sa.ForeignKeyConstraint(
            ["class_id"],
            ["classes.id"],
            name="fk_enrollments_class_id_classes",
        ),
        sa.UniqueConstraint("student_id", "class_id", name="uq_enrollments_student_class"),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_class_id", "enrollments", ["class_id"])

    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("assignment_id", sa.Integer, nullable=False),
        sa.Column("student_id", sa.Integer, nullable=False),
        sa.Column("written_response", sa.Text, nullable=True),
        sa.Column("map_data", JSON, nullable=True),
        sa.Column("attachments", JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id", name="pk_submissions"),
        sa.ForeignKeyConstraint(
            ["assignment_id"],
            ["assignments.id"],
            name="fk_submissions_assignment_id_assignments",
        ),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["users.id"],
            name="fk_submissions_student_id_users",
        ),
        sa.UniqueConstraint(
            "assignment_id",
            "student_id",
            name="uq_submissions_assignment_student",
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'submitted', 'graded')",
            name="ck_submissions_valid_status",
        ),
    )
    op.create_index("ix_submissions_assignment_id", "submissions", ["assignment_id"])
    op.create_index("ix_submissions_student_id", "submissions", ["student_id"])

    op.create_table(
        "grades",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("submission_id", sa.Integer, nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("max_score", sa.Integer, nullable=False),
        sa.Column("feedback", sa.Text, nullable=True),
        sa.Column("rubric", JSON, nullable=True),
        sa.Column("graded_by", sa.Integer, nullable=False),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_grades"),
        sa.ForeignKeyConstraint(
            ["submission_id"],
            ["submissions.id"],
            name="fk_grades_submission_id_submissions",
        ),
        sa.ForeignKeyConstraint(
            ["graded_by"],
            ["users.id"],
            name="fk_grades_graded_by_users",
        ),
        sa.UniqueConstraint("submission_id", name="uq_grades_submission_id"),
        sa.CheckConstraint("max_score > 0", name="ck_grades_positive_max_score"),
        sa.CheckConstraint(
            "score >= 0 AND score <= max_score",
            name="ck_grades_score_in_range",
        ),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("assignment_id", sa.Integer, nullable=True),
        sa.Column("submission_id", sa.Integer, nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_notifications_user_id_users",
        ),
        sa.CheckConstraint(
            "type IN ('new_assignment', 'submission_received', 'assignment_graded')",
            name="ck_notifications_valid_type",
        ),
    )
    op.create_index("ix_notifications_user_unread", "notifications", ["user_id", "is_read"])

    op.create_table(
        "class_comments",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("class_id", sa.Integer, nullable=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("tag", sa.String(20), nullable=False, server_default="discussion"),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_class_comments"),
        sa.ForeignKeyConstraint(
            ["class_id"],
            ["classes.id"],
            name="fk_class_comments_class_id_classes",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_class_comments_user_id_users",
        ),
        sa.CheckConstraint(
            "tag IN ('discussion', 'question', 'announcement')",
            name="ck_class_comments_valid_tag",
        ),
    )
    op.create_index("ix_class_comments_class_id", "class_comments", ["class_id"])

    op.create_table(
        "submission_comments",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("submission_id", sa.Integer, nullable=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_submission_comments"),
        sa.ForeignKeyConstraint(
            ["submission_id"],
            ["submissions.id"],
            name="fk_submission_comments_submission_id_submissions",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_submission_comments_user_id_users",
        ),
    )
    op.create_index(
        "ix_submission_comments_submission_id",
        "submission_comments",
        ["submission_id"],
    )


def downgrade() -> None:
    """Drop all classroom tables in reverse dependency order."""
    for table in (
        "submission_comments",
        "class_comments",
        "notifications",
        "grades",
        "submissions",
        "enrollments",
        "assignments",
        "units",
        "classes",
        "users",
    ):
        op.drop_table(table)
