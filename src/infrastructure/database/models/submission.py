# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission and grade models.

A submission is identified by its (assignment, student) pair; the
surrogate id exists for references. A grade is attached to at most one
submission. Both rules are unique constraints, so concurrent writers
cannot break them.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin
from src.models.enums import SubmissionStatus, sql_in
from src.utils.datetime import utc_now

if TYPE_CHECKING:
    from src.infrastructure.database.models.assignment import Assignment
    from src.infrastructure.database.models.user import User


class Submission(TimestampMixin, Base):
    """A student's work on an assignment."""

    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint(
            "assignment_id",
            "student_id",
            name="uq_submissions_assignment_student",
        ),
        CheckConstraint(f"status IN {sql_in(SubmissionStatus)}", name="valid_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        ForeignKey("assignments.id"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    written_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    map_data: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    attachments: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SubmissionStatus.DRAFT.value,
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    assignment: Mapped[Assignment] = relationship(back_populates="submissions", lazy="raise")
    student: Mapped[User] = relationship(lazy="raise")
    grade: Mapped[Grade | None] = relationship(
        back_populates="submission",
        uselist=False,
        lazy="raise",
    )


class Grade(Base):
    """The single evaluation recorded for a submission."""

    __tablename__ = "grades"
    __table_args__ = (
        CheckConstraint("max_score > 0", name="positive_max_score"),
        CheckConstraint("score >= 0 AND score <= max_score", name="score_in_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    submission_id: Mapped[int] = mapped_column(
        ForeignKey("submissions.id"),
        nullable=False,
        unique=True,
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    max_score: Mapped[int] = mapped_column(Integer, nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    rubric: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    graded_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    graded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    submission: Mapped[Submission] = relationship(back_populates="grade", lazy="raise")
