# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin
from src.models.enums import AssignmentType, sql_in

if TYPE_CHECKING:
    from src.infrastructure.database.models.catalog import Class, Unit
    from src.infrastructure.database.models.submission import Submission


class Assignment(TimestampMixin, Base):
    """A unit of work published to the students of a class.

    ``details`` is an opaque bag (instructions, reflection questions,
    rubric criteria, selected maps, ...) stored and returned verbatim.
    ``attachments`` is a list of opaque file references.
    """

    __tablename__ = "assignments"
    __table_args__ = (
        CheckConstraint(f"type IN {sql_in(AssignmentType)}", name="valid_type"),
        CheckConstraint("points >= 0", name="non_negative_points"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=AssignmentType.TEXT.value)
    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id"),
        nullable=False,
        index=True,
    )
    unit_id: Mapped[int | None] = mapped_column(
        ForeignKey("units.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    is_graded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    attachments: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    details: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    class_: Mapped[Class] = relationship(back_populates="assignments", lazy="raise")
    unit: Mapped[Unit | None] = relationship(lazy="raise")
    submissions: Mapped[list[Submission]] = relationship(back_populates="assignment", lazy="raise")
