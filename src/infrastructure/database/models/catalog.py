# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Catalog models: classes and the units that group their assignments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import (
    Base,
    CreatedAtMixin,
    JSONType,
    TimestampMixin,
)
from src.models.enums import Difficulty, sql_in

if TYPE_CHECKING:
    from src.infrastructure.database.models.assignment import Assignment
    from src.infrastructure.database.models.enrollment import Enrollment
    from src.infrastructure.database.models.user import User


class Class(TimestampMixin, Base):
    """A teacher-owned course container.

    Classes start inactive. Only active classes accept published
    assignments and show up in a student's class list, and only
    inactive classes can be deleted.
    """

    __tablename__ = "classes"
    __table_args__ = (
        CheckConstraint(f"difficulty IN {sql_in(Difficulty)}", name="valid_difficulty"),
        CheckConstraint("duration >= 0", name="non_negative_duration"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    difficulty: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Difficulty.BEGINNER.value,
    )
    objectives: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    teacher: Mapped[User] = relationship(lazy="raise")
    units: Mapped[list[Unit]] = relationship(
        back_populates="class_",
        order_by="Unit.order",
        lazy="raise",
    )
    assignments: Mapped[list[Assignment]] = relationship(back_populates="class_", lazy="raise")
    enrollments: Mapped[list[Enrollment]] = relationship(back_populates="class_", lazy="raise")


class Unit(CreatedAtMixin, Base):
    """An optional grouping of assignments within a class.

    ``order`` is a display hint; several units may share a value.
    """

    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id"),
        nullable=False,
        index=True,
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    class_: Mapped[Class] = relationship(back_populates="units", lazy="raise")
