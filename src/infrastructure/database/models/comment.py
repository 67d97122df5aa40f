# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Discussion models: class discussion board and submission feedback threads."""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, CreatedAtMixin
from src.models.enums import CommentTag, sql_in


class ClassComment(CreatedAtMixin, Base):
    """A post on a class discussion board."""

    __tablename__ = "class_comments"
    __table_args__ = (
        CheckConstraint(f"tag IN {sql_in(CommentTag)}", name="valid_tag"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tag: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommentTag.DISCUSSION.value,
    )


class SubmissionComment(CreatedAtMixin, Base):
    """A message in the feedback thread of one submission."""

    __tablename__ = "submission_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    submission_id: Mapped[int] = mapped_column(
        ForeignKey("submissions.id"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
