# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student class enrollments.

This module provides the EnrollmentService class for:
- Student enrollment in classes
- Unenrollment
- Class rosters and a student's visible classes
- The student directory teachers enroll from
- Membership checks used by the assignment and submission services
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ConflictError, InvalidStateError, NotFoundError
from src.infrastructure.database.models import Class, Enrollment, User
from src.models.class_ import ClassResponse
from src.models.enrollment import EnrollmentResponse, StudentClassResponse, StudentResponse
from src.models.enums import Difficulty, UserRole

logger = logging.getLogger(__name__)


class EnrollmentServiceError(Exception):
    """Base exception for enrollment service errors."""

    pass


class ClassNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when class is not found."""

    pass


class StudentNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when student is not found."""

    pass


class AlreadyEnrolledError(EnrollmentServiceError, ConflictError):
    """Raised when student is already enrolled."""

    pass


class NotEnrolledError(EnrollmentServiceError, NotFoundError):
    """Raised when student is not enrolled."""

    pass


class InvalidStudentTypeError(EnrollmentServiceError, InvalidStateError):
    """Raised when user is not a student."""

    pass


class EnrollmentService:
    """Service for managing student enrollments.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize enrollment service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def enroll(self, student_id: int, class_id: int) -> EnrollmentResponse:
        """Enroll a student in a class.

        Args:
            student_id: Student to enroll.
            class_id: Target class.

        Returns:
            Created enrollment.

        Raises:
            ClassNotFoundError: If class not found.
            StudentNotFoundError: If student not found.
            InvalidStudentTypeError: If user is not a student.
            AlreadyEnrolledError: If the student is already enrolled.
        """
        await self._get_class(class_id)
        student = await self._get_student(student_id)

        if await self._get_enrollment(student_id, class_id) is not None:
            raise AlreadyEnrolledError("Student is already enrolled in this class")

        enrollment = Enrollment(student_id=student_id, class_id=class_id)
        self.db.add(enrollment)

        # The unique constraint decides when two enrollments race
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyEnrolledError("Student is already enrolled in this class") from e

        await self.db.refresh(enrollment)

        logger.info("Enrolled student %s in class %s", student_id, class_id)

        return self._to_response(enrollment, student)

    async def unenroll(self, student_id: int, class_id: int) -> None:
        """Remove a student from a class.

        Submissions made while enrolled are kept.

        Raises:
            NotEnrolledError: If the student is not enrolled.
        """
        enrollment = await self._get_enrollment(student_id, class_id)
        if enrollment is None:
            raise NotEnrolledError("Student is not enrolled in this class")

        await self.db.delete(enrollment)
        await self.db.commit()

        logger.info("Unenrolled student %s from class %s", student_id, class_id)

    async def list_by_class(self, class_id: int) -> list[EnrollmentResponse]:
        """List the roster of a class ordered by (last_name, first_name).

        Raises:
            ClassNotFoundError: If class not found.
        """
        await self._get_class(class_id)

        query = (
            select(Enrollment, User)
            .join(User, User.id == Enrollment.student_id)
            .where(Enrollment.class_id == class_id)
            .order_by(User.last_name, User.first_name, User.id)
        )
        result = await self.db.execute(query)
        return [self._to_response(enrollment, student) for enrollment, student in result.all()]

    async def list_by_student(self, student_id: int) -> list[StudentClassResponse]:
        """List the classes a student sees.

        Only memberships whose class is active are returned; a class the
        teacher has deactivated disappears from the list until reactivated.

        Args:
            student_id: Student identifier.

        Returns:
            Active classes the student is enrolled in, most recent first.
        """
        query = (
            select(Enrollment, Class)
            .join(Class, Class.id == Enrollment.class_id)
            .where(
                Enrollment.student_id == student_id,
                Class.is_active.is_(True),
            )
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
        )
        result = await self.db.execute(query)

        items = []
        for enrollment, class_ in result.all():
            base = ClassResponse(
                id=class_.id,
                title=class_.title,
                description=class_.description,
                duration=class_.duration,
                difficulty=Difficulty(class_.difficulty),
                objectives=list(class_.objectives or []),
                teacher_id=class_.teacher_id,
                is_active=class_.is_active,
                created_at=class_.created_at,
                updated_at=class_.updated_at,
            )
            items.append(
                StudentClassResponse(
                    **base.model_dump(),
                    enrollment_id=enrollment.id,
                    enrolled_at=enrollment.enrolled_at,
                )
            )
        return items

    async def list_students(self) -> list[StudentResponse]:
        """List every student account ordered by last name, first name."""
        query = (
            select(User)
            .where(User.role == UserRole.STUDENT.value)
            .order_by(User.last_name, User.first_name, User.id)
        )
        result = await self.db.execute(query)
        return [self._student_to_response(user) for user in result.scalars().all()]

    async def get_student(self, student_id: int) -> StudentResponse:
        """Get a student account.

        Raises:
            StudentNotFoundError: If no student has this id. Teachers are
                reported as not found too.
        """
        query = select(User).where(
            User.id == student_id,
            User.role == UserRole.STUDENT.value,
        )
        result = await self.db.execute(query)
        user = result.scalar_one_or_none()

        if not user:
            raise StudentNotFoundError(f"Student {student_id} not found")

        return self._student_to_response(user)

    async def is_enrolled(self, student_id: int, class_id: int) -> bool:
        """Check whether a student is enrolled in a class."""
        return await self._get_enrollment(student_id, class_id) is not None

    async def _get_class(self, class_id: int) -> Class:
        """Get class by ID.

        Raises:
            ClassNotFoundError: If not found.
        """
        query = select(Class).where(Class.id == class_id)
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found")

        return class_

    async def _get_student(self, student_id: int) -> User:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If not found.
            InvalidStudentTypeError: If user is not a student.
        """
        query = select(User).where(User.id == student_id)
        result = await self.db.execute(query)
        user = result.scalar_one_or_none()

        if not user:
            raise StudentNotFoundError(f"Student {student_id} not found")

        if user.role != UserRole.STUDENT.value:
            raise InvalidStudentTypeError(f"User {student_id} is not a student")

        return user

    async def _get_enrollment(self, student_id: int, class_id: int) -> Enrollment | None:
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.class_id == class_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    def _to_response(self, enrollment: Enrollment, student: User) -> EnrollmentResponse:
        """Convert enrollment model to response."""
        return EnrollmentResponse(
            id=enrollment.id,
            class_id=enrollment.class_id,
            student_id=enrollment.student_id,
            student_name=f"{student.first_name} {student.last_name}",
            first_name=student.first_name,
            last_name=student.last_name,
            email=student.email,
            enrolled_at=enrollment.enrolled_at,
        )

    def _student_to_response(self, user: User) -> StudentResponse:
        return StudentResponse(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            created_at=user.created_at,
        )
