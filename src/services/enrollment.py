import logging
from functools import lru_cache
from fastapi import Depends
from datetime import datetime
from uuid import UUID
from decimal import Decimal
from typing import Annotated
from dataclasses import dataclass
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy import select

import db.postgres
import tables
from services.payment import AlreadyEnrolledError, CourseNotFoundError


logger = logging.getLogger('course-api-enrollment')


class CartItem(BaseModel):
    id: UUID
    title: str
    price: Decimal
    cover_image_url: str | None


class EnrolledCourse(BaseModel):
    course_id: UUID
    title: str
    cover_image_url: str | None
    lecturer_name: str
    lecturer_full_name: str | None
    course_status: tables.course.Status
    progress: tables.course_enrollment.Progress
    enrolled_at: datetime


@dataclass(frozen=True)
class EnrollmentService:
    session_maker: async_sessionmaker[AsyncSession]

    async def add_to_cart(self, user_id: UUID, course_id: UUID) -> list[CartItem]:
        async with self.session_maker() as session, session.begin():
            course = await session.scalar(
                select(tables.Course)
                .where(
                    tables.Course.id == course_id,
                    tables.Course.deleted_at.is_(None),
                    tables.Course.status == 'published'
                )
            )
            if course is None:
                raise CourseNotFoundError()

            enrollment = await session.get(tables.CourseEnrollment, (user_id, course_id))
            if enrollment is not None and enrollment.delisted_at is None:
                raise AlreadyEnrolledError()

            if await session.get(tables.Cart, (user_id, course_id)) is None:
                session.add(tables.Cart(user_id=user_id, course_id=course_id, created_at=datetime.now()))
                logger.info(f'course {course_id} added to cart of user {user_id}')

        return await self.list_cart(user_id)

    async def list_cart(self, user_id: UUID) -> list[CartItem]:
        async with self.session_maker() as session:
            courses = (await session.scalars(
                select(tables.Course)
                .join(tables.Cart, tables.Cart.course_id == tables.Course.id)
                .where(tables.Cart.user_id == user_id)
                .order_by(tables.Cart.created_at)
            )).all()

        return [
            CartItem(id=c.id, title=c.title, price=c.price, cover_image_url=c.cover_image_url)
            for c in courses
        ]

    async def list_enrollments(self, user_id: UUID) -> list[EnrolledCourse]:
        async with self.session_maker() as session:
            rows = (await session.execute(
                select(tables.CourseEnrollment, tables.Course, tables.User)
                .join(tables.Course, tables.Course.id == tables.CourseEnrollment.course_id)
                .join(tables.User, tables.User.id == tables.Course.lecturer_id)
                .where(
                    tables.CourseEnrollment.id == user_id,
                    tables.CourseEnrollment.delisted_at.is_(None),
                    tables.Course.deleted_at.is_(None)
                )
                .order_by(tables.CourseEnrollment.enrolled_at.desc())
            )).all()

        return [
            EnrolledCourse(
                course_id=course.id,
                title=course.title,
                cover_image_url=course.cover_image_url,
                lecturer_name=lecturer.name,
                lecturer_full_name=lecturer.full_name,
                course_status=course.status,
                progress=enrollment.progress,
                enrolled_at=enrollment.enrolled_at
            )
            for enrollment, course, lecturer in (row.tuple() for row in rows)
        ]


@lru_cache
def get_enrollment_service(
    session_maker: Annotated[async_sessionmaker[AsyncSession], Depends(db.postgres.get_session_maker)]
) -> EnrollmentService:
    return EnrollmentService(session_maker=session_maker)
