import logging
from functools import lru_cache
from fastapi import Depends
from datetime import datetime
from uuid import UUID
from decimal import Decimal
from typing import Annotated, Literal
from dataclasses import dataclass
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy import select

import db.postgres
import tables
from services.errors import NotFoundError, ForbiddenError, InvalidTransitionError
from services.soft_delete import soft_delete_filter


logger = logging.getLogger('course-api-course')


StatusFilter = Literal['all', 'draft', 'need-review', 'reviewed', 'published']
SortBy = Literal['newest', 'oldest']


# target status -> statuses it may be reached from
ALLOWED_TRANSITIONS: dict[tables.course.Status, frozenset[tables.course.Status]] = {
    'need-review': frozenset({'draft'}),
    'reviewed': frozenset({'need-review', 'reviewed'}),
    'published': frozenset({'reviewed', 'published'}),
}


class CourseNotFoundError(NotFoundError):
    message = 'Course not found'


class InvalidCourseTransitionError(InvalidTransitionError):
    def __init__(self, current: str, target: str):
        super().__init__(f'Course in status "{current}" can\'t be moved to "{target}"')
        self.current = current
        self.target = target


class CourseReviewInfo(BaseModel):
    id: UUID
    admin_review: str | None
    title: str
    status: tables.course.Status


class PublicCourse(BaseModel):
    id: UUID
    title: str
    description: str
    price: Decimal
    language: str
    course_duration: int
    estimated_time_per_week: int
    cover_image_url: str | None
    lecturer_id: UUID
    category_id: UUID
    status: tables.course.Status


class CourseItem(PublicCourse):
    admin_review: str | None
    created_at: datetime
    updated_at: datetime | None
    deleted_at: datetime | None
    lecturer_name: str
    category_name: str


class CategoryItem(BaseModel):
    id: UUID
    name: str


def check_transition(current: tables.course.Status, target: tables.course.Status):
    if current not in ALLOWED_TRANSITIONS[target]:
        raise InvalidCourseTransitionError(current, target)


def _course_item(course: tables.Course, lecturer_name: str, category_name: str) -> CourseItem:
    return CourseItem(
        id=course.id,
        title=course.title,
        description=course.description,
        price=course.price,
        language=course.language,
        course_duration=course.course_duration,
        estimated_time_per_week=course.estimated_time_per_week,
        cover_image_url=course.cover_image_url,
        lecturer_id=course.lecturer_id,
        category_id=course.category_id,
        status=course.status,
        admin_review=course.admin_review,
        created_at=course.created_at,
        updated_at=course.updated_at,
        deleted_at=course.deleted_at,
        lecturer_name=lecturer_name,
        category_name=category_name
    )


@dataclass(frozen=True)
class CourseService:
    session_maker: async_sessionmaker[AsyncSession]

    async def _move(
        self,
        course_id: UUID,
        target: tables.course.Status,
        admin_review: str | None = None,
        lecturer_id: UUID | None = None
    ) -> CourseReviewInfo:
        now = datetime.now()

        async with self.session_maker() as session, session.begin():
            course = await session.scalar(
                select(tables.Course)
                .where(soft_delete_filter(tables.Course, now, tables.Course.id == course_id))
                .with_for_update()
            )
            if course is None:
                raise CourseNotFoundError()

            if lecturer_id is not None and course.lecturer_id != lecturer_id:
                raise ForbiddenError('Course belongs to another lecturer')

            try:
                check_transition(course.status, target)
            except InvalidCourseTransitionError as e:
                logger.warning(f'course {course_id}: {e}')
                raise

            previous = course.status
            course.status = target
            if admin_review is not None:
                course.admin_review = admin_review
            course.updated_at = now

        if previous == target:
            logger.info(f'course {course_id} is already "{target}", status unchanged')
        else:
            logger.info(f'course {course_id} moved from "{previous}" to "{target}"')

        return CourseReviewInfo(
            id=course.id,
            admin_review=course.admin_review,
            title=course.title,
            status=course.status
        )

    async def submit_for_review(self, course_id: UUID, lecturer_id: UUID) -> CourseReviewInfo:
        return await self._move(course_id, 'need-review', lecturer_id=lecturer_id)

    async def submit_review(self, course_id: UUID, admin_review: str) -> CourseReviewInfo:
        return await self._move(course_id, 'reviewed', admin_review=admin_review)

    async def publish(self, course_id: UUID) -> CourseReviewInfo:
        return await self._move(course_id, 'published')

    async def list_courses(self, status_filter: StatusFilter = 'all', sort_by: SortBy = 'newest') -> list[CourseItem]:
        criteria = [] if status_filter == 'all' else [tables.Course.status == status_filter]
        order_by = tables.Course.created_at.asc() if sort_by == 'oldest' else tables.Course.created_at.desc()

        async with self.session_maker() as session:
            rows = (await session.execute(
                select(tables.Course, tables.User.name, tables.Category.name)
                .join(tables.User, tables.User.id == tables.Course.lecturer_id)
                .join(tables.Category, tables.Category.id == tables.Course.category_id)
                .where(soft_delete_filter(tables.Course, datetime.now(), *criteria))
                .order_by(order_by)
            )).all()

        return [_course_item(*row.tuple()) for row in rows]

    async def list_lecturer_courses(
        self,
        lecturer_id: UUID,
        status_filter: StatusFilter = 'all',
        sort_by: SortBy = 'newest'
    ) -> list[CourseItem]:
        query = (
            select(tables.Course, tables.User.name, tables.Category.name)
            .join(tables.User, tables.User.id == tables.Course.lecturer_id)
            .join(tables.Category, tables.Category.id == tables.Course.category_id)
            .where(
                tables.Course.lecturer_id == lecturer_id,
                tables.Course.deleted_at.is_(None)
            )
            .order_by(tables.Course.created_at.asc() if sort_by == 'oldest' else tables.Course.created_at.desc())
        )
        if status_filter != 'all':
            query = query.where(tables.Course.status == status_filter)

        async with self.session_maker() as session:
            rows = (await session.execute(query)).all()

        return [_course_item(*row.tuple()) for row in rows]

    async def get_published_course(self, course_id: UUID) -> PublicCourse:
        async with self.session_maker() as session:
            course = await session.scalar(
                select(tables.Course)
                .where(
                    tables.Course.id == course_id,
                    tables.Course.deleted_at.is_(None),
                    tables.Course.status == 'published'
                )
            )

        if course is None:
            raise CourseNotFoundError('Not found')

        return PublicCourse(
            id=course.id,
            title=course.title,
            description=course.description,
            price=course.price,
            language=course.language,
            course_duration=course.course_duration,
            estimated_time_per_week=course.estimated_time_per_week,
            cover_image_url=course.cover_image_url,
            lecturer_id=course.lecturer_id,
            category_id=course.category_id,
            status=course.status
        )

    async def list_categories(self) -> list[CategoryItem]:
        async with self.session_maker() as session:
            rows = (await session.execute(
                select(tables.Category.id, tables.Category.name)
                .where(tables.Category.deleted_at.is_(None))
                .order_by(tables.Category.name)
            )).all()

        return [CategoryItem(id=id, name=name) for id, name in rows]


@lru_cache
def get_course_service(
    session_maker: Annotated[async_sessionmaker[AsyncSession], Depends(db.postgres.get_session_maker)]
) -> CourseService:
    return CourseService(session_maker=session_maker)
