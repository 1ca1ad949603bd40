import logging
import math
from functools import lru_cache
from fastapi import Depends
from datetime import datetime
from uuid import UUID
from typing import Annotated, Generic, TypeVar
from dataclasses import dataclass
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError

import db.postgres
import tables
from settings import settings
from services.errors import NotFoundError, ConflictError
from services.payment import CamelModel
from services.soft_delete import soft_delete_filter, is_active


logger = logging.getLogger('course-api-users')


class LecturerNotFoundError(NotFoundError):
    message = 'Lecturer not found'


class StudentNotFoundError(NotFoundError):
    message = 'Student not found'


class LecturerConflictError(ConflictError):
    message = 'Email or NIDN number is already taken'


class Pagination(CamelModel):
    total_count: int
    total_pages: int
    current_page: int
    page_size: int


T = TypeVar('T')


class Page(BaseModel, Generic[T]):
    data: list[T]
    pagination: Pagination


class StudentRow(BaseModel):
    id: UUID
    full_name: str | None
    email: str | None
    created_at: datetime
    deleted_at: datetime | None
    active: bool
    enrolled_course_ids: list[UUID]


class LecturerRow(BaseModel):
    id: UUID
    full_name: str | None
    nidn_number: str | None
    email: str | None
    created_at: datetime


class LecturerBrief(BaseModel):
    id: UUID
    name: str
    email: str | None
    role: tables.users.Role


class Lecturer(BaseModel):
    id: UUID
    name: str
    full_name: str | None
    email: str | None
    role: tables.users.Role
    nidn_number: str | None
    phone_number: str | None
    title: str | None
    users_profile_picture_url: str | None
    created_at: datetime
    updated_at: datetime | None
    deleted_at: datetime | None


class LecturerUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3, pattern=r'^[^@\s]+@[^@\s]+$')
    nidn_number: str | None = None
    phone_number: str | None = None
    title: str | None = None
    users_profile_picture_url: str | None = None


def _prefix_relevance(value: str | None, keyword: str) -> int:
    if value is None:
        return 0
    if value == keyword:
        return 100
    if value.startswith(keyword):
        return 50
    if keyword in value:
        return 25
    return 0


def _name_relevance(full_name: str | None, keyword: str) -> int:
    return 10 if full_name and keyword.lower() in full_name.lower() else 0


def student_relevance(email: str | None, full_name: str | None, keyword: str) -> int:
    return _prefix_relevance(email, keyword) + _name_relevance(full_name, keyword)


def lecturer_relevance(nidn_number: str | None, full_name: str | None, keyword: str) -> int:
    return _prefix_relevance(nidn_number, keyword) + _name_relevance(full_name, keyword)


def _pagination(total_count: int, page: int, page_size: int) -> Pagination:
    return Pagination(
        total_count=total_count,
        total_pages=math.ceil(total_count / page_size),
        current_page=page,
        page_size=page_size
    )


def _lecturer(user: tables.User) -> Lecturer:
    return Lecturer(
        id=user.id,
        name=user.name,
        full_name=user.full_name,
        email=user.email,
        role=user.role,
        nidn_number=user.nidn_number,
        phone_number=user.phone_number,
        title=user.title,
        users_profile_picture_url=user.users_profile_picture_url,
        created_at=user.created_at,
        updated_at=user.updated_at,
        deleted_at=user.deleted_at
    )


@dataclass(frozen=True)
class UserService:
    session_maker: async_sessionmaker[AsyncSession]

    async def list_students(self, page: int = 1, keyword: str | None = None, page_size: int | None = None) -> Page[StudentRow]:
        '''
        Lists students, soft-deleted ones included so they can be restored

        With a keyword the whole match set is ranked in memory by relevance
        and sliced afterwards, otherwise paging happens in the database
        '''
        page = max(page, 1)
        if page_size not in settings.student_page_sizes:
            page_size = settings.default_student_page_size

        criteria = [tables.User.role == 'student']
        keyword = (keyword or '').strip()
        if keyword:
            criteria.append(or_(
                tables.User.full_name.icontains(keyword, autoescape=True),
                tables.User.email.icontains(keyword, autoescape=True)
            ))

        offset = (page - 1) * page_size

        async with self.session_maker() as session:
            total_count = await session.scalar(select(func.count()).select_from(tables.User).where(*criteria)) or 0

            query = select(tables.User).where(*criteria)
            if keyword:
                users = list((await session.scalars(query)).all())
                users.sort(key=lambda u: (-student_relevance(u.email, u.full_name, keyword), u.created_at))
                users = users[offset:offset + page_size]
            else:
                users = list((await session.scalars(
                    query
                    .order_by(tables.User.created_at.asc())
                    .offset(offset)
                    .limit(page_size)
                )).all())

            enrolled: dict[UUID, list[UUID]] = {user.id: [] for user in users}
            if users:
                for user_id, course_id in (await session.execute(
                    select(tables.CourseEnrollment.id, tables.CourseEnrollment.course_id)
                    .where(
                        tables.CourseEnrollment.id.in_(list(enrolled)),
                        tables.CourseEnrollment.delisted_at.is_(None)
                    )
                )).all():
                    enrolled[user_id].append(course_id)

        now = datetime.now()

        return Page[StudentRow](
            data=[
                StudentRow(
                    id=user.id,
                    full_name=user.full_name,
                    email=user.email,
                    created_at=user.created_at,
                    deleted_at=user.deleted_at,
                    active=is_active(user.deleted_at, now),
                    enrolled_course_ids=enrolled[user.id]
                )
                for user in users
            ],
            pagination=_pagination(total_count, page, page_size)
        )

    async def list_lecturers(self, page: int = 1, keyword: str | None = None) -> Page[LecturerRow]:
        page = max(page, 1)
        page_size = settings.lecturer_page_size

        criteria = [tables.User.role == 'lecturer']
        keyword = (keyword or '').strip()
        rank = False
        if keyword.isdigit():
            criteria.append(or_(
                tables.User.nidn_number.startswith(keyword, autoescape=True),
                tables.User.full_name.icontains(keyword, autoescape=True)
            ))
            rank = True
        elif keyword:
            criteria.append(tables.User.full_name.icontains(keyword, autoescape=True))

        where = soft_delete_filter(tables.User, datetime.now(), *criteria)
        offset = (page - 1) * page_size

        async with self.session_maker() as session:
            total_count = await session.scalar(select(func.count()).select_from(tables.User).where(where)) or 0

            query = select(tables.User).where(where)
            if rank:
                users = list((await session.scalars(query)).all())
                users.sort(key=lambda u: u.created_at, reverse=True)
                users.sort(key=lambda u: lecturer_relevance(u.nidn_number, u.full_name, keyword), reverse=True)
                users = users[offset:offset + page_size]
            else:
                users = list((await session.scalars(
                    query
                    .order_by(tables.User.created_at.desc())
                    .offset(offset)
                    .limit(page_size)
                )).all())

        return Page[LecturerRow](
            data=[
                LecturerRow(
                    id=user.id,
                    full_name=user.full_name,
                    nidn_number=user.nidn_number,
                    email=user.email,
                    created_at=user.created_at
                )
                for user in users
            ],
            pagination=_pagination(total_count, page, page_size)
        )

    async def search_lecturers(self, q: str | None = None) -> list[LecturerBrief]:
        query = (
            select(tables.User)
            .where(
                tables.User.deleted_at.is_(None),
                tables.User.role == 'lecturer'
            )
            .order_by(tables.User.name)
        )
        if q:
            query = query.where(tables.User.name.icontains(q, autoescape=True))

        async with self.session_maker() as session:
            users = (await session.scalars(query)).all()

        return [LecturerBrief(id=u.id, name=u.name, email=u.email, role=u.role) for u in users]

    async def get_lecturer(self, lecturer_id: UUID) -> Lecturer:
        async with self.session_maker() as session:
            user = await session.scalar(
                select(tables.User)
                .where(soft_delete_filter(
                    tables.User,
                    datetime.now(),
                    tables.User.id == lecturer_id,
                    tables.User.role == 'lecturer'
                ))
            )

        if user is None:
            raise LecturerNotFoundError()

        return _lecturer(user)

    async def update_lecturer(self, lecturer_id: UUID, changes: LecturerUpdate) -> Lecturer:
        '''Only the fields present in `changes` are written'''
        now = datetime.now()

        async with self.session_maker() as session, session.begin():
            user = await session.scalar(
                select(tables.User)
                .where(soft_delete_filter(
                    tables.User,
                    now,
                    tables.User.id == lecturer_id,
                    tables.User.role == 'lecturer'
                ))
                .with_for_update()
            )
            if user is None:
                raise LecturerNotFoundError()

            for field, value in changes.model_dump(exclude_unset=True).items():
                setattr(user, field, value)
            user.updated_at = now

            try:
                await session.flush()
            except IntegrityError:
                logger.warning(f'refusing to update lecturer {lecturer_id}, email or NIDN number is taken')
                raise LecturerConflictError()

        logger.info(f'lecturer {lecturer_id} updated')

        return _lecturer(user)

    async def delete_lecturer(self, lecturer_id: UUID) -> Lecturer:
        now = datetime.now()

        async with self.session_maker() as session, session.begin():
            user = await session.scalar(
                select(tables.User)
                .where(soft_delete_filter(
                    tables.User,
                    now,
                    tables.User.id == lecturer_id,
                    tables.User.role == 'lecturer'
                ))
                .with_for_update()
            )
            if user is None:
                raise LecturerNotFoundError()

            user.email = None
            user.deleted_at = now

        logger.info(f'lecturer {lecturer_id} soft-deleted')

        return _lecturer(user)

    async def set_student_active(self, student_id: UUID, active: bool):
        async with self.session_maker() as session, session.begin():
            user = await session.scalar(
                select(tables.User)
                .where(tables.User.id == student_id, tables.User.role == 'student')
                .with_for_update()
            )
            if user is None:
                raise StudentNotFoundError()

            user.deleted_at = None if active else datetime.now()

        logger.info(f"student {student_id} {'restored' if active else 'deactivated'}")


@lru_cache
def get_user_service(
    session_maker: Annotated[async_sessionmaker[AsyncSession], Depends(db.postgres.get_session_maker)]
) -> UserService:
    return UserService(session_maker=session_maker)
