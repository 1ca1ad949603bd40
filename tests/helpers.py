from uuid import UUID, uuid4
from decimal import Decimal
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

import tables


# Not fixtures, plain coroutines are easier to parametrize

async def create_user(
    session_maker: async_sessionmaker[AsyncSession],
    role: tables.users.Role = 'student',
    name: str = 'user',
    full_name: str | None = None,
    email: str | None = None,
    nidn_number: str | None = None,
    created_at: datetime | None = None,
    deleted_at: datetime | None = None
) -> tables.User:
    user = tables.User(
        id=uuid4(),
        name=name,
        full_name=full_name if full_name is not None else name,
        email=email if email is not None else f'{name}-{uuid4().hex[:8]}@example.com',
        role=role,
        nidn_number=nidn_number,
        created_at=created_at or datetime.now(),
        deleted_at=deleted_at
    )
    async with session_maker() as session, session.begin():
        session.add(user)
    return user


async def create_category(session_maker: async_sessionmaker[AsyncSession], name: str) -> tables.Category:
    category = tables.Category(id=uuid4(), name=name)
    async with session_maker() as session, session.begin():
        session.add(category)
    return category


async def create_course(
    session_maker: async_sessionmaker[AsyncSession],
    lecturer_id: UUID,
    category_id: UUID,
    title: str = 'Dasar-Dasar Investasi Saham',
    price: Decimal | int = 150000,
    status: tables.course.Status = 'published',
    created_at: datetime | None = None,
    deleted_at: datetime | None = None
) -> tables.Course:
    course = tables.Course(
        id=uuid4(),
        title=title,
        description='Cuius adeptione cupis',
        price=Decimal(price),
        language='Indonesia',
        course_duration=4,
        estimated_time_per_week=5,
        lecturer_id=lecturer_id,
        category_id=category_id,
        status=status,
        created_at=created_at or datetime.now(),
        deleted_at=deleted_at
    )
    async with session_maker() as session, session.begin():
        session.add(course)
    return course


async def create_enrollment(
    session_maker: async_sessionmaker[AsyncSession],
    user_id: UUID,
    course_id: UUID,
    delisted_at: datetime | None = None
):
    async with session_maker() as session, session.begin():
        session.add(tables.CourseEnrollment(
            id=user_id,
            course_id=course_id,
            progress='ongoing',
            enrolled_at=datetime.now(),
            delisted_at=delisted_at
        ))


async def put_in_cart(session_maker: async_sessionmaker[AsyncSession], user_id: UUID, course_id: UUID):
    async with session_maker() as session, session.begin():
        session.add(tables.Cart(user_id=user_id, course_id=course_id, created_at=datetime.now()))


async def create_payment(
    session_maker: async_sessionmaker[AsyncSession],
    user_id: UUID,
    course_id: UUID,
    invoice_id: str,
    amount: Decimal | int = 150000,
    payment_status: tables.payment.Status = 'pending'
) -> tables.Payment:
    payment = tables.Payment(
        id=uuid4(),
        invoice_id=invoice_id,
        user_id=user_id,
        course_id=course_id,
        amount=Decimal(amount),
        payment_status=payment_status,
        created_at=datetime.now()
    )
    async with session_maker() as session, session.begin():
        session.add(payment)
    return payment


async def count(session_maker: async_sessionmaker[AsyncSession], table, *criteria) -> int:
    async with session_maker() as session:
        return await session.scalar(select(func.count()).select_from(table).where(*criteria)) or 0


async def get_payment(session_maker: async_sessionmaker[AsyncSession], invoice_id: str) -> tables.Payment | None:
    async with session_maker() as session:
        return await session.scalar(select(tables.Payment).where(tables.Payment.invoice_id == invoice_id))
