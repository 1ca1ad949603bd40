import logging
from functools import lru_cache
from fastapi import Depends
from datetime import datetime
from uuid import UUID, uuid4
from decimal import Decimal
from typing import Annotated
from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

import db.postgres
import tables
from settings import settings
from services.errors import NotFoundError, ConflictError, InvalidTransitionError
from services.soft_delete import soft_delete_filter


logger = logging.getLogger('course-api-payment')


class CourseNotFoundError(NotFoundError):
    message = 'Course not found'


class UserNotFoundError(NotFoundError):
    message = 'User not found'


class InvoiceNotFoundError(NotFoundError):
    message = 'Invoice not found'


class AlreadyEnrolledError(ConflictError):
    message = 'User already enrolled in this course'


class PaymentNotPendingError(InvalidTransitionError):
    message = 'Payment is not pending'


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InvoiceInfo(CamelModel):
    invoice_id: str
    payment_id: UUID
    amount: Decimal
    status: tables.payment.Status


class PaymentResult(CamelModel):
    success: bool = True
    payment_id: UUID
    status: tables.payment.Status


class PersonInfo(BaseModel):
    name: str
    full_name: str | None


class InvoiceUserInfo(PersonInfo):
    email: str | None


class InvoiceCourseInfo(BaseModel):
    title: str
    price: Decimal
    cover_image_url: str | None
    lecturer: PersonInfo


class InvoiceDetails(CamelModel):
    invoice_id: str
    amount: Decimal
    status: tables.payment.Status
    payment_method: str | None
    created_at: datetime
    course: InvoiceCourseInfo
    user: InvoiceUserInfo


def generate_invoice_id() -> str:
    return f'{settings.invoice_prefix}{uuid4().hex.upper()}'


@dataclass(frozen=True)
class PaymentService:
    session_maker: async_sessionmaker[AsyncSession]

    async def create_invoice(self, course_id: UUID, user_id: UUID) -> InvoiceInfo:
        now = datetime.now()

        async with self.session_maker() as session, session.begin():
            course = await session.scalar(
                select(tables.Course)
                .where(soft_delete_filter(tables.Course, now, tables.Course.id == course_id))
            )
            if course is None:
                raise CourseNotFoundError()

            user = await session.scalar(
                select(tables.User)
                .where(soft_delete_filter(tables.User, now, tables.User.id == user_id))
            )
            if user is None:
                raise UserNotFoundError()

            # Nothing stops two concurrent requests from both passing this check,
            # confirmation rejects the second one
            enrollment = await session.scalar(
                select(tables.CourseEnrollment)
                .where(
                    tables.CourseEnrollment.id == user_id,
                    tables.CourseEnrollment.course_id == course_id,
                    tables.CourseEnrollment.delisted_at.is_(None)
                )
            )
            if enrollment is not None:
                raise AlreadyEnrolledError()

            payment = tables.Payment(
                id=uuid4(),
                invoice_id=generate_invoice_id(),
                user_id=user_id,
                course_id=course_id,
                amount=course.price,
                payment_status='pending',
                created_at=now
            )
            session.add(payment)

        logger.info(f'issued invoice {payment.invoice_id} for user {user_id}, course {course_id}')

        return InvoiceInfo(
            invoice_id=payment.invoice_id,
            payment_id=payment.id,
            amount=payment.amount,
            status=payment.payment_status
        )

    async def confirm_payment(self, invoice_id: str, payment_method: str) -> PaymentResult:
        now = datetime.now()

        async with self.session_maker() as session, session.begin():
            payment = await session.scalar(
                select(tables.Payment)
                .where(tables.Payment.invoice_id == invoice_id)
                .with_for_update()
            )
            if payment is None:
                raise InvoiceNotFoundError()

            if payment.payment_status == 'completed':
                logger.info(f'invoice {invoice_id} is already completed, nothing to do')
                return PaymentResult(payment_id=payment.id, status=payment.payment_status)

            if payment.payment_status != 'pending':
                logger.warning(f'refusing to confirm invoice {invoice_id} in status "{payment.payment_status}"')
                raise PaymentNotPendingError()

            enrollment = await session.get(
                tables.CourseEnrollment,
                (payment.user_id, payment.course_id),
                with_for_update=True
            )

            if enrollment is None:
                session.add(tables.CourseEnrollment(
                    id=payment.user_id,
                    course_id=payment.course_id,
                    progress='ongoing',
                    enrolled_at=now
                ))
                # There is no row to lock yet, a concurrent confirmation for the pair
                # surfaces as a primary key violation
                try:
                    await session.flush()
                except IntegrityError:
                    logger.warning(f'refusing to confirm invoice {invoice_id}, user {payment.user_id} got enrolled concurrently')
                    raise AlreadyEnrolledError()
            elif enrollment.delisted_at is not None:
                enrollment.delisted_at = None
                enrollment.progress = 'ongoing'
                enrollment.enrolled_at = now
            else:
                # Another invoice for the same pair got confirmed first
                logger.warning(f'refusing to confirm invoice {invoice_id}, user {payment.user_id} is already enrolled')
                raise AlreadyEnrolledError()

            payment.payment_status = 'completed'
            payment.payment_method = payment_method
            payment.completed_at = now

            await session.execute(
                delete(tables.Cart)
                .where(
                    tables.Cart.user_id == payment.user_id,
                    tables.Cart.course_id == payment.course_id
                )
            )

            session.add(tables.EnrollmentNotificationRequest(
                id=uuid4(),
                payment_id=payment.id,
                created_at=now
            ))

        logger.info(f'invoice {invoice_id} completed via "{payment_method}", user {payment.user_id} enrolled')

        return PaymentResult(payment_id=payment.id, status=payment.payment_status)

    async def fail_payment(self, invoice_id: str) -> PaymentResult:
        async with self.session_maker() as session, session.begin():
            payment = await session.scalar(
                select(tables.Payment)
                .where(tables.Payment.invoice_id == invoice_id)
                .with_for_update()
            )
            if payment is None:
                raise InvoiceNotFoundError()

            if payment.payment_status == 'completed':
                logger.warning(f'refusing to fail completed invoice {invoice_id}')
                raise PaymentNotPendingError()

            if payment.payment_status == 'pending':
                payment.payment_status = 'failed'
                logger.info(f'invoice {invoice_id} marked as failed')

        return PaymentResult(payment_id=payment.id, status=payment.payment_status)

    async def get_invoice(self, invoice_id: str) -> InvoiceDetails:
        lecturer = aliased(tables.User)

        async with self.session_maker() as session:
            row = (await session.execute(
                select(tables.Payment, tables.Course, tables.User, lecturer)
                .join(tables.Course, tables.Course.id == tables.Payment.course_id)
                .join(tables.User, tables.User.id == tables.Payment.user_id)
                .join(lecturer, lecturer.id == tables.Course.lecturer_id)
                .where(tables.Payment.invoice_id == invoice_id)
            )).one_or_none()

        if row is None:
            raise InvoiceNotFoundError()

        payment, course, user, course_lecturer = row.tuple()

        return InvoiceDetails(
            invoice_id=payment.invoice_id,
            amount=payment.amount,
            status=payment.payment_status,
            payment_method=payment.payment_method,
            created_at=payment.created_at,
            course=InvoiceCourseInfo(
                title=course.title,
                price=course.price,
                cover_image_url=course.cover_image_url,
                lecturer=PersonInfo(name=course_lecturer.name, full_name=course_lecturer.full_name)
            ),
            user=InvoiceUserInfo(name=user.name, full_name=user.full_name, email=user.email)
        )


@lru_cache
def get_payment_service(
    session_maker: Annotated[async_sessionmaker[AsyncSession], Depends(db.postgres.get_session_maker)]
) -> PaymentService:
    return PaymentService(session_maker=session_maker)
