import asyncio
import json
import logging
import aiokafka
import aiokafka.errors
from datetime import datetime, timedelta
from sqlalchemy import select, nulls_first, or_
from sqlalchemy.ext.asyncio import AsyncSession

import tables
import db.postgres
from settings import settings, kafka_settings


logger = logging.getLogger('course-worker-enrollment-notification-loop')


async def enrollment_notification_loop(kafka_producer: aiokafka.AIOKafkaProducer):
    while True:
        if not await process_next_request(kafka_producer):
            await asyncio.sleep(settings.enrollment_notification_loop_sleep_duration)


async def process_next_request(kafka_producer: aiokafka.AIOKafkaProducer) -> bool:
    '''Returns `False` when there was nothing to pick up'''
    retry_after = datetime.now() - timedelta(seconds=settings.enrollment_notification_loop_sleep_duration)

    async with db.postgres.get_session_maker()() as session:
        request = await session.scalar(
            select(tables.EnrollmentNotificationRequest)
            .where(or_(
                tables.EnrollmentNotificationRequest.processed_at.is_(None),
                tables.EnrollmentNotificationRequest.processed_at < retry_after
            ))
            .order_by(
                nulls_first(tables.EnrollmentNotificationRequest.processed_at.asc()),
                tables.EnrollmentNotificationRequest.created_at.asc()
            )
            .with_for_update(skip_locked=True)
            .limit(1)
        )

        if request is None:
            return False

        if await notify_enrollment(session, request, kafka_producer):
            await session.delete(request)
        else:
            request.processed_at = datetime.now()

        await session.commit()
        return True


async def notify_enrollment(
    session: AsyncSession,
    request: tables.EnrollmentNotificationRequest,
    kafka_producer: aiokafka.AIOKafkaProducer
) -> bool:
    payment = await session.get(tables.Payment, request.payment_id)
    if payment is None:
        logger.warning(f'notification request {request.id} points to non-existent payment {request.payment_id}, ignoring')
        return True

    data = {
        'payment_id': str(payment.id),
        'invoice_id': payment.invoice_id,
        'user_id': str(payment.user_id),
        'course_id': str(payment.course_id),
        'status': payment.payment_status
    }

    try:
        await kafka_producer.send_and_wait(
            topic=kafka_settings.enrollment_topic,
            value=json.dumps(data).encode()
        )
    except aiokafka.errors.KafkaError as e:
        logger.warning(f'couldn\'t send notification about payment {payment.id}: {e!r}')
        return False

    logger.info(f'sent notification about payment {payment.id} to the "{kafka_settings.enrollment_topic}" topic')
    return True
