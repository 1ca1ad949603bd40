import aiokafka
import logging
import anyio

import db.postgres
from .notify_enrollments import enrollment_notification_loop
from settings import kafka_settings


logger = logging.getLogger('course-worker')


async def run():
    db.postgres.init()

    kafka_producer = aiokafka.AIOKafkaProducer(bootstrap_servers=kafka_settings.bootstrap_servers)
    await kafka_producer.start()

    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(enrollment_notification_loop, kafka_producer)

            logger.info('worker is started')
    finally:
        await kafka_producer.stop()
        await db.postgres.dispose()
