from typing import Literal
from datetime import datetime
from uuid import UUID
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .users import User
from .course import Course


Progress = Literal['ongoing', 'completed']


class CourseEnrollment(Base):
    __tablename__ = 'course_enrollment'

    # `id` is the enrolled user's id, the pair is the primary key
    id: Mapped[UUID] = mapped_column(ForeignKey(User.id, ondelete='RESTRICT'), primary_key=True)
    course_id: Mapped[UUID] = mapped_column(ForeignKey(Course.id, ondelete='RESTRICT'), primary_key=True)
    progress: Mapped[Progress] = mapped_column(String(16), default='ongoing')
    enrolled_at: Mapped[datetime] = mapped_column(index=True)
    delisted_at: Mapped[datetime | None] = mapped_column(nullable=True)
