from datetime import datetime
from uuid import UUID
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .users import User
from .course import Course


class Cart(Base):
    __tablename__ = 'cart'

    user_id: Mapped[UUID] = mapped_column(ForeignKey(User.id, ondelete='CASCADE'), primary_key=True)
    course_id: Mapped[UUID] = mapped_column(ForeignKey(Course.id, ondelete='CASCADE'), primary_key=True)
    created_at: Mapped[datetime] = mapped_column()
