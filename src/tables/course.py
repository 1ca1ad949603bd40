from typing import Literal
from datetime import datetime
from uuid import UUID
from decimal import Decimal
from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .users import User
from .category import Category


Status = Literal['draft', 'need-review', 'reviewed', 'published']


class Course(Base):
    __tablename__ = 'course'

    id: Mapped[UUID] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column()
    description: Mapped[str] = mapped_column(default='')
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    language: Mapped[str] = mapped_column(default='Indonesia')
    course_duration: Mapped[int] = mapped_column(default=0)
    estimated_time_per_week: Mapped[int] = mapped_column(default=0)
    cover_image_url: Mapped[str | None] = mapped_column(nullable=True)

    lecturer_id: Mapped[UUID] = mapped_column(ForeignKey(User.id, ondelete='RESTRICT'), index=True)
    category_id: Mapped[UUID] = mapped_column(ForeignKey(Category.id, ondelete='RESTRICT'))

    status: Mapped[Status] = mapped_column(String(16), default='draft', index=True)
    admin_review: Mapped[str | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column()
    updated_at: Mapped[datetime | None] = mapped_column(nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True, index=True)
