from .base import Base
from typing import Literal
from datetime import datetime
from uuid import UUID
from decimal import Decimal
from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from .users import User
from .course import Course


Status = Literal['pending', 'completed', 'failed']


class Payment(Base):
    __tablename__ = 'payment'

    id: Mapped[UUID] = mapped_column(primary_key=True)
    invoice_id: Mapped[str] = mapped_column(unique=True, index=True)
    user_id: Mapped[UUID] = mapped_column(ForeignKey(User.id, ondelete='RESTRICT'), index=True)
    course_id: Mapped[UUID] = mapped_column(ForeignKey(Course.id, ondelete='RESTRICT'), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    payment_status: Mapped[Status] = mapped_column(String(16))
    payment_method: Mapped[str | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column()
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
