from typing import Literal
from datetime import datetime
from uuid import UUID
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


Role = Literal['admin', 'lecturer', 'student']


class User(Base):
    __tablename__ = 'users'

    id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column()
    full_name: Mapped[str | None] = mapped_column(nullable=True)
    # Nulled when a lecturer is soft-deleted so the address can be reused
    email: Mapped[str | None] = mapped_column(unique=True, nullable=True)
    role: Mapped[Role] = mapped_column(String(16), index=True)

    nidn_number: Mapped[str | None] = mapped_column(unique=True, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(nullable=True)
    title: Mapped[str | None] = mapped_column(nullable=True)
    users_profile_picture_url: Mapped[str | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column()
    updated_at: Mapped[datetime | None] = mapped_column(nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True, index=True)
