from datetime import datetime
from uuid import UUID
from typing import Annotated, Callable, Awaitable
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy import select

import db.postgres
import tables
from services.errors import UnauthorizedError, ForbiddenError
from services.soft_delete import soft_delete_filter


# The gateway in front of the service authenticates the user and forwards the id
async def current_user(
    session_maker: Annotated[async_sessionmaker[AsyncSession], Depends(db.postgres.get_session_maker)],
    x_user_id: Annotated[str | None, Header()] = None
) -> tables.User:
    if not x_user_id:
        raise UnauthorizedError('Unauthorized')

    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise UnauthorizedError('Unauthorized')

    async with session_maker() as session:
        user = await session.scalar(
            select(tables.User)
            .where(soft_delete_filter(tables.User, datetime.now(), tables.User.id == user_id))
        )

    if user is None:
        raise UnauthorizedError('Unauthorized')

    return user


def require_role(*roles: tables.users.Role) -> Callable[..., Awaitable[tables.User]]:
    async def dependency(user: Annotated[tables.User, Depends(current_user)]) -> tables.User:
        if user.role not in roles:
            raise ForbiddenError('Forbidden')
        return user

    return dependency


CurrentUser = Annotated[tables.User, Depends(current_user)]
Admin = Annotated[tables.User, Depends(require_role('admin'))]
Lecturer = Annotated[tables.User, Depends(require_role('lecturer'))]
Student = Annotated[tables.User, Depends(require_role('student'))]
