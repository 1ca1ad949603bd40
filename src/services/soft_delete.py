from datetime import datetime
from typing import Any
from sqlalchemy import ColumnElement, and_, or_


def soft_delete_filter(model: Any, now: datetime, *criteria: ColumnElement[bool]) -> ColumnElement[bool]:
    '''
    `deleted_at` is null or still in the future, AND'ed with `criteria`

    Deletion may be scheduled ahead of time, such rows stay visible until the moment passes
    '''
    return and_(
        or_(
            model.deleted_at.is_(None),
            model.deleted_at > now
        ),
        *criteria
    )


def is_active(deleted_at: datetime | None, now: datetime) -> bool:
    return deleted_at is None or deleted_at > now
