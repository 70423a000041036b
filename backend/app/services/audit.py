from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog
from app.models.user import User

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    *,
    user: User | None,
    action: str,
    item: str,
    entity_type: str | None = None,
) -> None:
    """Record who did what. Called after the main commit; never raises."""
    record = ActivityLog(
        user_id=user.id if user is not None else None,
        action=action,
        item=item[:500],
        entity_type=entity_type,
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("activity_log_failed action=%s item=%s", action, item, exc_info=True)
