"""Celery tasks for the notifications module."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from celery import shared_task

from modules.notifications.models import Notification

logger = structlog.get_logger(__name__)


@shared_task(name="notifications.deliver_notification")
def deliver_notification(
    user_id: str,
    type: str,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
):
    """Persist one notification for ``user_id``."""
    notification = Notification.objects.create(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        data=data or {},
    )
    logger.info(
        "notification.delivered",
        notification_id=str(notification.id),
        user_id=user_id,
        type=type,
    )
    return {"notification_id": str(notification.id)}
