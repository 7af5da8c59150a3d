"""Fire-and-forget notification creation.

``NotificationDispatcher.create_notification`` hands the work to the
``notifications.deliver_notification`` task.  Failing to enqueue is logged
and never reaches the caller.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol
from uuid import UUID

import structlog

from modules.notifications.tasks import deliver_notification

logger = structlog.get_logger(__name__)


class INotificationDispatcher(Protocol):
    def create_notification(
        self,
        user_id: UUID,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None: ...


class NotificationDispatcher:
    def create_notification(
        self,
        user_id: UUID,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            deliver_notification.delay(
                str(user_id), str(type), title, message, data or {}
            )
        except Exception:
            logger.exception(
                "notification.dispatch_failed", user_id=str(user_id), type=str(type)
            )
