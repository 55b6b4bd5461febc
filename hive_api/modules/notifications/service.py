# hive_api/modules/notifications/service.py
from typing import Optional

from hive_api.modules.notifications.entities import Notification
from hive_api.storage.base import Storage


async def notify(
    storage: Storage,
    user_id: str,
    type: str,
    title: str,
    message: str,
    related_id: Optional[str] = None,
) -> Notification:
    return await storage.add_notification(
        Notification(user_id=user_id, type=type, title=title, message=message, related_id=related_id)
    )
