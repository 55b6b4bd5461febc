# hive_api/modules/notifications/entities.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from hive_api.modules.users.entities import new_id
from hive_api.utils.dates import utcnow

NEW_MESSAGE = "new_message"
SUBSCRIPTION = "subscription"
PAYMENT = "payment"


@dataclass(kw_only=True)
class Notification:
    id: str = field(default_factory=new_id)
    user_id: str
    type: str
    title: str
    message: str
    related_id: str | None = None
    is_read: bool = False
    created_at: datetime = field(default_factory=utcnow)
