# hive_api/modules/chat/entities.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from hive_api.modules.users.entities import new_id
from hive_api.utils.dates import utcnow


def participant_pair(a: str, b: str) -> tuple[str, str]:
    # ordem canônica: a mesma conversa para (a, b) e (b, a)
    return (a, b) if a <= b else (b, a)


@dataclass(kw_only=True)
class Conversation:
    id: str = field(default_factory=new_id)
    participant1_id: str
    participant2_id: str
    last_message: str | None = None
    last_message_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant1_id, self.participant2_id)

    def other_participant(self, user_id: str) -> str:
        return self.participant2_id if user_id == self.participant1_id else self.participant1_id


@dataclass(kw_only=True)
class ChatMessage:
    id: str = field(default_factory=new_id)
    conversation_id: str
    sender_id: str
    receiver_id: str
    message: str
    is_read: bool = False
    created_at: datetime = field(default_factory=utcnow)
