from datetime import datetime
from typing import Optional

from pydantic import Field

from hive_api.core.schemas import CamelModel


class ConversationCreate(CamelModel):
    participant_id: str


class ConversationOut(CamelModel):
    id: str
    participant1_id: str
    participant2_id: str
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    created_at: datetime


class MessageCreate(CamelModel):
    message: str = Field(min_length=1, max_length=2000)


class MessageOut(CamelModel):
    id: str
    conversation_id: str
    sender_id: str
    receiver_id: str
    message: str
    is_read: bool
    created_at: datetime


class ReadOut(CamelModel):
    updated: int


class AssistantRequest(CamelModel):
    message: str = Field(min_length=1)


class AssistantOut(CamelModel):
    message: str
    timestamp: datetime
