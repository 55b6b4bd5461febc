from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from hive_api.core.dependencies import AuthContext, get_storage, require_auth
from hive_api.storage.base import Storage
from hive_api.utils.dates import as_utc, utcnow
from . import service
from .schemas import (
    AssistantOut,
    AssistantRequest,
    ConversationCreate,
    ConversationOut,
    MessageCreate,
    MessageOut,
    ReadOut,
)

router = APIRouter()


@router.get("/conversations", response_model=List[ConversationOut])
async def list_conversations(ctx: AuthContext = Depends(require_auth), storage: Storage = Depends(get_storage)):
    return [ConversationOut.model_validate(c) for c in await storage.list_conversations(ctx.user.id)]


@router.post("/conversations", response_model=ConversationOut)
async def open_conversation(
    payload: ConversationCreate,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
):
    conv = await service.open_conversation(storage, ctx.user, payload.participant_id)
    return ConversationOut.model_validate(conv)


@router.get("/conversations/{conversation_id}/messages", response_model=List[MessageOut])
async def list_messages(
    conversation_id: str,
    after: Optional[datetime] = None,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
):
    # polling: o cliente manda o createdAt da última mensagem que já tem
    messages = await service.list_messages(storage, ctx.user, conversation_id, after=as_utc(after))
    return [MessageOut.model_validate(m) for m in messages]


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: str,
    payload: MessageCreate,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
):
    message = await service.send_message(storage, ctx.user, conversation_id, payload.message)
    return MessageOut.model_validate(message)


@router.post("/conversations/{conversation_id}/read", response_model=ReadOut)
async def mark_read(
    conversation_id: str,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
):
    return ReadOut(updated=await service.mark_read(storage, ctx.user, conversation_id))


@router.post("/assistant", response_model=AssistantOut)
async def assistant(payload: AssistantRequest):
    return AssistantOut(message=service.assistant_reply(payload.message), timestamp=utcnow())
