from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends

from hive_api.core.dependencies import AuthContext, get_storage, require_auth
from hive_api.core.errors import NotFound
from hive_api.core.schemas import CamelModel
from hive_api.storage.base import Storage

router = APIRouter()


class NotificationOut(CamelModel):
    id: str
    type: str
    title: str
    message: str
    related_id: Optional[str] = None
    is_read: bool
    created_at: datetime


class UnreadCountOut(CamelModel):
    count: int


@router.get("", response_model=List[NotificationOut])
async def list_notifications(ctx: AuthContext = Depends(require_auth), storage: Storage = Depends(get_storage)):
    return [NotificationOut.model_validate(n) for n in await storage.list_notifications(ctx.user.id)]


@router.get("/unread-count", response_model=UnreadCountOut)
async def unread_count(ctx: AuthContext = Depends(require_auth), storage: Storage = Depends(get_storage)):
    return UnreadCountOut(count=await storage.count_unread_notifications(ctx.user.id))


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: str,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
):
    notification = await storage.mark_notification_read(notification_id, ctx.user.id)
    if notification is None:
        raise NotFound("Notificação não encontrada")
    return NotificationOut.model_validate(notification)
