# hive_api/modules/chat/service.py
from __future__ import annotations

import logging
import unicodedata
from datetime import datetime
from typing import Optional

from hive_api.core.errors import NotFound, ValidationError, field_error
from hive_api.modules.chat.entities import ChatMessage, Conversation
from hive_api.modules.notifications import entities as notification_types
from hive_api.modules.notifications.service import notify
from hive_api.modules.users.entities import AuthUser
from hive_api.storage.base import Storage

logger = logging.getLogger(__name__)

ASSISTANT_REPLIES = {
    "ola": "Olá! Como posso ajudá-lo hoje? Está procurando por alguma propriedade específica?",
    "ajuda": (
        "Estou aqui para ajudar! Você pode buscar propriedades por localização, "
        "ver detalhes de imóveis ou encontrar prestadores de serviços."
    ),
    "propriedades": (
        "Temos várias propriedades disponíveis! Use o mapa para explorar diferentes "
        "regiões ou digite uma localização específica na busca."
    ),
}
ASSISTANT_DEFAULT = (
    "Interessante! Como posso ajudá-lo com propriedades ou serviços? "
    "Digite sua dúvida e eu terei prazer em ajudar."
)


def _fold(text: str) -> str:
    # "Olá" casa com "ola"
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def assistant_reply(message: str) -> str:
    lower = _fold(message or "")
    for key, reply in ASSISTANT_REPLIES.items():
        if key in lower:
            return reply
    return ASSISTANT_DEFAULT


async def open_conversation(storage: Storage, user: AuthUser, participant_id: str) -> Conversation:
    if participant_id == user.id:
        raise ValidationError("Conversa inválida", [field_error("participantId", "não pode ser você mesmo")])
    if await storage.get_user(participant_id) is None:
        raise NotFound("Usuário não encontrado")
    return await storage.get_or_create_conversation(user.id, participant_id)


async def get_participant_conversation(storage: Storage, user: AuthUser, conversation_id: str) -> Conversation:
    conv = await storage.get_conversation(conversation_id)
    # quem não participa não fica sabendo que a conversa existe
    if conv is None or not conv.has_participant(user.id):
        raise NotFound("Conversa não encontrada")
    return conv


async def list_messages(
    storage: Storage, user: AuthUser, conversation_id: str, after: Optional[datetime] = None
) -> list[ChatMessage]:
    conv = await get_participant_conversation(storage, user, conversation_id)
    return await storage.list_messages(conv.id, after=after)


async def send_message(storage: Storage, user: AuthUser, conversation_id: str, text: str) -> ChatMessage:
    conv = await get_participant_conversation(storage, user, conversation_id)
    receiver_id = conv.other_participant(user.id)
    message = await storage.add_message(ChatMessage(
        conversation_id=conv.id,
        sender_id=user.id,
        receiver_id=receiver_id,
        message=text.strip(),
    ))
    await notify(
        storage,
        receiver_id,
        notification_types.NEW_MESSAGE,
        f"Nova mensagem de {user.name}",
        message.message[:120],
        related_id=conv.id,
    )
    logger.debug("Mensagem %s na conversa %s", message.id, conv.id)
    return message


async def mark_read(storage: Storage, user: AuthUser, conversation_id: str) -> int:
    conv = await get_participant_conversation(storage, user, conversation_id)
    return await storage.mark_messages_read(conv.id, user.id)
