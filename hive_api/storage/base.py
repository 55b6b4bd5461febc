# hive_api/storage/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from hive_api.modules.catalog.entities import Plan, ServiceCategory
from hive_api.modules.chat.entities import ChatMessage, Conversation
from hive_api.modules.notifications.entities import Notification
from hive_api.modules.properties.entities import Property
from hive_api.modules.subscriptions.entities import Payment, Subscription
from hive_api.modules.users.entities import AuthUser, Provider


class Storage(ABC):
    """Contrato de persistência usado pelos serviços.

    Implementações devolvem cópias: alterar o objeto retornado não altera o
    estado guardado até que ele seja salvo de novo.
    """

    # --- usuários ---
    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[AuthUser]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[AuthUser]: ...

    @abstractmethod
    async def add_user(self, user: AuthUser) -> AuthUser:
        """Insere; Conflict se o e-mail já estiver em uso."""

    @abstractmethod
    async def save_user(self, user: AuthUser) -> AuthUser:
        """Substitui o registro inteiro (inclusive viewer -> provider)."""

    @abstractmethod
    async def update_user(self, user_id: str, changes: dict) -> Optional[AuthUser]:
        """Grava só os campos em ``changes`` e devolve o usuário atualizado.

        Campos de prestador são ignorados para viewers. None se o usuário
        não existir; Conflict se o novo e-mail já estiver em uso.
        """

    @abstractmethod
    async def list_providers(
        self,
        category: Optional[str] = None,
        document_type: Optional[str] = None,
        city: Optional[str] = None,
    ) -> list[Provider]: ...

    # --- imóveis ---
    @abstractmethod
    async def add_property(self, prop: Property) -> Property: ...

    @abstractmethod
    async def get_property(self, property_id: str) -> Optional[Property]: ...

    @abstractmethod
    async def list_properties(
        self,
        price_type: Optional[str] = None,
        property_type: Optional[str] = None,
        city: Optional[str] = None,
        featured: Optional[bool] = None,
        created_by: Optional[str] = None,
    ) -> list[Property]: ...

    @abstractmethod
    async def count_properties_by_owner(self, owner_id: str) -> int: ...

    @abstractmethod
    async def increment_property_views(self, property_id: str) -> Optional[int]:
        """Incremento atômico; devolve o novo total ou None se não existir."""

    # --- catálogo ---
    @abstractmethod
    async def list_categories(self, audience: Optional[str] = None) -> list[ServiceCategory]: ...

    @abstractmethod
    async def get_category(self, slug: str) -> Optional[ServiceCategory]: ...

    @abstractmethod
    async def save_category(self, category: ServiceCategory) -> ServiceCategory: ...

    @abstractmethod
    async def list_plans(self) -> list[Plan]: ...

    @abstractmethod
    async def get_plan(self, plan_type: str) -> Optional[Plan]: ...

    @abstractmethod
    async def save_plan(self, plan: Plan) -> Plan: ...

    # --- assinaturas / pagamentos ---
    @abstractmethod
    async def add_subscription(self, subscription: Subscription) -> Subscription: ...

    @abstractmethod
    async def save_subscription(self, subscription: Subscription) -> Subscription: ...

    @abstractmethod
    async def get_subscription(self, subscription_id: str) -> Optional[Subscription]: ...

    @abstractmethod
    async def list_subscriptions(self, user_id: str) -> list[Subscription]:
        """Mais recentes primeiro."""

    @abstractmethod
    async def add_payment(self, payment: Payment) -> Payment: ...

    @abstractmethod
    async def get_payment(self, payment_intent_id: str) -> Optional[Payment]: ...

    @abstractmethod
    async def save_payment(self, payment: Payment) -> Payment: ...

    @abstractmethod
    async def claim_payment(self, payment_intent_id: str, status: str) -> Optional[Payment]:
        """pending -> status de forma atômica.

        Devolve o pagamento só para quem fez a transição; entregas repetidas
        do mesmo evento recebem None.
        """

    # --- chat ---
    @abstractmethod
    async def get_or_create_conversation(self, user_a: str, user_b: str) -> Conversation: ...

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]: ...

    @abstractmethod
    async def list_conversations(self, user_id: str) -> list[Conversation]: ...

    @abstractmethod
    async def add_message(self, message: ChatMessage) -> ChatMessage:
        """Acrescenta ao log e atualiza a última mensagem da conversa."""

    @abstractmethod
    async def list_messages(
        self, conversation_id: str, after: Optional[datetime] = None
    ) -> list[ChatMessage]: ...

    @abstractmethod
    async def mark_messages_read(self, conversation_id: str, reader_id: str) -> int: ...

    # --- notificações ---
    @abstractmethod
    async def add_notification(self, notification: Notification) -> Notification: ...

    @abstractmethod
    async def list_notifications(self, user_id: str) -> list[Notification]: ...

    @abstractmethod
    async def mark_notification_read(
        self, notification_id: str, user_id: str
    ) -> Optional[Notification]: ...

    @abstractmethod
    async def count_unread_notifications(self, user_id: str) -> int: ...

    async def close(self) -> None:
        return None
