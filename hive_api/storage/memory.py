# hive_api/storage/memory.py
from __future__ import annotations

import copy
import threading
from datetime import datetime
from typing import Optional

from hive_api.core.errors import Conflict, NotFound
from hive_api.modules.catalog.entities import Plan, ServiceCategory
from hive_api.modules.chat.entities import ChatMessage, Conversation, participant_pair
from hive_api.modules.notifications.entities import Notification
from hive_api.modules.properties.entities import Property
from hive_api.modules.subscriptions.entities import PAYMENT_PENDING, Payment, Subscription
from hive_api.modules.users.entities import PROVIDER_ONLY_FIELDS, AuthUser, Provider
from hive_api.storage.base import Storage


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


class MemoryStorage(Storage):
    """Tudo em dicionários, protegido por um único lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: dict[str, AuthUser] = {}
        self._properties: dict[str, Property] = {}
        self._categories: dict[str, ServiceCategory] = {}
        self._plans: dict[str, Plan] = {}
        self._subscriptions: dict[str, Subscription] = {}
        self._payments: dict[str, Payment] = {}
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, list[ChatMessage]] = {}
        self._notifications: dict[str, Notification] = {}

    # --- usuários ---
    async def get_user(self, user_id):
        with self._lock:
            return copy.deepcopy(self._users.get(user_id))

    async def get_user_by_email(self, email):
        key = (email or "").strip().lower()
        with self._lock:
            for u in self._users.values():
                if u.email == key:
                    return copy.deepcopy(u)
        return None

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return any(u.email == email and u.id != exclude_id for u in self._users.values())

    async def add_user(self, user):
        with self._lock:
            if self._email_taken(user.email):
                raise Conflict("Email já está em uso")
            self._users[user.id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    async def save_user(self, user):
        with self._lock:
            if user.id not in self._users:
                raise NotFound("Usuário não encontrado")
            if self._email_taken(user.email, exclude_id=user.id):
                raise Conflict("Email já está em uso")
            self._users[user.id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    async def update_user(self, user_id, changes):
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            email = changes.get("email")
            if email is not None and self._email_taken(email, exclude_id=user_id):
                raise Conflict("Email já está em uso")
            for attr, value in changes.items():
                if attr in PROVIDER_ONLY_FIELDS and not isinstance(user, Provider):
                    continue
                if not hasattr(user, attr):
                    raise ValueError(f"Campo desconhecido: {attr}")
                setattr(user, attr, copy.deepcopy(value))
            return copy.deepcopy(user)

    async def list_providers(self, category=None, document_type=None, city=None):
        with self._lock:
            items = [u for u in self._users.values() if isinstance(u, Provider) and u.is_active]
            if category:
                items = [u for u in items if category in u.categories]
            if document_type:
                items = [u for u in items if u.document_type == document_type.upper()]
            if city:
                items = [u for u in items if _contains(u.city, city) or _contains(u.location, city)]
            items.sort(key=lambda u: u.created_at)
            return copy.deepcopy(items)

    # --- imóveis ---
    async def add_property(self, prop):
        with self._lock:
            self._properties[prop.id] = copy.deepcopy(prop)
        return copy.deepcopy(prop)

    async def get_property(self, property_id):
        with self._lock:
            return copy.deepcopy(self._properties.get(property_id))

    async def list_properties(self, price_type=None, property_type=None, city=None,
                              featured=None, created_by=None):
        with self._lock:
            items = list(self._properties.values())
            if price_type:
                items = [p for p in items if p.price_type == price_type]
            if property_type:
                items = [p for p in items if p.property_type == property_type]
            if city:
                items = [p for p in items if _contains(p.location, city)]
            if featured is not None:
                items = [p for p in items if p.featured == featured]
            if created_by:
                items = [p for p in items if p.created_by == created_by]
            items.sort(key=lambda p: p.created_at, reverse=True)
            return copy.deepcopy(items)

    async def count_properties_by_owner(self, owner_id):
        with self._lock:
            return sum(1 for p in self._properties.values() if p.created_by == owner_id)

    async def increment_property_views(self, property_id):
        with self._lock:
            prop = self._properties.get(property_id)
            if prop is None:
                return None
            prop.views += 1
            return prop.views

    # --- catálogo ---
    async def list_categories(self, audience=None):
        with self._lock:
            items = [c for c in self._categories.values() if audience is None or c.audience == audience]
            return copy.deepcopy(items)

    async def get_category(self, slug):
        with self._lock:
            return copy.deepcopy(self._categories.get(slug))

    async def save_category(self, category):
        with self._lock:
            self._categories[category.slug] = copy.deepcopy(category)
        return copy.deepcopy(category)

    async def list_plans(self):
        with self._lock:
            return copy.deepcopy(sorted(self._plans.values(), key=lambda p: p.type))

    async def get_plan(self, plan_type):
        with self._lock:
            return copy.deepcopy(self._plans.get(plan_type))

    async def save_plan(self, plan):
        with self._lock:
            self._plans[plan.type] = copy.deepcopy(plan)
        return copy.deepcopy(plan)

    # --- assinaturas / pagamentos ---
    async def add_subscription(self, subscription):
        with self._lock:
            self._subscriptions[subscription.id] = copy.deepcopy(subscription)
        return copy.deepcopy(subscription)

    async def save_subscription(self, subscription):
        with self._lock:
            if subscription.id not in self._subscriptions:
                raise NotFound("Assinatura não encontrada")
            self._subscriptions[subscription.id] = copy.deepcopy(subscription)
        return copy.deepcopy(subscription)

    async def get_subscription(self, subscription_id):
        with self._lock:
            return copy.deepcopy(self._subscriptions.get(subscription_id))

    async def list_subscriptions(self, user_id):
        with self._lock:
            items = [s for s in self._subscriptions.values() if s.user_id == user_id]
            items.sort(key=lambda s: s.created_at, reverse=True)
            return copy.deepcopy(items)

    async def add_payment(self, payment):
        with self._lock:
            if payment.payment_intent_id in self._payments:
                raise Conflict("Pagamento já registrado")
            self._payments[payment.payment_intent_id] = copy.deepcopy(payment)
        return copy.deepcopy(payment)

    async def get_payment(self, payment_intent_id):
        with self._lock:
            return copy.deepcopy(self._payments.get(payment_intent_id))

    async def save_payment(self, payment):
        with self._lock:
            self._payments[payment.payment_intent_id] = copy.deepcopy(payment)
        return copy.deepcopy(payment)

    async def claim_payment(self, payment_intent_id, status):
        with self._lock:
            payment = self._payments.get(payment_intent_id)
            if payment is None or payment.status != PAYMENT_PENDING:
                return None
            payment.status = status
            return copy.deepcopy(payment)

    # --- chat ---
    async def get_or_create_conversation(self, user_a, user_b):
        p1, p2 = participant_pair(user_a, user_b)
        with self._lock:
            for conv in self._conversations.values():
                if (conv.participant1_id, conv.participant2_id) == (p1, p2):
                    return copy.deepcopy(conv)
            conv = Conversation(participant1_id=p1, participant2_id=p2)
            self._conversations[conv.id] = conv
            self._messages[conv.id] = []
            return copy.deepcopy(conv)

    async def get_conversation(self, conversation_id):
        with self._lock:
            return copy.deepcopy(self._conversations.get(conversation_id))

    async def list_conversations(self, user_id):
        with self._lock:
            items = [c for c in self._conversations.values() if c.has_participant(user_id)]
            items.sort(key=lambda c: c.last_message_at or c.created_at, reverse=True)
            return copy.deepcopy(items)

    async def add_message(self, message):
        with self._lock:
            conv = self._conversations.get(message.conversation_id)
            if conv is None:
                raise NotFound("Conversa não encontrada")
            self._messages[conv.id].append(copy.deepcopy(message))
            conv.last_message = message.message
            conv.last_message_at = message.created_at
        return copy.deepcopy(message)

    async def list_messages(self, conversation_id, after: Optional[datetime] = None):
        with self._lock:
            items = list(self._messages.get(conversation_id, []))
            if after is not None:
                items = [m for m in items if m.created_at > after]
            items.sort(key=lambda m: m.created_at)
            return copy.deepcopy(items)

    async def mark_messages_read(self, conversation_id, reader_id):
        updated = 0
        with self._lock:
            for m in self._messages.get(conversation_id, []):
                if m.receiver_id == reader_id and not m.is_read:
                    m.is_read = True
                    updated += 1
        return updated

    # --- notificações ---
    async def add_notification(self, notification):
        with self._lock:
            self._notifications[notification.id] = copy.deepcopy(notification)
        return copy.deepcopy(notification)

    async def list_notifications(self, user_id):
        with self._lock:
            items = [n for n in self._notifications.values() if n.user_id == user_id]
            items.sort(key=lambda n: n.created_at, reverse=True)
            return copy.deepcopy(items)

    async def mark_notification_read(self, notification_id, user_id):
        with self._lock:
            n = self._notifications.get(notification_id)
            if n is None or n.user_id != user_id:
                return None
            n.is_read = True
            return copy.deepcopy(n)

    async def count_unread_notifications(self, user_id):
        with self._lock:
            return sum(1 for n in self._notifications.values() if n.user_id == user_id and not n.is_read)
