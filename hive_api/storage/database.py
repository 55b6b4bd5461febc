# hive_api/storage/database.py
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from hive_api.core.errors import Conflict, NotFound
from hive_api.db.base import Base
from hive_api.modules.catalog import entities as catalog
from hive_api.modules.catalog import models as catalog_models
from hive_api.modules.chat import entities as chat
from hive_api.modules.chat import models as chat_models
from hive_api.modules.notifications import entities as notifications
from hive_api.modules.notifications import models as notification_models
from hive_api.modules.properties import entities as properties
from hive_api.modules.properties import models as property_models
from hive_api.modules.subscriptions import entities as subscriptions
from hive_api.modules.subscriptions import models as subscription_models
from hive_api.modules.users import models as user_models
from hive_api.modules.users.entities import PROVIDER, AuthUser, Provider, Viewer
from hive_api.storage.base import Storage
from hive_api.utils.dates import as_utc

logger = logging.getLogger(__name__)

USER_FIELDS = (
    "email", "password_hash", "name", "is_active", "profile_image_url", "phone_number",
    "address", "city", "state", "zip_code", "business_hours",
)
PROFILE_FIELDS = (
    "document_type", "document_number", "speciality", "description", "location", "categories",
    "subcategories", "portfolio_images", "plan_type", "plan_status", "documents_verified",
    "verified", "rating", "review_count",
)
PROPERTY_FIELDS = (
    "title", "description", "price", "price_type", "property_type", "location", "bedrooms",
    "bathrooms", "parking_spaces", "area", "image_url", "images", "amenities", "agency_name",
    "agency_id", "agency_logo", "status", "featured", "views", "created_by",
)
SUBSCRIPTION_FIELDS = (
    "user_id", "plan_type", "plan_name", "status", "price", "auto_renew", "payment_intent_id",
)
SUBSCRIPTION_DATES = ("start_date", "end_date", "cancellation_deadline", "cancelled_at", "created_at", "updated_at")
PAYMENT_FIELDS = ("user_id", "plan_type", "amount", "currency", "payment_intent_id", "status", "subscription_id")


def _copy(src, dst, fields) -> None:
    for f in fields:
        setattr(dst, f, getattr(src, f))


def _user_entity(row: user_models.User, profile: Optional[user_models.UserProfile]) -> AuthUser:
    base = {f: getattr(row, f) for f in USER_FIELDS}
    base["id"] = row.id
    base["created_at"] = as_utc(row.created_at)
    if row.user_type == PROVIDER and profile is not None:
        extra = {f: getattr(profile, f) for f in PROFILE_FIELDS}
        extra["categories"] = list(extra["categories"] or [])
        extra["subcategories"] = list(extra["subcategories"] or [])
        extra["portfolio_images"] = list(extra["portfolio_images"] or [])
        extra["rating"] = Decimal(str(extra["rating"] or 0))
        return Provider(**base, **extra)
    return Viewer(**base)


def _property_entity(row: property_models.Property) -> properties.Property:
    data = {f: getattr(row, f) for f in PROPERTY_FIELDS}
    data["price"] = Decimal(str(data["price"]))
    data["images"] = list(data["images"] or [])
    data["amenities"] = list(data["amenities"] or [])
    return properties.Property(id=row.id, created_at=as_utc(row.created_at), **data)


def _subscription_entity(row: subscription_models.Subscription) -> subscriptions.Subscription:
    data = {f: getattr(row, f) for f in SUBSCRIPTION_FIELDS}
    data["price"] = Decimal(str(data["price"]))
    dates = {f: as_utc(getattr(row, f)) for f in SUBSCRIPTION_DATES}
    return subscriptions.Subscription(id=row.id, **data, **dates)


def _payment_entity(row: subscription_models.Payment) -> subscriptions.Payment:
    data = {f: getattr(row, f) for f in PAYMENT_FIELDS}
    data["amount"] = Decimal(str(data["amount"]))
    return subscriptions.Payment(
        id=row.id, paid_at=as_utc(row.paid_at), created_at=as_utc(row.created_at), **data
    )


def _category_entity(row: catalog_models.ServiceCategory) -> catalog.ServiceCategory:
    return catalog.ServiceCategory(
        slug=row.slug, name=row.name, icon=row.icon, audience=row.audience,
        provider_count=row.provider_count, subcategories=list(row.subcategories or []),
    )


def _plan_entity(row: catalog_models.Plan) -> catalog.Plan:
    return catalog.Plan(
        type=row.type, name=row.name, price=Decimal(str(row.price)), features=list(row.features or []),
        target_audience=row.target_audience, popular=row.popular,
    )


def _conversation_entity(row: chat_models.Conversation) -> chat.Conversation:
    return chat.Conversation(
        id=row.id, participant1_id=row.participant1_id, participant2_id=row.participant2_id,
        last_message=row.last_message, last_message_at=as_utc(row.last_message_at),
        created_at=as_utc(row.created_at),
    )


def _message_entity(row: chat_models.ChatMessage) -> chat.ChatMessage:
    return chat.ChatMessage(
        id=row.id, conversation_id=row.conversation_id, sender_id=row.sender_id,
        receiver_id=row.receiver_id, message=row.message, is_read=row.is_read,
        created_at=as_utc(row.created_at),
    )


def _notification_entity(row: notification_models.Notification) -> notifications.Notification:
    return notifications.Notification(
        id=row.id, user_id=row.user_id, type=row.type, title=row.title, message=row.message,
        related_id=row.related_id, is_read=row.is_read, created_at=as_utc(row.created_at),
    )


class DatabaseStorage(Storage):
    """Storage sobre SQLAlchemy async (sqlite/aiosqlite ou Postgres/psycopg)."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession], engine: Optional[AsyncEngine] = None):
        self._sessionmaker = sessionmaker
        self._engine = engine

    async def create_all(self) -> None:
        if self._engine is None:
            return
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    # --- usuários ---
    async def _load_user(self, db: AsyncSession, where) -> Optional[AuthUser]:
        stmt = (
            select(user_models.User, user_models.UserProfile)
            .outerjoin(user_models.UserProfile, user_models.UserProfile.user_id == user_models.User.id)
            .where(where)
        )
        res = await db.execute(stmt)
        row = res.first()
        if row is None:
            return None
        return _user_entity(row[0], row[1])

    async def get_user(self, user_id):
        async with self._sessionmaker() as db:
            return await self._load_user(db, user_models.User.id == user_id)

    async def get_user_by_email(self, email):
        key = (email or "").strip().lower()
        async with self._sessionmaker() as db:
            return await self._load_user(db, user_models.User.email == key)

    def _apply_profile(self, profile: user_models.UserProfile, user: Provider) -> None:
        _copy(user, profile, PROFILE_FIELDS)
        profile.categories = list(user.categories)
        profile.subcategories = list(user.subcategories)
        profile.portfolio_images = list(user.portfolio_images)

    async def add_user(self, user):
        async with self._sessionmaker() as db:
            row = user_models.User(id=user.id, user_type=user.user_type, created_at=user.created_at)
            _copy(user, row, USER_FIELDS)
            db.add(row)
            if isinstance(user, Provider):
                profile = user_models.UserProfile(user_id=user.id)
                self._apply_profile(profile, user)
                db.add(profile)
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise Conflict("Email já está em uso") from exc
        return user

    async def save_user(self, user):
        async with self._sessionmaker() as db:
            row = await db.get(user_models.User, user.id)
            if row is None:
                raise NotFound("Usuário não encontrado")
            _copy(user, row, USER_FIELDS)
            row.user_type = user.user_type
            profile = await db.get(user_models.UserProfile, user.id)
            if isinstance(user, Provider):
                if profile is None:
                    profile = user_models.UserProfile(user_id=user.id)
                    db.add(profile)
                self._apply_profile(profile, user)
            elif profile is not None:
                await db.delete(profile)
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise Conflict("Email já está em uso") from exc
        return user

    async def update_user(self, user_id, changes):
        unknown = set(changes) - set(USER_FIELDS) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Campos desconhecidos: {sorted(unknown)}")
        user_values = {k: v for k, v in changes.items() if k in USER_FIELDS}
        profile_values = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}

        # UPDATE só das colunas alteradas; escritas concorrentes em outras colunas sobrevivem
        async with self._sessionmaker() as db:
            try:
                if user_values:
                    await db.execute(
                        update(user_models.User).where(user_models.User.id == user_id).values(**user_values)
                    )
                if profile_values:
                    await db.execute(
                        update(user_models.UserProfile)
                        .where(user_models.UserProfile.user_id == user_id)
                        .values(**profile_values)
                    )
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise Conflict("Email já está em uso") from exc
            return await self._load_user(db, user_models.User.id == user_id)

    async def list_providers(self, category=None, document_type=None, city=None):
        stmt = (
            select(user_models.User, user_models.UserProfile)
            .join(user_models.UserProfile, user_models.UserProfile.user_id == user_models.User.id)
            .where(user_models.User.user_type == PROVIDER, user_models.User.is_active.is_(True))
            .order_by(user_models.User.created_at)
        )
        if document_type:
            stmt = stmt.where(user_models.UserProfile.document_type == document_type.upper())
        if city:
            pattern = f"%{city.lower()}%"
            stmt = stmt.where(or_(
                func.lower(user_models.User.city).like(pattern),
                func.lower(user_models.UserProfile.location).like(pattern),
            ))
        async with self._sessionmaker() as db:
            res = await db.execute(stmt)
            items = [_user_entity(u, p) for u, p in res.all()]
        # JSON: filtro de categoria feito em Python para funcionar em sqlite e Postgres
        if category:
            items = [p for p in items if category in p.categories]
        return items

    # --- imóveis ---
    async def add_property(self, prop):
        async with self._sessionmaker() as db:
            row = property_models.Property(id=prop.id, created_at=prop.created_at)
            _copy(prop, row, PROPERTY_FIELDS)
            db.add(row)
            await db.commit()
        return prop

    async def get_property(self, property_id):
        async with self._sessionmaker() as db:
            row = await db.get(property_models.Property, property_id)
            return _property_entity(row) if row else None

    async def list_properties(self, price_type=None, property_type=None, city=None,
                              featured=None, created_by=None):
        P = property_models.Property
        stmt = select(P).order_by(P.created_at.desc())
        if price_type:
            stmt = stmt.where(P.price_type == price_type)
        if property_type:
            stmt = stmt.where(P.property_type == property_type)
        if city:
            stmt = stmt.where(func.lower(P.location).like(f"%{city.lower()}%"))
        if featured is not None:
            stmt = stmt.where(P.featured.is_(featured))
        if created_by:
            stmt = stmt.where(P.created_by == created_by)
        async with self._sessionmaker() as db:
            res = await db.execute(stmt)
            return [_property_entity(r) for r in res.scalars().all()]

    async def count_properties_by_owner(self, owner_id):
        P = property_models.Property
        async with self._sessionmaker() as db:
            res = await db.execute(select(func.count()).select_from(P).where(P.created_by == owner_id))
            return int(res.scalar_one())

    async def increment_property_views(self, property_id):
        P = property_models.Property
        async with self._sessionmaker() as db:
            # incremento feito pelo banco, sem ler-modificar-escrever
            res = await db.execute(update(P).where(P.id == property_id).values(views=P.views + 1))
            if res.rowcount == 0:
                await db.rollback()
                return None
            views = (await db.execute(select(P.views).where(P.id == property_id))).scalar_one()
            await db.commit()
            return int(views)

    # --- catálogo ---
    async def list_categories(self, audience=None):
        C = catalog_models.ServiceCategory
        stmt = select(C)
        if audience:
            stmt = stmt.where(C.audience == audience)
        async with self._sessionmaker() as db:
            res = await db.execute(stmt)
            return [_category_entity(r) for r in res.scalars().all()]

    async def get_category(self, slug):
        async with self._sessionmaker() as db:
            row = await db.get(catalog_models.ServiceCategory, slug)
            return _category_entity(row) if row else None

    async def save_category(self, category):
        async with self._sessionmaker() as db:
            row = await db.get(catalog_models.ServiceCategory, category.slug)
            if row is None:
                row = catalog_models.ServiceCategory(slug=category.slug)
                db.add(row)
            row.name, row.icon, row.audience = category.name, category.icon, category.audience
            row.provider_count = category.provider_count
            row.subcategories = list(category.subcategories)
            await db.commit()
        return category

    async def list_plans(self):
        async with self._sessionmaker() as db:
            res = await db.execute(select(catalog_models.Plan).order_by(catalog_models.Plan.type))
            return [_plan_entity(r) for r in res.scalars().all()]

    async def get_plan(self, plan_type):
        async with self._sessionmaker() as db:
            row = await db.get(catalog_models.Plan, plan_type)
            return _plan_entity(row) if row else None

    async def save_plan(self, plan):
        async with self._sessionmaker() as db:
            row = await db.get(catalog_models.Plan, plan.type)
            if row is None:
                row = catalog_models.Plan(type=plan.type)
                db.add(row)
            row.name, row.price, row.features = plan.name, plan.price, list(plan.features)
            row.target_audience, row.popular = plan.target_audience, plan.popular
            await db.commit()
        return plan

    # --- assinaturas / pagamentos ---
    def _apply_subscription(self, row: subscription_models.Subscription, s: subscriptions.Subscription) -> None:
        _copy(s, row, SUBSCRIPTION_FIELDS)
        _copy(s, row, SUBSCRIPTION_DATES)

    async def add_subscription(self, subscription):
        async with self._sessionmaker() as db:
            row = subscription_models.Subscription(id=subscription.id)
            self._apply_subscription(row, subscription)
            db.add(row)
            await db.commit()
        return subscription

    async def save_subscription(self, subscription):
        async with self._sessionmaker() as db:
            row = await db.get(subscription_models.Subscription, subscription.id)
            if row is None:
                raise NotFound("Assinatura não encontrada")
            self._apply_subscription(row, subscription)
            await db.commit()
        return subscription

    async def get_subscription(self, subscription_id):
        async with self._sessionmaker() as db:
            row = await db.get(subscription_models.Subscription, subscription_id)
            return _subscription_entity(row) if row else None

    async def list_subscriptions(self, user_id):
        S = subscription_models.Subscription
        async with self._sessionmaker() as db:
            res = await db.execute(select(S).where(S.user_id == user_id).order_by(S.created_at.desc()))
            return [_subscription_entity(r) for r in res.scalars().all()]

    async def add_payment(self, payment):
        async with self._sessionmaker() as db:
            row = subscription_models.Payment(id=payment.id, paid_at=payment.paid_at, created_at=payment.created_at)
            _copy(payment, row, PAYMENT_FIELDS)
            db.add(row)
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise Conflict("Pagamento já registrado") from exc
        return payment

    async def _payment_row(self, db: AsyncSession, payment_intent_id: str):
        Pay = subscription_models.Payment
        res = await db.execute(select(Pay).where(Pay.payment_intent_id == payment_intent_id))
        return res.scalar_one_or_none()

    async def get_payment(self, payment_intent_id):
        async with self._sessionmaker() as db:
            row = await self._payment_row(db, payment_intent_id)
            return _payment_entity(row) if row else None

    async def save_payment(self, payment):
        async with self._sessionmaker() as db:
            row = await self._payment_row(db, payment.payment_intent_id)
            if row is None:
                raise NotFound("Pagamento não encontrado")
            _copy(payment, row, PAYMENT_FIELDS)
            row.paid_at = payment.paid_at
            await db.commit()
        return payment

    async def claim_payment(self, payment_intent_id, status):
        Pay = subscription_models.Payment
        async with self._sessionmaker() as db:
            res = await db.execute(
                update(Pay)
                .where(Pay.payment_intent_id == payment_intent_id, Pay.status == subscriptions.PAYMENT_PENDING)
                .values(status=status)
            )
            if res.rowcount != 1:
                await db.rollback()
                return None
            await db.commit()
            row = await self._payment_row(db, payment_intent_id)
            return _payment_entity(row) if row else None

    # --- chat ---
    async def _find_conversation(self, db: AsyncSession, p1: str, p2: str):
        C = chat_models.Conversation
        res = await db.execute(select(C).where(C.participant1_id == p1, C.participant2_id == p2))
        return res.scalar_one_or_none()

    async def get_or_create_conversation(self, user_a, user_b):
        p1, p2 = chat.participant_pair(user_a, user_b)
        async with self._sessionmaker() as db:
            row = await self._find_conversation(db, p1, p2)
            if row is not None:
                return _conversation_entity(row)
            conv = chat.Conversation(participant1_id=p1, participant2_id=p2)
            db.add(chat_models.Conversation(
                id=conv.id, participant1_id=p1, participant2_id=p2, created_at=conv.created_at,
            ))
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.info("Conversa %s/%s criada em paralelo", p1, p2)
                row = await self._find_conversation(db, p1, p2)
                if row is None:
                    raise
                return _conversation_entity(row)
            return conv

    async def get_conversation(self, conversation_id):
        async with self._sessionmaker() as db:
            row = await db.get(chat_models.Conversation, conversation_id)
            return _conversation_entity(row) if row else None

    async def list_conversations(self, user_id):
        C = chat_models.Conversation
        stmt = (
            select(C)
            .where(or_(C.participant1_id == user_id, C.participant2_id == user_id))
            .order_by(func.coalesce(C.last_message_at, C.created_at).desc())
        )
        async with self._sessionmaker() as db:
            res = await db.execute(stmt)
            return [_conversation_entity(r) for r in res.scalars().all()]

    async def add_message(self, message):
        async with self._sessionmaker() as db:
            conv = await db.get(chat_models.Conversation, message.conversation_id)
            if conv is None:
                raise NotFound("Conversa não encontrada")
            db.add(chat_models.ChatMessage(
                id=message.id, conversation_id=message.conversation_id, sender_id=message.sender_id,
                receiver_id=message.receiver_id, message=message.message, is_read=message.is_read,
                created_at=message.created_at,
            ))
            conv.last_message = message.message
            conv.last_message_at = message.created_at
            await db.commit()
        return message

    async def list_messages(self, conversation_id, after: Optional[datetime] = None):
        M = chat_models.ChatMessage
        stmt = select(M).where(M.conversation_id == conversation_id).order_by(M.created_at)
        async with self._sessionmaker() as db:
            res = await db.execute(stmt)
            items = [_message_entity(r) for r in res.scalars().all()]
        if after is not None:
            items = [m for m in items if m.created_at > after]
        return items

    async def mark_messages_read(self, conversation_id, reader_id):
        M = chat_models.ChatMessage
        async with self._sessionmaker() as db:
            res = await db.execute(
                update(M)
                .where(M.conversation_id == conversation_id, M.receiver_id == reader_id, M.is_read.is_(False))
                .values(is_read=True)
            )
            await db.commit()
            return res.rowcount or 0

    # --- notificações ---
    async def add_notification(self, notification):
        async with self._sessionmaker() as db:
            db.add(notification_models.Notification(
                id=notification.id, user_id=notification.user_id, type=notification.type,
                title=notification.title, message=notification.message,
                related_id=notification.related_id, is_read=notification.is_read,
                created_at=notification.created_at,
            ))
            await db.commit()
        return notification

    async def list_notifications(self, user_id):
        N = notification_models.Notification
        async with self._sessionmaker() as db:
            res = await db.execute(select(N).where(N.user_id == user_id).order_by(N.created_at.desc()))
            return [_notification_entity(r) for r in res.scalars().all()]

    async def mark_notification_read(self, notification_id, user_id):
        async with self._sessionmaker() as db:
            row = await db.get(notification_models.Notification, notification_id)
            if row is None or row.user_id != user_id:
                return None
            row.is_read = True
            notification = _notification_entity(row)
            await db.commit()
            return notification

    async def count_unread_notifications(self, user_id):
        N = notification_models.Notification
        async with self._sessionmaker() as db:
            res = await db.execute(
                select(func.count()).select_from(N).where(N.user_id == user_id, N.is_read.is_(False))
            )
            return int(res.scalar_one())
