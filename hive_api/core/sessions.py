# hive_api/core/sessions.py
from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from hive_api.core.security import new_session_token
from hive_api.modules.users.entities import AuthUser
from hive_api.utils.dates import utcnow

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    token: str
    user_id: str
    user: AuthUser
    created_at: datetime
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class SessionStore:
    """Token opaco -> identidade. Cada operação é atômica sob um lock."""

    def __init__(
        self,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
        token_factory: Callable[[], str] = new_session_token,
    ):
        self._ttl = ttl
        self._clock = clock
        self._token_factory = token_factory
        self._entries: dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def create(self, user: AuthUser) -> str:
        now = self._clock()
        expires_at = now + self._ttl if self._ttl else None
        with self._lock:
            token = self._token_factory()
            while token in self._entries:
                token = self._token_factory()
            self._entries[token] = SessionEntry(
                token=token,
                user_id=user.id,
                user=copy.deepcopy(user),
                created_at=now,
                expires_at=expires_at,
            )
        logger.info("Sessão criada para user=%s token=%s...", user.id, token[:6])
        return token

    def get(self, token: Optional[str]) -> Optional[SessionEntry]:
        if not token:
            return None
        now = self._clock()
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[token]
                logger.info("Sessão expirada removida token=%s...", token[:6])
                return None
            return replace(entry, user=copy.deepcopy(entry.user))

    def delete(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            removed = self._entries.pop(token, None)
        if removed is not None:
            logger.info("Sessão encerrada token=%s...", token[:6])

    def update(self, token: str, user: AuthUser) -> None:
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return
            entry.user = copy.deepcopy(user)

    def delete_for_user(self, user_id: str) -> int:
        with self._lock:
            tokens = [t for t, e in self._entries.items() if e.user_id == user_id]
            for t in tokens:
                del self._entries[t]
        return len(tokens)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
