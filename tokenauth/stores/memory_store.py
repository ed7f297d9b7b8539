"""In-memory auth stores."""

from __future__ import annotations

import asyncio
import time
import weakref
from typing import Any, Callable
from uuid import uuid4

from tokenauth.exceptions import EmailTaken, SubjectNotFound, UsernameTaken


class MemoryUserStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users_by_id: dict[str, dict[str, Any]] = {}
        self._ids_by_email: dict[str, str] = {}
        self._ids_by_username: dict[str, str] = {}

    async def get_by_email(self, email: str) -> dict | None:
        async with self._lock:
            user_id = self._ids_by_email.get(email.lower())
            return dict(self._users_by_id[user_id]) if user_id else None

    async def get_by_username(self, username: str) -> dict | None:
        async with self._lock:
            user_id = self._ids_by_username.get(username)
            return dict(self._users_by_id[user_id]) if user_id else None

    async def get_by_id(self, user_id: str) -> dict | None:
        async with self._lock:
            user = self._users_by_id.get(user_id)
            return dict(user) if user else None

    async def create_user(self, data: dict) -> dict:
        async with self._lock:
            payload = dict(data)
            payload["email"] = payload["email"].lower()
            if payload["email"] in self._ids_by_email:
                raise EmailTaken()
            if payload["username"] in self._ids_by_username:
                raise UsernameTaken()
            payload["id"] = uuid4().hex
            payload.setdefault("is_verified", False)
            payload["created_at"] = payload.get("created_at", int(time.time()))
            payload["updated_at"] = payload.get("updated_at", payload["created_at"])
            self._users_by_id[payload["id"]] = payload
            self._ids_by_email[payload["email"]] = payload["id"]
            self._ids_by_username[payload["username"]] = payload["id"]
            return dict(payload)

    async def update_user(self, user_id: str, updates: dict) -> dict:
        async with self._lock:
            user = self._users_by_id.get(user_id)
            if not user:
                raise SubjectNotFound()
            for key, value in updates.items():
                if key in {"id", "email", "username"}:
                    continue
                user[key] = value
            user["updated_at"] = int(time.time())
            return dict(user)


class MemorySessionStore:
    """SessionSets keyed by subject plus a token -> subject reverse index.

    Mutations take the subject's own lock, so unrelated subjects never wait on
    each other. Locks are held weakly and vanish once no call is using them.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._sessions: dict[str, set[str]] = {}
        self._owners: dict[str, str] = {}

    def _lock_for(self, subject_id: str) -> asyncio.Lock:
        lock = self._locks.get(subject_id)
        if lock is None:
            lock = self._locks.setdefault(subject_id, asyncio.Lock())
        return lock

    async def add(self, subject_id: str, token: str) -> None:
        async with self._lock_for(subject_id):
            owner = self._owners.get(token)
            if owner is not None and owner != subject_id:
                raise ValueError("Refresh token already bound to another subject")
            self._sessions.setdefault(subject_id, set()).add(token)
            self._owners[token] = subject_id

    async def remove_one(self, subject_id: str, token: str) -> bool:
        async with self._lock_for(subject_id):
            tokens = self._sessions.get(subject_id)
            if not tokens or token not in tokens:
                return False
            tokens.discard(token)
            if not tokens:
                del self._sessions[subject_id]
            self._owners.pop(token, None)
            return True

    async def remove_all(self, subject_id: str) -> int:
        async with self._lock_for(subject_id):
            tokens = self._sessions.pop(subject_id, set())
            for token in tokens:
                self._owners.pop(token, None)
            return len(tokens)

    async def find_subject_by_token(self, token: str) -> str | None:
        return self._owners.get(token)

    async def list_tokens(self, subject_id: str) -> set[str]:
        async with self._lock_for(subject_id):
            return set(self._sessions.get(subject_id, set()))


class MemoryRateLimiter:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = asyncio.Lock()
        self._clock = clock
        self._hits: dict[str, list[float]] = {}

    async def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        now = self._clock()
        async with self._lock:
            hits = self._hits.get(key, [])
            hits = [timestamp for timestamp in hits if (now - timestamp) < window_seconds]
            if len(hits) >= limit:
                self._hits[key] = hits
                return False
            hits.append(now)
            self._hits[key] = hits
            return True
