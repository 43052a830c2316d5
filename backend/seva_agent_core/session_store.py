"""
In-memory registry of chat sessions, keyed by session id.

Sessions live for the lifetime of the process; nothing is persisted.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from observability import get_logger

from .session import SessionController

log = get_logger(__name__)


class SessionStore:
    def __init__(self, factory: Callable[[], SessionController]) -> None:
        self._factory = factory
        self._sessions: dict[str, SessionController] = {}
        self._lock = asyncio.Lock()

    async def create(self) -> SessionController:
        session = self._factory()
        async with self._lock:
            self._sessions[session.session_id] = session
        log.info("session_store.created", session_id=session.session_id)
        return session

    async def get(self, session_id: str) -> SessionController | None:
        async with self._lock:
            return self._sessions.get(session_id)

    async def remove(self, session_id: str) -> bool:
        async with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is not None:
            log.info("session_store.removed", session_id=session_id)
        return removed is not None

    def __len__(self) -> int:
        return len(self._sessions)
