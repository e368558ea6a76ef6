"""In-memory registry of studio sessions."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from creative_director.services.studio import StudioSession

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemorySessionStore:
    """Keeps one ``StudioSession`` per key until it idles out.

    Sessions are never persisted; a process restart drops them all. Busy
    sessions are not evicted.
    """

    factory: Callable[[], StudioSession]
    idle_ttl_seconds: int = 3600
    clock: Callable[[], datetime] = _utcnow
    _sessions: dict[str, StudioSession] = field(default_factory=dict)

    def create(self, key: str | None = None) -> tuple[str, StudioSession]:
        """Create a fresh session, replacing any session under ``key``."""
        self._evict_idle()
        resolved_key = key or str(uuid4())
        session = self.factory()
        session.last_active_at = self.clock()
        self._sessions[resolved_key] = session
        logger.info("Studio session created", extra={"session_id": str(session.id)})
        return resolved_key, session

    def get(self, key: str) -> StudioSession | None:
        """Return the session for ``key`` if it hasn't idled out."""
        self._evict_idle()
        session = self._sessions.get(key)
        if session is not None:
            session.last_active_at = self.clock()
        return session

    def get_or_create(self, key: str) -> StudioSession:
        session = self.get(key)
        if session is None:
            _, session = self.create(key)
        return session

    def drop(self, key: str) -> None:
        self._sessions.pop(key, None)

    def list_active(self) -> list[tuple[str, StudioSession]]:
        self._evict_idle()
        return list(self._sessions.items())

    def _evict_idle(self) -> None:
        cutoff = self.clock() - timedelta(seconds=self.idle_ttl_seconds)
        expired = [
            key
            for key, session in self._sessions.items()
            if session.last_active_at < cutoff and not session.is_loading()
        ]
        for key in expired:
            logger.info("Evicting idle studio session", extra={"key": key})
            self._sessions.pop(key, None)
