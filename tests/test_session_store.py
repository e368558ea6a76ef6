"""Tests for the in-memory session store."""

from datetime import UTC, datetime, timedelta

from creative_director.domain.wizard import Phase, WizardState
from creative_director.services.sessions import InMemorySessionStore
from tests.conftest import make_studio


class _Clock:
    def __init__(self) -> None:
        self.now = datetime.now(tz=UTC)

    def __call__(self) -> datetime:
        return self.now


def test_create_and_get() -> None:
    store = InMemorySessionStore(factory=make_studio)

    key, studio = store.create()

    assert store.get(key) is studio
    assert store.get("missing") is None


def test_create_with_key_replaces_session() -> None:
    store = InMemorySessionStore(factory=make_studio)
    _, first = store.create("tg:1")

    _, second = store.create("tg:1")

    assert first is not second
    assert store.get("tg:1") is second


def test_get_or_create_reuses_existing() -> None:
    store = InMemorySessionStore(factory=make_studio)

    first = store.get_or_create("tg:2")
    second = store.get_or_create("tg:2")

    assert first is second


def test_idle_sessions_are_evicted() -> None:
    clock = _Clock()
    store = InMemorySessionStore(factory=make_studio, idle_ttl_seconds=60, clock=clock)
    key, _ = store.create()

    clock.now += timedelta(seconds=61)

    assert store.get(key) is None
    assert store.list_active() == []


def test_busy_sessions_are_not_evicted() -> None:
    clock = _Clock()
    store = InMemorySessionStore(factory=make_studio, idle_ttl_seconds=60, clock=clock)
    key, studio = store.create()
    studio.state = WizardState(phase=Phase.BUSY)

    clock.now += timedelta(seconds=61)

    assert store.get(key) is studio


def test_drop_removes_session() -> None:
    store = InMemorySessionStore(factory=make_studio)
    key, _ = store.create()

    store.drop(key)
    store.drop(key)

    assert store.get(key) is None
