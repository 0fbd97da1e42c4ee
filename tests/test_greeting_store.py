from __future__ import annotations

import asyncio
import threading

from core.chat_state import ChatStateTable
from core.greeting_store import GreetingStore


class FakePersistence:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.saved: dict[int, str] = {}
        self.threads: list[int] = []

    def save(self, chat_id: int, text: str) -> None:
        self.threads.append(threading.get_ident())
        if self.fail:
            raise PermissionError("read-only")
        self.saved[chat_id] = text


def test_get_falls_back_to_default() -> None:
    store = GreetingStore(ChatStateTable(), "Hello")
    assert store.get(42) == "Hello"
    assert store.default_text == "Hello"


def test_get_does_not_create_chat_state() -> None:
    table = ChatStateTable()
    GreetingStore(table, "Hello").get(42)
    assert 42 not in table


def test_set_then_get_round_trip_and_persist() -> None:
    table = ChatStateTable()
    persistence = FakePersistence()
    store = GreetingStore(table, "Hello", persistence)

    assert asyncio.run(store.set(-100, "Welcome <b>friends</b>!")) is True
    assert store.get(-100) == "Welcome <b>friends</b>!"
    assert persistence.saved == {-100: "Welcome <b>friends</b>!"}
    assert table.get_or_create(-100).custom_greeting_text == "Welcome <b>friends</b>!"

    asyncio.run(store.set(-100, "Hi again"))
    assert store.get(-100) == "Hi again"


def test_persistence_runs_off_the_event_loop_thread() -> None:
    persistence = FakePersistence()
    store = GreetingStore(ChatStateTable(), "Hello", persistence)
    asyncio.run(store.set(1, "Custom"))
    assert persistence.threads
    assert threading.get_ident() not in persistence.threads


def test_persistence_failure_keeps_in_memory_update() -> None:
    store = GreetingStore(ChatStateTable(), "Hello", FakePersistence(fail=True))
    assert asyncio.run(store.set(5, "Custom")) is False
    assert store.get(5) == "Custom"


def test_set_without_persistence_is_memory_only() -> None:
    store = GreetingStore(ChatStateTable(), "Hello")
    assert asyncio.run(store.set(5, "Custom")) is False
    assert store.get(5) == "Custom"


def test_preload_does_not_write_back() -> None:
    persistence = FakePersistence()
    store = GreetingStore(ChatStateTable(), "Hello", persistence)
    store.preload({1: "One", 2: "Two"})
    assert store.get(1) == "One"
    assert store.get(2) == "Two"
    assert persistence.saved == {}


def test_empty_custom_text_uses_default() -> None:
    store = GreetingStore(ChatStateTable(), "Hello")
    store.preload({1: ""})
    assert store.get(1) == "Hello"


def test_customizable_only_with_persistence() -> None:
    assert not GreetingStore(ChatStateTable(), "Hello").customizable
    assert GreetingStore(ChatStateTable(), "Hello", FakePersistence()).customizable
