"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from ledger_app.config.loader import ConfigLoader
from ledger_app.errors import DurableStoreError
from ledger_app.notify.callback_sink import CallbackEventSink
from ledger_app.notify.emitter import NotificationEmitter
from ledger_app.persistence.base import ItemStore
from ledger_app.persistence.sqlite_store import SqliteItemStore
from ledger_app.service import LedgerService
from ledger_app.state.models import Item

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class ManualClock:
    """Wall clock the test moves by hand."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FlakyItemStore(ItemStore):
    """Durable store wrapper whose reachability a test can switch off."""

    def __init__(self, inner: ItemStore):
        self.inner = inner
        self.available = True
        self.calls: list[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if not self.available:
            raise DurableStoreError(f"{operation} timed out", operation=operation)

    def get(self, item_id: str) -> Optional[Item]:
        self._check("get")
        return self.inner.get(item_id)

    def put(self, item: Item, expected_version: Optional[int]) -> Item:
        self._check("put")
        return self.inner.put(item, expected_version)

    def scan_by_owner(self, owner: str) -> list[Item]:
        self._check("scan_by_owner")
        return self.inner.scan_by_owner(owner)

    def scan_by_creator(self, creator: str) -> list[Item]:
        self._check("scan_by_creator")
        return self.inner.scan_by_creator(creator)

    def ping(self) -> bool:
        self.calls.append("ping")
        return self.available and self.inner.ping()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def sqlite_store(tmp_path) -> SqliteItemStore:
    return SqliteItemStore(str(tmp_path / "ledger.db"), timeout_seconds=1.0)


@pytest.fixture
def flaky_store(sqlite_store) -> FlakyItemStore:
    return FlakyItemStore(sqlite_store)


@pytest.fixture
def ledger_config(tmp_path):
    """Defaults with inline notification delivery and no fail-over cool-down."""
    return ConfigLoader.create(tmp_path).load({
        "store": {"db_path": str(tmp_path / "ledger.db"), "cooldown_seconds": 0},
        "notifications": {"max_workers": 0},
        "concurrency": {"backoff_base_seconds": 0},
    })


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def ledger(ledger_config, flaky_store, clock, events) -> LedgerService:
    emitter = NotificationEmitter(
        sinks=[CallbackEventSink(events.append)],
        max_workers=0,
    )
    service = LedgerService(
        config=ledger_config,
        durable=flaky_store,
        emitter=emitter,
        clock=clock,
    )
    yield service
    service.close()
