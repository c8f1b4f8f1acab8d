"""
Shared fixtures.

Tests run against a real SQLite file in a temporary directory; storage
faults are simulated with FlakyStore, which wraps a real store.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count
from typing import Any, Optional

import pytest
import pytest_asyncio

from society.config import SocietySettings, StorageSettings
from society.controller import SocietyController
from society.models import Collection, Expense, ExpenseCategory, Member, Payment, Record
from society.services.storage import (
    RecordStoreInterface,
    SQLiteRecordStore,
    StorageError,
)


@pytest.fixture
def storage_settings(tmp_path) -> StorageSettings:
    return StorageSettings(
        database_path=str(tmp_path / "society.db"),
        open_retry_attempts=1,
        open_retry_max_wait_seconds=0,
    )


@pytest.fixture
def society_settings() -> SocietySettings:
    return SocietySettings(
        name="Tulsi Apartment",
        association_name="Tulsi Apartment Owners Association",
        address="Sector 4, City Center",
        registration_number="123/TULSI/APT",
        notice_default_dues=Decimal("5000"),
        notice_response_days=7,
    )


@pytest_asyncio.fixture
async def store(storage_settings):
    store = SQLiteRecordStore(storage_settings)
    yield store
    await store.close()


class FlakyStore(RecordStoreInterface):
    """Wraps a real store and fails chosen operations on demand."""

    def __init__(self, inner: RecordStoreInterface):
        self.inner = inner
        self.fail_open: Optional[Exception] = None
        self.fail_add: Optional[Exception] = None
        self.fail_get_all: dict[Collection, Exception] = {}
        self.fail_get_by_index: Optional[Exception] = None
        self.add_calls = 0

    async def open(self) -> None:
        if self.fail_open:
            raise self.fail_open
        await self.inner.open()

    async def add(self, collection: Collection, record: Record) -> None:
        self.add_calls += 1
        if self.fail_add:
            raise self.fail_add
        await self.inner.add(collection, record)

    async def get_all(self, collection: Collection) -> list[Record]:
        if collection in self.fail_get_all:
            raise self.fail_get_all[collection]
        return await self.inner.get_all(collection)

    async def get_by_index(self, collection: Collection, index_name: str, value: Any) -> list[Record]:
        if self.fail_get_by_index:
            raise self.fail_get_by_index
        return await self.inner.get_by_index(collection, index_name, value)

    async def get(self, collection: Collection, record_id: str) -> Record:
        return await self.inner.get(collection, record_id)


@pytest.fixture
def flaky_store(store) -> FlakyStore:
    return FlakyStore(store)


class StepClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime = datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)):
        self._now = start

    def __call__(self) -> datetime:
        now = self._now
        self._now += timedelta(minutes=1)
        return now


def sequential_ids(prefix: str = "id"):
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture
def controller(store) -> SocietyController:
    return SocietyController(store, clock=StepClock(), id_factory=sequential_ids())


@pytest.fixture
def flaky_controller(flaky_store) -> SocietyController:
    return SocietyController(flaky_store, clock=StepClock(), id_factory=sequential_ids())


def make_member(id: str = "m1", name: str = "A. Rao", flat_number: str = "101", **kwargs) -> Member:
    return Member(id=id, name=name, flat_number=flat_number, **kwargs)


def make_payment(
    id: str = "p1",
    member_id: str = "m1",
    member_name: str = "A. Rao",
    month: str = "2024-03",
    amount: str = "2500",
    **kwargs,
) -> Payment:
    return Payment(
        id=id,
        member_id=member_id,
        member_name=member_name,
        month=month,
        amount=Decimal(amount),
        **kwargs,
    )


def make_expense(
    id: str = "e1",
    title: str = "Pump Repair",
    amount: str = "1800",
    category: ExpenseCategory = ExpenseCategory.REPAIR,
    **kwargs,
) -> Expense:
    return Expense(id=id, title=title, amount=Decimal(amount), category=category, **kwargs)
