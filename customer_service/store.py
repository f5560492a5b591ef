"""CustomerStore interface and the in-memory implementation.

The MongoDB implementation lives in mongo.py.
"""

from __future__ import annotations

import statistics
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from .models import CustomerRecord


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CustomerStore(ABC):
    """Persistence for customer records.

    `save` inserts when the record has no id (assigning id and
    creationTimestamp) and replaces otherwise; both paths refresh
    updateTimestamp. Every write is atomic for a single record.
    """

    @abstractmethod
    def save(self, record: CustomerRecord) -> CustomerRecord:
        """Insert or replace a record and return the stored version."""

    @abstractmethod
    def find_by_id(self, customer_id: int) -> CustomerRecord | None:
        """Return the record with `customer_id`, or None."""

    @abstractmethod
    def find_all_order_by_creation_desc(self) -> list[CustomerRecord]:
        """Return every record, newest first."""

    @abstractmethod
    def delete(self, record: CustomerRecord) -> None:
        """Remove a record."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""

    @abstractmethod
    def average_age(self) -> float | None:
        """Mean age, or None when the store is empty."""

    @abstractmethod
    def age_standard_deviation(self) -> float | None:
        """Population standard deviation of ages, or None when empty."""


class InMemoryCustomerStore(CustomerStore):
    """Process-local store for tests and development."""

    def __init__(self) -> None:
        self._records: dict[int, CustomerRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def save(self, record: CustomerRecord) -> CustomerRecord:
        stored = record.model_copy(deep=True)
        now = utc_now()
        with self._lock:
            if stored.id is None:
                stored.id = self._next_id
                self._next_id += 1
                stored.creationTimestamp = now
            elif stored.id in self._records:
                # creation time is immutable once set
                stored.creationTimestamp = self._records[stored.id].creationTimestamp
            else:
                self._next_id = max(self._next_id, stored.id + 1)
            if stored.creationTimestamp is None:
                stored.creationTimestamp = now
            stored.updateTimestamp = now
            self._records[stored.id] = stored
        return stored.model_copy(deep=True)

    def find_by_id(self, customer_id: int) -> CustomerRecord | None:
        with self._lock:
            record = self._records.get(customer_id)
        return record.model_copy(deep=True) if record is not None else None

    def find_all_order_by_creation_desc(self) -> list[CustomerRecord]:
        with self._lock:
            records = list(self._records.values())
        records.sort(key=lambda r: (r.creationTimestamp, r.id), reverse=True)
        return [r.model_copy(deep=True) for r in records]

    def delete(self, record: CustomerRecord) -> None:
        with self._lock:
            self._records.pop(record.id, None)

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def _ages(self) -> list[int]:
        with self._lock:
            return [r.age for r in self._records.values()]

    def average_age(self) -> float | None:
        ages = self._ages()
        if not ages:
            return None
        return float(statistics.fmean(ages))

    def age_standard_deviation(self) -> float | None:
        ages = self._ages()
        if not ages:
            return None
        return float(statistics.pstdev(ages))
