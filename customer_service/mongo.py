"""MongoDB implementation of CustomerStore.

Document layout:
- `_id` holds the integer customer id. Ids come from a sequence document in
  the counters collection, incremented atomically with `$inc`.
- Calendar dates (birthDate, estimatedMilestoneDate) are stored as UTC
  midnight datetimes because BSON has no date-only type.
- Each save is a single-document write, so it is atomic without a
  transaction.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any

from pymongo import DESCENDING, MongoClient, ReturnDocument

from .config import MONGO_COLLECTION, MONGO_COUNTERS_COLLECTION, MONGO_DB, MONGO_URI
from .logger import get_logger
from .models import CustomerRecord
from .store import CustomerStore, utc_now

log = get_logger(__name__)

_DATE_FIELDS = ("birthDate", "estimatedMilestoneDate")


def get_database(uri: str = MONGO_URI, db_name: str = MONGO_DB):
    """Connect to MongoDB and return the configured database.

    `tz_aware=True` makes pymongo hand back timezone-aware UTC datetimes,
    matching what the in-memory store produces.
    """
    client = MongoClient(uri, tz_aware=True, appname="customer-service")
    return client[db_name]


def _to_mongo_time(value: datetime) -> datetime:
    # BSON datetimes have millisecond precision
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def _date_to_mongo(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _to_document(record: CustomerRecord) -> dict[str, Any]:
    doc = record.model_dump(exclude={"id"})
    for field in _DATE_FIELDS:
        if doc[field] is not None:
            doc[field] = _date_to_mongo(doc[field])
    doc["_id"] = record.id
    return doc


def _from_document(doc: dict[str, Any]) -> CustomerRecord:
    data = dict(doc)
    data["id"] = data.pop("_id")
    for field in _DATE_FIELDS:
        value = data.get(field)
        if isinstance(value, datetime):
            data[field] = value.date()
    return CustomerRecord.model_validate(data)


class MongoCustomerStore(CustomerStore):
    def __init__(
        self,
        database,
        collection_name: str = MONGO_COLLECTION,
        counters_name: str = MONGO_COUNTERS_COLLECTION,
    ) -> None:
        self.collection_name = collection_name
        self.col = database[collection_name]
        self.counters = database[counters_name]
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        # supports find().sort(creationTimestamp desc)
        self.col.create_index(
            [("creationTimestamp", DESCENDING), ("_id", DESCENDING)],
            name="idx_creation_desc",
        )

    def _next_id(self) -> int:
        counter = self.counters.find_one_and_update(
            {"_id": self.collection_name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    def save(self, record: CustomerRecord) -> CustomerRecord:
        stored = record.model_copy(deep=True)
        now = _to_mongo_time(utc_now())
        stored.updateTimestamp = now

        if stored.id is None:
            stored.id = self._next_id()
            stored.creationTimestamp = now
            self.col.insert_one(_to_document(stored))
            log.debug("customer_inserted", customer_id=stored.id)
            return stored

        if stored.creationTimestamp is None:
            stored.creationTimestamp = now
        doc = _to_document(stored)
        doc.pop("_id")
        creation = doc.pop("creationTimestamp")
        self.col.update_one(
            {"_id": stored.id},
            {"$set": doc, "$setOnInsert": {"creationTimestamp": creation}},
            upsert=True,
        )
        log.debug("customer_replaced", customer_id=stored.id)
        return stored

    def find_by_id(self, customer_id: int) -> CustomerRecord | None:
        doc = self.col.find_one({"_id": customer_id})
        return _from_document(doc) if doc is not None else None

    def find_all_order_by_creation_desc(self) -> list[CustomerRecord]:
        cursor = self.col.find().sort([("creationTimestamp", DESCENDING), ("_id", DESCENDING)])
        return [_from_document(doc) for doc in cursor]

    def delete(self, record: CustomerRecord) -> None:
        self.col.delete_one({"_id": record.id})

    def count(self) -> int:
        return self.col.count_documents({})

    def _age_aggregates(self) -> dict[str, Any] | None:
        pipeline = [
            {
                "$group": {
                    "_id": None,
                    "averageAge": {"$avg": "$age"},
                    "ageStandardDeviation": {"$stdDevPop": "$age"},
                }
            }
        ]
        results = list(self.col.aggregate(pipeline))
        return results[0] if results else None

    def average_age(self) -> float | None:
        result = self._age_aggregates()
        if result is None or result["averageAge"] is None:
            return None
        return float(result["averageAge"])

    def age_standard_deviation(self) -> float | None:
        result = self._age_aggregates()
        if result is None or result["ageStandardDeviation"] is None:
            return None
        return float(result["ageStandardDeviation"])
