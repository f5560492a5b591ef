from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from customer_service.models import CustomerRecord
from customer_service.mongo import MongoCustomerStore


@pytest.fixture
def collections():
    return {"customers": MagicMock(), "counters": MagicMock()}


@pytest.fixture
def mongo_store(collections):
    database = MagicMock()
    database.__getitem__.side_effect = collections.__getitem__
    return MongoCustomerStore(database, "customers", "counters")


def _record(**kw):
    fields = dict(firstName="Juan", lastName="Pérez", age=30, birthDate=date(1996, 1, 1))
    fields.update(kw)
    return CustomerRecord(**fields)


def test_creates_creation_index(collections, mongo_store):
    collections["customers"].create_index.assert_called_once()


def test_insert_allocates_id_from_counter(collections, mongo_store):
    collections["counters"].find_one_and_update.return_value = {"_id": "customers", "seq": 5}

    saved = mongo_store.save(_record(estimatedMilestoneDate=date(2061, 1, 1)))

    assert saved.id == 5
    assert saved.creationTimestamp == saved.updateTimestamp
    doc = collections["customers"].insert_one.call_args.args[0]
    assert doc["_id"] == 5
    assert doc["birthDate"] == datetime(1996, 1, 1, tzinfo=timezone.utc)
    assert doc["estimatedMilestoneDate"] == datetime(2061, 1, 1, tzinfo=timezone.utc)
    assert "id" not in doc


def test_save_existing_never_overwrites_creation_time(collections, mongo_store):
    created = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    mongo_store.save(_record(id=3, creationTimestamp=created))

    query, update = collections["customers"].update_one.call_args.args
    assert query == {"_id": 3}
    assert "creationTimestamp" not in update["$set"]
    assert update["$setOnInsert"] == {"creationTimestamp": created}
    collections["counters"].find_one_and_update.assert_not_called()


def test_find_by_id_converts_dates(collections, mongo_store):
    collections["customers"].find_one.return_value = {
        "_id": 3,
        "firstName": "Juan",
        "lastName": "Pérez",
        "age": 30,
        "birthDate": datetime(1996, 1, 1, tzinfo=timezone.utc),
        "estimatedMilestoneDate": None,
        "creationTimestamp": datetime(2024, 1, 15, tzinfo=timezone.utc),
        "updateTimestamp": datetime(2024, 1, 15, tzinfo=timezone.utc),
    }
    record = mongo_store.find_by_id(3)
    assert record.id == 3
    assert record.birthDate == date(1996, 1, 1)
    collections["customers"].find_one.assert_called_once_with({"_id": 3})


def test_find_by_id_missing(collections, mongo_store):
    collections["customers"].find_one.return_value = None
    assert mongo_store.find_by_id(99) is None


def test_delete_by_id(collections, mongo_store):
    mongo_store.delete(_record(id=4))
    collections["customers"].delete_one.assert_called_once_with({"_id": 4})


def test_aggregates_on_empty_collection(collections, mongo_store):
    collections["customers"].aggregate.return_value = []
    assert mongo_store.average_age() is None
    assert mongo_store.age_standard_deviation() is None


def test_aggregates(collections, mongo_store):
    collections["customers"].aggregate.return_value = [
        {"_id": None, "averageAge": 32.5, "ageStandardDeviation": 8.2}
    ]
    assert mongo_store.average_age() == 32.5
    assert mongo_store.age_standard_deviation() == 8.2
    pipeline = collections["customers"].aggregate.call_args.args[0]
    assert pipeline[0]["$group"]["ageStandardDeviation"] == {"$stdDevPop": "$age"}
