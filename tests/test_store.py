from datetime import date

import pytest

from customer_service.models import CustomerRecord
from customer_service.store import InMemoryCustomerStore


def _record(age=30, **kw):
    fields = dict(firstName="Juan", lastName="Pérez", age=age, birthDate=date(1996, 1, 1))
    fields.update(kw)
    return CustomerRecord(**fields)


def test_save_assigns_sequential_ids_and_timestamps():
    store = InMemoryCustomerStore()
    first = store.save(_record())
    second = store.save(_record())

    assert (first.id, second.id) == (1, 2)
    assert first.creationTimestamp is not None
    assert first.updateTimestamp == first.creationTimestamp


def test_resave_keeps_creation_timestamp():
    store = InMemoryCustomerStore()
    saved = store.save(_record())

    saved.age = 31
    saved.creationTimestamp = None
    resaved = store.save(saved)

    assert resaved.id == saved.id
    assert resaved.age == 31
    assert resaved.creationTimestamp == store.find_by_id(saved.id).creationTimestamp
    assert resaved.updateTimestamp >= resaved.creationTimestamp
    assert store.count() == 1


def test_returned_records_are_copies():
    store = InMemoryCustomerStore()
    saved = store.save(_record())
    saved.firstName = "Changed"

    fetched = store.find_by_id(saved.id)
    fetched.lastName = "Changed"

    assert store.find_by_id(saved.id).firstName == "Juan"
    assert store.find_by_id(saved.id).lastName == "Pérez"


def test_find_by_id_missing():
    assert InMemoryCustomerStore().find_by_id(7) is None


def test_delete():
    store = InMemoryCustomerStore()
    saved = store.save(_record())
    store.delete(saved)
    assert store.find_by_id(saved.id) is None
    assert store.count() == 0


def test_aggregates():
    store = InMemoryCustomerStore()
    assert store.average_age() is None
    assert store.age_standard_deviation() is None

    store.save(_record(age=10))
    assert store.age_standard_deviation() == 0.0

    store.save(_record(age=20))
    assert store.average_age() == pytest.approx(15.0)
    assert store.age_standard_deviation() == pytest.approx(5.0)


def test_save_with_explicit_id_sets_creation_timestamp():
    store = InMemoryCustomerStore()
    imported = store.save(_record(id=42))
    created = store.save(_record())

    assert imported.creationTimestamp is not None
    assert imported.updateTimestamp == imported.creationTimestamp
    assert created.id == 43
    assert [r.id for r in store.find_all_order_by_creation_desc()] == [43, 42]
