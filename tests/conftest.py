from datetime import date

import pytest
from dateutil.relativedelta import relativedelta
from fastapi.testclient import TestClient

from customer_service.main import app, get_operations
from customer_service.models import CreateRequest
from customer_service.notifications import NotificationSink
from customer_service.service import CustomerOperations
from customer_service.store import InMemoryCustomerStore
from customer_service.validation import today_utc


class RecordingSink(NotificationSink):
    """Keeps every published (topic, payload) pair."""

    def __init__(self):
        self.published = []

    def publish(self, topic, payload):
        self.published.append((topic, payload))


class FailingSink(NotificationSink):
    """Counts calls and fails every one of them."""

    def __init__(self):
        self.calls = 0

    def publish(self, topic, payload):
        self.calls += 1
        raise ConnectionError("broker unreachable")


def years_ago(years: int) -> date:
    return today_utc() - relativedelta(years=years)


def create_request(first="Juan", last="Pérez", age=30, birth=None) -> CreateRequest:
    return CreateRequest(
        firstName=first,
        lastName=last,
        age=age,
        birthDate=birth if birth is not None else years_ago(age),
    )


@pytest.fixture
def store():
    return InMemoryCustomerStore()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def ops(store, sink):
    return CustomerOperations(store, sink)


@pytest.fixture
def client(ops):
    app.dependency_overrides[get_operations] = lambda: ops
    yield TestClient(app)
    app.dependency_overrides.clear()
