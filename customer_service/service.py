"""CustomerOperations: the business layer.

Flow for writes:
    check age/birthDate -> map -> derive milestone -> store -> notify -> view

Notifications are best-effort. A failing sink is logged and ignored; the
write it follows has already been stored and the caller still gets a result.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from . import mapper
from .errors import InvalidDataError, NotFoundError
from .logger import get_logger
from .models import CreateRequest, CustomerRecord, CustomerView, StatsResult, UpdateRequest, provided
from .notifications import CUSTOMER_CREATED, CUSTOMER_DELETED, CUSTOMER_UPDATED, NotificationSink
from .store import CustomerStore
from .validation import age_matches_birth_date, estimated_milestone_date, today_utc, years_between

log = get_logger(__name__)


class CustomerOperations:
    def __init__(self, store: CustomerStore, sink: NotificationSink) -> None:
        self.store = store
        self.sink = sink

    def create(self, request: CreateRequest) -> CustomerView:
        """Create a customer and announce it on `customer.created`.

        Raises:
            InvalidDataError: missing data, or age inconsistent with birthDate.
        """
        if request is None:
            raise InvalidDataError("Customer data cannot be null")

        _validate_age_matches_birth_date(request.age, request.birthDate)

        record = mapper.from_create_request(request)
        record.estimatedMilestoneDate = estimated_milestone_date(record.birthDate)

        saved = self.store.save(record)
        log.info("customer_created", customer_id=saved.id)

        view = mapper.to_view(saved)
        self._publish_safely(CUSTOMER_CREATED, view.model_dump(mode="json"))
        return view

    def get_all(self) -> list[CustomerView]:
        """All customers, newest first."""
        return [mapper.to_view(r) for r in self.store.find_all_order_by_creation_desc()]

    def get_by_id(self, customer_id: int) -> CustomerView:
        return mapper.to_view(self._find_or_raise(customer_id))

    def update(self, customer_id: int, request: UpdateRequest) -> CustomerView:
        """Apply a partial update.

        The age/birthDate check runs only when both are supplied; a lone
        field is trusted against the stored counterpart. The milestone date
        is recomputed whenever birthDate is supplied.

        Raises:
            NotFoundError: no customer with `customer_id`.
            InvalidDataError: blank name, or age inconsistent with birthDate.
        """
        record = self._find_or_raise(customer_id)
        if request is None:
            request = UpdateRequest()

        if provided(request, "age") and provided(request, "birthDate"):
            _validate_age_matches_birth_date(request.age, request.birthDate)

        mapper.apply_update(record, request)

        if provided(request, "birthDate"):
            record.estimatedMilestoneDate = estimated_milestone_date(record.birthDate)

        saved = self.store.save(record)
        log.info(
            "customer_updated",
            customer_id=saved.id,
            fields=sorted(f for f in request.model_fields_set if provided(request, f)),
        )

        view = mapper.to_view(saved)
        self._publish_safely(CUSTOMER_UPDATED, view.model_dump(mode="json"))
        return view

    def delete(self, customer_id: int) -> None:
        """Delete a customer; the notification carries only the id."""
        record = self._find_or_raise(customer_id)
        self.store.delete(record)
        log.info("customer_deleted", customer_id=customer_id)
        self._publish_safely(CUSTOMER_DELETED, customer_id)

    def get_stats(self) -> StatsResult:
        return StatsResult(
            averageAge=self.store.average_age(),
            ageStandardDeviation=self.store.age_standard_deviation(),
            totalCount=self.store.count(),
        )

    def get_average_age(self) -> float | None:
        return self.store.average_age()

    def get_age_standard_deviation(self) -> float | None:
        return self.store.age_standard_deviation()

    def _find_or_raise(self, customer_id: int) -> CustomerRecord:
        record = self.store.find_by_id(customer_id)
        if record is None:
            raise NotFoundError(customer_id)
        return record

    def _publish_safely(self, topic: str, payload: Any) -> None:
        try:
            self.sink.publish(topic, payload)
            log.info("notification_sent", topic=topic)
        except Exception as e:
            # at-most-once: the write already happened, do not undo or retry
            log.warning("notification_failed", topic=topic, error=str(e))


def _validate_age_matches_birth_date(age: int | None, birth_date: date | None) -> None:
    if age_matches_birth_date(age, birth_date):
        return
    calculated = years_between(birth_date, today_utc())
    raise InvalidDataError(
        f"Age {age} does not match birth date {birth_date.isoformat()} "
        f"(calculated age: {calculated})"
    )
