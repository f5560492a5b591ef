"""Pydantic models for customer-service.

Inbound requests are validated at the HTTP boundary so that:
- malformed payloads fail fast with a field -> message map
- an inconsistent age / birthDate pair never reaches the service
- the wire contract stays explicit and self-documenting

Field names are camelCase because they are the JSON contract.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from .validation import (
    AGE_MAX_MESSAGE,
    AGE_MIN_MESSAGE,
    AGE_MISMATCH,
    AGE_REQUIRED,
    BIRTH_DATE_PAST,
    BIRTH_DATE_REQUIRED,
    FIRST_NAME_LENGTH,
    FIRST_NAME_REQUIRED,
    LAST_NAME_LENGTH,
    LAST_NAME_REQUIRED,
    MAX_AGE,
    MAX_NAME_LENGTH,
    MIN_AGE,
    MIN_NAME_LENGTH,
    NAME_PATTERN,
    NAME_PATTERN_MESSAGE,
    age_matches_birth_date,
    today_utc,
)

EventType = Literal["customer.created", "customer.updated", "customer.deleted"]


def _check_name(value: str, length_message: str) -> str:
    if not MIN_NAME_LENGTH <= len(value.strip()) <= MAX_NAME_LENGTH:
        raise PydanticCustomError("name_length", length_message)
    if not NAME_PATTERN.match(value):
        raise PydanticCustomError("name_pattern", NAME_PATTERN_MESSAGE)
    return value


def _check_age(value: int) -> int:
    if value < MIN_AGE:
        raise PydanticCustomError("age_min", AGE_MIN_MESSAGE)
    if value > MAX_AGE:
        raise PydanticCustomError("age_max", AGE_MAX_MESSAGE)
    return value


def _check_birth_date(value: date) -> date:
    if value >= today_utc():
        raise PydanticCustomError("birth_date_past", BIRTH_DATE_PAST)
    return value


def _check_age_matches_birth_date(age: int | None, birth_date: date | None) -> None:
    if not age_matches_birth_date(age, birth_date):
        raise PydanticCustomError("age_mismatch", AGE_MISMATCH)


class CreateRequest(BaseModel):
    """Request body for `POST /api/customers`.

    All four fields are required. Fields are declared optional so that a
    missing value is reported with the service's own message instead of
    pydantic's generic "Field required".
    """

    firstName: str | None = Field(default=None, validate_default=True, examples=["Juan"])
    lastName: str | None = Field(default=None, validate_default=True, examples=["Pérez"])
    age: int | None = Field(default=None, validate_default=True, examples=[30])
    birthDate: date | None = Field(default=None, validate_default=True, examples=["1994-01-01"])

    @field_validator("firstName")
    @classmethod
    def first_name_valid(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise PydanticCustomError("first_name_required", FIRST_NAME_REQUIRED)
        return _check_name(v, FIRST_NAME_LENGTH)

    @field_validator("lastName")
    @classmethod
    def last_name_valid(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise PydanticCustomError("last_name_required", LAST_NAME_REQUIRED)
        return _check_name(v, LAST_NAME_LENGTH)

    @field_validator("age")
    @classmethod
    def age_valid(cls, v: int | None) -> int:
        if v is None:
            raise PydanticCustomError("age_required", AGE_REQUIRED)
        return _check_age(v)

    @field_validator("birthDate")
    @classmethod
    def birth_date_valid(cls, v: date | None) -> date:
        if v is None:
            raise PydanticCustomError("birth_date_required", BIRTH_DATE_REQUIRED)
        return _check_birth_date(v)

    @model_validator(mode="after")
    def age_matches(self) -> CreateRequest:
        _check_age_matches_birth_date(self.age, self.birthDate)
        return self


class UpdateRequest(BaseModel):
    """Request body for `PATCH /api/customers/{id}`.

    Every field is optional. A field that is omitted (or sent as null) leaves
    the stored value unchanged; use `provided()` to tell the cases apart.
    Constraints apply only to fields that carry a value.
    """

    firstName: str | None = Field(default=None, examples=["María"])
    lastName: str | None = Field(default=None, examples=["García"])
    age: int | None = Field(default=None, examples=[25])
    birthDate: date | None = Field(default=None, examples=["1999-05-15"])

    @field_validator("firstName")
    @classmethod
    def first_name_valid(cls, v: str | None) -> str | None:
        return v if v is None else _check_name(v, FIRST_NAME_LENGTH)

    @field_validator("lastName")
    @classmethod
    def last_name_valid(cls, v: str | None) -> str | None:
        return v if v is None else _check_name(v, LAST_NAME_LENGTH)

    @field_validator("age")
    @classmethod
    def age_valid(cls, v: int | None) -> int | None:
        return v if v is None else _check_age(v)

    @field_validator("birthDate")
    @classmethod
    def birth_date_valid(cls, v: date | None) -> date | None:
        return v if v is None else _check_birth_date(v)

    @model_validator(mode="after")
    def age_matches(self) -> UpdateRequest:
        _check_age_matches_birth_date(self.age, self.birthDate)
        return self


def provided(request: BaseModel, field: str) -> bool:
    """True when `field` was explicitly sent in `request` with a non-null value."""
    return field in request.model_fields_set and getattr(request, field) is not None


class CustomerRecord(BaseModel):
    """Persisted shape of a customer.

    `id` and both timestamps are owned by the store; `estimatedMilestoneDate`
    is derived by the service from `birthDate`.
    """

    id: int | None = None
    firstName: str
    lastName: str
    age: int
    birthDate: date
    estimatedMilestoneDate: date | None = None
    creationTimestamp: datetime | None = None
    updateTimestamp: datetime | None = None


class CustomerView(BaseModel):
    """Outward representation returned by every read/create/update."""

    id: int | None = None
    firstName: str
    lastName: str
    age: int
    birthDate: date
    estimatedMilestoneDate: date | None = None
    creationTimestamp: datetime | None = None
    updateTimestamp: datetime | None = None


class StatsResult(BaseModel):
    """Aggregates over all customers; averages are null when there are none."""

    averageAge: float | None = Field(default=None, examples=[32.5])
    ageStandardDeviation: float | None = Field(default=None, examples=[8.2])
    totalCount: int = Field(default=0, examples=[150])


class CustomerEvent(BaseModel):
    """Envelope for change notifications published to the broker.

    Fields:
        eventId: Globally unique identifier for this event (UUID string).
        eventType: One of the customer.* topics.
        eventVersion: Schema version of the envelope.
        timestamp: ISO8601 UTC timestamp string.
        payload: The customer view (created/updated) or the bare id (deleted).
    """

    eventId: str
    eventType: EventType
    eventVersion: int = 1
    timestamp: str
    payload: Any


class ErrorResponse(BaseModel):
    status: int
    message: str
    timestamp: datetime


class ValidationErrorResponse(ErrorResponse):
    errors: dict[str, str] = Field(
        default_factory=dict,
        examples=[{"age": "Age must be less than or equal to 150"}],
    )
