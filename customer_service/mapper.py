"""Conversions between wire models and CustomerRecord."""

from __future__ import annotations

from .errors import InvalidDataError
from .models import CreateRequest, CustomerRecord, CustomerView, UpdateRequest, provided


def to_view(record: CustomerRecord | None) -> CustomerView | None:
    if record is None:
        return None
    return CustomerView(
        id=record.id,
        firstName=record.firstName,
        lastName=record.lastName,
        age=record.age,
        birthDate=record.birthDate,
        estimatedMilestoneDate=record.estimatedMilestoneDate,
        creationTimestamp=record.creationTimestamp,
        updateTimestamp=record.updateTimestamp,
    )


def from_create_request(request: CreateRequest | None) -> CustomerRecord:
    """Build a new, unsaved record from a create request.

    Names are trimmed. The estimated milestone date and the audit timestamps
    are left empty for the service and the store to fill in.

    Raises:
        InvalidDataError: request missing, a name missing or blank, or
            age / birthDate missing.
    """
    if request is None:
        raise InvalidDataError("Customer data cannot be null")

    if request.firstName is None or not request.firstName.strip():
        raise InvalidDataError("First name cannot be null or empty")

    if request.lastName is None or not request.lastName.strip():
        raise InvalidDataError("Last name cannot be null or empty")

    if request.age is None:
        raise InvalidDataError("Age cannot be null")

    if request.birthDate is None:
        raise InvalidDataError("Birth date cannot be null")

    return CustomerRecord(
        firstName=request.firstName.strip(),
        lastName=request.lastName.strip(),
        age=request.age,
        birthDate=request.birthDate,
    )


def _trimmed_name(request: UpdateRequest, field: str, label: str) -> str | None:
    if not provided(request, field):
        return None
    value = getattr(request, field).strip()
    if not value:
        raise InvalidDataError(f"{label} cannot be empty")
    return value


def apply_update(record: CustomerRecord | None, request: UpdateRequest | None) -> None:
    """Apply a partial update to `record` in place.

    Only fields present in `request` are written. Names are validated before
    anything is assigned, so a rejected update leaves `record` untouched.

    Raises:
        InvalidDataError: `record` is None while `request` is not, or a
            provided name is blank after trimming.
    """
    if request is None:
        return

    if record is None:
        raise InvalidDataError("Customer entity cannot be null for update")

    first_name = _trimmed_name(request, "firstName", "First name")
    last_name = _trimmed_name(request, "lastName", "Last name")

    if first_name is not None:
        record.firstName = first_name
    if last_name is not None:
        record.lastName = last_name
    if provided(request, "age"):
        record.age = request.age
    if provided(request, "birthDate"):
        record.birthDate = request.birthDate
