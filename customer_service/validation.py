"""Date arithmetic and the age / birth-date consistency rule.

`age_matches_birth_date` is the only implementation of the cross-field rule.
The request models (inbound validation) and CustomerOperations (business
check) both call it, so the two entry points cannot drift apart.

"Today" is always the current UTC date.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

from dateutil.relativedelta import relativedelta

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
NAME_PATTERN = re.compile(r"^[a-zA-ZáéíóúÁÉÍÓÚñÑ\s]+$")

MIN_AGE = 0
MAX_AGE = 150

# Allowed gap between the submitted age and the age derived from birthDate.
AGE_TOLERANCE_YEARS = 1

MILESTONE_AGE_YEARS = 65

FIRST_NAME_REQUIRED = "First name is required"
LAST_NAME_REQUIRED = "Last name is required"
AGE_REQUIRED = "Age is required"
BIRTH_DATE_REQUIRED = "Birth date is required"

FIRST_NAME_LENGTH = (
    f"The first name must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters long"
)
LAST_NAME_LENGTH = (
    f"The last name must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters long"
)
NAME_PATTERN_MESSAGE = "The name can only contain letters and spaces"

AGE_MIN_MESSAGE = f"Age must be greater than or equal to {MIN_AGE}"
AGE_MAX_MESSAGE = f"Age must be less than or equal to {MAX_AGE}"
BIRTH_DATE_PAST = "Birth date must be in the past"
AGE_MISMATCH = "Age does not match birth date"


def today_utc() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


def years_between(start: date, end: date) -> int:
    """Number of whole years elapsed from `start` to `end`.

    Negative when `end` is before `start`.
    """
    return relativedelta(end, start).years


def age_matches_birth_date(
    age: int | None,
    birth_date: date | None,
    today: date | None = None,
) -> bool:
    """Check that `age` agrees with `birth_date` within one year.

    Returns True when either value is missing: there is nothing to compare.
    """
    if age is None or birth_date is None:
        return True

    calculated = years_between(birth_date, today or today_utc())
    return abs(age - calculated) <= AGE_TOLERANCE_YEARS


def estimated_milestone_date(birth_date: date) -> date:
    """Date on which a customer born on `birth_date` turns 65.

    Feb 29 birthdays land on Feb 28 in non-leap years.
    """
    return birth_date + relativedelta(years=MILESTONE_AGE_YEARS)
