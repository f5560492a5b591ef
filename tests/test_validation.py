from datetime import date

import pytest

from conftest import years_ago
from customer_service.validation import (
    age_matches_birth_date,
    estimated_milestone_date,
    years_between,
)

TODAY = date(2026, 10, 18)


def test_absent_values_are_accepted():
    assert age_matches_birth_date(None, date(1990, 1, 1), TODAY) is True
    assert age_matches_birth_date(30, None, TODAY) is True
    assert age_matches_birth_date(None, None, TODAY) is True


@pytest.mark.parametrize("age,expected", [
    (30, True),
    (29, True),
    (31, True),
    (28, False),
    (32, False),
    (25, False),
])
def test_one_year_tolerance(age, expected):
    birth = date(1996, 10, 18)  # exactly 30 on TODAY
    assert age_matches_birth_date(age, birth, TODAY) is expected


def test_uses_whole_years_elapsed():
    assert years_between(date(2000, 10, 19), TODAY) == 25
    assert years_between(date(2000, 10, 18), TODAY) == 26
    assert years_between(date(2026, 1, 1), TODAY) == 0


def test_birthday_boundary_is_within_tolerance():
    # turns 26 tomorrow; both 25 and 26 are acceptable
    birth = date(2000, 10, 19)
    assert age_matches_birth_date(25, birth, TODAY)
    assert age_matches_birth_date(26, birth, TODAY)
    assert not age_matches_birth_date(27, birth, TODAY)


def test_defaults_to_current_utc_date():
    assert age_matches_birth_date(40, years_ago(40)) is True
    assert age_matches_birth_date(40, years_ago(45)) is False


def test_milestone_is_sixty_five_years_after_birth():
    assert estimated_milestone_date(date(1994, 1, 1)) == date(2059, 1, 1)


def test_milestone_for_leap_day_birth():
    assert estimated_milestone_date(date(2000, 2, 29)) == date(2065, 2, 28)
