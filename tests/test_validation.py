from datetime import date

import pytest

from league.utils.errors import ValidationError
from league.utils.validation import ensure_valid_pick, parse_day, validate_pick

VALID = {
    "date": "2026-01-10",
    "category": "football",
    "description": "Team A vs Team B",
    "selection": "Over 2.5",
    "price_factor": "1.80",
}


def check(**overrides):
    data = {**VALID, **overrides}
    return validate_pick(
        data["date"],
        data["category"],
        data["description"],
        data["selection"],
        data["price_factor"],
    )


def test_valid_candidate_is_normalized():
    candidate, reason = check(description="  Team A vs Team B ", price_factor="1.80")

    assert reason is None
    assert candidate.date == date(2026, 1, 10)
    assert candidate.description == "Team A vs Team B"
    assert candidate.price_factor == 1.80


@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"date": "10.01.2026"}, "Invalid date format"),
        ({"date": "2026-1-10"}, "Invalid date format"),
        ({"date": "2026-02-30"}, "Invalid date format"),
        ({"category": ""}, "Category is required"),
        ({"description": "A"}, "Description is too short"),
        ({"description": "x" * 101}, "Description is too long"),
        ({"selection": "   "}, "Selection is required"),
        ({"selection": "x" * 31}, "Selection is too long"),
        ({"price_factor": "abc"}, "Odds must be a number"),
        ({"price_factor": None}, "Odds must be a number"),
        ({"price_factor": "nan"}, "Odds must be a number"),
        ({"price_factor": "inf"}, "Odds must be a number"),
        ({"price_factor": float("-inf")}, "Odds must be a number"),
        ({"price_factor": 0.50}, "Odds must be at least 1.00"),
        ({"price_factor": "1000.01"}, "Odds are too high"),
    ],
)
def test_rule_violations(overrides, reason):
    candidate, message = check(**overrides)

    assert candidate is None
    assert message == reason


def test_boundaries_are_inclusive():
    assert check(price_factor=1)[1] is None
    assert check(price_factor=1000)[1] is None
    assert check(description="ab")[1] is None
    assert check(description="x" * 100)[1] is None
    assert check(selection="1")[1] is None
    assert check(selection="x" * 30)[1] is None


def test_only_first_violation_is_reported():
    _, reason = check(date="bad", category="", price_factor=0.5)
    assert reason == "Invalid date format"

    _, reason = check(description="A", selection="", price_factor=0.5)
    assert reason == "Description is too short"


def test_ensure_valid_pick_raises():
    with pytest.raises(ValidationError) as exc:
        ensure_valid_pick("2026-01-10", "football", "Team A vs Team B", "1", 0.5)

    assert exc.value.message == "Odds must be at least 1.00"


def test_parse_day():
    assert parse_day("2026-03-01") == date(2026, 3, 1)
    assert parse_day(date(2026, 3, 1)) == date(2026, 3, 1)
    assert parse_day("2026/03/01") is None
    assert parse_day(None) is None
