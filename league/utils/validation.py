"""
Schema check for candidate picks.

Rules are applied in a fixed order and only the first violation is reported,
so the caller can show a single inline message.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime

from league.utils.errors import ValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DESCRIPTION_MIN_LENGTH = 2
DESCRIPTION_MAX_LENGTH = 100
SELECTION_MIN_LENGTH = 1
SELECTION_MAX_LENGTH = 30
PRICE_FACTOR_MIN = 1.00
PRICE_FACTOR_MAX = 1000


@dataclass(frozen=True)
class PickCandidate:
    date: date
    category: str
    description: str
    selection: str
    price_factor: float


def _clean(value):
    if value is None:
        return ""
    return str(value).strip()


def parse_day(value):
    """Parse a YYYY-MM-DD string (or pass a date through); None if invalid"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _clean(value)
    if not DATE_PATTERN.match(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def _parse_price_factor(value):
    if isinstance(value, bool):
        return None
    try:
        number = float(_clean(value)) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def validate_pick(date, category, description, selection, price_factor):
    """
    Validate a raw candidate pick.

    Returns:
        (PickCandidate, None) when every rule passes,
        (None, reason) with the first failing rule otherwise.
    """
    day = parse_day(date)
    if day is None:
        return None, "Invalid date format"

    category = _clean(category)
    if not category:
        return None, "Category is required"

    description = _clean(description)
    if len(description) < DESCRIPTION_MIN_LENGTH:
        return None, "Description is too short"
    if len(description) > DESCRIPTION_MAX_LENGTH:
        return None, "Description is too long"

    selection = _clean(selection)
    if len(selection) < SELECTION_MIN_LENGTH:
        return None, "Selection is required"
    if len(selection) > SELECTION_MAX_LENGTH:
        return None, "Selection is too long"

    odds = _parse_price_factor(price_factor)
    if odds is None:
        return None, "Odds must be a number"
    if odds < PRICE_FACTOR_MIN:
        return None, "Odds must be at least 1.00"
    if odds > PRICE_FACTOR_MAX:
        return None, "Odds are too high"

    return (
        PickCandidate(
            date=day,
            category=category,
            description=description,
            selection=selection,
            price_factor=odds,
        ),
        None,
    )


def ensure_valid_pick(date, category, description, selection, price_factor):
    """Like validate_pick, but raises ValidationError instead of returning it"""
    candidate, reason = validate_pick(
        date, category, description, selection, price_factor
    )
    if candidate is None:
        raise ValidationError(reason)
    return candidate
