"""
Field normalization shared by the event and booking validators
"""

import re
from typing import Any, List

import pandas as pd

from devevent.core.errors import ValidationError

SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")
ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
CLOCK_TIME = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")
EMAIL_SHAPE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Words general parsing resolves against the clock
RELATIVE_DATE_WORDS = {"now", "today", "tomorrow", "yesterday"}


def require_text(field: str, value: Any) -> str:
    """Return the trimmed string, or fail if it is missing or blank."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, f"{field} is required and cannot be empty.")
    return value.strip()


def require_text_list(field: str, value: Any) -> List[str]:
    """Return the trimmed items of a non-empty list of non-blank strings."""
    if not isinstance(value, (list, tuple)) or not value:
        raise ValidationError(field, f"{field} must contain at least one non-empty item.")
    if not all(isinstance(item, str) and item.strip() for item in value):
        raise ValidationError(field, f"{field} must contain at least one non-empty item.")
    return [item.strip() for item in value]


def slugify(title: str) -> str:
    """Generate a URL-friendly slug from an event title."""
    slug = SLUG_SEPARATORS.sub("-", str(title).strip().lower())
    return slug.strip("-")


def normalize_date(value: Any) -> str:
    """Normalize a date string to ISO format (YYYY-MM-DD).

    Values already in ISO form pass through unchanged. Anything else goes
    through general date parsing and is converted to the UTC calendar date;
    a parsed value without a timezone is taken to be UTC.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("date", "Date is required and cannot be empty.")
    trimmed = value.strip()

    if ISO_DATE.match(trimmed):
        return trimmed

    if trimmed.lower() in RELATIVE_DATE_WORDS:
        raise ValidationError("date", f'Invalid date format: "{value}".')

    try:
        parsed = pd.to_datetime(trimmed)
    except (ValueError, TypeError, OverflowError) as exc:
        raise ValidationError("date", f'Invalid date format: "{value}".') from exc
    if pd.isna(parsed):
        raise ValidationError("date", f'Invalid date format: "{value}".')

    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert("UTC")
    return parsed.strftime("%Y-%m-%d")


def normalize_time(value: Any) -> str:
    """Normalize a time string to 24h format HH:mm."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("time", "Time is required and cannot be empty.")
    trimmed = value.strip()

    match = CLOCK_TIME.match(trimmed)
    if not match:
        raise ValidationError("time", f'Invalid time format (expected HH:mm): "{value}".')

    hours, minutes = int(match.group(1)), int(match.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValidationError("time", f'Invalid time value: "{value}".')

    return f"{hours:02d}:{minutes:02d}"


def normalize_email(value: Any) -> str:
    """Trim and lower-case an email address after checking its local@domain.tld shape."""
    if not isinstance(value, str):
        raise ValidationError("email", "Invalid email address.")
    email = value.strip().lower()
    if not EMAIL_SHAPE.match(email):
        raise ValidationError("email", "Invalid email address.")
    return email
