from __future__ import annotations

import re
from datetime import date, datetime, timezone

PLACEHOLDER = "-"

_ISO_DATE_ONLY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_ISO_DATETIME = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T([01]\d|2[0-3]):([0-5]\d)"
    r"(?::([0-5]\d)(\.\d{1,6})?)?(Z|[+-](?:[01]\d|2[0-3]):[0-5]\d)?$"
)

# Short numeric styles keyed by locale tag.
_DATE_STYLES = {
    "en-us": "{month}/{day}/{year}",
    "en-in": "{day}/{month}/{year}",
    "en-gb": "{day:02d}/{month:02d}/{year}",
}


def now_utc() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def normalize_locale(locale: str | None) -> str:
    value = (locale or "en-US").strip().lower().replace("_", "-")
    if value not in _DATE_STYLES:
        raise ValueError(f"Unsupported date locale: {locale!r}")
    return value


def _coerce_date(value: date | datetime | str | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_optional_iso_date(value)
        except ValueError:
            return None
    return None


def fmt_date(value: date | datetime | str | None, locale: str = "en-US") -> str:
    """Short numeric date for the given locale; missing or invalid values become "-"."""
    style = _DATE_STYLES[normalize_locale(locale)]
    day = _coerce_date(value)
    if day is None:
        return PLACEHOLDER
    return style.format(day=day.day, month=day.month, year=day.year)


def fmt_duration(
    start: date | datetime | str | None,
    end: date | datetime | str | None,
    locale: str = "en-US",
) -> str:
    if start is None and end is None:
        return PLACEHOLDER
    return f"{fmt_date(start, locale)} to {fmt_date(end, locale)}"


def _valid_calendar_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_optional_iso_date(value, field: str = "date") -> date | None:
    """Parse ``YYYY-MM-DD`` or an ISO datetime; blank input means "not provided"."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value).strip()
    if not raw:
        return None

    parsed: date | None = None
    match = _ISO_DATE_ONLY.match(raw)
    if match:
        parsed = _valid_calendar_date(*(int(part) for part in match.groups()))
    else:
        match = _ISO_DATETIME.match(raw)
        if match:
            parsed = _valid_calendar_date(
                int(match.group(1)), int(match.group(2)), int(match.group(3))
            )
    if parsed is None:
        raise ValueError(
            f"Invalid {field}. Use ISO format (YYYY-MM-DD or YYYY-MM-DDTHH:mm:ss.sssZ)."
        )
    return parsed
