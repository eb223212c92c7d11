"""
Field normalization helpers shared by the list adapters

Date handling never raises: an unparseable value is logged at WARNING and
mapped to None (or to the supplied fallback for listing dates).
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from ingestion.errors import DateParseError
from ingestion.records import ADDRESS_FIELDS
from xml_utils import sanitize_for_logging

logger = logging.getLogger(__name__)

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]

# Tried in order after ISO-8601
DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %Y",
    "%B %Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%Y-%m",
    "%Y",
)


def to_datetime(value: Any) -> datetime:
    """
    Parse a source date value.

    Accepts ISO dates/datetimes, "12 Mar 1960", "Mar 1960", "1960",
    "15/03/1960" and date/datetime objects. Partial dates resolve to the
    first day of the period.

    Raises:
        DateParseError: If the value matches no known format
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip() if value is not None else ""
    if not text:
        raise DateParseError("empty date value")

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    raise DateParseError(f"unrecognized date '{text}'")


def parse_date(
    value: Any,
    field: str = "date",
    ref: Optional[str] = None,
    log: Optional[LoggerLike] = None
) -> Optional[date]:
    """
    Calendar date or None.

    Args:
        value: Raw date value (None/empty means not supplied)
        field: Field name used in the warning
        ref: Record reference used in the warning
        log: Logger for the warning

    Returns:
        date, or None when absent or unparseable
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return to_datetime(value).date()
    except (DateParseError, ValueError, OverflowError):
        (log or logger).warning(
            f"Invalid {field} for {ref or 'record'}: {sanitize_for_logging(str(value))}"
        )
        return None


def parse_datetime(
    value: Any,
    fallback: datetime,
    field: str = "date",
    ref: Optional[str] = None,
    log: Optional[LoggerLike] = None
) -> datetime:
    """
    Timezone-aware datetime, or ``fallback`` when absent or unparseable.

    Naive values are taken as UTC.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return fallback
    try:
        parsed = to_datetime(value)
    except (DateParseError, ValueError, OverflowError):
        (log or logger).warning(
            f"Invalid {field} for {ref or 'record'}: {sanitize_for_logging(str(value))}"
        )
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def clean(value: Any) -> Optional[str]:
    """Stripped string, or None for None/blank"""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def join_text(parts: Iterable[Any], sep: str = ", ") -> Optional[str]:
    """Join non-empty parts; None when nothing remains"""
    kept = [c for c in (clean(p) for p in parts) if c]
    return sep.join(kept) if kept else None


def full_name(first: Optional[str], last: Optional[str]) -> Optional[str]:
    """Join as "first last", else last, else first, else None"""
    first, last = clean(first), clean(last)
    if first and last:
        return f"{first} {last}"
    return last or first


def unique_aliases(aliases: Iterable[Optional[str]], primary: str) -> Optional[List[str]]:
    """
    Order-preserving alias list without blanks, repeats or the primary name.

    Comparison is case-insensitive; the first spelling seen is kept.

    Returns:
        List of aliases, or None when empty
    """
    seen = {primary.strip().casefold()} if primary else set()
    result: List[str] = []
    for alias in aliases:
        alias = clean(alias)
        if not alias:
            continue
        key = alias.casefold()
        if key in seen:
            continue
        seen.add(key)
        result.append(alias)
    return result or None


def make_address(**fields: Any) -> Optional[Dict[str, Optional[str]]]:
    """
    Canonical address dict with every address field present.

    Returns:
        Address dict, or None when every field is empty
    """
    unknown = set(fields) - set(ADDRESS_FIELDS)
    if unknown:
        raise ValueError(f"Unknown address fields: {sorted(unknown)}")
    address = {name: clean(fields.get(name)) for name in ADDRESS_FIELDS}
    if not any(address.values()):
        return None
    return address


def address_list(addresses: Iterable[Optional[Dict[str, Optional[str]]]]) -> Optional[List[Dict[str, Optional[str]]]]:
    """Drop empty addresses; None when nothing remains"""
    kept = [a for a in addresses if a]
    return kept or None


def is_true(value: Any) -> bool:
    """XML boolean attribute/element value ("true", "1", True)"""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes") if value is not None else False
