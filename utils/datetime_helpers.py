"""UTC date/time helpers for reservation windows."""

from datetime import datetime, timezone

# Storage format for every timestamp column; sorts chronologically as text
STORAGE_FORMAT = '%Y-%m-%dT%H:%M:%S'


def utc_now() -> datetime:
    """Current instant as a naive UTC datetime (storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value) -> datetime:
    """
    Parse a reservation timestamp into a naive UTC datetime.

    Accepts datetime objects and ISO-8601 strings, with or without offset
    (a trailing 'Z' is understood). Aware values are converted to UTC;
    naive values are taken as UTC already.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=0)


def to_storage(value) -> str:
    """Normalize a timestamp to the stored text form."""
    return parse_timestamp(value).strftime(STORAGE_FORMAT)
