"""Clock helpers shared by the challenge and token code."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def now_ms() -> int:
    """Current time in integer epoch milliseconds."""
    return int(utcnow().timestamp() * 1000)


def now_seconds() -> int:
    """Current time in integer epoch seconds."""
    return int(utcnow().timestamp())


def iso_from_ms(timestamp_ms: int) -> str:
    """Render epoch milliseconds as ISO-8601 UTC, e.g. ``2024-01-01T00:00:00.000Z``."""
    seconds, millis = divmod(timestamp_ms, 1000)
    moment = datetime.fromtimestamp(seconds, tz=UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{millis:03d}Z"
