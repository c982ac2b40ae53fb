"""Time utility helpers."""

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/Chicago"


def parse_end_date(value: str) -> date:
    """Parse a YYYY-MM-DD calendar date."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(
            f"invalid date format '{value}'. Expected YYYY-MM-DD"
        ) from exc


def resolve_timezone(tz_name: str) -> ZoneInfo:
    """Return the IANA zone for a name or raise ValueError."""
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone '{tz_name}'") from exc


def local_midnight_timestamp(day: date, tz_name: str = DEFAULT_TIMEZONE) -> int:
    """Return unix seconds for midnight of ``day`` in ``tz_name``.

    Raises ValueError when that wall-clock midnight is ambiguous (repeated by a
    DST fall-back) or does not exist (skipped by a DST spring-forward).
    """
    zone = resolve_timezone(tz_name)
    naive = datetime.combine(day, time(0, 0))
    early = naive.replace(tzinfo=zone, fold=0)
    late = naive.replace(tzinfo=zone, fold=1)

    if early.utcoffset() != late.utcoffset():
        round_trip = early.astimezone(UTC).astimezone(zone).replace(tzinfo=None)
        if round_trip != naive:
            raise ValueError(f"local midnight {naive} does not exist in {tz_name}")
        raise ValueError(f"ambiguous local midnight {naive} in {tz_name}")

    return int(early.timestamp())


def format_utc(timestamp: int) -> str:
    """Format unix seconds as a UTC wall-clock string."""
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")
