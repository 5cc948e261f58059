"""ISO-8601 periods and times of day.

Schedules express delays, intervals and expirations as ISO-8601 periods such
as "P3D", "P1M", "P3W" or "PT1H". Months and years are calendar units, so they
parse to dateutil relativedelta rather than timedelta: P1M after January 31
lands on the last day of February.
"""

from __future__ import annotations

import re
from datetime import time

from dateutil.relativedelta import relativedelta

_PERIOD = re.compile(
    r"^P(?!$)"
    r"(?:(?P<years>\d+)Y)?"
    r"(?:(?P<months>\d+)M)?"
    r"(?:(?P<weeks>\d+)W)?"
    r"(?:(?P<days>\d+)D)?"
    r"(?:T(?=\d)(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)


def parse_period(value: str) -> relativedelta:
    """Parse an ISO-8601 period. Raises ValueError when malformed."""
    match = _PERIOD.match(value.strip().upper())
    if match is None:
        raise ValueError(f"Invalid ISO-8601 period: {value!r}")
    parts = {name: int(amount) for name, amount in match.groupdict().items() if amount}
    return relativedelta(**parts)


def is_zero(period: relativedelta) -> bool:
    return not any(
        (period.years, period.months, period.days, period.hours, period.minutes, period.seconds)
    )


def is_sub_day(period: relativedelta) -> bool:
    return not any((period.years, period.months, period.days))


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM" (or "HH:MM:SS"). Raises ValueError when malformed."""
    parsed = time.fromisoformat(value)
    if parsed.tzinfo is not None:
        raise ValueError(f"Time of day must not carry an offset: {value!r}")
    return parsed
