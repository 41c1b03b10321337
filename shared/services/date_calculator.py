"""Calendar arithmetic for rentals: chargeable days and return status."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Union

DateLike = Union[date, datetime, str, None]

_SECONDS_PER_DAY = 24 * 60 * 60


class ReturnStatus(str, enum.Enum):
    EARLY = "early"
    ON_TIME = "on_time"
    GRACE_PERIOD = "grace_period"
    LATE = "late"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ReturnAnalysis:
    status: ReturnStatus
    is_early: bool = False
    is_late: bool = False
    is_within_grace: bool = False
    extra_days: int = 0
    actual_date: Optional[date] = None
    planned_date: Optional[date] = None
    grace_end_date: Optional[date] = None


@dataclass(frozen=True)
class RentalPeriod:
    start_date: date
    end_date: date
    chargeable_days: int

    @property
    def duration(self) -> str:
        return "1 day" if self.chargeable_days == 1 else f"{self.chargeable_days} days"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Reads a date, datetime or ISO string; returns None when it cannot.

    Aware datetimes are converted to naive UTC so they can be compared with
    plain dates.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value: Any) -> Optional[date]:
    """Like ``parse_datetime`` but drops the time of day (midnight normalization)."""
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None


def calculate_chargeable_days(start: DateLike, end: DateLike, minimum_days: int = 1) -> int:
    """
    Number of billable days between two dates.

    Both boundary days count, so a same-day rental is one day. The result is
    never below ``minimum_days``; unreadable dates or an end before the start
    also yield ``minimum_days``.
    """
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        return minimum_days

    day_diff = (end_date - start_date).days
    if day_diff < 0:
        return minimum_days

    return max(minimum_days, day_diff + 1)


def usage_days(start: DateLike, actual_return: DateLike) -> Optional[int]:
    """Days actually used: ``max(1, ceil((actual - start) / 1 day))``.

    Returns None when either date is unreadable so the caller can fall back.
    """
    start_dt = parse_datetime(start)
    actual_dt = parse_datetime(actual_return)
    if start_dt is None or actual_dt is None:
        return None

    elapsed = (actual_dt - start_dt).total_seconds() / _SECONDS_PER_DAY
    return max(1, math.ceil(elapsed))


def analyze_return_status(actual: DateLike, planned: DateLike, grace_days: int = 1) -> ReturnAnalysis:
    """
    Classifies a return against the planned date plus a grace window.

    early: before planned; on_time: on the planned day; grace_period: after
    planned but not after planned + grace; late: after the grace window, with
    ``extra_days`` counted from the grace-period end.
    """
    actual_date = parse_date(actual)
    planned_date = parse_date(planned)
    if actual_date is None or planned_date is None:
        return ReturnAnalysis(status=ReturnStatus.UNKNOWN)

    grace_end_date = planned_date + timedelta(days=grace_days)

    is_early = actual_date < planned_date
    is_late = actual_date > grace_end_date
    is_within_grace = planned_date < actual_date <= grace_end_date

    extra_days = (actual_date - grace_end_date).days if is_late else 0

    if is_early:
        status = ReturnStatus.EARLY
    elif is_late:
        status = ReturnStatus.LATE
    elif is_within_grace:
        status = ReturnStatus.GRACE_PERIOD
    else:
        status = ReturnStatus.ON_TIME

    return ReturnAnalysis(
        status=status,
        is_early=is_early,
        is_late=is_late,
        is_within_grace=is_within_grace,
        extra_days=extra_days,
        actual_date=actual_date,
        planned_date=planned_date,
        grace_end_date=grace_end_date,
    )


def rental_period(start: DateLike, end: DateLike) -> Optional[RentalPeriod]:
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        return None
    return RentalPeriod(
        start_date=start_date,
        end_date=end_date,
        chargeable_days=calculate_chargeable_days(start_date, end_date),
    )
