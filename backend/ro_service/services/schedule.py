"""Recurring maintenance schedule generation.

Pure functions only: they turn a customer's joining date and requested visit
count (or an explicit list of dates) into an ordered list of visit dates. The
caller turns the result into Service rows.

Automatic policy (kept for behavioural parity with existing customers):

    actual_count = max(1, floor(12 / desired_count))
    interval     = 12 / actual_count months

so a customer asking for 4 visits a year gets 3 visits, 4 months apart.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Sequence, Union
from dateutil.relativedelta import relativedelta

from ro_service.errors import InvalidInput

MONTHS_PER_YEAR = 12

DateLike = Union[date, datetime, str]


@dataclass(frozen=True)
class ScheduledVisit:
    service_number: int
    scheduled_date: date


def parse_date(value: DateLike, field_name: str = 'date') -> date:
    """Coerce an ISO date string / datetime / date into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            pass
    raise InvalidInput(description=f'{field_name} must be an ISO date (YYYY-MM-DD)')


def actual_service_count(desired_count: int) -> int:
    if isinstance(desired_count, bool) or not isinstance(desired_count, int) or desired_count <= 0:
        raise InvalidInput(description='number_of_services must be a positive integer')
    return max(1, MONTHS_PER_YEAR // desired_count)


def generate_automatic_schedule(joining_date: DateLike, desired_count: int) -> List[date]:
    start = parse_date(joining_date, 'joining_date')
    count = actual_service_count(desired_count)
    interval = MONTHS_PER_YEAR // count
    # Offsets are taken from the joining date each time so a clamped month end
    # (e.g. Jan 31 -> Feb 29) does not drift later visits.
    return [start + relativedelta(months=i * interval) for i in range(count)]


def generate_manual_schedule(explicit_dates: Sequence[DateLike]) -> List[date]:
    if not explicit_dates or isinstance(explicit_dates, (str, bytes)):
        raise InvalidInput(description='service_dates must be a non-empty list')
    parsed = [parse_date(d, 'service_dates') for d in explicit_dates]
    return sorted(parsed)


def number_schedule(dates: Iterable[date]) -> List[ScheduledVisit]:
    """Assign 1-based service numbers from list position."""
    return [ScheduledVisit(service_number=idx + 1, scheduled_date=d) for idx, d in enumerate(dates)]


__all__ = [
    'ScheduledVisit', 'parse_date', 'actual_service_count', 'generate_automatic_schedule',
    'generate_manual_schedule', 'number_schedule',
]
