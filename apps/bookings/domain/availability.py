"""
Availability Calculator

Products keep a denormalized index of booked days (``unavailable_dates``,
``yyyy-MM-dd`` tokens). These helpers answer "can this day / range be
rented" against that index and expand a rental range into the tokens that
get written back when a booking commits.
"""

from datetime import date, datetime
from typing import Collection, Iterable, Iterator, List

from django.utils import timezone

from shared.domain.value_objects import RentalPeriod, as_date, day_token


def _today(today: date | None) -> date:
    return today if today is not None else timezone.localdate()


def _span(start: date | datetime, end: date | datetime) -> Iterator[date]:
    if as_date(end) < as_date(start):
        return iter(())
    return RentalPeriod(start, end).days()


def is_date_blocked(day: date | datetime, unavailable: Collection[str], today: date | None = None) -> bool:
    """
    True if ``day`` is in the past or already taken

    Past means strictly before today at day granularity: today itself can
    still be rented.
    """
    day = as_date(day)
    if day < _today(today):
        return True
    return day_token(day) in unavailable


def is_range_blocked(
    start: date | datetime,
    end: date | datetime,
    unavailable: Collection[str],
    today: date | None = None,
) -> bool:
    """True if any day of the inclusive span is blocked. Stops at the first hit."""
    today = _today(today)
    return any(is_date_blocked(day, unavailable, today) for day in _span(start, end))


def blocked_days(
    start: date | datetime,
    end: date | datetime,
    unavailable: Collection[str],
    today: date | None = None,
) -> List[date]:
    """Every blocked day of the inclusive span, for calendar rendering."""
    today = _today(today)
    return [day for day in _span(start, end) if is_date_blocked(day, unavailable, today)]


def expand_range_to_day_tokens(start: date | datetime, end: date | datetime) -> List[str]:
    """
    Every calendar day from start to end inclusive as ``yyyy-MM-dd``

    A single-day rental (start == end) gives exactly one token. An end
    before the start gives an empty list; callers reject such ranges first.
    """
    return [day_token(day) for day in _span(start, end)]


def merge_day_tokens(existing: Iterable[str], new: Iterable[str]) -> List[str]:
    """Union of two token lists, sorted so the stored index stays stable."""
    return sorted(set(existing) | set(new))


def conflicting_tokens(existing: Iterable[str], requested: Iterable[str]) -> List[str]:
    return sorted(set(existing) & set(requested))
