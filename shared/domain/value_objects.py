"""
Common Value Objects

- RentalPeriod: an inclusive range of calendar days (pick-up day to return day)
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator

from shared.domain.base import ValueObject

DAY_TOKEN_FORMAT = '%Y-%m-%d'


def as_date(value: date | datetime) -> date:
    """Normalize a datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def day_token(value: date | datetime) -> str:
    """Render a day as the ``yyyy-MM-dd`` token stored in availability indexes."""
    return as_date(value).strftime(DAY_TOKEN_FORMAT)


@dataclass(frozen=True)
class RentalPeriod(ValueObject):
    """
    Rental period value object

    Both ends are inclusive: a single-day rental has ``start == end`` and
    lasts one day.
    """
    start: date
    end: date

    def __post_init__(self):
        object.__setattr__(self, 'start', as_date(self.start))
        object.__setattr__(self, 'end', as_date(self.end))
        if self.end < self.start:
            raise ValueError(f"Return date ({self.end}) cannot be before the start date ({self.start})")

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __str__(self):
        return f"{self.start.strftime('%d.%m.%Y')} - {self.end.strftime('%d.%m.%Y')}"

    def __repr__(self):
        return f"RentalPeriod({self.start}, {self.end})"
