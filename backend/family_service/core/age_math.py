"""Calendar Math — full-year differences and UTC normalisation for person dates.

Invariants:
    - full_years_between counts completed calendar years (month/day aware), never year subtraction
    - A Feb 29 anniversary is reached on Mar 1 in non-leap years
    - as_utc always returns an aware datetime in UTC; naive input is taken as UTC

Design Decisions:
    - Dates compared on their calendar date part only: a person born at 23:00 is a day
      old at midnight, same as the persisted representation
"""

from datetime import date, datetime, timezone


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def to_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return as_utc(value).date()
    return value


def full_years_between(earlier: date | datetime, later: date | datetime) -> int:
    """Number of completed years from `earlier` to `later` (negative if reversed)."""
    start, end = to_date(earlier), to_date(later)
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return years


def age_on(birth_date: date | datetime, on: date | None = None) -> int:
    return full_years_between(birth_date, on or today_utc())
