"""
Date window helpers. Dates travel as ISO strings (YYYY-MM-DD) so they compare
correctly as plain strings; series are always indexed by position.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from .errors import InvalidInput

WEEKDAY_LABELS = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")
WEEKEND_LABELS = {"Sa", "Su"}


def parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw.strip())
    except (AttributeError, ValueError) as exc:
        raise InvalidInput(f"Unsupported date '{raw}'. Use YYYY-MM-DD.") from exc


def add_days(date_str: str, days: int) -> str:
    return (parse_date(date_str) + timedelta(days=days)).isoformat()


def is_elapsed(date_str: str, today: str) -> bool:
    """True only for dates strictly before today; today itself is not elapsed."""
    return date_str < today


@dataclass(frozen=True)
class Calendar:
    dates: tuple[str, ...]
    weekdays: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.dates)

    def index_of(self, date_str: str) -> int:
        try:
            return self.dates.index(date_str)
        except ValueError as exc:
            raise InvalidInput(
                f"Date '{date_str}' is outside {self.dates[0]}..{self.dates[-1]}."
            ) from exc

    def is_weekend(self, index: int) -> bool:
        return self.weekdays[index] in WEEKEND_LABELS


def build_calendar(start_date: str, end_date: str) -> Calendar:
    start = parse_date(start_date)
    end = parse_date(end_date)
    if end < start:
        raise InvalidInput(f"End date {end_date} is before start date {start_date}.")

    dates: list[str] = []
    weekdays: list[str] = []
    current = start
    while current <= end:
        dates.append(current.isoformat())
        weekdays.append(WEEKDAY_LABELS[current.weekday()])
        current += timedelta(days=1)
    return Calendar(dates=tuple(dates), weekdays=tuple(weekdays))
