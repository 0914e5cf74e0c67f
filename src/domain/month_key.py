"""MonthKey Value Object

Validated calendar month with a canonical YYYY-MM text form. All month and
day derivations happen in UTC; naive datetimes are taken to be UTC already.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Union

from src.app.errors import InvalidMonthFormat, InvalidMonthRange

MONTH_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}$", re.ASCII)
MIN_YEAR = 1900
MAX_YEAR = 2100

DateLike = Union[date, datetime]


def to_utc(value: DateLike) -> DateLike:
    """Return datetimes as naive UTC; plain dates pass through unchanged"""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def day_key(value: DateLike) -> date:
    """UTC calendar day of a date or timestamp"""
    value = to_utc(value)
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class MonthRange:
    """Inclusive UTC bounds of a calendar month"""

    start: datetime
    end: datetime

    def __contains__(self, value: DateLike) -> bool:
        if not isinstance(value, datetime):
            value = datetime.combine(value, time.min)
        value = to_utc(value).replace(tzinfo=timezone.utc)
        return self.start <= value <= self.end


@dataclass(frozen=True, order=True)
class MonthKey:
    """
    Calendar month (year, month)

    Construct through MonthKey.parse() for text input or MonthKey(year, month)
    for integers; both validate ranges. Instances are immutable and hashable so
    they can be used as cache key parts.
    """

    year: int
    month: int

    def __post_init__(self):
        if not MIN_YEAR <= self.year <= MAX_YEAR or not 1 <= self.month <= 12:
            raise InvalidMonthRange(self.year, self.month)

    @classmethod
    def parse(cls, text: str) -> "MonthKey":
        if not isinstance(text, str) or not MONTH_KEY_PATTERN.fullmatch(text):
            raise InvalidMonthFormat(text)
        year, month = (int(part) for part in text.split("-"))
        return cls(year, month)

    @classmethod
    def key_of(cls, value: DateLike) -> "MonthKey":
        """Month a date or timestamp falls in, in UTC"""
        value = to_utc(value)
        return cls(value.year, value.month)

    @classmethod
    def current(cls) -> "MonthKey":
        return cls.key_of(datetime.now(timezone.utc))

    @staticmethod
    def is_same(a: "MonthKey", b: "MonthKey") -> bool:
        return a.year == b.year and a.month == b.month

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def range(self) -> MonthRange:
        """First and last instant of the month (UTC, microsecond precision)"""
        start = datetime(self.year, self.month, 1, tzinfo=timezone.utc)
        last_day = date(self.year, self.month, self.days_in_month)
        end = datetime.combine(last_day, time.max, tzinfo=timezone.utc)
        return MonthRange(start=start, end=end)

    def contains(self, value: DateLike) -> bool:
        return value in self.range()

    def previous(self) -> "MonthKey":
        if self.month == 1:
            return MonthKey(self.year - 1, 12)
        return MonthKey(self.year, self.month - 1)

    def next(self) -> "MonthKey":
        if self.month == 12:
            return MonthKey(self.year + 1, 1)
        return MonthKey(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def range_for(key: MonthKey) -> MonthRange:
    return key.range()


def key_of(value: DateLike) -> MonthKey:
    return MonthKey.key_of(value)
