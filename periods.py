from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, TypeVar
from zoneinfo import ZoneInfo

from config import get_settings

PERIOD_SLUGS = ("this_month", "last_month", "last_3_months", "all", "custom")

T = TypeVar("T")


@dataclass(frozen=True)
class Period:
    slug: str
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def query(self) -> str:
        return f"period={self.slug}&start={self.start}&end={self.end}"


def local_today() -> date:
    return datetime.now(ZoneInfo(get_settings().timezone)).date()


def _shift_month(first: date, months: int) -> date:
    index = first.year * 12 + (first.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def resolve_period(
    period: Optional[str],
    start: Optional[str],
    end: Optional[str],
    *,
    today: Optional[date] = None,
) -> Period:
    today = today or local_today()
    first_this = today.replace(day=1)
    if period == "all":
        return Period("all", date(1970, 1, 1), today)
    if period == "last_month":
        last_month_end = first_this - date.resolution
        return Period("last_month", last_month_end.replace(day=1), last_month_end)
    if period == "last_3_months":
        return Period("last_3_months", _shift_month(first_this, -2), today)
    if period == "custom":
        if not start or not end:
            raise ValueError("Custom period requires start and end dates")
        start_date = date.fromisoformat(start)
        end_date = date.fromisoformat(end)
        if start_date > end_date:
            raise ValueError("Start date must be before end date")
        return Period("custom", start_date, end_date)

    # this month, up to and including today
    return Period("this_month", first_this, today)


def filter_transactions(transactions: Iterable[T], period: Period) -> list[T]:
    return [txn for txn in transactions if period.contains(txn.date)]
