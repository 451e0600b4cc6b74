from datetime import date
from types import SimpleNamespace

import pytest

from periods import Period, filter_transactions, resolve_period

TODAY = date(2025, 3, 15)


def test_default_period_is_month_to_date() -> None:
    period = resolve_period(None, None, None, today=TODAY)
    assert period == Period("this_month", date(2025, 3, 1), TODAY)
    assert resolve_period("bogus", None, None, today=TODAY).slug == "this_month"


def test_last_month_covers_full_previous_month() -> None:
    period = resolve_period("last_month", None, None, today=TODAY)
    assert (period.start, period.end) == (date(2025, 2, 1), date(2025, 2, 28))

    january = resolve_period("last_month", None, None, today=date(2025, 1, 10))
    assert (january.start, january.end) == (date(2024, 12, 1), date(2024, 12, 31))


def test_last_three_months_and_all_time() -> None:
    period = resolve_period("last_3_months", None, None, today=TODAY)
    assert (period.start, period.end) == (date(2025, 1, 1), TODAY)

    wrapped = resolve_period("last_3_months", None, None, today=date(2025, 1, 10))
    assert wrapped.start == date(2024, 11, 1)

    everything = resolve_period("all", None, None, today=TODAY)
    assert (everything.start, everything.end) == (date(1970, 1, 1), TODAY)


def test_custom_period_requires_ordered_bounds() -> None:
    period = resolve_period("custom", "2025-01-05", "2025-01-20", today=TODAY)
    assert (period.start, period.end) == (date(2025, 1, 5), date(2025, 1, 20))

    with pytest.raises(ValueError):
        resolve_period("custom", "2025-01-05", None, today=TODAY)
    with pytest.raises(ValueError):
        resolve_period("custom", "2025-02-01", "2025-01-01", today=TODAY)


def test_filter_transactions_is_inclusive_on_both_ends() -> None:
    period = Period("custom", date(2025, 1, 1), date(2025, 1, 31))
    rows = [
        SimpleNamespace(date=date(2024, 12, 31)),
        SimpleNamespace(date=date(2025, 1, 1)),
        SimpleNamespace(date=date(2025, 1, 31)),
        SimpleNamespace(date=date(2025, 2, 1)),
    ]
    kept = filter_transactions(rows, period)
    assert [row.date for row in kept] == [date(2025, 1, 1), date(2025, 1, 31)]
    assert period.query == "period=custom&start=2025-01-01&end=2025-01-31"
