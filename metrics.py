"""Dashboard statistics and chart series computed from transaction lists.

All functions take transactions that have already been fetched (from either
store) and, where relevant, filtered to the selected period.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from demo_data import DEFAULT_CATEGORIES
from models import TransactionType
from periods import Period
from schemas import (
    BudgetProgress,
    CashFlowPoint,
    CategoryTotal,
    DashboardStats,
    TransactionOut,
)

ZERO = Decimal("0")

# Longer periods (including "all") get no daily series.
MAX_DAILY_POINTS = 366


def _totals(transactions: Iterable[TransactionOut]) -> tuple[Decimal, Decimal]:
    income = ZERO
    expense = ZERO
    for txn in transactions:
        if txn.type == TransactionType.income:
            income += txn.amount
        else:
            expense += txn.amount
    return income, expense


def dashboard_stats(
    transactions: Iterable[TransactionOut], initial_balance: Optional[Decimal] = None
) -> DashboardStats:
    income, expense = _totals(transactions)
    initial = initial_balance or ZERO
    savings_rate = float((income - expense) / income * 100) if income > 0 else 0.0
    return DashboardStats(
        total_balance=initial + income - expense,
        total_income=income,
        total_expense=expense,
        savings_rate=savings_rate,
    )


def savings_status(stats: DashboardStats) -> str:
    if stats.total_income <= 0:
        return "no_income"
    if stats.savings_rate >= 20:
        return "excellent"
    if stats.savings_rate > 0:
        return "good"
    return "needs_work"


def monthly_cash_flow(transactions: Iterable[TransactionOut]) -> list[CashFlowPoint]:
    buckets: dict[tuple[int, int], list[Decimal]] = defaultdict(lambda: [ZERO, ZERO])
    for txn in transactions:
        bucket = buckets[(txn.date.year, txn.date.month)]
        if txn.type == TransactionType.income:
            bucket[0] += txn.amount
        else:
            bucket[1] += txn.amount
    points = []
    for (year, month), (income, expense) in sorted(buckets.items()):
        label = date(year, month, 1).strftime("%b %y")
        points.append(CashFlowPoint(name=label, income=income, expense=expense))
    return points


def daily_cash_flow(
    transactions: Iterable[TransactionOut], period: Period
) -> list[CashFlowPoint]:
    if (period.end - period.start).days + 1 > MAX_DAILY_POINTS:
        return []
    by_day: dict[date, list[Decimal]] = defaultdict(lambda: [ZERO, ZERO])
    for txn in transactions:
        if not period.contains(txn.date):
            continue
        bucket = by_day[txn.date]
        if txn.type == TransactionType.income:
            bucket[0] += txn.amount
        else:
            bucket[1] += txn.amount

    points = []
    day = period.start
    while day <= period.end:
        income, expense = by_day.get(day, (ZERO, ZERO))
        points.append(
            CashFlowPoint(name=day.strftime("%d %b"), income=income, expense=expense)
        )
        day += timedelta(days=1)
    return points


def top_spending_categories(
    transactions: Iterable[TransactionOut], limit: int = 5
) -> list[CategoryTotal]:
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        if txn.type == TransactionType.expense:
            totals[txn.category] += txn.amount
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [CategoryTotal(name=name, value=value) for name, value in ranked[:limit]]


def budget_progress(
    transactions: Iterable[TransactionOut], limits: Mapping[str, Decimal]
) -> list[BudgetProgress]:
    spent: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        if txn.type == TransactionType.expense:
            spent[txn.category] += txn.amount

    progress = []
    for category in sorted(limits):
        limit = Decimal(limits[category])
        used = spent.get(category, ZERO)
        percent = float(used / limit * 100) if limit > 0 else (100.0 if used else 0.0)
        progress.append(
            BudgetProgress(
                category=category,
                limit=limit,
                spent=used,
                remaining=limit - used,
                percent=percent,
                over_budget=used > limit,
            )
        )
    return progress


def chart_points(
    values: list[Decimal],
    width: float = 100.0,
    height: float = 40.0,
    ceiling: Optional[Decimal] = None,
) -> str:
    """SVG polyline points for an area chart whose baseline is zero.

    Series drawn on the same axes should share ``ceiling``.
    """
    if not values:
        return ""
    if len(values) == 1:
        values = [values[0], values[0]]
    max_v = ceiling if ceiling is not None else max(values)
    pad_top = 2.0
    usable_h = height - pad_top
    step = width / (len(values) - 1)
    points: list[str] = []
    for idx, v in enumerate(values):
        x = idx * step
        if max_v <= 0:
            y = height
        else:
            y = pad_top + (1 - float(v / max_v)) * usable_h
        points.append(f"{x:.2f},{y:.2f}")
    return " ".join(points)


def active_categories(limits: Mapping[str, Decimal]) -> list[str]:
    if not limits:
        return list(DEFAULT_CATEGORIES)
    return sorted(limits)
