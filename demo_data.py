import random
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from models import TransactionType
from schemas import TransactionOut

DEFAULT_CATEGORIES = (
    "Food & Dining",
    "Transport",
    "Shopping",
    "Bills & Utilities",
    "Entertainment",
    "Health",
    "Education",
    "Others",
)

DEMO_BUDGET_LIMIT = Decimal("2000000")
DEMO_INITIAL_BALANCE = Decimal("15000000")

# (description, lowest, highest) in thousands of rupiah
_EXPENSE_TEMPLATES = {
    "Food & Dining": [("Lunch", 25, 90), ("Groceries", 150, 600), ("Coffee", 20, 60)],
    "Transport": [("Ride share", 15, 80), ("Fuel", 100, 300), ("Train ticket", 5, 40)],
    "Shopping": [("Clothes", 150, 900), ("Household items", 50, 400)],
    "Bills & Utilities": [("Electricity", 300, 700), ("Internet", 350, 450), ("Phone credit", 50, 150)],
    "Entertainment": [("Cinema", 50, 120), ("Streaming subscription", 55, 190)],
    "Health": [("Pharmacy", 30, 250), ("Gym membership", 250, 500)],
    "Education": [("Online course", 100, 800), ("Books", 80, 300)],
    "Others": [("Gift", 100, 500), ("Donation", 50, 200)],
}

EXPENSES_PER_MONTH = 18


def _month_starts(today: date, months: int) -> list[date]:
    starts = []
    first = today.replace(day=1)
    for _ in range(months):
        starts.append(first)
        first = (first - timedelta(days=1)).replace(day=1)
    return list(reversed(starts))


def _month_end(first: date) -> date:
    next_first = (first + timedelta(days=32)).replace(day=1)
    return next_first - timedelta(days=1)


def generate_demo_data(
    today: date, *, months: int = 3, seed: Optional[int] = 42
) -> list[TransactionOut]:
    """Build a plausible history for the demo account, newest first."""
    rng = random.Random(seed)
    rows: list[tuple[date, TransactionType, str, str, Decimal]] = []

    for first in _month_starts(today, months):
        last = min(_month_end(first), today)
        rows.append(
            (first, TransactionType.income, "Salary", "Monthly salary", Decimal("12000000"))
        )
        freelance_day = first.replace(day=15)
        if freelance_day <= last and rng.random() < 0.7:
            amount = Decimal(rng.randrange(1500, 4000, 250)) * 1000
            rows.append(
                (freelance_day, TransactionType.income, "Freelance", "Freelance project", amount)
            )
        for _ in range(EXPENSES_PER_MONTH):
            category = rng.choice(DEFAULT_CATEGORIES)
            description, low, high = rng.choice(_EXPENSE_TEMPLATES[category])
            day = first + timedelta(days=rng.randrange((last - first).days + 1))
            amount = Decimal(rng.randint(low, high)) * 1000
            rows.append((day, TransactionType.expense, category, description, amount))

    rows.sort(key=lambda row: row[0], reverse=True)
    return [
        TransactionOut(
            id=f"demo-seed-{index}",
            amount=amount,
            description=description,
            category=category,
            type=txn_type,
            date=day,
            created_at=datetime.combine(day, time(12, 0)),
        )
        for index, (day, txn_type, category, description, amount) in enumerate(rows)
    ]
