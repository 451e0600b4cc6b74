from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from formatting import from_cents, to_cents
from models import BudgetLimit, CurrencyCode, Language, Profile, Transaction
from schemas import TransactionIn, TransactionOut, UserProfile


def profile_from_row(row: Profile) -> UserProfile:
    return UserProfile(
        name=row.name or "",
        email=row.email or "",
        currency=row.currency or CurrencyCode.idr,
        language=row.language or Language.en,
        dark_mode=True if row.dark_mode is None else row.dark_mode,
        onboarding_completed=bool(row.onboarding_completed),
        tour_completed=bool(row.tour_completed),
        email_alerts=True if row.email_alerts is None else row.email_alerts,
        monthly_report=True if row.monthly_report is None else row.monthly_report,
        initial_balance=from_cents(row.initial_balance_cents or 0),
        monthly_budget_goal=(
            from_cents(row.monthly_budget_goal_cents)
            if row.monthly_budget_goal_cents is not None
            else None
        ),
    )


def profile_to_row(profile: UserProfile) -> dict[str, Any]:
    goal = profile.monthly_budget_goal
    return {
        "name": profile.name or "",
        "currency": profile.currency or CurrencyCode.idr,
        "language": profile.language or Language.en,
        "dark_mode": profile.dark_mode,
        "onboarding_completed": profile.onboarding_completed,
        "tour_completed": profile.tour_completed,
        "email_alerts": profile.email_alerts,
        "monthly_report": profile.monthly_report,
        "initial_balance_cents": to_cents(profile.initial_balance or 0),
        "monthly_budget_goal_cents": to_cents(goal) if goal is not None else None,
    }


def transaction_from_row(row: Transaction) -> TransactionOut:
    return TransactionOut(
        id=str(row.id),
        amount=from_cents(row.amount_cents),
        description=row.description,
        category=row.category,
        type=row.type,
        date=row.date,
        created_at=row.created_at,
    )


class LiveStore:
    """Table-level reads and writes against the relational database."""

    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def select_transactions(self) -> list[TransactionOut]:
        stmt = (
            select(Transaction)
            .where(Transaction.user_id == self.user_id)
            .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        )
        return [transaction_from_row(row) for row in self.session.scalars(stmt)]

    def insert_transaction(self, data: TransactionIn) -> TransactionOut:
        row = Transaction(
            user_id=self.user_id,
            amount_cents=to_cents(data.amount),
            description=data.description,
            category=data.category,
            type=data.type,
            date=data.date,
            created_at=datetime.utcnow(),
        )
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return transaction_from_row(row)

    def delete_transaction(self, transaction_id: str) -> None:
        try:
            pk = int(transaction_id)
        except ValueError as exc:
            raise ValueError("Transaction not found") from exc
        row = self.session.get(Transaction, pk)
        if not row or row.user_id != self.user_id:
            raise ValueError("Transaction not found")
        self.session.delete(row)
        self.session.commit()

    def select_profile(self) -> Optional[UserProfile]:
        row = self.session.get(Profile, self.user_id)
        return profile_from_row(row) if row else None

    def upsert_profile(self, profile: UserProfile, email: str) -> UserProfile:
        values = profile_to_row(profile)
        row = self.session.get(Profile, self.user_id)
        if not row:
            row = Profile(id=self.user_id)
            self.session.add(row)
        for column, value in values.items():
            setattr(row, column, value)
        row.email = email
        row.updated_at = datetime.utcnow()
        self.session.commit()
        self.session.refresh(row)
        return profile_from_row(row)

    def select_budget_limits(self) -> dict[str, Decimal]:
        stmt = select(BudgetLimit).where(BudgetLimit.user_id == self.user_id)
        return {
            row.category: from_cents(row.amount_cents)
            for row in self.session.scalars(stmt)
        }

    def replace_budget_limits(self, limits: Mapping[str, Decimal]) -> dict[str, Decimal]:
        existing = {
            row.category: row
            for row in self.session.scalars(
                select(BudgetLimit).where(BudgetLimit.user_id == self.user_id)
            )
        }
        for category, amount in limits.items():
            row = existing.get(category)
            if row is None:
                row = BudgetLimit(user_id=self.user_id, category=category)
                self.session.add(row)
            row.amount_cents = to_cents(amount)
        stale = [category for category in existing if category not in limits]
        if stale:
            self.session.execute(
                delete(BudgetLimit).where(
                    BudgetLimit.user_id == self.user_id,
                    BudgetLimit.category.in_(stale),
                )
            )
        self.session.commit()
        return self.select_budget_limits()
