from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from auth import AuthClient, AuthStateNotifier
from database import Base
from local_storage import DemoStore, new_client_id
from models import BudgetLimit, CurrencyCode, Profile, TransactionType
from schemas import TransactionIn, UserProfile
from services import FinanceService, NotAuthenticatedError


def _live_service(tmp_path: Path, session: Session, email: str) -> FinanceService:
    auth = AuthClient(session, notifier=AuthStateNotifier(), secret="test-secret")
    auth_session = auth.sign_up(email, "hunter22")
    store = DemoStore(tmp_path, latency_scale=0)
    return FinanceService(store, store.client(new_client_id()), session, auth_session)


def _coffee(day: date = date(2025, 3, 2)) -> TransactionIn:
    return TransactionIn(
        amount=Decimal("12.50"),
        description="Coffee",
        category="Food & Dining",
        type=TransactionType.expense,
        date=day,
    )


def test_profile_defaults_to_account_email_until_saved(tmp_path: Path) -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        service = _live_service(tmp_path, session, "Alice@Example.com")
        profile = service.get_user_settings()
        assert profile.email == "alice@example.com"
        assert profile.currency == CurrencyCode.idr
        assert profile.onboarding_completed is False
        assert profile.monthly_budget_goal is None

        saved = service.update_user_settings(
            profile.model_copy(
                update={
                    "name": "Alice",
                    "email": "ignored@example.com",
                    "currency": CurrencyCode.usd,
                    "initial_balance": Decimal("250.75"),
                    "dark_mode": False,
                }
            )
        )
        assert saved.name == "Alice"
        assert saved.email == "alice@example.com"
        assert saved.initial_balance == Decimal("250.75")
        assert saved.monthly_budget_goal is None

        row = session.get(Profile, service.auth_session.user_id)
        assert row.initial_balance_cents == 25075
        assert row.dark_mode is False
        assert service.get_user_settings() == saved


def test_transactions_are_scoped_to_the_signed_in_user(tmp_path: Path) -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        alice = _live_service(tmp_path, session, "alice@example.com")
        bob = _live_service(tmp_path, session, "bob@example.com")

        older = alice.add_transaction(_coffee(date(2025, 3, 1)))
        newer = alice.add_transaction(_coffee(date(2025, 3, 5)))
        assert newer.id.isdigit()
        assert newer.amount == Decimal("12.50")

        assert [t.id for t in alice.get_transactions()] == [newer.id, older.id]
        assert bob.get_transactions() == []

        with pytest.raises(ValueError, match="Transaction not found"):
            bob.delete_transaction(older.id)
        with pytest.raises(ValueError, match="Transaction not found"):
            alice.delete_transaction("demo-123")

        alice.delete_transaction(older.id)
        assert [t.id for t in alice.get_transactions()] == [newer.id]


def test_budget_update_replaces_stored_rows(tmp_path: Path) -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        service = _live_service(tmp_path, session, "carol@example.com")
        assert service.get_budget_limits() == {}

        service.update_budget_limits({"Food": Decimal("100"), "Transport": "50"})
        assert service.get_budget_limits() == {
            "Food": Decimal("100"),
            "Transport": Decimal("50"),
        }

        result = service.update_budget_limits({"Food": Decimal("80")})
        assert result == {"Food": Decimal("80")}
        rows = session.scalars(select(BudgetLimit)).all()
        assert [(r.category, r.amount_cents) for r in rows] == [("Food", 8000)]

        assert service.update_budget_limits({}) == {}


def test_live_mode_without_user_is_rejected(tmp_path: Path) -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        store = DemoStore(tmp_path, latency_scale=0)
        service = FinanceService(store, store.client(new_client_id()), session)

        assert service.get_transactions() == []
        assert service.get_budget_limits() == {}
        assert service.get_user_settings() == UserProfile()

        with pytest.raises(NotAuthenticatedError):
            service.add_transaction(_coffee())
        with pytest.raises(NotAuthenticatedError):
            service.delete_transaction("1")
        with pytest.raises(NotAuthenticatedError):
            service.update_user_settings(UserProfile(name="x"))
        with pytest.raises(NotAuthenticatedError, match="User not authenticated"):
            service.update_budget_limits({"Food": 1})
