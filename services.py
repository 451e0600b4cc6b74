from __future__ import annotations

import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from auth import AuthSession
from demo_data import (
    DEFAULT_CATEGORIES,
    DEMO_BUDGET_LIMIT,
    DEMO_INITIAL_BALANCE,
    generate_demo_data,
)
from local_storage import (
    ALL_KEYS,
    DEMO_BUDGET_KEY,
    DEMO_DATA_KEY,
    DEMO_MODE_KEY,
    DEMO_PROFILE_KEY,
    DemoStore,
    LocalStorage,
)
from periods import local_today
from schemas import TransactionIn, TransactionOut, UserProfile
from store import LiveStore

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = UserProfile()

# Synthetic demo latency in seconds, scaled by DemoStore.latency_scale.
GET_TRANSACTIONS_DELAY = 0.5
ADD_TRANSACTION_DELAY = 0.4
UPDATE_SETTINGS_DELAY = 0.6


class NotAuthenticatedError(ValueError):
    def __init__(self) -> None:
        super().__init__("User not authenticated")


def validate_budget_limits(limits: Mapping[str, object]) -> dict[str, Decimal]:
    clean: dict[str, Decimal] = {}
    for category, amount in limits.items():
        name = str(category).strip()
        if not name:
            raise ValueError("Budget category must not be empty")
        if len(name) > 100:
            raise ValueError("Budget category is too long")
        try:
            value = Decimal(str(amount))
        except ArithmeticError as exc:
            raise ValueError(f"Invalid budget amount for {name}") from exc
        if not value.is_finite() or value < 0:
            raise ValueError(f"Budget amount for {name} must not be negative")
        clean[name] = value
    return clean


class FinanceService:
    """Reads and writes finance data against demo storage or the live database.

    Every operation checks :meth:`is_demo_mode` first. Demo mode keeps one JSON
    document per entity in the client's local storage and simulates network
    latency; live mode goes through :class:`store.LiveStore` scoped to the
    signed-in user.
    """

    def __init__(
        self,
        demo_store: DemoStore,
        storage: LocalStorage,
        session: Session,
        auth_session: Optional[AuthSession] = None,
    ) -> None:
        self.demo_store = demo_store
        self.storage = storage
        self.session = session
        self.auth_session = auth_session

    def _live(self) -> Optional[LiveStore]:
        if not self.auth_session:
            return None
        return LiveStore(self.session, self.auth_session.user_id)

    # mode management

    def enable_demo_mode(self) -> None:
        self.storage.set_item(DEMO_MODE_KEY, "true")
        if self.storage.get_item(DEMO_DATA_KEY) is not None:
            return
        demo_txs = generate_demo_data(local_today())
        self._write_transactions(demo_txs)
        demo_profile = DEFAULT_SETTINGS.model_copy(
            update={
                "name": "Demo User",
                "email": "demo@example.com",
                "initial_balance": DEMO_INITIAL_BALANCE,
                "onboarding_completed": True,
                "tour_completed": False,
            }
        )
        self.storage.set_json(
            DEMO_PROFILE_KEY, demo_profile.model_dump(mode="json", by_alias=True)
        )
        self.storage.set_json(
            DEMO_BUDGET_KEY,
            {category: str(DEMO_BUDGET_LIMIT) for category in DEFAULT_CATEGORIES},
        )
        logger.info(f"demo mode seeded with {len(demo_txs)} transactions")

    def disable_demo_mode(self) -> None:
        self.storage.remove_item(DEMO_MODE_KEY)

    def is_demo_mode(self) -> bool:
        return self.storage.get_item(DEMO_MODE_KEY) == "true"

    def clear_local_session(self) -> None:
        for key in ALL_KEYS:
            self.storage.remove_item(key)

    # transactions

    def _read_transactions(self) -> list[TransactionOut]:
        raw = self.storage.get_json(DEMO_DATA_KEY, [])
        return [TransactionOut.model_validate(item) for item in raw]

    def _write_transactions(self, transactions: list[TransactionOut]) -> None:
        self.storage.set_json(
            DEMO_DATA_KEY, [txn.model_dump(mode="json") for txn in transactions]
        )

    def get_transactions(self) -> list[TransactionOut]:
        if self.is_demo_mode():
            self.demo_store.pause(GET_TRANSACTIONS_DELAY)
            transactions = self._read_transactions()
        else:
            live = self._live()
            if not live:
                return []
            try:
                transactions = live.select_transactions()
            except Exception:
                logger.exception("Error loading transactions")
                self.session.rollback()
                return []
        return sorted(
            transactions, key=lambda txn: (txn.date, txn.created_at), reverse=True
        )

    def add_transaction(self, data: TransactionIn) -> TransactionOut:
        if self.is_demo_mode():
            self.demo_store.pause(ADD_TRANSACTION_DELAY)
            new_tx = TransactionOut(
                **data.model_dump(),
                id=f"demo-{time.time_ns() // 1_000_000}",
                created_at=datetime.utcnow(),
            )
            current = self._read_transactions()
            self._write_transactions([new_tx, *current])
            return new_tx

        live = self._live()
        if not live:
            raise NotAuthenticatedError()
        added = live.insert_transaction(data)
        logger.info(f"transaction added: id={added.id} user_id={live.user_id}")
        return added

    def delete_transaction(self, transaction_id: str) -> None:
        if self.is_demo_mode():
            current = self._read_transactions()
            self._write_transactions(
                [txn for txn in current if txn.id != transaction_id]
            )
            return

        live = self._live()
        if not live:
            raise NotAuthenticatedError()
        live.delete_transaction(transaction_id)
        logger.info(f"transaction deleted: id={transaction_id} user_id={live.user_id}")

    # user profile

    def get_user_settings(self) -> UserProfile:
        if self.is_demo_mode():
            stored = self.storage.get_json(DEMO_PROFILE_KEY, None)
            if stored is None:
                return DEFAULT_SETTINGS.model_copy()
            return UserProfile.model_validate(stored)

        live = self._live()
        if not live:
            return DEFAULT_SETTINGS.model_copy()
        try:
            profile = live.select_profile()
        except Exception:
            logger.exception("Error loading profile")
            self.session.rollback()
            profile = None
        if profile is None:
            return DEFAULT_SETTINGS.model_copy(update={"email": self.auth_session.email})
        return profile

    def update_user_settings(self, settings: UserProfile) -> UserProfile:
        if self.is_demo_mode():
            self.demo_store.pause(UPDATE_SETTINGS_DELAY)
            self.storage.set_json(
                DEMO_PROFILE_KEY, settings.model_dump(mode="json", by_alias=True)
            )
            return settings

        live = self._live()
        if not live:
            raise NotAuthenticatedError()
        return live.upsert_profile(settings, email=self.auth_session.email)

    # budgets

    def get_budget_limits(self) -> dict[str, Decimal]:
        if self.is_demo_mode():
            stored = self.storage.get_json(DEMO_BUDGET_KEY, {})
            return {category: Decimal(str(amount)) for category, amount in stored.items()}

        live = self._live()
        if not live:
            return {}
        try:
            return live.select_budget_limits()
        except Exception:
            logger.exception("Error loading budget limits")
            self.session.rollback()
            return {}

    def update_budget_limits(self, limits: Mapping[str, object]) -> dict[str, Decimal]:
        clean = validate_budget_limits(limits)
        if self.is_demo_mode():
            self.storage.set_json(
                DEMO_BUDGET_KEY,
                {category: str(amount) for category, amount in clean.items()},
            )
            return clean

        live = self._live()
        if not live:
            raise NotAuthenticatedError()
        return live.replace_budget_limits(clean)
