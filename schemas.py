from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import CurrencyCode, Language, TransactionType


class CamelModel(BaseModel):
    """Base for payloads exchanged with pages and the JSON API.

    Fields are snake_case in Python and camelCase on the wire, so both
    ``initial_balance`` and ``initialBalance`` are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    type: TransactionType
    date: date


class TransactionOut(TransactionIn):
    id: str
    created_at: datetime


class UserProfile(CamelModel):
    name: str = ""
    email: str = ""
    currency: CurrencyCode = CurrencyCode.idr
    language: Language = Language.en
    dark_mode: bool = True
    onboarding_completed: bool = False
    tour_completed: bool = False
    email_alerts: bool = True
    monthly_report: bool = True
    initial_balance: Decimal = Decimal("0")
    monthly_budget_goal: Optional[Decimal] = None


class Credentials(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=72)


class DashboardStats(CamelModel):
    total_balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    savings_rate: float


class CashFlowPoint(CamelModel):
    name: str
    income: Decimal
    expense: Decimal


class CategoryTotal(CamelModel):
    name: str
    value: Decimal


class BudgetProgress(CamelModel):
    category: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percent: float
    over_budget: bool


class SessionInfo(CamelModel):
    authenticated: bool
    mode: Literal["demo", "live", "anonymous"]
    email: Optional[str] = None
    csrf_token: str
