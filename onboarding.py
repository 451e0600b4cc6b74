from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from models import CurrencyCode, Language
from schemas import UserProfile

TOTAL_STEPS = 4

STEP_LANGUAGE = 1
STEP_NAME = 2
STEP_CURRENCY = 3
STEP_BUDGET = 4


@dataclass
class OnboardingWizard:
    step: int = STEP_LANGUAGE
    language: Language = Language.en
    name: str = ""
    currency: CurrencyCode = CurrencyCode.idr
    budget_goal: str = ""

    @property
    def progress(self) -> float:
        return self.step / TOTAL_STEPS * 100

    @property
    def can_advance(self) -> bool:
        if self.step >= TOTAL_STEPS:
            return False
        if self.step == STEP_NAME:
            return bool(self.name.strip())
        return True

    @property
    def can_finish(self) -> bool:
        return self.step == TOTAL_STEPS and bool(self.budget_goal.strip())

    def apply(self, form: Mapping[str, Any]) -> None:
        """Copy the field belonging to the current step from a submitted form."""
        if self.step == STEP_LANGUAGE and form.get("language"):
            self.language = Language(form["language"])
        elif self.step == STEP_NAME and "name" in form:
            self.name = str(form["name"]).strip()
        elif self.step == STEP_CURRENCY and form.get("currency"):
            self.currency = CurrencyCode(form["currency"])
        elif self.step == STEP_BUDGET and "budget_goal" in form:
            self.budget_goal = str(form["budget_goal"]).strip()

    def next(self) -> None:
        if self.can_advance:
            self.step += 1

    def back(self) -> None:
        if self.step > 1:
            self.step -= 1

    def budget_amount(self) -> Decimal:
        digits = re.sub(r"[^0-9]", "", self.budget_goal)
        return Decimal(digits) if digits else Decimal("0")

    def finish(self, profile: UserProfile) -> UserProfile:
        if not self.can_finish:
            raise ValueError("Monthly budget goal is required")
        return profile.model_copy(
            update={
                "name": self.name,
                "currency": self.currency,
                "language": self.language,
                "onboarding_completed": True,
                "monthly_budget_goal": self.budget_amount(),
            }
        )

    def to_session(self) -> dict[str, Any]:
        data = asdict(self)
        data["language"] = self.language.value
        data["currency"] = self.currency.value
        return data

    @classmethod
    def from_session(cls, data: Optional[Mapping[str, Any]]) -> "OnboardingWizard":
        if not data:
            return cls()
        return cls(
            step=min(max(int(data.get("step", STEP_LANGUAGE)), 1), TOTAL_STEPS),
            language=Language(data.get("language", Language.en.value)),
            name=str(data.get("name", "")),
            currency=CurrencyCode(data.get("currency", CurrencyCode.idr.value)),
            budget_goal=str(data.get("budget_goal", "")),
        )
