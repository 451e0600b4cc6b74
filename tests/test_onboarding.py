from decimal import Decimal

import pytest

from models import CurrencyCode, Language
from onboarding import STEP_BUDGET, STEP_NAME, OnboardingWizard
from schemas import UserProfile


def test_wizard_walks_all_four_steps() -> None:
    wizard = OnboardingWizard.from_session(None)
    assert wizard.step == 1
    assert wizard.progress == 25.0

    wizard.apply({"language": "id"})
    wizard.next()
    assert wizard.step == STEP_NAME
    assert wizard.language == Language.id

    # a blank name keeps the wizard on step two
    wizard.apply({"name": "   "})
    wizard.next()
    assert wizard.step == STEP_NAME

    wizard.apply({"name": "  Ana "})
    wizard.next()
    wizard.apply({"currency": "USD"})
    wizard.next()
    assert wizard.step == STEP_BUDGET
    assert wizard.progress == 100.0
    assert wizard.can_advance is False
    assert wizard.can_finish is False

    wizard.apply({"budget_goal": "5.000.000"})
    assert wizard.can_finish is True
    assert wizard.budget_amount() == Decimal("5000000")

    finished = wizard.finish(UserProfile(email="ana@example.com"))
    assert finished.name == "Ana"
    assert finished.currency == CurrencyCode.usd
    assert finished.language == Language.id
    assert finished.onboarding_completed is True
    assert finished.monthly_budget_goal == Decimal("5000000")
    assert finished.email == "ana@example.com"


def test_back_stops_at_first_step() -> None:
    wizard = OnboardingWizard(step=2, name="Ana")
    wizard.back()
    wizard.back()
    assert wizard.step == 1


def test_finish_requires_final_step_with_goal() -> None:
    with pytest.raises(ValueError):
        OnboardingWizard(step=3, name="Ana").finish(UserProfile())
    with pytest.raises(ValueError):
        OnboardingWizard(step=4, name="Ana", budget_goal=" ").finish(UserProfile())


def test_session_round_trip_and_step_clamping() -> None:
    wizard = OnboardingWizard(
        step=3, language=Language.id, name="Budi", currency=CurrencyCode.eur
    )
    data = wizard.to_session()
    assert data["language"] == "id"
    assert data["currency"] == "EUR"
    assert OnboardingWizard.from_session(data) == wizard

    assert OnboardingWizard.from_session({"step": 9}).step == 4
    assert OnboardingWizard.from_session({"step": -2}).step == 1


def test_unknown_choices_are_rejected() -> None:
    with pytest.raises(ValueError):
        OnboardingWizard().apply({"language": "fr"})
    with pytest.raises(ValueError):
        OnboardingWizard(step=3).apply({"currency": "GBP"})
