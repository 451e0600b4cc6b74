from decimal import Decimal

import pytest

from formatting import (
    format_amount_input,
    format_compact,
    format_currency,
    format_number_string,
    from_cents,
    parse_amount,
    parse_formatted_number,
    to_cents,
)
from models import CurrencyCode, Language


def test_format_currency_uses_locale_grouping_and_symbol() -> None:
    assert (
        format_currency(Decimal("15000000"), CurrencyCode.idr, Language.id)
        == "Rp 15.000.000"
    )
    assert format_currency(Decimal("15000000"), CurrencyCode.idr, Language.en) == "IDR 15,000,000"
    assert format_currency(1234.5, CurrencyCode.usd, Language.en) == "$1,235"
    assert format_currency(-50, CurrencyCode.eur, Language.en) == "-€50"
    assert format_currency(Decimal("42"), "USD", "id") == "US$42"


def test_format_compact_axis_labels() -> None:
    assert format_compact(Decimal("1500000"), CurrencyCode.usd) == "$1.5M"
    assert format_compact(Decimal("2000"), CurrencyCode.idr) == "IDR 2K"
    assert format_compact(Decimal("950"), CurrencyCode.usd) == "$950"
    assert format_compact(Decimal("3000000000"), CurrencyCode.eur) == "€3B"


def test_number_string_round_trip_strips_non_digits() -> None:
    assert format_number_string("1500000") == "1.500.000"
    assert format_number_string("abc12") == "12"
    assert format_number_string("") == ""
    assert parse_formatted_number("1.500.000") == Decimal("1500000")
    assert parse_formatted_number("") == Decimal("0")


def test_parse_amount_handles_grouped_thousands_and_decimal_comma() -> None:
    assert parse_amount("Rp 15.000") == Decimal("15000.00")
    assert parse_amount("12,50") == Decimal("12.50")
    assert parse_amount("$7") == Decimal("7.00")
    assert parse_amount("-5", allow_negative=True) == Decimal("-5.00")


def test_parse_amount_rejects_negative_and_garbage() -> None:
    with pytest.raises(ValueError):
        parse_amount("-5")
    with pytest.raises(ValueError):
        parse_amount("abc")


def test_cents_conversion_rounds_half_up() -> None:
    assert to_cents(Decimal("12.345")) == 1235
    assert to_cents(10) == 1000
    assert from_cents(1235) == Decimal("12.35")


def test_amount_input_keeps_sign_and_cents_for_parse_amount() -> None:
    assert format_amount_input(Decimal("15000000")) == "15.000.000"
    assert format_amount_input(Decimal("1500.5")) == "1.500,50"
    assert format_amount_input(Decimal("-250.75")) == "-250,75"

    for value in ("15000000", "1500.50", "-1500.50", "0.05"):
        text = format_amount_input(Decimal(value))
        assert parse_amount(text, allow_negative=True) == Decimal(value)


def test_parse_amount_grouped_negative_and_oversized_values() -> None:
    assert parse_amount("-1.500", allow_negative=True) == Decimal("-1500.00")
    assert parse_amount("1500.50") == Decimal("1500.50")
    with pytest.raises(ValueError):
        parse_amount("1e40")
    with pytest.raises(ValueError):
        parse_amount("")
