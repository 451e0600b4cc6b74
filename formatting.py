import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from models import CurrencyCode, Language

Number = Union[Decimal, int, float]

_GROUP_SEPARATORS = {Language.en: ",", Language.id: "."}

_SYMBOLS = {
    Language.en: {CurrencyCode.usd: "$", CurrencyCode.eur: "€", CurrencyCode.idr: "IDR "},
    Language.id: {CurrencyCode.usd: "US$", CurrencyCode.eur: "€", CurrencyCode.idr: "Rp "},
}

_COMPACT_UNITS = (
    (Decimal("1000000000000"), "T"),
    (Decimal("1000000000"), "B"),
    (Decimal("1000000"), "M"),
    (Decimal("1000"), "K"),
)

_GROUPED_THOUSANDS = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def to_cents(amount: Number) -> int:
    value = Decimal(str(amount)) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def _group(digits: str, separator: str) -> str:
    return re.sub(r"\B(?=(\d{3})+(?!\d))", separator, digits)


def format_currency(
    amount: Number,
    currency: CurrencyCode = CurrencyCode.usd,
    language: Language = Language.en,
) -> str:
    """Render an amount in whole currency units, e.g. ``Rp 15.000.000``."""
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = _group(str(abs(int(value))), _GROUP_SEPARATORS[Language(language)])
    symbol = _SYMBOLS[Language(language)][CurrencyCode(currency)]
    return f"{sign}{symbol}{digits}"


def format_compact(amount: Number, currency: CurrencyCode = CurrencyCode.usd) -> str:
    """Short chart-axis label such as ``$1.5M``; always en-US notation."""
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    suffix = ""
    for threshold, unit in _COMPACT_UNITS:
        if magnitude >= threshold:
            magnitude = magnitude / threshold
            suffix = unit
            break
    rounded = magnitude.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    text = f"{rounded:f}"
    if text.endswith(".0"):
        text = text[:-2]
    symbol = _SYMBOLS[Language.en][CurrencyCode(currency)]
    return f"{sign}{symbol}{text}{suffix}"


def format_number_string(value: str) -> str:
    digits = re.sub(r"\D", "", value or "")
    return _group(digits, ".")


def parse_formatted_number(value: str) -> Decimal:
    digits = re.sub(r"\D", "", value or "")
    if not digits:
        return Decimal("0")
    return Decimal(digits)


def format_amount_input(amount: Number) -> str:
    """Pre-fill value for an amount field that :func:`parse_amount` reads back.

    Thousands are grouped with ``.`` and cents, when present, follow a ``,``:
    ``Decimal("-1500.5")`` becomes ``-1.500,50``.
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, cents = f"{abs(value):f}".split(".")
    text = _group(whole, ".")
    if cents != "00":
        text = f"{text},{cents}"
    return f"{sign}{text}"


def parse_amount(value: str, *, allow_negative: bool = False) -> Decimal:
    clean = (
        value.strip()
        .replace("Rp", "")
        .replace("€", "")
        .replace("$", "")
        .replace(" ", "")
    )
    clean = clean.replace(",", ".")
    if _GROUPED_THOUSANDS.match(clean):
        clean = clean.replace(".", "")
    elif clean.count(".") > 1:
        parts = clean.split(".")
        clean = "".join(parts[:-1]) + "." + parts[-1]
    try:
        amount = Decimal(clean)
    except InvalidOperation as exc:
        raise ValueError("Invalid amount") from exc
    if not amount.is_finite():
        raise ValueError("Invalid amount")
    if amount < 0 and not allow_negative:
        raise ValueError("Amount must be positive")
    try:
        return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError("Amount is too large") from exc
