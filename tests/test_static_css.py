import re
from pathlib import Path

CSS_PATH = Path(__file__).resolve().parents[1] / "static" / "css" / "main.css"


def test_dialog_modal_hidden_until_open() -> None:
    css = CSS_PATH.read_text(encoding="utf-8")

    modal_block = re.search(r"dialog\.modal\s*\{[^}]*\}", css, re.DOTALL)
    assert modal_block, "Expected a `dialog.modal { ... }` block in static/css/main.css"
    assert "display: none;" in modal_block.group(0)

    open_block = re.search(r"dialog\.modal\[open\]\s*\{[^}]*\}", css, re.DOTALL)
    assert open_block, (
        "Expected a `dialog.modal[open] { ... }` block in static/css/main.css"
    )
    assert "display: flex;" in open_block.group(0)


def test_filter_bar_pills_do_not_wrap() -> None:
    css = CSS_PATH.read_text(encoding="utf-8")

    rule = re.search(r"\.filter-bar\s+\.pill\s*\{[^}]*\}", css, re.DOTALL)
    assert rule, "Expected a `.filter-bar .pill { ... }` rule in static/css/main.css"
    assert "white-space: nowrap;" in rule.group(0)


def test_income_and_expense_lines_are_coloured() -> None:
    css = CSS_PATH.read_text(encoding="utf-8")

    for selector, colour in ((r"\.line-income", "--income"), (r"\.line-expense", "--expense")):
        rule = re.search(selector + r"\s*\{[^}]*\}", css)
        assert rule, f"Expected a rule for {selector}"
        assert colour in rule.group(0)
