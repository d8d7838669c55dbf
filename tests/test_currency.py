from __future__ import annotations

from decimal import Decimal

import pytest

from facturador.core.currency import (
    format_currency,
    format_percentage,
    format_quantity,
    round_money,
    sanitize_number,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (3, 3.0),
        ("19.99", 19.99),
        ("  7 ", 7.0),
        (Decimal("2.50"), 2.5),
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ("-inf", 0.0),
        (object(), 0.0),
        ([1, 2], 0.0),
        ("1_000", 0.0),
        ("1_0.5", 0.0),
    ],
)
def test_sanitize_number(value, expected) -> None:
    result = sanitize_number(value)
    assert isinstance(result, float)
    assert result == expected


def test_format_quantity() -> None:
    assert format_quantity(3) == "3"
    assert format_quantity(3.5) == "3.50"
    assert format_quantity("2") == "2"
    assert format_quantity(1234.5) == "1,234.50"
    assert format_quantity(None) == "0"


def test_format_currency() -> None:
    assert format_currency(1234.5) == "1,234.50"
    assert format_currency(0) == "0.00"
    assert format_currency("not a number") == "0.00"
    assert format_currency(1234567.891) == "1,234,567.89"
    # half away from zero on the shortest decimal form
    assert format_currency(0.125) == "0.13"
    assert format_currency(1.005) == "1.01"
    assert format_currency(-0.001) == "0.00"


def test_format_percentage_drops_trailing_zeros() -> None:
    assert format_percentage(21) == "21"
    assert format_percentage(10.5) == "10.5"
    assert format_percentage(7.125) == "7.13"
    assert format_percentage(1000) == "1,000"
    assert format_percentage(None) == "0"


def test_round_money() -> None:
    assert round_money(2.675) == 2.68
    assert round_money("oops") == 0.0
