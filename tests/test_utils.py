"""Field validators and prompt helpers."""
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from realty.errors import ValidationError
from realty import utils
from realty.utils import (parse_date, parse_email, parse_phone, parse_state, parse_zip,
                          parse_int, parse_decimal, parse_percentage, parse_choice,
                          fmt_money, fmt_pct, FormCancelled)


def test_parse_date_accepts_iso():
    assert parse_date("2024-02-29") == date(2024, 2, 29)


@pytest.mark.parametrize("text", ["2023-02-29", "2024-13-01", "12/01/2024", "2024-1-1", ""])
def test_parse_date_rejects_bad_input(text):
    with pytest.raises(ValidationError):
        parse_date(text)


def test_parse_email_lowercases():
    assert parse_email(" Maria.Lopez@Example.COM ") == "maria.lopez@example.com"


@pytest.mark.parametrize("text", ["maria", "maria@", "@example.com", "maria@example", "a b@example.com"])
def test_parse_email_rejects(text):
    with pytest.raises(ValidationError):
        parse_email(text)


@pytest.mark.parametrize("text", ["555-201-3344", "(555) 201 3344", "+44 20 7946 0958", "5552013"])
def test_parse_phone_accepts(text):
    assert parse_phone(text) == text


@pytest.mark.parametrize("text", ["12345", "555-CALL-NOW", "+1 555 201 3344 5566 77"])
def test_parse_phone_rejects(text):
    with pytest.raises(ValidationError):
        parse_phone(text)


def test_parse_state_and_zip():
    assert parse_state("il") == "IL"
    assert parse_zip("62701-1234") == "62701-1234"
    with pytest.raises(ValidationError):
        parse_state("Ill")
    with pytest.raises(ValidationError):
        parse_zip("6270")


def test_parse_int_range():
    assert parse_int("3", minimum=0, maximum=10) == 3
    with pytest.raises(ValidationError):
        parse_int("-1", minimum=0)
    with pytest.raises(ValidationError):
        parse_int("2.5")


def test_parse_decimal_strips_currency():
    assert parse_decimal("$185,000.50") == Decimal("185000.50")


def test_parse_decimal_exclusive_minimum():
    with pytest.raises(ValidationError):
        parse_decimal("0", minimum=Decimal("0"), exclusive_minimum=True)
    assert parse_decimal("0", minimum=Decimal("0")) == Decimal("0")


@pytest.mark.parametrize("text", ["nan", "Infinity", "abc"])
def test_parse_decimal_rejects_non_numbers(text):
    with pytest.raises(ValidationError):
        parse_decimal(text)


def test_parse_percentage_bounds():
    assert parse_percentage("100") == Decimal("100")
    assert parse_percentage("12.5%") == Decimal("12.5")
    for bad in ("0", "-5", "100.01"):
        with pytest.raises(ValidationError):
            parse_percentage(bad)


def test_parse_choice():
    assert parse_choice(" Condo ", ["condo", "townhouse"]) == "condo"
    with pytest.raises(ValidationError):
        parse_choice("castle", ["condo", "townhouse"])


def test_formatters():
    assert fmt_money(Decimal("1234.5")) == "$1,234.50"
    assert fmt_money(None) == "N/A"
    assert fmt_pct(Decimal("12.346")) == "12.35%"


def test_ask_reprompts_until_valid():
    answers = iter(["not-a-date", "2025-01-15"])
    with patch.object(utils.Prompt, 'ask', side_effect=lambda *a, **k: next(answers)):
        assert utils.ask_date("Start Date") == date(2025, 1, 15)


def test_ask_required_field_reprompts_on_blank():
    answers = iter(["", "Springfield"])
    with patch.object(utils.Prompt, 'ask', side_effect=lambda *a, **k: next(answers)):
        assert utils.ask("City") == "Springfield"


def test_ask_optional_field_returns_none():
    with patch.object(utils.Prompt, 'ask', return_value=""):
        assert utils.ask("ZIP Code", parse_zip, required=False) is None


def test_ask_q_cancels():
    with patch.object(utils.Prompt, 'ask', return_value="q"):
        with pytest.raises(FormCancelled):
            utils.ask("City")


def test_ask_id_returns_none_on_cancel():
    with patch.object(utils.Prompt, 'ask', return_value="q"):
        assert utils.ask_id("Owner ID") is None


@pytest.mark.parametrize("text, places, max_digits", [
    ("1.25", 1, 3),             # bathrooms NUMERIC(3,1)
    ("100", 1, 3),
    ("33.333", 2, 5),           # ownership NUMERIC(5,2)
    ("12345678901.999", 2, 12),  # purchase_price NUMERIC(12,2)
    ("10000000000", 2, 12),
    ("100000000.00", 2, 10),    # rent and payment NUMERIC(10,2)
])
def test_parse_decimal_rejects_what_the_column_cannot_hold(text, places, max_digits):
    with pytest.raises(ValidationError):
        parse_decimal(text, places=places, max_digits=max_digits)


def test_parse_decimal_accepts_values_that_fit_the_column():
    assert parse_decimal("2.5", places=1, max_digits=3) == Decimal("2.5")
    assert parse_decimal("99.9", places=1, max_digits=3) == Decimal("99.9")
    assert parse_decimal("1.50", places=1, max_digits=3) == Decimal("1.50")
    assert parse_decimal("9,999,999,999.99", places=2, max_digits=12) == Decimal("9999999999.99")


def test_parse_percentage_rejects_third_decimal_place():
    assert parse_percentage("33.33") == Decimal("33.33")
    with pytest.raises(ValidationError):
        parse_percentage("33.333")


def test_ask_decimal_reprompts_on_too_many_places():
    answers = iter(["1.25", "1.5"])
    with patch.object(utils.Prompt, 'ask', side_effect=lambda *a, **k: next(answers)):
        assert utils.ask_decimal("Bathrooms", places=1, max_digits=3) == Decimal("1.5")


def test_ask_dash_clears_optional_field_with_default():
    with patch.object(utils.Prompt, 'ask', return_value="-"):
        assert utils.ask("Phone", parse_phone, default="555-201-3344", required=False) is None


def test_ask_dash_does_not_clear_required_field():
    answers = iter(["-", "il"])
    with patch.object(utils.Prompt, 'ask', side_effect=lambda *a, **k: next(answers)):
        assert utils.ask("State", parse_state, default="IN") == "IL"
