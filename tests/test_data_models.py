"""Tests for loan snapshot validation and the result dataclasses."""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal

import pytest

from debt_planner.data_models import LoanSnapshot
from debt_planner.errors import InvalidInputError, NonAmortizingPaymentError, ScheduleTooLongError
from debt_planner.planner import compare_strategies
from tests.conftest import START, make_loan


def _fields(**overrides):
    fields = {
        "id": "A",
        "principal": 1000,
        "current_balance": 800,
        "annual_rate_percent": 5,
        "term_months": 12,
        "monthly_payment": 100,
        "start_date": START,
    }
    fields.update(overrides)
    return fields


class TestLoanSnapshot:
    def test_coerces_numbers_and_dates(self):
        loan = LoanSnapshot(
            **_fields(id=7, principal="1,000", annual_rate_percent=5.5, start_date=datetime(2025, 3, 9, 12, 0))
        )

        assert loan.id == "7"
        assert loan.principal == Decimal("1000")
        assert loan.annual_rate_percent == Decimal("5.5")
        assert isinstance(loan.current_balance, Decimal)
        assert loan.start_date == date(2025, 3, 9)

    def test_accepts_year_month_start(self):
        assert LoanSnapshot(**_fields(start_date="2025-04")).start_date == date(2025, 4, 1)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"id": ""},
            {"id": None},
            {"principal": 0},
            {"principal": -5, "current_balance": 0},
            {"annual_rate_percent": -0.5},
            {"term_months": 0},
            {"term_months": 12.0},
            {"term_months": True},
            {"monthly_payment": 0},
            {"monthly_payment": "ten"},
            {"monthly_payment": None},
            {"monthly_payment": "NaN"},
            {"start_date": 20250101},
        ],
    )
    def test_rejects_invalid_fields(self, overrides):
        with pytest.raises(InvalidInputError):
            LoanSnapshot(**_fields(**overrides))

    def test_is_immutable(self):
        loan = LoanSnapshot(**_fields())

        with pytest.raises(dataclasses.FrozenInstanceError):
            loan.current_balance = Decimal("0")

    def test_properties(self):
        loan = LoanSnapshot(**_fields(annual_rate_percent=12, name="Car"))

        assert loan.label == "Car"
        assert loan.is_active is True
        assert loan.monthly_rate == Decimal("0.01")
        assert loan.first_month_interest == Decimal("8")
        assert loan.scheduled_end_date == date(2025, 12, 1)

    def test_zero_balance_is_inactive(self):
        loan = LoanSnapshot(**_fields(current_balance=0))

        assert loan.is_active is False
        assert loan.label == "A"

    def test_overpaid_loan_is_inactive(self):
        loan = LoanSnapshot(**_fields(current_balance="-5"))

        assert loan.current_balance == Decimal("-5")
        assert loan.is_active is False

    def test_paid_off_loan_may_omit_principal(self):
        loan = LoanSnapshot(**_fields(principal=0, current_balance=0))

        assert loan.principal == 0
        assert loan.is_active is False


def test_errors_are_value_errors():
    error = NonAmortizingPaymentError(Decimal("10000"), Decimal("200"), Decimal("150"), loan_id="Z")

    assert isinstance(error, ValueError)
    assert str(error).startswith("Loan Z: ")
    too_long = ScheduleTooLongError(max_months=600, remaining_balance=Decimal("12.5"))
    assert too_long.loan_id is None
    assert "600" in str(too_long)


class TestComparisonHelpers:
    @pytest.fixture
    def comparison(self):
        return compare_strategies(
            [make_loan("X", 1000, 20, 100), make_loan("Z", 10000, 24, 150)], 0, start_date=START
        )

    def test_results_in_fixed_order(self, comparison):
        assert [r.strategy_name for r in comparison.results()] == ["current", "snowball", "avalanche"]

    def test_by_name(self, comparison):
        assert comparison.by_name("snowball") is comparison.snowball
        with pytest.raises(KeyError):
            comparison.by_name("custom")

    def test_excluded_loan_ids(self, comparison):
        assert comparison.excluded_loan_ids == ["Z"]
        assert comparison.start_date == START
        assert comparison.extra_monthly_payment == 0
