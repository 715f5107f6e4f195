"""Tests for the single-loan amortization engine.

Covers the month step, schedule generation (termination, interest
correctness, monotonic balances, principal conservation), the safety cap and
the closed-form standard payment.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from debt_planner.amortization import (
    MAX_SCHEDULE_MONTHS,
    compute_standard_payment,
    generate_schedule,
    simulate_month,
    summarize_schedule,
)
from debt_planner.errors import InvalidInputError, NonAmortizingPaymentError, ScheduleTooLongError
from tests.conftest import assert_decimal_close, make_loan


class TestSimulateMonth:
    def test_splits_payment_into_interest_and_principal(self):
        """1 % monthly interest on 1000 is 10; the rest reduces principal."""
        result = simulate_month(Decimal("1000"), Decimal("12"), Decimal("100"))

        assert result.interest == Decimal("10")
        assert result.principal == Decimal("90")
        assert result.new_balance == Decimal("910")

    def test_final_month_pays_only_what_is_owed(self):
        result = simulate_month(Decimal("50"), Decimal("12"), Decimal("100"))

        assert result.interest == Decimal("0.5")
        assert result.principal == Decimal("50")
        assert result.new_balance == 0

    def test_zero_balance_is_a_zero_month(self):
        result = simulate_month(0, 12, 100)

        assert result.interest == 0
        assert result.principal == 0
        assert result.new_balance == 0

    def test_zero_rate(self):
        result = simulate_month(1000, 0, 100)

        assert result.interest == 0
        assert result.new_balance == Decimal("900")

    def test_payment_equal_to_interest_is_rejected(self):
        """24 % a year on 10000 accrues exactly 200 in a month."""
        with pytest.raises(NonAmortizingPaymentError) as excinfo:
            simulate_month(Decimal("10000"), Decimal("24"), Decimal("200"))

        assert excinfo.value.interest == Decimal("200")

    def test_payment_below_interest_is_rejected(self):
        with pytest.raises(NonAmortizingPaymentError):
            simulate_month(10000, 24, 150)

    def test_sub_cent_residual_is_settled(self):
        result = simulate_month(Decimal("100.004"), 0, Decimal("100"))

        assert result.principal == Decimal("100.004")
        assert result.new_balance == 0

    @pytest.mark.parametrize(
        "balance,rate,payment",
        [(-1, 5, 100), (1000, -1, 100), (1000, 5, 0), (1000, 5, -10)],
    )
    def test_invalid_inputs(self, balance, rate, payment):
        with pytest.raises(InvalidInputError):
            simulate_month(balance, rate, payment)

    def test_accepts_floats_without_binary_noise(self):
        result = simulate_month(0.1, 0, 0.05)

        assert result.new_balance == Decimal("0.05")


class TestGenerateSchedule:
    def test_twelve_month_loan(self):
        """12000 at 12 % over 12 months with a payment of 1066.19."""
        loan = make_loan("A", "12000", "12", "1066.19", term=12)

        schedule = generate_schedule(loan)

        assert len(schedule) == 12
        assert schedule[-1].remaining_balance == 0
        assert schedule[-1].payment_amount < Decimal("1066.19")
        total_interest = sum(entry.interest_portion for entry in schedule)
        assert_decimal_close(total_interest, "794.22", tolerance="0.01")

    def test_rows_are_numbered_and_dated_from_start(self):
        loan = make_loan("A", 1200, 0, 100, term=12, start=date(2024, 1, 31))

        schedule = generate_schedule(loan)

        assert [entry.payment_number for entry in schedule] == list(range(1, 13))
        assert schedule[0].payment_date == date(2024, 1, 31)
        assert schedule[1].payment_date == date(2024, 2, 29)
        assert schedule[-1].payment_date == date(2024, 12, 31)
        assert all(entry.loan_id == "A" for entry in schedule)

    @pytest.mark.parametrize(
        "balance,rate,payment",
        [
            ("10000", "6", "200"),
            ("2500.50", "19.99", "75"),
            ("50000", "0", "1000"),
            ("1000", "3.5", "999.99"),
            ("350000", "6.875", "2299.25"),
        ],
    )
    def test_schedule_properties(self, balance, rate, payment):
        """Termination, interest correctness, monotonicity and conservation."""
        loan = make_loan("L", balance, rate, payment)
        monthly_rate = Decimal(rate) / 100 / 12

        schedule = generate_schedule(loan)

        assert 0 < len(schedule) <= MAX_SCHEDULE_MONTHS
        assert schedule[-1].remaining_balance == 0
        previous = loan.current_balance
        for entry in schedule:
            assert entry.starting_balance == previous
            assert_decimal_close(entry.interest_portion, previous * monthly_rate)
            assert entry.payment_amount == entry.interest_portion + entry.principal_portion
            assert entry.remaining_balance < previous
            assert entry.remaining_balance >= 0
            previous = entry.remaining_balance
        assert_decimal_close(sum(entry.principal_portion for entry in schedule), balance)

    def test_only_last_row_is_short(self):
        loan = make_loan("A", "10000", "6", "200")

        schedule = generate_schedule(loan)

        for entry in schedule[:-1]:
            assert_decimal_close(entry.payment_amount, "200")
        assert schedule[-1].payment_amount < Decimal("200")

    def test_paid_off_loan_has_no_rows(self):
        loan = make_loan("A", 0, 5, 100, principal=1000)

        assert generate_schedule(loan) == []

    def test_overpaid_loan_has_no_rows(self):
        loan = make_loan("A", "-5", 5, 100, principal=1000)

        assert generate_schedule(loan) == []

    def test_half_cent_residual_is_settled_on_the_last_row(self):
        loan = make_loan("A", "200.004", 0, 100)

        schedule = generate_schedule(loan)

        assert len(schedule) == 2
        assert schedule[-1].payment_amount == Decimal("100.004")
        assert schedule[-1].payment_amount - loan.monthly_payment < Decimal("0.005")
        assert schedule[-1].remaining_balance == 0

    def test_same_input_same_output(self):
        loan = make_loan("A", "7300", "11.5", "245")

        assert generate_schedule(loan) == generate_schedule(loan)

    def test_extra_payment_shortens_schedule(self):
        loan = make_loan("A", 1200, 0, 100)

        schedule = generate_schedule(loan, extra_payment=50)

        assert len(schedule) == 8
        assert schedule[0].payment_amount == Decimal("150")

    def test_negative_extra_payment_rejected(self):
        with pytest.raises(InvalidInputError):
            generate_schedule(make_loan("A", 1200, 0, 100), extra_payment=-1)

    def test_non_amortizing_loan_raises_with_loan_id(self):
        loan = make_loan("card", 10000, 24, 150)

        with pytest.raises(NonAmortizingPaymentError) as excinfo:
            generate_schedule(loan)

        assert excinfo.value.loan_id == "card"
        assert "card" in str(excinfo.value)

    def test_payment_barely_above_interest_hits_the_cap(self):
        """Paying one cent of principal a month would take over 900 months."""
        loan = make_loan("slow", 10000, 12, "100.01")

        with pytest.raises(ScheduleTooLongError) as excinfo:
            generate_schedule(loan)

        assert excinfo.value.max_months == MAX_SCHEDULE_MONTHS
        assert excinfo.value.loan_id == "slow"

    def test_cap_is_configurable(self):
        loan = make_loan("A", 1200, 0, 100)

        with pytest.raises(ScheduleTooLongError):
            generate_schedule(loan, max_months=6)
        assert len(generate_schedule(loan, max_months=12)) == 12

    def test_invalid_cap(self):
        with pytest.raises(InvalidInputError):
            generate_schedule(make_loan("A", 1200, 0, 100), max_months=0)


class TestStandardPayment:
    def test_matches_closed_form(self):
        payment = compute_standard_payment(12000, 12, 12)

        assert_decimal_close(payment, "1066.1855", tolerance="0.0001")

    def test_zero_rate_divides_evenly(self):
        assert compute_standard_payment(1200, 0, 12) == Decimal("100")

    def test_standard_payment_retires_loan_in_term(self):
        payment = compute_standard_payment(10000, 6, 60)
        loan = make_loan("A", 10000, 6, payment, term=60)

        schedule = generate_schedule(loan)

        assert len(schedule) == 60
        assert schedule[-1].remaining_balance == 0

    @pytest.mark.parametrize(
        "balance,rate,term",
        [(0, 5, 12), (-100, 5, 12), (1000, -1, 12), (1000, 5, 0), (1000, 5, True)],
    )
    def test_invalid_inputs(self, balance, rate, term):
        with pytest.raises(InvalidInputError):
            compute_standard_payment(balance, rate, term)


def test_summarize_schedule():
    loan = make_loan("A", 1200, 0, 100, term=24, start=date(2025, 1, 1))
    schedule = generate_schedule(loan, extra_payment=100)

    summary = summarize_schedule(loan, schedule)

    assert summary["payments_made"] == 6
    assert summary["total_interest"] == 0
    assert summary["total_paid"] == Decimal("1200")
    assert summary["max_payment"] == Decimal("200")
    assert summary["payoff_date"] == date(2025, 6, 1)
    assert summary["original_end_date"] == date(2026, 12, 1)
