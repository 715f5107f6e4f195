"""Single-loan amortization engine.

This module implements the month step shared by every calculation in the
package, the month-by-month schedule of one loan and the closed-form standard
payment. All arithmetic is done with ``Decimal``; nothing here keeps state
between calls.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

from .data_models import LoanSnapshot, MonthResult, ScheduleEntry
from .errors import InvalidInputError, NonAmortizingPaymentError, ScheduleTooLongError
from .logging_config import get_logger
from .utils import add_months, to_decimal

logger = get_logger(__name__)

# Safety cap on simulated months (50 years).
MAX_SCHEDULE_MONTHS = 600

# A balance left below half a cent after a payment is settled by that payment.
PAYOFF_RESIDUAL = Decimal("0.005")

# Relative tolerance used when comparing accumulated amounts.
TOLERANCE = Decimal("1e-6")

ZERO = Decimal("0")


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Convert an annual percentage rate into a monthly decimal rate."""
    return annual_rate_percent / Decimal(100) / Decimal(12)


def simulate_month(balance: Any, annual_rate_percent: Any, payment: Any) -> MonthResult:
    """Apply one monthly payment to ``balance``.

    Interest for the month is charged on the opening balance; the rest of the
    payment reduces principal, never by more than the balance itself.

    Raises
    ------
    NonAmortizingPaymentError
        If the payment does not exceed the interest accrued this month.
    InvalidInputError
        For a negative balance, a negative rate or a non-positive payment.
    """
    balance = to_decimal(balance, "balance")
    rate = to_decimal(annual_rate_percent, "annual_rate_percent")
    payment = to_decimal(payment, "payment")
    if balance < 0:
        raise InvalidInputError("Balance cannot be negative")
    if rate < 0:
        raise InvalidInputError("Interest rate cannot be negative")
    if payment <= 0:
        raise InvalidInputError("Payment must be positive")

    if balance == 0:
        return MonthResult(interest=ZERO, principal=ZERO, new_balance=ZERO)

    interest = balance * monthly_rate(rate)
    if payment <= interest:
        raise NonAmortizingPaymentError(balance=balance, interest=interest, payment=payment)

    principal = min(payment - interest, balance)
    new_balance = balance - principal
    if new_balance < PAYOFF_RESIDUAL:
        principal = balance
        new_balance = ZERO
    return MonthResult(interest=interest, principal=principal, new_balance=new_balance)


def generate_schedule(
    loan: LoanSnapshot,
    *,
    extra_payment: Any = ZERO,
    max_months: int = MAX_SCHEDULE_MONTHS,
) -> List[ScheduleEntry]:
    """Build the month-by-month schedule that retires ``loan``.

    Parameters
    ----------
    loan: LoanSnapshot
        The loan to amortize, starting from its ``current_balance``.
    extra_payment: Decimal
        Amount added to the monthly payment every month.
    max_months: int
        Maximum number of rows before giving up.

    Returns
    -------
    List[ScheduleEntry]
        One entry per month; the last entry has a remaining balance of
        exactly zero. A paid-off or overpaid loan yields an empty list.

    Raises
    ------
    NonAmortizingPaymentError
        If the payment cannot cover the first month's interest.
    ScheduleTooLongError
        If the balance is still outstanding after ``max_months`` payments.
    """
    if isinstance(max_months, bool) or not isinstance(max_months, int) or max_months <= 0:
        raise InvalidInputError("max_months must be a positive integer")
    extra = to_decimal(extra_payment, "extra_payment")
    if extra < 0:
        raise InvalidInputError("Extra payment cannot be negative")

    payment = loan.monthly_payment + extra
    balance = loan.current_balance
    schedule: List[ScheduleEntry] = []

    while balance > 0:
        if len(schedule) >= max_months:
            raise ScheduleTooLongError(max_months=max_months, remaining_balance=balance, loan_id=loan.id)
        try:
            step = simulate_month(balance, loan.annual_rate_percent, payment)
        except NonAmortizingPaymentError as exc:
            exc.loan_id = loan.id
            raise
        payment_number = len(schedule) + 1
        schedule.append(
            ScheduleEntry(
                loan_id=loan.id,
                payment_number=payment_number,
                payment_date=add_months(loan.start_date, payment_number - 1),
                starting_balance=balance,
                payment_amount=step.interest + step.principal,
                interest_portion=step.interest,
                principal_portion=step.principal,
                remaining_balance=step.new_balance,
            )
        )
        balance = step.new_balance

    logger.debug("Generated %d-month schedule for loan %s", len(schedule), loan.id)
    return schedule


def compute_standard_payment(balance: Any, annual_rate_percent: Any, term_months: int) -> Decimal:
    """Return the level monthly payment that retires ``balance`` in ``term_months``.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the balance, ``i`` is the monthly interest rate and ``n``
    is the number of payments. When the interest rate is zero, the payment
    simplifies to ``P / n``.
    """
    balance = to_decimal(balance, "balance")
    rate = to_decimal(annual_rate_percent, "annual_rate_percent")
    if isinstance(term_months, bool) or not isinstance(term_months, int) or term_months <= 0:
        raise InvalidInputError("Term must be a positive number of months")
    if balance <= 0:
        raise InvalidInputError("Balance must be positive")
    if rate < 0:
        raise InvalidInputError("Interest rate cannot be negative")

    rate_per_month = monthly_rate(rate)
    if rate_per_month == 0:
        return balance / Decimal(term_months)
    factor = (1 + rate_per_month) ** term_months
    return balance * (rate_per_month * factor) / (factor - 1)


def summarize_schedule(loan: LoanSnapshot, schedule: List[ScheduleEntry]) -> Dict[str, Any]:
    """Compute aggregate metrics for a schedule produced by ``generate_schedule``."""
    total_interest = sum((e.interest_portion for e in schedule), ZERO)
    total_paid = sum((e.payment_amount for e in schedule), ZERO)
    payoff_date = schedule[-1].payment_date if schedule else loan.start_date
    return {
        "loan_id": loan.id,
        "starting_balance": loan.current_balance,
        "monthly_payment": loan.monthly_payment,
        "payments_made": len(schedule),
        "total_interest": total_interest,
        "total_paid": total_paid,
        "max_payment": max((e.payment_amount for e in schedule), default=ZERO),
        "original_end_date": loan.scheduled_end_date,
        "payoff_date": payoff_date,
    }
