"""Single-loan and portfolio analyses built on the amortization engine."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Optional

from .amortization import MAX_SCHEDULE_MONTHS, ZERO, compute_standard_payment, generate_schedule
from .data_models import DebtSummary, ExtraPaymentImpact, LoanSnapshot, RefinanceAnalysis
from .errors import InvalidInputError, NonAmortizingPaymentError, ScheduleTooLongError
from .logging_config import get_logger
from .utils import to_decimal

logger = get_logger(__name__)

REFINANCE_MIN_LIFETIME_SAVINGS = Decimal("5000")
REFINANCE_MAX_BREAK_EVEN_MONTHS = 36


def extra_payment_impact(
    loan: LoanSnapshot, extra_payment: Any, *, max_months: int = MAX_SCHEDULE_MONTHS
) -> ExtraPaymentImpact:
    """Compare the loan's schedule with and without ``extra_payment`` per month."""
    extra = to_decimal(extra_payment, "extra_payment")
    if extra < 0:
        raise InvalidInputError("Extra payment cannot be negative")

    original = generate_schedule(loan, max_months=max_months)
    boosted = generate_schedule(loan, extra_payment=extra, max_months=max_months)
    original_interest = sum((e.interest_portion for e in original), ZERO)
    new_interest = sum((e.interest_portion for e in boosted), ZERO)
    return ExtraPaymentImpact(
        loan_id=loan.id,
        extra_amount=extra,
        original_months=len(original),
        new_months=len(boosted),
        months_saved=len(original) - len(boosted),
        original_payoff_date=original[-1].payment_date if original else loan.start_date,
        new_payoff_date=boosted[-1].payment_date if boosted else loan.start_date,
        original_interest=original_interest,
        new_interest=new_interest,
        interest_saved=original_interest - new_interest,
    )


def debt_summary(
    loans: Iterable[LoanSnapshot],
    *,
    as_of: Optional[date] = None,
    max_months: int = MAX_SCHEDULE_MONTHS,
) -> DebtSummary:
    """Aggregate balances, payments and remaining interest across ``loans``.

    Loans whose payment cannot retire them are listed in
    ``excluded_loan_ids`` and left out of the interest and date figures.
    """
    loans = list(loans)
    total_debt = sum((max(loan.current_balance, ZERO) for loan in loans), ZERO)
    total_original = sum((loan.principal for loan in loans), ZERO)
    total_paid = sum((max(loan.principal - max(loan.current_balance, ZERO), ZERO) for loan in loans), ZERO)
    monthly = sum((loan.monthly_payment for loan in loans if loan.is_active), ZERO)

    interest_remaining = ZERO
    months_to_debt_free = 0
    debt_free_date = as_of or date.today()
    excluded: List[str] = []
    for loan in loans:
        if not loan.is_active:
            continue
        try:
            schedule = generate_schedule(loan, max_months=max_months)
        except (NonAmortizingPaymentError, ScheduleTooLongError) as exc:
            logger.warning("Leaving loan %s out of the debt summary: %s", loan.id, exc)
            excluded.append(loan.id)
            continue
        interest_remaining += sum((e.interest_portion for e in schedule), ZERO)
        months_to_debt_free = max(months_to_debt_free, len(schedule))
        debt_free_date = max(debt_free_date, schedule[-1].payment_date)

    if total_original > 0:
        percentage = int((total_paid / total_original * 100).to_integral_value(rounding=ROUND_HALF_UP))
    else:
        percentage = 0

    return DebtSummary(
        loan_count=len(loans),
        total_debt=total_debt,
        total_monthly_payments=monthly,
        total_original_debt=total_original,
        total_paid=total_paid,
        percentage_paid=percentage,
        total_interest_remaining=interest_remaining,
        debt_free_date=debt_free_date,
        months_to_debt_free=months_to_debt_free,
        excluded_loan_ids=excluded,
    )


def break_even_months(monthly_savings: Any, closing_costs: Any) -> Optional[int]:
    """Months of savings needed to recover ``closing_costs``.

    Returns ``None`` when the monthly savings are not positive, i.e. the
    refinance never pays for itself.
    """
    savings = to_decimal(monthly_savings, "monthly_savings")
    costs = to_decimal(closing_costs, "closing_costs")
    if savings <= 0:
        return None
    if costs <= 0:
        return 0
    return int((costs / savings).to_integral_value(rounding=ROUND_CEILING))


def analyze_refinance(
    loan: LoanSnapshot,
    new_rate_percent: Any,
    closing_costs: Any = ZERO,
    *,
    as_of: Optional[date] = None,
    min_lifetime_savings: Any = REFINANCE_MIN_LIFETIME_SAVINGS,
    max_break_even_months: int = REFINANCE_MAX_BREAK_EVEN_MONTHS,
    max_months: int = MAX_SCHEDULE_MONTHS,
) -> RefinanceAnalysis:
    """Evaluate replacing the loan's rate with ``new_rate_percent``.

    The refinanced loan keeps the current balance and the number of months
    the loan still has to run, with a level payment at the new rate.
    """
    new_rate = to_decimal(new_rate_percent, "new_rate_percent")
    costs = to_decimal(closing_costs, "closing_costs")
    if new_rate < 0:
        raise InvalidInputError("New interest rate cannot be negative")
    if costs < 0:
        raise InvalidInputError("Closing costs cannot be negative")
    if not loan.is_active:
        raise InvalidInputError(f"Loan {loan.id} is already paid off")

    current_schedule = generate_schedule(loan, max_months=max_months)
    remaining_months = len(current_schedule)
    current_interest = sum((e.interest_portion for e in current_schedule), ZERO)

    new_payment = compute_standard_payment(loan.current_balance, new_rate, remaining_months)
    refinanced = replace(loan, annual_rate_percent=new_rate, monthly_payment=new_payment)
    new_interest = sum((e.interest_portion for e in generate_schedule(refinanced, max_months=max_months)), ZERO)

    monthly_savings = loan.monthly_payment - new_payment
    lifetime_savings = current_interest - new_interest - costs
    break_even = break_even_months(monthly_savings, costs)
    recommended = (
        lifetime_savings > to_decimal(min_lifetime_savings, "min_lifetime_savings")
        and break_even is not None
        and break_even < max_break_even_months
    )
    return RefinanceAnalysis(
        loan_id=loan.id,
        analysis_date=as_of or date.today(),
        current_rate=loan.annual_rate_percent,
        new_rate=new_rate,
        remaining_months=remaining_months,
        current_payment=loan.monthly_payment,
        new_payment=new_payment,
        monthly_savings=monthly_savings,
        current_interest=current_interest,
        new_interest=new_interest,
        closing_costs=costs,
        lifetime_savings=lifetime_savings,
        break_even_months=break_even,
        is_recommended=recommended,
    )
