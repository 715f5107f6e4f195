"""Debt payoff planner.

Compares three ways of repaying a set of loans:

* ``current``   - every loan keeps its own payment, extra cash shortens the
  loan closest to payoff, freed payments are not reallocated;
* ``snowball``  - smallest balance first;
* ``avalanche`` - highest interest rate first.

Snowball and avalanche use waterfall reallocation: the extra payment and the
payments of every retired loan go to the first loan in priority order that
still has a balance. Loans are simulated jointly, month by month, with
:func:`debt_planner.amortization.simulate_month`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .amortization import MAX_SCHEDULE_MONTHS, ZERO, generate_schedule, simulate_month
from .data_models import (
    LoanSnapshot,
    Milestone,
    PayoffOrderEntry,
    PayoffStrategyComparison,
    PayoffStrategyResult,
    Recommendation,
)
from .errors import InvalidInputError, NonAmortizingPaymentError, ScheduleTooLongError
from .logging_config import get_logger
from .utils import add_months, round_currency, to_decimal

logger = get_logger(__name__)

CURRENT = "current"
SNOWBALL = "snowball"
AVALANCHE = "avalanche"
STRATEGIES = (CURRENT, SNOWBALL, AVALANCHE)

# Order in which tied strategies are recommended.
RECOMMENDATION_PREFERENCE = (AVALANCHE, SNOWBALL, CURRENT)
RECOMMENDATION_TOLERANCE = Decimal("0.01")

STRATEGY_DETAILS: Dict[str, Dict[str, Any]] = {
    CURRENT: {
        "display_name": "Current Plan",
        "description": "Keep paying each loan its scheduled amount",
        "pros": ["Lowest monthly commitment", "Most flexibility"],
        "cons": ["Highest total interest", "Longest payoff time"],
    },
    SNOWBALL: {
        "display_name": "Snowball Method",
        "description": "Pay off smallest balances first for quick wins and momentum",
        "pros": [
            "Quick psychological wins",
            "Reduces the number of debts quickly",
            "Frees up cash flow early",
        ],
        "cons": [
            "May pay more interest than the avalanche method",
            "High-interest debts may linger",
        ],
    },
    AVALANCHE: {
        "display_name": "Avalanche Method",
        "description": "Pay off highest interest rates first for maximum savings",
        "pros": [
            "Maximum interest savings",
            "Reduces the total cost of debt",
        ],
        "cons": [
            "The first loan may take longer to clear",
            "Less immediate gratification",
        ],
    },
}


@dataclass
class _LoanState:
    loan: LoanSnapshot
    balance: Decimal
    reason: str
    interest_paid: Decimal = ZERO
    payoff_month: Optional[int] = None


def _screen_loans(
    loans: Iterable[LoanSnapshot], max_months: int
) -> Tuple[List[Tuple[LoanSnapshot, int]], List[PayoffOrderEntry]]:
    """Split active loans into those that can be simulated and those that cannot.

    Returns the participating loans with their stand-alone remaining months,
    and one excluded entry per loan whose own payment cannot retire it.
    """
    participating: List[Tuple[LoanSnapshot, int]] = []
    excluded: List[PayoffOrderEntry] = []
    seen = set()
    for loan in loans:
        if not isinstance(loan, LoanSnapshot):
            raise InvalidInputError(f"Expected a LoanSnapshot, got {type(loan).__name__}")
        if loan.id in seen:
            raise InvalidInputError(f"Duplicate loan id: {loan.id}")
        seen.add(loan.id)
        if not loan.is_active:
            continue
        try:
            months = len(generate_schedule(loan, max_months=max_months))
        except NonAmortizingPaymentError as exc:
            logger.warning("Excluding loan %s from payoff planning: %s", loan.id, exc)
            excluded.append(
                PayoffOrderEntry(
                    loan_id=loan.id,
                    loan_name=loan.name,
                    reason="Payment does not cover monthly interest",
                    non_amortizing=True,
                    excluded=True,
                )
            )
            continue
        except ScheduleTooLongError as exc:
            logger.warning("Excluding loan %s from payoff planning: %s", loan.id, exc)
            excluded.append(
                PayoffOrderEntry(
                    loan_id=loan.id,
                    loan_name=loan.name,
                    reason=f"Not paid off within {max_months} months",
                    excluded=True,
                )
            )
            continue
        participating.append((loan, months))
    return participating, excluded


def _ordered_states(strategy: str, participating: Sequence[Tuple[LoanSnapshot, int]]) -> List[_LoanState]:
    if strategy == CURRENT:
        ordered = sorted(participating, key=lambda item: (item[1], item[0].current_balance, item[0].id))
        return [
            _LoanState(loan=loan, balance=loan.current_balance, reason=f"{months} months left at the scheduled payment")
            for loan, months in ordered
        ]
    if strategy == SNOWBALL:
        ordered = sorted(participating, key=lambda item: (item[0].current_balance, item[0].id))
        return [
            _LoanState(loan=loan, balance=loan.current_balance, reason=f"Balance: {round_currency(loan.current_balance):,.2f}")
            for loan, _ in ordered
        ]
    if strategy == AVALANCHE:
        ordered = sorted(participating, key=lambda item: (-item[0].annual_rate_percent, item[0].id))
        return [
            _LoanState(loan=loan, balance=loan.current_balance, reason=f"Interest rate: {loan.annual_rate_percent}%")
            for loan, _ in ordered
        ]
    raise InvalidInputError(f"Unknown payoff strategy: {strategy!r}")


def _run_simulation(
    states: List[_LoanState], extra: Decimal, *, rollover: bool, max_months: int
) -> Tuple[int, Decimal, List[Decimal]]:
    """Simulate all loans together until every balance reaches zero.

    ``states`` is processed in priority order every month. The first active
    loan receives the extra cash; a loan that finishes passes on what it did
    not need. With ``rollover`` the full payment of every retired loan joins
    the extra cash from the following month on, otherwise only unused extra
    cash is passed on.

    Returns ``(months, total_paid, balance_timeline)``.
    """
    freed = ZERO
    total_paid = ZERO
    timeline: List[Decimal] = []
    month = 0

    while any(state.balance > 0 for state in states):
        if month >= max_months:
            remaining = sum((state.balance for state in states), ZERO)
            raise ScheduleTooLongError(max_months=max_months, remaining_balance=remaining)
        month += 1
        carry = extra + freed
        released = ZERO
        for state in states:
            if state.balance <= 0:
                continue
            payment = state.loan.monthly_payment + carry
            step = simulate_month(state.balance, state.loan.annual_rate_percent, payment)
            paid = step.interest + step.principal
            leftover = max(payment - paid, ZERO)
            carry = leftover if rollover else min(leftover, carry)

            state.balance = step.new_balance
            state.interest_paid += step.interest
            total_paid += paid
            if state.balance == 0:
                state.payoff_month = month
                released += state.loan.monthly_payment
        if rollover:
            freed += released
        timeline.append(sum((state.balance for state in states), ZERO))

    return month, total_paid, timeline


def simulate_strategy(
    loans: Iterable[LoanSnapshot],
    strategy: str,
    extra_monthly_payment: Any = ZERO,
    *,
    start_date: Optional[date] = None,
    max_months: int = MAX_SCHEDULE_MONTHS,
) -> PayoffStrategyResult:
    """Run one strategy and return its result.

    Savings against the baseline are left at zero; :func:`compare_strategies`
    fills them in.
    """
    extra = _validate_extra(extra_monthly_payment)
    participating, excluded = _screen_loans(loans, max_months)
    anchor = _anchor_date(participating, start_date)
    return _strategy_result(strategy, participating, excluded, extra, anchor, max_months)


def _validate_extra(extra_monthly_payment: Any) -> Decimal:
    extra = to_decimal(extra_monthly_payment if extra_monthly_payment is not None else ZERO, "extra_monthly_payment")
    if extra < 0:
        raise InvalidInputError("Extra monthly payment cannot be negative")
    return extra


def _anchor_date(participating: Sequence[Tuple[LoanSnapshot, int]], start_date: Optional[date]) -> date:
    if start_date is not None:
        return start_date
    if participating:
        return min(loan.start_date for loan, _ in participating)
    return date.today()


def _strategy_result(
    strategy: str,
    participating: Sequence[Tuple[LoanSnapshot, int]],
    excluded: Sequence[PayoffOrderEntry],
    extra: Decimal,
    anchor: date,
    max_months: int,
) -> PayoffStrategyResult:
    states = _ordered_states(strategy, participating)
    months, total_paid, timeline = _run_simulation(
        states, extra, rollover=strategy != CURRENT, max_months=max_months
    )

    payoff_order = [
        PayoffOrderEntry(
            loan_id=state.loan.id,
            loan_name=state.loan.name,
            reason=state.reason,
            payoff_month=state.payoff_month,
            payoff_date=add_months(anchor, state.payoff_month - 1) if state.payoff_month else None,
        )
        for state in states
    ]
    payoff_order.extend(
        PayoffOrderEntry(
            loan_id=entry.loan_id,
            loan_name=entry.loan_name,
            reason=entry.reason,
            non_amortizing=entry.non_amortizing,
            excluded=entry.excluded,
        )
        for entry in excluded
    )

    details = STRATEGY_DETAILS[strategy]
    return PayoffStrategyResult(
        strategy_name=strategy,
        display_name=details["display_name"],
        description=details["description"],
        payoff_date=add_months(anchor, months - 1) if months else anchor,
        total_interest_paid=sum((state.interest_paid for state in states), ZERO),
        total_months=months,
        total_paid=total_paid,
        payoff_order=payoff_order,
        balance_timeline=timeline,
        pros=list(details["pros"]),
        cons=list(details["cons"]),
    )


def _pick_best(results: Sequence[PayoffStrategyResult]) -> PayoffStrategyResult:
    """Return the cheapest result.

    Results within ``RECOMMENDATION_TOLERANCE`` of the lowest interest are
    tied; ties go to the earliest payoff date, then avalanche, snowball and
    current in that order.
    """
    lowest = min(result.total_interest_paid for result in results)
    tied = [r for r in results if r.total_interest_paid - lowest <= RECOMMENDATION_TOLERANCE]
    return min(
        tied,
        key=lambda r: (r.payoff_date, RECOMMENDATION_PREFERENCE.index(r.strategy_name)),
    )


def _recommend(
    best: PayoffStrategyResult, extra: Decimal, loans_by_id: Dict[str, LoanSnapshot]
) -> Recommendation:
    if best.total_months == 0:
        reasoning = "There are no active loans to repay"
    elif best.strategy_name == CURRENT:
        reasoning = "Your current plan already costs the least interest"
    else:
        reasoning = (
            f"Save {round_currency(best.interest_saved_vs_baseline):,.2f} in interest and become "
            f"debt-free {best.months_saved_vs_baseline} months earlier than the current plan"
        )

    advice: List[str] = []
    targets = [entry for entry in best.payoff_order if not entry.excluded]
    if targets:
        first = loans_by_id[targets[0].loan_id]
        if extra > 0:
            advice.append(f"Focus the extra {round_currency(extra):,.2f} per month on {first.label}")
        if best.strategy_name != CURRENT and len(targets) > 1:
            advice.append(f"Once {first.label} is paid off, roll its payment into the next loan")
    for entry in best.payoff_order:
        if entry.non_amortizing:
            advice.append(
                f"Raise the payment on {loans_by_id[entry.loan_id].label}: "
                "it does not cover the monthly interest"
            )
        elif entry.excluded:
            advice.append(f"Raise the payment on {loans_by_id[entry.loan_id].label}: {entry.reason.lower()}")
    return Recommendation(best_strategy=best.strategy_name, reasoning=reasoning, advice=advice)


def _milestones(
    best: PayoffStrategyResult, anchor: date, loans_by_id: Dict[str, LoanSnapshot]
) -> List[Milestone]:
    finished = [entry for entry in best.payoff_order if entry.payoff_month]
    if not finished:
        return []

    milestones: List[Milestone] = []
    first = min(finished, key=lambda entry: entry.payoff_month)
    first_loan = loans_by_id[first.loan_id]
    milestones.append(
        Milestone(
            achievement=f"First loan paid off ({first_loan.label})",
            month=first.payoff_month,
            estimated_date=add_months(anchor, first.payoff_month - 1),
            impact=f"Frees up {round_currency(first_loan.monthly_payment):,.2f} per month",
        )
    )

    starting_debt = sum((loans_by_id[entry.loan_id].current_balance for entry in finished), ZERO)
    halfway = next(
        (month for month, balance in enumerate(best.balance_timeline, start=1) if balance * 2 <= starting_debt),
        best.total_months,
    )
    milestones.append(
        Milestone(
            achievement="50% debt-free",
            month=halfway,
            estimated_date=add_months(anchor, halfway - 1),
            impact="Half of the starting debt repaid",
        )
    )
    milestones.append(
        Milestone(
            achievement="Debt-free",
            month=best.total_months,
            estimated_date=best.payoff_date,
            impact=f"{round_currency(sum((loans_by_id[e.loan_id].monthly_payment for e in finished), ZERO)):,.2f} "
            "per month back in your budget",
        )
    )
    return milestones


def compare_strategies(
    loans: Iterable[LoanSnapshot],
    extra_monthly_payment: Any = ZERO,
    *,
    start_date: Optional[date] = None,
    max_months: int = MAX_SCHEDULE_MONTHS,
) -> PayoffStrategyComparison:
    """Simulate the current, snowball and avalanche strategies and compare them.

    Parameters
    ----------
    loans: Iterable[LoanSnapshot]
        Loans to repay. Paid-off loans are ignored; loans whose own payment
        cannot retire them are reported as excluded in every payoff order.
    extra_monthly_payment: Decimal
        Cash available each month on top of the scheduled payments.
    start_date: date, optional
        Month the joint simulation starts in. Defaults to the earliest start
        date among the loans (today when there are none).
    max_months: int
        Safety cap for each loan's schedule and the joint simulation.

    Returns
    -------
    PayoffStrategyComparison
        All three results, the recommended strategy and milestones for it.
    """
    loans = list(loans)
    extra = _validate_extra(extra_monthly_payment)
    participating, excluded = _screen_loans(loans, max_months)
    anchor = _anchor_date(participating, start_date)

    results = {
        strategy: _strategy_result(strategy, participating, excluded, extra, anchor, max_months)
        for strategy in STRATEGIES
    }
    baseline = results[CURRENT]
    for result in results.values():
        result.interest_saved_vs_baseline = baseline.total_interest_paid - result.total_interest_paid
        result.months_saved_vs_baseline = baseline.total_months - result.total_months

    best = _pick_best(list(results.values()))
    loans_by_id = {loan.id: loan for loan in loans}
    logger.info(
        "Compared payoff strategies for %d loans (%d excluded); recommending %s",
        len(participating),
        len(excluded),
        best.strategy_name,
    )
    return PayoffStrategyComparison(
        current=results[CURRENT],
        snowball=results[SNOWBALL],
        avalanche=results[AVALANCHE],
        recommendation=_recommend(best, extra, loans_by_id),
        extra_monthly_payment=extra,
        start_date=anchor,
        milestones=_milestones(best, anchor, loans_by_id),
    )
