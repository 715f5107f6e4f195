"""Data models for the debt planner.

This module defines dataclasses for the entities the calculator works with:
the loan snapshot supplied by the caller, the rows of an amortization
schedule and the results of a payoff strategy comparison. Every result type
is plain data (dates, ``Decimal`` values, strings and lists of further
dataclasses) so it can be serialized without knowledge of the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from .errors import InvalidInputError
from .utils import add_months, to_date, to_decimal


@dataclass(frozen=True)
class LoanSnapshot:
    """Immutable snapshot of one loan at the time of a calculation.

    Attributes
    ----------
    id: str
        Opaque identifier, only used to label output rows.
    principal: Decimal
        The original amount borrowed. May be zero only for a paid-off loan.
    current_balance: Decimal
        Outstanding balance. Zero or below means the loan is paid off (or
        overpaid) and will be skipped by the planner.
    annual_rate_percent: Decimal
        Nominal annual interest rate in percent (``5.5`` means 5.5 %).
    term_months: int
        Original term of the loan.
    monthly_payment: Decimal
        Scheduled monthly payment.
    start_date: date
        Date of the first payment of the schedule.
    name: str, optional
        Display label.

    Numeric fields accept ints, floats and numeric strings; they are stored
    as ``Decimal``. Invalid values raise ``InvalidInputError``.
    """

    id: str
    principal: Decimal
    current_balance: Decimal
    annual_rate_percent: Decimal
    term_months: int
    monthly_payment: Decimal
    start_date: date
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.id, int) and not isinstance(self.id, bool):
            object.__setattr__(self, "id", str(self.id))
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidInputError(f"Loan id must be a non-empty string, got {self.id!r}")

        for name in ("principal", "current_balance", "annual_rate_percent", "monthly_payment"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), f"{self.id}.{name}"))
        object.__setattr__(self, "start_date", to_date(self.start_date, f"{self.id}.start_date"))

        # a paid-off loan may come without its original amount
        if self.principal < 0 or (self.principal == 0 and self.is_active):
            raise InvalidInputError(f"Loan {self.id}: principal must be positive")
        if self.annual_rate_percent < 0:
            raise InvalidInputError(f"Loan {self.id}: interest rate cannot be negative")
        if isinstance(self.term_months, bool) or not isinstance(self.term_months, int):
            raise InvalidInputError(f"Loan {self.id}: term must be a whole number of months")
        if self.term_months <= 0:
            raise InvalidInputError(f"Loan {self.id}: term must be positive")
        if self.monthly_payment <= 0:
            raise InvalidInputError(f"Loan {self.id}: monthly payment must be positive")

    @property
    def label(self) -> str:
        return self.name or self.id

    @property
    def is_active(self) -> bool:
        return self.current_balance > 0

    @property
    def monthly_rate(self) -> Decimal:
        return self.annual_rate_percent / Decimal(100) / Decimal(12)

    @property
    def first_month_interest(self) -> Decimal:
        return self.current_balance * self.monthly_rate

    @property
    def scheduled_end_date(self) -> date:
        """Date of the last payment under the original term."""
        return add_months(self.start_date, self.term_months - 1)


@dataclass(frozen=True)
class MonthResult:
    """Outcome of a single simulated month on one balance."""

    interest: Decimal
    principal: Decimal
    new_balance: Decimal


@dataclass
class ScheduleEntry:
    """One month of an amortization schedule.

    ``payment_amount`` is always ``interest_portion + principal_portion``. On
    the final row it may be lower than the loan's monthly payment since only
    the outstanding balance plus that month's interest is owed. When the
    balance left after a full payment would be under half a cent, that
    residual is settled on the same row, so the final payment can exceed the
    monthly payment by less than 0.005.
    """

    loan_id: str
    payment_number: int
    payment_date: date
    starting_balance: Decimal
    payment_amount: Decimal
    interest_portion: Decimal
    principal_portion: Decimal
    remaining_balance: Decimal


@dataclass
class PayoffOrderEntry:
    """Position of a loan in a strategy's payoff sequence."""

    loan_id: str
    reason: str
    loan_name: Optional[str] = None
    non_amortizing: bool = False
    excluded: bool = False
    payoff_month: Optional[int] = None
    payoff_date: Optional[date] = None


@dataclass
class PayoffStrategyResult:
    """Aggregate outcome of repaying every loan under one strategy."""

    strategy_name: str  # "current", "snowball" or "avalanche"
    display_name: str
    description: str
    payoff_date: date
    total_interest_paid: Decimal
    total_months: int
    total_paid: Decimal
    payoff_order: List[PayoffOrderEntry]
    balance_timeline: List[Decimal] = field(default_factory=list)
    interest_saved_vs_baseline: Decimal = Decimal("0")
    months_saved_vs_baseline: int = 0
    pros: List[str] = field(default_factory=list)
    cons: List[str] = field(default_factory=list)


@dataclass
class Recommendation:
    best_strategy: str
    reasoning: str
    advice: List[str] = field(default_factory=list)


@dataclass
class Milestone:
    achievement: str
    month: int
    estimated_date: date
    impact: str


@dataclass
class PayoffStrategyComparison:
    """The three strategy results side by side plus the recommendation."""

    current: PayoffStrategyResult
    snowball: PayoffStrategyResult
    avalanche: PayoffStrategyResult
    recommendation: Recommendation
    extra_monthly_payment: Decimal
    start_date: date
    milestones: List[Milestone] = field(default_factory=list)

    def results(self) -> Tuple[PayoffStrategyResult, PayoffStrategyResult, PayoffStrategyResult]:
        return self.current, self.snowball, self.avalanche

    def by_name(self, name: str) -> PayoffStrategyResult:
        for result in self.results():
            if result.strategy_name == name:
                return result
        raise KeyError(name)

    @property
    def excluded_loan_ids(self) -> List[str]:
        return [entry.loan_id for entry in self.current.payoff_order if entry.excluded]


@dataclass
class ExtraPaymentImpact:
    """Effect of adding a fixed amount to one loan's monthly payment."""

    loan_id: str
    extra_amount: Decimal
    original_months: int
    new_months: int
    months_saved: int
    original_payoff_date: date
    new_payoff_date: date
    original_interest: Decimal
    new_interest: Decimal
    interest_saved: Decimal


@dataclass
class DebtSummary:
    """Portfolio-level totals across a set of loans."""

    loan_count: int
    total_debt: Decimal
    total_monthly_payments: Decimal
    total_original_debt: Decimal
    total_paid: Decimal
    percentage_paid: int
    total_interest_remaining: Decimal
    debt_free_date: date
    months_to_debt_free: int
    excluded_loan_ids: List[str] = field(default_factory=list)


@dataclass
class RefinanceAnalysis:
    """Comparison of a loan's remaining cost against a refinanced loan."""

    loan_id: str
    analysis_date: date
    current_rate: Decimal
    new_rate: Decimal
    remaining_months: int
    current_payment: Decimal
    new_payment: Decimal
    monthly_savings: Decimal
    current_interest: Decimal
    new_interest: Decimal
    closing_costs: Decimal
    lifetime_savings: Decimal
    break_even_months: Optional[int]
    is_recommended: bool
