"""Output helpers for the debt planner.

This module provides simple functions to render schedules, strategy
comparisons and analyses in a tabular text format using built-in printing and
string formatting.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

from .data_models import (
    DebtSummary,
    ExtraPaymentImpact,
    PayoffStrategyComparison,
    RefinanceAnalysis,
    ScheduleEntry,
)


def print_summary(summary: Dict[str, Any]) -> None:
    """Print the summary of a single loan's schedule."""
    print("Summary")
    print("-" * 72)
    print(f"Loan               : {summary['loan_id']}")
    print(f"Starting balance   : {summary['starting_balance']:.2f}")
    print(f"Monthly payment    : {summary['monthly_payment']:.2f}")
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"Total paid         : {summary['total_paid']:.2f}")
    print(f"Original end date  : {summary['original_end_date']:%Y-%m}")
    print(f"Payoff date        : {summary['payoff_date']:%Y-%m}")
    print(f"Payments made      : {summary['payments_made']}")
    if summary.get("max_payment"):
        print(f"Highest payment    : {summary['max_payment']:.2f}")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = ["No", "Date", "StartBal", "Payment", "Principal", "Interest", "EndBal"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.payment_number),
            entry.payment_date.strftime("%Y-%m"),
            f"{entry.starting_balance:.2f}",
            f"{entry.payment_amount:.2f}",
            f"{entry.principal_portion:.2f}",
            f"{entry.interest_portion:.2f}",
            f"{entry.remaining_balance:.2f}",
        ]
        print("\t".join(row))


def print_comparison(comparison: PayoffStrategyComparison) -> None:
    """Print the three payoff strategies side by side.

    Savings are measured against the current plan; a positive value means
    the strategy is cheaper or shorter.
    """
    results = comparison.results()
    print("Strategy comparison")
    print("=" * 72)
    print(f"{'Metric':22s}" + "".join(f"{r.display_name:>16s}" for r in results))
    print(f"{'Total interest':22s}" + "".join(f"{r.total_interest_paid:16.2f}" for r in results))
    print(f"{'Total paid':22s}" + "".join(f"{r.total_paid:16.2f}" for r in results))
    print(f"{'Months':22s}" + "".join(f"{r.total_months:16d}" for r in results))
    print(f"{'Payoff date':22s}" + "".join(f"{r.payoff_date:%Y-%m}".rjust(16) for r in results))
    print(f"{'Interest saved':22s}" + "".join(f"{r.interest_saved_vs_baseline:16.2f}" for r in results))
    print(f"{'Months saved':22s}" + "".join(f"{r.months_saved_vs_baseline:16d}" for r in results))
    print("=" * 72)
    for result in results:
        print(f"{result.display_name} order:")
        for position, entry in enumerate(result.payoff_order, start=1):
            label = entry.loan_name or entry.loan_id
            if entry.excluded:
                flag = "non-amortizing" if entry.non_amortizing else "excluded"
                print(f"  -  {label} [{flag}] {entry.reason}")
            else:
                print(f"  {position}. {label} ({entry.reason}) paid off {entry.payoff_date:%Y-%m}")
    print("-" * 72)
    recommendation = comparison.recommendation
    print(f"Recommended        : {comparison.by_name(recommendation.best_strategy).display_name}")
    print(f"Why                : {recommendation.reasoning}")
    for tip in recommendation.advice:
        print(f"  * {tip}")
    for milestone in comparison.milestones:
        print(f"  {milestone.estimated_date:%Y-%m}  {milestone.achievement}: {milestone.impact}")


def print_debt_summary(summary: DebtSummary) -> None:
    print("Debt summary")
    print("-" * 72)
    print(f"Loans              : {summary.loan_count}")
    print(f"Total debt         : {summary.total_debt:.2f}")
    print(f"Monthly payments   : {summary.total_monthly_payments:.2f}")
    print(f"Original debt      : {summary.total_original_debt:.2f}")
    print(f"Repaid so far      : {summary.total_paid:.2f} ({summary.percentage_paid}%)")
    print(f"Interest remaining : {summary.total_interest_remaining:.2f}")
    print(f"Debt-free date     : {summary.debt_free_date:%Y-%m}")
    print(f"Months to go       : {summary.months_to_debt_free}")
    if summary.excluded_loan_ids:
        print(f"Not amortizing     : {', '.join(summary.excluded_loan_ids)}")
    print("-" * 72)


def print_impact(impact: ExtraPaymentImpact) -> None:
    print(f"Extra payment impact for {impact.loan_id}")
    print("-" * 72)
    print(f"Extra per month    : {impact.extra_amount:.2f}")
    print(f"Payoff date        : {impact.original_payoff_date:%Y-%m} -> {impact.new_payoff_date:%Y-%m}")
    print(f"Months             : {impact.original_months} -> {impact.new_months} ({impact.months_saved} saved)")
    print(f"Interest           : {impact.original_interest:.2f} -> {impact.new_interest:.2f}")
    print(f"Interest saved     : {impact.interest_saved:.2f}")
    print("-" * 72)


def print_refinance(analysis: RefinanceAnalysis) -> None:
    print(f"Refinance analysis for {analysis.loan_id}")
    print("-" * 72)
    print(f"Rate               : {analysis.current_rate}% -> {analysis.new_rate}%")
    print(f"Payment            : {analysis.current_payment:.2f} -> {analysis.new_payment:.2f}")
    print(f"Monthly savings    : {analysis.monthly_savings:.2f}")
    print(f"Remaining months   : {analysis.remaining_months}")
    print(f"Interest           : {analysis.current_interest:.2f} -> {analysis.new_interest:.2f}")
    print(f"Closing costs      : {analysis.closing_costs:.2f}")
    print(f"Lifetime savings   : {analysis.lifetime_savings:.2f}")
    if analysis.break_even_months is None:
        print("Break-even         : never")
    else:
        print(f"Break-even         : {analysis.break_even_months} months")
    print(f"Recommended        : {'Yes' if analysis.is_recommended else 'No'}")
    print("-" * 72)
