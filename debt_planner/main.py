"""Command-line interface for the debt planner.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute a single loan's amortization schedule, compare
payoff strategies across several loans and run the supporting analyses.
Results can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
from decimal import ROUND_UP
from pathlib import Path
from typing import List, Optional, Tuple

import click

from .amortization import compute_standard_payment, generate_schedule, summarize_schedule
from .analysis import analyze_refinance, debt_summary, extra_payment_impact
from .config import Settings
from .data_models import LoanSnapshot
from .errors import DebtPlannerError, InvalidInputError
from .export import comparison_to_dict, export_json, export_schedule_csv, export_schedule_json
from .formatter import (
    print_comparison,
    print_debt_summary,
    print_impact,
    print_refinance,
    print_schedule,
    print_summary,
)
from .logging_config import get_logger, setup_logging
from .parsing import build_loan_from_mapping, load_loans_file, parse_amount, parse_loan_string
from .planner import compare_strategies
from .utils import CENT, first_of_month, parse_year_month

logger = get_logger(__name__)


def _parse_start(start_date: Optional[str]):
    if not start_date:
        return first_of_month()
    try:
        return parse_year_month(start_date)
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc), param_hint="--start-date")


def _parse_money(value: Optional[str], hint: str):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc), param_hint=hint)


def build_loan_from_options(
    balance: str,
    rate: float,
    term: int,
    payment: Optional[str],
    start_date: Optional[str],
    principal: Optional[str] = None,
    loan_id: str = "loan",
    name: Optional[str] = None,
) -> LoanSnapshot:
    """Build a loan from command-line options.

    Without ``payment`` the standard level payment for ``term``, rounded up
    to the cent, is used.
    """
    balance_value = _parse_money(balance, "--balance")
    start = _parse_start(start_date)
    payment_value = _parse_money(payment, "--payment")
    try:
        if payment_value is None:
            payment_value = compute_standard_payment(balance_value, str(rate), term).quantize(
                CENT, rounding=ROUND_UP
            )
        return build_loan_from_mapping(
            {
                "id": loan_id,
                "name": name,
                "principal": balance_value if principal is None else _parse_money(principal, "--principal"),
                "current_balance": balance_value,
                "annual_rate_percent": str(rate),
                "term_months": term,
                "monthly_payment": payment_value,
                "start_date": start,
            }
        )
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc))


def collect_loans(loans_file: Optional[str], loan: Tuple[str, ...], start_date: Optional[str]) -> List[LoanSnapshot]:
    start = _parse_start(start_date)
    loans: List[LoanSnapshot] = []
    try:
        if loans_file:
            loans.extend(load_loans_file(Path(loans_file), default_start=start))
        for item in loan:
            loans.append(parse_loan_string(item, default_start=start))
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc))
    if not loan and not loans_file:
        raise click.UsageError("Provide loans with --loans-file or --loan")
    return loans


def loan_options(func):
    """Options shared by every single-loan command."""
    options = [
        click.option("--balance", "-b", "balance", required=True, help="Current balance (e.g. 25000 or 25k)"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Original loan term in months"),
        click.option("--payment", "payment", help="Monthly payment (defaults to the standard payment for the term)"),
        click.option("--principal", "principal", help="Original amount borrowed (defaults to the balance)"),
        click.option("--start-date", "-s", "start_date", help="First payment date (YYYY-MM), default this month"),
        click.option("--id", "loan_id", default="loan", show_default=True, help="Loan identifier"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def multi_loan_options(func):
    options = [
        click.option("--loans-file", "loans_file", type=click.Path(exists=True, dir_okay=False), help="Loans in .json or .csv"),
        click.option("--loan", "loan", multiple=True, help="Loan in ID:BALANCE:RATE:PAYMENT[:TERM] format"),
        click.option("--start-date", "-s", "start_date", help="Month the plan starts (YYYY-MM)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--log-level", "log_level", help="Logging level (DEBUG, INFO, WARNING...)")
@click.option("--json-logs", "json_logs", is_flag=True, default=False, help="Emit logs as JSON lines")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], json_logs: bool) -> None:
    """Amortization schedules and debt payoff strategy comparison."""
    try:
        settings = Settings.from_env()
    except InvalidInputError as exc:
        raise click.ClickException(str(exc))
    if log_level:
        settings.log_level = log_level.upper()
    if json_logs:
        settings.log_json = True
    try:
        setup_logging(settings.log_level, json_output=settings.log_json)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--log-level")
    ctx.obj = settings


@cli.command()
@click.option("--balance", "-b", "balance", required=True, help="Amount to borrow")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--term", "-t", "term", required=True, type=int, help="Term in months")
def payment(balance: str, rate: float, term: int) -> None:
    """Print the standard level monthly payment for a new loan."""
    balance_value = _parse_money(balance, "--balance")
    try:
        value = compute_standard_payment(balance_value, str(rate), term)
    except DebtPlannerError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Monthly payment: {value:.2f}")


@cli.command()
@loan_options
@click.option("--extra", "extra", default="0", show_default=True, help="Extra amount paid every month")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def schedule(
    settings: Settings,
    balance: str,
    rate: float,
    term: int,
    payment: Optional[str],
    principal: Optional[str],
    start_date: Optional[str],
    loan_id: str,
    extra: str,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    loan = build_loan_from_options(balance, rate, term, payment, start_date, principal, loan_id)
    try:
        entries = generate_schedule(
            loan, extra_payment=_parse_money(extra, "--extra"), max_months=settings.max_schedule_months
        )
    except DebtPlannerError as exc:
        raise click.ClickException(str(exc))
    summary_data = summarize_schedule(loan, entries)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_schedule_json(path, entries, summary_data)
        elif path.suffix.lower() == ".csv":
            export_schedule_csv(path, entries)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(summary_data)
    # Limit schedule length printed to avoid flooding the terminal
    max_rows = settings.preview_rows
    if len(entries) > max_rows:
        click.echo(f"Schedule has {len(entries)} rows; showing first {max_rows} rows.")
        print_schedule(entries[:max_rows])
    else:
        print_schedule(entries)


@cli.command()
@multi_loan_options
@click.option("--extra", "extra", default="0", show_default=True, help="Extra cash available every month")
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def compare(
    settings: Settings,
    loans_file: Optional[str],
    loan: Tuple[str, ...],
    start_date: Optional[str],
    extra: str,
    output: Optional[str],
) -> None:
    """Compare the current plan with the snowball and avalanche strategies.

    Example:

        debt-planner compare --loan card:1000:20:100 --loan car:5000:10:150 --extra 50
    """
    loans = collect_loans(loans_file, loan, start_date)
    logger.debug("Comparing strategies for %d loans", len(loans))
    try:
        comparison = compare_strategies(
            loans,
            _parse_money(extra, "--extra"),
            start_date=_parse_start(start_date) if start_date else None,
            max_months=settings.max_schedule_months,
        )
    except DebtPlannerError as exc:
        raise click.ClickException(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Comparison export must use .json extension", param_hint="--output")
        with path.open("w", encoding="utf-8") as f:
            json.dump(comparison_to_dict(comparison), f, indent=2)
        click.echo(f"Comparison exported to {path}")
    else:
        print_comparison(comparison)


@cli.command()
@multi_loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def summary(
    settings: Settings,
    loans_file: Optional[str],
    loan: Tuple[str, ...],
    start_date: Optional[str],
    output: Optional[str],
) -> None:
    """Print totals across all loans."""
    loans = collect_loans(loans_file, loan, start_date)
    try:
        result = debt_summary(loans, max_months=settings.max_schedule_months)
    except DebtPlannerError as exc:
        raise click.ClickException(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        export_json(path, {"summary": result})
        click.echo(f"Summary exported to {path}")
    else:
        print_debt_summary(result)


@cli.command()
@loan_options
@click.option("--extra", "extra", required=True, help="Extra amount paid every month")
@click.pass_obj
def impact(
    settings: Settings,
    balance: str,
    rate: float,
    term: int,
    payment: Optional[str],
    principal: Optional[str],
    start_date: Optional[str],
    loan_id: str,
    extra: str,
) -> None:
    """Show how much time and interest an extra monthly payment saves."""
    loan = build_loan_from_options(balance, rate, term, payment, start_date, principal, loan_id)
    try:
        result = extra_payment_impact(loan, _parse_money(extra, "--extra"), max_months=settings.max_schedule_months)
    except DebtPlannerError as exc:
        raise click.ClickException(str(exc))
    print_impact(result)


@cli.command()
@loan_options
@click.option("--new-rate", "new_rate", required=True, type=float, help="Refinanced annual rate (percent)")
@click.option("--closing-costs", "closing_costs", default="0", show_default=True, help="Fees to refinance")
@click.pass_obj
def refinance(
    settings: Settings,
    balance: str,
    rate: float,
    term: int,
    payment: Optional[str],
    principal: Optional[str],
    start_date: Optional[str],
    loan_id: str,
    new_rate: float,
    closing_costs: str,
) -> None:
    """Evaluate refinancing a loan at a new rate."""
    loan = build_loan_from_options(balance, rate, term, payment, start_date, principal, loan_id)
    try:
        result = analyze_refinance(
            loan,
            str(new_rate),
            _parse_money(closing_costs, "--closing-costs"),
            max_months=settings.max_schedule_months,
        )
    except DebtPlannerError as exc:
        raise click.ClickException(str(exc))
    print_refinance(result)


if __name__ == "__main__":
    cli()
