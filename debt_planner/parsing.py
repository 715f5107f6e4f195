"""Turn user input (CLI strings, JSON bodies, CSV/JSON files) into loan snapshots.

Every function here raises ``InvalidInputError`` on malformed input so the
command-line interface and the web app can report it the same way.
"""

from __future__ import annotations

import csv
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from .amortization import MAX_SCHEDULE_MONTHS, generate_schedule
from .data_models import LoanSnapshot
from .errors import InvalidInputError, NonAmortizingPaymentError, ScheduleTooLongError
from .utils import first_of_month, to_date, to_decimal

# Accepted keys for each loan field, most specific first. The camelCase and
# record-style names let exported loan records be passed in unchanged.
FIELD_ALIASES = {
    "id": ("id", "loan_id", "loanId"),
    "name": ("name", "loan_name", "loanName"),
    "current_balance": ("current_balance", "currentBalance", "balance"),
    "principal": ("principal", "original_amount", "originalAmount"),
    "annual_rate_percent": ("annual_rate_percent", "annualRatePercent", "interest_rate", "rate"),
    "term_months": ("term_months", "termMonths", "term"),
    "monthly_payment": ("monthly_payment", "monthlyPayment", "payment"),
    "start_date": ("start_date", "startDate"),
}


def parse_amount(value: Any) -> Decimal:
    """Parse an amount with optional suffixes.

    Accepts plain numbers ("500000", 500000) and shorthand with ``k``/``m``
    suffixes (e.g., "500k" meaning 500_000). Returns a ``Decimal``.
    """
    if not isinstance(value, str):
        return to_decimal(value, "amount")
    text = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    try:
        return to_decimal(text, "amount") * factor
    except InvalidInputError as exc:
        raise InvalidInputError(f"Invalid amount: {value!r}") from exc


def parse_term(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid term: {value!r}")
    if isinstance(value, int):
        return value
    number = to_decimal(value, "term")
    if number != number.to_integral_value():
        raise InvalidInputError(f"Term must be a whole number of months, got {value!r}")
    return int(number)


def _lookup(data: Mapping[str, Any], field: str) -> Any:
    for key in FIELD_ALIASES[field]:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def implied_term(balance: Decimal, rate: Decimal, payment: Decimal, start: date) -> int:
    """Months the payment needs to retire the balance, capped at the schedule limit."""
    probe = LoanSnapshot(
        id="probe",
        principal=max(balance, Decimal(1)),
        current_balance=balance,
        annual_rate_percent=rate,
        term_months=MAX_SCHEDULE_MONTHS,
        monthly_payment=payment,
        start_date=start,
    )
    try:
        return max(len(generate_schedule(probe)), 1)
    except (NonAmortizingPaymentError, ScheduleTooLongError):
        return MAX_SCHEDULE_MONTHS


def build_loan_from_mapping(
    data: Mapping[str, Any],
    *,
    default_start: Optional[date] = None,
    default_id: Optional[str] = None,
) -> LoanSnapshot:
    """Build a validated ``LoanSnapshot`` from a loosely shaped record.

    Only the balance, rate and payment are required. The principal defaults
    to the balance (zero for a paid-off record), the term to the number of
    months the payment needs and the start date to ``default_start``
    (first of the current month).
    """
    if not isinstance(data, Mapping):
        raise InvalidInputError(f"Loan must be an object, got {type(data).__name__}")

    loan_id = _lookup(data, "id") or default_id
    if loan_id is None:
        raise InvalidInputError("Loan is missing an id")
    for field in ("current_balance", "annual_rate_percent", "monthly_payment"):
        if _lookup(data, field) is None:
            raise InvalidInputError(f"Loan {loan_id} is missing {field}")

    balance = parse_amount(_lookup(data, "current_balance"))
    rate = to_decimal(_lookup(data, "annual_rate_percent"), f"{loan_id}.annual_rate_percent")
    payment = parse_amount(_lookup(data, "monthly_payment"))
    principal_value = _lookup(data, "principal")
    if principal_value is not None:
        principal = parse_amount(principal_value)
    else:
        principal = balance if balance > 0 else Decimal(0)
    start_value = _lookup(data, "start_date")
    start = to_date(start_value, f"{loan_id}.start_date") if start_value is not None else (
        default_start or first_of_month()
    )

    term_value = _lookup(data, "term_months")
    if term_value is not None:
        term = parse_term(term_value)
    elif rate >= 0 and payment > 0:
        term = implied_term(balance, rate, payment, start)
    else:
        term = MAX_SCHEDULE_MONTHS  # LoanSnapshot rejects the other fields

    name = _lookup(data, "name")
    return LoanSnapshot(
        id=str(loan_id),
        principal=principal,
        current_balance=balance,
        annual_rate_percent=rate,
        term_months=term,
        monthly_payment=payment,
        start_date=start,
        name=str(name) if name is not None else None,
    )


def build_loans(records: Iterable[Any], *, default_start: Optional[date] = None) -> List[LoanSnapshot]:
    """Build snapshots for a list of records, numbering anonymous loans."""
    return [
        build_loan_from_mapping(record, default_start=default_start, default_id=f"loan-{index}")
        for index, record in enumerate(records, start=1)
    ]


def parse_loan_string(item: str, *, default_start: Optional[date] = None) -> LoanSnapshot:
    """Parse ``ID:BALANCE:RATE:PAYMENT[:TERM]`` into a ``LoanSnapshot``."""
    parts = item.split(":")
    if len(parts) not in (4, 5):
        raise InvalidInputError(f"Loan must be in ID:BALANCE:RATE:PAYMENT[:TERM] format; got {item}")
    record = {
        "id": parts[0].strip(),
        "current_balance": parts[1],
        "annual_rate_percent": parts[2].strip().rstrip("%"),
        "monthly_payment": parts[3],
    }
    if len(parts) == 5:
        record["term_months"] = parts[4]
    return build_loan_from_mapping(record, default_start=default_start)


def load_loans_file(path: Path, *, default_start: Optional[date] = None) -> List[LoanSnapshot]:
    """Read loans from a ``.json`` or ``.csv`` file.

    JSON files hold either a list of loan objects or an object with a
    ``"loans"`` list. CSV files need a header row using the field names
    accepted by :func:`build_loan_from_mapping`.
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise InvalidInputError(f"{path} is not valid JSON: {exc}") from exc
        if isinstance(data, Mapping):
            data = data.get("loans")
        if not isinstance(data, list):
            raise InvalidInputError(f"{path} must contain a list of loans")
        return build_loans(data, default_start=default_start)
    if suffix == ".csv":
        with path.open("r", newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        return build_loans(rows, default_start=default_start)
    raise InvalidInputError("Unsupported loans file format; use .json or .csv")
