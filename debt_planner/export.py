"""Conversion of results into JSON/CSV friendly structures and files."""

from __future__ import annotations

import csv
import json
from dataclasses import fields, is_dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .data_models import PayoffStrategyComparison, ScheduleEntry

SCHEDULE_HEADER = [
    "Loan",
    "Payment_Number",
    "Date",
    "Starting_Balance",
    "Payment",
    "Principal",
    "Interest",
    "Remaining_Balance",
]


def to_serializable(value: Any) -> Any:
    """Recursively convert dataclasses, Decimals and dates into JSON types.

    Decimals become floats and dates ISO strings.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_serializable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(v) for v in value]
    return value


def schedule_to_rows(schedule: Iterable[ScheduleEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries for charts."""
    return [to_serializable(entry) for entry in schedule]


def comparison_to_dict(comparison: PayoffStrategyComparison) -> Dict[str, Any]:
    data = to_serializable(comparison)
    data["excluded_loan_ids"] = comparison.excluded_loan_ids
    return data


def export_schedule_json(path: Path, schedule: List[ScheduleEntry], summary: Dict[str, Any]) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": to_serializable(summary), "schedule": schedule_to_rows(schedule)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_schedule_csv(path: Path, schedule: List[ScheduleEntry]) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(SCHEDULE_HEADER)
        for e in schedule:
            writer.writerow(
                [
                    e.loan_id,
                    e.payment_number,
                    e.payment_date.isoformat(),
                    f"{e.starting_balance:.2f}",
                    f"{e.payment_amount:.2f}",
                    f"{e.principal_portion:.2f}",
                    f"{e.interest_portion:.2f}",
                    f"{e.remaining_balance:.2f}",
                ]
            )


def export_json(path: Path, payload: Any) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(to_serializable(payload), f, indent=2)
