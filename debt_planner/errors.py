"""Exceptions raised by the debt planner.

All of them derive from ``ValueError`` so callers that already guard loan
calculations with ``except ValueError`` keep working.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional


class DebtPlannerError(ValueError):
    """Base class for every calculation fault."""

    loan_id: Optional[str] = None


class InvalidInputError(DebtPlannerError):
    """Input rejected before any simulation started."""


class NonAmortizingPaymentError(DebtPlannerError):
    """The payment does not cover the interest accrued in a month.

    The balance would never shrink, so the loan cannot be paid off with this
    payment.
    """

    def __init__(
        self,
        balance: Decimal,
        interest: Decimal,
        payment: Decimal,
        loan_id: Optional[str] = None,
    ) -> None:
        self.balance = balance
        self.interest = interest
        self.payment = payment
        self.loan_id = loan_id
        super().__init__(
            f"Payment {payment:.2f} does not cover monthly interest {interest:.2f} "
            f"on balance {balance:.2f}"
        )

    def __str__(self) -> str:
        message = super().__str__()
        if self.loan_id is not None:
            return f"Loan {self.loan_id}: {message}"
        return message


class ScheduleTooLongError(DebtPlannerError):
    """The schedule would run past the safety cap on simulated months."""

    def __init__(
        self,
        max_months: int,
        remaining_balance: Decimal,
        loan_id: Optional[str] = None,
    ) -> None:
        self.max_months = max_months
        self.remaining_balance = remaining_balance
        self.loan_id = loan_id
        super().__init__(
            f"Balance {remaining_balance:.2f} still outstanding after {max_months} months; "
            "the payment is too low"
        )

    def __str__(self) -> str:
        message = super().__str__()
        if self.loan_id is not None:
            return f"Loan {self.loan_id}: {message}"
        return message
