"""Installment allocation: which month an installment share lands in, and how much"""

from datetime import date
from decimal import Decimal, ROUND_DOWN
from typing import List, Optional

from finance_tracker.domain.models import ZERO, Installment, Transaction
from finance_tracker.utils.date_utils import add_months, months_between

CENT = Decimal("0.01")


def is_installment_plan(txn: Transaction) -> bool:
    """
    Whether a transaction takes the installment path.

    Rows flagged as installments but missing a count or a start date are
    treated as plain transactions by the callers' filters and never spread.
    """
    return bool(
        txn.is_installment
        and txn.total_installments
        and txn.total_installments > 0
        and txn.installment_start_date is not None
    )


def split_installments(amount: Decimal, num_installments: int) -> List[Decimal]:
    """
    Split a purchase total into equal monthly shares.

    Requirements:
    - Shares are truncated to cents
    - Last installment absorbs the remainder so the series sums to amount

    Example:
        R$ 100.00 / 3 -> [33.33, 33.33, 33.34]
    """
    if num_installments <= 0 or amount <= 0:
        return []

    base_amount = (Decimal(amount) / num_installments).quantize(CENT, rounding=ROUND_DOWN)
    remainder = Decimal(amount) - base_amount * num_installments

    shares = [base_amount] * num_installments
    shares[-1] = base_amount + remainder
    return shares


def installment_share(txn: Transaction, index: int) -> Decimal:
    """Amount of the installment at 0-based index; installment_value wins when set"""
    if txn.installment_value is not None:
        return Decimal(txn.installment_value)

    shares = split_installments(Decimal(txn.amount), txn.total_installments)
    if not shares:
        return ZERO
    return shares[index]


def installment_index(txn: Transaction, year: int, month: int) -> Optional[int]:
    """0-based installment falling in (year, month), or None outside the window"""
    if not is_installment_plan(txn):
        return None

    months_diff = months_between(txn.installment_start_date, year, month)
    if 0 <= months_diff < txn.total_installments:
        return months_diff
    return None


def allocate(txn: Transaction, year: int, month: int) -> Optional[Decimal]:
    """
    Amount of an installment purchase attributable to a calendar month.

    monthsDiff = (year - start.year) * 12 + (month - start.month); the
    purchase contributes iff 0 <= monthsDiff < total_installments.

    Returns:
        The share for that month, or None when the month is outside the
        installment window (or the transaction is not an installment plan).
    """
    index = installment_index(txn, year, month)
    if index is None:
        return None
    return installment_share(txn, index)


def installment_due_date(txn: Transaction, index: int) -> date:
    """Start date moved forward index calendar months"""
    return add_months(txn.installment_start_date, index)


def installment_label(txn: Transaction, year: int, month: int) -> Optional[str]:
    """Display label such as '2/3' for the installment landing in (year, month)"""
    index = installment_index(txn, year, month)
    if index is None:
        return None
    return f"{index + 1}/{txn.total_installments}"


def installment_schedule(txn: Transaction) -> List[Installment]:
    """Every installment of a plan with its due date and amount"""
    if not is_installment_plan(txn):
        return []

    return [
        Installment(
            number=i + 1,
            due_date=installment_due_date(txn, i),
            amount=installment_share(txn, i),
        )
        for i in range(txn.total_installments)
    ]


def remaining_installments(txn: Transaction, today: date) -> int:
    """Installments whose month is after today's month"""
    if not is_installment_plan(txn):
        return 0

    elapsed = months_between(txn.installment_start_date, today.year, today.month)
    return max(0, min(txn.total_installments, txn.total_installments - elapsed - 1))
