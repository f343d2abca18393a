"""Credit card statements - grouping card expenses into bills and tracking payments"""

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from finance_tracker.domain.exceptions import (
    ArchivedBillError,
    BillNotPaidError,
    InvalidPaymentAmountError,
    PaymentExceedsRemainingError,
)
from finance_tracker.domain.installments import (
    allocate,
    installment_due_date,
    installment_index,
    installment_label,
    is_installment_plan,
)
from finance_tracker.domain.models import (
    ZERO,
    BillLine,
    BillStatus,
    CreditCard,
    CreditCardBill,
    StatementWindow,
    Transaction,
)
from finance_tracker.utils.date_utils import clamp_day, iter_months, shift_month

DUE_SOON_DAYS = 3


def statement_window(card: CreditCard, year: int, month: int) -> StatementWindow:
    """
    Billing period of the statement that closes in (year, month).

    With a close day: [close of previous month, close of this month).
    Without one: the calendar month. The due date falls on the card's due
    day in the month after the statement closes.
    """
    next_year, next_month = shift_month(year, month, 1)

    if card.close_date:
        prev_year, prev_month = shift_month(year, month, -1)
        period_start = clamp_day(prev_year, prev_month, card.close_date)
        period_end = clamp_day(year, month, card.close_date)
        close_date: Optional[date] = period_end
    else:
        period_start = date(year, month, 1)
        period_end = date(next_year, next_month, 1)
        close_date = None

    return StatementWindow(
        credit_card_id=card.id,
        year=year,
        month=month,
        period_start=period_start,
        period_end=period_end,
        close_date=close_date,
        due_date=clamp_day(next_year, next_month, card.due_date),
    )


def bill_lines(card: CreditCard, window: StatementWindow, transactions: List[Transaction]) -> List[BillLine]:
    """Contributions of the card's expenses to one statement window"""
    lines: List[BillLine] = []
    last_day = window.period_end - timedelta(days=1)

    for txn in transactions:
        if txn.credit_card_id != card.id or not txn.is_expense:
            continue

        if is_installment_plan(txn):
            # Installment shares land on the start day shifted by whole months
            for year, month in iter_months(window.period_start, last_day):
                share = allocate(txn, year, month)
                if share is None:
                    continue
                effective = installment_due_date(txn, installment_index(txn, year, month))
                if window.contains(effective):
                    lines.append(
                        BillLine(
                            transaction_id=txn.id,
                            description=txn.description,
                            category=txn.category,
                            amount=share,
                            effective_date=effective,
                            installment_label=installment_label(txn, year, month),
                        )
                    )
        elif txn.is_installment:
            # Malformed installment metadata: excluded, not repaired
            continue
        elif window.contains(txn.tx_date):
            lines.append(
                BillLine(
                    transaction_id=txn.id,
                    description=txn.description,
                    category=txn.category,
                    amount=Decimal(txn.amount),
                    effective_date=txn.tx_date,
                )
            )

    return sorted(lines, key=lambda line: (line.effective_date, line.transaction_id))


def derive_status(
    bill_amount: Decimal,
    paid_amount: Decimal,
    due_date: date,
    today: date,
    close_date: Optional[date] = None,
    archived: bool = False,
) -> BillStatus:
    """
    Status of a bill, evaluated in a fixed order.

    archived -> paid (terminal), nothing left owed (with something billed
    or paid) -> paid, past due with a balance -> overdue, partly paid ->
    partial, statement still open -> open, else pending. Paid is checked
    before overdue.
    """
    if archived:
        return BillStatus.PAID

    remaining = bill_amount - paid_amount
    if remaining <= 0 and (bill_amount > 0 or paid_amount > 0):
        return BillStatus.PAID
    if due_date < today and remaining > 0:
        return BillStatus.OVERDUE
    if paid_amount > 0:
        return BillStatus.PARTIAL
    if close_date is not None and close_date > today:
        return BillStatus.OPEN
    return BillStatus.PENDING


def is_due_soon(due_date: date, today: date, status: BillStatus, days: int = DUE_SOON_DAYS) -> bool:
    """UI emphasis only: due within `days` and not yet paid or overdue"""
    if status in (BillStatus.PAID, BillStatus.OVERDUE):
        return False
    return 0 <= (due_date - today).days <= days


def aggregate_bill(
    card: CreditCard,
    window: StatementWindow,
    transactions: List[Transaction],
    today: date,
    paid_amount: Decimal = ZERO,
    archived: bool = False,
) -> CreditCardBill:
    """Bill total for one window, with status derived from what was paid"""
    lines = bill_lines(card, window, transactions)
    bill_amount = sum((line.amount for line in lines), ZERO)

    return CreditCardBill(
        credit_card_id=card.id,
        owner_id=card.owner_id,
        bill_amount=bill_amount,
        paid_amount=paid_amount,
        due_date=window.due_date,
        close_date=window.close_date,
        status=derive_status(bill_amount, paid_amount, window.due_date, today, window.close_date, archived),
        archived=archived,
        lines=lines,
    )


def build_statements(
    card: CreditCard,
    transactions: List[Transaction],
    today: date,
    months_back: int = 12,
    months_ahead: int = 12,
) -> List[CreditCardBill]:
    """
    Statements for every window from months_back before today's month to
    months_ahead after it, skipping windows with nothing billed.

    Payments are not applied here; callers merge the payment log in.
    """
    bills = []
    for offset in range(-months_back, months_ahead + 1):
        year, month = shift_month(today.year, today.month, offset)
        bill = aggregate_bill(card, statement_window(card, year, month), transactions, today)
        if bill.bill_amount > 0:
            bills.append(bill)
    return bills


def statement_due_range(card: CreditCard, today: date, months_back: int = 12, months_ahead: int = 12) -> Tuple[date, date]:
    """First and last due date covered by build_statements with the same arguments"""
    first = shift_month(today.year, today.month, -months_back)
    last = shift_month(today.year, today.month, months_ahead)
    return statement_window(card, *first).due_date, statement_window(card, *last).due_date


def refresh_bill(bill: CreditCardBill, bill_amount: Decimal, today: date) -> CreditCardBill:
    """Recompute a stored bill after its transactions changed, keeping payments"""
    return replace(
        bill,
        bill_amount=bill_amount,
        status=derive_status(bill_amount, bill.paid_amount, bill.due_date, today, bill.close_date, bill.archived),
    )


def apply_payment(bill: CreditCardBill, amount: Decimal, today: date) -> CreditCardBill:
    """
    Record a (full or partial) payment against a bill.

    Raises:
        InvalidPaymentAmountError: amount is zero or negative
        ArchivedBillError: bill is archived
        PaymentExceedsRemainingError: amount is above what is still owed
    """
    if amount <= 0:
        raise InvalidPaymentAmountError("Payment amount must be positive")
    if bill.archived:
        raise ArchivedBillError("Cannot pay an archived bill")
    if amount > bill.remaining_amount:
        raise PaymentExceedsRemainingError(
            f"Payment of {amount} exceeds remaining amount {bill.remaining_amount}"
        )

    paid_amount = bill.paid_amount + amount
    return replace(
        bill,
        paid_amount=paid_amount,
        status=derive_status(bill.bill_amount, paid_amount, bill.due_date, today, bill.close_date),
    )


def revert_payment(bill: CreditCardBill, amount: Decimal, today: date) -> CreditCardBill:
    """
    Undo a payment. Refused for archived bills whatever the payment's age.

    Raises:
        ArchivedBillError: bill is archived
    """
    if bill.archived:
        raise ArchivedBillError("Cannot undo payment for archived bill")

    paid_amount = max(bill.paid_amount - amount, ZERO)
    return replace(
        bill,
        paid_amount=paid_amount,
        status=derive_status(bill.bill_amount, paid_amount, bill.due_date, today, bill.close_date),
    )


def archive_bill(bill: CreditCardBill) -> CreditCardBill:
    """
    Archive a fully paid bill. One-way; archiving twice is a no-op.

    Raises:
        BillNotPaidError: bill still has a balance or was never billed
    """
    if bill.archived:
        return bill
    if bill.bill_amount <= 0 or bill.remaining_amount > 0:
        raise BillNotPaidError("Only fully paid bills can be archived")

    return replace(bill, archived=True, status=BillStatus.PAID)
