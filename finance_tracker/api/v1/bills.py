"""Credit card bills: listing, payments, undo and archiving"""

import logging
import time
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner, get_request_id, get_today, require_owner
from finance_tracker.api.v1.schemas import (
    BillLineSchema,
    BillResponse,
    PaymentRequest,
    PaymentResponse,
    PaymentResult,
)
from finance_tracker.config import settings
from finance_tracker.domain.billing import (
    apply_payment,
    archive_bill,
    bill_lines,
    build_statements,
    derive_status,
    is_due_soon,
    revert_payment,
    statement_due_range,
    statement_window,
)
from finance_tracker.domain.exceptions import (
    ArchivedBillError,
    BillNotPaidError,
    ConcurrentModificationError,
    InvalidPaymentAmountError,
    PaymentExceedsRemainingError,
)
from finance_tracker.infrastructure.database.models import BillPaymentRecord, CreditCardBillRecord, UserAccount
from finance_tracker.infrastructure.database.repositories import (
    BillRepository,
    CreditCardRepository,
    TransactionRepository,
    to_bill,
    to_credit_card,
    to_payment,
)
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.observability.logging import log_bill_payment, log_bill_refresh
from finance_tracker.infrastructure.observability.metrics import (
    bill_payment_counter,
    bills_refreshed_counter,
    payment_rejection_counter,
    record_payment,
)
from finance_tracker.utils.date_utils import shift_month

router = APIRouter()


def bill_response(record: CreditCardBillRecord, today: date) -> BillResponse:
    """Serialize a stored bill, deriving status against today"""
    bill_amount = Decimal(record.bill_amount)
    paid_amount = Decimal(record.paid_amount)
    status = derive_status(bill_amount, paid_amount, record.due_date, today, record.close_date, record.archived)

    return BillResponse(
        id=record.id,
        credit_card_id=record.credit_card_id,
        bill_amount=bill_amount,
        paid_amount=paid_amount,
        remaining_amount=max(bill_amount - paid_amount, Decimal("0.00")),
        due_date=record.due_date,
        close_date=record.close_date,
        status=status.value,
        archived=bool(record.archived),
        due_soon=is_due_soon(record.due_date, today, status, settings.due_soon_days),
    )


def payment_response(record: BillPaymentRecord) -> PaymentResponse:
    payment = to_payment(record)
    return PaymentResponse(
        id=payment.id,
        bill_id=payment.bill_id,
        amount=payment.amount,
        payment_date=payment.payment_date,
    )


def refresh_owner_bills(db: Session, owner_id: int, today: date, request_id: str) -> int:
    """Recompute every card's statements from current transactions and upsert them"""
    start_time = time.time()
    cards = CreditCardRepository(db).list_cards(owner_id)
    transactions = TransactionRepository(db).list_transactions(owner_id)
    bill_repo = BillRepository(db)

    written = 0
    for card in cards:
        computed = build_statements(
            card,
            transactions,
            today,
            months_back=settings.bill_lookback_months,
            months_ahead=settings.bill_lookahead_months,
        )
        due_range = statement_due_range(
            card,
            today,
            months_back=settings.bill_lookback_months,
            months_ahead=settings.bill_lookahead_months,
        )
        written += bill_repo.sync_bills(owner_id, card.id, computed, today, due_range)

    bills_refreshed_counter.inc(written)
    log_bill_refresh(request_id, owner_id, len(cards), written, (time.time() - start_time) * 1000)
    return written


@router.get("/bills", response_model=List[BillResponse])
def list_bills(
    request: Request,
    include_archived: bool = Query(False, description="Also return archived bills"),
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Recompute and list the caller's card bills, ordered by due date.

    Unknown callers get an empty list.
    """
    if owner is None:
        return []

    request_id = get_request_id(request)
    try:
        refresh_owner_bills(db, owner.id, today, request_id)
        db.commit()
    except ConcurrentModificationError as e:
        # Another request refreshed first; its rows are just as current
        db.rollback()
        logging.warning(f"Bill refresh skipped: {e}", extra={"request_id": request_id})

    records = BillRepository(db).list_records(owner.id, include_archived=include_archived)
    return [
        bill_response(record, today)
        for record in records
        if record.bill_amount > 0 or record.paid_amount > 0
    ]


@router.get("/bills/{bill_id}/transactions", response_model=List[BillLineSchema])
def list_bill_transactions(
    bill_id: int,
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
):
    """Transactions and installment shares making up a bill"""
    if owner is None:
        return []

    record = BillRepository(db).get(owner.id, bill_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Bill not found")

    card = to_credit_card(record.credit_card)
    # Statements are due in the month after they close
    year, month = shift_month(record.due_date.year, record.due_date.month, -1)
    window = statement_window(card, year, month)
    transactions = TransactionRepository(db).list_transactions(owner.id)

    return [
        BillLineSchema(
            transaction_id=line.transaction_id,
            description=line.description,
            category=line.category,
            amount=line.amount,
            effective_date=line.effective_date,
            installment_label=line.installment_label,
        )
        for line in bill_lines(card, window, transactions)
    ]


@router.get("/bills/{bill_id}/payments", response_model=List[PaymentResponse])
def list_bill_payments(
    bill_id: int,
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
):
    """Payment history of a bill, newest first"""
    if owner is None:
        return []
    return [payment_response(p) for p in BillRepository(db).list_payments(owner.id, bill_id)]


def _reject(db: Session, reason: str, status_code: int, error: Exception, request_id: str) -> HTTPException:
    db.rollback()
    payment_rejection_counter.labels(reason=reason).inc()
    logging.warning(f"Bill mutation refused: {error}", extra={"request_id": request_id, "reason": reason})
    return HTTPException(status_code=status_code, detail=str(error))


@router.post("/bills/{bill_id}/payments", response_model=PaymentResult, status_code=201)
def pay_bill(
    bill_id: int,
    body: PaymentRequest,
    request: Request,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Pay a bill fully or partially.

    Flow:
    1. Re-read the bill so remaining_amount is current
    2. Refuse amounts above what is still owed
    3. Append to the payment log and update the bill (version-checked)
    4. Return the updated bill
    """
    start_time = time.time()
    request_id = get_request_id(request)
    bill_repo = BillRepository(db)

    record = bill_repo.get(owner.id, bill_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Bill not found")

    try:
        db.refresh(record)
        bill = apply_payment(to_bill(record), body.amount, today)
        payment = bill_repo.add_payment(owner.id, record.id, body.amount, body.payment_date or today)
        bill_repo.save(record, bill)
        db.commit()

    except PaymentExceedsRemainingError as e:
        raise _reject(db, "exceeds_remaining", 422, e, request_id)

    except InvalidPaymentAmountError as e:
        raise _reject(db, "invalid_amount", 422, e, request_id)

    except ArchivedBillError as e:
        raise _reject(db, "archived", 409, e, request_id)

    except ConcurrentModificationError as e:
        raise _reject(db, "conflict", 409, e, request_id)

    record_payment(bill.status.value)
    log_bill_payment(
        request_id,
        owner.id,
        record.id,
        "payment_applied",
        body.amount,
        bill.remaining_amount,
        bill.status.value,
        (time.time() - start_time) * 1000,
    )

    return PaymentResult(bill=bill_response(record, today), payment=payment_response(payment))


@router.delete("/payments/{payment_id}", response_model=PaymentResult)
def undo_payment(
    payment_id: int,
    request: Request,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Undo a payment; refused once the bill is archived"""
    request_id = get_request_id(request)
    bill_repo = BillRepository(db)

    payment = bill_repo.get_payment(owner.id, payment_id)
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")

    record = payment.bill
    amount = Decimal(payment.amount)
    try:
        db.refresh(record)
        bill = revert_payment(to_bill(record), amount, today)
        bill_repo.delete_payment(payment)
        bill_repo.save(record, bill)
        db.commit()

    except ArchivedBillError as e:
        raise _reject(db, "archived", 409, e, request_id)

    except ConcurrentModificationError as e:
        raise _reject(db, "conflict", 409, e, request_id)

    bill_payment_counter.labels(outcome="reverted").inc()
    log_bill_payment(request_id, owner.id, record.id, "payment_reverted", amount, bill.remaining_amount, bill.status.value)

    return PaymentResult(bill=bill_response(record, today))


@router.post("/bills/{bill_id}/archive", response_model=BillResponse)
def archive(
    bill_id: int,
    request: Request,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Archive a fully paid bill. There is no unarchive."""
    request_id = get_request_id(request)
    bill_repo = BillRepository(db)

    record = bill_repo.get(owner.id, bill_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Bill not found")

    try:
        bill = archive_bill(to_bill(record))
        bill_repo.save(record, bill)
        db.commit()

    except BillNotPaidError as e:
        raise _reject(db, "not_paid", 409, e, request_id)

    except ConcurrentModificationError as e:
        raise _reject(db, "conflict", 409, e, request_id)

    bill_payment_counter.labels(outcome="archived").inc()
    log_bill_payment(request_id, owner.id, record.id, "bill_archived", Decimal("0.00"), bill.remaining_amount, bill.status.value)

    return bill_response(record, today)
