"""Transaction CRUD, recurring list and installment schedules"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner, get_request_id, get_today, require_owner
from finance_tracker.api.v1.schemas import (
    InstallmentSchema,
    InstallmentScheduleResponse,
    TransactionRequest,
    TransactionResponse,
)
from finance_tracker.domain.installments import installment_schedule, is_installment_plan, remaining_installments
from finance_tracker.infrastructure.database.models import TransactionRecord, UserAccount
from finance_tracker.infrastructure.database.repositories import (
    CreditCardRepository,
    TransactionRepository,
    to_transaction,
)
from finance_tracker.infrastructure.database.session import get_db

router = APIRouter()


def transaction_response(record: TransactionRecord) -> TransactionResponse:
    return TransactionResponse(
        id=record.id,
        amount=Decimal(record.value),
        type=record.type,
        category=record.category,
        tx_date=record.tx_date,
        description=record.description or "",
        is_installment=bool(record.is_installment),
        installment_number=record.installment_number,
        total_installments=record.total_installments,
        installment_start_date=record.installment_start_date,
        installment_value=record.installment_value,
        is_recurring=bool(record.is_recurring),
        recurring_date=record.recurring_date,
        credit_card_id=record.credit_card_id,
    )


def record_fields(body: TransactionRequest) -> dict:
    """Column values for a validated request"""
    fields = body.model_dump(exclude={"amount"})
    fields["value"] = body.amount
    if not body.is_installment:
        fields.update(
            installment_number=None,
            total_installments=None,
            installment_start_date=None,
            installment_value=None,
        )
    if not body.is_recurring:
        fields["recurring_date"] = None
    return fields


def _check_card(db: Session, owner_id: int, credit_card_id: Optional[int]) -> None:
    if credit_card_id is not None and CreditCardRepository(db).get(owner_id, credit_card_id) is None:
        raise HTTPException(status_code=404, detail="Credit card not found")


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    limit: Optional[int] = Query(None, ge=1, le=500, description="Most recent N transactions"),
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
):
    """Caller's transactions, most recent first"""
    if owner is None:
        return []
    records = TransactionRepository(db).list_records(owner.id, descending=True, limit=limit)
    return [transaction_response(r) for r in records]


@router.get("/transactions/recurring", response_model=List[TransactionResponse])
def list_recurring_transactions(
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
):
    """Recurring transactions ordered by the day of month they land on"""
    if owner is None:
        return []
    return [transaction_response(r) for r in TransactionRepository(db).list_recurring(owner.id)]


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    body: TransactionRequest,
    request: Request,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
):
    _check_card(db, owner.id, body.credit_card_id)

    record = TransactionRepository(db).create(owner.id, **record_fields(body))
    db.commit()

    logging.info(
        "Transaction created",
        extra={
            "request_id": get_request_id(request),
            "owner_id": owner.id,
            "transaction_id": record.id,
            "is_installment": body.is_installment,
            "is_recurring": body.is_recurring,
        },
    )
    return transaction_response(record)


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    body: TransactionRequest,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
):
    repo = TransactionRepository(db)
    record = repo.get(owner.id, transaction_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    _check_card(db, owner.id, body.credit_card_id)

    repo.update(record, **record_fields(body))
    db.commit()
    return transaction_response(record)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
):
    repo = TransactionRepository(db)
    record = repo.get(owner.id, transaction_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Transaction not found")

    repo.delete(record)
    db.commit()
    return Response(status_code=204)


@router.get("/transactions/{transaction_id}/installments", response_model=InstallmentScheduleResponse)
def get_installment_schedule(
    transaction_id: int,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Installment schedule of a purchase.

    Returns:
        One entry per installment with its due date and amount
    """
    record = TransactionRepository(db).get(owner.id, transaction_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Transaction not found")

    txn = to_transaction(record)
    if not is_installment_plan(txn):
        raise HTTPException(status_code=422, detail="Transaction is not an installment purchase")

    return InstallmentScheduleResponse(
        transaction_id=txn.id,
        total_installments=txn.total_installments,
        remaining_installments=remaining_installments(txn, today),
        installments=[
            InstallmentSchema(number=i.number, due_date=i.due_date, amount=i.amount)
            for i in installment_schedule(txn)
        ],
    )
