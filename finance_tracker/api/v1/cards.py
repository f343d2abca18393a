"""Credit card registry endpoints"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner, get_request_id, require_owner
from finance_tracker.api.v1.schemas import CreditCardRequest, CreditCardResponse
from finance_tracker.config import settings
from finance_tracker.domain.exceptions import CardLimitReachedError
from finance_tracker.domain.plans import ensure_can_add_card
from finance_tracker.infrastructure.database.models import CreditCardRecord, UserAccount
from finance_tracker.infrastructure.database.repositories import CreditCardRepository
from finance_tracker.infrastructure.database.session import get_db

router = APIRouter()


def card_response(record: CreditCardRecord) -> CreditCardResponse:
    return CreditCardResponse(
        id=record.id,
        bank_name=record.bank_name,
        card_name=record.card_name,
        close_date=record.close_date,
        due_date=record.due_date,
        card_type=record.card_type,
        color=record.color,
    )


@router.get("/cards", response_model=List[CreditCardResponse])
def list_cards(
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
):
    if owner is None:
        return []
    return [card_response(r) for r in CreditCardRepository(db).list_records(owner.id)]


@router.post("/cards", response_model=CreditCardResponse, status_code=201)
def create_card(
    body: CreditCardRequest,
    request: Request,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
):
    """Register a card, within the number of cards the owner's plan allows"""
    repo = CreditCardRepository(db)
    try:
        ensure_can_add_card(
            owner.plan_type,
            repo.count(owner.id),
            basic_limit=settings.basic_card_limit,
            premium_limit=settings.premium_card_limit,
        )
    except CardLimitReachedError as e:
        logging.warning(f"Card limit reached: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=409, detail=str(e))

    record = repo.create(owner.id, **body.model_dump())
    db.commit()
    return card_response(record)


@router.put("/cards/{card_id}", response_model=CreditCardResponse)
def update_card(
    card_id: int,
    body: CreditCardRequest,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
):
    repo = CreditCardRepository(db)
    record = repo.get(owner.id, card_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Credit card not found")

    repo.update(record, **body.model_dump())
    db.commit()
    return card_response(record)


@router.delete("/cards/{card_id}", status_code=204)
def delete_card(
    card_id: int,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
):
    """Delete a card and its bills; transactions are kept without the card link"""
    repo = CreditCardRepository(db)
    record = repo.get(owner.id, card_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Credit card not found")

    repo.delete(record)
    db.commit()
    return Response(status_code=204)
