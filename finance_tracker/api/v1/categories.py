"""Category endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner, require_owner
from finance_tracker.api.v1.schemas import CategoryRequest, CategoryResponse
from finance_tracker.domain.categories import resolve_icon
from finance_tracker.infrastructure.database.models import CategoryRecord, UserAccount
from finance_tracker.infrastructure.database.repositories import CategoryRepository
from finance_tracker.infrastructure.database.session import get_db

router = APIRouter()


def category_response(record: CategoryRecord) -> CategoryResponse:
    return CategoryResponse(
        id=record.id,
        name=record.name,
        type=record.type,
        color=record.color,
        icon=resolve_icon(record.icon).value,
    )


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(
    type: Optional[str] = Query(None, pattern="^(receita|despesa)$"),
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
):
    if owner is None:
        return []
    return [category_response(r) for r in CategoryRepository(db).list_records(owner.id, type)]


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    body: CategoryRequest,
    owner: UserAccount = Depends(require_owner),
    db: Session = Depends(get_db),
):
    """Create a category; icon names outside the registry are stored as 'tag'"""
    fields = body.model_dump()
    fields["icon"] = resolve_icon(body.icon).value
    try:
        record = CategoryRepository(db).create(owner.id, **fields)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Category already exists")
    return category_response(record)
