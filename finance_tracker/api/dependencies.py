"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from finance_tracker.infrastructure.database.models import UserAccount
from finance_tracker.infrastructure.database.repositories import OwnerRepository
from finance_tracker.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Reference date for statements and projections"""
    return date.today()


def get_owner(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Optional[UserAccount]:
    """
    Resolve the caller's owner row.

    Returns None when the caller is unknown or has not finished onboarding;
    read endpoints answer with empty payloads in that case.
    """
    if not x_user_id:
        return None
    owner = OwnerRepository(db).get_by_auth_id(x_user_id)
    if owner is None or not owner.completed_onboarding:
        return None
    return owner


def require_owner(owner: Optional[UserAccount] = Depends(get_owner)) -> UserAccount:
    """Owner for mutations; unknown callers get 404"""
    if owner is None:
        raise HTTPException(status_code=404, detail="User not found")
    return owner
