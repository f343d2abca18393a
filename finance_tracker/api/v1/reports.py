"""Dashboard and report series"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner, get_today
from finance_tracker.api.v1.schemas import CategorySliceSchema, ChartPointSchema, SummaryResponse
from finance_tracker.config import settings
from finance_tracker.domain.charts import category_breakdown, chart_series, financial_summary, period_start
from finance_tracker.domain.exceptions import InvalidPeriodError
from finance_tracker.domain.models import ZERO, ChartPoint
from finance_tracker.domain.projection import project_future_months
from finance_tracker.infrastructure.database.models import UserAccount
from finance_tracker.infrastructure.database.repositories import CategoryRepository, TransactionRepository
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.observability.metrics import projection_months_histogram

router = APIRouter()


def point_schema(point: ChartPoint) -> ChartPointSchema:
    return ChartPointSchema(
        period_label=point.period_label,
        receitas=float(point.receitas),
        despesas=float(point.despesas),
        gastos_recorrentes=float(point.gastos_recorrentes),
        fluxo_liquido=float(point.fluxo_liquido),
        is_future=point.is_future,
    )


@router.get("/reports/chart", response_model=List[ChartPointSchema])
def get_chart(
    period: str = Query("6", description="7d, 30d, 3, 6, 12 or 24"),
    future: bool = Query(False, description="Append projected months (monthly periods only)"),
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Income vs expense series for the period"""
    transactions = TransactionRepository(db).list_transactions(owner.id) if owner else []
    try:
        series = chart_series(
            transactions,
            period,
            today,
            include_future=future,
            horizon=settings.projection_horizon_months,
            empty_cutoff=settings.projection_empty_cutoff,
        )
    except InvalidPeriodError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return [point_schema(p) for p in series]


@router.get("/reports/projection", response_model=List[ChartPointSchema])
def get_projection(
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Projected months ahead from recurring and installment transactions"""
    if owner is None:
        return []

    transactions = TransactionRepository(db).list_transactions(owner.id)
    months = project_future_months(
        transactions,
        today,
        horizon=settings.projection_horizon_months,
        empty_cutoff=settings.projection_empty_cutoff,
    )
    projection_months_histogram.observe(len(months))
    return [point_schema(p) for p in months]


@router.get("/reports/categories", response_model=List[CategorySliceSchema])
def get_categories(
    period: Optional[str] = Query(None, description="Restrict to 7d, 30d, 3, 6, 12 or 24; all time when omitted"),
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Expense totals per category, largest first"""
    if owner is None:
        return []

    try:
        start = period_start(period, today) if period else None
    except InvalidPeriodError as e:
        raise HTTPException(status_code=422, detail=str(e))

    slices = category_breakdown(
        TransactionRepository(db).list_transactions(owner.id),
        start=start,
        end=today if period else None,
        icons=CategoryRepository(db).icon_map(owner.id),
    )
    return [CategorySliceSchema(name=s.name, value=float(s.value), color=s.color, icon=s.icon) for s in slices]


@router.get("/reports/summary", response_model=SummaryResponse)
def get_summary(
    owner: Optional[UserAccount] = Depends(get_owner),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Current-month totals; zeros for unknown callers"""
    if owner is None:
        return SummaryResponse(
            total_balance=ZERO,
            monthly_income=ZERO,
            monthly_expenses=ZERO,
            monthly_recurring_expenses=ZERO,
        )

    summary = financial_summary(TransactionRepository(db).list_transactions(owner.id), today)
    return SummaryResponse(
        total_balance=summary.total_balance,
        monthly_income=summary.monthly_income,
        monthly_expenses=summary.monthly_expenses,
        monthly_recurring_expenses=summary.monthly_recurring_expenses,
    )
