"""Dashboard and report aggregations over an owner's transactions"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from finance_tracker.domain.categories import resolve_icon
from finance_tracker.domain.exceptions import InvalidPeriodError
from finance_tracker.domain.installments import allocate, is_installment_plan
from finance_tracker.domain.models import ZERO, CategorySlice, ChartPoint, FinancialSummary, Transaction
from finance_tracker.domain.projection import month_label, project_future_months
from finance_tracker.utils.date_utils import add_months, generate_date_range, shift_month

DAILY_PERIODS = (7, 30)
MONTHLY_PERIODS = (3, 6, 12, 24)


def parse_period(period: str) -> Tuple[str, int]:
    """
    Parse a chart period: '7d'/'30d' are daily windows, '3'/'6'/'12'/'24' monthly.

    Returns: ("daily" | "monthly", length)
    """
    raw = (period or "").strip().lower()
    try:
        if raw.endswith("d"):
            days = int(raw[:-1])
            if days in DAILY_PERIODS:
                return "daily", days
        else:
            months = int(raw)
            if months in MONTHLY_PERIODS:
                return "monthly", months
    except ValueError:
        pass
    raise InvalidPeriodError(f"Unsupported period: {period!r}")


def month_totals(transactions: List[Transaction], year: int, month: int, label: Optional[str] = None) -> ChartPoint:
    """Regular transactions dated in the month plus installment shares due in it"""
    point = ChartPoint(period_label=label or month_label(year, month))

    for txn in transactions:
        if is_installment_plan(txn):
            share = allocate(txn, year, month)
            if share is not None:
                point.add(txn, share)
        elif txn.is_installment:
            continue
        elif txn.tx_date.year == year and txn.tx_date.month == month:
            point.add(txn, Decimal(txn.amount))

    return point


def monthly_series(transactions: List[Transaction], today: date, months: int) -> List[ChartPoint]:
    """Last `months` calendar months up to today's, oldest first"""
    with_year = months == 24
    series = []
    for offset in range(months - 1, -1, -1):
        year, month = shift_month(today.year, today.month, -offset)
        series.append(month_totals(transactions, year, month, month_label(year, month, with_year)))
    return series


def daily_series(transactions: List[Transaction], today: date, days: int) -> List[ChartPoint]:
    """Last `days` days up to today, bucketed by exact transaction date"""
    buckets: Dict[date, ChartPoint] = {
        day: ChartPoint(period_label=day.strftime("%d/%m"))
        for day in generate_date_range(today - timedelta(days=days - 1), today)
    }

    for txn in transactions:
        point = buckets.get(txn.tx_date)
        if point is not None:
            point.add(txn, Decimal(txn.amount))

    return list(buckets.values())


def chart_series(
    transactions: List[Transaction],
    period: str,
    today: date,
    include_future: bool = False,
    horizon: int = 24,
    empty_cutoff: int = 6,
) -> List[ChartPoint]:
    """History for the period, followed by the projection for monthly periods"""
    kind, length = parse_period(period)
    if kind == "daily":
        return daily_series(transactions, today, length)

    series = monthly_series(transactions, today, length)
    if include_future:
        series.extend(
            project_future_months(transactions, today, horizon, empty_cutoff, with_year=length == 24)
        )
    return series


def period_start(period: str, today: date) -> date:
    """First day covered by a category report for the period"""
    kind, length = parse_period(period)
    if kind == "daily":
        return today - timedelta(days=length)
    return add_months(today, -length)


def category_color(index: int) -> str:
    """Spread hues by the golden angle so neighbouring slices differ"""
    hue = (index * 137.5) % 360
    return f"hsl({hue:g}, 65%, 55%)"


def category_breakdown(
    transactions: List[Transaction],
    start: Optional[date] = None,
    end: Optional[date] = None,
    icons: Optional[Dict[str, str]] = None,
) -> List[CategorySlice]:
    """Expense totals per category label, largest first"""
    icons = icons or {}
    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)

    for txn in transactions:
        if not txn.is_expense:
            continue
        if start is not None and txn.tx_date < start:
            continue
        if end is not None and txn.tx_date > end:
            continue
        totals[txn.category] += abs(Decimal(txn.amount))

    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [
        CategorySlice(
            name=name,
            value=value,
            color=category_color(index),
            icon=resolve_icon(icons.get(name)).value,
        )
        for index, (name, value) in enumerate(ranked)
    ]


def financial_summary(transactions: List[Transaction], today: date) -> FinancialSummary:
    """Income, expenses and recurring expenses for today's month"""
    point = month_totals(transactions, today.year, today.month)
    return FinancialSummary(
        monthly_income=point.receitas,
        monthly_expenses=point.despesas,
        monthly_recurring_expenses=point.gastos_recorrentes,
    )
