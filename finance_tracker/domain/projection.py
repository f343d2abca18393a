"""Forward projection of recurring and installment transactions"""

from datetime import date
from decimal import Decimal
from typing import List

from finance_tracker.domain.installments import allocate, is_installment_plan
from finance_tracker.domain.models import ChartPoint, Transaction
from finance_tracker.utils.date_utils import shift_month

MONTH_ABBREVIATIONS = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")


def month_label(year: int, month: int, with_year: bool = False) -> str:
    """pt-BR short month name, e.g. 'mar' or 'mar 2025'"""
    label = MONTH_ABBREVIATIONS[month - 1]
    return f"{label} {year}" if with_year else label


def project_month(transactions: List[Transaction], year: int, month: int, with_year: bool = False) -> ChartPoint:
    """Expected income and expenses for one future month"""
    point = ChartPoint(period_label=month_label(year, month, with_year), is_future=True)

    for txn in transactions:
        if is_installment_plan(txn):
            share = allocate(txn, year, month)
            if share is not None:
                point.add(txn, share)
        elif txn.is_installment:
            continue
        elif txn.is_recurring:
            # No end date is modelled: recurring rows repeat every month
            point.add(txn, Decimal(txn.amount))
        elif txn.tx_date.year == year and txn.tx_date.month == month:
            point.add(txn, Decimal(txn.amount))

    return point


def project_future_months(
    transactions: List[Transaction],
    today: date,
    horizon: int = 24,
    empty_cutoff: int = 6,
    with_year: bool = False,
) -> List[ChartPoint]:
    """
    Project months 1..horizon after today's month.

    Scanning stops once empty_cutoff consecutive months with no income and
    no expense have accumulated; that empty run stays in the output.
    """
    months: List[ChartPoint] = []
    consecutive_empty = 0

    for i in range(1, horizon + 1):
        year, month = shift_month(today.year, today.month, i)
        point = project_month(transactions, year, month, with_year)
        months.append(point)

        consecutive_empty = consecutive_empty + 1 if point.is_empty else 0
        if consecutive_empty >= empty_cutoff:
            break

    return months
