"""Unit tests for dashboard series, category breakdown and plan limits"""

import pytest
from datetime import date
from decimal import Decimal
from finance_tracker.domain.categories import CategoryIcon, resolve_icon
from finance_tracker.domain.charts import (
    category_breakdown,
    category_color,
    chart_series,
    daily_series,
    financial_summary,
    monthly_series,
    parse_period,
    period_start,
)
from finance_tracker.domain.exceptions import CardLimitReachedError, InvalidPeriodError
from finance_tracker.domain.plans import card_limit, ensure_can_add_card


def test_parse_period():
    assert parse_period("7d") == ("daily", 7)
    assert parse_period("30D") == ("daily", 30)
    assert parse_period("12") == ("monthly", 12)
    assert parse_period(" 24 ") == ("monthly", 24)


@pytest.mark.parametrize("period", ["5", "14d", "abc", "", "d"])
def test_parse_period_rejects_unknown(period):
    with pytest.raises(InvalidPeriodError):
        parse_period(period)


def test_period_start(today):
    assert period_start("7d", today) == date(2024, 6, 8)
    assert period_start("3", today) == date(2024, 3, 15)


def test_category_color_golden_angle():
    assert category_color(0) == "hsl(0, 65%, 55%)"
    assert category_color(1) == "hsl(137.5, 65%, 55%)"
    assert category_color(2) == "hsl(275, 65%, 55%)"
    assert category_color(3) == "hsl(52.5, 65%, 55%)"


def test_category_breakdown_sorted_by_value(make_transaction):
    transactions = [
        make_transaction(amount=50, category="Lazer"),
        make_transaction(amount=100, category="Mercado"),
        make_transaction(amount=-200, category="Mercado"),
        make_transaction(amount=5000, type="receita", category="Salário"),
    ]

    slices = category_breakdown(transactions, icons={"Mercado": "shopping-cart"})

    assert [s.name for s in slices] == ["Mercado", "Lazer"]
    assert slices[0].value == Decimal("300.00")
    assert slices[0].color == "hsl(0, 65%, 55%)"
    assert slices[0].icon == "shopping-cart"
    assert slices[1].icon == "tag"


def test_category_breakdown_respects_range(make_transaction):
    transactions = [
        make_transaction(amount=80, category="Mercado", tx_date=date(2024, 6, 10)),
        make_transaction(amount=90, category="Mercado", tx_date=date(2024, 1, 10)),
    ]

    slices = category_breakdown(transactions, start=date(2024, 6, 1), end=date(2024, 6, 15))

    assert len(slices) == 1
    assert slices[0].value == Decimal("80.00")


def test_monthly_series_labels(today):
    assert [p.period_label for p in monthly_series([], today, 3)] == ["abr", "mai", "jun"]

    two_years = monthly_series([], today, 24)
    assert len(two_years) == 24
    assert two_years[0].period_label == "jul 2022"
    assert two_years[-1].period_label == "jun 2024"


def test_monthly_series_spreads_installments(today, make_transaction):
    txn = make_transaction(
        amount=300,
        tx_date=date(2024, 4, 20),
        is_installment=True,
        total_installments=3,
        installment_start_date=date(2024, 4, 20),
    )

    series = monthly_series([txn], today, 3)

    assert [p.despesas for p in series] == [Decimal("100.00")] * 3


def test_daily_series_buckets_by_date(today, make_transaction):
    transactions = [
        make_transaction(amount=30, tx_date=date(2024, 6, 10)),
        make_transaction(amount=1000, type="receita", tx_date=date(2024, 6, 15)),
        make_transaction(amount=70, tx_date=date(2024, 6, 1)),
    ]

    series = daily_series(transactions, today, 7)

    assert [p.period_label for p in series] == ["09/06", "10/06", "11/06", "12/06", "13/06", "14/06", "15/06"]
    assert series[1].despesas == Decimal("30.00")
    assert series[-1].receitas == Decimal("1000.00")
    assert sum(p.despesas for p in series) == Decimal("30.00")


def test_chart_series_appends_projection(today):
    series = chart_series([], "6", today, include_future=True)

    assert len(series) == 12
    assert not any(p.is_future for p in series[:6])
    assert all(p.is_future for p in series[6:])


def test_chart_series_daily_ignores_future(today):
    assert len(chart_series([], "30d", today, include_future=True)) == 30


def test_financial_summary(today, make_transaction):
    transactions = [
        make_transaction(amount=5000, type="receita", category="Salário", tx_date=date(2024, 6, 5)),
        make_transaction(amount=100, tx_date=date(2024, 6, 7)),
        make_transaction(amount=50, category="Streaming", tx_date=date(2024, 6, 1), is_recurring=True),
        make_transaction(
            amount=400,
            tx_date=date(2024, 5, 10),
            is_installment=True,
            total_installments=4,
            installment_start_date=date(2024, 5, 10),
        ),
        make_transaction(amount=999, tx_date=date(2024, 5, 30)),
    ]

    summary = financial_summary(transactions, today)

    assert summary.monthly_income == Decimal("5000.00")
    assert summary.monthly_expenses == Decimal("250.00")
    assert summary.monthly_recurring_expenses == Decimal("50.00")
    assert summary.total_balance == Decimal("4750.00")


def test_resolve_icon():
    assert resolve_icon(" Home ") == CategoryIcon.HOME
    assert resolve_icon("credit-card") == CategoryIcon.CREDIT_CARD
    assert resolve_icon("rocket") == CategoryIcon.TAG
    assert resolve_icon(None) == CategoryIcon.TAG


def test_card_limit_by_plan():
    assert card_limit("basic") == 1
    assert card_limit("premium") == 5
    assert card_limit("unknown") == 1

    ensure_can_add_card("premium", 4)
    with pytest.raises(CardLimitReachedError):
        ensure_can_add_card("basic", 1)
