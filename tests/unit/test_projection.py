"""Unit tests for the forward projection"""

from datetime import date
from decimal import Decimal
from finance_tracker.domain.projection import month_label, project_future_months


def test_no_data_yields_exactly_the_empty_cutoff(today):
    """Nothing to project: scanning stops after six empty months"""
    months = project_future_months([], today)

    assert len(months) == 6
    assert all(m.is_future and m.is_empty for m in months)
    assert [m.period_label for m in months] == ["jul", "ago", "set", "out", "nov", "dez"]


def test_recurring_expense_fills_the_horizon(today, make_transaction):
    """Recurring rows repeat every month, so the scan never hits the cutoff"""
    rent = make_transaction(amount=1500, category="Moradia", is_recurring=True, recurring_date=5)

    months = project_future_months([rent], today)

    assert len(months) == 24
    assert all(m.despesas == Decimal("1500.00") for m in months)
    assert all(m.gastos_recorrentes == Decimal("1500.00") for m in months)
    assert months[-1].period_label == "jun"


def test_in_flight_installments_then_empty_run(today, make_transaction):
    """4 x 100 from May: July and August still carry a share, then six empty months"""
    txn = make_transaction(
        amount=400,
        tx_date=date(2024, 5, 10),
        is_installment=True,
        total_installments=4,
        installment_start_date=date(2024, 5, 10),
    )

    months = project_future_months([txn], today)

    assert len(months) == 8
    assert [m.despesas for m in months[:2]] == [Decimal("100.00"), Decimal("100.00")]
    assert all(m.is_empty for m in months[2:])


def test_future_one_off_resets_empty_run(today, make_transaction):
    bonus = make_transaction(amount=2000, type="receita", category="Salário", tx_date=date(2024, 9, 1))

    months = project_future_months([bonus], today)

    # jul, ago empty; set has the bonus; then six empty months
    assert len(months) == 9
    assert months[2].receitas == Decimal("2000.00")
    assert months[2].fluxo_liquido == Decimal("2000.00")


def test_past_one_off_is_not_projected(today, make_transaction):
    months = project_future_months([make_transaction(tx_date=date(2024, 6, 1))], today)

    assert len(months) == 6


def test_horizon_and_cutoff_are_configurable(today, make_transaction):
    salary = make_transaction(amount=5000, type="receita", is_recurring=True)

    assert len(project_future_months([salary], today, horizon=12)) == 12
    assert len(project_future_months([], today, empty_cutoff=3)) == 3


def test_month_label():
    assert month_label(2024, 3) == "mar"
    assert month_label(2025, 12, with_year=True) == "dez 2025"


def test_negative_stored_expense_counts_as_spending(today, make_transaction):
    """Projection books expenses by type, like the history charts"""
    membership = make_transaction(amount=-80, category="Academia", is_recurring=True)

    months = project_future_months([membership], today, horizon=3)

    assert [m.despesas for m in months] == [Decimal("80.00")] * 3
    assert all(m.fluxo_liquido == Decimal("-80.00") for m in months)
