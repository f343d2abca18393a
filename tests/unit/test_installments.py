"""Unit tests for installment allocation"""

from datetime import date
from decimal import Decimal
from finance_tracker.domain.installments import (
    allocate,
    installment_label,
    installment_schedule,
    is_installment_plan,
    remaining_installments,
    split_installments,
)


def test_allocate_covers_exactly_the_installment_window(make_transaction):
    """12 installments from January contribute Jan..Dec and nothing around them"""
    txn = make_transaction(
        amount=1200,
        is_installment=True,
        total_installments=12,
        installment_start_date=date(2024, 1, 15),
    )

    for month in range(1, 13):
        assert allocate(txn, 2024, month) == Decimal("100.00")

    assert allocate(txn, 2023, 12) is None
    assert allocate(txn, 2025, 1) is None


def test_allocate_uses_installment_value_verbatim(make_transaction):
    """installment_value wins over amount / total_installments"""
    txn = make_transaction(
        amount=100,
        is_installment=True,
        installment_number=1,
        total_installments=3,
        installment_start_date=date(2024, 1, 10),
        installment_value=Decimal("33.34"),
    )

    assert allocate(txn, 2024, 1) == Decimal("33.34")
    assert allocate(txn, 2024, 3) == Decimal("33.34")


def test_split_installments_last_absorbs_remainder():
    """Shares are truncated to cents and the last one closes the gap"""
    shares = split_installments(Decimal("100.00"), 3)

    assert shares == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(shares) == Decimal("100.00")


def test_split_installments_zero_amount():
    assert split_installments(Decimal("0"), 4) == []


def test_allocate_derived_shares_sum_to_amount(make_transaction):
    """Without installment_value the series adds up to the purchase total"""
    txn = make_transaction(
        amount=Decimal("100.00"),
        is_installment=True,
        total_installments=3,
        installment_start_date=date(2024, 11, 1),
    )

    shares = [allocate(txn, 2024, 11), allocate(txn, 2024, 12), allocate(txn, 2025, 1)]
    assert shares == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(shares) == Decimal("100.00")


def test_malformed_installments_are_excluded(make_transaction):
    """Missing count, zero count or missing start date -> not an installment plan"""
    no_count = make_transaction(is_installment=True, installment_start_date=date(2024, 1, 1))
    zero_count = make_transaction(is_installment=True, total_installments=0, installment_start_date=date(2024, 1, 1))
    no_start = make_transaction(is_installment=True, total_installments=3)

    for txn in (no_count, zero_count, no_start):
        assert is_installment_plan(txn) is False
        assert allocate(txn, 2024, 1) is None
        assert installment_schedule(txn) == []


def test_installment_schedule_clamps_month_end(make_transaction):
    """A plan starting on the 31st lands on the last day of shorter months"""
    txn = make_transaction(
        amount=300,
        is_installment=True,
        total_installments=3,
        installment_start_date=date(2024, 1, 31),
    )

    schedule = installment_schedule(txn)

    assert [i.number for i in schedule] == [1, 2, 3]
    assert [i.due_date for i in schedule] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]
    assert all(i.amount == Decimal("100.00") for i in schedule)


def test_installment_label(make_transaction):
    txn = make_transaction(
        amount=300,
        is_installment=True,
        total_installments=3,
        installment_start_date=date(2024, 5, 5),
    )

    assert installment_label(txn, 2024, 6) == "2/3"
    assert installment_label(txn, 2024, 8) is None


def test_remaining_installments(make_transaction):
    """Installments still to come after today's month"""
    txn = make_transaction(
        amount=1200,
        is_installment=True,
        total_installments=12,
        installment_start_date=date(2024, 1, 15),
    )

    assert remaining_installments(txn, date(2024, 6, 15)) == 6
    assert remaining_installments(txn, date(2023, 6, 1)) == 12
    assert remaining_installments(txn, date(2025, 6, 1)) == 0


def test_schedule_follows_split_installments(make_transaction):
    """Derived shares come from the same truncate-and-remainder split"""
    txn = make_transaction(
        amount=Decimal("100.00"),
        is_installment=True,
        total_installments=3,
        installment_start_date=date(2024, 1, 10),
    )

    amounts = [i.amount for i in installment_schedule(txn)]

    assert amounts == split_installments(Decimal("100.00"), 3)
    assert allocate(txn, 2024, 3) == amounts[-1]
