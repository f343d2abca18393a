"""Data access layer for owners, cards, transactions, categories and bills"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from finance_tracker.domain.billing import refresh_bill
from finance_tracker.domain.exceptions import ConcurrentModificationError
from finance_tracker.domain.models import (
    BillPayment,
    BillStatus,
    CreditCard,
    CreditCardBill,
    Transaction,
)
from finance_tracker.infrastructure.database.models import (
    BillPaymentRecord,
    CategoryRecord,
    CreditCardBillRecord,
    CreditCardRecord,
    TransactionRecord,
    UserAccount,
)


def to_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        owner_id=record.user_id,
        amount=Decimal(record.value),
        type=record.type,
        category=record.category,
        tx_date=record.tx_date,
        description=record.description or "",
        is_installment=bool(record.is_installment),
        installment_number=record.installment_number,
        total_installments=record.total_installments,
        installment_start_date=record.installment_start_date,
        installment_value=Decimal(record.installment_value) if record.installment_value is not None else None,
        is_recurring=bool(record.is_recurring),
        recurring_date=record.recurring_date,
        credit_card_id=record.credit_card_id,
    )


def to_credit_card(record: CreditCardRecord) -> CreditCard:
    return CreditCard(
        id=record.id,
        owner_id=record.user_id,
        bank_name=record.bank_name,
        due_date=record.due_date,
        close_date=record.close_date,
        card_name=record.card_name,
        card_type=record.card_type,
        color=record.color,
    )


def to_bill(record: CreditCardBillRecord) -> CreditCardBill:
    return CreditCardBill(
        id=record.id,
        credit_card_id=record.credit_card_id,
        owner_id=record.user_id,
        bill_amount=Decimal(record.bill_amount),
        paid_amount=Decimal(record.paid_amount),
        due_date=record.due_date,
        close_date=record.close_date,
        status=BillStatus(record.status),
        archived=bool(record.archived),
    )


def to_payment(record: BillPaymentRecord) -> BillPayment:
    return BillPayment(
        id=record.id,
        bill_id=record.bill_id,
        owner_id=record.user_id,
        amount=Decimal(record.amount),
        payment_date=record.payment_date,
    )


class OwnerRepository:
    """Resolves the external auth identity to the internal owner row"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_auth_id(self, auth_user_id: str) -> Optional[UserAccount]:
        return self.db.query(UserAccount).filter(UserAccount.auth_user_id == auth_user_id).first()


class CreditCardRepository:
    """Repository for the card registry"""

    def __init__(self, db: Session):
        self.db = db

    def list_records(self, owner_id: int) -> List[CreditCardRecord]:
        return (
            self.db.query(CreditCardRecord)
            .filter(CreditCardRecord.user_id == owner_id)
            .order_by(CreditCardRecord.id)
            .all()
        )

    def list_cards(self, owner_id: int) -> List[CreditCard]:
        return [to_credit_card(r) for r in self.list_records(owner_id)]

    def count(self, owner_id: int) -> int:
        return self.db.query(CreditCardRecord).filter(CreditCardRecord.user_id == owner_id).count()

    def get(self, owner_id: int, card_id: int) -> Optional[CreditCardRecord]:
        return (
            self.db.query(CreditCardRecord)
            .filter(CreditCardRecord.id == card_id, CreditCardRecord.user_id == owner_id)
            .first()
        )

    def create(self, owner_id: int, **fields) -> CreditCardRecord:
        record = CreditCardRecord(user_id=owner_id, **fields)
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, record: CreditCardRecord, **fields) -> CreditCardRecord:
        for name, value in fields.items():
            setattr(record, name, value)
        self.db.flush()
        return record

    def delete(self, record: CreditCardRecord) -> None:
        """Delete a card; its transactions stay, unlinked from the card"""
        (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.credit_card_id == record.id)
            .update({TransactionRecord.credit_card_id: None}, synchronize_session=False)
        )
        self.db.delete(record)
        self.db.flush()


class TransactionRepository:
    """Repository for income/expense transactions"""

    def __init__(self, db: Session):
        self.db = db

    def list_records(self, owner_id: int, descending: bool = True, limit: Optional[int] = None) -> List[TransactionRecord]:
        order = TransactionRecord.tx_date.desc() if descending else TransactionRecord.tx_date.asc()
        query = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == owner_id)
            .order_by(order, TransactionRecord.id)
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def list_transactions(self, owner_id: int) -> List[Transaction]:
        """All transactions, oldest first, for chart and bill accumulation"""
        return [to_transaction(r) for r in self.list_records(owner_id, descending=False)]

    def list_recurring(self, owner_id: int) -> List[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == owner_id, TransactionRecord.is_recurring.is_(True))
            .order_by(TransactionRecord.recurring_date, TransactionRecord.id)
            .all()
        )

    def get(self, owner_id: int, transaction_id: int) -> Optional[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.id == transaction_id, TransactionRecord.user_id == owner_id)
            .first()
        )

    def create(self, owner_id: int, **fields) -> TransactionRecord:
        record = TransactionRecord(user_id=owner_id, **fields)
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, record: TransactionRecord, **fields) -> TransactionRecord:
        for name, value in fields.items():
            setattr(record, name, value)
        self.db.flush()
        return record

    def delete(self, record: TransactionRecord) -> None:
        self.db.delete(record)
        self.db.flush()


class CategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_records(self, owner_id: int, type_: Optional[str] = None) -> List[CategoryRecord]:
        query = self.db.query(CategoryRecord).filter(CategoryRecord.user_id == owner_id)
        if type_:
            query = query.filter(CategoryRecord.type == type_)
        return query.order_by(CategoryRecord.name).all()

    def icon_map(self, owner_id: int) -> Dict[str, str]:
        """Category name -> stored icon name, for expense categories"""
        return {r.name: r.icon for r in self.list_records(owner_id, "despesa")}

    def create(self, owner_id: int, **fields) -> CategoryRecord:
        record = CategoryRecord(user_id=owner_id, **fields)
        self.db.add(record)
        self.db.flush()
        return record


class BillRepository:
    """Repository for materialised bills and their payment log"""

    def __init__(self, db: Session):
        self.db = db

    def list_records(self, owner_id: int, include_archived: bool = True) -> List[CreditCardBillRecord]:
        query = self.db.query(CreditCardBillRecord).filter(CreditCardBillRecord.user_id == owner_id)
        if not include_archived:
            query = query.filter(CreditCardBillRecord.archived.is_(False))
        return query.order_by(CreditCardBillRecord.due_date, CreditCardBillRecord.credit_card_id).all()

    def get(self, owner_id: int, bill_id: int) -> Optional[CreditCardBillRecord]:
        return (
            self.db.query(CreditCardBillRecord)
            .filter(CreditCardBillRecord.id == bill_id, CreditCardBillRecord.user_id == owner_id)
            .first()
        )

    def sync_bills(
        self,
        owner_id: int,
        credit_card_id: int,
        computed: List[CreditCardBill],
        today: date,
        due_range: Tuple[date, date],
    ) -> int:
        """
        Upsert computed statements for one card, keyed by due date.

        Stored paid_amount and archived survive. Stored bills due inside
        due_range whose statement no longer has any charges drop to a zero
        bill_amount; bills due outside it were not recomputed and stay as
        they are. Returns the number of bills written.
        """
        first_due, last_due = due_range
        existing = {
            r.due_date: r
            for r in self.db.query(CreditCardBillRecord).filter(
                CreditCardBillRecord.user_id == owner_id,
                CreditCardBillRecord.credit_card_id == credit_card_id,
            )
        }
        by_due_date = {bill.due_date: bill for bill in computed}
        written = 0

        for due_date, bill in by_due_date.items():
            record = existing.get(due_date)
            if record is None:
                record = CreditCardBillRecord(
                    user_id=owner_id,
                    credit_card_id=credit_card_id,
                    due_date=due_date,
                    paid_amount=Decimal("0.00"),
                    archived=False,
                )
                self.db.add(record)
            elif record.archived:
                continue
            else:
                stored = replace(to_bill(record), close_date=bill.close_date)
                bill = refresh_bill(stored, bill.bill_amount, today)
            self._write(record, bill)
            record.close_date = bill.close_date
            written += 1

        for due_date, record in existing.items():
            if due_date in by_due_date or record.archived:
                continue
            if not first_due <= due_date <= last_due:
                continue
            stale = refresh_bill(to_bill(record), Decimal("0.00"), today)
            if stale.bill_amount != record.bill_amount or stale.status.value != record.status:
                self._write(record, stale)
                written += 1

        try:
            self.db.flush()
        except StaleDataError as e:
            raise ConcurrentModificationError(f"Bills of card {credit_card_id} changed during refresh") from e
        return written

    def save(self, record: CreditCardBillRecord, bill: CreditCardBill) -> CreditCardBillRecord:
        """
        Write a bill back, checked against its version column.

        Raises:
            ConcurrentModificationError: the row changed since it was read
        """
        self._write(record, bill)
        try:
            self.db.flush()
        except StaleDataError as e:
            raise ConcurrentModificationError(f"Bill {record.id} was modified concurrently") from e
        return record

    @staticmethod
    def _write(record: CreditCardBillRecord, bill: CreditCardBill) -> None:
        record.bill_amount = bill.bill_amount
        record.paid_amount = bill.paid_amount
        record.remaining_amount = bill.remaining_amount
        record.status = bill.status.value
        record.archived = bill.archived

    def list_payments(self, owner_id: int, bill_id: int) -> List[BillPaymentRecord]:
        return (
            self.db.query(BillPaymentRecord)
            .filter(BillPaymentRecord.bill_id == bill_id, BillPaymentRecord.user_id == owner_id)
            .order_by(BillPaymentRecord.payment_date.desc(), BillPaymentRecord.id.desc())
            .all()
        )

    def get_payment(self, owner_id: int, payment_id: int) -> Optional[BillPaymentRecord]:
        return (
            self.db.query(BillPaymentRecord)
            .filter(BillPaymentRecord.id == payment_id, BillPaymentRecord.user_id == owner_id)
            .first()
        )

    def add_payment(self, owner_id: int, bill_id: int, amount: Decimal, payment_date: date) -> BillPaymentRecord:
        record = BillPaymentRecord(bill_id=bill_id, user_id=owner_id, amount=amount, payment_date=payment_date)
        self.db.add(record)
        self.db.flush()
        return record

    def delete_payment(self, record: BillPaymentRecord) -> None:
        self.db.delete(record)
        self.db.flush()
