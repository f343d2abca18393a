"""SQLAlchemy ORM models for owners, cards, transactions and bills"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

Money = Numeric(12, 2)


class UserAccount(Base):
    """Owner of all financial rows; linked to the external auth identity"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    auth_user_id = Column(Text, nullable=False, unique=True, index=True)
    name = Column(Text, nullable=True)
    plan_type = Column(String(20), nullable=False, default="basic")
    completed_onboarding = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CategoryRecord(Base):
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("user_id", "name", "type", name="uq_category_name"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(String(10), nullable=False, default="despesa")
    color = Column(String(32), nullable=False, default="#61710C")
    icon = Column(String(32), nullable=False, default="tag")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CreditCardRecord(Base):
    """Card registry: close day and due day of the billing cycle"""

    __tablename__ = "credit_cards"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_name = Column(Text, nullable=False)
    card_name = Column(Text, nullable=True)
    card_type = Column(String(20), nullable=False, default="credit")
    close_date = Column(Integer, nullable=True)
    due_date = Column(Integer, nullable=False)
    color = Column(String(32), nullable=False, default="#61710C")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    bills = relationship("CreditCardBillRecord", back_populates="credit_card", cascade="all, delete-orphan")


class TransactionRecord(Base):
    """Income/expense row; installment and recurrence metadata are optional"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Money, nullable=False)
    type = Column(String(10), nullable=False)
    category = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    tx_date = Column(Date, nullable=False, index=True)
    is_installment = Column(Boolean, nullable=False, default=False)
    installment_number = Column(Integer, nullable=True)
    total_installments = Column(Integer, nullable=True)
    installment_start_date = Column(Date, nullable=True)
    installment_value = Column(Money, nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_date = Column(Integer, nullable=True)
    credit_card_id = Column(Integer, ForeignKey("credit_cards.id", ondelete="SET NULL"), nullable=True, index=True)
    registered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CreditCardBillRecord(Base):
    """Materialised statement; recomputed on read, payments kept in bill_payments"""

    __tablename__ = "credit_card_bills"
    __table_args__ = (UniqueConstraint("credit_card_id", "due_date", name="uq_bill_card_due"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    credit_card_id = Column(Integer, ForeignKey("credit_cards.id", ondelete="CASCADE"), nullable=False)
    bill_amount = Column(Money, nullable=False, default=0)
    paid_amount = Column(Money, nullable=False, default=0)
    remaining_amount = Column(Money, nullable=False, default=0)
    due_date = Column(Date, nullable=False)
    close_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    archived = Column(Boolean, nullable=False, default=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    credit_card = relationship("CreditCardRecord", back_populates="bills")
    payments = relationship("BillPaymentRecord", back_populates="bill", cascade="all, delete-orphan")

    # Concurrent pay/undo on the same bill fails with StaleDataError
    __mapper_args__ = {"version_id_col": version}


class BillPaymentRecord(Base):
    __tablename__ = "bill_payments"

    id = Column(Integer, primary_key=True)
    bill_id = Column(Integer, ForeignKey("credit_card_bills.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Money, nullable=False)
    payment_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    bill = relationship("CreditCardBillRecord", back_populates="payments")
