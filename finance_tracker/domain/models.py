"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional


ZERO = Decimal("0.00")


class TransactionType(str, Enum):
    RECEITA = "receita"  # income
    DESPESA = "despesa"  # expense


class BillStatus(str, Enum):
    PENDING = "pending"
    OPEN = "open"
    PAID = "paid"
    OVERDUE = "overdue"
    PARTIAL = "partial"


class PlanType(str, Enum):
    BASIC = "basic"
    PREMIUM = "premium"


@dataclass
class Transaction:
    """Income or expense event as stored for an owner"""

    id: int
    owner_id: int
    amount: Decimal
    type: str  # "receita" or "despesa"
    category: str
    tx_date: date
    description: str = ""
    is_installment: bool = False
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None
    installment_start_date: Optional[date] = None
    installment_value: Optional[Decimal] = None
    is_recurring: bool = False
    recurring_date: Optional[int] = None
    credit_card_id: Optional[int] = None

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.RECEITA.value

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.DESPESA.value


@dataclass
class CreditCard:
    """Card with its billing-cycle close day and payment due day"""

    id: int
    owner_id: int
    bank_name: str
    due_date: int
    close_date: Optional[int] = None
    card_name: Optional[str] = None
    card_type: str = "credit"
    color: str = "#61710C"


@dataclass
class StatementWindow:
    """Billing period of one card statement: [period_start, period_end)"""

    credit_card_id: int
    year: int
    month: int
    period_start: date
    period_end: date
    close_date: Optional[date]
    due_date: date

    def contains(self, day: date) -> bool:
        return self.period_start <= day < self.period_end


@dataclass
class BillLine:
    """One transaction's contribution to a statement"""

    transaction_id: int
    description: str
    category: str
    amount: Decimal
    effective_date: date
    installment_label: Optional[str] = None


@dataclass
class CreditCardBill:
    """Statement total for a card, with what has been paid against it"""

    credit_card_id: int
    owner_id: int
    bill_amount: Decimal
    paid_amount: Decimal
    due_date: date
    close_date: Optional[date]
    status: BillStatus
    archived: bool = False
    id: Optional[int] = None
    lines: List[BillLine] = field(default_factory=list)

    @property
    def remaining_amount(self) -> Decimal:
        return max(self.bill_amount - self.paid_amount, ZERO)


@dataclass
class BillPayment:
    id: int
    bill_id: int
    owner_id: int
    amount: Decimal
    payment_date: date


@dataclass
class Installment:
    """Single share of an installment purchase"""

    number: int
    due_date: date
    amount: Decimal


@dataclass
class ChartPoint:
    """Income/expense bucket for one day or month"""

    period_label: str
    receitas: Decimal = ZERO
    despesas: Decimal = ZERO
    gastos_recorrentes: Decimal = ZERO
    is_future: bool = False

    @property
    def fluxo_liquido(self) -> Decimal:
        return self.receitas - self.despesas

    @property
    def is_empty(self) -> bool:
        return self.receitas == 0 and self.despesas == 0

    def add(self, txn: Transaction, amount: Decimal) -> None:
        """Book amount as income or expense; sign is ignored, type decides"""
        amount = abs(amount)
        if txn.is_income:
            self.receitas += amount
        elif txn.is_expense:
            self.despesas += amount
            if txn.is_recurring:
                self.gastos_recorrentes += amount


@dataclass
class CategorySlice:
    name: str
    value: Decimal
    color: str
    icon: str


@dataclass
class FinancialSummary:
    """Current-month totals shown on the dashboard cards"""

    monthly_income: Decimal
    monthly_expenses: Decimal
    monthly_recurring_expenses: Decimal

    @property
    def total_balance(self) -> Decimal:
        return self.monthly_income - self.monthly_expenses
