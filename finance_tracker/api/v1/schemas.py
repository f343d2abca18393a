"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from finance_tracker.domain.categories import DEFAULT_CATEGORY_COLOR

TransactionTypeLiteral = Literal["receita", "despesa"]


class TransactionRequest(BaseModel):
    """Request body for POST/PUT /v1/transactions"""

    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Total amount")
    type: TransactionTypeLiteral
    category: str = Field(..., min_length=1)
    tx_date: date
    description: str = ""
    is_installment: bool = False
    installment_number: Optional[int] = Field(None, ge=1)
    total_installments: Optional[int] = Field(None, ge=2, le=120)
    installment_start_date: Optional[date] = None
    installment_value: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    is_recurring: bool = False
    recurring_date: Optional[int] = Field(None, ge=1, le=31)
    credit_card_id: Optional[int] = None

    @model_validator(mode="after")
    def check_installment_and_recurrence(self) -> "TransactionRequest":
        if self.is_installment:
            if not self.total_installments:
                raise ValueError("total_installments is required for installment purchases")
            if self.installment_start_date is None:
                self.installment_start_date = self.tx_date
            if self.installment_number is None:
                self.installment_number = 1
            if self.installment_number > self.total_installments:
                raise ValueError("installment_number cannot exceed total_installments")
        if self.is_recurring and self.recurring_date is None:
            self.recurring_date = self.tx_date.day
        return self


class TransactionResponse(BaseModel):
    id: int
    amount: Decimal
    type: str
    category: str
    tx_date: date
    description: str
    is_installment: bool
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None
    installment_start_date: Optional[date] = None
    installment_value: Optional[Decimal] = None
    is_recurring: bool
    recurring_date: Optional[int] = None
    credit_card_id: Optional[int] = None


class InstallmentSchema(BaseModel):
    """Single installment in a purchase's schedule"""

    number: int
    due_date: date
    amount: Decimal


class InstallmentScheduleResponse(BaseModel):
    """Response for GET /v1/transactions/{id}/installments"""

    transaction_id: int
    total_installments: int
    remaining_installments: int
    installments: List[InstallmentSchema]


class CreditCardRequest(BaseModel):
    """Request body for POST/PUT /v1/cards"""

    bank_name: str = Field(..., min_length=1)
    card_name: Optional[str] = None
    close_date: Optional[int] = Field(None, ge=1, le=31, description="Statement close day")
    due_date: int = Field(..., ge=1, le=31, description="Payment due day")
    card_type: str = "credit"
    color: str = DEFAULT_CATEGORY_COLOR


class CreditCardResponse(CreditCardRequest):
    id: int


class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1)
    type: TransactionTypeLiteral = "despesa"
    color: str = DEFAULT_CATEGORY_COLOR
    icon: str = "tag"


class CategoryResponse(CategoryRequest):
    id: int


class BillResponse(BaseModel):
    """Bill summary as listed on the dashboard"""

    id: int
    credit_card_id: int
    bill_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    due_date: date
    close_date: Optional[date] = None
    status: str
    archived: bool
    due_soon: bool = False


class BillLineSchema(BaseModel):
    """A transaction (or installment share) billed on a statement"""

    transaction_id: int
    description: str
    category: str
    amount: Decimal
    effective_date: date
    installment_label: Optional[str] = None


class PaymentRequest(BaseModel):
    """Request body for POST /v1/bills/{bill_id}/payments"""

    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_date: Optional[date] = None


class PaymentResponse(BaseModel):
    id: int
    bill_id: int
    amount: Decimal
    payment_date: date


class PaymentResult(BaseModel):
    """Mutation result: the payment touched and the bill after the change"""

    bill: BillResponse
    payment: Optional[PaymentResponse] = None


class ChartPointSchema(BaseModel):
    """One bucket of a chart series"""

    model_config = ConfigDict(populate_by_name=True)

    period_label: str
    receitas: float
    despesas: float
    gastos_recorrentes: float = Field(..., alias="gastosRecorrentes")
    fluxo_liquido: float = Field(..., alias="fluxoLiquido")
    is_future: bool = Field(False, alias="isFuture")


class CategorySliceSchema(BaseModel):
    name: str
    value: float
    color: str
    icon: str


class SummaryResponse(BaseModel):
    """Response for GET /v1/reports/summary"""

    total_balance: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    monthly_recurring_expenses: Decimal
