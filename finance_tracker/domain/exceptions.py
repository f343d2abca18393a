"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidPaymentAmountError(DomainException):
    """Payment amount is zero or negative"""

    pass


class PaymentExceedsRemainingError(DomainException):
    """Payment would push the bill's remaining amount below zero"""

    pass


class ArchivedBillError(DomainException):
    """Archived bills accept no further payment changes"""

    pass


class BillNotPaidError(DomainException):
    """Only fully paid bills can be archived"""

    pass


class CardLimitReachedError(DomainException):
    """Owner's plan allows no more credit cards"""

    pass


class InvalidPeriodError(DomainException):
    """Chart period is not one of the supported windows"""

    pass


class ConcurrentModificationError(DomainException):
    """Bill changed underneath a payment mutation"""

    pass
