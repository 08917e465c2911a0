"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidLoanTermsError(DomainException):
    """Principal, installment count or interest rate is out of range"""

    pass


class InvalidPaymentError(DomainException):
    """Payment cannot be applied to the installment"""

    pass


class LoanNotFoundError(DomainException):
    """No loan matches the given identifier"""

    pass


class ClientNotFoundError(DomainException):
    """No client matches the given identifier"""

    pass


class InstallmentNotFoundError(DomainException):
    """Installment number is outside the loan's schedule"""

    pass


class InvalidClosureError(DomainException):
    """Collected amount, expenses or closure date are out of range"""

    pass


class ClosureAlreadyExistsError(DomainException):
    """The lender already closed that day"""

    pass