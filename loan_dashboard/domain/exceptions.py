"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InputValidationError(DomainException):
    """Request parameters cannot be turned into a query"""

    pass


class InvalidOperatorError(InputValidationError):
    """Operator filter is not one of airtel, mtn or both"""

    def __init__(self, value: str):
        super().__init__(f"Invalid telco parameter: {value!r} (expected airtel, mtn or both)")
        self.value = value


class InvalidLoanTypeError(InputValidationError):
    """Loan type path segment has no canonical loan type"""

    def __init__(self, value: str):
        super().__init__(f"Invalid loan type: {value!r} (expected 7, 14, 21 or 30)")
        self.value = value


class DataAccessError(DomainException):
    """Query against the reporting store failed"""

    def __init__(self, message: str, details: str = "", source_table: str | None = None):
        super().__init__(message)
        self.details = details
        self.source_table = source_table
