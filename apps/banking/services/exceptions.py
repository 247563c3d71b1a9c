"""Domain-specific exceptions for banking services."""


class BankingServiceError(Exception):
    """Base exception for banking services."""
    pass


class BankAccountNotFoundError(BankingServiceError):
    """Raised when bank account does not exist."""
    pass


class TransactionNotFoundError(BankingServiceError):
    """Raised when transaction does not exist."""
    pass


class DuplicateAccountNumberError(BankingServiceError):
    """Raised when another bank account already uses the account number."""
    pass


class BankAccountStateError(BankingServiceError):
    """Raised when an account cannot be changed in its current state."""
    pass


class TransactionStateError(BankingServiceError):
    """Raised when a transaction cannot be changed in its current state."""
    pass


class InvalidTransactionAmountError(BankingServiceError):
    """Raised when a transaction amount is not positive."""
    pass
