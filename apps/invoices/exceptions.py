"""
Domain-specific exceptions for invoices app.

Raised by the ledger calculator and the invoice services; views catch
them and convert them to HTTP responses.
"""


class InvoiceServiceError(Exception):
    """Base exception for all invoice errors."""
    pass


class InvoiceNotFoundError(InvoiceServiceError):
    """Raised when an invoice does not exist."""
    pass


class ItemNotFoundError(InvoiceServiceError):
    """Raised when a line item is not part of the invoice."""
    pass


class InvalidAmountError(InvoiceServiceError):
    """Raised for a non-positive payment or a negative amount/quantity."""
    pass


class ExceedsBalanceError(InvoiceServiceError):
    """Raised when a payment would take the paid amount above the invoice total."""
    pass


class InvoiceStateError(InvoiceServiceError):
    """Raised when the invoice's state forbids the operation (e.g. deleting a paid invoice)."""
    pass


class DuplicateInvoiceNumberError(InvoiceServiceError):
    """Raised when an invoice number is already taken."""
    pass
