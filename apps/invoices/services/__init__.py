"""Services for invoices business logic."""

from apps.invoices.exceptions import (
    InvoiceServiceError,
    InvoiceNotFoundError,
    ItemNotFoundError,
    InvalidAmountError,
    ExceedsBalanceError,
    InvoiceStateError,
    DuplicateInvoiceNumberError,
)
from .invoice_management import (
    get_invoice_by_id,
    get_invoice_by_number,
    generate_next_invoice_number,
    create_invoice,
    update_invoice,
    cancel_invoice,
    delete_invoice,
)
from .payments import add_payment
from .item_management import add_invoice_item, remove_invoice_item
from .invoice_search import (
    search_invoices,
    get_overdue_invoices,
    get_outstanding_invoices,
    get_recent_invoices,
    get_invoices_due_within,
)
from .statistics import (
    get_total_outstanding_amount,
    get_total_invoiced,
    get_invoice_statistics,
    get_top_clients,
)
from .status_refresh import refresh_invoice_statuses

__all__ = [
    # Exceptions
    'InvoiceServiceError',
    'InvoiceNotFoundError',
    'ItemNotFoundError',
    'InvalidAmountError',
    'ExceedsBalanceError',
    'InvoiceStateError',
    'DuplicateInvoiceNumberError',
    # Invoice management
    'get_invoice_by_id',
    'get_invoice_by_number',
    'generate_next_invoice_number',
    'create_invoice',
    'update_invoice',
    'cancel_invoice',
    'delete_invoice',
    # Payments & items
    'add_payment',
    'add_invoice_item',
    'remove_invoice_item',
    # Search
    'search_invoices',
    'get_overdue_invoices',
    'get_outstanding_invoices',
    'get_recent_invoices',
    'get_invoices_due_within',
    # Statistics
    'get_total_outstanding_amount',
    'get_total_invoiced',
    'get_invoice_statistics',
    'get_top_clients',
    # Maintenance
    'refresh_invoice_statuses',
]
