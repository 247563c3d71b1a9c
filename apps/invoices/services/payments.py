"""Payment posting against invoices."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.invoices import ledger
from apps.invoices.models import Invoice
from apps.invoices.exceptions import (
    InvoiceNotFoundError,
    InvalidAmountError,
    ExceedsBalanceError,
    InvoiceStateError,
)

logger = logging.getLogger(__name__)


@transaction.atomic
def add_payment(*, invoice_id: UUID, amount: Decimal, as_of: Optional[date] = None) -> Invoice:
    """
    Record a payment on an invoice and re-derive its status.

    The invoice row is locked for the read-check-write so concurrent
    payments cannot together overpay it.

    Args:
        invoice_id: Invoice to pay
        amount: Payment amount (> 0)
        as_of: Date for status derivation (default: today)

    Returns:
        Updated Invoice

    Raises:
        InvoiceNotFoundError: If invoice doesn't exist
        InvoiceStateError: If the invoice is cancelled
        InvalidAmountError: If amount <= 0
        ExceedsBalanceError: If the payment would overpay the invoice
    """
    try:
        invoice = Invoice.objects.select_for_update().get(id=invoice_id)
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice not found with id: {invoice_id}")

    try:
        state = ledger.apply_payment(
            invoice.to_ledger(with_items=False),
            ledger.quantize_money(amount),
            as_of=as_of or date.today(),
        )
    except (InvalidAmountError, ExceedsBalanceError, InvoiceStateError) as e:
        logger.warning("Rejected payment of %s on invoice %s: %s", amount, invoice.invoice_number, e)
        raise

    invoice.apply_ledger(state)
    invoice.save(update_fields=['invoice_paid_amount', 'status', 'updated_at'])

    logger.info(
        "Posted payment of %s on invoice %s (status %s)",
        amount, invoice.invoice_number, invoice.status
    )
    return invoice
