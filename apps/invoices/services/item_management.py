"""Line item management for invoices."""

import logging
from uuid import UUID

from django.db import transaction

from apps.invoices import ledger
from apps.invoices.models import Invoice, InvoiceItem
from apps.invoices.exceptions import InvoiceNotFoundError
from .invoice_management import ITEM_FIELDS, line_item_from_data

logger = logging.getLogger(__name__)


def _lock_invoice(invoice_id: UUID) -> Invoice:
    try:
        return Invoice.objects.select_for_update().get(id=invoice_id)
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice not found with id: {invoice_id}")


@transaction.atomic
def add_invoice_item(*, invoice_id: UUID, **item_data) -> InvoiceItem:
    """
    Add a line item and recompute the invoice totals from all items.

    Args:
        invoice_id: Invoice to extend
        **item_data: description, quantity, unit_price, discount_percent,
            vat_rate_percent, item_code, unit

    Returns:
        Created InvoiceItem

    Raises:
        InvoiceNotFoundError: If invoice doesn't exist
        InvalidAmountError: If quantity/price/discount/VAT rate is invalid
    """
    invoice = _lock_invoice(invoice_id)
    state = ledger.add_item(invoice.to_ledger(), line_item_from_data(item_data))

    item = InvoiceItem.objects.create(
        invoice=invoice,
        **{name: item_data[name] for name in ITEM_FIELDS if name in item_data}
    )

    invoice.apply_ledger(state)
    invoice.save(update_fields=['invoice_amount', 'vat_amount', 'updated_at'])

    logger.info("Added item %s to invoice %s", item.id, invoice.invoice_number)
    return item


@transaction.atomic
def remove_invoice_item(*, invoice_id: UUID, item_id: int) -> Invoice:
    """
    Remove a line item and recompute the invoice totals.

    Removing the last item leaves the invoice amounts unchanged.

    Raises:
        InvoiceNotFoundError: If invoice doesn't exist
        ItemNotFoundError: If the item does not belong to the invoice
    """
    invoice = _lock_invoice(invoice_id)
    state = ledger.remove_item(invoice.to_ledger(), item_id)

    InvoiceItem.objects.filter(invoice=invoice, id=item_id).delete()

    invoice.apply_ledger(state)
    invoice.save(update_fields=['invoice_amount', 'vat_amount', 'updated_at'])

    logger.info("Removed item %s from invoice %s", item_id, invoice.invoice_number)
    return invoice
