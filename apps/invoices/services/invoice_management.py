"""
Invoice management service.

Creates, updates, cancels and deletes invoices. Amounts and statuses are
computed by ``apps.invoices.ledger``; this module only loads, locks and
saves.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError

from apps.invoices import ledger
from apps.invoices.models import Invoice, InvoiceItem, InvoiceType
from apps.invoices.exceptions import (
    InvoiceNotFoundError,
    InvalidAmountError,
    InvoiceStateError,
    DuplicateInvoiceNumberError,
)

logger = logging.getLogger(__name__)

# Header fields a plain update may overwrite
UPDATABLE_FIELDS = (
    'invoice_date',
    'due_date',
    'invoice_type',
    'invoice_note',
    'user',
    'admin',
)

ITEM_FIELDS = (
    'description',
    'item_code',
    'unit',
    'quantity',
    'unit_price',
    'discount_percent',
    'vat_rate_percent',
)


def _check_non_negative(**amounts) -> None:
    for name, value in amounts.items():
        if value is not None and ledger.to_decimal(value) < 0:
            raise InvalidAmountError(f"{name} cannot be negative")


def line_item_from_data(data: dict) -> ledger.LineItem:
    """Build a calculator line item from validated item input."""
    return ledger.LineItem(
        description=data.get('description', ''),
        quantity=data.get('quantity'),
        unit_price=data.get('unit_price'),
        discount_percent=data.get('discount_percent', ledger.ZERO),
        vat_rate_percent=data.get('vat_rate_percent', ledger.ZERO),
    )


def get_invoice_by_id(*, invoice_id: UUID) -> Invoice:
    """
    Get invoice by ID.

    Raises:
        InvoiceNotFoundError: If invoice doesn't exist
    """
    try:
        return (
            Invoice.objects
            .select_related('user', 'admin')
            .prefetch_related('items')
            .get(id=invoice_id)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice not found with id: {invoice_id}")


def get_invoice_by_number(*, invoice_number: str) -> Invoice:
    """
    Get invoice by its number.

    Raises:
        InvoiceNotFoundError: If no invoice has that number
    """
    try:
        return (
            Invoice.objects
            .select_related('user', 'admin')
            .prefetch_related('items')
            .get(invoice_number=invoice_number)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice not found with number: {invoice_number}")


def _lock_invoice(invoice_id: UUID) -> Invoice:
    try:
        return Invoice.objects.select_for_update().get(id=invoice_id)
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice not found with id: {invoice_id}")


def generate_next_invoice_number(*, year: Optional[int] = None) -> str:
    """
    Next number in the ``{prefix}-{year}-{sequence}`` series.

    The sequence is the total invoice count + 1. Two concurrent callers
    can get the same number; the unique constraint on ``invoice_number``
    rejects the second insert.
    """
    return ledger.generate_next_invoice_number(
        existing_count=Invoice.objects.count(),
        year=year or date.today().year,
        prefix=settings.INVOICE_NUMBER_PREFIX,
    )


@transaction.atomic
def create_invoice(
    *,
    user,
    invoice_date: date,
    invoice_number: Optional[str] = None,
    due_date: Optional[date] = None,
    invoice_type: str = InvoiceType.STANDARD,
    invoice_note: str = '',
    invoice_amount=None,
    vat_amount=None,
    admin=None,
    items: Optional[Iterable[dict]] = None
) -> Invoice:
    """
    Create a new invoice, optionally with line items.

    With items, invoice and VAT amounts are computed from them and any
    amounts passed in are ignored. Without items the given amounts are
    stored as they are. New invoices start OPEN with nothing paid.

    Args:
        user: Client or supplier the invoice belongs to
        invoice_date: Issue date
        invoice_number: Unique number; generated when omitted
        due_date: Optional due date
        invoice_type: STANDARD, CREDIT_NOTE, PROFORMA or RECURRING
        invoice_note: Free text
        invoice_amount: Net amount (ignored when items are given)
        vat_amount: VAT amount (ignored when items are given)
        admin: Managing admin
        items: Iterable of item dicts (description, quantity, unit_price, ...)

    Returns:
        Created Invoice instance

    Raises:
        InvalidAmountError: If an amount is negative or an item is invalid
        DuplicateInvoiceNumberError: If the number is taken
    """
    items = list(items or [])
    _check_non_negative(invoice_amount=invoice_amount, vat_amount=vat_amount)

    if not invoice_number:
        invoice_number = generate_next_invoice_number(year=invoice_date.year)
    elif Invoice.objects.filter(invoice_number=invoice_number).exists():
        raise DuplicateInvoiceNumberError(f"Invoice number already exists: {invoice_number}")

    state = ledger.InvoiceLedger(
        invoice_amount=ledger.to_decimal(invoice_amount or 0),
        vat_amount=ledger.to_decimal(vat_amount or 0),
        due_date=due_date,
    )
    for item_data in items:
        state = ledger.add_item(state, line_item_from_data(item_data))

    invoice = Invoice(
        invoice_number=invoice_number,
        invoice_date=invoice_date,
        due_date=due_date,
        invoice_type=invoice_type,
        invoice_note=invoice_note,
        user=user,
        admin=admin,
    )
    invoice.apply_ledger(state)

    try:
        # Savepoint so a lost numbering race leaves the outer transaction usable
        with transaction.atomic():
            invoice.save()
    except IntegrityError:
        raise DuplicateInvoiceNumberError(f"Invoice number already exists: {invoice_number}")

    for item_data in items:
        InvoiceItem.objects.create(
            invoice=invoice,
            **{name: item_data[name] for name in ITEM_FIELDS if name in item_data}
        )

    logger.info("Created invoice %s for user %s", invoice.invoice_number, user.id)
    return invoice


@transaction.atomic
def update_invoice(
    *,
    invoice_id: UUID,
    as_of: Optional[date] = None,
    **fields
) -> Invoice:
    """
    Update an invoice's header fields.

    ``invoice_amount`` and ``vat_amount`` are set directly when the invoice
    has no items; with items they are recomputed from the items. A
    cancelled invoice stays cancelled, any other status is re-derived.
    The paid amount is not editable here.

    Raises:
        InvoiceNotFoundError: If invoice doesn't exist
        DuplicateInvoiceNumberError: If the new number is taken
        InvalidAmountError: If an amount is negative
    """
    invoice = _lock_invoice(invoice_id)

    invoice_number = fields.pop('invoice_number', None)
    if invoice_number and invoice_number != invoice.invoice_number:
        if Invoice.objects.filter(invoice_number=invoice_number).exclude(id=invoice.id).exists():
            raise DuplicateInvoiceNumberError(f"Invoice number already exists: {invoice_number}")
        invoice.invoice_number = invoice_number

    for name in UPDATABLE_FIELDS:
        if name in fields:
            setattr(invoice, name, fields[name])

    invoice_amount = fields.get('invoice_amount')
    vat_amount = fields.get('vat_amount')
    _check_non_negative(invoice_amount=invoice_amount, vat_amount=vat_amount)

    state = invoice.to_ledger()
    if invoice_amount is not None:
        state = replace(state, invoice_amount=ledger.to_decimal(invoice_amount))
    if vat_amount is not None:
        state = replace(state, vat_amount=ledger.to_decimal(vat_amount))

    invoice_amount, vat_amount = ledger.recompute_invoice_totals(state)
    state = replace(state, invoice_amount=invoice_amount, vat_amount=vat_amount)
    state = ledger.refresh_status(state, as_of or date.today())

    invoice.apply_ledger(state)
    invoice.save()
    return invoice


@transaction.atomic
def cancel_invoice(*, invoice_id: UUID) -> Invoice:
    """
    Cancel an invoice. Payments already recorded stay on it.

    Raises:
        InvoiceNotFoundError: If invoice doesn't exist
    """
    invoice = _lock_invoice(invoice_id)
    invoice.apply_ledger(ledger.cancel(invoice.to_ledger(with_items=False)))
    invoice.save(update_fields=['status', 'updated_at'])

    logger.info("Cancelled invoice %s (paid %s)", invoice.invoice_number, invoice.invoice_paid_amount)
    return invoice


@transaction.atomic
def delete_invoice(*, invoice_id: UUID) -> None:
    """
    Delete an invoice and its items.

    Raises:
        InvoiceNotFoundError: If invoice doesn't exist
        InvoiceStateError: If any payment has been recorded
    """
    invoice = _lock_invoice(invoice_id)

    if invoice.invoice_paid_amount > 0:
        logger.warning("Refused to delete invoice %s with payments", invoice.invoice_number)
        raise InvoiceStateError(
            "Cannot delete invoice with payments. Consider cancelling instead."
        )

    number = invoice.invoice_number
    invoice.delete()
    logger.info("Deleted invoice %s", number)
