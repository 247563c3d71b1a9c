"""
Invoice Ledger Calculator
=========================

Pure functions computing the financial state of an invoice: line totals,
invoice totals, outstanding balance, derived status and payment
application. Nothing here touches the database; services load an
``InvoiceLedger`` snapshot from the ORM, run it through these functions and
persist the result.

All arithmetic is exact ``Decimal`` arithmetic. Percentages are divided by
``Decimal(100)``, never by a float. Rounding to cents happens only when a
value is written back to a model (see ``quantize_money``).

Example:
    Paying an invoice in two instalments::

        from decimal import Decimal
        from apps.invoices import ledger

        invoice = ledger.InvoiceLedger(invoice_amount=Decimal('100.00'))
        invoice = ledger.apply_payment(invoice, Decimal('40.00'), as_of=today)
        invoice.status              # 'PARTIAL_PAID'
        invoice.outstanding_amount  # Decimal('60.00')

        invoice = ledger.apply_payment(invoice, Decimal('60.00'), as_of=today)
        invoice.status              # 'PAID'
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from .exceptions import (
    InvalidAmountError,
    ExceedsBalanceError,
    ItemNotFoundError,
    InvoiceStateError,
)

HUNDRED = Decimal('100')
ZERO = Decimal('0')
CENT = Decimal('0.01')


# Invoice statuses
OPEN = 'OPEN'
PARTIAL_PAID = 'PARTIAL_PAID'
PAID = 'PAID'
OVERDUE = 'OVERDUE'
CANCELLED = 'CANCELLED'


def to_decimal(value) -> Decimal:
    """Convert int/str/float/Decimal to Decimal without binary float drift."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value) -> Decimal:
    """Round to cents (half-up) for storage."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineItem:
    """One invoice line. Carries no reference back to its invoice."""

    description: str
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal = ZERO
    vat_rate_percent: Decimal = ZERO
    item_id: Optional[object] = None


@dataclass(frozen=True)
class ItemTotals:
    sub_total: Decimal
    discount_amount: Decimal
    net_amount: Decimal
    vat_amount: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class InvoiceLedger:
    """
    Snapshot of an invoice's financial state.

    ``invoice_amount`` is the net subtotal and ``vat_amount`` the VAT on
    top of it. When ``items`` is non-empty both are sums over the items;
    otherwise they are whatever the caller set.
    """

    invoice_amount: Decimal = ZERO
    vat_amount: Decimal = ZERO
    paid_amount: Decimal = ZERO
    status: str = OPEN
    due_date: Optional[date] = None
    items: Tuple[LineItem, ...] = field(default_factory=tuple)

    @property
    def total_amount(self) -> Decimal:
        return self.invoice_amount + self.vat_amount

    @property
    def outstanding_amount(self) -> Decimal:
        return self.total_amount - self.paid_amount


# =============================================================================
# Line items
# =============================================================================

def recompute_item_total(item: LineItem) -> ItemTotals:
    """
    Compute the derived amounts of one line item.

    Args:
        item: The line item

    Returns:
        ItemTotals with sub_total, discount_amount, net_amount,
        vat_amount and line_total

    Raises:
        InvalidAmountError: If quantity < 1, or unit price, discount or
            VAT rate is negative

    Note:
        A discount above 100% is accepted and gives a negative net amount.
    """
    quantity = item.quantity
    unit_price = to_decimal(item.unit_price)
    discount_percent = to_decimal(item.discount_percent)
    vat_rate_percent = to_decimal(item.vat_rate_percent)

    if quantity is None or quantity < 1:
        raise InvalidAmountError("Quantity must be at least 1")
    if unit_price < ZERO:
        raise InvalidAmountError("Unit price cannot be negative")
    if discount_percent < ZERO:
        raise InvalidAmountError("Discount percent cannot be negative")
    if vat_rate_percent < ZERO:
        raise InvalidAmountError("VAT rate cannot be negative")

    sub_total = unit_price * quantity
    discount_amount = sub_total * discount_percent / HUNDRED
    net_amount = sub_total - discount_amount
    vat_amount = net_amount * vat_rate_percent / HUNDRED

    return ItemTotals(
        sub_total=sub_total,
        discount_amount=discount_amount,
        net_amount=net_amount,
        vat_amount=vat_amount,
        line_total=net_amount + vat_amount,
    )


# =============================================================================
# Invoice totals
# =============================================================================

def recompute_invoice_totals(invoice: InvoiceLedger) -> Tuple[Decimal, Decimal]:
    """
    Sum item net and VAT amounts.

    Returns:
        (invoice_amount, vat_amount). With no items the invoice's current
        values are returned unchanged; an empty invoice is never forced
        to zero.
    """
    if not invoice.items:
        return invoice.invoice_amount, invoice.vat_amount

    invoice_amount = ZERO
    vat_amount = ZERO
    for item in invoice.items:
        totals = recompute_item_total(item)
        invoice_amount += totals.net_amount
        vat_amount += totals.vat_amount
    return invoice_amount, vat_amount


def _with_totals(invoice: InvoiceLedger) -> InvoiceLedger:
    invoice_amount, vat_amount = recompute_invoice_totals(invoice)
    return replace(invoice, invoice_amount=invoice_amount, vat_amount=vat_amount)


def add_item(invoice: InvoiceLedger, item: LineItem) -> InvoiceLedger:
    """Append a line item and recompute totals."""
    # Validates the item before it joins the collection
    recompute_item_total(item)
    return _with_totals(replace(invoice, items=invoice.items + (item,)))


def remove_item(invoice: InvoiceLedger, item_id) -> InvoiceLedger:
    """
    Remove the line item with ``item_id`` and recompute totals.

    Removing the last item leaves the totals as they were.

    Raises:
        ItemNotFoundError: If no item in the invoice has that id
    """
    remaining = tuple(item for item in invoice.items if item.item_id != item_id)
    if len(remaining) == len(invoice.items):
        raise ItemNotFoundError(f"Item {item_id} is not part of this invoice")
    return _with_totals(replace(invoice, items=remaining))


# =============================================================================
# Status and payments
# =============================================================================

def derive_status(invoice: InvoiceLedger, as_of: date) -> str:
    """
    Derive the payment status from amounts and due date.

    First match wins:
        1. nothing outstanding -> PAID
        2. partly paid -> PARTIAL_PAID (even when past due)
        3. past due date -> OVERDUE
        4. OPEN

    Cancellation is not considered here; see ``refresh_status``.
    """
    total = invoice.total_amount
    paid = invoice.paid_amount

    if invoice.outstanding_amount <= ZERO:
        return PAID
    if ZERO < paid < total:
        return PARTIAL_PAID
    if invoice.due_date is not None and as_of > invoice.due_date:
        return OVERDUE
    return OPEN


def refresh_status(invoice: InvoiceLedger, as_of: date) -> InvoiceLedger:
    """Re-derive the cached status. A cancelled invoice stays cancelled."""
    if invoice.status == CANCELLED:
        return invoice
    return replace(invoice, status=derive_status(invoice, as_of))


def apply_payment(invoice: InvoiceLedger, amount, as_of: Optional[date] = None) -> InvoiceLedger:
    """
    Post a payment against the invoice.

    The full amount posts or nothing does; a payment is never clipped
    to the outstanding balance.

    Args:
        invoice: Current invoice state
        amount: Payment amount, strictly positive
        as_of: Date used for status derivation (default: today)

    Returns:
        New InvoiceLedger with the increased paid amount and re-derived status

    Raises:
        InvoiceStateError: If the invoice is cancelled
        InvalidAmountError: If amount <= 0
        ExceedsBalanceError: If paid + amount would exceed the total
    """
    amount = to_decimal(amount)

    if invoice.status == CANCELLED:
        raise InvoiceStateError("Cannot record a payment on a cancelled invoice")
    if amount <= ZERO:
        raise InvalidAmountError("Payment amount must be positive")

    new_paid = invoice.paid_amount + amount
    if new_paid > invoice.total_amount:
        raise ExceedsBalanceError(
            f"Payment of {amount} exceeds the outstanding balance of {invoice.outstanding_amount}"
        )

    paid = replace(invoice, paid_amount=new_paid)
    return replace(paid, status=derive_status(paid, as_of or date.today()))


def cancel(invoice: InvoiceLedger) -> InvoiceLedger:
    """Move to CANCELLED regardless of what has been paid."""
    return replace(invoice, status=CANCELLED)


# =============================================================================
# Numbering
# =============================================================================

def generate_next_invoice_number(existing_count: int, year: int, prefix: str = 'INV') -> str:
    """
    Format the next invoice number, e.g. ``INV-2024-000043``.

    The sequence is ``existing_count + 1``; reserving it atomically is up
    to the caller.
    """
    return f"{prefix}-{year}-{existing_count + 1:06d}"
