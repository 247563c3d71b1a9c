from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid

from . import ledger
from .ledger import (
    InvoiceLedger,
    LineItem,
    recompute_item_total,
    quantize_money,
)


class InvoiceStatus(models.TextChoices):
    OPEN = ledger.OPEN, 'Open'
    PARTIAL_PAID = ledger.PARTIAL_PAID, 'Partially paid'
    PAID = ledger.PAID, 'Paid'
    OVERDUE = ledger.OVERDUE, 'Overdue'
    CANCELLED = ledger.CANCELLED, 'Cancelled'


class InvoiceType(models.TextChoices):
    STANDARD = 'STANDARD', 'Standard'
    CREDIT_NOTE = 'CREDIT_NOTE', 'Credit note'
    PROFORMA = 'PROFORMA', 'Proforma'
    RECURRING = 'RECURRING', 'Recurring'


class Invoice(models.Model):
    """Invoice issued to (or received from) a user, owning its line items."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_number = models.CharField(max_length=50, unique=True)
    invoice_date = models.DateField()
    due_date = models.DateField(null=True, blank=True)
    invoice_type = models.CharField(
        max_length=20,
        choices=InvoiceType.choices,
        default=InvoiceType.STANDARD
    )
    invoice_note = models.TextField(blank=True)

    # Amounts (net subtotal, VAT on top, received so far)
    invoice_amount = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    vat_amount = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    invoice_paid_amount = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.OPEN
    )

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='invoices'
    )
    admin = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_invoices'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        indexes = [
            models.Index(fields=['user', 'status'], name='invoices_user_id_4c1f2a_idx'),
            models.Index(fields=['status', 'due_date'], name='invoices_status_9a7e3b_idx'),
            models.Index(fields=['invoice_date'], name='invoices_invoice_2d8c6f_idx'),
        ]
        ordering = ['-invoice_date', '-created_at']

    def __str__(self):
        return f"{self.invoice_number} ({self.get_status_display()})"

    @property
    def total_amount(self):
        return self.invoice_amount + self.vat_amount

    @property
    def outstanding_amount(self):
        return self.total_amount - self.invoice_paid_amount

    @property
    def is_cancelled(self):
        return self.status == InvoiceStatus.CANCELLED

    def to_ledger(self, with_items=True):
        """Snapshot of this invoice for the ledger calculator."""
        items = ()
        if with_items:
            items = tuple(item.to_line_item() for item in self.items.all())
        return InvoiceLedger(
            invoice_amount=self.invoice_amount,
            vat_amount=self.vat_amount,
            paid_amount=self.invoice_paid_amount,
            status=self.status,
            due_date=self.due_date,
            items=items,
        )

    def apply_ledger(self, state):
        """Copy calculator results back onto the model (not saved)."""
        self.invoice_amount = quantize_money(state.invoice_amount)
        self.vat_amount = quantize_money(state.vat_amount)
        self.invoice_paid_amount = quantize_money(state.paid_amount)
        self.status = state.status


class InvoiceItem(models.Model):
    """Line item of an invoice."""

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name='items'
    )

    description = models.CharField(max_length=500)
    item_code = models.CharField(max_length=50, blank=True)
    unit = models.CharField(max_length=20, blank=True)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    discount_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    vat_rate_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Cached; refreshed on every save
    line_total = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoice_items'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.description} x{self.quantity}"

    def to_line_item(self):
        return LineItem(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount_percent=self.discount_percent,
            vat_rate_percent=self.vat_rate_percent,
            item_id=self.pk,
        )

    @property
    def totals(self):
        return recompute_item_total(self.to_line_item())

    def save(self, *args, **kwargs):
        self.line_total = quantize_money(self.totals.line_total)
        super().save(*args, **kwargs)
