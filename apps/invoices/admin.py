# ==========================================
# apps/invoices/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .ledger import recompute_invoice_totals, quantize_money
from .models import Invoice, InvoiceItem, InvoiceStatus


class InvoiceItemInline(admin.TabularInline):
    """Inline admin for line items within an invoice."""
    model = InvoiceItem
    extra = 0
    fields = [
        'description',
        'item_code',
        'quantity',
        'unit',
        'unit_price',
        'discount_percent',
        'vat_rate_percent',
        'line_total',
    ]
    readonly_fields = ['line_total']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """
    Admin interface for invoices.

    Amounts and status are read-only. Items can be edited inline; the
    invoice and VAT amounts are recomputed from them on save. Payments go
    through the API.
    """

    list_display = [
        'invoice_number',
        'user',
        'invoice_date',
        'due_date',
        'total_amount',
        'invoice_paid_amount',
        'status_badge',
    ]

    list_filter = [
        'status',
        'invoice_type',
        'invoice_date',
    ]

    search_fields = [
        'invoice_number',
        'invoice_note',
        'user__email',
        'user__last_name',
        'user__company_name',
    ]

    date_hierarchy = 'invoice_date'
    raw_id_fields = ['user', 'admin']
    inlines = [InvoiceItemInline]

    readonly_fields = [
        'invoice_amount',
        'vat_amount',
        'invoice_paid_amount',
        'status',
        'created_at',
        'updated_at',
    ]

    def status_badge(self, obj):
        """Display invoice status as colored badge."""
        colors = {
            InvoiceStatus.OPEN: ('#E5C49A', '#2C1810'),
            InvoiceStatus.PARTIAL_PAID: ('#A47449', 'white'),
            InvoiceStatus.PAID: ('#6B8E5E', 'white'),
            InvoiceStatus.OVERDUE: ('#B85C5C', 'white'),
            InvoiceStatus.CANCELLED: ('#ccc', '#666'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def save_related(self, request, form, formsets, change):
        """Recompute invoice totals after inline item edits."""
        super().save_related(request, form, formsets, change)
        invoice = form.instance
        invoice_amount, vat_amount = recompute_invoice_totals(invoice.to_ledger())
        invoice.invoice_amount = quantize_money(invoice_amount)
        invoice.vat_amount = quantize_money(vat_amount)
        invoice.save(update_fields=['invoice_amount', 'vat_amount', 'updated_at'])

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('user')
