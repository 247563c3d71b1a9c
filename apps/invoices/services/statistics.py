"""
Invoice statistics service.

Aggregates over invoice amounts for dashboards and reports.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from django.contrib.auth import get_user_model
from django.db.models import Count, DecimalField, F, Sum

from apps.invoices.models import Invoice, InvoiceStatus
from .invoice_search import OUTSTANDING_STATUSES

User = get_user_model()

MONEY_FIELD = DecimalField(max_digits=19, decimal_places=2)


def get_total_outstanding_amount() -> Decimal:
    """Sum of total - paid over open, partially paid and overdue invoices."""
    total = (
        Invoice.objects
        .filter(status__in=OUTSTANDING_STATUSES)
        .aggregate(
            total=Sum(
                F('invoice_amount') + F('vat_amount') - F('invoice_paid_amount'),
                output_field=MONEY_FIELD,
            )
        )['total']
    )
    return total or Decimal('0.00')


def get_total_invoiced(*, date_from: date, date_to: date) -> Decimal:
    """Sum of invoice totals (net + VAT) dated within the range."""
    total = (
        Invoice.objects
        .filter(invoice_date__range=(date_from, date_to))
        .aggregate(total=Sum(F('invoice_amount') + F('vat_amount'), output_field=MONEY_FIELD))['total']
    )
    return total or Decimal('0.00')


def get_invoice_statistics(
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None
) -> dict:
    """
    Counts per status plus outstanding total.

    Args:
        date_from: Start of range for total_invoiced (optional)
        date_to: End of range for total_invoiced (optional)

    Returns:
        Dictionary with one count per status, total_invoices,
        total_outstanding and, when both dates are given, total_invoiced
    """
    counts = {
        row['status']: row['count']
        for row in Invoice.objects.values('status').annotate(count=Count('id'))
    }

    stats = {
        'total_invoices': sum(counts.values()),
        'open_invoices': counts.get(InvoiceStatus.OPEN, 0),
        'partial_paid_invoices': counts.get(InvoiceStatus.PARTIAL_PAID, 0),
        'paid_invoices': counts.get(InvoiceStatus.PAID, 0),
        'overdue_invoices': counts.get(InvoiceStatus.OVERDUE, 0),
        'cancelled_invoices': counts.get(InvoiceStatus.CANCELLED, 0),
        'total_outstanding': get_total_outstanding_amount(),
        'total_invoiced': None,
    }

    if date_from and date_to:
        stats['total_invoiced'] = get_total_invoiced(date_from=date_from, date_to=date_to)

    return stats


def get_top_clients(
    *,
    date_from: date,
    date_to: date,
    limit: int = 10
) -> list:
    """
    Users ranked by invoiced total (net + VAT) within a date range.

    Returns:
        List of dicts: user (User instance), total_amount, invoice_count
    """
    rows = (
        Invoice.objects
        .filter(invoice_date__range=(date_from, date_to))
        .values('user')
        .annotate(
            total_amount=Sum(F('invoice_amount') + F('vat_amount'), output_field=MONEY_FIELD),
            invoice_count=Count('id'),
        )
        .order_by('-total_amount')[:limit]
    )

    users = User.objects.in_bulk([row['user'] for row in rows])
    return [
        {
            'user': users[row['user']],
            'total_amount': row['total_amount'],
            'invoice_count': row['invoice_count'],
        }
        for row in rows
    ]
