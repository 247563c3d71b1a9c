"""Invoice search and listing service."""

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db.models import Q, QuerySet

from apps.invoices.models import Invoice, InvoiceStatus

# Statuses that still carry a balance
OUTSTANDING_STATUSES = (
    InvoiceStatus.OPEN,
    InvoiceStatus.PARTIAL_PAID,
    InvoiceStatus.OVERDUE,
)

# Statuses that no longer fall due
SETTLED_STATUSES = (
    InvoiceStatus.PAID,
    InvoiceStatus.CANCELLED,
)


def _base_queryset() -> QuerySet[Invoice]:
    return Invoice.objects.select_related('user', 'admin').prefetch_related('items')


def search_invoices(
    *,
    user_id: Optional[UUID] = None,
    admin_id: Optional[UUID] = None,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None
) -> QuerySet[Invoice]:
    """
    Search and filter invoices.

    Args:
        user_id: Filter by client/supplier
        admin_id: Filter by managing admin
        status: Filter by status
        date_from: Invoice date on or after
        date_to: Invoice date on or before
        search: Case-insensitive match on number, note and client name/company

    Returns:
        Filtered QuerySet of Invoice, newest first
    """
    queryset = _base_queryset()

    if user_id:
        queryset = queryset.filter(user_id=user_id)

    if admin_id:
        queryset = queryset.filter(admin_id=admin_id)

    if status:
        queryset = queryset.filter(status=status)

    if date_from:
        queryset = queryset.filter(invoice_date__gte=date_from)

    if date_to:
        queryset = queryset.filter(invoice_date__lte=date_to)

    if search:
        queryset = queryset.filter(
            Q(invoice_number__icontains=search) |
            Q(invoice_note__icontains=search) |
            Q(user__first_name__icontains=search) |
            Q(user__last_name__icontains=search) |
            Q(user__company_name__icontains=search)
        )

    return queryset


def get_overdue_invoices(*, as_of: Optional[date] = None) -> QuerySet[Invoice]:
    """Unsettled invoices whose due date has passed."""
    as_of = as_of or date.today()
    return (
        _base_queryset()
        .filter(due_date__lt=as_of)
        .exclude(status__in=SETTLED_STATUSES)
        .order_by('due_date')
    )


def get_outstanding_invoices() -> QuerySet[Invoice]:
    return _base_queryset().filter(status__in=OUTSTANDING_STATUSES)


def get_recent_invoices(*, limit: Optional[int] = None) -> QuerySet[Invoice]:
    """Most recently created invoices."""
    limit = limit or settings.RECENT_RECORDS_LIMIT
    return _base_queryset().order_by('-created_at')[:limit]


def get_invoices_due_within(*, days: int, as_of: Optional[date] = None) -> QuerySet[Invoice]:
    """Unsettled invoices falling due between today and today + days (inclusive)."""
    as_of = as_of or date.today()
    return (
        _base_queryset()
        .filter(due_date__range=(as_of, as_of + timedelta(days=days)))
        .exclude(status__in=SETTLED_STATUSES)
        .order_by('due_date')
    )
