"""User search and reporting service."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db.models import Count, DecimalField, F, Q, QuerySet, Sum

from apps.accounts.models import UserType
from .exceptions import UserNotFoundError

User = get_user_model()

# Invoice statuses that still carry a balance
OUTSTANDING_STATUSES = ('OPEN', 'PARTIAL_PAID', 'OVERDUE')


def search_users(
    *,
    user_type: Optional[str] = None,
    admin_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None
) -> QuerySet[User]:
    """
    Search and filter users.

    Args:
        user_type: Filter by ADMIN, SUPPLIER or CLIENT
        admin_id: Filter by managing admin
        is_active: Filter by active flag
        search: Case-insensitive match on first/last name, email, company

    Returns:
        Filtered QuerySet of User
    """
    queryset = User.objects.select_related('admin')

    if user_type:
        queryset = queryset.filter(user_type=user_type)

    if admin_id:
        queryset = queryset.filter(admin_id=admin_id)

    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)

    if search:
        queryset = queryset.filter(
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(email__icontains=search) |
            Q(company_name__icontains=search)
        )

    return queryset


def get_active_users_by_type(*, user_type: str) -> QuerySet[User]:
    """Active clients, suppliers or admins."""
    return User.objects.filter(user_type=user_type, is_active=True)


def get_users_with_outstanding_invoices() -> QuerySet[User]:
    """Users with at least one open, partially paid or overdue invoice."""
    return (
        User.objects
        .filter(invoices__status__in=OUTSTANDING_STATUSES)
        .distinct()
    )


def get_user_outstanding_amount(*, user_id: UUID) -> Decimal:
    """
    Total still owed on a user's open, partially paid and overdue invoices.

    Raises:
        UserNotFoundError: If user doesn't exist
    """
    if not User.objects.filter(id=user_id).exists():
        raise UserNotFoundError(f"User not found with id: {user_id}")

    total = (
        User.objects
        .filter(id=user_id, invoices__status__in=OUTSTANDING_STATUSES)
        .aggregate(
            total=Sum(
                F('invoices__invoice_amount')
                + F('invoices__vat_amount')
                - F('invoices__invoice_paid_amount'),
                output_field=DecimalField(max_digits=19, decimal_places=2),
            )
        )['total']
    )
    return total or Decimal('0.00')


def get_user_statistics() -> dict:
    """
    Count users per type.

    Returns:
        Dictionary with total, active and one entry per user type
    """
    counts = {
        row['user_type']: row['count']
        for row in User.objects.values('user_type').annotate(count=Count('id'))
    }
    return {
        'total_users': sum(counts.values()),
        'active_users': User.objects.filter(is_active=True).count(),
        'total_admins': counts.get(UserType.ADMIN, 0),
        'total_suppliers': counts.get(UserType.SUPPLIER, 0),
        'total_clients': counts.get(UserType.CLIENT, 0),
    }
