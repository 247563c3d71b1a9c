"""
Cash-flow reporting over recorded transactions.

Income is the sum of credit transactions (RECEIVE, DEPOSIT, INTEREST);
expenses are PAYMENT, WITHDRAWAL and FEE. Transfers move the account
balance but count as neither.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from django.db.models import Q, Sum, DecimalField
from django.db.models.functions import TruncMonth

from apps.banking.models import Transaction, CREDIT_TYPES, EXPENSE_TYPES

MONEY_FIELD = DecimalField(max_digits=19, decimal_places=2)
ZERO = Decimal('0.00')


def _in_range(queryset, date_from: Optional[date], date_to: Optional[date]):
    if date_from:
        queryset = queryset.filter(transaction_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(transaction_date__lte=date_to)
    return queryset


def get_cash_flow_summary(
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    bank_account_id=None
) -> dict:
    """
    Income, expenses and net cash flow for a period.

    Args:
        date_from: Transaction date on or after (optional)
        date_to: Transaction date on or before (optional)
        bank_account_id: Restrict to one account (optional)

    Returns:
        Dictionary with:
            total_income, total_expenses, net_cash_flow,
            expenses_by_category: list of {expense_type, total}, largest first
            monthly: list of {month, income, expenses, net}, oldest first
    """
    queryset = _in_range(Transaction.objects.all(), date_from, date_to)
    if bank_account_id:
        queryset = queryset.filter(bank_account_id=bank_account_id)

    income_filter = Q(transaction_type__in=CREDIT_TYPES)
    expense_filter = Q(transaction_type__in=EXPENSE_TYPES)

    totals = queryset.aggregate(
        income=Sum('transaction_amount', filter=income_filter, output_field=MONEY_FIELD),
        expenses=Sum('transaction_amount', filter=expense_filter, output_field=MONEY_FIELD),
    )
    income = totals['income'] or ZERO
    expenses = totals['expenses'] or ZERO

    by_category = [
        {'expense_type': row['expense_type'] or None, 'total': row['total']}
        for row in (
            queryset
            .filter(expense_filter)
            .values('expense_type')
            .annotate(total=Sum('transaction_amount', output_field=MONEY_FIELD))
            .order_by('-total', 'expense_type')
        )
    ]

    monthly = []
    rows = (
        queryset
        .annotate(month=TruncMonth('transaction_date'))
        .values('month')
        .annotate(
            income=Sum('transaction_amount', filter=income_filter, output_field=MONEY_FIELD),
            expenses=Sum('transaction_amount', filter=expense_filter, output_field=MONEY_FIELD),
        )
        .order_by('month')
    )
    for row in rows:
        month_income = row['income'] or ZERO
        month_expenses = row['expenses'] or ZERO
        monthly.append({
            'month': row['month'],
            'income': month_income,
            'expenses': month_expenses,
            'net': month_income - month_expenses,
        })

    return {
        'total_income': income,
        'total_expenses': expenses,
        'net_cash_flow': income - expenses,
        'expenses_by_category': by_category,
        'monthly': monthly,
    }
