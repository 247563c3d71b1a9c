# ==========================================
# apps/banking/admin.py
# ==========================================

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html
from .models import BankAccount, Transaction


@admin.register(BankAccount)
class BankAccountAdmin(admin.ModelAdmin):
    """
    Admin interface for bank accounts.

    Balances are read-only; they move only when transactions are recorded.
    """

    list_display = [
        'account_name',
        'account_number',
        'account_type',
        'current_balance',
        'active_badge',
        'created_at',
    ]

    list_filter = [
        'account_type',
        'is_active',
    ]

    search_fields = [
        'account_name',
        'account_number',
        'sort_code',
    ]

    readonly_fields = [
        'current_balance',
        'created_at',
        'updated_at',
    ]

    actions = ['activate_accounts', 'deactivate_accounts']

    def active_badge(self, obj):
        if obj.is_active:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Active</span>'
            )
        return format_html(
            '<span style="background: #ccc; color: #666; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Inactive</span>'
        )
    active_badge.short_description = 'Status'
    active_badge.admin_order_field = 'is_active'

    @admin.action(description='Activate selected accounts')
    def activate_accounts(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f'{updated} account(s) activated.')

    @admin.action(description='Deactivate selected accounts')
    def deactivate_accounts(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f'{updated} account(s) deactivated.')


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    Admin interface for transactions.

    Amount, type and account are read-only after recording; use the API
    to record or delete transactions so account balances stay in step.
    """

    list_display = [
        'transaction_date',
        'bank_account',
        'type_badge',
        'transaction_amount',
        'ending_balance',
        'user',
        'is_reconciled',
    ]

    list_filter = [
        'transaction_type',
        'expense_type',
        'is_reconciled',
        'transaction_date',
    ]

    search_fields = [
        'reference_number',
        'notes',
        'bank_account__account_name',
        'user__email',
        'user__company_name',
    ]

    date_hierarchy = 'transaction_date'
    raw_id_fields = ['user', 'invoice', 'admin']

    readonly_fields = [
        'bank_account',
        'transaction_type',
        'transaction_amount',
        'ending_balance',
        'reconciled_at',
        'created_at',
        'updated_at',
    ]

    actions = ['mark_reconciled']

    def type_badge(self, obj):
        """Display credits green and debits red."""
        bg = '#6B8E5E' if obj.is_credit else '#B85C5C'
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, obj.get_transaction_type_display()
        )
    type_badge.short_description = 'Type'
    type_badge.admin_order_field = 'transaction_type'

    @admin.action(description='Mark selected transactions as reconciled')
    def mark_reconciled(self, request, queryset):
        updated = queryset.filter(is_reconciled=False).update(
            is_reconciled=True,
            reconciled_at=timezone.now()
        )
        self.message_user(request, f'{updated} transaction(s) reconciled.')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('bank_account', 'user')
