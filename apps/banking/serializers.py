from rest_framework import serializers
from .models import BankAccount, Transaction, AccountType, TransactionType, ExpenseType
from apps.accounts.models import User
from apps.accounts.serializers import UserMinimalSerializer
from apps.invoices.models import Invoice
from apps.invoices.serializers import DateRangeValidationMixin


# =============================================================================
# Input Serializers
# =============================================================================

class BankAccountFilterSerializer(serializers.Serializer):
    account_type = serializers.ChoiceField(choices=AccountType.choices, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True)


class TransactionFilterSerializer(DateRangeValidationMixin, serializers.Serializer):
    """
    Validate query parameters for transaction search.

    Query Parameters:
        bank_account (UUID): Filter by account
        user (UUID): Filter by counterparty
        admin (UUID): Filter by recording admin
        transaction_type (str): Filter by type
        date_from (date): Transaction date from
        date_to (date): Transaction date to
        is_reconciled (bool): Reconciliation flag
        search (str): Notes or reference fragment
    """

    bank_account = serializers.UUIDField(required=False)
    user = serializers.UUIDField(required=False)
    admin = serializers.UUIDField(required=False)
    transaction_type = serializers.ChoiceField(choices=TransactionType.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    is_reconciled = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True)


class CashFlowQuerySerializer(DateRangeValidationMixin, serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    bank_account = serializers.UUIDField(required=False)


class LimitQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


# =============================================================================
# Bank Account Serializers
# =============================================================================

class BankAccountSerializer(serializers.ModelSerializer):
    """Bank account; balances are read-only once the account exists."""

    class Meta:
        model = BankAccount
        fields = [
            'id',
            'account_number',
            'sort_code',
            'account_name',
            'account_type',
            'opening_balance',
            'current_balance',
            'is_active',
            'admin',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'opening_balance',
            'current_balance',
            'is_active',
            'created_at',
            'updated_at',
        ]
        # Uniqueness is enforced by the service layer (409), not the serializer
        extra_kwargs = {
            'account_number': {'validators': []},
        }


class BankAccountCreateSerializer(serializers.ModelSerializer):
    """Input for opening a bank account."""

    current_balance = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        required=False
    )

    class Meta:
        model = BankAccount
        fields = [
            'account_number',
            'sort_code',
            'account_name',
            'account_type',
            'opening_balance',
            'current_balance',
            'admin',
        ]
        extra_kwargs = {
            'account_number': {'validators': []},
        }


class AccountBalancesSerializer(serializers.Serializer):
    total_balance = serializers.DecimalField(max_digits=19, decimal_places=2)
    by_type = serializers.DictField(
        child=serializers.DecimalField(max_digits=19, decimal_places=2)
    )


# =============================================================================
# Transaction Serializers
# =============================================================================

class TransactionSerializer(serializers.ModelSerializer):
    """Recorded transaction with counterparty details."""

    user_detail = UserMinimalSerializer(source='user', read_only=True)
    account_name = serializers.CharField(source='bank_account.account_name', read_only=True)
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)
    ending_balance = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'bank_account',
            'account_name',
            'transaction_type',
            'expense_type',
            'transaction_amount',
            'transaction_date',
            'reference_number',
            'notes',
            'ending_balance',
            'user',
            'user_detail',
            'invoice',
            'invoice_number',
            'admin',
            'is_reconciled',
            'reconciled_at',
            'created_at',
            'updated_at',
        ]
        # Only descriptive fields are editable after recording
        read_only_fields = [
            'id',
            'bank_account',
            'transaction_type',
            'transaction_amount',
            'transaction_date',
            'user',
            'invoice',
            'admin',
            'is_reconciled',
            'reconciled_at',
            'created_at',
            'updated_at',
        ]


class TransactionCreateSerializer(serializers.Serializer):
    """
    Validate input for recording a transaction.

    Positivity of the amount is checked by the service so the error kind
    stays InvalidAmount.
    """

    bank_account = serializers.UUIDField()
    transaction_type = serializers.ChoiceField(choices=TransactionType.choices)
    transaction_amount = serializers.DecimalField(max_digits=19, decimal_places=2)
    transaction_date = serializers.DateField(required=False)
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True
    )
    invoice = serializers.PrimaryKeyRelatedField(
        queryset=Invoice.objects.all(),
        required=False,
        allow_null=True
    )
    admin = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True
    )
    expense_type = serializers.ChoiceField(
        choices=ExpenseType.choices,
        required=False,
        allow_blank=True
    )
    reference_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class ExpenseCategorySerializer(serializers.Serializer):
    expense_type = serializers.CharField(allow_null=True)
    total = serializers.DecimalField(max_digits=19, decimal_places=2)


class MonthlyCashFlowSerializer(serializers.Serializer):
    month = serializers.DateField()
    income = serializers.DecimalField(max_digits=19, decimal_places=2)
    expenses = serializers.DecimalField(max_digits=19, decimal_places=2)
    net = serializers.DecimalField(max_digits=19, decimal_places=2)


class CashFlowSummarySerializer(serializers.Serializer):
    total_income = serializers.DecimalField(max_digits=19, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=19, decimal_places=2)
    net_cash_flow = serializers.DecimalField(max_digits=19, decimal_places=2)
    expenses_by_category = ExpenseCategorySerializer(many=True)
    monthly = MonthlyCashFlowSerializer(many=True)
