from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class AccountType(models.TextChoices):
    CURRENT = 'CURRENT', 'Current'
    SAVINGS = 'SAVINGS', 'Savings'
    CASH = 'CASH', 'Cash'


class TransactionType(models.TextChoices):
    RECEIVE = 'RECEIVE', 'Receive'
    PAYMENT = 'PAYMENT', 'Payment'
    TRANSFER = 'TRANSFER', 'Transfer'
    DEPOSIT = 'DEPOSIT', 'Deposit'
    WITHDRAWAL = 'WITHDRAWAL', 'Withdrawal'
    FEE = 'FEE', 'Fee'
    INTEREST = 'INTEREST', 'Interest'


class ExpenseType(models.TextChoices):
    OFFICE_SUPPLIES = 'OFFICE_SUPPLIES', 'Office supplies'
    TRAVEL = 'TRAVEL', 'Travel'
    UTILITIES = 'UTILITIES', 'Utilities'
    RENT = 'RENT', 'Rent'
    INSURANCE = 'INSURANCE', 'Insurance'
    PROFESSIONAL_SERVICES = 'PROFESSIONAL_SERVICES', 'Professional services'
    MARKETING = 'MARKETING', 'Marketing'
    EQUIPMENT = 'EQUIPMENT', 'Equipment'
    MEALS = 'MEALS', 'Meals'
    OTHER = 'OTHER', 'Other'


# Types that add to the account balance; every other type subtracts
CREDIT_TYPES = (
    TransactionType.RECEIVE,
    TransactionType.DEPOSIT,
    TransactionType.INTEREST,
)

# Outgoing types counted as expenses in cash-flow reports (TRANSFER is neither)
EXPENSE_TYPES = (
    TransactionType.PAYMENT,
    TransactionType.WITHDRAWAL,
    TransactionType.FEE,
)


class BankAccount(models.Model):
    """Bank (or cash) account whose balance is moved by transactions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    account_number = models.CharField(max_length=34, unique=True)
    sort_code = models.CharField(max_length=20, blank=True)
    account_name = models.CharField(max_length=100)
    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        default=AccountType.CURRENT
    )

    opening_balance = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    # Maintained by the transaction services
    current_balance = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        default=Decimal('0.00')
    )

    is_active = models.BooleanField(default=True)
    admin = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_bank_accounts'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bank_accounts'
        indexes = [
            models.Index(fields=['account_type', 'is_active'], name='bank_accoun_account_7d2e1b_idx'),
        ]
        ordering = ['account_name']

    def __str__(self):
        return f"{self.account_name} ({self.account_number})"


class Transaction(models.Model):
    """Single movement of money on a bank account."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    bank_account = models.ForeignKey(
        BankAccount,
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    # Counterparty (client or supplier)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions'
    )
    invoice = models.ForeignKey(
        'invoices.Invoice',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions'
    )
    admin = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_transactions'
    )

    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)
    expense_type = models.CharField(
        max_length=30,
        choices=ExpenseType.choices,
        blank=True
    )
    transaction_amount = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    transaction_date = models.DateField()
    reference_number = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    # Account balance right after this transaction was applied
    ending_balance = models.DecimalField(
        max_digits=19,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False
    )

    # Reconciliation tracking
    is_reconciled = models.BooleanField(default=False)
    reconciled_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'transactions'
        indexes = [
            models.Index(fields=['bank_account', 'transaction_date'], name='transaction_bank_ac_5b9f3c_idx'),
            models.Index(fields=['transaction_type', 'transaction_date'], name='transaction_transac_1e6a4d_idx'),
            models.Index(fields=['is_reconciled'], name='transaction_is_reco_8c3b2f_idx'),
        ]
        ordering = ['-transaction_date', '-created_at']

    def __str__(self):
        return f"{self.get_transaction_type_display()} {self.transaction_amount} on {self.transaction_date}"

    @property
    def is_credit(self):
        return self.transaction_type in CREDIT_TYPES

    @property
    def is_debit(self):
        return not self.is_credit

    @property
    def signed_amount(self):
        """Amount as applied to the account balance."""
        return self.transaction_amount if self.is_credit else -self.transaction_amount
