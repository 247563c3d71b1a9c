"""
Bank account management service.

Handles account CRUD, activation and balance summaries. Balances are
only moved by the transaction service.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet, Sum, DecimalField

from apps.banking.models import BankAccount, AccountType
from .exceptions import (
    BankAccountNotFoundError,
    DuplicateAccountNumberError,
    BankAccountStateError,
    InvalidTransactionAmountError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    'sort_code',
    'account_name',
    'account_type',
    'admin',
)


def get_bank_account_by_id(*, account_id: UUID) -> BankAccount:
    """
    Get bank account by ID.

    Raises:
        BankAccountNotFoundError: If account doesn't exist
    """
    try:
        return BankAccount.objects.select_related('admin').get(id=account_id)
    except BankAccount.DoesNotExist:
        raise BankAccountNotFoundError(f"Bank account not found with id: {account_id}")


def _check_account_number(account_number: str, exclude_id: Optional[UUID] = None) -> None:
    queryset = BankAccount.objects.filter(account_number=account_number)
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise DuplicateAccountNumberError(f"Account number already exists: {account_number}")


@transaction.atomic
def create_bank_account(
    *,
    account_number: str,
    account_name: str,
    account_type: str = AccountType.CURRENT,
    sort_code: str = '',
    opening_balance: Decimal = Decimal('0.00'),
    current_balance: Optional[Decimal] = None,
    admin=None
) -> BankAccount:
    """
    Create a bank account.

    Args:
        account_number: Unique account number
        account_name: Display name
        account_type: CURRENT, SAVINGS or CASH
        sort_code: Bank sort code
        opening_balance: Balance when the account was taken on (>= 0)
        current_balance: Defaults to the opening balance
        admin: Managing admin

    Raises:
        DuplicateAccountNumberError: If the number is taken
        InvalidTransactionAmountError: If the opening balance is negative
    """
    if opening_balance < 0:
        raise InvalidTransactionAmountError("Opening balance cannot be negative")

    _check_account_number(account_number)

    account = BankAccount.objects.create(
        account_number=account_number,
        account_name=account_name,
        account_type=account_type,
        sort_code=sort_code,
        opening_balance=opening_balance,
        current_balance=opening_balance if current_balance is None else current_balance,
        admin=admin,
    )

    logger.info("Created bank account %s (%s)", account.account_number, account.account_type)
    return account


@transaction.atomic
def update_bank_account(*, account_id: UUID, **fields) -> BankAccount:
    """
    Update descriptive fields of a bank account.

    Balances are not editable here.

    Raises:
        BankAccountNotFoundError: If account doesn't exist
        DuplicateAccountNumberError: If the new number is taken
    """
    account = get_bank_account_by_id(account_id=account_id)

    account_number = fields.get('account_number')
    if account_number and account_number != account.account_number:
        _check_account_number(account_number, exclude_id=account.id)
        account.account_number = account_number

    for name in UPDATABLE_FIELDS:
        if name in fields:
            setattr(account, name, fields[name])

    account.save()
    return account


def set_bank_account_active(*, account_id: UUID, is_active: bool) -> BankAccount:
    """Activate or deactivate a bank account."""
    account = get_bank_account_by_id(account_id=account_id)
    account.is_active = is_active
    account.save(update_fields=['is_active', 'updated_at'])

    logger.info("Bank account %s %s", account.account_number, 'activated' if is_active else 'deactivated')
    return account


@transaction.atomic
def delete_bank_account(*, account_id: UUID) -> None:
    """
    Delete a bank account without transactions.

    Raises:
        BankAccountNotFoundError: If account doesn't exist
        BankAccountStateError: If transactions are recorded on it
    """
    account = get_bank_account_by_id(account_id=account_id)

    if account.transactions.exists():
        logger.warning("Refused to delete bank account %s with transactions", account.account_number)
        raise BankAccountStateError(
            "Cannot delete bank account with transactions. Consider deactivating instead."
        )

    number = account.account_number
    account.delete()
    logger.info("Deleted bank account %s", number)


def search_bank_accounts(
    *,
    account_type: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None
) -> QuerySet[BankAccount]:
    """
    Search and filter bank accounts.

    Args:
        account_type: Filter by type
        is_active: Filter by active flag
        search: Case-insensitive match on name, number and sort code
    """
    queryset = BankAccount.objects.select_related('admin')

    if account_type:
        queryset = queryset.filter(account_type=account_type)

    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)

    if search:
        queryset = queryset.filter(
            Q(account_name__icontains=search) |
            Q(account_number__icontains=search) |
            Q(sort_code__icontains=search)
        )

    return queryset


def get_account_balances() -> dict:
    """
    Total current balance of active accounts, overall and per type.

    Returns:
        Dictionary with total_balance and by_type ({type: balance}, every
        type present, zero when it has no active account)
    """
    money = DecimalField(max_digits=19, decimal_places=2)
    active = BankAccount.objects.filter(is_active=True)

    by_type = {account_type: Decimal('0.00') for account_type in AccountType.values}
    for row in active.values('account_type').annotate(balance=Sum('current_balance', output_field=money)):
        by_type[row['account_type']] = row['balance']

    total = active.aggregate(total=Sum('current_balance', output_field=money))['total']
    return {
        'total_balance': total or Decimal('0.00'),
        'by_type': by_type,
    }
