"""
Transaction service.

Records money movements on bank accounts. Every balance change happens
with the account row locked, so concurrent postings apply in sequence
and each transaction stores the balance it left behind.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.invoices.ledger import quantize_money
from apps.banking.models import BankAccount, Transaction
from .exceptions import (
    BankAccountNotFoundError,
    BankAccountStateError,
    TransactionNotFoundError,
    TransactionStateError,
    InvalidTransactionAmountError,
)

logger = logging.getLogger(__name__)

# Descriptive fields a transaction update may change
UPDATABLE_FIELDS = (
    'notes',
    'reference_number',
    'expense_type',
)


def _lock_account(account_id: UUID) -> BankAccount:
    try:
        return BankAccount.objects.select_for_update().get(id=account_id)
    except BankAccount.DoesNotExist:
        raise BankAccountNotFoundError(f"Bank account not found with id: {account_id}")


def get_transaction_by_id(*, transaction_id: UUID) -> Transaction:
    """
    Get transaction by ID.

    Raises:
        TransactionNotFoundError: If transaction doesn't exist
    """
    try:
        return (
            Transaction.objects
            .select_related('bank_account', 'user', 'invoice', 'admin')
            .get(id=transaction_id)
        )
    except Transaction.DoesNotExist:
        raise TransactionNotFoundError(f"Transaction not found with id: {transaction_id}")


@transaction.atomic
def record_transaction(
    *,
    bank_account_id: UUID,
    transaction_type: str,
    transaction_amount: Decimal,
    transaction_date: Optional[date] = None,
    user=None,
    invoice=None,
    admin=None,
    expense_type: str = '',
    reference_number: str = '',
    notes: str = ''
) -> Transaction:
    """
    Record a transaction and move the account balance.

    Credit types (RECEIVE, DEPOSIT, INTEREST) add to the balance, all other
    types subtract. Linking an invoice does not post a payment on it.

    Args:
        bank_account_id: Account the money moves on
        transaction_type: One of TransactionType
        transaction_amount: Amount (> 0)
        transaction_date: Value date (default: today)
        user: Counterparty
        invoice: Related invoice
        admin: Recording admin
        expense_type: Expense category for outgoing payments
        reference_number: Bank or cheque reference
        notes: Free text

    Returns:
        Created Transaction with ending_balance set

    Raises:
        BankAccountNotFoundError: If the account doesn't exist
        BankAccountStateError: If the account is inactive
        InvalidTransactionAmountError: If amount <= 0
    """
    if transaction_amount is None or transaction_amount <= 0:
        logger.warning("Rejected transaction with amount %s", transaction_amount)
        raise InvalidTransactionAmountError("Transaction amount must be positive")

    account = _lock_account(bank_account_id)
    if not account.is_active:
        raise BankAccountStateError(f"Bank account {account.account_number} is inactive")

    txn = Transaction(
        bank_account=account,
        transaction_type=transaction_type,
        transaction_amount=quantize_money(transaction_amount),
        transaction_date=transaction_date or date.today(),
        user=user,
        invoice=invoice,
        admin=admin,
        expense_type=expense_type,
        reference_number=reference_number,
        notes=notes,
    )

    account.current_balance += txn.signed_amount
    account.save(update_fields=['current_balance', 'updated_at'])

    txn.ending_balance = account.current_balance
    txn.save()

    logger.info(
        "Recorded %s of %s on account %s (balance %s)",
        txn.transaction_type, txn.transaction_amount,
        account.account_number, account.current_balance
    )
    return txn


@transaction.atomic
def update_transaction(*, transaction_id: UUID, **fields) -> Transaction:
    """
    Update descriptive fields (notes, reference number, expense type).

    Amount, type and account are fixed once recorded; delete and re-record
    to change them.
    """
    txn = get_transaction_by_id(transaction_id=transaction_id)

    for name in UPDATABLE_FIELDS:
        if name in fields:
            setattr(txn, name, fields[name])

    txn.save()
    return txn


@transaction.atomic
def delete_transaction(*, transaction_id: UUID) -> None:
    """
    Delete a transaction and reverse its effect on the account balance.

    Ending balances of later transactions are left as recorded.

    Raises:
        TransactionNotFoundError: If transaction doesn't exist
    """
    txn = get_transaction_by_id(transaction_id=transaction_id)
    account = _lock_account(txn.bank_account_id)

    account.current_balance -= txn.signed_amount
    account.save(update_fields=['current_balance', 'updated_at'])
    txn.delete()

    logger.info(
        "Deleted %s of %s on account %s (balance %s)",
        txn.transaction_type, txn.transaction_amount,
        account.account_number, account.current_balance
    )


@transaction.atomic
def reconcile_transaction(*, transaction_id: UUID) -> Transaction:
    """
    Mark a transaction as matched against the bank statement.

    Raises:
        TransactionNotFoundError: If transaction doesn't exist
        TransactionStateError: If it is already reconciled
    """
    try:
        txn = Transaction.objects.select_for_update().get(id=transaction_id)
    except Transaction.DoesNotExist:
        raise TransactionNotFoundError(f"Transaction not found with id: {transaction_id}")

    if txn.is_reconciled:
        raise TransactionStateError("Transaction is already reconciled")

    txn.is_reconciled = True
    txn.reconciled_at = timezone.now()
    txn.save(update_fields=['is_reconciled', 'reconciled_at', 'updated_at'])
    return txn


def search_transactions(
    *,
    bank_account_id: Optional[UUID] = None,
    user_id: Optional[UUID] = None,
    admin_id: Optional[UUID] = None,
    transaction_type: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    is_reconciled: Optional[bool] = None,
    search: Optional[str] = None
) -> QuerySet[Transaction]:
    """
    Search and filter transactions, newest first.

    Args:
        bank_account_id: Filter by account
        user_id: Filter by counterparty
        admin_id: Filter by recording admin
        transaction_type: Filter by type
        date_from: Transaction date on or after
        date_to: Transaction date on or before
        is_reconciled: Filter by reconciliation flag
        search: Case-insensitive match on notes and reference number
    """
    queryset = Transaction.objects.select_related('bank_account', 'user', 'invoice', 'admin')

    if bank_account_id:
        queryset = queryset.filter(bank_account_id=bank_account_id)

    if user_id:
        queryset = queryset.filter(user_id=user_id)

    if admin_id:
        queryset = queryset.filter(admin_id=admin_id)

    if transaction_type:
        queryset = queryset.filter(transaction_type=transaction_type)

    if date_from:
        queryset = queryset.filter(transaction_date__gte=date_from)

    if date_to:
        queryset = queryset.filter(transaction_date__lte=date_to)

    if is_reconciled is not None:
        queryset = queryset.filter(is_reconciled=is_reconciled)

    if search:
        queryset = queryset.filter(
            Q(notes__icontains=search) |
            Q(reference_number__icontains=search)
        )

    return queryset


def get_unreconciled_transactions() -> QuerySet[Transaction]:
    return search_transactions(is_reconciled=False)


def get_recent_transactions(*, limit: Optional[int] = None) -> QuerySet[Transaction]:
    """Most recently recorded transactions."""
    limit = limit or settings.RECENT_RECORDS_LIMIT
    return (
        Transaction.objects
        .select_related('bank_account', 'user', 'invoice', 'admin')
        .order_by('-created_at')[:limit]
    )
