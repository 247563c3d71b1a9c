"""Services for banking business logic."""

from .exceptions import (
    BankingServiceError,
    BankAccountNotFoundError,
    TransactionNotFoundError,
    DuplicateAccountNumberError,
    BankAccountStateError,
    TransactionStateError,
    InvalidTransactionAmountError,
)
from .bank_accounts import (
    get_bank_account_by_id,
    create_bank_account,
    update_bank_account,
    set_bank_account_active,
    delete_bank_account,
    search_bank_accounts,
    get_account_balances,
)
from .transactions import (
    get_transaction_by_id,
    record_transaction,
    update_transaction,
    delete_transaction,
    reconcile_transaction,
    search_transactions,
    get_unreconciled_transactions,
    get_recent_transactions,
)
from .cash_flow import get_cash_flow_summary

__all__ = [
    # Exceptions
    'BankingServiceError',
    'BankAccountNotFoundError',
    'TransactionNotFoundError',
    'DuplicateAccountNumberError',
    'BankAccountStateError',
    'TransactionStateError',
    'InvalidTransactionAmountError',
    # Bank accounts
    'get_bank_account_by_id',
    'create_bank_account',
    'update_bank_account',
    'set_bank_account_active',
    'delete_bank_account',
    'search_bank_accounts',
    'get_account_balances',
    # Transactions
    'get_transaction_by_id',
    'record_transaction',
    'update_transaction',
    'delete_transaction',
    'reconcile_transaction',
    'search_transactions',
    'get_unreconciled_transactions',
    'get_recent_transactions',
    # Reports
    'get_cash_flow_summary',
]
