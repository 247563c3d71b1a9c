import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserType
from apps.banking.models import BankAccount, AccountType, TransactionType, ExpenseType
from apps.banking.services import record_transaction


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        first_name='Ada',
        last_name='Admin',
        user_type=UserType.ADMIN,
    )


@pytest.fixture
def supplier_user(db):
    return User.objects.create_user(
        email='supplier@example.com',
        first_name='Sam',
        last_name='Supplier',
        company_name='Paper Supplies',
        user_type=UserType.SUPPLIER,
    )


@pytest.fixture
def authenticated_client(api_client, admin_user):
    """Return an API client authenticated as the admin."""
    refresh = RefreshToken.for_user(admin_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def current_account(db, admin_user):
    """Current account opened with 1000.00."""
    return BankAccount.objects.create(
        account_number='12345678',
        sort_code='20-00-00',
        account_name='Main current',
        account_type=AccountType.CURRENT,
        opening_balance=Decimal('1000.00'),
        current_balance=Decimal('1000.00'),
        admin=admin_user,
    )


@pytest.fixture
def savings_account(db):
    return BankAccount.objects.create(
        account_number='87654321',
        account_name='Reserve savings',
        account_type=AccountType.SAVINGS,
        opening_balance=Decimal('500.00'),
        current_balance=Decimal('500.00'),
    )


@pytest.fixture
def inactive_account(db):
    return BankAccount.objects.create(
        account_number='00000001',
        account_name='Old petty cash',
        account_type=AccountType.CASH,
        current_balance=Decimal('25.00'),
        is_active=False,
    )


@pytest.fixture
def ledger_entries(current_account, supplier_user):
    """
    Mixed transactions on the current account across two months.

    Balance: 1000 + 300 - 120 - 5 - 200 + 50 = 1025.00
    """
    return [
        record_transaction(
            bank_account_id=current_account.id,
            transaction_type=TransactionType.RECEIVE,
            transaction_amount=Decimal('300.00'),
            transaction_date=date(2024, 1, 10),
            reference_number='CLIENT-PAY-1',
        ),
        record_transaction(
            bank_account_id=current_account.id,
            transaction_type=TransactionType.PAYMENT,
            transaction_amount=Decimal('120.00'),
            transaction_date=date(2024, 1, 15),
            user=supplier_user,
            expense_type=ExpenseType.OFFICE_SUPPLIES,
            notes='Printer paper',
        ),
        record_transaction(
            bank_account_id=current_account.id,
            transaction_type=TransactionType.FEE,
            transaction_amount=Decimal('5.00'),
            transaction_date=date(2024, 2, 1),
        ),
        record_transaction(
            bank_account_id=current_account.id,
            transaction_type=TransactionType.TRANSFER,
            transaction_amount=Decimal('200.00'),
            transaction_date=date(2024, 2, 3),
            notes='To savings',
        ),
        record_transaction(
            bank_account_id=current_account.id,
            transaction_type=TransactionType.DEPOSIT,
            transaction_amount=Decimal('50.00'),
            transaction_date=date(2024, 2, 20),
        ),
    ]
