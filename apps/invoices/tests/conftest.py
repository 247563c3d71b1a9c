import pytest
from datetime import date, timedelta
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserType
from apps.invoices.models import Invoice, InvoiceItem, InvoiceStatus


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
def client_user(db, admin_user):
    """Create and return a client."""
    return User.objects.create_user(
        email='client@example.com',
        first_name='Carl',
        last_name='Client',
        company_name='Client Ltd',
        user_type=UserType.CLIENT,
        admin=admin_user,
    )


@pytest.fixture
def other_client(db):
    return User.objects.create_user(
        email='other@example.com',
        first_name='Olga',
        last_name='Other',
        company_name='Acme Trading',
        user_type=UserType.CLIENT,
    )


@pytest.fixture
def authenticated_client(api_client, admin_user):
    """Return an API client authenticated as the admin."""
    refresh = RefreshToken.for_user(admin_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def invoice(db, client_user, admin_user):
    """OPEN invoice without items: 100.00 net + 20.00 VAT, due in 30 days."""
    return Invoice.objects.create(
        invoice_number='INV-2024-000001',
        invoice_date=date.today(),
        due_date=date.today() + timedelta(days=30),
        invoice_amount=Decimal('100.00'),
        vat_amount=Decimal('20.00'),
        user=client_user,
        admin=admin_user,
    )


@pytest.fixture
def invoice_with_items(db, client_user):
    """Invoice with two items; totals match the items."""
    invoice = Invoice.objects.create(
        invoice_number='INV-2024-000002',
        invoice_date=date.today(),
        due_date=date.today() + timedelta(days=14),
        invoice_amount=Decimal('47.00'),
        vat_amount=Decimal('9.40'),
        user=client_user,
    )
    # 3 x 10.00 -10% = 27.00 net, 5.40 VAT
    InvoiceItem.objects.create(
        invoice=invoice,
        description='Consulting hour',
        quantity=3,
        unit_price=Decimal('10.00'),
        discount_percent=Decimal('10'),
        vat_rate_percent=Decimal('20'),
    )
    # 2 x 10.00 = 20.00 net, 4.00 VAT
    InvoiceItem.objects.create(
        invoice=invoice,
        description='Printer paper',
        quantity=2,
        unit_price=Decimal('10.00'),
        vat_rate_percent=Decimal('20'),
    )
    return invoice


@pytest.fixture
def overdue_invoice(db, client_user):
    """Unpaid invoice whose due date passed 10 days ago (status not yet refreshed)."""
    return Invoice.objects.create(
        invoice_number='INV-2024-000003',
        invoice_date=date.today() - timedelta(days=40),
        due_date=date.today() - timedelta(days=10),
        invoice_amount=Decimal('50.00'),
        user=client_user,
    )


@pytest.fixture
def paid_invoice(db, other_client):
    return Invoice.objects.create(
        invoice_number='INV-2024-000004',
        invoice_date=date.today() - timedelta(days=5),
        due_date=date.today() - timedelta(days=1),
        invoice_amount=Decimal('80.00'),
        invoice_paid_amount=Decimal('80.00'),
        status=InvoiceStatus.PAID,
        user=other_client,
    )
