import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserType


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create and return a bookkeeping admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        first_name='Ada',
        last_name='Admin',
        user_type=UserType.ADMIN,
    )


@pytest.fixture
def client_user(db, admin_user):
    """Create and return a client managed by the admin."""
    return User.objects.create_user(
        email='client@example.com',
        password='ClientPass123!',
        first_name='Carl',
        last_name='Client',
        company_name='Client Ltd',
        user_type=UserType.CLIENT,
        admin=admin_user,
    )


@pytest.fixture
def supplier_user(db, admin_user):
    """Create and return a supplier without a password."""
    return User.objects.create_user(
        email='supplier@example.com',
        first_name='Sue',
        last_name='Supplier',
        company_name='Paper Supplies',
        user_type=UserType.SUPPLIER,
        admin=admin_user,
    )


@pytest.fixture
def inactive_client(db):
    """Create and return an inactive client."""
    return User.objects.create_user(
        email='inactive@example.com',
        first_name='Ian',
        last_name='Inactive',
        user_type=UserType.CLIENT,
        is_active=False,
    )


def _authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def admin_client(api_client, admin_user):
    """Return an API client authenticated as the admin."""
    return _authenticate(api_client, admin_user)


@pytest.fixture
def authenticated_client(api_client, client_user):
    """Return an API client authenticated as a regular client."""
    return _authenticate(api_client, client_user)
