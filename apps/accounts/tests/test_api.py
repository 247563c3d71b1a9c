import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User, UserType


# =============================================================================
# Authentication Tests
# =============================================================================

@pytest.mark.django_db
class TestAuthentication:
    """Tests for JWT token endpoints and anonymous access."""

    def test_obtain_token(self, api_client, client_user):
        url = reverse('token_obtain_pair')
        response = api_client.post(url, {'email': client_user.email, 'password': 'ClientPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data
        assert 'refresh' in response.data

    def test_obtain_token_wrong_password(self, api_client, client_user):
        url = reverse('token_obtain_pair')
        response = api_client.post(url, {'email': client_user.email, 'password': 'nope'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_requires_auth(self, api_client):
        response = api_client.get(reverse('accounts:user-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# User CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestUserCrud:
    """Tests for /api/users/"""

    def test_list_users(self, admin_client, client_user, supplier_user):
        response = admin_client.get(reverse('accounts:user-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3

    def test_list_filter_by_type(self, admin_client, client_user, supplier_user):
        response = admin_client.get(reverse('accounts:user-list'), {'user_type': 'SUPPLIER'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['email'] == supplier_user.email

    def test_list_filter_by_active_flag(self, admin_client, client_user, inactive_client):
        response = admin_client.get(reverse('accounts:user-list'), {'is_active': 'false'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['email'] == inactive_client.email

    def test_list_invalid_type(self, admin_client):
        response = admin_client.get(reverse('accounts:user-list'), {'user_type': 'PARTNER'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_user_as_admin(self, admin_client, admin_user):
        data = {
            'email': 'fresh@example.com',
            'first_name': 'Fresh',
            'last_name': 'Client',
            'user_type': 'CLIENT',
            'admin': str(admin_user.id),
        }
        response = admin_client.post(reverse('accounts:user-list'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['email'] == 'fresh@example.com'
        assert response.data['full_name'] == 'Fresh Client'
        assert 'password' not in response.data
        assert User.objects.filter(email='fresh@example.com').exists()

    def test_create_user_duplicate_email(self, admin_client, client_user):
        data = {
            'email': client_user.email,
            'first_name': 'Dup',
            'last_name': 'Licate',
        }
        response = admin_client.post(reverse('accounts:user-list'), data, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'error' in response.data

    def test_create_user_requires_admin(self, authenticated_client):
        data = {'email': 'x@example.com', 'first_name': 'X', 'last_name': 'Y'}
        response = authenticated_client.post(reverse('accounts:user-list'), data, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_retrieve_user(self, authenticated_client, supplier_user):
        url = reverse('accounts:user-detail', args=[supplier_user.id])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['company_name'] == 'Paper Supplies'

    def test_update_self(self, authenticated_client, client_user):
        url = reverse('accounts:user-detail', args=[client_user.id])
        response = authenticated_client.patch(url, {'mobile': '777123'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        client_user.refresh_from_db()
        assert client_user.mobile == '777123'

    def test_client_cannot_change_own_user_type(self, authenticated_client, client_user, supplier_user):
        url = reverse('accounts:user-detail', args=[client_user.id])
        response = authenticated_client.patch(
            url, {'user_type': 'ADMIN', 'admin': None, 'mobile': '777124'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user_type'] == 'CLIENT'
        client_user.refresh_from_db()
        assert client_user.user_type == 'CLIENT'
        assert client_user.admin_id is not None
        assert client_user.mobile == '777124'

        delete_url = reverse('accounts:user-detail', args=[supplier_user.id])
        assert authenticated_client.delete(delete_url).status_code == status.HTTP_403_FORBIDDEN

    def test_admin_can_change_user_type(self, admin_client, client_user):
        url = reverse('accounts:user-detail', args=[client_user.id])
        response = admin_client.patch(url, {'user_type': 'SUPPLIER'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        client_user.refresh_from_db()
        assert client_user.user_type == 'SUPPLIER'

    def test_update_other_user_forbidden(self, authenticated_client, supplier_user):
        url = reverse('accounts:user-detail', args=[supplier_user.id])
        response = authenticated_client.patch(url, {'mobile': '1'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_update_email_conflict(self, admin_client, client_user, supplier_user):
        url = reverse('accounts:user-detail', args=[client_user.id])
        response = admin_client.patch(url, {'email': supplier_user.email}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_delete_user(self, admin_client, supplier_user):
        url = reverse('accounts:user-detail', args=[supplier_user.id])
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not User.objects.filter(id=supplier_user.id).exists()


# =============================================================================
# User Action Tests
# =============================================================================

@pytest.mark.django_db
class TestUserActions:
    """Tests for custom user actions."""

    def test_deactivate_and_activate(self, admin_client, client_user):
        url = reverse('accounts:user-deactivate', args=[client_user.id])
        response = admin_client.patch(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_active'] is False

        url = reverse('accounts:user-activate', args=[client_user.id])
        response = admin_client.patch(url)

        assert response.data['is_active'] is True

    def test_change_password(self, authenticated_client, client_user):
        url = reverse('accounts:user-change-password', args=[client_user.id])
        data = {'new_password': 'N3wSecret!99', 'new_password_confirm': 'N3wSecret!99'}
        response = authenticated_client.patch(url, data, format='json')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        client_user.refresh_from_db()
        assert client_user.check_password('N3wSecret!99')

    def test_change_password_mismatch(self, authenticated_client, client_user):
        url = reverse('accounts:user-change-password', args=[client_user.id])
        data = {'new_password': 'N3wSecret!99', 'new_password_confirm': 'Different!99'}
        response = authenticated_client.patch(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'new_password_confirm' in response.data

    def test_verify_password(self, authenticated_client, client_user):
        url = reverse('accounts:user-verify-password', args=[client_user.id])

        response = authenticated_client.post(url, {'password': 'ClientPass123!'}, format='json')
        assert response.data == {'valid': True}

        response = authenticated_client.post(url, {'password': 'wrong'}, format='json')
        assert response.data == {'valid': False}

    def test_clients_and_suppliers(self, authenticated_client, client_user, supplier_user, inactive_client):
        response = authenticated_client.get(reverse('accounts:user-clients'))
        assert [u['email'] for u in response.data] == [client_user.email]

        response = authenticated_client.get(reverse('accounts:user-suppliers'))
        assert [u['email'] for u in response.data] == [supplier_user.email]

    def test_outstanding_amount(self, authenticated_client, client_user):
        url = reverse('accounts:user-outstanding', args=[client_user.id])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['outstanding_amount'] == '0.00'

    def test_statistics(self, authenticated_client, client_user, supplier_user):
        response = authenticated_client.get(reverse('accounts:user-statistics'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_users'] == 3
        assert response.data['total_clients'] == 1
        assert response.data['total_suppliers'] == 1
        assert response.data['total_admins'] == 1
