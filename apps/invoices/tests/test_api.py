import pytest
from datetime import date, timedelta
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.invoices.models import Invoice, InvoiceStatus


# =============================================================================
# Invoice CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestInvoiceCrud:
    """Tests for /api/invoices/"""

    def test_requires_auth(self, api_client):
        response = api_client.get(reverse('invoices:invoice-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_invoices(self, authenticated_client, invoice, paid_invoice):
        response = authenticated_client.get(reverse('invoices:invoice-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2

    def test_list_filter_by_status(self, authenticated_client, invoice, paid_invoice):
        response = authenticated_client.get(reverse('invoices:invoice-list'), {'status': 'PAID'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['invoice_number'] == paid_invoice.invoice_number

    def test_list_filter_by_user(self, authenticated_client, invoice, paid_invoice, client_user):
        response = authenticated_client.get(
            reverse('invoices:invoice-list'),
            {'user': str(client_user.id)}
        )

        assert response.data['count'] == 1
        assert response.data['results'][0]['user_detail']['email'] == client_user.email

    def test_list_invalid_date_range(self, authenticated_client):
        response = authenticated_client.get(
            reverse('invoices:invoice-list'),
            {'date_from': '2024-05-01', 'date_to': '2024-04-01'}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve_invoice_with_items(self, authenticated_client, invoice_with_items):
        url = reverse('invoices:invoice-detail', args=[invoice_with_items.id])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_amount'] == '56.40'
        assert response.data['outstanding_amount'] == '56.40'
        consulting = response.data['items'][0]
        assert consulting['sub_total'] == '30.00'
        assert consulting['discount_amount'] == '3.00'
        assert consulting['net_amount'] == '27.00'
        assert consulting['item_vat_amount'] == '5.40'
        assert consulting['line_total'] == '32.40'

    def test_create_invoice_with_items(self, authenticated_client, client_user):
        data = {
            'user': str(client_user.id),
            'invoice_date': '2024-06-01',
            'due_date': '2024-06-30',
            'items': [
                {'description': 'Audit', 'quantity': 2, 'unit_price': '100.00', 'vat_rate_percent': '20'},
            ],
        }
        response = authenticated_client.post(reverse('invoices:invoice-list'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['invoice_number'] == 'INV-2024-000001'
        assert response.data['invoice_amount'] == '200.00'
        assert response.data['vat_amount'] == '40.00'
        assert response.data['status'] == InvoiceStatus.OPEN
        assert len(response.data['items']) == 1

    def test_item_breakdown_rounds_like_invoice_totals(self, authenticated_client, client_user):
        data = {
            'user': str(client_user.id),
            'invoice_date': '2024-06-01',
            'items': [
                {'description': 'Stamp', 'quantity': 1, 'unit_price': '0.05', 'vat_rate_percent': '50'},
            ],
        }
        response = authenticated_client.post(reverse('invoices:invoice-list'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        item = response.data['items'][0]
        assert response.data['vat_amount'] == '0.03'
        assert item['item_vat_amount'] == '0.03'
        assert item['net_amount'] == '0.05'
        assert item['line_total'] == '0.08'

    def test_create_invoice_duplicate_number(self, authenticated_client, client_user, invoice):
        data = {
            'user': str(client_user.id),
            'invoice_number': invoice.invoice_number,
            'invoice_date': '2024-06-01',
            'invoice_amount': '10.00',
        }
        response = authenticated_client.post(reverse('invoices:invoice-list'), data, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'error' in response.data

    def test_create_invoice_due_before_issue(self, authenticated_client, client_user):
        data = {
            'user': str(client_user.id),
            'invoice_date': '2024-06-01',
            'due_date': '2024-05-01',
        }
        response = authenticated_client.post(reverse('invoices:invoice-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'due_date' in response.data

    def test_create_invoice_invalid_item(self, authenticated_client, client_user):
        data = {
            'user': str(client_user.id),
            'invoice_date': '2024-06-01',
            'items': [{'description': 'Free', 'quantity': 0, 'unit_price': '1.00'}],
        }
        response = authenticated_client.post(reverse('invoices:invoice-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Invoice.objects.exists()

    def test_partial_update(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-detail', args=[invoice.id])
        response = authenticated_client.patch(url, {'invoice_note': 'March retainer'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invoice_note'] == 'March retainer'
        assert response.data['status'] == InvoiceStatus.OPEN

    def test_update_cannot_touch_paid_amount(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-detail', args=[invoice.id])
        response = authenticated_client.patch(url, {'invoice_paid_amount': '120.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invoice_paid_amount'] == '0.00'

    def test_update_keeps_items_and_their_totals(self, authenticated_client, invoice_with_items):
        url = reverse('invoices:invoice-detail', args=[invoice_with_items.id])
        response = authenticated_client.patch(
            url,
            {
                'invoice_note': 'Reissued',
                'invoice_amount': '999.00',
                'items': [{'description': 'Other', 'quantity': 1, 'unit_price': '1.00'}],
            },
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invoice_note'] == 'Reissued'
        assert response.data['invoice_amount'] == '47.00'
        assert [item['description'] for item in response.data['items']] == [
            'Consulting hour', 'Printer paper',
        ]
        assert invoice_with_items.items.count() == 2

    def test_update_duplicate_number(self, authenticated_client, invoice, paid_invoice):
        url = reverse('invoices:invoice-detail', args=[invoice.id])
        response = authenticated_client.patch(
            url, {'invoice_number': paid_invoice.invoice_number}, format='json'
        )
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_delete_invoice(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-detail', args=[invoice.id])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Invoice.objects.filter(id=invoice.id).exists()

    def test_delete_paid_invoice_conflict(self, authenticated_client, paid_invoice):
        url = reverse('invoices:invoice-detail', args=[paid_invoice.id])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert Invoice.objects.filter(id=paid_invoice.id).exists()


# =============================================================================
# Payment & Lifecycle Tests
# =============================================================================

@pytest.mark.django_db
class TestInvoicePayments:
    """Tests for payments and cancellation endpoints."""

    def test_partial_payment(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-payments', args=[invoice.id])
        response = authenticated_client.post(url, {'amount': '50.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invoice_paid_amount'] == '50.00'
        assert response.data['outstanding_amount'] == '70.00'
        assert response.data['status'] == InvoiceStatus.PARTIAL_PAID

    def test_full_payment(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-payments', args=[invoice.id])
        response = authenticated_client.post(url, {'amount': '120.00'}, format='json')

        assert response.data['status'] == InvoiceStatus.PAID

    def test_overpayment(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-payments', args=[invoice.id])
        response = authenticated_client.post(url, {'amount': '120.01'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        invoice.refresh_from_db()
        assert invoice.invoice_paid_amount == Decimal('0.00')

    def test_zero_payment(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-payments', args=[invoice.id])
        response = authenticated_client.post(url, {'amount': '0'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_payment_missing_amount(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-payments', args=[invoice.id])
        response = authenticated_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'amount' in response.data

    def test_cancel_then_pay(self, authenticated_client, invoice):
        response = authenticated_client.post(reverse('invoices:invoice-cancel', args=[invoice.id]))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == InvoiceStatus.CANCELLED

        url = reverse('invoices:invoice-payments', args=[invoice.id])
        response = authenticated_client.post(url, {'amount': '10.00'}, format='json')
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_payment_unknown_invoice(self, authenticated_client):
        url = reverse('invoices:invoice-payments', args=['00000000-0000-0000-0000-000000000000'])
        response = authenticated_client.post(url, {'amount': '10.00'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Item Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestInvoiceItems:
    """Tests for /api/invoices/{id}/items/"""

    def test_add_item(self, authenticated_client, invoice_with_items):
        url = reverse('invoices:invoice-items', args=[invoice_with_items.id])
        data = {'description': 'Courier', 'quantity': 1, 'unit_price': '8.00', 'vat_rate_percent': '20'}
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['invoice_amount'] == '55.00'
        assert response.data['vat_amount'] == '11.00'
        assert len(response.data['items']) == 3

    def test_add_item_negative_price(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-items', args=[invoice.id])
        data = {'description': 'Refund', 'quantity': 1, 'unit_price': '-8.00'}
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_remove_item(self, authenticated_client, invoice_with_items):
        item = invoice_with_items.items.get(description='Consulting hour')
        url = reverse('invoices:invoice-remove-item', args=[invoice_with_items.id, item.id])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invoice_amount'] == '20.00'
        assert response.data['vat_amount'] == '4.00'

    def test_remove_unknown_item(self, authenticated_client, invoice_with_items):
        url = reverse('invoices:invoice-remove-item', args=[invoice_with_items.id, 999999])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Listing & Report Tests
# =============================================================================

@pytest.mark.django_db
class TestInvoiceReports:
    """Tests for lookup, listing and statistics actions."""

    def test_by_number(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-by-number', args=[invoice.invoice_number])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(invoice.id)

    def test_by_number_not_found(self, authenticated_client):
        url = reverse('invoices:invoice-by-number', args=['INV-1999-000001'])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_next_number(self, authenticated_client, invoice):
        response = authenticated_client.get(reverse('invoices:invoice-next-number'))

        assert response.data['invoice_number'] == f'INV-{date.today().year}-000002'

    def test_next_number_matches_back_dated_create(self, authenticated_client, invoice, client_user):
        preview = authenticated_client.get(
            reverse('invoices:invoice-next-number'), {'invoice_date': '2021-03-15'}
        )
        assert preview.data['invoice_number'] == 'INV-2021-000002'

        response = authenticated_client.post(
            reverse('invoices:invoice-list'),
            {'user': str(client_user.id), 'invoice_date': '2021-03-15', 'invoice_amount': '10.00'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['invoice_number'] == preview.data['invoice_number']

    def test_next_number_invalid_date(self, authenticated_client):
        response = authenticated_client.get(
            reverse('invoices:invoice-next-number'), {'invoice_date': 'soon'}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_overdue(self, authenticated_client, invoice, overdue_invoice, paid_invoice):
        response = authenticated_client.get(reverse('invoices:invoice-overdue'))

        assert [row['invoice_number'] for row in response.data] == [overdue_invoice.invoice_number]

    def test_outstanding(self, authenticated_client, invoice, overdue_invoice, paid_invoice):
        response = authenticated_client.get(reverse('invoices:invoice-outstanding'))

        numbers = {row['invoice_number'] for row in response.data}
        assert numbers == {invoice.invoice_number, overdue_invoice.invoice_number}

    def test_recent_with_limit(self, authenticated_client, invoice, overdue_invoice, paid_invoice):
        response = authenticated_client.get(reverse('invoices:invoice-recent'), {'limit': 1})

        assert len(response.data) == 1
        assert response.data[0]['invoice_number'] == paid_invoice.invoice_number

    def test_due_within(self, authenticated_client, invoice, invoice_with_items):
        response = authenticated_client.get(reverse('invoices:invoice-due-within'), {'days': 20})

        assert [row['invoice_number'] for row in response.data] == [invoice_with_items.invoice_number]

    def test_statistics(self, authenticated_client, invoice, overdue_invoice, paid_invoice):
        today = date.today()
        response = authenticated_client.get(
            reverse('invoices:invoice-statistics'),
            {'date_from': (today - timedelta(days=7)).isoformat(), 'date_to': today.isoformat()}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_invoices'] == 3
        assert response.data['open_invoices'] == 2
        assert response.data['paid_invoices'] == 1
        assert response.data['total_outstanding'] == '170.00'
        assert response.data['total_invoiced'] == '200.00'

    def test_statistics_without_range(self, authenticated_client, invoice):
        response = authenticated_client.get(reverse('invoices:invoice-statistics'))

        assert response.data['total_invoiced'] is None

    def test_top_clients(self, authenticated_client, invoice, paid_invoice, client_user):
        today = date.today()
        response = authenticated_client.get(
            reverse('invoices:invoice-top-clients'),
            {'date_from': (today - timedelta(days=30)).isoformat(), 'date_to': today.isoformat(), 'limit': 1}
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['user']['email'] == client_user.email
        assert response.data[0]['total_amount'] == '120.00'

    def test_top_clients_requires_range(self, authenticated_client):
        response = authenticated_client.get(reverse('invoices:invoice-top-clients'))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
