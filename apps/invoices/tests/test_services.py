"""
Service layer unit tests for invoices app.

Tests cover:
- Invoice creation, numbering and updates
- Payment posting and status derivation
- Item add/remove with total recomputation
- Cancellation and guarded deletion
- Search, statistics and status refresh
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from django.core.management import call_command
from django.test import override_settings

from apps.invoices.models import Invoice, InvoiceItem, InvoiceStatus, InvoiceType
from apps.invoices.services import (
    get_invoice_by_id,
    get_invoice_by_number,
    generate_next_invoice_number,
    create_invoice,
    update_invoice,
    cancel_invoice,
    delete_invoice,
    add_payment,
    add_invoice_item,
    remove_invoice_item,
    search_invoices,
    get_overdue_invoices,
    get_outstanding_invoices,
    get_recent_invoices,
    get_invoices_due_within,
    get_total_outstanding_amount,
    get_invoice_statistics,
    get_top_clients,
    refresh_invoice_statuses,
)
from apps.invoices.exceptions import (
    InvoiceNotFoundError,
    ItemNotFoundError,
    InvalidAmountError,
    ExceedsBalanceError,
    InvoiceStateError,
    DuplicateInvoiceNumberError,
)


# =============================================================================
# Invoice Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestInvoiceManagement:
    """Tests for invoice_management.py service functions."""

    def test_create_invoice_with_amounts(self, client_user):
        invoice = create_invoice(
            user=client_user,
            invoice_number='INV-TEST-1',
            invoice_date=date(2024, 3, 1),
            invoice_amount=Decimal('250.00'),
            vat_amount=Decimal('50.00'),
        )

        assert invoice.status == InvoiceStatus.OPEN
        assert invoice.invoice_paid_amount == Decimal('0.00')
        assert invoice.total_amount == Decimal('300.00')
        assert invoice.invoice_type == InvoiceType.STANDARD

    def test_create_invoice_defaults_to_zero_vat(self, client_user):
        invoice = create_invoice(
            user=client_user,
            invoice_date=date(2024, 3, 1),
            invoice_amount=Decimal('99.00'),
        )
        assert invoice.vat_amount == Decimal('0.00')

    def test_create_invoice_with_items_computes_totals(self, client_user):
        invoice = create_invoice(
            user=client_user,
            invoice_date=date(2024, 3, 1),
            invoice_amount=Decimal('1.00'),
            items=[
                {'description': 'Design', 'quantity': 3, 'unit_price': Decimal('10.00'),
                 'discount_percent': Decimal('10'), 'vat_rate_percent': Decimal('20')},
                {'description': 'Hosting', 'quantity': 1, 'unit_price': Decimal('20.00'),
                 'vat_rate_percent': Decimal('20')},
            ],
        )

        assert invoice.invoice_amount == Decimal('47.00')
        assert invoice.vat_amount == Decimal('9.40')
        assert invoice.items.count() == 2
        assert invoice.items.get(description='Design').line_total == Decimal('32.40')

    def test_create_invoice_generates_number(self, client_user, invoice):
        created = create_invoice(
            user=client_user,
            invoice_date=date(2025, 1, 5),
            invoice_amount=Decimal('10.00'),
        )
        assert created.invoice_number == 'INV-2025-000002'

    def test_create_invoice_duplicate_number(self, client_user, invoice):
        with pytest.raises(DuplicateInvoiceNumberError):
            create_invoice(
                user=client_user,
                invoice_number=invoice.invoice_number,
                invoice_date=date(2024, 3, 1),
                invoice_amount=Decimal('10.00'),
            )

    def test_create_invoice_negative_amount(self, client_user):
        with pytest.raises(InvalidAmountError):
            create_invoice(
                user=client_user,
                invoice_date=date(2024, 3, 1),
                invoice_amount=Decimal('-1.00'),
            )
        assert not Invoice.objects.exists()

    def test_create_invoice_invalid_item(self, client_user):
        with pytest.raises(InvalidAmountError):
            create_invoice(
                user=client_user,
                invoice_date=date(2024, 3, 1),
                items=[{'description': 'Nothing', 'quantity': 0, 'unit_price': Decimal('1.00')}],
            )

    @override_settings(INVOICE_NUMBER_PREFIX='BILL')
    def test_generate_next_invoice_number_uses_prefix(self, invoice):
        assert generate_next_invoice_number(year=2024) == 'BILL-2024-000002'

    def test_get_invoice_not_found(self, db):
        with pytest.raises(InvoiceNotFoundError):
            get_invoice_by_id(invoice_id=uuid4())

    def test_get_invoice_by_number(self, invoice):
        assert get_invoice_by_number(invoice_number='INV-2024-000001') == invoice

        with pytest.raises(InvoiceNotFoundError):
            get_invoice_by_number(invoice_number='NOPE')

    def test_update_invoice_sets_amounts_without_items(self, invoice):
        updated = update_invoice(
            invoice_id=invoice.id,
            invoice_amount=Decimal('200.00'),
            invoice_note='Revised',
        )

        assert updated.invoice_amount == Decimal('200.00')
        assert updated.vat_amount == Decimal('20.00')
        assert updated.invoice_note == 'Revised'

    def test_update_invoice_with_items_keeps_item_totals(self, invoice_with_items):
        updated = update_invoice(invoice_id=invoice_with_items.id, invoice_amount=Decimal('1.00'))

        assert updated.invoice_amount == Decimal('47.00')
        assert updated.vat_amount == Decimal('9.40')

    def test_update_invoice_rederives_status(self, invoice):
        updated = update_invoice(
            invoice_id=invoice.id,
            due_date=date.today() - timedelta(days=1),
        )
        assert updated.status == InvoiceStatus.OVERDUE

    def test_update_cancelled_invoice_stays_cancelled(self, invoice):
        cancel_invoice(invoice_id=invoice.id)

        updated = update_invoice(invoice_id=invoice.id, invoice_note='Still cancelled')

        assert updated.status == InvoiceStatus.CANCELLED

    def test_update_invoice_duplicate_number(self, invoice, overdue_invoice):
        with pytest.raises(DuplicateInvoiceNumberError):
            update_invoice(invoice_id=invoice.id, invoice_number=overdue_invoice.invoice_number)

    def test_cancel_invoice_with_payment(self, invoice):
        add_payment(invoice_id=invoice.id, amount=Decimal('50.00'))

        cancelled = cancel_invoice(invoice_id=invoice.id)

        assert cancelled.status == InvoiceStatus.CANCELLED
        assert cancelled.invoice_paid_amount == Decimal('50.00')

    def test_delete_unpaid_invoice(self, invoice_with_items):
        delete_invoice(invoice_id=invoice_with_items.id)

        assert not Invoice.objects.filter(id=invoice_with_items.id).exists()
        assert not InvoiceItem.objects.exists()

    def test_delete_paid_invoice_refused(self, invoice):
        add_payment(invoice_id=invoice.id, amount=Decimal('0.01'))

        with pytest.raises(InvoiceStateError):
            delete_invoice(invoice_id=invoice.id)

        assert Invoice.objects.filter(id=invoice.id).exists()


# =============================================================================
# Payment Service Tests
# =============================================================================

@pytest.mark.django_db
class TestPayments:
    """Tests for payments.py service functions."""

    def test_partial_then_full_payment(self, invoice):
        invoice = add_payment(invoice_id=invoice.id, amount=Decimal('20.00'))
        assert invoice.status == InvoiceStatus.PARTIAL_PAID
        assert invoice.outstanding_amount == Decimal('100.00')

        invoice = add_payment(invoice_id=invoice.id, amount=Decimal('100.00'))
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.outstanding_amount == Decimal('0.00')

        invoice.refresh_from_db()
        assert invoice.invoice_paid_amount == Decimal('120.00')

    def test_overpayment_rejected(self, invoice):
        with pytest.raises(ExceedsBalanceError):
            add_payment(invoice_id=invoice.id, amount=Decimal('120.01'))

        invoice.refresh_from_db()
        assert invoice.invoice_paid_amount == Decimal('0.00')
        assert invoice.status == InvoiceStatus.OPEN

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5')])
    def test_non_positive_payment(self, invoice, amount):
        with pytest.raises(InvalidAmountError):
            add_payment(invoice_id=invoice.id, amount=amount)

    def test_payment_on_cancelled_invoice(self, invoice):
        cancel_invoice(invoice_id=invoice.id)

        with pytest.raises(InvoiceStateError):
            add_payment(invoice_id=invoice.id, amount=Decimal('10.00'))

    def test_partial_payment_on_overdue_invoice(self, overdue_invoice):
        invoice = add_payment(invoice_id=overdue_invoice.id, amount=Decimal('10.00'))
        assert invoice.status == InvoiceStatus.PARTIAL_PAID

    def test_payment_unknown_invoice(self, db):
        with pytest.raises(InvoiceNotFoundError):
            add_payment(invoice_id=uuid4(), amount=Decimal('1.00'))


# =============================================================================
# Item Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestItemManagement:
    """Tests for item_management.py service functions."""

    def test_add_item_to_empty_invoice_replaces_amounts(self, invoice):
        item = add_invoice_item(
            invoice_id=invoice.id,
            description='Support',
            quantity=2,
            unit_price=Decimal('15.00'),
            vat_rate_percent=Decimal('10'),
        )

        invoice.refresh_from_db()
        assert item.line_total == Decimal('33.00')
        assert invoice.invoice_amount == Decimal('30.00')
        assert invoice.vat_amount == Decimal('3.00')

    def test_add_item_sums_all_items(self, invoice_with_items):
        add_invoice_item(
            invoice_id=invoice_with_items.id,
            description='Toner',
            quantity=1,
            unit_price=Decimal('3.00'),
        )

        invoice_with_items.refresh_from_db()
        assert invoice_with_items.invoice_amount == Decimal('50.00')
        assert invoice_with_items.vat_amount == Decimal('9.40')

    def test_add_invalid_item(self, invoice):
        with pytest.raises(InvalidAmountError):
            add_invoice_item(
                invoice_id=invoice.id,
                description='Bad',
                quantity=1,
                unit_price=Decimal('-1.00'),
            )
        assert not invoice.items.exists()

    def test_remove_item(self, invoice_with_items):
        paper = invoice_with_items.items.get(description='Printer paper')

        remove_invoice_item(invoice_id=invoice_with_items.id, item_id=paper.id)

        invoice_with_items.refresh_from_db()
        assert invoice_with_items.items.count() == 1
        assert invoice_with_items.invoice_amount == Decimal('27.00')
        assert invoice_with_items.vat_amount == Decimal('5.40')

    def test_remove_missing_item(self, invoice_with_items, invoice):
        foreign_item = InvoiceItem.objects.create(
            invoice=invoice,
            description='Elsewhere',
            quantity=1,
            unit_price=Decimal('1.00'),
        )

        with pytest.raises(ItemNotFoundError):
            remove_invoice_item(invoice_id=invoice_with_items.id, item_id=foreign_item.id)

        invoice_with_items.refresh_from_db()
        assert invoice_with_items.invoice_amount == Decimal('47.00')
        assert invoice_with_items.vat_amount == Decimal('9.40')
        assert InvoiceItem.objects.filter(id=foreign_item.id).exists()

    def test_item_line_total_refreshed_on_save(self, invoice_with_items):
        item = invoice_with_items.items.get(description='Printer paper')
        item.quantity = 5
        item.save()

        item.refresh_from_db()
        assert item.line_total == Decimal('60.00')


# =============================================================================
# Search & Statistics Service Tests
# =============================================================================

@pytest.mark.django_db
class TestInvoiceSearch:
    """Tests for invoice_search.py and statistics.py."""

    def test_search_by_status(self, invoice, paid_invoice):
        assert list(search_invoices(status=InvoiceStatus.PAID)) == [paid_invoice]

    def test_search_by_user(self, invoice, paid_invoice, other_client):
        assert list(search_invoices(user_id=other_client.id)) == [paid_invoice]

    def test_search_by_admin(self, invoice, paid_invoice, admin_user):
        assert list(search_invoices(admin_id=admin_user.id)) == [invoice]

    def test_search_text_matches_client_company(self, invoice, paid_invoice):
        assert list(search_invoices(search='acme')) == [paid_invoice]

    def test_search_text_matches_number(self, invoice, paid_invoice):
        assert list(search_invoices(search='000001')) == [invoice]

    def test_search_date_range(self, invoice, overdue_invoice):
        results = list(search_invoices(date_to=date.today() - timedelta(days=1)))
        assert results == [overdue_invoice]

    def test_overdue_excludes_settled(self, invoice, overdue_invoice, paid_invoice):
        assert list(get_overdue_invoices()) == [overdue_invoice]

    def test_outstanding(self, invoice, overdue_invoice, paid_invoice):
        assert set(get_outstanding_invoices()) == {invoice, overdue_invoice}

    def test_recent_limit(self, invoice, overdue_invoice, paid_invoice):
        recent = list(get_recent_invoices(limit=2))
        assert recent == [paid_invoice, overdue_invoice]

    def test_due_within(self, invoice, invoice_with_items, overdue_invoice):
        assert list(get_invoices_due_within(days=14)) == [invoice_with_items]
        assert list(get_invoices_due_within(days=30)) == [invoice_with_items, invoice]

    def test_total_outstanding(self, invoice, overdue_invoice, paid_invoice):
        add_payment(invoice_id=invoice.id, amount=Decimal('20.00'))

        assert get_total_outstanding_amount() == Decimal('150.00')

    def test_statistics(self, invoice, overdue_invoice, paid_invoice):
        cancel_invoice(invoice_id=overdue_invoice.id)

        stats = get_invoice_statistics(
            date_from=date.today() - timedelta(days=7),
            date_to=date.today(),
        )

        assert stats['total_invoices'] == 3
        assert stats['open_invoices'] == 1
        assert stats['paid_invoices'] == 1
        assert stats['cancelled_invoices'] == 1
        assert stats['total_outstanding'] == Decimal('120.00')
        assert stats['total_invoiced'] == Decimal('200.00')

    def test_statistics_without_range(self, invoice):
        assert get_invoice_statistics()['total_invoiced'] is None

    def test_top_clients(self, invoice, overdue_invoice, paid_invoice, client_user, other_client):
        rows = get_top_clients(
            date_from=date.today() - timedelta(days=60),
            date_to=date.today(),
        )

        assert [row['user'] for row in rows] == [client_user, other_client]
        assert rows[0]['total_amount'] == Decimal('170.00')
        assert rows[0]['invoice_count'] == 2


# =============================================================================
# Status Refresh Tests
# =============================================================================

@pytest.mark.django_db
class TestStatusRefresh:
    """Tests for status_refresh.py and the management command."""

    def test_marks_overdue(self, invoice, overdue_invoice):
        changes = refresh_invoice_statuses()

        assert [(inv.id, old, new) for inv, old, new in changes] == [
            (overdue_invoice.id, InvoiceStatus.OPEN, InvoiceStatus.OVERDUE),
        ]
        overdue_invoice.refresh_from_db()
        assert overdue_invoice.status == InvoiceStatus.OVERDUE

    def test_dry_run(self, overdue_invoice):
        changes = refresh_invoice_statuses(dry_run=True)

        assert len(changes) == 1
        overdue_invoice.refresh_from_db()
        assert overdue_invoice.status == InvoiceStatus.OPEN

    def test_skips_cancelled(self, overdue_invoice):
        cancel_invoice(invoice_id=overdue_invoice.id)

        assert refresh_invoice_statuses() == []

    def test_as_of_in_past(self, overdue_invoice):
        assert refresh_invoice_statuses(as_of=overdue_invoice.invoice_date) == []

    def test_management_command(self, overdue_invoice, capsys):
        call_command('refresh_invoice_statuses')

        overdue_invoice.refresh_from_db()
        assert overdue_invoice.status == InvoiceStatus.OVERDUE
        assert 'INV-2024-000003' in capsys.readouterr().out
