"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data
    python manage.py create_sample_data --clear

This creates:
- 1 admin (admin@example.com / admin123, also a Django superuser)
- 3 clients and 2 suppliers
- 2 bank accounts (current, savings)
- 6 invoices with line items, some part or fully paid, one cancelled
- Bank transactions for the payments received and a few expenses
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from decimal import Decimal
from datetime import date, timedelta

from apps.accounts.models import User, UserType
from apps.banking.models import BankAccount, Transaction, AccountType, TransactionType, ExpenseType
from apps.banking.services import create_bank_account, record_transaction
from apps.invoices.models import Invoice
from apps.invoices.services import create_invoice, add_payment, cancel_invoice, refresh_invoice_statuses


class Command(BaseCommand):
    help = 'Create sample data for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        accounts = self.create_bank_accounts(users['admin'])
        invoices = self.create_invoices(users)
        self.create_payments(users, accounts, invoices)
        self.create_expenses(users, accounts)

        changed = refresh_invoice_statuses()

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write(f'  {len(changed)} invoice status(es) refreshed')
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (superuser)')
        self.stdout.write('  client1@example.com / password123')

    def clear_data(self):
        """Clear all bookkeeping data from the database."""
        Transaction.objects.all().delete()
        BankAccount.objects.all().delete()
        Invoice.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()
        User.objects.filter(email='admin@example.com').delete()

    def create_users(self):
        self.stdout.write('  Creating users...')

        admin, _ = User.objects.get_or_create(
            email='admin@example.com',
            defaults={
                'first_name': 'Admin',
                'last_name': 'User',
                'user_type': UserType.ADMIN,
                'is_staff': True,
                'is_superuser': True,
            }
        )
        admin.set_password('admin123')
        admin.save()

        clients_data = [
            ('client1@example.com', 'Clara', 'North', 'North Design Ltd'),
            ('client2@example.com', 'Dev', 'Patel', 'Patel & Sons'),
            ('client3@example.com', 'Erin', 'Walsh', ''),
        ]
        clients = []
        for email, first_name, last_name, company in clients_data:
            client, created = User.objects.get_or_create(
                email=email,
                defaults={
                    'first_name': first_name,
                    'last_name': last_name,
                    'company_name': company,
                    'user_type': UserType.CLIENT,
                    'admin': admin,
                }
            )
            if created:
                client.set_password('password123')
                client.save()
            clients.append(client)

        suppliers_data = [
            ('accounts@paperco.example.com', 'Paula', 'Reams', 'PaperCo'),
            ('billing@officespace.example.com', 'Oscar', 'Lease', 'Office Space Rentals'),
        ]
        suppliers = []
        for email, first_name, last_name, company in suppliers_data:
            supplier, _ = User.objects.get_or_create(
                email=email,
                defaults={
                    'first_name': first_name,
                    'last_name': last_name,
                    'company_name': company,
                    'user_type': UserType.SUPPLIER,
                    'admin': admin,
                }
            )
            suppliers.append(supplier)

        return {
            'admin': admin,
            'clients': clients,
            'suppliers': suppliers,
        }

    def create_bank_accounts(self, admin):
        self.stdout.write('  Creating bank accounts...')

        accounts = {}
        for key, number, name, account_type, opening in [
            ('current', '40001234', 'Business current', AccountType.CURRENT, Decimal('5000.00')),
            ('savings', '40005678', 'Tax reserve', AccountType.SAVINGS, Decimal('12000.00')),
        ]:
            account = BankAccount.objects.filter(account_number=number).first()
            if account is None:
                account = create_bank_account(
                    account_number=number,
                    account_name=name,
                    account_type=account_type,
                    sort_code='40-11-22',
                    opening_balance=opening,
                    admin=admin,
                )
            accounts[key] = account

        return accounts

    def create_invoices(self, users):
        self.stdout.write('  Creating invoices...')

        today = date.today()
        admin = users['admin']
        clients = users['clients']

        invoice_data = [
            # (client, days ago issued, days until due, items)
            (clients[0], 60, -30, [
                {'description': 'Brand workshop', 'quantity': 2, 'unit_price': Decimal('450.00'),
                 'vat_rate_percent': Decimal('20')},
            ]),
            (clients[0], 20, 10, [
                {'description': 'Website design', 'quantity': 1, 'unit_price': Decimal('2400.00'),
                 'discount_percent': Decimal('10'), 'vat_rate_percent': Decimal('20')},
                {'description': 'Hosting (12 months)', 'quantity': 12, 'unit_price': Decimal('15.00'),
                 'unit': 'month', 'vat_rate_percent': Decimal('20')},
            ]),
            (clients[1], 45, -15, [
                {'description': 'Bookkeeping Q1', 'quantity': 3, 'unit_price': Decimal('300.00'),
                 'unit': 'month', 'vat_rate_percent': Decimal('20')},
            ]),
            (clients[1], 5, 25, [
                {'description': 'Payroll setup', 'quantity': 1, 'unit_price': Decimal('650.00'),
                 'vat_rate_percent': Decimal('20')},
            ]),
            (clients[2], 10, 20, [
                {'description': 'Tax return', 'quantity': 1, 'unit_price': Decimal('380.00')},
            ]),
            (clients[2], 30, 0, [
                {'description': 'Consultation', 'quantity': 2, 'unit_price': Decimal('90.00'),
                 'vat_rate_percent': Decimal('20')},
            ]),
        ]

        invoices = []
        for client, issued_ago, due_in, items in invoice_data:
            invoice_date = today - timedelta(days=issued_ago)
            invoices.append(create_invoice(
                user=client,
                admin=admin,
                invoice_date=invoice_date,
                due_date=today + timedelta(days=due_in),
                items=items,
            ))

        return invoices

    def create_payments(self, users, accounts, invoices):
        """Post payments on some invoices and record the money received."""
        self.stdout.write('  Recording payments...')

        today = date.today()
        admin = users['admin']

        # First invoice fully paid, third partially, last one cancelled
        for invoice, amount in [
            (invoices[0], invoices[0].total_amount),
            (invoices[2], Decimal('500.00')),
        ]:
            add_payment(invoice_id=invoice.id, amount=amount)
            record_transaction(
                bank_account_id=accounts['current'].id,
                transaction_type=TransactionType.RECEIVE,
                transaction_amount=amount,
                transaction_date=today - timedelta(days=3),
                user=invoice.user,
                invoice=invoice,
                admin=admin,
                reference_number=invoice.invoice_number,
            )

        cancel_invoice(invoice_id=invoices[5].id)

    def create_expenses(self, users, accounts):
        self.stdout.write('  Recording expenses...')

        today = date.today()
        admin = users['admin']
        paperco, landlord = users['suppliers']

        expenses = [
            (TransactionType.PAYMENT, Decimal('85.40'), paperco, ExpenseType.OFFICE_SUPPLIES, 'Paper and toner'),
            (TransactionType.PAYMENT, Decimal('1200.00'), landlord, ExpenseType.RENT, 'Office rent'),
            (TransactionType.FEE, Decimal('6.50'), None, '', 'Monthly account fee'),
        ]
        for transaction_type, amount, supplier, expense_type, notes in expenses:
            record_transaction(
                bank_account_id=accounts['current'].id,
                transaction_type=transaction_type,
                transaction_amount=amount,
                transaction_date=today - timedelta(days=7),
                user=supplier,
                admin=admin,
                expense_type=expense_type,
                notes=notes,
            )

        record_transaction(
            bank_account_id=accounts['current'].id,
            transaction_type=TransactionType.TRANSFER,
            transaction_amount=Decimal('1000.00'),
            transaction_date=today - timedelta(days=1),
            admin=admin,
            notes='Move to tax reserve',
        )
        record_transaction(
            bank_account_id=accounts['savings'].id,
            transaction_type=TransactionType.DEPOSIT,
            transaction_amount=Decimal('1000.00'),
            transaction_date=today - timedelta(days=1),
            admin=admin,
            notes='From business current',
        )
