# Generated manually for the banking app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('invoices', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='BankAccount',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('account_number', models.CharField(max_length=34, unique=True)),
                ('sort_code', models.CharField(blank=True, max_length=20)),
                ('account_name', models.CharField(max_length=100)),
                ('account_type', models.CharField(choices=[('CURRENT', 'Current'), ('SAVINGS', 'Savings'), ('CASH', 'Cash')], default='CURRENT', max_length=20)),
                ('opening_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=19, validators=[MinValueValidator(Decimal('0.00'))])),
                ('current_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=19)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('admin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='managed_bank_accounts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'bank_accounts',
                'ordering': ['account_name'],
                'indexes': [
                    models.Index(fields=['account_type', 'is_active'], name='bank_accoun_account_7d2e1b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('transaction_type', models.CharField(choices=[('RECEIVE', 'Receive'), ('PAYMENT', 'Payment'), ('TRANSFER', 'Transfer'), ('DEPOSIT', 'Deposit'), ('WITHDRAWAL', 'Withdrawal'), ('FEE', 'Fee'), ('INTEREST', 'Interest')], max_length=20)),
                ('expense_type', models.CharField(blank=True, choices=[('OFFICE_SUPPLIES', 'Office supplies'), ('TRAVEL', 'Travel'), ('UTILITIES', 'Utilities'), ('RENT', 'Rent'), ('INSURANCE', 'Insurance'), ('PROFESSIONAL_SERVICES', 'Professional services'), ('MARKETING', 'Marketing'), ('EQUIPMENT', 'Equipment'), ('MEALS', 'Meals'), ('OTHER', 'Other')], max_length=30)),
                ('transaction_amount', models.DecimalField(decimal_places=2, max_digits=19, validators=[MinValueValidator(Decimal('0.01'))])),
                ('transaction_date', models.DateField()),
                ('reference_number', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('ending_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), editable=False, max_digits=19)),
                ('is_reconciled', models.BooleanField(default=False)),
                ('reconciled_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('admin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='managed_transactions', to=settings.AUTH_USER_MODEL)),
                ('bank_account', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='banking.bankaccount')),
                ('invoice', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transactions', to='invoices.invoice')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'transactions',
                'ordering': ['-transaction_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['bank_account', 'transaction_date'], name='transaction_bank_ac_5b9f3c_idx'),
                    models.Index(fields=['transaction_type', 'transaction_date'], name='transaction_transac_1e6a4d_idx'),
                    models.Index(fields=['is_reconciled'], name='transaction_is_reco_8c3b2f_idx'),
                ],
            },
        ),
    ]
