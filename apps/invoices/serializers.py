from decimal import Decimal

from rest_framework import serializers
from .ledger import quantize_money
from .models import Invoice, InvoiceItem, InvoiceStatus, InvoiceType
from apps.accounts.models import User
from apps.accounts.serializers import UserMinimalSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class DateRangeValidationMixin:
    """Reject date_to earlier than date_from."""

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to:
            if date_from > date_to:
                raise serializers.ValidationError({
                    'date_to': 'End date must be after start date'
                })

        return attrs


class InvoiceFilterSerializer(DateRangeValidationMixin, serializers.Serializer):
    """
    Validate query parameters for invoice search.

    Query Parameters:
        user (UUID): Filter by client/supplier
        admin (UUID): Filter by managing admin
        status (str): Filter by status
        date_from (date): Invoice date from
        date_to (date): Invoice date to
        search (str): Number, note or client name fragment
    """

    user = serializers.UUIDField(required=False)
    admin = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=InvoiceStatus.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class StatisticsQuerySerializer(DateRangeValidationMixin, serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)


class TopClientsQuerySerializer(DateRangeValidationMixin, serializers.Serializer):
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)


class LimitQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


class DueWithinQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=0, max_value=3650, default=7)


class NextNumberQuerySerializer(serializers.Serializer):
    invoice_date = serializers.DateField(required=False)


class PaymentInputSerializer(serializers.Serializer):
    """
    Validate input for posting a payment.

    Fields:
        amount (Decimal): Payment amount, up to 2 decimal places

    Positivity is checked by the ledger so the error kind stays InvalidAmount.
    """

    amount = serializers.DecimalField(max_digits=19, decimal_places=2)


# =============================================================================
# Output / CRUD Serializers
# =============================================================================

class InvoiceItemSerializer(serializers.ModelSerializer):
    """Line item with its derived amounts."""

    line_total = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    sub_total = serializers.SerializerMethodField()
    discount_amount = serializers.SerializerMethodField()
    net_amount = serializers.SerializerMethodField()
    item_vat_amount = serializers.SerializerMethodField()

    class Meta:
        model = InvoiceItem
        fields = [
            'id',
            'description',
            'item_code',
            'unit',
            'quantity',
            'unit_price',
            'discount_percent',
            'vat_rate_percent',
            'sub_total',
            'discount_amount',
            'net_amount',
            'item_vat_amount',
            'line_total',
            'created_at',
        ]
        read_only_fields = ['id', 'created_at']
        extra_kwargs = {
            'quantity': {'min_value': 1},
            'unit_price': {'min_value': Decimal('0.00')},
            'discount_percent': {'min_value': Decimal('0.00')},
            'vat_rate_percent': {'min_value': Decimal('0.00')},
        }

    def _money(self, value):
        return f"{quantize_money(value)}"

    def get_sub_total(self, obj) -> str:
        return self._money(obj.totals.sub_total)

    def get_discount_amount(self, obj) -> str:
        return self._money(obj.totals.discount_amount)

    def get_net_amount(self, obj) -> str:
        return self._money(obj.totals.net_amount)

    def get_item_vat_amount(self, obj) -> str:
        return self._money(obj.totals.vat_amount)


class InvoiceSerializer(serializers.ModelSerializer):
    """Main invoice serializer with items and derived amounts."""

    user_detail = UserMinimalSerializer(source='user', read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)
    total_amount = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    outstanding_amount = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'invoice_date',
            'due_date',
            'invoice_type',
            'invoice_note',
            'invoice_amount',
            'vat_amount',
            'invoice_paid_amount',
            'total_amount',
            'outstanding_amount',
            'status',
            'user',
            'user_detail',
            'admin',
            'items',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'invoice_paid_amount',
            'status',
            'created_at',
            'updated_at',
        ]
        # Uniqueness is enforced by the service layer (409), not the serializer
        extra_kwargs = {
            'invoice_number': {'validators': []},
        }


class InvoiceCreateSerializer(serializers.ModelSerializer):
    """Input for creating an invoice with optional nested items."""

    invoice_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    invoice_amount = serializers.DecimalField(max_digits=19, decimal_places=2, required=False)
    vat_amount = serializers.DecimalField(max_digits=19, decimal_places=2, required=False)
    items = InvoiceItemSerializer(many=True, required=False)
    user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    admin = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True
    )

    class Meta:
        model = Invoice
        fields = [
            'invoice_number',
            'invoice_date',
            'due_date',
            'invoice_type',
            'invoice_note',
            'invoice_amount',
            'vat_amount',
            'user',
            'admin',
            'items',
        ]

    def validate(self, attrs):
        due_date = attrs.get('due_date')
        if due_date and due_date < attrs['invoice_date']:
            raise serializers.ValidationError({
                'due_date': 'Due date cannot be before the invoice date'
            })
        return attrs


class InvoiceStatisticsSerializer(serializers.Serializer):
    total_invoices = serializers.IntegerField()
    open_invoices = serializers.IntegerField()
    partial_paid_invoices = serializers.IntegerField()
    paid_invoices = serializers.IntegerField()
    overdue_invoices = serializers.IntegerField()
    cancelled_invoices = serializers.IntegerField()
    total_outstanding = serializers.DecimalField(max_digits=19, decimal_places=2)
    total_invoiced = serializers.DecimalField(max_digits=19, decimal_places=2, allow_null=True)


class TopClientSerializer(serializers.Serializer):
    user = UserMinimalSerializer()
    total_amount = serializers.DecimalField(max_digits=19, decimal_places=2)
    invoice_count = serializers.IntegerField()


class NextInvoiceNumberSerializer(serializers.Serializer):
    invoice_number = serializers.CharField()
