from datetime import date

from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .models import Invoice
from .serializers import (
    InvoiceSerializer,
    InvoiceCreateSerializer,
    InvoiceItemSerializer,
    InvoiceFilterSerializer,
    InvoiceStatisticsSerializer,
    TopClientSerializer,
    NextInvoiceNumberSerializer,
    PaymentInputSerializer,
    StatisticsQuerySerializer,
    TopClientsQuerySerializer,
    LimitQuerySerializer,
    DueWithinQuerySerializer,
    NextNumberQuerySerializer,
)
from .services import (
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
    get_invoice_statistics,
    get_top_clients,
    # Exceptions
    InvoiceNotFoundError,
    ItemNotFoundError,
    InvalidAmountError,
    ExceedsBalanceError,
    InvoiceStateError,
    DuplicateInvoiceNumberError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()


def error_response(exc):
    """Translate an invoice service exception into an HTTP response."""
    if isinstance(exc, (InvoiceNotFoundError, ItemNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (DuplicateInvoiceNumberError, InvoiceStateError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc)}, status=code)


SERVICE_ERRORS = (
    InvoiceNotFoundError,
    ItemNotFoundError,
    InvalidAmountError,
    ExceedsBalanceError,
    InvoiceStateError,
    DuplicateInvoiceNumberError,
)


class InvoicePagination(PageNumberPagination):
    """Custom pagination for invoices."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class InvoiceViewSet(viewsets.ModelViewSet):
    """
    ViewSet for invoices and their line items.

    list: Search invoices (user, admin, status, date range, text)
    create: Create an invoice, optionally with items
    retrieve: Get a specific invoice
    update: Update header fields (status is re-derived unless cancelled)
    destroy: Delete an invoice without payments
    """

    queryset = Invoice.objects.select_related('user', 'admin').prefetch_related('items')
    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = InvoicePagination

    def get_queryset(self):
        """Filter invoices using input serializer validation."""
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = InvoiceFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return search_invoices(
            user_id=params.get('user'),
            admin_id=params.get('admin'),
            status=params.get('status'),
            date_from=params.get('date_from'),
            date_to=params.get('date_to'),
            search=params.get('search'),
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return InvoiceCreateSerializer
        return InvoiceSerializer

    def _fresh(self, invoice_id):
        return InvoiceSerializer(super().get_queryset().get(id=invoice_id)).data

    @extend_schema(responses={201: InvoiceSerializer, 409: ErrorResponseSerializer})
    def create(self, request, *args, **kwargs):
        """Create an invoice; the number is generated when omitted."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = create_invoice(**serializer.validated_data)
        except SERVICE_ERRORS as e:
            return error_response(e)

        return Response(self._fresh(invoice.id), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = update_invoice(invoice_id=instance.id, **serializer.validated_data)
        except SERVICE_ERRORS as e:
            return error_response(e)

        return Response(self._fresh(invoice.id))

    def destroy(self, request, *args, **kwargs):
        """Delete an invoice; refused once any payment is recorded."""
        instance = self.get_object()
        try:
            delete_invoice(invoice_id=instance.id)
        except SERVICE_ERRORS as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        request=PaymentInputSerializer,
        responses={200: InvoiceSerializer, 400: ErrorResponseSerializer, 409: ErrorResponseSerializer}
    )
    @action(detail=True, methods=['post'])
    def payments(self, request, pk=None):
        """
        Record a payment.

        POST /api/invoices/{id}/payments/
        Body: {"amount": "100.00"}
        """
        invoice = self.get_object()
        input_serializer = PaymentInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            invoice = add_payment(invoice_id=invoice.id, amount=input_serializer.validated_data['amount'])
        except SERVICE_ERRORS as e:
            return error_response(e)

        return Response(self._fresh(invoice.id))

    @extend_schema(request=None, responses={200: InvoiceSerializer})
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel an invoice (terminal)."""
        invoice = cancel_invoice(invoice_id=self.get_object().id)
        return Response(self._fresh(invoice.id))

    @extend_schema(request=InvoiceItemSerializer, responses={201: InvoiceSerializer})
    @action(detail=True, methods=['post'])
    def items(self, request, pk=None):
        """
        Add a line item; invoice totals are recomputed from all items.

        POST /api/invoices/{id}/items/
        """
        invoice = self.get_object()
        input_serializer = InvoiceItemSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            add_invoice_item(invoice_id=invoice.id, **input_serializer.validated_data)
        except SERVICE_ERRORS as e:
            return error_response(e)

        return Response(self._fresh(invoice.id), status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: InvoiceSerializer, 404: ErrorResponseSerializer})
    @action(
        detail=True,
        methods=['delete'],
        url_path=r'items/(?P<item_id>\d+)',
        url_name='remove-item'
    )
    def remove_item(self, request, pk=None, item_id=None):
        """
        Remove a line item.

        DELETE /api/invoices/{id}/items/{item_id}/
        """
        invoice = self.get_object()
        try:
            remove_invoice_item(invoice_id=invoice.id, item_id=int(item_id))
        except SERVICE_ERRORS as e:
            return error_response(e)

        return Response(self._fresh(invoice.id))

    @action(detail=False, methods=['get'], url_path=r'number/(?P<invoice_number>[^/]+)')
    def by_number(self, request, invoice_number=None):
        """GET /api/invoices/number/{invoice_number}/"""
        try:
            invoice = get_invoice_by_number(invoice_number=invoice_number)
        except InvoiceNotFoundError as e:
            return error_response(e)
        return Response(InvoiceSerializer(invoice).data)

    @extend_schema(
        parameters=[OpenApiParameter('invoice_date', OpenApiTypes.DATE, required=False)],
        responses={200: NextInvoiceNumberSerializer},
    )
    @action(detail=False, methods=['get'])
    def next_number(self, request):
        """Preview the number an invoice dated ``invoice_date`` (default today) would get."""
        query = NextNumberQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        invoice_date = query.validated_data.get('invoice_date') or date.today()
        return Response({'invoice_number': generate_next_invoice_number(year=invoice_date.year)})

    @action(detail=False, methods=['get'])
    def overdue(self, request):
        invoices = get_overdue_invoices()
        return Response(InvoiceSerializer(invoices, many=True).data)

    @action(detail=False, methods=['get'])
    def outstanding(self, request):
        """Open, partially paid and overdue invoices."""
        invoices = get_outstanding_invoices()
        return Response(InvoiceSerializer(invoices, many=True).data)

    @extend_schema(parameters=[OpenApiParameter('limit', int, required=False)])
    @action(detail=False, methods=['get'])
    def recent(self, request):
        """Most recently created invoices."""
        query = LimitQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        invoices = get_recent_invoices(limit=query.validated_data.get('limit'))
        return Response(InvoiceSerializer(invoices, many=True).data)

    @extend_schema(parameters=[OpenApiParameter('days', int, required=False)])
    @action(detail=False, methods=['get'])
    def due_within(self, request):
        """Unsettled invoices due in the next N days (default 7)."""
        query = DueWithinQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        invoices = get_invoices_due_within(days=query.validated_data['days'])
        return Response(InvoiceSerializer(invoices, many=True).data)

    @extend_schema(
        parameters=[
            OpenApiParameter('date_from', str, required=False),
            OpenApiParameter('date_to', str, required=False),
        ],
        responses={200: InvoiceStatisticsSerializer}
    )
    @action(detail=False, methods=['get'])
    def statistics(self, request):
        """Counts per status, outstanding total, and invoiced total for a date range."""
        query = StatisticsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        stats = get_invoice_statistics(
            date_from=query.validated_data.get('date_from'),
            date_to=query.validated_data.get('date_to'),
        )
        return Response(InvoiceStatisticsSerializer(stats).data)

    @extend_schema(
        parameters=[
            OpenApiParameter('date_from', str, required=True),
            OpenApiParameter('date_to', str, required=True),
            OpenApiParameter('limit', int, required=False),
        ],
        responses={200: TopClientSerializer(many=True)}
    )
    @action(detail=False, methods=['get'])
    def top_clients(self, request):
        """Users ranked by invoiced total within a date range."""
        query = TopClientsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        rows = get_top_clients(**query.validated_data)
        return Response(TopClientSerializer(rows, many=True).data)
