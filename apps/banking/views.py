from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .models import BankAccount, Transaction
from .serializers import (
    BankAccountSerializer,
    BankAccountCreateSerializer,
    BankAccountFilterSerializer,
    AccountBalancesSerializer,
    TransactionSerializer,
    TransactionCreateSerializer,
    TransactionFilterSerializer,
    CashFlowQuerySerializer,
    CashFlowSummarySerializer,
    LimitQuerySerializer,
)
from .services import (
    create_bank_account,
    update_bank_account,
    set_bank_account_active,
    delete_bank_account,
    search_bank_accounts,
    get_account_balances,
    record_transaction,
    update_transaction,
    delete_transaction,
    reconcile_transaction,
    search_transactions,
    get_unreconciled_transactions,
    get_recent_transactions,
    get_cash_flow_summary,
    # Exceptions
    BankAccountNotFoundError,
    TransactionNotFoundError,
    DuplicateAccountNumberError,
    BankAccountStateError,
    TransactionStateError,
    InvalidTransactionAmountError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()


SERVICE_ERRORS = (
    BankAccountNotFoundError,
    TransactionNotFoundError,
    DuplicateAccountNumberError,
    BankAccountStateError,
    TransactionStateError,
    InvalidTransactionAmountError,
)


def error_response(exc):
    """Translate a banking service exception into an HTTP response."""
    if isinstance(exc, (BankAccountNotFoundError, TransactionNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (DuplicateAccountNumberError, BankAccountStateError, TransactionStateError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc)}, status=code)


class BankingPagination(PageNumberPagination):
    """Custom pagination for bank accounts and transactions."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class BankAccountViewSet(viewsets.ModelViewSet):
    """
    ViewSet for bank accounts.

    list: Search accounts (account_type, is_active, search)
    create: Open an account
    retrieve: Get a specific account
    update: Update descriptive fields
    destroy: Delete an account without transactions
    """

    queryset = BankAccount.objects.select_related('admin')
    serializer_class = BankAccountSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = BankingPagination

    def get_queryset(self):
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = BankAccountFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return search_bank_accounts(
            account_type=params.get('account_type'),
            is_active=params.get('is_active'),
            search=params.get('search'),
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return BankAccountCreateSerializer
        return BankAccountSerializer

    @extend_schema(responses={201: BankAccountSerializer, 409: ErrorResponseSerializer})
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            account = create_bank_account(**serializer.validated_data)
        except SERVICE_ERRORS as e:
            return error_response(e)

        return Response(BankAccountSerializer(account).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            account = update_bank_account(account_id=instance.id, **serializer.validated_data)
        except SERVICE_ERRORS as e:
            return error_response(e)

        return Response(BankAccountSerializer(account).data)

    def destroy(self, request, *args, **kwargs):
        """Delete an account; refused while it has transactions."""
        instance = self.get_object()
        try:
            delete_bank_account(account_id=instance.id)
        except SERVICE_ERRORS as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: BankAccountSerializer})
    @action(detail=True, methods=['patch'])
    def activate(self, request, pk=None):
        account = set_bank_account_active(account_id=self.get_object().id, is_active=True)
        return Response(BankAccountSerializer(account).data)

    @extend_schema(request=None, responses={200: BankAccountSerializer})
    @action(detail=True, methods=['patch'])
    def deactivate(self, request, pk=None):
        account = set_bank_account_active(account_id=self.get_object().id, is_active=False)
        return Response(BankAccountSerializer(account).data)

    @extend_schema(responses={200: AccountBalancesSerializer})
    @action(detail=False, methods=['get'])
    def balances(self, request):
        """Total balance of active accounts, overall and per type."""
        return Response(AccountBalancesSerializer(get_account_balances()).data)

    @extend_schema(responses={200: TransactionSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def transactions(self, request, pk=None):
        """
        The account's transactions, newest first.

        GET /api/banking/accounts/{id}/transactions/
        """
        account = self.get_object()
        queryset = search_transactions(bank_account_id=account.id)

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(TransactionSerializer(page, many=True).data)
        return Response(TransactionSerializer(queryset, many=True).data)


class TransactionViewSet(viewsets.ModelViewSet):
    """
    ViewSet for bank transactions.

    list: Search transactions
    create: Record a transaction and move the account balance
    retrieve: Get a specific transaction
    partial_update: Edit notes, reference number or expense type
    destroy: Delete a transaction and reverse its balance effect
    """

    queryset = Transaction.objects.select_related('bank_account', 'user', 'invoice', 'admin')
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = BankingPagination

    def get_queryset(self):
        """Filter transactions using input serializer validation."""
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = TransactionFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return search_transactions(
            bank_account_id=params.get('bank_account'),
            user_id=params.get('user'),
            admin_id=params.get('admin'),
            transaction_type=params.get('transaction_type'),
            date_from=params.get('date_from'),
            date_to=params.get('date_to'),
            is_reconciled=params.get('is_reconciled'),
            search=params.get('search'),
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return TransactionCreateSerializer
        return TransactionSerializer

    @extend_schema(
        request=TransactionCreateSerializer,
        responses={201: TransactionSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer}
    )
    def create(self, request, *args, **kwargs):
        """Record a transaction; credit types add to the balance, others subtract."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        try:
            txn = record_transaction(bank_account_id=data.pop('bank_account'), **data)
        except SERVICE_ERRORS as e:
            return error_response(e)

        return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        txn = update_transaction(transaction_id=instance.id, **serializer.validated_data)
        return Response(TransactionSerializer(txn).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a transaction and reverse its effect on the account balance."""
        instance = self.get_object()
        try:
            delete_transaction(transaction_id=instance.id)
        except SERVICE_ERRORS as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: TransactionSerializer, 409: ErrorResponseSerializer})
    @action(detail=True, methods=['post'])
    def reconcile(self, request, pk=None):
        """Mark as matched against the bank statement."""
        try:
            txn = reconcile_transaction(transaction_id=self.get_object().id)
        except SERVICE_ERRORS as e:
            return error_response(e)
        return Response(TransactionSerializer(txn).data)

    @action(detail=False, methods=['get'])
    def unreconciled(self, request):
        transactions = get_unreconciled_transactions()
        return Response(TransactionSerializer(transactions, many=True).data)

    @extend_schema(parameters=[OpenApiParameter('limit', int, required=False)])
    @action(detail=False, methods=['get'])
    def recent(self, request):
        """Most recently recorded transactions."""
        query = LimitQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        transactions = get_recent_transactions(limit=query.validated_data.get('limit'))
        return Response(TransactionSerializer(transactions, many=True).data)

    @extend_schema(
        parameters=[
            OpenApiParameter('date_from', str, required=False),
            OpenApiParameter('date_to', str, required=False),
            OpenApiParameter('bank_account', str, required=False),
        ],
        responses={200: CashFlowSummarySerializer}
    )
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """Income, expenses, net cash flow, expenses by category and per month."""
        query = CashFlowQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        summary = get_cash_flow_summary(
            date_from=query.validated_data.get('date_from'),
            date_to=query.validated_data.get('date_to'),
            bank_account_id=query.validated_data.get('bank_account'),
        )
        return Response(CashFlowSummarySerializer(summary).data)
