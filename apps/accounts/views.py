from rest_framework import viewsets, status, serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .models import User, UserType
from .permissions import IsBookkeepingAdmin, IsAdminOrSelf
from .serializers import (
    UserSerializer,
    UserCreateSerializer,
    UserSelfUpdateSerializer,
    UserFilterSerializer,
    ChangePasswordSerializer,
    VerifyPasswordSerializer,
    UserStatisticsSerializer,
)
from .services import (
    create_user,
    update_user,
    delete_user,
    activate_user,
    deactivate_user,
    change_password,
    verify_password,
    search_users,
    get_active_users_by_type,
    get_users_with_outstanding_invoices,
    get_user_outstanding_amount,
    get_user_statistics,
    # Exceptions
    DuplicateEmailError,
    DuplicateUsernameError,
    UserHasRecordsError,
    InvalidUserDataError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class OutstandingAmountResponseSerializer(serializers.Serializer):
    outstanding_amount = serializers.DecimalField(max_digits=19, decimal_places=2)


class PasswordValidResponseSerializer(serializers.Serializer):
    valid = serializers.BooleanField()


class UserPagination(PageNumberPagination):
    """Custom pagination for users."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class UserViewSet(viewsets.ModelViewSet):
    """
    ViewSet for bookkeeping users (clients, suppliers, admins).

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Search users (user_type, admin, is_active, search)
    create: Create a user (admin only)
    retrieve: Get a specific user
    update: Update a user's profile
    partial_update: Partially update a user's profile
    destroy: Permanently delete a user without records (admin only)
    """

    queryset = User.objects.select_related('admin')
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = UserPagination

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['create', 'destroy', 'activate', 'deactivate']:
            return [IsAuthenticated(), IsBookkeepingAdmin()]
        if self.action in ['update', 'partial_update', 'change_password', 'verify_password']:
            return [IsAuthenticated(), IsAdminOrSelf()]
        return [IsAuthenticated()]

    def get_queryset(self):
        """Filter users using input serializer validation."""
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = UserFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return search_users(
            user_type=params.get('user_type'),
            admin_id=params.get('admin'),
            is_active=params.get('is_active'),
            search=params.get('search'),
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return UserCreateSerializer
        if self.action in ['update', 'partial_update']:
            user = self.request.user
            if not (getattr(user, 'is_admin', False) or user.is_staff):
                return UserSelfUpdateSerializer
        return UserSerializer

    @extend_schema(responses={201: UserSerializer, 409: ErrorResponseSerializer})
    def create(self, request, *args, **kwargs):
        """Create a new user."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = create_user(**serializer.validated_data)
        except (DuplicateEmailError, DuplicateUsernameError) as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except InvalidUserDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update a user's profile."""
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            user = update_user(user_id=instance.id, **serializer.validated_data)
        except (DuplicateEmailError, DuplicateUsernameError) as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except InvalidUserDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(UserSerializer(user).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a user with no invoices or transactions."""
        instance = self.get_object()
        try:
            delete_user(user_id=instance.id)
        except UserHasRecordsError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['patch'])
    def activate(self, request, pk=None):
        """Re-activate a user."""
        user = activate_user(user_id=self.get_object().id)
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=['patch'])
    def deactivate(self, request, pk=None):
        """Deactivate (soft-delete) a user."""
        user = deactivate_user(user_id=self.get_object().id)
        return Response(UserSerializer(user).data)

    @extend_schema(request=ChangePasswordSerializer, responses={204: None})
    @action(detail=True, methods=['patch'])
    def change_password(self, request, pk=None):
        """Set a new password."""
        user = self.get_object()
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        change_password(user_id=user.id, new_password=serializer.validated_data['new_password'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=VerifyPasswordSerializer, responses={200: PasswordValidResponseSerializer})
    @action(detail=True, methods=['post'])
    def verify_password(self, request, pk=None):
        """Check a password against the stored hash."""
        user = self.get_object()
        serializer = VerifyPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        valid = verify_password(user_id=user.id, password=serializer.validated_data['password'])
        return Response({'valid': valid})

    @action(detail=False, methods=['get'])
    def clients(self, request):
        """Active clients."""
        users = get_active_users_by_type(user_type=UserType.CLIENT)
        return Response(UserSerializer(users, many=True).data)

    @action(detail=False, methods=['get'])
    def suppliers(self, request):
        """Active suppliers."""
        users = get_active_users_by_type(user_type=UserType.SUPPLIER)
        return Response(UserSerializer(users, many=True).data)

    @action(detail=False, methods=['get'])
    def outstanding_invoices(self, request):
        """Users with unpaid invoices."""
        users = get_users_with_outstanding_invoices()
        return Response(UserSerializer(users, many=True).data)

    @extend_schema(responses={200: OutstandingAmountResponseSerializer})
    @action(detail=True, methods=['get'])
    def outstanding(self, request, pk=None):
        """Total outstanding invoice amount for a user."""
        user = self.get_object()
        amount = get_user_outstanding_amount(user_id=user.id)
        return Response(OutstandingAmountResponseSerializer({'outstanding_amount': amount}).data)

    @extend_schema(responses={200: UserStatisticsSerializer})
    @action(detail=False, methods=['get'])
    def statistics(self, request):
        """User counts per type."""
        return Response(UserStatisticsSerializer(get_user_statistics()).data)
