from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, UserType


# =============================================================================
# Input Serializers
# =============================================================================

class UserFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for user search.

    Query Parameters:
        user_type (str): ADMIN, SUPPLIER or CLIENT
        admin (UUID): Managing admin
        is_active (bool): Active flag
        search (str): Name, email or company fragment
    """

    user_type = serializers.ChoiceField(choices=UserType.choices, required=False)
    admin = serializers.UUIDField(required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True)


class ChangePasswordSerializer(serializers.Serializer):
    new_password = serializers.CharField(
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    new_password_confirm = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': 'Passwords do not match'
            })
        return attrs


class VerifyPasswordSerializer(serializers.Serializer):
    password = serializers.CharField(required=True, style={'input_type': 'password'})


# =============================================================================
# Output / CRUD Serializers
# =============================================================================

PROFILE_FIELDS = [
    'email',
    'username',
    'first_name',
    'last_name',
    'company_name',
    'user_type',
    'admin',
    'address',
    'postcode',
    'shipping_address',
    'shipping_postcode',
    'phone_office',
    'phone_home',
    'mobile',
    'fax',
    'vat_number',
]


class UserSerializer(serializers.ModelSerializer):
    """Full user profile."""

    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', *PROFILE_FIELDS, 'full_name', 'is_active', 'created_at', 'updated_at', 'last_login']
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at', 'last_login']
        # Uniqueness is enforced by the service layer (409), not the serializer
        extra_kwargs = {
            'email': {'validators': []},
            'username': {'validators': []},
        }


class UserSelfUpdateSerializer(UserSerializer):
    """Profile edits by a non-admin user on their own record."""

    class Meta(UserSerializer.Meta):
        read_only_fields = [*UserSerializer.Meta.read_only_fields, 'user_type', 'admin']


class UserCreateSerializer(serializers.ModelSerializer):
    """Input for creating a user; the password is optional for clients/suppliers."""

    password = serializers.CharField(
        write_only=True,
        required=False,
        validators=[validate_password],
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = [*PROFILE_FIELDS, 'password']
        extra_kwargs = {
            'email': {'validators': []},
            'username': {'validators': []},
        }


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name', 'user_type']
        read_only_fields = fields


class UserStatisticsSerializer(serializers.Serializer):
    total_users = serializers.IntegerField()
    active_users = serializers.IntegerField()
    total_admins = serializers.IntegerField()
    total_suppliers = serializers.IntegerField()
    total_clients = serializers.IntegerField()
