"""
User management service.

Creates, updates and retires bookkeeping users (clients, suppliers, admins).
Email and username uniqueness is checked up front and backed by the
database unique constraints.
"""

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError

from apps.accounts.models import UserType
from .exceptions import (
    UserNotFoundError,
    DuplicateEmailError,
    DuplicateUsernameError,
    UserHasRecordsError,
    InvalidUserDataError,
)

logger = logging.getLogger(__name__)

User = get_user_model()

# Fields a plain update may overwrite; email and username go through
# the uniqueness checks below.
UPDATABLE_FIELDS = (
    'first_name',
    'last_name',
    'company_name',
    'address',
    'postcode',
    'shipping_address',
    'shipping_postcode',
    'phone_office',
    'phone_home',
    'mobile',
    'fax',
    'vat_number',
    'user_type',
    'admin',
)


def _validate_required(first_name: str, last_name: str, email: str, user_type: str) -> None:
    if not first_name or not first_name.strip():
        raise InvalidUserDataError("First name is required")
    if not last_name or not last_name.strip():
        raise InvalidUserDataError("Last name is required")
    if not email or not email.strip():
        raise InvalidUserDataError("Email is required")
    if user_type not in UserType.values:
        raise InvalidUserDataError(f"Unknown user type: {user_type}")


def get_user_by_id(*, user_id: UUID) -> User:
    """
    Get a user by ID.

    Raises:
        UserNotFoundError: If user doesn't exist
    """
    try:
        return User.objects.select_related('admin').get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User not found with id: {user_id}")


@transaction.atomic
def create_user(
    *,
    email: str,
    first_name: str,
    last_name: str,
    user_type: str = UserType.CLIENT,
    password: Optional[str] = None,
    username: Optional[str] = None,
    **extra_fields
) -> User:
    """
    Create a new user with a hashed password.

    Args:
        email: Unique email address
        first_name: First name
        last_name: Last name
        user_type: ADMIN, SUPPLIER or CLIENT
        password: Optional raw password (hashed before storing)
        username: Optional unique username
        **extra_fields: Any other profile field (company_name, address, ...)

    Returns:
        Created User instance

    Raises:
        InvalidUserDataError: If a required field is blank
        DuplicateEmailError: If the email is taken
        DuplicateUsernameError: If the username is taken
    """
    _validate_required(first_name, last_name, email, user_type)
    email = User.objects.normalize_email(email)

    if User.objects.filter(email__iexact=email).exists():
        raise DuplicateEmailError(f"Email already exists: {email}")

    if username and User.objects.filter(username=username).exists():
        raise DuplicateUsernameError(f"Username already exists: {username}")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            user_type=user_type,
            username=username or None,
            **extra_fields
        )
    except IntegrityError:
        # Lost a race against a concurrent insert
        raise DuplicateEmailError(f"Email or username already exists: {email}")

    logger.info("Created %s user %s", user.user_type, user.id)
    return user


@transaction.atomic
def update_user(*, user_id: UUID, **fields) -> User:
    """
    Update an existing user's profile.

    Only fields present in ``fields`` are changed. A changed email or
    username is checked for uniqueness first.

    Raises:
        UserNotFoundError: If user doesn't exist
        DuplicateEmailError: If the new email is taken
        DuplicateUsernameError: If the new username is taken
    """
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User not found with id: {user_id}")

    email = fields.pop('email', None)
    if email and email.lower() != user.email.lower():
        email = User.objects.normalize_email(email)
        if User.objects.filter(email__iexact=email).exclude(id=user.id).exists():
            raise DuplicateEmailError(f"Email already exists: {email}")
        user.email = email

    username = fields.pop('username', None)
    if username and username != user.username:
        if User.objects.filter(username=username).exclude(id=user.id).exists():
            raise DuplicateUsernameError(f"Username already exists: {username}")
        user.username = username

    for name in UPDATABLE_FIELDS:
        if name in fields:
            setattr(user, name, fields[name])

    _validate_required(user.first_name, user.last_name, user.email, user.user_type)
    user.save()
    return user


@transaction.atomic
def deactivate_user(*, user_id: UUID) -> User:
    """Soft-delete a user."""
    user = get_user_by_id(user_id=user_id)
    user.is_active = False
    user.save(update_fields=['is_active', 'updated_at'])
    logger.info("Deactivated user %s", user.id)
    return user


@transaction.atomic
def activate_user(*, user_id: UUID) -> User:
    user = get_user_by_id(user_id=user_id)
    user.is_active = True
    user.save(update_fields=['is_active', 'updated_at'])
    logger.info("Activated user %s", user.id)
    return user


@transaction.atomic
def delete_user(*, user_id: UUID) -> None:
    """
    Permanently delete a user.

    Users with invoices or transactions must be deactivated instead.

    Raises:
        UserNotFoundError: If user doesn't exist
        UserHasRecordsError: If the user has invoices or transactions
    """
    user = get_user_by_id(user_id=user_id)

    if user.invoices.exists() or user.transactions.exists():
        logger.warning("Refused to delete user %s with bookkeeping records", user.id)
        raise UserHasRecordsError(
            "Cannot delete user with associated invoices or transactions. "
            "Consider deactivating instead."
        )

    user.delete()
    logger.info("Deleted user %s", user_id)


@transaction.atomic
def change_password(*, user_id: UUID, new_password: str) -> None:
    user = get_user_by_id(user_id=user_id)
    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])


def verify_password(*, user_id: UUID, password: str) -> bool:
    """Check a raw password against the stored hash."""
    user = get_user_by_id(user_id=user_id)
    return user.has_usable_password() and user.check_password(password)
