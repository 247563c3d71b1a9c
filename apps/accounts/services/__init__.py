"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserNotFoundError,
    DuplicateEmailError,
    DuplicateUsernameError,
    UserHasRecordsError,
    InvalidUserDataError,
)
from .user_management import (
    get_user_by_id,
    create_user,
    update_user,
    deactivate_user,
    activate_user,
    delete_user,
    change_password,
    verify_password,
)
from .user_search import (
    search_users,
    get_active_users_by_type,
    get_users_with_outstanding_invoices,
    get_user_outstanding_amount,
    get_user_statistics,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserNotFoundError',
    'DuplicateEmailError',
    'DuplicateUsernameError',
    'UserHasRecordsError',
    'InvalidUserDataError',
    # User management
    'get_user_by_id',
    'create_user',
    'update_user',
    'deactivate_user',
    'activate_user',
    'delete_user',
    'change_password',
    'verify_password',
    # Search & reporting
    'search_users',
    'get_active_users_by_type',
    'get_users_with_outstanding_invoices',
    'get_user_outstanding_amount',
    'get_user_statistics',
]
