"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class DuplicateEmailError(AccountsServiceError):
    """Raised when another user already has the email address."""
    pass


class DuplicateUsernameError(AccountsServiceError):
    """Raised when another user already has the username."""
    pass


class UserHasRecordsError(AccountsServiceError):
    """Raised when deleting a user that still owns invoices or transactions."""
    pass


class InvalidUserDataError(AccountsServiceError):
    """Raised when a required user field is missing."""
    pass
