from abc import ABC


class AccountStoreError(ABC, Exception):
    """Base class for account store errors.

    Messages of these errors may be shown to the caller of the store.
    They should not contain any sensitive information such as tokens.
    """


class DuplicateAccountError(AccountStoreError):
    """Raised when an account with the same email already exists."""

    def __init__(self, message: str = "Account already exists") -> None:
        super().__init__(message)


class DuplicateSessionError(AccountStoreError):
    """Raised when the user already has a session with the same token."""

    def __init__(self, message: str = "Session already exists") -> None:
        super().__init__(message)


class AccountNotFoundError(AccountStoreError):
    """Raised when an operation targets an account that does not exist."""

    def __init__(self, message: str = "Account not found") -> None:
        super().__init__(message)


class InvalidArgumentError(AccountStoreError):
    """Raised when a required argument is missing or empty."""


class OperationRejectedError(AccountStoreError):
    """Raised when the store rejects a write for any other reason."""

    def __init__(self, message: str = "Write operation rejected by the store") -> None:
        super().__init__(message)
