"""
Exceptions for accounts app.

Raised by the identity resolver and the profile synchronizer.
"""


class IdentityError(Exception):
    """Base exception for identity and profile errors."""

    pass


class IdentityStoreError(IdentityError):
    """The identity store rejected or failed a lookup, create or update."""

    pass


class IdentityConflict(IdentityStoreError):
    """Identity creation failed because the email already exists."""

    pass


class IdentityCreationIncomplete(IdentityError):
    """The identity store reported success but returned no identifier."""

    pass


class ProfileWriteError(IdentityError):
    """Profile upsert failed. ``cause`` holds the underlying database error."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class InvalidIdentityInput(IdentityError, ValueError):
    """Email is empty, or the password is too short to create an identity."""

    pass
