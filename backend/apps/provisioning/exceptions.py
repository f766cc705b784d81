"""
Exceptions for provisioning app.

Identity, profile and staff-record failures come from their own apps;
these cover what the orchestrator detects itself.
"""


class ProvisioningError(Exception):
    """Base exception for provisioning errors."""

    pass


class RequestValidationError(ProvisioningError):
    """A required field is missing or malformed. Raised before any store call."""

    pass


class OrganizationNotFound(ProvisioningError):
    """The organization does not exist or is not visible to the caller."""

    pass


class OrganizationLoadError(ProvisioningError):
    """The organization could not be read from the database."""

    pass
