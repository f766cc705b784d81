"""
Identity store adapters.

Identities (email + password credential) live in the hosted identity
provider, not in our database. Provisioning talks to it through the
IdentityStore interface so tests can substitute an in-memory double.

The Stytch client is built from the provisioning-scoped credential on
every call to get_identity_store(); nothing is cached process-wide.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import stytch
from django.conf import settings
from stytch.core.response_base import StytchError

from apps.accounts.exceptions import IdentityConflict, IdentityStoreError

SEARCH_PAGE_SIZE = 200

DUPLICATE_EMAIL_ERROR_TYPES = frozenset({"duplicate_email", "email_already_exists"})

# Session lookups that fail with these statuses mean "not signed in",
# not "identity store unavailable".
UNAUTHENTICATED_STATUS_CODES = frozenset({401, 404})


@dataclass(frozen=True)
class Identity:
    """An identity as seen by this service."""

    identity_id: str
    email: str


class IdentityStore(ABC):
    """Operations provisioning needs from the identity provider."""

    @abstractmethod
    def find_by_email(self, email: str) -> Identity | None:
        """Return the identity whose email matches exactly (already normalized)."""

    @abstractmethod
    def create(self, email: str, password: str, display_name: str) -> str | None:
        """
        Create a pre-verified identity and return its id.

        Raises:
            IdentityConflict: The email is already registered.
            IdentityStoreError: Any other store failure.
        """

    @abstractmethod
    def update(self, identity_id: str, display_name: str) -> None:
        """Refresh display metadata on an existing identity."""

    @abstractmethod
    def authenticate_session(self, token: str) -> str | None:
        """Return the identity id behind a session token, or None if invalid."""


def _error_message(error: StytchError) -> str:
    return error.details.error_message or error.details.error_type or "Identity store error"


class StytchIdentityStore(IdentityStore):
    """IdentityStore backed by the Stytch consumer API."""

    def __init__(self, client: Any) -> None:
        self.client = client

    @classmethod
    def from_credentials(cls, project_id: str, secret: str) -> "StytchIdentityStore":
        return cls(stytch.Client(project_id=project_id, secret=secret))

    def find_by_email(self, email: str) -> Identity | None:
        query = {
            "operator": "AND",
            "operands": [{"filter_name": "email_address", "filter_value": [email]}],
        }
        cursor: str | None = None
        while True:
            try:
                response = self.client.users.search(
                    limit=SEARCH_PAGE_SIZE,
                    query=query,
                    cursor=cursor,
                )
            except StytchError as e:
                raise IdentityStoreError(_error_message(e)) from e

            for user in response.results:
                for address in user.emails:
                    if (address.email or "").strip().lower() == email:
                        return Identity(identity_id=user.user_id, email=email)

            cursor = response.results_metadata.next_cursor
            if not cursor:
                return None

    def create(self, email: str, password: str, display_name: str) -> str | None:
        try:
            response = self.client.passwords.create(
                email=email,
                password=password,
                untrusted_metadata={"full_name": display_name},
            )
        except StytchError as e:
            if e.details.error_type in DUPLICATE_EMAIL_ERROR_TYPES:
                raise IdentityConflict(_error_message(e)) from e
            raise IdentityStoreError(_error_message(e)) from e
        return response.user_id or None

    def update(self, identity_id: str, display_name: str) -> None:
        try:
            self.client.users.update(
                user_id=identity_id,
                untrusted_metadata={"full_name": display_name},
            )
        except StytchError as e:
            raise IdentityStoreError(_error_message(e)) from e

    def authenticate_session(self, token: str) -> str | None:
        try:
            response = self.client.sessions.authenticate_jwt(session_jwt=token)
        except StytchError as e:
            if e.details.status_code in UNAUTHENTICATED_STATUS_CODES:
                return None
            raise IdentityStoreError(_error_message(e)) from e
        session = getattr(response, "session", None)
        return getattr(session, "user_id", None)


def get_identity_store() -> IdentityStore:
    """Build an identity store from the provisioning-scoped credential."""
    return StytchIdentityStore.from_credentials(
        project_id=settings.PROVISIONING_STYTCH_PROJECT_ID,
        secret=settings.PROVISIONING_STYTCH_SECRET,
    )
