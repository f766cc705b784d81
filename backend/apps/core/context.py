"""
Service context passed into every store call.

Provisioning writes through an elevated credential. Instead of a process-wide
client, each request builds one ServiceContext holding the narrowly scoped
identity store client, the database alias and the acting caller; services
take it as their first argument and never reach for globals.
"""

from dataclasses import dataclass

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS

from apps.accounts.identity_store import IdentityStore, get_identity_store


@dataclass(frozen=True)
class ServiceContext:
    """Per-request handle on the backing stores."""

    identity_store: IdentityStore
    db_alias: str = DEFAULT_DB_ALIAS
    actor_id: str | None = None


def build_service_context(actor_id: str | None = None) -> ServiceContext:
    """Create a fresh context for one request."""
    return ServiceContext(
        identity_store=get_identity_store(),
        db_alias=getattr(settings, "PROVISIONING_DB_ALIAS", DEFAULT_DB_ALIAS),
        actor_id=actor_id,
    )
