"""
Accounts services - identity resolution and profile sync.

Both operations are safe to replay: resolving the same email always lands
on the same identity, and syncing the same profile twice leaves no diff.
The provisioning saga relies on this instead of compensating writes.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import DatabaseError, IntegrityError, transaction

from apps.accounts.constants import MIN_PASSWORD_LENGTH
from apps.accounts.exceptions import (
    IdentityConflict,
    IdentityCreationIncomplete,
    InvalidIdentityInput,
    ProfileWriteError,
)
from apps.accounts.models import Profile
from apps.core.logging import get_logger

if TYPE_CHECKING:
    from apps.core.context import ServiceContext
    from apps.organizations.models import Organization

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedIdentity:
    """Result of resolve_identity."""

    identity_id: str
    created: bool


def normalize_email(email: str) -> str:
    """Emails are matched trimmed and case-insensitively."""
    return email.strip().lower()


def resolve_identity(
    ctx: "ServiceContext",
    email: str,
    password: str,
    display_name: str = "",
) -> ResolvedIdentity:
    """
    Find the identity for an email, creating it if none exists.

    An existing identity is reused and its display metadata refreshed.
    If creation loses a race to a concurrent request for the same email,
    the winner's identity is reused.

    Raises:
        InvalidIdentityInput: Empty email, or password too short for a new identity
        IdentityStoreError: The identity store call failed
        IdentityCreationIncomplete: Creation succeeded without returning an id
    """
    email = normalize_email(email)
    if not email:
        raise InvalidIdentityInput("Email is required")

    store = ctx.identity_store

    existing = store.find_by_email(email)
    if existing is not None:
        if display_name:
            store.update(existing.identity_id, display_name)
        logger.info("identity_reused", identity_id=existing.identity_id, email=email)
        return ResolvedIdentity(identity_id=existing.identity_id, created=False)

    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidIdentityInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    try:
        identity_id = store.create(email, password, display_name)
    except IdentityConflict:
        winner = store.find_by_email(email)
        if winner is None:
            raise
        logger.info("identity_reused_after_conflict", identity_id=winner.identity_id, email=email)
        return ResolvedIdentity(identity_id=winner.identity_id, created=False)

    if not identity_id:
        raise IdentityCreationIncomplete("Identity was created but no id was returned.")

    logger.info("identity_created", identity_id=identity_id, email=email)
    return ResolvedIdentity(identity_id=identity_id, created=True)


def sync_profile(
    ctx: "ServiceContext",
    identity_id: str,
    email: str,
    full_name: str | None,
    role: str,
    organization: "Organization | None",
) -> Profile:
    """
    Upsert the Profile for an identity (last writer wins).

    Uses select_for_update for explicit row locking under concurrent requests.
    Fields are only written when they differ, so a repeated call with the
    same arguments does not touch the row. A full_name of None leaves the
    stored name as it is.

    Raises:
        ProfileWriteError: The database rejected the write
    """
    values = {
        "email": normalize_email(email),
        "role": role,
        "organization_id": organization.pk if organization is not None else None,
    }
    if full_name is not None:
        values["full_name"] = full_name
    try:
        with transaction.atomic(using=ctx.db_alias):
            return _upsert_profile(ctx.db_alias, identity_id, values)
    except DatabaseError as e:
        logger.warning("profile_write_failed", identity_id=identity_id, error=str(e))
        raise ProfileWriteError(str(e), cause=e) from e


def _upsert_profile(db_alias: str, identity_id: str, values: dict) -> Profile:
    profiles = Profile.objects.using(db_alias)
    try:
        profile = profiles.select_for_update().get(identity_id=identity_id)
    except Profile.DoesNotExist:
        try:
            with transaction.atomic(using=db_alias):
                profile = profiles.create(identity_id=identity_id, **values)
        except IntegrityError:
            # Concurrent insert won the race, update the winner
            profile = profiles.select_for_update().get(identity_id=identity_id)
        else:
            logger.info("profile_created", identity_id=identity_id, role=values["role"])
            return profile

    changed = [field for field, value in values.items() if getattr(profile, field) != value]
    if changed:
        for field in changed:
            setattr(profile, field, values[field])
        update_fields = ["organization" if f == "organization_id" else f for f in changed]
        profile.save(using=db_alias, update_fields=[*update_fields, "updated_at"])

    logger.info("profile_synced", identity_id=identity_id, changed_fields=changed)
    return profile
