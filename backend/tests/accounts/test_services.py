"""
Tests for accounts services.
"""

from unittest.mock import patch

import pytest
from django.db import OperationalError

from apps.accounts.constants import Role
from apps.accounts.exceptions import (
    IdentityConflict,
    IdentityCreationIncomplete,
    IdentityStoreError,
    InvalidIdentityInput,
    ProfileWriteError,
)
from apps.accounts.models import Profile
from apps.accounts.services import normalize_email, resolve_identity, sync_profile

from .factories import OrganizationFactory, ProfileFactory


class TestNormalizeEmail:
    """Tests for normalize_email."""

    def test_trims_and_lowercases(self) -> None:
        assert normalize_email("  A.Mugisha@Example.ORG ") == "a.mugisha@example.org"


class TestResolveIdentity:
    """Tests for resolve_identity."""

    def test_creates_identity_when_none_exists(self, service_context, identity_store) -> None:
        """Should create a new identity carrying the display name."""
        resolved = resolve_identity(service_context, "a@example.org", "secret1", "Alice Mugisha")

        assert resolved.created is True
        assert identity_store.identities["a@example.org"].identity_id == resolved.identity_id
        assert identity_store.display_names[resolved.identity_id] == "Alice Mugisha"
        assert identity_store.passwords[resolved.identity_id] == "secret1"

    def test_reuses_existing_identity(self, service_context, identity_store) -> None:
        """Should return the existing identity and refresh its display name."""
        existing = identity_store.add_identity("a@example.org", "user-test-existing")

        resolved = resolve_identity(service_context, "a@example.org", "secret1", "Alice M")

        assert resolved.identity_id == existing.identity_id
        assert resolved.created is False
        assert identity_store.calls_to("create") == 0
        assert identity_store.display_names[existing.identity_id] == "Alice M"

    def test_reuse_without_display_name_skips_update(
        self, service_context, identity_store
    ) -> None:
        """Should not touch the identity when there is nothing to refresh."""
        identity_store.add_identity("a@example.org")

        resolve_identity(service_context, "a@example.org", "secret1")

        assert identity_store.calls_to("update") == 0

    def test_matches_email_case_insensitively(self, service_context, identity_store) -> None:
        """Should normalize the email before lookup."""
        existing = identity_store.add_identity("a@example.org")

        resolved = resolve_identity(service_context, " A@Example.org ", "secret1")

        assert resolved.identity_id == existing.identity_id

    def test_is_idempotent(self, service_context, identity_store) -> None:
        """Should land on the same identity when called twice."""
        first = resolve_identity(service_context, "a@example.org", "secret1", "Alice")
        second = resolve_identity(service_context, "a@example.org", "secret1", "Alice")

        assert first.identity_id == second.identity_id
        assert identity_store.calls_to("create") == 1
        assert len(identity_store.identities) == 1

    def test_reuses_winner_after_create_conflict(self, service_context, identity_store) -> None:
        """Should return the concurrent winner's identity instead of failing."""
        identity_store.conflict_on_create = True

        resolved = resolve_identity(service_context, "a@example.org", "secret1")

        assert resolved.created is False
        assert resolved.identity_id == identity_store.identities["a@example.org"].identity_id
        assert identity_store.calls_to("find_by_email") == 2

    def test_conflict_without_winner_propagates(self, service_context, identity_store) -> None:
        """Should re-raise when the conflicting identity cannot be found."""
        with patch.object(
            identity_store, "create", side_effect=IdentityConflict("already exists")
        ):
            with pytest.raises(IdentityConflict):
                resolve_identity(service_context, "a@example.org", "secret1")

    def test_create_without_id_is_incomplete(self, service_context, identity_store) -> None:
        """Should raise when the store reports success but returns no id."""
        identity_store.create_returns_no_id = True

        with pytest.raises(IdentityCreationIncomplete):
            resolve_identity(service_context, "a@example.org", "secret1")

    def test_store_failure_propagates(self, service_context, identity_store) -> None:
        """Should surface identity store failures."""
        identity_store.fail_lookup = "Service unavailable"

        with pytest.raises(IdentityStoreError, match="Service unavailable"):
            resolve_identity(service_context, "a@example.org", "secret1")

    def test_short_password_rejected_for_new_identity(
        self, service_context, identity_store
    ) -> None:
        """Should refuse to create an identity with a short password."""
        with pytest.raises(InvalidIdentityInput):
            resolve_identity(service_context, "a@example.org", "abc")

        assert identity_store.calls_to("create") == 0

    def test_empty_email_rejected(self, service_context, identity_store) -> None:
        """Should reject an empty email before calling the store."""
        with pytest.raises(InvalidIdentityInput):
            resolve_identity(service_context, "   ", "secret1")

        assert identity_store.calls == []


@pytest.mark.django_db
class TestSyncProfile:
    """Tests for sync_profile."""

    def test_creates_profile(self, service_context) -> None:
        """Should create a profile linked to the organization."""
        org = OrganizationFactory()

        profile = sync_profile(
            service_context,
            identity_id="user-test-1",
            email="A@Example.org",
            full_name="Alice Mugisha",
            role=Role.TEACHER,
            organization=org,
        )

        assert profile.identity_id == "user-test-1"
        assert profile.email == "a@example.org"
        assert profile.full_name == "Alice Mugisha"
        assert profile.role == Role.TEACHER
        assert profile.organization == org
        assert Profile.objects.count() == 1

    def test_updates_existing_profile(self, service_context) -> None:
        """Should overwrite role, name and organization (last writer wins)."""
        old_org = OrganizationFactory()
        new_org = OrganizationFactory()
        existing = ProfileFactory(
            identity_id="user-test-1",
            full_name="Old Name",
            role=Role.STUDENT,
            organization=old_org,
        )

        profile = sync_profile(
            service_context,
            identity_id="user-test-1",
            email=existing.email,
            full_name="New Name",
            role=Role.TEACHER,
            organization=new_org,
        )

        profile.refresh_from_db()
        assert profile.pk == existing.pk
        assert profile.full_name == "New Name"
        assert profile.role == Role.TEACHER
        assert profile.organization == new_org
        assert Profile.objects.count() == 1

    def test_repeat_call_leaves_row_untouched(self, service_context) -> None:
        """Should not write when nothing changed."""
        org = OrganizationFactory()
        kwargs = {
            "identity_id": "user-test-1",
            "email": "a@example.org",
            "full_name": "Alice Mugisha",
            "role": Role.TEACHER,
            "organization": org,
        }
        first = sync_profile(service_context, **kwargs)

        second = sync_profile(service_context, **kwargs)

        second.refresh_from_db()
        assert second.pk == first.pk
        assert second.updated_at == first.updated_at

    def test_none_full_name_keeps_stored_name(self, service_context) -> None:
        """Should leave the stored name alone when no name is given."""
        org = OrganizationFactory()
        ProfileFactory(identity_id="user-test-1", full_name="Alice Mugisha", organization=org)

        profile = sync_profile(
            service_context,
            identity_id="user-test-1",
            email="a@example.org",
            full_name=None,
            role=Role.TEACHER,
            organization=org,
        )

        profile.refresh_from_db()
        assert profile.full_name == "Alice Mugisha"

    def test_database_failure_raises_profile_write_error(self, service_context) -> None:
        """Should wrap database failures in ProfileWriteError."""
        org = OrganizationFactory()

        with patch(
            "apps.accounts.services._upsert_profile",
            side_effect=OperationalError("database is locked"),
        ):
            with pytest.raises(ProfileWriteError) as exc_info:
                sync_profile(
                    service_context,
                    identity_id="user-test-1",
                    email="a@example.org",
                    full_name="Alice",
                    role=Role.TEACHER,
                    organization=org,
                )

        assert "database is locked" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, OperationalError)
