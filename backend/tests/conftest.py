"""
Shared pytest fixtures for all tests.

Factories
---------
Import factories directly from their modules:

    from tests.accounts.factories import OrganizationFactory, ProfileFactory
    from tests.staff.factories import StaffRecordFactory

Identity store
--------------
Services never talk to the real identity provider in tests. The
``identity_store`` fixture is an in-memory double that records calls, and
``service_context`` wraps it the way a request would.

Example usage:

    @pytest.mark.django_db
    def test_something(service_context, identity_store):
        resolve_identity(service_context, "a@example.org", "secret1", "A B")
        assert identity_store.calls_to("create") == 1
"""

from unittest.mock import patch

import pytest
from django.test import Client, RequestFactory

from apps.accounts.constants import Role
from apps.core.auth import AuthContext
from apps.core.context import ServiceContext
from tests.accounts.fakes import InMemoryIdentityStore


@pytest.fixture
def identity_store() -> InMemoryIdentityStore:
    """Fresh in-memory identity store."""
    return InMemoryIdentityStore()


@pytest.fixture
def service_context(identity_store: InMemoryIdentityStore) -> ServiceContext:
    """ServiceContext backed by the in-memory identity store."""
    return ServiceContext(identity_store=identity_store, actor_id="user-test-admin")


@pytest.fixture
def request_factory() -> RequestFactory:
    """
    Django request factory for unit testing views.

    Use this when calling endpoint functions directly; set ``request.auth``
    to an AuthContext to simulate an authenticated caller.
    """
    return RequestFactory()


@pytest.fixture
def api_client() -> Client:
    """Django test client for full HTTP request/response cycle tests."""
    return Client()


@pytest.fixture
def school(db):
    """A school named so its abbreviation is GPA."""
    from tests.accounts.factories import OrganizationFactory

    return OrganizationFactory.create(name="Great Pearl Academy")


@pytest.fixture
def admin_profile(school):
    """ADMIN profile linked to ``school``."""
    from tests.accounts.factories import ProfileFactory

    return ProfileFactory.create(
        identity_id="user-test-admin",
        email="admin@example.org",
        role=Role.ADMIN,
        organization=school,
    )


@pytest.fixture
def admin_caller(admin_profile) -> AuthContext:
    """AuthContext for the ADMIN of ``school``."""
    return AuthContext(
        identity_id=admin_profile.identity_id,
        role=admin_profile.role,
        organization_id=admin_profile.organization_id,
    )


@pytest.fixture
def patched_identity_store(identity_store: InMemoryIdentityStore):
    """
    Route every get_identity_store() call to the in-memory store.

    Needed for full HTTP tests, where the auth class and the endpoint build
    their own store from settings.
    """
    with (
        patch("apps.core.security.get_identity_store", return_value=identity_store),
        patch("apps.core.context.get_identity_store", return_value=identity_store),
    ):
        yield identity_store
