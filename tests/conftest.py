"""
Shared fixtures for the KYC whitelist tests
"""

import pytest

from platformq_kyc_whitelist import (
    CallContext,
    InMemoryStore,
    WhitelistRegistry,
    generate_keypair,
)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def admin_keypair():
    return generate_keypair()


@pytest.fixture
def admin_pk(admin_keypair):
    return admin_keypair[1]


@pytest.fixture
def user_keypair():
    return generate_keypair()


@pytest.fixture
def user_pk(user_keypair):
    return user_keypair[1]


@pytest.fixture
def registry(store, admin_pk):
    return WhitelistRegistry.initialize(store, admin_pk)


@pytest.fixture
def make_context():
    """Build the context the host would deliver for a caller"""
    def _make(account_id, public_key=None, predecessor=None):
        if public_key is None:
            public_key = generate_keypair()[1]
        return CallContext(
            signer_account_id=account_id,
            signer_public_key=public_key,
            predecessor_account_id=predecessor,
        )
    return _make


@pytest.fixture
def admin_ctx(make_context, admin_pk):
    return make_context("admin", admin_pk)


@pytest.fixture
def service_ctx(registry, admin_ctx, make_context):
    """Context of a service account already added by the administrator"""
    registry.add_service_account(admin_ctx, "service")
    return make_context("service")


@pytest.fixture
def user_ctx(make_context, user_pk):
    return make_context("user", user_pk)
