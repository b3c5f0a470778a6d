"""
Tests for the whitelist registry permission model and state transitions
"""

import pytest

from platformq_kyc_whitelist import (
    CallContext,
    InMemoryStore,
    WhitelistRegistry,
    PermissionDeniedError,
    InvalidAccountIdError,
    ApplicantAlreadyExistsError,
    AlreadyWhitelistedError,
    UnknownApplicantError,
    RegistryNotInitializedError,
    RegistryAlreadyInitializedError,
    StorageError,
    generate_keypair,
)
from platformq_kyc_whitelist.registry import ADMIN_PK_KEY, APPLICANTS_PREFIX


class WhitelistWriteFailingStore(InMemoryStore):
    """Store whose writes to the whitelist collection fail"""

    def set(self, key, value):
        if key.startswith("w:"):
            raise StorageError("whitelist write failed")
        return super().set(key, value)


class TestInitialization:

    def test_initialize_stores_admin_key(self, store, admin_pk):
        registry = WhitelistRegistry.initialize(store, admin_pk)
        assert registry.admin_pk == admin_pk
        assert store.contains(ADMIN_PK_KEY)

    def test_initialize_twice_fails(self, store, admin_pk):
        WhitelistRegistry.initialize(store, admin_pk)
        with pytest.raises(RegistryAlreadyInitializedError):
            WhitelistRegistry.initialize(store, admin_pk)

    def test_load_requires_state(self, store):
        with pytest.raises(RegistryNotInitializedError):
            WhitelistRegistry.load(store)

    def test_constructor_cannot_replace_admin_key(self, store, admin_pk):
        WhitelistRegistry(store, admin_pk)
        _, other_pk = generate_keypair()
        with pytest.raises(RegistryAlreadyInitializedError):
            WhitelistRegistry(store, other_pk)
        assert WhitelistRegistry.load(store).admin_pk == admin_pk

    def test_admin_key_has_no_setter(self, registry, admin_pk):
        with pytest.raises(AttributeError):
            registry.admin_pk = generate_keypair()[1]
        assert registry.admin_pk == admin_pk

    def test_state_survives_reload(self, store, registry, service_ctx, user_ctx, make_context):
        registry.register_applicant(make_context("bob"))
        registry.register_applicant(user_ctx)
        registry.add_account(service_ctx, "user")

        reloaded = WhitelistRegistry.load(store)
        assert reloaded.admin_pk == registry.admin_pk
        assert reloaded.is_service_account_whitelisted("service")
        assert reloaded.is_whitelisted("user")
        assert reloaded.get_applicant_pk("user") is None
        assert reloaded.get_applicant_pk("bob") is not None


class TestServiceAccounts:

    def test_add_and_remove(self, registry, admin_ctx):
        assert not registry.is_service_account_whitelisted("service")
        assert registry.add_service_account(admin_ctx, "service") is True
        assert registry.is_service_account_whitelisted("service")
        assert registry.add_service_account(admin_ctx, "service") is False

        assert registry.remove_service_account(admin_ctx, "service") is True
        assert not registry.is_service_account_whitelisted("service")
        assert registry.remove_service_account(admin_ctx, "service") is False

    def test_admin_is_identified_by_key_not_account(self, registry, admin_pk, make_context):
        ctx = make_context("someone-else", admin_pk)
        assert registry.add_service_account(ctx, "service") is True

    @pytest.mark.parametrize("target", ["service", "svc1", "Not-A-Valid-Id"])
    def test_non_admin_denied(self, registry, admin_ctx, user_ctx, make_context, target):
        registry.add_service_account(admin_ctx, "svc1")

        with pytest.raises(PermissionDeniedError, match="whitelist administrator"):
            registry.add_service_account(user_ctx, target)
        with pytest.raises(PermissionDeniedError):
            registry.remove_service_account(user_ctx, target)
        # Same account name as the admin but a different key
        with pytest.raises(PermissionDeniedError):
            registry.remove_service_account(make_context("admin"), target)

        assert registry.is_service_account_whitelisted("svc1")
        assert not registry.is_service_account_whitelisted("service")

    def test_admin_target_validated(self, registry, admin_ctx):
        with pytest.raises(InvalidAccountIdError):
            registry.add_service_account(admin_ctx, "")


class TestApplicants:

    def test_register_and_get(self, registry, user_ctx, user_pk):
        assert registry.register_applicant(user_ctx) is None
        assert registry.get_applicant_pk("user") == user_pk

    def test_last_write_wins(self, registry, make_context, user_pk):
        _, new_pk = generate_keypair()
        registry.register_applicant(make_context("user", user_pk))
        previous = registry.register_applicant(make_context("user", new_pk))
        assert previous == user_pk
        assert registry.get_applicant_pk("user") == new_pk

    def test_remove_own_entry(self, registry, user_ctx, user_pk):
        registry.register_applicant(user_ctx)
        assert registry.remove_applicant(user_ctx) == user_pk
        assert registry.get_applicant_pk("user") is None

    def test_remove_missing_entry_is_noop(self, store, registry, user_ctx):
        before = dict(store._data)
        assert registry.remove_applicant(user_ctx) is None
        assert store._data == before

    def test_isolation(self, registry, make_context):
        alice_ctx = make_context("alice")
        bob_ctx = make_context("bob")
        registry.register_applicant(alice_ctx)
        registry.register_applicant(bob_ctx)

        registry.remove_applicant(alice_ctx)
        assert registry.get_applicant_pk("alice") is None
        assert registry.get_applicant_pk("bob") == bob_ctx.signer_public_key

        registry.register_applicant(make_context("alice"))
        assert registry.get_applicant_pk("bob") == bob_ctx.signer_public_key

    def test_applicant_operations_use_signer(self, registry, make_context):
        ctx = make_context("alice", predecessor="relay")
        registry.register_applicant(ctx)
        assert registry.get_applicant_pk("alice") == ctx.signer_public_key
        assert registry.get_applicant_pk("relay") is None

    def test_whitelisted_account_cannot_register(self, registry, service_ctx, user_ctx):
        registry.add_account(service_ctx, "user")
        with pytest.raises(AlreadyWhitelistedError):
            registry.register_applicant(user_ctx)
        assert registry.get_applicant_pk("user") is None

    def test_strict_registration_rejects_duplicates(self, store, admin_pk, make_context):
        registry = WhitelistRegistry.initialize(store, admin_pk, strict_registration=True)
        ctx = make_context("user")
        registry.register_applicant(ctx)
        with pytest.raises(ApplicantAlreadyExistsError):
            registry.register_applicant(make_context("user"))
        assert registry.get_applicant_pk("user") == ctx.signer_public_key

    def test_lookup_validates_id(self, registry):
        with pytest.raises(InvalidAccountIdError):
            registry.get_applicant_pk("NOPE")


class TestWhitelist:

    def test_non_service_caller_denied(self, registry, user_ctx):
        registry.register_applicant(user_ctx)
        with pytest.raises(PermissionDeniedError, match="whitelist service account"):
            registry.add_account(user_ctx, "user")
        assert not registry.is_whitelisted("user")
        assert registry.get_applicant_pk("user") is not None

    def test_promotion_clears_applicant(self, registry, service_ctx, user_ctx):
        registry.register_applicant(user_ctx)
        assert registry.add_account(service_ctx, "user") is True
        assert registry.is_whitelisted("user")
        assert registry.get_applicant_pk("user") is None

    def test_add_without_registration(self, registry, service_ctx):
        assert registry.add_account(service_ctx, "direct") is True
        assert registry.is_whitelisted("direct")

    def test_add_is_idempotent(self, registry, service_ctx):
        assert registry.add_account(service_ctx, "user") is True
        assert registry.add_account(service_ctx, "user") is False
        assert registry.is_whitelisted("user")

    def test_remove_never_added(self, store, registry, service_ctx):
        before = dict(store._data)
        assert registry.remove_account(service_ctx, "ghost") is False
        assert store._data == before

    def test_remove_requires_service(self, registry, service_ctx, user_ctx):
        registry.add_account(service_ctx, "user")
        with pytest.raises(PermissionDeniedError):
            registry.remove_account(user_ctx, "user")
        assert registry.is_whitelisted("user")

    def test_service_check_uses_predecessor(self, registry, service_ctx, make_context):
        relayed = make_context("user", predecessor="service")
        assert registry.add_account(relayed, "alice") is True
        signed_by_service = make_context("service", predecessor="user")
        with pytest.raises(PermissionDeniedError):
            registry.add_account(signed_by_service, "bob")

    def test_removed_service_account_loses_rights(self, registry, admin_ctx, service_ctx):
        registry.remove_service_account(admin_ctx, "service")
        with pytest.raises(PermissionDeniedError):
            registry.add_account(service_ctx, "user")

    def test_require_applicant(self, store, admin_pk, admin_ctx, make_context):
        registry = WhitelistRegistry.initialize(store, admin_pk, require_applicant=True)
        registry.add_service_account(admin_ctx, "service")
        service_ctx = make_context("service")

        with pytest.raises(UnknownApplicantError):
            registry.add_account(service_ctx, "user")
        assert not registry.is_whitelisted("user")

        registry.register_applicant(make_context("user"))
        assert registry.add_account(service_ctx, "user") is True

    def test_invalid_target_rejected_without_change(self, store, registry, service_ctx):
        before = dict(store._data)
        with pytest.raises(InvalidAccountIdError):
            registry.add_account(service_ctx, "Bad Id")
        assert store._data == before

    def test_failed_whitelist_write_keeps_applicant(self, admin_pk, admin_ctx, make_context, user_pk):
        store = WhitelistWriteFailingStore()
        registry = WhitelistRegistry.initialize(store, admin_pk)
        registry.add_service_account(admin_ctx, "service")
        registry.register_applicant(make_context("alice", user_pk))

        with pytest.raises(StorageError):
            registry.add_account(make_context("service"), "alice")

        assert store.contains(f"{APPLICANTS_PREFIX}alice")
        assert registry.get_applicant_pk("alice") == user_pk
        assert not registry.is_whitelisted("alice")


class TestWhitelistFlow:

    def test_end_to_end(self):
        store = InMemoryStore()
        _, admin_pk = generate_keypair()
        _, k1 = generate_keypair()
        registry = WhitelistRegistry.initialize(store, admin_pk)

        alice = CallContext("alice", k1)
        admin = CallContext("admin", admin_pk)
        svc1 = CallContext("svc1", generate_keypair()[1])

        registry.register_applicant(alice)
        assert registry.get_applicant_pk("alice") == k1

        assert registry.add_service_account(admin, "svc1") is True
        assert registry.add_account(svc1, "alice") is True
        assert registry.is_whitelisted("alice")
        assert registry.get_applicant_pk("alice") is None

        assert registry.remove_account(svc1, "alice") is True
        assert not registry.is_whitelisted("alice")
