"""
KYC Whitelist Registry - access-controlled record of verified accounts.
"""

import logging
from typing import Optional

from .interfaces import IStateStore
from .lookup import LookupMap, LookupSet
from .models import CallContext
from .types import (
    AccountId,
    PublicKey,
    PermissionDeniedError,
    ApplicantAlreadyExistsError,
    AlreadyWhitelistedError,
    UnknownApplicantError,
    RegistryNotInitializedError,
    RegistryAlreadyInitializedError,
    StorageError,
)
from .utils import validate_account_id

logger = logging.getLogger(__name__)

ADMIN_PK_KEY = "STATE:admin_pk"
SERVICE_ACCOUNTS_PREFIX = "s:"
APPLICANTS_PREFIX = "a:"
WHITELIST_PREFIX = "w:"


class WhitelistRegistry:
    """
    Registry of applicants, whitelisted accounts and service accounts.

    Roles:
    - Any account may register itself as an applicant with its public key.
    - Service accounts move accounts onto and off the whitelist.
    - The holder of the administrator key manages the service accounts.

    The host serializes calls; each operation finishes its checks before the
    first write, so a rejected call leaves the state untouched.
    """

    def __init__(self,
                 store: IStateStore,
                 admin_pk: PublicKey,
                 strict_registration: bool = False,
                 require_applicant: bool = False):
        """
        Attach to ``store``, writing ``admin_pk`` if the store is empty.

        Raises:
            RegistryAlreadyInitializedError: If the store holds a different
                administrator key
        """
        stored = store.get(ADMIN_PK_KEY)
        if stored is None:
            store.set(ADMIN_PK_KEY, admin_pk.to_bytes())
            logger.info(f"Initialized whitelist registry with administrator key {admin_pk}")
        elif PublicKey.from_bytes(stored) != admin_pk:
            raise RegistryAlreadyInitializedError(
                "Store is already initialized with a different administrator key"
            )

        self._store = store
        self._admin_pk = admin_pk
        self.strict_registration = strict_registration
        self.require_applicant = require_applicant

        self.service_accounts = LookupSet(store, SERVICE_ACCOUNTS_PREFIX)
        self.applicants = LookupMap(store, APPLICANTS_PREFIX)
        self.whitelist = LookupSet(store, WHITELIST_PREFIX)

    @classmethod
    def initialize(cls, store: IStateStore, admin_pk: PublicKey, **policy) -> "WhitelistRegistry":
        """Create registry state in an empty store"""
        if store.contains(ADMIN_PK_KEY):
            raise RegistryAlreadyInitializedError("Registry state already exists in this store")
        return cls(store, admin_pk, **policy)

    @classmethod
    def load(cls, store: IStateStore, **policy) -> "WhitelistRegistry":
        """Reattach to registry state written by an earlier ``initialize``"""
        stored = store.get(ADMIN_PK_KEY)
        if stored is None:
            raise RegistryNotInitializedError("No registry state found in this store")
        return cls(store, PublicKey.from_bytes(stored), **policy)

    @property
    def admin_pk(self) -> PublicKey:
        return self._admin_pk

    # Getters

    def is_service_account_whitelisted(self, service_account_id: AccountId) -> bool:
        validate_account_id(service_account_id)
        return self.service_accounts.contains(service_account_id)

    def get_applicant_pk(self, applicant_account_id: AccountId) -> Optional[PublicKey]:
        validate_account_id(applicant_account_id)
        return self.applicants.get(applicant_account_id)

    def is_whitelisted(self, account_id: AccountId) -> bool:
        validate_account_id(account_id)
        return self.whitelist.contains(account_id)

    # Administrator

    def add_service_account(self, ctx: CallContext, service_account_id: AccountId) -> bool:
        """Add a service account. Returns False if it already existed."""
        self._assert_called_by_admin(ctx)
        validate_account_id(service_account_id)

        added = self.service_accounts.insert(service_account_id)
        if added:
            logger.info(f"Added service account {service_account_id}")
        else:
            logger.debug(f"Service account {service_account_id} already present")
        return added

    def remove_service_account(self, ctx: CallContext, service_account_id: AccountId) -> bool:
        """Remove a service account. Returns False if it was not present."""
        self._assert_called_by_admin(ctx)
        validate_account_id(service_account_id)

        removed = self.service_accounts.remove(service_account_id)
        if removed:
            logger.info(f"Removed service account {service_account_id}")
        else:
            logger.debug(f"Service account {service_account_id} not present")
        return removed

    # Applicant

    def register_applicant(self, ctx: CallContext) -> Optional[PublicKey]:
        """
        Store the caller's public key as a pending applicant.

        Re-registering replaces the key and returns the previous one. With
        ``strict_registration`` re-registering is rejected instead.

        Raises:
            AlreadyWhitelistedError: If the caller is already whitelisted
            ApplicantAlreadyExistsError: On re-registration in strict mode
        """
        applicant_account_id = ctx.signer_account_id

        if self.whitelist.contains(applicant_account_id):
            raise AlreadyWhitelistedError(f"Account {applicant_account_id} is already whitelisted")
        if self.strict_registration and self.applicants.contains_key(applicant_account_id):
            raise ApplicantAlreadyExistsError(f"Applicant {applicant_account_id} already exists")

        previous = self.applicants.insert(applicant_account_id, ctx.signer_public_key)
        if previous is not None:
            logger.info(f"Replaced public key of applicant {applicant_account_id}")
        else:
            logger.info(f"Registered applicant {applicant_account_id}")
        return previous

    def remove_applicant(self, ctx: CallContext) -> Optional[PublicKey]:
        """Remove the caller's own applicant entry, returning the removed key"""
        removed = self.applicants.remove(ctx.signer_account_id)
        if removed is not None:
            logger.info(f"Applicant {ctx.signer_account_id} withdrew")
        return removed

    # Service

    def add_account(self, ctx: CallContext, account_id: AccountId) -> bool:
        """
        Whitelist a verified account and drop its applicant entry.

        Returns False if the account was already whitelisted.

        Raises:
            PermissionDeniedError: If the caller is not a service account
            UnknownApplicantError: If ``require_applicant`` is set and the
                account never registered
        """
        self._assert_called_by_service(ctx)
        validate_account_id(account_id)

        if self.require_applicant and not self.applicants.contains_key(account_id):
            raise UnknownApplicantError(f"Unknown applicant {account_id}")

        removed = self.applicants.remove(account_id)
        try:
            added = self.whitelist.insert(account_id)
        except StorageError:
            if removed is not None:
                logger.error(f"Whitelist write failed for {account_id}; restoring applicant entry")
                self.applicants.insert(account_id, removed)
            raise
        if added:
            logger.info(f"Service account {ctx.predecessor_account_id} whitelisted {account_id}")
        else:
            logger.debug(f"Account {account_id} already whitelisted")
        return added

    def remove_account(self, ctx: CallContext, account_id: AccountId) -> bool:
        """Remove an account from the whitelist. Returns False if it was not listed."""
        self._assert_called_by_service(ctx)
        validate_account_id(account_id)

        removed = self.whitelist.remove(account_id)
        if removed:
            logger.info(f"Service account {ctx.predecessor_account_id} removed {account_id} from whitelist")
        else:
            logger.debug(f"Account {account_id} was not whitelisted")
        return removed

    # Internal

    def _assert_called_by_admin(self, ctx: CallContext) -> None:
        if ctx.signer_public_key != self._admin_pk:
            logger.warning(f"Administrator call rejected for signer {ctx.signer_account_id}")
            raise PermissionDeniedError("Can only be called by whitelist administrator")

    def _assert_called_by_service(self, ctx: CallContext) -> None:
        if not self.service_accounts.contains(ctx.predecessor_account_id):
            logger.warning(f"Service call rejected for {ctx.predecessor_account_id}")
            raise PermissionDeniedError("Can only be called by whitelist service account")
