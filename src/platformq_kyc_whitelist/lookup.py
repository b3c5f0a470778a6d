"""
Persistent collections keyed by account id.

Each collection views the shared state store under its own key prefix, so
several collections can live in one cache without clashing.
"""

from typing import Optional

from .interfaces import IStateStore
from .types import AccountId, PublicKey
from .utils import storage_key

# Value written for set members; only key presence matters
MEMBER_MARKER = b"\x01"


class LookupMap:
    """Map from account id to public key"""

    def __init__(self, store: IStateStore, prefix: str):
        self.store = store
        self.prefix = prefix

    def get(self, account_id: AccountId) -> Optional[PublicKey]:
        raw = self.store.get(storage_key(self.prefix, account_id))
        return PublicKey.from_bytes(raw) if raw is not None else None

    def insert(self, account_id: AccountId, public_key: PublicKey) -> Optional[PublicKey]:
        """Insert or replace the entry, returning the previous key"""
        previous = self.store.set(storage_key(self.prefix, account_id), public_key.to_bytes())
        return PublicKey.from_bytes(previous) if previous is not None else None

    def remove(self, account_id: AccountId) -> Optional[PublicKey]:
        removed = self.store.remove(storage_key(self.prefix, account_id))
        return PublicKey.from_bytes(removed) if removed is not None else None

    def contains_key(self, account_id: AccountId) -> bool:
        return self.store.contains(storage_key(self.prefix, account_id))


class LookupSet:
    """Set of account ids"""

    def __init__(self, store: IStateStore, prefix: str):
        self.store = store
        self.prefix = prefix

    def contains(self, account_id: AccountId) -> bool:
        return self.store.contains(storage_key(self.prefix, account_id))

    def insert(self, account_id: AccountId) -> bool:
        """Add a member. Returns False if it was already present."""
        return self.store.set(storage_key(self.prefix, account_id), MEMBER_MARKER) is None

    def remove(self, account_id: AccountId) -> bool:
        """Remove a member. Returns False if it was not present."""
        return self.store.remove(storage_key(self.prefix, account_id)) is not None
