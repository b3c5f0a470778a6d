"""
Utility functions for account identifiers and registry storage keys.
"""

import re

from .types import AccountId, InvalidAccountIdError

MIN_ACCOUNT_ID_LEN = 2
MAX_ACCOUNT_ID_LEN = 64

# Dot-separated parts of lowercase alphanumerics, joined inside a part by single '-' or '_'
_ACCOUNT_ID_RE = re.compile(r'(([a-z\d]+[\-_])*[a-z\d]+\.)*([a-z\d]+[\-_])*[a-z\d]+')


def is_valid_account_id(account_id: str) -> bool:
    """Check account id length and format"""
    if not isinstance(account_id, str):
        return False
    if not MIN_ACCOUNT_ID_LEN <= len(account_id) <= MAX_ACCOUNT_ID_LEN:
        return False
    return bool(_ACCOUNT_ID_RE.fullmatch(account_id))


def validate_account_id(account_id: str) -> AccountId:
    """Return the account id unchanged or raise InvalidAccountIdError"""
    if not is_valid_account_id(account_id):
        raise InvalidAccountIdError(f"Invalid account id: {account_id!r}")
    return account_id


def storage_key(prefix: str, account_id: AccountId) -> str:
    """Build the key of an account entry inside a prefixed collection"""
    return f"{prefix}{account_id}"
