"""
PlatformQ KYC Whitelist

Access-controlled registry of accounts that completed KYC verification,
with pending applicants and the service accounts allowed to approve them.
"""

from .types import (
    AccountId,
    KeyType,
    PublicKey,
    WhitelistError,
    PermissionDeniedError,
    ValidationError,
    InvalidAccountIdError,
    InvalidPublicKeyError,
    InvalidSignatureError,
    PreconditionFailedError,
    ApplicantAlreadyExistsError,
    AlreadyWhitelistedError,
    UnknownApplicantError,
    RegistryNotInitializedError,
    RegistryAlreadyInitializedError,
    StorageError
)

from .interfaces import IStateStore
from .models import CallContext
from .registry import WhitelistRegistry
from .config import WhitelistSettings, get_settings
from .storage import create_store, InMemoryStore, IgniteStore

from .utils import (
    is_valid_account_id,
    validate_account_id
)

from .crypto import (
    generate_keypair,
    public_key_of,
    sign_message,
    verify_signature
)

__all__ = [
    # Types
    "AccountId",
    "KeyType",
    "PublicKey",

    # Errors
    "WhitelistError",
    "PermissionDeniedError",
    "ValidationError",
    "InvalidAccountIdError",
    "InvalidPublicKeyError",
    "InvalidSignatureError",
    "PreconditionFailedError",
    "ApplicantAlreadyExistsError",
    "AlreadyWhitelistedError",
    "UnknownApplicantError",
    "RegistryNotInitializedError",
    "RegistryAlreadyInitializedError",
    "StorageError",

    # Registry
    "IStateStore",
    "CallContext",
    "WhitelistRegistry",

    # Config & storage
    "WhitelistSettings",
    "get_settings",
    "create_store",
    "InMemoryStore",
    "IgniteStore",

    # Utils
    "is_valid_account_id",
    "validate_account_id",
    "generate_keypair",
    "public_key_of",
    "sign_message",
    "verify_signature"
]

__version__ = "1.0.0"
