"""
Core types and exceptions for the KYC whitelist registry.
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass

import base58


# Account identifiers are opaque strings; see utils.validate_account_id
AccountId = str


class KeyType(Enum):
    """Supported public key curves"""
    ED25519 = "ed25519"
    SECP256K1 = "secp256k1"

    @property
    def tag(self) -> int:
        """Single-byte curve tag used in the binary encoding"""
        return _KEY_TAGS[self]

    @property
    def key_length(self) -> int:
        """Length of the raw key data in bytes"""
        return _KEY_LENGTHS[self]

    @classmethod
    def from_tag(cls, tag: int) -> "KeyType":
        for key_type, key_tag in _KEY_TAGS.items():
            if key_tag == tag:
                return key_type
        raise InvalidPublicKeyError(f"Unknown key type tag: {tag}")


_KEY_TAGS = {
    KeyType.ED25519: 0,
    KeyType.SECP256K1: 1,
}

_KEY_LENGTHS = {
    KeyType.ED25519: 32,
    KeyType.SECP256K1: 64,
}


@dataclass(frozen=True)
class PublicKey:
    """
    Public key supplied by an account.

    The registry never checks that the key is a valid curve point; it only
    stores it and compares it for equality.
    """
    key_type: KeyType
    data: bytes

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray)) or not self.data:
            raise InvalidPublicKeyError("Public key data must be a non-empty byte string")
        if len(self.data) != self.key_type.key_length:
            raise InvalidPublicKeyError(
                f"{self.key_type.value} public key must be {self.key_type.key_length} bytes, "
                f"got {len(self.data)}"
            )
        # Normalise bytearray input so instances stay hashable
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_string(cls, value: str) -> "PublicKey":
        """Parse the textual form ``<curve>:<base58 data>``.

        A bare base58 string is read as an ed25519 key.
        """
        if not isinstance(value, str) or not value.strip():
            raise InvalidPublicKeyError("Public key string is empty")

        if ":" in value:
            prefix, encoded = value.split(":", 1)
            try:
                key_type = KeyType(prefix.lower())
            except ValueError:
                raise InvalidPublicKeyError(f"Unknown key type: {prefix}")
        else:
            key_type, encoded = KeyType.ED25519, value

        try:
            data = base58.b58decode(encoded)
        except ValueError as e:
            raise InvalidPublicKeyError(f"Public key is not valid base58: {e}")

        return cls(key_type, data)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "PublicKey":
        """Decode the binary form produced by ``to_bytes``"""
        if not raw:
            raise InvalidPublicKeyError("Encoded public key is empty")
        return cls(KeyType.from_tag(raw[0]), bytes(raw[1:]))

    def to_bytes(self) -> bytes:
        """Binary form: one curve tag byte followed by the key data"""
        return bytes([self.key_type.tag]) + self.data

    def __str__(self) -> str:
        return f"{self.key_type.value}:{base58.b58encode(self.data).decode()}"


class WhitelistError(Exception):
    """Base exception for whitelist registry operations"""
    error_code = "WHITELIST_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        if error_code is not None:
            self.error_code = error_code
        super().__init__(message)


class PermissionDeniedError(WhitelistError):
    """Caller lacks the role required by the operation"""
    error_code = "PERMISSION_DENIED"


class ValidationError(WhitelistError):
    """Malformed input rejected before any state change"""
    error_code = "VALIDATION_FAILED"


class InvalidAccountIdError(ValidationError):
    """Account identifier does not follow the account id rules"""
    pass


class InvalidPublicKeyError(ValidationError):
    """Public key is empty, has an unknown curve or a wrong length"""
    pass


class InvalidSignatureError(ValidationError):
    """Signature does not match the message and public key"""
    pass


class PreconditionFailedError(WhitelistError):
    """State precondition of a strict registry policy is not met"""
    error_code = "PRECONDITION_FAILED"


class ApplicantAlreadyExistsError(PreconditionFailedError):
    """Applicant entry already exists for the caller"""
    pass


class AlreadyWhitelistedError(PreconditionFailedError):
    """Account is already on the whitelist"""
    pass


class UnknownApplicantError(PreconditionFailedError):
    """No applicant entry exists for the account"""
    pass


class RegistryNotInitializedError(WhitelistError):
    """Store holds no registry state"""
    error_code = "NOT_INITIALIZED"


class RegistryAlreadyInitializedError(WhitelistError):
    """Store already holds registry state"""
    error_code = "ALREADY_INITIALIZED"


class StorageError(WhitelistError):
    """The key-value backend failed"""
    error_code = "STORAGE_ERROR"
