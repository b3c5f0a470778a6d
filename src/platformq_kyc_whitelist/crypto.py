"""
Ed25519 key handling and signature checks used at the host boundary.
"""

import logging
from typing import Tuple

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from .types import (
    KeyType,
    PublicKey,
    InvalidPublicKeyError,
    InvalidSignatureError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ED25519_SEED_LENGTH = 32


def generate_keypair() -> Tuple[ed25519.Ed25519PrivateKey, PublicKey]:
    """Generate a new ed25519 keypair"""
    private_key = ed25519.Ed25519PrivateKey.generate()
    return private_key, public_key_of(private_key)


def public_key_of(private_key: ed25519.Ed25519PrivateKey) -> PublicKey:
    """Registry public key for an ed25519 private key"""
    return PublicKey(KeyType.ED25519, private_key.public_key().public_bytes_raw())


def private_key_to_string(private_key: ed25519.Ed25519PrivateKey) -> str:
    """Serialize a private key as ``ed25519:<base58 seed>``"""
    seed = private_key.private_bytes_raw()
    return f"{KeyType.ED25519.value}:{base58.b58encode(seed).decode()}"


def load_private_key(value: str) -> ed25519.Ed25519PrivateKey:
    """Parse a private key written by ``private_key_to_string``"""
    value = value.strip()
    prefix, _, encoded = value.rpartition(":")
    if prefix and prefix.lower() != KeyType.ED25519.value:
        raise ValidationError(f"Only ed25519 private keys are supported, got {prefix}")

    try:
        seed = base58.b58decode(encoded)
    except ValueError as e:
        raise ValidationError(f"Private key is not valid base58: {e}")

    if len(seed) != ED25519_SEED_LENGTH:
        raise ValidationError(f"ed25519 private key must be {ED25519_SEED_LENGTH} bytes, got {len(seed)}")
    return ed25519.Ed25519PrivateKey.from_private_bytes(seed)


def sign_message(private_key: ed25519.Ed25519PrivateKey, message: bytes) -> bytes:
    return private_key.sign(message)


def verify_signature(public_key: PublicKey, message: bytes, signature: bytes) -> None:
    """
    Verify an ed25519 signature.

    Raises:
        InvalidPublicKeyError: If the key is not an ed25519 key
        InvalidSignatureError: If the signature does not match
    """
    if public_key.key_type is not KeyType.ED25519:
        raise InvalidPublicKeyError(
            f"Signature verification is not supported for {public_key.key_type.value} keys"
        )

    try:
        verifier = ed25519.Ed25519PublicKey.from_public_bytes(public_key.data)
    except ValueError as e:
        raise InvalidPublicKeyError(f"Invalid ed25519 public key: {e}")

    try:
        verifier.verify(signature, message)
    except InvalidSignature:
        logger.warning(f"Rejected signature for key {public_key}")
        raise InvalidSignatureError("Signature does not match message and public key")
