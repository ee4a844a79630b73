"""
Ed25519 Key Management

Provides key generation, loading, and serialization for Ed25519 keypairs.
Uses the cryptography library for all cryptographic operations.

Private keys are stored as unencrypted PKCS#8 PEM. Public keys travel as
base64 of their SubjectPublicKeyInfo DER encoding (44 bytes for Ed25519),
which is what the DNS TXT record publishes.
"""

import base64
import binascii
import hashlib
from pathlib import Path
from typing import Tuple, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from dkic.core.signing.errors import EncodingError, KeyDecodeError

# Raw Ed25519 public key size
RAW_PUBLIC_KEY_LENGTH = 32


def generate_keypair() -> Tuple[Ed25519PrivateKey, Ed25519PublicKey]:
    """
    Generate a new Ed25519 keypair from the OS random source.

    Returns:
        Tuple of (private_key, public_key)

    Example:
        >>> private_key, public_key = generate_keypair()
        >>> pub_b64 = public_key_to_base64(public_key)
    """
    private_key = Ed25519PrivateKey.generate()
    public_key = private_key.public_key()
    return private_key, public_key


def private_key_to_pem(private_key: Ed25519PrivateKey) -> bytes:
    """
    Serialize a private key to unencrypted PKCS#8 PEM (LF line endings).

    WARNING: Private key bytes are sensitive! Handle with care.

    Raises:
        EncodingError: If the key cannot be serialized
    """
    try:
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise EncodingError(f"Failed to serialize private key: {e}") from e


def load_private_key_pem(pem_data: Union[str, bytes], source: str = "PEM data") -> Ed25519PrivateKey:
    """
    Parse a PEM-encoded Ed25519 private key.

    Args:
        pem_data: PEM text or bytes
        source: Where the data came from (used in error messages)

    Returns:
        Ed25519 private key object

    Raises:
        KeyDecodeError: If the data is not a valid unencrypted Ed25519 key
    """
    if isinstance(pem_data, str):
        pem_data = pem_data.encode("utf-8")

    try:
        private_key = serialization.load_pem_private_key(pem_data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyDecodeError(f"Failed to load private key from {source}: {e}") from e

    if not isinstance(private_key, Ed25519PrivateKey):
        raise KeyDecodeError(
            f"Failed to load private key from {source}: not an Ed25519 key ({type(private_key).__name__})"
        )
    return private_key


def load_private_key(path: Path) -> Ed25519PrivateKey:
    """
    Load a private key from a PEM file.

    Raises:
        FileNotFoundError: If file doesn't exist
        KeyDecodeError: If key is invalid
    """
    path = Path(path)
    return load_private_key_pem(path.read_bytes(), source=str(path))


def public_key_to_der(public_key: Ed25519PublicKey) -> bytes:
    """
    Serialize a public key to SubjectPublicKeyInfo DER.

    Raises:
        EncodingError: If the key cannot be serialized
    """
    try:
        return public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise EncodingError(f"Failed to serialize public key: {e}") from e


def public_key_to_raw(public_key: Ed25519PublicKey) -> bytes:
    """Return the 32 raw public key bytes."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def public_key_to_base64(public_key: Ed25519PublicKey) -> str:
    """
    Serialize a public key to the base64 form published in DNS.

    Args:
        public_key: Ed25519 public key object

    Returns:
        Base64-encoded SubjectPublicKeyInfo DER (60 characters)
    """
    return base64.b64encode(public_key_to_der(public_key)).decode("ascii")


def base64_to_public_key(b64_key: str) -> Ed25519PublicKey:
    """
    Deserialize a base64-encoded public key string.

    Accepts SubjectPublicKeyInfo DER and, as a fallback, a bare
    32-byte raw key.

    Raises:
        KeyDecodeError: If the key is invalid or not Ed25519
    """
    try:
        key_bytes = base64.b64decode(b64_key.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyDecodeError(f"Invalid base64 public key: {e}") from e

    if len(key_bytes) == RAW_PUBLIC_KEY_LENGTH:
        return Ed25519PublicKey.from_public_bytes(key_bytes)

    try:
        public_key = serialization.load_der_public_key(key_bytes)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyDecodeError(f"Invalid public key: {e}") from e

    if not isinstance(public_key, Ed25519PublicKey):
        raise KeyDecodeError(f"Not an Ed25519 public key: {type(public_key).__name__}")
    return public_key


def public_key_fingerprint(public_key: Ed25519PublicKey) -> str:
    """SHA-256 hex digest of the raw public key, safe to log."""
    return hashlib.sha256(public_key_to_raw(public_key)).hexdigest()
