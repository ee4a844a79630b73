"""
Signature Verification

Relying-party side of the protocol: given a signed document and the
publisher's public key, check the embedded signature.

Steps:
    1. Locate exactly one signature marker
    2. Remove it (and the newline inserted before it) to recover the signed bytes
    3. Decode the base64 signature
    4. Verify Ed25519 over the recovered bytes

No network access is needed beyond obtaining the public key (see dkic.core.dns).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.exceptions import InvalidSignature

import logging

from dkic.core.signing.dns_record import ALGORITHM
from dkic.core.signing.errors import MarkerFormatError, MarkerNotFoundError
from dkic.core.signing.marker import find_markers, strip_marker

logger = logging.getLogger(__name__)


class VerificationError(Enum):
    """Enumeration of possible verification failures."""
    MISSING_MARKER = "missing_marker"
    MULTIPLE_MARKERS = "multiple_markers"
    INVALID_MARKER = "invalid_marker"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    INVALID_SIGNATURE_FORMAT = "invalid_signature_format"
    SIGNATURE_VERIFICATION_FAILED = "signature_verification_failed"


@dataclass
class VerificationResult:
    """
    Result of document verification.

    Attributes:
        success: Whether verification succeeded
        error: Error type if verification failed
        error_message: Human-readable error message
        original: Document bytes with the marker removed (if valid)
    """
    success: bool
    error: Optional[VerificationError] = None
    error_message: Optional[str] = None
    original: Optional[bytes] = None

    @classmethod
    def ok(cls, original: bytes) -> "VerificationResult":
        """Create a successful result."""
        return cls(success=True, original=original)

    @classmethod
    def fail(cls, error: VerificationError, message: str) -> "VerificationResult":
        """Create a failed result."""
        return cls(success=False, error=error, error_message=message)


def verify_signature(public_key: Ed25519PublicKey, payload: bytes, signature: bytes) -> bool:
    """Check an Ed25519 signature over payload."""
    try:
        public_key.verify(signature, payload)
    except InvalidSignature:
        return False
    return True


def verify_document(document: bytes, public_key: Ed25519PublicKey) -> VerificationResult:
    """
    Verify the signature embedded in a document.

    Args:
        document: Signed document bytes, exactly as served
        public_key: Publisher's Ed25519 public key

    Returns:
        VerificationResult with success status and details

    Example:
        >>> record = PublicKeyRecord.parse(Path("public_key.dns.txt").read_text())
        >>> result = verify_document(Path("index.html").read_bytes(), record.public_key())
        >>> if not result.success:
        ...     print(result.error_message)
    """
    # 1. Exactly one marker
    count = len(find_markers(document))
    if count == 0:
        return VerificationResult.fail(
            VerificationError.MISSING_MARKER,
            "No signature data found (missing script#dkic-signature element)"
        )
    if count > 1:
        return VerificationResult.fail(
            VerificationError.MULTIPLE_MARKERS,
            f"Found {count} signature markers (expected exactly one)"
        )

    # 2. Recover the signed bytes
    try:
        original, marker = strip_marker(document)
    except (MarkerNotFoundError, MarkerFormatError) as e:
        return VerificationResult.fail(VerificationError.INVALID_MARKER, str(e))

    if marker.alg != ALGORITHM:
        return VerificationResult.fail(
            VerificationError.UNSUPPORTED_ALGORITHM,
            f"Unsupported signature algorithm: {marker.alg}. Expected {ALGORITHM}"
        )

    # 3. Decode signature
    try:
        signature = marker.signature_bytes()
    except MarkerFormatError as e:
        return VerificationResult.fail(VerificationError.INVALID_SIGNATURE_FORMAT, str(e))

    # 4. Verify
    if not verify_signature(public_key, original, signature):
        logger.debug(f"Signature mismatch over {len(original)} bytes")
        return VerificationResult.fail(
            VerificationError.SIGNATURE_VERIFICATION_FAILED,
            "Signature verification failed - signature does not match content"
        )

    return VerificationResult.ok(original)
