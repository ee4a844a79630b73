"""
Document Signing Module

Ed25519-based content authenticity for static documents.
Keys are published as DNS TXT records; signatures are embedded in the
documents themselves and verified against the published key.
"""

from dkic.core.signing.authority import generate_keypair
from dkic.core.signing.dns_record import (
    PublicKeyRecord,
    owner_name,
    PROTOCOL_VERSION,
    ALGORITHM,
)
from dkic.core.signing.errors import (
    DkicError,
    KeyNotFoundError,
    KeyDecodeError,
    EncodingError,
    AnchorNotFoundError,
    MarkerNotFoundError,
    MarkerFormatError,
    RecordFormatError,
    DnsLookupError,
    MissingFileWarning,
)
from dkic.core.signing.keys import (
    load_private_key,
    load_private_key_pem,
    public_key_to_base64,
    base64_to_public_key,
)
from dkic.core.signing.marker import (
    SignatureMarker,
    embed_marker,
    strip_marker,
)
from dkic.core.signing.signer import (
    resolve_private_key,
    sign_document,
    sign_documents,
    SignOutcome,
    SignStatus,
)
from dkic.core.signing.verify import (
    verify_document,
    verify_signature,
    VerificationResult,
    VerificationError,
)

__all__ = [
    # Keypair authority
    "generate_keypair",
    # DNS record
    "PublicKeyRecord",
    "owner_name",
    "PROTOCOL_VERSION",
    "ALGORITHM",
    # Errors
    "DkicError",
    "KeyNotFoundError",
    "KeyDecodeError",
    "EncodingError",
    "AnchorNotFoundError",
    "MarkerNotFoundError",
    "MarkerFormatError",
    "RecordFormatError",
    "DnsLookupError",
    "MissingFileWarning",
    # Keys
    "load_private_key",
    "load_private_key_pem",
    "public_key_to_base64",
    "base64_to_public_key",
    # Marker
    "SignatureMarker",
    "embed_marker",
    "strip_marker",
    # Signing
    "resolve_private_key",
    "sign_document",
    "sign_documents",
    "SignOutcome",
    "SignStatus",
    # Verification
    "verify_document",
    "verify_signature",
    "VerificationResult",
    "VerificationError",
]
