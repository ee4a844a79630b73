"""
Signature Marker

The signature travels inside the document as a JSON script element:

    <script type="application/json" id="dkic-signature">{"alg":"ed25519","signature":"<b64>"}</script>

Embedding inserts b"\\n" + marker at the head anchor:
    - immediately before the first `</head>`, or
    - immediately after the first `<head>` if there is no closing tag.

Stripping removes exactly that byte run, so strip(embed(D)) == D.
All operations work on raw bytes; documents are never decoded.
"""

import base64
import binascii
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from dkic.core.signing.dns_record import ALGORITHM
from dkic.core.signing.errors import (
    AnchorNotFoundError,
    MarkerFormatError,
    MarkerNotFoundError,
)

MARKER_ID = "dkic-signature"
MARKER_OPEN = f'<script type="application/json" id="{MARKER_ID}">'.encode("ascii")
MARKER_CLOSE = b"</script>"

HEAD_OPEN = b"<head>"
HEAD_CLOSE = b"</head>"

# Ed25519 signature size
SIGNATURE_LENGTH = 64

# A rendered body is about 120 bytes
MAX_MARKER_BODY = 4096

# Lenient on attribute order and quoting, for markers written by other tools.
# The id value itself is case-sensitive, as HTML ids are.
_MARKER_PATTERN = re.compile(
    rb"<script\b[^<>]*\sid=[\"'](?-i:" + re.escape(MARKER_ID.encode("ascii")) + rb")[\"'][^<>]*>(.*?)</script\s*>",
    re.IGNORECASE | re.DOTALL,
)


@dataclass(frozen=True)
class SignatureMarker:
    """
    Inline signature carried by a signed document.

    Attributes:
        signature_b64: Base64-encoded raw signature
        alg: Signature algorithm identifier
    """
    signature_b64: str
    alg: str = ALGORITHM

    @classmethod
    def from_signature(cls, signature: bytes, alg: str = ALGORITHM) -> "SignatureMarker":
        return cls(signature_b64=base64.b64encode(signature).decode("ascii"), alg=alg)

    def render(self) -> bytes:
        """Marker element bytes, with compact JSON as the element body."""
        payload = json.dumps({"alg": self.alg, "signature": self.signature_b64}, separators=(",", ":"))
        return MARKER_OPEN + payload.encode("ascii") + MARKER_CLOSE

    def signature_bytes(self) -> bytes:
        """
        Decode the signature.

        Raises:
            MarkerFormatError: If the signature is not strict base64 of SIGNATURE_LENGTH bytes
        """
        try:
            signature = base64.b64decode(self.signature_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MarkerFormatError(f"Invalid base64 signature: {e}") from e
        if len(signature) != SIGNATURE_LENGTH:
            raise MarkerFormatError(
                f"Invalid signature length: {len(signature)} bytes (expected {SIGNATURE_LENGTH})"
            )
        return signature

    @classmethod
    def parse(cls, body: bytes) -> "SignatureMarker":
        """
        Parse the JSON body of a marker element.

        Raises:
            MarkerFormatError: If the body is not a JSON object with a string "signature"
        """
        if len(body) > MAX_MARKER_BODY:
            raise MarkerFormatError(f"Signature data too large: {len(body)} bytes")

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise MarkerFormatError(f"Invalid signature JSON: {e}") from e

        if not isinstance(data, dict):
            raise MarkerFormatError("Signature JSON must be an object")

        signature = data.get("signature")
        if not isinstance(signature, str) or not signature:
            raise MarkerFormatError('Signature data missing "signature" field')

        alg = data.get("alg", ALGORITHM)
        if not isinstance(alg, str):
            raise MarkerFormatError('Signature "alg" field must be a string')

        return cls(signature_b64=signature.strip(), alg=alg)


def embed_marker(
    document: bytes,
    marker: SignatureMarker,
    path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Insert the marker at the document's head anchor.

    Args:
        document: Original document bytes
        marker: Marker to embed
        path: Document path, only used in the error message

    Returns:
        Document bytes with b"\\n" + marker inserted; all other bytes unchanged

    Raises:
        AnchorNotFoundError: If neither `</head>` nor `<head>` is present
    """
    inserted = b"\n" + marker.render()

    head_end = document.find(HEAD_CLOSE)
    if head_end != -1:
        return document[:head_end] + inserted + document[head_end:]

    # No </head>: fall back to just after <head>
    head_start = document.find(HEAD_OPEN)
    if head_start != -1:
        insert_pos = head_start + len(HEAD_OPEN)
        return document[:insert_pos] + inserted + document[insert_pos:]

    raise AnchorNotFoundError(path)


def find_markers(document: bytes) -> List[re.Match]:
    """All signature marker elements in the document, in order."""
    return list(_MARKER_PATTERN.finditer(document))


def strip_marker(document: bytes) -> Tuple[bytes, SignatureMarker]:
    """
    Remove the signature marker and the newline inserted before it.

    Returns:
        Tuple of (original document bytes, parsed marker)

    Raises:
        MarkerNotFoundError: If the document has no marker
        MarkerFormatError: If there is more than one marker or it cannot be parsed
    """
    matches = find_markers(document)
    if not matches:
        raise MarkerNotFoundError(f"No signature data found (missing script#{MARKER_ID} element)")
    if len(matches) > 1:
        raise MarkerFormatError(f"Found {len(matches)} signature markers (expected exactly one)")

    match = matches[0]
    marker = SignatureMarker.parse(match.group(1))

    start = match.start()
    if start > 0 and document[start - 1:start] == b"\n":
        start -= 1

    return document[:start] + document[match.end():], marker
