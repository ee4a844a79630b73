"""
Signing Errors

Exception hierarchy for key handling, document embedding and verification.
File-system failures are reported as the builtin OSError.
"""

from pathlib import Path
from typing import Optional, Union


class DkicError(Exception):
    """Base class for all signer errors."""


class KeyNotFoundError(DkicError):
    """No private key file given and no DKIC_PRIVATE_KEY secret available."""


class KeyDecodeError(DkicError, ValueError):
    """Key material could not be parsed as an Ed25519 key."""


class EncodingError(DkicError):
    """Key material could not be serialized."""


class AnchorNotFoundError(DkicError):
    """Document has neither a closing nor an opening head tag."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = path
        if path is not None:
            message = f"Could not find <head> section in HTML file: {path}"
        else:
            message = "Could not find <head> section in document"
        super().__init__(message)


class MarkerNotFoundError(DkicError):
    """Document carries no signature marker."""


class MarkerFormatError(DkicError, ValueError):
    """Signature marker is present but malformed, or present more than once."""


class RecordFormatError(DkicError, ValueError):
    """DNS TXT record does not follow the v=DKIC1 format."""


class DnsLookupError(DkicError):
    """DNS-over-HTTPS lookup failed or returned no usable TXT record."""


class MissingFileWarning(UserWarning):
    """File to sign does not exist; it is skipped."""
