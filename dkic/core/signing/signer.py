"""
Document Signer

Signs documents by embedding a detached Ed25519 signature inside them.

The signature covers the exact bytes of the file as stored (no line-ending
or whitespace normalization). It is then wrapped in a marker element and
spliced in at the head anchor; see dkic.core.signing.marker.

Batches are processed lazily, in order, with per-file isolation: a missing
file is skipped with a warning, a file without a head anchor fails on its
own, and files already written are never rolled back.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from dkic.core.config import Settings, get_settings
from dkic.core.signing.errors import (
    DkicError,
    KeyNotFoundError,
    MissingFileWarning,
)
from dkic.core.signing.keys import (
    load_private_key,
    load_private_key_pem,
    public_key_fingerprint,
)
from dkic.core.signing.marker import (
    SignatureMarker,
    embed_marker,
    find_markers,
    strip_marker,
)

logger = logging.getLogger(__name__)

PRIVATE_KEY_ENV_VAR = "DKIC_PRIVATE_KEY"


class SignStatus(Enum):
    """Per-file outcome of a signing batch."""
    SIGNED = "signed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SignOutcome:
    """
    Result of signing one file.

    Attributes:
        path: File that was processed
        status: Whether it was signed, skipped or failed
        message: Human-readable description naming the file
        error: Warning or exception for skipped/failed files
    """
    path: Path
    status: SignStatus
    message: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        """True unless the file failed (skips are not failures)."""
        return self.status != SignStatus.FAILED

    @classmethod
    def signed(cls, path: Path) -> "SignOutcome":
        return cls(path=path, status=SignStatus.SIGNED, message=f"Signed: {path}")

    @classmethod
    def skipped(cls, path: Path) -> "SignOutcome":
        message = f"File {path} does not exist, skipping"
        return cls(path=path, status=SignStatus.SKIPPED, message=message, error=MissingFileWarning(message))

    @classmethod
    def failed(cls, path: Path, error: BaseException) -> "SignOutcome":
        return cls(path=path, status=SignStatus.FAILED, message=f"Failed to sign {path}: {error}", error=error)


def resolve_private_key(
    explicit_path: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None,
) -> Ed25519PrivateKey:
    """
    Load the signing key: an explicit PEM file wins over the DKIC_PRIVATE_KEY secret.

    Args:
        explicit_path: Private key PEM file, if given on the command line
        settings: Settings to read the secret from (defaults to get_settings())

    Raises:
        KeyNotFoundError: If no path is given and the secret is not set
        KeyDecodeError: If the key material cannot be parsed
        OSError: If the explicit file cannot be read
    """
    if explicit_path is not None:
        private_key = load_private_key(Path(explicit_path))
        logger.debug(f"Loaded private key from {explicit_path}")
    else:
        settings = settings or get_settings()
        if not settings.private_key:
            raise KeyNotFoundError(
                f"No private key file specified and {PRIVATE_KEY_ENV_VAR} environment variable not set"
            )
        private_key = load_private_key_pem(settings.private_key, source=PRIVATE_KEY_ENV_VAR)
        logger.debug(f"Loaded private key from {PRIVATE_KEY_ENV_VAR}")

    logger.info(f"Signing key fingerprint: {public_key_fingerprint(private_key.public_key())}")
    return private_key


def sign_document(
    private_key: Ed25519PrivateKey,
    document: bytes,
    path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Sign document bytes and return them with the marker embedded.

    A document that already carries a marker is re-signed over its
    stripped form, so the result always holds exactly one marker.

    Raises:
        AnchorNotFoundError: If the document has no head anchor
        MarkerFormatError: If an existing marker cannot be removed cleanly
    """
    if find_markers(document):
        logger.info(f"Replacing existing signature in {path or 'document'}")
        document, _ = strip_marker(document)

    signature = private_key.sign(document)
    marker = SignatureMarker.from_signature(signature)
    return embed_marker(document, marker, path=path)


def sign_file(private_key: Ed25519PrivateKey, path: Path) -> None:
    """
    Sign one file in place.

    The file is only written once the new content has been fully built,
    so a failure leaves it untouched.
    """
    original_content = path.read_bytes()
    signed_content = sign_document(private_key, original_content, path=path)
    path.write_bytes(signed_content)


def sign_documents(
    private_key: Ed25519PrivateKey,
    paths: Iterable[Union[str, Path]],
) -> Iterator[SignOutcome]:
    """
    Sign each file in order, yielding one outcome per file.

    Missing files are skipped; per-file errors are reported as failed
    outcomes and do not stop the batch.

    Example:
        >>> key = resolve_private_key("private_key.pem")
        >>> for outcome in sign_documents(key, ["index.html", "about.html"]):
        ...     print(outcome.message)
    """
    for raw_path in paths:
        path = Path(raw_path)

        if not path.exists():
            outcome = SignOutcome.skipped(path)
            logger.debug(outcome.message)
            yield outcome
            continue

        try:
            sign_file(private_key, path)
        except (DkicError, OSError) as e:
            outcome = SignOutcome.failed(path, e)
            logger.debug(outcome.message)
            yield outcome
            continue

        outcome = SignOutcome.signed(path)
        logger.debug(outcome.message)
        yield outcome
