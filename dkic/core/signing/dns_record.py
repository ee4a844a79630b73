"""
DNS Public Key Record

The public key is published as a TXT record under `_dkic.<domain>`:

    _dkic.example.com. IN TXT "v=DKIC1; k=ed25519; p=<base64 SPKI DER>"

Relying parties fetch the record out-of-band and verify signatures
without contacting the signer.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from dkic.core.signing.errors import RecordFormatError
from dkic.core.signing.keys import base64_to_public_key, public_key_to_base64

PROTOCOL_VERSION = "DKIC1"
ALGORITHM = "ed25519"
DNS_SUBDOMAIN = "_dkic"
OWNER_PLACEHOLDER = f"{DNS_SUBDOMAIN}.[your-domain]"

# Quoted character-strings of a TXT record; DNS splits long values into several
_QUOTED_SEGMENT = re.compile(r'"((?:[^"\\]|\\.)*)"')


def owner_name(domain: Optional[str] = None) -> str:
    """
    Owner name for the TXT record.

    Returns `_dkic.<domain>`, or the `_dkic.[your-domain]` placeholder
    to be edited by hand when no domain is known.
    """
    if not domain:
        return OWNER_PLACEHOLDER
    return f"{DNS_SUBDOMAIN}.{domain.strip().rstrip('.')}"


def unquote_txt(text: str) -> str:
    """Concatenate the quoted segments of TXT data, or return it unchanged if unquoted."""
    segments = _QUOTED_SEGMENT.findall(text)
    if not segments:
        return text.strip()
    return "".join(re.sub(r"\\(.)", r"\1", segment) for segment in segments)


@dataclass(frozen=True)
class PublicKeyRecord:
    """
    A DKIC public key record.

    Attributes:
        public_key_b64: Base64 SubjectPublicKeyInfo DER of the public key
        version: Protocol version tag
        algorithm: Key algorithm identifier
    """
    public_key_b64: str
    version: str = PROTOCOL_VERSION
    algorithm: str = ALGORITHM

    @classmethod
    def from_public_key(cls, public_key: Ed25519PublicKey) -> "PublicKeyRecord":
        return cls(public_key_b64=public_key_to_base64(public_key))

    def format_content(self) -> str:
        """TXT record content: `v=DKIC1; k=ed25519; p=...`"""
        return f"v={self.version}; k={self.algorithm}; p={self.public_key_b64}"

    def format_txt_line(self, owner: Optional[str] = None) -> str:
        """Zone-file style line: `<owner>. IN TXT "<content>"`"""
        owner = owner or OWNER_PLACEHOLDER
        return f'{owner.rstrip(".")}. IN TXT "{self.format_content()}"'

    def public_key(self) -> Ed25519PublicKey:
        """Decode the published key."""
        return base64_to_public_key(self.public_key_b64)

    @classmethod
    def parse(cls, text: str) -> "PublicKeyRecord":
        """
        Parse a record from bare TXT content or a full zone-file line.

        Raises:
            RecordFormatError: If the version, algorithm or key is missing or unsupported
        """
        content = unquote_txt(text)

        fields: Dict[str, str] = {}
        for pair in content.split(";"):
            key, sep, value = pair.partition("=")
            key, value = key.strip(), value.strip()
            if sep and key and value:
                fields[key] = value

        version = fields.get("v")
        if version != PROTOCOL_VERSION:
            raise RecordFormatError(f"Unsupported version: {version}. Expected v={PROTOCOL_VERSION}")

        algorithm = fields.get("k")
        if algorithm != ALGORITHM:
            raise RecordFormatError(f"Unsupported key type: {algorithm}. Expected k={ALGORITHM}")

        public_key_b64 = fields.get("p")
        if not public_key_b64:
            raise RecordFormatError("Missing public key field (p=) in DNS record")

        return cls(public_key_b64=public_key_b64, version=version, algorithm=algorithm)
