"""
Keypair Authority

Bootstraps trust material: generates an Ed25519 keypair, writes the private
key as PEM and the public key as a DNS TXT record ready for publication.

Creates two files:
- {prefix}.pem (private key, unencrypted PKCS#8, owner read/write only)
- {prefixpub}.dns.txt (`<owner>. IN TXT "v=DKIC1; k=ed25519; p=..."`)
"""

import logging
import os
from pathlib import Path
from typing import Optional, Tuple, Union

from dkic.core.config import get_settings
from dkic.core.signing.dns_record import PublicKeyRecord, owner_name
from dkic.core.signing.keys import (
    generate_keypair as generate_key_objects,
    private_key_to_pem,
    public_key_fingerprint,
)

logger = logging.getLogger(__name__)

PRIVATE_KEY_SUFFIX = ".pem"
PUBLIC_KEY_SUFFIX = ".dns.txt"


def generate_keypair(
    private_key_path_prefix: Union[str, Path] = "private_key",
    public_key_path_prefix: Union[str, Path] = "public_key",
    owner: Optional[str] = None,
) -> Tuple[Path, Path]:
    """
    Generate a keypair and write it to `<prefix>.pem` and `<prefixpub>.dns.txt`.

    Args:
        private_key_path_prefix: Path prefix for the private key PEM file
        public_key_path_prefix: Path prefix for the DNS record file
        owner: TXT record owner name; defaults to `_dkic.<DKIC_DOMAIN>` or
               the `_dkic.[your-domain]` placeholder

    Returns:
        Tuple of (private_key_path, public_key_path)

    Raises:
        OSError: If either file cannot be written
        EncodingError: If key serialization fails
    """
    private_path = Path(f"{private_key_path_prefix}{PRIVATE_KEY_SUFFIX}")
    public_path = Path(f"{public_key_path_prefix}{PUBLIC_KEY_SUFFIX}")
    owner = owner or owner_name(get_settings().domain)

    private_key, public_key = generate_key_objects()
    private_pem = private_key_to_pem(private_key)
    record = PublicKeyRecord.from_public_key(public_key)

    private_path.write_bytes(private_pem)
    os.chmod(private_path, 0o600)  # Owner read/write only
    public_path.write_text(record.format_txt_line(owner) + "\n", encoding="utf-8")

    logger.info(
        f"Generated keypair {public_key_fingerprint(public_key)[:16]}: "
        f"private key {private_path}, DNS record {public_path}"
    )
    return private_path, public_path
