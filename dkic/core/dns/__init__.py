"""
DNS public key discovery over DNS-over-HTTPS.
"""

from dkic.core.dns.doh_client import (
    lookup_txt_record,
    fetch_public_key_record,
)

__all__ = [
    "lookup_txt_record",
    "fetch_public_key_record",
]
