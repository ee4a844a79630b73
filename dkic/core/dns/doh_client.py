"""
DNS-over-HTTPS TXT Lookup

Fetches the `_dkic.<domain>` TXT record through a DoH JSON endpoint
(Cloudflare, Google, or any resolver speaking application/dns-json).

Response format (abridged):
    {"Status": 0, "Answer": [{"name": "_dkic.example.com", "type": 16, "data": "\\"v=DKIC1; ...\\""}]}
"""

import logging
from typing import Optional

import httpx

from dkic.core.config import get_settings
from dkic.core.signing.dns_record import (
    DNS_SUBDOMAIN,
    PROTOCOL_VERSION,
    PublicKeyRecord,
    owner_name,
    unquote_txt,
)
from dkic.core.signing.errors import DnsLookupError

logger = logging.getLogger(__name__)

# DNS RR type code for TXT
TXT_RECORD_TYPE = 16


def lookup_txt_record(
    domain: str,
    doh_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Look up the DKIC TXT record for a domain.

    Args:
        domain: Domain the document was served from (e.g. "example.com")
        doh_url: DoH JSON endpoint (defaults to settings.doh_url)
        client: Optional httpx client (tests inject a MockTransport here)
        timeout: Request timeout in seconds (defaults to settings.doh_timeout)

    Returns:
        Unquoted TXT record content, e.g. "v=DKIC1; k=ed25519; p=..."

    Raises:
        DnsLookupError: On HTTP failure, non-zero DNS status or no DKIC TXT answer
    """
    settings = get_settings()
    doh_url = doh_url or settings.doh_url
    timeout = timeout if timeout is not None else settings.doh_timeout
    query_name = owner_name(domain)

    logger.info(f"Looking up TXT record for: {query_name} via {doh_url}")

    params = {"name": query_name, "type": "TXT"}
    headers = {"Accept": "application/dns-json"}
    try:
        if client is None:
            with httpx.Client(timeout=timeout) as owned_client:
                response = owned_client.get(doh_url, params=params, headers=headers)
        else:
            response = client.get(doh_url, params=params, headers=headers, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise DnsLookupError(
            f"DNS lookup failed: {e.response.status_code} {e.response.reason_phrase}"
        ) from e
    except httpx.HTTPError as e:
        raise DnsLookupError(f"DNS lookup error: {e}") from e
    except ValueError as e:
        raise DnsLookupError(f"DNS lookup returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DnsLookupError("DNS lookup returned an unexpected response")

    status = data.get("Status")
    if status != 0:
        raise DnsLookupError(f"DNS query failed with status: {status}")

    raw_answers = data.get("Answer") or []
    if not isinstance(raw_answers, list):
        raise DnsLookupError("DNS lookup returned a malformed Answer section")

    answers = [
        answer for answer in raw_answers
        if isinstance(answer, dict)
        and answer.get("type", TXT_RECORD_TYPE) == TXT_RECORD_TYPE
        and isinstance(answer.get("data"), str)
        and answer["data"]
    ]
    if not answers:
        raise DnsLookupError(f"No TXT record found for {query_name}")

    # A name may hold unrelated TXT records; prefer the DKIC one
    for answer in answers:
        content = unquote_txt(answer["data"])
        if content.startswith(f"v={PROTOCOL_VERSION}"):
            return content

    logger.debug(f"{len(answers)} TXT record(s) under {query_name}, none tagged v={PROTOCOL_VERSION}")
    return unquote_txt(answers[0]["data"])


def fetch_public_key_record(
    domain: str,
    doh_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> PublicKeyRecord:
    """
    Look up and parse the DKIC public key record for a domain.

    Raises:
        DnsLookupError: If the lookup fails
        RecordFormatError: If the TXT record is not a valid DKIC record
    """
    txt_record = lookup_txt_record(domain, doh_url=doh_url, client=client, timeout=timeout)
    logger.debug(f"{DNS_SUBDOMAIN} TXT record retrieved for {domain}")
    return PublicKeyRecord.parse(txt_record)
