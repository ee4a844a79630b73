"""
Tests for DNS-over-HTTPS public key lookup.

Uses httpx.MockTransport; no network access.
"""
import httpx
import pytest

from dkic.core.dns import fetch_public_key_record, lookup_txt_record
from dkic.core.signing.dns_record import PublicKeyRecord
from dkic.core.signing.errors import DnsLookupError, RecordFormatError
from dkic.core.signing.keys import public_key_to_raw

DOH_URL = "https://dns.example.net/dns-query"


def make_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def dns_json(*answers, status=0):
    return {
        "Status": status,
        "Answer": [{"name": "_dkic.example.com", "type": t, "TTL": 300, "data": d} for t, d in answers],
    }


class TestLookupTxtRecord:
    """Querying and unpacking TXT answers."""

    def test_query_parameters(self):
        seen = {}

        def handler(request):
            seen["url"] = request.url
            seen["accept"] = request.headers["accept"]
            return httpx.Response(200, json=dns_json((16, '"v=DKIC1; k=ed25519; p=QUJD"')))

        with make_client(handler) as client:
            content = lookup_txt_record("example.com", doh_url=DOH_URL, client=client)

        assert content == "v=DKIC1; k=ed25519; p=QUJD"
        assert seen["url"].params["name"] == "_dkic.example.com"
        assert seen["url"].params["type"] == "TXT"
        assert seen["accept"] == "application/dns-json"

    def test_prefers_dkic_record(self):
        def handler(request):
            return httpx.Response(200, json=dns_json(
                (16, '"google-site-verification=abc"'),
                (16, '"v=DKIC1; k=ed25519; " "p=QUJD"'),
            ))

        with make_client(handler) as client:
            assert lookup_txt_record("example.com", doh_url=DOH_URL, client=client) == "v=DKIC1; k=ed25519; p=QUJD"

    def test_skips_non_txt_answers(self):
        def handler(request):
            return httpx.Response(200, json=dns_json((5, "alias.example.com."), (16, '"v=DKIC1; k=ed25519; p=QUJD"')))

        with make_client(handler) as client:
            assert lookup_txt_record("example.com", doh_url=DOH_URL, client=client).startswith("v=DKIC1")

    def test_nxdomain(self):
        def handler(request):
            return httpx.Response(200, json={"Status": 3})

        with make_client(handler) as client:
            with pytest.raises(DnsLookupError, match="status: 3"):
                lookup_txt_record("example.com", doh_url=DOH_URL, client=client)

    def test_no_answer(self):
        def handler(request):
            return httpx.Response(200, json={"Status": 0, "Answer": []})

        with make_client(handler) as client:
            with pytest.raises(DnsLookupError, match="No TXT record found for _dkic.example.com"):
                lookup_txt_record("example.com", doh_url=DOH_URL, client=client)

    def test_bare_string_answers_rejected(self):
        def handler(request):
            return httpx.Response(200, json={"Status": 0, "Answer": ["v=DKIC1"]})

        with make_client(handler) as client:
            with pytest.raises(DnsLookupError, match="No TXT record found"):
                lookup_txt_record("example.com", doh_url=DOH_URL, client=client)

    def test_answer_not_a_list(self):
        def handler(request):
            return httpx.Response(200, json={"Status": 0, "Answer": {"data": "v=DKIC1"}})

        with make_client(handler) as client:
            with pytest.raises(DnsLookupError, match="malformed Answer"):
                lookup_txt_record("example.com", doh_url=DOH_URL, client=client)

    def test_skips_malformed_entries(self):
        def handler(request):
            return httpx.Response(200, json={"Status": 0, "Answer": [
                "junk",
                {"type": 16, "data": 42},
                {"type": 16, "data": '"v=DKIC1; k=ed25519; p=QUJD"'},
            ]})

        with make_client(handler) as client:
            assert lookup_txt_record("example.com", doh_url=DOH_URL, client=client) == "v=DKIC1; k=ed25519; p=QUJD"

    def test_http_error(self):
        def handler(request):
            return httpx.Response(503)

        with make_client(handler) as client:
            with pytest.raises(DnsLookupError, match="503"):
                lookup_txt_record("example.com", doh_url=DOH_URL, client=client)

    def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>not json</html>")

        with make_client(handler) as client:
            with pytest.raises(DnsLookupError, match="invalid JSON"):
                lookup_txt_record("example.com", doh_url=DOH_URL, client=client)

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(DnsLookupError, match="connection refused"):
                lookup_txt_record("example.com", doh_url=DOH_URL, client=client)


class TestFetchPublicKeyRecord:
    """Lookup followed by record parsing."""

    def test_returns_usable_key(self, key_files):
        from dkic.core.signing.keys import load_private_key

        private_path, public_path = key_files
        content = PublicKeyRecord.parse(public_path.read_text()).format_content()

        def handler(request):
            return httpx.Response(200, json=dns_json((16, f'"{content}"')))

        with make_client(handler) as client:
            record = fetch_public_key_record("example.com", doh_url=DOH_URL, client=client)

        expected = load_private_key(private_path).public_key()
        assert public_key_to_raw(record.public_key()) == public_key_to_raw(expected)

    def test_foreign_record_rejected(self):
        def handler(request):
            return httpx.Response(200, json=dns_json((16, '"v=spf1 -all"')))

        with make_client(handler) as client:
            with pytest.raises(RecordFormatError):
                fetch_public_key_record("example.com", doh_url=DOH_URL, client=client)
