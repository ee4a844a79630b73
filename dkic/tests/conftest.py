"""
Shared fixtures for signer tests.
Provides isolated settings, keypairs and sample HTML documents.
"""
import pytest
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from dkic.core.config import reload_settings
from dkic.core.signing.authority import generate_keypair


SAMPLE_HTML = b"""<!DOCTYPE html>
<html>
<head>
    <title>Test Page</title>
    <meta charset="utf-8">
</head>
<body>
    <h1>Hello, World!</h1>
    <p>This is a test HTML file.</p>
</body>
</html>"""

MINIMAL_HTML = b"<html><head><title>T</title></head><body></body></html>"

NO_CLOSING_HEAD_HTML = b"<html><head><title>T</title><body>unterminated head</body></html>"

NO_HEAD_HTML = b"<html><body><p>No head section here</p></body></html>"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test in an empty directory with no DKIC_* environment."""
    monkeypatch.chdir(tmp_path)
    for name in ("DKIC_PRIVATE_KEY", "DKIC_DOMAIN", "DKIC_DOH_URL", "DKIC_DOH_TIMEOUT", "DKIC_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def private_key():
    """Fresh in-memory Ed25519 key."""
    return Ed25519PrivateKey.generate()


@pytest.fixture
def key_files(tmp_path):
    """Keypair written by the keypair authority: (private_key_path, public_key_path)."""
    return generate_keypair(tmp_path / "test_key", tmp_path / "test_key_pub")


@pytest.fixture
def sample_html():
    """Typical page with a multi-line head section."""
    return SAMPLE_HTML


@pytest.fixture
def html_documents():
    """Documents keyed by which head anchors they carry."""
    return {
        "full": SAMPLE_HTML,
        "minimal": MINIMAL_HTML,
        "no_closing_head": NO_CLOSING_HEAD_HTML,
        "no_head": NO_HEAD_HTML,
    }


@pytest.fixture
def write_html(tmp_path):
    """Write document bytes to a file in tmp_path and return its path."""
    def _write(name: str, content: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path
    return _write
