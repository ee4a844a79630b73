"""
DKIC Signer CLI

Ed25519 key generation, document signing and signature verification.

Usage:
    dkic keygen [--out PREFIX] [--outpubkey PREFIXPUB] [--domain DOMAIN]
    dkic sign [--private-key FILE] FILES...
    dkic verify FILE [--public-key DNS_TXT_FILE | --domain DOMAIN] [--doh-url URL]

Examples:
    # Create private_key.pem and public_key.dns.txt
    dkic keygen

    # Sign pages with a key file
    dkic sign --private-key private_key.pem site/*.html

    # Sign with the key from the environment (CI)
    DKIC_PRIVATE_KEY="$(cat private_key.pem)" dkic sign index.html

    # Verify against the published DNS record
    dkic verify index.html --domain example.com

Environment Variables:
    DKIC_PRIVATE_KEY    PEM private key used when --private-key is not given
    DKIC_DOMAIN         Domain written into the DNS record by keygen
    DKIC_DOH_URL        DNS-over-HTTPS endpoint used by verify --domain
    DKIC_LOG_LEVEL      Log level (default: INFO)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", verbose: bool = False, quiet: bool = False, log_format: Optional[str] = None):
    """Configure logging based on verbosity."""
    if quiet:
        log_level = logging.WARNING
    elif verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=log_format or "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def cmd_keygen(args) -> int:
    """Generate a keypair and print the DNS entry to publish."""
    from dkic.core.signing import DkicError, PublicKeyRecord, generate_keypair, owner_name
    from dkic.core.signing.dns_record import DNS_SUBDOMAIN

    owner = owner_name(args.domain) if args.domain else None
    try:
        private_path, public_path = generate_keypair(args.out, args.outpubkey, owner=owner)
    except (DkicError, OSError) as e:
        print(f"Error generating keypair: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    record = PublicKeyRecord.parse(public_path.read_text(encoding="utf-8"))
    print(f"Private key: {private_path}")
    print(f"DNS entry with public key: {public_path}:")
    print(f"\tsubdomain: {DNS_SUBDOMAIN}")
    print("\ttype: TXT")
    print(f"\tcontent: {record.format_content()}")
    return EXIT_SUCCESS


def cmd_sign(args) -> int:
    """Sign files in place; non-zero exit if the key is unusable or any file fails."""
    from dkic.core.signing import DkicError, SignStatus, resolve_private_key, sign_documents

    try:
        private_key = resolve_private_key(args.private_key)
    except (DkicError, OSError) as e:
        print(f"Error signing files: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    failed = 0
    for outcome in sign_documents(private_key, args.files):
        if outcome.status == SignStatus.SIGNED:
            print(outcome.message)
        elif outcome.status == SignStatus.SKIPPED:
            print(f"Warning: {outcome.message}", file=sys.stderr)
        else:
            failed += 1
            print(f"Error: {outcome.message}", file=sys.stderr)

    return EXIT_SUCCESS if failed == 0 else EXIT_RUNTIME_ERROR


def cmd_verify(args) -> int:
    """Verify a signed file against a DNS record file or a live DNS lookup."""
    from dkic.core.dns import fetch_public_key_record
    from dkic.core.signing import DkicError, PublicKeyRecord, verify_document

    try:
        if args.public_key:
            record = PublicKeyRecord.parse(Path(args.public_key).read_text(encoding="utf-8"))
        else:
            record = fetch_public_key_record(args.domain, doh_url=args.doh_url)
        public_key = record.public_key()
        document = Path(args.file).read_bytes()
    except (DkicError, OSError, UnicodeDecodeError) as e:
        print(f"Error verifying {args.file}: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    result = verify_document(document, public_key)
    if result.success:
        print(f"Signature verified: {args.file}")
        return EXIT_SUCCESS

    print(f"Verification failed for {args.file}: {result.error_message}", file=sys.stderr)
    return EXIT_VERIFICATION_FAILED


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="dkic",
        description="Ed25519 key generation and file signing tool",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 1.0.0"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides DKIC_LOG_LEVEL)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- keygen command ---
    keygen_parser = subparsers.add_parser("keygen", help="Generate Ed25519 key pair")
    keygen_parser.add_argument(
        "--out",
        metavar="PREFIX",
        default="private_key",
        help="Output file prefix for private key PEM file (default: private_key)",
    )
    keygen_parser.add_argument(
        "--outpubkey",
        metavar="PREFIXPUB",
        default="public_key",
        help="Output file prefix for public key DNS entry text file (default: public_key)",
    )
    keygen_parser.add_argument(
        "--domain",
        default=None,
        help="Domain for the DNS owner name (default: DKIC_DOMAIN or _dkic.[your-domain])",
    )

    # --- sign command ---
    sign_parser = subparsers.add_parser("sign", help="Sign files with Ed25519 private key")
    sign_parser.add_argument(
        "--private-key",
        metavar="FILE",
        default=None,
        help="Path to private key PEM file (default: DKIC_PRIVATE_KEY)",
    )
    sign_parser.add_argument(
        "files",
        nargs="+",
        help="Files to sign",
    )

    # --- verify command ---
    verify_parser = subparsers.add_parser("verify", help="Verify the signature embedded in a file")
    verify_parser.add_argument("file", help="Signed file")
    source = verify_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--public-key",
        metavar="DNS_TXT_FILE",
        help="Public key DNS entry file written by keygen",
    )
    source.add_argument(
        "--domain",
        help="Look up _dkic.<domain> over DNS-over-HTTPS",
    )
    verify_parser.add_argument(
        "--doh-url",
        default=None,
        help="DNS-over-HTTPS JSON endpoint (default: DKIC_DOH_URL)",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()

    from dkic.core.config import get_settings

    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(
        level=args.log_level or settings.log_level,
        verbose=args.verbose,
        quiet=args.quiet,
        log_format=settings.log_format,
    )

    commands = {
        "keygen": cmd_keygen,
        "sign": cmd_sign,
        "verify": cmd_verify,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help(sys.stderr)
        return EXIT_RUNTIME_ERROR

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
