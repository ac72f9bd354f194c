"""
Command-line interface for api-signature
Signs header sets and checks Authorization headers from the shell
"""

import argparse
import asyncio
import json
import sys
from typing import Dict, List, Optional

from . import __version__
from .config.options import ApiSignatureOptions
from .config.settings import LoggingConfig, configure_logging
from .crypto.algorithms import DEFAULT_ALGORITHM, available_algorithms
from .exceptions import ApiSignatureError, AuthenticationError
from .signing.signer import Signer
from .signing.utils import coerce_http_date
from .verification.middleware import SignatureAuthenticator
from .verification.types import SignedRequest


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='api-signature',
        description='Sign and verify HMAC request signatures'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'api-signature {__version__}'
    )

    parser.add_argument(
        '--log-level',
        default='WARNING',
        help='Logging level for diagnostic output (default: WARNING)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_sign_parser(subparsers)
    setup_verify_parser(subparsers)
    subparsers.add_parser('algorithms', help='List registered signature algorithms')

    return parser


def setup_sign_parser(subparsers):
    """Setup sign subcommand."""
    sign_parser = subparsers.add_parser('sign', help='Sign a set of header values')
    sign_parser.add_argument('--key-id', required=True, help='Key identifier')
    sign_parser.add_argument('--secret', required=True, help='Shared secret')
    sign_parser.add_argument(
        '--algorithm',
        default=DEFAULT_ALGORITHM,
        help=f'Signature algorithm (default: {DEFAULT_ALGORITHM})'
    )
    sign_parser.add_argument('--date', help='HTTP-date to sign (default: now)')
    sign_parser.add_argument(
        '--header',
        action='append',
        default=[],
        metavar='NAME:VALUE',
        help='Header to sign, in order (repeatable)'
    )
    sign_parser.add_argument('--json', action='store_true', help='Print the result as JSON')


def setup_verify_parser(subparsers):
    """Setup verify subcommand."""
    verify_parser = subparsers.add_parser('verify', help='Verify an Authorization header')
    verify_parser.add_argument('--secret', required=True, help='Shared secret')
    verify_parser.add_argument('--authorization', required=True, help='Authorization header value')
    verify_parser.add_argument(
        '--header',
        action='append',
        default=[],
        metavar='NAME:VALUE',
        help='Request header (repeatable)'
    )
    verify_parser.add_argument('--method', default='GET', help='Request method (default: GET)')
    verify_parser.add_argument('--path', default='/', help='Request path (default: /)')
    verify_parser.add_argument(
        '--lifetime',
        type=float,
        default=300,
        help='Allowed clock skew in seconds; negative disables the check (default: 300)'
    )
    verify_parser.add_argument(
        '--required-header',
        action='append',
        default=None,
        help='Header every signature must cover (repeatable, default: date)'
    )


def parse_header_args(values: List[str]) -> List[tuple]:
    """
    Parse ``NAME:VALUE`` arguments into ordered pairs.

    Whitespace around names and values is stripped, so ``date: X`` and
    ``date:X`` give the same value. A value that must keep leading or
    trailing whitespace cannot be passed through the CLI.

    Raises:
        ValueError: If an argument has no colon or an empty name
    """
    pairs = []
    for raw in values:
        name, sep, value = raw.partition(':')
        if not sep or not name.strip():
            raise ValueError(f"Invalid header argument (expected NAME:VALUE): {raw!r}")
        pairs.append((name.strip(), value.strip()))
    return pairs


def handle_sign_command(args) -> int:
    """Handle sign command."""
    try:
        signer = Signer(args.key_id, args.secret, args.algorithm)
        pairs = parse_header_args(args.header)
        if not pairs:
            pairs = [('date', coerce_http_date(args.date))]

        result = signer.sign(pairs, date=args.date)

        if args.json:
            print(json.dumps({
                'authorization': result.authorization,
                'date': result.date,
                'headers': list(result.header_names),
                'signature': result.signature,
            }, indent=2))
        else:
            print(f"Authorization: {result.authorization}")
            print(f"date: {result.date}")

        return 0

    except (ApiSignatureError, ValueError) as e:
        print(f"Error signing headers: {e}", file=sys.stderr)
        return 1


def handle_verify_command(args) -> int:
    """Handle verify command."""
    try:
        headers: Dict[str, str] = dict(parse_header_args(args.header))
        headers['authorization'] = args.authorization

        options = ApiSignatureOptions(
            get_secret=lambda key_id: args.secret,
            required_headers=args.required_header or ['date'],
            request_lifetime=None if args.lifetime < 0 else args.lifetime,
        )
        authenticator = SignatureAuthenticator(options)
        request = SignedRequest(method=args.method, path=args.path, headers=headers)

        result = asyncio.run(authenticator.authenticate(request))
        print(f"✓ Signature valid for key ID: {result.key_id}")
        return 0

    except AuthenticationError as e:
        print(f"✗ Signature rejected: {e}", file=sys.stderr)
        return 1
    except (ApiSignatureError, ValueError) as e:
        print(f"Error verifying signature: {e}", file=sys.stderr)
        return 1


def handle_algorithms_command(args) -> int:
    """Handle algorithms command."""
    for name in available_algorithms():
        marker = ' (default)' if name == DEFAULT_ALGORITHM else ''
        print(f"{name}{marker}")
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(LoggingConfig(level=args.log_level))

        if args.command == 'sign':
            return handle_sign_command(args)
        elif args.command == 'verify':
            return handle_verify_command(args)
        elif args.command == 'algorithms':
            return handle_algorithms_command(args)
        else:
            # No command specified, show help
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
