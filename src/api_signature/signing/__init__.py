"""
Request signing module for api-signature

This module provides the client side of the scheme:
- Canonical string construction
- HMAC signing and Authorization header formatting
- HTTP-date helpers
- requests integration
"""

# Export types
from .types import (
    AUTHORIZATION_SCHEME,
    SignatureResult,
    SigningErrorCodes,
)

from .canonical_message import (
    build_canonical_string,
    collect_header_values,
)

from .signer import (
    Signer,
    create_signer,
    format_authorization,
    sign,
)

from .utils import (
    REQUEST_TARGET,
    format_http_date,
    parse_http_date,
    request_target,
)

from .integration import (
    SigningAuth,
    SigningSession,
    create_signing_session,
)

__all__ = [
    # Types
    'AUTHORIZATION_SCHEME',
    'SignatureResult',
    'SigningErrorCodes',

    # Canonical string
    'build_canonical_string',
    'collect_header_values',

    # Signer
    'Signer',
    'create_signer',
    'format_authorization',
    'sign',

    # Utilities
    'REQUEST_TARGET',
    'format_http_date',
    'parse_http_date',
    'request_target',

    # Integration
    'SigningAuth',
    'SigningSession',
    'create_signing_session',
]
