"""
Signature verification module for api-signature

This module provides the server side of the scheme:
- Authorization header parsing and structural validation
- Constant-time signature verification
- Secret resolver adapters
- The request authentication pipeline and framework middleware
"""

# Export types
from .types import (
    AuthenticationResult,
    SignatureDescriptor,
    SignedRequest,
    VerificationErrorCodes,
    VerificationPolicy,
)

from .parser import (
    check_freshness,
    parse_attributes,
    parse_authorization_header,
    parse_request,
)

from .verifier import (
    reconstruct_canonical_string,
    verify_signature,
)

from .resolvers import (
    ResolvedSecret,
    SecretResolver,
    StaticSecretResolver,
    UnknownKeyError,
    as_resolver,
    callback_resolver,
)

from .middleware import (
    SignatureAuthenticator,
    create_authenticator,
    create_fastapi_signature_middleware,
    extract_signed_request,
    is_preflight_request,
)

__all__ = [
    # Types
    'AuthenticationResult',
    'SignatureDescriptor',
    'SignedRequest',
    'VerificationErrorCodes',
    'VerificationPolicy',

    # Parser
    'check_freshness',
    'parse_attributes',
    'parse_authorization_header',
    'parse_request',

    # Verifier
    'reconstruct_canonical_string',
    'verify_signature',

    # Resolvers
    'ResolvedSecret',
    'SecretResolver',
    'StaticSecretResolver',
    'UnknownKeyError',
    'as_resolver',
    'callback_resolver',

    # Middleware
    'SignatureAuthenticator',
    'create_authenticator',
    'create_fastapi_signature_middleware',
    'extract_signed_request',
    'is_preflight_request',
]
