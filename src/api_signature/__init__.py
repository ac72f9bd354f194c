"""
api-signature
HMAC request signing and verification for HTTP APIs
"""

from .version import __version__
from .exceptions import (
    ApiSignatureError,
    AuthenticationError,
    BadSignatureError,
    ConfigurationError,
    ExpiredRequestError,
    MalformedAuthorizationError,
    MissingRequiredHeaderError,
    UnauthorizedError,
    UnsupportedAlgorithmError,
    ValidationError,
)
from .crypto import (
    ALGORITHMS,
    DEFAULT_ALGORITHM,
    KeyedHashAlgorithm,
    available_algorithms,
    build_registry,
    resolve_algorithm,
)
from .signing import (
    SignatureResult,
    Signer,
    SigningAuth,
    SigningSession,
    build_canonical_string,
    create_signer,
    create_signing_session,
    format_http_date,
    sign,
)
# Verification imports config.options, so it has to load before config
from .verification import (
    AuthenticationResult,
    SignatureAuthenticator,
    SignatureDescriptor,
    SignedRequest,
    StaticSecretResolver,
    VerificationPolicy,
    as_resolver,
    callback_resolver,
    create_authenticator,
    create_fastapi_signature_middleware,
    parse_authorization_header,
    parse_request,
    verify_signature,
)
from .config import (
    ApiSignatureOptions,
    LoggingConfig,
    SignatureSettings,
    configure_logging,
    load_settings_from_file,
    load_settings_from_json,
)

__all__ = [
    # Version
    '__version__',

    # Exceptions
    'ApiSignatureError',
    'AuthenticationError',
    'BadSignatureError',
    'ConfigurationError',
    'ExpiredRequestError',
    'MalformedAuthorizationError',
    'MissingRequiredHeaderError',
    'UnauthorizedError',
    'UnsupportedAlgorithmError',
    'ValidationError',

    # Algorithms
    'ALGORITHMS',
    'DEFAULT_ALGORITHM',
    'KeyedHashAlgorithm',
    'available_algorithms',
    'build_registry',
    'resolve_algorithm',

    # Signing
    'SignatureResult',
    'Signer',
    'SigningAuth',
    'SigningSession',
    'build_canonical_string',
    'create_signer',
    'create_signing_session',
    'format_http_date',
    'sign',

    # Verification
    'AuthenticationResult',
    'SignatureAuthenticator',
    'SignatureDescriptor',
    'SignedRequest',
    'StaticSecretResolver',
    'VerificationPolicy',
    'as_resolver',
    'callback_resolver',
    'create_authenticator',
    'create_fastapi_signature_middleware',
    'parse_authorization_header',
    'parse_request',
    'verify_signature',

    # Configuration
    'ApiSignatureOptions',
    'LoggingConfig',
    'SignatureSettings',
    'configure_logging',
    'load_settings_from_file',
    'load_settings_from_json',
]
