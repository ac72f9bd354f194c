"""
Request authentication pipeline and web framework middleware

``SignatureAuthenticator`` runs the server-side flow for one request:
CORS preflight bypass, header parsing, secret resolution (the only
suspension point) and signature verification. The FastAPI middleware
wraps it and maps every authentication failure to the same 401 response.
"""

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit

from ..config.options import ApiSignatureOptions
from ..crypto.algorithms import ALGORITHMS, KeyedHashAlgorithm
from ..exceptions import (
    AuthenticationError,
    BadSignatureError,
    ConfigurationError,
    UnauthorizedError,
)
from .parser import parse_request
from .resolvers import ResolvedSecret, normalize_resolved
from .types import AuthenticationResult, SignedRequest, VerificationErrorCodes
from .verifier import verify_signature

logger = logging.getLogger(__name__)

UNAUTHORIZED_BODY = {
    'error': 'Unauthorized',
    'code': 'INVALID_SIGNATURE',
}


def _extract_headers(request: Any) -> Dict[str, str]:
    """Extract headers from request object (Starlette, Flask and Django all expose ``headers``)"""
    headers = {}

    request_headers = getattr(request, 'headers', None)
    if hasattr(request_headers, 'items'):
        for key, value in request_headers.items():
            headers[key.lower()] = value
    elif request_headers is not None:
        for key, value in request_headers:
            headers[key.lower()] = value

    return headers


def _get_scope_path(scope: Mapping[str, Any]) -> str:
    """Undecoded path and query string from an ASGI scope"""
    raw_path = scope.get('raw_path') or scope['path'].encode('utf-8')
    # Some servers include the query string in raw_path
    path = raw_path.split(b'?', 1)[0].decode('latin-1')
    query = scope.get('query_string') or b''
    return f"{path}?{query.decode('latin-1')}" if query else path


def _get_raw_uri(request: Any) -> Optional[str]:
    """Request URI as received, from a WSGI environ (Flask) or Django META"""
    environ = getattr(request, 'environ', None)
    if not isinstance(environ, Mapping):
        environ = getattr(request, 'META', None)
    if not isinstance(environ, Mapping):
        return None
    raw_uri = environ.get('RAW_URI') or environ.get('REQUEST_URI')
    if not raw_uri:
        return None
    if '://' in raw_uri:
        parts = urlsplit(raw_uri)
        return f"{parts.path or '/'}?{parts.query}" if parts.query else (parts.path or '/')
    return raw_uri


def _get_request_path(request: Any) -> str:
    """
    Get request path including query string, percent-encoding intact

    The path is part of ``(request-target)``, so it must match the bytes the
    client sent rather than the framework's decoded path.
    """
    scope = getattr(request, 'scope', None)
    if isinstance(scope, Mapping) and 'path' in scope:
        # Starlette / FastAPI
        return _get_scope_path(scope)

    raw_uri = _get_raw_uri(request)
    if raw_uri:
        return raw_uri

    url = getattr(request, 'url', None)
    if url is not None and hasattr(url, 'path') and not isinstance(url, str):
        query = getattr(url, 'query', '')
        return f"{url.path}?{query}" if query else url.path
    if hasattr(request, 'get_full_path'):
        # Django request
        return request.get_full_path()
    if hasattr(request, 'full_path'):
        # Flask appends "?" even without a query string
        return request.full_path.rstrip('?')
    if isinstance(url, str):
        parts = urlsplit(url)
        return f"{parts.path or '/'}?{parts.query}" if parts.query else (parts.path or '/')
    if hasattr(request, 'path'):
        return request.path
    return ''


def extract_signed_request(request: Any) -> SignedRequest:
    """
    Build a ``SignedRequest`` from a framework request object.

    Supports Starlette/FastAPI, Flask and Django style requests; a
    ``SignedRequest`` is returned unchanged.
    """
    if isinstance(request, SignedRequest):
        return request

    return SignedRequest(
        method=str(getattr(request, 'method', 'GET')),
        path=_get_request_path(request),
        headers=_extract_headers(request),
    )


def is_preflight_request(request: SignedRequest) -> bool:
    """
    True for a CORS preflight that announces an ``Authorization`` header.

    The actual request that follows the preflight is verified as usual.
    """
    if request.method != 'OPTIONS':
        return False

    requested = request.get_header('access-control-request-headers')
    if not requested:
        return False

    return 'authorization' in [header.strip().lower() for header in requested.split(',')]


class SignatureAuthenticator:
    """
    Server-side request authenticator

    Example:
        authenticator = SignatureAuthenticator(ApiSignatureOptions(get_secret=lookup))
        result = await authenticator.authenticate(request)
    """

    def __init__(
        self,
        options: ApiSignatureOptions,
        algorithms: Mapping[str, KeyedHashAlgorithm] = ALGORITHMS
    ):
        if not isinstance(options, ApiSignatureOptions):
            raise ConfigurationError("Options must be an ApiSignatureOptions instance", "INVALID_OPTIONS")

        self.options = options
        self.policy = options.policy
        self.resolver = options.resolver
        self.algorithms = algorithms

    async def authenticate(self, request: Any) -> AuthenticationResult:
        """
        Authenticate one request.

        Args:
            request: ``SignedRequest`` or framework request object

        Returns:
            AuthenticationResult: Key ID and credentials, or a bypass marker

        Raises:
            AuthenticationError: One of the rejection kinds
            ConfigurationError: If the secret resolver breaks its contract
        """
        signed_request = extract_signed_request(request)

        if is_preflight_request(signed_request):
            logger.debug(f"Skipping signature check for preflight request to {signed_request.path}")
            return AuthenticationResult(bypassed=True)

        try:
            descriptor = parse_request(signed_request, self.policy, self.algorithms)
        except AuthenticationError as e:
            logger.info(f"Rejected {signed_request.method} {signed_request.path}: {e.error_code}")
            raise

        resolved = await self._resolve_secret(descriptor.key_id)

        if not verify_signature(descriptor, resolved.secret, signed_request, self.algorithms):
            logger.info(f"Rejected {signed_request.method} {signed_request.path}: bad signature for key ID {descriptor.key_id}")
            raise BadSignatureError(details={'key_id': descriptor.key_id})

        logger.debug(f"Authenticated request for key ID: {descriptor.key_id}")
        return AuthenticationResult(key_id=descriptor.key_id, credentials=resolved.credentials)

    def attach_credentials(self, target: Any, result: AuthenticationResult) -> None:
        """Expose credentials on ``target`` under the configured property name."""
        if not result.bypassed:
            setattr(target, self.options.request_property, result.credentials)

    async def _resolve_secret(self, key_id: str) -> ResolvedSecret:
        """
        Await the secret resolver for a key ID.

        Raises:
            UnauthorizedError: If the resolver reports an error
            ConfigurationError: If it reports no error but returns no secret
        """
        try:
            result = await self.resolver(key_id)
        except ConfigurationError:
            raise
        except Exception as error:
            logger.info(f"Secret resolution failed for key ID {key_id}: {error}")
            raise UnauthorizedError(str(error) or None, details={'key_id': key_id}) from error

        try:
            resolved = normalize_resolved(result)
        except TypeError as e:
            raise ConfigurationError(
                f"Invalid secret resolver result: {e}",
                VerificationErrorCodes.RESOLVER_CONTRACT_VIOLATION,
                {'key_id': key_id}
            )

        if not resolved.secret:
            logger.error(f"Secret resolver returned no secret for key ID {key_id}")
            raise ConfigurationError(
                'The secret resolver must return the secret key or raise an error',
                VerificationErrorCodes.RESOLVER_CONTRACT_VIOLATION,
                {'key_id': key_id}
            )

        return resolved


def create_authenticator(
    options: Optional[ApiSignatureOptions] = None,
    algorithms: Mapping[str, KeyedHashAlgorithm] = ALGORITHMS,
    **kwargs
) -> SignatureAuthenticator:
    """
    Create an authenticator from options or option keyword arguments.

    Args:
        options: Prepared options
        algorithms: Algorithm registry
        **kwargs: ``ApiSignatureOptions`` fields when ``options`` is None

    Returns:
        SignatureAuthenticator: Configured authenticator

    Raises:
        ConfigurationError: If the options are invalid
    """
    if options is None:
        options = ApiSignatureOptions(**kwargs)
    return SignatureAuthenticator(options, algorithms)


def create_fastapi_signature_middleware(
    options: ApiSignatureOptions,
    algorithms: Mapping[str, KeyedHashAlgorithm] = ALGORITHMS
):
    """
    Create FastAPI signature middleware

    Register with ``app.middleware('http')(middleware)``. Credentials are
    stored on ``request.state`` under ``options.request_property``.

    Args:
        options: Authentication options
        algorithms: Algorithm registry

    Returns:
        FastAPI middleware function
    """
    try:
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError("FastAPI is required for FastAPI middleware")

    authenticator = SignatureAuthenticator(options, algorithms)

    async def fastapi_signature_middleware(request, call_next):
        try:
            result = await authenticator.authenticate(request)
        except AuthenticationError as error:
            return JSONResponse(
                UNAUTHORIZED_BODY,
                status_code=error.http_status,
                headers={'WWW-Authenticate': 'Signature'}
            )

        authenticator.attach_credentials(request.state, result)
        return await call_next(request)

    return fastapi_signature_middleware
