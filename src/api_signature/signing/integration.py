"""
HTTP client integration for request signing

This module provides integration between the signer and the ``requests``
library, so outbound requests carry a fresh ``date`` header and a
``Signature`` authorization header without manual bookkeeping.
"""

import logging
from typing import Iterable, List, Optional, Tuple

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest
from requests.sessions import Session

from ..crypto.algorithms import DEFAULT_ALGORITHM, Secret
from ..exceptions import ValidationError
from .signer import Signer
from .types import SigningErrorCodes
from .utils import REQUEST_TARGET, coerce_http_date, normalize_header_name, request_target

logger = logging.getLogger(__name__)


class SigningAuth(AuthBase):
    """
    ``requests`` auth hook that signs each prepared request.

    ``date`` is always signed (last) with the current time. Additional
    headers listed in ``headers`` are taken from the prepared request;
    ``(request-target)`` is computed from its method and path.

    Example:
        auth = SigningAuth(Signer('client-1', 's3cr3t'), headers=['(request-target)'])
        requests.get('https://api.example.com/items', auth=auth)
    """

    def __init__(self, signer: Signer, headers: Optional[Iterable[str]] = None):
        self.signer = signer
        self.headers: List[str] = [
            normalize_header_name(name) for name in (headers or [])
            if normalize_header_name(name) != 'date'
        ]

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        entries = self._collect(request)
        entries.append(('date', coerce_http_date(None)))

        result = self.signer.sign(entries)
        request.headers.update(result.headers)

        logger.debug(f"Signed {request.method} request to {request.url}")
        return request

    def _collect(self, request: PreparedRequest) -> List[Tuple[str, str]]:
        entries = []
        for name in self.headers:
            if name == REQUEST_TARGET:
                entries.append((name, request_target(request.method or 'GET', request.path_url)))
                continue

            value = request.headers.get(name)
            if value is None:
                raise ValidationError(
                    f"Cannot sign missing header: {name}",
                    SigningErrorCodes.INVALID_HEADERS,
                    {'header': name}
                )
            if isinstance(value, bytes):
                value = value.decode('latin-1')
            entries.append((name, value))
        return entries


class SigningSession:
    """
    HTTP session wrapper with automatic request signing.

    This class wraps a ``requests.Session`` and signs every outgoing request
    while signing is enabled.
    """

    def __init__(
        self,
        signer: Optional[Signer] = None,
        session: Optional[Session] = None,
        signed_headers: Optional[Iterable[str]] = None,
        auto_sign: bool = True
    ):
        """
        Initialize signing session.

        Args:
            signer: Optional signer
            session: Optional existing requests session to wrap
            signed_headers: Extra headers to sign besides ``date``
            auto_sign: Whether to automatically sign requests
        """
        self.session = session or requests.Session()
        self.signed_headers = list(signed_headers or [])
        self.auth: Optional[SigningAuth] = None
        self.auto_sign = auto_sign
        if signer is not None:
            self.configure_signing(signer, auto_sign)

    def configure_signing(self, signer: Signer, auto_sign: bool = True) -> None:
        """
        Configure request signing for this session.

        Args:
            signer: Signer to use for outgoing requests
            auto_sign: Whether to automatically sign requests
        """
        self.auth = SigningAuth(signer, self.signed_headers)
        self.auto_sign = auto_sign
        logger.info(f"Configured request signing for key ID: {signer.key_id}")

    def disable_signing(self) -> None:
        """Disable automatic request signing."""
        self.auto_sign = False
        logger.info("Disabled automatic request signing")

    def enable_signing(self) -> None:
        """Enable automatic request signing (if configured)."""
        if self.auth:
            self.auto_sign = True
            logger.info("Enabled automatic request signing")
        else:
            logger.warning("Cannot enable signing - no signer configured")

    @property
    def is_signing(self) -> bool:
        return bool(self.auto_sign and self.auth)

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Make HTTP request, signing it when signing is enabled.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Additional arguments for requests

        Returns:
            requests.Response: HTTP response
        """
        if self.is_signing and 'auth' not in kwargs:
            kwargs['auth'] = self.auth
        return self.session.request(method, url, **kwargs)

    def get(self, url: str, **kwargs) -> requests.Response:
        """Make GET request."""
        return self.request('GET', url, **kwargs)

    def post(self, url: str, **kwargs) -> requests.Response:
        """Make POST request."""
        return self.request('POST', url, **kwargs)

    def put(self, url: str, **kwargs) -> requests.Response:
        """Make PUT request."""
        return self.request('PUT', url, **kwargs)

    def delete(self, url: str, **kwargs) -> requests.Response:
        """Make DELETE request."""
        return self.request('DELETE', url, **kwargs)

    def patch(self, url: str, **kwargs) -> requests.Response:
        """Make PATCH request."""
        return self.request('PATCH', url, **kwargs)

    def head(self, url: str, **kwargs) -> requests.Response:
        """Make HEAD request."""
        return self.request('HEAD', url, **kwargs)

    def options(self, url: str, **kwargs) -> requests.Response:
        """Make OPTIONS request."""
        return self.request('OPTIONS', url, **kwargs)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def create_signing_session(
    key_id: str,
    secret: Secret,
    algorithm: str = DEFAULT_ALGORITHM,
    signed_headers: Optional[Iterable[str]] = None,
    session: Optional[Session] = None
) -> SigningSession:
    """
    Create a session that signs every request.

    Args:
        key_id: Key identifier
        secret: Shared secret
        algorithm: Registered algorithm name
        signed_headers: Extra headers to sign besides ``date``
        session: Optional existing requests session to wrap

    Returns:
        SigningSession: Configured signing session
    """
    signer = Signer(key_id, secret, algorithm)
    return SigningSession(signer, session=session, signed_headers=signed_headers)
