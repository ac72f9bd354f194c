"""
Type definitions for signature verification functionality

This module provides the request, policy and descriptor types shared by the
authorization header parser, the verifier and the authentication pipeline.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from ..signing.utils import find_header

DEFAULT_REQUIRED_HEADERS: Tuple[str, ...] = ('date',)
DEFAULT_REQUEST_LIFETIME = 300
DEFAULT_REQUEST_PROPERTY = 'credentials'


@dataclass
class SignedRequest:
    """
    Incoming request as seen by the verifier

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: Request path including query string
        headers: Request headers; names are lower-cased, values kept verbatim
    """
    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate request after initialization"""
        if not isinstance(self.headers, Mapping):
            raise ValueError("Headers must be a mapping")

        self.method = (self.method or '').upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def get_header(self, name: str) -> Optional[str]:
        return find_header(self.headers, name)


@dataclass
class VerificationPolicy:
    """
    Policy applied while parsing a signature

    Attributes:
        required_headers: Header names every accepted signature must cover
        request_lifetime: Maximum clock difference in seconds between the
                          signed ``date`` and now; None disables the check
    """
    required_headers: Tuple[str, ...] = DEFAULT_REQUIRED_HEADERS
    request_lifetime: Optional[float] = DEFAULT_REQUEST_LIFETIME

    def __post_init__(self):
        """Normalize header names and validate the lifetime"""
        if isinstance(self.required_headers, str) or not all(
            isinstance(name, str) for name in self.required_headers
        ):
            raise ValueError("Required headers must be a sequence of strings")
        self.required_headers = tuple(name.strip().lower() for name in self.required_headers)

        if self.request_lifetime is not None:
            if isinstance(self.request_lifetime, bool) or not isinstance(self.request_lifetime, (int, float)):
                raise ValueError("Request lifetime must be a number of seconds or None")
            if not math.isfinite(self.request_lifetime):
                raise ValueError("Request lifetime must be finite")
            if self.request_lifetime < 0:
                raise ValueError("Request lifetime cannot be negative")


@dataclass(frozen=True)
class SignatureDescriptor:
    """
    Parsed ``Signature`` authorization header

    Attributes:
        key_id: Key identifier selecting the secret
        algorithm: Registered algorithm name (lower case)
        header_names: Signed header names in signing order
        signature: Decoded signature bytes
        request: Request the header was parsed from
    """
    key_id: str
    algorithm: str
    header_names: Tuple[str, ...]
    signature: bytes = field(repr=False)
    request: SignedRequest = field(repr=False, compare=False)


@dataclass(frozen=True)
class AuthenticationResult:
    """
    Outcome of a successful authentication

    Attributes:
        key_id: Authenticated key identifier (None for bypassed preflight requests)
        credentials: Opaque value returned by the secret resolver
        bypassed: True when verification was skipped for a CORS preflight request
    """
    key_id: Optional[str] = None
    credentials: Any = None
    bypassed: bool = False


# Common verification error codes
class VerificationErrorCodes:
    """Standard error codes for verification operations"""

    MISSING_AUTHORIZATION = "MISSING_AUTHORIZATION"
    INVALID_SCHEME = "INVALID_SCHEME"
    INVALID_ATTRIBUTES = "INVALID_ATTRIBUTES"
    MISSING_ATTRIBUTE = "MISSING_ATTRIBUTE"
    INVALID_SIGNATURE_ENCODING = "INVALID_SIGNATURE_ENCODING"
    MISSING_DATE = "MISSING_DATE"
    INVALID_DATE = "INVALID_DATE"
    RESOLVER_CONTRACT_VIOLATION = "RESOLVER_CONTRACT_VIOLATION"

