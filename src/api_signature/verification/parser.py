"""
Authorization header parser

Turns the ``Authorization: Signature ...`` header of an incoming request
into a ``SignatureDescriptor``. All structural checks happen here, before
any secret is looked up or any digest is computed:

1. scheme token and attribute list
2. required header coverage
3. presence of every signed header on the request
4. freshness of the signed ``date``
5. signature encoding
6. algorithm registration
"""

import base64
import binascii
import re
import time
from typing import Dict, Mapping, Optional

from ..crypto.algorithms import ALGORITHMS, KeyedHashAlgorithm, resolve_algorithm
from ..exceptions import (
    ExpiredRequestError,
    MalformedAuthorizationError,
    MissingRequiredHeaderError,
)
from ..signing.canonical_message import collect_header_values
from ..signing.types import AUTHORIZATION_SCHEME
from ..signing.utils import parse_http_date
from .types import (
    SignatureDescriptor,
    SignedRequest,
    VerificationErrorCodes,
    VerificationPolicy,
)

REQUIRED_ATTRIBUTES = ('keyId', 'algorithm', 'headers', 'signature')

_SCHEME_PATTERN = re.compile(r'^\s*(\S+)(?:\s+(.*))?$', re.DOTALL)


def parse_attributes(params: str) -> Dict[str, str]:
    """
    Parse a comma-separated ``key="value"`` attribute list.

    Quoted values are opaque up to the closing quote, so commas and equals
    signs may appear inside them. Whitespace around names, ``=`` and commas
    is ignored.

    Args:
        params: Attribute list following the scheme token

    Returns:
        dict: Attribute name -> value, in header order

    Raises:
        MalformedAuthorizationError: If the list cannot be parsed or a known
                                     attribute appears twice
    """
    attributes: Dict[str, str] = {}
    length = len(params)
    i = 0

    def malformed(reason: str) -> MalformedAuthorizationError:
        return MalformedAuthorizationError(
            f"Invalid authorization attributes: {reason}",
            VerificationErrorCodes.INVALID_ATTRIBUTES,
            {'position': i}
        )

    while True:
        while i < length and params[i].isspace():
            i += 1
        if i >= length:
            break

        start = i
        while i < length and params[i] not in '=,"' and not params[i].isspace():
            i += 1
        name = params[start:i]
        if not name:
            raise malformed("expected attribute name")

        while i < length and params[i].isspace():
            i += 1
        if i >= length or params[i] != '=':
            raise malformed(f"expected '=' after {name}")
        i += 1

        while i < length and params[i].isspace():
            i += 1
        if i >= length or params[i] != '"':
            raise malformed(f"value of {name} must be quoted")
        i += 1

        end = params.find('"', i)
        if end == -1:
            raise malformed(f"unterminated value for {name}")
        value = params[i:end]
        i = end + 1

        if name in REQUIRED_ATTRIBUTES and name in attributes:
            raise malformed(f"duplicate attribute {name}")
        attributes[name] = value

        while i < length and params[i].isspace():
            i += 1
        if i >= length:
            break
        if params[i] != ',':
            raise malformed("expected ',' between attributes")
        i += 1

    return attributes


def parse_authorization_header(value: Optional[str]) -> Dict[str, str]:
    """
    Split an ``Authorization`` header into its signature attributes.

    Raises:
        MalformedAuthorizationError: If the header is absent, uses another
                                     scheme or lacks a required attribute
    """
    if not value or not value.strip():
        raise MalformedAuthorizationError(
            "Authorization header not found",
            VerificationErrorCodes.MISSING_AUTHORIZATION
        )

    match = _SCHEME_PATTERN.match(value)
    if not match or match.group(1).lower() != AUTHORIZATION_SCHEME.lower():
        raise MalformedAuthorizationError(
            f"Authorization scheme must be {AUTHORIZATION_SCHEME}",
            VerificationErrorCodes.INVALID_SCHEME
        )

    attributes = parse_attributes(match.group(2) or '')

    missing = [name for name in REQUIRED_ATTRIBUTES if not attributes.get(name)]
    if missing:
        raise MalformedAuthorizationError(
            f"Authorization header is missing attributes: {', '.join(missing)}",
            VerificationErrorCodes.MISSING_ATTRIBUTE,
            {'missing_attributes': missing}
        )

    return attributes


def check_freshness(request: SignedRequest, request_lifetime: float, now: Optional[float] = None) -> None:
    """
    Reject requests whose signed date is too far from now, in either direction.

    Raises:
        MissingRequiredHeaderError: If the request has no date header
        ExpiredRequestError: If the date is unparsable or outside the window
    """
    date_value = request.get_header('date')
    if date_value is None:
        raise MissingRequiredHeaderError(
            "Date header is required to check request freshness",
            VerificationErrorCodes.MISSING_DATE,
            {'header': 'date'}
        )

    try:
        signed_at = parse_http_date(date_value)
    except ValueError:
        raise ExpiredRequestError(
            "Date header is not a valid HTTP date",
            VerificationErrorCodes.INVALID_DATE,
            {'date': date_value}
        )

    current = time.time() if now is None else now
    skew = abs(current - signed_at)
    if skew > request_lifetime:
        raise ExpiredRequestError(
            f"Clock skew of {skew:.0f}s exceeds the allowed {request_lifetime}s",
            details={'skew': skew, 'request_lifetime': request_lifetime}
        )


def decode_signature(value: str) -> bytes:
    try:
        return base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError):
        raise MalformedAuthorizationError(
            "Signature is not valid base64",
            VerificationErrorCodes.INVALID_SIGNATURE_ENCODING
        )


def parse_request(
    request: SignedRequest,
    policy: Optional[VerificationPolicy] = None,
    algorithms: Mapping[str, KeyedHashAlgorithm] = ALGORITHMS,
    now: Optional[float] = None
) -> SignatureDescriptor:
    """
    Parse and structurally validate the signature of a request.

    Args:
        request: Incoming request
        policy: Required headers and request lifetime (defaults apply if None)
        algorithms: Algorithm registry to resolve against
        now: Current Unix time, for tests

    Returns:
        SignatureDescriptor: Immutable descriptor for the verifier

    Raises:
        MalformedAuthorizationError: Header absent, wrong scheme, bad attributes or encoding
        MissingRequiredHeaderError: Required header not signed, or signed header absent
        ExpiredRequestError: Date outside the allowed lifetime
        UnsupportedAlgorithmError: Algorithm not registered
    """
    policy = policy or VerificationPolicy()

    attributes = parse_authorization_header(request.get_header('authorization'))

    header_names = tuple(name.lower() for name in attributes['headers'].split())
    if not header_names:
        raise MalformedAuthorizationError(
            "Signed header list is empty",
            VerificationErrorCodes.MISSING_ATTRIBUTE,
            {'missing_attributes': ['headers']}
        )

    missing_required = [name for name in policy.required_headers if name not in header_names]
    if missing_required:
        raise MissingRequiredHeaderError(
            f"Required headers are not signed: {', '.join(missing_required)}",
            details={'missing_headers': missing_required, 'signed_headers': list(header_names)}
        )

    collect_header_values(header_names, request.headers, request.method, request.path)

    if policy.request_lifetime is not None:
        check_freshness(request, policy.request_lifetime, now)

    signature = decode_signature(attributes['signature'])
    algorithm = resolve_algorithm(attributes['algorithm'], algorithms)

    return SignatureDescriptor(
        key_id=attributes['keyId'],
        algorithm=algorithm.name,
        header_names=header_names,
        signature=signature,
        request=request,
    )
