"""
Type definitions for request signing functionality
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Tuple, Union

AUTHORIZATION_SCHEME = 'Signature'

HeaderDict = Dict[str, str]
HeaderValues = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


@dataclass(frozen=True)
class SignatureResult:
    """
    Result of signing a set of header values

    Attributes:
        authorization: Complete ``Authorization`` header value
        date: ``date`` header value that was signed
        header_names: Signed header names in signing order
        signature: Base64 signature
        canonical_string: Exact text that was hashed
    """
    authorization: str
    date: str
    header_names: Tuple[str, ...]
    signature: str
    canonical_string: str = field(repr=False)

    @property
    def headers(self) -> HeaderDict:
        """Headers to add to the outgoing request."""
        return {
            'Authorization': self.authorization,
            'date': self.date,
        }


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    INVALID_KEY_ID = "INVALID_KEY_ID"
    INVALID_SECRET = "INVALID_SECRET"
    INVALID_HEADERS = "INVALID_HEADERS"
    EMPTY_HEADERS = "EMPTY_HEADERS"
