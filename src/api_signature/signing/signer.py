"""
HMAC request signer

This module produces ``Signature`` authorization headers: the caller picks
the headers to sign, the signer adds the ``date`` header when it is not
already part of the set, hashes the canonical string with the shared
secret and formats the header value.
"""

import logging
import re
from typing import Dict, List, Mapping, Optional, Tuple

from ..crypto.algorithms import DEFAULT_ALGORITHM, KeyedHashAlgorithm, Secret, resolve_algorithm
from ..exceptions import ValidationError
from .canonical_message import build_canonical_string
from .types import (
    AUTHORIZATION_SCHEME,
    HeaderDict,
    HeaderValues,
    SignatureResult,
    SigningErrorCodes,
)
from .utils import DateInput, coerce_http_date, normalize_header_name

logger = logging.getLogger(__name__)

_HEADER_NAME_PATTERN = re.compile(r'^[^\s",]+$')


def format_authorization(key_id: str, algorithm: str, header_names, signature: str) -> str:
    """Format the ``Authorization`` header value."""
    return (
        f'{AUTHORIZATION_SCHEME} keyId="{key_id}",algorithm="{algorithm}",'
        f'headers="{" ".join(header_names)}",signature="{signature}"'
    )


class Signer:
    """
    Client-side signer bound to one key identifier and secret.

    Example:
        signer = Signer('client-1', 's3cr3t')
        response = requests.get(url, headers=signer.sign_headers())
    """

    def __init__(self, key_id: str, secret: Secret, algorithm: str = DEFAULT_ALGORITHM):
        """
        Initialize the signer.

        Args:
            key_id: Key identifier the server uses to look up the secret
            secret: Shared secret
            algorithm: Registered algorithm name

        Raises:
            ValidationError: If key_id or secret is empty
            UnsupportedAlgorithmError: If the algorithm is not registered
        """
        if not isinstance(key_id, str) or not key_id:
            raise ValidationError("Key ID cannot be empty", SigningErrorCodes.INVALID_KEY_ID)
        if '"' in key_id:
            raise ValidationError(
                "Key ID cannot contain double quotes",
                SigningErrorCodes.INVALID_KEY_ID,
                {'key_id': key_id}
            )
        if not isinstance(secret, (str, bytes)) or not secret:
            raise ValidationError("Secret cannot be empty", SigningErrorCodes.INVALID_SECRET)

        self.key_id = key_id
        self._secret = secret
        self.algorithm: KeyedHashAlgorithm = resolve_algorithm(algorithm)

    def sign(self, header_values: HeaderValues, date: Optional[DateInput] = None) -> SignatureResult:
        """
        Sign an ordered set of header values.

        Args:
            header_values: Ordered mapping (or sequence of pairs) of header name -> value
            date: Date to sign when ``header_values`` has no ``date`` entry
                  (HTTP-date text, timestamp or datetime; defaults to now)

        Returns:
            SignatureResult: Authorization header, date header and metadata

        Raises:
            ValidationError: If the header set is empty or invalid
        """
        entries = self._normalize_entries(header_values)

        names = [name for name, _ in entries]
        if 'date' in names:
            date_value = entries[names.index('date')][1]
        else:
            date_value = coerce_http_date(date)
            entries.append(('date', date_value))

        canonical_string = build_canonical_string(entries)
        signature = self.algorithm.encode(self.algorithm.digest(self._secret, canonical_string))
        header_names = tuple(name for name, _ in entries)

        logger.debug(f"Signed headers {' '.join(header_names)} for key ID: {self.key_id}")

        return SignatureResult(
            authorization=format_authorization(self.key_id, self.algorithm.name, header_names, signature),
            date=date_value,
            header_names=header_names,
            signature=signature,
            canonical_string=canonical_string,
        )

    def sign_headers(self, extra: Optional[Mapping[str, str]] = None) -> HeaderDict:
        """
        Sign a fresh ``date`` plus any extra headers.

        Args:
            extra: Additional headers to sign, placed before ``date``

        Returns:
            dict: ``Authorization`` and ``date`` headers for the outgoing request
        """
        headers = {
            name: value for name, value in (extra or {}).items()
            if normalize_header_name(name) != 'date'
        }
        headers['date'] = coerce_http_date(None)
        return self.sign(headers).headers

    def _normalize_entries(self, header_values: HeaderValues) -> List[Tuple[str, str]]:
        """
        Validate header pairs and lower-case their names.

        Raises:
            ValidationError: If the set is empty, a name is invalid or repeated,
                             or a value is not text
        """
        if header_values is None:
            raise ValidationError("Header values cannot be empty", SigningErrorCodes.EMPTY_HEADERS)

        if isinstance(header_values, Mapping):
            pairs = list(header_values.items())
        else:
            pairs = list(header_values)

        if not pairs:
            raise ValidationError("Header values cannot be empty", SigningErrorCodes.EMPTY_HEADERS)

        entries: List[Tuple[str, str]] = []
        seen: Dict[str, bool] = {}
        for name, value in pairs:
            if not isinstance(name, str) or not _HEADER_NAME_PATTERN.match(name.strip()):
                raise ValidationError(
                    f"Invalid header name: {name!r}",
                    SigningErrorCodes.INVALID_HEADERS,
                    {'header': name}
                )
            normalized = normalize_header_name(name)
            if normalized in seen:
                raise ValidationError(
                    f"Header listed more than once: {normalized}",
                    SigningErrorCodes.INVALID_HEADERS,
                    {'header': normalized}
                )
            if not isinstance(value, str):
                raise ValidationError(
                    f"Header value must be a string: {normalized}",
                    SigningErrorCodes.INVALID_HEADERS,
                    {'header': normalized, 'type': type(value).__name__}
                )
            seen[normalized] = True
            entries.append((normalized, value))

        return entries


def create_signer(key_id: str, secret: Secret, algorithm: str = DEFAULT_ALGORITHM) -> Signer:
    """
    Create a new signer.

    Args:
        key_id: Key identifier
        secret: Shared secret
        algorithm: Registered algorithm name

    Returns:
        Signer: Configured signer instance
    """
    return Signer(key_id, secret, algorithm)


def sign(
    secret: Secret,
    key_id: str,
    header_values: HeaderValues,
    algorithm: str = DEFAULT_ALGORITHM,
    date: Optional[DateInput] = None
) -> SignatureResult:
    """
    Sign header values with the given secret.

    Args:
        secret: Shared secret
        key_id: Key identifier
        header_values: Ordered header name -> value pairs
        algorithm: Registered algorithm name
        date: Date to sign when ``header_values`` has no ``date`` entry

    Returns:
        SignatureResult: Signing result
    """
    return create_signer(key_id, secret, algorithm).sign(header_values, date=date)
