"""
Keyed-hash algorithm registry

This module maps algorithm names, as they appear in the ``algorithm``
attribute of a ``Signature`` authorization header, to HMAC implementations
backed by the cryptography package. The process-wide registry is built once
at import time and exposed read-only.
"""

import base64
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Union

from cryptography.hazmat.primitives import hashes, hmac

from ..exceptions import UnsupportedAlgorithmError

DEFAULT_ALGORITHM = 'hmac-sha256'

Secret = Union[str, bytes]


def to_bytes(value: Secret) -> bytes:
    """Encode text as UTF-8; bytes pass through untouched."""
    if isinstance(value, bytes):
        return value
    return value.encode('utf-8')


@dataclass(frozen=True)
class KeyedHashAlgorithm:
    """
    A registered keyed-hash algorithm.

    Attributes:
        name: Registry name (lower case, e.g. ``hmac-sha256``)
        hash_factory: Zero-argument callable returning a cryptography hash instance
        encoding: Transport encoding of the digest
    """
    name: str
    hash_factory: Callable[[], hashes.HashAlgorithm]
    encoding: str = 'base64'

    @property
    def digest_size(self) -> int:
        return self.hash_factory().digest_size

    def digest(self, secret: Secret, data: Union[str, bytes]) -> bytes:
        """
        Compute the keyed digest of ``data``.

        Args:
            secret: Shared secret (text is UTF-8 encoded)
            data: Message to authenticate (text is UTF-8 encoded)

        Returns:
            bytes: Raw digest of ``digest_size`` bytes
        """
        mac = hmac.HMAC(to_bytes(secret), self.hash_factory())
        mac.update(to_bytes(data))
        return mac.finalize()

    def encode(self, digest: bytes) -> str:
        return base64.b64encode(digest).decode('ascii')


def build_registry(*algorithms: KeyedHashAlgorithm) -> Mapping[str, KeyedHashAlgorithm]:
    """
    Build a read-only registry from algorithm entries.

    Args:
        *algorithms: Entries to register; names are lower-cased

    Returns:
        Mapping: Immutable name -> algorithm table

    Raises:
        ValueError: If the same name is registered twice or no entry is given
    """
    if not algorithms:
        raise ValueError("At least one algorithm must be registered")

    table: Dict[str, KeyedHashAlgorithm] = {}
    for algorithm in algorithms:
        name = algorithm.name.lower()
        if name in table:
            raise ValueError(f"Algorithm registered twice: {name}")
        table[name] = algorithm
    return MappingProxyType(table)


HMAC_SHA1 = KeyedHashAlgorithm('hmac-sha1', hashes.SHA1)
HMAC_SHA256 = KeyedHashAlgorithm('hmac-sha256', hashes.SHA256)
HMAC_SHA384 = KeyedHashAlgorithm('hmac-sha384', hashes.SHA384)
HMAC_SHA512 = KeyedHashAlgorithm('hmac-sha512', hashes.SHA512)

# Process-wide registry
ALGORITHMS: Mapping[str, KeyedHashAlgorithm] = build_registry(
    HMAC_SHA256,
    HMAC_SHA384,
    HMAC_SHA512,
    HMAC_SHA1,
)


def resolve_algorithm(
    name: str,
    algorithms: Mapping[str, KeyedHashAlgorithm] = ALGORITHMS
) -> KeyedHashAlgorithm:
    """
    Look up an algorithm by name (case-insensitive).

    Raises:
        UnsupportedAlgorithmError: If the name is not registered
    """
    algorithm = algorithms.get(name.lower()) if isinstance(name, str) else None
    if algorithm is None:
        raise UnsupportedAlgorithmError(
            f"Unsupported algorithm: {name}",
            details={'algorithm': name, 'available_algorithms': sorted(algorithms)}
        )
    return algorithm


def available_algorithms(algorithms: Mapping[str, KeyedHashAlgorithm] = ALGORITHMS) -> List[str]:
    return sorted(algorithms)
