"""
Cryptographic primitives for api-signature
"""

from .algorithms import (
    ALGORITHMS,
    DEFAULT_ALGORITHM,
    HMAC_SHA1,
    HMAC_SHA256,
    HMAC_SHA384,
    HMAC_SHA512,
    KeyedHashAlgorithm,
    available_algorithms,
    build_registry,
    resolve_algorithm,
)

__all__ = [
    'ALGORITHMS',
    'DEFAULT_ALGORITHM',
    'HMAC_SHA1',
    'HMAC_SHA256',
    'HMAC_SHA384',
    'HMAC_SHA512',
    'KeyedHashAlgorithm',
    'available_algorithms',
    'build_registry',
    'resolve_algorithm',
]
