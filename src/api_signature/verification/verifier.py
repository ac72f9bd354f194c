"""
Signature verifier

Recomputes the digest of a parsed signature with the resolved secret and
compares it to the transmitted one in constant time.
"""

from typing import Mapping, Optional

from cryptography.hazmat.primitives import constant_time

from ..crypto.algorithms import ALGORITHMS, KeyedHashAlgorithm, Secret, resolve_algorithm
from ..signing.canonical_message import build_canonical_string, collect_header_values
from .types import SignatureDescriptor, SignedRequest


def reconstruct_canonical_string(descriptor: SignatureDescriptor, request: Optional[SignedRequest] = None) -> str:
    """
    Rebuild the canonical string the client signed.

    Args:
        descriptor: Parsed signature
        request: Request to read header values from (defaults to the descriptor's)

    Returns:
        str: Canonical string in ``descriptor.header_names`` order
    """
    source = request if request is not None else descriptor.request
    entries = collect_header_values(descriptor.header_names, source.headers, source.method, source.path)
    return build_canonical_string(entries)


def verify_signature(
    descriptor: SignatureDescriptor,
    secret: Secret,
    request: Optional[SignedRequest] = None,
    algorithms: Mapping[str, KeyedHashAlgorithm] = ALGORITHMS
) -> bool:
    """
    Check a parsed signature against the resolved secret.

    Args:
        descriptor: Descriptor produced by ``parse_request``
        secret: Secret resolved for ``descriptor.key_id``
        request: Request to verify (defaults to the descriptor's)
        algorithms: Algorithm registry

    Returns:
        bool: True only if the recomputed digest equals the signature exactly
    """
    algorithm = resolve_algorithm(descriptor.algorithm, algorithms)
    canonical_string = reconstruct_canonical_string(descriptor, request)
    expected = algorithm.digest(secret, canonical_string)
    return constant_time.bytes_eq(expected, descriptor.signature)
