"""
Canonical string construction

The canonical string is the exact text that gets hashed: one
``name: value`` line per signed header, in signing order, joined by a
single newline and without a trailing newline. Signer and verifier both
go through ``build_canonical_string`` so the two sides cannot drift apart.
"""

from typing import Iterable, Mapping, Sequence, Tuple

from ..exceptions import MissingRequiredHeaderError
from .utils import REQUEST_TARGET, find_header, normalize_header_name, request_target


def encode_header_line(name: str, value: str) -> str:
    return f"{name}: {value}"


def build_canonical_string(entries: Iterable[Tuple[str, str]]) -> str:
    """
    Build the canonical string from ordered ``(name, value)`` pairs.

    Names are expected to be normalized already; values are used byte for
    byte.
    """
    return '\n'.join(encode_header_line(name, value) for name, value in entries)


def collect_header_values(
    header_names: Sequence[str],
    headers: Mapping[str, str],
    method: str = '',
    path: str = ''
) -> Tuple[Tuple[str, str], ...]:
    """
    Look up the value of each signed header on a request.

    Args:
        header_names: Signed header names in signing order
        headers: Request headers
        method: Request method, used for ``(request-target)``
        path: Request path including query string, used for ``(request-target)``

    Returns:
        tuple: ``(name, value)`` pairs in the given order

    Raises:
        MissingRequiredHeaderError: If a named header is absent from the request
    """
    entries = []
    for header_name in header_names:
        name = normalize_header_name(header_name)

        if name == REQUEST_TARGET:
            if not method or not path:
                raise MissingRequiredHeaderError(
                    "Request method and path are required for (request-target)",
                    details={'header': name}
                )
            entries.append((name, request_target(method, path)))
            continue

        value = find_header(headers, name)
        if value is None:
            raise MissingRequiredHeaderError(
                f"Signed header not found on request: {name}",
                details={'header': name}
            )
        entries.append((name, value))

    return tuple(entries)
