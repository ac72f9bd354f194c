"""
Utility functions for request signing

This module provides HTTP-date formatting and parsing, header name
normalization and the ``(request-target)`` pseudo-header value shared by
the signer and the verifier.
"""

import time
from datetime import datetime, timezone
from email.utils import formatdate, parsedate_to_datetime
from typing import Mapping, Optional, Union

REQUEST_TARGET = '(request-target)'

DateInput = Union[str, int, float, datetime]


def generate_timestamp() -> float:
    """Current Unix time in seconds."""
    return time.time()


def format_http_date(timestamp: Optional[Union[int, float, datetime]] = None) -> str:
    """
    Format a point in time as an IMF-fixdate HTTP-date.

    Args:
        timestamp: Unix timestamp or datetime (uses current time if None)

    Returns:
        str: e.g. ``Tue, 07 Jun 2014 20:51:35 GMT``
    """
    if timestamp is None:
        timestamp = generate_timestamp()
    elif isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        timestamp = timestamp.timestamp()
    return formatdate(timestamp, usegmt=True)


def coerce_http_date(value: Optional[DateInput]) -> str:
    """Return ``value`` as HTTP-date text; strings are used verbatim."""
    if isinstance(value, str):
        return value
    return format_http_date(value)


def parse_http_date(value: str) -> float:
    """
    Parse an HTTP-date header value.

    Args:
        value: Header value

    Returns:
        float: Unix timestamp

    Raises:
        ValueError: If the value is not a valid HTTP-date
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError) as e:
        raise ValueError(f"Invalid HTTP date: {value!r}") from e

    if parsed is None:
        raise ValueError(f"Invalid HTTP date: {value!r}")

    # "-0000" zones come back naive
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name

    Returns:
        str: Lowercase header name without surrounding whitespace
    """
    return name.strip().lower()


def request_target(method: str, path: str) -> str:
    """Value of the ``(request-target)`` pseudo-header."""
    return f"{method.lower()} {path}"


def find_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Find header with case-insensitive lookup"""
    target = normalize_header_name(name)
    for key, value in headers.items():
        if normalize_header_name(key) == target:
            return value
    return None
