"""
Authentication options

Validated options for the server-side authenticator, with the same
defaults and checks as the middleware factory: a secret resolver is
mandatory, ``required_headers`` must be a list of header names, the
request lifetime defaults to five minutes and credentials are exposed as
``credentials``.
"""

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..exceptions import ConfigurationError
from ..verification.resolvers import SecretResolver, ensure_resolver
from ..verification.types import (
    DEFAULT_REQUEST_LIFETIME,
    DEFAULT_REQUEST_PROPERTY,
    DEFAULT_REQUIRED_HEADERS,
    VerificationPolicy,
)


@dataclass
class ApiSignatureOptions:
    """
    Options for request signature authentication

    Attributes:
        get_secret: Resolver mapping a key ID to ``(secret, credentials)``;
                    sync, async or a ``StaticSecretResolver``
        required_headers: Headers every accepted signature must cover
        request_lifetime: Allowed clock skew in seconds (None disables the check)
        request_property: Name under which credentials are exposed after success
    """
    get_secret: Any = None
    required_headers: List[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_HEADERS))
    request_lifetime: Optional[float] = DEFAULT_REQUEST_LIFETIME
    request_property: str = DEFAULT_REQUEST_PROPERTY

    def __post_init__(self):
        """Validate options"""
        if self.get_secret is None or not callable(self.get_secret):
            raise ConfigurationError('The method "get_secret" must be defined', "MISSING_GET_SECRET")

        if not isinstance(self.required_headers, (list, tuple)) or not all(
            isinstance(name, str) and name.strip() for name in self.required_headers
        ):
            raise ConfigurationError(
                'The option "required_headers" must be a list of header names',
                "INVALID_REQUIRED_HEADERS",
                {'required_headers': self.required_headers}
            )

        if self.request_lifetime is not None and (
            isinstance(self.request_lifetime, bool)
            or not isinstance(self.request_lifetime, (int, float))
            or not math.isfinite(self.request_lifetime)
            or self.request_lifetime < 0
        ):
            raise ConfigurationError(
                'The option "request_lifetime" must be a finite, non-negative number of seconds or None',
                "INVALID_REQUEST_LIFETIME",
                {'request_lifetime': self.request_lifetime}
            )

        if not isinstance(self.request_property, str) or not self.request_property.isidentifier():
            raise ConfigurationError(
                'The option "request_property" must be a valid attribute name',
                "INVALID_REQUEST_PROPERTY",
                {'request_property': self.request_property}
            )

    @property
    def policy(self) -> VerificationPolicy:
        return VerificationPolicy(
            required_headers=tuple(self.required_headers),
            request_lifetime=self.request_lifetime,
        )

    @property
    def resolver(self) -> SecretResolver:
        return ensure_resolver(self.get_secret)
