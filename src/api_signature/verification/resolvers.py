"""
Secret resolvers

A secret resolver maps a key identifier to ``(secret, credentials)``. It is
awaited by the authenticator between parsing and verification and signals
failure by raising. Synchronous functions and callback-style functions are
adapted onto the same awaitable shape.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, NamedTuple, Optional, Protocol, Union, runtime_checkable

from ..crypto.algorithms import Secret


class ResolvedSecret(NamedTuple):
    """Secret and opaque credentials for one key identifier"""
    secret: Optional[Secret]
    credentials: Any = None


@runtime_checkable
class SecretResolver(Protocol):
    """Protocol for secret resolver implementations"""

    async def __call__(self, key_id: str) -> "ResolverResult":
        """Resolve (secret, credentials) for a key ID, raising on failure"""
        ...


class UnknownKeyError(LookupError):
    """Raised by resolvers when a key ID is not known"""
    pass


ResolverResult = Union[ResolvedSecret, tuple, Secret, None]
ResolverFunction = Callable[[str], Union[ResolverResult, Awaitable[ResolverResult]]]
DoneCallback = Callable[..., None]
CallbackResolverFunction = Callable[[str, DoneCallback], Any]


def normalize_resolved(result: ResolverResult) -> ResolvedSecret:
    """
    Coerce a resolver return value to ``ResolvedSecret``.

    Accepts a ``ResolvedSecret``, a ``(secret, credentials)`` pair, a bare
    secret (no credentials) or None (no secret).
    """
    if isinstance(result, ResolvedSecret):
        return result
    if isinstance(result, (tuple, list)):
        if len(result) != 2:
            raise TypeError("Resolver must return a (secret, credentials) pair")
        return ResolvedSecret(result[0], result[1])
    return ResolvedSecret(result, None)


def as_resolver(func: ResolverFunction) -> SecretResolver:
    """
    Wrap a plain or async function as a secret resolver.

    Args:
        func: Callable taking a key ID and returning (or awaiting to) a resolver result

    Returns:
        SecretResolver: Awaitable resolver
    """
    if not callable(func):
        raise TypeError("Secret resolver must be callable")

    async def resolver(key_id: str) -> ResolverResult:
        result = func(key_id)
        # Handle both sync and async callables
        if inspect.isawaitable(result):
            result = await result
        return result

    resolver.__name__ = getattr(func, '__name__', 'resolver')
    return resolver


def callback_resolver(func: CallbackResolverFunction) -> SecretResolver:
    """
    Adapt a callback-style lookup ``func(key_id, done)`` to a resolver.

    ``done(error, secret=None, credentials=None)`` may be called from any
    thread; the first call wins. A non-None ``error`` makes the resolver
    raise it (wrapped in ``LookupError`` when it is not an exception).
    """
    if not callable(func):
        raise TypeError("Secret resolver must be callable")

    async def resolver(key_id: str) -> ResolvedSecret:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def settle(error: Any, secret: Optional[Secret], credentials: Any) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error if isinstance(error, BaseException) else LookupError(str(error)))
            else:
                future.set_result(ResolvedSecret(secret, credentials))

        def done(error: Any = None, secret: Optional[Secret] = None, credentials: Any = None) -> None:
            loop.call_soon_threadsafe(settle, error, secret, credentials)

        func(key_id, done)
        return await future

    resolver.__name__ = getattr(func, '__name__', 'callback_resolver')
    return resolver


class StaticSecretResolver:
    """In-memory key ID -> secret table"""

    def __init__(self, secrets: Optional[Dict[str, Union[Secret, ResolvedSecret, tuple]]] = None):
        self._entries: Dict[str, ResolvedSecret] = {}
        for key_id, entry in (secrets or {}).items():
            self.add_secret(key_id, *normalize_resolved(entry))

    async def __call__(self, key_id: str) -> ResolvedSecret:
        entry = self._entries.get(key_id)
        if entry is None:
            raise UnknownKeyError(f"Unknown key ID: {key_id}")
        return entry

    def add_secret(self, key_id: str, secret: Secret, credentials: Any = None) -> None:
        """
        Add or replace a secret

        Args:
            key_id: Key identifier
            secret: Shared secret
            credentials: Value exposed to the application on success
        """
        if not key_id:
            raise ValueError("Key ID cannot be empty")
        if not secret:
            raise ValueError("Secret cannot be empty")
        self._entries[key_id] = ResolvedSecret(secret, credentials)

    def remove_secret(self, key_id: str) -> None:
        self._entries.pop(key_id, None)

    def __contains__(self, key_id: str) -> bool:
        return key_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def ensure_resolver(resolver: Any) -> SecretResolver:
    """Return ``resolver`` as an awaitable resolver."""
    if isinstance(resolver, StaticSecretResolver):
        return resolver
    return as_resolver(resolver)
