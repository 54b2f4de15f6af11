"""Process-wide bearer token cache."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from .base_models import BearerToken


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCache(Protocol):
    """Storage contract used by the Authenticator."""

    def read(self, key: str) -> BearerToken | None: ...

    def write(self, key: str, token: BearerToken, ttl_seconds: float) -> None: ...

    def delete(self, key: str) -> None: ...


@dataclass(frozen=True)
class _Entry:
    token: BearerToken
    stored_until: datetime


class InMemoryTokenCache:
    """
    TTL-bound in-process cache.

    Records are replaced, never edited. Concurrent refreshes simply
    overwrite each other (last write wins), so no lock is taken.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def read(self, key: str) -> BearerToken | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.stored_until:
            # pop with default: another caller may have replaced or dropped it already
            if self._entries.get(key) is entry:
                self._entries.pop(key, None)
            return None
        return entry.token

    def write(self, key: str, token: BearerToken, ttl_seconds: float) -> None:
        stored_until = self._clock() + timedelta(seconds=ttl_seconds)
        self._entries[key] = _Entry(token=token, stored_until=stored_until)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


_token_cache: InMemoryTokenCache | None = None


def get_token_cache() -> InMemoryTokenCache:
    """Return the cache shared by every Authenticator in this process."""
    global _token_cache
    if _token_cache is None:
        _token_cache = InMemoryTokenCache()
    return _token_cache
