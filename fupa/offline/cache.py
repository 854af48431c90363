"""
In-memory named cache buckets holding snapshots of HTTP responses.

A bucket maps a request URL (fragment stripped) to a ``CachedResponse``.
Every match hands out a fresh ``httpx.Response`` so concurrent readers
never share a consumed stream.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

import httpx

from fupa.core.exceptions import FupaError

logger = logging.getLogger(__name__)

# Snapshots store decoded bodies, so transfer framing headers no longer apply.
_DROP_HEADERS = {"content-encoding", "content-length", "transfer-encoding"}

Fetch = Callable[[httpx.Request], Awaitable[httpx.Response]]


class ShellInstallError(FupaError):
    """A shell resource could not be fetched while installing the cache."""


class CacheMissError(httpx.TransportError):
    """Offline and nothing cached for the request."""


@dataclass(frozen=True)
class CachedResponse:
    status_code: int
    headers: tuple[tuple[str, str], ...]
    content: bytes

    def to_response(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            self.status_code,
            headers=list(self.headers),
            content=self.content,
            request=request,
        )


async def snapshot(response: httpx.Response) -> CachedResponse:
    """Read ``response`` fully and freeze it for storage."""
    content = await response.aread()
    headers = tuple(
        (key, value)
        for key, value in response.headers.multi_items()
        if key.lower() not in _DROP_HEADERS
    )
    return CachedResponse(response.status_code, headers, content)


def cache_key(url: httpx.URL | str) -> str:
    return str(url).split("#", 1)[0]


class CacheBucket:
    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: dict[str, CachedResponse] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    def match(self, url: httpx.URL | str) -> CachedResponse | None:
        return self._entries.get(cache_key(url))

    def put(self, url: httpx.URL | str, cached: CachedResponse) -> None:
        self._entries[cache_key(url)] = cached

    async def add_all(self, requests: Iterable[httpx.Request], fetch: Fetch) -> None:
        """Fetch every request and store them all, or store nothing.

        Fails on a network error or any non-2xx response.
        """
        fetched: list[tuple[httpx.URL, CachedResponse]] = []
        for request in requests:
            try:
                response = await fetch(request)
                cached = await snapshot(response)
            except httpx.TransportError as exc:
                raise ShellInstallError(f"{request.url} unreachable: {exc}") from exc
            if not 200 <= cached.status_code < 300:
                raise ShellInstallError(f"{request.url} answered {cached.status_code}")
            fetched.append((request.url, cached))

        for url, cached in fetched:
            self.put(url, cached)


class CacheStorage:
    """The set of named buckets belonging to one origin."""

    def __init__(self) -> None:
        self._buckets: dict[str, CacheBucket] = {}

    def open(self, name: str) -> CacheBucket:
        bucket = self._buckets.get(name)
        if bucket is None:
            bucket = self._buckets[name] = CacheBucket(name)
        return bucket

    def has(self, name: str) -> bool:
        return name in self._buckets

    def keys(self) -> list[str]:
        return list(self._buckets)

    def delete(self, name: str) -> bool:
        removed = self._buckets.pop(name, None) is not None
        if removed:
            logger.info("Deleted cache bucket %s", name)
        return removed

    def match(self, url: httpx.URL | str) -> CachedResponse | None:
        """Look ``url`` up in every bucket, oldest bucket first."""
        for bucket in self._buckets.values():
            cached = bucket.match(url)
            if cached is not None:
                return cached
        return None
