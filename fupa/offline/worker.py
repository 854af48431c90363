"""
Offline shell cache as an ``httpx`` transport.

``ShellCacheWorker`` wraps a network transport and applies the same policy
the PWA's service worker applies in the browser:

1. non-GET requests go straight to the network;
2. shell paths are served cache-first, filling the cache on a miss;
3. navigations are network-first and fall back to the cached root document;
4. everything else is network-first and falls back to whatever is cached.

Until the worker is activated it does not intercept anything.
"""

from __future__ import annotations

import logging
from enum import Enum

import httpx

from fupa.offline.cache import (CacheMissError, CacheStorage, ShellInstallError,
                                snapshot)
from fupa.offline.manifest import ShellManifest

logger = logging.getLogger(__name__)


class WorkerState(str, Enum):
    NEW = "new"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class ShellCacheWorker(httpx.AsyncBaseTransport):
    def __init__(
        self,
        manifest: ShellManifest,
        storage: CacheStorage,
        network: httpx.AsyncBaseTransport,
        origin: str,
        *,
        skip_waiting: bool = True,
    ) -> None:
        self.manifest = manifest
        self.storage = storage
        self.origin = httpx.URL(origin)
        self.skip_waiting = skip_waiting
        self.state = WorkerState.NEW
        self.controls_clients = False
        self._network = network

    # ── Lifecycle ──────────────────────────────────────────────────
    async def install(self) -> None:
        """Pre-cache every shell path; all of them or none.

        On failure the worker becomes redundant, a bucket it created is
        dropped, and any previously activated version is left untouched.
        With ``skip_waiting`` a successful install activates immediately.
        """
        if self.state is not WorkerState.NEW:
            raise RuntimeError(f"cannot install a worker in state {self.state.value}")
        self.state = WorkerState.INSTALLING
        name = self.manifest.cache_name
        bucket_existed = self.storage.has(name)
        bucket = self.storage.open(name)

        requests = [httpx.Request("GET", self._url(path)) for path in self.manifest.paths]
        try:
            await bucket.add_all(requests, self._network.handle_async_request)
        except ShellInstallError:
            self.state = WorkerState.REDUNDANT
            if not bucket_existed:
                self.storage.delete(name)
            logger.error("Shell cache %s failed to install", name)
            raise

        self.state = WorkerState.INSTALLED
        logger.info("Shell cache %s installed (%d resources)", name, len(bucket))
        if self.skip_waiting:
            await self.activate()

    async def activate(self) -> None:
        """Drop every bucket but the current one and take control of clients."""
        if self.state is not WorkerState.INSTALLED:
            raise RuntimeError(f"cannot activate a worker in state {self.state.value}")
        for name in self.storage.keys():
            if name != self.manifest.cache_name:
                self.storage.delete(name)
        self.state = WorkerState.ACTIVATED
        self.controls_clients = True
        logger.info("Shell cache %s activated", self.manifest.cache_name)

    # ── Request interception ───────────────────────────────────────
    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if self.state is not WorkerState.ACTIVATED or request.method != "GET":
            return await self._network.handle_async_request(request)

        if self._same_origin(request.url) and self.manifest.is_shell_path(request.url.path):
            return await self._cache_first(request)
        if request.headers.get("sec-fetch-mode") == "navigate":
            return await self._network_first(request, fallback=self._url(self.manifest.fallback_path))
        return await self._network_first(request, fallback=request.url)

    async def aclose(self) -> None:
        await self._network.aclose()

    async def _cache_first(self, request: httpx.Request) -> httpx.Response:
        cached = self.storage.match(request.url)
        if cached is not None:
            return cached.to_response(request)

        response = await self._network.handle_async_request(request)
        fresh = await snapshot(response)
        if 200 <= fresh.status_code < 300:
            self.storage.open(self.manifest.cache_name).put(request.url, fresh)
        return fresh.to_response(request)

    async def _network_first(self, request: httpx.Request, fallback: httpx.URL) -> httpx.Response:
        try:
            return await self._network.handle_async_request(request)
        except httpx.TransportError as exc:
            cached = self.storage.match(fallback)
            if cached is None:
                raise CacheMissError(f"offline and {fallback} is not cached", request=request) from exc
            logger.debug("Offline: serving %s for %s from cache", fallback, request.url)
            return cached.to_response(request)

    def _url(self, path: str) -> httpx.URL:
        return self.origin.join(path)

    def _same_origin(self, url: httpx.URL) -> bool:
        return (url.scheme, url.host, url.port) == (self.origin.scheme, self.origin.host, self.origin.port)
