"""
Browser service-worker script generated from the shell manifest.

The script is rendered rather than shipped as a static file so the cache
name and the shell list come from the same settings ``ShellCacheWorker``
uses.
"""

from __future__ import annotations

import json
from string import Template

from fupa.offline.manifest import ShellManifest

_SCRIPT = Template(
    """// Generated by the FUPA Snack backend. Shell version: $version
const CACHE_NAME = $cache_name;
const OFFLINE_URLS = $paths;
const FALLBACK_URL = $fallback;

self.addEventListener('install', event => {
  event.waitUntil(
    caches.open(CACHE_NAME)
      .then(cache => cache.addAll(OFFLINE_URLS))
      .then(() => self.skipWaiting())
  );
});

self.addEventListener('activate', event => {
  event.waitUntil(
    caches.keys()
      .then(keys => Promise.all(keys.filter(key => key !== CACHE_NAME).map(key => caches.delete(key))))
      .then(() => self.clients.claim())
  );
});

self.addEventListener('fetch', event => {
  const { request } = event;
  if (request.method !== 'GET') return;
  const url = new URL(request.url);

  if (url.origin === self.location.origin && OFFLINE_URLS.includes(url.pathname)) {
    event.respondWith(
      caches.match(request).then(cached =>
        cached || fetch(request).then(response => {
          if (response.ok) {
            const copy = response.clone();
            caches.open(CACHE_NAME).then(cache => cache.put(request, copy));
          }
          return response;
        })
      )
    );
    return;
  }

  if (request.mode === 'navigate') {
    event.respondWith(fetch(request).catch(() => caches.match(FALLBACK_URL)));
    return;
  }

  event.respondWith(
    fetch(request).catch(() =>
      caches.match(request).then(cached => cached || Promise.reject(new Error('offline: ' + request.url)))
    )
  );
});
"""
)


def render_service_worker(manifest: ShellManifest) -> str:
    return _SCRIPT.substitute(
        version=manifest.version,
        cache_name=json.dumps(manifest.cache_name),
        paths=json.dumps(list(manifest.paths)),
        fallback=json.dumps(manifest.fallback_path),
    )
