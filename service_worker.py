import json
from typing import Sequence

from offline_cache import CACHE_NAME, URLS_TO_CACHE

SERVICE_WORKER_TEMPLATE = """\
const CACHE_NAME = {cache_name};
const urlsToCache = {urls};

self.addEventListener('install', event => {{
  event.waitUntil(
    caches.open(CACHE_NAME)
      .then(cache => {{
        console.log('Opened cache and caching files');
        return cache.addAll(urlsToCache);
      }})
  );
}});

self.addEventListener('fetch', event => {{
  event.respondWith(
    caches.match(event.request)
      .then(response => response || fetch(event.request))
  );
}});
"""


def render_service_worker(cache_name: str = CACHE_NAME, urls: Sequence[str] = URLS_TO_CACHE) -> str:
    """Browser-side sw.js built from the same constants as offline_cache."""
    return SERVICE_WORKER_TEMPLATE.format(
        cache_name=json.dumps(cache_name),
        urls=json.dumps(list(urls)),
    )
