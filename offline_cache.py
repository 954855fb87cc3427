"""Cache-first offline asset handling.

Mirrors what the browser service worker does: on install a named cache
store is filled with a fixed list of URLs, and every later request is
answered from that store when possible, otherwise from the network.
Misses are never written back and old stores are never pruned.
"""

import logging
from collections import OrderedDict
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence
from urllib.parse import urldefrag, urljoin

import requests

from errors import CacheInstallError

logger = logging.getLogger("pronunciation-proxy.cache")

CACHE_NAME = "pronunciation-game-cache-v1"
URLS_TO_CACHE = ("/", "/index.html")


class AssetResponse(NamedTuple):
    url: str
    status_code: int
    headers: Dict[str, str]
    content: bytes
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_requests(cls, url: str, resp: requests.Response) -> "AssetResponse":
        return cls(url, resp.status_code, dict(resp.headers), resp.content)


class CacheStore:
    """A single named store, keyed by absolute URL."""

    def __init__(self, name: str):
        self.name = name
        self._entries: "OrderedDict[str, AssetResponse]" = OrderedDict()

    def match(self, url: str) -> Optional[AssetResponse]:
        entry = self._entries.get(_cache_key(url))
        if entry is None:
            return None
        return entry._replace(from_cache=True)

    def put(self, url: str, response: AssetResponse):
        self._entries[_cache_key(url)] = response

    def add_all(self, urls: Sequence[str], fetch: Callable[[str], AssetResponse]):
        """Fetch every URL, then store them all. Any failure stores nothing."""
        fetched: List[AssetResponse] = []
        for url in urls:
            try:
                resp = fetch(url)
            except requests.RequestException as e:
                raise CacheInstallError(url, str(e)) from e
            if not resp.ok:
                raise CacheInstallError(url, f"HTTP {resp.status_code}")
            fetched.append(resp)

        for url, resp in zip(urls, fetched):
            self.put(url, resp)

    def keys(self) -> List[str]:
        return list(self._entries)

    def __len__(self):
        return len(self._entries)


class CacheStorage:
    """Registry of named stores, like the browser's `caches` global."""

    def __init__(self):
        self._stores: "OrderedDict[str, CacheStore]" = OrderedDict()

    def open(self, name: str) -> CacheStore:
        if name not in self._stores:
            self._stores[name] = CacheStore(name)
        return self._stores[name]

    def has(self, name: str) -> bool:
        return name in self._stores

    def delete(self, name: str) -> bool:
        return self._stores.pop(name, None) is not None

    def keys(self) -> List[str]:
        return list(self._stores)

    def match(self, url: str) -> Optional[AssetResponse]:
        for store in self._stores.values():
            hit = store.match(url)
            if hit is not None:
                return hit
        return None


def _cache_key(url: str) -> str:
    return urldefrag(url)[0]


class OfflineAssetCache:
    def __init__(
        self,
        origin: str,
        storage: CacheStorage = None,
        session: requests.Session = None,
        cache_name: str = CACHE_NAME,
        urls: Sequence[str] = URLS_TO_CACHE,
    ):
        self.origin = origin.rstrip("/") + "/"
        self.storage = storage if storage is not None else CacheStorage()
        self.session = session or requests.Session()
        self.cache_name = cache_name
        self.urls = tuple(urls)

    def resolve(self, url: str) -> str:
        return urljoin(self.origin, url)

    def install(self) -> CacheStore:
        store = self.storage.open(self.cache_name)
        logger.info("Opened cache and caching files")
        store.add_all([self.resolve(u) for u in self.urls], self._fetch_url)
        return store

    def handle(self, request: requests.Request) -> AssetResponse:
        """Answer one intercepted request, cache first.

        Network errors on a miss propagate to the caller; there is no
        offline fallback page.
        """
        url = self.resolve(request.url)
        if (request.method or "GET").upper() == "GET":
            cached = self.storage.match(url)
            if cached is not None:
                logger.debug("Cache hit: %s", url)
                return cached

        logger.debug("Cache miss: %s", url)
        resp = self.session.request(
            request.method or "GET",
            url,
            headers=request.headers or None,
            data=request.data or None,
        )
        return AssetResponse.from_requests(url, resp)

    def _fetch_url(self, url: str) -> AssetResponse:
        return AssetResponse.from_requests(url, self.session.request("GET", url))
