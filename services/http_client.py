# ==========================
# Cached HTTP Client
# ==========================
import httpx
import logging
from typing import Any, Dict, Optional, Tuple
from cachetools import TTLCache
from config.settings import settings

logger = logging.getLogger(__name__)

class CachedHttpClient:
    """
    Shared HTTP client with connection pooling and a per-URL response cache
    Every request carries a freshness window (revalidate seconds); cached bodies
    are served until the window expires, there is no explicit invalidation
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_entries: int = 1024
    ):
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self.max_entries = max_entries
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        # One TTL cache per freshness window
        self._caches: Dict[int, TTLCache] = {}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create shared HTTP client with connection pooling"""
        if self._client is None or self._client.is_closed:
            limits = httpx.Limits(
                max_connections=100,
                max_keepalive_connections=20
            )
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=limits,
                transport=self._transport
            )
        return self._client

    async def close_client(self):
        """Close the HTTP client"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    def _get_cache(self, revalidate: int) -> TTLCache:
        cache = self._caches.get(revalidate)
        if cache is None:
            cache = TTLCache(maxsize=self.max_entries, ttl=revalidate)
            self._caches[revalidate] = cache
        return cache

    @staticmethod
    def _cache_key(
        url: str,
        params: Optional[Dict[str, Any]],
        headers: Optional[Dict[str, str]]
    ) -> Tuple:
        return (
            url,
            tuple(sorted((str(k), str(v)) for k, v in (params or {}).items())),
            tuple(sorted((k.lower(), v) for k, v in (headers or {}).items()))
        )

    def clear_cache(self):
        for cache in self._caches.values():
            cache.clear()

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        revalidate: int = 30,
        timeout: Optional[float] = None
    ) -> Any:
        """
        GET a JSON document

        Raises httpx.HTTPStatusError on non-2xx, httpx.HTTPError on transport
        failures and ValueError on a body that is not JSON. Only successful
        bodies are cached.
        """
        cache = self._get_cache(revalidate) if revalidate > 0 else None
        key = self._cache_key(url, params, headers)

        if cache is not None:
            cached = cache.get(key)
            if cached is not None:
                return cached

        client = await self._get_client()
        response = await client.get(
            url,
            params=params,
            headers=headers,
            timeout=timeout if timeout is not None else self.timeout
        )
        response.raise_for_status()
        data = response.json()

        if cache is not None and data is not None:
            cache[key] = data

        return data

# Singleton instance
http_client = CachedHttpClient()
