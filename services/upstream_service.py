# ==========================
# Upstream Service Base
# ==========================
import asyncio
import httpx
import logging
from typing import Any, Dict, Optional
from models.adapter_result import AdapterResult, Degraded, Success
from services.http_client import CachedHttpClient, http_client as shared_http_client

logger = logging.getLogger(__name__)

class UpstreamService:
    """
    Common request handling for provider adapters
    Transport, status and parsing errors end here as Degraded results
    """

    name = "upstream"

    def __init__(self, http_client: Optional[CachedHttpClient] = None):
        self.http_client = http_client or shared_http_client

    async def _make_request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        revalidate: int = 30,
        timeout: Optional[float] = None
    ) -> AdapterResult[Any]:
        """Fetch JSON and wrap the outcome"""
        try:
            data = await self.http_client.get_json(
                url,
                params=params,
                headers=headers,
                revalidate=revalidate,
                timeout=timeout
            )
            return Success(data)

        except httpx.HTTPStatusError as e:
            reason = f"HTTP {e.response.status_code}"
            logger.warning(f"{self.name} API error: {reason} for {url}")
            return Degraded(reason)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning(f"{self.name} request timeout for {url}")
            return Degraded("timeout")
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} connection error for {url}: {str(e)[:100]}")
            return Degraded(f"connection error: {type(e).__name__}")
        except ValueError as e:
            logger.warning(f"{self.name} returned malformed JSON for {url}: {str(e)[:100]}")
            return Degraded("malformed body")
        except Exception as e:
            logger.error(f"{self.name} request failed for {url}: {type(e).__name__} - {str(e)[:100]}")
            return Degraded(f"unexpected error: {type(e).__name__}")
