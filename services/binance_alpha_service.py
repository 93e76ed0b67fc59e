# ==========================
# Binance Alpha Service
# ==========================
import httpx
import logging
from typing import Any, Dict, List, Optional, Set
from pydantic import ValidationError
from models.adapter_result import AdapterResult, Degraded, Success
from models.upstream_model import BinanceAlphaResponse, BinanceAlphaToken, BinanceExchangeInfo
from services.exceptions import TokenListUnavailableError
from services.upstream_service import UpstreamService

logger = logging.getLogger(__name__)

class BinanceAlphaService(UpstreamService):
    """
    Service for the Binance Alpha token list and Binance spot/futures listings
    The token list is the base dataset: its failures are raised, everything else degrades
    """

    name = "Binance"
    success_code = "000000"

    def __init__(self, http_client=None):
        super().__init__(http_client)
        self.alpha_base_url = 'https://www.binance.com/bapi/defi/v1/public'
        self.spot_base_url = 'https://api.binance.com'
        self.futures_base_url = 'https://fapi.binance.com'
        self.headers = {
            'Accept': 'application/json',
            'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36',
        }

    async def fetch_alpha_token_list(self, timeout: Optional[float] = None) -> List[BinanceAlphaToken]:
        """
        Get every Binance Alpha token

        Raises:
            TokenListUnavailableError: transport failure, non-2xx status,
                malformed body or an envelope code other than 000000
        """
        url = f"{self.alpha_base_url}/wallet-direct/buw/wallet/cex/alpha/all/token/list"

        try:
            payload = await self.http_client.get_json(
                url,
                headers=self.headers,
                revalidate=60,
                timeout=timeout
            )
        except httpx.HTTPStatusError as e:
            raise TokenListUnavailableError(
                f"Failed to fetch alpha tokens: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TokenListUnavailableError(
                f"Failed to fetch alpha tokens: {type(e).__name__}"
            ) from e
        except ValueError as e:
            raise TokenListUnavailableError("Binance Alpha API returned malformed JSON") from e

        try:
            envelope = BinanceAlphaResponse.model_validate(payload)
        except ValidationError as e:
            raise TokenListUnavailableError("Binance Alpha API returned an unexpected envelope") from e

        if envelope.code != self.success_code:
            raise TokenListUnavailableError(f"Binance Alpha API error: {envelope.message}")

        tokens = []
        skipped = 0
        for item in envelope.data:
            try:
                tokens.append(BinanceAlphaToken.model_validate(item))
            except ValidationError:
                skipped += 1

        if skipped:
            logger.warning(f"Skipped {skipped} malformed alpha tokens")

        logger.info(f"Fetched {len(tokens)} Binance Alpha tokens")
        return tokens

    async def fetch_spot_exchange_info(self, timeout: Optional[float] = None) -> AdapterResult[BinanceExchangeInfo]:
        """Get Binance spot trading pairs"""
        return await self._fetch_exchange_info(
            f"{self.spot_base_url}/api/v3/exchangeInfo",
            timeout
        )

    async def fetch_futures_exchange_info(self, timeout: Optional[float] = None) -> AdapterResult[BinanceExchangeInfo]:
        """Get Binance USD-M futures contracts"""
        return await self._fetch_exchange_info(
            f"{self.futures_base_url}/fapi/v1/exchangeInfo",
            timeout
        )

    async def _fetch_exchange_info(self, url: str, timeout: Optional[float]) -> AdapterResult[BinanceExchangeInfo]:
        result = await self._make_request(url, revalidate=300, timeout=timeout)
        if not isinstance(result, Success):
            return result

        try:
            return Success(BinanceExchangeInfo.model_validate(result.data))
        except ValidationError:
            logger.warning(f"Unexpected exchangeInfo payload from {url}")
            return Degraded("malformed body")

    async def get_spot_listed_symbols(self, timeout: Optional[float] = None) -> AdapterResult[Set[str]]:
        """Uppercase base assets tradable on Binance spot"""
        return self._listed_symbols(await self.fetch_spot_exchange_info(timeout))

    async def get_futures_listed_symbols(self, timeout: Optional[float] = None) -> AdapterResult[Set[str]]:
        """Uppercase base assets tradable on Binance futures"""
        return self._listed_symbols(await self.fetch_futures_exchange_info(timeout))

    @staticmethod
    def _listed_symbols(result: AdapterResult[BinanceExchangeInfo]) -> AdapterResult[Set[str]]:
        if not isinstance(result, Success):
            return result
        return Success({s.base_asset.upper() for s in result.data.symbols})

    async def fetch_alpha_ticker_24h(self, symbol: str, timeout: Optional[float] = None) -> AdapterResult[Dict[str, Any]]:
        """24h ticker of an Alpha trading symbol (e.g., ALPHA_175USDT)"""
        result = await self._make_request(
            f"{self.alpha_base_url}/alpha-trade/ticker/24hr",
            params={'symbol': symbol},
            revalidate=30,
            timeout=timeout
        )
        return self._unwrap_data(result)

    async def fetch_alpha_klines(
        self,
        symbol: str,
        interval: str = "1h",
        limit: int = 100,
        timeout: Optional[float] = None
    ) -> AdapterResult[List[Any]]:
        """Candles of an Alpha trading symbol"""
        result = await self._make_request(
            f"{self.alpha_base_url}/alpha-trade/klines",
            params={'symbol': symbol, 'interval': interval, 'limit': limit},
            revalidate=60,
            timeout=timeout
        )
        return self._unwrap_data(result)

    async def ping_alpha(self, timeout: Optional[float] = None) -> AdapterResult[int]:
        """Reachability check for the token list endpoint (no cache)"""
        result = await self._make_request(
            f"{self.alpha_base_url}/wallet-direct/buw/wallet/cex/alpha/all/token/list",
            headers=self.headers,
            revalidate=0,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result
        data = result.data.get('data') if isinstance(result.data, dict) else None
        return Success(len(data) if isinstance(data, list) else 0)

    async def ping_spot(self, timeout: Optional[float] = None) -> AdapterResult[Any]:
        """Reachability check for the Binance spot API (no cache)"""
        return await self._make_request(
            f"{self.spot_base_url}/api/v3/ping",
            revalidate=0,
            timeout=timeout
        )

    @staticmethod
    def _unwrap_data(result: AdapterResult[Any]) -> AdapterResult[Any]:
        if not isinstance(result, Success):
            return result
        if not isinstance(result.data, dict) or result.data.get('data') is None:
            return Degraded("empty data")
        return Success(result.data['data'])
