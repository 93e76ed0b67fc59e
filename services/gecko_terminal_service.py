# ==========================
# GeckoTerminal Service
# ==========================
import logging
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from models.adapter_result import AdapterResult, Degraded, Success
from models.upstream_model import GeckoPoolSummary, GeckoTokenDetails, parse_optional_float
from services.upstream_service import UpstreamService

logger = logging.getLogger(__name__)

class GeckoTerminalService(UpstreamService):
    """
    Service for GeckoTerminal, used as a secondary market-data source
    """

    name = "GeckoTerminal"

    def __init__(self, http_client=None):
        super().__init__(http_client)
        self.base_url = 'https://api.geckoterminal.com/api/v2'
        self.headers = {'Accept': 'application/json;version=20230302'}
        self.max_batch_size = 100

        # Internal chain id -> GeckoTerminal network
        self.network_map = {
            '56': 'bsc',
            '1': 'eth',
            '8453': 'base',
            '42161': 'arbitrum',
            '137': 'polygon_pos',
            '43114': 'avax',
            'solana': 'solana',
            '250': 'ftm',
            '10': 'optimism',
        }

    def get_network(self, chain_id: str) -> str:
        return self.network_map.get(str(chain_id), str(chain_id))

    @staticmethod
    def _attributes(body: Any) -> Optional[Dict[str, Any]]:
        data = body.get('data') if isinstance(body, dict) else None
        attributes = data.get('attributes') if isinstance(data, dict) else None
        return attributes if isinstance(attributes, dict) else None

    async def fetch_token_price(
        self,
        chain_id: str,
        token_address: str,
        timeout: Optional[float] = None
    ) -> AdapterResult[float]:
        """Current USD price of one token"""
        network = self.get_network(chain_id)
        result = await self._make_request(
            f"{self.base_url}/simple/networks/{network}/token_price/{token_address}",
            params={'include_24hr_price_change': 'true'},
            headers=self.headers,
            revalidate=30,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result

        attributes = self._attributes(result.data) or {}
        prices = {address.lower(): value for address, value in (attributes.get('token_prices') or {}).items()}
        price = parse_optional_float(prices.get(token_address.lower()))
        if price is None:
            return Degraded("no price")
        return Success(price)

    async def fetch_multiple_token_prices(
        self,
        chain_id: str,
        addresses: List[str],
        timeout: Optional[float] = None
    ) -> AdapterResult[Dict[str, float]]:
        """USD prices of up to 100 tokens keyed by lower-cased address"""
        if not addresses:
            return Success({})

        network = self.get_network(chain_id)
        batch = ",".join(addresses[:self.max_batch_size])
        result = await self._make_request(
            f"{self.base_url}/simple/networks/{network}/token_price/{batch}",
            headers=self.headers,
            revalidate=30,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result

        attributes = self._attributes(result.data) or {}
        prices = {}
        for address, raw_price in (attributes.get('token_prices') or {}).items():
            price = parse_optional_float(raw_price)
            if price is not None:
                prices[address.lower()] = price
        return Success(prices)

    async def fetch_token_details(
        self,
        chain_id: str,
        token_address: str,
        timeout: Optional[float] = None
    ) -> AdapterResult[GeckoTokenDetails]:
        """Token attributes: price, FDV, reserve, volume, market cap"""
        network = self.get_network(chain_id)
        result = await self._make_request(
            f"{self.base_url}/networks/{network}/tokens/{token_address}",
            headers=self.headers,
            revalidate=60,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result

        attributes = self._attributes(result.data)
        if attributes is None:
            return Degraded("empty data")

        try:
            return Success(GeckoTokenDetails.model_validate(attributes))
        except ValidationError:
            return Degraded("malformed body")

    async def _fetch_pools(self, path: str, timeout: Optional[float]) -> AdapterResult[List[Dict[str, Any]]]:
        result = await self._make_request(
            f"{self.base_url}{path}",
            headers=self.headers,
            revalidate=60,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result
        data = result.data.get('data') if isinstance(result.data, dict) else None
        if not isinstance(data, list):
            return Degraded("malformed body")
        return Success([
            item.get('attributes') or {}
            for item in data
            if isinstance(item, dict)
        ])

    async def fetch_new_pools(self, chain_id: str, timeout: Optional[float] = None) -> AdapterResult[List[GeckoPoolSummary]]:
        """Recently created pools on a network"""
        result = await self._fetch_pools(f"/networks/{self.get_network(chain_id)}/new_pools", timeout)
        if not isinstance(result, Success):
            return result
        return Success([
            GeckoPoolSummary(
                pair_address=attributes.get('address'),
                name=attributes.get('name'),
                base_token=attributes.get('base_token'),
                quote_token=attributes.get('quote_token'),
                created_at=attributes.get('pool_created_at')
            )
            for attributes in result.data
        ])

    async def fetch_trending_pools(self, chain_id: str, timeout: Optional[float] = None) -> AdapterResult[List[GeckoPoolSummary]]:
        """Trending pools on a network"""
        result = await self._fetch_pools(f"/networks/{self.get_network(chain_id)}/trending_pools", timeout)
        if not isinstance(result, Success):
            return result
        return Success([
            GeckoPoolSummary(
                pair_address=attributes.get('address'),
                name=attributes.get('name'),
                price_usd=attributes.get('base_token_price_usd'),
                volume_usd_24h=(attributes.get('volume_usd') or {}).get('h24')
            )
            for attributes in result.data
        ])
