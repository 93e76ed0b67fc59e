# ==========================
# Birdeye Service
# ==========================
import logging
from typing import Any, List, Optional
from pydantic import ValidationError
from config.settings import settings
from models.adapter_result import AdapterResult, Degraded, Success
from models.token_model import HolderStats, TokenHolder
from models.upstream_model import BirdeyeMarketData, BirdeyeTokenOverview, parse_optional_float
from services.upstream_service import UpstreamService

logger = logging.getLogger(__name__)

NOT_CONFIGURED = Degraded("not configured")

class BirdeyeService(UpstreamService):
    """
    Service for Birdeye holder and market data
    Requires BIRDEYE_API_KEY; without it every call degrades silently
    """

    name = "Birdeye"

    def __init__(self, http_client=None, api_key: Optional[str] = None):
        super().__init__(http_client)
        self.base_url = 'https://public-api.birdeye.so'
        self._api_key = api_key

        # Internal chain id -> Birdeye x-chain header
        self.chain_map = {
            'solana': 'solana',
            '1': 'ethereum',
            '56': 'bsc',
            '8453': 'base',
            '42161': 'arbitrum',
            '137': 'polygon',
            '43114': 'avalanche',
        }

    def _get_api_key(self) -> str:
        return self._api_key if self._api_key is not None else settings.birdeye_api_key

    def is_configured(self) -> bool:
        return bool(self._get_api_key())

    def _get_headers(self, chain_id: str) -> dict:
        return {
            'Accept': 'application/json',
            'X-API-KEY': self._get_api_key(),
            'x-chain': self.chain_map.get(str(chain_id), 'solana'),
        }

    @staticmethod
    def _success_data(result: AdapterResult[Any]) -> AdapterResult[Any]:
        """Birdeye wraps payloads in {success, data}"""
        if not isinstance(result, Success):
            return result
        body = result.data
        if not isinstance(body, dict) or not body.get('success'):
            return Degraded("unsuccessful response")
        if body.get('data') is None:
            return Degraded("empty data")
        return Success(body['data'])

    async def fetch_token_holders(
        self,
        chain_id: str,
        token_address: str,
        limit: int = 20,
        offset: int = 0,
        timeout: Optional[float] = None
    ) -> AdapterResult[List[TokenHolder]]:
        """Get the largest holders of a token"""
        if not self.is_configured():
            logger.debug("Birdeye API key not configured")
            return NOT_CONFIGURED

        result = self._success_data(await self._make_request(
            f"{self.base_url}/defi/v3/token/holder",
            params={'address': token_address, 'offset': offset, 'limit': limit},
            headers=self._get_headers(chain_id),
            revalidate=300,
            timeout=timeout
        ))
        if not isinstance(result, Success):
            return result

        items = result.data.get('items') if isinstance(result.data, dict) else None
        holders = []
        for item in items or []:
            if not isinstance(item, dict) or not item.get('owner'):
                continue
            holders.append(TokenHolder(
                address=item['owner'],
                balance=parse_optional_float(item.get('uiAmount')) or 0.0,
                balance_usd=parse_optional_float(item.get('valueUsd')) or 0.0,
                percentage=parse_optional_float(item.get('percentage')) or 0.0,
                is_contract=bool(item.get('isContract', False))
            ))

        return Success(holders)

    async def fetch_holder_stats(
        self,
        chain_id: str,
        token_address: str,
        total_holders: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> AdapterResult[HolderStats]:
        """
        Top-holder concentration from the first 50 holders

        Args:
            total_holders: Holder count resolved elsewhere, reported as totalHolders
        """
        if not self.is_configured():
            return NOT_CONFIGURED

        result = await self.fetch_token_holders(chain_id, token_address, limit=50, timeout=timeout)
        if not isinstance(result, Success):
            return result

        holders = result.data
        if not holders:
            return Degraded("no holders")

        return Success(HolderStats(
            total_holders=total_holders,
            top_holders=holders[:20],
            top10_percentage=sum(h.percentage for h in holders[:10]),
            top50_percentage=sum(h.percentage for h in holders[:50])
        ))

    async def fetch_token_market_data(
        self,
        chain_id: str,
        token_address: str,
        timeout: Optional[float] = None
    ) -> AdapterResult[BirdeyeMarketData]:
        """Price, market cap, FDV, liquidity, volume and holder count"""
        if not self.is_configured():
            return NOT_CONFIGURED

        result = self._success_data(await self._make_request(
            f"{self.base_url}/defi/v3/token/market-data",
            params={'address': token_address},
            headers=self._get_headers(chain_id),
            revalidate=60,
            timeout=timeout
        ))
        if not isinstance(result, Success):
            return result

        try:
            return Success(BirdeyeMarketData.model_validate(result.data))
        except ValidationError:
            logger.warning(f"Unexpected Birdeye market data for {token_address}")
            return Degraded("malformed body")

    async def fetch_token_overview(
        self,
        chain_id: str,
        token_address: str,
        timeout: Optional[float] = None
    ) -> AdapterResult[BirdeyeTokenOverview]:
        if not self.is_configured():
            return NOT_CONFIGURED

        result = self._success_data(await self._make_request(
            f"{self.base_url}/defi/token_overview",
            params={'address': token_address},
            headers=self._get_headers(chain_id),
            revalidate=60,
            timeout=timeout
        ))
        if not isinstance(result, Success):
            return result

        try:
            return Success(BirdeyeTokenOverview.model_validate(result.data))
        except ValidationError:
            return Degraded("malformed body")
