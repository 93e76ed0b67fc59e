# ==========================
# DexScreener Service
# ==========================
import logging
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from models.adapter_result import AdapterResult, Degraded, Success
from models.upstream_model import DexScreenerPair
from services.upstream_service import UpstreamService

logger = logging.getLogger(__name__)

# Maximum number of token addresses per /tokens/v1 request
MAX_BATCH_SIZE = 30

class DexScreenerService(UpstreamService):
    """
    Service for the DexScreener pair API
    Pairs come back flat; callers regroup them by base token address
    """

    name = "DexScreener"

    def __init__(self, http_client=None):
        super().__init__(http_client)
        self.base_url = 'https://api.dexscreener.com'
        self.headers = {'Accept': 'application/json'}

        # Internal chain id -> DexScreener chain slug
        self.chain_map = {
            '56': 'bsc',
            '1': 'ethereum',
            '8453': 'base',
            '42161': 'arbitrum',
            '137': 'polygon',
            '43114': 'avalanche',
            'solana': 'solana',
            '250': 'fantom',
            '10': 'optimism',
        }

    def get_dexscreener_chain(self, chain_id: str) -> str:
        """
        Convert our chain id to the DexScreener slug
        Example: 56 -> bsc, unknown ids are used lower-cased
        """
        return self.chain_map.get(str(chain_id), str(chain_id).lower())

    @staticmethod
    def _parse_pairs(items: List[Any]) -> List[DexScreenerPair]:
        pairs = []
        skipped = 0
        for item in items:
            try:
                pairs.append(DexScreenerPair.model_validate(item))
            except ValidationError:
                skipped += 1
        if skipped:
            logger.warning(f"Skipped {skipped} malformed DexScreener pairs")
        return pairs

    def _pair_list(self, result: AdapterResult[Any]) -> AdapterResult[List[DexScreenerPair]]:
        if not isinstance(result, Success):
            return result
        if not isinstance(result.data, list):
            logger.warning("DexScreener returned a non-list body")
            return Degraded("malformed body")
        return Success(self._parse_pairs(result.data))

    async def fetch_tokens_data(
        self,
        chain_id: str,
        addresses: List[str],
        timeout: Optional[float] = None
    ) -> AdapterResult[List[DexScreenerPair]]:
        """
        Get pairs for up to 30 token addresses in one request

        Args:
            chain_id: Internal chain id
            addresses: Token addresses; anything past the first 30 is ignored

        Returns:
            Success with a flat pair list spanning all requested tokens
        """
        if not addresses:
            return Success([])

        if len(addresses) > MAX_BATCH_SIZE:
            logger.warning(
                f"DexScreener batch of {len(addresses)} addresses truncated to {MAX_BATCH_SIZE}"
            )

        chain = self.get_dexscreener_chain(chain_id)
        batch = ",".join(addresses[:MAX_BATCH_SIZE])

        result = await self._make_request(
            f"{self.base_url}/tokens/v1/{chain}/{batch}",
            headers=self.headers,
            revalidate=30,
            timeout=timeout
        )
        return self._pair_list(result)

    async def fetch_token_pairs(
        self,
        chain_id: str,
        token_address: str,
        timeout: Optional[float] = None
    ) -> AdapterResult[List[DexScreenerPair]]:
        """Get every pair of a single token"""
        chain = self.get_dexscreener_chain(chain_id)
        result = await self._make_request(
            f"{self.base_url}/token-pairs/v1/{chain}/{token_address}",
            headers=self.headers,
            revalidate=30,
            timeout=timeout
        )
        return self._pair_list(result)

    async def search_tokens(self, query: str, timeout: Optional[float] = None) -> AdapterResult[List[DexScreenerPair]]:
        """Free-text search over tokens and pairs"""
        result = await self._make_request(
            f"{self.base_url}/latest/dex/search",
            params={'q': query},
            headers=self.headers,
            revalidate=60,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result
        pairs = result.data.get('pairs') if isinstance(result.data, dict) else None
        return Success(self._parse_pairs(pairs or []))

    async def fetch_pair_data(
        self,
        chain_id: str,
        pair_address: str,
        timeout: Optional[float] = None
    ) -> AdapterResult[Optional[DexScreenerPair]]:
        """Get a single pair by pair address"""
        chain = self.get_dexscreener_chain(chain_id)
        result = await self._make_request(
            f"{self.base_url}/latest/dex/pairs/{chain}/{pair_address}",
            headers=self.headers,
            revalidate=30,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result
        pairs = result.data.get('pairs') if isinstance(result.data, dict) else None
        parsed = self._parse_pairs(pairs or [])
        return Success(parsed[0] if parsed else None)

    async def fetch_latest_token_profiles(self, timeout: Optional[float] = None) -> AdapterResult[List[Dict[str, Any]]]:
        """Latest token profiles (url, chainId, tokenAddress, icon, description)"""
        result = await self._make_request(
            f"{self.base_url}/token-profiles/latest/v1",
            revalidate=60,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result
        if not isinstance(result.data, list):
            return Degraded("malformed body")
        return Success([item for item in result.data if isinstance(item, dict)])
