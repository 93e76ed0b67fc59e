# ==========================
# Moralis Service
# ==========================
import logging
from typing import Any, List, Optional, Tuple
from pydantic import ValidationError
from config.settings import settings
from models.adapter_result import AdapterResult, Degraded, Success
from models.token_model import TokenHolder
from models.upstream_model import MoralisTokenMetadata, parse_optional_float, parse_optional_int
from services.upstream_service import UpstreamService

logger = logging.getLogger(__name__)

NOT_CONFIGURED = Degraded("not configured")

# (holders, total holder count)
HolderPage = Tuple[List[TokenHolder], int]

class MoralisService(UpstreamService):
    """
    Service for Moralis holder data on EVM chains and Solana
    Requires MORALIS_API_KEY; without it every call degrades silently
    """

    name = "Moralis"

    def __init__(self, http_client=None, api_key: Optional[str] = None):
        super().__init__(http_client)
        self.evm_base_url = 'https://deep-index.moralis.io/api/v2.2'
        self.solana_base_url = 'https://solana-gateway.moralis.io'
        self._api_key = api_key

        # Internal chain id -> Moralis EVM chain name
        self.evm_chain_map = {
            '1': 'eth',
            '56': 'bsc',
            '137': 'polygon',
            '43114': 'avalanche',
            '42161': 'arbitrum',
            '10': 'optimism',
            '8453': 'base',
            '250': 'fantom',
        }

    def _get_api_key(self) -> str:
        return self._api_key if self._api_key is not None else settings.moralis_api_key

    def is_configured(self) -> bool:
        return bool(self._get_api_key())

    def get_evm_chain(self, chain_id: str) -> Optional[str]:
        return self.evm_chain_map.get(str(chain_id))

    def _get_headers(self) -> dict:
        return {
            'Accept': 'application/json',
            'X-API-Key': self._get_api_key(),
        }

    @staticmethod
    def _holder_page(body: Any, address_key: str, balance_key: str) -> HolderPage:
        items = body.get('result') if isinstance(body, dict) else None
        holders = []
        for item in items or []:
            if not isinstance(item, dict) or not item.get(address_key):
                continue
            holders.append(TokenHolder(
                address=item[address_key],
                balance=parse_optional_float(item.get(balance_key)) or 0.0,
                balance_usd=parse_optional_float(item.get('usd_value')) or 0.0,
                percentage=parse_optional_float(
                    item.get('percentage_relative_to_total_supply', item.get('percentage'))
                ) or 0.0,
                is_contract=bool(item.get('is_contract', False))
            ))

        total = parse_optional_int(body.get('total')) if isinstance(body, dict) else None
        return holders, total if total else len(holders)

    async def fetch_evm_token_holders(
        self,
        chain_id: str,
        token_address: str,
        limit: int = 100,
        timeout: Optional[float] = None
    ) -> AdapterResult[HolderPage]:
        """Get ERC20 holders and the total holder count"""
        if not self.is_configured():
            logger.debug("Moralis API key not configured")
            return NOT_CONFIGURED

        chain = self.get_evm_chain(chain_id)
        if not chain:
            return Degraded(f"unsupported chain {chain_id}")

        result = await self._make_request(
            f"{self.evm_base_url}/erc20/{token_address}/owners",
            params={'chain': chain, 'limit': limit},
            headers=self._get_headers(),
            revalidate=300,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result

        return Success(self._holder_page(result.data, 'owner_address', 'balance_formatted'))

    async def fetch_solana_token_holders(
        self,
        token_address: str,
        limit: int = 100,
        timeout: Optional[float] = None
    ) -> AdapterResult[HolderPage]:
        """Get SPL token holders and the total holder count"""
        if not self.is_configured():
            logger.debug("Moralis API key not configured")
            return NOT_CONFIGURED

        result = await self._make_request(
            f"{self.solana_base_url}/token/mainnet/holders/{token_address}",
            params={'limit': limit},
            headers=self._get_headers(),
            revalidate=300,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result

        return Success(self._holder_page(result.data, 'owner', 'amount'))

    async def fetch_token_holder_count(
        self,
        chain_id: str,
        token_address: str,
        timeout: Optional[float] = None
    ) -> AdapterResult[int]:
        """Best-effort holder count (one-item page, total from the envelope)"""
        if str(chain_id) == 'solana':
            result = await self.fetch_solana_token_holders(token_address, limit=1, timeout=timeout)
        else:
            result = await self.fetch_evm_token_holders(chain_id, token_address, limit=1, timeout=timeout)

        if not isinstance(result, Success):
            return result

        _, total = result.data
        return Success(total)

    async def fetch_evm_token_metadata(
        self,
        chain_id: str,
        token_address: str,
        timeout: Optional[float] = None
    ) -> AdapterResult[MoralisTokenMetadata]:
        """Name, symbol, decimals, logo and supply of an ERC20"""
        if not self.is_configured():
            return NOT_CONFIGURED

        chain = self.get_evm_chain(chain_id)
        if not chain:
            return Degraded(f"unsupported chain {chain_id}")

        result = await self._make_request(
            f"{self.evm_base_url}/erc20/metadata",
            params={'chain': chain, 'addresses[]': token_address},
            headers=self._get_headers(),
            revalidate=3600,
            timeout=timeout
        )
        if not isinstance(result, Success):
            return result

        if not isinstance(result.data, list) or not result.data:
            return Degraded("empty data")

        try:
            return Success(MoralisTokenMetadata.model_validate(result.data[0]))
        except ValidationError:
            return Degraded("malformed body")
