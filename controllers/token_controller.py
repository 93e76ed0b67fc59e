# ==========================
# Token Controller
# ==========================
from datetime import date
from fastapi import APIRouter, HTTPException, Query
from typing import Optional
import logging
from config.settings import settings
from models.filter_model import FilterConditions, ListingStatus, SortOrder
from models.token_model import LiquidityResponse, TokenDetailResponse, TokenListResponse
from services.aggregation_service import aggregation_service
from services.exceptions import TokenListUnavailableError, TokenNotFoundError
from services.scheduler_service import scheduler_service

logger = logging.getLogger(__name__)

class TokenController:
    """
    REST API Controller for token list, token detail and liquidity
    """

    def __init__(self, service=None, scheduler=None):
        self.router = APIRouter(prefix="/api", tags=["tokens"])
        self.service = service or aggregation_service
        self.scheduler = scheduler or scheduler_service
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes"""
        self.router.add_api_route(
            "/tokens",
            self.get_tokens,
            methods=["GET"],
            response_model=TokenListResponse,
            response_model_by_alias=True
        )
        self.router.add_api_route(
            "/token/{address}",
            self.get_token_detail,
            methods=["GET"],
            response_model=TokenDetailResponse,
            response_model_by_alias=True
        )
        self.router.add_api_route(
            "/liquidity/{address}",
            self.get_liquidity,
            methods=["GET"],
            response_model=LiquidityResponse,
            response_model_by_alias=True
        )
        self.router.add_api_route(
            "/scheduler/status",
            self.get_scheduler_status,
            methods=["GET"]
        )

    async def get_tokens(
        self,
        chain: Optional[str] = Query(default=None, description="Chain id, empty for all chains"),
        search: Optional[str] = Query(default=None, description="Symbol, name or address substring"),
        sort_by: str = Query(default="marketCap", alias="sortBy", description="Field to sort by"),
        sort_order: SortOrder = Query(default=SortOrder.DESC, alias="sortOrder"),
        spot_status: ListingStatus = Query(default=ListingStatus.ALL, alias="spotStatus"),
        futures_status: ListingStatus = Query(default=ListingStatus.ALL, alias="futuresStatus"),
        min_market_cap: Optional[float] = Query(default=None, alias="minMarketCap"),
        max_market_cap: Optional[float] = Query(default=None, alias="maxMarketCap"),
        min_liquidity: Optional[float] = Query(default=None, alias="minLiquidity"),
        max_liquidity: Optional[float] = Query(default=None, alias="maxLiquidity"),
        start_date: Optional[date] = Query(default=None, alias="startDate"),
        end_date: Optional[date] = Query(default=None, alias="endDate")
    ) -> TokenListResponse:
        """
        Get the unified Binance Alpha token list

        Args:
            chain: Only tokens of this chain
            search: Case-insensitive substring of symbol, name or address
            sort_by: API field name (marketCap, liquidity, listingTime, symbol, ...)
            sort_order: asc or desc, missing values always last

        Returns:
            TokenListResponse with tokens, totalCount and lastUpdated
        """
        filters = FilterConditions(
            chain_id=chain or None,
            search=search or None,
            spot_status=spot_status,
            futures_status=futures_status,
            min_market_cap=min_market_cap,
            max_market_cap=max_market_cap,
            min_liquidity=min_liquidity,
            max_liquidity=max_liquidity,
            start_date=start_date,
            end_date=end_date
        )

        try:
            return await self.service.build_token_list(filters, sort_by, sort_order)

        except TokenListUnavailableError as e:
            logger.error(f"Token list unavailable: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch tokens")
        except Exception as e:
            logger.error(f"Error in get_tokens: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch tokens")

    async def get_token_detail(
        self,
        address: str,
        chain: str = Query(default=settings.default_chain_id, description="Chain id")
    ) -> TokenDetailResponse:
        """
        Get one token with all its pools and holder statistics

        Args:
            address: Token contract address
            chain: Chain id

        Returns:
            TokenDetailResponse with token, pools, holderStats and lastUpdated
        """
        try:
            return await self.service.get_token_detail(chain, address)

        except TokenNotFoundError:
            raise HTTPException(status_code=404, detail="Token not found")
        except Exception as e:
            logger.error(f"Error in get_token_detail: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch token details")

    async def get_liquidity(
        self,
        address: str,
        chain: str = Query(default=settings.default_chain_id, description="Chain id")
    ) -> LiquidityResponse:
        """
        Get the liquidity breakdown of a token per pool and per DEX

        Returns:
            LiquidityResponse sorted by liquidity, largest first
        """
        try:
            return await self.service.get_liquidity(chain, address)

        except Exception as e:
            logger.error(f"Error in get_liquidity: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch liquidity data")

    async def get_scheduler_status(self):
        """
        Get token broadcast scheduler status

        Returns:
            Scheduler status including last and next broadcast
        """
        try:
            return {
                "status": "Success",
                "data": self.scheduler.get_status()
            }
        except Exception as e:
            logger.error(f"Error getting scheduler status: {e}")
            raise HTTPException(status_code=500, detail=str(e))
