# ==========================
# Filter Model
# ==========================
from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

class ListingStatus(str, Enum):
    ALL = "all"
    LISTED = "listed"
    NOT_LISTED = "not_listed"

class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

class FilterConditions(BaseModel):
    """
    Token list filter state
    chain_id is the only chain selection; the quick chain filter reads selected_chain
    """
    model_config = ConfigDict(populate_by_name=True)

    chain_id: Optional[str] = Field(None, alias="chainId", description="None means all chains")
    spot_status: ListingStatus = Field(ListingStatus.ALL, alias="spotStatus")
    futures_status: ListingStatus = Field(ListingStatus.ALL, alias="futuresStatus")
    min_market_cap: Optional[float] = Field(None, alias="minMarketCap")
    max_market_cap: Optional[float] = Field(None, alias="maxMarketCap")
    min_liquidity: Optional[float] = Field(None, alias="minLiquidity")
    max_liquidity: Optional[float] = Field(None, alias="maxLiquidity")
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    search: Optional[str] = None

    @property
    def selected_chain(self) -> Optional[str]:
        return self.chain_id

    @property
    def active_filter_count(self) -> int:
        """Number of conditions that differ from the defaults (search excluded)"""
        count = 0
        if self.chain_id:
            count += 1
        if self.spot_status != ListingStatus.ALL:
            count += 1
        if self.futures_status != ListingStatus.ALL:
            count += 1
        for value in (self.min_market_cap, self.max_market_cap, self.min_liquidity,
                      self.max_liquidity, self.start_date, self.end_date):
            if value is not None:
                count += 1
        return count
