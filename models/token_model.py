# ==========================
# Token Model
# ==========================
from typing import List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict, computed_field
from config.chains import get_dex_screener_url, get_token_explorer_url

def compute_circulation_rate(market_cap: Optional[float], fdv: Optional[float]) -> Optional[float]:
    """marketCap / fdv when both are known and fdv > 0"""
    if market_cap is None or fdv is None or fdv <= 0:
        return None
    return market_cap / fdv

class PoolInfo(BaseModel):
    """
    One on-chain liquidity pool of a token
    """
    model_config = ConfigDict(populate_by_name=True)

    dex_id: str = Field(..., alias="dexId", description="DEX identifier (e.g., pancakeswap)")
    dex_name: str = Field(..., alias="dexName", description="Human readable DEX name")
    pair_address: str = Field(..., alias="pairAddress", description="Pool address")
    quote_token: str = Field("", alias="quoteToken", description="Quote token symbol")
    liquidity: float = Field(0.0, description="Pool liquidity in USD, 0 when not reported")
    price_usd: Optional[float] = Field(None, alias="priceUsd", description="Base token price in USD")
    pair_created_at: int = Field(0, alias="pairCreatedAt", description="Pool creation time (epoch ms), 0 if unknown")
    url: str = Field("", description="Pool explorer link")

class TxnCount(BaseModel):
    buys: int = 0
    sells: int = 0

class PoolTokenRef(BaseModel):
    address: str = ""
    symbol: str = ""
    name: str = ""

class ExtendedPoolInfo(BaseModel):
    """Pool record of the liquidity breakdown view"""
    model_config = ConfigDict(populate_by_name=True)

    dex_id: str = Field(..., alias="dexId")
    dex_name: str = Field(..., alias="dexName")
    pair_address: str = Field(..., alias="pairAddress")
    quote_token_symbol: str = Field("", alias="quoteTokenSymbol")
    liquidity: float = 0.0
    price_usd: Optional[float] = Field(None, alias="priceUsd")
    pair_created_at: int = Field(0, alias="pairCreatedAt")
    url: str = ""
    volume_24h: float = Field(0.0, alias="volume24h")
    txns_24h: TxnCount = Field(default_factory=TxnCount, alias="txns24h")
    price_change_24h: Optional[float] = Field(None, alias="priceChange24h")
    base_token: PoolTokenRef = Field(default_factory=PoolTokenRef, alias="baseToken")
    quote_token: PoolTokenRef = Field(default_factory=PoolTokenRef, alias="quoteToken")

class UnifiedToken(BaseModel):
    """
    Merged token record
    Identity from the token list, market data from the best available source,
    liquidity from DexScreener pools, listing flags from Binance exchangeInfo
    """
    model_config = ConfigDict(populate_by_name=True)

    # Identity
    alpha_id: Union[int, str] = Field("", alias="alphaId", description="Binance Alpha id, empty if unknown")
    symbol: str = Field(..., description="Token symbol")
    name: str = Field("", description="Token name")
    chain_id: str = Field(..., alias="chainId", description="Chain id")
    contract_address: str = Field(..., alias="contractAddress", description="Token contract address")
    logo_url: Optional[str] = Field(None, alias="logoUrl")

    # Market data (None = no source reported it)
    price_usd: Optional[float] = Field(None, alias="priceUsd")
    market_cap: Optional[float] = Field(None, alias="marketCap")
    fdv: Optional[float] = None
    liquidity: Optional[float] = None
    volume_24h: Optional[float] = Field(None, alias="volume24h")
    price_change_24h: Optional[float] = Field(None, alias="priceChange24h")

    # Holders
    holders: Optional[int] = None

    # Pools
    main_pool: Optional[PoolInfo] = Field(None, alias="mainPool")
    all_pools: List[PoolInfo] = Field(default_factory=list, alias="allPools")

    # Binance listing status
    is_spot_listed: bool = Field(False, alias="isSpotListed")
    is_futures_listed: bool = Field(False, alias="isFuturesListed")

    listing_time: Optional[int] = Field(None, alias="listingTime", description="Earliest known listing time (epoch ms)")

    @computed_field(alias="circulationRate")
    @property
    def circulation_rate(self) -> Optional[float]:
        return compute_circulation_rate(self.market_cap, self.fdv)

    @computed_field(alias="explorerUrl")
    @property
    def explorer_url(self) -> Optional[str]:
        return get_token_explorer_url(self.chain_id, self.contract_address)

    @computed_field(alias="dexScreenerUrl")
    @property
    def dex_screener_url(self) -> str:
        return get_dex_screener_url(self.chain_id, self.contract_address)

    @property
    def identity(self) -> tuple:
        return (self.chain_id, self.contract_address.lower())

class TokenHolder(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address: str
    balance: float = 0.0
    balance_usd: float = Field(0.0, alias="balanceUsd")
    percentage: float = 0.0
    is_contract: bool = Field(False, alias="isContract")

class HolderStats(BaseModel):
    """Top holder concentration"""
    model_config = ConfigDict(populate_by_name=True)

    total_holders: Optional[int] = Field(None, alias="totalHolders")
    top_holders: List[TokenHolder] = Field(default_factory=list, alias="topHolders")
    top10_percentage: float = Field(0.0, alias="top10Percentage")
    top50_percentage: float = Field(0.0, alias="top50Percentage")

class DexDistribution(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dex_id: str = Field(..., alias="dexId")
    dex_name: str = Field(..., alias="dexName")
    liquidity: float = 0.0
    pool_count: int = Field(0, alias="poolCount")

class TokenListResponse(BaseModel):
    """Response model for the token list endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    tokens: List[UnifiedToken]
    total_count: int = Field(..., alias="totalCount")
    last_updated: int = Field(..., alias="lastUpdated", description="Epoch ms")

class TokenDetailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: UnifiedToken
    pools: List[PoolInfo]
    holder_stats: Optional[HolderStats] = Field(None, alias="holderStats")
    last_updated: int = Field(..., alias="lastUpdated")

class LiquidityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pools: List[ExtendedPoolInfo]
    total_liquidity: float = Field(0.0, alias="totalLiquidity")
    total_volume_24h: float = Field(0.0, alias="totalVolume24h")
    dex_distribution: List[DexDistribution] = Field(default_factory=list, alias="dexDistribution")
    last_updated: int = Field(..., alias="lastUpdated")
