# ==========================
# Upstream Payload Models
# ==========================
import math
from typing import Annotated, Any, Dict, List, Optional, Union
from pydantic import AliasChoices, BaseModel, BeforeValidator, Field, ConfigDict, field_validator

def parse_optional_float(value: Any) -> Optional[float]:
    """
    Lenient numeric parsing for provider payloads
    Missing, blank or non-numeric -> None, "0" stays 0.0
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None

def parse_optional_int(value: Any) -> Optional[int]:
    number = parse_optional_float(value)
    if number is None:
        return None
    return int(number)

LenientFloat = Annotated[Optional[float], BeforeValidator(parse_optional_float)]
LenientInt = Annotated[Optional[int], BeforeValidator(parse_optional_int)]

class UpstreamModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

# ===== Binance =====

class BinanceAlphaToken(UpstreamModel):
    """One entry of the Binance Alpha token list"""
    alpha_id: Union[int, str] = Field("", alias="alphaId")
    symbol: str
    name: str = ""
    chain_id: str = Field(..., alias="chainId")
    chain_name: Optional[str] = Field(None, alias="chainName")
    contract_address: str = Field(..., alias="contractAddress")
    decimals: Optional[int] = None
    icon_url: Optional[str] = Field(None, validation_alias=AliasChoices("iconUrl", "logoUrl"))
    price: LenientFloat = None
    market_cap: LenientFloat = Field(None, alias="marketCap")
    fdv: LenientFloat = None
    liquidity: LenientFloat = None
    volume_24h: LenientFloat = Field(None, alias="volume24h")
    percent_change_24h: LenientFloat = Field(None, alias="percentChange24h")
    holders: LenientInt = None
    listing_cex: bool = Field(False, alias="listingCex")
    listing_time: LenientInt = Field(None, alias="listingTime")

    @field_validator('chain_id', mode='before')
    @classmethod
    def _chain_id_as_str(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator('listing_cex', mode='before')
    @classmethod
    def _listing_cex_default(cls, value: Any) -> Any:
        return bool(value)

class BinanceAlphaResponse(UpstreamModel):
    code: str
    message: Optional[str] = None
    data: List[Dict[str, Any]] = Field(default_factory=list)

class BinanceSymbol(UpstreamModel):
    symbol: str
    base_asset: str = Field(..., alias="baseAsset")
    quote_asset: str = Field("", alias="quoteAsset")
    status: str = ""

class BinanceExchangeInfo(UpstreamModel):
    symbols: List[BinanceSymbol] = Field(default_factory=list)

# ===== DexScreener =====

class DexScreenerToken(UpstreamModel):
    address: str = ""
    name: str = ""
    symbol: str = ""

class DexScreenerLiquidity(UpstreamModel):
    usd: LenientFloat = None
    base: LenientFloat = None
    quote: LenientFloat = None

class DexScreenerTxnCount(UpstreamModel):
    buys: int = 0
    sells: int = 0

class DexScreenerPairInfo(UpstreamModel):
    image_url: Optional[str] = Field(None, alias="imageUrl")
    websites: List[Dict[str, Any]] = Field(default_factory=list)
    socials: List[Dict[str, Any]] = Field(default_factory=list)

class DexScreenerPair(UpstreamModel):
    """A liquidity pair as returned by DexScreener"""
    chain_id: str = Field("", alias="chainId")
    dex_id: str = Field("", alias="dexId")
    url: str = ""
    pair_address: str = Field(..., alias="pairAddress")
    labels: List[str] = Field(default_factory=list)
    base_token: DexScreenerToken = Field(..., alias="baseToken")
    quote_token: DexScreenerToken = Field(default_factory=DexScreenerToken, alias="quoteToken")
    price_native: Optional[str] = Field(None, alias="priceNative")
    price_usd: LenientFloat = Field(None, alias="priceUsd")
    txns: Dict[str, DexScreenerTxnCount] = Field(default_factory=dict)
    volume: Dict[str, LenientFloat] = Field(default_factory=dict)
    price_change: Dict[str, LenientFloat] = Field(default_factory=dict, alias="priceChange")
    liquidity: Optional[DexScreenerLiquidity] = None
    fdv: LenientFloat = None
    market_cap: LenientFloat = Field(None, alias="marketCap")
    pair_created_at: LenientInt = Field(None, alias="pairCreatedAt")
    info: Optional[DexScreenerPairInfo] = None

    @field_validator('txns', 'volume', 'price_change', mode='before')
    @classmethod
    def _null_dict(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator('labels', mode='before')
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def liquidity_usd(self) -> Optional[float]:
        return self.liquidity.usd if self.liquidity is not None else None

    @property
    def volume_24h(self) -> Optional[float]:
        return self.volume.get('h24')

    @property
    def price_change_24h(self) -> Optional[float]:
        return self.price_change.get('h24')

    @property
    def image_url(self) -> Optional[str]:
        return self.info.image_url if self.info is not None else None

# ===== Birdeye =====

class BirdeyeMarketData(UpstreamModel):
    price: LenientFloat = None
    price_change_24h: LenientFloat = Field(
        None, validation_alias=AliasChoices("priceChange24hPercent", "price_change_24h_percent")
    )
    volume_24h: LenientFloat = Field(None, validation_alias=AliasChoices("volume24h", "v24hUSD"))
    market_cap: LenientFloat = Field(None, validation_alias=AliasChoices("marketCap", "market_cap", "mc"))
    fdv: LenientFloat = None
    liquidity: LenientFloat = None
    holders: LenientInt = Field(None, validation_alias=AliasChoices("holder", "holders"))

    def has_any_value(self) -> bool:
        return any(
            value is not None
            for value in (self.price, self.market_cap, self.fdv, self.liquidity, self.volume_24h)
        )

class BirdeyeTokenOverview(UpstreamModel):
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    logo_uri: Optional[str] = Field(None, alias="logoURI")
    price: LenientFloat = None
    history_24h_price: LenientFloat = Field(None, alias="history24hPrice")
    price_change_24h: LenientFloat = Field(None, alias="priceChange24hPercent")
    liquidity: LenientFloat = None
    mc: LenientFloat = None
    real_mc: LenientFloat = Field(None, alias="realMc")
    supply: LenientFloat = None
    circulating_supply: LenientFloat = Field(None, alias="circulatingSupply")
    holder: LenientInt = None
    volume_24h: LenientFloat = Field(None, alias="v24hUSD")

# ===== Moralis =====

class MoralisTokenMetadata(UpstreamModel):
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: LenientInt = None
    logo: Optional[str] = None
    thumbnail: Optional[str] = None
    total_supply: Optional[str] = None

    @property
    def logo_url(self) -> Optional[str]:
        return self.logo or self.thumbnail

# ===== GeckoTerminal =====

class GeckoTokenDetails(UpstreamModel):
    """Attributes block of a GeckoTerminal token"""
    name: Optional[str] = None
    symbol: Optional[str] = None
    address: Optional[str] = None
    decimals: LenientInt = None
    image_url: Optional[str] = None
    total_supply: Optional[str] = None
    price_usd: LenientFloat = None
    fdv_usd: LenientFloat = None
    total_reserve_in_usd: LenientFloat = None
    volume_usd: Dict[str, LenientFloat] = Field(default_factory=dict)
    market_cap_usd: LenientFloat = None

    @field_validator('volume_usd', mode='before')
    @classmethod
    def _null_volume(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @property
    def volume_24h(self) -> Optional[float]:
        return self.volume_usd.get('h24')

    def has_any_value(self) -> bool:
        return any(
            value is not None
            for value in (self.price_usd, self.market_cap_usd, self.fdv_usd, self.total_reserve_in_usd)
        )

class GeckoPoolSummary(UpstreamModel):
    pair_address: Optional[str] = Field(None, alias="pairAddress")
    name: Optional[str] = None
    base_token: Optional[Dict[str, Any]] = Field(None, alias="baseToken")
    quote_token: Optional[Dict[str, Any]] = Field(None, alias="quoteToken")
    created_at: Optional[str] = Field(None, alias="createdAt")
    price_usd: LenientFloat = Field(None, alias="priceUsd")
    volume_usd_24h: LenientFloat = Field(None, alias="volumeUsd24h")
