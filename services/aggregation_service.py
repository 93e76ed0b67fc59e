# ==========================
# Aggregation Service
# ==========================
import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple
from config.dexes import get_dex_name
from config.settings import settings
from models.adapter_result import Success, describe_failure, unwrap_or
from models.filter_model import FilterConditions, SortOrder
from models.token_model import (
    DexDistribution,
    ExtendedPoolInfo,
    LiquidityResponse,
    PoolInfo,
    PoolTokenRef,
    TokenDetailResponse,
    TokenListResponse,
    TxnCount,
    UnifiedToken,
)
from models.upstream_model import BinanceAlphaToken, DexScreenerPair
from services.binance_alpha_service import BinanceAlphaService
from services.birdeye_service import BirdeyeService
from services.dexscreener_service import MAX_BATCH_SIZE, DexScreenerService
from services.exceptions import TokenListUnavailableError, TokenNotFoundError
from services.filter_service import apply_filters, sort_tokens
from services.gecko_terminal_service import GeckoTerminalService
from services.moralis_service import MoralisService

logger = logging.getLogger(__name__)

# Field -> ordered (source, attribute) candidates; the first non-None value wins.
# Token list: the alpha list entry, then the best DexScreener pool.
LIST_PRECEDENCE: Mapping[str, Tuple[Tuple[str, str], ...]] = {
    'price_usd': (('alpha', 'price'), ('pool', 'price_usd')),
    'market_cap': (('alpha', 'market_cap'), ('pool', 'market_cap')),
    'fdv': (('alpha', 'fdv'), ('pool', 'fdv')),
    'liquidity': (('alpha', 'liquidity'), ('pool', 'liquidity_usd')),
    'volume_24h': (('alpha', 'volume_24h'), ('pool', 'volume_24h')),
    'price_change_24h': (('alpha', 'percent_change_24h'), ('pool', 'price_change_24h')),
}

# Token detail: Birdeye market data, then the best pool, then GeckoTerminal.
DETAIL_PRECEDENCE: Mapping[str, Tuple[Tuple[str, str], ...]] = {
    'price_usd': (('birdeye', 'price'), ('pool', 'price_usd'), ('gecko', 'price_usd')),
    'market_cap': (('birdeye', 'market_cap'), ('pool', 'market_cap'), ('gecko', 'market_cap_usd')),
    'fdv': (('birdeye', 'fdv'), ('pool', 'fdv'), ('gecko', 'fdv_usd')),
    'liquidity': (('birdeye', 'liquidity'), ('pool', 'liquidity_usd'), ('gecko', 'total_reserve_in_usd')),
    'volume_24h': (('birdeye', 'volume_24h'), ('pool', 'volume_24h'), ('gecko', 'volume_24h')),
    'price_change_24h': (('birdeye', 'price_change_24h'), ('pool', 'price_change_24h')),
}

def first_present(*values: Any) -> Any:
    """First value that is not None (0 and "" count as present)"""
    for value in values:
        if value is not None:
            return value
    return None

def first_text(*values: Optional[str]) -> str:
    """First non-empty string, "" when none"""
    return next((value for value in values if value), "")

def resolve_fields(
    precedence: Mapping[str, Tuple[Tuple[str, str], ...]],
    sources: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Apply a precedence table field by field

    Args:
        precedence: Field -> ordered (source, attribute) candidates
        sources: Source name -> record, None when the source is degraded

    Returns:
        Field -> resolved value (None when no source reported it)
    """
    return {
        field: first_present(*(getattr(sources.get(source), attribute, None)
                               for source, attribute in candidates))
        for field, candidates in precedence.items()
    }

def earliest_timestamp(*values: Optional[int]) -> Optional[int]:
    known = [value for value in values if value]
    return min(known) if known else None

def chunk_addresses(addresses: List[str], size: int = MAX_BATCH_SIZE) -> List[List[str]]:
    """Split addresses into consecutive batches of at most size"""
    return [addresses[i:i + size] for i in range(0, len(addresses), size)]

def group_pairs_by_base_token(
    pairs: Iterable[DexScreenerPair],
    addresses: Iterable[str]
) -> Dict[str, List[DexScreenerPair]]:
    """
    Regroup a flat pair list by lower-cased base token address
    Every requested address gets a list, possibly empty; other pairs are dropped
    """
    grouped: Dict[str, List[DexScreenerPair]] = {address.lower(): [] for address in addresses}
    for pair in pairs:
        key = pair.base_token.address.lower()
        if key in grouped:
            grouped[key].append(pair)
    return grouped

def select_best_pair(pairs: List[DexScreenerPair]) -> Optional[DexScreenerPair]:
    """Pair with the highest USD liquidity; ties keep the first one seen"""
    best = None
    for pair in pairs:
        if best is None or (pair.liquidity_usd or 0) > (best.liquidity_usd or 0):
            best = pair
    return best

def build_pool_info(pair: DexScreenerPair) -> PoolInfo:
    return PoolInfo(
        dex_id=pair.dex_id,
        dex_name=get_dex_name(pair.dex_id),
        pair_address=pair.pair_address,
        quote_token=pair.quote_token.symbol,
        liquidity=pair.liquidity_usd or 0.0,
        price_usd=pair.price_usd,
        pair_created_at=pair.pair_created_at or 0,
        url=pair.url
    )

def build_extended_pool_info(pair: DexScreenerPair) -> ExtendedPoolInfo:
    txns = pair.txns.get('h24')
    return ExtendedPoolInfo(
        dex_id=pair.dex_id,
        dex_name=get_dex_name(pair.dex_id),
        pair_address=pair.pair_address,
        quote_token_symbol=pair.quote_token.symbol,
        liquidity=pair.liquidity_usd or 0.0,
        price_usd=pair.price_usd,
        pair_created_at=pair.pair_created_at or 0,
        url=pair.url,
        volume_24h=pair.volume_24h or 0.0,
        txns_24h=TxnCount(buys=txns.buys, sells=txns.sells) if txns else TxnCount(),
        price_change_24h=pair.price_change_24h,
        base_token=PoolTokenRef(**pair.base_token.model_dump()),
        quote_token=PoolTokenRef(**pair.quote_token.model_dump())
    )

def sort_pools(pools: List[PoolInfo]) -> List[PoolInfo]:
    # sorted() with reverse=True is still stable for equal liquidity
    return sorted(pools, key=lambda pool: pool.liquidity, reverse=True)

def merge_alpha_token(
    token: BinanceAlphaToken,
    pairs: List[DexScreenerPair],
    spot_symbols: Set[str],
    futures_symbols: Set[str]
) -> UnifiedToken:
    """
    Build the unified record of one token list entry

    Args:
        token: Token list entry
        pairs: DexScreener pairs whose base token is this token
        spot_symbols: Uppercase symbols listed on Binance spot
        futures_symbols: Uppercase symbols listed on Binance futures

    Returns:
        UnifiedToken with alpha values first and the best pool as fallback
    """
    best_pair = select_best_pair(pairs)
    fields = resolve_fields(LIST_PRECEDENCE, {'alpha': token, 'pool': best_pair})

    logo_url = first_present(
        next((pair.image_url for pair in pairs if pair.image_url), None),
        token.icon_url
    )
    symbol = token.symbol.upper()

    return UnifiedToken(
        alpha_id=token.alpha_id,
        symbol=token.symbol,
        name=token.name,
        chain_id=token.chain_id,
        contract_address=token.contract_address,
        logo_url=logo_url,
        holders=token.holders,
        main_pool=build_pool_info(best_pair) if best_pair else None,
        all_pools=sort_pools([build_pool_info(pair) for pair in pairs]),
        is_spot_listed=symbol in spot_symbols,
        is_futures_listed=symbol in futures_symbols,
        listing_time=earliest_timestamp(
            token.listing_time,
            best_pair.pair_created_at if best_pair else None
        ),
        **fields
    )

def dedupe_tokens(tokens: Iterable[BinanceAlphaToken]) -> List[BinanceAlphaToken]:
    """One entry per (chainId, lower-cased address); a later duplicate replaces an earlier one"""
    unique: Dict[Tuple[str, str], BinanceAlphaToken] = OrderedDict()
    for token in tokens:
        unique[(token.chain_id, token.contract_address.lower())] = token
    return list(unique.values())

def count_tokens_by_chain(tokens: Iterable[UnifiedToken]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for token in tokens:
        counts[token.chain_id] = counts.get(token.chain_id, 0) + 1
    return counts

def now_ms() -> int:
    return int(time.time() * 1000)

class AggregationService:
    """
    Business logic service merging every provider into unified token records
    Only the token list is fatal; every other source degrades its own fields
    """

    def __init__(
        self,
        binance: Optional[BinanceAlphaService] = None,
        dexscreener: Optional[DexScreenerService] = None,
        birdeye: Optional[BirdeyeService] = None,
        moralis: Optional[MoralisService] = None,
        gecko: Optional[GeckoTerminalService] = None,
        enrich_with_pools: Optional[bool] = None,
        timeout: Optional[float] = None
    ):
        self.binance = binance or BinanceAlphaService()
        self.dexscreener = dexscreener or DexScreenerService()
        self.birdeye = birdeye or BirdeyeService()
        self.moralis = moralis or MoralisService()
        self.gecko = gecko or GeckoTerminalService()
        self.enrich_with_pools = settings.enrich_with_pools if enrich_with_pools is None else enrich_with_pools
        self.timeout = timeout

    @staticmethod
    def _listing_set(result: Any, market: str) -> Set[str]:
        if not isinstance(result, Success):
            logger.warning(f"Binance {market} listings unavailable: {describe_failure(result)}")
        return unwrap_or(result, set())

    async def fetch_pools_by_token(self, chain_id: str, addresses: List[str]) -> Dict[str, List[DexScreenerPair]]:
        """
        Fetch DexScreener pairs for every address of one chain

        Batches of 30 run one after another; a failed batch only leaves
        its own tokens without pools.
        """
        pairs: List[DexScreenerPair] = []
        for batch in chunk_addresses(addresses):
            result = await self.dexscreener.fetch_tokens_data(chain_id, batch, timeout=self.timeout)
            if isinstance(result, Success):
                pairs.extend(result.data)
            else:
                logger.warning(
                    f"DexScreener batch of {len(batch)} tokens on chain {chain_id} degraded: {result.reason}"
                )
        return group_pairs_by_base_token(pairs, addresses)

    async def _fetch_all_pools(self, tokens: List[BinanceAlphaToken]) -> Dict[Tuple[str, str], List[DexScreenerPair]]:
        by_chain: Dict[str, List[str]] = {}
        for token in tokens:
            by_chain.setdefault(token.chain_id, []).append(token.contract_address)

        chain_ids = list(by_chain)
        results = await asyncio.gather(
            *(self.fetch_pools_by_token(chain_id, by_chain[chain_id]) for chain_id in chain_ids),
            return_exceptions=True
        )

        pools: Dict[Tuple[str, str], List[DexScreenerPair]] = {}
        for chain_id, result in zip(chain_ids, results):
            if isinstance(result, BaseException):
                logger.error(f"Pool enrichment failed for chain {chain_id}: {describe_failure(result)}")
                continue
            for address, pairs in result.items():
                pools[(chain_id, address)] = pairs
        return pools

    async def get_unified_tokens(self) -> List[UnifiedToken]:
        """
        Every token list entry merged with pools and listing flags, unfiltered

        Raises:
            TokenListUnavailableError: The token list could not be fetched
        """
        alpha_result, spot_result, futures_result = await asyncio.gather(
            self.binance.fetch_alpha_token_list(timeout=self.timeout),
            self.binance.get_spot_listed_symbols(timeout=self.timeout),
            self.binance.get_futures_listed_symbols(timeout=self.timeout),
            return_exceptions=True
        )

        if isinstance(alpha_result, TokenListUnavailableError):
            raise alpha_result
        if isinstance(alpha_result, BaseException):
            raise TokenListUnavailableError(
                f"Failed to fetch alpha tokens: {describe_failure(alpha_result)}"
            ) from alpha_result

        spot_symbols = self._listing_set(spot_result, "spot")
        futures_symbols = self._listing_set(futures_result, "futures")

        alpha_tokens = dedupe_tokens(alpha_result)
        if len(alpha_tokens) != len(alpha_result):
            logger.warning(f"Dropped {len(alpha_result) - len(alpha_tokens)} duplicate alpha tokens")

        pools = await self._fetch_all_pools(alpha_tokens) if self.enrich_with_pools else {}

        return [
            merge_alpha_token(
                token,
                pools.get((token.chain_id, token.contract_address.lower()), []),
                spot_symbols,
                futures_symbols
            )
            for token in alpha_tokens
        ]

    async def build_token_list(
        self,
        filters: Optional[FilterConditions] = None,
        sort_by: Optional[str] = "marketCap",
        sort_order: SortOrder = SortOrder.DESC
    ) -> TokenListResponse:
        """
        Token list endpoint payload

        Args:
            filters: Filter conditions, None keeps every token
            sort_by: API field name to sort by
            sort_order: asc or desc

        Returns:
            TokenListResponse with the filtered and sorted tokens
        """
        tokens = await self.get_unified_tokens()

        if filters is not None:
            tokens = apply_filters(tokens, filters)
        tokens = sort_tokens(tokens, sort_by, sort_order)

        logger.info(f"Built token list: {len(tokens)} tokens (sortBy={sort_by}, sortOrder={SortOrder(sort_order).value})")
        return TokenListResponse(tokens=tokens, total_count=len(tokens), last_updated=now_ms())

    async def get_token_counts(self) -> Dict[str, int]:
        return count_tokens_by_chain(await self.get_unified_tokens())

    async def get_token_detail(self, chain_id: str, address: str) -> TokenDetailResponse:
        """
        Token detail endpoint payload

        Raises:
            TokenNotFoundError: No pool, Birdeye or GeckoTerminal record exists
        """
        (pairs_result, market_result, count_result, stats_result,
         gecko_result, spot_result, futures_result, alpha_result) = await asyncio.gather(
            self.dexscreener.fetch_token_pairs(chain_id, address, timeout=self.timeout),
            self.birdeye.fetch_token_market_data(chain_id, address, timeout=self.timeout),
            self.moralis.fetch_token_holder_count(chain_id, address, timeout=self.timeout),
            self.birdeye.fetch_holder_stats(chain_id, address, timeout=self.timeout),
            self.gecko.fetch_token_details(chain_id, address, timeout=self.timeout),
            self.binance.get_spot_listed_symbols(timeout=self.timeout),
            self.binance.get_futures_listed_symbols(timeout=self.timeout),
            self.binance.fetch_alpha_token_list(timeout=self.timeout),
            return_exceptions=True
        )

        pairs: List[DexScreenerPair] = unwrap_or(pairs_result, [])
        market = unwrap_or(market_result, None)
        gecko = unwrap_or(gecko_result, None)

        # Records without market values do not count as found, but their fields still merge
        has_market = market is not None and market.has_any_value()
        has_gecko = gecko is not None and gecko.has_any_value()
        if not pairs and not has_market and not has_gecko:
            raise TokenNotFoundError(chain_id, address)

        alpha_entry = None
        if isinstance(alpha_result, BaseException):
            logger.warning(f"Token list unavailable for detail view: {describe_failure(alpha_result)}")
        else:
            alpha_entry = next(
                (token for token in alpha_result
                 if token.chain_id == str(chain_id)
                 and token.contract_address.lower() == address.lower()),
                None
            )

        best_pair = select_best_pair(pairs)
        fields = resolve_fields(DETAIL_PRECEDENCE, {'birdeye': market, 'pool': best_pair, 'gecko': gecko})

        holders = first_present(
            market.holders if market is not None else None,
            unwrap_or(count_result, None),
            alpha_entry.holders if alpha_entry is not None else None
        )

        holder_stats = unwrap_or(stats_result, None)
        if holder_stats is not None:
            holder_stats = holder_stats.model_copy(update={'total_holders': holders})

        pool_base = best_pair.base_token if best_pair else None
        symbol = first_text(
            alpha_entry.symbol if alpha_entry else None,
            pool_base.symbol if pool_base else None,
            gecko.symbol if gecko else None
        )
        logo_url = first_present(
            next((pair.image_url for pair in pairs if pair.image_url), None),
            alpha_entry.icon_url if alpha_entry else None,
            gecko.image_url if gecko else None
        )
        pools = [build_pool_info(pair) for pair in pairs]

        token = UnifiedToken(
            alpha_id=alpha_entry.alpha_id if alpha_entry else "",
            symbol=symbol,
            name=first_text(
                alpha_entry.name if alpha_entry else None,
                pool_base.name if pool_base else None,
                gecko.name if gecko else None
            ),
            chain_id=str(chain_id),
            contract_address=address,
            logo_url=logo_url,
            holders=holders,
            main_pool=build_pool_info(best_pair) if best_pair else None,
            all_pools=sort_pools(pools),
            is_spot_listed=symbol.upper() in self._listing_set(spot_result, "spot"),
            is_futures_listed=symbol.upper() in self._listing_set(futures_result, "futures"),
            listing_time=earliest_timestamp(
                alpha_entry.listing_time if alpha_entry else None,
                best_pair.pair_created_at if best_pair else None
            ),
            **fields
        )

        return TokenDetailResponse(
            token=token,
            pools=pools,
            holder_stats=holder_stats,
            last_updated=now_ms()
        )

    async def get_liquidity(self, chain_id: str, address: str) -> LiquidityResponse:
        """
        Liquidity breakdown endpoint payload
        A degraded pair source yields an empty breakdown, not an error
        """
        result = await self.dexscreener.fetch_token_pairs(chain_id, address, timeout=self.timeout)
        if not isinstance(result, Success):
            logger.warning(f"No liquidity data for {address} on chain {chain_id}: {result.reason}")

        pools = sorted(
            (build_extended_pool_info(pair) for pair in unwrap_or(result, [])),
            key=lambda pool: pool.liquidity,
            reverse=True
        )

        distribution: Dict[str, DexDistribution] = {}
        for pool in pools:
            entry = distribution.get(pool.dex_id)
            if entry is None:
                entry = distribution[pool.dex_id] = DexDistribution(dex_id=pool.dex_id, dex_name=pool.dex_name)
            entry.liquidity += pool.liquidity
            entry.pool_count += 1

        return LiquidityResponse(
            pools=pools,
            total_liquidity=sum(pool.liquidity for pool in pools),
            total_volume_24h=sum(pool.volume_24h for pool in pools),
            dex_distribution=sorted(distribution.values(), key=lambda d: d.liquidity, reverse=True),
            last_updated=now_ms()
        )

# Singleton instance
aggregation_service = AggregationService()
