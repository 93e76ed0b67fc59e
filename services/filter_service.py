# ==========================
# Filter Service
# ==========================
import locale
import logging
import unicodedata
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple
from models.filter_model import FilterConditions, ListingStatus, SortOrder
from models.token_model import UnifiedToken

logger = logging.getLogger(__name__)

DAY_MS = 86_400_000

class SortField(NamedTuple):
    attribute: str
    kind: str  # numeric | text | temporal

# API field name -> token attribute and comparison kind
SORT_FIELDS: Dict[str, SortField] = {
    'priceUsd': SortField('price_usd', 'numeric'),
    'marketCap': SortField('market_cap', 'numeric'),
    'fdv': SortField('fdv', 'numeric'),
    'liquidity': SortField('liquidity', 'numeric'),
    'volume24h': SortField('volume_24h', 'numeric'),
    'priceChange24h': SortField('price_change_24h', 'numeric'),
    'circulationRate': SortField('circulation_rate', 'numeric'),
    'holders': SortField('holders', 'numeric'),
    'listingTime': SortField('listing_time', 'temporal'),
    'symbol': SortField('symbol', 'text'),
    'name': SortField('name', 'text'),
    'chainId': SortField('chain_id', 'text'),
}

def _text_key(value: str) -> Tuple[str, str]:
    """
    Collation key: accents are ignored first so "Éclair" sorts with "eclair",
    then the accented form breaks ties. Uses the process LC_COLLATE (set in main.py)
    """
    folded = unicodedata.normalize("NFKD", value.casefold())
    base = "".join(char for char in folded if not unicodedata.combining(char))
    return locale.strxfrm(base), locale.strxfrm(folded)

SORT_KEYS: Dict[str, Callable[[Any], Any]] = {
    'numeric': float,
    'temporal': int,
    'text': _text_key,
}

def date_to_ms(day: date) -> int:
    """UTC midnight of a calendar day in epoch milliseconds"""
    midnight = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return int(midnight.timestamp() * 1000)

def matches_search(token: UnifiedToken, search: str) -> bool:
    """Case-insensitive substring match on symbol, name and contract address"""
    needle = search.strip().lower()
    if not needle:
        return True
    return (
        needle in token.symbol.lower()
        or needle in token.name.lower()
        or needle in token.contract_address.lower()
    )

def _matches_status(listed: bool, status: ListingStatus) -> bool:
    if status == ListingStatus.LISTED:
        return listed
    if status == ListingStatus.NOT_LISTED:
        return not listed
    return True

def _in_range(value: Optional[float], minimum: Optional[float], maximum: Optional[float]) -> bool:
    """Inclusive range check; an unknown value never matches a set bound"""
    if minimum is None and maximum is None:
        return True
    if value is None:
        return False
    if minimum is not None and value < minimum:
        return False
    if maximum is not None and value > maximum:
        return False
    return True

def _in_date_range(listing_time: Optional[int], start: Optional[date], end: Optional[date]) -> bool:
    # Unknown listing times are kept
    if not listing_time:
        return True
    if start is not None and listing_time < date_to_ms(start):
        return False
    if end is not None and listing_time > date_to_ms(end) + DAY_MS:
        return False
    return True

def matches_filters(token: UnifiedToken, conditions: FilterConditions) -> bool:
    if conditions.chain_id and token.chain_id != conditions.chain_id:
        return False
    if not _matches_status(token.is_spot_listed, conditions.spot_status):
        return False
    if not _matches_status(token.is_futures_listed, conditions.futures_status):
        return False
    if not _in_range(token.market_cap, conditions.min_market_cap, conditions.max_market_cap):
        return False
    if not _in_range(token.liquidity, conditions.min_liquidity, conditions.max_liquidity):
        return False
    if not _in_date_range(token.listing_time, conditions.start_date, conditions.end_date):
        return False
    if conditions.search and not matches_search(token, conditions.search):
        return False
    return True

def apply_filters(tokens: Iterable[UnifiedToken], conditions: FilterConditions) -> List[UnifiedToken]:
    """
    Keep the tokens matching every set condition

    Args:
        tokens: Unified tokens
        conditions: Filter conditions, unset fields are ignored

    Returns:
        Matching tokens in their original order
    """
    return [token for token in tokens if matches_filters(token, conditions)]

def sort_tokens(
    tokens: Iterable[UnifiedToken],
    sort_by: Optional[str],
    sort_order: SortOrder = SortOrder.DESC
) -> List[UnifiedToken]:
    """
    Stable sort by an API field name
    Tokens without a value go last in both directions; an unknown field keeps the input order
    """
    tokens = list(tokens)
    field = SORT_FIELDS.get(sort_by) if sort_by else None
    if field is None:
        if sort_by:
            logger.debug(f"Unsupported sort field: {sort_by}")
        return tokens

    key = SORT_KEYS[field.kind]
    present = []
    missing = []
    for token in tokens:
        value = getattr(token, field.attribute)
        if value is None:
            missing.append(token)
        else:
            present.append((key(value), token))

    present.sort(key=lambda item: item[0], reverse=sort_order == SortOrder.DESC)
    return [token for _, token in present] + missing
