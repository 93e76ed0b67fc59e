# ==========================
# DEX Name Table
# ==========================
from types import MappingProxyType
from typing import Mapping

DEX_NAMES: Mapping[str, str] = MappingProxyType({
    "pancakeswap": "PancakeSwap",
    "uniswap": "Uniswap",
    "raydium": "Raydium",
    "orca": "Orca",
    "sushiswap": "SushiSwap",
    "quickswap": "QuickSwap",
    "trader_joe": "Trader Joe",
    "aerodrome": "Aerodrome",
    "camelot": "Camelot",
    "meteora": "Meteora",
    "jupiter": "Jupiter",
})

def get_dex_name(dex_id: str) -> str:
    """
    Human readable DEX name
    Example: pancakeswap -> PancakeSwap, unknownswap -> Unknownswap
    """
    if not dex_id:
        return ""
    known = DEX_NAMES.get(dex_id.lower())
    if known:
        return known
    return dex_id[0].upper() + dex_id[1:]
