# ==========================
# Chain Registry
# ==========================
from types import MappingProxyType
from typing import List, Mapping, Optional
from pydantic import BaseModel, Field, ConfigDict

class ChainInfo(BaseModel):
    """Display metadata for one blockchain network"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Internal chain id (EVM chain id or 'solana')")
    name: str = Field(..., description="Display name")
    short_name: str = Field(..., alias="shortName", description="Short label")
    icon: str = Field(..., description="Icon path")
    explorer_url: str = Field("", alias="explorerUrl", description="Block explorer base URL")
    dex_screener_id: str = Field(..., alias="dexScreenerId", description="DexScreener network slug")
    accent_color: str = Field("#6B7280", alias="accentColor", description="UI accent color")

UNKNOWN_CHAIN_COLOR = "#6B7280"

def _chain(chain_id: str, name: str, short_name: str, icon: str, explorer_url: str,
           dex_screener_id: str, accent_color: str) -> ChainInfo:
    return ChainInfo(
        id=chain_id,
        name=name,
        short_name=short_name,
        icon=icon,
        explorer_url=explorer_url,
        dex_screener_id=dex_screener_id,
        accent_color=accent_color
    )

CHAINS: Mapping[str, ChainInfo] = MappingProxyType({
    "56": _chain("56", "BNB Smart Chain", "BSC", "/chains/bsc.svg", "https://bscscan.com", "bsc", "#F0B90B"),
    "1": _chain("1", "Ethereum", "ETH", "/chains/ethereum.svg", "https://etherscan.io", "ethereum", "#627EEA"),
    "solana": _chain("solana", "Solana", "SOL", "/chains/solana.svg", "https://solscan.io", "solana", "#9945FF"),
    "8453": _chain("8453", "Base", "BASE", "/chains/base.svg", "https://basescan.org", "base", "#0052FF"),
    "42161": _chain("42161", "Arbitrum One", "ARB", "/chains/arbitrum.svg", "https://arbiscan.io", "arbitrum", "#28A0F0"),
    "137": _chain("137", "Polygon", "MATIC", "/chains/polygon.svg", "https://polygonscan.com", "polygon", "#8247E5"),
    "43114": _chain("43114", "Avalanche", "AVAX", "/chains/avalanche.svg", "https://snowtrace.io", "avalanche", "#E84142"),
    "10": _chain("10", "Optimism", "OP", "/chains/optimism.svg", "https://optimistic.etherscan.io", "optimism", "#FF0420"),
    "250": _chain("250", "Fantom", "FTM", "/chains/fantom.svg", "https://ftmscan.com", "fantom", "#1969FF"),
})

NATIVE_TOKEN_SYMBOLS: Mapping[str, str] = MappingProxyType({
    "56": "BNB",
    "1": "ETH",
    "solana": "SOL",
    "8453": "ETH",
    "42161": "ETH",
    "137": "MATIC",
    "43114": "AVAX",
    "10": "ETH",
    "250": "FTM",
})

GECKO_TERMINAL_NETWORKS: Mapping[str, str] = MappingProxyType({
    "56": "bsc",
    "1": "eth",
    "solana": "solana",
    "8453": "base",
    "42161": "arbitrum",
    "137": "polygon_pos",
})

def get_chain_info(chain_id: str) -> ChainInfo:
    """
    Look up chain metadata

    Unknown ids get a placeholder record instead of an error:
    generic name, short name from the first characters, no explorer link
    """
    chain_id = str(chain_id)
    known = CHAINS.get(chain_id)
    if known is not None:
        return known

    return _chain(
        chain_id,
        f"Chain {chain_id}",
        chain_id[:4].upper(),
        "/chains/unknown.svg",
        "",
        chain_id,
        UNKNOWN_CHAIN_COLOR
    )

def get_supported_chains() -> List[ChainInfo]:
    return list(CHAINS.values())

def get_token_explorer_url(chain_id: str, address: str) -> Optional[str]:
    """Explorer link for a token contract, None when the chain has no explorer"""
    chain = get_chain_info(chain_id)
    if not chain.explorer_url:
        return None
    return f"{chain.explorer_url}/token/{address}"

def get_address_explorer_url(chain_id: str, address: str) -> Optional[str]:
    """Explorer link for a wallet address"""
    chain = get_chain_info(chain_id)
    if not chain.explorer_url:
        return None
    if chain.id == "solana":
        return f"{chain.explorer_url}/account/{address}"
    return f"{chain.explorer_url}/address/{address}"

def get_dex_screener_url(chain_id: str, address: str) -> str:
    chain = get_chain_info(chain_id)
    return f"https://dexscreener.com/{chain.dex_screener_id}/{address}"

def get_gecko_terminal_url(chain_id: str, address: str) -> str:
    network = GECKO_TERMINAL_NETWORKS.get(str(chain_id), str(chain_id))
    return f"https://www.geckoterminal.com/{network}/tokens/{address}"

def is_evm_chain(chain_id: str) -> bool:
    return str(chain_id) != "solana"

def get_native_token_symbol(chain_id: str) -> str:
    return NATIVE_TOKEN_SYMBOLS.get(str(chain_id), "ETH")

def get_chain_color(chain_id: str) -> str:
    return get_chain_info(chain_id).accent_color
