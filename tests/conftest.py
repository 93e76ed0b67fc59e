import httpx
import pytest

from models.upstream_model import BinanceAlphaToken, DexScreenerPair
from services.http_client import CachedHttpClient


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mock_client():
    """Build a CachedHttpClient whose requests are answered by handler"""

    def _build(handler):
        return CachedHttpClient(timeout=5, transport=httpx.MockTransport(handler))

    return _build


@pytest.fixture
def make_pair():
    def _make(base_address, liquidity=None, dex_id="pancakeswap", pair_address=None, **extra):
        payload = {
            "chainId": "bsc",
            "dexId": dex_id,
            "url": f"https://dexscreener.com/bsc/{pair_address or base_address + '-pair'}",
            "pairAddress": pair_address or f"{base_address}-pair",
            "baseToken": {"address": base_address, "symbol": "FOO", "name": "Foo Token"},
            "quoteToken": {"address": "0xquote", "symbol": "WBNB", "name": "Wrapped BNB"},
            "liquidity": {"usd": liquidity} if liquidity is not None else None,
        }
        payload.update(extra)
        return DexScreenerPair.model_validate(payload)

    return _make


@pytest.fixture
def make_alpha_token():
    def _make(symbol="FOO", address="0xfoo", chain_id="56", **extra):
        payload = {
            "alphaId": f"ALPHA_{symbol}",
            "symbol": symbol,
            "name": f"{symbol} Token",
            "chainId": chain_id,
            "contractAddress": address,
        }
        payload.update(extra)
        return BinanceAlphaToken.model_validate(payload)

    return _make
