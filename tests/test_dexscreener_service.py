from urllib.parse import unquote

import httpx
import pytest

from models.adapter_result import Degraded, Success
from services.dexscreener_service import MAX_BATCH_SIZE, DexScreenerService


def pair_payload(base_address, liquidity):
    return {
        "chainId": "bsc",
        "dexId": "pancakeswap",
        "pairAddress": f"{base_address}-pair",
        "baseToken": {"address": base_address, "symbol": "FOO", "name": "Foo"},
        "quoteToken": {"address": "0xwbnb", "symbol": "WBNB", "name": "Wrapped BNB"},
        "liquidity": {"usd": liquidity},
    }


@pytest.mark.anyio
async def test_batch_url_and_parsing(mock_client):
    seen = []

    def handler(request):
        seen.append(unquote(request.url.path))
        return httpx.Response(200, json=[pair_payload("0xa", 10), {"dexId": "broken"}])

    service = DexScreenerService(mock_client(handler))
    result = await service.fetch_tokens_data("56", ["0xa", "0xb"])

    assert seen == ["/tokens/v1/bsc/0xa,0xb"]
    assert isinstance(result, Success)
    assert [pair.pair_address for pair in result.data] == ["0xa-pair"]


@pytest.mark.anyio
async def test_batch_is_capped(mock_client):
    seen = []

    def handler(request):
        seen.append(unquote(request.url.path).rsplit("/", 1)[-1].split(","))
        return httpx.Response(200, json=[])

    service = DexScreenerService(mock_client(handler))
    addresses = [f"0x{i:02d}" for i in range(MAX_BATCH_SIZE + 5)]
    await service.fetch_tokens_data("56", addresses)

    assert seen[0] == addresses[:MAX_BATCH_SIZE]


@pytest.mark.anyio
async def test_empty_batch_makes_no_request(mock_client):
    def handler(request):
        raise AssertionError("unexpected request")

    service = DexScreenerService(mock_client(handler))

    assert await service.fetch_tokens_data("56", []) == Success([])


@pytest.mark.anyio
async def test_non_list_body_degrades(mock_client):
    service = DexScreenerService(mock_client(lambda request: httpx.Response(200, json={"pairs": None})))

    assert await service.fetch_token_pairs("56", "0xa") == Degraded("malformed body")


@pytest.mark.anyio
async def test_rate_limit_degrades(mock_client):
    service = DexScreenerService(mock_client(lambda request: httpx.Response(429)))

    assert await service.fetch_token_pairs("56", "0xa") == Degraded("HTTP 429")


@pytest.mark.anyio
async def test_timeout_degrades(mock_client):
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    service = DexScreenerService(mock_client(handler))

    assert await service.fetch_token_pairs("56", "0xa") == Degraded("timeout")


@pytest.mark.anyio
async def test_search_reads_pairs_key(mock_client):
    def handler(request):
        assert request.url.params["q"] == "foo"
        return httpx.Response(200, json={"pairs": [pair_payload("0xa", 5)]})

    service = DexScreenerService(mock_client(handler))
    result = await service.search_tokens("foo")

    assert [pair.base_token.address for pair in result.data] == ["0xa"]


def test_chain_slug_fallback():
    service = DexScreenerService()
    assert service.get_dexscreener_chain("56") == "bsc"
    assert service.get_dexscreener_chain("ZKSYNC") == "zksync"


@pytest.mark.anyio
async def test_pair_lookup_by_pair_address(mock_client):
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"pairs": [pair_payload("0xa", 42)]})

    service = DexScreenerService(mock_client(handler))
    result = await service.fetch_pair_data("56", "0xa-pair")

    assert seen == ["/latest/dex/pairs/bsc/0xa-pair"]
    assert result.data.liquidity_usd == 42


@pytest.mark.anyio
async def test_unknown_pair_is_empty_success(mock_client):
    service = DexScreenerService(mock_client(lambda request: httpx.Response(200, json={"pairs": None})))

    assert await service.fetch_pair_data("56", "0xnone") == Success(None)


@pytest.mark.anyio
async def test_latest_profiles_keep_only_objects(mock_client):
    profiles = [{"chainId": "solana", "tokenAddress": "Mint1", "icon": "https://cdn/icon.png"}, "junk"]

    def handler(request):
        assert request.url.path == "/token-profiles/latest/v1"
        return httpx.Response(200, json=profiles)

    service = DexScreenerService(mock_client(handler))

    assert await service.fetch_latest_token_profiles() == Success([profiles[0]])


@pytest.mark.anyio
async def test_latest_profiles_malformed_body(mock_client):
    service = DexScreenerService(mock_client(lambda request: httpx.Response(200, json={"profiles": []})))

    assert await service.fetch_latest_token_profiles() == Degraded("malformed body")
