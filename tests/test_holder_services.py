import httpx
import pytest

from models.adapter_result import Degraded, Success
from services.birdeye_service import BirdeyeService
from services.gecko_terminal_service import GeckoTerminalService
from services.moralis_service import MoralisService


def no_network(request):
    raise AssertionError("no request expected without credentials")


def birdeye_holders(count):
    return {
        "success": True,
        "data": {"items": [
            {"owner": f"wallet{i}", "uiAmount": 100 - i, "percentage": 2.0, "valueUsd": "10"}
            for i in range(count)
        ]},
    }


@pytest.mark.anyio
async def test_birdeye_without_key_degrades(mock_client):
    service = BirdeyeService(mock_client(no_network), api_key="")

    assert not service.is_configured()
    assert await service.fetch_token_holders("56", "0xa") == Degraded("not configured")
    assert await service.fetch_holder_stats("56", "0xa") == Degraded("not configured")
    assert await service.fetch_token_market_data("56", "0xa") == Degraded("not configured")


@pytest.mark.anyio
async def test_birdeye_holders_and_headers(mock_client):
    def handler(request):
        assert request.headers["X-API-KEY"] == "key"
        assert request.headers["x-chain"] == "bsc"
        assert request.url.params["limit"] == "20"
        return httpx.Response(200, json=birdeye_holders(3))

    service = BirdeyeService(mock_client(handler), api_key="key")
    result = await service.fetch_token_holders("56", "0xa")

    assert isinstance(result, Success)
    assert [holder.address for holder in result.data] == ["wallet0", "wallet1", "wallet2"]
    assert result.data[0].balance_usd == 10


@pytest.mark.anyio
async def test_birdeye_holder_stats(mock_client):
    service = BirdeyeService(mock_client(lambda request: httpx.Response(200, json=birdeye_holders(30))), api_key="key")

    result = await service.fetch_holder_stats("56", "0xa", total_holders=1234)

    stats = result.data
    assert stats.total_holders == 1234
    assert len(stats.top_holders) == 20
    assert stats.top10_percentage == pytest.approx(20.0)
    assert stats.top50_percentage == pytest.approx(60.0)


@pytest.mark.anyio
async def test_birdeye_unsuccessful_envelope_degrades(mock_client):
    service = BirdeyeService(
        mock_client(lambda request: httpx.Response(200, json={"success": False, "data": None})),
        api_key="key"
    )

    assert await service.fetch_token_market_data("solana", "Mint") == Degraded("unsuccessful response")


@pytest.mark.anyio
async def test_birdeye_market_data(mock_client):
    body = {"success": True, "data": {"price": 1.5, "market_cap": 100, "fdv": 200, "liquidity": 50, "holder": 9}}
    service = BirdeyeService(mock_client(lambda request: httpx.Response(200, json=body)), api_key="key")

    market = (await service.fetch_token_market_data("56", "0xa")).data

    assert market.price == 1.5
    assert market.market_cap == 100
    assert market.holders == 9


@pytest.mark.anyio
async def test_moralis_without_key_degrades(mock_client):
    service = MoralisService(mock_client(no_network), api_key="")

    assert await service.fetch_token_holder_count("56", "0xa") == Degraded("not configured")


@pytest.mark.anyio
async def test_moralis_evm_holder_count(mock_client):
    def handler(request):
        assert request.url.path == "/api/v2.2/erc20/0xa/owners"
        assert request.url.params["chain"] == "bsc"
        assert request.headers["X-API-Key"] == "key"
        return httpx.Response(200, json={"total": 4321, "result": [
            {"owner_address": "0xw", "balance_formatted": "12.5", "percentage_relative_to_total_supply": 1.1}
        ]})

    service = MoralisService(mock_client(handler), api_key="key")

    assert await service.fetch_token_holder_count("56", "0xa") == Success(4321)


@pytest.mark.anyio
async def test_moralis_solana_uses_gateway(mock_client):
    def handler(request):
        assert request.url.host == "solana-gateway.moralis.io"
        return httpx.Response(200, json={"result": [{"owner": "w1", "amount": "5"}, {"owner": "w2", "amount": "1"}]})

    service = MoralisService(mock_client(handler), api_key="key")

    assert await service.fetch_token_holder_count("solana", "Mint") == Success(2)


@pytest.mark.anyio
async def test_moralis_unsupported_chain(mock_client):
    service = MoralisService(mock_client(no_network), api_key="key")

    assert await service.fetch_token_holder_count("zksync", "0xa") == Degraded("unsupported chain zksync")


@pytest.mark.anyio
async def test_gecko_token_details(mock_client):
    def handler(request):
        assert request.url.path == "/api/v2/networks/bsc/tokens/0xa"
        return httpx.Response(200, json={"data": {"attributes": {
            "name": "Foo", "symbol": "FOO", "price_usd": "0.5",
            "fdv_usd": "1000", "total_reserve_in_usd": "250", "volume_usd": {"h24": "75"},
        }}})

    service = GeckoTerminalService(mock_client(handler))
    details = (await service.fetch_token_details("56", "0xa")).data

    assert details.price_usd == 0.5
    assert details.total_reserve_in_usd == 250
    assert details.volume_24h == 75


@pytest.mark.anyio
async def test_gecko_prices_are_keyed_by_lower_address(mock_client):
    body = {"data": {"attributes": {"token_prices": {"0xAA": "1.25", "0xbb": None}}}}
    service = GeckoTerminalService(mock_client(lambda request: httpx.Response(200, json=body)))

    assert await service.fetch_multiple_token_prices("56", ["0xAA", "0xbb"]) == Success({"0xaa": 1.25})


@pytest.mark.anyio
async def test_gecko_missing_token_degrades(mock_client):
    service = GeckoTerminalService(mock_client(lambda request: httpx.Response(404)))

    assert await service.fetch_token_details("56", "0xa") == Degraded("HTTP 404")


@pytest.mark.anyio
async def test_birdeye_token_overview(mock_client):
    def handler(request):
        assert request.url.path == "/defi/token_overview"
        assert request.url.params["address"] == "Mint"
        assert request.headers["x-chain"] == "solana"
        return httpx.Response(200, json={"success": True, "data": {
            "symbol": "FOO", "logoURI": "https://cdn/foo.png", "price": "0.2",
            "priceChange24hPercent": -4, "holder": 120, "v24hUSD": 900,
        }})

    service = BirdeyeService(mock_client(handler), api_key="key")
    overview = (await service.fetch_token_overview("solana", "Mint")).data

    assert overview.logo_uri == "https://cdn/foo.png"
    assert overview.price == 0.2
    assert overview.price_change_24h == -4
    assert overview.holder == 120
    assert overview.volume_24h == 900


@pytest.mark.anyio
async def test_birdeye_overview_without_key_or_data(mock_client):
    unconfigured = BirdeyeService(mock_client(no_network), api_key="")
    empty = BirdeyeService(
        mock_client(lambda request: httpx.Response(200, json={"success": True, "data": None})),
        api_key="key"
    )

    assert await unconfigured.fetch_token_overview("solana", "Mint") == Degraded("not configured")
    assert await empty.fetch_token_overview("solana", "Mint") == Degraded("empty data")


@pytest.mark.anyio
async def test_moralis_erc20_metadata(mock_client):
    def handler(request):
        assert request.url.path == "/api/v2.2/erc20/metadata"
        assert request.url.params["chain"] == "base"
        assert request.url.params["addresses[]"] == "0xa"
        return httpx.Response(200, json=[{"name": "Foo", "symbol": "FOO", "decimals": "18", "thumbnail": "https://t/foo.png"}])

    service = MoralisService(mock_client(handler), api_key="key")
    metadata = (await service.fetch_evm_token_metadata("8453", "0xa")).data

    assert metadata.symbol == "FOO"
    assert metadata.decimals == 18
    assert metadata.logo_url == "https://t/foo.png"


@pytest.mark.anyio
async def test_moralis_metadata_degrades(mock_client):
    empty = MoralisService(mock_client(lambda request: httpx.Response(200, json=[])), api_key="key")
    unsupported = MoralisService(mock_client(no_network), api_key="key")

    assert await empty.fetch_evm_token_metadata("1", "0xa") == Degraded("empty data")
    assert await unsupported.fetch_evm_token_metadata("solana", "Mint") == Degraded("unsupported chain solana")


@pytest.mark.anyio
async def test_gecko_single_token_price(mock_client):
    def handler(request):
        assert request.url.path == "/api/v2/simple/networks/eth/token_price/0xAbC"
        assert request.headers["Accept"] == "application/json;version=20230302"
        return httpx.Response(200, json={"data": {"attributes": {"token_prices": {"0xabc": "3.5"}}}})

    service = GeckoTerminalService(mock_client(handler))

    assert await service.fetch_token_price("1", "0xAbC") == Success(3.5)


@pytest.mark.anyio
async def test_gecko_single_token_without_price(mock_client):
    body = {"data": {"attributes": {"token_prices": {"0xabc": None}}}}
    service = GeckoTerminalService(mock_client(lambda request: httpx.Response(200, json=body)))

    assert await service.fetch_token_price("1", "0xabc") == Degraded("no price")


@pytest.mark.anyio
async def test_gecko_new_pools(mock_client):
    def handler(request):
        assert request.url.path == "/api/v2/networks/base/new_pools"
        return httpx.Response(200, json={"data": [
            {"attributes": {"address": "0xp1", "name": "FOO / WETH", "pool_created_at": "2024-05-01T00:00:00Z"}},
            "junk",
        ]})

    service = GeckoTerminalService(mock_client(handler))
    pools = (await service.fetch_new_pools("8453")).data

    assert len(pools) == 1
    assert pools[0].pair_address == "0xp1"
    assert pools[0].created_at == "2024-05-01T00:00:00Z"


@pytest.mark.anyio
async def test_gecko_trending_pools(mock_client):
    def handler(request):
        assert request.url.path == "/api/v2/networks/polygon_pos/trending_pools"
        return httpx.Response(200, json={"data": [{"attributes": {
            "address": "0xp2", "name": "BAR / USDC", "base_token_price_usd": "0.75", "volume_usd": {"h24": "1200"},
        }}]})

    service = GeckoTerminalService(mock_client(handler))
    pool = (await service.fetch_trending_pools("137")).data[0]

    assert pool.pair_address == "0xp2"
    assert pool.price_usd == 0.75
    assert pool.volume_usd_24h == 1200


@pytest.mark.anyio
async def test_gecko_pools_malformed_body(mock_client):
    service = GeckoTerminalService(mock_client(lambda request: httpx.Response(200, json={"data": None})))

    assert await service.fetch_new_pools("56") == Degraded("malformed body")
