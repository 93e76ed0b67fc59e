import pytest

from models.adapter_result import Degraded, Success, describe_failure, is_success, unwrap_or
from models.filter_model import FilterConditions, ListingStatus
from models.token_model import UnifiedToken, compute_circulation_rate
from models.upstream_model import (
    BinanceAlphaToken,
    BirdeyeMarketData,
    DexScreenerPair,
    GeckoTokenDetails,
    parse_optional_float,
    parse_optional_int,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1.5", 1.5),
        ("0", 0.0),
        (0, 0.0),
        (12, 12.0),
        ("", None),
        ("  ", None),
        ("abc", None),
        (None, None),
        (True, None),
        ("nan", None),
    ],
)
def test_parse_optional_float(raw, expected):
    assert parse_optional_float(raw) == expected


def test_parse_optional_int_truncates():
    assert parse_optional_int("1200.7") == 1200
    assert parse_optional_int("") is None


def test_alpha_token_parses_string_numbers():
    token = BinanceAlphaToken.model_validate({
        "alphaId": "ALPHA_1",
        "symbol": "FOO",
        "name": "Foo",
        "chainId": 56,
        "contractAddress": "0xfoo",
        "iconUrl": "https://icons/foo.png",
        "price": "0.25",
        "marketCap": "1000000",
        "fdv": "",
        "holders": "321",
        "listingCex": None,
        "listingTime": 1700000000000,
        "unknownField": "ignored",
    })
    assert token.chain_id == "56"
    assert token.icon_url == "https://icons/foo.png"
    assert token.price == 0.25
    assert token.market_cap == 1_000_000
    assert token.fdv is None
    assert token.holders == 321
    assert token.listing_cex is False


def test_dexscreener_pair_tolerates_null_sections():
    pair = DexScreenerPair.model_validate({
        "pairAddress": "0xpair",
        "baseToken": {"address": "0xfoo", "symbol": "FOO", "name": "Foo"},
        "txns": None,
        "volume": None,
        "priceChange": None,
        "liquidity": None,
        "priceUsd": "1.2",
    })
    assert pair.liquidity_usd is None
    assert pair.volume_24h is None
    assert pair.price_change_24h is None
    assert pair.image_url is None
    assert pair.price_usd == 1.2


def test_birdeye_market_data_aliases():
    market = BirdeyeMarketData.model_validate({"price": 2, "market_cap": 10, "holder": 55})
    assert market.market_cap == 10
    assert market.holders == 55
    assert market.has_any_value()
    assert not BirdeyeMarketData.model_validate({}).has_any_value()


def test_gecko_details_volume():
    details = GeckoTokenDetails.model_validate({"price_usd": "1.5", "volume_usd": {"h24": "300"}})
    assert details.volume_24h == 300
    assert GeckoTokenDetails.model_validate({"volume_usd": None}).volume_24h is None


@pytest.mark.parametrize(
    "market_cap,fdv,expected",
    [
        (1_000_000, 2_000_000, 0.5),
        (1_000_000, None, None),
        (None, 2_000_000, None),
        (1_000_000, 0, None),
        (0, 2_000_000, 0.0),
    ],
)
def test_circulation_rate(market_cap, fdv, expected):
    assert compute_circulation_rate(market_cap, fdv) == expected


def test_unified_token_serializes_camel_case():
    token = UnifiedToken(
        symbol="FOO",
        chain_id="56",
        contract_address="0xFoo",
        market_cap=1_000_000,
        fdv=2_000_000,
    )
    payload = token.model_dump(by_alias=True)
    assert payload["circulationRate"] == 0.5
    assert payload["explorerUrl"] == "https://bscscan.com/token/0xFoo"
    assert payload["dexScreenerUrl"] == "https://dexscreener.com/bsc/0xFoo"
    assert payload["mainPool"] is None
    assert payload["allPools"] == []
    assert token.identity == ("56", "0xfoo")


def test_adapter_result_helpers():
    assert is_success(Success([]))
    assert unwrap_or(Success(3), 0) == 3
    assert unwrap_or(Degraded("timeout"), 0) == 0
    assert unwrap_or(RuntimeError("boom"), "x") == "x"
    assert describe_failure(Degraded("HTTP 500")) == "HTTP 500"
    assert describe_failure(RuntimeError("boom")) == "RuntimeError: boom"


def test_filter_conditions_chain_projection():
    conditions = FilterConditions(chain_id="56", spot_status=ListingStatus.LISTED, min_liquidity=10)
    assert conditions.selected_chain == "56"
    assert conditions.active_filter_count == 3
    assert FilterConditions().active_filter_count == 0
