import pytest

from config.chains import (
    CHAINS,
    UNKNOWN_CHAIN_COLOR,
    get_address_explorer_url,
    get_chain_color,
    get_chain_info,
    get_dex_screener_url,
    get_gecko_terminal_url,
    get_native_token_symbol,
    get_supported_chains,
    get_token_explorer_url,
    is_evm_chain,
)
from config.dexes import get_dex_name


def test_known_chain_lookup():
    chain = get_chain_info("56")
    assert chain.name == "BNB Smart Chain"
    assert chain.short_name == "BSC"
    assert chain.dex_screener_id == "bsc"


def test_integer_chain_id_is_accepted():
    assert get_chain_info(1).name == "Ethereum"


def test_unknown_chain_gets_placeholder():
    chain = get_chain_info("zksync")
    assert chain.name == "Chain zksync"
    assert chain.short_name == "ZKSY"
    assert chain.explorer_url == ""
    assert chain.dex_screener_id == "zksync"
    assert chain.accent_color == UNKNOWN_CHAIN_COLOR


def test_unknown_chain_has_no_explorer_links():
    assert get_token_explorer_url("999999", "0xabc") is None
    assert get_address_explorer_url("999999", "0xabc") is None


def test_explorer_urls():
    assert get_token_explorer_url("56", "0xabc") == "https://bscscan.com/token/0xabc"
    assert get_address_explorer_url("1", "0xabc") == "https://etherscan.io/address/0xabc"
    assert get_address_explorer_url("solana", "Wallet1") == "https://solscan.io/account/Wallet1"


def test_dex_screener_and_gecko_urls():
    assert get_dex_screener_url("8453", "0xabc") == "https://dexscreener.com/base/0xabc"
    assert get_gecko_terminal_url("137", "0xabc") == "https://www.geckoterminal.com/polygon_pos/tokens/0xabc"
    assert get_gecko_terminal_url("zksync", "0xabc") == "https://www.geckoterminal.com/zksync/tokens/0xabc"


def test_chain_helpers():
    assert is_evm_chain("56")
    assert not is_evm_chain("solana")
    assert get_native_token_symbol("solana") == "SOL"
    assert get_native_token_symbol("12345") == "ETH"
    assert get_chain_color("56") == "#F0B90B"


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        CHAINS["1"] = get_chain_info("56")
    assert len(get_supported_chains()) == len(CHAINS)


@pytest.mark.parametrize(
    "dex_id,expected",
    [
        ("pancakeswap", "PancakeSwap"),
        ("PancakeSwap", "PancakeSwap"),
        ("trader_joe", "Trader Joe"),
        ("biswap", "Biswap"),
        ("", ""),
    ],
)
def test_dex_names(dex_id, expected):
    assert get_dex_name(dex_id) == expected
