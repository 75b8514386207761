import json

import pytest

from chainlens.tools import TOOLS, run_tool

from factories import OTHER, TOKEN_A, WALLET, erc20_transfer


def test_tool_table():
    assert set(TOOLS) == {
        "get_transaction",
        "get_token_balances",
        "get_nft_balances",
        "get_contract_events",
        "get_block_range",
        "get_latest_block",
        "get_supported_chains",
        "get_token_metadata",
        "get_dex_swaps",
        "get_wallet_activity",
        "get_liquidity_pool_stats",
    }


@pytest.mark.asyncio
async def test_latest_block(lens, hypersync):
    hypersync.body = {"data": {}, "archive_height": 123}
    outcome = await run_tool("get_latest_block", lens, chain_id=1)

    assert outcome.success
    assert outcome.data == "123"
    assert outcome.error is None


@pytest.mark.asyncio
async def test_balances_serialize_big_ints(lens, hypersync):
    hypersync.body = {"data": {"logs": [erc20_transfer(TOKEN_A, OTHER, WALLET, 2**100)]}}
    outcome = await run_tool("get_token_balances", lens, chain_id=1, wallet_address=WALLET)

    assert outcome.success
    assert json.loads(outcome.data) == [{"token": TOKEN_A, "balance": str(2**100)}]


@pytest.mark.asyncio
async def test_supported_chains(lens):
    outcome = await run_tool("get_supported_chains", lens)

    chains = json.loads(outcome.data)
    assert chains["1"]["url"] == "https://eth.hypersync.xyz"
    assert chains["1"]["chain_id"] == "1"
    assert chains["1"]["supports_traces"] is True


@pytest.mark.asyncio
async def test_unsupported_chain(lens):
    outcome = await run_tool("get_latest_block", lens, chain_id=999999)

    assert not outcome.success
    assert outcome.error == "Chain ID 999999 is not supported"


@pytest.mark.asyncio
async def test_service_failure(lens, hypersync):
    hypersync.status_code = 503
    outcome = await run_tool("get_latest_block", lens, chain_id=1)

    assert not outcome.success
    assert "503" in outcome.error


@pytest.mark.asyncio
async def test_invalid_address(lens):
    outcome = await run_tool("get_token_balances", lens, chain_id=1, wallet_address="0x12")
    assert outcome.error == "Invalid address: '0x12'"


@pytest.mark.asyncio
async def test_unknown_tool(lens):
    outcome = await run_tool("get_weather", lens)
    assert not outcome.success
    assert outcome.error == "Unknown tool: get_weather"


@pytest.mark.asyncio
async def test_missing_parameter_is_failure(lens):
    outcome = await run_tool("get_block_range", lens, chain_id=1)
    assert not outcome.success
