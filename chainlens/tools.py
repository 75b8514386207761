"""Tool boundary: every derivation wrapped into a tagged success/failure outcome."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from chainlens.exceptions import ChainLensError
from chainlens.serialization import to_json
from chainlens.service import ChainLens

logger = logging.getLogger(__name__)


class ToolOutcome(BaseModel):
    success: bool
    data: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    run: Callable[..., Awaitable[Any]]


async def _transaction(lens: ChainLens, chain_id: int, tx_hash: str):
    return await lens.get_transaction_details(chain_id, tx_hash)


async def _token_balances(lens: ChainLens, chain_id: int, wallet_address: str, from_block: int | None = None):
    return await lens.get_token_balances(chain_id, wallet_address, from_block)


async def _nft_balances(lens: ChainLens, chain_id: int, wallet_address: str, from_block: int | None = None):
    return await lens.get_nft_balances(chain_id, wallet_address, from_block)


async def _contract_events(
    lens: ChainLens,
    chain_id: int,
    contract_address: str,
    event_signature: str,
    from_block: int | None = None,
    to_block: int | None = None,
):
    return await lens.get_contract_events(chain_id, contract_address, event_signature, from_block, to_block)


async def _block_range(lens: ChainLens, chain_id: int, from_block: int, to_block: int):
    return await lens.get_block_range(chain_id, from_block, to_block)


async def _latest_block(lens: ChainLens, chain_id: int) -> str:
    return str(await lens.get_latest_block_number(chain_id))


async def _supported_chains(lens: ChainLens):
    chains = lens.get_supported_chains()
    return {str(cid): asdict(cfg) for cid, cfg in chains.items()}


async def _token_metadata(lens: ChainLens, chain_id: int, token_address: str):
    return await lens.get_token_metadata(chain_id, token_address)


async def _dex_swaps(
    lens: ChainLens,
    chain_id: int,
    dex_address: str,
    from_block: int | None = None,
    to_block: int | None = None,
    token_address: str | None = None,
):
    return await lens.get_dex_swaps(chain_id, dex_address, from_block, to_block, token_address)


async def _wallet_activity(
    lens: ChainLens,
    chain_id: int,
    wallet_address: str,
    from_block: int | None = None,
    to_block: int | None = None,
):
    return await lens.get_wallet_activity(chain_id, wallet_address, from_block, to_block)


async def _pool_stats(
    lens: ChainLens,
    chain_id: int,
    pool_address: str,
    from_block: int | None = None,
    to_block: int | None = None,
):
    return await lens.get_liquidity_pool_stats(chain_id, pool_address, from_block, to_block)


TOOLS: dict[str, Tool] = {
    t.name: t
    for t in [
        Tool("get_transaction", "Get detailed information about a specific blockchain transaction", _transaction),
        Tool("get_token_balances", "Get ERC20 amounts received by a wallet address (gross receipts, not net balance)", _token_balances),
        Tool("get_nft_balances", "Get NFT holdings (ERC721 and ERC1155) for a specific wallet address", _nft_balances),
        Tool("get_contract_events", "Get events from a specific smart contract", _contract_events),
        Tool("get_block_range", "Get all blocks and transactions within a specific block range", _block_range),
        Tool("get_latest_block", "Get the latest block number from the blockchain", _latest_block),
        Tool("get_supported_chains", "Get list of supported chains and their configurations", _supported_chains),
        Tool("get_token_metadata", "Get metadata for an ERC20 token including name, symbol, and decimals", _token_metadata),
        Tool("get_dex_swaps", "Get decoded Uniswap V2/V3 swap events for a pool", _dex_swaps),
        Tool("get_wallet_activity", "Get wallet transactions, token transfers, and contract interactions", _wallet_activity),
        Tool("get_liquidity_pool_stats", "Get reserves, swaps and volume for a liquidity pool", _pool_stats),
    ]
}


async def run_tool(name: str, lens: ChainLens | None = None, **params) -> ToolOutcome:
    """Run a tool by name. Never raises: every failure becomes ``success=False``."""
    tool = TOOLS.get(name)
    if tool is None:
        return ToolOutcome(success=False, error=f"Unknown tool: {name}")

    try:
        lens = lens or ChainLens()
        result = await tool.run(lens, **params)
        data = result if isinstance(result, str) else to_json(result)
        return ToolOutcome(success=True, data=data)
    except ChainLensError as e:
        logger.warning(f"{name} failed: {e.message}")
        return ToolOutcome(success=False, error=e.message)
    except Exception as e:
        logger.exception(f"Unexpected error in {name}")
        return ToolOutcome(success=False, error=str(e) or type(e).__name__)
