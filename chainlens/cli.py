"""Click CLI: one command per derivation tool, output as JSON outcomes."""

from __future__ import annotations

import asyncio
import logging

import click

from chainlens.config import get_settings


def _run(tool: str, **params) -> None:
    from chainlens.chain.registry import ChainRegistry
    from chainlens.service import ChainLens
    from chainlens.tools import run_tool

    settings = get_settings()

    async def _go():
        registry = ChainRegistry(settings=settings)
        try:
            return await run_tool(tool, ChainLens(registry, settings), **params)
        finally:
            await registry.aclose()

    outcome = asyncio.run(_go())
    click.echo(outcome.model_dump_json(indent=2))
    if not outcome.success:
        raise SystemExit(1)


def _chain_id(chain: str) -> int:
    """Resolve a chain name to its ID. Numeric IDs pass through so the tool reports unsupported ones."""
    from chainlens.chain.registry import resolve_chain

    if chain.strip().isdigit():
        return int(chain)
    try:
        return resolve_chain(chain).chain_id
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--chain") from e


chain_option = click.option("--chain", default="1", show_default=True, help="Chain name or ID (1, optimism, polygon, ...)")
from_option = click.option("--from-block", type=int, default=None, help="Starting block (default 0)")
to_option = click.option("--to-block", type=int, default=None, help="Ending block (exclusive)")


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """chainlens - derived token, NFT and DEX views over HyperSync."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
def chains():
    """List supported chains."""
    _run("get_supported_chains")


@cli.command("latest-block")
@chain_option
def latest_block(chain: str):
    """Latest indexed block number."""
    _run("get_latest_block", chain_id=_chain_id(chain))


@cli.command()
@chain_option
@click.argument("tx_hash")
def tx(chain: str, tx_hash: str):
    """Full details for one transaction."""
    _run("get_transaction", chain_id=_chain_id(chain), tx_hash=tx_hash)


@cli.command()
@chain_option
@from_option
@click.argument("wallet")
def balances(chain: str, from_block: int | None, wallet: str):
    """ERC-20 amounts received by WALLET."""
    _run("get_token_balances", chain_id=_chain_id(chain), wallet_address=wallet, from_block=from_block)


@cli.command()
@chain_option
@from_option
@click.argument("wallet")
def nfts(chain: str, from_block: int | None, wallet: str):
    """ERC-721 / ERC-1155 holdings of WALLET."""
    _run("get_nft_balances", chain_id=_chain_id(chain), wallet_address=wallet, from_block=from_block)


@cli.command()
@chain_option
@from_option
@to_option
@click.argument("contract")
@click.argument("signature")
def events(chain: str, from_block: int | None, to_block: int | None, contract: str, signature: str):
    """Raw logs of SIGNATURE emitted by CONTRACT."""
    _run(
        "get_contract_events",
        chain_id=_chain_id(chain),
        contract_address=contract,
        event_signature=signature,
        from_block=from_block,
        to_block=to_block,
    )


@cli.command()
@chain_option
@click.argument("from_block", type=int)
@click.argument("to_block", type=int)
def blocks(chain: str, from_block: int, to_block: int):
    """Blocks and transactions in [FROM_BLOCK, TO_BLOCK)."""
    _run("get_block_range", chain_id=_chain_id(chain), from_block=from_block, to_block=to_block)


@cli.command()
@chain_option
@click.argument("token")
def metadata(chain: str, token: str):
    """ERC-20 name, symbol, decimals and total supply."""
    _run("get_token_metadata", chain_id=_chain_id(chain), token_address=token)


@cli.command()
@chain_option
@from_option
@to_option
@click.option("--token", default=None, help="Only return swaps if the pool trades this token")
@click.argument("pool")
def swaps(chain: str, from_block: int | None, to_block: int | None, token: str | None, pool: str):
    """Decoded Uniswap V2/V3 swaps on POOL."""
    _run(
        "get_dex_swaps",
        chain_id=_chain_id(chain),
        dex_address=pool,
        from_block=from_block,
        to_block=to_block,
        token_address=token,
    )


@cli.command()
@chain_option
@from_option
@to_option
@click.argument("wallet")
def activity(chain: str, from_block: int | None, to_block: int | None, wallet: str):
    """Transactions, token transfers and contract calls of WALLET."""
    _run(
        "get_wallet_activity",
        chain_id=_chain_id(chain),
        wallet_address=wallet,
        from_block=from_block,
        to_block=to_block,
    )


@cli.command()
@chain_option
@from_option
@to_option
@click.argument("pool")
def pool(chain: str, from_block: int | None, to_block: int | None, pool: str):
    """Reserves, LP mint/burn and swap volume for POOL."""
    _run(
        "get_liquidity_pool_stats",
        chain_id=_chain_id(chain),
        pool_address=pool,
        from_block=from_block,
        to_block=to_block,
    )


if __name__ == "__main__":
    cli()
