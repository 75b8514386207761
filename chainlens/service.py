"""Public derivation entry points.

Every operation follows the same shape: make sure the chain is registered,
build one query, run it, decode the logs and fold them into a view. Errors
are raised as ``ChainLensError`` subclasses; nothing is retried here.
"""

from __future__ import annotations

import logging
from typing import Mapping

from chainlens.chain import query as q
from chainlens.chain.registry import ChainConfig, ChainRegistry, get_registry
from chainlens.config import Settings, get_settings
from chainlens.exceptions import ChainLensError, QueryServiceFailure
from chainlens.models.schema import (
    ContractInteraction,
    DexSwap,
    NFTHolding,
    PoolStats,
    QueryData,
    TokenBalance,
    TokenMetadata,
    WalletActivity,
)
from chainlens.tokens.abi import event_topic, normalize_address
from chainlens.tokens.decoder import parse_event_signature
from chainlens.tokens.dex import build_pool_stats, decode_swaps, filter_swaps_by_token
from chainlens.tokens.metadata import MetadataProbe
from chainlens.tokens.nfts import NFTOwnershipTracker
from chainlens.tokens.transfers import sum_received_amounts, transfer_rows

logger = logging.getLogger(__name__)


class ChainLens:
    """Derived blockchain views over a HyperSync-backed ChainRegistry."""

    def __init__(self, registry: ChainRegistry | None = None, settings: Settings | None = None):
        self.registry = registry or get_registry()
        self.settings = settings or get_settings()

    def _client(self, chain_id: int):
        self.registry.ensure_chain(chain_id)
        return self.registry.get_client(chain_id)

    async def get_transaction_details(self, chain_id: int, tx_hash: str) -> QueryData:
        client = self._client(chain_id)
        response = await client.get(q.transaction_details_query(tx_hash))
        return response.data

    async def get_token_balances(
        self,
        chain_id: int,
        wallet: str,
        from_block: int | None = None,
    ) -> list[TokenBalance]:
        """Sum of ERC-20 amounts received by ``wallet`` since ``from_block``.

        Outgoing transfers are not subtracted, so this is gross receipts over
        the range rather than a current balance.
        """
        wallet = normalize_address(wallet)
        client = self._client(chain_id)
        response = await client.get(q.token_balances_query(wallet, from_block))
        events = self.registry.decoder.decode_logs(response.data.logs)
        balances = sum_received_amounts(events, wallet)
        logger.debug(f"{len(balances)} tokens received by {wallet} on chain {chain_id}")
        return balances

    async def get_nft_balances(
        self,
        chain_id: int,
        wallet: str,
        from_block: int | None = None,
    ) -> list[NFTHolding]:
        wallet = normalize_address(wallet)
        mode = self.settings.nft_holding_mode
        client = self._client(chain_id)
        response = await client.get(
            q.nft_balances_query(wallet, from_block, include_outgoing=mode == "net")
        )
        events = self.registry.decoder.decode_logs(response.data.logs)
        return NFTOwnershipTracker(wallet, mode=mode).update(events).holdings()

    async def get_contract_events(
        self,
        chain_id: int,
        contract: str,
        event_signature: str,
        from_block: int | None = None,
        to_block: int | None = None,
    ) -> QueryData:
        """Raw logs of one event type emitted by ``contract``.

        ``event_signature`` may be canonical (``Transfer(address,address,uint256)``)
        or a full declaration with names and ``indexed``.
        """
        try:
            canonical = parse_event_signature(event_signature).canonical
        except ValueError:
            canonical = event_signature
        client = self._client(chain_id)
        response = await client.get(
            q.contract_events_query(contract, event_topic(canonical), from_block, to_block)
        )
        return response.data

    async def get_block_range(self, chain_id: int, from_block: int, to_block: int) -> QueryData:
        if to_block < from_block:
            raise ChainLensError(f"toBlock {to_block} is before fromBlock {from_block}")
        client = self._client(chain_id)
        response = await client.get(q.block_range_query(from_block, to_block))
        return response.data

    async def get_latest_block_number(self, chain_id: int) -> int:
        client = self._client(chain_id)
        response = await client.get(q.latest_block_query())
        if response.archive_height is None:
            raise QueryServiceFailure("Response did not include archive_height", {"chain_id": chain_id})
        return response.archive_height

    def get_supported_chains(self) -> Mapping[int, ChainConfig]:
        return self.registry.list_supported_chains()

    async def get_token_metadata(self, chain_id: int, token: str) -> TokenMetadata:
        client = self._client(chain_id)
        return await MetadataProbe(client).token_metadata(token)

    async def get_dex_swaps(
        self,
        chain_id: int,
        dex_address: str,
        from_block: int | None = None,
        to_block: int | None = None,
        token_address: str | None = None,
    ) -> list[DexSwap]:
        """Decoded V2/V3 swaps emitted by the pool at ``dex_address``."""
        client = self._client(chain_id)
        pool_tokens = await MetadataProbe(client).pool_tokens(dex_address)
        response = await client.get(q.dex_swaps_query(dex_address, from_block, to_block))
        events = self.registry.decoder.decode_logs(response.data.logs)
        swaps = decode_swaps(events, response.block_timestamps(), pool_tokens)
        if token_address:
            swaps = filter_swaps_by_token(swaps, normalize_address(token_address), pool_tokens)
        return swaps

    async def get_wallet_activity(
        self,
        chain_id: int,
        wallet: str,
        from_block: int | None = None,
        to_block: int | None = None,
    ) -> WalletActivity:
        wallet = normalize_address(wallet)
        client = self._client(chain_id)
        response = await client.get(q.wallet_activity_query(wallet, from_block, to_block))
        events = self.registry.decoder.decode_logs(response.data.logs)

        transactions = [
            tx for tx in response.data.transactions
            if (tx.get("from") or "").lower() == wallet
        ]
        interactions = []
        for tx in transactions:
            data = tx.get("input") or "0x"
            if tx.get("to") and len(data) >= 10:
                interactions.append(ContractInteraction(
                    to=tx["to"].lower(),
                    selector=data[:10].lower(),
                    transaction_hash=tx.get("hash"),
                    block_number=tx.get("block_number"),
                ))

        return WalletActivity(
            transactions=transactions,
            token_transfers=transfer_rows(events, wallet),
            contract_interactions=interactions,
        )

    async def get_liquidity_pool_stats(
        self,
        chain_id: int,
        pool: str,
        from_block: int | None = None,
        to_block: int | None = None,
    ) -> PoolStats:
        client = self._client(chain_id)
        pool_tokens = await MetadataProbe(client).pool_tokens(pool)
        response = await client.get(q.pool_stats_query(pool, from_block, to_block))
        events = self.registry.decoder.decode_logs(response.data.logs)
        return build_pool_stats(normalize_address(pool), events, response.block_timestamps(), pool_tokens)
