"""Decode DEX swap events and derive liquidity-pool statistics.

Uniswap V2 Swap(sender indexed, amount0In, amount1In, amount0Out, amount1Out, to indexed)
    The side with a non-zero ``In`` amount is the input token.

Uniswap V3 Swap(sender indexed, recipient indexed, amount0, amount1, sqrtPriceX96, liquidity, tick)
    Deltas are from the pool's point of view: positive means the pool
    received that token, so the positive side is the input token.

Other DEX layouts are not decoded and do not appear in the output.
"""

from __future__ import annotations

import logging
from typing import Iterable

from chainlens.models.schema import DecodedEvent, DexSwap, PoolStats
from chainlens.tokens.constants import (
    SWAP_PROTOCOLS,
    UNISWAP_V2_SWAP_TOPIC,
    UNISWAP_V2_SYNC_TOPIC,
    UNISWAP_V3_SWAP_TOPIC,
    ZERO_ADDRESS,
)

logger = logging.getLogger(__name__)


def _v2_direction(event: DecodedEvent) -> tuple[int, int, int]:
    amount0_in, amount1_in, amount0_out, amount1_out = (v.val for v in event.body)
    if amount0_in > 0:
        return 0, amount0_in, amount1_out
    return 1, amount1_in, amount0_out


def _v3_direction(event: DecodedEvent) -> tuple[int, int, int]:
    amount0, amount1 = event.body[0].val, event.body[1].val
    if amount1 > 0:
        return 1, amount1, abs(amount0)
    return 0, abs(amount0), abs(amount1)


def decode_swap(
    event: DecodedEvent | None,
    timestamps: dict[int, int] | None = None,
    pool_tokens: tuple[str | None, str | None] = (None, None),
) -> DexSwap | None:
    """Turn a decoded V2/V3 Swap event into a DexSwap. None for anything else."""
    if event is None or event.topic0 not in SWAP_PROTOCOLS:
        return None

    if event.topic0 == UNISWAP_V2_SWAP_TOPIC:
        in_index, amount_in, amount_out = _v2_direction(event)
    else:
        in_index, amount_in, amount_out = _v3_direction(event)
    out_index = 1 - in_index

    block_number = event.block_number
    return DexSwap(
        transaction_hash=event.transaction_hash,
        block_number=block_number,
        timestamp=(timestamps or {}).get(block_number) if block_number is not None else None,
        log_index=event.log_index,
        pool=event.address,
        protocol=SWAP_PROTOCOLS[event.topic0],
        token_in_index=in_index,
        token_out_index=out_index,
        token_in=pool_tokens[in_index],
        token_out=pool_tokens[out_index],
        amount_in=amount_in,
        amount_out=amount_out,
        sender=event.indexed[0].val,
        recipient=event.indexed[1].val,
    )


def decode_swaps(
    events: Iterable[DecodedEvent | None],
    timestamps: dict[int, int] | None = None,
    pool_tokens: tuple[str | None, str | None] = (None, None),
) -> list[DexSwap]:
    swaps = []
    for event in events:
        swap = decode_swap(event, timestamps, pool_tokens)
        if swap is not None:
            swaps.append(swap)
    return swaps


def filter_swaps_by_token(
    swaps: list[DexSwap],
    token: str,
    pool_tokens: tuple[str | None, str | None],
) -> list[DexSwap]:
    """Keep swaps only if ``token`` is one of the pool's tokens.

    A pool's swaps always involve both of its tokens, so this is all or
    nothing. When the pool tokens are unknown the filter cannot be applied.
    """
    token = token.lower()
    if None in pool_tokens:
        logger.warning(f"Pool tokens unknown; cannot filter swaps by {token}")
        return swaps
    return swaps if token in pool_tokens else []


def build_pool_stats(
    pool: str,
    events: Iterable[DecodedEvent | None],
    timestamps: dict[int, int] | None = None,
    pool_tokens: tuple[str | None, str | None] = (None, None),
) -> PoolStats:
    """Reserves from the last Sync, LP mint/burn net and per-token swap volume."""
    pool = pool.lower()
    events = [e for e in events if e is not None and e.address == pool]

    swaps = decode_swaps(events, timestamps, pool_tokens)
    volumes = [0, 0]
    for swap in swaps:
        volumes[swap.token_in_index] += swap.amount_in
        volumes[swap.token_out_index] += swap.amount_out

    reserves: tuple[int, int] | None = None
    lp_minted = 0
    has_v3 = False
    for event in events:
        if event.topic0 == UNISWAP_V2_SYNC_TOPIC:
            reserves = (event.body[0].val, event.body[1].val)
        elif event.topic0 == UNISWAP_V3_SWAP_TOPIC:
            has_v3 = True
        elif event.standard == "ERC20":
            from_addr, to_addr = event.indexed[0].val, event.indexed[1].val
            if from_addr == ZERO_ADDRESS:
                lp_minted += event.body[0].val
            if to_addr == ZERO_ADDRESS:
                lp_minted -= event.body[0].val

    notes = ["volume_usd not computed: no price source"]
    if reserves is None:
        reserves = (0, 0)
        if has_v3:
            notes.append("reserves not computed: V3 pools emit no Sync events")
        else:
            notes.append("reserves not computed: no Sync event in range")
    if None in pool_tokens:
        notes.append("token0/token1 unresolved: pool did not answer token0()/token1()")

    return PoolStats(
        address=pool,
        token0=pool_tokens[0],
        token1=pool_tokens[1],
        reserves=reserves,
        lp_minted_in_range=lp_minted,
        swaps=swaps,
        volume_token0=volumes[0],
        volume_token1=volumes[1],
        volume_usd=None,
        notes=notes,
    )
