"""Fold decoded Transfer events into received amounts and transfer rows.

ERC-20 Transfer(address indexed from, address indexed to, uint256 value)
- topics[0] = event signature (0xddf252ad...)
- topics[1] = from address (padded to 32 bytes)
- topics[2] = to address (padded to 32 bytes)
- data = value (uint256)

ERC-721 uses the same hash with ``tokenId`` as a third indexed topic, so the
two are told apart by how many indexed values the decoder produced.
"""

from __future__ import annotations

from typing import Iterable

from chainlens.models.schema import DecodedEvent, TokenBalance, TokenTransfer


def sum_received_amounts(
    events: Iterable[DecodedEvent | None],
    wallet: str | None = None,
) -> list[TokenBalance]:
    """Sum incoming ERC-20 amounts per token.

    This is gross receipts over the queried block range, not an account
    balance: outgoing transfers are never subtracted. Unmatched (None)
    events and non-ERC-20 events are skipped. When ``wallet`` is given only
    transfers whose ``to`` equals it are counted.
    """
    target = wallet.lower() if wallet else None
    balances: dict[str, int] = {}
    for event in events:
        if event is None or event.standard != "ERC20":
            continue
        if target and event.indexed[1].val != target:
            continue
        amount = event.body[0].val
        balances[event.address] = balances.get(event.address, 0) + amount

    return [TokenBalance(token=token, balance=balance) for token, balance in balances.items()]


def transfer_rows(events: Iterable[DecodedEvent | None], wallet: str) -> list[TokenTransfer]:
    """Every decoded token transfer that moves value into or out of ``wallet``.

    TransferBatch events are expanded to one row per (id, value) pair.
    """
    wallet = wallet.lower()
    rows: list[TokenTransfer] = []
    for event in events:
        if event is None or event.standard is None:
            continue

        if event.standard == "ERC1155":
            # operator, from, to
            from_addr, to_addr = event.indexed[1].val, event.indexed[2].val
            if event.name == "TransferSingle":
                pairs = [(event.body[0].val, event.body[1].val)]
            else:
                pairs = list(zip(event.body[0].val, event.body[1].val))
        elif event.standard == "ERC721":
            from_addr, to_addr = event.indexed[0].val, event.indexed[1].val
            pairs = [(event.indexed[2].val, 1)]
        else:
            from_addr, to_addr = event.indexed[0].val, event.indexed[1].val
            pairs = [(None, event.body[0].val)]

        if wallet not in (from_addr, to_addr):
            continue

        for token_id, amount in pairs:
            rows.append(TokenTransfer(
                token=event.address,
                standard=event.standard,
                from_address=from_addr,
                to_address=to_addr,
                amount=amount,
                token_id=None if token_id is None else str(token_id),
                transaction_hash=event.transaction_hash,
                block_number=event.block_number,
                log_index=event.log_index,
            ))
    return rows
