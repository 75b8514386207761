"""Declarative HyperSync queries, one builder per derivation task.

Topic filters are positional: ``topics[i]`` lists the accepted values for
topic *i* and an empty list matches anything. Indexed parameters occupy
topics in declaration order after topic0, so:

    Transfer(from, to, value)                 from=topic1  to=topic2
    TransferSingle(operator, from, to, ...)   from=topic2  to=topic3
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chainlens.tokens.abi import normalize_address, normalize_hash, pad_address
from chainlens.tokens.constants import (
    ERC1155_TRANSFER_BATCH_TOPIC,
    ERC1155_TRANSFER_SINGLE_TOPIC,
    SWAP_TOPICS,
    TRANSFER_TOPIC,
)

BLOCK_FIELDS = [
    "number", "hash", "parent_hash", "nonce", "sha3_uncles", "logs_bloom",
    "transactions_root", "state_root", "receipts_root", "miner", "difficulty",
    "total_difficulty", "extra_data", "size", "gas_limit", "gas_used",
    "timestamp", "uncles", "base_fee_per_gas",
]

TRANSACTION_FIELDS = [
    "block_hash", "block_number", "from", "gas", "gas_price", "hash", "input",
    "nonce", "to", "transaction_index", "value", "v", "r", "s",
    "max_priority_fee_per_gas", "max_fee_per_gas", "chain_id",
    "cumulative_gas_used", "effective_gas_price", "gas_used",
    "contract_address", "logs_bloom", "type", "root", "status",
]

LOG_FIELDS = [
    "removed", "log_index", "transaction_index", "transaction_hash",
    "block_hash", "block_number", "address", "data",
    "topic0", "topic1", "topic2", "topic3",
]

ERC1155_TOPICS = [ERC1155_TRANSFER_SINGLE_TOPIC, ERC1155_TRANSFER_BATCH_TOPIC]


class FieldSelection(BaseModel):
    block: list[str] = Field(default_factory=list)
    transaction: list[str] = Field(default_factory=list)
    log: list[str] = Field(default_factory=list)


class LogSelection(BaseModel):
    address: list[str] = Field(default_factory=list)
    topics: list[list[str]] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.address:
            payload["address"] = self.address
        topics = list(self.topics)
        while topics and not topics[-1]:
            topics.pop()
        if topics:
            payload["topics"] = topics
        return payload


class TransactionSelection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: list[str] = Field(default_factory=list, alias="from")
    to: list[str] = Field(default_factory=list)
    sighash: list[str] = Field(default_factory=list)
    hash: list[str] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(by_alias=True)
        return {k: v for k, v in payload.items() if v}


class Query(BaseModel):
    from_block: int = 0
    to_block: int | None = None
    field_selection: FieldSelection = Field(default_factory=FieldSelection)
    logs: list[LogSelection] = Field(default_factory=list)
    transactions: list[TransactionSelection] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Render the HyperSync JSON request body."""
        payload: dict[str, Any] = {
            "from_block": self.from_block,
            "field_selection": {
                k: v for k, v in self.field_selection.model_dump().items() if v
            },
        }
        if self.to_block is not None:
            payload["to_block"] = self.to_block
        if self.logs:
            payload["logs"] = [s.to_payload() for s in self.logs]
        if self.transactions:
            payload["transactions"] = [s.to_payload() for s in self.transactions]
        return payload


def _range(from_block: int | None, to_block: int | None = None) -> dict[str, int | None]:
    return {"from_block": from_block or 0, "to_block": to_block}


def transaction_details_query(tx_hash: str) -> Query:
    return Query(
        from_block=0,
        field_selection=FieldSelection(
            block=BLOCK_FIELDS, transaction=TRANSACTION_FIELDS, log=LOG_FIELDS,
        ),
        transactions=[TransactionSelection(hash=[normalize_hash(tx_hash)])],
    )


def token_balances_query(wallet: str, from_block: int | None = None) -> Query:
    """ERC-20 Transfer logs with the wallet as ``to`` (topic2)."""
    return Query(
        **_range(from_block),
        field_selection=FieldSelection(
            log=["address", "data", "topic0", "topic1", "topic2", "block_number"],
            block=["timestamp"],
        ),
        logs=[LogSelection(topics=[[TRANSFER_TOPIC], [], [pad_address(wallet)]])],
    )


def nft_balances_query(
    wallet: str,
    from_block: int | None = None,
    include_outgoing: bool = False,
) -> Query:
    """ERC-721 Transfer (to=topic2) and ERC-1155 TransferSingle/Batch (to=topic3)."""
    padded = pad_address(wallet)
    logs = [
        LogSelection(topics=[[TRANSFER_TOPIC], [], [padded]]),
        LogSelection(topics=[ERC1155_TOPICS, [], [], [padded]]),
    ]
    if include_outgoing:
        logs += [
            LogSelection(topics=[[TRANSFER_TOPIC], [padded]]),
            LogSelection(topics=[ERC1155_TOPICS, [], [padded]]),
        ]
    return Query(
        **_range(from_block),
        field_selection=FieldSelection(log=LOG_FIELDS, block=["timestamp"]),
        logs=logs,
    )


def contract_events_query(
    contract: str,
    topic0: str,
    from_block: int | None = None,
    to_block: int | None = None,
) -> Query:
    return Query(
        **_range(from_block, to_block),
        field_selection=FieldSelection(
            log=LOG_FIELDS, block=["timestamp", "number"], transaction=["hash"],
        ),
        logs=[LogSelection(address=[normalize_address(contract)], topics=[[topic0]])],
    )


def block_range_query(from_block: int, to_block: int) -> Query:
    return Query(
        from_block=from_block,
        to_block=to_block,
        field_selection=FieldSelection(block=BLOCK_FIELDS, transaction=TRANSACTION_FIELDS),
    )


def latest_block_query() -> Query:
    return Query(from_block=0, field_selection=FieldSelection(block=["number"]))


def probe_call_query(contract: str, selector: str) -> Query:
    """Zero-value call simulated as a transaction lookup over block window [0, 1)."""
    return Query(
        from_block=0,
        to_block=1,
        field_selection=FieldSelection(transaction=["input", "to", "output"]),
        transactions=[TransactionSelection(to=[normalize_address(contract)], sighash=[selector])],
    )


def dex_swaps_query(
    pool: str,
    from_block: int | None = None,
    to_block: int | None = None,
) -> Query:
    return Query(
        **_range(from_block, to_block),
        field_selection=FieldSelection(
            log=LOG_FIELDS, block=["number", "timestamp"], transaction=["hash"],
        ),
        logs=[LogSelection(address=[normalize_address(pool)], topics=[SWAP_TOPICS])],
    )


def wallet_activity_query(
    wallet: str,
    from_block: int | None = None,
    to_block: int | None = None,
) -> Query:
    """Transactions sent by the wallet plus token transfers in either direction."""
    padded = pad_address(wallet)
    return Query(
        **_range(from_block, to_block),
        field_selection=FieldSelection(
            transaction=TRANSACTION_FIELDS, log=LOG_FIELDS, block=["number", "timestamp"],
        ),
        transactions=[TransactionSelection(from_=[normalize_address(wallet)])],
        logs=[
            LogSelection(topics=[[TRANSFER_TOPIC], [padded]]),
            LogSelection(topics=[[TRANSFER_TOPIC], [], [padded]]),
            LogSelection(topics=[ERC1155_TOPICS, [], [padded]]),
            LogSelection(topics=[ERC1155_TOPICS, [], [], [padded]]),
        ],
    )


def pool_stats_query(
    pool: str,
    from_block: int | None = None,
    to_block: int | None = None,
) -> Query:
    return Query(
        **_range(from_block, to_block),
        field_selection=FieldSelection(
            log=LOG_FIELDS, block=["number", "timestamp"], transaction=["hash"],
        ),
        logs=[LogSelection(address=[normalize_address(pool)])],
    )
