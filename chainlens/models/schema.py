"""Pydantic v2 models for raw query rows and derived views."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class RawLog(BaseModel):
    address: str
    data: str = "0x"
    topics: list[str] = Field(default_factory=list)
    block_number: int | None = None
    log_index: int | None = None
    transaction_hash: str | None = None


class QueryData(BaseModel):
    """Rows returned by one query-service call."""

    logs: list[dict[str, Any]] = Field(default_factory=list)
    transactions: list[dict[str, Any]] = Field(default_factory=list)
    blocks: list[dict[str, Any]] = Field(default_factory=list)


class QueryResponse(BaseModel):
    data: QueryData = Field(default_factory=QueryData)
    archive_height: int | None = Field(default=None, description="Latest indexed block")
    next_block: int | None = None

    def block_timestamps(self) -> dict[int, int]:
        return {
            b["number"]: b["timestamp"]
            for b in self.data.blocks
            if b.get("number") is not None and b.get("timestamp") is not None
        }


class AbiValue(BaseModel):
    type: str
    val: Any


class DecodedEvent(BaseModel):
    address: str
    topic0: str
    name: str
    signature: str
    indexed: list[AbiValue] = Field(default_factory=list)
    body: list[AbiValue] = Field(default_factory=list)
    block_number: int | None = None
    log_index: int | None = None
    transaction_hash: str | None = None

    @property
    def standard(self) -> str | None:
        """Token standard implied by the event shape, if any."""
        if self.name == "Transfer":
            return "ERC721" if len(self.indexed) == 3 else "ERC20"
        if self.name in ("TransferSingle", "TransferBatch"):
            return "ERC1155"
        return None


class TokenBalance(BaseModel):
    token: str
    balance: int = Field(description="Sum of received amounts over the queried range, base units")


class NFTHolding(BaseModel):
    contract_address: str
    token_id: str = Field(description="uint256 token id as a decimal string")
    standard: Literal["ERC721", "ERC1155"]
    balance: int


class TokenMetadata(BaseModel):
    address: str
    name: str = "Unknown"
    symbol: str = "UNKNOWN"
    decimals: int = 18
    total_supply: int = 0


class TokenTransfer(BaseModel):
    token: str
    standard: Literal["ERC20", "ERC721", "ERC1155"]
    from_address: str
    to_address: str
    amount: int = Field(description="Raw amount; 1 for ERC-721")
    token_id: str | None = None
    transaction_hash: str | None = None
    block_number: int | None = None
    log_index: int | None = None


class ContractInteraction(BaseModel):
    to: str
    selector: str
    transaction_hash: str | None = None
    block_number: int | None = None


class WalletActivity(BaseModel):
    transactions: list[dict[str, Any]] = Field(default_factory=list)
    token_transfers: list[TokenTransfer] = Field(default_factory=list)
    contract_interactions: list[ContractInteraction] = Field(default_factory=list)


class DexSwap(BaseModel):
    transaction_hash: str | None
    block_number: int | None
    timestamp: int | None = None
    log_index: int | None = None
    pool: str
    protocol: Literal["uniswap_v2", "uniswap_v3"]
    token_in_index: int = Field(description="0 for token0, 1 for token1")
    token_out_index: int
    token_in: str | None = None
    token_out: str | None = None
    amount_in: int
    amount_out: int
    sender: str
    recipient: str


class PoolStats(BaseModel):
    address: str
    token0: str | None = None
    token1: str | None = None
    reserves: tuple[int, int] = (0, 0)
    lp_minted_in_range: int = Field(default=0, description="LP mints minus burns inside the range")
    swaps: list[DexSwap] = Field(default_factory=list)
    volume_token0: int = 0
    volume_token1: int = 0
    volume_usd: float | None = None
    notes: list[str] = Field(default_factory=list)
