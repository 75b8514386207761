"""Event signatures, topic hashes and ERC-20 function selectors."""

ZERO_ADDRESS = "0x" + "0" * 40

# Transfer(address,address,uint256): ERC-20 (2 indexed) and ERC-721 (3 indexed) share this hash
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

# TransferSingle(address,address,address,uint256,uint256)
ERC1155_TRANSFER_SINGLE_TOPIC = (
    "0xc3d58168c5ae7397731d063d5bbf3d657854427343f4c083240f7aacaa2d0f62"
)

# TransferBatch(address,address,address,uint256[],uint256[])
ERC1155_TRANSFER_BATCH_TOPIC = (
    "0x4a39dc06d4c0dbc64b70af90fd698a233a518aa5d07e595d983b8c0526c8f7fb"
)

# Approval(address,address,uint256)
APPROVAL_TOPIC = "0x8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"

# ApprovalForAll(address,address,bool)
APPROVAL_FOR_ALL_TOPIC = (
    "0x17307eab39ab6107e8899845ad3d59bd9653f200f220920489ca2b5937696c31"
)

# Uniswap V2 Swap(address,uint256,uint256,uint256,uint256,address)
UNISWAP_V2_SWAP_TOPIC = (
    "0xd78ad95fa46c994b6551d0da85fc275fe613ce37657fb8d5e3d130840159d822"
)

# Uniswap V3 Swap(address,address,int256,int256,uint160,uint128,int24)
UNISWAP_V3_SWAP_TOPIC = (
    "0xc42079f94a6350d7e6235f29174924f928cc2ac818eb64fed8004e115fbcca67"
)

# Uniswap V2 Sync(uint112,uint112)
UNISWAP_V2_SYNC_TOPIC = (
    "0x1c411e9a96e071241c2f21f7726b17ae89e3cab4c78be50e062b03a9fffbbad1"
)

TOKEN_EVENT_SIGNATURES = [
    "Transfer(address indexed from, address indexed to, uint256 amount)",
    "Transfer(address indexed from, address indexed to, uint256 indexed tokenId)",
    "TransferSingle(address indexed operator, address indexed from, address indexed to, uint256 id, uint256 value)",
    "TransferBatch(address indexed operator, address indexed from, address indexed to, uint256[] ids, uint256[] values)",
    "Approval(address indexed owner, address indexed spender, uint256 value)",
    "ApprovalForAll(address indexed owner, address indexed operator, bool approved)",
]

SWAP_EVENT_SIGNATURES = [
    "Swap(address indexed sender, uint256 amount0In, uint256 amount1In, uint256 amount0Out, uint256 amount1Out, address indexed to)",
    "Swap(address indexed sender, address indexed recipient, int256 amount0, int256 amount1, uint160 sqrtPriceX96, uint128 liquidity, int24 tick)",
]

POOL_EVENT_SIGNATURES = SWAP_EVENT_SIGNATURES + [
    "Sync(uint112 reserve0, uint112 reserve1)",
]

# Everything the shared decoder understands
EVENT_SIGNATURES = TOKEN_EVENT_SIGNATURES + POOL_EVENT_SIGNATURES

SWAP_TOPICS = [UNISWAP_V2_SWAP_TOPIC, UNISWAP_V3_SWAP_TOPIC]

SWAP_PROTOCOLS: dict[str, str] = {
    UNISWAP_V2_SWAP_TOPIC: "uniswap_v2",
    UNISWAP_V3_SWAP_TOPIC: "uniswap_v3",
}

# ERC-20 introspection selectors: field -> 4-byte selector
ERC20_SELECTORS: dict[str, str] = {
    "name": "0x06fdde03",
    "symbol": "0x95d89b41",
    "decimals": "0x313ce567",
    "totalSupply": "0x18160ddd",
}

# Uniswap-style pair introspection
POOL_SELECTORS: dict[str, str] = {
    "token0": "0x0dfe1681",
    "token1": "0xd21220a7",
}

# Fallbacks when a probe fails or returns no data
METADATA_DEFAULTS: dict[str, str | int] = {
    "name": "Unknown",
    "symbol": "UNKNOWN",
    "decimals": 18,
    "totalSupply": 0,
}
