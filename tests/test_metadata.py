import pytest

from chainlens.exceptions import QueryServiceFailure
from chainlens.models.schema import QueryData, QueryResponse, TokenMetadata
from chainlens.tokens.constants import ERC20_SELECTORS, POOL_SELECTORS
from chainlens.tokens.metadata import MetadataProbe

from factories import POOL, TOKEN_A, TOKEN_B, abi_address, abi_string, abi_uint

USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


class StubClient:
    """Answers probe calls by selector; ``failing`` selectors raise QueryServiceFailure."""

    def __init__(self, outputs, failing=()):
        self.outputs = outputs
        self.failing = set(failing)
        self.calls = []

    async def get(self, query):
        selection = query.transactions[0]
        selector = selection.sighash[0]
        self.calls.append((selection.to[0], selector))
        if selector in self.failing:
            raise QueryServiceFailure("connection reset")
        output = self.outputs.get(selector)
        transactions = [] if output is None else [{"output": output}]
        return QueryResponse(data=QueryData(transactions=transactions))


def erc20_outputs(**overrides):
    outputs = {
        ERC20_SELECTORS["name"]: abi_string("USD Coin"),
        ERC20_SELECTORS["symbol"]: abi_string("USDC"),
        ERC20_SELECTORS["decimals"]: abi_uint(6),
        ERC20_SELECTORS["totalSupply"]: abi_uint(2**70),
    }
    outputs.update(overrides)
    return outputs


@pytest.mark.asyncio
async def test_usdc_metadata():
    client = StubClient(erc20_outputs())
    metadata = await MetadataProbe(client).token_metadata(USDC.upper().replace("0X", "0x"))

    assert metadata == TokenMetadata(
        address=USDC, name="USD Coin", symbol="USDC", decimals=6, total_supply=2**70,
    )
    assert len(client.calls) == 4


@pytest.mark.asyncio
async def test_missing_decimals_defaults_to_18():
    client = StubClient(erc20_outputs(**{ERC20_SELECTORS["decimals"]: "0x"}))
    metadata = await MetadataProbe(client).token_metadata(USDC)

    assert metadata.decimals == 18
    assert metadata.name == "USD Coin"


@pytest.mark.asyncio
async def test_no_transaction_keeps_default():
    outputs = erc20_outputs()
    del outputs[ERC20_SELECTORS["totalSupply"]]
    metadata = await MetadataProbe(StubClient(outputs)).token_metadata(USDC)
    assert metadata.total_supply == 0


@pytest.mark.asyncio
async def test_bytes32_symbol():
    mkr = "0x" + b"MKR".ljust(32, b"\x00").hex()
    metadata = await MetadataProbe(StubClient(erc20_outputs(**{ERC20_SELECTORS["symbol"]: mkr}))).token_metadata(USDC)
    assert metadata.symbol == "MKR"


@pytest.mark.asyncio
async def test_garbage_name_isolated_to_one_field():
    client = StubClient(erc20_outputs(**{ERC20_SELECTORS["name"]: "0x1234"}))
    metadata = await MetadataProbe(client).token_metadata(USDC)

    assert metadata.name == "Unknown"
    assert metadata.symbol == "USDC"
    assert metadata.decimals == 6


@pytest.mark.asyncio
async def test_single_service_failure_keeps_default():
    client = StubClient(erc20_outputs(), failing={ERC20_SELECTORS["symbol"]})
    metadata = await MetadataProbe(client).token_metadata(USDC)

    assert metadata.symbol == "UNKNOWN"
    assert metadata.name == "USD Coin"


@pytest.mark.asyncio
async def test_all_service_failures_raise():
    client = StubClient({}, failing=set(ERC20_SELECTORS.values()))
    with pytest.raises(QueryServiceFailure):
        await MetadataProbe(client).token_metadata(USDC)


@pytest.mark.asyncio
async def test_pool_tokens():
    client = StubClient({
        POOL_SELECTORS["token0"]: abi_address(TOKEN_A),
        POOL_SELECTORS["token1"]: abi_address(TOKEN_B),
    })
    assert await MetadataProbe(client).pool_tokens(POOL) == (TOKEN_A, TOKEN_B)


@pytest.mark.asyncio
async def test_pool_tokens_unresolved():
    assert await MetadataProbe(StubClient({})).pool_tokens(POOL) == (None, None)
