import httpx
import pytest

from chainlens.chain.client import QueryServiceClient, parse_response
from chainlens.chain.query import latest_block_query
from chainlens.chain.registry import get_chain_config
from chainlens.config import Settings
from chainlens.exceptions import QueryServiceFailure
from chainlens.tokens.constants import TRANSFER_TOPIC

from factories import TOKEN_A


def test_parse_response_normalizes_rows():
    response = parse_response({
        "data": [
            {
                "logs": [{
                    "address": TOKEN_A.upper().replace("0X", "0x"),
                    "topic0": TRANSFER_TOPIC,
                    "topic1": "0x" + "00" * 32,
                    "topic2": None,
                    "topic3": None,
                    "data": None,
                    "block_number": "0x10",
                }],
                "blocks": [{"number": "0x10", "timestamp": "0x64"}],
            },
            {"transactions": [{"hash": "0x01", "value": "1000000000000000000000"}]},
        ],
        "archiveHeight": "0x1234",
        "next_block": 17,
    })

    log = response.data.logs[0]
    assert log["topics"] == [TRANSFER_TOPIC, "0x" + "00" * 32]
    assert log["address"] == TOKEN_A
    assert log["data"] == "0x"
    assert log["block_number"] == 16
    assert response.data.transactions[0]["value"] == 10**21
    assert response.block_timestamps() == {16: 100}
    assert (response.archive_height, response.next_block) == (0x1234, 17)


def _client(handler, key="test-key"):
    return QueryServiceClient(
        get_chain_config(1),
        Settings(hypersync_api_key=key),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_posts_query_with_bearer_token():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"data": {}, "archive_height": 99})

    client = _client(handler)
    response = await client.get(latest_block_query())
    await client.aclose()

    assert response.archive_height == 99
    assert str(seen[0].url) == "https://eth.hypersync.xyz/query"
    assert seen[0].headers["Authorization"] == "Bearer test-key"


@pytest.mark.asyncio
async def test_no_key_no_auth_header():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    client = _client(handler, key="")
    await client.get(latest_block_query())
    await client.aclose()
    assert "Authorization" not in seen[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize("handler", [
    lambda request: httpx.Response(500, text="boom"),
    lambda request: httpx.Response(200, text="not json"),
    lambda request: httpx.Response(200, json=[1, 2, 3]),
])
async def test_failures_become_query_service_failure(handler):
    client = _client(handler)
    with pytest.raises(QueryServiceFailure):
        await client.get(latest_block_query())
    await client.aclose()


@pytest.mark.asyncio
async def test_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(QueryServiceFailure) as exc:
        await client.get(latest_block_query())
    await client.aclose()
    assert exc.value.details["chain_id"] == 1
