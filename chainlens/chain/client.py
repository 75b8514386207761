"""Async HyperSync client over the JSON query API using httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from chainlens.chain.query import Query
from chainlens.chain.registry import ChainConfig
from chainlens.config import Settings, get_settings
from chainlens.exceptions import QueryServiceFailure
from chainlens.models.schema import QueryData, QueryResponse
from chainlens.tokens.abi import parse_quantity

logger = logging.getLogger(__name__)

# Columns carrying numeric quantities; the API may send them as hex strings
QUANTITY_KEYS = {
    "number", "timestamp", "block_number", "log_index", "transaction_index",
    "gas", "gas_used", "gas_limit", "gas_price", "cumulative_gas_used",
    "effective_gas_price", "max_fee_per_gas", "max_priority_fee_per_gas",
    "base_fee_per_gas", "nonce", "value", "size", "difficulty",
    "total_difficulty", "type", "status", "chain_id",
}

TOPIC_KEYS = ("topic0", "topic1", "topic2", "topic3")


def _normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    out = dict(row)
    for key in QUANTITY_KEYS & out.keys():
        try:
            out[key] = parse_quantity(out[key])
        except (TypeError, ValueError):
            pass
    return out


def _normalize_log(row: dict[str, Any]) -> dict[str, Any]:
    out = _normalize_row(row)
    if "topics" not in out:
        out["topics"] = [out.pop(k) for k in TOPIC_KEYS if k in out]
    # Unused trailing topic slots come back as null
    while out["topics"] and not out["topics"][-1]:
        out["topics"].pop()
    if out.get("address"):
        out["address"] = out["address"].lower()
    out.setdefault("data", "0x")
    if out["data"] is None:
        out["data"] = "0x"
    return out


def parse_response(body: dict[str, Any]) -> QueryResponse:
    """Flatten one or many response batches into a single QueryResponse."""
    batches = body.get("data") or []
    if isinstance(batches, dict):
        batches = [batches]

    data = QueryData()
    for batch in batches:
        data.logs.extend(_normalize_log(r) for r in batch.get("logs") or [])
        data.transactions.extend(_normalize_row(r) for r in batch.get("transactions") or [])
        data.blocks.extend(_normalize_row(r) for r in batch.get("blocks") or [])

    return QueryResponse(
        data=data,
        archive_height=parse_quantity(body.get("archive_height", body.get("archiveHeight"))),
        next_block=parse_quantity(body.get("next_block", body.get("nextBlock"))),
    )


class QueryServiceClient:
    """HyperSync endpoint for one chain."""

    def __init__(
        self,
        chain_config: ChainConfig,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.chain_config = chain_config
        settings = settings or get_settings()
        self._http = httpx.AsyncClient(
            base_url=chain_config.url,
            headers=settings.auth_headers(),
            timeout=httpx.Timeout(settings.request_timeout),
            transport=transport,
        )

    @property
    def chain_id(self) -> int:
        return self.chain_config.chain_id

    async def get(self, query: Query) -> QueryResponse:
        """Run one query. Any transport or remote error becomes QueryServiceFailure."""
        payload = query.to_payload()
        logger.debug(f"HyperSync query on {self.chain_config.name}: {payload}")
        try:
            resp = await self._http.post("/query", json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as e:
            raise QueryServiceFailure(
                f"{self.chain_config.url} returned {e.response.status_code}: {e.response.text[:200]}",
                {"chain_id": self.chain_id, "status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise QueryServiceFailure(
                str(e) or type(e).__name__, {"chain_id": self.chain_id},
            ) from e
        except ValueError as e:
            raise QueryServiceFailure(
                f"Invalid JSON from {self.chain_config.url}: {e}", {"chain_id": self.chain_id},
            ) from e

        if not isinstance(body, dict):
            raise QueryServiceFailure(f"Unexpected response shape from {self.chain_config.url}")
        return parse_response(body)

    async def aclose(self) -> None:
        await self._http.aclose()
