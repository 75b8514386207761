"""ERC-20 metadata and pool token probes via raw ABI calls.

Each field is fetched by its own query and decoded by hand from the
returned hex. A field that fails for any reason keeps its default; the
other fields are unaffected.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, NamedTuple

from chainlens.chain.client import QueryServiceClient
from chainlens.chain.query import probe_call_query
from chainlens.exceptions import DecodeFailure, QueryServiceFailure
from chainlens.models.schema import TokenMetadata
from chainlens.tokens.abi import (
    decode_address,
    decode_string,
    decode_uint8,
    decode_uint256,
    normalize_address,
)
from chainlens.tokens.constants import ERC20_SELECTORS, METADATA_DEFAULTS, POOL_SELECTORS


logger = logging.getLogger(__name__)


class ProbeField(NamedTuple):
    selector: str
    decode: Callable[[str | None], Any]
    default: Any


ERC20_FIELDS: dict[str, ProbeField] = {
    "name": ProbeField(ERC20_SELECTORS["name"], decode_string, METADATA_DEFAULTS["name"]),
    "symbol": ProbeField(ERC20_SELECTORS["symbol"], decode_string, METADATA_DEFAULTS["symbol"]),
    "decimals": ProbeField(ERC20_SELECTORS["decimals"], decode_uint8, METADATA_DEFAULTS["decimals"]),
    "totalSupply": ProbeField(ERC20_SELECTORS["totalSupply"], decode_uint256, METADATA_DEFAULTS["totalSupply"]),
}

POOL_FIELDS: dict[str, ProbeField] = {
    "token0": ProbeField(POOL_SELECTORS["token0"], decode_address, None),
    "token1": ProbeField(POOL_SELECTORS["token1"], decode_address, None),
}


class MetadataProbe:
    """Issue one call per field concurrently and decode each independently."""

    def __init__(self, client: QueryServiceClient):
        self.client = client

    async def call(self, contract: str, selector: str) -> str | None:
        """Return the raw hex output of ``selector`` on ``contract``, if any."""
        response = await self.client.get(probe_call_query(contract, selector))
        transactions = response.data.transactions
        if not transactions:
            return None
        return transactions[0].get("output")

    async def probe(self, contract: str, fields: dict[str, ProbeField]) -> dict[str, Any]:
        names = list(fields)
        results = await asyncio.gather(
            *(self.call(contract, fields[n].selector) for n in names),
            return_exceptions=True,
        )

        values: dict[str, Any] = {}
        service_failures: list[QueryServiceFailure] = []
        for name, result in zip(names, results):
            field = fields[name]
            values[name] = field.default

            if isinstance(result, QueryServiceFailure):
                service_failures.append(result)
                logger.warning(f"Probe {name} for {contract} failed: {result.message}")
                continue
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(f"Probe {name} for {contract} raised {type(result).__name__}: {result}")
                continue
            if not result or result == "0x":
                logger.debug(f"No return data for {name} on {contract}, using default")
                continue

            try:
                values[name] = field.decode(result)
            except DecodeFailure as e:
                logger.warning(f"Failed to decode {name} for token {contract}: {e.message}")

        # Every call failing means the service is down, not that the token is blank
        if service_failures and len(service_failures) == len(names):
            raise service_failures[0]
        return values

    async def token_metadata(self, token: str) -> TokenMetadata:
        token = normalize_address(token)
        values = await self.probe(token, ERC20_FIELDS)
        return TokenMetadata(
            address=token,
            name=values["name"],
            symbol=values["symbol"],
            decimals=values["decimals"],
            total_supply=values["totalSupply"],
        )

    async def pool_tokens(self, pool: str) -> tuple[str | None, str | None]:
        values = await self.probe(normalize_address(pool), POOL_FIELDS)
        return values["token0"], values["token1"]
