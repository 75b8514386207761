"""Chain registry: HyperSync chain catalog plus the client/decoder owner."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Mapping

from chainlens.exceptions import ClientNotReadyError, UnsupportedChainError

if TYPE_CHECKING:
    from chainlens.chain.client import QueryServiceClient
    from chainlens.config import Settings
    from chainlens.tokens.decoder import LogDecoder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    name: str
    url: str
    supports_traces: bool = False


def _chain(chain_id: int, name: str, slug: str, supports_traces: bool = False) -> tuple[int, ChainConfig]:
    return chain_id, ChainConfig(chain_id, name, f"https://{slug}.hypersync.xyz", supports_traces)


CHAINS: dict[int, ChainConfig] = dict([
    _chain(1, "Ethereum Mainnet", "eth", supports_traces=True),
    _chain(10, "Optimism", "optimism"),
    _chain(14, "Flare", "flare"),
    _chain(30, "Rootstock", "rootstock"),
    _chain(42, "Lukso", "lukso"),
    _chain(44, "Crab", "crab"),
    _chain(46, "Darwinia", "darwinia", supports_traces=True),
    _chain(56, "BSC", "bsc"),
    _chain(97, "BSC Testnet", "bsc-testnet"),
    _chain(100, "Gnosis", "gnosis"),
    _chain(130, "Unichain", "unichain"),
    _chain(137, "Polygon", "polygon"),
    _chain(148, "Shimmer EVM", "shimmer-evm"),
    _chain(169, "Manta", "manta"),
    _chain(204, "opBNB", "opbnb"),
    _chain(250, "Fantom", "fantom"),
    _chain(252, "Fraxtal", "fraxtal"),
    _chain(255, "Kroma", "kroma"),
    _chain(288, "Boba", "boba"),
    _chain(324, "ZKSync", "zksync"),
    _chain(1088, "Metis", "metis"),
    _chain(1101, "Polygon zkEVM", "polygon-zkevm"),
    _chain(1135, "Lisk", "lisk"),
    _chain(1284, "Moonbeam", "moonbeam"),
    _chain(1287, "Moonbase Alpha", "moonbase-alpha"),
    _chain(1301, "Unichain Sepolia", "unichain-sepolia"),
    _chain(1750, "Metall2", "metall2"),
    _chain(1868, "Soneium", "soneium"),
    _chain(2818, "Morph", "morph"),
    _chain(4200, "Merlin", "merlin"),
    _chain(4201, "Lukso Testnet", "lukso-testnet"),
    _chain(5000, "Mantle", "mantle"),
    _chain(5115, "Citrea Testnet", "citrea-testnet"),
    _chain(7000, "Zeta", "zeta"),
    _chain(7560, "Cyber", "cyber"),
    _chain(8453, "Base", "base"),
    _chain(8888, "Chiliz", "chiliz"),
    _chain(10143, "Monad Testnet", "monad-testnet"),
    _chain(10200, "Gnosis Chiado", "gnosis-chiado"),
    _chain(17000, "Holesky", "holesky"),
    _chain(17864, "MEV Commit", "mev-commit"),
    _chain(34443, "Mode", "mode"),
    _chain(42161, "Arbitrum", "arbitrum"),
    _chain(42170, "Arbitrum Nova", "arbitrum-nova"),
    _chain(42220, "Celo", "celo"),
    _chain(43113, "Fuji", "fuji"),
    _chain(43114, "Avalanche", "avalanche"),
    _chain(48900, "Zircuit", "zircuit"),
    _chain(50104, "Sophon", "sophon"),
    _chain(57073, "Ink", "ink"),
    _chain(59144, "Linea", "linea"),
    _chain(80002, "Polygon Amoy", "polygon-amoy"),
    _chain(80084, "Berachain Bartio", "berachain-bartio"),
    _chain(80094, "Berachain", "berachain"),
    _chain(81457, "Blast", "blast"),
    _chain(84532, "Base Sepolia", "base-sepolia"),
    _chain(421614, "Arbitrum Sepolia", "arbitrum-sepolia"),
    _chain(534352, "Scroll", "scroll"),
    _chain(696969, "Galadriel Devnet", "galadriel-devnet"),
    _chain(7225878, "Saakuru", "saakuru"),
    _chain(7777777, "Zora", "zora"),
    _chain(11155111, "Sepolia", "sepolia"),
    _chain(11155420, "Optimism Sepolia", "optimism-sepolia"),
    _chain(168587773, "Blast Sepolia", "blast-sepolia"),
    _chain(283027429, "Extrabud", "extrabud"),
    _chain(531050104, "Sophon Testnet", "sophon-testnet"),
    _chain(1313161554, "Aurora", "aurora"),
    _chain(1666600000, "Harmony Shard 0", "harmony-shard-0"),
])

CHAIN_NAME_TO_ID: dict[str, int] = {c.name.lower(): c.chain_id for c in CHAINS.values()}


def get_chain_config(chain_id: int) -> ChainConfig:
    if chain_id not in CHAINS:
        raise UnsupportedChainError(chain_id)
    return CHAINS[chain_id]


def resolve_chain(name_or_id: str | int) -> ChainConfig:
    """Resolve a chain display name or ID to its config."""
    if isinstance(name_or_id, int):
        return get_chain_config(name_or_id)
    name = str(name_or_id).strip().lower()
    if name.isdigit():
        return get_chain_config(int(name))
    if name not in CHAIN_NAME_TO_ID:
        raise ValueError(f"Unknown chain '{name_or_id}'. Supported: {sorted(CHAIN_NAME_TO_ID)}")
    return get_chain_config(CHAIN_NAME_TO_ID[name])


def _default_client_factory(chain_config: ChainConfig, settings: Settings | None) -> QueryServiceClient:
    from chainlens.chain.client import QueryServiceClient

    return QueryServiceClient(chain_config, settings=settings)


def _default_decoder_factory() -> LogDecoder:
    from chainlens.tokens.decoder import default_decoder

    return default_decoder()


class ChainRegistry:
    """Owns one query-service client per chain and the shared log decoder.

    Clients are created lazily by ``ensure_chain`` and cached for the life of
    the registry. The decoder does not depend on the chain and is built once,
    on the first successful ``ensure_chain``.
    """

    def __init__(
        self,
        chains: Mapping[int, ChainConfig] | None = None,
        settings: Settings | None = None,
        client_factory: Callable[[ChainConfig, Settings | None], QueryServiceClient] | None = None,
        decoder_factory: Callable[[], LogDecoder] | None = None,
    ):
        self._chains = MappingProxyType(dict(CHAINS if chains is None else chains))
        self._settings = settings
        self._client_factory = client_factory or _default_client_factory
        self._decoder_factory = decoder_factory or _default_decoder_factory
        self._clients: dict[int, QueryServiceClient] = {}
        self._decoder: LogDecoder | None = None

    def ensure_chain(self, chain_id: int) -> QueryServiceClient:
        """Register a client for ``chain_id`` if needed. Idempotent."""
        config = self._chains.get(chain_id)
        if config is None:
            raise UnsupportedChainError(chain_id)

        client = self._clients.get(chain_id)
        if client is None:
            client = self._client_factory(config, self._settings)
            self._clients[chain_id] = client
            logger.debug(f"Created query client for {config.name} ({config.url})")
        if self._decoder is None:
            self._decoder = self._decoder_factory()
        return client

    def get_client(self, chain_id: int) -> QueryServiceClient:
        client = self._clients.get(chain_id)
        if client is None:
            raise ClientNotReadyError(chain_id)
        return client

    @property
    def decoder(self) -> LogDecoder:
        if self._decoder is None:
            raise ClientNotReadyError()
        return self._decoder

    def list_supported_chains(self) -> Mapping[int, ChainConfig]:
        return self._chains

    def is_ready(self, chain_id: int) -> bool:
        return chain_id in self._clients

    async def aclose(self) -> None:
        """Close every cached client. Only for process shutdown."""
        clients, self._clients = list(self._clients.values()), {}
        for client in clients:
            await client.aclose()


@lru_cache
def get_registry() -> ChainRegistry:
    """Process-wide default registry."""
    from chainlens.config import get_settings

    return ChainRegistry(settings=get_settings())
