import os

import pytest
import pytest_asyncio

# Set test environment variables before imports
os.environ["HYPERSYNC_API_KEY"] = "test-key"
os.environ["NFT_HOLDING_MODE"] = "last_touch"

from chainlens.chain.client import QueryServiceClient  # noqa: E402
from chainlens.chain.registry import ChainRegistry  # noqa: E402
from chainlens.config import Settings  # noqa: E402
from chainlens.service import ChainLens  # noqa: E402
from chainlens.tokens.decoder import default_decoder  # noqa: E402

from factories import FakeHyperSync  # noqa: E402


@pytest.fixture
def settings():
    return Settings(hypersync_api_key="test-key")


@pytest.fixture
def decoder():
    return default_decoder()


@pytest.fixture
def hypersync():
    """Fake HyperSync endpoint; tests set ``body`` and ``outputs`` before querying."""
    return FakeHyperSync()


@pytest_asyncio.fixture
async def registry(hypersync, settings):
    """Registry whose clients talk to the fake endpoint."""
    reg = ChainRegistry(
        settings=settings,
        client_factory=lambda config, s: QueryServiceClient(config, s, transport=hypersync.transport),
    )
    yield reg
    await reg.aclose()


@pytest.fixture
def lens(registry, settings):
    return ChainLens(registry, settings)
