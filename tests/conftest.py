import os
import sys

import pytest

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from arbitrum_mcp.chains import CatalogUnavailableError, ChainResolver, default_resolver  # noqa: E402
from arbitrum_mcp.chains.models import ChainRecord, EthBridge  # noqa: E402
from arbitrum_mcp.config import ArbitrumConfig  # noqa: E402
from arbitrum_mcp.metrics import default_metrics  # noqa: E402


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


@pytest.fixture(autouse=True)
def restore_default_rpc_url():
    original = default_resolver.default_rpc_url
    yield
    if original:
        default_resolver.set_default_rpc_url(original)
    else:
        default_resolver.clear_default_rpc_url()


XAI_RECORD = ChainRecord(
    chain_id=660279,
    name="Xai",
    slug="xai",
    parent_chain_id=42161,
    rpc_url="https://xai-chain.net/rpc",
    eth_bridge=EthBridge(
        bridge="0x7dd8A76bdAeBE3BBBaCD7Aa87f1D4FDa1E60f94f",
        rollup="0xC47DacFbAa80Bd9D8112F4e8069482c2A3221336",
        sequencer_inbox="0x995a9d3ca121D48d21087eDE20bc8acb2398c8B1",
    ),
)


class InMemoryRegistry:
    """Registry stand-in serving a fixed list of records."""

    def __init__(self, records, fail=False):
        self.records = list(records)
        self.fail = fail

    async def find_by_name(self, name):
        if self.fail:
            raise CatalogUnavailableError("Chain catalog unavailable.")
        query = name.strip().lower()
        if not query:
            return None
        for record in self.records:
            if record.name.lower() == query:
                return record
        for record in self.records:
            if record.slug and record.slug.lower() == query:
                return record
        for record in self.records:
            candidate = record.name.lower()
            if query in candidate or candidate in query:
                return record
        return None

    async def list_names(self):
        if self.fail:
            raise CatalogUnavailableError("Chain catalog unavailable.")
        return sorted(record.name for record in self.records)

    async def search(self, query):
        if self.fail:
            raise CatalogUnavailableError("Chain catalog unavailable.")
        text = query.strip().lower()
        return [r for r in self.records if text in r.name.lower() or text in r.slug or text == str(r.chain_id)]


@pytest.fixture
def xai_record():
    return XAI_RECORD


@pytest.fixture
def resolver():
    """Resolver over a one-chain catalog with no session default."""
    config = ArbitrumConfig(
        default_rpc_url=None,
        ethereum_rpc_url="https://eth.example",
        arbitrum_one_rpc_url="https://arb1.example",
    )
    return ChainResolver(InMemoryRegistry([XAI_RECORD]), config)


@pytest.fixture
def offline_resolver():
    return ChainResolver(InMemoryRegistry([], fail=True), ArbitrumConfig(default_rpc_url=None))
