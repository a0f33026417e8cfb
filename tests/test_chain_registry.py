import httpx
import pytest

from arbitrum_mcp.chains.models import ChainRecord
from arbitrum_mcp.chains.registry import (
    CANONICAL_CHAINS,
    CatalogUnavailableError,
    ChainRegistry,
)
from arbitrum_mcp.chains.resolver import ChainResolver, ResolutionKind
from arbitrum_mcp.config import ArbitrumConfig
from arbitrum_mcp.metrics import MetricsRecorder

XAI = {
    "chainId": 660279,
    "name": "Xai",
    "slug": "xai",
    "parentChainId": 42161,
    "rpcUrl": "https://xai-chain.net/rpc",
    "explorerUrl": "https://explorer.xai-chain.net",
    "isTestnet": False,
    "isMainnet": True,
    "ethBridge": {
        "bridge": "0x7dd8A76bdAeBE3BBBaCD7Aa87f1D4FDa1E60f94f",
        "inbox": "0xaE21fDA3de92dE2FDAF606233b2863782Ba046F9",
        "outbox": "0x1E400568AD4840dbE50FB32f306B842e9ddeF726",
        "rollup": "0xC47DacFbAa80Bd9D8112F4e8069482c2A3221336",
        "sequencerInbox": "0x995a9d3ca121D48d21087eDE20bc8acb2398c8B1",
    },
}
XAI_TESTNET = {
    "chainId": 37714555429,
    "name": "Xai Testnet v2",
    "slug": "xai-testnet",
    "parentChainId": 421614,
    "rpcUrl": "https://testnet-v2.xai-chain.net/rpc",
    "isTestnet": True,
}
LEGACY_FLAT = {
    "chainId": 1234,
    "name": "Legacy Orbit",
    "parentChainId": 42161,
    "rpcUrl": "https://legacy.example/rpc",
    "rollup": "0x1111111111111111111111111111111111111111",
    "sequencerInbox": "0x2222222222222222222222222222222222222222",
    "bridge": "0x3333333333333333333333333333333333333333",
}


class MockResponse:
    def __init__(self, status_code: int, json_body):
        self.status_code = status_code
        self._json = json_body

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json


class MockCatalogClient:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = 0

    async def get(self, url, timeout=None):
        self.calls += 1
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self):
        return None


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _registry(responses, clock=None, metrics=None) -> ChainRegistry:
    return ChainRegistry(
        ArbitrumConfig(catalog_ttl_seconds=300.0),
        async_client=MockCatalogClient(responses),
        clock=clock or FakeClock(),
        metrics=metrics or MetricsRecorder(),
    )


def _catalog(mainnet=None, testnet=None):
    return MockResponse(200, {"mainnet": mainnet or [XAI], "testnet": testnet or [XAI_TESTNET]})


@pytest.mark.asyncio
async def test_snapshot_puts_canonical_chains_first():
    registry = _registry([_catalog()])
    chains = await registry.all()
    names = [record.name for record in chains]
    assert names[:2] == ["Arbitrum One", "Arbitrum Nova"]
    assert names[2:] == ["Xai", "Xai Testnet v2"]


@pytest.mark.asyncio
async def test_fresh_snapshot_is_served_without_refetch():
    clock = FakeClock()
    registry = _registry([_catalog()], clock=clock)
    await registry.all()
    clock.now += 299
    await registry.list_names()
    await registry.find_by_id(660279)
    assert registry._client.calls == 1


@pytest.mark.asyncio
async def test_stale_snapshot_is_refetched_after_ttl():
    clock = FakeClock()
    registry = _registry([_catalog(), _catalog(mainnet=[XAI, LEGACY_FLAT])], clock=clock)
    assert len(await registry.all()) == 4
    clock.now += 301
    assert len(await registry.all()) == 5
    assert registry.loaded_at == clock.now


@pytest.mark.asyncio
async def test_first_load_failure_raises_and_counts():
    metrics = MetricsRecorder()
    registry = _registry([httpx.ConnectError("down")], metrics=metrics)
    with pytest.raises(CatalogUnavailableError):
        await registry.all()
    assert registry.snapshot is None
    assert metrics.snapshot()["catalog_refresh_failures"] == 1


@pytest.mark.asyncio
async def test_failed_refresh_serves_previous_snapshot():
    clock = FakeClock()
    metrics = MetricsRecorder()
    registry = _registry([_catalog(), MockResponse(500, None)], clock=clock, metrics=metrics)
    await registry.all()
    loaded_at = registry.loaded_at

    clock.now += 400
    record = await registry.find_by_name("xai")
    assert record is not None and record.chain_id == 660279
    # Not advanced, so the next read retries.
    assert registry.loaded_at == loaded_at
    assert registry.is_stale()
    snapshot = metrics.snapshot()
    assert snapshot["catalog_refreshes"] == 1
    assert snapshot["catalog_refresh_failures"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        MockResponse(404, {"error": "missing"}),
        MockResponse(200, ValueError("not json")),
        MockResponse(200, ["not", "an", "object"]),
        MockResponse(200, {"mainnet": {"not": "a list"}}),
    ],
)
async def test_malformed_catalog_adopts_nothing(response):
    registry = _registry([response])
    with pytest.raises(CatalogUnavailableError):
        await registry.ensure_fresh()
    assert registry.snapshot is None


@pytest.mark.asyncio
async def test_invalid_entries_are_skipped_and_counted(caplog):
    metrics = MetricsRecorder()
    broken = [
        {"chainId": 5, "name": "Broken Orbit", "rpcUrl": None},
        {"name": "No Id", "rpcUrl": "https://x"},
        {"chainId": "abc", "name": "Bad", "rpcUrl": "https://x"},
    ]
    registry = _registry([_catalog(mainnet=[*broken, XAI])], metrics=metrics)
    with caplog.at_level("WARNING"):
        chains = await registry.all()

    assert [record.name for record in chains] == ["Arbitrum One", "Arbitrum Nova", "Xai", "Xai Testnet v2"]
    assert metrics.snapshot()["catalog_skipped_entries"] == 3
    assert metrics.snapshot()["catalog_refreshes"] == 1
    assert sum("Skipping invalid catalog entry" in r.getMessage() for r in caplog.records) == 3


@pytest.mark.asyncio
async def test_canonical_chains_resolve_despite_broken_entry():
    registry = _registry([MockResponse(200, {"mainnet": [{"chainId": 5, "name": "Broken Orbit", "rpcUrl": None}]})])
    resolver = ChainResolver(registry, ArbitrumConfig())
    endpoint = await resolver.resolve("Arbitrum One")
    assert endpoint.kind is ResolutionKind.CATALOG
    assert endpoint.rpc_url == "https://arb1.arbitrum.io/rpc"


@pytest.mark.asyncio
async def test_missing_sections_are_tolerated():
    registry = _registry([MockResponse(200, {})])
    chains = await registry.all()
    assert [record.chain_id for record in chains] == [record.chain_id for record in CANONICAL_CHAINS]


@pytest.mark.asyncio
async def test_duplicate_chain_ids_keep_first_occurrence():
    duplicate_one = {"chainId": 42161, "name": "Impostor", "rpcUrl": "https://evil.example"}
    registry = _registry([_catalog(mainnet=[duplicate_one, XAI])])
    record = await registry.find_by_id(42161)
    assert record is not None
    assert record.name == "Arbitrum One"
    assert await registry.find_by_name("Impostor") is None


@pytest.mark.asyncio
async def test_find_by_name_order_exact_slug_substring():
    registry = _registry([_catalog()])
    assert (await registry.find_by_name("XAI")).name == "Xai"
    assert (await registry.find_by_name("  xai-testnet ")).name == "Xai Testnet v2"
    # Substring in either direction.
    assert (await registry.find_by_name("nova")).name == "Arbitrum Nova"
    assert (await registry.find_by_name("Xai mainnet chain")).name == "Xai"
    assert await registry.find_by_name("definitely-not-a-chain") is None


@pytest.mark.asyncio
async def test_ambiguous_fragment_returns_first_in_catalog_order():
    registry = _registry([_catalog()])
    assert (await registry.find_by_name("arbitrum")).name == "Arbitrum One"


@pytest.mark.asyncio
async def test_every_chain_id_round_trips():
    registry = _registry([_catalog(mainnet=[XAI, LEGACY_FLAT])])
    for record in await registry.all():
        found = await registry.find_by_id(record.chain_id)
        assert found is record


@pytest.mark.asyncio
async def test_list_names_sorted_and_search():
    registry = _registry([_catalog()])
    assert await registry.list_names() == ["Arbitrum Nova", "Arbitrum One", "Xai", "Xai Testnet v2"]
    assert [r.name for r in await registry.search("xai")] == ["Xai", "Xai Testnet v2"]
    assert [r.name for r in await registry.search("42170")] == ["Arbitrum Nova"]
    assert await registry.search("   ") == []


@pytest.mark.asyncio
async def test_invalidate_forces_reload():
    registry = _registry([_catalog()])
    await registry.all()
    registry.invalidate()
    await registry.all()
    assert registry._client.calls == 2


def test_legacy_flat_layout_is_parsed():
    record = ChainRecord.from_catalog(LEGACY_FLAT)
    assert record.rollup == "0x1111111111111111111111111111111111111111"
    assert record.sequencer_inbox == "0x2222222222222222222222222222222222222222"
    assert record.bridge == "0x3333333333333333333333333333333333333333"
    assert record.slug == ""


def test_nested_eth_bridge_wins_over_flat_keys():
    entry = dict(XAI, rollup="0x9999999999999999999999999999999999999999")
    record = ChainRecord.from_catalog(entry)
    assert record.rollup == XAI["ethBridge"]["rollup"]


def test_to_dict_is_camel_case():
    record = ChainRecord.from_catalog(XAI)
    payload = record.to_dict()
    assert payload["chainId"] == 660279
    assert payload["parentChainId"] == 42161
    assert payload["ethBridge"]["sequencerInbox"] == XAI["ethBridge"]["sequencerInbox"]
    assert payload["nativeCurrency"] == {"name": "Ether", "symbol": "ETH", "decimals": 18}
    assert "tokenBridge" not in payload
