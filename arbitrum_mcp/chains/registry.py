"""
Time-to-live cache over the Arbitrum chain catalog.

The snapshot combines the canonical Arbitrum chains (known constants) with the
Orbit chain list published by Offchain Labs. It is replaced wholesale on every
successful refresh so readers never observe a partially loaded catalog.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

import httpx

from arbitrum_mcp.chains.models import ChainRecord, EthBridge, NativeCurrency, TokenBridge
from arbitrum_mcp.config import ArbitrumConfig, default_config
from arbitrum_mcp.metrics import MetricsRecorder, default_metrics

logger = logging.getLogger(__name__)

ARBITRUM_ONE_CHAIN_ID = 42161
ARBITRUM_NOVA_CHAIN_ID = 42170

CANONICAL_CHAINS: Tuple[ChainRecord, ...] = (
    ChainRecord(
        chain_id=ARBITRUM_ONE_CHAIN_ID,
        name="Arbitrum One",
        slug="arbitrum-one",
        parent_chain_id=1,
        rpc_url="https://arb1.arbitrum.io/rpc",
        explorer_url="https://arbiscan.io/",
        native_currency=NativeCurrency(name="Ether", symbol="ETH", decimals=18),
        is_arbitrum=True,
        is_mainnet=True,
        is_custom=False,
        is_testnet=False,
        eth_bridge=EthBridge(
            bridge="0x8315177aB297bA92A06054cE80a67Ed4DBd7ed3a",
            inbox="0x4Dbd4fc535Ac27206064B68FfCf827b0A60BAB3f",
            outbox="0x0B9857ae2D4A3DBe74ffE1d7DF045bb7F96E4840",
            rollup="0x5eF0D09d1E6204141B4d37530808eD19f60FBa35",
            sequencer_inbox="0x1c479675ad559DC151F6Ec7ed3FbF8ceE79582B6",
        ),
        token_bridge=TokenBridge(
            parent_custom_gateway="0xcEe284F754E854890e311e3280b767F80797180d",
            parent_erc20_gateway="0xa3A7B6F88361F48403514059F1F16C8E78d60EeC",
            parent_gateway_router="0x72Ce9c846789fdB6fC1f34aC4AD25Dd9ef7031ef",
            child_custom_gateway="0x096760F208390250649E3e8763348E783AEF5562",
            child_erc20_gateway="0x09e9222E96E7B4AE2a407B98d48e330053351EEe",
            child_gateway_router="0x5288c571Fd7aD117beA99bF60FE0846C4E84F933",
        ),
    ),
    ChainRecord(
        chain_id=ARBITRUM_NOVA_CHAIN_ID,
        name="Arbitrum Nova",
        slug="arbitrum-nova",
        parent_chain_id=1,
        rpc_url="https://nova.arbitrum.io/rpc",
        explorer_url="https://nova.arbiscan.io/",
        native_currency=NativeCurrency(name="Ether", symbol="ETH", decimals=18),
        is_arbitrum=True,
        is_mainnet=True,
        is_custom=False,
        is_testnet=False,
        eth_bridge=EthBridge(
            bridge="0xC1Ebd02f738644983b6C4B2d440b8e77DdE276Bd",
            inbox="0xc4448b71118c9071Bcb9734A0EAc55D18A153949",
            outbox="0xD4B80C3D7240325D18E645B49e6535A3Bf95cc58",
            rollup="0xFb209827c58283535b744575e11953DCC4bEAD88",
            sequencer_inbox="0x211E1c4c7f1bF5351Ac850Ed10FD68CFfCF6c21b",
        ),
        token_bridge=TokenBridge(
            parent_custom_gateway="0x23122da8C581AA7E0d07A36Ff1f16F799650232f",
            parent_erc20_gateway="0xB2535b988dcE19f9D71dfB22dB6da744aCac21bf",
            parent_gateway_router="0xC840838Bc438d73C16c2f8b22D2Ce3669963cD48",
            child_custom_gateway="0xbf544970E6BD77b21C6492C281AB60d0770451F4",
            child_erc20_gateway="0xcF9bAb7e53DDe48A6DC4f286CB14e05298799257",
            child_gateway_router="0x21903d3F8176b1a0c17E953Cd896610Be9fFDFa8",
        ),
    ),
)


class CatalogUnavailableError(Exception):
    """Raised when the remote chain catalog cannot be fetched or parsed."""


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    chains: Tuple[ChainRecord, ...]
    loaded_at: float


def _parse_section(data: dict, key: str) -> Tuple[List[ChainRecord], int]:
    """Parse one catalog section, skipping entries that do not describe a usable chain."""
    raw = data.get(key)
    if raw is None:
        return [], 0
    if not isinstance(raw, list):
        raise CatalogUnavailableError(f"Catalog section {key!r} is not a list")
    records: List[ChainRecord] = []
    skipped = 0
    for entry in raw:
        try:
            records.append(ChainRecord.from_catalog(entry))
        except ValueError as exc:
            logger.warning("Skipping invalid catalog entry in %r: %s", key, exc)
            skipped += 1
    return records, skipped


def _dedupe(records: Iterable[ChainRecord]) -> Tuple[ChainRecord, ...]:
    seen: set[int] = set()
    unique: List[ChainRecord] = []
    for record in records:
        if record.chain_id in seen:
            logger.debug("Dropping duplicate catalog entry for chain id %s (%s)", record.chain_id, record.name)
            continue
        seen.add(record.chain_id)
        unique.append(record)
    return tuple(unique)


class ChainRegistry:
    """In-memory chain catalog with a time-to-live refresh policy."""

    def __init__(
        self,
        config: ArbitrumConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
        canonical_chains: Sequence[ChainRecord] = CANONICAL_CHAINS,
        metrics: MetricsRecorder | None = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self._clock = clock
        self._canonical = tuple(canonical_chains)
        self._metrics = metrics or default_metrics
        self._snapshot: Optional[RegistrySnapshot] = None

    @property
    def snapshot(self) -> Optional[RegistrySnapshot]:
        return self._snapshot

    @property
    def loaded_at(self) -> Optional[float]:
        return self._snapshot.loaded_at if self._snapshot else None

    def is_stale(self) -> bool:
        if self._snapshot is None or not self._snapshot.chains:
            return True
        return self._clock() - self._snapshot.loaded_at > self.config.catalog_ttl_seconds

    def invalidate(self) -> None:
        """Forget the current snapshot so the next read reloads."""
        self._snapshot = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.catalog_timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _fetch_catalog(self) -> Tuple[Tuple[ChainRecord, ...], int]:
        """Return the merged chain tuple and the number of skipped catalog entries."""
        client = await self._get_client()
        logger.info("Fetching chain catalog from %s", self.config.chains_data_url)
        try:
            response = await client.get(self.config.chains_data_url, timeout=self.config.catalog_timeout)
        except httpx.HTTPError as exc:
            raise CatalogUnavailableError("Unable to fetch chains data") from exc
        if response.status_code >= 400:
            raise CatalogUnavailableError(f"Unable to fetch chains data (HTTP {response.status_code})")
        try:
            data: Any = response.json()
        except ValueError as exc:
            raise CatalogUnavailableError("Chains data is not valid JSON") from exc
        if not isinstance(data, dict):
            raise CatalogUnavailableError("Chains data has an unexpected shape")

        mainnet, mainnet_skipped = _parse_section(data, "mainnet")
        testnet, testnet_skipped = _parse_section(data, "testnet")
        skipped = mainnet_skipped + testnet_skipped
        chains = _dedupe([*self._canonical, *mainnet, *testnet])
        logger.info(
            "Loaded %d chains (%d core + %d orbit: %d mainnet, %d testnet; %d skipped)",
            len(chains),
            len(self._canonical),
            len(mainnet) + len(testnet),
            len(mainnet),
            len(testnet),
            skipped,
        )
        return chains, skipped

    async def ensure_fresh(self) -> RegistrySnapshot:
        """
        Reload the catalog when it was never loaded or its TTL has elapsed.

        Two callers hitting a stale snapshot at the same time may both reload;
        the result is the same and the last swap wins.

        Raises:
            CatalogUnavailableError: if the fetch fails and no previous snapshot exists.
        """
        if not self.is_stale():
            assert self._snapshot is not None
            return self._snapshot

        try:
            chains, skipped = await self._fetch_catalog()
        except CatalogUnavailableError:
            self._metrics.record_catalog_refresh(success=False)
            if self._snapshot is not None and self._snapshot.chains:
                logger.warning("Chain catalog refresh failed; serving previous snapshot")
                return self._snapshot
            raise

        self._snapshot = RegistrySnapshot(chains=chains, loaded_at=self._clock())
        self._metrics.record_catalog_refresh(success=True, skipped_entries=skipped)
        return self._snapshot

    async def all(self) -> List[ChainRecord]:
        snapshot = await self.ensure_fresh()
        return list(snapshot.chains)

    async def find(self, predicate: Callable[[ChainRecord], bool]) -> Optional[ChainRecord]:
        for record in await self.all():
            if predicate(record):
                return record
        return None

    async def find_by_id(self, chain_id: int) -> Optional[ChainRecord]:
        return await self.find(lambda record: record.chain_id == chain_id)

    async def find_by_name(self, name: str) -> Optional[ChainRecord]:
        """
        Look a chain up by exact name, then exact slug, then substring.

        All comparisons are case-insensitive. The substring step matches in
        either direction and returns the first record in catalog order, so an
        ambiguous fragment can land on an unintended chain.
        """
        query = name.strip().lower()
        if not query:
            return None
        chains = await self.all()
        for record in chains:
            if record.name.lower() == query:
                return record
        for record in chains:
            if record.slug and record.slug.lower() == query:
                return record
        for record in chains:
            candidate = record.name.lower()
            if query in candidate or candidate in query:
                return record
        return None

    async def list_names(self) -> List[str]:
        return sorted(record.name for record in await self.all())

    async def search(self, text: str) -> List[ChainRecord]:
        query = text.strip().lower()
        if not query:
            return []
        return [
            record
            for record in await self.all()
            if query in record.name.lower()
            or (record.slug and query in record.slug.lower())
            or str(record.chain_id) == query
        ]


default_registry = ChainRegistry()
