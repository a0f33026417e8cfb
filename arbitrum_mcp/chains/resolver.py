"""
Turn a caller-supplied chain identifier into a concrete RPC endpoint.

Identifiers may be a raw http(s) URL, an exact chain name, a slug, or a name
fragment. Unknown identifiers are not an error here: they come back as a
fallback endpoint whose URL is the literal input, and the first real RPC call
against it reports the failure.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from arbitrum_mcp.chains.models import ChainRecord
from arbitrum_mcp.chains.registry import CatalogUnavailableError, ChainRegistry, default_registry
from arbitrum_mcp.config import ETHEREUM_CHAIN_ID, ArbitrumConfig, default_config

logger = logging.getLogger(__name__)


class MissingEndpointError(Exception):
    """Raised when no identifier was given and no default RPC URL is configured."""


class ResolutionKind(str, enum.Enum):
    URL = "url"
    CATALOG = "catalog"
    FALLBACK = "fallback"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ResolvedEndpoint:
    kind: ResolutionKind
    rpc_url: str
    literal: Optional[str] = None
    chain: Optional[ChainRecord] = None
    parent_rpc_url: Optional[str] = None
    sequencer_inbox: Optional[str] = None
    bridge: Optional[str] = None
    rollup: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.kind is ResolutionKind.FALLBACK

    @property
    def chain_name(self) -> Optional[str]:
        return self.chain.name if self.chain else None


def is_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


class ChainResolver:
    """Resolve identifiers against a chain registry; holds the session default URL."""

    def __init__(
        self,
        registry: ChainRegistry | None = None,
        config: ArbitrumConfig | None = None,
    ) -> None:
        self.registry = registry or default_registry
        self.config = config or default_config
        self._default_rpc_url: Optional[str] = self.config.default_rpc_url

    @property
    def default_rpc_url(self) -> Optional[str]:
        return self._default_rpc_url

    def set_default_rpc_url(self, rpc_url: str) -> None:
        self._default_rpc_url = rpc_url

    def clear_default_rpc_url(self) -> Optional[str]:
        previous = self._default_rpc_url
        self._default_rpc_url = None
        return previous

    def parent_rpc_url_for(self, record: ChainRecord) -> str:
        if record.parent_chain_id == ETHEREUM_CHAIN_ID:
            return self.config.ethereum_rpc_url
        return self.config.arbitrum_one_rpc_url

    async def lookup(self, identifier: str) -> Optional[ChainRecord]:
        """
        Return the catalog record for ``identifier`` or None.

        Raises:
            CatalogUnavailableError: when the catalog has never loaded successfully.
        """
        return await self.registry.find_by_name(identifier)

    def _from_record(self, record: ChainRecord, literal: str) -> ResolvedEndpoint:
        return ResolvedEndpoint(
            kind=ResolutionKind.CATALOG,
            rpc_url=record.rpc_url,
            literal=literal,
            chain=record,
            parent_rpc_url=self.parent_rpc_url_for(record),
            sequencer_inbox=record.sequencer_inbox,
            bridge=record.bridge,
            rollup=record.rollup,
        )

    async def resolve(self, identifier: Optional[str] = None) -> ResolvedEndpoint:
        """
        Resolve a URL, chain name, slug or name fragment to an endpoint.

        Raises:
            MissingEndpointError: if ``identifier`` is empty and no default is set.
        """
        if not identifier or not identifier.strip():
            if self._default_rpc_url:
                return ResolvedEndpoint(kind=ResolutionKind.DEFAULT, rpc_url=self._default_rpc_url)
            raise MissingEndpointError(
                "No RPC URL or chain name provided and no default RPC URL configured. "
                "Please set a default RPC URL or provide a chain name/RPC URL in the request."
            )

        if is_url(identifier):
            return ResolvedEndpoint(kind=ResolutionKind.URL, rpc_url=identifier, literal=identifier)

        try:
            record = await self.lookup(identifier)
        except CatalogUnavailableError:
            logger.warning("Chain catalog unavailable while resolving %r; using it as a URL", identifier)
            record = None

        if record is not None:
            logger.info("Resolved chain %r to RPC URL %s", identifier, record.rpc_url)
            return self._from_record(record, identifier)

        return ResolvedEndpoint(kind=ResolutionKind.FALLBACK, rpc_url=identifier, literal=identifier)


default_resolver = ChainResolver()
