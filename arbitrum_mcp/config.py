"""
Configuration helpers for the Arbitrum MCP server.

This module centralizes endpoint defaults, HTTP timeouts, chain catalog
settings, and the scan windows used by the status checks. Everything can be
overridden from the environment; nothing secret is read or stored.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

# Default connection settings
DEFAULT_RPC_URL: Optional[str] = os.getenv("ARBITRUM_MCP_DEFAULT_RPC_URL") or None


def _load_float(env_var: str, default: float) -> float:
    raw_value = os.getenv(env_var)
    if raw_value:
        try:
            return float(raw_value)
        except ValueError:
            return default
    return default


def _load_timeout() -> float:
    return _load_float("ARBITRUM_MCP_HTTP_TIMEOUT", 30.0)


DEFAULT_TIMEOUT = _load_timeout()

# Chain catalog
CHAINS_DATA_URL = os.getenv(
    "ARBITRUM_MCP_CHAINS_DATA_URL",
    "https://raw.githubusercontent.com/OffchainLabs/arbitrum-token-bridge/master/"
    "packages/arb-token-bridge-ui/src/util/orbitChainsData.json",
)
CATALOG_TTL_SECONDS = _load_float("ARBITRUM_MCP_CATALOG_TTL", 300.0)
CATALOG_TIMEOUT = _load_float("ARBITRUM_MCP_CATALOG_TIMEOUT", 10.0)

# Parent chain endpoints used when a chain is resolved from the catalog
ETHEREUM_RPC_URL = os.getenv("ARBITRUM_MCP_ETHEREUM_RPC_URL", "https://eth.llamarpc.com")
ARBITRUM_ONE_RPC_URL = os.getenv("ARBITRUM_MCP_ARBITRUM_ONE_RPC_URL", "https://arb1.arbitrum.io/rpc")
ETHEREUM_CHAIN_ID = 1

# Status checks
BATCH_SCAN_WINDOW = 10_000
ASSERTION_SCAN_WINDOW = 50_000
NO_BATCH_SENTINEL_SECONDS = 999_999
ARBOS_VERSION_OFFSET = 55

LOG_LEVEL = os.getenv("ARBITRUM_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("ARBITRUM_MCP_LOG_FORMAT", "json")  # json or plain


@dataclass(slots=True)
class ArbitrumConfig:
    """Runtime configuration for chain lookups and node access."""

    default_rpc_url: Optional[str] = DEFAULT_RPC_URL
    timeout: float = DEFAULT_TIMEOUT
    chains_data_url: str = CHAINS_DATA_URL
    catalog_ttl_seconds: float = CATALOG_TTL_SECONDS
    catalog_timeout: float = CATALOG_TIMEOUT
    ethereum_rpc_url: str = ETHEREUM_RPC_URL
    arbitrum_one_rpc_url: str = ARBITRUM_ONE_RPC_URL
    batch_scan_window: int = BATCH_SCAN_WINDOW
    assertion_scan_window: int = ASSERTION_SCAN_WINDOW
    no_batch_sentinel_seconds: int = NO_BATCH_SENTINEL_SECONDS
    arbos_version_offset: int = ARBOS_VERSION_OFFSET
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT


default_config = ArbitrumConfig()
