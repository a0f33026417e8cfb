"""Minimal live sanity checks for the Arbitrum MCP tools against public endpoints."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from arbitrum_mcp.chains import default_registry  # noqa: E402
from arbitrum_mcp.rpc import default_client  # noqa: E402
from arbitrum_mcp.tools import (  # noqa: E402
    arbos_version,
    chain_info,
    comprehensive_chain_status,
    gas_status,
    get_balance_ether,
    get_rollup_address,
    is_contract,
    list_chains,
    search_chains,
    sync_status,
)

# Chain to exercise; any catalog name, slug or RPC URL works.
SAMPLE_CHAIN = os.getenv("ARBITRUM_SAMPLE_CHAIN", "Arbitrum One")
# ArbSys precompile exists on every Arbitrum chain, so it is always a contract.
SAMPLE_ADDRESS = os.getenv("ARBITRUM_SAMPLE_ADDRESS", "0x0000000000000000000000000000000000000064")
# Opt-in to the composite status check (scans parent-chain logs, can be slow).
RUN_STATUS = os.getenv("RUN_STATUS_SANITY", "false").lower() in {"1", "true", "yes"}


async def main() -> None:
    try:
        chains = await list_chains()
        print("Chains:", chains.get("count", chains))
        print("Search 'xai':", await search_chains("xai"))
        print("Chain info:", await chain_info(SAMPLE_CHAIN))
        print("Rollup address:", await get_rollup_address(SAMPLE_CHAIN))

        print("ArbOS version:", await arbos_version(chain_name=SAMPLE_CHAIN))
        print("Gas status:", await gas_status(chain_name=SAMPLE_CHAIN))
        print("Sync status:", await sync_status(chain_name=SAMPLE_CHAIN))
        print("Balance:", await get_balance_ether(SAMPLE_ADDRESS, chain_name=SAMPLE_CHAIN))
        print("Is contract:", await is_contract(SAMPLE_ADDRESS, chain_name=SAMPLE_CHAIN))

        if RUN_STATUS:
            print("Comprehensive status:", await comprehensive_chain_status(chain_name=SAMPLE_CHAIN))
    finally:
        await default_client.aclose()
        await default_registry.aclose()


if __name__ == "__main__":
    asyncio.run(main())
