"""Chain status tools: ArbOS version, latest block, batch/assertion/gas checks."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Optional

from arbitrum_mcp.chains import ChainResolver, ResolvedEndpoint, default_resolver
from arbitrum_mcp.rpc import ArbitrumRpcError, default_client
from arbitrum_mcp.status import ContractAddresses, StatusAggregator, default_aggregator
from arbitrum_mcp.tools._common import resolve_endpoint, rpc_error
from arbitrum_mcp.tools.validators import is_valid_address, is_valid_rpc_url

logger = logging.getLogger(__name__)


def _check_contracts(**addresses: Optional[str]) -> Optional[Dict[str, str]]:
    for field, value in addresses.items():
        if value and not is_valid_address(value):
            return {"error": f"Invalid {field}; expected 0x followed by 40 hex characters."}
    return None


def _check_parent_rpc_url(parent_rpc_url: Optional[str]) -> Optional[Dict[str, str]]:
    if parent_rpc_url and not is_valid_rpc_url(parent_rpc_url):
        return {"error": "Invalid parentRpcUrl; must start with http:// or https://."}
    return None


def _parent_rpc_url(resolver: ChainResolver, endpoint: ResolvedEndpoint, explicit: Optional[str]) -> str:
    # Same precedence as the composite status report.
    return explicit or endpoint.parent_rpc_url or resolver.config.arbitrum_one_rpc_url


async def arbos_version(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    aggregator: StatusAggregator = default_aggregator,
) -> Dict[str, Any]:
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    version = await aggregator.get_arbos_version(endpoint.rpc_url)
    return {"arbosVersion": version}


async def latest_block(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """Return the latest block header as reported by the node."""
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        block = await client.fetch_block(endpoint.rpc_url, "latest")
    except ArbitrumRpcError as exc:
        return rpc_error(exc, endpoint)
    except Exception:
        logger.exception("Unexpected error fetching latest block")
        return {"error": "Unexpected error while retrieving latest block."}
    if not isinstance(block, dict):
        return {"error": "Latest block not available."}
    return block


async def batch_posting_status(
    parent_rpc_url: Optional[str] = None,
    sequencer_inbox_address: Optional[str] = None,
    bridge_address: Optional[str] = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    aggregator: StatusAggregator = default_aggregator,
) -> Dict[str, Any]:
    """
    Report time since the last posted batch and the sequencer backlog.

    Contract addresses and the parent RPC default to the catalog entry when the
    chain resolves to one.
    """
    invalid = _check_parent_rpc_url(parent_rpc_url) or _check_contracts(
        sequencerInboxAddress=sequencer_inbox_address, bridgeAddress=bridge_address
    )
    if invalid:
        return invalid
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    report = await aggregator.get_batch_posting_status(
        endpoint.rpc_url,
        _parent_rpc_url(resolver, endpoint, parent_rpc_url),
        sequencer_inbox_address or endpoint.sequencer_inbox,
        bridge_address or endpoint.bridge,
    )
    return report.to_dict()


async def assertion_status(
    parent_rpc_url: Optional[str] = None,
    rollup_address: Optional[str] = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    aggregator: StatusAggregator = default_aggregator,
) -> Dict[str, Any]:
    invalid = _check_parent_rpc_url(parent_rpc_url) or _check_contracts(rollupAddress=rollup_address)
    if invalid:
        return invalid
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    report = await aggregator.get_assertion_status(
        _parent_rpc_url(resolver, endpoint, parent_rpc_url),
        rollup_address or endpoint.rollup,
    )
    return report.to_dict()


async def gas_status(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    aggregator: StatusAggregator = default_aggregator,
) -> Dict[str, Any]:
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    report = await aggregator.get_gas_status(endpoint.rpc_url)
    return report.to_dict()


async def _catalog_endpoint(resolver: ChainResolver, chain_name: str, rpc_url: str) -> Optional[ResolvedEndpoint]:
    # An explicit URL hides the chain; look the name up separately for its contracts.
    resolved = await resolver.resolve(chain_name)
    if resolved.chain is None:
        return None
    return dataclasses.replace(resolved, rpc_url=rpc_url)


async def comprehensive_chain_status(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    parent_rpc_url: Optional[str] = None,
    sequencer_inbox_address: Optional[str] = None,
    bridge_address: Optional[str] = None,
    rollup_address: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    aggregator: StatusAggregator = default_aggregator,
) -> Dict[str, Any]:
    """
    Run every status check for one chain and return the composite report.

    The report is always fully shaped; individual checks that fail carry an
    error summary instead of failing the whole call.
    """
    invalid = _check_parent_rpc_url(parent_rpc_url) or _check_contracts(
        sequencerInboxAddress=sequencer_inbox_address,
        bridgeAddress=bridge_address,
        rollupAddress=rollup_address,
    )
    if invalid:
        return invalid
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    if rpc_url and chain_name and endpoint.chain is None:
        endpoint = await _catalog_endpoint(resolver, chain_name, endpoint.rpc_url) or endpoint

    try:
        status = await aggregator.get_comprehensive_status(
            endpoint,
            parent_rpc_url,
            ContractAddresses(
                sequencer_inbox=sequencer_inbox_address,
                bridge=bridge_address,
                rollup=rollup_address,
            ),
            chain_name=chain_name,
        )
    except Exception:
        logger.exception("Unexpected error building chain status")
        return {"error": "Unexpected error while retrieving chain status."}
    return status.to_dict()
