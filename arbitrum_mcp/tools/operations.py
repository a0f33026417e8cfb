"""Maintenance, Timeboost express lane and auctioneer operations."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from arbitrum_mcp.chains import ChainResolver, default_resolver
from arbitrum_mcp.rpc import ArbitrumRpcError, default_client
from arbitrum_mcp.tools._common import resolve_endpoint, unsupported
from arbitrum_mcp.units import hex_to_int

logger = logging.getLogger(__name__)

MAINTENANCE_UNKNOWN = -1


async def maintenance_status(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """Seconds since the node last ran maintenance, or -1 when unknown."""
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        raw = await client.call(endpoint.rpc_url, "maintenance_secondsSinceLastMaintenance")
    except ArbitrumRpcError as exc:
        return {
            "secondsSinceLastMaintenance": MAINTENANCE_UNKNOWN,
            "error": unsupported("Maintenance status", exc),
        }
    seconds = hex_to_int(raw)
    if seconds is None:
        return {
            "secondsSinceLastMaintenance": MAINTENANCE_UNKNOWN,
            "error": "Unexpected response from maintenance_secondsSinceLastMaintenance",
        }
    return {"secondsSinceLastMaintenance": seconds}


async def _submit(label: str, method: str, params: list, chain_name, rpc_url, resolver, client) -> Dict[str, Any]:
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        await client.call(endpoint.rpc_url, method, params)
    except ArbitrumRpcError as exc:
        logger.info("%s failed on %s: %s", method, endpoint.rpc_url, exc)
        return {"success": False, "error": unsupported(label, exc)}
    logger.info("%s accepted by %s", method, endpoint.rpc_url)
    return {"success": True}


async def maintenance_trigger(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    return await _submit("Trigger maintenance", "maintenance_trigger", [], chain_name, rpc_url, resolver, client)


async def timeboost_send_express_lane_transaction(
    submission: Dict[str, Any],
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """Forward a signed express lane submission to the sequencer."""
    if not isinstance(submission, dict):
        return {"error": "submission must be an object."}
    return await _submit(
        "Express lane transaction",
        "timeboost_sendExpressLaneTransaction",
        [submission],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def auctioneer_submit_auction_resolution_transaction(
    transaction: Dict[str, Any],
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not isinstance(transaction, dict):
        return {"error": "transaction must be an object."}
    return await _submit(
        "Auction resolution transaction",
        "auctioneer_submitAuctionResolutionTransaction",
        [transaction],
        chain_name,
        rpc_url,
        resolver,
        client,
    )
