"""Node-level tools: health, sync, peers and the arb_* namespace."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from arbitrum_mcp.chains import ChainResolver, default_resolver
from arbitrum_mcp.rpc import ArbitrumRpcError, default_client
from arbitrum_mcp.tools._common import ADMIN_API_HINT, resolve_endpoint, unsupported
from arbitrum_mcp.tools.validators import parse_block_number
from arbitrum_mcp.units import hex_to_int, to_hex

logger = logging.getLogger(__name__)

DEBUG_API_HINT = "This method typically requires access to a node's debug API."


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def node_health(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """
    Report node health via ``arb_getHealth``.

    Public RPCs rarely expose this; a failure is reported as status
    ``unavailable`` rather than as an error dict.
    """
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        raw = await client.fetch_health(endpoint.rpc_url)
    except ArbitrumRpcError as exc:
        logger.info("Health check unavailable on %s: %s", endpoint.rpc_url, exc)
        return {
            "status": "unavailable",
            "lastUpdated": _now_iso(),
            "error": f"Health check not supported on this RPC endpoint. {ADMIN_API_HINT}",
        }
    except Exception:
        logger.exception("Unexpected error fetching node health")
        return {"error": "Unexpected error while retrieving node health."}

    status = raw.get("status") if isinstance(raw, dict) else None
    return {"status": status or "unknown", "lastUpdated": _now_iso()}


async def sync_status(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """
    Summarize synchronization progress.

    Falls back to the current block number alone when ``eth_syncing`` is not
    available, and to zeros when the endpoint answers nothing at all.
    """
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        syncing = await client.fetch_syncing(endpoint.rpc_url)
        latest = await client.fetch_block_number(endpoint.rpc_url)
        if syncing is False or not isinstance(syncing, dict):
            return {
                "currentBlock": latest,
                "highestBlock": latest,
                "isSyncing": False,
                "syncProgress": 100,
            }
        current = hex_to_int(syncing.get("currentBlock"), default=0)
        highest = hex_to_int(syncing.get("highestBlock"), default=0)
        return {
            "currentBlock": current,
            "highestBlock": highest,
            "isSyncing": True,
            "syncProgress": (current / highest) * 100 if highest > 0 else 0,
        }
    except (ArbitrumRpcError, ValueError, TypeError) as exc:
        logger.info("Sync status unavailable on %s: %s", endpoint.rpc_url, exc)

    try:
        block_number = await client.fetch_block_number(endpoint.rpc_url)
    except (ArbitrumRpcError, ValueError, TypeError):
        return {
            "currentBlock": 0,
            "highestBlock": 0,
            "isSyncing": False,
            "syncProgress": 0,
            "error": f"Sync status not supported on this RPC endpoint. {DEBUG_API_HINT}",
        }
    return {
        "currentBlock": block_number,
        "highestBlock": block_number,
        "isSyncing": False,
        "syncProgress": 100,
        "error": "Sync status not supported on this RPC endpoint. Showing current block number only.",
    }


def _normalize_peer(peer: Any) -> Dict[str, Any]:
    if not isinstance(peer, dict):
        return {"id": None, "name": None, "caps": [], "network": None, "protocols": {}}
    return {
        "id": peer.get("id"),
        "name": peer.get("name"),
        "caps": peer.get("caps") or [],
        "network": peer.get("network"),
        "protocols": peer.get("protocols") or {},
    }


async def node_peers(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any] | List[Dict[str, Any]]:
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        raw = await client.fetch_peers(endpoint.rpc_url)
    except ArbitrumRpcError as exc:
        logger.info("Peer listing unavailable on %s: %s", endpoint.rpc_url, exc)
        return {"error": f"Peer information not supported on this RPC endpoint. {ADMIN_API_HINT}"}
    except Exception:
        logger.exception("Unexpected error fetching peers")
        return {"error": "Unexpected error while retrieving peers."}
    if not isinstance(raw, list):
        return []
    return [_normalize_peer(peer) for peer in raw]


async def arb_check_publisher_health(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        await client.call(endpoint.rpc_url, "arb_checkPublisherHealth")
    except ArbitrumRpcError as exc:
        return {
            "healthy": False,
            "error": f"Publisher health check failed or not supported on this RPC endpoint: {exc}",
        }
    return {"healthy": True}


async def arb_get_raw_block_metadata(
    from_block: Any = 0,
    to_block: Any = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any] | List[Dict[str, Any]]:
    """Fetch raw per-block metadata for an inclusive block range."""
    start = parse_block_number(from_block if from_block is not None else 0)
    end = parse_block_number(to_block) if to_block is not None else start
    if start is None or end is None:
        return {"error": "Invalid block range; block numbers must be non-negative integers."}
    if end < start:
        return {"error": "Invalid block range; toBlock must not be lower than fromBlock."}

    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        result = await client.call(endpoint.rpc_url, "arb_getRawBlockMetadata", [to_hex(start), to_hex(end)])
    except ArbitrumRpcError as exc:
        return {"error": unsupported("Raw block metadata", exc)}

    if not isinstance(result, list):
        return {"error": "Unexpected response format from arb_getRawBlockMetadata"}
    return [
        {
            "blockNumber": hex_to_int(item.get("blockNumber")),
            "metadata": item.get("metadata") or item.get("rawMetadata"),
        }
        for item in result
        if isinstance(item, dict)
    ]


async def arb_latest_validated(
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Any:
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        return await client.call(endpoint.rpc_url, "arb_latestValidated")
    except ArbitrumRpcError as exc:
        return {"error": unsupported("Latest validated state", exc)}
