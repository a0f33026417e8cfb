"""Session default RPC URL tools."""

from __future__ import annotations

import logging
from typing import Any, Dict

from arbitrum_mcp.chains import ChainResolver, default_resolver
from arbitrum_mcp.tools.validators import is_valid_rpc_url

logger = logging.getLogger(__name__)


async def set_rpc_url(rpc_url: str, *, resolver: ChainResolver = default_resolver) -> Dict[str, Any]:
    """
    Set the default RPC URL used when a tool call names no chain or URL.

    Args:
        rpc_url: http(s) URL of an Arbitrum node.
        resolver: Chain resolver holding the session default (override for testing).
    """
    if not is_valid_rpc_url(rpc_url):
        return {"error": "Invalid RPC URL; must start with http:// or https://."}
    rpc_url = rpc_url.strip()
    resolver.set_default_rpc_url(rpc_url)
    logger.info("Default RPC URL set to %s", rpc_url)
    return {"rpcUrl": rpc_url, "message": f"Default RPC URL set to: {rpc_url}"}


async def get_rpc_url(*, resolver: ChainResolver = default_resolver) -> Dict[str, Any]:
    current = resolver.default_rpc_url
    if not current:
        return {"rpcUrl": None, "message": "No default RPC URL configured"}
    return {"rpcUrl": current, "message": f"Current default RPC URL: {current}"}


async def clear_rpc_url(*, resolver: ChainResolver = default_resolver) -> Dict[str, Any]:
    previous = resolver.clear_default_rpc_url()
    if not previous:
        return {"cleared": None, "message": "No default RPC URL was configured"}
    logger.info("Default RPC URL cleared (was %s)", previous)
    return {"cleared": previous, "message": f"Cleared default RPC URL: {previous}"}
