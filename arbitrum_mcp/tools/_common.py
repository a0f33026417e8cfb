"""Endpoint resolution and error shaping shared by the tool modules."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Union

from arbitrum_mcp.chains import ChainResolver, MissingEndpointError, ResolvedEndpoint
from arbitrum_mcp.rpc import ArbitrumRpcError, EndpointUnreachableError, UnsupportedMethodError

logger = logging.getLogger(__name__)

ADMIN_API_HINT = "This method typically requires access to a node's admin API."


async def resolve_endpoint(
    resolver: ChainResolver,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
) -> Union[ResolvedEndpoint, Dict[str, str]]:
    """
    Resolve the caller's target; an explicit ``rpc_url`` wins over ``chain_name``.

    Returns an error dict instead of raising when nothing was given and no
    session default is configured.
    """
    try:
        return await resolver.resolve(rpc_url or chain_name)
    except MissingEndpointError as exc:
        return {"error": str(exc)}


def rpc_error(exc: ArbitrumRpcError, endpoint: Optional[ResolvedEndpoint] = None) -> Dict[str, str]:
    """Map an RPC failure to a safe, user-facing error dict."""
    if isinstance(exc, EndpointUnreachableError):
        if endpoint is not None and endpoint.is_fallback:
            return {
                "error": f"Unknown chain or unreachable RPC URL: {endpoint.literal}. "
                "Use list_chains to see known chain names."
            }
        return {"error": "Node unreachable"}
    if isinstance(exc, UnsupportedMethodError):
        return {"error": f"Method not supported on this RPC endpoint: {exc}"}
    return {"error": str(exc)}


def unsupported(label: str, exc: Exception) -> str:
    return f"{label} not supported on this RPC endpoint: {exc}"
