"""JSON-RPC client for Arbitrum nodes."""

from .client import (
    ArbitrumRpcClient,
    ArbitrumRpcError,
    EndpointUnreachableError,
    RpcError,
    UnsupportedMethodError,
    default_client,
)

__all__ = [
    "ArbitrumRpcClient",
    "ArbitrumRpcError",
    "RpcError",
    "UnsupportedMethodError",
    "EndpointUnreachableError",
    "default_client",
]
