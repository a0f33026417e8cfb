"""
Thin JSON-RPC client for Arbitrum Nitro / Orbit nodes.

One shared ``httpx.AsyncClient`` serves every endpoint; the target URL is
passed per call because the tool layer resolves it per request. Transport and
protocol failures are mapped to internal exceptions that the tool layer turns
into safe, user-facing messages.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from arbitrum_mcp.config import ArbitrumConfig, default_config
from arbitrum_mcp.units import to_hex

logger = logging.getLogger(__name__)

METHOD_NOT_FOUND_CODE = -32601
_UNSUPPORTED_MARKERS = (
    "method not found",
    "does not exist",
    "not available",
    "not supported",
    "unsupported method",
)


class ArbitrumRpcError(Exception):
    """Base exception for JSON-RPC failures."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class RpcError(ArbitrumRpcError):
    """Raised when the node answers with an error payload or HTTP error."""


class UnsupportedMethodError(RpcError):
    """Raised when the node explicitly rejects a method (e.g. admin/debug namespaces)."""


class EndpointUnreachableError(ArbitrumRpcError):
    """Raised when the endpoint cannot be reached at all."""


def _is_unsupported(code: Any, message: str) -> bool:
    if code == METHOD_NOT_FOUND_CODE:
        return True
    lowered = message.lower()
    return any(marker in lowered for marker in _UNSUPPORTED_MARKERS)


class ArbitrumRpcClient:
    """Async JSON-RPC client for the Arbitrum node surface."""

    def __init__(
        self,
        config: ArbitrumConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self._ids = itertools.count(1)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _process_response(self, response: httpx.Response, method: str) -> Any:
        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            message = f"HTTP {response.status_code}"
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                detail = data["error"].get("message")
                if isinstance(detail, str) and detail:
                    message = f"{message}: {detail}"
            raise RpcError(message, status_code=response.status_code)

        if not isinstance(data, dict):
            raise RpcError("Unexpected response from node.", status_code=response.status_code)

        error = data.get("error")
        if error:
            code: Optional[int] = None
            message = str(error)
            if isinstance(error, dict):
                raw_code = error.get("code")
                code = raw_code if isinstance(raw_code, int) else None
                message = str(error.get("message") or "Unknown RPC error")
            if _is_unsupported(code, message):
                raise UnsupportedMethodError(
                    f"RPC Error: {message}", code=code, status_code=response.status_code
                )
            raise RpcError(f"RPC Error: {message}", code=code, status_code=response.status_code)

        return data.get("result")

    async def call(self, rpc_url: str, method: str, params: Optional[List[Any]] = None) -> Any:
        """POST a single JSON-RPC request and return its ``result``."""
        client = await self._get_client()
        payload: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params if params is not None else [],
        }
        logger.debug("rpc call method=%s url=%s", method, rpc_url)
        try:
            response = await client.post(rpc_url, json=payload)
        except httpx.RequestError as exc:
            logger.warning("RPC endpoint unreachable for method %s via %s", method, rpc_url)
            raise EndpointUnreachableError(f"Endpoint unreachable: {rpc_url}") from exc
        except httpx.InvalidURL as exc:
            raise EndpointUnreachableError(f"Invalid endpoint URL: {rpc_url}") from exc
        return self._process_response(response, method)

    async def fetch_block_number(self, rpc_url: str) -> int:
        """Return the latest block height."""
        return int(await self.call(rpc_url, "eth_blockNumber"), 16)

    async def fetch_syncing(self, rpc_url: str) -> Any:
        """Return ``False`` or the node's sync progress object."""
        return await self.call(rpc_url, "eth_syncing")

    async def fetch_gas_price(self, rpc_url: str) -> int:
        return int(await self.call(rpc_url, "eth_gasPrice"), 16)

    async def fetch_balance(self, rpc_url: str, address: str, block: str = "latest") -> str:
        """Return the raw hex balance in wei."""
        return await self.call(rpc_url, "eth_getBalance", [address, block])

    async def fetch_transaction_count(self, rpc_url: str, address: str, block: str = "latest") -> int:
        return int(await self.call(rpc_url, "eth_getTransactionCount", [address, block]), 16)

    async def fetch_code(self, rpc_url: str, address: str, block: str = "latest") -> str:
        return await self.call(rpc_url, "eth_getCode", [address, block])

    async def fetch_transaction(self, rpc_url: str, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self.call(rpc_url, "eth_getTransactionByHash", [tx_hash])

    async def fetch_transaction_receipt(self, rpc_url: str, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self.call(rpc_url, "eth_getTransactionReceipt", [tx_hash])

    async def fetch_block(self, rpc_url: str, block: int | str = "latest", *, full: bool = False) -> Any:
        """Fetch a block by number (int) or tag ("latest")."""
        tag = to_hex(block) if isinstance(block, int) else block
        return await self.call(rpc_url, "eth_getBlockByNumber", [tag, full])

    async def fetch_logs(
        self,
        rpc_url: str,
        *,
        address: str,
        topics: List[Any],
        from_block: int,
        to_block: int,
    ) -> List[Dict[str, Any]]:
        """Fetch event logs for one contract over an inclusive block range."""
        result = await self.call(
            rpc_url,
            "eth_getLogs",
            [
                {
                    "address": address,
                    "topics": topics,
                    "fromBlock": to_hex(from_block),
                    "toBlock": to_hex(to_block),
                }
            ],
        )
        return result if isinstance(result, list) else []

    async def eth_call(self, rpc_url: str, to: str, data: str, block: str = "latest") -> str:
        return await self.call(rpc_url, "eth_call", [{"to": to, "data": data}, block])

    async def fetch_health(self, rpc_url: str) -> Any:
        return await self.call(rpc_url, "arb_getHealth")

    async def fetch_version(self, rpc_url: str) -> Any:
        return await self.call(rpc_url, "arb_getVersion")

    async def fetch_peers(self, rpc_url: str) -> Any:
        return await self.call(rpc_url, "admin_peers")


default_client = ArbitrumRpcClient()
