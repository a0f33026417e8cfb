"""
Passthroughs for the ``arbtrace_*`` and ``arbdebug_*`` namespaces.

These methods are served only by archive or debug-enabled Nitro nodes. The
node's answer is returned as-is; failures come back in-band next to a null
payload so a caller can tell "unsupported here" from "empty result".
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from arbitrum_mcp.chains import ChainResolver, default_resolver
from arbitrum_mcp.rpc import ArbitrumRpcError, default_client
from arbitrum_mcp.tools._common import resolve_endpoint, unsupported
from arbitrum_mcp.tools.validators import is_valid_tx_hash, parse_block_number
from arbitrum_mcp.units import to_hex

logger = logging.getLogger(__name__)

DEFAULT_TRACE_TYPES = ["trace"]
DEFAULT_BLOCK = "latest"
INVALID_TX_HASH = "Invalid transaction hash; expected 0x followed by 64 hex characters."


def _trace_types(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return list(DEFAULT_TRACE_TYPES)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return None
    return value or list(DEFAULT_TRACE_TYPES)


async def _trace(
    label: str,
    method: str,
    params: List[Any],
    chain_name: Optional[str],
    rpc_url: Optional[str],
    resolver: ChainResolver,
    client,
) -> Dict[str, Any]:
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        traces = await client.call(endpoint.rpc_url, method, params)
    except ArbitrumRpcError as exc:
        logger.info("%s failed on %s: %s", method, endpoint.rpc_url, exc)
        return {"traces": None, "error": unsupported(label, exc)}
    return {"traces": traces}


async def arbtrace_call(
    call_args: Dict[str, Any],
    trace_types: Optional[List[str]] = None,
    block_num_or_hash: Optional[str] = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """Trace a call without creating a transaction."""
    if not isinstance(call_args, dict):
        return {"error": "callArgs must be an object."}
    types = _trace_types(trace_types)
    if types is None:
        return {"error": "traceTypes must be a list of strings."}
    return await _trace(
        "Trace call",
        "arbtrace_call",
        [call_args, types, block_num_or_hash or DEFAULT_BLOCK],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def arbtrace_call_many(
    calls: List[Any],
    block_num_or_hash: Optional[str] = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not isinstance(calls, list):
        return {"error": "calls must be a list."}
    return await _trace(
        "Trace callMany",
        "arbtrace_callMany",
        [calls, block_num_or_hash or DEFAULT_BLOCK],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def arbtrace_replay_block_transactions(
    block_num_or_hash: str,
    trace_types: Optional[List[str]] = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not block_num_or_hash:
        return {"error": "blockNumOrHash is required."}
    types = _trace_types(trace_types)
    if types is None:
        return {"error": "traceTypes must be a list of strings."}
    return await _trace(
        "Trace replayBlockTransactions",
        "arbtrace_replayBlockTransactions",
        [block_num_or_hash, types],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def arbtrace_replay_transaction(
    tx_hash: str,
    trace_types: Optional[List[str]] = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not is_valid_tx_hash(tx_hash):
        return {"error": INVALID_TX_HASH}
    types = _trace_types(trace_types)
    if types is None:
        return {"error": "traceTypes must be a list of strings."}
    return await _trace(
        "Trace replayTransaction",
        "arbtrace_replayTransaction",
        [tx_hash.strip(), types],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def arbtrace_transaction(
    tx_hash: str,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not is_valid_tx_hash(tx_hash):
        return {"error": INVALID_TX_HASH}
    return await _trace(
        "Trace transaction",
        "arbtrace_transaction",
        [tx_hash.strip()],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def arbtrace_get(
    tx_hash: str,
    path: List[str],
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """Fetch the trace at ``path`` (trace address indices) within a transaction."""
    if not is_valid_tx_hash(tx_hash):
        return {"error": INVALID_TX_HASH}
    if not isinstance(path, list):
        return {"error": "path must be a list."}
    return await _trace(
        "Trace get",
        "arbtrace_get",
        [tx_hash.strip(), path],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def arbtrace_block(
    block_num_or_hash: str,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not block_num_or_hash:
        return {"error": "blockNumOrHash is required."}
    return await _trace(
        "Trace block",
        "arbtrace_block",
        [block_num_or_hash],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def arbtrace_filter(
    filter_spec: Dict[str, Any],
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not isinstance(filter_spec, dict):
        return {"error": "filter must be an object."}
    return await _trace(
        "Trace filter",
        "arbtrace_filter",
        [filter_spec],
        chain_name,
        rpc_url,
        resolver,
        client,
    )


async def arbdebug_validate_message_number(
    msg_num: Any,
    full: bool = False,
    module_root: Optional[str] = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """Ask a debug-enabled node to re-validate one message."""
    parsed = parse_block_number(msg_num)
    if parsed is None:
        return {"error": "msgNum must be a non-negative integer."}
    params: List[Any] = [to_hex(parsed), bool(full)]
    if module_root:
        params.append(module_root)

    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        result = await client.call(endpoint.rpc_url, "arbdebug_validateMessageNumber", params)
    except ArbitrumRpcError as exc:
        return {"valid": False, "error": unsupported("Validate message number", exc)}

    result = result if isinstance(result, dict) else {}
    return {
        "valid": bool(result.get("valid", True)),
        "latency": result.get("latency"),
        "globalState": result.get("globalState"),
    }


async def arbdebug_validation_inputs_at(
    msg_num: Any,
    target: Optional[str] = None,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    parsed = parse_block_number(msg_num)
    if parsed is None:
        return {"error": "msgNum must be a non-negative integer."}
    params: List[Any] = [to_hex(parsed)]
    if target:
        params.append(target)

    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        inputs = await client.call(endpoint.rpc_url, "arbdebug_validationInputsAt", params)
    except ArbitrumRpcError as exc:
        return {"inputs": None, "error": unsupported("Validation inputs", exc)}
    return {"inputs": inputs}
