"""
Lightweight JSON-RPC surface for MCP-style tooling.

Maps tool names to their implementations together with the JSON schema shown
to clients. Argument names in schemas are camelCase; ``call_tool`` converts
them to the snake_case keyword arguments the tool functions take.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from arbitrum_mcp.tools import (
    arb_check_publisher_health,
    arb_get_raw_block_metadata,
    arb_latest_validated,
    arbdebug_validate_message_number,
    arbdebug_validation_inputs_at,
    arbos_version,
    arbtrace_block,
    arbtrace_call,
    arbtrace_call_many,
    arbtrace_filter,
    arbtrace_get,
    arbtrace_replay_block_transactions,
    arbtrace_replay_transaction,
    arbtrace_transaction,
    assertion_status,
    auctioneer_submit_auction_resolution_transaction,
    batch_posting_status,
    chain_info,
    clear_rpc_url,
    comprehensive_chain_status,
    gas_status,
    get_balance,
    get_balance_ether,
    get_rollup_address,
    get_rpc_url,
    get_transaction,
    get_transaction_receipt,
    is_contract,
    latest_block,
    list_chains,
    maintenance_status,
    maintenance_trigger,
    node_health,
    node_peers,
    search_chains,
    set_rpc_url,
    sync_status,
    timeboost_send_express_lane_transaction,
)
from arbitrum_mcp.tools.validators import ADDRESS_REGEX, TX_HASH_REGEX

logger = logging.getLogger(__name__)

ADDRESS_PATTERN = ADDRESS_REGEX.pattern
TX_HASH_PATTERN = TX_HASH_REGEX.pattern

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Every node-facing tool accepts one of these to pick its target.
TARGET_PROPERTIES: Dict[str, Any] = {
    "rpcUrl": {
        "type": "string",
        "description": "RPC URL of the Arbitrum node (optional if a default is set)",
    },
    "chainName": {
        "type": "string",
        "description": "Chain name (e.g. 'Xai', 'Arbitrum One'); resolved to its RPC URL",
    },
}
TARGET_PARAMS: Dict[str, str] = {
    "rpcUrl": "string (optional)",
    "chainName": "string (optional)",
}


def _schema(properties: Optional[Dict[str, Any]] = None, required: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {**TARGET_PROPERTIES, **(properties or {})},
        "required": required or [],
        "additionalProperties": False,
    }


def _block_ref(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


ToolCallable = Callable[..., Awaitable[Any]] | Callable[..., Any]


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    params: Dict[str, Any]
    input_schema: Dict[str, Any]
    callable: ToolCallable
    # snake_case argument name -> keyword the callable takes, where they differ
    arg_aliases: Dict[str, str] = field(default_factory=dict)


TOOL_REGISTRY: Dict[str, ToolDefinition] = {
    "set_rpc_url": ToolDefinition(
        name="set_rpc_url",
        description="Set the default RPC URL for subsequent requests.",
        params={"rpcUrl": "string"},
        input_schema={
            "type": "object",
            "properties": {"rpcUrl": {"type": "string", "description": "The RPC URL to set as default"}},
            "required": ["rpcUrl"],
            "additionalProperties": False,
        },
        callable=set_rpc_url,
    ),
    "get_rpc_url": ToolDefinition(
        name="get_rpc_url",
        description="Get the current default RPC URL.",
        params={},
        input_schema={"type": "object", "properties": {}, "required": [], "additionalProperties": False},
        callable=get_rpc_url,
    ),
    "clear_rpc_url": ToolDefinition(
        name="clear_rpc_url",
        description="Clear the default RPC URL.",
        params={},
        input_schema={"type": "object", "properties": {}, "required": [], "additionalProperties": False},
        callable=clear_rpc_url,
    ),
    "node_health": ToolDefinition(
        name="node_health",
        description="Check Arbitrum node health status (requires admin API access; may not work with public RPCs).",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=node_health,
    ),
    "sync_status": ToolDefinition(
        name="sync_status",
        description="Get node synchronization status (falls back to the current block number if unavailable).",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=sync_status,
    ),
    "node_peers": ToolDefinition(
        name="node_peers",
        description="Get information about connected peers (requires admin API access).",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=node_peers,
    ),
    "arbos_version": ToolDefinition(
        name="arbos_version",
        description="Get the ArbOS version running on an Arbitrum chain.",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=arbos_version,
    ),
    "latest_block": ToolDefinition(
        name="latest_block",
        description="Get the latest block information.",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=latest_block,
    ),
    "get_balance": ToolDefinition(
        name="get_balance",
        description="Get the native balance of an address in wei.",
        params={**TARGET_PARAMS, "address": "string"},
        input_schema=_schema({"address": {"type": "string", "pattern": ADDRESS_PATTERN}}, ["address"]),
        callable=get_balance,
    ),
    "get_balance_ether": ToolDefinition(
        name="get_balance_ether",
        description="Get the native balance of an address in ETH.",
        params={**TARGET_PARAMS, "address": "string"},
        input_schema=_schema({"address": {"type": "string", "pattern": ADDRESS_PATTERN}}, ["address"]),
        callable=get_balance_ether,
    ),
    "get_transaction": ToolDefinition(
        name="get_transaction",
        description="Get transaction details by hash.",
        params={**TARGET_PARAMS, "txHash": "string"},
        input_schema=_schema({"txHash": {"type": "string", "pattern": TX_HASH_PATTERN}}, ["txHash"]),
        callable=get_transaction,
    ),
    "get_transaction_receipt": ToolDefinition(
        name="get_transaction_receipt",
        description="Get a transaction receipt by hash.",
        params={**TARGET_PARAMS, "txHash": "string"},
        input_schema=_schema({"txHash": {"type": "string", "pattern": TX_HASH_PATTERN}}, ["txHash"]),
        callable=get_transaction_receipt,
    ),
    "is_contract": ToolDefinition(
        name="is_contract",
        description="Check whether an address holds contract code.",
        params={**TARGET_PARAMS, "address": "string"},
        input_schema=_schema({"address": {"type": "string", "pattern": ADDRESS_PATTERN}}, ["address"]),
        callable=is_contract,
    ),
    "list_chains": ToolDefinition(
        name="list_chains",
        description="List all known Arbitrum chains (core and Orbit).",
        params={},
        input_schema={"type": "object", "properties": {}, "required": [], "additionalProperties": False},
        callable=list_chains,
    ),
    "search_chains": ToolDefinition(
        name="search_chains",
        description="Search chains by name, slug or chain id.",
        params={"query": "string"},
        input_schema={
            "type": "object",
            "properties": {"query": {"type": "string", "minLength": 1}},
            "required": ["query"],
            "additionalProperties": False,
        },
        callable=search_chains,
    ),
    "chain_info": ToolDefinition(
        name="chain_info",
        description="Get catalog details for a chain: RPC, explorer, bridge and token gateway contracts.",
        params={"chainName": "string"},
        input_schema={
            "type": "object",
            "properties": {"chainName": TARGET_PROPERTIES["chainName"]},
            "required": ["chainName"],
            "additionalProperties": False,
        },
        callable=chain_info,
    ),
    "get_rollup_address": ToolDefinition(
        name="get_rollup_address",
        description="Get the rollup contract address of a chain.",
        params={"chainName": "string"},
        input_schema={
            "type": "object",
            "properties": {"chainName": TARGET_PROPERTIES["chainName"]},
            "required": ["chainName"],
            "additionalProperties": False,
        },
        callable=get_rollup_address,
    ),
    "arb_check_publisher_health": ToolDefinition(
        name="arb_check_publisher_health",
        description="Check the transaction publisher (sequencer feed) health.",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=arb_check_publisher_health,
    ),
    "arb_get_raw_block_metadata": ToolDefinition(
        name="arb_get_raw_block_metadata",
        description="Get raw block metadata for a block range.",
        params={**TARGET_PARAMS, "fromBlock": "integer (optional)", "toBlock": "integer (optional)"},
        input_schema=_schema(
            {
                "fromBlock": {"type": "integer", "minimum": 0},
                "toBlock": {"type": "integer", "minimum": 0},
            }
        ),
        callable=arb_get_raw_block_metadata,
    ),
    "arb_latest_validated": ToolDefinition(
        name="arb_latest_validated",
        description="Get the latest validated global state.",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=arb_latest_validated,
    ),
    "arbtrace_call": ToolDefinition(
        name="arbtrace_call",
        description="Trace a call without creating a transaction.",
        params={
            **TARGET_PARAMS,
            "callArgs": "object",
            "traceTypes": "array of strings (optional)",
            "blockNumOrHash": "string (optional)",
        },
        input_schema=_schema(
            {
                "callArgs": {"type": "object", "description": "Call arguments (from, to, data, ...)"},
                "traceTypes": {"type": "array", "items": {"type": "string"}},
                "blockNumOrHash": _block_ref("Block number, hash or tag (default latest)"),
            },
            ["callArgs"],
        ),
        callable=arbtrace_call,
    ),
    "arbtrace_callMany": ToolDefinition(
        name="arbtrace_callMany",
        description="Trace several calls in sequence on top of one block.",
        params={**TARGET_PARAMS, "calls": "array", "blockNumOrHash": "string (optional)"},
        input_schema=_schema(
            {
                "calls": {"type": "array", "description": "List of [callArgs, traceTypes] pairs"},
                "blockNumOrHash": _block_ref("Block number, hash or tag (default latest)"),
            },
            ["calls"],
        ),
        callable=arbtrace_call_many,
    ),
    "arbtrace_replayBlockTransactions": ToolDefinition(
        name="arbtrace_replayBlockTransactions",
        description="Replay every transaction in a block with tracing.",
        params={**TARGET_PARAMS, "blockNumOrHash": "string", "traceTypes": "array of strings (optional)"},
        input_schema=_schema(
            {
                "blockNumOrHash": _block_ref("Block number or hash"),
                "traceTypes": {"type": "array", "items": {"type": "string"}},
            },
            ["blockNumOrHash"],
        ),
        callable=arbtrace_replay_block_transactions,
    ),
    "arbtrace_replayTransaction": ToolDefinition(
        name="arbtrace_replayTransaction",
        description="Replay a transaction with tracing.",
        params={**TARGET_PARAMS, "txHash": "string", "traceTypes": "array of strings (optional)"},
        input_schema=_schema(
            {
                "txHash": {"type": "string", "pattern": TX_HASH_PATTERN},
                "traceTypes": {"type": "array", "items": {"type": "string"}},
            },
            ["txHash"],
        ),
        callable=arbtrace_replay_transaction,
    ),
    "arbtrace_transaction": ToolDefinition(
        name="arbtrace_transaction",
        description="Get all traces of a transaction.",
        params={**TARGET_PARAMS, "txHash": "string"},
        input_schema=_schema({"txHash": {"type": "string", "pattern": TX_HASH_PATTERN}}, ["txHash"]),
        callable=arbtrace_transaction,
    ),
    "arbtrace_get": ToolDefinition(
        name="arbtrace_get",
        description="Get one trace of a transaction by its trace address.",
        params={**TARGET_PARAMS, "txHash": "string", "path": "array of strings"},
        input_schema=_schema(
            {
                "txHash": {"type": "string", "pattern": TX_HASH_PATTERN},
                "path": {"type": "array", "items": {"type": "string"}},
            },
            ["txHash", "path"],
        ),
        callable=arbtrace_get,
    ),
    "arbtrace_block": ToolDefinition(
        name="arbtrace_block",
        description="Get all traces in a block.",
        params={**TARGET_PARAMS, "blockNumOrHash": "string"},
        input_schema=_schema({"blockNumOrHash": _block_ref("Block number or hash")}, ["blockNumOrHash"]),
        callable=arbtrace_block,
    ),
    "arbtrace_filter": ToolDefinition(
        name="arbtrace_filter",
        description="Get traces matching a filter.",
        params={**TARGET_PARAMS, "filter": "object"},
        input_schema=_schema(
            {"filter": {"type": "object", "description": "fromBlock, toBlock, fromAddress, toAddress, ..."}},
            ["filter"],
        ),
        callable=arbtrace_filter,
        arg_aliases={"filter": "filter_spec"},
    ),
    "arbdebug_validateMessageNumber": ToolDefinition(
        name="arbdebug_validateMessageNumber",
        description="Validate a message number (requires debug API access).",
        params={
            **TARGET_PARAMS,
            "msgNum": "integer",
            "full": "boolean (optional)",
            "moduleRoot": "string (optional)",
        },
        input_schema=_schema(
            {
                "msgNum": {"type": "integer", "minimum": 0},
                "full": {"type": "boolean"},
                "moduleRoot": {"type": "string"},
            },
            ["msgNum"],
        ),
        callable=arbdebug_validate_message_number,
    ),
    "arbdebug_validationInputsAt": ToolDefinition(
        name="arbdebug_validationInputsAt",
        description="Get validation inputs for a message number (requires debug API access).",
        params={**TARGET_PARAMS, "msgNum": "integer", "target": "string (optional)"},
        input_schema=_schema(
            {"msgNum": {"type": "integer", "minimum": 0}, "target": {"type": "string"}},
            ["msgNum"],
        ),
        callable=arbdebug_validation_inputs_at,
    ),
    "maintenance_status": ToolDefinition(
        name="maintenance_status",
        description="Get seconds since the node last ran maintenance.",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=maintenance_status,
    ),
    "maintenance_trigger": ToolDefinition(
        name="maintenance_trigger",
        description="Trigger node maintenance (requires maintenance API access).",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=maintenance_trigger,
    ),
    "timeboost_sendExpressLaneTransaction": ToolDefinition(
        name="timeboost_sendExpressLaneTransaction",
        description="Send a Timeboost express lane transaction submission.",
        params={**TARGET_PARAMS, "submission": "object"},
        input_schema=_schema({"submission": {"type": "object"}}, ["submission"]),
        callable=timeboost_send_express_lane_transaction,
    ),
    "auctioneer_submitAuctionResolutionTransaction": ToolDefinition(
        name="auctioneer_submitAuctionResolutionTransaction",
        description="Submit a Timeboost auction resolution transaction.",
        params={**TARGET_PARAMS, "transaction": "object"},
        input_schema=_schema({"transaction": {"type": "object"}}, ["transaction"]),
        callable=auctioneer_submit_auction_resolution_transaction,
    ),
    "batch_posting_status": ToolDefinition(
        name="batch_posting_status",
        description="Get batch posting status: time since the last batch and sequencer backlog.",
        params={
            **TARGET_PARAMS,
            "parentRpcUrl": "string (optional)",
            "sequencerInboxAddress": "string (optional)",
            "bridgeAddress": "string (optional)",
        },
        input_schema=_schema(
            {
                "parentRpcUrl": {"type": "string"},
                "sequencerInboxAddress": {"type": "string", "pattern": ADDRESS_PATTERN},
                "bridgeAddress": {"type": "string", "pattern": ADDRESS_PATTERN},
            }
        ),
        callable=batch_posting_status,
    ),
    "assertion_status": ToolDefinition(
        name="assertion_status",
        description="Get the latest created and confirmed assertions (rollup nodes).",
        params={**TARGET_PARAMS, "parentRpcUrl": "string (optional)", "rollupAddress": "string (optional)"},
        input_schema=_schema(
            {
                "parentRpcUrl": {"type": "string"},
                "rollupAddress": {"type": "string", "pattern": ADDRESS_PATTERN},
            }
        ),
        callable=assertion_status,
    ),
    "gas_status": ToolDefinition(
        name="gas_status",
        description="Get the current gas price.",
        params=dict(TARGET_PARAMS),
        input_schema=_schema(),
        callable=gas_status,
    ),
    "comprehensive_chain_status": ToolDefinition(
        name="comprehensive_chain_status",
        description="Get ArbOS version, batch posting, assertion and gas status in one call.",
        params={
            **TARGET_PARAMS,
            "parentRpcUrl": "string (optional)",
            "sequencerInboxAddress": "string (optional)",
            "bridgeAddress": "string (optional)",
            "rollupAddress": "string (optional)",
        },
        input_schema=_schema(
            {
                "parentRpcUrl": {"type": "string"},
                "sequencerInboxAddress": {"type": "string", "pattern": ADDRESS_PATTERN},
                "bridgeAddress": {"type": "string", "pattern": ADDRESS_PATTERN},
                "rollupAddress": {"type": "string", "pattern": ADDRESS_PATTERN},
            }
        ),
        callable=comprehensive_chain_status,
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return a simple list of available tools."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "params": tool.params,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


def normalize_arguments(params: Dict[str, Any], aliases: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Convert camelCase argument keys (``txHash``) to keyword names (``tx_hash``)."""
    aliases = aliases or {}
    normalized: Dict[str, Any] = {}
    for key, value in params.items():
        snake = _CAMEL_BOUNDARY.sub("_", key).lower()
        normalized[aliases.get(snake, snake)] = value
    return normalized


async def call_tool(tool_name: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """Dispatch to a tool by name."""
    params = params or {}
    tool = TOOL_REGISTRY.get(tool_name)
    if tool is None:
        return {"error": f"Unknown tool: {tool_name}"}

    # Only schema-declared arguments reach the tool; collaborators stay injectable in tests only.
    if not isinstance(params, dict) or not set(params) <= set(tool.input_schema.get("properties", {})):
        return {"error": "Invalid parameters."}

    # Tools already handle validation and error shaping.
    try:
        result = tool.callable(**normalize_arguments(params, tool.arg_aliases))
        if isinstance(result, Awaitable):
            return await result  # type: ignore[return-value]
        return result
    except TypeError:
        return {"error": "Invalid parameters."}
    except Exception:
        logger.exception("Unexpected error calling tool %s", tool_name)
        return {"error": "Unexpected error while calling tool."}
