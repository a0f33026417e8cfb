"""Account and transaction tools."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from arbitrum_mcp.chains import ChainResolver, default_resolver
from arbitrum_mcp.rpc import ArbitrumRpcError, default_client
from arbitrum_mcp.tools._common import resolve_endpoint, rpc_error
from arbitrum_mcp.tools.validators import is_valid_address, is_valid_tx_hash
from arbitrum_mcp.units import format_ether, hex_to_int

logger = logging.getLogger(__name__)

INVALID_ADDRESS = "Invalid address; expected 0x followed by 40 hex characters."
INVALID_TX_HASH = "Invalid transaction hash; expected 0x followed by 64 hex characters."


async def _fetch_wei(address: str, chain_name, rpc_url, resolver, client) -> int | Dict[str, Any]:
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        raw = await client.fetch_balance(endpoint.rpc_url, address.strip())
    except ArbitrumRpcError as exc:
        return rpc_error(exc, endpoint)
    except Exception:
        logger.exception("Unexpected error fetching balance for %s", address)
        return {"error": "Unexpected error while retrieving balance."}
    wei = hex_to_int(raw)
    if wei is None:
        return {"error": "Unexpected response from node."}
    return wei


async def get_balance(
    address: str,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """
    Return the native balance of ``address`` in wei.

    Args:
        address: 0x-prefixed 20-byte address.
        chain_name: Chain name, slug or fragment to resolve.
        rpc_url: Explicit RPC URL; wins over ``chain_name``.
    """
    if not is_valid_address(address):
        return {"error": INVALID_ADDRESS}
    wei = await _fetch_wei(address, chain_name, rpc_url, resolver, client)
    if isinstance(wei, dict):
        return wei
    return {"address": address.strip(), "balance": str(wei), "unit": "wei"}


async def get_balance_ether(
    address: str,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not is_valid_address(address):
        return {"error": INVALID_ADDRESS}
    wei = await _fetch_wei(address, chain_name, rpc_url, resolver, client)
    if isinstance(wei, dict):
        return wei
    return {"address": address.strip(), "balance": format_ether(wei), "unit": "ETH"}


def _normalize_transaction(tx: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "hash": tx.get("hash"),
        "nonce": hex_to_int(tx.get("nonce")),
        "blockHash": tx.get("blockHash"),
        "blockNumber": hex_to_int(tx.get("blockNumber")),
        "transactionIndex": hex_to_int(tx.get("transactionIndex")),
        "from": tx.get("from"),
        "to": tx.get("to"),
        "value": tx.get("value"),
        "gasPrice": tx.get("gasPrice"),
        "gas": hex_to_int(tx.get("gas")),
        "input": tx.get("input"),
    }


def _normalize_receipt(receipt: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "transactionHash": receipt.get("transactionHash"),
        "transactionIndex": hex_to_int(receipt.get("transactionIndex")),
        "blockHash": receipt.get("blockHash"),
        "blockNumber": hex_to_int(receipt.get("blockNumber")),
        "from": receipt.get("from"),
        "to": receipt.get("to"),
        "cumulativeGasUsed": hex_to_int(receipt.get("cumulativeGasUsed")),
        "gasUsed": hex_to_int(receipt.get("gasUsed")),
        "contractAddress": receipt.get("contractAddress"),
        "logs": receipt.get("logs") or [],
        "status": receipt.get("status"),
    }


async def get_transaction(
    tx_hash: str,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """Look up a transaction by hash; quantities are decoded to integers."""
    if not is_valid_tx_hash(tx_hash):
        return {"error": INVALID_TX_HASH}
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        tx = await client.fetch_transaction(endpoint.rpc_url, tx_hash.strip())
    except ArbitrumRpcError as exc:
        return rpc_error(exc, endpoint)
    except Exception:
        logger.exception("Unexpected error fetching transaction %s", tx_hash)
        return {"error": "Unexpected error while retrieving transaction."}
    if not isinstance(tx, dict):
        return {"error": f"Transaction {tx_hash} not found"}
    return _normalize_transaction(tx)


async def get_transaction_receipt(
    tx_hash: str,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    if not is_valid_tx_hash(tx_hash):
        return {"error": INVALID_TX_HASH}
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        receipt = await client.fetch_transaction_receipt(endpoint.rpc_url, tx_hash.strip())
    except ArbitrumRpcError as exc:
        return rpc_error(exc, endpoint)
    except Exception:
        logger.exception("Unexpected error fetching receipt for %s", tx_hash)
        return {"error": "Unexpected error while retrieving transaction receipt."}
    if not isinstance(receipt, dict):
        return {"error": f"Transaction receipt for {tx_hash} not found"}
    return _normalize_receipt(receipt)


async def is_contract(
    address: str,
    chain_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    *,
    resolver: ChainResolver = default_resolver,
    client=default_client,
) -> Dict[str, Any]:
    """Report whether ``address`` holds deployed code."""
    if not is_valid_address(address):
        return {"error": INVALID_ADDRESS}
    endpoint = await resolve_endpoint(resolver, chain_name, rpc_url)
    if isinstance(endpoint, dict):
        return endpoint
    try:
        code = await client.fetch_code(endpoint.rpc_url, address.strip())
    except ArbitrumRpcError as exc:
        return rpc_error(exc, endpoint)
    except Exception:
        logger.exception("Unexpected error fetching code for %s", address)
        return {"error": "Unexpected error while checking contract code."}
    return {"address": address.strip(), "isContract": bool(code) and code != "0x"}
