"""Shared validation helpers for Arbitrum MCP tools."""

from __future__ import annotations

import re
from typing import Any, Optional

# 20-byte account/contract address, hex with 0x prefix (checksum casing not enforced).
ADDRESS_REGEX = re.compile(r"^0x[0-9a-fA-F]{40}$")
TX_HASH_REGEX = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_valid_address(address: Optional[str]) -> bool:
    """Basic format validation for EVM addresses."""
    if not address or not isinstance(address, str):
        return False
    return bool(ADDRESS_REGEX.fullmatch(address.strip()))


def is_valid_tx_hash(tx_hash: Optional[str]) -> bool:
    if not tx_hash or not isinstance(tx_hash, str):
        return False
    return bool(TX_HASH_REGEX.fullmatch(tx_hash.strip()))


def is_valid_rpc_url(url: Optional[str]) -> bool:
    if not url or not isinstance(url, str):
        return False
    stripped = url.strip()
    return stripped.startswith("http://") or stripped.startswith("https://")


def parse_block_number(value: Any) -> Optional[int]:
    """Accept ints, decimal strings and 0x-hex strings; reject negatives and bools."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError:
            return None
        return parsed if parsed >= 0 else None
    return None
