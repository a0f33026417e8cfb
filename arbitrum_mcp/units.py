"""Quantity helpers: hex decoding and wei/gwei/ether rendering."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

WEI_PER_ETHER = 10**18
WEI_PER_GWEI = 10**9

_TRAILING_ZEROS = re.compile(r"\.?0+$")
_TWO_PLACES = Decimal("0.01")
_SIX_PLACES = Decimal("0.000001")


def hex_to_int(value: Any, *, default: Optional[int] = None) -> Optional[int]:
    """Decode a JSON-RPC quantity ("0x1a", 26, "26") into an int."""
    if value is None:
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            return int(text)
        except ValueError:
            return default
    return default


def to_hex(value: int) -> str:
    return hex(value)


def format_ether(wei: int) -> str:
    """
    Render a wei amount in ether.

    Whole amounts have no decimal point; anything else is rounded half up to
    six decimals with trailing zeros removed.
    """
    ether, remainder = divmod(wei, WEI_PER_ETHER)
    if remainder == 0:
        return str(ether)
    rounded = (Decimal(wei) / Decimal(WEI_PER_ETHER)).quantize(_SIX_PLACES, rounding=ROUND_HALF_UP)
    return _TRAILING_ZEROS.sub("", f"{rounded:.6f}")


def format_gwei(wei: int) -> str:
    """Render a wei amount in gwei, rounded half up to two decimals."""
    rounded = (Decimal(wei) / Decimal(WEI_PER_GWEI)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return f"{rounded:.2f}"
