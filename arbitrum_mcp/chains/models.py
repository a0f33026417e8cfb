"""Immutable records describing known Arbitrum chains."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


def _opt_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _to_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field_name}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {field_name}: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class NativeCurrency:
    name: str = "Ether"
    symbol: str = "ETH"
    decimals: int = 18

    @classmethod
    def from_catalog(cls, raw: Any) -> "NativeCurrency":
        if not isinstance(raw, Mapping):
            return cls()
        return cls(
            name=str(raw.get("name") or "Ether"),
            symbol=str(raw.get("symbol") or "ETH"),
            decimals=_to_int(raw.get("decimals", 18), field_name="decimals"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "symbol": self.symbol, "decimals": self.decimals}


@dataclass(frozen=True, slots=True)
class NativeToken:
    name: str
    symbol: str
    decimals: int
    address: Optional[str] = None

    @classmethod
    def from_catalog(cls, raw: Any) -> Optional["NativeToken"]:
        if not isinstance(raw, Mapping):
            return None
        return cls(
            name=str(raw.get("name") or ""),
            symbol=str(raw.get("symbol") or ""),
            decimals=_to_int(raw.get("decimals", 18), field_name="decimals"),
            address=_opt_str(raw.get("address")),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "symbol": self.symbol, "decimals": self.decimals}
        if self.address:
            payload["address"] = self.address
        return payload


@dataclass(frozen=True, slots=True)
class EthBridge:
    """Core rollup contracts deployed on the parent chain."""

    bridge: Optional[str] = None
    inbox: Optional[str] = None
    outbox: Optional[str] = None
    rollup: Optional[str] = None
    sequencer_inbox: Optional[str] = None

    @classmethod
    def from_catalog(cls, entry: Mapping[str, Any]) -> Optional["EthBridge"]:
        # Nested "ethBridge" wins over the legacy flat layout.
        nested = entry.get("ethBridge")
        source: Mapping[str, Any] = nested if isinstance(nested, Mapping) else entry
        bridge = cls(
            bridge=_opt_str(source.get("bridge")),
            inbox=_opt_str(source.get("inbox")),
            outbox=_opt_str(source.get("outbox")),
            rollup=_opt_str(source.get("rollup")),
            sequencer_inbox=_opt_str(source.get("sequencerInbox")),
        )
        return None if bridge.is_empty() else bridge

    def is_empty(self) -> bool:
        return not any((self.bridge, self.inbox, self.outbox, self.rollup, self.sequencer_inbox))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "bridge": self.bridge,
            "inbox": self.inbox,
            "outbox": self.outbox,
            "rollup": self.rollup,
            "sequencerInbox": self.sequencer_inbox,
        }


_TOKEN_BRIDGE_FIELDS = {
    "parent_custom_gateway": "parentCustomGateway",
    "parent_erc20_gateway": "parentErc20Gateway",
    "parent_gateway_router": "parentGatewayRouter",
    "child_custom_gateway": "childCustomGateway",
    "child_erc20_gateway": "childErc20Gateway",
    "child_gateway_router": "childGatewayRouter",
}


@dataclass(frozen=True, slots=True)
class TokenBridge:
    """Token gateway contracts on both sides of the bridge."""

    parent_custom_gateway: Optional[str] = None
    parent_erc20_gateway: Optional[str] = None
    parent_gateway_router: Optional[str] = None
    child_custom_gateway: Optional[str] = None
    child_erc20_gateway: Optional[str] = None
    child_gateway_router: Optional[str] = None

    @classmethod
    def from_catalog(cls, entry: Mapping[str, Any]) -> Optional["TokenBridge"]:
        nested = entry.get("tokenBridge")
        source: Mapping[str, Any] = nested if isinstance(nested, Mapping) else entry
        values = {attr: _opt_str(source.get(key)) for attr, key in _TOKEN_BRIDGE_FIELDS.items()}
        if not any(values.values()):
            return None
        return cls(**values)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {key: getattr(self, attr) for attr, key in _TOKEN_BRIDGE_FIELDS.items()}


@dataclass(frozen=True, slots=True)
class ChainRecord:
    """One known chain, as listed in the catalog snapshot."""

    chain_id: int
    name: str
    slug: str
    parent_chain_id: int
    rpc_url: str
    native_currency: NativeCurrency = NativeCurrency()
    explorer_url: Optional[str] = None
    is_arbitrum: bool = True
    is_mainnet: bool = False
    is_custom: bool = False
    is_testnet: bool = False
    eth_bridge: Optional[EthBridge] = None
    token_bridge: Optional[TokenBridge] = None
    native_token: Optional[NativeToken] = None
    color: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None

    @classmethod
    def from_catalog(cls, entry: Any) -> "ChainRecord":
        """
        Build a record from one camelCase catalog entry.

        Raises:
            ValueError: if the entry is not an object or lacks chainId, name or rpcUrl.
        """
        if not isinstance(entry, Mapping):
            raise ValueError("Catalog entry is not an object")
        name = _opt_str(entry.get("name"))
        rpc_url = _opt_str(entry.get("rpcUrl"))
        if name is None:
            raise ValueError("Catalog entry is missing a name")
        if rpc_url is None:
            raise ValueError(f"Catalog entry {name!r} is missing an rpcUrl")
        chain_id = _to_int(entry.get("chainId"), field_name="chainId")
        parent_chain_id = _to_int(entry.get("parentChainId", 0), field_name="parentChainId")
        return cls(
            chain_id=chain_id,
            name=name,
            slug=_opt_str(entry.get("slug")) or "",
            parent_chain_id=parent_chain_id,
            rpc_url=rpc_url,
            native_currency=NativeCurrency.from_catalog(entry.get("nativeCurrency")),
            explorer_url=_opt_str(entry.get("explorerUrl")),
            is_arbitrum=bool(entry.get("isArbitrum", True)),
            is_mainnet=bool(entry.get("isMainnet", False)),
            is_custom=bool(entry.get("isCustom", False)),
            is_testnet=bool(entry.get("isTestnet", False)),
            eth_bridge=EthBridge.from_catalog(entry),
            token_bridge=TokenBridge.from_catalog(entry),
            native_token=NativeToken.from_catalog(entry.get("nativeToken")),
            color=_opt_str(entry.get("color")),
            description=_opt_str(entry.get("description")),
            logo=_opt_str(entry.get("logo")),
        )

    @property
    def rollup(self) -> Optional[str]:
        return self.eth_bridge.rollup if self.eth_bridge else None

    @property
    def bridge(self) -> Optional[str]:
        return self.eth_bridge.bridge if self.eth_bridge else None

    @property
    def sequencer_inbox(self) -> Optional[str]:
        return self.eth_bridge.sequencer_inbox if self.eth_bridge else None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "chainId": self.chain_id,
            "name": self.name,
            "slug": self.slug,
            "parentChainId": self.parent_chain_id,
            "rpcUrl": self.rpc_url,
            "explorerUrl": self.explorer_url,
            "nativeCurrency": self.native_currency.to_dict(),
            "isArbitrum": self.is_arbitrum,
            "isMainnet": self.is_mainnet,
            "isCustom": self.is_custom,
            "isTestnet": self.is_testnet,
        }
        if self.eth_bridge is not None:
            payload["ethBridge"] = self.eth_bridge.to_dict()
        if self.token_bridge is not None:
            payload["tokenBridge"] = self.token_bridge.to_dict()
        if self.native_token is not None:
            payload["nativeToken"] = self.native_token.to_dict()
        for key in ("color", "description", "logo"):
            value = getattr(self, key)
            if value:
                payload[key] = value
        return payload
