"""
Composite chain status built from independent RPC checks.

Each check (ArbOS version, batch posting, assertions, gas price) talks to its
own upstream target and turns its own failure into an error-flavoured report.
The composite waits for all of them regardless of individual failures, so a
dead parent-chain RPC never hides the gas price and vice versa.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

from web3 import Web3

from arbitrum_mcp.chains.resolver import ResolvedEndpoint
from arbitrum_mcp.config import ArbitrumConfig, default_config
from arbitrum_mcp.rpc import ArbitrumRpcClient, default_client
from arbitrum_mcp.status.reports import AssertionStatus, BatchPostingStatus, ChainStatus, GasStatus
from arbitrum_mcp.units import format_gwei, hex_to_int

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _topic(signature: str) -> str:
    return Web3.to_hex(Web3.keccak(text=signature))


def _selector(signature: str) -> str:
    return Web3.to_hex(Web3.keccak(text=signature)[:4])


ARBSYS_ADDRESS = "0x0000000000000000000000000000000000000064"
ARBOS_VERSION_SELECTOR = _selector("arbOSVersion()")
SEQUENCER_REPORTED_SUB_MESSAGE_COUNT_SELECTOR = _selector("sequencerReportedSubMessageCount()")

SEQUENCER_BATCH_DELIVERED_TOPIC = _topic(
    "SequencerBatchDelivered(uint256,bytes32,bytes32,bytes32,uint256,(uint64,uint64,uint64,uint64),uint8)"
)
NODE_CREATED_TOPIC = _topic("NodeCreated(uint64,bytes32,bytes32,bytes32)")
NODE_CONFIRMED_TOPIC = _topic("NodeConfirmed(uint64,bytes32,bytes32)")

ARBOS_VERSION_UNKNOWN = "Unknown (RPC does not support ArbOS version queries)"
ARBOS_VERSION_ERROR = "Error retrieving ArbOS version"
UNKNOWN_CHAIN_NAME = "Unknown Chain"


@dataclass(frozen=True, slots=True)
class ContractAddresses:
    """Parent-chain contracts used by the batch posting and assertion checks."""

    sequencer_inbox: Optional[str] = None
    bridge: Optional[str] = None
    rollup: Optional[str] = None


def _reason(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def _node_number(log: Dict[str, Any]) -> Optional[int]:
    topics = log.get("topics") or []
    if len(topics) < 2:
        return None
    return hex_to_int(topics[1])


def _settle(outcome: Any, expected: type, fallback: T, label: str) -> T:
    """Collapse one gathered outcome into its report or the fallback report."""
    if isinstance(outcome, BaseException):
        logger.warning("Status check %s raised: %s", label, _reason(outcome))
        return fallback
    if not isinstance(outcome, expected):
        return fallback
    return outcome


class StatusAggregator:
    """Run the chain status checks against resolved endpoints."""

    def __init__(
        self,
        client: ArbitrumRpcClient | None = None,
        config: ArbitrumConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client or default_client
        self.config = config or default_config
        self._clock = clock

    async def get_arbos_version(self, rpc_url: str) -> str:
        """
        Return the ArbOS version running on ``rpc_url``.

        Asks the ArbSys precompile first and falls back to ``arb_getVersion``.
        Never raises; unsupported endpoints get ``ARBOS_VERSION_UNKNOWN``.
        """
        try:
            raw = await self.client.eth_call(rpc_url, ARBSYS_ADDRESS, ARBOS_VERSION_SELECTOR)
            version = hex_to_int(raw)
            if version is not None:
                return str(version - self.config.arbos_version_offset)
        except Exception as exc:
            logger.debug("ArbSys arbOSVersion() failed on %s: %s", rpc_url, _reason(exc))

        try:
            version = await self.client.fetch_version(rpc_url)
            if version is not None:
                return str(version)
        except Exception as exc:
            logger.debug("arb_getVersion failed on %s: %s", rpc_url, _reason(exc))

        return ARBOS_VERSION_UNKNOWN

    async def _scan_window(self, parent_rpc_url: str, window: int) -> tuple[int, int]:
        latest = await self.client.fetch_block_number(parent_rpc_url)
        return max(0, latest - window), latest

    async def _batch_posting(
        self,
        rpc_url: str,
        parent_rpc_url: Optional[str],
        sequencer_inbox: Optional[str],
        bridge: Optional[str],
    ) -> BatchPostingStatus:
        if not parent_rpc_url:
            raise ValueError("parent chain RPC URL not provided")
        if not sequencer_inbox or not bridge:
            raise ValueError("sequencer inbox and bridge addresses are required")

        from_block, to_block = await self._scan_window(parent_rpc_url, self.config.batch_scan_window)
        logs = await self.client.fetch_logs(
            parent_rpc_url,
            address=sequencer_inbox,
            topics=[SEQUENCER_BATCH_DELIVERED_TOPIC],
            from_block=from_block,
            to_block=to_block,
        )
        if not logs:
            return BatchPostingStatus(
                last_batch_posted_seconds_ago=self.config.no_batch_sentinel_seconds,
                last_block_reported="0",
                latest_child_chain_block_number="0",
                backlog_size="0",
                summary="No batches found in recent blocks",
            )

        batch_block_number = hex_to_int(logs[-1].get("blockNumber"))
        if batch_block_number is None:
            raise ValueError("batch log is missing its block number")
        batch_block = await self.client.fetch_block(parent_rpc_url, batch_block_number)
        timestamp = hex_to_int(batch_block.get("timestamp")) if isinstance(batch_block, dict) else None
        if timestamp is None:
            raise ValueError(f"block {batch_block_number} has no timestamp")
        seconds_ago = int(self._clock()) - timestamp

        raw_reported = await self.client.eth_call(
            parent_rpc_url, bridge, SEQUENCER_REPORTED_SUB_MESSAGE_COUNT_SELECTOR
        )
        last_block_reported = hex_to_int(raw_reported)
        if last_block_reported is None:
            raise ValueError("bridge returned no sequencerReportedSubMessageCount")

        latest_child_block = await self.client.fetch_block_number(rpc_url)
        backlog = latest_child_block - last_block_reported

        summary = (
            f"Last batch posted {seconds_ago // 3600}h {(seconds_ago % 3600) // 60}m ago. "
            f"Backlog: {backlog} blocks."
        )
        return BatchPostingStatus(
            last_batch_posted_seconds_ago=seconds_ago,
            last_block_reported=str(last_block_reported),
            latest_child_chain_block_number=str(latest_child_block),
            backlog_size=str(backlog),
            summary=summary,
        )

    async def get_batch_posting_status(
        self,
        rpc_url: str,
        parent_rpc_url: Optional[str],
        sequencer_inbox: Optional[str],
        bridge: Optional[str],
    ) -> BatchPostingStatus:
        """Report how long ago the sequencer last posted a batch and the resulting backlog."""
        try:
            return await self._batch_posting(rpc_url, parent_rpc_url, sequencer_inbox, bridge)
        except Exception as exc:
            logger.warning("Batch posting check failed: %s", _reason(exc))
            return BatchPostingStatus.error(f"Error checking batch posting: {_reason(exc)}")

    async def _assertions(self, parent_rpc_url: Optional[str], rollup: Optional[str]) -> AssertionStatus:
        if not parent_rpc_url:
            raise ValueError("parent chain RPC URL not provided")
        if not rollup:
            raise ValueError("rollup address is required")

        from_block, to_block = await self._scan_window(parent_rpc_url, self.config.assertion_scan_window)
        created_logs, confirmed_logs = await asyncio.gather(
            self.client.fetch_logs(
                parent_rpc_url,
                address=rollup,
                topics=[NODE_CREATED_TOPIC],
                from_block=from_block,
                to_block=to_block,
            ),
            self.client.fetch_logs(
                parent_rpc_url,
                address=rollup,
                topics=[NODE_CONFIRMED_TOPIC],
                from_block=from_block,
                to_block=to_block,
            ),
        )
        created: Optional[int] = _node_number(created_logs[-1]) if created_logs else None
        confirmed: Optional[int] = _node_number(confirmed_logs[-1]) if confirmed_logs else None
        gap = created - confirmed if created is not None and confirmed is not None else 0

        created_text = str(created) if created is not None else "None"
        confirmed_text = str(confirmed) if confirmed is not None else "None"
        return AssertionStatus(
            latest_created_assertion=str(created) if created is not None else None,
            latest_confirmed_assertion=str(confirmed) if confirmed is not None else None,
            creation_confirmation_gap=str(gap),
            summary=f"Latest created assertion: {created_text}, Latest confirmed: {confirmed_text}. Gap: {gap}",
        )

    async def get_assertion_status(self, parent_rpc_url: Optional[str], rollup: Optional[str]) -> AssertionStatus:
        """Report the newest created and confirmed rollup nodes and the gap between them."""
        try:
            return await self._assertions(parent_rpc_url, rollup)
        except Exception as exc:
            logger.warning("Assertion check failed: %s", _reason(exc))
            return AssertionStatus.error(f"Error checking assertions: {_reason(exc)}")

    async def get_gas_status(self, rpc_url: str) -> GasStatus:
        try:
            wei = await self.client.fetch_gas_price(rpc_url)
        except Exception as exc:
            logger.warning("Gas price check failed: %s", _reason(exc))
            return GasStatus.error(f"Error checking gas price: {_reason(exc)}")
        gwei = format_gwei(wei)
        return GasStatus(
            current_gas_price=str(wei),
            current_gas_price_gwei=gwei,
            summary=f"Current gas price: {gwei} gwei ({wei} wei)",
        )

    async def get_comprehensive_status(
        self,
        endpoint: ResolvedEndpoint,
        parent_rpc_url: Optional[str] = None,
        contracts: Optional[ContractAddresses] = None,
        *,
        chain_name: Optional[str] = None,
    ) -> ChainStatus:
        """
        Run all four checks concurrently and compose the results.

        Explicit ``parent_rpc_url`` and ``contracts`` values win over whatever
        the resolver found in the catalog. The result is always fully shaped;
        a failed check shows up as that check's error report.
        """
        contracts = contracts or ContractAddresses()
        rpc_url = endpoint.rpc_url
        parent = parent_rpc_url or endpoint.parent_rpc_url or self.config.arbitrum_one_rpc_url
        sequencer_inbox = contracts.sequencer_inbox or endpoint.sequencer_inbox
        bridge = contracts.bridge or endpoint.bridge
        rollup = contracts.rollup or endpoint.rollup

        outcomes: List[Any] = await asyncio.gather(
            self.get_arbos_version(rpc_url),
            self.get_batch_posting_status(rpc_url, parent, sequencer_inbox, bridge),
            self.get_assertion_status(parent, rollup),
            self.get_gas_status(rpc_url),
            return_exceptions=True,
        )
        version, batch_posting, assertions, gas = outcomes

        return ChainStatus(
            chain_name=chain_name or endpoint.chain_name or UNKNOWN_CHAIN_NAME,
            arbos_version=_settle(version, str, ARBOS_VERSION_ERROR, "arbos_version"),
            batch_posting=_settle(
                batch_posting,
                BatchPostingStatus,
                BatchPostingStatus.error("Error retrieving batch posting status"),
                "batch_posting",
            ),
            assertions=_settle(
                assertions,
                AssertionStatus,
                AssertionStatus.error("Error retrieving assertion status"),
                "assertions",
            ),
            gas_status=_settle(gas, GasStatus, GasStatus.error("Error retrieving gas status"), "gas"),
        )


default_aggregator = StatusAggregator()
