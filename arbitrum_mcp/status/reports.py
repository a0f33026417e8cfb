"""Report shapes returned by the chain status checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from arbitrum_mcp.config import NO_BATCH_SENTINEL_SECONDS


@dataclass(slots=True)
class BatchPostingStatus:
    last_batch_posted_seconds_ago: int
    last_block_reported: str
    latest_child_chain_block_number: str
    backlog_size: str
    summary: str

    @classmethod
    def error(cls, summary: str) -> "BatchPostingStatus":
        return cls(
            last_batch_posted_seconds_ago=NO_BATCH_SENTINEL_SECONDS,
            last_block_reported="0",
            latest_child_chain_block_number="0",
            backlog_size="0",
            summary=summary,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastBatchPostedSecondsAgo": self.last_batch_posted_seconds_ago,
            "lastBlockReported": self.last_block_reported,
            "latestChildChainBlockNumber": self.latest_child_chain_block_number,
            "backlogSize": self.backlog_size,
            "summary": self.summary,
        }


@dataclass(slots=True)
class AssertionStatus:
    latest_created_assertion: Optional[str]
    latest_confirmed_assertion: Optional[str]
    creation_confirmation_gap: str
    summary: str

    @classmethod
    def error(cls, summary: str) -> "AssertionStatus":
        return cls(
            latest_created_assertion=None,
            latest_confirmed_assertion=None,
            creation_confirmation_gap="0",
            summary=summary,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latestCreatedAssertion": self.latest_created_assertion,
            "latestConfirmedAssertion": self.latest_confirmed_assertion,
            "creationConfirmationGap": self.creation_confirmation_gap,
            "summary": self.summary,
        }


@dataclass(slots=True)
class GasStatus:
    current_gas_price: str  # wei
    current_gas_price_gwei: str
    summary: str

    @classmethod
    def error(cls, summary: str) -> "GasStatus":
        return cls(current_gas_price="0", current_gas_price_gwei="0", summary=summary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentGasPrice": self.current_gas_price,
            "currentGasPriceGwei": self.current_gas_price_gwei,
            "summary": self.summary,
        }


@dataclass(slots=True)
class ChainStatus:
    chain_name: str
    arbos_version: str
    batch_posting: BatchPostingStatus
    assertions: AssertionStatus
    gas_status: GasStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainName": self.chain_name,
            "arbosVersion": self.arbos_version,
            "batchPosting": self.batch_posting.to_dict(),
            "assertions": self.assertions.to_dict(),
            "gasStatus": self.gas_status.to_dict(),
        }
