"""Chain status checks and their composite report."""

from .aggregator import ContractAddresses, StatusAggregator, default_aggregator
from .reports import AssertionStatus, BatchPostingStatus, ChainStatus, GasStatus

__all__ = [
    "AssertionStatus",
    "BatchPostingStatus",
    "ChainStatus",
    "ContractAddresses",
    "GasStatus",
    "StatusAggregator",
    "default_aggregator",
]
