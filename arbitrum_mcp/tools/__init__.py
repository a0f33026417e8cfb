"""LLM-facing tool implementations."""

from .session import clear_rpc_url, get_rpc_url, set_rpc_url
from .chains import chain_info, get_rollup_address, list_chains, search_chains
from .node import (
    arb_check_publisher_health,
    arb_get_raw_block_metadata,
    arb_latest_validated,
    node_health,
    node_peers,
    sync_status,
)
from .account import (
    get_balance,
    get_balance_ether,
    get_transaction,
    get_transaction_receipt,
    is_contract,
)
from .trace import (
    arbdebug_validate_message_number,
    arbdebug_validation_inputs_at,
    arbtrace_block,
    arbtrace_call,
    arbtrace_call_many,
    arbtrace_filter,
    arbtrace_get,
    arbtrace_replay_block_transactions,
    arbtrace_replay_transaction,
    arbtrace_transaction,
)
from .operations import (
    auctioneer_submit_auction_resolution_transaction,
    maintenance_status,
    maintenance_trigger,
    timeboost_send_express_lane_transaction,
)
from .status import (
    arbos_version,
    assertion_status,
    batch_posting_status,
    comprehensive_chain_status,
    gas_status,
    latest_block,
)
from . import validators

__all__ = [
    "set_rpc_url",
    "get_rpc_url",
    "clear_rpc_url",
    "list_chains",
    "search_chains",
    "chain_info",
    "get_rollup_address",
    "node_health",
    "sync_status",
    "node_peers",
    "arb_check_publisher_health",
    "arb_get_raw_block_metadata",
    "arb_latest_validated",
    "get_balance",
    "get_balance_ether",
    "get_transaction",
    "get_transaction_receipt",
    "is_contract",
    "arbtrace_call",
    "arbtrace_call_many",
    "arbtrace_replay_block_transactions",
    "arbtrace_replay_transaction",
    "arbtrace_transaction",
    "arbtrace_get",
    "arbtrace_block",
    "arbtrace_filter",
    "arbdebug_validate_message_number",
    "arbdebug_validation_inputs_at",
    "maintenance_status",
    "maintenance_trigger",
    "timeboost_send_express_lane_transaction",
    "auctioneer_submit_auction_resolution_transaction",
    "arbos_version",
    "latest_block",
    "batch_posting_status",
    "assertion_status",
    "gas_status",
    "comprehensive_chain_status",
    "validators",
]
