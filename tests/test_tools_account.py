import pytest

from arbitrum_mcp.rpc import EndpointUnreachableError, RpcError, UnsupportedMethodError
from arbitrum_mcp.tools.account import (
    INVALID_ADDRESS,
    INVALID_TX_HASH,
    get_balance,
    get_balance_ether,
    get_transaction,
    get_transaction_receipt,
    is_contract,
)

ADDRESS = "0x7dd8A76bdAeBE3BBBaCD7Aa87f1D4FDa1E60f94f"
TX_HASH = "0x" + "ab" * 32


class FailClient:
    def __getattr__(self, name):
        async def _fail(*_args, **_kwargs):
            pytest.fail(f"{name} should not be called")

        return _fail


class BalanceClient:
    def __init__(self, raw):
        self.raw = raw
        self.urls = []

    async def fetch_balance(self, rpc_url, address, block="latest"):
        self.urls.append(rpc_url)
        if isinstance(self.raw, Exception):
            raise self.raw
        return self.raw


@pytest.mark.asyncio
@pytest.mark.parametrize("address", ["bad", "0x123", None, "0x" + "z" * 40])
async def test_invalid_address_skips_network(address, resolver):
    assert await get_balance(address, rpc_url="https://rpc.example", resolver=resolver, client=FailClient()) == {
        "error": INVALID_ADDRESS
    }
    assert await is_contract(address, rpc_url="https://rpc.example", resolver=resolver, client=FailClient()) == {
        "error": INVALID_ADDRESS
    }


@pytest.mark.asyncio
async def test_invalid_tx_hash_skips_network(resolver):
    for tool in (get_transaction, get_transaction_receipt):
        result = await tool("0xdead", rpc_url="https://rpc.example", resolver=resolver, client=FailClient())
        assert result == {"error": INVALID_TX_HASH}


@pytest.mark.asyncio
async def test_balance_in_wei_and_ether(resolver):
    client = BalanceClient("0x1bc16d674ec80000")  # 2 ETH
    wei = await get_balance(ADDRESS, chain_name="xai", resolver=resolver, client=client)
    assert wei == {"address": ADDRESS, "balance": "2000000000000000000", "unit": "wei"}
    ether = await get_balance_ether(ADDRESS, chain_name="xai", resolver=resolver, client=client)
    assert ether == {"address": ADDRESS, "balance": "2", "unit": "ETH"}
    assert client.urls == ["https://xai-chain.net/rpc"] * 2


@pytest.mark.asyncio
async def test_fractional_ether_balance(resolver):
    client = BalanceClient(hex(1_500_000_000_000_000_000))
    result = await get_balance_ether(ADDRESS, rpc_url="https://rpc.example", resolver=resolver, client=client)
    assert result["balance"] == "1.5"


@pytest.mark.asyncio
async def test_explicit_rpc_url_wins_over_chain_name(resolver):
    client = BalanceClient("0x0")
    await get_balance(ADDRESS, chain_name="xai", rpc_url="http://localhost:8547", resolver=resolver, client=client)
    assert client.urls == ["http://localhost:8547"]


@pytest.mark.asyncio
async def test_no_target_and_no_default(resolver):
    result = await get_balance(ADDRESS, resolver=resolver, client=FailClient())
    assert "No RPC URL or chain name provided" in result["error"]


@pytest.mark.asyncio
async def test_unknown_chain_name_reports_literal(resolver):
    client = BalanceClient(EndpointUnreachableError("Endpoint unreachable"))
    result = await get_balance(ADDRESS, chain_name="not-a-chain", resolver=resolver, client=client)
    assert client.urls == ["not-a-chain"]
    assert result == {
        "error": "Unknown chain or unreachable RPC URL: not-a-chain. Use list_chains to see known chain names."
    }


@pytest.mark.asyncio
async def test_error_mapping(resolver):
    down = BalanceClient(EndpointUnreachableError("Endpoint unreachable"))
    assert await get_balance(ADDRESS, rpc_url="https://rpc.example", resolver=resolver, client=down) == {
        "error": "Node unreachable"
    }

    reverted = BalanceClient(RpcError("RPC Error: header not found", code=-32000))
    assert await get_balance(ADDRESS, rpc_url="https://rpc.example", resolver=resolver, client=reverted) == {
        "error": "RPC Error: header not found"
    }

    missing = BalanceClient(UnsupportedMethodError("RPC Error: method not found", code=-32601))
    result = await get_balance(ADDRESS, rpc_url="https://rpc.example", resolver=resolver, client=missing)
    assert result["error"].startswith("Method not supported on this RPC endpoint:")


@pytest.mark.asyncio
async def test_unexpected_exception_is_sanitized(resolver):
    client = BalanceClient(RuntimeError("secret internals"))
    result = await get_balance(ADDRESS, rpc_url="https://rpc.example", resolver=resolver, client=client)
    assert result == {"error": "Unexpected error while retrieving balance."}


@pytest.mark.asyncio
async def test_transaction_is_normalized(resolver):
    class StubClient:
        async def fetch_transaction(self, rpc_url, tx_hash):
            return {
                "hash": tx_hash,
                "nonce": "0x5",
                "blockHash": "0x" + "cd" * 32,
                "blockNumber": "0x10",
                "transactionIndex": "0x0",
                "from": ADDRESS,
                "to": None,
                "value": "0x0",
                "gasPrice": "0x5f5e100",
                "gas": "0x5208",
                "input": "0x",
                "r": "0x1",
            }

    result = await get_transaction(TX_HASH, rpc_url="https://rpc.example", resolver=resolver, client=StubClient())
    assert result["hash"] == TX_HASH
    assert result["nonce"] == 5
    assert result["blockNumber"] == 16
    assert result["gas"] == 21000
    assert result["value"] == "0x0"
    assert "r" not in result


@pytest.mark.asyncio
async def test_transaction_and_receipt_not_found(resolver):
    class StubClient:
        async def fetch_transaction(self, *_args):
            return None

        async def fetch_transaction_receipt(self, *_args):
            return None

    tx = await get_transaction(TX_HASH, rpc_url="https://rpc.example", resolver=resolver, client=StubClient())
    assert tx == {"error": f"Transaction {TX_HASH} not found"}
    receipt = await get_transaction_receipt(
        TX_HASH, rpc_url="https://rpc.example", resolver=resolver, client=StubClient()
    )
    assert receipt == {"error": f"Transaction receipt for {TX_HASH} not found"}


@pytest.mark.asyncio
async def test_receipt_is_normalized(resolver):
    class StubClient:
        async def fetch_transaction_receipt(self, rpc_url, tx_hash):
            return {
                "transactionHash": tx_hash,
                "blockNumber": "0x10",
                "gasUsed": "0x5208",
                "cumulativeGasUsed": "0xa410",
                "status": "0x1",
                "logs": None,
            }

    result = await get_transaction_receipt(
        TX_HASH, rpc_url="https://rpc.example", resolver=resolver, client=StubClient()
    )
    assert result["gasUsed"] == 21000
    assert result["cumulativeGasUsed"] == 42000
    assert result["logs"] == []
    assert result["status"] == "0x1"


@pytest.mark.asyncio
@pytest.mark.parametrize("code, expected", [("0x", False), ("", False), ("0x6080", True)])
async def test_is_contract(code, expected, resolver):
    class StubClient:
        async def fetch_code(self, rpc_url, address, block="latest"):
            return code

    result = await is_contract(ADDRESS, rpc_url="https://rpc.example", resolver=resolver, client=StubClient())
    assert result == {"address": ADDRESS, "isContract": expected}
