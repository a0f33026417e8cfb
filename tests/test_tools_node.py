import pytest

from arbitrum_mcp.rpc import EndpointUnreachableError, UnsupportedMethodError
from arbitrum_mcp.tools.node import (
    arb_check_publisher_health,
    arb_get_raw_block_metadata,
    arb_latest_validated,
    node_health,
    node_peers,
    sync_status,
)

RPC = "https://rpc.example"


class CallClient:
    """Answers ``call`` from a method -> result map; exceptions are raised."""

    def __init__(self, answers=None):
        self.answers = answers or {}
        self.calls = []

    async def call(self, rpc_url, method, params=None):
        self.calls.append((method, params))
        answer = self.answers.get(method, UnsupportedMethodError(f"RPC Error: {method} not found", code=-32601))
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.mark.asyncio
async def test_node_health_ok(resolver):
    class StubClient:
        async def fetch_health(self, rpc_url):
            return {"status": "OK"}

    result = await node_health(rpc_url=RPC, resolver=resolver, client=StubClient())
    assert result["status"] == "OK"
    assert "lastUpdated" in result


@pytest.mark.asyncio
async def test_node_health_unsupported_reports_unavailable(resolver):
    class StubClient:
        async def fetch_health(self, rpc_url):
            raise UnsupportedMethodError("RPC Error: method not found", code=-32601)

    result = await node_health(rpc_url=RPC, resolver=resolver, client=StubClient())
    assert result["status"] == "unavailable"
    assert "admin API" in result["error"]


@pytest.mark.asyncio
async def test_sync_status_not_syncing(resolver):
    class StubClient:
        async def fetch_syncing(self, rpc_url):
            return False

        async def fetch_block_number(self, rpc_url):
            return 1234

    result = await sync_status(rpc_url=RPC, resolver=resolver, client=StubClient())
    assert result == {"currentBlock": 1234, "highestBlock": 1234, "isSyncing": False, "syncProgress": 100}


@pytest.mark.asyncio
async def test_sync_status_syncing(resolver):
    class StubClient:
        async def fetch_syncing(self, rpc_url):
            return {"currentBlock": "0x32", "highestBlock": "0x64"}

        async def fetch_block_number(self, rpc_url):
            return 50

    result = await sync_status(rpc_url=RPC, resolver=resolver, client=StubClient())
    assert result["isSyncing"] is True
    assert result["syncProgress"] == 50


@pytest.mark.asyncio
async def test_sync_status_falls_back_to_block_number(resolver):
    class StubClient:
        async def fetch_syncing(self, rpc_url):
            raise UnsupportedMethodError("RPC Error: method not found", code=-32601)

        async def fetch_block_number(self, rpc_url):
            return 77

    result = await sync_status(rpc_url=RPC, resolver=resolver, client=StubClient())
    assert result["currentBlock"] == 77
    assert result["syncProgress"] == 100
    assert "Showing current block number only" in result["error"]


@pytest.mark.asyncio
async def test_sync_status_when_nothing_answers(resolver):
    class StubClient:
        async def fetch_syncing(self, rpc_url):
            raise EndpointUnreachableError("Endpoint unreachable")

        async def fetch_block_number(self, rpc_url):
            raise EndpointUnreachableError("Endpoint unreachable")

    result = await sync_status(rpc_url=RPC, resolver=resolver, client=StubClient())
    assert result["currentBlock"] == 0
    assert result["syncProgress"] == 0
    assert "debug API" in result["error"]


@pytest.mark.asyncio
async def test_node_peers(resolver):
    class StubClient:
        async def fetch_peers(self, rpc_url):
            return [{"id": "abc", "name": "nitro/v3", "caps": ["eth/68"], "network": {"remoteAddress": "1.2.3.4"}}, 5]

    peers = await node_peers(rpc_url=RPC, resolver=resolver, client=StubClient())
    assert peers[0]["id"] == "abc"
    assert peers[0]["protocols"] == {}
    assert peers[1]["id"] is None


@pytest.mark.asyncio
async def test_node_peers_unsupported(resolver):
    class StubClient:
        async def fetch_peers(self, rpc_url):
            raise UnsupportedMethodError("RPC Error: the method admin_peers does not exist/is not available")

    result = await node_peers(rpc_url=RPC, resolver=resolver, client=StubClient())
    assert result == {"error": "Peer information not supported on this RPC endpoint. "
                      "This method typically requires access to a node's admin API."}


@pytest.mark.asyncio
async def test_publisher_health(resolver):
    healthy = await arb_check_publisher_health(
        rpc_url=RPC, resolver=resolver, client=CallClient({"arb_checkPublisherHealth": None})
    )
    assert healthy == {"healthy": True}

    unhealthy = await arb_check_publisher_health(rpc_url=RPC, resolver=resolver, client=CallClient())
    assert unhealthy["healthy"] is False
    assert "not supported" in unhealthy["error"]


@pytest.mark.asyncio
async def test_raw_block_metadata_range(resolver):
    client = CallClient(
        {"arb_getRawBlockMetadata": [{"blockNumber": "0xa", "rawMetadata": "0x00"}, {"blockNumber": 11}]}
    )
    result = await arb_get_raw_block_metadata("10", "0xb", rpc_url=RPC, resolver=resolver, client=client)
    assert client.calls == [("arb_getRawBlockMetadata", ["0xa", "0xb"])]
    assert result == [{"blockNumber": 10, "metadata": "0x00"}, {"blockNumber": 11, "metadata": None}]


@pytest.mark.asyncio
@pytest.mark.parametrize("from_block, to_block", [(-1, 5), ("abc", None), (10, 5)])
async def test_raw_block_metadata_rejects_bad_ranges(from_block, to_block, resolver):
    client = CallClient()
    result = await arb_get_raw_block_metadata(from_block, to_block, rpc_url=RPC, resolver=resolver, client=client)
    assert "Invalid block range" in result["error"]
    assert client.calls == []


@pytest.mark.asyncio
async def test_latest_validated_passthrough(resolver):
    state = {"globalState": {"blockHash": "0x" + "00" * 32, "batch": 12}}
    result = await arb_latest_validated(
        rpc_url=RPC, resolver=resolver, client=CallClient({"arb_latestValidated": state})
    )
    assert result == state

    failed = await arb_latest_validated(rpc_url=RPC, resolver=resolver, client=CallClient())
    assert failed["error"].startswith("Latest validated state not supported on this RPC endpoint:")
