import pytest

from arbitrum_mcp.rpc import RpcError
from arbitrum_mcp.tools.operations import (
    MAINTENANCE_UNKNOWN,
    auctioneer_submit_auction_resolution_transaction,
    maintenance_status,
    maintenance_trigger,
    timeboost_send_express_lane_transaction,
)

RPC = "https://sequencer.example"


class CallClient:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def call(self, rpc_url, method, params=None):
        self.calls.append((method, params))
        if self.error:
            raise self.error
        return self.result


@pytest.mark.asyncio
async def test_maintenance_status(resolver):
    result = await maintenance_status(rpc_url=RPC, resolver=resolver, client=CallClient("0xe10"))
    assert result == {"secondsSinceLastMaintenance": 3600}


@pytest.mark.asyncio
async def test_maintenance_status_unknown(resolver):
    failed = await maintenance_status(
        rpc_url=RPC, resolver=resolver, client=CallClient(error=RpcError("RPC Error: forbidden"))
    )
    assert failed["secondsSinceLastMaintenance"] == MAINTENANCE_UNKNOWN
    assert failed["error"] == "Maintenance status not supported on this RPC endpoint: RPC Error: forbidden"

    garbled = await maintenance_status(rpc_url=RPC, resolver=resolver, client=CallClient({"weird": True}))
    assert garbled["secondsSinceLastMaintenance"] == -1


@pytest.mark.asyncio
async def test_maintenance_trigger(resolver):
    client = CallClient()
    assert await maintenance_trigger(rpc_url=RPC, resolver=resolver, client=client) == {"success": True}
    assert client.calls == [("maintenance_trigger", [])]

    failed = await maintenance_trigger(rpc_url=RPC, resolver=resolver, client=CallClient(error=RpcError("nope")))
    assert failed["success"] is False


@pytest.mark.asyncio
async def test_express_lane_submission_forwarded(resolver):
    submission = {"chainId": "0xa4b1", "round": "0x1", "sequenceNumber": "0x0", "transaction": "0x02f8"}
    client = CallClient()
    result = await timeboost_send_express_lane_transaction(submission, rpc_url=RPC, resolver=resolver, client=client)
    assert result == {"success": True}
    assert client.calls == [("timeboost_sendExpressLaneTransaction", [submission])]


@pytest.mark.asyncio
async def test_auction_resolution_requires_object(resolver):
    client = CallClient()
    result = await auctioneer_submit_auction_resolution_transaction(
        "0x02", rpc_url=RPC, resolver=resolver, client=client
    )
    assert result == {"error": "transaction must be an object."}
    assert client.calls == []

    failed = await auctioneer_submit_auction_resolution_transaction(
        {"raw": "0x02"}, rpc_url=RPC, resolver=resolver, client=CallClient(error=RpcError("RPC Error: denied"))
    )
    assert failed == {
        "success": False,
        "error": "Auction resolution transaction not supported on this RPC endpoint: RPC Error: denied",
    }
