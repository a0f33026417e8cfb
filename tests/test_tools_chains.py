from dataclasses import replace

import pytest

from arbitrum_mcp.tools.chains import chain_info, get_rollup_address, list_chains, search_chains
from arbitrum_mcp.tools.session import clear_rpc_url, get_rpc_url, set_rpc_url


@pytest.mark.asyncio
async def test_rpc_url_session_lifecycle(resolver):
    assert await get_rpc_url(resolver=resolver) == {"rpcUrl": None, "message": "No default RPC URL configured"}

    result = await set_rpc_url(" http://localhost:8547 ", resolver=resolver)
    assert result == {"rpcUrl": "http://localhost:8547", "message": "Default RPC URL set to: http://localhost:8547"}
    assert (await get_rpc_url(resolver=resolver))["rpcUrl"] == "http://localhost:8547"

    cleared = await clear_rpc_url(resolver=resolver)
    assert cleared["cleared"] == "http://localhost:8547"
    assert (await clear_rpc_url(resolver=resolver))["cleared"] is None


@pytest.mark.asyncio
async def test_set_rpc_url_rejects_non_http(resolver):
    result = await set_rpc_url("xai", resolver=resolver)
    assert "error" in result
    assert resolver.default_rpc_url is None


@pytest.mark.asyncio
async def test_list_chains(resolver):
    assert await list_chains(resolver=resolver) == {"count": 1, "chains": ["Xai"]}


@pytest.mark.asyncio
async def test_search_chains_hits_and_misses(resolver):
    hit = await search_chains("xa", resolver=resolver)
    assert hit == {"query": "xa", "results": [{"name": "Xai", "chainId": 660279, "slug": "xai"}]}

    miss = await search_chains("nova", resolver=resolver)
    assert miss["results"] == []
    assert miss["message"] == 'No chains found matching "nova"'

    assert "error" in await search_chains("   ", resolver=resolver)


@pytest.mark.asyncio
async def test_chain_info_and_rollup(resolver, xai_record):
    info = await chain_info("Xai", resolver=resolver)
    assert info["chainId"] == 660279
    assert info["ethBridge"]["rollup"] == xai_record.rollup

    assert await chain_info("Nope", resolver=resolver) == {"error": 'Chain "Nope" not found'}

    rollup = await get_rollup_address("xai", resolver=resolver)
    assert rollup == {"chainName": "Xai", "chainId": 660279, "rollup": xai_record.rollup}


@pytest.mark.asyncio
async def test_chain_name_embedded_in_longer_query_matches(resolver, xai_record):
    info = await chain_info("Xai Mainnet", resolver=resolver)
    assert info["chainId"] == xai_record.chain_id
    rollup = await get_rollup_address("the xai chain", resolver=resolver)
    assert rollup["rollup"] == xai_record.rollup


@pytest.mark.asyncio
async def test_rollup_missing_from_catalog_entry(resolver, xai_record):
    resolver.registry.records = [replace(xai_record, eth_bridge=None)]
    result = await get_rollup_address("Xai", resolver=resolver)
    assert result == {"error": "Rollup contract address not available for Xai"}


@pytest.mark.asyncio
async def test_catalog_outage_is_reported(offline_resolver):
    expected = {"error": "Chain catalog unavailable."}
    assert await list_chains(resolver=offline_resolver) == expected
    assert await search_chains("xai", resolver=offline_resolver) == expected
    assert await chain_info("xai", resolver=offline_resolver) == expected
    assert await get_rollup_address("xai", resolver=offline_resolver) == expected
