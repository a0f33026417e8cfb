"""Chain catalog tools."""

from __future__ import annotations

import logging
from typing import Any, Dict

from arbitrum_mcp.chains import CatalogUnavailableError, ChainResolver, default_resolver

logger = logging.getLogger(__name__)

CATALOG_UNAVAILABLE = "Chain catalog unavailable."


async def list_chains(*, resolver: ChainResolver = default_resolver) -> Dict[str, Any]:
    """Return every known chain name, sorted."""
    try:
        names = await resolver.registry.list_names()
    except CatalogUnavailableError:
        return {"error": CATALOG_UNAVAILABLE}
    except Exception:
        logger.exception("Unexpected error listing chains")
        return {"error": "Unexpected error while listing chains."}
    return {"count": len(names), "chains": names}


async def search_chains(query: str, *, resolver: ChainResolver = default_resolver) -> Dict[str, Any]:
    """Find chains whose name or slug contains ``query`` or whose chain id equals it."""
    if not isinstance(query, str) or not query.strip():
        return {"error": "Query must be a non-empty string."}
    try:
        matches = await resolver.registry.search(query)
    except CatalogUnavailableError:
        return {"error": CATALOG_UNAVAILABLE}
    except Exception:
        logger.exception("Unexpected error searching chains for %r", query)
        return {"error": "Unexpected error while searching chains."}

    results = [{"name": record.name, "chainId": record.chain_id, "slug": record.slug} for record in matches]
    if not results:
        return {"query": query, "results": [], "message": f'No chains found matching "{query}"'}
    return {"query": query, "results": results}


async def chain_info(chain_name: str, *, resolver: ChainResolver = default_resolver) -> Dict[str, Any]:
    """
    Return the full catalog record for a chain.

    Args:
        chain_name: Exact name, slug or name fragment.
        resolver: Chain resolver (override for testing).

    Returns:
        The record in camelCase form, or an error dict.
    """
    if not isinstance(chain_name, str) or not chain_name.strip():
        return {"error": "Chain name is required."}
    try:
        record = await resolver.lookup(chain_name)
    except CatalogUnavailableError:
        return {"error": CATALOG_UNAVAILABLE}
    except Exception:
        logger.exception("Unexpected error looking up chain %r", chain_name)
        return {"error": "Unexpected error while retrieving chain info."}
    if record is None:
        return {"error": f'Chain "{chain_name}" not found'}
    return record.to_dict()


async def get_rollup_address(chain_name: str, *, resolver: ChainResolver = default_resolver) -> Dict[str, Any]:
    if not isinstance(chain_name, str) or not chain_name.strip():
        return {"error": "Chain name is required."}
    try:
        record = await resolver.lookup(chain_name)
    except CatalogUnavailableError:
        return {"error": CATALOG_UNAVAILABLE}
    except Exception:
        logger.exception("Unexpected error looking up chain %r", chain_name)
        return {"error": "Unexpected error while retrieving rollup address."}
    if record is None:
        return {"error": f'Chain "{chain_name}" not found'}
    if not record.rollup:
        return {"error": f"Rollup contract address not available for {record.name}"}
    return {"chainName": record.name, "chainId": record.chain_id, "rollup": record.rollup}
