"""
Arbitrum MCP server package.

Exposes LLM-friendly tools for Arbitrum One, Nova and Orbit chains: chain
catalog lookups, node JSON-RPC queries and composite chain health reports.
See DESIGN.md for full details.
"""

__all__ = ["config"]
