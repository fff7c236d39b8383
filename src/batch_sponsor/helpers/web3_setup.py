"""
Web3 setup helper - provides the web3 instance used by a run.

Public API
----------
get_web3_instance(rpc_url=None)
    Return a Web3 instance connected to the specified RPC URL.
    Falls back to QUICKNODE_URL or RPC_URL environment variables.
"""
from __future__ import annotations

import os

from web3 import Web3

__all__ = ["get_web3_instance"]


def get_web3_instance(rpc_url: str | None = None) -> Web3:
    """
    Get a Web3 instance connected to the specified RPC URL.

    Args:
        rpc_url: Optional RPC URL. If not provided, uses QUICKNODE_URL or RPC_URL env vars.

    Returns:
        Web3 instance

    Raises:
        RuntimeError: If no RPC URL is available
    """
    if rpc_url is None:
        rpc_url = os.getenv("QUICKNODE_URL") or os.getenv("RPC_URL")

    if rpc_url is None:
        raise RuntimeError("No RPC URL available. Set QUICKNODE_URL or RPC_URL environment variable.")

    return Web3(Web3.HTTPProvider(rpc_url))
