"""
Network configuration for the EIP-7702 batch sponsor demo.

Contains chain metadata used for log links, the EIP-7702 delegation
designator and the default fee / transfer parameters.
"""

from typing import Any


# =============================================================================
# CHAIN CONFIGURATIONS
# =============================================================================

CHAINS: dict[str, dict[str, Any]] = {
    "mainnet": {
        "chain_id": 1,
        "name": "Ethereum Mainnet",
        "currency": "ETH",
        "explorer": {
            "name": "Etherscan",
            "url": "https://etherscan.io",
        },
    },
    "sepolia": {
        "chain_id": 11155111,
        "name": "Sepolia",
        "currency": "ETH",
        "explorer": {
            "name": "Etherscan Sepolia",
            "url": "https://sepolia.etherscan.io",
        },
    },
    "gnosis": {
        "chain_id": 100,
        "name": "Gnosis Chain",
        "currency": "xDAI",
        "explorer": {
            "name": "Gnosisscan",
            "url": "https://gnosisscan.io",
        },
    },
    "anvil": {
        "chain_id": 31337,
        "name": "Anvil",
        "currency": "ETH",
        "explorer": None,
    },
}

# Chain ID to name mapping
CHAIN_ID_TO_NAME: dict[int, str] = {
    config["chain_id"]: name for name, config in CHAINS.items()
}


# =============================================================================
# EIP-7702
# =============================================================================

# Code installed at a delegated EOA is 0xef0100 || delegate address
DELEGATION_DESIGNATOR: bytes = bytes.fromhex("ef0100")
DELEGATED_CODE_LENGTH: int = len(DELEGATION_DESIGNATOR) + 20

SET_CODE_TX_TYPE: int = 4
ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_RECIPIENT: str = "0x6278A1E803A76796a3A1f7F6344fE874ebfe94B2"
DEFAULT_NATIVE_TRANSFER_ETHER: str = "0.001"
DEFAULT_TOKEN_TRANSFER_UNITS: int = 1_000_000

PRIORITY_FEE_GWEI: int = 2


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_chain_name(chain_id: int) -> str:
    """Return a human readable chain name, or the bare id for unknown chains."""
    name = CHAIN_ID_TO_NAME.get(chain_id)
    if name is None:
        return f"chain {chain_id}"
    return CHAINS[name]["name"]


def get_explorer_tx_url(chain_id: int, tx_hash: str) -> str | None:
    """Return a block explorer link for a transaction, if the chain has one."""
    name = CHAIN_ID_TO_NAME.get(chain_id)
    if name is None or CHAINS[name]["explorer"] is None:
        return None
    if not tx_hash.startswith("0x"):
        tx_hash = "0x" + tx_hash
    return f"{CHAINS[name]['explorer']['url']}/tx/{tx_hash}"
