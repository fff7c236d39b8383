"""
Exceptions raised by the EIP-7702 batch sponsor demo.
"""
from typing import Any


class BatchSponsorError(Exception):
    """Base exception for batch sponsor errors."""
    pass


class ConfigurationError(BatchSponsorError):
    """Raised when required environment values are missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None):
        self.missing = list(missing or [])
        super().__init__(message)


class DelegationQueryError(BatchSponsorError):
    """Raised when the delegation status of an account could not be read."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Could not read delegation status of {address}: {reason}")


class TransactionFailedError(BatchSponsorError):
    """Raised when a mined transaction reports status 0."""

    def __init__(self, tx_hash: str, receipt: Any = None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"Transaction {tx_hash} reverted")
