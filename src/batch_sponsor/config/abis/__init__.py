"""
Contract ABI package for the batch sponsor demo.
"""

from .erc20 import ERC20_ABI
from .batch_call import (
    BATCH_CALL_AND_SPONSOR_ABI,
    EXECUTE_SIGNATURE,
    EXECUTE_SPONSORED_SIGNATURE,
)

__all__ = [
    # ERC20
    'ERC20_ABI',

    # Delegate contract
    'BATCH_CALL_AND_SPONSOR_ABI',
    'EXECUTE_SIGNATURE',
    'EXECUTE_SPONSORED_SIGNATURE',
]
