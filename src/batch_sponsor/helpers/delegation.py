"""
EIP-7702 delegation status inspection.

A delegated EOA carries the code ``0xef0100 || delegate``. The status check
reads that code through ``eth_getCode`` and reports one of four outcomes so
that callers can tell an account without delegation apart from a failed
query.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3

from batch_sponsor.config.network import DELEGATED_CODE_LENGTH, DELEGATION_DESIGNATOR

logger = logging.getLogger(__name__)


class DelegationState(str, Enum):
    NONE = "none"
    DELEGATED = "delegated"
    UNRECOGNIZED = "unrecognized"
    ERROR = "error"


@dataclass(frozen=True)
class DelegationStatus:
    """Outcome of a delegation check for one address."""
    address: ChecksumAddress
    state: DelegationState
    delegate: ChecksumAddress | None = None
    code: bytes = b""
    error: str | None = None

    @property
    def is_delegated(self) -> bool:
        return self.state is DelegationState.DELEGATED

    @property
    def needs_authorization(self) -> bool:
        """True when the account has no usable delegation and the query succeeded."""
        return self.state in (DelegationState.NONE, DelegationState.UNRECOGNIZED)


def delegation_code(delegate: str) -> bytes:
    """Code a chain installs at an EOA delegated to ``delegate``."""
    return DELEGATION_DESIGNATOR + bytes.fromhex(Web3.to_checksum_address(delegate)[2:])


def parse_delegation_code(code: bytes | str) -> tuple[DelegationState, ChecksumAddress | None]:
    """
    Classify account code.

    Args:
        code: Raw code bytes or a 0x-prefixed hex string

    Returns:
        (state, delegate) where delegate is set only for DELEGATED
    """
    code = bytes(HexBytes(code))
    if not code:
        return DelegationState.NONE, None
    # EIP-7702 code is exactly designator + 20-byte address; longer code is not a delegation
    if code.startswith(DELEGATION_DESIGNATOR) and len(code) == DELEGATED_CODE_LENGTH:
        delegate = Web3.to_checksum_address(code[len(DELEGATION_DESIGNATOR):])
        return DelegationState.DELEGATED, delegate
    return DelegationState.UNRECOGNIZED, None


def check_delegation_status(w3: Web3, address: str) -> DelegationStatus:
    """
    Read and classify the code at ``address``.

    A failed query is returned as ``DelegationState.ERROR`` rather than raised,
    so the caller decides whether to abort.
    """
    address = Web3.to_checksum_address(address)
    logger.info(f"Checking delegation status of {address}")

    try:
        code = bytes(w3.eth.get_code(address))
    except Exception as e:
        logger.error(f"Delegation query failed for {address}: {e}")
        return DelegationStatus(address, DelegationState.ERROR, error=str(e))

    state, delegate = parse_delegation_code(code)

    if state is DelegationState.NONE:
        logger.info(f"No delegation found for {address}")
    elif state is DelegationState.DELEGATED:
        logger.info(f"{address} is delegated to {delegate}")
        logger.debug(f"Full delegation code: 0x{code.hex()}")
    else:
        logger.warning(f"{address} has code that is not an EIP-7702 delegation: 0x{code.hex()}")

    return DelegationStatus(address, state, delegate=delegate, code=code)
