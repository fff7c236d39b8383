"""
Call encoding helpers for BatchCallAndSponsor batches.

A batch is an ordered list of ``Call`` items, each one leg of an atomic
execution through the delegated contract. This module builds the legs the
demo needs (native transfers, ERC20 transfers) and the tightly packed
encoding the contract hashes when it verifies a sponsee signature.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from eth_abi import encode
from eth_abi.packed import encode_packed
from eth_typing import ChecksumAddress
from eth_utils import keccak
from web3 import Web3

# transfer(address,uint256)
ERC20_TRANSFER_SELECTOR = keccak(text="transfer(address,uint256)")[:4]


@dataclass(frozen=True)
class Call:
    """One leg of a batched execution."""
    to: ChecksumAddress
    value: int = 0
    data: bytes = b""

    @classmethod
    def create(cls, to: str, value: int = 0, data: str | bytes = b"") -> "Call":
        """
        Build a call, checksumming the target and decoding hex calldata.

        Args:
            to: Destination address
            value: Native value to send (in wei)
            data: Calldata as hex string or bytes
        """
        if isinstance(data, str):
            data = bytes.fromhex(data[2:] if data.startswith("0x") else data)
        if value < 0:
            raise ValueError(f"Call value must not be negative: {value}")
        return cls(Web3.to_checksum_address(to), int(value), bytes(data))

    def as_tuple(self) -> tuple[ChecksumAddress, int, bytes]:
        """Shape expected by web3 for the ``(address,uint256,bytes)`` tuple."""
        return (self.to, self.value, self.data)


def pack_call(call: Call) -> bytes:
    """abi.encodePacked(address to, uint256 value, bytes data)."""
    return encode_packed(["address", "uint256", "bytes"], [call.to, call.value, call.data])


def pack_calls(calls: Iterable[Call]) -> bytes:
    """Concatenate the packed encoding of every call, in order."""
    return b"".join(pack_call(call) for call in calls)


def encode_erc20_transfer(token: str, recipient: str, amount: int) -> Call:
    """
    Encode an ERC20 transfer call.

    Args:
        token: Token contract address
        recipient: Address receiving the tokens
        amount: Amount in token base units
    """
    encoded_params = encode(["address", "uint256"], [Web3.to_checksum_address(recipient), amount])
    return Call.create(token, 0, ERC20_TRANSFER_SELECTOR + encoded_params)


def build_native_transfer_calls(recipients: Sequence[str], amount_wei: int) -> list[Call]:
    """One plain value transfer per recipient."""
    return [Call.create(recipient, amount_wei, b"") for recipient in recipients]


def build_token_transfer_calls(token: str, recipients: Sequence[str], amount: int) -> list[Call]:
    """One ERC20 ``transfer`` per recipient."""
    return [encode_erc20_transfer(token, recipient, amount) for recipient in recipients]


def total_value(calls: Iterable[Call]) -> int:
    """Sum of native value carried by a batch."""
    return sum(call.value for call in calls)
