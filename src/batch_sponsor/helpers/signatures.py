"""
Sponsee signatures for sponsored batch execution.

The delegated contract accepts ``execute(calls, signature)`` from any sender
when ``signature`` is the account's own EIP-191 signature over

    keccak256(abi.encodePacked(uint256 nonce, bytes packedCalls))

where ``nonce`` is the contract's replay-protection counter stored at the
sponsee's address and ``packedCalls`` is the concatenation of
``abi.encodePacked(address, uint256, bytes)`` for every call.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3

from batch_sponsor.config.abis import BATCH_CALL_AND_SPONSOR_ABI
from batch_sponsor.helpers.calls import Call, pack_calls

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SponseeSignature:
    """A signature together with the inputs it commits to."""
    sponsee: ChecksumAddress
    nonce: int
    digest: HexBytes
    signature: HexBytes


def sponsee_digest(nonce: int, calls: Sequence[Call]) -> HexBytes:
    """Hash the contract nonce and the packed calls the way the contract does."""
    return Web3.solidity_keccak(["uint256", "bytes"], [nonce, pack_calls(calls)])


def sign_sponsee_calls(account: LocalAccount, nonce: int, calls: Sequence[Call]) -> SponseeSignature:
    """
    Sign a batch for sponsored execution.

    Deterministic: the same key, nonce and calls always give the same signature.

    Args:
        account: Sponsee account (the delegated EOA)
        nonce: Current ``nonce()`` of the delegated contract at the sponsee address
        calls: Ordered calls to authorize
    """
    digest = sponsee_digest(nonce, calls)
    signed = account.sign_message(encode_defunct(primitive=bytes(digest)))
    return SponseeSignature(
        sponsee=account.address,
        nonce=nonce,
        digest=digest,
        signature=HexBytes(signed.signature),
    )


def recover_sponsee(nonce: int, calls: Sequence[Call], signature: bytes) -> ChecksumAddress:
    """Recover the address that signed ``calls`` at ``nonce``."""
    digest = sponsee_digest(nonce, calls)
    return Account.recover_message(encode_defunct(primitive=bytes(digest)), signature=signature)


def read_contract_nonce(w3: Web3, delegated_account: str) -> int:
    """Read the replay-protection nonce of the contract delegated at ``delegated_account``."""
    contract = w3.eth.contract(
        address=Web3.to_checksum_address(delegated_account),
        abi=BATCH_CALL_AND_SPONSOR_ABI,
    )
    return contract.functions.nonce().call()


def get_sponsee_signature(w3: Web3, sponsee: LocalAccount, calls: Sequence[Call]) -> SponseeSignature:
    """
    Read the delegated contract nonce and sign ``calls`` for a sponsor.

    The signature is only valid until another sponsored batch of the same
    account executes; nothing here detects a stale nonce.
    """
    nonce = read_contract_nonce(w3, sponsee.address)
    logger.info(f"Signing {len(calls)} calls for {sponsee.address} at contract nonce {nonce}")
    return sign_sponsee_calls(sponsee, nonce, calls)
