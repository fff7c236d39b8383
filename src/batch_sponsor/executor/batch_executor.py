"""
Batch execution through the BatchCallAndSponsor delegate.

Once an EOA is delegated, its own address exposes the contract interface:

  * ``execute(calls)`` may only be sent by the account itself, which pays gas.
  * ``execute(calls, signature)`` may be sent by anyone holding the account's
    signature over the batch; the sender (sponsor) pays gas.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from eth_account.signers.local import LocalAccount
from web3 import Web3

from batch_sponsor.config.abis import (
    BATCH_CALL_AND_SPONSOR_ABI,
    EXECUTE_SIGNATURE,
    EXECUTE_SPONSORED_SIGNATURE,
)
from batch_sponsor.executor.eip7702_sender import SentTransaction, send_transaction
from batch_sponsor.helpers.calls import Call
from batch_sponsor.helpers.eip7702_builder import build_fee_params

logger = logging.getLogger(__name__)


class BatchCallExecutor:
    """Submits batches to delegated accounts and waits for confirmation."""

    def __init__(self, w3: Web3, abi: list[dict[str, Any]] | None = None) -> None:
        self.w3 = w3
        self.abi = abi or BATCH_CALL_AND_SPONSOR_ABI

    def _delegated(self, account_address: str):
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(account_address),
            abi=self.abi,
        )

    def _tx_params(self, sender: LocalAccount) -> dict[str, Any]:
        return {
            'from': sender.address,
            'nonce': self.w3.eth.get_transaction_count(sender.address),
            'chainId': self.w3.eth.chain_id,
            'value': 0,
            **build_fee_params(self.w3),
        }

    def execute_batch(self, account: LocalAccount, calls: Sequence[Call]) -> SentTransaction:
        """
        Self-paid batch: ``account`` calls ``execute(calls)`` on its own address.

        Args:
            account: Delegated account sending and paying for the batch
            calls: Ordered calls to execute atomically
        """
        if not calls:
            raise ValueError("Cannot execute an empty batch")

        logger.info(f"Sending non-sponsored batch of {len(calls)} calls from {account.address}")
        contract = self._delegated(account.address)
        fn = contract.get_function_by_signature(EXECUTE_SIGNATURE)
        tx = fn([call.as_tuple() for call in calls]).build_transaction(self._tx_params(account))

        sent = send_transaction(self.w3, account, tx)
        logger.info(f"Transaction hash: {sent.tx_hash}")
        return sent

    def execute_sponsored(
        self,
        sponsor: LocalAccount,
        sponsee: str,
        calls: Sequence[Call],
        signature: bytes,
    ) -> SentTransaction:
        """
        Sponsored batch: ``sponsor`` calls ``execute(calls, signature)`` on the
        sponsee's address and pays the gas.

        Args:
            sponsor: Account sending and paying for the transaction
            sponsee: Delegated account whose batch is executed
            calls: Ordered calls, exactly as signed by the sponsee
            signature: Sponsee signature over the contract nonce and the calls
        """
        if not calls:
            raise ValueError("Cannot execute an empty batch")

        logger.info(f"Sending sponsored batch of {len(calls)} calls for {sponsee} paid by {sponsor.address}")
        contract = self._delegated(sponsee)
        fn = contract.get_function_by_signature(EXECUTE_SPONSORED_SIGNATURE)
        tx = fn([call.as_tuple() for call in calls], bytes(signature)).build_transaction(
            self._tx_params(sponsor)
        )

        sent = send_transaction(self.w3, sponsor, tx)
        logger.info(f"Transaction hash: {sent.tx_hash}")
        return sent
