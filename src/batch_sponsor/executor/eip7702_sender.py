"""
EIP-7702 Transaction Sender.
Handles signing, broadcasting and confirmation of set-code (type 4)
transactions and of plain contract calls built by the executors.
"""

import logging
from dataclasses import dataclass
from typing import Any
from collections.abc import Sequence

from web3 import Web3
from eth_account.datastructures import SignedSetCodeAuthorization
from eth_account.signers.local import LocalAccount

from batch_sponsor.exceptions import TransactionFailedError
from batch_sponsor.helpers.eip7702_builder import EIP7702AuthorizationBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentTransaction:
    """A mined transaction."""
    tx_hash: str
    receipt: Any

    @property
    def gas_used(self) -> int | None:
        try:
            return self.receipt["gasUsed"]
        except (KeyError, TypeError):
            return None

    @property
    def effective_gas_price(self) -> int | None:
        try:
            return self.receipt["effectiveGasPrice"]
        except (KeyError, TypeError):
            return None


def send_transaction(w3: Web3, account: LocalAccount, tx: dict[str, Any]) -> SentTransaction:
    """
    Sign ``tx`` locally, broadcast it and wait for one confirmation.

    Args:
        w3: Web3 instance
        account: Local account signing the transaction
        tx: Complete transaction dictionary

    Returns:
        The transaction hash (0x-prefixed) and its receipt

    Raises:
        TransactionFailedError: If the receipt reports status 0
    """
    signed_tx = account.sign_transaction(tx)
    tx_hash = Web3.to_hex(w3.eth.send_raw_transaction(signed_tx.raw_transaction))
    logger.info(f"Sent transaction {tx_hash}, waiting for receipt")

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash)
    if receipt["status"] != 1:
        logger.error(f"Transaction {tx_hash} reverted")
        raise TransactionFailedError(tx_hash, receipt)

    logger.info(f"Transaction {tx_hash} confirmed in block {receipt.get('blockNumber')}")
    return SentTransaction(tx_hash, receipt)


def submit_authorizations(
    w3: Web3,
    builder: EIP7702AuthorizationBuilder,
    submitter: LocalAccount,
    authorization_list: Sequence[SignedSetCodeAuthorization],
) -> SentTransaction:
    """
    Send one type-4 transaction from ``submitter`` to itself carrying every
    authorization in ``authorization_list``.
    """
    tx = builder.build_set_code_transaction(submitter, authorization_list)
    return send_transaction(w3, submitter, tx)


def revoke_delegation(
    w3: Web3,
    builder: EIP7702AuthorizationBuilder,
    account: LocalAccount,
) -> SentTransaction:
    """
    Clear the delegation of ``account`` by authorizing the zero address.

    After inclusion the account's code is empty again.
    """
    logger.info(f"Revoking delegation of {account.address}")
    revoke_auth = builder.build_revocation(account)
    sent = submit_authorizations(w3, builder, account, [revoke_auth])
    logger.info(f"Delegation of {account.address} revoked")
    return sent
