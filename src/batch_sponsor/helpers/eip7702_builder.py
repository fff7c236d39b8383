"""
EIP-7702 Authorization Builder
==============================

This module builds signed EIP-7702 authorizations and the type-4
transactions that carry them, letting EOAs delegate their code to the
BatchCallAndSponsor implementation (or revoke that delegation).
"""

from typing import Any
from collections.abc import Sequence

from web3 import Web3
from eth_account.datastructures import SignedSetCodeAuthorization
from eth_account.signers.local import LocalAccount
import logging

from batch_sponsor.config.network import PRIORITY_FEE_GWEI, SET_CODE_TX_TYPE, ZERO_ADDRESS

logger = logging.getLogger(__name__)

# Intrinsic cost is 21000 plus 25000 per authorization; the rest is headroom
# for the delegate's receive hook when the sender delegates itself.
SET_CODE_BASE_GAS = 100_000
PER_AUTHORIZATION_GAS = 30_000


def build_fee_params(w3: Web3, priority_fee_gwei: int = PRIORITY_FEE_GWEI) -> dict[str, int]:
    """
    EIP-1559 fee fields with a generous cap.

    Returns:
        Dict with maxFeePerGas and maxPriorityFeePerGas
    """
    latest_block = w3.eth.get_block('latest')
    base_fee = latest_block.get('baseFeePerGas', w3.eth.gas_price)
    priority_fee = Web3.to_wei(priority_fee_gwei, 'gwei')
    return {
        'maxFeePerGas': base_fee * 2 + priority_fee,
        'maxPriorityFeePerGas': priority_fee,
    }


class EIP7702AuthorizationBuilder:
    """Builder for EIP-7702 authorizations and set-code transactions."""

    def __init__(self, w3: Web3, implementation_address: str):
        """
        Initialize the authorization builder.

        Args:
            w3: Web3 instance
            implementation_address: Address of the BatchCallAndSponsor contract
        """
        self.w3 = w3
        self.implementation_address = Web3.to_checksum_address(implementation_address)

    def build_authorization(
        self,
        account: LocalAccount,
        nonce: int | None = None,
        address: str | None = None,
    ) -> SignedSetCodeAuthorization:
        """
        Build and sign an EIP-7702 authorization.

        Args:
            account: Account delegating its code
            nonce: Authorization nonce (if None, defaults to the current account nonce).
                   Note: When auth signer == tx signer, use account nonce + 1
            address: Delegate to authorize (defaults to the implementation address)

        Returns:
            Signed authorization, ready for an ``authorizationList``
        """
        if nonce is None:
            nonce = self.w3.eth.get_transaction_count(account.address)

        auth = {
            "chainId": self.w3.eth.chain_id,
            "address": Web3.to_checksum_address(address or self.implementation_address),
            "nonce": nonce,
        }

        signed_auth = account.sign_authorization(auth)
        logger.info(f"Created authorization for {account.address} -> {auth['address']} with nonce {nonce}")
        return signed_auth

    def build_revocation(self, account: LocalAccount) -> SignedSetCodeAuthorization:
        """
        Build an authorization that clears the account's delegation.

        The account sends the carrying transaction itself, so the
        authorization nonce is the current nonce + 1.
        """
        current_nonce = self.w3.eth.get_transaction_count(account.address)
        return self.build_authorization(account, current_nonce + 1, address=ZERO_ADDRESS)

    def build_set_code_transaction(
        self,
        sender: LocalAccount,
        authorization_list: Sequence[SignedSetCodeAuthorization],
        to: str | None = None,
        gas_params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Build a type-4 transaction carrying ``authorization_list``.

        Args:
            sender: Account paying for and signing the transaction
            authorization_list: Signed authorizations (from any accounts)
            to: Destination (defaults to the sender itself)
            gas_params: Optional gas parameters (gas, maxFeePerGas, maxPriorityFeePerGas)

        Returns:
            Complete transaction dictionary ready for signing
        """
        if not authorization_list:
            raise ValueError("A set-code transaction needs at least one authorization")

        if gas_params is None:
            gas_params = {
                'gas': SET_CODE_BASE_GAS + PER_AUTHORIZATION_GAS * len(authorization_list),
                **build_fee_params(self.w3),
            }

        tx = {
            'type': SET_CODE_TX_TYPE,
            'chainId': self.w3.eth.chain_id,
            'nonce': self.w3.eth.get_transaction_count(sender.address),
            'to': Web3.to_checksum_address(to or sender.address),
            'value': 0,
            'data': '0x',
            'authorizationList': list(authorization_list),
            **gas_params,
        }

        logger.info(f"Built set-code transaction with {len(authorization_list)} authorization(s)")
        return tx
