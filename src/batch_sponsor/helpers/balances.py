"""
Balance helpers used to report progress around the batches.
"""

from collections.abc import Iterable
from decimal import Decimal

from web3 import Web3

from batch_sponsor.config.abis import ERC20_ABI


def _token(w3: Web3, token_address: str):
    return w3.eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_ABI)


def get_native_balance(w3: Web3, account_address: str) -> int:
    """Native balance of an account, in wei."""
    return w3.eth.get_balance(Web3.to_checksum_address(account_address))


def get_token_decimals(w3: Web3, token_address: str) -> int:
    return _token(w3, token_address).functions.decimals().call()


def get_token_balance(w3: Web3, token_address: str, account_address: str) -> int:
    """
    Get ERC20 token balance for an account.

    Args:
        w3: Web3 instance
        token_address: Token contract address
        account_address: Account to check balance for

    Returns:
        Balance in token base units
    """
    account_address = Web3.to_checksum_address(account_address)
    return _token(w3, token_address).functions.balanceOf(account_address).call()


def get_token_balances(w3: Web3, token_address: str, accounts: Iterable[str]) -> dict[str, int]:
    """Token balance of every account, keyed by checksum address."""
    return {
        Web3.to_checksum_address(account): get_token_balance(w3, token_address, account)
        for account in accounts
    }


def format_token_amount(amount: int, decimals: int) -> str:
    """Base units as a human readable decimal string, e.g. 1000000 with 6 decimals -> "1"."""
    return f"{Decimal(amount).scaleb(-decimals).normalize():f}"
