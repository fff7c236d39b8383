"""
Environment-driven settings and the immutable run context.

``Settings.from_env`` reads and validates the environment once at startup;
``build_context`` turns those settings into a ``DemoContext`` holding the
Web3 client and the three local accounts. Every operation receives the
context explicitly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address
from web3 import Web3

from batch_sponsor.config.network import (
    DEFAULT_NATIVE_TRANSFER_ETHER,
    DEFAULT_RECIPIENT,
    DEFAULT_TOKEN_TRANSFER_UNITS,
)
from batch_sponsor.exceptions import ConfigurationError
from batch_sponsor.helpers.web3_setup import get_web3_instance

# Environment variable -> description
REQUIRED_VARS: dict[str, str] = {
    "FIRST_PRIVATE_KEY": "private key of the self-paying account",
    "SPONSOR_PRIVATE_KEY": "private key of the gas sponsor",
    "COLD_PRIVATE_KEY": "private key of the sponsored (cold) account",
    "DELEGATION_CONTRACT_ADDRESS": "BatchCallAndSponsor implementation address",
    "QUICKNODE_URL": "JSON-RPC endpoint (RPC_URL is accepted as an alias)",
    "USDC_ADDRESS": "ERC20 token used for the sponsored transfers",
}

ACCOUNT_ROLES = ("first", "sponsor", "cold")


def _checksum(name: str, value: str) -> ChecksumAddress:
    value = value.strip()
    if not is_address(value):
        raise ConfigurationError(f"{name} is not a valid address: {value}")
    return to_checksum_address(value)


def _load_account(name: str, private_key: str) -> LocalAccount:
    try:
        return Account.from_key(private_key.strip())
    except Exception as exc:
        raise ConfigurationError(f"{name} is not a valid private key") from exc


@dataclass(frozen=True)
class Settings:
    """Validated configuration read from the environment."""

    first_private_key: str = field(repr=False)
    sponsor_private_key: str = field(repr=False)
    cold_private_key: str = field(repr=False)
    delegation_contract: ChecksumAddress
    rpc_url: str
    token_address: ChecksumAddress
    # None means "default recipient plus the sponsor"
    recipients: tuple[ChecksumAddress, ...] | None = None
    native_transfer_wei: int = Web3.to_wei(Decimal(DEFAULT_NATIVE_TRANSFER_ETHER), "ether")
    token_transfer_amount: int = DEFAULT_TOKEN_TRANSFER_UNITS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Raises:
            ConfigurationError: If a required value is missing or malformed
        """
        env = os.environ if environ is None else environ

        values = {var: env.get(var) for var in REQUIRED_VARS}
        if not values["QUICKNODE_URL"]:
            values["QUICKNODE_URL"] = env.get("RPC_URL")

        missing = [var for var, value in values.items() if not value]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing),
                missing=missing,
            )

        recipients = None
        raw_recipients = env.get("RECIPIENT_ADDRESSES", "").strip()
        if raw_recipients:
            recipients = tuple(
                _checksum("RECIPIENT_ADDRESSES", item)
                for item in raw_recipients.split(",")
                if item.strip()
            )
            if not recipients:
                raise ConfigurationError("RECIPIENT_ADDRESSES contains no addresses")

        native_ether = env.get("NATIVE_TRANSFER_AMOUNT") or DEFAULT_NATIVE_TRANSFER_ETHER
        try:
            native_transfer_wei = Web3.to_wei(Decimal(native_ether), "ether")
        except (InvalidOperation, ValueError) as exc:
            raise ConfigurationError(f"NATIVE_TRANSFER_AMOUNT is not a number: {native_ether}") from exc

        token_units = env.get("TOKEN_TRANSFER_AMOUNT") or str(DEFAULT_TOKEN_TRANSFER_UNITS)
        try:
            token_transfer_amount = int(token_units)
        except ValueError as exc:
            raise ConfigurationError(f"TOKEN_TRANSFER_AMOUNT is not an integer: {token_units}") from exc

        if native_transfer_wei < 0 or token_transfer_amount < 0:
            raise ConfigurationError("Transfer amounts must not be negative")

        return cls(
            first_private_key=values["FIRST_PRIVATE_KEY"],
            sponsor_private_key=values["SPONSOR_PRIVATE_KEY"],
            cold_private_key=values["COLD_PRIVATE_KEY"],
            delegation_contract=_checksum("DELEGATION_CONTRACT_ADDRESS", values["DELEGATION_CONTRACT_ADDRESS"]),
            rpc_url=values["QUICKNODE_URL"].strip(),
            token_address=_checksum("USDC_ADDRESS", values["USDC_ADDRESS"]),
            recipients=recipients,
            native_transfer_wei=native_transfer_wei,
            token_transfer_amount=token_transfer_amount,
        )


@dataclass(frozen=True)
class DemoContext:
    """Everything a run needs, built once and passed to every step."""

    w3: Web3
    first: LocalAccount
    sponsor: LocalAccount
    cold: LocalAccount
    delegation_contract: ChecksumAddress
    token_address: ChecksumAddress
    recipients: tuple[ChecksumAddress, ...]
    native_transfer_wei: int
    token_transfer_amount: int

    @property
    def accounts(self) -> tuple[LocalAccount, ...]:
        """The three demo accounts in processing order."""
        return (self.first, self.sponsor, self.cold)

    def account(self, role: str) -> LocalAccount:
        """Return the account for a role name ("first", "sponsor" or "cold")."""
        if role not in ACCOUNT_ROLES:
            raise ValueError(f"Unknown account role: {role}. Expected one of {ACCOUNT_ROLES}")
        return getattr(self, role)


def build_context(settings: Settings, w3: Web3 | None = None) -> DemoContext:
    """
    Create the run context from validated settings.

    Args:
        settings: Settings returned by ``Settings.from_env``
        w3: Optional pre-built Web3 client (a provider for ``settings.rpc_url``
            is created otherwise)
    """
    if w3 is None:
        w3 = get_web3_instance(settings.rpc_url)

    first = _load_account("FIRST_PRIVATE_KEY", settings.first_private_key)
    sponsor = _load_account("SPONSOR_PRIVATE_KEY", settings.sponsor_private_key)
    cold = _load_account("COLD_PRIVATE_KEY", settings.cold_private_key)

    recipients = settings.recipients
    if recipients is None:
        recipients = (to_checksum_address(DEFAULT_RECIPIENT), sponsor.address)

    return DemoContext(
        w3=w3,
        first=first,
        sponsor=sponsor,
        cold=cold,
        delegation_contract=settings.delegation_contract,
        token_address=settings.token_address,
        recipients=tuple(recipients),
        native_transfer_wei=settings.native_transfer_wei,
        token_transfer_amount=settings.token_transfer_amount,
    )
