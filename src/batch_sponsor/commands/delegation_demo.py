"""
EIP-7702 Delegation & Sponsored Batch Demo
==========================================

Delegates three EOAs (first, sponsor, cold) to the BatchCallAndSponsor
contract when they are not delegated yet, then:

  1. the first account sends native currency to every recipient in one
     self-paid batch;
  2. the cold account signs a batch of ERC20 transfers and the sponsor
     submits it, paying the gas.

Every step returns a ``StepResult``; the run returns them in order and
stops at the first failure.

Usage:
    python -m batch_sponsor                 # full flow
    python -m batch_sponsor status          # delegation table only
    python -m batch_sponsor revoke --account first
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv
from eth_account.signers.local import LocalAccount
from tabulate import tabulate
from web3 import Web3

from batch_sponsor.config import (
    ACCOUNT_ROLES,
    REQUIRED_VARS,
    DemoContext,
    Settings,
    build_context,
    get_chain_name,
    get_demo_logger,
    get_explorer_tx_url,
    log_step,
)
from batch_sponsor.exceptions import ConfigurationError, DelegationQueryError
from batch_sponsor.executor.batch_executor import BatchCallExecutor
from batch_sponsor.executor.eip7702_sender import revoke_delegation, submit_authorizations
from batch_sponsor.helpers.balances import (
    format_token_amount,
    get_native_balance,
    get_token_balances,
    get_token_decimals,
)
from batch_sponsor.helpers.calls import (
    Call,
    build_native_transfer_calls,
    build_token_transfer_calls,
    total_value,
)
from batch_sponsor.helpers.delegation import DelegationState, DelegationStatus, check_delegation_status
from batch_sponsor.helpers.eip7702_builder import EIP7702AuthorizationBuilder
from batch_sponsor.helpers.signatures import get_sponsee_signature, recover_sponsee

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Step results                                                                #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class StepResult:
    """Outcome of one orchestration step."""
    step: str
    success: bool = True
    tx_hash: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class DemoReport:
    """Ordered step results of one run."""
    steps: list[StepResult] = field(default_factory=list)

    def add(self, result: StepResult) -> StepResult:
        self.steps.append(result)
        return result

    @property
    def tx_hashes(self) -> list[str]:
        return [step.tx_hash for step in self.steps if step.tx_hash]

    def step(self, name: str) -> StepResult | None:
        for result in self.steps:
            if result.step == name:
                return result
        return None


StepCallback = Callable[[StepResult], None]


# --------------------------------------------------------------------------- #
# Steps                                                                       #
# --------------------------------------------------------------------------- #


def initialize(ctx: DemoContext) -> StepResult:
    """Report the connected chain, the account addresses and native balances."""
    chain_id = ctx.w3.eth.chain_id
    first_balance = get_native_balance(ctx.w3, ctx.first.address)
    sponsor_balance = get_native_balance(ctx.w3, ctx.sponsor.address)

    logger.info(f"Connected to {get_chain_name(chain_id)} (chain id {chain_id})")
    logger.info(f"First signer: {ctx.first.address} ({Web3.from_wei(first_balance, 'ether')} ETH)")
    logger.info(f"Sponsor signer: {ctx.sponsor.address} ({Web3.from_wei(sponsor_balance, 'ether')} ETH)")
    logger.info(f"Cold signer: {ctx.cold.address}")

    return StepResult(
        "initialize",
        details={
            "chain_id": chain_id,
            "first": ctx.first.address,
            "sponsor": ctx.sponsor.address,
            "cold": ctx.cold.address,
            "first_balance_wei": first_balance,
            "sponsor_balance_wei": sponsor_balance,
        },
    )


def check_delegations(ctx: DemoContext) -> list[DelegationStatus]:
    """
    Delegation status of the three accounts.

    Raises:
        DelegationQueryError: If any status could not be read
    """
    statuses = [check_delegation_status(ctx.w3, account.address) for account in ctx.accounts]
    for status in statuses:
        if status.state is DelegationState.ERROR:
            raise DelegationQueryError(status.address, status.error or "unknown error")
    return statuses


def authorization_nonce(w3: Web3, account: LocalAccount, submitter: LocalAccount) -> int:
    """
    Nonce an authorization must carry to be valid when ``submitter`` sends it.

    The sender's nonce is incremented before the authorization list is
    processed, so an account authorizing inside its own transaction needs
    current + 1.
    """
    current_nonce = w3.eth.get_transaction_count(account.address)
    if account.address == submitter.address:
        return current_nonce + 1
    return current_nonce


def authorize_accounts(
    ctx: DemoContext,
    statuses: Sequence[DelegationStatus],
    builder: EIP7702AuthorizationBuilder,
    submitter: LocalAccount | None = None,
) -> StepResult:
    """
    Authorize every account whose status says it needs one, in a single
    type-4 transaction sent by ``submitter`` (the sponsor by default).
    """
    submitter = submitter or ctx.sponsor
    by_address = {account.address: account for account in ctx.accounts}

    authorization_list = []
    authorized = []
    for status in statuses:
        if not status.needs_authorization:
            continue
        account = by_address[status.address]
        nonce = authorization_nonce(ctx.w3, account, submitter)
        authorization_list.append(builder.build_authorization(account, nonce))
        authorized.append(account.address)

    if not authorization_list:
        logger.info("All accounts are already delegated")
        return StepResult("authorize", details={"authorized": []})

    sent = submit_authorizations(ctx.w3, builder, submitter, authorization_list)
    return StepResult("authorize", tx_hash=sent.tx_hash, details={"authorized": authorized})


def build_call_sets(ctx: DemoContext) -> tuple[list[Call], list[Call]]:
    """Native transfers for the self-paid batch and token transfers for the sponsored one."""
    native_calls = build_native_transfer_calls(ctx.recipients, ctx.native_transfer_wei)
    token_calls = build_token_transfer_calls(ctx.token_address, ctx.recipients, ctx.token_transfer_amount)
    return native_calls, token_calls


def self_paid_batch(ctx: DemoContext, executor: BatchCallExecutor, calls: Sequence[Call]) -> StepResult:
    sent = executor.execute_batch(ctx.first, calls)
    return StepResult(
        "self_paid_batch",
        tx_hash=sent.tx_hash,
        details={"calls": len(calls), "value_wei": total_value(calls), "gas_used": sent.gas_used},
    )


def sponsored_batch(ctx: DemoContext, executor: BatchCallExecutor, calls: Sequence[Call]) -> StepResult:
    """
    Have the cold account sign ``calls`` and the sponsor submit them.

    The sponsor's native balance is read around the submission. It pays gas
    only: the sponsored transaction carries no value.
    """
    signed = get_sponsee_signature(ctx.w3, ctx.cold, calls)
    signer = recover_sponsee(signed.nonce, calls, signed.signature)
    if signer != ctx.cold.address:
        raise ValueError(f"Sponsee signature recovers to {signer}, expected {ctx.cold.address}")

    decimals = get_token_decimals(ctx.w3, ctx.token_address)
    before = get_token_balances(ctx.w3, ctx.token_address, ctx.recipients)
    sponsor_before = get_native_balance(ctx.w3, ctx.sponsor.address)

    sent = executor.execute_sponsored(ctx.sponsor, ctx.cold.address, calls, signed.signature)

    sponsor_after = get_native_balance(ctx.w3, ctx.sponsor.address)
    after = get_token_balances(ctx.w3, ctx.token_address, ctx.recipients)

    for recipient in ctx.recipients:
        logger.info(
            f"Token balance of {recipient}: {format_token_amount(before[recipient], decimals)}"
            f" -> {format_token_amount(after[recipient], decimals)}"
        )
    logger.info(f"Sponsor spent {sponsor_before - sponsor_after} wei on gas")

    return StepResult(
        "sponsored_batch",
        tx_hash=sent.tx_hash,
        details={
            "calls": len(calls),
            "sponsee": ctx.cold.address,
            "contract_nonce": signed.nonce,
            "token_decimals": decimals,
            "token_received": {r: after[r] - before[r] for r in ctx.recipients},
            "sponsor_balance_before_wei": sponsor_before,
            "sponsor_balance_after_wei": sponsor_after,
            "sponsor_spent_wei": sponsor_before - sponsor_after,
            "gas_used": sent.gas_used,
            "effective_gas_price": sent.effective_gas_price,
        },
    )


# --------------------------------------------------------------------------- #
# Flows                                                                       #
# --------------------------------------------------------------------------- #


def run_demo(ctx: DemoContext, on_step: StepCallback | None = None) -> DemoReport:
    """
    Run the full flow. Any failing step aborts the remaining ones; the
    exception propagates after earlier steps were already reported.
    """
    report = DemoReport()

    def record(result: StepResult) -> None:
        report.add(result)
        if on_step is not None:
            on_step(result)

    builder = EIP7702AuthorizationBuilder(ctx.w3, ctx.delegation_contract)
    executor = BatchCallExecutor(ctx.w3)

    record(initialize(ctx))

    statuses = check_delegations(ctx)
    record(StepResult(
        "check_delegation",
        details={status.address: status.state.value for status in statuses},
    ))

    record(authorize_accounts(ctx, statuses, builder))

    native_calls, token_calls = build_call_sets(ctx)
    record(StepResult(
        "build_calls",
        details={"native_calls": len(native_calls), "token_calls": len(token_calls)},
    ))

    record(self_paid_batch(ctx, executor, native_calls))
    record(sponsored_batch(ctx, executor, token_calls))

    return report


def run_status(ctx: DemoContext) -> list[DelegationStatus]:
    """Delegation status of the three accounts, failed queries included."""
    return [check_delegation_status(ctx.w3, account.address) for account in ctx.accounts]


def run_revoke(ctx: DemoContext, role: str) -> StepResult:
    """Revoke the delegation of the account playing ``role``."""
    account = ctx.account(role)
    builder = EIP7702AuthorizationBuilder(ctx.w3, ctx.delegation_contract)
    sent = revoke_delegation(ctx.w3, builder, account)
    return StepResult("revoke", tx_hash=sent.tx_hash, details={"account": account.address})


# --------------------------------------------------------------------------- #
# CLI Entry Point                                                             #
# --------------------------------------------------------------------------- #


def _print_status_table(ctx: DemoContext, statuses: Sequence[DelegationStatus]) -> None:
    roles = {account.address: role for role, account in zip(ACCOUNT_ROLES, ctx.accounts)}
    rows = [
        [roles.get(s.address, ""), s.address, s.state.value, s.delegate or s.error or ""]
        for s in statuses
    ]
    print(tabulate(rows, headers=["Role", "Address", "State", "Delegate / Error"], tablefmt="grid"))


def _print_report(ctx: DemoContext, report: DemoReport) -> None:
    chain_id = ctx.w3.eth.chain_id
    rows = []
    for result in report.steps:
        link = get_explorer_tx_url(chain_id, result.tx_hash) if result.tx_hash else None
        rows.append([result.step, "ok" if result.success else "failed", link or result.tx_hash or "-"])
    print(tabulate(rows, headers=["Step", "Status", "Transaction"], tablefmt="grid"))


def _log_result(result: StepResult) -> None:
    detail = ", ".join(f"{k}={v}" for k, v in result.details.items() if not isinstance(v, dict))
    log_step(logger, result.step, result.success, result.tx_hash, detail or None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batch-sponsor",
        description="EIP-7702 delegation and sponsored batch execution demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Required environment (or .env):
""" + "\n".join(f"  {var:28} {desc}" for var, desc in REQUIRED_VARS.items()) + """

Examples:
  # Delegate if needed, then run both batches
  python -m batch_sponsor

  # Only show delegation status
  python -m batch_sponsor status

  # Clear the sponsor's delegation
  python -m batch_sponsor revoke --account sponsor
        """,
    )
    parser.add_argument(
        'command',
        nargs='?',
        default='run',
        choices=['run', 'status', 'revoke'],
        help='What to do (default: run)',
    )
    parser.add_argument(
        '--account',
        choices=list(ACCOUNT_ROLES),
        default='first',
        help='Account whose delegation is revoked (default: first)',
    )
    parser.add_argument('--env-file', help='Path to a .env file (default: search from cwd)')
    parser.add_argument('--debug', action='store_true', help='Verbose logging')
    parser.add_argument('--no-log-file', action='store_true', help='Log to the console only')
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for CLI usage. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    load_dotenv(args.env_file)
    get_demo_logger(debug=args.debug, to_file=not args.no_log_file)

    try:
        ctx = build_context(Settings.from_env())
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        for var in e.missing:
            logger.error(f"  - {var}: {REQUIRED_VARS.get(var, '')}")
        return 1

    try:
        if args.command == 'status':
            _print_status_table(ctx, run_status(ctx))
        elif args.command == 'revoke':
            _log_result(run_revoke(ctx, args.account))
        else:
            report = run_demo(ctx, on_step=_log_result)
            _print_report(ctx, report)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
