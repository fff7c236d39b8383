"""
Tests for EIP-7702 delegation status inspection and revocation.
"""
import pytest

from batch_sponsor.executor.eip7702_sender import revoke_delegation
from batch_sponsor.helpers.delegation import (
    DelegationState,
    check_delegation_status,
    delegation_code,
    parse_delegation_code,
)
from batch_sponsor.helpers.eip7702_builder import EIP7702AuthorizationBuilder
from tests.conftest import DELEGATE


@pytest.mark.parametrize("code", [b"", "0x", ""])
def test_empty_code_means_no_delegation(code):
    assert parse_delegation_code(code) == (DelegationState.NONE, None)


def test_delegated_code_round_trip():
    code = delegation_code(DELEGATE)

    assert code[:3] == bytes.fromhex("ef0100")
    assert code[3:] == bytes.fromhex(DELEGATE[2:])
    assert parse_delegation_code(code) == (DelegationState.DELEGATED, DELEGATE)
    assert parse_delegation_code("0x" + code.hex()) == (DelegationState.DELEGATED, DELEGATE)


@pytest.mark.parametrize("code", [
    bytes.fromhex("6080604052"),                          # ordinary contract
    bytes.fromhex("ef0100") + b"\x01" * 19,               # truncated delegate
    bytes.fromhex("ef0100") + b"\x01" * 21,               # trailing bytes
    bytes.fromhex("ef0200") + b"\x01" * 20,               # other prefix
])
def test_other_code_is_unrecognized(code):
    assert parse_delegation_code(code) == (DelegationState.UNRECOGNIZED, None)


def test_status_for_undelegated_account(mock_w3, first_account):
    status = check_delegation_status(mock_w3, first_account.address)

    assert status.state is DelegationState.NONE
    assert status.delegate is None
    assert status.needs_authorization
    mock_w3.eth.get_code.assert_called_once_with(first_account.address)


def test_status_for_delegated_account(mock_w3, codes, first_account):
    codes[first_account.address] = delegation_code(DELEGATE)

    status = check_delegation_status(mock_w3, first_account.address.lower())

    assert status.is_delegated
    assert status.delegate == DELEGATE
    assert status.address == first_account.address
    assert not status.needs_authorization


def test_status_for_unrecognized_code(mock_w3, codes, first_account):
    codes[first_account.address] = bytes.fromhex("6080604052")

    status = check_delegation_status(mock_w3, first_account.address)

    assert status.state is DelegationState.UNRECOGNIZED
    assert status.needs_authorization


def test_query_failure_is_not_reported_as_absence(mock_w3, first_account):
    mock_w3.eth.get_code.side_effect = ConnectionError("node unreachable")

    status = check_delegation_status(mock_w3, first_account.address)

    assert status.state is DelegationState.ERROR
    assert "node unreachable" in status.error
    assert not status.needs_authorization
    assert not status.is_delegated


def test_revocation_clears_delegation(mock_w3, codes, nonces, first_account):
    codes[first_account.address] = delegation_code(DELEGATE)
    nonces[first_account.address] = 4
    builder = EIP7702AuthorizationBuilder(mock_w3, DELEGATE)

    assert check_delegation_status(mock_w3, first_account.address).is_delegated

    def mined(tx_hash, *args, **kwargs):
        # the chain clears the code once the revocation is included
        codes.pop(first_account.address, None)
        return {"status": 1, "blockNumber": 3, "gasUsed": 46_000}

    mock_w3.eth.wait_for_transaction_receipt.side_effect = mined

    sent = revoke_delegation(mock_w3, builder, first_account)

    assert sent.tx_hash.startswith("0x")
    mock_w3.eth.send_raw_transaction.assert_called_once()
    assert check_delegation_status(mock_w3, first_account.address).state is DelegationState.NONE
