"""
Tests for sponsee signature construction.
"""
from eth_utils import keccak

from batch_sponsor.helpers.calls import build_token_transfer_calls, pack_calls
from batch_sponsor.helpers.signatures import (
    get_sponsee_signature,
    recover_sponsee,
    sign_sponsee_calls,
    sponsee_digest,
)
from tests.conftest import TOKEN

RECIPIENTS = [
    "0x6278A1E803A76796a3A1f7F6344fE874ebfe94B2",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
]


def _calls():
    return build_token_transfer_calls(TOKEN, RECIPIENTS, 1_000_000)


def test_digest_matches_packed_hash():
    calls = _calls()

    expected = keccak((7).to_bytes(32, "big") + pack_calls(calls))
    assert bytes(sponsee_digest(7, calls)) == expected


def test_signature_is_deterministic(cold_account):
    first = sign_sponsee_calls(cold_account, 3, _calls())
    second = sign_sponsee_calls(cold_account, 3, _calls())

    assert first == second
    assert len(first.signature) == 65


def test_signature_recovers_to_sponsee(cold_account):
    calls = _calls()
    signed = sign_sponsee_calls(cold_account, 0, calls)

    assert signed.sponsee == cold_account.address
    assert recover_sponsee(0, calls, signed.signature) == cold_account.address


def test_signature_binds_nonce_and_calls(cold_account):
    calls = _calls()
    signed = sign_sponsee_calls(cold_account, 0, calls)

    assert sign_sponsee_calls(cold_account, 1, calls).signature != signed.signature
    assert recover_sponsee(1, calls, signed.signature) != cold_account.address
    assert recover_sponsee(0, list(reversed(calls)), signed.signature) != cold_account.address


def test_get_sponsee_signature_reads_contract_nonce(mock_w3, cold_account):
    contract = mock_w3.eth.contract.return_value
    contract.functions.nonce.return_value.call.return_value = 9
    calls = _calls()

    signed = get_sponsee_signature(mock_w3, cold_account, calls)

    assert signed.nonce == 9
    assert signed == sign_sponsee_calls(cold_account, 9, calls)
    assert mock_w3.eth.contract.call_args.kwargs["address"] == cold_account.address
