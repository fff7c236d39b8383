"""
Tests for self-paid and sponsored batch submission.
"""
import pytest

from batch_sponsor.config.abis import EXECUTE_SIGNATURE, EXECUTE_SPONSORED_SIGNATURE
from batch_sponsor.exceptions import TransactionFailedError
from batch_sponsor.executor.batch_executor import BatchCallExecutor
from batch_sponsor.helpers.calls import build_native_transfer_calls, build_token_transfer_calls
from tests.conftest import TOKEN

RECIPIENTS = [
    "0x6278A1E803A76796a3A1f7F6344fE874ebfe94B2",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
]


@pytest.fixture
def executor(mock_w3):
    return BatchCallExecutor(mock_w3)


def test_execute_batch_targets_own_address(executor, mock_w3, contract_functions, nonces, first_account):
    nonces[first_account.address] = 6
    calls = build_native_transfer_calls(RECIPIENTS, 10**15)

    sent = executor.execute_batch(first_account, calls)

    assert mock_w3.eth.contract.call_args.kwargs["address"] == first_account.address
    fn = contract_functions[EXECUTE_SIGNATURE]
    fn.assert_called_once_with([call.as_tuple() for call in calls])
    params = fn.return_value.build_transaction.call_args.args[0]
    assert params["from"] == first_account.address
    assert params["nonce"] == 6
    assert sent.tx_hash == "0x" + "11" * 32
    contract_functions[EXECUTE_SPONSORED_SIGNATURE].assert_not_called()


def test_execute_sponsored_targets_sponsee(executor, mock_w3, contract_functions, sponsor_account, cold_account):
    calls = build_token_transfer_calls(TOKEN, RECIPIENTS, 1_000_000)
    signature = b"\x01" * 65

    executor.execute_sponsored(sponsor_account, cold_account.address, calls, signature)

    assert mock_w3.eth.contract.call_args.kwargs["address"] == cold_account.address
    fn = contract_functions[EXECUTE_SPONSORED_SIGNATURE]
    fn.assert_called_once_with([call.as_tuple() for call in calls], signature)
    params = fn.return_value.build_transaction.call_args.args[0]
    assert params["from"] == sponsor_account.address
    assert params["value"] == 0


def test_reverted_batch_raises(executor, mock_w3, first_account):
    mock_w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "blockNumber": 2}

    with pytest.raises(TransactionFailedError) as exc_info:
        executor.execute_batch(first_account, build_native_transfer_calls(RECIPIENTS, 1))

    assert exc_info.value.tx_hash == "0x" + "11" * 32


def test_submission_error_propagates(executor, mock_w3, first_account):
    mock_w3.eth.send_raw_transaction.side_effect = ValueError("insufficient funds")

    with pytest.raises(ValueError, match="insufficient funds"):
        executor.execute_batch(first_account, build_native_transfer_calls(RECIPIENTS, 1))


@pytest.mark.parametrize("method", ["execute_batch", "execute_sponsored"])
def test_empty_batch_rejected(executor, first_account, cold_account, method):
    with pytest.raises(ValueError):
        if method == "execute_batch":
            executor.execute_batch(first_account, [])
        else:
            executor.execute_sponsored(first_account, cold_account.address, [], b"")
