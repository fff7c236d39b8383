"""
Tests for native and ERC20 balance reads.
"""
import pytest

from batch_sponsor.config.abis import ERC20_ABI
from batch_sponsor.helpers.balances import (
    format_token_amount,
    get_token_balances,
    get_token_decimals,
)
from tests.conftest import TOKEN


def test_token_reads_use_erc20_abi(mock_w3, first_account, sponsor_account):
    token = mock_w3.eth.contract.return_value
    token.functions.balanceOf.return_value.call.side_effect = [5, 7]

    balances = get_token_balances(mock_w3, TOKEN.lower(), [first_account.address.lower(), sponsor_account.address])

    assert balances == {first_account.address: 5, sponsor_account.address: 7}
    assert mock_w3.eth.contract.call_args.kwargs == {"address": TOKEN, "abi": ERC20_ABI}
    assert [c.args for c in token.functions.balanceOf.call_args_list] == [
        (first_account.address,),
        (sponsor_account.address,),
    ]


def test_token_decimals(mock_w3):
    assert get_token_decimals(mock_w3, TOKEN) == 6


@pytest.mark.parametrize("amount,decimals,expected", [
    (1_000_000, 6, "1"),
    (1_500_000, 6, "1.5"),
    (10_000_000, 6, "10"),
    (0, 18, "0"),
    (1, 18, "0.000000000000000001"),
])
def test_format_token_amount(amount, decimals, expected):
    assert format_token_amount(amount, decimals) == expected
