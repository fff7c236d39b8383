"""
Pytest fixtures for the batch sponsor tests.

The Web3 client is a MagicMock; accounts are real eth_account keys (Anvil's
well-known development keys) so signatures and transactions are genuine.
"""
from unittest.mock import MagicMock

import pytest
from eth_account import Account
from hexbytes import HexBytes

from batch_sponsor.config.abis import EXECUTE_SIGNATURE, EXECUTE_SPONSORED_SIGNATURE
from batch_sponsor.config.settings import Settings, build_context

CHAIN_ID = 31337

FIRST_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
SPONSOR_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
COLD_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"

DELEGATE = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TOKEN = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
RPC_URL = "http://127.0.0.1:8545"

TX_HASH = HexBytes(b"\x11" * 32)
GAS_PRICE = 1_000_000_000


@pytest.fixture
def first_account():
    return Account.from_key(FIRST_KEY)


@pytest.fixture
def sponsor_account():
    return Account.from_key(SPONSOR_KEY)


@pytest.fixture
def cold_account():
    return Account.from_key(COLD_KEY)


@pytest.fixture
def env():
    """Minimal valid environment."""
    return {
        "FIRST_PRIVATE_KEY": FIRST_KEY,
        "SPONSOR_PRIVATE_KEY": SPONSOR_KEY,
        "COLD_PRIVATE_KEY": COLD_KEY,
        "DELEGATION_CONTRACT_ADDRESS": DELEGATE,
        "QUICKNODE_URL": RPC_URL,
        "USDC_ADDRESS": TOKEN,
    }


@pytest.fixture
def nonces():
    """On-chain transaction counts by address; tests mutate it."""
    return {}


@pytest.fixture
def codes():
    """Account code by address; missing addresses have no code."""
    return {}


@pytest.fixture
def contract_functions():
    """Mocked delegate contract functions keyed by ABI signature."""
    functions = {}
    for signature in (EXECUTE_SIGNATURE, EXECUTE_SPONSORED_SIGNATURE):
        fn = MagicMock(name=signature)
        fn.return_value.build_transaction.side_effect = _built_tx
        functions[signature] = fn
    return functions


def _built_tx(params):
    return {
        "to": DELEGATE,
        "data": "0x",
        "value": 0,
        "gas": 250_000,
        "nonce": params["nonce"],
        "chainId": params["chainId"],
        "maxFeePerGas": params["maxFeePerGas"],
        "maxPriorityFeePerGas": params["maxPriorityFeePerGas"],
    }


@pytest.fixture
def mock_w3(nonces, codes, contract_functions):
    """Web3 double covering every call the package makes."""
    w3 = MagicMock()
    w3.eth.chain_id = CHAIN_ID
    w3.eth.gas_price = GAS_PRICE
    w3.eth.get_block.return_value = {"number": 1, "baseFeePerGas": 1_000_000_000}
    w3.eth.get_balance.return_value = 10**18
    w3.eth.get_transaction_count.side_effect = lambda address, *a, **kw: nonces.get(address, 0)
    w3.eth.get_code.side_effect = lambda address, *a, **kw: HexBytes(codes.get(address, b""))
    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "blockNumber": 2, "gasUsed": 60_000, "effectiveGasPrice": GAS_PRICE}

    contract = w3.eth.contract.return_value
    contract.get_function_by_signature.side_effect = lambda signature: contract_functions[signature]
    contract.functions.nonce.return_value.call.return_value = 0
    contract.functions.decimals.return_value.call.return_value = 6
    contract.functions.balanceOf.return_value.call.return_value = 0
    return w3


@pytest.fixture
def settings(env):
    return Settings.from_env(env)


@pytest.fixture
def ctx(settings, mock_w3):
    return build_context(settings, w3=mock_w3)
