"""
BatchCallAndSponsor delegate contract ABI.

The contract is installed on EOAs through EIP-7702 and exposes two
``execute`` overloads plus the replay-protection ``nonce`` used for
sponsored batches.
"""

CALL_TUPLE_COMPONENTS = [
    {"name": "to", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "data", "type": "bytes"},
]

EXECUTE_SIGNATURE = "execute((address,uint256,bytes)[])"
EXECUTE_SPONSORED_SIGNATURE = "execute((address,uint256,bytes)[],bytes)"

BATCH_CALL_AND_SPONSOR_ABI = [
    {
        "type": "function",
        "name": "execute",
        "stateMutability": "payable",
        "inputs": [
            {"name": "calls", "type": "tuple[]", "components": CALL_TUPLE_COMPONENTS},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "execute",
        "stateMutability": "payable",
        "inputs": [
            {"name": "calls", "type": "tuple[]", "components": CALL_TUPLE_COMPONENTS},
            {"name": "signature", "type": "bytes"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "nonce",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "event",
        "name": "CallExecuted",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "sender", "type": "address"},
            {"indexed": True, "name": "to", "type": "address"},
            {"indexed": False, "name": "value", "type": "uint256"},
            {"indexed": False, "name": "data", "type": "bytes"},
        ],
    },
    {
        "type": "event",
        "name": "BatchExecuted",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "nonce", "type": "uint256"},
            {"indexed": False, "name": "calls", "type": "tuple[]", "components": CALL_TUPLE_COMPONENTS},
        ],
    },
]
