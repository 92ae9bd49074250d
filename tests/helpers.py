"""
Shared constants and canned compiler output for Xet Composer tests.
"""

import json
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
TEMPLATES_DIR = PROJECT_ROOT / "templates"

NOW = 1_700_000_000
TOKEN = "0x" + "a1" * 20
BENEFICIARY = "0x" + "b2" * 20
OWNER = "0x" + "c3" * 20
SENDER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
DEPLOYED = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TX_HASH = "0x" + "ab" * 32

# Runtime bytecode stand-in; only its presence matters to the pipeline
BYTECODE_HEX = "6080604052348015600f57600080fd5b50"

VESTING_ABI = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "token_address_", "type": "address", "internalType": "address"},
            {"name": "beneficiary_", "type": "address", "internalType": "address"},
            {"name": "start_time_", "type": "uint64", "internalType": "uint64"},
            {"name": "cliff_duration_", "type": "uint64", "internalType": "uint64"},
            {"name": "duration_", "type": "uint64", "internalType": "uint64"},
            {"name": "initial_owner_", "type": "address", "internalType": "address"},
        ],
    },
    {
        "type": "function",
        "name": "release",
        "inputs": [],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "releasable_amount",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "vested_amount",
        "inputs": [{"name": "timestamp", "type": "uint64", "internalType": "uint64"}],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
        "stateMutability": "view",
    },
]


def solc_output(errors=None, abi=VESTING_ABI, bytecode=BYTECODE_HEX) -> str:
    """Standard-JSON output as solc prints it for TokenVesting.sol."""
    output = {
        "contracts": {
            "TokenVesting.sol": {
                "TokenVesting": {"abi": abi, "evm": {"bytecode": {"object": bytecode}}}
            }
        },
        "sources": {"TokenVesting.sol": {"id": 0}},
    }
    if errors:
        output["errors"] = errors
    return json.dumps(output)


def solc_diagnostic(severity: str, message: str, kind: str = "Warning") -> dict:
    return {
        "severity": severity,
        "type": kind,
        "component": "general",
        "message": message,
        "formattedMessage": f"{kind}: {message}\n --> TokenVesting.sol:1:1:",
        "sourceLocation": {"file": "TokenVesting.sol", "start": 0, "end": 10},
    }

