"""
Pytest configuration and fixtures for Xet Composer tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables
os.environ.setdefault("XET_SOLC_BINARY", "solc")
os.environ.setdefault("XET_RPC_URL", "http://127.0.0.1:8545")
os.environ.setdefault("XET_CHAIN_ID", "31337")
os.environ.setdefault("XET_CONFIRMATIONS", "1")

from helpers import (  # noqa: E402
    BENEFICIARY,
    BYTECODE_HEX,
    DEPLOYED,
    NOW,
    OWNER,
    SENDER,
    TEMPLATES_DIR,
    TOKEN,
    TX_HASH,
    VESTING_ABI,
)



@pytest.fixture
def templates_dir():
    """The templates shipped with the project."""
    return TEMPLATES_DIR


@pytest.fixture
def repository(templates_dir):
    from xet_composer.core.templates import TemplateRepository

    return TemplateRepository(templates_dir)


@pytest.fixture
def descriptor(repository):
    """TemplateDescriptor for the linear vesting template."""
    return repository.load("token_vesting")


@pytest.fixture
def vesting_params():
    """Valid linear vesting parameters relative to NOW."""
    return {
        "token_address": TOKEN,
        "beneficiary": BENEFICIARY,
        "start_time": NOW + 1000,
        "cliff_duration": 2_592_000,
        "duration": 31_536_000,
        "initial_owner": OWNER,
    }


@pytest.fixture
def parameter_set(descriptor, vesting_params):
    from xet_composer.core.validator import validate

    return validate(descriptor, vesting_params, now=NOW)


@pytest.fixture
def artifact():
    """A clean compilation artifact for TokenVesting."""
    from xet_composer.domain.models import CompilationArtifact

    return CompilationArtifact(
        contract_name="TokenVesting",
        bytecode=bytes.fromhex(BYTECODE_HEX),
        abi=VESTING_ABI,
    )


@pytest.fixture
def mock_signer():
    """Signer capability that always signs."""
    signer = MagicMock()
    signer.address = SENDER
    signer.sign_transaction.return_value = b"\x02\xf8signed"
    return signer


@pytest.fixture
def mock_chain():
    """ChainClient for a node that mines everything in block 10."""
    chain = MagicMock()
    chain.chain_id.return_value = 31337
    chain.pending_nonce.return_value = 7
    chain.estimate_gas.return_value = 1_500_000
    chain.gas_price.return_value = 1_000_000_000
    chain.send_raw_transaction.return_value = TX_HASH
    chain.wait_for_receipt.return_value = {
        "status": 1,
        "contractAddress": DEPLOYED,
        "blockNumber": 10,
        "gasUsed": 1_200_000,
        "transactionHash": TX_HASH,
    }
    chain.block_number.return_value = 10
    return chain
