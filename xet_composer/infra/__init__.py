# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Low-level wrappers around everything outside the process:
# - SolcClient: solc subprocess (standard JSON), timeout + guaranteed reaping
# - ChainClient: web3.py JSON-RPC node access
# - RemoteSigner / LocalAccountSigner: Signer capabilities
# -----------------------------------------------------------------------------

from .chain_client import ChainClient
from .signer import LocalAccountSigner, RemoteSigner, build_signer
from .solc_client import SolcClient

__all__ = ["ChainClient", "LocalAccountSigner", "RemoteSigner", "build_signer", "SolcClient"]
