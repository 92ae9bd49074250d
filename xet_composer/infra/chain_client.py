# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# CHAIN INFRASTRUCTURE - JSON-RPC NODE ACCESS
# -----------------------------------------------------------------------------
# Responsibility: A thin web3.py wrapper over one HTTP JSON-RPC endpoint.
#
# One ChainClient (and so one HTTP connection pool) per request. Every call
# is bounded by the provider's request timeout; receipt polling is bounded by
# the caller's timeout.
# -----------------------------------------------------------------------------

from typing import Any

from hexbytes import HexBytes
from rich.console import Console
from web3 import Web3
from web3.types import TxReceipt

console = Console()

# Seconds between receipt / block polls
POLL_INTERVAL_SECONDS = 1.0


class ChainClient:
    """Node access for the Deployer: nonce, gas, broadcast, receipts."""

    def __init__(self, rpc_url: str, timeout: float = 30.0, web3: Web3 | None = None) -> None:
        """
        Args:
            rpc_url: JSON-RPC endpoint. May embed credentials, so it is never logged.
            timeout: Per-request HTTP timeout in seconds.
            web3: Pre-built Web3 instance (tests inject one).
        """
        self._web3 = web3 or Web3(
            Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout})
        )

    @property
    def web3(self) -> Web3:
        return self._web3

    def chain_id(self) -> int:
        return int(self._web3.eth.chain_id)

    def pending_nonce(self, address: str) -> int:
        return int(self._web3.eth.get_transaction_count(address, "pending"))

    def estimate_gas(self, transaction: dict[str, Any]) -> int:
        return int(self._web3.eth.estimate_gas(transaction))

    def gas_price(self) -> int:
        return int(self._web3.eth.gas_price)

    def block_number(self) -> int:
        return int(self._web3.eth.block_number)

    def send_raw_transaction(self, raw: bytes) -> str:
        """Broadcast a signed transaction, returning its 0x hash."""
        tx_hash = self._web3.eth.send_raw_transaction(raw)
        return HexBytes(tx_hash).to_0x_hex()

    def wait_for_receipt(
        self, tx_hash: str, timeout: float, poll_latency: float = POLL_INTERVAL_SECONDS
    ) -> TxReceipt:
        """
        Poll until the transaction is mined.

        Raises:
            web3.exceptions.TimeExhausted: Not mined within `timeout`.
        """
        return self._web3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=timeout, poll_latency=poll_latency
        )
