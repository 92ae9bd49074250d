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
# THE DEPLOYER - CONTRACT CREATION TRANSACTIONS
# -----------------------------------------------------------------------------
# Responsibility: Turn a DeploymentRequest into a mined contract.
#
#   1. Encode constructor args against the ABI       -> EncodingError
#   2. Build the unsigned creation transaction       -> BroadcastError
#   3. Ask the injected Signer for a signature       -> SigningError
#   4. Broadcast and wait for N confirmations        -> BroadcastError,
#                                                       ConfirmationTimeout
#   5. Read (or derive) the contract address
#
# No step is retried here. A transaction that is not confirmed in time is
# reported with its hash, never replaced with a new one: a second
# transaction could deploy the contract twice.
# -----------------------------------------------------------------------------

import time
from typing import Any

import requests
import rlp
from eth_abi import encode as abi_encode
from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_utils import keccak, to_canonical_address, to_checksum_address, to_hex
from eth_utils.abi import collapse_if_tuple
from rich.console import Console
from web3.exceptions import TimeExhausted, Web3Exception

from xet_composer.config import Settings
from xet_composer.domain.errors import (
    BroadcastError,
    ConfirmationTimeout,
    EncodingError,
    SigningError,
)
from xet_composer.domain.models import DeploymentRequest, DeploymentResult, Signer
from xet_composer.infra.chain_client import POLL_INTERVAL_SECONDS, ChainClient

console = Console()

# Configuration
CONFIRMATION_TIMEOUT_SECONDS = 120
DEFAULT_CONFIRMATIONS = 1

# Errors a node call can surface: RPC errors, transport errors, bad replies
NODE_ERRORS = (Web3Exception, requests.RequestException, ValueError)


def derive_contract_address(sender: str, nonce: int) -> str:
    """CREATE address: last 20 bytes of keccak(rlp([sender, nonce]))."""
    encoded = rlp.encode([to_canonical_address(sender), nonce])
    return to_checksum_address(keccak(encoded)[12:])


def encode_constructor_args(request: DeploymentRequest) -> bytes:
    """
    ABI-encode constructor arguments in declaration order.

    Arguments are looked up by name here and only here. When the ABI names
    its inputs, each name (ignoring leading/trailing underscores) must match
    the declared parameter at the same position.

    Raises:
        EncodingError: Arity, name or type mismatch.
    """
    constructor = request.artifact.constructor
    inputs = constructor.get("inputs", []) if constructor else []
    order = request.argument_order

    if len(inputs) != len(order):
        raise EncodingError(
            f"Constructor takes {len(inputs)} argument(s), {len(order)} declared"
        )

    for position, (abi_input, name) in enumerate(zip(inputs, order)):
        abi_name = abi_input.get("name", "").strip("_")
        if abi_name and abi_name != name:
            raise EncodingError(
                f"Constructor argument #{position} is '{abi_name}', declared '{name}'"
            )

    types = [collapse_if_tuple(abi_input) for abi_input in inputs]
    values = [request.constructor_args[name] for name in order]

    try:
        return abi_encode(types, values)
    except (AbiEncodingError, ABITypeError, ParseError, TypeError, ValueError, OverflowError) as e:
        raise EncodingError(f"Constructor arguments do not match {types}: {e}") from e


class Deployer:
    """
    Deploys compiled artifacts through one ChainClient.

    Never touches key material: signing goes through request.signer.
    """

    def __init__(
        self,
        chain: ChainClient,
        confirmations: int = DEFAULT_CONFIRMATIONS,
        confirmation_timeout: float = CONFIRMATION_TIMEOUT_SECONDS,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self._chain = chain
        self._confirmations = max(1, confirmations)
        self._confirmation_timeout = confirmation_timeout
        self._poll_interval = poll_interval

    @classmethod
    def from_settings(cls, settings: Settings) -> "Deployer":
        return cls(
            ChainClient(settings.rpc_url, timeout=settings.rpc_timeout),
            confirmations=settings.confirmations,
            confirmation_timeout=settings.confirmation_timeout,
        )

    def deploy(self, request: DeploymentRequest) -> DeploymentResult:
        """
        Deploy one contract.

        Args:
            request: Clean artifact, named constructor args, target chain, signer.

        Returns:
            DeploymentResult with address, transaction hash and ABI.

        Raises:
            EncodingError, SigningError, BroadcastError, ConfirmationTimeout
        """
        name = request.artifact.contract_name
        console.print(f"[cyan][DEPLOYER] Deploying {name} to chain {request.network}...[/cyan]")

        # Step 1: Encode
        payload = request.artifact.bytecode + encode_constructor_args(request)

        # Step 2: Build
        transaction = self._build_transaction(request, payload)
        nonce = transaction["nonce"]

        # Step 3: Sign
        raw = self._sign(request.signer, transaction)

        # Step 4: Broadcast + confirm
        tx_hash = self._broadcast(raw)
        receipt = self._await_confirmations(tx_hash)

        # Step 5: Address
        address = receipt.get("contractAddress")
        if address:
            address = to_checksum_address(address)
        else:
            address = derive_contract_address(request.signer.address, nonce)

        console.print(f"[green][DEPLOYER] LIVE: {name} at {address}[/green]")
        return DeploymentResult(
            contract_address=address,
            transaction_hash=tx_hash,
            abi=request.artifact.abi,
            message=f"{name} deployed at {address}",
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )

    def _build_transaction(self, request: DeploymentRequest, payload: bytes) -> dict[str, Any]:
        """Unsigned creation transaction: no recipient, code + args as data."""
        sender = request.signer.address
        try:
            node_chain = self._chain.chain_id()
            if node_chain != request.network:
                raise BroadcastError(
                    f"Node serves chain {node_chain}, request targets chain {request.network}"
                )
            transaction: dict[str, Any] = {
                "from": sender,
                "nonce": self._chain.pending_nonce(sender),
                "chainId": request.network,
                "value": 0,
                "data": to_hex(payload),
            }
            transaction["gas"] = self._chain.estimate_gas(transaction)
            transaction["gasPrice"] = self._chain.gas_price()
        except NODE_ERRORS as e:
            console.print(f"[red][DEPLOYER] Could not prepare transaction: {e}[/red]")
            raise BroadcastError("Node rejected transaction preparation", details=str(e)) from e

        console.print(
            f"[dim][DEPLOYER] nonce={transaction['nonce']} gas={transaction['gas']}[/dim]"
        )
        return transaction

    def _sign(self, signer: Signer, transaction: dict[str, Any]) -> bytes:
        try:
            raw = signer.sign_transaction(transaction)
        except SigningError:
            raise
        except Exception as e:
            raise SigningError(f"Signer failed: {e}") from e

        if not raw:
            raise SigningError("Signer returned an empty transaction")
        return bytes(raw)

    def _broadcast(self, raw: bytes) -> str:
        try:
            tx_hash = self._chain.send_raw_transaction(raw)
        except NODE_ERRORS as e:
            console.print(f"[red][DEPLOYER] Broadcast rejected: {e}[/red]")
            raise BroadcastError("Node rejected the transaction", details=str(e)) from e

        console.print(f"[cyan][DEPLOYER] Broadcast {tx_hash}[/cyan]")
        return tx_hash

    def _await_confirmations(self, tx_hash: str) -> Any:
        """
        Wait for inclusion plus (confirmations - 1) further blocks.

        One deadline covers both the receipt and the extra blocks.
        """
        deadline = time.monotonic() + self._confirmation_timeout

        try:
            receipt = self._chain.wait_for_receipt(
                tx_hash, timeout=self._confirmation_timeout, poll_latency=self._poll_interval
            )
        except TimeExhausted as e:
            console.print(f"[red][DEPLOYER] Not mined within {self._confirmation_timeout}s[/red]")
            raise ConfirmationTimeout(
                f"Transaction {tx_hash} not mined within {self._confirmation_timeout}s", tx_hash
            ) from e
        except NODE_ERRORS as e:
            raise BroadcastError(f"Lost track of transaction {tx_hash}", details=str(e)) from e

        if receipt.get("status") == 0:
            console.print(f"[red][DEPLOYER] Transaction reverted: {tx_hash}[/red]")
            raise BroadcastError(f"Deployment transaction {tx_hash} reverted")

        mined_in = receipt["blockNumber"]
        while True:
            try:
                depth = self._chain.block_number() - mined_in + 1
            except NODE_ERRORS as e:
                raise BroadcastError(f"Lost track of transaction {tx_hash}", details=str(e)) from e
            if depth >= self._confirmations:
                break
            if time.monotonic() >= deadline:
                raise ConfirmationTimeout(
                    f"Transaction {tx_hash} has {depth}/{self._confirmations} confirmations",
                    tx_hash,
                )
            time.sleep(self._poll_interval)

        console.print(f"[green][DEPLOYER] Confirmed in block {mined_in}[/green]")
        return receipt
