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
# SIGNER INFRASTRUCTURE - TRANSACTION SIGNING CAPABILITIES
# -----------------------------------------------------------------------------
# Responsibility: Produce signed raw transactions for the Deployer.
#
# The Deployer only ever sees the Signer protocol (address + sign). Key
# custody stays here:
# - RemoteSigner: JSON-RPC eth_signTransaction against an external signer
#   (Clef, Web3Signer). No key material in this process at all.
# - LocalAccountSigner: in-process eth_account key, for local dev chains.
#
# Security:
# - Keys and signer tokens are NEVER logged
# - Remote calls are timeout-bounded
# -----------------------------------------------------------------------------

from typing import Any

import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_address, to_checksum_address, to_hex
from hexbytes import HexBytes
from rich.console import Console

from xet_composer.config import Settings
from xet_composer.domain.errors import SigningError

console = Console()

# Signer call timeout (a remote signer may wait for a human approval)
SIGNER_TIMEOUT_SECONDS = 15


class LocalAccountSigner:
    """
    Signs with a key held by eth_account.

    For development chains only; production deployments use RemoteSigner.
    """

    def __init__(self, account: LocalAccount) -> None:
        self._account = account

    @classmethod
    def from_key(cls, private_key: str) -> "LocalAccountSigner":
        try:
            return cls(Account.from_key(private_key))
        except (ValueError, TypeError) as e:
            # Never echo the key back
            raise SigningError("Configured deployer key is invalid") from e

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, transaction: dict[str, Any]) -> bytes:
        try:
            signed = self._account.sign_transaction(transaction)
        except (ValueError, TypeError) as e:
            raise SigningError(f"Local signer rejected the transaction: {e}") from e
        return bytes(signed.raw_transaction)


class RemoteSigner:
    """
    Delegates signing to an external JSON-RPC signer.

    The signer holds the key for `address` and answers eth_signTransaction
    with either a raw hex string or an object carrying `raw`.
    """

    def __init__(
        self,
        url: str,
        address: str,
        timeout: float = SIGNER_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        if not is_address(address):
            raise SigningError("Remote signer address is not a valid address")
        self._url = url
        self._address = to_checksum_address(address)
        self._timeout = timeout
        self._session = session

    @property
    def address(self) -> str:
        return self._address

    def _to_rpc(self, transaction: dict[str, Any]) -> dict[str, Any]:
        """JSON-RPC form: quantities as hex, data as 0x-prefixed hex."""
        rpc: dict[str, Any] = {"from": self._address}
        for key, value in transaction.items():
            if key == "from":
                continue
            if isinstance(value, (bytes, bytearray)):
                rpc[key] = to_hex(value)
            elif isinstance(value, int):
                rpc[key] = hex(value)
            else:
                rpc[key] = value
        return rpc

    def _post(self, payload: dict[str, Any]) -> requests.Response:
        """POST to the signer; a session opened here is closed before returning."""
        if self._session is not None:
            return self._session.post(self._url, json=payload, timeout=self._timeout)
        with requests.Session() as session:
            return session.post(self._url, json=payload, timeout=self._timeout)

    def sign_transaction(self, transaction: dict[str, Any]) -> bytes:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_signTransaction",
            "params": [self._to_rpc(transaction)],
        }
        console.print(f"[cyan][SIGNER] Requesting signature for {self._address}[/cyan]")

        try:
            response = self._post(payload)
        except requests.Timeout as e:
            raise SigningError(f"Signer did not answer within {self._timeout}s") from e
        except requests.RequestException as e:
            raise SigningError("Signer is unreachable") from e

        if response.status_code != 200:
            raise SigningError(f"Signer returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise SigningError("Signer returned a non-JSON response") from e

        error = body.get("error")
        if error:
            message = error.get("message", "refused") if isinstance(error, dict) else "refused"
            console.print(f"[red][SIGNER] Signature refused: {message}[/red]")
            raise SigningError(f"Signer refused: {message}")

        result = body.get("result")
        raw = result.get("raw") if isinstance(result, dict) else result
        if not isinstance(raw, str) or not raw.startswith("0x"):
            raise SigningError("Signer response carries no raw transaction")

        try:
            return bytes(HexBytes(raw))
        except ValueError as e:
            raise SigningError("Signer returned malformed raw transaction") from e


def build_signer(settings: Settings) -> RemoteSigner | LocalAccountSigner:
    """
    Choose the signer capability from configuration.

    A remote signer wins over a local key when both are configured.

    Raises:
        SigningError: Nothing usable is configured.
    """
    if settings.signer_url:
        if not settings.signer_address:
            raise SigningError("XET_SIGNER_URL is set but XET_SIGNER_ADDRESS is not")
        console.print("[green][SIGNER] Using remote signer[/green]")
        return RemoteSigner(settings.signer_url, settings.signer_address, settings.signer_timeout)

    if settings.deployer_key:
        console.print("[yellow][SIGNER] Using local development key[/yellow]")
        return LocalAccountSigner.from_key(settings.deployer_key)

    raise SigningError("No signer configured (set XET_SIGNER_URL or XET_DEPLOYER_KEY)")
