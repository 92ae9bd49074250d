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
# KYC PRE-CHECK
# -----------------------------------------------------------------------------
# Responsibility: Basic shape checks on an operator's identity submission
# before they are allowed to compose contracts. This is a format gate only;
# identity verification itself belongs to an external provider.
# -----------------------------------------------------------------------------

import re

from rich.console import Console

console = Console()

WALLET_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


class KycRejected(Exception):
    """Raised when a KYC submission fails a format check."""

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


def check_kyc(legal_name: str, wallet_address: str, signature_hash: str) -> None:
    """
    Validate a KYC submission.

    Raises:
        KycRejected: First failing field, in submission order.
    """
    if not legal_name.strip():
        raise KycRejected("Legal name cannot be empty.", "legal_name")
    if not wallet_address.strip():
        raise KycRejected("Wallet address cannot be empty.", "wallet_address")
    if not signature_hash.strip():
        raise KycRejected("Signature or hash cannot be empty.", "signature_hash")

    if not WALLET_PATTERN.match(wallet_address):
        raise KycRejected(
            "Invalid wallet address format. Expected '0x' prefix and 42 characters total.",
            "wallet_address",
        )

    console.print(f"[green][KYC] Submission accepted for {wallet_address}[/green]")
