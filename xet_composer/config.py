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
# CONFIGURATION
# -----------------------------------------------------------------------------
# Every knob comes from the environment (optionally via .env, loaded by the
# API entry point). Settings are read once at startup and are read-only
# afterwards, so concurrent requests share them without locking.
# -----------------------------------------------------------------------------

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_TEMPLATES_DIR = PROJECT_ROOT / "templates"
DEFAULT_REMAPPINGS = "@openzeppelin/=lib/openzeppelin-contracts/"


class Settings(BaseModel):
    """Process-wide configuration for the composition pipeline."""

    model_config = ConfigDict(frozen=True)

    # Compiler boundary
    solc_binary: str = "solc"
    solc_timeout: float = Field(60.0, gt=0)
    optimize_runs: int = Field(200, ge=0)
    import_roots: tuple[Path, ...] = ()
    remappings: tuple[str, ...] = ()

    # Template source
    templates_dir: Path = DEFAULT_TEMPLATES_DIR

    # Network boundary
    rpc_url: str = "http://127.0.0.1:8545"
    chain_id: int = 31337
    rpc_timeout: float = Field(30.0, gt=0)
    confirmations: int = Field(1, ge=1)
    confirmation_timeout: float = Field(120.0, gt=0)

    # Signer capability
    signer_url: str | None = None
    signer_address: str | None = None
    signer_timeout: float = Field(15.0, gt=0)
    deployer_key: str | None = Field(None, repr=False)


def _split(value: str, sep: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(sep) if part.strip())


def load_settings() -> Settings:
    """
    Build Settings from the current environment.

    Returns:
        Frozen Settings instance.
    """
    return Settings(
        solc_binary=os.getenv("XET_SOLC_BINARY", "solc"),
        solc_timeout=float(os.getenv("XET_SOLC_TIMEOUT", "60")),
        optimize_runs=int(os.getenv("XET_SOLC_OPTIMIZE_RUNS", "200")),
        import_roots=tuple(
            Path(p) for p in _split(os.getenv("XET_IMPORT_ROOTS", "lib"), os.pathsep)
        ),
        remappings=_split(os.getenv("XET_REMAPPINGS", DEFAULT_REMAPPINGS), ","),
        templates_dir=Path(os.getenv("XET_TEMPLATES_DIR", str(DEFAULT_TEMPLATES_DIR))),
        rpc_url=os.getenv("XET_RPC_URL", "http://127.0.0.1:8545"),
        chain_id=int(os.getenv("XET_CHAIN_ID", "31337")),
        rpc_timeout=float(os.getenv("XET_RPC_TIMEOUT", "30")),
        confirmations=int(os.getenv("XET_CONFIRMATIONS", "1")),
        confirmation_timeout=float(os.getenv("XET_CONFIRMATION_TIMEOUT", "120")),
        signer_url=os.getenv("XET_SIGNER_URL") or None,
        signer_address=os.getenv("XET_SIGNER_ADDRESS") or None,
        signer_timeout=float(os.getenv("XET_SIGNER_TIMEOUT", "15")),
        deployer_key=os.getenv("XET_DEPLOYER_KEY") or None,
    )
