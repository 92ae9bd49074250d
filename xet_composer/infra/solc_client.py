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
# SOLC INFRASTRUCTURE - COMPILER ADAPTER
# -----------------------------------------------------------------------------
# Responsibility: Compile rendered Solidity with an external `solc` binary
# and return bytecode + ABI + diagnostics.
#
# Uses `solc --standard-json`: the input is one JSON document on stdin and
# the output is one JSON document on stdout, so nothing is scraped from
# free-form text.
#
# Safety Features:
# - Dead Man's Switch: hard timeout, the process is killed on expiry
# - Scoped process: killed (if still running) and reaped on EVERY exit path,
#   including KeyboardInterrupt and errors raised while parsing
# -----------------------------------------------------------------------------

import json
import subprocess
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from rich.console import Console

from xet_composer.config import Settings
from xet_composer.domain.errors import CompileError, CompileTimeout
from xet_composer.domain.models import CompilationArtifact, Diagnostic, RenderedSource, Severity

console = Console()

# Configuration
COMPILE_TIMEOUT_SECONDS = 60
OPTIMIZER_RUNS = 200
OUTPUT_SELECTION = ["abi", "evm.bytecode.object"]


@contextmanager
def solc_process(argv: Sequence[str]) -> Iterator[subprocess.Popen]:
    """
    Spawn solc and guarantee it is gone when the block exits.

    Popen's own context manager closes the pipes and waits; killing first
    makes sure that wait never blocks on a hung compiler.
    """
    try:
        process = subprocess.Popen(
            list(argv),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
        )
    except OSError as e:
        raise CompileError(f"Cannot start compiler '{argv[0]}'", details=str(e)) from e

    with process:
        try:
            yield process
        finally:
            if process.poll() is None:
                console.print("[red][COMPILER] Killing solc process[/red]")
                process.kill()


class SolcClient:
    """
    Runs solc as an isolated subprocess, one process per compile.

    Holds only read-only configuration, so one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        binary: str = "solc",
        timeout: float = COMPILE_TIMEOUT_SECONDS,
        optimize_runs: int = OPTIMIZER_RUNS,
        import_roots: Sequence[Path] = (),
        remappings: Sequence[str] = (),
    ) -> None:
        self._binary = binary
        self._timeout = timeout
        self._optimize_runs = optimize_runs
        self._import_roots = tuple(Path(p) for p in import_roots)
        self._remappings = tuple(remappings)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SolcClient":
        return cls(
            binary=settings.solc_binary,
            timeout=settings.solc_timeout,
            optimize_runs=settings.optimize_runs,
            import_roots=settings.import_roots,
            remappings=settings.remappings,
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    def build_command(self, import_roots: Sequence[Path]) -> list[str]:
        """solc argv for a standard-JSON run with the given search roots."""
        argv = [self._binary, "--standard-json"]
        if import_roots:
            argv += ["--base-path", "."]
            for root in import_roots:
                argv += ["--include-path", str(root)]
            argv += ["--allow-paths", ",".join(str(root) for root in import_roots)]
        return argv

    def build_input(self, rendered: RenderedSource) -> dict[str, Any]:
        """The standard-JSON input document for one rendered source."""
        return {
            "language": "Solidity",
            "sources": {rendered.source_name: {"content": rendered.text}},
            "settings": {
                "optimizer": {"enabled": True, "runs": self._optimize_runs},
                "remappings": list(self._remappings),
                "outputSelection": {
                    rendered.source_name: {rendered.contract_name: OUTPUT_SELECTION}
                },
            },
        }

    def compile(
        self, rendered: RenderedSource, import_roots: Sequence[Path] | None = None
    ) -> CompilationArtifact:
        """
        Compile a rendered source.

        Args:
            rendered: Output of the Renderer.
            import_roots: Search roots for imports; defaults to the
                configured vendored library roots.

        Returns:
            CompilationArtifact with no error diagnostics.

        Raises:
            CompileTimeout: solc exceeded the timeout and was killed.
            CompileError: solc could not run, or reported any error.
        """
        roots = self._import_roots if import_roots is None else tuple(Path(p) for p in import_roots)
        argv = self.build_command(roots)
        payload = json.dumps(self.build_input(rendered))

        console.print(
            f"[cyan][COMPILER] Compiling {rendered.source_name} (TTL: {self._timeout}s)[/cyan]"
        )

        with solc_process(argv) as process:
            try:
                stdout, stderr = process.communicate(payload, timeout=self._timeout)
            except subprocess.TimeoutExpired as e:
                console.print(f"[red][COMPILER] Timeout after {self._timeout}s[/red]")
                raise CompileTimeout(f"Compiler timed out after {self._timeout}s") from e
            returncode = process.returncode

        return self.parse_output(rendered, stdout, stderr, returncode)

    def parse_output(
        self, rendered: RenderedSource, stdout: str, stderr: str = "", returncode: int = 0
    ) -> CompilationArtifact:
        """Turn solc's standard-JSON output into an artifact or a CompileError."""
        try:
            output = json.loads(stdout)
        except json.JSONDecodeError as e:
            console.print(f"[red][COMPILER] Unreadable compiler output (exit: {returncode})[/red]")
            raise CompileError(
                "Compiler produced no structured output", details=stderr.strip()[:500]
            ) from e

        diagnostics = rank_diagnostics(output.get("errors", []))
        errors = [d for d in diagnostics if d.is_error]
        warnings = len(diagnostics) - len(errors)

        if errors:
            console.print(
                f"[red][COMPILER] FAILED: {len(errors)} error(s), {warnings} other diagnostic(s)[/red]"
            )
            raise CompileError(f"Compilation failed with {len(errors)} error(s)", diagnostics)

        if returncode != 0:
            raise CompileError(
                f"Compiler exited with status {returncode}", diagnostics, details=stderr.strip()[:500]
            )

        contract = output.get("contracts", {}).get(rendered.source_name, {}).get(rendered.contract_name)
        if not contract:
            raise CompileError(f"Contract '{rendered.contract_name}' not found in output", diagnostics)

        bytecode_hex = contract.get("evm", {}).get("bytecode", {}).get("object", "")
        if not bytecode_hex:
            raise CompileError(f"Contract '{rendered.contract_name}' has no bytecode", diagnostics)

        try:
            bytecode = bytes.fromhex(bytecode_hex.removeprefix("0x"))
        except ValueError as e:
            # Unlinked library placeholders (__$...$__) are not hex
            raise CompileError("Bytecode contains unlinked references", diagnostics) from e

        console.print(
            f"[green][COMPILER] PASSED: {rendered.contract_name} "
            f"({len(bytecode)} bytes, {warnings} warning(s))[/green]"
        )
        return CompilationArtifact(
            contract_name=rendered.contract_name,
            bytecode=bytecode,
            abi=contract.get("abi", []),
            diagnostics=tuple(diagnostics),
        )


def rank_diagnostics(entries: Sequence[dict[str, Any]]) -> list[Diagnostic]:
    """
    Convert solc error entries, errors first.

    The sort is stable, so solc's own order survives within a severity.
    Unknown severities are treated as errors.
    """
    diagnostics = []
    for entry in entries:
        try:
            severity = Severity(entry.get("severity", "error"))
        except ValueError:
            severity = Severity.ERROR
        diagnostics.append(
            Diagnostic(
                severity=severity,
                type=entry.get("type", ""),
                message=entry.get("message", ""),
                formatted_message=entry.get("formattedMessage", ""),
                source_location=entry.get("sourceLocation"),
            )
        )
    return sorted(diagnostics, key=lambda d: 0 if d.is_error else 1)
