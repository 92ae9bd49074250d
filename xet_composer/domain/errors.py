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
# PIPELINE ERRORS
# -----------------------------------------------------------------------------
# One exception family for the whole pipeline. Every error names the stage it
# came from and a stable `kind`, so the Orchestrator can map any failure to
# the same envelope without inspecting messages.
#
# All of these are terminal for the current request. Nothing here is retried.
# -----------------------------------------------------------------------------

from collections.abc import Sequence

from xet_composer.domain.models import Diagnostic


class PipelineError(Exception):
    """Base class for every stage failure."""

    stage = "pipeline"
    kind = "PipelineError"

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message)
        self.details = details


# -----------------------------------------------------------------------------
# STAGE 1: VALIDATION
# -----------------------------------------------------------------------------


class ValidationError(PipelineError):
    """
    A parameter violated a declared rule.

    The only error whose field-level detail is shown to the caller.
    """

    stage = "validate"
    kind = "ValidationError"

    def __init__(self, message: str, field: str, rule: str, fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.field = field
        self.rule = rule
        self.fields = tuple(fields) or (field,)


# -----------------------------------------------------------------------------
# STAGE 2: RENDERING
# -----------------------------------------------------------------------------


class RenderError(PipelineError):
    """Template could not be turned into safe source text."""

    stage = "render"
    kind = "RenderError"

    def __init__(self, message: str, reason: str, placeholder: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.placeholder = placeholder


class TemplateNotFound(RenderError):
    """No template with the requested identifier."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Unknown template '{template_id}'", reason="template_not_found")
        self.template_id = template_id


# -----------------------------------------------------------------------------
# STAGE 3: COMPILATION
# -----------------------------------------------------------------------------


class CompileError(PipelineError):
    """Compiler failed or reported error-severity diagnostics."""

    stage = "compile"
    kind = "CompileError"

    def __init__(
        self, message: str, diagnostics: Sequence[Diagnostic] = (), details: str = ""
    ) -> None:
        super().__init__(message, details)
        self.diagnostics = tuple(diagnostics)

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.is_error)


class CompileTimeout(CompileError):
    """Compiler did not finish in time and was killed."""

    kind = "Timeout"


# -----------------------------------------------------------------------------
# STAGE 4: DEPLOYMENT
# -----------------------------------------------------------------------------


class DeployError(PipelineError):
    stage = "deploy"
    kind = "DeployError"


class EncodingError(DeployError):
    """Constructor arguments do not fit the ABI constructor."""

    kind = "EncodingError"


class SigningError(DeployError):
    """Signer refused or was unreachable."""

    kind = "SigningError"


class BroadcastError(DeployError):
    """Node rejected the transaction, or it reverted."""

    kind = "BroadcastError"


class ConfirmationTimeout(DeployError):
    """
    Transaction was broadcast but not confirmed in time.

    The transaction may still be mined; it is reported, never resubmitted.
    """

    kind = "ConfirmationTimeout"

    def __init__(self, message: str, transaction_hash: str) -> None:
        super().__init__(message)
        self.transaction_hash = transaction_hash
