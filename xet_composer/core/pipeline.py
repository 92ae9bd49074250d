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
# THE PIPELINE - ORCHESTRATOR
# -----------------------------------------------------------------------------
# Sequences the stages for one deployment request:
#
#   Load template -> Validate -> Render -> Compile -> Deploy
#
# Each phase consumes exactly the previous phase's output. Any failure is
# terminal for the request: nothing is re-rendered, recompiled or
# rebroadcast. The HTTP boundary only ever talks to this module.
#
# Functions:
# - execute: run the stages, raising typed PipelineErrors
# - run: execute and map the outcome onto the uniform DeployResponse
# -----------------------------------------------------------------------------

import traceback
from collections.abc import Callable

from rich.console import Console

from xet_composer.config import Settings
from xet_composer.core.deployer import Deployer
from xet_composer.core.renderer import TemplateRenderer
from xet_composer.core.templates import TemplateRepository
from xet_composer.core.validator import ParameterValidator
from xet_composer.domain.errors import (
    CompileError,
    ConfirmationTimeout,
    PipelineError,
    TemplateNotFound,
    ValidationError,
)
from xet_composer.domain.models import (
    CompilationArtifact,
    DeploymentRequest,
    DeploymentResult,
    DeployRequest,
    DeployResponse,
    FieldError,
    ParameterSet,
    RenderedSource,
    Signer,
    TemplateDescriptor,
)
from xet_composer.infra.signer import build_signer
from xet_composer.infra.solc_client import SolcClient

console = Console()

# What the caller is told per error kind. Details stay in the server log.
FAILURE_MESSAGES = {
    "RenderError": "Contract source could not be rendered.",
    "CompileError": "Contract failed to compile.",
    "Timeout": "Compiler timed out.",
    "EncodingError": "Constructor arguments could not be encoded.",
    "SigningError": "Deployment transaction could not be signed.",
    "BroadcastError": "Deployment transaction was rejected by the network.",
    "ConfirmationTimeout": "Deployment transaction was not confirmed in time.",
}


class DeploymentPipeline:
    """
    The Orchestrator: template + parameters in, deployed contract out.

    Stateless between requests. The template repository, compiler settings
    and chain id are read-only; a fresh Deployer (own node connection) and
    signer are created per request.
    """

    def __init__(
        self,
        templates: TemplateRepository,
        compiler: SolcClient,
        deployer_factory: Callable[[], Deployer],
        signer_factory: Callable[[], Signer],
        chain_id: int,
    ) -> None:
        self._templates = templates
        self._compiler = compiler
        self._deployer_factory = deployer_factory
        self._signer_factory = signer_factory
        self._chain_id = chain_id
        self._validator = ParameterValidator()
        self._renderer = TemplateRenderer()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeploymentPipeline":
        return cls(
            templates=TemplateRepository(settings.templates_dir),
            compiler=SolcClient.from_settings(settings),
            deployer_factory=lambda: Deployer.from_settings(settings),
            signer_factory=lambda: build_signer(settings),
            chain_id=settings.chain_id,
        )

    @property
    def templates(self) -> TemplateRepository:
        return self._templates

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def execute(self, request: DeployRequest, now: int | None = None) -> DeploymentResult:
        """
        Run every stage, raising the first stage failure.

        Args:
            request: Template id and raw parameters.
            now: Validation time override (unix seconds).

        Raises:
            PipelineError: Subclass identifying the failing stage.
        """
        console.print(f"[cyan][PIPELINE] Request: {request.contract}[/cyan]")

        descriptor = self._templates.load(request.contract)
        parameters = self._phase_validate(descriptor, request.params, now)
        rendered = self._phase_render(descriptor, parameters)
        artifact = self._phase_compile(rendered)
        return self._phase_deploy(descriptor, parameters, artifact)

    def run(self, request: DeployRequest, now: int | None = None) -> DeployResponse:
        """Execute and map the outcome onto the uniform result envelope."""
        try:
            result = self.execute(request, now=now)
        except ValidationError as e:
            return DeployResponse(
                success=False,
                message=f"Invalid parameters: {e}",
                error_kind=e.kind,
                stage=e.stage,
                field_errors=[
                    FieldError(field=name, rule=e.rule, message=str(e)) for name in e.fields
                ],
            )
        except PipelineError as e:
            return self._failure(e)
        except Exception as e:
            console.print(f"[red][PIPELINE] Critical error: {e}[/red]")
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
            return DeployResponse(
                success=False,
                message="Deployment aborted by an internal error.",
                error_kind="InternalError",
            )

        return DeployResponse(
            success=True,
            message=result.message,
            contract_address=result.contract_address,
            transaction_hash=result.transaction_hash,
            abi=result.abi,
        )

    # =========================================================================
    # PHASES
    # =========================================================================

    def _phase_validate(
        self, descriptor: TemplateDescriptor, raw_params: dict, now: int | None
    ) -> ParameterSet:
        console.print(f"[cyan][PIPELINE] Phase 1/4: validate ({descriptor.template_id})[/cyan]")
        return self._validator.validate(descriptor, raw_params, now=now)

    def _phase_render(
        self, descriptor: TemplateDescriptor, parameters: ParameterSet
    ) -> RenderedSource:
        console.print("[cyan][PIPELINE] Phase 2/4: render[/cyan]")
        template_text = self._templates.read_source(descriptor)
        return self._renderer.render(descriptor, parameters, template_text)

    def _phase_compile(self, rendered: RenderedSource) -> CompilationArtifact:
        console.print("[cyan][PIPELINE] Phase 3/4: compile[/cyan]")
        try:
            return self._compiler.compile(rendered)
        except CompileError as e:
            for diagnostic in e.diagnostics:
                console.print(
                    f"[dim][COMPILER] {diagnostic.severity.value}: {diagnostic.message}[/dim]"
                )
            raise

    def _phase_deploy(
        self,
        descriptor: TemplateDescriptor,
        parameters: ParameterSet,
        artifact: CompilationArtifact,
    ) -> DeploymentResult:
        console.print("[cyan][PIPELINE] Phase 4/4: deploy[/cyan]")
        request = DeploymentRequest.from_stages(
            descriptor,
            parameters,
            artifact,
            network=self._chain_id,
            signer=self._signer_factory(),
        )
        return self._deployer_factory().deploy(request)

    def _failure(self, error: PipelineError) -> DeployResponse:
        console.print(
            f"[red][PIPELINE] {error.stage} failed ({error.kind}): {error}[/red]"
        )
        if error.details:
            console.print(f"[dim]{error.details}[/dim]")

        if isinstance(error, TemplateNotFound):
            message = f"Unknown contract template '{error.template_id}'."
        else:
            message = FAILURE_MESSAGES.get(error.kind, "Deployment failed.")

        return DeployResponse(
            success=False,
            message=message,
            error_kind=error.kind,
            stage=error.stage,
            transaction_hash=(
                error.transaction_hash if isinstance(error, ConfirmationTimeout) else None
            ),
        )
