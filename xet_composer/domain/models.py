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
# DOMAIN MODELS - THE COMPOSITION PIPELINE
# -----------------------------------------------------------------------------
# These Pydantic models are the hand-off contracts between stages:
#
#   raw params -> ParameterSet -> RenderedSource -> CompilationArtifact
#              -> DeploymentRequest -> DeploymentResult
#
# Each stage consumes exactly the previous stage's model. Models marked
# frozen are immutable once produced.
# -----------------------------------------------------------------------------

from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# -----------------------------------------------------------------------------
# TEMPLATE SCHEMA
# -----------------------------------------------------------------------------


class ParameterKind(str, Enum):
    """
    Closed set of substitutable parameter kinds.

    Each kind has exactly one literal encoding in the Renderer; a template
    cannot declare anything else.
    """

    ADDRESS = "address"
    UINT256 = "uint256"
    DURATION = "duration"
    TIMESTAMP = "timestamp"


class ConstraintRule(str, Enum):
    """Cross-field rules a template may declare."""

    LTE = "lte"  # fields[0] <= fields[1]
    GT_ZERO = "gt_zero"  # fields[0] > 0
    NOT_BEFORE_NOW = "not_before_now"  # fields[0] >= validation time
    SUM_FITS_UINT64 = "sum_fits_uint64"  # fields[0] + fields[1] <= 2**64 - 1


class ParameterSpec(BaseModel):
    """A single declared template parameter."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    kind: ParameterKind
    description: str = ""


class ConstraintSpec(BaseModel):
    """A declared semantic constraint over one or two parameters."""

    model_config = ConfigDict(frozen=True)

    rule: ConstraintRule
    fields: tuple[str, ...] = Field(..., min_length=1, max_length=2)

    @model_validator(mode="after")
    def _check_arity(self) -> "ConstraintSpec":
        single = (ConstraintRule.GT_ZERO, ConstraintRule.NOT_BEFORE_NOW)
        expected = 1 if self.rule in single else 2
        if len(self.fields) != expected:
            raise ValueError(f"rule '{self.rule.value}' takes {expected} field(s)")
        return self


class TemplateDescriptor(BaseModel):
    """
    Identifies a contract template and its declared parameter schema.

    The order of `parameters` is the constructor-argument order.
    """

    model_config = ConfigDict(frozen=True)

    template_id: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    contract_name: str = Field(..., pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    source_path: Path
    parameters: tuple[ParameterSpec, ...] = Field(..., min_length=1)
    constraints: tuple[ConstraintSpec, ...] = ()
    imports: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_references(self) -> "TemplateDescriptor":
        kinds = {p.name: p.kind for p in self.parameters}
        if len(kinds) != len(self.parameters):
            raise ValueError("duplicate parameter names")
        for constraint in self.constraints:
            for field_name in constraint.fields:
                if field_name not in kinds:
                    raise ValueError(f"constraint references undeclared parameter '{field_name}'")
                if kinds[field_name] == ParameterKind.ADDRESS:
                    raise ValueError(f"constraint on address parameter '{field_name}'")
        return self

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    def parameter(self, name: str) -> ParameterSpec:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        raise KeyError(name)


# -----------------------------------------------------------------------------
# STAGE OUTPUTS
# -----------------------------------------------------------------------------


class ParameterSet(BaseModel):
    """
    Validated parameters for exactly one template.

    Only the Validator builds these. Addresses are checksummed strings,
    every other kind is an int.
    """

    model_config = ConfigDict(frozen=True)

    template_id: str
    values: dict[str, str | int]
    validated_at: int


class RenderedSource(BaseModel):
    """Contract source text produced by typed substitution."""

    model_config = ConfigDict(frozen=True)

    template_id: str
    contract_name: str
    source_name: str
    text: str
    imports: tuple[str, ...] = ()


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Diagnostic(BaseModel):
    """One compiler message, kept verbatim."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    type: str = ""
    message: str
    formatted_message: str = ""
    source_location: dict[str, Any] | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


class CompilationArtifact(BaseModel):
    """
    Bytecode, ABI and diagnostics from one compiler run.

    Diagnostics are ranked: error severity first, original order otherwise.
    """

    model_config = ConfigDict(frozen=True)

    contract_name: str
    bytecode: bytes
    abi: list[dict[str, Any]]
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    @property
    def constructor(self) -> dict[str, Any] | None:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return entry
        return None


@runtime_checkable
class Signer(Protocol):
    """
    Capability that signs transactions without exposing key material.

    Implementations live in infra.signer.
    """

    @property
    def address(self) -> str: ...

    def sign_transaction(self, transaction: dict[str, Any]) -> bytes: ...


class DeploymentRequest(BaseModel):
    """
    Everything the Deployer needs for one creation transaction.

    Constructor arguments stay keyed by name; `argument_order` fixes the
    positional order used at the final ABI encode.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    artifact: CompilationArtifact
    constructor_args: dict[str, str | int]
    argument_order: tuple[str, ...]
    network: int = Field(..., gt=0)
    signer: Signer

    @field_validator("artifact")
    @classmethod
    def _artifact_is_clean(cls, artifact: CompilationArtifact) -> CompilationArtifact:
        if artifact.has_errors:
            raise ValueError("artifact carries error diagnostics and cannot be deployed")
        if not artifact.bytecode:
            raise ValueError("artifact has no bytecode")
        return artifact

    @model_validator(mode="after")
    def _args_match_order(self) -> "DeploymentRequest":
        if set(self.constructor_args) != set(self.argument_order):
            raise ValueError("constructor arguments do not match the declared parameters")
        if len(set(self.argument_order)) != len(self.argument_order):
            raise ValueError("argument order contains duplicates")
        return self

    @classmethod
    def from_stages(
        cls,
        descriptor: TemplateDescriptor,
        parameters: ParameterSet,
        artifact: CompilationArtifact,
        network: int,
        signer: Signer,
    ) -> "DeploymentRequest":
        """Assemble a request from a validated ParameterSet and a clean artifact."""
        if parameters.template_id != descriptor.template_id:
            raise ValueError("parameter set belongs to another template")
        return cls(
            artifact=artifact,
            constructor_args=dict(parameters.values),
            argument_order=descriptor.parameter_names,
            network=network,
            signer=signer,
        )


class DeploymentResult(BaseModel):
    """Terminal success value returned to the caller; never retained."""

    model_config = ConfigDict(frozen=True)

    contract_address: str
    transaction_hash: str
    abi: list[dict[str, Any]]
    message: str
    block_number: int | None = None
    gas_used: int | None = None


# -----------------------------------------------------------------------------
# BOUNDARY PAYLOADS
# -----------------------------------------------------------------------------


class DeployRequest(BaseModel):
    """Inbound payload from the presentation layer."""

    contract: str = Field(..., min_length=1, description="Template identifier")
    params: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(str_strip_whitespace=True)


class FieldError(BaseModel):
    field: str
    rule: str
    message: str


class DeployResponse(BaseModel):
    """
    Uniform result envelope.

    Only validation failures carry field_errors; other failures report the
    error kind and a stage-level message.
    """

    success: bool
    message: str
    contract_address: str | None = None
    transaction_hash: str | None = None
    abi: list[dict[str, Any]] | None = None
    error_kind: str | None = None
    stage: str | None = None
    field_errors: list[FieldError] | None = None
