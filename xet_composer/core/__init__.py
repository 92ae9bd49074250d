# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The composition-and-deployment pipeline:
# - ParameterValidator: Gatekeeper for caller parameters
# - TemplateRenderer: Typed placeholder substitution
# - Deployer: Creation transactions via an injected Signer
# - DeploymentPipeline: Stage orchestrator
# - TemplateRepository: Read-only template source
# -----------------------------------------------------------------------------

from .deployer import Deployer, derive_contract_address
from xet_composer.domain.errors import (
    BroadcastError,
    CompileError,
    CompileTimeout,
    ConfirmationTimeout,
    DeployError,
    EncodingError,
    PipelineError,
    RenderError,
    SigningError,
    TemplateNotFound,
    ValidationError,
)
from .pipeline import DeploymentPipeline
from .renderer import TemplateRenderer, render
from .templates import TemplateRepository
from .validator import ParameterValidator, validate

__all__ = [
    "Deployer", "derive_contract_address",
    "BroadcastError", "CompileError", "CompileTimeout", "ConfirmationTimeout",
    "DeployError", "EncodingError", "PipelineError", "RenderError", "SigningError",
    "TemplateNotFound", "ValidationError",
    "DeploymentPipeline",
    "TemplateRenderer", "render",
    "TemplateRepository",
    "ParameterValidator", "validate",
]
