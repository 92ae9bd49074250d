# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Pydantic models passed between pipeline stages, plus the inbound/outbound
# payloads of the HTTP boundary.
# -----------------------------------------------------------------------------

from .models import (
    CompilationArtifact,
    ConstraintRule,
    ConstraintSpec,
    DeploymentRequest,
    DeploymentResult,
    DeployRequest,
    DeployResponse,
    Diagnostic,
    FieldError,
    ParameterKind,
    ParameterSet,
    ParameterSpec,
    RenderedSource,
    Severity,
    Signer,
    TemplateDescriptor,
)

__all__ = [
    "CompilationArtifact", "ConstraintRule", "ConstraintSpec",
    "DeploymentRequest", "DeploymentResult", "DeployRequest", "DeployResponse",
    "Diagnostic", "FieldError", "ParameterKind", "ParameterSet", "ParameterSpec",
    "RenderedSource", "Severity", "Signer", "TemplateDescriptor",
]
