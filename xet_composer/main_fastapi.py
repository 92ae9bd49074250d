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
# XET COMPOSER - FASTAPI INTERFACE
# -----------------------------------------------------------------------------
# The inbound boundary for the presentation layer.
#
# Endpoints:
# - GET  /health          : Health check
# - GET  /api/templates   : Available contract templates and their parameters
# - POST /api/deploy      : Validate -> Render -> Compile -> Deploy
# - POST /api/kyc         : KYC format pre-check
# -----------------------------------------------------------------------------

import asyncio
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel

from xet_composer import __version__
from xet_composer.config import PROJECT_ROOT, load_settings
from xet_composer.core.kyc import KycRejected, check_kyc
from xet_composer.core.pipeline import DeploymentPipeline
from xet_composer.domain.errors import RenderError
from xet_composer.domain.models import DeployRequest, DeployResponse, TemplateDescriptor

# Load environment variables
load_dotenv(PROJECT_ROOT / ".env")

console = Console()

# Pipeline (lazy init, settings are read once)
_pipeline: DeploymentPipeline | None = None


def get_pipeline() -> DeploymentPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = DeploymentPipeline.from_settings(load_settings())
    return _pipeline


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    print_banner()
    pipeline = get_pipeline()
    console.print(
        f"[green]XET COMPOSER ONLINE - {len(pipeline.templates.list_templates())} template(s)[/green]"
    )

    yield

    console.print("[yellow]XET COMPOSER SHUTTING DOWN[/yellow]")


app = FastAPI(
    title="Xet Composer",
    description="Compose, compile and deploy smart-contract templates",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================


class TemplateParameter(BaseModel):
    name: str
    kind: str
    description: str


class TemplateInfo(BaseModel):
    template_id: str
    contract_name: str
    parameters: list[TemplateParameter]


class KycRequest(BaseModel):
    legal_name: str
    wallet_address: str
    signature_hash: str


class KycResponse(BaseModel):
    success: bool
    message: str
    field: str | None = None


def _describe(descriptor: TemplateDescriptor) -> TemplateInfo:
    return TemplateInfo(
        template_id=descriptor.template_id,
        contract_name=descriptor.contract_name,
        parameters=[
            TemplateParameter(name=p.name, kind=p.kind.value, description=p.description)
            for p in descriptor.parameters
        ],
    )


# =============================================================================
# ENDPOINTS
# =============================================================================


@app.get("/health")
async def health_check():
    """Health check for load balancers."""
    return {"status": "online", "service": "xet-composer", "version": __version__}


@app.get("/api/templates", response_model=list[TemplateInfo])
async def list_templates():
    """Describe every loadable template."""
    repository = get_pipeline().templates
    templates = []
    for template_id in repository.list_templates():
        try:
            templates.append(_describe(repository.load(template_id)))
        except RenderError as e:
            console.print(f"[yellow][API] Skipping template {template_id}: {e}[/yellow]")
    return templates


@app.get("/api/templates/{template_id}", response_model=TemplateInfo)
async def get_template(template_id: str):
    """Describe one template."""
    try:
        descriptor = get_pipeline().templates.load(template_id)
    except RenderError:
        raise HTTPException(status_code=404, detail="Template not found")
    return _describe(descriptor)


@app.post("/api/deploy", response_model=DeployResponse)
async def deploy(request: DeployRequest):
    """
    Run the full pipeline for one template.

    Always answers 200 with the uniform envelope; `success` tells the outcome.
    The pipeline blocks on solc and the node, so it runs in a worker thread.
    """
    console.print(f"[cyan][API] Deploy request: {request.contract}[/cyan]")
    return await asyncio.to_thread(get_pipeline().run, request)


@app.post("/api/kyc", response_model=KycResponse)
async def kyc(request: KycRequest):
    """Format pre-check of a KYC submission."""
    try:
        check_kyc(request.legal_name, request.wallet_address, request.signature_hash)
    except KycRejected as e:
        return KycResponse(success=False, message=str(e), field=e.field)
    return KycResponse(success=True, message="KYC submission accepted.")


# =============================================================================
# BANNER
# =============================================================================


def print_banner() -> None:
    """Print the startup banner."""
    banner = f"""
    ╔═══════════════════════════════════════════════════╗
    ║           XET COMPOSER v{__version__:<26}║
    ║  • Typed template rendering                       ║
    ║  • solc standard-JSON compilation                 ║
    ║  • Signer-agnostic deployment                     ║
    ╚═══════════════════════════════════════════════════╝
    """
    console.print(Panel(banner, border_style="cyan"))


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("XET_PORT", "8000"))
    uvicorn.run(app, host="0.0.0.0", port=port)
