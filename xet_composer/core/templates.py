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
# TEMPLATE SOURCE
# -----------------------------------------------------------------------------
# Responsibility: Read-only access to the contract templates. Each template
# is a pair of files in the templates directory:
#
#   <template_id>.yaml   declared parameter schema (order = constructor order)
#   <source>             Solidity source with {{ name }} placeholders
#
# The directory is never written to, so concurrent requests share it freely.
# -----------------------------------------------------------------------------

import re
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from xet_composer.config import DEFAULT_TEMPLATES_DIR
from xet_composer.domain.errors import RenderError, TemplateNotFound
from xet_composer.domain.models import TemplateDescriptor

console = Console()

TEMPLATE_ID_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


class TemplateRepository:
    """
    Loads TemplateDescriptors from a directory of YAML schemas.

    The file name is the template id; an id inside the file is ignored.
    """

    def __init__(self, templates_dir: Path = DEFAULT_TEMPLATES_DIR) -> None:
        self._templates_dir = Path(templates_dir)
        if not self._templates_dir.is_dir():
            console.print(
                f"[yellow][TEMPLATES] Template directory missing: {self._templates_dir}[/yellow]"
            )

    @property
    def templates_dir(self) -> Path:
        return self._templates_dir

    def list_templates(self) -> list[str]:
        """Identifiers of every template with a schema file."""
        if not self._templates_dir.is_dir():
            return []
        return sorted(
            path.stem
            for path in self._templates_dir.glob("*.yaml")
            if TEMPLATE_ID_PATTERN.match(path.stem)
        )

    def load(self, template_id: str) -> TemplateDescriptor:
        """
        Load and validate a template's descriptor.

        Args:
            template_id: Identifier, e.g. 'token_vesting'.

        Returns:
            Immutable TemplateDescriptor.

        Raises:
            TemplateNotFound: No such template.
            RenderError: Schema file is malformed.
        """
        # The id becomes a file name, so it must never carry path components
        if not TEMPLATE_ID_PATTERN.match(template_id):
            raise TemplateNotFound(template_id)

        schema_path = self._templates_dir / f"{template_id}.yaml"
        if not schema_path.is_file():
            raise TemplateNotFound(template_id)

        try:
            with open(schema_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            console.print(f"[red][TEMPLATES] Unparseable schema: {schema_path.name}[/red]")
            raise RenderError(
                f"Template schema for '{template_id}' is not valid YAML", reason="bad_schema"
            ) from e

        if not isinstance(data, dict):
            raise RenderError(
                f"Template schema for '{template_id}' is not a mapping", reason="bad_schema"
            )

        data.pop("template_id", None)
        source_name = data.pop("source", None)
        if not source_name:
            raise RenderError(
                f"Template '{template_id}' declares no source file", reason="bad_schema"
            )

        source_path = (self._templates_dir / source_name).resolve()
        if self._templates_dir.resolve() not in source_path.parents:
            raise RenderError(
                f"Template '{template_id}' source escapes the template directory",
                reason="bad_schema",
            )

        try:
            descriptor = TemplateDescriptor(
                template_id=template_id, source_path=source_path, **data
            )
        except PydanticValidationError as e:
            raise RenderError(
                f"Template schema for '{template_id}' is invalid", reason="bad_schema"
            ) from e

        console.print(
            f"[cyan][TEMPLATES] Loaded {template_id} "
            f"({len(descriptor.parameters)} parameters)[/cyan]"
        )
        return descriptor

    def read_source(self, descriptor: TemplateDescriptor) -> str:
        """Raw template text for a descriptor."""
        try:
            return descriptor.source_path.read_text(encoding="utf-8")
        except OSError as e:
            raise RenderError(
                f"Template source for '{descriptor.template_id}' is unreadable",
                reason="template_not_found",
            ) from e
