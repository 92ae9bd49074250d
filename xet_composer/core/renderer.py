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
# THE RENDERER - TYPED TEMPLATE SUBSTITUTION
# -----------------------------------------------------------------------------
# Responsibility: Turn a template plus a validated ParameterSet into contract
# source text.
#
# Only declared, typed placeholders ({{ name }}) can be substituted, and each
# kind has exactly one literal encoding:
#   address               -> EIP-55 checksummed hex   (0xAbC...)
#   uint256/duration/time -> decimal literal          (31536000)
# Every literal is matched against its kind's grammar before it is written,
# so caller input can never change the meaning of the surrounding source.
# -----------------------------------------------------------------------------

import re
from collections.abc import Callable

from eth_utils import to_checksum_address
from rich.console import Console

from xet_composer.domain.errors import RenderError
from xet_composer.domain.models import (
    ParameterKind,
    ParameterSet,
    RenderedSource,
    TemplateDescriptor,
)

console = Console()

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def _encode_address(value: str | int) -> str:
    if not isinstance(value, str):
        raise TypeError("address value must be a string")
    return to_checksum_address(value)


def _encode_integer(value: str | int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("integer value must be an int")
    return str(value)


LITERAL_ENCODERS: dict[ParameterKind, Callable[[str | int], str]] = {
    ParameterKind.ADDRESS: _encode_address,
    ParameterKind.UINT256: _encode_integer,
    ParameterKind.DURATION: _encode_integer,
    ParameterKind.TIMESTAMP: _encode_integer,
}

LITERAL_GRAMMAR: dict[ParameterKind, re.Pattern[str]] = {
    ParameterKind.ADDRESS: re.compile(r"0x[0-9a-fA-F]{40}"),
    ParameterKind.UINT256: re.compile(r"0|[1-9][0-9]{0,77}"),
    ParameterKind.DURATION: re.compile(r"0|[1-9][0-9]{0,19}"),
    ParameterKind.TIMESTAMP: re.compile(r"0|[1-9][0-9]{0,19}"),
}


def _read_template(descriptor: TemplateDescriptor) -> str:
    try:
        return descriptor.source_path.read_text(encoding="utf-8")
    except OSError as e:
        raise RenderError(
            f"Template source for '{descriptor.template_id}' is unreadable",
            reason="template_not_found",
        ) from e


class TemplateRenderer:
    """Pure text transform from (descriptor, ParameterSet) to RenderedSource."""

    def render(
        self,
        descriptor: TemplateDescriptor,
        parameters: ParameterSet,
        template_text: str | None = None,
    ) -> RenderedSource:
        """
        Substitute every placeholder in `template_text`.

        Args:
            descriptor: Declares which placeholders exist and their kinds.
            parameters: Output of the Validator for this descriptor.
            template_text: Raw template source. Read from
                descriptor.source_path when omitted.

        Returns:
            RenderedSource with the declared imports, unresolved.

        Raises:
            RenderError: missing_placeholder, unsafe_substitution,
                template_mismatch or malformed_template.
        """
        if parameters.template_id != descriptor.template_id:
            raise RenderError(
                f"Parameters were validated for '{parameters.template_id}', "
                f"not '{descriptor.template_id}'",
                reason="template_mismatch",
            )

        literals = self._encode_literals(descriptor, parameters)
        if template_text is None:
            template_text = _read_template(descriptor)

        def _substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in literals:
                raise RenderError(
                    f"Template references undeclared placeholder '{name}'",
                    reason="missing_placeholder",
                    placeholder=name,
                )
            return literals[name]

        text = PLACEHOLDER_PATTERN.sub(_substitute, template_text)

        # Anything still looking like a placeholder was not a valid one
        if "{{" in text:
            raise RenderError(
                f"Template '{descriptor.template_id}' contains a malformed placeholder",
                reason="malformed_template",
            )

        console.print(f"[green][RENDERER] Rendered {descriptor.contract_name}.sol[/green]")
        return RenderedSource(
            template_id=descriptor.template_id,
            contract_name=descriptor.contract_name,
            source_name=f"{descriptor.contract_name}.sol",
            text=text,
            imports=descriptor.imports,
        )

    def _encode_literals(
        self, descriptor: TemplateDescriptor, parameters: ParameterSet
    ) -> dict[str, str]:
        literals: dict[str, str] = {}
        for spec in descriptor.parameters:
            if spec.name not in parameters.values:
                continue
            try:
                literal = LITERAL_ENCODERS[spec.kind](parameters.values[spec.name])
            except (TypeError, ValueError) as e:
                raise RenderError(
                    f"Value for '{spec.name}' cannot be encoded as {spec.kind.value}",
                    reason="unsafe_substitution",
                    placeholder=spec.name,
                ) from e
            if not LITERAL_GRAMMAR[spec.kind].fullmatch(literal):
                raise RenderError(
                    f"Literal for '{spec.name}' is not a plain {spec.kind.value}",
                    reason="unsafe_substitution",
                    placeholder=spec.name,
                )
            literals[spec.name] = literal
        return literals


_renderer = TemplateRenderer()


def render(
    descriptor: TemplateDescriptor,
    parameters: ParameterSet,
    template_text: str | None = None,
) -> RenderedSource:
    """Module-level shortcut for TemplateRenderer().render."""
    return _renderer.render(descriptor, parameters, template_text)
