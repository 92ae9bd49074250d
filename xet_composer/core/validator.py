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
# THE GATEKEEPER - PARAMETER VALIDATOR
# -----------------------------------------------------------------------------
# Responsibility: Check caller-supplied parameters against a template's
# declared schema and constraints BEFORE anything is rendered.
#
# The deployed contract re-checks the same invariants in its constructor;
# rejecting here avoids paying for a transaction that would revert.
#
# All-or-nothing: the first violated rule rejects the whole set.
# -----------------------------------------------------------------------------

import re
import time
from collections.abc import Mapping
from typing import Any

from eth_utils import is_address, is_checksum_address, remove_0x_prefix, to_checksum_address
from rich.console import Console

from xet_composer.domain.errors import ValidationError
from xet_composer.domain.models import (
    ConstraintRule,
    ConstraintSpec,
    ParameterKind,
    ParameterSet,
    ParameterSpec,
    TemplateDescriptor,
)

console = Console()

ZERO_ADDRESS = "0x" + "0" * 40

UINT64_MAX = 2**64 - 1

# Inclusive upper bounds per kind. Durations and timestamps are uint64 on-chain.
KIND_MAX = {
    ParameterKind.UINT256: 2**256 - 1,
    ParameterKind.DURATION: UINT64_MAX,
    ParameterKind.TIMESTAMP: UINT64_MAX,
}

# ASCII only: str.isdigit() also accepts superscripts that int() refuses
DIGITS_PATTERN = re.compile(r"[0-9]+")


class ParameterValidator:
    """
    Validates raw parameters into a ParameterSet.

    Pure: no I/O, and given the same `now` the same input always yields the
    same result.
    """

    def validate(
        self,
        descriptor: TemplateDescriptor,
        raw_params: Mapping[str, Any],
        now: int | None = None,
    ) -> ParameterSet:
        """
        Validate every declared parameter and constraint.

        Args:
            descriptor: Template whose schema applies.
            raw_params: Caller input, name -> value.
            now: Validation time (unix seconds). Read once from the clock
                when omitted; never re-read afterwards.

        Returns:
            ParameterSet bound to `descriptor`.

        Raises:
            ValidationError: Names the offending field(s) and rule.
        """
        validated_at = int(time.time()) if now is None else int(now)
        console.print(f"[cyan][VALIDATOR] Checking parameters for {descriptor.template_id}[/cyan]")

        self._check_field_names(descriptor, raw_params)

        values: dict[str, str | int] = {}
        for spec in descriptor.parameters:
            values[spec.name] = self._coerce(spec, raw_params[spec.name])

        for constraint in descriptor.constraints:
            self._check_constraint(constraint, values, validated_at)

        console.print(f"[green][VALIDATOR] Parameters accepted: {descriptor.template_id}[/green]")
        return ParameterSet(
            template_id=descriptor.template_id, values=values, validated_at=validated_at
        )

    def _check_field_names(
        self, descriptor: TemplateDescriptor, raw_params: Mapping[str, Any]
    ) -> None:
        """Reject unknown and missing fields."""
        declared = descriptor.parameter_names
        for name in raw_params:
            if name not in declared:
                self._reject(f"Unknown parameter '{name}'", name, "unknown_field")
        for name in declared:
            if name not in raw_params or raw_params[name] is None:
                self._reject(f"Missing parameter '{name}'", name, "required")

    def _coerce(self, spec: ParameterSpec, raw: Any) -> str | int:
        if spec.kind == ParameterKind.ADDRESS:
            return self._coerce_address(spec.name, raw)
        return self._coerce_integer(spec, raw)

    def _coerce_address(self, name: str, raw: Any) -> str:
        if not isinstance(raw, str) or not is_address(raw.strip()):
            self._reject(f"'{name}' is not a valid address", name, "address_format")
        address = raw.strip()
        body = remove_0x_prefix(address)
        # Mixed case is a checksum claim; a wrong one means a mistyped address
        if body != body.lower() and body != body.upper() and not is_checksum_address(address):
            self._reject(f"'{name}' has an invalid EIP-55 checksum", name, "address_format")
        checksummed = to_checksum_address(address)
        if checksummed == ZERO_ADDRESS:
            self._reject(f"'{name}' must not be the zero address", name, "address_nonzero")
        return checksummed

    def _coerce_integer(self, spec: ParameterSpec, raw: Any) -> int:
        # bool is an int subclass; a checkbox value is never a duration
        if isinstance(raw, bool):
            value = None
        elif isinstance(raw, int):
            value = raw
        elif isinstance(raw, str) and DIGITS_PATTERN.fullmatch(raw.strip()):
            value = int(raw.strip())
        else:
            value = None

        if value is None:
            self._reject(f"'{spec.name}' must be an integer", spec.name, "integer")
        if value < 0:
            self._reject(f"'{spec.name}' must be non-negative", spec.name, "non_negative")
        if value > KIND_MAX[spec.kind]:
            self._reject(
                f"'{spec.name}' exceeds the {spec.kind.value} range", spec.name, "range"
            )
        return value

    def _check_constraint(
        self, constraint: ConstraintSpec, values: dict[str, str | int], now: int
    ) -> None:
        """Apply one declared cross-field rule."""
        first = constraint.fields[0]

        if constraint.rule == ConstraintRule.LTE:
            second = constraint.fields[1]
            if values[first] > values[second]:
                self._reject(
                    f"'{first}' ({values[first]}) must be <= '{second}' ({values[second]})",
                    first,
                    f"{first}<={second}",
                    fields=(first, second),
                )
        elif constraint.rule == ConstraintRule.GT_ZERO:
            if values[first] <= 0:
                self._reject(f"'{first}' must be greater than zero", first, f"{first}>0")
        elif constraint.rule == ConstraintRule.NOT_BEFORE_NOW:
            if values[first] < now:
                self._reject(
                    f"'{first}' ({values[first]}) is in the past (now: {now})",
                    first,
                    f"{first}>=now",
                )
        elif constraint.rule == ConstraintRule.SUM_FITS_UINT64:
            second = constraint.fields[1]
            if values[first] + values[second] > UINT64_MAX:
                self._reject(
                    f"'{first}' + '{second}' overflows uint64",
                    first,
                    f"{first}+{second}<=uint64",
                    fields=(first, second),
                )

    def _reject(self, message: str, field: str, rule: str, fields: tuple[str, ...] = ()) -> None:
        console.print(f"[red][VALIDATOR] Rejected: {message}[/red]")
        raise ValidationError(message, field=field, rule=rule, fields=fields)


_validator = ParameterValidator()


def validate(
    descriptor: TemplateDescriptor, raw_params: Mapping[str, Any], now: int | None = None
) -> ParameterSet:
    """Module-level shortcut for ParameterValidator().validate."""
    return _validator.validate(descriptor, raw_params, now=now)
