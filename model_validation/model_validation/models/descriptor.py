# Copyright 2025 TIER IV, inc.
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

"""In-memory form of a parsed model descriptor.

Descriptor records compare by what was written in the file. Validators are
built from the rule specs and compare by identity, so ``rule_specs`` carries
each rule in canonical JSON and equality is decided on that instead.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from ..exceptions import DescriptorError

if TYPE_CHECKING:
    from ..validation.validators import ModelValidator

RuleSpecs = Tuple[Tuple[str, str], ...]


def canonical_rule_specs(rules: Mapping[str, Any]) -> RuleSpecs:
    """Return ``rules`` as sorted ``(name, json)`` pairs."""
    return tuple(sorted((name, json.dumps(spec, sort_keys=True, default=str)) for name, spec in rules.items()))


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    type_key: Any
    validators: Tuple["ModelValidator", ...] = field(default=(), compare=False)
    display_name: Optional[str] = None
    description: Optional[str] = None
    validate_never: bool = False
    yaml_path: Optional[str] = field(default=None, compare=False)
    rule_specs: RuleSpecs = ()


@dataclass(frozen=True)
class TypeDescriptor:
    name: str
    properties: Tuple[PropertyDescriptor, ...] = ()
    validators: Tuple["ModelValidator", ...] = field(default=(), compare=False)
    display_name: Optional[str] = None
    description: Optional[str] = None
    yaml_path: Optional[str] = field(default=None, compare=False)
    rule_specs: RuleSpecs = ()


@dataclass
class ModelDescriptor:
    types: Dict[str, TypeDescriptor]
    root: Optional[str] = None
    format_version: Optional[str] = None
    file_path: Optional[Path] = None
    source_map: Dict[str, Dict[str, int]] = field(default_factory=dict)

    def get_type(self, name: str) -> TypeDescriptor:
        descriptor = self.types.get(name)
        if descriptor is None:
            raise DescriptorError(f"Type '{name}' is not declared. Declared types: {sorted(self.types)}")
        return descriptor

    def get_root_type(self, name: Optional[str] = None) -> TypeDescriptor:
        """Return the named type, falling back to the descriptor's ``root``."""
        target = name or self.root
        if not target:
            source = f" {self.file_path}" if self.file_path else ""
            raise DescriptorError(f"No type given and descriptor{source} declares no 'root' type")
        return self.get_type(target)
