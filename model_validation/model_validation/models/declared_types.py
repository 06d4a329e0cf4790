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

"""Type keys for types declared in model descriptors.

Descriptor files name types with a small reference language::

    int | float | number | str | bool | any
    list[<ref>]
    dict[<ref>, <ref>]
    <DeclaredTypeName>

References parse into the frozen (hashable) keys below, which the metadata
provider uses exactly like Python types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from ..exceptions import DescriptorError


@dataclass(frozen=True)
class DeclaredScalar:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class DeclaredList:
    item: Any

    def __str__(self) -> str:
        return f"list[{self.item}]"


@dataclass(frozen=True)
class DeclaredDict:
    key: Any
    value: Any

    def __str__(self) -> str:
        return f"dict[{self.key}, {self.value}]"


@dataclass(frozen=True)
class DeclaredObject:
    name: str

    def __str__(self) -> str:
        return self.name


# bool is a subclass of int and is excluded from the numeric scalars.
SCALAR_TYPES: Dict[str, Tuple[type, ...]] = {
    "str": (str,),
    "int": (int,),
    "float": (float, int),
    "number": (int, float),
    "bool": (bool,),
    "any": (),
}
NON_BOOLEAN_SCALARS = {"int", "float", "number"}


def _split_arguments(text: str, reference: str) -> List[str]:
    """Split ``a, dict[b, c]`` on top-level commas."""
    parts: List[str] = []
    depth = 0
    current = ""
    for ch in text:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth < 0:
                raise DescriptorError(f"Unbalanced brackets in type reference '{reference}'")
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += ch
    if depth != 0:
        raise DescriptorError(f"Unbalanced brackets in type reference '{reference}'")
    parts.append(current.strip())
    return parts


def parse_type_reference(reference: str) -> Any:
    """Parse a type reference into a declared type key."""
    if not isinstance(reference, str) or not reference.strip():
        raise DescriptorError(f"Type reference must be a non-empty string, got: {reference!r}")

    text = reference.strip()
    if "[" not in text:
        if "]" in text or "," in text:
            raise DescriptorError(f"Invalid type reference '{reference}'")
        if text in SCALAR_TYPES:
            return DeclaredScalar(text)
        if not text.isidentifier():
            raise DescriptorError(f"Invalid type name '{text}' in type reference '{reference}'")
        return DeclaredObject(text)

    if not text.endswith("]"):
        raise DescriptorError(f"Invalid type reference '{reference}'")
    head, inner = text[:-1].split("[", 1)
    head = head.strip()
    arguments = _split_arguments(inner, reference)
    if any(not arg for arg in arguments):
        raise DescriptorError(f"Empty type argument in type reference '{reference}'")

    if head == "list":
        if len(arguments) != 1:
            raise DescriptorError(f"list[...] takes exactly one type argument: '{reference}'")
        return DeclaredList(parse_type_reference(arguments[0]))
    if head == "dict":
        if len(arguments) != 2:
            raise DescriptorError(f"dict[...] takes exactly two type arguments: '{reference}'")
        return DeclaredDict(parse_type_reference(arguments[0]), parse_type_reference(arguments[1]))
    raise DescriptorError(f"Unknown generic type '{head}' in type reference '{reference}'. Expected list or dict")


def iter_declared_objects(type_key: Any):
    """Yield every :class:`DeclaredObject` referenced by a type key."""
    if isinstance(type_key, DeclaredObject):
        yield type_key
    elif isinstance(type_key, DeclaredList):
        yield from iter_declared_objects(type_key.item)
    elif isinstance(type_key, DeclaredDict):
        yield from iter_declared_objects(type_key.key)
        yield from iter_declared_objects(type_key.value)
