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

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..validation.model_names import split_model_name, to_json_pointer, tokens_to_json_pointer

SourceMap = Dict[str, Dict[str, int]]


@dataclass(frozen=True)
class SourceLocation:
    file_path: Optional[Path] = None
    yaml_path: Optional[str] = None
    line: Optional[int] = None  # 1-based
    column: Optional[int] = None  # 1-based


def lookup_source(source_map: Optional[SourceMap], yaml_path: Optional[str], file_path: Optional[Path] = None) -> SourceLocation:
    entry = (source_map or {}).get(yaml_path) if yaml_path is not None else None
    entry = entry or {}
    return SourceLocation(file_path=file_path, yaml_path=yaml_path, line=entry.get("line"), column=entry.get("column"))


def source_for_model_key(source_map: Optional[SourceMap], key: str, file_path: Optional[Path] = None) -> SourceLocation:
    """Locate a model state key in a YAML document.

    Keys that do not map onto the document (e.g. positional dictionary
    entries) take the line of the closest ancestor that does.
    """
    tokens = split_model_name(key)
    yaml_path = to_json_pointer(key)
    while source_map:
        pointer = tokens_to_json_pointer(tokens)
        if pointer in source_map:
            found = lookup_source(source_map, pointer, file_path)
            return SourceLocation(file_path=file_path, yaml_path=yaml_path, line=found.line, column=found.column)
        if not tokens:
            break
        tokens = tokens[:-1]
    return SourceLocation(file_path=file_path, yaml_path=yaml_path)


def format_source(loc: Optional[SourceLocation]) -> str:
    """Render a location as a `` (file:line:column at /pointer)`` suffix."""
    if loc is None:
        return ""

    where = ""
    if loc.file_path is not None:
        where = str(loc.file_path)
        if loc.line is not None:
            where += f":{loc.line}"
            if loc.column is not None:
                where += f":{loc.column}"
    if loc.yaml_path:
        where = f"{where} at {loc.yaml_path}" if where else f"at {loc.yaml_path}"
    return f" ({where})" if where else ""
