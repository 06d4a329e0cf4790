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

"""Loads the versioned JSON Schemas shipped under ``model_validation/schema``."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Tuple

from ..exceptions import FormatVersionError
from ..utils.format_version import SemanticVersion

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).parent.parent / "schema"

_SCHEMA_CACHE: Dict[Tuple[str, str], dict] = {}


def get_schema_path(schema_name: str, version: str) -> Path:
    return SCHEMA_DIR / version / f"{schema_name}.json"


def _available_versions(schema_name: str) -> List[SemanticVersion]:
    versions = []
    for path in SCHEMA_DIR.glob(f"*/{schema_name}.json"):
        try:
            versions.append(SemanticVersion.parse(path.parent.name))
        except FormatVersionError:
            continue
    return versions


def resolve_schema_version(schema_name: str, version: str) -> str:
    """Pick the schema directory for a declared format version.

    An exact match wins. Otherwise the closest version with the same major is
    used: the same minor first, then the nearest newer minor, then the newest
    older one. Versions with no candidate are returned unchanged.
    """
    if get_schema_path(schema_name, version).exists():
        return version
    try:
        wanted = SemanticVersion.parse(version)
    except FormatVersionError:
        return version

    candidates = [v for v in _available_versions(schema_name) if v.major == wanted.major]
    if not candidates:
        return version

    def distance(candidate: SemanticVersion) -> Tuple[int, ...]:
        if candidate.minor == wanted.minor:
            return (0, -candidate.patch)
        if candidate.minor > wanted.minor:
            return (1, candidate.minor, -candidate.patch)
        return (2, -candidate.minor, -candidate.patch)

    return str(min(candidates, key=distance))


def load_schema(schema_name: str, version: str) -> dict:
    """Load (and cache) a JSON Schema.

    Raises:
        FileNotFoundError: If no schema matches the version
    """
    resolved = resolve_schema_version(schema_name, version)
    cache_key = (schema_name, resolved)
    if cache_key not in _SCHEMA_CACHE:
        path = get_schema_path(schema_name, resolved)
        if not path.exists():
            raise FileNotFoundError(f"No {schema_name} schema for format version {version}: {path}")
        logger.debug(f"Loading JSON Schema {path}")
        with open(path, "r", encoding="utf-8") as f:
            _SCHEMA_CACHE[cache_key] = json.load(f)
    return _SCHEMA_CACHE[cache_key]


def clear_cache() -> None:
    _SCHEMA_CACHE.clear()
