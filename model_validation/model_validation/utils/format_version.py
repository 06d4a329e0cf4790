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

"""Checks for the ``model_validation_format`` field of descriptor files.

Only the major version has to match the library. A descriptor written for a
newer minor version is accepted with a warning; patch levels are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .. import DESCRIPTOR_FORMAT_VERSION
from ..exceptions import FormatVersionError

FORMAT_VERSION_FIELD = "model_validation_format"

_VERSION_RE = re.compile(r"v?(\d+)\.(\d+)\.(\d+)")


@dataclass(frozen=True, order=True)
class SemanticVersion:
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, raw: Any) -> "SemanticVersion":
        """Parse ``MAJOR.MINOR.PATCH``, optionally prefixed with ``v``.

        Raises:
            FormatVersionError: If ``raw`` is not such a string.
        """
        if not isinstance(raw, str):
            raise FormatVersionError(f"Format version must be a string, got {type(raw).__name__}: {raw!r}")
        match = _VERSION_RE.fullmatch(raw.strip())
        if match is None:
            raise FormatVersionError(f"Invalid format version '{raw}'. Expected MAJOR.MINOR.PATCH, e.g. '0.1.0'")
        return cls(*(int(part) for part in match.groups()))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_format_version(raw: Any) -> SemanticVersion:
    return SemanticVersion.parse(raw)


def get_supported_format_version() -> SemanticVersion:
    return SemanticVersion.parse(DESCRIPTOR_FORMAT_VERSION)


class Compatibility(Enum):
    COMPATIBLE = "compatible"
    MISSING = "missing"
    MINOR_NEWER = "minor_newer"
    INCOMPATIBLE = "incompatible"


@dataclass(frozen=True)
class VersionCheckResult:
    status: Compatibility
    message: str
    file_version: Optional[SemanticVersion] = None

    @property
    def compatible(self) -> bool:
        return self.status is not Compatibility.INCOMPATIBLE

    @property
    def minor_newer(self) -> bool:
        return self.status is Compatibility.MINOR_NEWER

    @property
    def should_warn(self) -> bool:
        return self.status in (Compatibility.MISSING, Compatibility.MINOR_NEWER)


def check_format_version(raw_version: Any, supported: Optional[SemanticVersion] = None) -> VersionCheckResult:
    """Compare a declared format version with the supported one."""
    supported = supported or get_supported_format_version()

    if raw_version is None:
        return VersionCheckResult(
            Compatibility.MISSING,
            f"Missing '{FORMAT_VERSION_FIELD}' field; assuming {supported}. "
            f"Add '{FORMAT_VERSION_FIELD}: {supported}' to the descriptor.",
        )

    try:
        declared = SemanticVersion.parse(raw_version)
    except FormatVersionError as exc:
        return VersionCheckResult(Compatibility.INCOMPATIBLE, str(exc))

    if declared.major != supported.major:
        return VersionCheckResult(
            Compatibility.INCOMPATIBLE,
            f"Descriptor format {declared} is not supported; this library reads major version "
            f"{supported.major} ({supported}).",
            declared,
        )
    if declared.minor > supported.minor:
        return VersionCheckResult(
            Compatibility.MINOR_NEWER,
            f"Descriptor format {declared} has a newer minor version than the supported {supported}; "
            "unknown rules will be rejected by the schema check.",
            declared,
        )
    return VersionCheckResult(Compatibility.COMPATIBLE, f"Descriptor format {declared} is supported.", declared)
