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
from typing import Any, List, Optional

import jsonschema
from jsonschema.exceptions import best_match

from ..validation.model_names import tokens_to_json_pointer

JsonPointer = str


@dataclass(frozen=True)
class SchemaIssue:
    message: str
    yaml_path: Optional[JsonPointer] = None


def validate_against_schema(data: Any, json_schema_dict: dict) -> List[SchemaIssue]:
    """Validate data against a JSON Schema and return every issue found.

    For ``oneOf`` failures only the most relevant sub-error is reported, so
    a bad rule yields one message rather than one per alternative.
    """
    validator_cls = jsonschema.validators.validator_for(json_schema_dict)
    validator = validator_cls(json_schema_dict)

    issues: List[SchemaIssue] = []
    for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path]):
        if error.context:
            error = best_match(error.context) or error
        issues.append(SchemaIssue(message=error.message, yaml_path=tokens_to_json_pointer(list(error.absolute_path))))
    return issues
