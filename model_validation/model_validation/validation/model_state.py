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

"""Validation errors and validation state, keyed by model path."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple

from ..exceptions import ConfigurationError
from .model_names import is_prefix_of

logger = logging.getLogger(__name__)

DEFAULT_MAX_ALLOWED_ERRORS = 200


class ModelValidationState(Enum):
    UNVALIDATED = "unvalidated"
    INVALID = "invalid"
    VALID = "valid"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ModelError:
    message: str
    exception: Optional[BaseException] = None


@dataclass
class ModelStateEntry:
    errors: List[ModelError] = field(default_factory=list)
    validation_state: ModelValidationState = ModelValidationState.UNVALIDATED


class TooManyModelErrors(ModelError):
    """Marker error recorded once the error limit has been reached."""


class ModelStateDictionary:
    """Errors and validation state for one validation pass.

    Once ``max_allowed_errors`` errors have been recorded, a final
    :class:`TooManyModelErrors` error is added under the empty key and
    further errors are dropped.
    """

    def __init__(self, max_allowed_errors: int = DEFAULT_MAX_ALLOWED_ERRORS):
        if max_allowed_errors < 1:
            raise ConfigurationError(f"max_allowed_errors must be at least 1, got {max_allowed_errors}")
        self.max_allowed_errors = max_allowed_errors
        self._entries: Dict[str, ModelStateEntry] = {}
        self._error_count = 0
        self._has_reached_max_errors = False
        self._invalid_keys: Set[str] = set()

    # ---- mapping protocol ---------------------------------------------------

    def __getitem__(self, key: str) -> ModelStateEntry:
        return self._entries[key]

    def get(self, key: str, default: Optional[ModelStateEntry] = None) -> Optional[ModelStateEntry]:
        return self._entries.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self):
        return self._entries.keys()

    def items(self):
        return self._entries.items()

    # ---- errors -------------------------------------------------------------

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def has_reached_max_errors(self) -> bool:
        return self._has_reached_max_errors

    def _get_or_add(self, key: str) -> ModelStateEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = ModelStateEntry()
            self._entries[key] = entry
        return entry

    def try_add_model_error(self, key: str, message: str, exception: Optional[BaseException] = None) -> bool:
        """Record an error; return False if the error limit was already reached."""
        if self._error_count >= self.max_allowed_errors - 1:
            if not self._has_reached_max_errors:
                self._has_reached_max_errors = True
                entry = self._get_or_add("")
                entry.errors.append(
                    TooManyModelErrors(f"The number of validation errors exceeded the limit of {self.max_allowed_errors}.")
                )
                entry.validation_state = ModelValidationState.INVALID
                self._invalid_keys.add("")
                self._error_count += 1
                logger.warning(f"Validation error limit of {self.max_allowed_errors} reached; dropping further errors")
            return False

        entry = self._get_or_add(key)
        entry.errors.append(ModelError(message, exception))
        entry.validation_state = ModelValidationState.INVALID
        self._invalid_keys.add(key)
        self._error_count += 1
        return True

    def add_model_error(self, key: str, message: str, exception: Optional[BaseException] = None) -> None:
        self.try_add_model_error(key, message, exception)

    def get_errors(self, key: str) -> List[ModelError]:
        entry = self._entries.get(key)
        return list(entry.errors) if entry is not None else []

    def to_dict(self) -> Dict[str, List[str]]:
        """Messages per key, for keys that have errors."""
        return {key: [error.message for error in entry.errors] for key, entry in self._entries.items() if entry.errors}

    # ---- state --------------------------------------------------------------

    def mark_field_valid(self, key: str) -> None:
        entry = self._get_or_add(key)
        if entry.validation_state is ModelValidationState.INVALID:
            raise ConfigurationError(f"Cannot mark '{key}' valid; it already has errors")
        entry.validation_state = ModelValidationState.VALID

    def mark_field_skipped(self, key: str) -> None:
        entry = self._get_or_add(key)
        if entry.validation_state is ModelValidationState.INVALID:
            raise ConfigurationError(f"Cannot mark '{key}' skipped; it already has errors")
        entry.validation_state = ModelValidationState.SKIPPED

    def mark_prefix_skipped(self, prefix: str) -> None:
        """Mark ``prefix`` and every descendant without errors as skipped."""
        self._get_or_add(prefix)
        for key, entry in self._entries.items():
            if is_prefix_of(prefix, key) and entry.validation_state is not ModelValidationState.INVALID:
                entry.validation_state = ModelValidationState.SKIPPED

    def get_validation_state(self, key: str) -> ModelValidationState:
        entry = self._entries.get(key)
        if entry is None:
            return ModelValidationState.UNVALIDATED
        return entry.validation_state

    def find_keys_with_prefix(self, prefix: str) -> Iterator[Tuple[str, ModelStateEntry]]:
        for key, entry in self._entries.items():
            if is_prefix_of(prefix, key):
                yield key, entry

    def has_errors_under(self, prefix: str) -> bool:
        """Return True if ``prefix`` or any descendant has errors."""
        return any(is_prefix_of(prefix, key) for key in self._invalid_keys)

    def get_field_validation_state(self, key: str) -> ModelValidationState:
        """Combined state of ``key`` and its descendants."""
        if self.has_errors_under(key):
            return ModelValidationState.INVALID
        found = False
        has_unvalidated = False
        for _, entry in self.find_keys_with_prefix(key):
            found = True
            if entry.validation_state is ModelValidationState.INVALID:
                return ModelValidationState.INVALID
            if entry.validation_state is ModelValidationState.UNVALIDATED:
                has_unvalidated = True
        if not found or has_unvalidated:
            return ModelValidationState.UNVALIDATED
        return ModelValidationState.VALID

    @property
    def validation_state(self) -> ModelValidationState:
        if not self._entries:
            return ModelValidationState.VALID
        return self.get_field_validation_state("")

    @property
    def is_valid(self) -> bool:
        return self.validation_state in (ModelValidationState.VALID, ModelValidationState.SKIPPED)
