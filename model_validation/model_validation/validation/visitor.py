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

"""Recursive validation of a model graph.

The visitor walks the graph depth first. Containers are expanded by the
:class:`ValidationStrategy` their metadata names, so the walk itself does not
care whether a node is a list, a mapping or an object. Errors land in a
:class:`ModelStateDictionary` under the key of the node that produced them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from ..config import ValidationConfig, validation_config
from ..exceptions import ValidationDepthExceededError
from ..models.metadata import ModelMetadata
from ..models.metadata_provider import ModelMetadataProvider
from ..utils.message_templates import render_message
from .model_names import create_property_model_name
from .model_state import ModelStateDictionary, ModelValidationState
from .strategies import (
    DefaultCollectionValidationStrategy,
    DefaultComplexObjectValidationStrategy,
    ValidationStrategy,
)
from .validators import ModelValidationContext, ModelValidator

logger = logging.getLogger(__name__)

TYPE_MISMATCH_MESSAGE = "The value {{ value }} is not valid for {{ name }}; expected {{ expected }}."
_MAX_VALUE_REPR = 60


@dataclass(frozen=True)
class ValidationStateEntry:
    """Overrides for one model instance, usually recorded while binding it."""

    key: Optional[str] = None
    metadata: Optional[ModelMetadata] = None
    strategy: Optional[ValidationStrategy] = None
    suppress_validation: bool = False


class ValidationStateDictionary:
    """:class:`ValidationStateEntry` objects keyed by model identity."""

    def __init__(self):
        # the model is kept alongside its entry so its id() stays valid
        self._entries: Dict[int, Tuple[Any, ValidationStateEntry]] = {}

    def __setitem__(self, model: Any, entry: ValidationStateEntry) -> None:
        self._entries[id(model)] = (model, entry)

    def get(self, model: Any) -> Optional[ValidationStateEntry]:
        item = self._entries.get(id(model))
        if item is None or item[0] is not model:
            return None
        return item[1]

    def __contains__(self, model: Any) -> bool:
        return self.get(model) is not None

    def __len__(self) -> int:
        return len(self._entries)


def _value_repr(value: Any) -> str:
    text = repr(value)
    if len(text) > _MAX_VALUE_REPR:
        text = text[: _MAX_VALUE_REPR - 3] + "..."
    return text


def _fits_shape(metadata: ModelMetadata, model: Any) -> bool:
    """Return False if a collection or dictionary shape cannot enumerate ``model``."""
    if metadata.is_dictionary:
        return isinstance(model, Mapping)
    if metadata.is_collection_type:
        return isinstance(model, Iterable) and not isinstance(model, (str, bytes, bytearray))
    return True


class ValidationVisitor:
    """Validates one model graph into one :class:`ModelStateDictionary`.

    A visitor tracks the current path through the graph and must not be
    shared between concurrent validation passes.
    """

    def __init__(
        self,
        metadata_provider: ModelMetadataProvider,
        model_state: ModelStateDictionary,
        config: Optional[ValidationConfig] = None,
        validation_state: Optional[ValidationStateDictionary] = None,
    ):
        self.metadata_provider = metadata_provider
        self.model_state = model_state
        self.config = config or validation_config
        self.validation_state = validation_state
        self._current_path: List[int] = []
        self._current_ids: Set[int] = set()

    def validate(
        self,
        metadata: ModelMetadata,
        key: Optional[str],
        model: Any,
        always_validate_at_top_level: bool = False,
    ) -> bool:
        """Validate ``model`` and everything reachable from it.

        Returns True if no errors were recorded under ``key``.
        """
        key = key or ""
        if model is None and not always_validate_at_top_level:
            if self.model_state.get_validation_state(key) is not ModelValidationState.INVALID:
                self.model_state.mark_field_valid(key)
                return True
            return False
        return self._visit(metadata, key, model, container=None)

    # ---- traversal ------------------------------------------------------------

    def _visit(self, metadata: ModelMetadata, key: str, model: Any, container: Any) -> bool:
        if self.model_state.has_reached_max_errors:
            self._suppress(key)
            return False

        strategy: Optional[ValidationStrategy] = None
        if model is not None and self.validation_state is not None:
            entry = self.validation_state.get(model)
            if entry is not None:
                key = entry.key if entry.key is not None else key
                metadata = entry.metadata or metadata
                strategy = entry.strategy
                if entry.suppress_validation:
                    self._suppress(key)
                    return True

        if metadata.validate_never:
            self._suppress(key)
            return True

        if model is not None and not metadata.accepts(model):
            self._add_type_mismatch(metadata, key, model)
            return False

        validators: Sequence[ModelValidator] = metadata.validators
        shape_metadata = metadata
        if metadata.is_any and model is not None:
            shape_metadata = self.metadata_provider.get_metadata_for_type(type(model))
            validators = tuple(validators) + tuple(shape_metadata.validators)

        if model is not None and not _fits_shape(shape_metadata, model):
            self._add_type_mismatch(metadata, key, model)
            return False

        is_container = shape_metadata.is_collection_type or shape_metadata.is_complex_type
        tracked = model is not None and is_container
        if tracked:
            if id(model) in self._current_ids:
                logger.debug(f"Skipping '{key}': model is already being validated further up the path")
                self._suppress(key)
                return True
            max_depth = self.config.max_validation_depth
            if max_depth is not None and len(self._current_path) >= max_depth:
                raise ValidationDepthExceededError(
                    f"Validation of '{key}' exceeded the maximum depth of {max_depth}. "
                    "The model graph is nested too deeply or contains a reference cycle."
                )
            self._current_path.append(id(model))
            self._current_ids.add(id(model))

        try:
            if is_container:
                return self._visit_complex_type(metadata, shape_metadata, validators, key, model, container, strategy)
            return self._validate_node(metadata, validators, key, model, container)
        finally:
            if tracked:
                self._current_ids.discard(self._current_path.pop())

    def _visit_complex_type(
        self,
        metadata: ModelMetadata,
        shape_metadata: ModelMetadata,
        validators: Sequence[ModelValidator],
        key: str,
        model: Any,
        container: Any,
        strategy: Optional[ValidationStrategy],
    ) -> bool:
        is_valid = True
        if model is not None and shape_metadata.validate_children:
            if strategy is None:
                strategy = shape_metadata.validation_strategy
            if strategy is None:
                if shape_metadata.is_enumerable_type:
                    strategy = DefaultCollectionValidationStrategy.INSTANCE
                else:
                    strategy = DefaultComplexObjectValidationStrategy.INSTANCE
            is_valid = self._visit_children(strategy, shape_metadata, key, model)

        if (is_valid or self.config.validate_complex_types_if_child_validation_fails) and (
            not self.model_state.has_reached_max_errors
        ):
            is_valid = self._validate_node(metadata, validators, key, model, container) and is_valid
        return is_valid

    def _visit_children(self, strategy: ValidationStrategy, metadata: ModelMetadata, key: str, model: Any) -> bool:
        is_valid = True
        for entry in strategy.get_children(metadata, key, model):
            if self.model_state.has_reached_max_errors:
                self._suppress(entry.key)
                return False
            if not self._visit(entry.metadata, entry.key, entry.model, container=model):
                is_valid = False
        return is_valid

    def _validate_node(
        self,
        metadata: ModelMetadata,
        validators: Sequence[ModelValidator],
        key: str,
        model: Any,
        container: Any,
    ) -> bool:
        # The same key can be reached twice; don't pile errors onto a key that already failed.
        if validators and self.model_state.get_validation_state(key) is not ModelValidationState.INVALID:
            context = ModelValidationContext(
                metadata=metadata,
                model=model,
                key=key,
                container=container,
                metadata_provider=self.metadata_provider,
            )
            for validator in validators:
                for result in validator.validate(context):
                    error_key = create_property_model_name(key, result.member_name)
                    self.model_state.try_add_model_error(error_key, result.message)

        if self.model_state.has_errors_under(key):
            return False
        if self.model_state.has_reached_max_errors:
            # errors for this node may have been dropped
            return False
        self.model_state.mark_field_valid(key)
        return True

    def _add_type_mismatch(self, metadata: ModelMetadata, key: str, model: Any) -> None:
        message = render_message(
            TYPE_MISMATCH_MESSAGE,
            value=_value_repr(model),
            name=metadata.display_name,
            expected=str(metadata.model_type),
        )
        self.model_state.try_add_model_error(key, message)

    def _suppress(self, key: str) -> None:
        if self.model_state.get_validation_state(key) is not ModelValidationState.INVALID:
            self.model_state.mark_field_skipped(key)
