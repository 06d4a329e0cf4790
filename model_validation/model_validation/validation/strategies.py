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

"""Strategies that enumerate the children of a model for validation.

A strategy answers one question for the validation engine: given the
metadata of a container, the key it lives under and the container itself,
which child values need validating and under which keys? The engine is
written once against :meth:`ValidationStrategy.get_children` and recurses
into whatever entries a strategy yields.

Strategies hold no mutable state. The ``INSTANCE`` singletons are shared by
every validation pass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Tuple

from ..exceptions import TraversalError
from ..models.metadata import KeyValuePair, ModelMetadata
from .model_names import create_index_model_name, create_property_model_name


@dataclass(frozen=True)
class ValidationEntry:
    """A child to validate: its key, its metadata and its value."""

    key: str
    metadata: ModelMetadata
    model: Any


class ValidationStrategy(ABC):
    """Abstract base for child enumeration strategies."""

    @abstractmethod
    def get_children(self, metadata: ModelMetadata, key: str, model: Any) -> Iterator[ValidationEntry]:
        """Return a lazy iterator over the children of ``model``."""


def _enumerate_items(model: Any) -> Iterable:
    """Return the values a container yields for validation.

    Mappings yield :class:`KeyValuePair` items; other iterables yield their
    elements.
    """
    if model is None:
        raise TraversalError("Cannot enumerate children of a None model")
    if isinstance(model, (str, bytes, bytearray)):
        raise TraversalError(
            f"Cannot enumerate children of a {type(model).__name__} model; "
            "strings are not validated as collections"
        )
    if isinstance(model, Mapping):
        return (KeyValuePair(k, v) for k, v in model.items())
    if not isinstance(model, Iterable):
        raise TraversalError(f"Model of type {type(model).__name__} is not enumerable")
    return model


class DefaultCollectionValidationStrategy(ValidationStrategy):
    """Enumerates collections and dictionaries by position.

    Every element gets the key ``key[i]`` and the container's
    ``element_metadata``. For a mapping the element is the whole
    ``(key, value)`` pair, and the mapping's own keys are not used in the
    generated path.
    """

    INSTANCE: "DefaultCollectionValidationStrategy"

    def get_children(self, metadata: ModelMetadata, key: str, model: Any) -> Iterator[ValidationEntry]:
        # Resolved before iteration starts so a bad model fails at call time.
        items = _enumerate_items(model)
        element_metadata = metadata.element_metadata
        return self._iterate(element_metadata, key, items)

    @staticmethod
    def _iterate(element_metadata: ModelMetadata, key: str, items: Iterable) -> Iterator[ValidationEntry]:
        for index, item in enumerate(items):
            yield ValidationEntry(create_index_model_name(key, index), element_metadata, item)


DefaultCollectionValidationStrategy.INSTANCE = DefaultCollectionValidationStrategy()


class ExplicitIndexCollectionValidationStrategy(ValidationStrategy):
    """Enumerates a collection using caller-supplied indices in the keys.

    Used when the values were bound from input that carried its own indices
    (``items[a]``, ``items[b]``). Keys and elements are paired in order;
    enumeration stops at the shorter of the two.
    """

    def __init__(self, element_keys: Sequence[Any]):
        self._element_keys: Tuple[Any, ...] = tuple(element_keys)

    @property
    def element_keys(self) -> Tuple[Any, ...]:
        return self._element_keys

    def get_children(self, metadata: ModelMetadata, key: str, model: Any) -> Iterator[ValidationEntry]:
        items = _enumerate_items(model)
        element_metadata = metadata.element_metadata
        return self._iterate(element_metadata, key, items)

    def _iterate(self, element_metadata: ModelMetadata, key: str, items: Iterable) -> Iterator[ValidationEntry]:
        for element_key, item in zip(self._element_keys, items):
            yield ValidationEntry(create_index_model_name(key, element_key), element_metadata, item)


class ShortFormDictionaryValidationStrategy(ValidationStrategy):
    """Enumerates dictionary values keyed by their dictionary keys.

    ``key_mappings`` pairs the text used in the path with the actual
    dictionary key, e.g. ``[("en", "en"), ("2", 2)]``. Only the values are
    validated, each against ``value_metadata``. Mappings whose key is absent
    from the model are skipped.
    """

    def __init__(self, key_mappings: Iterable[Tuple[str, Any]], value_metadata: ModelMetadata):
        self._key_mappings: Tuple[Tuple[str, Any], ...] = tuple(key_mappings)
        self._value_metadata = value_metadata

    def get_children(self, metadata: ModelMetadata, key: str, model: Any) -> Iterator[ValidationEntry]:
        if not isinstance(model, Mapping):
            raise TraversalError(
                f"Short form dictionary validation requires a mapping, got {type(model).__name__}"
            )
        return self._iterate(key, model)

    def _iterate(self, key: str, model: Mapping) -> Iterator[ValidationEntry]:
        for path_key, dict_key in self._key_mappings:
            if dict_key not in model:
                continue
            yield ValidationEntry(create_index_model_name(key, path_key), self._value_metadata, model[dict_key])


class DefaultComplexObjectValidationStrategy(ValidationStrategy):
    """Enumerates the properties of a complex object.

    Property values are read one at a time as the iterator advances.
    """

    INSTANCE: "DefaultComplexObjectValidationStrategy"

    def get_children(self, metadata: ModelMetadata, key: str, model: Any) -> Iterator[ValidationEntry]:
        return self._iterate(metadata.properties, key, model)

    @staticmethod
    def _iterate(properties: Tuple[ModelMetadata, ...], key: str, model: Any) -> Iterator[ValidationEntry]:
        for property_metadata in properties:
            child_key = create_property_model_name(key, property_metadata.property_name)
            yield ValidationEntry(child_key, property_metadata, property_metadata.get_property_value(model))


DefaultComplexObjectValidationStrategy.INSTANCE = DefaultComplexObjectValidationStrategy()


class DeclaredObjectValidationStrategy(DefaultComplexObjectValidationStrategy):
    """Property enumeration for declared object types backed by mappings.

    A value that is not a mapping has no children; the engine reports the
    type mismatch separately.
    """

    INSTANCE: "DeclaredObjectValidationStrategy"

    def get_children(self, metadata: ModelMetadata, key: str, model: Any) -> Iterator[ValidationEntry]:
        if not isinstance(model, Mapping):
            return iter(())
        return self._iterate(metadata.properties, key, model)


DeclaredObjectValidationStrategy.INSTANCE = DeclaredObjectValidationStrategy()
