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

"""Metadata describing the shape of types that take part in validation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, NamedTuple, Optional, Tuple

if TYPE_CHECKING:
    from ..validation.strategies import ValidationStrategy
    from ..validation.validators import ModelValidator
    from .metadata_provider import ModelMetadataProvider


class ModelMetadataKind(Enum):
    TYPE = "type"
    PROPERTY = "property"


class ModelShape(Enum):
    """How the validation engine treats values of a type."""

    SIMPLE = "simple"
    COLLECTION = "collection"
    DICTIONARY = "dictionary"
    COMPLEX = "complex"
    ANY = "any"


class KeyValuePair(NamedTuple):
    """One entry of a mapping, as handed to validation as a single model."""

    key: Any
    value: Any


@dataclass(frozen=True)
class KeyValuePairType:
    """Type key for the element type of a dictionary."""

    key_type: Any
    value_type: Any

    def __str__(self) -> str:
        return f"KeyValuePair[{_type_label(self.key_type)}, {_type_label(self.value_type)}]"


@dataclass(frozen=True)
class PropertyDetails:
    name: str
    type_key: Any
    getter: Callable[[Any], Any]
    validators: Tuple["ModelValidator", ...] = ()
    display_name: Optional[str] = None
    validate_never: bool = False
    is_nullable: bool = False


@dataclass(frozen=True)
class TypeDetails:
    """Everything the provider knows about a type key, computed once."""

    type_key: Any
    shape: ModelShape
    display_name: str
    element_type: Any = None
    properties: Tuple[PropertyDetails, ...] = ()
    validators: Tuple["ModelValidator", ...] = ()
    validation_strategy: Optional["ValidationStrategy"] = None
    # Runtime types a value must have; empty means the value is trusted.
    expected_types: Tuple[type, ...] = ()
    excluded_types: Tuple[type, ...] = ()
    is_nullable: bool = False


def _type_label(type_key: Any) -> str:
    if isinstance(type_key, type):
        return type_key.__name__
    return str(type_key)


class ModelMetadata:
    """Metadata for a type, or for a property of a complex type.

    Instances are created and cached by a :class:`ModelMetadataProvider`, so
    the same type key always maps to the same object. Element and property
    metadata are resolved lazily through the provider, which keeps recursive
    types finite.
    """

    def __init__(
        self,
        provider: "ModelMetadataProvider",
        details: TypeDetails,
        property_details: Optional[PropertyDetails] = None,
        container_type: Any = None,
    ):
        self._provider = provider
        self._details = details
        self._property = property_details
        self._container_type = container_type

        validators = details.validators
        if property_details is not None:
            validators = property_details.validators + validators
        self._validators = validators

    @property
    def metadata_kind(self) -> ModelMetadataKind:
        if self._property is not None:
            return ModelMetadataKind.PROPERTY
        return ModelMetadataKind.TYPE

    @property
    def model_type(self) -> Any:
        return self._details.type_key

    @property
    def details(self) -> TypeDetails:
        return self._details

    @property
    def property_name(self) -> Optional[str]:
        return self._property.name if self._property is not None else None

    @property
    def container_type(self) -> Any:
        return self._container_type

    @property
    def display_name(self) -> str:
        if self._property is not None:
            return self._property.display_name or self._property.name
        return self._details.display_name

    @property
    def shape(self) -> ModelShape:
        return self._details.shape

    @property
    def is_simple_type(self) -> bool:
        return self._details.shape is ModelShape.SIMPLE

    @property
    def is_complex_type(self) -> bool:
        return self._details.shape is ModelShape.COMPLEX

    @property
    def is_collection_type(self) -> bool:
        return self._details.shape in (ModelShape.COLLECTION, ModelShape.DICTIONARY)

    @property
    def is_enumerable_type(self) -> bool:
        return self.is_collection_type

    @property
    def is_dictionary(self) -> bool:
        return self._details.shape is ModelShape.DICTIONARY

    @property
    def is_any(self) -> bool:
        return self._details.shape is ModelShape.ANY

    @property
    def is_nullable(self) -> bool:
        if self._property is not None and self._property.is_nullable:
            return True
        return self._details.is_nullable

    @property
    def element_metadata(self) -> Optional["ModelMetadata"]:
        """Metadata of the element type; for a dictionary, of the key/value pair."""
        if not self.is_collection_type:
            return None
        return self._provider.get_metadata_for_type(self._details.element_type)

    @property
    def properties(self) -> Tuple["ModelMetadata", ...]:
        if not self.is_complex_type:
            return ()
        return self._provider.get_metadata_for_properties(self._details.type_key)

    @property
    def validators(self) -> Tuple["ModelValidator", ...]:
        return self._validators

    @property
    def validation_strategy(self) -> Optional["ValidationStrategy"]:
        return self._details.validation_strategy

    @property
    def validate_children(self) -> bool:
        return self._details.shape in (ModelShape.COLLECTION, ModelShape.DICTIONARY, ModelShape.COMPLEX)

    @property
    def validate_never(self) -> bool:
        return self._property is not None and self._property.validate_never

    @property
    def expected_types(self) -> Tuple[type, ...]:
        return self._details.expected_types

    def accepts(self, model: Any) -> bool:
        """Return True if ``model`` has one of the expected runtime types."""
        if not self._details.expected_types:
            return True
        if self._details.excluded_types and isinstance(model, self._details.excluded_types):
            return False
        return isinstance(model, self._details.expected_types)

    def get_property_value(self, container: Any) -> Any:
        if self._property is None:
            raise AttributeError(f"Metadata for '{self.display_name}' does not describe a property")
        return self._property.getter(container)

    def __repr__(self) -> str:
        if self._property is not None:
            return (
                f"ModelMetadata(property={self._property.name!r}, "
                f"container={_type_label(self._container_type)}, "
                f"type={_type_label(self.model_type)})"
            )
        return f"ModelMetadata(type={_type_label(self.model_type)}, shape={self.shape.value})"
