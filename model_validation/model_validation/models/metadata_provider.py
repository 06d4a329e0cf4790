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

"""Creates and caches :class:`ModelMetadata` for type keys.

A type key is either a Python type (including ``typing`` constructs such as
``List[int]``, ``Optional[X]`` and ``Annotated[X, ...]``) or one of the
declared type keys produced from model descriptors. Each distinct key maps
to exactly one metadata object for the lifetime of the provider.
"""

import collections
import collections.abc as abc
import dataclasses
import datetime
import logging
import operator
import threading
import types
import uuid
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Annotated, Any, ClassVar, Dict, Literal, Tuple, TypeVar, Union, get_args, get_origin, get_type_hints

from ..exceptions import DescriptorError, MetadataError
from ..validation.strategies import (
    DeclaredObjectValidationStrategy,
    DefaultCollectionValidationStrategy,
    DefaultComplexObjectValidationStrategy,
)
from ..validation.validators import VALIDATABLE_OBJECT_ADAPTER, ModelValidator, ValidatableObject
from .declared_types import (
    NON_BOOLEAN_SCALARS,
    SCALAR_TYPES,
    DeclaredDict,
    DeclaredList,
    DeclaredObject,
    DeclaredScalar,
    iter_declared_objects,
)
from .descriptor import ModelDescriptor, TypeDescriptor
from .metadata import KeyValuePairType, ModelMetadata, ModelShape, PropertyDetails, TypeDetails

logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)

_SIMPLE_TYPES = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    bool,
    Decimal,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    PurePath,
    Enum,
    _NONE_TYPE,
)

_COLLECTION_TYPES = (list, tuple, set, frozenset, collections.deque)
_COLLECTION_ABCS = {
    abc.Iterable,
    abc.Collection,
    abc.Sequence,
    abc.MutableSequence,
    abc.Set,
    abc.MutableSet,
}
_MAPPING_ABCS = {abc.Mapping, abc.MutableMapping}

_UNION_ORIGINS = {Union}
if hasattr(types, "UnionType"):
    _UNION_ORIGINS.add(types.UnionType)

_DECLARED_KEYS = (DeclaredScalar, DeclaredList, DeclaredDict, DeclaredObject)


def _type_name(type_key: Any) -> str:
    if isinstance(type_key, type):
        return type_key.__name__
    return str(type_key)


def _attribute_getter(name: str):
    def getter(model: Any) -> Any:
        return getattr(model, name, None)

    return getter


def _mapping_getter(name: str):
    def getter(model: Any) -> Any:
        if isinstance(model, Mapping):
            return model.get(name)
        return None

    return getter


class ModelMetadataProvider:
    """Metadata provider with a per-instance, thread-safe cache."""

    def __init__(self):
        self._lock = threading.RLock()
        self._type_cache: Dict[Any, ModelMetadata] = {}
        self._property_cache: Dict[Any, Tuple[ModelMetadata, ...]] = {}
        self._declared_types: Dict[str, TypeDescriptor] = {}

    # ---- declared types ---------------------------------------------------

    def register_descriptor(self, descriptor: ModelDescriptor) -> None:
        """Make the types of a descriptor resolvable by this provider."""
        origin = f" from {descriptor.file_path}" if descriptor.file_path else ""
        with self._lock:
            for name, type_descriptor in descriptor.types.items():
                existing = self._declared_types.get(name)
                if existing is not None and existing != type_descriptor:
                    raise DescriptorError(
                        f"Type '{name}'{origin} is already registered with a different definition"
                    )

            known = set(self._declared_types) | set(descriptor.types)
            for type_descriptor in descriptor.types.values():
                for prop in type_descriptor.properties:
                    for ref in iter_declared_objects(prop.type_key):
                        if ref.name not in known:
                            raise DescriptorError(
                                f"Property '{type_descriptor.name}.{prop.name}' references undeclared type "
                                f"'{ref.name}'. Declared types: {sorted(known)}"
                            )

            self._declared_types.update(descriptor.types)
            logger.debug(f"Registered declared types: {sorted(descriptor.types)}")

    @property
    def declared_type_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._declared_types))

    def get_metadata_for_declared_type(self, name: str) -> ModelMetadata:
        return self.get_metadata_for_type(DeclaredObject(name))

    # ---- lookups ----------------------------------------------------------

    def get_metadata_for_type(self, type_key: Any) -> ModelMetadata:
        """Return the (cached) metadata for a type key."""
        try:
            metadata = self._type_cache.get(type_key)
        except TypeError as exc:
            raise MetadataError(f"Type key {type_key!r} is not hashable") from exc
        if metadata is not None:
            return metadata

        with self._lock:
            metadata = self._type_cache.get(type_key)
            if metadata is None:
                details = self._create_type_details(type_key)
                metadata = ModelMetadata(self, details)
                self._type_cache[type_key] = metadata
                logger.debug(f"Created metadata for {_type_name(type_key)} ({details.shape.value})")
            return metadata

    def get_metadata_for_properties(self, type_key: Any) -> Tuple[ModelMetadata, ...]:
        """Return the (cached) property metadata of a complex type."""
        properties = self._property_cache.get(type_key)
        if properties is not None:
            return properties

        with self._lock:
            properties = self._property_cache.get(type_key)
            if properties is None:
                details = self.get_metadata_for_type(type_key).details
                properties = tuple(
                    ModelMetadata(
                        self,
                        self.get_metadata_for_type(prop.type_key).details,
                        property_details=prop,
                        container_type=type_key,
                    )
                    for prop in details.properties
                )
                self._property_cache[type_key] = properties
            return properties

    # ---- details ----------------------------------------------------------

    def _create_type_details(self, type_key: Any) -> TypeDetails:
        if isinstance(type_key, _DECLARED_KEYS):
            return self._create_declared_details(type_key)
        if isinstance(type_key, KeyValuePairType):
            return self._create_pair_details(type_key)
        if isinstance(type_key, str):
            raise MetadataError(
                f"Type key '{type_key}' is a string; use get_metadata_for_declared_type() for declared types"
            )
        return self._create_python_details(type_key)

    def _create_pair_details(self, type_key: KeyValuePairType) -> TypeDetails:
        return TypeDetails(
            type_key=type_key,
            shape=ModelShape.COMPLEX,
            display_name=str(type_key),
            properties=(
                PropertyDetails("key", type_key.key_type, operator.itemgetter(0)),
                PropertyDetails("value", type_key.value_type, operator.itemgetter(1)),
            ),
            validation_strategy=DefaultComplexObjectValidationStrategy.INSTANCE,
        )

    def _create_python_details(self, type_key: Any) -> TypeDetails:
        origin = get_origin(type_key)
        args = get_args(type_key)

        if origin is Annotated:
            inner = self.get_metadata_for_type(args[0]).details
            extras = tuple(extra for extra in args[1:] if isinstance(extra, ModelValidator))
            return dataclasses.replace(inner, type_key=type_key, validators=extras + inner.validators)

        if origin in _UNION_ORIGINS:
            members = [arg for arg in args if arg is not _NONE_TYPE]
            nullable = len(members) != len(args)
            if len(members) == 1:
                inner = self.get_metadata_for_type(members[0]).details
                return dataclasses.replace(inner, type_key=type_key, is_nullable=inner.is_nullable or nullable)
            return TypeDetails(type_key=type_key, shape=ModelShape.ANY, display_name=str(type_key), is_nullable=nullable)

        if type_key is Any or type_key is object or isinstance(type_key, TypeVar):
            return TypeDetails(type_key=type_key, shape=ModelShape.ANY, display_name="object", is_nullable=True)

        if origin is Literal:
            return TypeDetails(type_key=type_key, shape=ModelShape.SIMPLE, display_name=str(type_key))

        target = origin if origin is not None else type_key
        if not isinstance(target, type):
            raise MetadataError(f"Cannot create metadata for {type_key!r}")

        display_name = target.__name__

        if issubclass(target, _SIMPLE_TYPES):
            return TypeDetails(
                type_key=type_key,
                shape=ModelShape.SIMPLE,
                display_name=display_name,
                is_nullable=target is _NONE_TYPE,
            )

        if target in _MAPPING_ABCS or (issubclass(target, Mapping) and not dataclasses.is_dataclass(target)):
            key_type = args[0] if len(args) > 0 else Any
            value_type = args[1] if len(args) > 1 else Any
            return TypeDetails(
                type_key=type_key,
                shape=ModelShape.DICTIONARY,
                display_name=display_name,
                element_type=KeyValuePairType(key_type, value_type),
                validation_strategy=DefaultCollectionValidationStrategy.INSTANCE,
            )

        is_named_tuple = issubclass(target, tuple) and hasattr(target, "_fields")
        if not is_named_tuple and (target in _COLLECTION_ABCS or issubclass(target, _COLLECTION_TYPES)):
            if issubclass(target, tuple):
                element_type = args[0] if len(args) == 2 and args[1] is Ellipsis else Any
            else:
                element_type = args[0] if args else Any
            return TypeDetails(
                type_key=type_key,
                shape=ModelShape.COLLECTION,
                display_name=display_name,
                element_type=element_type,
                validation_strategy=DefaultCollectionValidationStrategy.INSTANCE,
            )

        validators: Tuple[ModelValidator, ...] = ()
        if issubclass(target, ValidatableObject):
            validators = (VALIDATABLE_OBJECT_ADAPTER,)

        return TypeDetails(
            type_key=type_key,
            shape=ModelShape.COMPLEX,
            display_name=display_name,
            properties=self._create_python_properties(target),
            validators=validators,
            validation_strategy=DefaultComplexObjectValidationStrategy.INSTANCE,
        )

    @staticmethod
    def _create_python_properties(target: type) -> Tuple[PropertyDetails, ...]:
        try:
            hints = get_type_hints(target, include_extras=True)
        except (NameError, TypeError) as exc:
            raise MetadataError(f"Failed to resolve type hints of {target.__name__}: {exc}") from exc

        if dataclasses.is_dataclass(target):
            properties = []
            for f in dataclasses.fields(target):
                options = f.metadata or {}
                properties.append(
                    PropertyDetails(
                        name=f.name,
                        type_key=hints.get(f.name, Any),
                        getter=_attribute_getter(f.name),
                        validators=tuple(options.get("validators", ())),
                        display_name=options.get("display_name"),
                        validate_never=bool(options.get("validate_never", False)),
                    )
                )
            return tuple(properties)

        return tuple(
            PropertyDetails(name=name, type_key=hint, getter=_attribute_getter(name))
            for name, hint in hints.items()
            if not name.startswith("_") and get_origin(hint) is not ClassVar and hint is not ClassVar
        )

    def _create_declared_details(self, type_key: Any) -> TypeDetails:
        if isinstance(type_key, DeclaredScalar):
            if type_key.name not in SCALAR_TYPES:
                raise MetadataError(f"Unknown scalar type '{type_key.name}'")
            expected = SCALAR_TYPES[type_key.name]
            return TypeDetails(
                type_key=type_key,
                shape=ModelShape.ANY if not expected else ModelShape.SIMPLE,
                display_name=type_key.name,
                expected_types=expected,
                excluded_types=(bool,) if type_key.name in NON_BOOLEAN_SCALARS else (),
                is_nullable=True,
            )

        if isinstance(type_key, DeclaredList):
            return TypeDetails(
                type_key=type_key,
                shape=ModelShape.COLLECTION,
                display_name=str(type_key),
                element_type=type_key.item,
                validation_strategy=DefaultCollectionValidationStrategy.INSTANCE,
                expected_types=(list, tuple),
                is_nullable=True,
            )

        if isinstance(type_key, DeclaredDict):
            return TypeDetails(
                type_key=type_key,
                shape=ModelShape.DICTIONARY,
                display_name=str(type_key),
                element_type=KeyValuePairType(type_key.key, type_key.value),
                validation_strategy=DefaultCollectionValidationStrategy.INSTANCE,
                expected_types=(Mapping,),
                is_nullable=True,
            )

        descriptor = self._declared_types.get(type_key.name)
        if descriptor is None:
            raise MetadataError(
                f"Type '{type_key.name}' is not declared. Declared types: {sorted(self._declared_types)}"
            )
        return TypeDetails(
            type_key=type_key,
            shape=ModelShape.COMPLEX,
            display_name=descriptor.display_name or descriptor.name,
            properties=tuple(
                PropertyDetails(
                    name=prop.name,
                    type_key=prop.type_key,
                    getter=_mapping_getter(prop.name),
                    validators=prop.validators,
                    display_name=prop.display_name,
                    validate_never=prop.validate_never,
                )
                for prop in descriptor.properties
            ),
            validators=descriptor.validators,
            validation_strategy=DeclaredObjectValidationStrategy.INSTANCE,
            expected_types=(Mapping,),
            is_nullable=True,
        )
