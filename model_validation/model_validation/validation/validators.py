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

"""Validators attached to model metadata.

Validators run against one node of the model graph at a time and report
:class:`ValidationResult` objects. A result's ``member_name`` is appended to
the node's key, so a validator on ``order`` reporting ``member_name="id"``
produces an error under ``order.id``.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sized
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Type

import jsonschema
from jsonschema.exceptions import SchemaError

from ..exceptions import DescriptorError
from ..utils.message_templates import render_message
from .model_names import create_index_model_name, create_property_model_name

if TYPE_CHECKING:
    from ..models.metadata import ModelMetadata
    from ..models.metadata_provider import ModelMetadataProvider


@dataclass(frozen=True)
class ValidationResult:
    message: str
    member_name: str = ""


@dataclass(frozen=True)
class ModelValidationContext:
    """What a validator sees of the node being validated."""

    metadata: "ModelMetadata"
    model: Any
    key: str = ""
    container: Any = None
    metadata_provider: Optional["ModelMetadataProvider"] = None


class ModelValidator(ABC):
    """Abstract base validator."""

    RULE_NAME: str = ""
    DEFAULT_MESSAGE: str = "The field {{ name }} is invalid."

    def __init__(self, message: Optional[str] = None):
        self.message_template = message or self.DEFAULT_MESSAGE

    @abstractmethod
    def validate(self, context: ModelValidationContext) -> List[ValidationResult]:
        """Validate the node described by ``context``."""

    @classmethod
    def from_rule(cls, spec: Any) -> Optional["ModelValidator"]:
        """Build a validator from a descriptor rule value."""
        raise NotImplementedError(f"{cls.__name__} cannot be declared in descriptors")

    def format_message(self, context: ModelValidationContext, **values: Any) -> str:
        return render_message(
            self.message_template,
            name=context.metadata.display_name,
            value=context.model,
            **values,
        )

    def _fail(self, context: ModelValidationContext, **values: Any) -> List[ValidationResult]:
        return [ValidationResult(self.format_message(context, **values))]

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _rule_options(spec: Any, shorthand_key: str) -> Dict[str, Any]:
    """Normalize a rule value to a dict; non-mapping values fill ``shorthand_key``."""
    if isinstance(spec, Mapping):
        return dict(spec)
    return {shorthand_key: spec}


def _bounds_from_rule(spec: Any) -> Dict[str, Any]:
    if isinstance(spec, (list, tuple)):
        if len(spec) != 2:
            raise ValueError(f"Expected [min, max], got {spec!r}")
        return {"min": spec[0], "max": spec[1]}
    if isinstance(spec, Mapping):
        return dict(spec)
    raise ValueError(f"Expected a mapping with 'min'/'max' or a [min, max] list, got {spec!r}")


class RequiredValidator(ModelValidator):
    """Fails for ``None`` and, unless allowed, for blank strings."""

    RULE_NAME = "required"
    DEFAULT_MESSAGE = "The {{ name }} field is required."

    def __init__(self, allow_empty_strings: bool = False, message: Optional[str] = None):
        super().__init__(message)
        self.allow_empty_strings = allow_empty_strings

    def validate(self, context: ModelValidationContext) -> List[ValidationResult]:
        value = context.model
        if value is None:
            return self._fail(context)
        if isinstance(value, str) and not self.allow_empty_strings and not value.strip():
            return self._fail(context)
        return []

    @classmethod
    def from_rule(cls, spec: Any) -> Optional["RequiredValidator"]:
        if isinstance(spec, bool):
            return cls() if spec else None
        options = _rule_options(spec, "enabled")
        if not options.pop("enabled", True):
            return None
        return cls(allow_empty_strings=bool(options.get("allow_empty_strings", False)), message=options.get("message"))


class RangeValidator(ModelValidator):
    """Inclusive numeric bounds. ``None`` passes."""

    RULE_NAME = "range"

    def __init__(self, minimum: Any = None, maximum: Any = None, message: Optional[str] = None):
        if minimum is None and maximum is None:
            raise ValueError("RangeValidator requires a minimum, a maximum or both")
        if message is None:
            if minimum is not None and maximum is not None:
                message = "The field {{ name }} must be between {{ minimum }} and {{ maximum }}."
            elif minimum is not None:
                message = "The field {{ name }} must be greater than or equal to {{ minimum }}."
            else:
                message = "The field {{ name }} must be less than or equal to {{ maximum }}."
        super().__init__(message)
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, context: ModelValidationContext) -> List[ValidationResult]:
        value = context.model
        if value is None:
            return []
        try:
            if self.minimum is not None and value < self.minimum:
                return self._fail(context, minimum=self.minimum, maximum=self.maximum)
            if self.maximum is not None and value > self.maximum:
                return self._fail(context, minimum=self.minimum, maximum=self.maximum)
        except TypeError:
            # not comparable with the bounds
            return self._fail(context, minimum=self.minimum, maximum=self.maximum)
        return []

    @classmethod
    def from_rule(cls, spec: Any) -> "RangeValidator":
        options = _bounds_from_rule(spec)
        return cls(minimum=options.get("min"), maximum=options.get("max"), message=options.get("message"))

    def __repr__(self) -> str:
        return f"RangeValidator(minimum={self.minimum!r}, maximum={self.maximum!r})"


class LengthValidator(ModelValidator):
    """Length bounds for strings and collections. ``None`` passes."""

    RULE_NAME = "length"

    def __init__(self, minimum: Optional[int] = None, maximum: Optional[int] = None, message: Optional[str] = None):
        if minimum is None and maximum is None:
            raise ValueError("LengthValidator requires a minimum, a maximum or both")
        if message is None:
            if minimum is not None and maximum is not None:
                message = (
                    "The field {{ name }} must have a length between {{ minimum }} and {{ maximum }}."
                )
            elif minimum is not None:
                message = "The field {{ name }} must have a minimum length of {{ minimum }}."
            else:
                message = "The field {{ name }} must have a maximum length of {{ maximum }}."
        super().__init__(message)
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, context: ModelValidationContext) -> List[ValidationResult]:
        value = context.model
        if value is None:
            return []
        if not isinstance(value, Sized):
            return self._fail(context, minimum=self.minimum, maximum=self.maximum)
        length = len(value)
        if self.minimum is not None and length < self.minimum:
            return self._fail(context, minimum=self.minimum, maximum=self.maximum)
        if self.maximum is not None and length > self.maximum:
            return self._fail(context, minimum=self.minimum, maximum=self.maximum)
        return []

    @classmethod
    def from_rule(cls, spec: Any) -> "LengthValidator":
        options = _bounds_from_rule(spec)
        return cls(minimum=options.get("min"), maximum=options.get("max"), message=options.get("message"))

    def __repr__(self) -> str:
        return f"LengthValidator(minimum={self.minimum!r}, maximum={self.maximum!r})"


class PatternValidator(ModelValidator):
    """The whole string form of the value must match ``pattern``. ``None`` passes."""

    RULE_NAME = "pattern"
    DEFAULT_MESSAGE = "The field {{ name }} must match the regular expression '{{ pattern }}'."

    def __init__(self, pattern: str, message: Optional[str] = None):
        super().__init__(message)
        self.pattern = pattern
        self._regex = re.compile(pattern)

    def validate(self, context: ModelValidationContext) -> List[ValidationResult]:
        value = context.model
        if value is None:
            return []
        text = value if isinstance(value, str) else str(value)
        if self._regex.fullmatch(text) is None:
            return self._fail(context, pattern=self.pattern)
        return []

    @classmethod
    def from_rule(cls, spec: Any) -> "PatternValidator":
        options = _rule_options(spec, "regex")
        try:
            return cls(options["regex"], message=options.get("message"))
        except re.error as exc:
            raise ValueError(f"Invalid regular expression {options['regex']!r}: {exc}") from exc

    def __repr__(self) -> str:
        return f"PatternValidator({self.pattern!r})"


class ChoicesValidator(ModelValidator):
    """The value must be one of ``choices``. ``None`` passes."""

    RULE_NAME = "choices"
    DEFAULT_MESSAGE = "The field {{ name }} must be one of: {{ choices | join(', ') }}."

    def __init__(self, choices: Sequence[Any], message: Optional[str] = None):
        super().__init__(message)
        self.choices = tuple(choices)

    def validate(self, context: ModelValidationContext) -> List[ValidationResult]:
        value = context.model
        if value is None or value in self.choices:
            return []
        return self._fail(context, choices=self.choices)

    @classmethod
    def from_rule(cls, spec: Any) -> "ChoicesValidator":
        options = _rule_options(spec, "values")
        values = options.get("values")
        if not isinstance(values, (list, tuple)) or not values:
            raise ValueError(f"Expected a non-empty list of choices, got {values!r}")
        return cls(values, message=options.get("message"))

    def __repr__(self) -> str:
        return f"ChoicesValidator({self.choices!r})"


def _member_name_from_path(path: Iterable[Any]) -> str:
    name = ""
    for token in path:
        if isinstance(token, int):
            name = create_index_model_name(name, token)
        else:
            name = create_property_model_name(name, str(token))
    return name


class JsonSchemaValidator(ModelValidator):
    """Validates the value against a JSON Schema. ``None`` passes.

    Each schema violation is reported under the path of the offending
    value relative to the node.
    """

    RULE_NAME = "schema"
    DEFAULT_MESSAGE = "{{ message }}"

    def __init__(self, schema: Dict[str, Any], message: Optional[str] = None):
        super().__init__(message)
        validator_cls = jsonschema.validators.validator_for(schema)
        validator_cls.check_schema(schema)
        self.schema = schema
        self._validator = validator_cls(schema)

    def validate(self, context: ModelValidationContext) -> List[ValidationResult]:
        if context.model is None:
            return []
        errors = sorted(self._validator.iter_errors(context.model), key=lambda e: [str(p) for p in e.absolute_path])
        return [
            ValidationResult(
                self.format_message(context, message=error.message),
                member_name=_member_name_from_path(error.absolute_path),
            )
            for error in errors
        ]

    @classmethod
    def from_rule(cls, spec: Any) -> "JsonSchemaValidator":
        if not isinstance(spec, Mapping):
            raise ValueError(f"Expected a JSON Schema mapping, got {spec!r}")
        return cls(dict(spec))


class ValidatableObject(ABC):
    """Base class for models that validate themselves.

    Subclasses get a type-level validator that calls :meth:`validate` after
    their members were validated.
    """

    @abstractmethod
    def validate(self, context: ModelValidationContext) -> Iterable[Any]:
        """Yield :class:`ValidationResult` objects or plain message strings."""


class ValidatableObjectAdapter(ModelValidator):
    """Runs :meth:`ValidatableObject.validate` on the model."""

    def validate(self, context: ModelValidationContext) -> List[ValidationResult]:
        model = context.model
        if not isinstance(model, ValidatableObject):
            return []
        results: List[ValidationResult] = []
        for result in model.validate(context) or ():
            if isinstance(result, ValidationResult):
                results.append(result)
            else:
                results.append(ValidationResult(str(result)))
        return results


VALIDATABLE_OBJECT_ADAPTER = ValidatableObjectAdapter()


class ValidatorFactory:
    """Factory for creating validators from descriptor rules."""

    _validators: Dict[str, Type[ModelValidator]] = {
        RequiredValidator.RULE_NAME: RequiredValidator,
        RangeValidator.RULE_NAME: RangeValidator,
        LengthValidator.RULE_NAME: LengthValidator,
        PatternValidator.RULE_NAME: PatternValidator,
        ChoicesValidator.RULE_NAME: ChoicesValidator,
        JsonSchemaValidator.RULE_NAME: JsonSchemaValidator,
    }

    @classmethod
    def get_rule_names(cls) -> List[str]:
        return sorted(cls._validators)

    @classmethod
    def create(cls, rule_name: str, spec: Any) -> Optional[ModelValidator]:
        """Create the validator for a rule, or None if the rule is disabled."""
        if rule_name not in cls._validators:
            raise DescriptorError(f"Unknown validation rule: '{rule_name}'. Valid rules: {cls.get_rule_names()}")
        try:
            return cls._validators[rule_name].from_rule(spec)
        except (KeyError, TypeError, ValueError, SchemaError) as exc:
            raise DescriptorError(f"Invalid '{rule_name}' rule {spec!r}: {exc}") from exc
