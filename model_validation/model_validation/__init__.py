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

"""Validation of arbitrary object graphs with path-keyed errors."""

__version__ = "0.1.0"

# Descriptor format version understood by this library.
DESCRIPTOR_FORMAT_VERSION = "0.1.0"

from .config import ValidationConfig, validation_config
from .exceptions import (
    ConfigurationError,
    DescriptorError,
    DocumentError,
    FormatVersionError,
    MessageTemplateError,
    MetadataError,
    ModelValidationError,
    TraversalError,
    ValidationDepthExceededError,
)
from .models.metadata import KeyValuePair, KeyValuePairType, ModelMetadata, ModelMetadataKind, ModelShape
from .models.metadata_provider import ModelMetadataProvider
from .models.parsing.descriptor_parser import DescriptorParser
from .validation.model_names import create_index_model_name, create_property_model_name
from .validation.model_state import ModelError, ModelStateDictionary, ModelValidationState
from .validation.object_validator import ObjectModelValidator
from .validation.strategies import (
    DeclaredObjectValidationStrategy,
    DefaultCollectionValidationStrategy,
    DefaultComplexObjectValidationStrategy,
    ExplicitIndexCollectionValidationStrategy,
    ShortFormDictionaryValidationStrategy,
    ValidationEntry,
    ValidationStrategy,
)
from .validation.validators import (
    ChoicesValidator,
    JsonSchemaValidator,
    LengthValidator,
    ModelValidationContext,
    ModelValidator,
    PatternValidator,
    RangeValidator,
    RequiredValidator,
    ValidatableObject,
    ValidationResult,
    ValidatorFactory,
)
from .validation.visitor import ValidationStateDictionary, ValidationStateEntry, ValidationVisitor
