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

"""Custom exceptions for the model validation library."""


class ModelValidationError(Exception):
    """Base exception for model validation related errors."""
    pass


class TraversalError(ModelValidationError):
    """Exception raised when a model cannot be enumerated by a validation strategy."""
    pass


class MetadataError(ModelValidationError):
    """Exception raised when metadata cannot be created for a type."""
    pass


class ValidationDepthExceededError(ModelValidationError):
    """Exception raised when a model graph is nested deeper than the configured limit."""
    pass


class DescriptorError(ModelValidationError):
    """Exception raised for malformed model descriptor files."""
    pass


class FormatVersionError(DescriptorError):
    """Exception raised when a descriptor file's format version is incompatible."""
    pass


class MessageTemplateError(ModelValidationError):
    """Exception raised when a validation message template cannot be rendered."""
    pass


class ConfigurationError(ModelValidationError):
    """Exception raised for invalid configuration values."""
    pass


class DocumentError(ModelValidationError):
    """Exception raised when a YAML or JSON document cannot be read or parsed."""
    pass
