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

"""Top-level entry point for validating a model."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..config import ValidationConfig, validation_config
from ..models.metadata import ModelMetadata
from ..models.metadata_provider import ModelMetadataProvider
from .model_state import ModelStateDictionary
from .visitor import ValidationStateDictionary, ValidationVisitor

logger = logging.getLogger(__name__)


class ObjectModelValidator:
    """Validates models using a shared metadata provider.

    The validator itself holds no per-pass state and can be shared; each
    call to :meth:`validate` uses its own visitor.
    """

    def __init__(
        self,
        metadata_provider: Optional[ModelMetadataProvider] = None,
        config: Optional[ValidationConfig] = None,
    ):
        self.metadata_provider = metadata_provider or ModelMetadataProvider()
        self.config = config or validation_config

    def validate(
        self,
        model: Any,
        prefix: str = "",
        model_state: Optional[ModelStateDictionary] = None,
        metadata: Optional[ModelMetadata] = None,
        model_type: Any = None,
        validation_state: Optional[ValidationStateDictionary] = None,
    ) -> ModelStateDictionary:
        """Validate ``model`` and return the model state holding the results.

        Metadata comes from ``metadata``, else from ``model_type``, else from
        the runtime type of ``model``. A ``None`` model is validated against
        its node validators only when its type is given explicitly.
        """
        if model_state is None:
            model_state = ModelStateDictionary(max_allowed_errors=self.config.max_model_errors)

        explicit_type = metadata is not None or model_type is not None
        if metadata is None:
            metadata = self.metadata_provider.get_metadata_for_type(model_type if model_type is not None else type(model))

        visitor = ValidationVisitor(
            self.metadata_provider,
            model_state,
            config=self.config,
            validation_state=validation_state,
        )
        is_valid = visitor.validate(metadata, prefix, model, always_validate_at_top_level=explicit_type)
        logger.debug(
            f"Validated {metadata.display_name} under '{prefix}': "
            f"{'valid' if is_valid else f'{model_state.error_count} error(s)'}"
        )
        return model_state

    def try_validate_model(self, model: Any, prefix: str = "", **kwargs: Any) -> bool:
        """Validate ``model`` and return whether it is valid.

        Raises:
            ValueError: If ``model`` is None.
        """
        if model is None:
            raise ValueError("Cannot validate a None model")
        return self.validate(model, prefix, **kwargs).is_valid
