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

"""Checker package: validates YAML/JSON data files against a model descriptor."""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..config import ValidationConfig
from ..exceptions import DocumentError
from ..models.metadata_provider import ModelMetadataProvider
from ..models.parsing.descriptor_parser import DescriptorParser
from ..utils.source_location import source_for_model_key
from ..validation.object_validator import ObjectModelValidator
from .report import CheckResult

__all__ = ['check_files', 'CheckResult']

logger = logging.getLogger(__name__)


def check_files(
    descriptor_path: Union[str, Path],
    data_paths: List[Path],
    type_name: Optional[str] = None,
    config: Optional[ValidationConfig] = None,
) -> List[CheckResult]:
    """Validate data files against a type declared in a descriptor.

    Args:
        descriptor_path: Descriptor file declaring the types
        data_paths: Data files to validate
        type_name: Declared type of each document; defaults to the descriptor's root

    Returns:
        List of CheckResult objects, one per data file

    Raises:
        DescriptorError: If the descriptor is invalid or the type is unknown
    """
    parser = DescriptorParser()
    descriptor = parser.parse_file(descriptor_path)

    provider = ModelMetadataProvider()
    provider.register_descriptor(descriptor)
    root_type = descriptor.get_root_type(type_name)
    metadata = provider.get_metadata_for_declared_type(root_type.name)
    validator = ObjectModelValidator(provider, config)

    results = []
    for data_path in data_paths:
        path = Path(data_path)
        result = CheckResult(path)
        results.append(result)

        try:
            data, source_map = parser.yaml_parser.load_document_with_source(path)
        except DocumentError as e:
            result.add_error(str(e))
            continue

        if data is None:
            result.add_warning("Document is empty")

        model_state = validator.validate(data, metadata=metadata)
        for key, entry in model_state.items():
            for error in entry.errors:
                location = source_for_model_key(source_map, key, path)
                result.add_error(
                    error.message,
                    key=key,
                    line=location.line,
                    column=location.column,
                    yaml_path=location.yaml_path,
                )
        logger.debug(f"Checked {path}: {len(result.errors)} error(s)")

    return results
