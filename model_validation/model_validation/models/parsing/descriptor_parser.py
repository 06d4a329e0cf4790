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

"""Parser for YAML model descriptor files."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ... import DESCRIPTOR_FORMAT_VERSION
from ...exceptions import DescriptorError, FormatVersionError
from ...utils.format_version import FORMAT_VERSION_FIELD, check_format_version
from ...utils.source_location import format_source, lookup_source
from ...validation.validators import ModelValidator, ValidatorFactory
from ..declared_types import parse_type_reference
from ..descriptor import ModelDescriptor, PropertyDescriptor, TypeDescriptor, canonical_rule_specs
from ..descriptor_schema import SchemaIssue, validate_against_schema
from ..json_schema_loader import load_schema
from .yaml_parser import SourceMap, YamlParser

logger = logging.getLogger(__name__)

DESCRIPTOR_SCHEMA_NAME = "descriptor"
_PROPERTY_KEYS = {"type", "display_name", "description", "validate"}


class DescriptorParser:
    """Builds :class:`ModelDescriptor` objects from YAML descriptor files."""

    def __init__(self, yaml_parser: Optional[YamlParser] = None):
        self.yaml_parser = yaml_parser or YamlParser()

    def parse_file(self, file_path: Union[str, Path]) -> ModelDescriptor:
        path = Path(file_path)
        data, source_map = self.yaml_parser.load_document_with_source(path)
        logger.debug(f"Parsing descriptor: {path}")
        return self.parse_data(data, source_map=source_map, file_path=path)

    def parse_string(self, content: str) -> ModelDescriptor:
        data, source_map = self.yaml_parser.load_string_with_source(content)
        return self.parse_data(data, source_map=source_map)

    def parse_data(
        self,
        data: Any,
        source_map: Optional[SourceMap] = None,
        file_path: Optional[Path] = None,
    ) -> ModelDescriptor:
        source_map = source_map or {}
        origin = str(file_path) if file_path is not None else "<string>"

        if not isinstance(data, Mapping):
            raise DescriptorError(f"Descriptor root must be a mapping: {origin}")

        raw_version = data.get(FORMAT_VERSION_FIELD)
        version_check = check_format_version(raw_version)
        if not version_check.compatible:
            raise FormatVersionError(f"{version_check.message} File: {origin}")
        if version_check.should_warn:
            logger.warning(f"{version_check.message} File: {origin}")

        schema_version = str(version_check.file_version) if version_check.file_version else DESCRIPTOR_FORMAT_VERSION
        issues = validate_against_schema(data, load_schema(DESCRIPTOR_SCHEMA_NAME, schema_version))
        if issues:
            details = self._format_schema_issues(issues, source_map, file_path)
            raise DescriptorError(f"Descriptor schema validation failed for {origin}:\n{details}")

        types: Dict[str, TypeDescriptor] = {}
        for type_name, raw_type in data["types"].items():
            types[type_name] = self._parse_type(type_name, raw_type or {}, source_map, file_path)

        root = data.get("root")
        if root is not None and root not in types:
            raise DescriptorError(
                f"Root type '{root}' is not declared. Declared types: {sorted(types)}"
                f"{format_source(lookup_source(source_map, '/root', file_path))}"
            )

        return ModelDescriptor(
            types=types,
            root=root,
            format_version=raw_version,
            file_path=file_path,
            source_map=dict(source_map),
        )

    @staticmethod
    def _format_schema_issues(issues: List[SchemaIssue], source_map: SourceMap, file_path: Optional[Path]) -> str:
        return "\n".join(
            f"  - {issue.message}{format_source(lookup_source(source_map, issue.yaml_path, file_path))}"
            for issue in issues
        )

    def _parse_type(
        self,
        type_name: str,
        raw_type: Mapping[str, Any],
        source_map: SourceMap,
        file_path: Optional[Path],
    ) -> TypeDescriptor:
        yaml_path = f"/types/{type_name}"
        properties = []
        for property_name, raw_property in (raw_type.get("properties") or {}).items():
            properties.append(
                self._parse_property(property_name, raw_property, f"{yaml_path}/properties/{property_name}", source_map, file_path)
            )

        rules = raw_type.get("rules") or {}
        validators = self._create_validators(rules, f"{yaml_path}/rules", source_map, file_path)
        return TypeDescriptor(
            name=type_name,
            properties=tuple(properties),
            validators=validators,
            rule_specs=canonical_rule_specs(rules),
            display_name=raw_type.get("display_name"),
            description=raw_type.get("description"),
            yaml_path=yaml_path,
        )

    def _parse_property(
        self,
        property_name: str,
        raw_property: Mapping[str, Any],
        yaml_path: str,
        source_map: SourceMap,
        file_path: Optional[Path],
    ) -> PropertyDescriptor:
        try:
            type_key = parse_type_reference(raw_property["type"])
        except DescriptorError as exc:
            raise DescriptorError(f"{exc}{format_source(lookup_source(source_map, f'{yaml_path}/type', file_path))}") from exc

        rules = {name: spec for name, spec in raw_property.items() if name not in _PROPERTY_KEYS}
        return PropertyDescriptor(
            name=property_name,
            type_key=type_key,
            validators=self._create_validators(rules, yaml_path, source_map, file_path),
            rule_specs=canonical_rule_specs(rules),
            display_name=raw_property.get("display_name"),
            description=raw_property.get("description"),
            validate_never=not raw_property.get("validate", True),
            yaml_path=yaml_path,
        )

    @staticmethod
    def _create_validators(
        rules: Mapping[str, Any],
        yaml_path: str,
        source_map: SourceMap,
        file_path: Optional[Path],
    ) -> Tuple[ModelValidator, ...]:
        validators = []
        for rule_name, spec in rules.items():
            try:
                validator = ValidatorFactory.create(rule_name, spec)
            except DescriptorError as exc:
                location = lookup_source(source_map, f"{yaml_path}/{rule_name}", file_path)
                raise DescriptorError(f"{exc}{format_source(location)}") from exc
            if validator is not None:
                validators.append(validator)
        return tuple(validators)
