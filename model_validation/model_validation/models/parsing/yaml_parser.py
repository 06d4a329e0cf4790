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

"""YAML document loader with source maps and caching."""

import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ...config import validation_config
from ...exceptions import DocumentError
from ...validation.model_names import tokens_to_json_pointer

logger = logging.getLogger(__name__)

SourceMap = Dict[str, Dict[str, int]]


class YamlParser:
    """YAML parser with caching and source tracking."""

    def __init__(self, cache_enabled: Optional[bool] = None):
        """Initialize YAML parser.

        Args:
            cache_enabled: Whether to enable caching. If None, uses global config.
        """
        self.cache_enabled = cache_enabled if cache_enabled is not None else validation_config.cache_enabled
        self._cache: Dict[Path, Tuple[Any, SourceMap]] = {}

    @staticmethod
    def build_source_map(content: str) -> SourceMap:
        """Build a mapping from JSON-pointer paths to 1-based line/column.

        Uses PyYAML's node tree (yaml.compose) so locations are tracked without
        changing the data returned by safe_load.
        """
        source_map: SourceMap = {}

        try:
            root = yaml.compose(content, Loader=yaml.SafeLoader)
        except yaml.YAMLError:
            # Parsing errors are reported by the caller's safe_load.
            return source_map

        if root is None:
            return source_map

        def _record(tokens, node) -> None:
            mark = getattr(node, "start_mark", None)
            if mark is None:
                return
            # PyYAML uses 0-based line/column
            source_map[tokens_to_json_pointer(tokens)] = {"line": int(mark.line) + 1, "column": int(mark.column) + 1}

        def _walk(node, tokens) -> None:
            _record(tokens, node)

            if isinstance(node, yaml.nodes.MappingNode):
                for key_node, value_node in node.value:
                    key = getattr(key_node, "value", None)
                    if key is None:
                        continue
                    _walk(value_node, tokens + [str(key)])
            elif isinstance(node, yaml.nodes.SequenceNode):
                for idx, item_node in enumerate(node.value):
                    _walk(item_node, tokens + [idx])

        _walk(root, [])
        return source_map

    def load_document_with_source(self, file_path: Union[str, Path]) -> Tuple[Any, SourceMap]:
        """Load a YAML (or JSON) file and return (data, source_map).

        source_map keys are JSON pointers (e.g. "/lines/0/sku").
        """
        path = Path(file_path)

        if not path.exists():
            raise DocumentError(f"Document not found: {path}")

        if not path.is_file():
            raise DocumentError(f"Path is not a file: {path}")

        if self.cache_enabled and path in self._cache:
            logger.debug(f"Loading document from cache: {path}")
            return self._cache[path]

        try:
            logger.debug(f"Loading document: {path}")
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentError(f"Failed to read document {path}: {exc}") from exc

        data, source_map = self.load_string_with_source(content, source=str(path))

        if self.cache_enabled:
            self._cache[path] = (data, source_map)
        return data, source_map

    def load_string_with_source(self, content: str, source: str = "<string>") -> Tuple[Any, SourceMap]:
        """Parse YAML content and return (data, source_map)."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise DocumentError(f"Failed to parse YAML in {source}: {exc}") from exc
        return data, self.build_source_map(content)

    def load_document(self, file_path: Union[str, Path]) -> Any:
        """Load a YAML (or JSON) file.

        Raises:
            DocumentError: If the file cannot be read or parsed
        """
        data, _ = self.load_document_with_source(file_path)
        return data

    def clear_cache(self) -> None:
        """Clear the document cache."""
        self._cache.clear()
        logger.debug("Document cache cleared")
