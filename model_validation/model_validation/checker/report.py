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

"""Result reporting for the data file checker."""

from pathlib import Path
from typing import Any, Dict, List, Optional


class CheckResult:
    """Container for the validation results of a single data file."""

    def __init__(self, file_path: Path):
        """Initialize check result.

        Args:
            file_path: Path to the data file being checked
        """
        self.file_path = file_path
        self.errors: List[Dict[str, Any]] = []
        self.warnings: List[Dict[str, Any]] = []

    @staticmethod
    def _issue(
        message: str,
        key: Optional[str],
        line: Optional[int],
        column: Optional[int],
        yaml_path: Optional[str],
    ) -> Dict[str, Any]:
        issue: Dict[str, Any] = {'message': message}
        if key is not None:
            issue['key'] = key
        if line is not None:
            issue['line'] = line
        if column is not None:
            issue['column'] = column
        if yaml_path is not None:
            issue['yaml_path'] = yaml_path
        return issue

    def add_error(
        self,
        message: str,
        key: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        yaml_path: Optional[str] = None,
    ):
        """Add an error message.

        Args:
            message: Error message
            key: Model state key the error was recorded under
            line: Optional line number where the offending value starts
        """
        self.errors.append(self._issue(message, key, line, column, yaml_path))

    def add_warning(
        self,
        message: str,
        key: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        yaml_path: Optional[str] = None,
    ):
        """Add a warning message."""
        self.warnings.append(self._issue(message, key, line, column, yaml_path))

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file': str(self.file_path),
            'errors': self.errors,
            'warnings': self.warnings,
        }
