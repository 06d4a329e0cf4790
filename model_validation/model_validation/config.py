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

"""Configuration for validation passes."""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError
from .utils.logging_utils import configure_split_stream_logging

ENV_PREFIX = "MODEL_VALIDATION_"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(ENV_PREFIX + name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(ENV_PREFIX + name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got '{raw}'") from exc


@dataclass
class ValidationConfig:
    """Options shared by validation passes."""
    max_model_errors: int = 200
    # None disables the depth limit
    max_validation_depth: Optional[int] = 32
    validate_complex_types_if_child_validation_fails: bool = False
    log_level: str = "INFO"
    print_level: str = "WARNING"
    cache_enabled: bool = True

    def __post_init__(self) -> None:
        if self.max_model_errors < 1:
            raise ConfigurationError(f"max_model_errors must be at least 1, got {self.max_model_errors}")
        if self.max_validation_depth is not None and self.max_validation_depth < 1:
            raise ConfigurationError(
                f"max_validation_depth must be at least 1 or None, got {self.max_validation_depth}"
            )

    @classmethod
    def from_env(cls) -> 'ValidationConfig':
        """Create configuration from environment variables."""
        depth = _env_int('MAX_VALIDATION_DEPTH', '32')
        return cls(
            max_model_errors=_env_int('MAX_MODEL_ERRORS', '200'),
            max_validation_depth=depth if depth > 0 else None,
            validate_complex_types_if_child_validation_fails=_env_bool(
                'VALIDATE_COMPLEX_TYPES_IF_CHILD_VALIDATION_FAILS', 'false'
            ),
            log_level=os.getenv(ENV_PREFIX + 'LOG_LEVEL', 'INFO'),
            print_level=os.getenv(ENV_PREFIX + 'PRINT_LEVEL', 'WARNING'),
            cache_enabled=_env_bool('CACHE_ENABLED', 'true'),
        )

    def set_logging(self) -> logging.Logger:
        """Setup logging based on configuration."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        stderr_level = getattr(logging, self.print_level.upper(), logging.ERROR)
        return configure_split_stream_logging(level=level, stderr_level=stderr_level)


# Global configuration instance
validation_config = ValidationConfig.from_env()
