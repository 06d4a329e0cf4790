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

"""Logging setup for the ``model_validation`` package logger.

Records are split by level between stdout and stderr, so the checker's
machine-readable report and its diagnostics can be redirected separately.
"""

import logging
import sys
from typing import IO, Optional

PACKAGE_LOGGER = "model_validation"
DEFAULT_FORMAT = "%(name)s - %(levelname)s - %(message)s"


class _LevelBandFilter(logging.Filter):
    """Passes records with ``levelno`` in ``[low, high)``."""

    def __init__(self, low: int, high: Optional[int] = None) -> None:
        super().__init__()
        self.low = low
        self.high = high

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno < self.low:
            return False
        return self.high is None or record.levelno < self.high


def _band_handler(stream: IO[str], formatter: logging.Formatter, low: int, high: Optional[int] = None) -> logging.Handler:
    handler = logging.StreamHandler(stream=stream)
    handler.addFilter(_LevelBandFilter(low, high))
    handler.setFormatter(formatter)
    return handler


def configure_split_stream_logging(
    *,
    level: int = logging.INFO,
    stderr_level: int = logging.WARNING,
    formatter: Optional[logging.Formatter] = None,
    logger_name: str = PACKAGE_LOGGER,
) -> logging.Logger:
    """Send records of ``logger_name`` below ``stderr_level`` to stdout and the rest to stderr.

    Handlers from an earlier call are replaced. The streams are looked up at
    call time, so a replaced ``sys.stdout`` is honoured.
    """
    logger = logging.getLogger(logger_name)
    logger.handlers.clear()
    logger.setLevel(level)

    formatter = formatter or logging.Formatter(DEFAULT_FORMAT)
    split = max(stderr_level, logging.DEBUG)
    logger.addHandler(_band_handler(sys.stdout, formatter, logging.DEBUG, split))
    logger.addHandler(_band_handler(sys.stderr, formatter, split))
    return logger
