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

"""Jinja2 rendering for validation messages.

Messages are short templates such as ``"The {{ name }} field is required."``.
Compiled templates are cached by source text.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from ..exceptions import MessageTemplateError

_ENVIRONMENT = Environment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=False)


@lru_cache(maxsize=256)
def _compile(source: str) -> Template:
    return _ENVIRONMENT.from_string(source)


def render_message(source: str, **values: Any) -> str:
    """Render a message template with the given values.

    Raises:
        MessageTemplateError: If the template is invalid or references an
            undefined value.
    """
    try:
        return _compile(source).render(**values)
    except TemplateError as exc:
        raise MessageTemplateError(f"Failed to render message template {source!r}: {exc}") from exc
