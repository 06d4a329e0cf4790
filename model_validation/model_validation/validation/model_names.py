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

"""Path expressions for model state keys.

Keys look like ``order.lines[0].sku``: members are joined with ``.`` and
collection positions (or explicit indices) are wrapped in brackets.
"""

from __future__ import annotations

from typing import Any, List, Union

ModelNameToken = Union[str, int]


def create_index_model_name(parent_name: str, index: Any) -> str:
    """Return ``parent_name[index]``, or ``[index]`` when there is no parent."""
    if not parent_name:
        return f"[{index}]"
    return f"{parent_name}[{index}]"


def create_property_model_name(prefix: str, property_name: str) -> str:
    """Append a member name to a prefix."""
    if not prefix:
        return property_name or ""
    if not property_name:
        return prefix
    if property_name.startswith("["):
        # e.g. a validator reporting against an index of the current node
        return prefix + property_name
    return f"{prefix}.{property_name}"


def is_prefix_of(prefix: str, key: str) -> bool:
    """Return True if ``key`` is ``prefix`` itself or one of its descendants."""
    if not prefix:
        return True
    if not key.startswith(prefix):
        return False
    if len(key) == len(prefix):
        return True
    return key[len(prefix)] in ".["


def split_model_name(key: str) -> List[ModelNameToken]:
    """Split a key into member names and indices.

    ``"lines[0].sku"`` -> ``["lines", 0, "sku"]``. Non-numeric bracket indices
    stay strings.
    """
    tokens: List[ModelNameToken] = []
    current = ""
    i = 0
    while i < len(key):
        ch = key[i]
        if ch == ".":
            if current:
                tokens.append(current)
            current = ""
            i += 1
        elif ch == "[":
            if current:
                tokens.append(current)
            current = ""
            end = key.find("]", i)
            if end == -1:
                # unterminated index; keep the remainder as a member name
                current = key[i:]
                break
            index = key[i + 1:end]
            tokens.append(int(index) if index.isdecimal() else index)
            i = end + 1
        else:
            current += ch
            i += 1
    if current:
        tokens.append(current)
    return tokens


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def tokens_to_json_pointer(tokens: List[ModelNameToken]) -> str:
    return "".join(f"/{_jp_escape(str(token))}" for token in tokens)


def to_json_pointer(key: str) -> str:
    """Convert a key to a JSON pointer (``lines[0].sku`` -> ``/lines/0/sku``)."""
    return tokens_to_json_pointer(split_model_name(key))
