#  -----------------------------------------------------------------------------
#  Copyright (c) 2024 Bud Ecosystem Inc.
#  #
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#  #
#      http://www.apache.org/licenses/LICENSE-2.0
#  #
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.
#  -----------------------------------------------------------------------------

"""Provides utility functions for encoding configuration values to and from their environment representation."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from urllib.parse import quote, unquote


def parse_key_value_list(value: str) -> dict[str, str]:
    """Decode a ``key1=value1,key2=value2`` list into a dictionary.

    Keys and values are percent-decoded and surrounding whitespace is stripped,
    matching the format of ``OTEL_RESOURCE_ATTRIBUTES`` and ``OTEL_EXPORTER_OTLP_HEADERS``.

    Args:
        value (str): The encoded list. Empty members are ignored.

    Returns:
        dict[str, str]: The decoded pairs, later duplicates overwrite earlier ones.

    Raises:
        ValueError: If a member has no ``=`` separator or an empty key.

    Example:
        ```python
        parse_key_value_list("service.namespace=bud,team=ml%20ops")
        # {"service.namespace": "bud", "team": "ml ops"}
        ```
    """
    result: dict[str, str] = {}
    for member in value.split(","):
        member = member.strip()
        if not member:
            continue

        key, sep, raw = member.partition("=")
        key = unquote(key.strip())
        if not sep or not key:
            raise ValueError(f"invalid key=value pair: {member!r}")

        result[key] = unquote(raw.strip())
    return result


def format_key_value_list(mapping: Mapping[str, str]) -> str:
    """Encode a mapping as a sorted, percent-encoded ``key=value`` list.

    This is the inverse of `parse_key_value_list`.
    """
    return ",".join(f"{quote(key, safe='')}={quote(str(val), safe='')}" for key, val in sorted(mapping.items()))


def format_bool(value: bool) -> str:
    """Encode a boolean the way OTEL environment variables expect it."""
    return "true" if value else "false"


def read_optional_file(path: str | None) -> bytes | None:
    """Read the contents of the file at `path`, or return None when no path is given."""
    if not path:
        return None
    return Path(path).read_bytes()
