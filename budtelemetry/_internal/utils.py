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

"""Attribute, exporter and provider option utilities."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import Any

from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SpanExporter

from budtelemetry.types import KeyValue, ProviderOptions


# Options holding sequences are concatenated when merged, all others are replaced
SEQUENCE_OPTIONS = frozenset({"metric_readers", "views", "span_processors"})


def attributes_from_map(mapping: Mapping[str, str]) -> list[KeyValue]:
    """Convert a mapping into a list of string attributes."""
    return [(key, value) for key, value in mapping.items()]


def stdout_span_exporter() -> SpanExporter:
    """Create an exporter writing human readable, indented JSON spans to stdout."""
    return ConsoleSpanExporter(out=sys.stdout)


def merge_options(*options: ProviderOptions) -> dict[str, Any]:
    """Merge provider option mappings in order.

    Sequence options (see `SEQUENCE_OPTIONS`) accumulate, every other option is
    overridden by later mappings.

    Example:
        ```python
        merge_options({"metric_readers": [a], "resource": r1}, {"metric_readers": [b], "resource": r2})
        # {"metric_readers": [a, b], "resource": r2}
        ```
    """
    merged: dict[str, Any] = {}
    for opts in options:
        for key, value in opts.items():
            if key in SEQUENCE_OPTIONS:
                merged.setdefault(key, []).extend(value)
            else:
                merged[key] = value
    return merged
