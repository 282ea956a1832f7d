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

"""Public type definitions for budtelemetry.

Example:
    >>> from budtelemetry.types import KeyValue
    >>> attrs: list[KeyValue] = [("deployment.environment", "dev")]
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

# Attribute value types following OTEL specification
AttributeValue = str | bool | int | float | Sequence[str] | Sequence[bool] | Sequence[int] | Sequence[float]

# Attributes dictionary type
Attributes = Mapping[str, AttributeValue]

# A single attribute, the order of a list of them is preserved until merged into a resource
KeyValue = tuple[str, AttributeValue]

# Keyword arguments for the OTEL SDK provider constructors
ProviderOptions = Mapping[str, Any]

__all__ = [
    "AttributeValue",
    "Attributes",
    "KeyValue",
    "ProviderOptions",
]
