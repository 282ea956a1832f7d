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

"""Deferred error collection for the provider builders.

Builder option methods cannot raise without breaking a fluent chain, so they
record failures in an `ErrorList` which the builder surfaces once, when
``build()`` is called.
"""

from __future__ import annotations

from collections.abc import Iterator

from budtelemetry.commons.exceptions import join_errors


class ErrorList:
    """Ordered, append-only collection of errors."""

    __slots__ = ("_errors",)

    def __init__(self) -> None:
        # allocated on first append
        self._errors: list[Exception] | None = None

    def append(self, *errors: Exception | None) -> None:
        """Add errors to the tail of the list. `None` values are ignored."""
        errors_ = [err for err in errors if err is not None]
        if not errors_:
            return
        if self._errors is None:
            self._errors = []
        self._errors.extend(errors_)

    def join(self, message: str = "multiple telemetry errors") -> Exception | None:
        """Combine the collected errors into a single error.

        Returns None when empty, the error itself when there is exactly one,
        and a `TelemetryErrorGroup` otherwise. The list itself is left as is,
        so joining again yields the same errors without duplicates.
        """
        if not self._errors:
            return None
        return join_errors(*self._errors, message=message)

    def __len__(self) -> int:
        return len(self._errors) if self._errors else 0

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __iter__(self) -> Iterator[Exception]:
        return iter(self._errors or ())
