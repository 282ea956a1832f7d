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

"""Internal implementation details for budtelemetry.

WARNING: This module is internal and should not be imported directly.
All public API is exported from the top-level budtelemetry package.

- main.py: Top level Builder and development preset
- config.py: Environment bound configuration models
- meter.py: MeterProvider builder
- tracer.py: TracerProvider builder
- telemetry.py: Telemetry handle
- errors.py: Deferred error collection
- registry.py: Global provider registration
- buildinfo.py: Build metadata of installed distributions
- utils.py: Attribute, exporter and option helpers
- integrations/: Framework integrations
"""

from __future__ import annotations

__all__: list[str] = []
