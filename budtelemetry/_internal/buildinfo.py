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

"""Build metadata of an installed distribution.

`BuildInfo` describes the running service the way resource attributes need
it: its version, the version-control settings it was installed from and the
versions of its dependencies. `read_build_info` fills it from
``importlib.metadata``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib import metadata

from budtelemetry.commons.constants import VCS_PREFIX


_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


@dataclass(frozen=True)
class BuildInfo:
    """Version information of a service and its dependencies.

    Attributes:
        path: Distribution name of the service.
        version: Version of the service.
        settings: Build settings, ``vcs.*`` keys carry version-control metadata.
        deps: Installed version per dependency name.
    """

    path: str
    version: str
    settings: Mapping[str, str] = field(default_factory=dict)
    deps: Mapping[str, str] = field(default_factory=dict)


def _vcs_settings(dist: metadata.Distribution) -> dict[str, str]:
    # PEP 610, only present for installs from a VCS url or local directory
    raw = dist.read_text("direct_url.json")
    if not raw:
        return {}
    try:
        direct_url = json.loads(raw)
    except json.JSONDecodeError:
        return {}

    settings: dict[str, str] = {}
    vcs_info = direct_url.get("vcs_info") or {}
    if vcs_info.get("vcs"):
        settings[f"{VCS_PREFIX}system"] = vcs_info["vcs"]
    if vcs_info.get("commit_id"):
        settings[f"{VCS_PREFIX}revision"] = vcs_info["commit_id"]
    if vcs_info and direct_url.get("url"):
        settings[f"{VCS_PREFIX}url"] = direct_url["url"]
    return settings


def _installed_dependencies(dist: metadata.Distribution) -> dict[str, str]:
    deps: dict[str, str] = {}
    for requirement in dist.requires or []:
        match = _REQUIREMENT_NAME.match(requirement)
        if match is None:
            continue
        name = match.group(1)
        try:
            deps[name] = metadata.version(name)
        except metadata.PackageNotFoundError:
            continue
    return deps


def read_build_info(distribution: str) -> BuildInfo | None:
    """Read the build information of an installed distribution.

    Dependencies that are declared but not installed (e.g. unused extras) are
    left out.

    Args:
        distribution: Name of the installed distribution.

    Returns:
        The build information, or None when the distribution is not installed.
    """
    try:
        dist = metadata.distribution(distribution)
    except metadata.PackageNotFoundError:
        return None

    return BuildInfo(
        path=dist.metadata["Name"] or distribution,
        version=dist.version,
        settings=_vcs_settings(dist),
        deps=_installed_dependencies(dist),
    )
