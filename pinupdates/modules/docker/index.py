"""
HOMESERVER Update Management System
Copyright (C) 2024 HOMESERVER LLC

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

"""
Docker engine, tracked through moby's GitHub releases.
"""

from typing import Optional

from pinupdates.modules import DependencyDescriptor, descriptor_from_config, load_module_config
from pinupdates.sources import resolve_version
from pinupdates.utils.fetcher import Fetcher
from pinupdates.utils.index import log_message
from pinupdates.utils.patcher import EditPlan
from pinupdates.utils.versions import validate_family

DEFAULT_CONFIG = {
    "metadata": {
        "schema_version": "1.0.0",
        "module_name": "docker",
        "enabled": True
    },
    "config": {
        "name": "Docker",
        "base": "24.0",
        "source": {
            "kind": "feed",
            "url": "https://api.github.com/repos/moby/moby/releases?per_page=100",
            "field": "tag_name",
            "strip_prefix": "v",
            "where": {"prerelease": False}
        }
    }
}

# Global configuration
MODULE_CONFIG = load_module_config(__file__, DEFAULT_CONFIG)
DESCRIPTOR = descriptor_from_config(MODULE_CONFIG)


def resolve(fetcher: Fetcher, descriptor: Optional[DependencyDescriptor] = None) -> EditPlan:
    descriptor = descriptor or DESCRIPTOR
    # prereleases are filtered out by the feed query even when numerically newer
    latest = resolve_version(fetcher, descriptor.source, name=descriptor.name)
    version = validate_family(descriptor.name, latest, descriptor.base)
    log_message(f"{descriptor.name}: {version}")
    return EditPlan().set("ENV", "DOCKER_VERSION", version)
