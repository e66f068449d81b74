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
squashfs-tools, tracked through its release tags.

Besides SQUASHFS_VERSION the Dockerfile carries a link to the Makefile
of the pinned release, which is kept on the same version.
"""

from typing import Optional

from pinupdates.modules import DependencyDescriptor, descriptor_from_config, load_module_config
from pinupdates.sources import resolve_version
from pinupdates.utils.fetcher import Fetcher
from pinupdates.utils.index import log_message
from pinupdates.utils.patcher import EditPlan

DEFAULT_CONFIG = {
    "metadata": {
        "schema_version": "1.0.0",
        "module_name": "squashfs",
        "enabled": True
    },
    "config": {
        "name": "squashfs-tools",
        "source": {
            "kind": "tags",
            "repository": "https://github.com/plougher/squashfs-tools",
            "prefix": "squashfs-tools-"
        },
        "doc_link": {
            "prefix": "# https://github.com/plougher/squashfs-tools/blob/",
            "suffix": "/squashfs-tools/Makefile#L1"
        }
    }
}

# Global configuration
MODULE_CONFIG = load_module_config(__file__, DEFAULT_CONFIG)
DESCRIPTOR = descriptor_from_config(MODULE_CONFIG)


def resolve(fetcher: Fetcher, descriptor: Optional[DependencyDescriptor] = None) -> EditPlan:
    descriptor = descriptor or DESCRIPTOR
    version = resolve_version(fetcher, descriptor.source, family=descriptor.base, name=descriptor.name)
    log_message(f"{descriptor.name}: {version}")

    link = descriptor.settings["doc_link"]
    plan = EditPlan().set("ENV", "SQUASHFS_VERSION", version)
    plan.replace_between(link["prefix"], version, link["suffix"])
    return plan
