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
VirtualBox Guest Additions ISO.

The version comes from the download directory index; the ISO digest
from the release's SHA256SUMS, with the virtualbox.org hash archive as
fallback location.
"""

from typing import Optional

from pinupdates.modules import DependencyDescriptor, descriptor_from_config, load_module_config
from pinupdates.sources import resolve_version
from pinupdates.utils.checksums import resolve_checksum
from pinupdates.utils.fetcher import Fetcher
from pinupdates.utils.index import log_message
from pinupdates.utils.patcher import EditPlan

DEFAULT_CONFIG = {
    "metadata": {
        "schema_version": "1.0.0",
        "module_name": "vbox",
        "enabled": True
    },
    "config": {
        "name": "VirtualBox Guest Additions",
        "base": "7.0",
        "source": {
            "kind": "listing",
            "url": "https://download.virtualbox.org/virtualbox/"
        },
        "checksum": {
            "algorithm": "sha256",
            "pattern": "VBoxGuestAdditions_*.iso",
            "urls": [
                "https://download.virtualbox.org/virtualbox/{version}/SHA256SUMS",
                "https://www.virtualbox.org/download/hashes/{version}/SHA256SUMS"
            ]
        }
    }
}

# Global configuration
MODULE_CONFIG = load_module_config(__file__, DEFAULT_CONFIG)
DESCRIPTOR = descriptor_from_config(MODULE_CONFIG)


def resolve(fetcher: Fetcher, descriptor: Optional[DependencyDescriptor] = None) -> EditPlan:
    descriptor = descriptor or DESCRIPTOR
    version = resolve_version(fetcher, descriptor.source, family=descriptor.base, name=descriptor.name)

    checksum = descriptor.settings["checksum"]
    record = resolve_checksum(
        fetcher,
        [url.format(version=version) for url in checksum["urls"]],
        checksum["pattern"],
        descriptor.name,
        algorithm=checksum.get("algorithm", "sha256"),
    )
    log_message(f"{descriptor.name}: {version} ({record.filename} {record.algorithm} {record.digest})")

    plan = EditPlan()
    plan.set("ENV", "VBOX_VERSION", version)
    plan.set("ENV", "VBOX_SHA256", record.digest)
    return plan
