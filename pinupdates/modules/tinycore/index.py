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
Tiny Core Linux base distribution.

The base distribution is pinned to an exact release: any change of the
published latest version stops the run so the major/version pair can be
reviewed by hand. The rootfs MD5 is read through the mirror list.
"""

from typing import Any, Dict, Optional

from pinupdates.modules import DependencyDescriptor, descriptor_from_config, load_module_config
from pinupdates.sources import resolve_version
from pinupdates.utils.checksums import first_token_digest
from pinupdates.utils.fetcher import Fetcher, mirror_urls
from pinupdates.utils.index import log_message
from pinupdates.utils.patcher import EditPlan
from pinupdates.utils.versions import check_reference

DEFAULT_CONFIG = {
    "metadata": {
        "schema_version": "1.0.0",
        "module_name": "tinycore",
        "enabled": True
    },
    "config": {
        "name": "Tiny Core Linux",
        "reference": "14.0",
        "major": "14.x",
        "arch": "x86_64",
        "rootfs": "rootfs64.gz",
        "mirrors": ["https://distro.ibiblio.org/tinycorelinux"],
        "source": {
            "kind": "latest_text",
            "url": "https://distro.ibiblio.org/tinycorelinux/latest-x86_64"
        },
        "release_probe": {
            "kind": "spider",
            "path": "{major}/{arch}/release/CorePure64-{version}.iso"
        },
        "rootfs_md5_paths": [
            "{major}/{arch}/archive/{version}/distribution_files/{rootfs}.md5.txt",
            "{major}/{arch}/release/distribution_files/{rootfs}.md5.txt"
        ]
    }
}

# Global configuration
MODULE_CONFIG = load_module_config(__file__, DEFAULT_CONFIG)
DESCRIPTOR = descriptor_from_config(MODULE_CONFIG)


def _template_values(descriptor: DependencyDescriptor) -> Dict[str, Any]:
    settings = descriptor.settings
    return {
        "major": settings["major"],
        "arch": settings["arch"],
        "rootfs": settings["rootfs"],
        "version": descriptor.reference,
    }


def resolve(fetcher: Fetcher, descriptor: Optional[DependencyDescriptor] = None) -> EditPlan:
    descriptor = descriptor or DESCRIPTOR
    settings = descriptor.settings
    mirrors = settings["mirrors"]
    values = _template_values(descriptor)

    latest = resolve_version(fetcher, descriptor.source, name=descriptor.name)
    check_reference(descriptor.name, latest, descriptor.reference)

    probe = settings.get("release_probe")
    if probe:
        resolve_version(
            fetcher,
            {
                "kind": probe["kind"],
                "mirrors": mirrors,
                "path": probe["path"].format(**values),
                "reference": descriptor.reference,
            },
            name=descriptor.name,
        )

    md5_paths = [path.format(**values) for path in settings["rootfs_md5_paths"]]
    rootfs_md5 = first_token_digest(
        fetcher.fetch_any(mirror_urls(mirrors, md5_paths)).decode("utf-8", errors="replace"),
        descriptor.name,
    )
    log_message(f"{descriptor.name} {latest}: {settings['rootfs']} md5 {rootfs_md5}")

    plan = EditPlan()
    plan.set("ENV", "TCL_MIRRORS", " ".join(mirrors))
    plan.set("ENV", "TCL_MAJOR", settings["major"])
    plan.set("ENV", "TCL_VERSION", latest)
    plan.assign("ENV", {"TCL_ROOTFS": settings["rootfs"], "TCL_ROOTFS_MD5": rootfs_md5})
    return plan
