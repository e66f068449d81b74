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
Parallels Desktop guest tools.

Parallels publishes no version listing. The newest product line is read
from the website link index, its build manifest yields the DMG download
link, and the version is taken from where that link redirects to.
"""

from typing import Any, Dict, List, Optional

from pinupdates.modules import DependencyDescriptor, descriptor_from_config, load_module_config
from pinupdates.sources import resolve_version
from pinupdates.utils.errors import ParseFailure
from pinupdates.utils.fetcher import Fetcher
from pinupdates.utils.index import debug_log, log_message
from pinupdates.utils.patcher import EditPlan
from pinupdates.utils.versions import check_reference, sort_versions, validate_family

DEFAULT_CONFIG = {
    "metadata": {
        "schema_version": "1.0.0",
        "module_name": "parallels",
        "enabled": True
    },
    "config": {
        "name": "Parallels Desktop",
        "reference": "19",
        "links_base": "https://download.parallels.com/website_links/",
        "product_index": "https://download.parallels.com/website_links/desktop/index.json",
        "locale": "en_US",
        "product_prefix": "Parallels Desktop",
        "file_type": "DMG",
        "source": {
            "kind": "redirect",
            "pattern": "^https://download\\.parallels\\.com/desktop/.*/([0-9.-]+)/[^/]*$"
        }
    }
}

# Global configuration
MODULE_CONFIG = load_module_config(__file__, DEFAULT_CONFIG)
DESCRIPTOR = descriptor_from_config(MODULE_CONFIG)


def latest_product_line(index: Dict[str, Any], name: str) -> str:
    """Newest product line key of the link index, e.g. "19"."""
    lines = [key for key in index if key.isdigit()] if isinstance(index, dict) else []
    if not lines:
        raise ParseFailure(f"{name}: product index lists no product lines", dependency=name)
    return sort_versions(lines, reverse=True)[0]


def download_link(manifest: List[Dict[str, Any]], product_prefix: str, file_type: str, name: str) -> str:
    """Find the first download of `file_type` for a product named `product_prefix*`."""
    for category in manifest if isinstance(manifest, list) else []:
        if not str(category.get("category", {}).get("name", "")).startswith(product_prefix):
            continue
        for content in category.get("contents", []):
            if str(content.get("name", "")).startswith(product_prefix):
                link = content.get("files", {}).get(file_type)
                if link:
                    return link
    raise ParseFailure(f"{name}: no {file_type} download for '{product_prefix}' in build manifest",
                       dependency=name)


def resolve(fetcher: Fetcher, descriptor: Optional[DependencyDescriptor] = None) -> EditPlan:
    descriptor = descriptor or DESCRIPTOR
    settings = descriptor.settings
    name = descriptor.name

    index = fetcher.fetch_json(settings["product_index"])
    product_line = latest_product_line(index, name)
    check_reference(name, product_line, descriptor.reference)

    try:
        builds_path = index[product_line]["builds"][settings["locale"]]
    except (KeyError, TypeError) as e:
        raise ParseFailure(f"{name}: no {settings['locale']} builds for product line {product_line}",
                           dependency=name) from e
    debug_log(f"{name}: build manifest {builds_path}")

    manifest = fetcher.fetch_json(settings["links_base"] + builds_path)
    link = download_link(manifest, settings["product_prefix"], settings["file_type"], name)

    source = dict(descriptor.source, url=link)
    version = resolve_version(fetcher, source, name=name)
    validate_family(name, version, descriptor.reference)
    log_message(f"{name}: {version}")
    return EditPlan().set("ENV", "PARALLELS_VERSION", version)
