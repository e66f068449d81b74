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
Remote git tag listings.
"""

from typing import Any, Dict, Iterable, List, Optional

from ..utils.errors import ParseFailure
from ..utils.fetcher import Fetcher
from ..utils.versions import in_family, is_dotted_numeric, sort_versions


def tag_versions(refs: Iterable[str], prefix: str = "") -> List[str]:
    """
    Reduce raw refs to the version part of release tags.

    "refs/tags/v1.2.3^{}" with prefix "v" becomes "1.2.3"; tags without
    the prefix or with non-numeric versions (rc, beta) are dropped.
    """
    versions = []
    for ref in refs:
        tag = ref[len("refs/tags/"):] if ref.startswith("refs/tags/") else ref
        if tag.endswith("^{}"):
            tag = tag[:-3]
        if not tag.startswith(prefix):
            continue
        version = tag[len(prefix):]
        if is_dotted_numeric(version) and version not in versions:
            versions.append(version)
    return versions


def resolve(fetcher: Fetcher, source: Dict[str, Any], family: Optional[str] = None,
            name: str = "dependency") -> str:
    versions = tag_versions(fetcher.list_tags(source["repository"]), source.get("prefix", ""))
    if family:
        versions = [version for version in versions if in_family(version, family)]
    if not versions:
        raise ParseFailure(f"{name}: no release tags found in {source['repository']}", dependency=name)
    return sort_versions(versions, reverse=True)[0]
