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
HTML directory index scraping.
"""

import re
from typing import Any, Dict, List, Optional

from ..utils.errors import ParseFailure
from ..utils.fetcher import Fetcher
from ..utils.index import log_message
from ..utils.versions import in_family, is_dotted_numeric, sort_versions

_HREF = re.compile(r'href="([0-9][0-9.]*)/?"')


def listed_versions(html: str) -> List[str]:
    """Version-like directory names linked from an index page."""
    seen = []
    for candidate in _HREF.findall(html):
        candidate = candidate.rstrip(".")
        if is_dotted_numeric(candidate) and candidate not in seen:
            seen.append(candidate)
    return seen


def resolve(fetcher: Fetcher, source: Dict[str, Any], family: Optional[str] = None,
            name: str = "dependency") -> str:
    versions = listed_versions(fetcher.fetch_text(source["url"]))
    if not versions:
        raise ParseFailure(f"{name}: no versions listed at {source['url']}", dependency=name)

    newest = sort_versions(versions, reverse=True)[0]
    if family:
        versions = [version for version in versions if in_family(version, family)]
        if not versions:
            raise ParseFailure(f"{name}: no {family}.x versions listed at {source['url']}", dependency=name)

    latest = sort_versions(versions, reverse=True)[0]
    if latest != newest:
        log_message(f"{name}: {newest} is published outside the tracked {family}.x line", "WARNING")
    return latest
