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
Version sources.

Each tracked dependency names one SourceKind in its index.json. The
source dict is handed to the matching strategy, which returns the
resolved version string.
"""

from enum import Enum
from typing import Any, Dict, Optional

from ..utils.errors import ParseFailure
from ..utils.fetcher import Fetcher
from ..utils.index import debug_log


class SourceKind(Enum):
    SPIDER = "spider"
    LATEST_TEXT = "latest_text"
    FEED = "feed"
    LISTING = "listing"
    TAGS = "tags"
    REDIRECT = "redirect"


def resolve_version(fetcher: Fetcher, source: Dict[str, Any], family: Optional[str] = None,
                    name: str = "dependency") -> str:
    """
    Resolve a version string from a source description.

    Args:
        fetcher: Fetcher used for all network access
        source: Source description; must carry a "kind" key
        family: Optional family prefix restricting candidates
        name: Dependency name used in failure messages

    Returns:
        str: The resolved version
    """
    from . import feed, listing, redirect, spider, tags

    try:
        kind = SourceKind(source["kind"])
    except (KeyError, ValueError) as e:
        raise ParseFailure(f"{name}: unknown source kind {source.get('kind')!r}", dependency=name) from e

    debug_log(f"{name}: resolving via {kind.value}")
    if kind is SourceKind.SPIDER:
        return spider.resolve(fetcher, source, name=name)
    if kind is SourceKind.LATEST_TEXT:
        return spider.resolve_latest_text(fetcher, source, name=name)
    if kind is SourceKind.FEED:
        return feed.resolve(fetcher, source, family=family, name=name)
    if kind is SourceKind.LISTING:
        return listing.resolve(fetcher, source, family=family, name=name)
    if kind is SourceKind.TAGS:
        return tags.resolve(fetcher, source, family=family, name=name)
    return redirect.resolve(fetcher, source, name=name)


__all__ = ["SourceKind", "resolve_version"]
