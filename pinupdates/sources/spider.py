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
Existence probes and plain-text "latest" files.
"""

from typing import Any, Dict, List

from ..utils.errors import FamilyMismatch, ParseFailure
from ..utils.fetcher import Fetcher, mirror_urls
from ..utils.index import debug_log


def spider_urls(source: Dict[str, Any]) -> List[str]:
    if source.get("mirrors"):
        return mirror_urls(source["mirrors"], [source["path"]])
    return [source["url"]]


def resolve(fetcher: Fetcher, source: Dict[str, Any], name: str = "dependency") -> str:
    """
    Probe a URL that only exists while the pinned release is current.

    Success means nothing changed and the reference version is returned;
    if no candidate answers, a newer release may have replaced it.
    """
    reference = source["reference"]
    urls = spider_urls(source)
    for url in urls:
        if fetcher.probe(url):
            debug_log(f"{name}: {url} still published")
            return reference
    raise FamilyMismatch(
        f"{name} may have an update! ({reference} no longer published at {', '.join(urls)})",
        dependency=name,
        value=reference,
    )


def resolve_latest_text(fetcher: Fetcher, source: Dict[str, Any], name: str = "dependency") -> str:
    latest = fetcher.fetch_text(source["url"]).strip()
    if not latest or len(latest.split()) != 1:
        raise ParseFailure(f"{name}: unexpected latest-version file at {source['url']}", dependency=name,
                           value=latest[:80])
    return latest
