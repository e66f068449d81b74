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
Structured JSON release feeds (kernel.org releases.json, GitHub releases).
"""

from typing import Any, Dict, List, Optional

from ..utils.errors import ParseFailure
from ..utils.fetcher import Fetcher
from ..utils.index import debug_log
from ..utils.versions import in_family, is_dotted_numeric, sort_versions


def select_entries(document: Any, items: Optional[str], where: Dict[str, Any], name: str) -> List[Dict[str, Any]]:
    entries = document.get(items) if items and isinstance(document, dict) else document
    if not isinstance(entries, list):
        where_found = f" under {items!r}" if items else ""
        raise ParseFailure(f"{name}: feed has no release list{where_found}", dependency=name)
    return [
        entry for entry in entries
        if isinstance(entry, dict) and all(entry.get(key) == value for key, value in where.items())
    ]


def latest_version(entries: List[Dict[str, Any]], field: str, strip_prefix: str = "",
                   family: Optional[str] = None, name: str = "dependency") -> str:
    """
    Highest dotted-numeric value of `field` across feed entries.

    Entries whose value is not dotted-numeric after stripping the
    prefix are ignored.
    """
    candidates = []
    for entry in entries:
        value = entry.get(field)
        if not isinstance(value, str):
            continue
        if strip_prefix and value.startswith(strip_prefix):
            value = value[len(strip_prefix):]
        if not is_dotted_numeric(value):
            debug_log(f"{name}: skipping non-numeric {field} '{value}'")
            continue
        if family and not in_family(value, family):
            continue
        candidates.append(value)

    if not candidates:
        raise ParseFailure(f"{name}: no usable '{field}' in feed", dependency=name)
    return sort_versions(candidates, reverse=True)[0]


def resolve(fetcher: Fetcher, source: Dict[str, Any], family: Optional[str] = None,
            name: str = "dependency") -> str:
    document = fetcher.fetch_json(source["url"])
    entries = select_entries(document, source.get("items"), source.get("where", {}), name)
    debug_log(f"{name}: {len(entries)} feed entries after filtering")
    return latest_version(entries, source["field"], source.get("strip_prefix", ""), family=family, name=name)
