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
Dotted-numeric version ordering and family validation.
"""

import re
from typing import Iterable, List, Optional, Tuple

from packaging.version import InvalidVersion, Version

from .errors import FamilyMismatch, ParseFailure
from .index import debug_log

_SEGMENT = re.compile(r"[0-9]+")


def version_key(version: str) -> Tuple[int, ...]:
    """
    Sort key comparing a version segment-wise as integers.

    A shorter version sorts before a longer one sharing its prefix,
    so "1.2" < "1.2.0" < "1.10".

    Raises:
        ParseFailure: if any segment is not an integer
    """
    try:
        return tuple(int(part) for part in version.split("."))
    except ValueError as e:
        raise ParseFailure(f"Not a dotted-numeric version: '{version}'", value=version) from e


def is_dotted_numeric(version: str) -> bool:
    return all(_SEGMENT.fullmatch(part) for part in version.split("."))


def sort_versions(versions: Iterable[str], reverse: bool = False) -> List[str]:
    return sorted(versions, key=version_key, reverse=reverse)


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two dotted-numeric version strings.

    Returns:
        int: -1 if version1 < version2, 0 if equal, 1 if version1 > version2
    """
    key1, key2 = version_key(version1), version_key(version2)
    debug_log(f"Comparing versions: {key1} vs {key2}")
    if key1 < key2:
        return -1
    if key1 > key2:
        return 1
    return 0


def in_family(version: str, base: str) -> bool:
    """True when `version` continues the `base` line, e.g. 6.1.55 in 6.1."""
    release = _release(version, None)
    return release is not None and _in_family(release, _release(base, None))


def validate_family(name: str, resolved: str, base: str) -> str:
    """
    Ensure a resolved version belongs to the tracked family.

    Args:
        name: Dependency name used in the failure message
        resolved: Version resolved from upstream
        base: Family prefix, e.g. "6.1"

    Returns:
        str: the resolved version, unchanged

    Raises:
        FamilyMismatch: if upstream moved to another line
        ParseFailure: if either value is not a version
    """
    resolved_release = _release(resolved, name)
    base_release = _release(base, name)
    if not _in_family(resolved_release, base_release):
        raise FamilyMismatch(
            f"{name} has an update! ({resolved}) - expected the {base}.x line; "
            f"review and bump the tracked base before re-running",
            dependency=name,
            value=resolved,
        )
    debug_log(f"{name}: {resolved} is within family {base}")
    return resolved


def check_reference(name: str, actual: str, expected: str) -> str:
    """Ensure an exact pinned reference value has not changed upstream."""
    if actual != expected:
        raise FamilyMismatch(
            f"{name} has an update! ({actual}) - pinned reference is {expected}",
            dependency=name,
            value=actual,
        )
    debug_log(f"{name}: reference {expected} unchanged")
    return actual


def _release(version: str, name: Optional[str]) -> Optional[Tuple[int, ...]]:
    try:
        return Version(version).release
    except InvalidVersion as e:
        if name is None:
            return None
        raise ParseFailure(f"{name}: cannot parse version '{version}'", dependency=name, value=version) from e


def _in_family(release: Tuple[int, ...], base: Optional[Tuple[int, ...]]) -> bool:
    if base is None:
        return False
    return len(release) > len(base) and release[: len(base)] == base
