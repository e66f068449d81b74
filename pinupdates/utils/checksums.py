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
Checksum manifest parsing and lookup.

Manifests follow the coreutils `sha256sum` layout, one entry per line:

    <hex-digest> <flag><filename>

where the flag is "*" for binary mode or a space for text mode.
"""

import fnmatch
import re
from dataclasses import dataclass
from typing import Iterable, List

from .errors import AmbiguousMatch, NetworkFailure, ParseFailure
from .fetcher import Fetcher
from .index import log_message, debug_log

_MANIFEST_LINE = re.compile(r"^([0-9a-fA-F]+) ([ *]?)(\S.*)$")


@dataclass(frozen=True)
class ChecksumRecord:
    """A single manifest entry."""
    algorithm: str
    filename: str
    digest: str


def parse_manifest(text: str, algorithm: str = "sha256") -> List[ChecksumRecord]:
    """Parse manifest text, skipping blank and malformed lines."""
    records = []
    for line in text.splitlines():
        match = _MANIFEST_LINE.match(line.strip())
        if not match:
            continue
        digest, _flag, filename = match.groups()
        records.append(ChecksumRecord(algorithm=algorithm, filename=filename.strip(), digest=digest.lower()))
    return records


def select_checksum(records: Iterable[ChecksumRecord], pattern: str, name: str) -> ChecksumRecord:
    """
    Pick the manifest entry whose filename matches `pattern`.

    Zero matches is fatal. Several matches are logged and the first one
    is used.

    Raises:
        AmbiguousMatch: if nothing matches
    """
    matches = [record for record in records if fnmatch.fnmatchcase(record.filename, pattern)]
    if not matches:
        raise AmbiguousMatch(f"{name}: no checksum entry matches '{pattern}'", dependency=name, value=pattern)
    if len(matches) > 1:
        candidates = ", ".join(record.filename for record in matches)
        log_message(f"{name}: {len(matches)} checksum entries match '{pattern}' ({candidates}); using the first", "WARNING")
    return matches[0]


def resolve_checksum(fetcher: Fetcher, urls: List[str], pattern: str, name: str,
                     algorithm: str = "sha256") -> ChecksumRecord:
    """
    Fetch a checksum manifest and extract the entry matching `pattern`.

    Each URL is a fallback for the one before it.

    Raises:
        NetworkFailure: if no manifest location can be fetched
        AmbiguousMatch: if the manifest has no matching entry
    """
    for url in urls:
        try:
            text = fetcher.fetch_text(url)
        except NetworkFailure as e:
            log_message(f"{name}: checksum manifest unavailable at {url}, trying fallback ({e})", "WARNING")
            continue
        debug_log(f"{name}: using checksum manifest from {url}")
        return select_checksum(parse_manifest(text, algorithm), pattern, name)
    raise NetworkFailure(f"{name}: no checksum manifest could be fetched from {', '.join(urls)}", dependency=name)


def first_token_digest(text: str, name: str) -> str:
    """Extract the digest from a single-entry `<digest>  <filename>` file."""
    tokens = text.split()
    if not tokens or not re.fullmatch(r"[0-9a-fA-F]+", tokens[0]):
        raise ParseFailure(f"{name}: malformed checksum file", dependency=name, value=text.strip()[:80])
    return tokens[0].lower()
