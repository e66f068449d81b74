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
Edit planning and the single-pass file rewrite.

An EditPlan collects one Edit per tracked variable. Nothing is written
until every dependency has been resolved; patch_file() then rewrites the
target in one atomic replace.
"""

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Tuple, Union

from .index import log_message, debug_log


@dataclass(frozen=True)
class Edit:
    """
    Anchored line substitution.

    A line matches when it starts with `prefix` (and ends with `suffix`
    when one is given). The text between them is replaced by `value`.
    """
    prefix: str
    value: str
    suffix: str = ""

    def matches(self, line: str) -> bool:
        if not line.startswith(self.prefix):
            return False
        if self.suffix:
            return line.endswith(self.suffix) and len(line) >= len(self.prefix) + len(self.suffix)
        return True

    def apply(self, line: str) -> str:
        return f"{self.prefix}{self.value}{self.suffix}"


class EditPlan:
    """Ordered accumulator of edits returned by each dependency module."""

    def __init__(self, edits: List[Edit] = None):
        self.edits: List[Edit] = list(edits or [])

    def add(self, edit: Edit) -> "EditPlan":
        self.edits.append(edit)
        return self

    def set(self, keyword: str, name: str, value: str) -> "EditPlan":
        """Rewrite `KEYWORD NAME <value>`."""
        return self.add(Edit(prefix=f"{keyword} {name} ", value=value))

    def assign(self, keyword: str, values: Dict[str, str]) -> "EditPlan":
        """Rewrite a multi-value line `KEYWORD A="x" B="y"` keyed on its first name."""
        items = list(values.items())
        if not items:
            raise ValueError("assign() needs at least one name")
        first_name, first_value = items[0]
        rest = "".join(f' {name}="{value}"' for name, value in items[1:])
        return self.add(Edit(prefix=f"{keyword} {first_name}=", value=f'"{first_value}"{rest}'))

    def replace_between(self, prefix: str, value: str, suffix: str) -> "EditPlan":
        return self.add(Edit(prefix=prefix, value=value, suffix=suffix))

    def extend(self, other: "EditPlan") -> "EditPlan":
        self.edits.extend(other.edits)
        return self

    def __iter__(self) -> Iterator[Edit]:
        return iter(self.edits)

    def __len__(self) -> int:
        return len(self.edits)


def _split_ending(line: str) -> Tuple[str, str]:
    if line.endswith("\r"):
        return line[:-1], "\r"
    return line, ""


def apply_edits(text: str, edits: Union[EditPlan, List[Edit]]) -> Tuple[str, List[Edit]]:
    """
    Apply every edit to every line in a single pass.

    Returns:
        tuple: (new text, edits that matched no line)
    """
    edits = list(edits)
    matched = set()
    output = []
    # lines end at \n only, like sed; form feeds and other separators stay inside a line
    for raw_line in text.split("\n"):
        line, ending = _split_ending(raw_line)
        for index, edit in enumerate(edits):
            if edit.matches(line):
                line = edit.apply(line)
                matched.add(index)
        output.append(line + ending)
    unmatched = [edit for index, edit in enumerate(edits) if index not in matched]
    return "\n".join(output), unmatched


def patch_file(path: Union[str, Path], plan: Union[EditPlan, List[Edit]]) -> bool:
    """
    Rewrite `path` with the planned edits.

    The new contents are written to a sibling temporary file and moved
    over the target, so readers see either the old or the new file.

    Returns:
        bool: True if the contents changed
    """
    path = Path(path)
    original = path.read_bytes().decode("utf-8")
    updated, unmatched = apply_edits(original, plan)

    for edit in unmatched:
        log_message(f"No line in {path.name} starts with '{edit.prefix.strip()}'", "WARNING")

    if updated == original:
        log_message(f"{path} already up to date")
        return False

    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(updated.encode("utf-8"))
        shutil.copymode(str(path), temp_name)
        os.replace(temp_name, str(path))
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise

    debug_log(f"Wrote {len(plan)} planned edits to {path}")
    log_message(f"Updated {path}")
    return True
