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
Error hierarchy for pin updates.

Every fatal condition raised while resolving a dependency derives from
PinUpdateError so the orchestrator can abort the run before the target
file is touched.
"""

from typing import Optional


class PinUpdateError(Exception):
    """Base failure for a dependency resolution step."""

    def __init__(self, message: str, dependency: Optional[str] = None, value: Optional[str] = None):
        super().__init__(message)
        self.dependency = dependency
        self.value = value


class NetworkFailure(PinUpdateError):
    """Fetch timed out, could not connect, or returned a non-2xx status."""
    pass


class ParseFailure(PinUpdateError):
    """An expected field, token or version was missing or malformed."""
    pass


class FamilyMismatch(PinUpdateError):
    """Upstream published a version outside the tracked family."""
    pass


class AmbiguousMatch(PinUpdateError):
    """A checksum manifest did not yield exactly one usable entry."""
    pass
