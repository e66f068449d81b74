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
Utilities for the pin update system.

This module provides the fetcher, version ordering, checksum lookup and
file patching shared by every dependency module.
"""

from .index import log_message, debug_log, get_module_version
from .errors import PinUpdateError, NetworkFailure, ParseFailure, FamilyMismatch, AmbiguousMatch
from .fetcher import Fetcher, mirror_urls
from .versions import version_key, sort_versions, compare_versions, validate_family, check_reference
from .checksums import ChecksumRecord, parse_manifest, select_checksum, resolve_checksum
from .patcher import Edit, EditPlan, apply_edits, patch_file

__all__ = [
    'log_message',
    'debug_log',
    'get_module_version',
    'PinUpdateError',
    'NetworkFailure',
    'ParseFailure',
    'FamilyMismatch',
    'AmbiguousMatch',
    'Fetcher',
    'mirror_urls',
    'version_key',
    'sort_versions',
    'compare_versions',
    'validate_family',
    'check_reference',
    'ChecksumRecord',
    'parse_manifest',
    'select_checksum',
    'resolve_checksum',
    'Edit',
    'EditPlan',
    'apply_edits',
    'patch_file',
]
