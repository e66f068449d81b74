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
Tracked dependency modules.

Each subpackage holds an index.json describing one upstream project and
an index.py exposing resolve(fetcher) -> EditPlan.
"""

import os
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..utils.index import load_index, log_message


@dataclass(frozen=True)
class DependencyDescriptor:
    """Static description of one tracked upstream project."""
    name: str
    source: Dict[str, Any]
    base: Optional[str] = None
    reference: Optional[str] = None
    enabled: bool = True
    settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        return self.source.get("kind", "")


def load_module_config(module_file: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
    """
    Load configuration from the module's index.json file.

    Args:
        module_file: __file__ of the calling module
        defaults: Built-in configuration used when index.json is unreadable

    Returns:
        dict: Configuration data or default values if loading fails
    """
    module_dir = os.path.dirname(os.path.abspath(module_file))
    data = load_index(module_dir)
    if data is None:
        log_message(f"Failed to load module config from {module_dir}, using defaults", "WARNING")
        return copy.deepcopy(defaults)
    return data


def descriptor_from_config(module_config: Dict[str, Any]) -> DependencyDescriptor:
    metadata = module_config.get("metadata", {})
    config = dict(module_config.get("config", {}))
    return DependencyDescriptor(
        name=config.pop("name", metadata.get("module_name", "unknown")),
        source=config.pop("source", {}),
        base=config.pop("base", None),
        reference=config.pop("reference", None),
        enabled=metadata.get("enabled", True),
        settings=config,
    )
