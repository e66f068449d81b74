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
Release tracking and version pinning for the boot2docker Dockerfile.

Each tracked upstream project lives in modules/<name> and exposes
resolve(fetcher) -> EditPlan. The orchestrator in index.py runs them in
the order listed by the root index.json and writes the target file once.
"""

import os
import json
import importlib
from typing import Dict, List, Optional

from .utils.index import log_message, debug_log
from .utils.fetcher import Fetcher
from .utils.patcher import EditPlan
from .utils.versions import compare_versions, sort_versions, validate_family
from .modules import DependencyDescriptor

__all__ = [
    'log_message',
    'load_global_index',
    'load_descriptor',
    'compare_versions',
    'sort_versions',
    'validate_family',
    'run_resolver',
    'resolve_all',
]

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def load_global_index(path: Optional[str] = None) -> Dict:
    """
    Load the root index.json holding run configuration and module order.

    Args:
        path: Alternate index.json file; defaults to the packaged one

    Returns:
        dict: The loaded configuration
    """
    path = path or os.path.join(PACKAGE_DIR, "index.json")
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        log_message(f"Failed to load root configuration {path}: {e}", "ERROR")
        raise


def load_module(module_name: str):
    """Import modules/<name>, which must expose resolve(fetcher) and DESCRIPTOR."""
    mod = importlib.import_module(f".modules.{module_name}", package=__name__)
    for attr in ("resolve", "DESCRIPTOR"):
        if not hasattr(mod, attr):
            raise AttributeError(f"Module {module_name} has no {attr}.")
    return mod


def load_descriptor(module_name: str) -> DependencyDescriptor:
    return load_module(module_name).DESCRIPTOR


def run_resolver(module_name: str, fetcher: Fetcher) -> EditPlan:
    """
    Run a single dependency module.

    Errors propagate: a failing module must stop the whole run.

    Args:
        module_name: Module directory name under modules/
        fetcher: Fetcher shared by the run

    Returns:
        EditPlan: The module's planned edits
    """
    mod = load_module(module_name)
    log_message(f"Resolving: {module_name}")
    plan = mod.resolve(fetcher)
    debug_log(f"Completed: {module_name} ({len(plan)} edits)")
    return plan


def resolve_all(module_names: List[str], fetcher: Fetcher) -> EditPlan:
    """
    Resolve every enabled module in order and merge their edits.

    Disabled modules (metadata.enabled == false) are skipped.
    """
    plan = EditPlan()
    for module_name in module_names:
        if not load_descriptor(module_name).enabled:
            log_message(f"Module {module_name} is disabled, skipping")
            continue
        plan.extend(run_resolver(module_name, fetcher))
    return plan
