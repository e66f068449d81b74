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
Shared logging and config helpers for the pin update system.
"""

import os
import json
import logging
from typing import Any, Dict, Optional

# Debug flag toggled by the orchestrator from root config or --debug
DEBUG = False


def log_message(message: str, level: str = "INFO"):
    """Unified logger used throughout the orchestrator and helpers."""
    if level == "ERROR":
        logging.error(message)
    elif level == "WARNING":
        logging.warning(message)
    elif level == "DEBUG":
        logging.debug(message)
    else:
        logging.info(message)


def debug_log(message: str):
    """Debug logging that only shows when DEBUG=True."""
    if DEBUG:
        log_message(message, "DEBUG")


def set_debug(enabled: bool) -> None:
    global DEBUG
    DEBUG = bool(enabled)


def load_index(directory: str) -> Optional[Dict[str, Any]]:
    """
    Load the index.json file from a directory.

    Args:
        directory: Path to the directory holding index.json

    Returns:
        dict: The loaded index.json data, or None if not found/invalid
    """
    index_file = os.path.join(directory, "index.json")
    debug_log(f"Attempting to load: {index_file}")

    if not os.path.exists(index_file):
        debug_log(f"File does not exist: {index_file}")
        return None

    try:
        with open(index_file, "r") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        log_message(f"Failed to load index.json from {directory}: {e}", "ERROR")
        return None


def get_module_version(module_path: str) -> str:
    """
    Get the schema version from a module's index.json file.

    Args:
        module_path (str): Path to the module directory

    Returns:
        str: The schema version from index.json, or "unknown" if not found
    """
    data = load_index(module_path)
    if not data:
        return "unknown"
    return data.get("metadata", {}).get("schema_version", "unknown")
