#!/usr/bin/env python3
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
Pin update orchestrator.

Resolves every tracked dependency, validates each against its family or
pinned reference, and only then rewrites the target Dockerfile in one
pass. Any failure exits non-zero with the file untouched.
"""

import os
import sys
import argparse
import logging
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import load_descriptor, load_global_index, resolve_all
from .utils.errors import PinUpdateError
from .utils.fetcher import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, Fetcher
from .utils.index import log_message, set_debug
from .utils.patcher import EditPlan, patch_file


def setup_global_update_logging(debug: bool = False):
    """
    Log to stdout only; the caller owns redirection to files.
    """
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    unified_format = logging.Formatter('[%(asctime)s] [%(levelname)s] %(message)s',
                                       datefmt='%Y-%m-%d %H:%M:%S')
    console_handler.setFormatter(unified_format)
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
    root_logger.addHandler(console_handler)
    # connection and retry chatter is not part of the run's output
    for noisy in ("urllib3", "requests"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.info("="*80)
    logging.info("PIN UPDATE SESSION STARTED")
    logging.info(f"Command: {' '.join(sys.argv)}")
    logging.info(f"Working Directory: {os.getcwd()}")
    logging.info("="*80)


def build_fetcher(config: Dict[str, Any], timeout: Optional[float] = None) -> Fetcher:
    """Create the run's Fetcher from the root config section."""
    git = config.get("git", {})
    return Fetcher(
        timeout=timeout if timeout is not None else config.get("timeout", DEFAULT_TIMEOUT),
        user_agent=config.get("user_agent", DEFAULT_USER_AGENT),
        git_low_speed_limit=git.get("low_speed_limit", 100),
        git_low_speed_time=git.get("low_speed_time", 2),
    )


def select_modules(packages: List[str], requested: Optional[List[str]]) -> List[str]:
    """Restrict the configured module order to the requested names."""
    if not requested:
        return list(packages)
    unknown = [name for name in requested if name not in packages]
    if unknown:
        raise ValueError(f"Unknown module(s): {', '.join(unknown)} (known: {', '.join(packages)})")
    return [name for name in packages if name in requested]


def list_modules(packages: List[str]) -> bool:
    """Log every configured module with its enabled state and tracked family."""
    log_message("Configured modules:")
    for name in packages:
        descriptor = load_descriptor(name)
        state = "enabled" if descriptor.enabled else "disabled"
        if descriptor.base:
            tracking = f"base {descriptor.base}"
        elif descriptor.reference:
            tracking = f"reference {descriptor.reference}"
        else:
            tracking = "latest"
        log_message(f"  {name} ({descriptor.name}): {state}, {tracking}, source {descriptor.kind or '?'}")
    return True


def log_plan(plan: EditPlan):
    log_message(f"Planned edits ({len(plan)}):")
    for edit in plan:
        log_message(f"  {edit.prefix}{edit.value}{edit.suffix}")


def run_pin_updates(target: str, module_names: List[str], fetcher: Fetcher,
                    check_only: bool = False) -> EditPlan:
    """
    Resolve all modules, then patch `target` once.

    Raises:
        PinUpdateError: from any module; the target is not written
        FileNotFoundError: if the target file is missing
    """
    target_path = Path(target)
    if not target_path.is_file():
        raise FileNotFoundError(f"Target file not found: {target_path}")

    plan = resolve_all(module_names, fetcher)

    if check_only:
        log_message("Check-only mode: not writing target")
        log_plan(plan)
        return plan

    patch_file(target_path, plan)
    return plan


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for the pin update orchestrator.
    """
    parser = argparse.ArgumentParser(description="Track upstream releases and pin them in a Dockerfile")
    parser.add_argument("--config", default=None,
                        help="Alternate root index.json")
    parser.add_argument("--target", default=None,
                        help="File to rewrite (default: config.target)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Per-request timeout in seconds")
    parser.add_argument("--module", action="append", metavar="MODULE",
                        help="Only resolve this module (repeatable)")
    parser.add_argument("--check-only", action="store_true",
                        help="Resolve and validate, but don't write the target")
    parser.add_argument("--list-modules", action="store_true",
                        help="List configured modules")
    parser.add_argument("--debug", action="store_true",
                        help="Verbose logging")

    args = parser.parse_args(argv)

    try:
        global_index = load_global_index(args.config)
        debug = args.debug or global_index.get("metadata", {}).get("debug", False)
        setup_global_update_logging(debug)
        set_debug(debug)

        config = global_index.get("config", {})
        packages = global_index.get("packages", [])

        if args.list_modules:
            success = list_modules(packages)
            sys.exit(0 if success else 1)

        module_names = select_modules(packages, args.module)
        target = args.target or config.get("target", "Dockerfile")
        fetcher = build_fetcher(config, args.timeout)

        run_pin_updates(target, module_names, fetcher, check_only=args.check_only)
        log_message("Pin update completed successfully")
        sys.exit(0)

    except PinUpdateError as e:
        log_message(str(e), "ERROR")
        log_message("Aborting without modifying the target file", "ERROR")
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        log_message(str(e), "ERROR")
        sys.exit(1)
    except KeyboardInterrupt:
        log_message("Pin update interrupted by user", "WARNING")
        sys.exit(130)
    except Exception as e:
        log_message(f"Unhandled error in pin update: {e}", "ERROR")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
