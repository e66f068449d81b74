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
Bounded-timeout fetcher shared by every version source.

All network access for a run goes through one Fetcher: plain GETs,
HEAD probes, redirect inspection and `git ls-remote` tag listings.
Each call is bounded by the configured timeout so an unreachable
upstream fails the run instead of stalling it.
"""

import os
import json
import subprocess
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests

from .errors import NetworkFailure, ParseFailure
from .index import debug_log

DEFAULT_TIMEOUT = 2
DEFAULT_USER_AGENT = "pinupdates/1.0"


def mirror_urls(mirrors: Iterable[str], paths: Iterable[str]) -> List[str]:
    """
    Build the ordered candidate list for a mirrored resource.

    Every mirror is tried for the first path before moving on to the
    next path.
    """
    mirrors = list(mirrors)
    return [f"{mirror.rstrip('/')}/{path.lstrip('/')}" for path in paths for mirror in mirrors]


class Fetcher:
    """HTTP and git access with a short timeout and a per-run cache."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
        runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
        git_low_speed_limit: int = 100,
        git_low_speed_time: int = 2,
    ):
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.runner = runner if runner is not None else subprocess.run
        self.git_low_speed_limit = git_low_speed_limit
        self.git_low_speed_time = git_low_speed_time
        self._cache: Dict[str, bytes] = {}

    def fetch(self, url: str) -> bytes:
        """
        GET a URL and return its body.

        Raises:
            NetworkFailure: on timeout, connection error or HTTP error status
        """
        if url in self._cache:
            debug_log(f"Cache hit: {url}")
            return self._cache[url]

        debug_log(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise NetworkFailure(f"Timed out fetching {url}: {e}", value=url) from e
        except requests.HTTPError as e:
            raise NetworkFailure(f"HTTP error fetching {url}: {e}", value=url) from e
        except requests.RequestException as e:
            raise NetworkFailure(f"Failed to fetch {url}: {e}", value=url) from e

        self._cache[url] = response.content
        return response.content

    def fetch_text(self, url: str) -> str:
        return self.fetch(url).decode("utf-8", errors="replace")

    def fetch_json(self, url: str) -> Any:
        try:
            return json.loads(self.fetch(url))
        except ValueError as e:
            raise ParseFailure(f"Invalid JSON from {url}: {e}", value=url) from e

    def fetch_any(self, urls: Iterable[str]) -> bytes:
        """
        Return the body of the first URL that can be fetched.

        Raises:
            NetworkFailure: if every candidate fails
        """
        failures = []
        for url in urls:
            try:
                return self.fetch(url)
            except NetworkFailure as e:
                debug_log(f"Candidate failed, trying next: {e}")
                failures.append(url)
        raise NetworkFailure(f"All candidates failed: {', '.join(failures) or '(none given)'}")

    def probe(self, url: str) -> bool:
        """HEAD existence check; any failure counts as absent."""
        debug_log(f"HEAD {url}")
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
            response.raise_for_status()
        except requests.RequestException as e:
            debug_log(f"Probe failed for {url}: {e}")
            return False
        return True

    def redirect_targets(self, url: str) -> List[str]:
        """
        Follow a redirect chain and return each redirect target in order.

        The first entry of the returned list is the first Location the
        server pointed at; the last is the final URL.
        """
        debug_log(f"Following redirects from {url}")
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkFailure(f"Failed to follow redirects from {url}: {e}", value=url) from e

        if not response.history:
            return [response.url]
        return [hop.url for hop in response.history[1:]] + [response.url]

    def list_tags(self, repo_url: str) -> List[str]:
        """
        List tag refs of a remote git repository.

        Returns:
            list: raw ref names, e.g. "refs/tags/v1.2.3^{}"
        """
        env = dict(os.environ)
        # abort slow git HTTP transfers instead of hanging on them
        env["GIT_HTTP_LOW_SPEED_LIMIT"] = str(self.git_low_speed_limit)
        env["GIT_HTTP_LOW_SPEED_TIME"] = str(self.git_low_speed_time)
        env["GIT_TERMINAL_PROMPT"] = "0"

        command = ["git", "ls-remote", "--tags", repo_url]
        debug_log(f"Running: {' '.join(command)}")
        try:
            result = self.runner(
                command,
                capture_output=True,
                text=True,
                env=env,
                timeout=max(self.timeout * 10, 30),
            )
        except subprocess.TimeoutExpired as e:
            raise NetworkFailure(f"Timed out listing tags of {repo_url}", value=repo_url) from e
        except OSError as e:
            raise NetworkFailure(f"Could not run git for {repo_url}: {e}", value=repo_url) from e

        if result.returncode != 0:
            raise NetworkFailure(
                f"git ls-remote failed for {repo_url}: {result.stderr.strip()}", value=repo_url
            )

        refs = []
        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) == 2:
                refs.append(parts[1])
        return refs
