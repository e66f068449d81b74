"""Shared test fixtures: an in-memory stand-in for the network."""

from __future__ import annotations

import json
import subprocess
from typing import Any

import pytest
import requests

from pinupdates.utils.fetcher import Fetcher


class FakeResponse:
    def __init__(self, url: str, status: int = 200, content: bytes = b"", history: list | None = None):
        self.url = url
        self.status_code = status
        self.content = content
        self.history = history or []

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} for url: {self.url}", response=self)


def _encode(payload: Any) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return json.dumps(payload).encode("utf-8")


class FakeSession:
    """Serves canned responses; unknown URLs fail like an unreachable host."""

    def __init__(self, routes: dict | None = None, heads: dict | None = None):
        self.routes = dict(routes or {})
        self.heads = dict(heads or {})
        self.headers: dict = {}
        self.calls: list[tuple[str, str]] = []

    def _respond(self, table: dict, url: str) -> FakeResponse:
        if url not in table:
            raise requests.ConnectionError(f"no route to {url}")
        payload = table[url]
        if isinstance(payload, BaseException):
            raise payload
        if isinstance(payload, FakeResponse):
            return payload
        return FakeResponse(url, content=_encode(payload))

    def get(self, url: str, timeout: float | None = None) -> FakeResponse:
        self.calls.append(("GET", url))
        return self._respond(self.routes, url)

    def head(self, url: str, timeout: float | None = None, allow_redirects: bool = False) -> FakeResponse:
        self.calls.append(("HEAD", url))
        return self._respond(self.heads, url)


class FakeGit:
    """Stands in for subprocess.run(["git", "ls-remote", "--tags", repo])."""

    def __init__(self, tags: dict | None = None):
        self.tags = dict(tags or {})
        self.calls: list[list[str]] = []
        self.envs: list[dict] = []

    def __call__(self, command, **kwargs):
        self.calls.append(list(command))
        self.envs.append(kwargs.get("env", {}))
        repo = command[-1]
        if repo not in self.tags:
            return subprocess.CompletedProcess(command, 128, "", f"fatal: repository '{repo}' not found\n")
        stdout = "".join(f"{'0' * 40}\t{ref}\n" for ref in self.tags[repo])
        return subprocess.CompletedProcess(command, 0, stdout, "")


@pytest.fixture
def make_fetcher():
    """Build a Fetcher backed by fake HTTP routes and fake git tags."""

    def _make(routes: dict | None = None, heads: dict | None = None, tags: dict | None = None) -> Fetcher:
        return Fetcher(timeout=2, session=FakeSession(routes, heads), runner=FakeGit(tags))

    return _make


TCL = "https://distro.ibiblio.org/tinycorelinux"
ROOTFS_MD5 = "4c2d4a1cb8ed4a1cf2d9a3c9b5ab3b4f"
VBOX_ISO_SHA256 = "d4d0d6ff7c0c5fbb0f5d4dbdb2d1c0ba3a2e8b2f1c4b0c4d8ac1f0e9f4c6a2b1"
PARALLELS_DMG = "https://www.parallels.com/directdownload/pd19/image/"
PARALLELS_FINAL = "https://download.parallels.com/desktop/v19/19.1.1-54734/ParallelsDesktop-19.1.1-54734.dmg"


def upstream_routes() -> dict:
    """Responses for a run where every dependency is within its family."""
    return {
        f"{TCL}/latest-x86_64": "14.0\n",
        f"{TCL}/14.x/x86_64/archive/14.0/distribution_files/rootfs64.gz.md5.txt": f"{ROOTFS_MD5}  rootfs64.gz\n",
        "https://www.kernel.org/releases.json": {
            "latest_stable": {"version": "6.5.7"},
            "releases": [
                {"moniker": "mainline", "version": "6.6-rc5"},
                {"moniker": "stable", "version": "6.5.7"},
                {"moniker": "longterm", "version": "6.1.9"},
                {"moniker": "longterm", "version": "6.1.58"},
                {"moniker": "longterm", "version": "5.15.135"},
            ],
        },
        "https://api.github.com/repos/moby/moby/releases?per_page=100": [
            {"tag_name": "v25.0.0", "prerelease": True},
            {"tag_name": "v24.0.7", "prerelease": False},
            {"tag_name": "v24.0.6", "prerelease": False},
            {"tag_name": "v23.0.7", "prerelease": False},
        ],
        "https://download.virtualbox.org/virtualbox/": (
            '<html><body><pre>'
            '<a href="../">../</a>\n'
            '<a href="6.1.48/">6.1.48/</a>\n'
            '<a href="7.0.14/">7.0.14/</a>\n'
            '<a href="7.0.9/">7.0.9/</a>\n'
            '<a href="LATEST.TXT">LATEST.TXT</a>\n'
            '</pre></body></html>'
        ),
        "https://download.virtualbox.org/virtualbox/7.0.14/SHA256SUMS": (
            f"{'a' * 64} *Oracle_VM_VirtualBox_Extension_Pack-7.0.14.vbox-extpack\n"
            f"{VBOX_ISO_SHA256} *VBoxGuestAdditions_7.0.14.iso\n"
            f"{'b' * 64} *VirtualBox-7.0.14-161095-Win.exe\n"
        ),
        "https://download.parallels.com/website_links/desktop/index.json": {
            "9": {"builds": {"en_US": "desktop/9/builds-en_US.json"}},
            "18": {"builds": {"en_US": "desktop/18/builds-en_US.json"}},
            "19": {"builds": {"en_US": "desktop/19/builds-en_US.json"}},
        },
        "https://download.parallels.com/website_links/desktop/19/builds-en_US.json": [
            {"category": {"name": "Parallels Tools"}, "contents": []},
            {
                "category": {"name": "Parallels Desktop for Mac"},
                "contents": [
                    {"name": "Parallels Desktop 19 for Mac", "files": {"DMG": PARALLELS_DMG}},
                ],
            },
        ],
    }


def upstream_heads() -> dict:
    return {
        f"{TCL}/14.x/x86_64/release/CorePure64-14.0.iso": FakeResponse(f"{TCL}/14.x/x86_64/release/CorePure64-14.0.iso"),
        PARALLELS_DMG: FakeResponse(PARALLELS_FINAL, history=[FakeResponse(PARALLELS_DMG, status=302)]),
    }


def upstream_tags() -> dict:
    return {
        "https://github.com/plougher/squashfs-tools": [
            "refs/tags/4.4",
            "refs/tags/squashfs-tools-4.5.1",
            "refs/tags/squashfs-tools-4.6",
            "refs/tags/squashfs-tools-4.6.1",
            "refs/tags/squashfs-tools-4.6.1^{}",
        ],
        "https://github.com/xenserver/xe-guest-utilities": [
            "refs/tags/v7.20.2",
            "refs/tags/v8.3.1",
            "refs/tags/v8.4.0",
        ],
        "https://github.com/bcicen/ctop": [
            "refs/tags/v0.7.6",
            "refs/tags/v0.7.7",
            "refs/tags/v0.7.7^{}",
            "refs/tags/v0.8.0-rc1",
        ],
    }


DOCKERFILE = """\
FROM debian:bookworm-slim

# https://www.kernel.org/
ENV LINUX_VERSION 6.1.50

# http://www.tinycorelinux.net/
ENV TCL_MIRRORS http://old-mirror.example.com/tinycorelinux http://tinycorelinux.net
ENV TCL_MAJOR 14.x
ENV TCL_VERSION 14.0

ENV TCL_ROOTFS="rootfs64.gz" TCL_ROOTFS_MD5="0123456789abcdef0123456789abcdef"

ENV DOCKER_VERSION 24.0.2

# https://github.com/plougher/squashfs-tools/blob/4.5.1/squashfs-tools/Makefile#L1
ENV SQUASHFS_VERSION 4.5.1

ENV VBOX_VERSION 7.0.8
ENV VBOX_SHA256 0000000000000000000000000000000000000000000000000000000000000000

ENV PARALLELS_VERSION 18.3.1-53614
ENV XEN_VERSION 7.20.0
ENV CTOP_VERSION 0.7.6

RUN set -eux; \\
\techo "LINUX_VERSION=$LINUX_VERSION" > /tmp/versions
"""


@pytest.fixture
def upstream(make_fetcher) -> Fetcher:
    return make_fetcher(upstream_routes(), upstream_heads(), upstream_tags())


@pytest.fixture
def dockerfile(tmp_path):
    path = tmp_path / "Dockerfile"
    path.write_text(DOCKERFILE, encoding="utf-8")
    return path
