from __future__ import annotations

import subprocess

import pytest
import requests

from conftest import FakeGit, FakeResponse, FakeSession
from pinupdates.utils.errors import NetworkFailure, ParseFailure
from pinupdates.utils.fetcher import Fetcher, mirror_urls


def test_fetch_returns_body_and_sets_user_agent() -> None:
    session = FakeSession({"https://example.com/latest": "14.0\n"})
    fetcher = Fetcher(timeout=2, user_agent="pinupdates-test", session=session)

    assert fetcher.fetch_text("https://example.com/latest") == "14.0\n"
    assert session.headers["User-Agent"] == "pinupdates-test"


@pytest.mark.parametrize(
    "failure",
    [
        requests.Timeout("read timed out"),
        requests.ConnectionError("connection refused"),
        FakeResponse("https://example.com/gone", status=404),
    ],
)
def test_fetch_failures_raise_network_failure(failure) -> None:
    fetcher = Fetcher(session=FakeSession({"https://example.com/gone": failure}))

    with pytest.raises(NetworkFailure):
        fetcher.fetch("https://example.com/gone")


def test_fetch_caches_successes_only() -> None:
    session = FakeSession({"https://example.com/feed.json": {"releases": []}})
    fetcher = Fetcher(session=session)

    fetcher.fetch_json("https://example.com/feed.json")
    fetcher.fetch_json("https://example.com/feed.json")
    with pytest.raises(NetworkFailure):
        fetcher.fetch("https://example.com/missing")
    with pytest.raises(NetworkFailure):
        fetcher.fetch("https://example.com/missing")

    assert session.calls.count(("GET", "https://example.com/feed.json")) == 1
    assert session.calls.count(("GET", "https://example.com/missing")) == 2


def test_fetch_json_rejects_invalid_documents() -> None:
    fetcher = Fetcher(session=FakeSession({"https://example.com/feed.json": "<html>"}))

    with pytest.raises(ParseFailure):
        fetcher.fetch_json("https://example.com/feed.json")


def test_mirror_urls_tries_every_mirror_per_path() -> None:
    urls = mirror_urls(["https://a.example/tcl/", "https://b.example/tcl"], ["14.x/one.txt", "/14.x/two.txt"])

    assert urls == [
        "https://a.example/tcl/14.x/one.txt",
        "https://b.example/tcl/14.x/one.txt",
        "https://a.example/tcl/14.x/two.txt",
        "https://b.example/tcl/14.x/two.txt",
    ]


def test_fetch_any_falls_back_to_second_mirror() -> None:
    session = FakeSession(
        {
            "https://a.example/tcl/file": requests.ConnectionError("mirror down"),
            "https://b.example/tcl/file": "payload",
        }
    )
    fetcher = Fetcher(session=session)

    assert fetcher.fetch_any(["https://a.example/tcl/file", "https://b.example/tcl/file"]) == b"payload"
    assert [url for _, url in session.calls] == ["https://a.example/tcl/file", "https://b.example/tcl/file"]


def test_fetch_any_fails_when_every_candidate_fails() -> None:
    fetcher = Fetcher(session=FakeSession())

    with pytest.raises(NetworkFailure) as excinfo:
        fetcher.fetch_any(["https://a.example/x", "https://b.example/x"])

    assert "https://a.example/x" in str(excinfo.value)
    assert "https://b.example/x" in str(excinfo.value)


def test_probe_reports_existence() -> None:
    session = FakeSession(
        heads={
            "https://example.com/present.iso": FakeResponse("https://example.com/present.iso"),
            "https://example.com/removed.iso": FakeResponse("https://example.com/removed.iso", status=404),
        }
    )
    fetcher = Fetcher(session=session)

    assert fetcher.probe("https://example.com/present.iso") is True
    assert fetcher.probe("https://example.com/removed.iso") is False
    assert fetcher.probe("https://unreachable.example.com/") is False


def test_redirect_targets_lists_every_hop() -> None:
    start = "https://example.com/download"
    hop = "https://cdn.example.com/v2/2.0.1/"
    final = "https://cdn.example.com/v2/2.0.1/file.dmg"
    session = FakeSession(
        heads={start: FakeResponse(final, history=[FakeResponse(start, status=302), FakeResponse(hop, status=301)])}
    )

    assert Fetcher(session=session).redirect_targets(start) == [hop, final]


def test_redirect_targets_without_redirect_returns_final_url() -> None:
    session = FakeSession(heads={"https://example.com/file": FakeResponse("https://example.com/file")})

    assert Fetcher(session=session).redirect_targets("https://example.com/file") == ["https://example.com/file"]


def test_list_tags_bounds_slow_git_transfers() -> None:
    git = FakeGit({"https://github.com/bcicen/ctop": ["refs/tags/v0.7.7", "refs/tags/v0.7.7^{}"]})
    fetcher = Fetcher(session=FakeSession(), runner=git, git_low_speed_limit=100, git_low_speed_time=2)

    assert fetcher.list_tags("https://github.com/bcicen/ctop") == ["refs/tags/v0.7.7", "refs/tags/v0.7.7^{}"]
    assert git.calls == [["git", "ls-remote", "--tags", "https://github.com/bcicen/ctop"]]
    assert git.envs[0]["GIT_HTTP_LOW_SPEED_LIMIT"] == "100"
    assert git.envs[0]["GIT_HTTP_LOW_SPEED_TIME"] == "2"


def test_list_tags_failures_raise_network_failure() -> None:
    fetcher = Fetcher(session=FakeSession(), runner=FakeGit())
    with pytest.raises(NetworkFailure):
        fetcher.list_tags("https://github.com/example/missing")

    def timing_out(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs.get("timeout"))

    fetcher = Fetcher(session=FakeSession(), runner=timing_out)
    with pytest.raises(NetworkFailure):
        fetcher.list_tags("https://github.com/example/slow")
