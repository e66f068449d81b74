from __future__ import annotations

import pytest

from pinupdates.utils.checksums import first_token_digest, parse_manifest, resolve_checksum, select_checksum
from pinupdates.utils.errors import AmbiguousMatch, NetworkFailure, ParseFailure

DIGEST = "abcd1234" * 8
MANIFEST = f"""\
{'1' * 64} *Oracle_VM_VirtualBox_Extension_Pack-7.0.14.vbox-extpack
{DIGEST} *VBoxGuestAdditions_7.0.14.iso
{'2' * 64}  VirtualBox-7.0.14.tar.bz2

not a checksum line
"""


def test_parse_manifest_handles_binary_and_text_flags() -> None:
    records = parse_manifest(MANIFEST)

    assert [r.filename for r in records] == [
        "Oracle_VM_VirtualBox_Extension_Pack-7.0.14.vbox-extpack",
        "VBoxGuestAdditions_7.0.14.iso",
        "VirtualBox-7.0.14.tar.bz2",
    ]
    assert all(r.algorithm == "sha256" for r in records)


def test_select_checksum_matches_guest_additions_iso() -> None:
    record = select_checksum(parse_manifest(MANIFEST), "VBoxGuestAdditions_*.iso", "vbox")

    assert record.digest == DIGEST
    assert record.filename == "VBoxGuestAdditions_7.0.14.iso"


def test_select_checksum_without_match_is_fatal() -> None:
    with pytest.raises(AmbiguousMatch):
        select_checksum(parse_manifest(MANIFEST), "VBoxGuestAdditions_*.zip", "vbox")


def test_select_checksum_warns_and_takes_first_of_several(caplog) -> None:
    manifest = f"{'c' * 64} *VBoxGuestAdditions_7.0.14.iso\n{'d' * 64} *VBoxGuestAdditions_7.0.14a.iso\n"

    record = select_checksum(parse_manifest(manifest), "VBoxGuestAdditions_*.iso", "vbox")

    assert record.digest == "c" * 64
    assert "2 checksum entries match" in caplog.text


def test_resolve_checksum_uses_fallback_location(make_fetcher) -> None:
    primary = "https://download.virtualbox.org/virtualbox/7.0.14/SHA256SUMS"
    secondary = "https://www.virtualbox.org/download/hashes/7.0.14/SHA256SUMS"
    fetcher = make_fetcher({secondary: MANIFEST})

    record = resolve_checksum(fetcher, [primary, secondary], "VBoxGuestAdditions_*.iso", "vbox")

    assert record.digest == DIGEST


def test_resolve_checksum_fails_when_no_manifest_is_reachable(make_fetcher) -> None:
    with pytest.raises(NetworkFailure):
        resolve_checksum(make_fetcher(), ["https://a.example/SUMS", "https://b.example/SUMS"], "*.iso", "vbox")


def test_first_token_digest() -> None:
    assert first_token_digest("4C2D4A1CB8ED4A1CF2D9A3C9B5AB3B4F  rootfs64.gz\n", "tcl") == "4c2d4a1cb8ed4a1cf2d9a3c9b5ab3b4f"
    with pytest.raises(ParseFailure):
        first_token_digest("<html>not found</html>", "tcl")
