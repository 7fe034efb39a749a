"""Tests for HashDetector."""

from __future__ import annotations

import pytest

from clipsift.detectors.hashes import HashDetector

_MD5 = "d41d8cd98f00b204e9800998ecf8427e"
_SHA1 = "da39a3ee5e6b4b0d3255bfef95601890afd80709"
_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
_SHA256_B64 = "47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU="


@pytest.mark.parametrize(
    ("digest", "kind", "bits"),
    [
        (_MD5, "md5", 128),
        (_SHA1, "sha1", 160),
        ("a" * 56, "sha224", 224),
        (_SHA256, "sha256", 256),
        ("b" * 96, "sha384", 384),
        ("c" * 128, "sha512", 512),
    ],
)
def test_hex_lengths_map_to_kinds(digest: str, kind: str, bits: int) -> None:
    [d] = HashDetector().detect(f"digest: {digest}")
    assert (d.kind, d.bits, d.confidence) == (kind, bits, 0.85)


def test_hex_is_lowercased_and_deduplicated() -> None:
    found = HashDetector().detect(f"{_MD5.upper()} {_MD5}")
    assert [d.hash for d in found] == [_MD5]


def test_other_hex_lengths_rejected() -> None:
    assert HashDetector().detect("a" * 33) == []
    assert HashDetector().detect("f" * 20) == []


def test_base64_sha256() -> None:
    [d] = HashDetector().detect(f"integrity {_SHA256_B64}")
    assert d.kind == "sha256"
    assert d.confidence == 0.75
    assert d.hash == _SHA256_B64


def test_base64_candidate_must_look_random() -> None:
    assert HashDetector().detect("x" * 43) == []


def test_results_in_text_order() -> None:
    found = HashDetector().detect(f"{_SHA256_B64} then {_MD5}")
    assert [d.kind for d in found] == ["sha256", "md5"]
