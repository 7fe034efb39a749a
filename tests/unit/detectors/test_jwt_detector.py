"""Tests for JwtDetector."""

from __future__ import annotations

import base64
import json

from clipsift.detectors.jwt import JwtDetector, decode_segment

_NOW = 1_700_000_000.0
_SIGNATURE = "SflKxwRJSMeKKF2QT4fwpMeJf36POk6yJV_adQssw5c"


def _segment(obj: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode("utf-8")).rstrip(b"=").decode("ascii")


def _token(payload: dict, header: dict | None = None) -> str:
    return f"{_segment(header or {'alg': 'HS256', 'typ': 'JWT'})}.{_segment(payload)}.{_SIGNATURE}"


def _detector() -> JwtDetector:
    return JwtDetector(now=lambda: _NOW)


def test_decodes_claims() -> None:
    token = _token({"sub": "user-1", "iss": "auth.example.com", "iat": 1_600_000_000, "exp": 1_900_000_000})
    [d] = _detector().detect(token)
    assert d.token == token
    assert d.claims.sub == "user-1"
    assert d.claims.iss == "auth.example.com"
    assert d.claims.iat == 1_600_000_000.0
    assert d.claims.exp == 1_900_000_000.0
    assert d.is_expired is False
    assert d.confidence == 0.95
    assert json.loads(d.header_json) == {"alg": "HS256", "typ": "JWT"}


def test_expired_against_injected_clock() -> None:
    [d] = _detector().detect(_token({"exp": _NOW - 1}))
    assert d.is_expired is True


def test_no_exp_means_unknown_expiry() -> None:
    [d] = _detector().detect(_token({"sub": "x"}))
    assert d.is_expired is None


def test_numeric_string_claims_accepted() -> None:
    [d] = _detector().detect(_token({"exp": "1900000000", "iat": True}))
    assert d.claims.exp == 1_900_000_000.0
    assert d.claims.iat is None


def test_embedded_in_header_line() -> None:
    token = _token({"sub": "abc"})
    text = f"Authorization: Bearer {token}"
    [d] = _detector().detect(text)
    assert text[d.span[0]:d.span[1]] == token


def test_non_json_segments_rejected() -> None:
    assert _detector().detect("not.a.jwt") == []
    assert _detector().detect("www.example.com") == []


def test_four_segments_rejected() -> None:
    assert _detector().detect(_token({"sub": "x"}) + ".extra") == []


def test_decode_segment_requires_object() -> None:
    assert decode_segment(_segment({"a": 1})) == {"a": 1}
    assert decode_segment(base64.urlsafe_b64encode(b"[1, 2]").decode("ascii")) is None
