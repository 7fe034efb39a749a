"""JSON Web Token detector."""

from __future__ import annotations

import base64
import binascii
import json
import math
import re
import time
from collections.abc import Callable
from typing import Any

from clipsift.detectors.base import BaseDetector
from clipsift.models import JwtClaims, JwtDetection

# header.payload.signature, each segment base64url, anchored on token boundaries.
_JWT_RE: re.Pattern[str] = re.compile(
    r"(?<![A-Za-z0-9_\-.])([A-Za-z0-9_\-]+)\.([A-Za-z0-9_\-]+)\.([A-Za-z0-9_\-]+)(?![A-Za-z0-9_\-]|\.[A-Za-z0-9_\-])"
)

_CONFIDENCE = 0.95


def decode_segment(segment: str) -> dict[str, Any] | None:
    """Decode one base64url segment into a JSON object, or None."""
    padded = segment + "=" * (-len(segment) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        obj = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError):
        return None
    return obj if isinstance(obj, dict) else None


def _epoch(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        try:
            seconds = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return seconds if math.isfinite(seconds) else None


def _claims(payload: dict[str, Any]) -> JwtClaims:
    sub, iss = payload.get("sub"), payload.get("iss")
    return JwtClaims(
        sub=sub if isinstance(sub, str) else None,
        iss=iss if isinstance(iss, str) else None,
        iat=_epoch(payload.get("iat")),
        exp=_epoch(payload.get("exp")),
    )


def _canonical(obj: dict[str, Any]) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class JwtDetector(BaseDetector):
    """Decode three-segment tokens whose header and payload are JSON objects.

    Args:
        now: Clock returning seconds since the epoch; used for ``isExpired``.
    """

    family = "jwt"

    def __init__(self, now: Callable[[], float] = time.time) -> None:
        self._now = now

    def detect(self, text: str) -> list[JwtDetection]:
        if text.count(".") < 2:
            return []
        seen: set[str] = set()
        out: list[JwtDetection] = []
        for m in _JWT_RE.finditer(text):
            token = m.group(0)
            if token in seen:
                continue
            header = decode_segment(m.group(1))
            if header is None:
                continue
            payload = decode_segment(m.group(2))
            if payload is None:
                continue
            seen.add(token)
            claims = _claims(payload)
            out.append(
                JwtDetection(
                    token=token,
                    header_json=_canonical(header),
                    payload_json=_canonical(payload),
                    claims=claims,
                    is_expired=None if claims.exp is None else claims.exp < self._now(),
                    confidence=_CONFIDENCE,
                    span=m.span(),
                )
            )
        return out
