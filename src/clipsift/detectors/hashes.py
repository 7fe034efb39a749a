"""Digest detector: hex and base64 encoded hashes."""

from __future__ import annotations

import re

from clipsift.detectors.base import BaseDetector
from clipsift.models import HashDetection

_HEX_RE: re.Pattern[str] = re.compile(
    r"(?<![0-9a-f])([0-9a-f]{128}|[0-9a-f]{96}|[0-9a-f]{64}|[0-9a-f]{56}|[0-9a-f]{40}|[0-9a-f]{32})(?![0-9a-f])",
    re.IGNORECASE,
)
_B64_RE: re.Pattern[str] = re.compile(
    r"(?<![A-Za-z0-9+/=])([A-Za-z0-9+/]{86}(?:==)?|[A-Za-z0-9+/]{43}=?)(?![A-Za-z0-9+/=])"
)

# hex length -> (kind, bits)
HEX_KINDS: dict[int, tuple[str, int]] = {
    32: ("md5", 128),
    40: ("sha1", 160),
    56: ("sha224", 224),
    64: ("sha256", 256),
    96: ("sha384", 384),
    128: ("sha512", 512),
}
B64_KINDS: dict[int, tuple[str, int]] = {
    43: ("sha256", 256),
    44: ("sha256", 256),
    86: ("sha512", 512),
    88: ("sha512", 512),
}


def _looks_random(token: str) -> bool:
    # Encoded digests mix letter cases and digits; long identifier-like words do not.
    return (
        any(c.isdigit() for c in token)
        and any(c.islower() for c in token)
        and any(c.isupper() for c in token)
    )


class HashDetector(BaseDetector):
    """Infer the digest algorithm from the encoded length of hex or base64 runs."""

    family = "hashes"

    def detect(self, text: str) -> list[HashDetection]:
        found: list[HashDetection] = []
        for raw, span in self._iter_matches(_HEX_RE, text, group=1):
            kind, bits = HEX_KINDS[len(raw)]
            found.append(HashDetection(hash=raw.lower(), kind=kind, bits=bits, confidence=0.85, span=span))

        for raw, span in self._iter_matches(_B64_RE, text, group=1):
            if not _looks_random(raw):
                continue
            kind, bits = B64_KINDS[len(raw)]
            found.append(HashDetection(hash=raw, kind=kind, bits=bits, confidence=0.75, span=span))

        found.sort(key=lambda d: d.span[0])
        seen: set[str] = set()
        out: list[HashDetection] = []
        for d in found:
            key = d.hash.lower()
            if key in seen:
                continue
            seen.add(key)
            out.append(d)
        return out
