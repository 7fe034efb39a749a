"""UUID detector."""

from __future__ import annotations

import re

from clipsift.detectors.base import BaseDetector
from clipsift.models import UuidDetection

_UUID_RE: re.Pattern[str] = re.compile(
    r"(?<![0-9a-f])([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})(?![0-9a-f])",
    re.IGNORECASE,
)


def uuid_variant(value: str) -> str:
    """Variant from the high bits of the clock-seq nibble (char 19)."""
    nibble = int(value[19], 16)
    if nibble <= 0x7:
        return "ncs"
    if nibble <= 0xB:
        return "rfc4122"
    if nibble <= 0xD:
        return "microsoft"
    return "future"


class UuidDetector(BaseDetector):
    family = "uuids"

    def detect(self, text: str) -> list[UuidDetection]:
        seen: set[str] = set()
        out: list[UuidDetection] = []
        for raw, span in self._iter_matches(_UUID_RE, text, group=1):
            value = raw.lower()
            if value in seen:
                continue
            seen.add(value)
            out.append(
                UuidDetection(
                    uuid=value,
                    version=int(value[14], 16),
                    variant=uuid_variant(value),
                    confidence=0.9,
                    span=span,
                )
            )
        return out
