"""Environment-variable assignment and block detector."""

from __future__ import annotations

import re

from clipsift.detectors.base import BaseDetector
from clipsift.models import EnvOutput, EnvVarDetection

_ASSIGNMENT_RE: re.Pattern[str] = re.compile(r"^(export\s+)?([A-Z_][A-Z0-9_]*)=(.*)$")

_DOUBLE_QUOTE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", '"': '"'}

_CLEAN_CONFIDENCE = 0.95
_MIXED_CONFIDENCE = 0.75


def unquote_value(raw: str) -> str:
    """Strip surrounding quotes; double-quoted values also get escapes resolved."""
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return re.sub(
            r"\\(.)",
            lambda m: _DOUBLE_QUOTE_ESCAPES.get(m.group(1), m.group(0)),
            value[1:-1],
        )
    return value


class EnvVarDetector(BaseDetector):
    """Parse ``[export ]KEY=VALUE`` lines.

    Blank lines and ``#`` comments are skipped. Two or more assignments make
    a block. Confidence drops when some remaining lines are not assignments.
    Returns ``None`` when no line is an assignment.
    """

    family = "env"

    def detect(self, text: str) -> EnvOutput | None:
        if "=" not in text:
            return None

        parsed: list[tuple[str, str, bool, tuple[int, int]]] = []
        counted = 0
        offset = 0
        for raw_line in text.splitlines(keepends=True):
            start = offset
            offset += len(raw_line)
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            counted += 1
            m = _ASSIGNMENT_RE.match(line)
            if m is None:
                continue
            lead = start + (len(raw_line) - len(raw_line.lstrip()))
            parsed.append((m.group(2), unquote_value(m.group(3)), m.group(1) is not None, (lead, lead + len(line))))

        if not parsed:
            return None

        confidence = _CLEAN_CONFIDENCE if len(parsed) == counted else _MIXED_CONFIDENCE
        detections = tuple(
            EnvVarDetection(key=key, value=value, is_exported=exported, confidence=confidence, span=span)
            for key, value, exported, span in parsed
        )
        return EnvOutput(detections=detections, is_block=len(detections) >= 2)
