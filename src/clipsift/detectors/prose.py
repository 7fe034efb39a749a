"""Natural-language prose heuristic."""

from __future__ import annotations

import math
import re

from clipsift.detectors.base import BaseDetector
from clipsift.models import ProseDetection

_WORD_RE: re.Pattern[str] = re.compile(r"\b[^\W_]+(?:'[^\W_]+)?\b")
_WHITESPACE_RE: re.Pattern[str] = re.compile(r"\s")

_CODE_TOKENS: tuple[str, ...] = (
    "```",
    "{", "}", ";",
    "#include",
    "=>", "->", "::", ":=",
    "<html", "</",
)
# Keywords count only where code puts them; "from" and "class" are ordinary English.
_CODE_LINE_RE: re.Pattern[str] = re.compile(
    r"^\s*(?:import|from\s+[\w.]+\s+import|def|func|struct|class|let|var|const|fn)\s+\w", re.MULTILINE
)
_SQL_RE: re.Pattern[str] = re.compile(r"\bSELECT\s.+?\sFROM\s|\bselect\s+\*\s+from\s", re.DOTALL)

MIN_CHARS = 40
MIN_WORDS = 12
UNPUNCTUATED_MIN_WORDS = 30
WORDS_PER_MINUTE = 200
ACCEPT_THRESHOLD = 0.6


def word_count(text: str) -> int:
    return len(_WORD_RE.findall(text))


def reading_time_seconds(words: int) -> int:
    return math.ceil(words / WORDS_PER_MINUTE * 60)


def _has_code_signals(text: str) -> bool:
    lower = text.lower()
    if any(token in lower for token in _CODE_TOKENS):
        return True
    if _CODE_LINE_RE.search(text) or _SQL_RE.search(text):
        return True
    return sum(text.count(c) for c in "{};") >= 2


def _looks_structured(text: str) -> bool:
    """Mostly ``KEY=value`` or ``key: value`` lines."""
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return False
    structured = 0
    for line in lines:
        if line.startswith("#"):
            continue
        if line.find("=") > 0:
            structured += 1
            continue
        colon = line.find(":")
        if colon > 0 and not _WHITESPACE_RE.search(line[:colon]):
            structured += 1
    return structured >= 2 and structured / len(lines) >= 0.5


def _symbol_ratio(text: str) -> float:
    others = sum(1 for c in text if not c.isalpha() and not c.isspace())
    return others / len(text)


class ProseDetector(BaseDetector):
    """Accept sentence-like text that carries no code or config structure.

    Returns a single ``ProseDetection`` or ``None``.
    """

    family = "prose"

    def detect(self, text: str) -> ProseDetection | None:
        trimmed = text.strip()
        if len(trimmed) < MIN_CHARS:
            return None
        if _has_code_signals(trimmed) or _looks_structured(trimmed):
            return None

        words = word_count(trimmed)
        if words < MIN_WORDS:
            return None
        sentences = sum(trimmed.count(c) for c in ".!?")
        if sentences < 1 and words < UNPUNCTUATED_MIN_WORDS:
            return None

        confidence = 0.55
        confidence += min(0.25, words / 80)
        confidence += min(0.15, sentences * 0.07)
        confidence -= min(0.3, _symbol_ratio(trimmed) * 0.6)
        confidence = min(0.95, max(0.0, confidence))
        if confidence < ACCEPT_THRESHOLD:
            return None

        return ProseDetection(
            word_count=words,
            estimated_reading_time_seconds=reading_time_seconds(words),
            confidence=confidence,
        )
