"""Encoding resolver: peel percent-encoding and base64 layers off captured text.

Each round tries every decoder against the current text and keeps the
candidate whose result looks most like readable text. Resolution stops at
the first round where no decoder produces an acceptable candidate, or after
``max_rounds`` rounds.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

logger = logging.getLogger(__name__)

_PERCENT_ESCAPE_RE: re.Pattern[str] = re.compile(r"%[0-9A-Fa-f]{2}")
_BASE64_RE: re.Pattern[str] = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")

DEFAULT_MAX_ROUNDS = 3
DEFAULT_MIN_PRINTABLE_RATIO = 0.85
_MIN_BASE64_LENGTH = 8
_MAX_CONFIDENCE = 0.95


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DecodeStep:
    encoding: str  # "url" | "base64"
    before: str
    after: str


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of a resolve() call. ``decoded == original`` when no round succeeded."""

    original: str
    decoded: str
    steps: tuple[DecodeStep, ...] = ()
    confidence: float = 0.0
    printable_ratio: float = field(default=1.0, compare=False)

    @property
    def encodings(self) -> list[str]:
        return [s.encoding for s in self.steps]

    @property
    def rounds(self) -> int:
        return len(self.steps)

    @property
    def changed(self) -> bool:
        return bool(self.steps)

    def metadata(self) -> dict[str, Any] | None:
        """The ``encoding`` object stored in the metadata document, or None."""
        if not self.steps:
            return None
        encoding = self.steps[0].encoding if len(self.steps) == 1 else "nested"
        return {"encoding": encoding, "steps": self.encodings, "decodedPreview": self.decoded}


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def printable_ratio(text: str) -> float:
    """Share of characters that are printable or whitespace."""
    if not text:
        return 0.0
    good = sum(1 for c in text if c.isprintable() or c.isspace())
    return good / len(text)


def decode_percent(text: str) -> str | None:
    """Percent-decode *text*; None without escapes or when bytes are not UTF-8.

    Text that already contains a literal ``://`` is a readable URL whose
    escapes belong to it, so it is left alone.
    """
    if "://" in text or not _PERCENT_ESCAPE_RE.search(text):
        return None
    try:
        return unquote(text, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        return None


def decode_base64(text: str) -> str | None:
    """Strict standard-alphabet base64 to UTF-8; line breaks are ignored."""
    if not text.isascii():
        return None
    compact = text.replace("\r", "").replace("\n", "")
    if len(compact) < _MIN_BASE64_LENGTH or len(compact) % 4:
        return None
    if not _BASE64_RE.match(compact):
        return None
    try:
        decoded = base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    if not decoded.strip():
        return None
    return decoded


# Order matters only for ties: the earlier decoder wins.
DECODERS: tuple[tuple[str, Callable[[str], str | None]], ...] = (
    ("url", decode_percent),
    ("base64", decode_base64),
)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class EncodingResolver:
    """Reverse up to *max_rounds* layers of percent-encoding and base64.

    Args:
        max_rounds: Maximum number of layers to peel.
        min_printable_ratio: A decoded candidate whose printable share falls
            below this is treated as binary noise and rejected.
    """

    def __init__(
        self,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
        min_printable_ratio: float = DEFAULT_MIN_PRINTABLE_RATIO,
    ) -> None:
        if max_rounds < 0:
            raise ValueError("max_rounds must be >= 0")
        if not 0.0 <= min_printable_ratio <= 1.0:
            raise ValueError("min_printable_ratio must be in [0.0, 1.0]")
        self.max_rounds = max_rounds
        self.min_printable_ratio = min_printable_ratio

    def resolve(self, text: str) -> DecodeResult:
        current = text.strip()
        steps: list[DecodeStep] = []
        ratio = 1.0

        for _ in range(self.max_rounds):
            best: tuple[str, str, float] | None = None
            for name, decoder in DECODERS:
                candidate = decoder(current)
                if candidate is None or candidate == current:
                    continue
                cand_ratio = printable_ratio(candidate)
                if cand_ratio < self.min_printable_ratio:
                    continue
                if best is None or cand_ratio > best[2]:
                    best = (name, candidate, cand_ratio)
            if best is None:
                break
            name, candidate, ratio = best
            steps.append(DecodeStep(encoding=name, before=current, after=candidate))
            current = candidate

        if not steps:
            return DecodeResult(original=text, decoded=text)

        confidence = min(_MAX_CONFIDENCE, (0.8 + 0.05 * len(steps)) * ratio)
        logger.debug("decoded %d layer(s): %s", len(steps), [s.encoding for s in steps])
        return DecodeResult(
            original=text,
            decoded=current,
            steps=tuple(steps),
            confidence=confidence,
            printable_ratio=ratio,
        )
