"""Base detector interface for all clipsift content families."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, ClassVar

from clipsift.models import Span


class BaseDetector(ABC):
    """Abstract base for family detectors.

    Subclasses implement ``detect()`` as a pure function of its input: no
    instance state is mutated, so one detector may be shared across threads.
    Offsets in reported spans always refer to the text that was passed in.
    """

    family: ClassVar[str] = ""

    @abstractmethod
    def detect(self, text: str) -> Any:
        """Scan *text* and return this family's detections.

        Args:
            text: Analysis subject, possibly with foreign spans blanked out.

        Returns:
            A list of detections in first-seen order (an empty list when
            nothing qualifies). Single-result families document their own
            return type.
        """

    @staticmethod
    def _iter_matches(pattern: re.Pattern[str], text: str, group: int = 0) -> Iterable[tuple[str, Span]]:
        """Yield ``(value, span)`` for every match of *pattern* in *text*."""
        for m in pattern.finditer(text):
            value = m.group(group)
            if value:
                yield value, m.span(group)


def blank_spans(text: str, spans: Iterable[Span]) -> str:
    """Return *text* with every character inside *spans* replaced by a space.

    Length and offsets are preserved, so spans found in the result are valid
    against the original text. Overlapping or out-of-range spans are clamped.
    """
    chars: list[str] | None = None
    size = len(text)
    for start, end in spans:
        start, end = max(0, start), min(size, end)
        if start >= end:
            continue
        if chars is None:
            chars = list(text)
        chars[start:end] = " " * (end - start)
    return text if chars is None else "".join(chars)
