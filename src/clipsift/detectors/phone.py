"""Phone number detector."""

from __future__ import annotations

import re

from clipsift.detectors.base import BaseDetector
from clipsift.models import PhoneNumberDetection

# International numbers carry a +CC prefix; national numbers need either a
# parenthesised area code or separators between the digit groups, so bare
# digit runs (timestamps, ids) are never read as phone numbers.
_PHONE_RE: re.Pattern[str] = re.compile(
    r"(?<![\w+\-./])"
    r"("
    r"\+\d{1,3}(?:[ .\-]?\(\d{1,4}\))?(?:[ .\-]?\d{1,5}){2,5}"
    r"|\(\d{2,4}\)[ .\-]?\d{3,4}[ .\-]\d{4}"
    r"|\d{2,4}[ .\-]\d{3,4}[ .\-]\d{4}"
    r")"
    r"(?![\w\-]|\.\d)"
)

_MIN_DIGITS = 7
_MAX_DIGITS = 15


class PhoneNumberDetector(BaseDetector):
    family = "phoneNumbers"

    def detect(self, text: str) -> list[PhoneNumberDetection]:
        seen: set[str] = set()
        out: list[PhoneNumberDetection] = []
        for number, span in self._iter_matches(_PHONE_RE, text, group=1):
            digits = re.sub(r"\D", "", number)
            if not _MIN_DIGITS <= len(digits) <= _MAX_DIGITS:
                continue
            key = ("+" if number.startswith("+") else "") + digits
            if key in seen:
                continue
            seen.add(key)
            confidence = 0.9 if number.startswith("+") else 0.85
            out.append(PhoneNumberDetection(number=number, confidence=confidence, span=span))
        return out
