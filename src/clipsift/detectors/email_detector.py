"""Email address detector."""

from __future__ import annotations

import re

from clipsift.detectors.base import BaseDetector
from clipsift.models import EmailDetection

# Local part starts and ends alphanumeric; domain is two or more DNS labels.
# The look-arounds anchor the match on token boundaries so that a run such as
# ``xxa@example.comyy`` is read as a single address rather than split.
_EMAIL_RE: re.Pattern[str] = re.compile(
    r"(?<![A-Z0-9._%+\-@])"
    r"([A-Z0-9](?:[A-Z0-9._%+\-]{0,62}[A-Z0-9])?)"
    r"@"
    r"([A-Z0-9](?:[A-Z0-9\-]{0,61}[A-Z0-9])?(?:\.[A-Z0-9](?:[A-Z0-9\-]{0,61}[A-Z0-9])?)+)"
    r"(?![A-Z0-9_%+\-@])",
    re.IGNORECASE,
)

_CONFIDENCE = 0.95


class EmailDetector(BaseDetector):
    """Find email addresses, de-duplicated case-insensitively.

    The first occurrence of an address wins and keeps its original casing.
    """

    family = "emails"

    def detect(self, text: str) -> list[EmailDetection]:
        if "@" not in text:
            return []
        seen: set[str] = set()
        out: list[EmailDetection] = []
        for m in _EMAIL_RE.finditer(text):
            local, domain = m.group(1), m.group(2)
            if ".." in local:
                continue
            email = f"{local}@{domain}"
            if email.lower() in seen:
                continue
            seen.add(email.lower())
            out.append(EmailDetection(email=email, confidence=_CONFIDENCE, span=m.span()))
        return out
