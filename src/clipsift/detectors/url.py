"""URL detector with domain categorisation."""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

from clipsift.detectors.base import BaseDetector
from clipsift.models import UrlDetection

# Only http, https and ftp are recognised; mailto:, file: and friends are not.
_URL_RE: re.Pattern[str] = re.compile(
    r"(?<![A-Za-z0-9+.\-])(?:https?|ftp)://[^\s<>\"'`]+",
    re.IGNORECASE,
)

_TRAILING_PUNCT = ".,;:!?'\""
_CLOSERS = {")": "(", "]": "[", "}": "{"}

_CONFIDENCE = 0.95


def categorize(domain: str) -> str:
    """Map a lower-cased host name onto a coarse site category."""

    def _is(*hosts: str) -> bool:
        return any(domain == h or domain.endswith("." + h) for h in hosts)

    if _is("github.com"):
        return "github"
    if _is("stackoverflow.com"):
        return "stackoverflow"
    if domain == "docs.google.com":
        return "google-docs"
    if _is("google.com"):
        return "google"
    if domain == "developer.apple.com":
        return "apple-developer"
    if _is("apple.com"):
        return "apple"
    if _is("youtube.com", "youtu.be"):
        return "youtube"
    if _is("twitter.com", "x.com"):
        return "x"
    if domain.endswith(".edu"):
        return "education"
    if domain.endswith(".gov"):
        return "government"
    return "other"


def _trim(candidate: str) -> str:
    """Drop trailing sentence punctuation and unbalanced closing brackets."""
    while candidate:
        last = candidate[-1]
        if last in _TRAILING_PUNCT:
            candidate = candidate[:-1]
        elif last in _CLOSERS and candidate.count(last) > candidate.count(_CLOSERS[last]):
            candidate = candidate[:-1]
        else:
            break
    return candidate


class UrlDetector(BaseDetector):
    """Find web URLs in the text and in its percent-decoded form."""

    family = "urls"

    def detect(self, text: str) -> list[UrlDetection]:
        found = self._scan(text, with_spans=True)
        decoded = unquote(text) if "%" in text else text
        if decoded != text:
            found.extend(self._scan(decoded, with_spans=False))

        seen: set[str] = set()
        out: list[UrlDetection] = []
        for d in found:
            key = d.url.lower()
            if key in seen:
                continue
            seen.add(key)
            out.append(d)
        return out

    def _scan(self, text: str, *, with_spans: bool) -> list[UrlDetection]:
        if "://" not in text:
            return []
        results: list[UrlDetection] = []
        for m in _URL_RE.finditer(text):
            url = _trim(m.group(0))
            try:
                host = urlsplit(url).hostname
            except ValueError:
                continue
            if not host:
                continue
            domain = host.lower()
            span = (m.start(), m.start() + len(url)) if with_spans else (0, 0)
            results.append(
                UrlDetection(
                    url=url,
                    domain=domain,
                    category=categorize(domain),
                    confidence=_CONFIDENCE,
                    span=span,
                )
            )
        return results
