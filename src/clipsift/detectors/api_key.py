"""Provider-tagged API key detector."""

from __future__ import annotations

import re
import string
from dataclasses import dataclass

from clipsift.detectors.base import BaseDetector
from clipsift.models import ApiKeyDetection


@dataclass(frozen=True)
class KeyPattern:
    """One provider pattern.

    Attributes:
        provider: Human-readable provider label stored in metadata.
        pattern: Compiled regex; when it has a capture group, group 1 is the key.
        confidence: Confidence for a live-looking key.
        distinctive_prefix: False for shapes with no provider prefix; those
            matches must sit on a delimiter boundary.
    """

    provider: str
    pattern: re.Pattern[str]
    confidence: float = 0.95
    distinctive_prefix: bool = True


def _p(provider: str, regex: str, confidence: float = 0.95, distinctive_prefix: bool = True) -> KeyPattern:
    return KeyPattern(provider, re.compile(regex), confidence, distinctive_prefix)


PATTERNS: tuple[KeyPattern, ...] = (
    _p("OpenAI", r"sk-[a-zA-Z0-9]{20}T3BlbkFJ[a-zA-Z0-9]{20}"),
    _p("OpenAI", r"sk-proj-[a-zA-Z0-9\-_]{80,180}"),
    _p("OpenAI", r"sk-[a-zA-Z0-9]{48}", 0.85),
    _p("Anthropic", r"sk-ant-api03-[a-zA-Z0-9\-_]{93}"),
    _p("Anthropic", r"sk-ant-[a-zA-Z0-9\-_]{40,100}", 0.90),
    _p("Google Cloud", r"AIza[0-9A-Za-z\-_]{35}"),
    _p("AWS Access Key", r"AKIA[0-9A-Z]{16}"),
    _p(
        "AWS Secret Key",
        r"(?<![A-Za-z0-9/+])[A-Za-z0-9/+=]{40}(?![A-Za-z0-9/+=])",
        0.70,
        distinctive_prefix=False,
    ),
    _p("GitHub PAT", r"ghp_[a-zA-Z0-9]{36}"),
    _p("GitHub PAT (fine-grained)", r"github_pat_[a-zA-Z0-9]{22}_[a-zA-Z0-9]{59}"),
    _p("GitHub OAuth", r"gho_[a-zA-Z0-9]{36}"),
    _p("GitHub App", r"ghu_[a-zA-Z0-9]{36}"),
    _p("GitHub Refresh", r"ghr_[a-zA-Z0-9]{36}"),
    _p("Stripe Secret", r"sk_live_[a-zA-Z0-9]{24,}"),
    _p("Stripe Test", r"sk_test_[a-zA-Z0-9]{24,}"),
    _p("Stripe Publishable", r"pk_live_[a-zA-Z0-9]{24,}"),
    _p("Stripe Restricted", r"rk_live_[a-zA-Z0-9]{24,}"),
    _p("Slack Bot", r"xoxb-[0-9]{10,13}-[0-9]{10,13}-[a-zA-Z0-9]{24}"),
    _p("Slack User", r"xoxp-[0-9]{10,13}-[0-9]{10,13}-[a-zA-Z0-9]{24}"),
    _p("Slack App", r"xapp-[0-9]-[A-Z0-9]+-[0-9]+-[a-zA-Z0-9]+"),
    _p("Slack Webhook", r"https://hooks\.slack\.com/services/T[A-Z0-9]+/B[A-Z0-9]+/[a-zA-Z0-9]+"),
    _p("Twilio API Key", r"SK[a-f0-9]{32}"),
    _p("Twilio Account SID", r"AC[a-f0-9]{32}"),
    _p("SendGrid", r"SG\.[a-zA-Z0-9\-_]{22}\.[a-zA-Z0-9\-_]{43}"),
    _p("Mailgun", r"key-[a-f0-9]{32}"),
    _p("npm Token", r"npm_[a-zA-Z0-9]{36}"),
    _p("PyPI Token", r"pypi-[a-zA-Z0-9\-_]{100,}"),
    _p("DigitalOcean", r"dop_v1_[a-f0-9]{64}"),
    _p("DigitalOcean", r"doo_v1_[a-f0-9]{64}"),
    _p("Discord Bot", r"[MN][A-Za-z\d]{23,}\.[\w-]{6}\.[\w-]{27}"),
    _p("Discord Webhook", r"https://discord(?:app)?\.com/api/webhooks/[0-9]+/[A-Za-z0-9_-]+"),
    _p("Firebase", r"AAAA[A-Za-z0-9_-]{7}:[A-Za-z0-9_-]{140}"),
    _p("Linear API Key", r"lin_api_[a-zA-Z0-9]{40}"),
    _p("Supabase", r"sbp_[a-f0-9]{40}"),
    _p("Replicate", r"r8_[a-zA-Z0-9]{37}"),
    _p("HuggingFace", r"hf_[a-zA-Z0-9]{34}"),
    _p("Mapbox", r"pk\.[a-zA-Z0-9]{60,}"),
    _p("Mapbox Secret", r"sk\.[a-zA-Z0-9]{60,}"),
    _p("PlanetScale", r"pscale_tkn_[a-zA-Z0-9_]+"),
    _p("Generic API Key", r"(?i)api[_-]?key['\":\s=]+['\"]?([a-zA-Z0-9\-_]{20,})['\"]?", 0.65),
    _p("Generic Secret", r"(?i)secret[_-]?key['\":\s=]+['\"]?([a-zA-Z0-9\-_]{20,})['\"]?", 0.65),
    _p("Generic Token", r"(?i)access[_-]?token['\":\s=]+['\"]?([a-zA-Z0-9\-_]{20,})['\"]?", 0.65),
    _p("Bearer Token", r"Bearer\s+([a-zA-Z0-9\-_\.]{20,})", 0.80),
)

BOUNDARY_CHARS: frozenset[str] = frozenset(" \t\n\r\"'=:,;()[]{}<>|`")

_TEST_INDICATORS: tuple[str, ...] = (
    "test", "example", "sample", "demo", "fake", "dummy",
    "placeholder", "xxx", "your_", "your-", "insert", "replace",
    "todo", "fixme", "changeme", "secret_here", "key_here",
    "0000000", "1111111", "aaaaaaa", "abcdef",
)

MIN_INPUT_LENGTH = 16
_STRONG_CONFIDENCE = 0.85
_WEAK_FLOOR = 0.60


def has_boundary(text: str, start: int, end: int) -> bool:
    """True when the span is delimited by string ends or boundary characters."""
    if start > 0 and text[start - 1] not in BOUNDARY_CHARS:
        return False
    if end < len(text) and text[end] not in BOUNDARY_CHARS:
        return False
    return True


def is_test_key(key: str) -> bool:
    """Heuristic for placeholder, example and test credentials."""
    lowered = key.lower()
    if any(indicator in lowered for indicator in _TEST_INDICATORS):
        return True
    unique = {c for c in key if c.isalnum()}
    return len(unique) < 4 and len(key) > 10


def _is_secret_shaped(key: str) -> bool:
    # A bare 40-char run only reads as a secret when it mixes cases; this
    # keeps sha1 digests and long words out.
    if all(c in string.hexdigits for c in key):
        return False
    return any(c.isupper() for c in key) and any(c.islower() for c in key)


class ApiKeyDetector(BaseDetector):
    """Match the provider pattern table with boundary enforcement.

    Results are ordered by confidence (highest first). When a strong
    provider match exists, weak generic matches from other providers are
    dropped.
    """

    family = "apiKeys"

    def __init__(self, patterns: tuple[KeyPattern, ...] = PATTERNS) -> None:
        self.patterns = patterns

    def detect(self, text: str) -> list[ApiKeyDetection]:
        if len(text.strip()) < MIN_INPUT_LENGTH:
            return []

        seen: set[str] = set()
        found: list[ApiKeyDetection] = []
        for kp in self.patterns:
            group = 1 if kp.pattern.groups else 0
            for key, (start, end) in self._iter_matches(kp.pattern, text, group=group):
                if key in seen:
                    continue
                if not kp.distinctive_prefix:
                    if not has_boundary(text, start, end) or not _is_secret_shaped(key):
                        continue
                seen.add(key)
                live = not is_test_key(key)
                found.append(
                    ApiKeyDetection(
                        key=key,
                        provider=kp.provider,
                        confidence=kp.confidence if live else kp.confidence * 0.5,
                        is_likely_live=live,
                        span=(start, end),
                    )
                )

        found.sort(key=lambda d: d.confidence, reverse=True)
        if found and found[0].confidence >= _STRONG_CONFIDENCE:
            top_provider = found[0].provider
            found = [d for d in found if d.confidence >= _WEAK_FLOOR or d.provider == top_provider]
        return found
