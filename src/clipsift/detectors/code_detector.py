"""Programming-language heuristic for code snippets."""

from __future__ import annotations

import json
import re
from collections.abc import Callable

from clipsift.detectors.base import BaseDetector
from clipsift.models import CodeDetection, CodeLanguage

_FENCE_RE: re.Pattern[str] = re.compile(r"```([A-Za-z0-9_+-]+)?\n([\s\S]*?)```")

_CODE_TOKENS = ("{", "}", ";", "=>", "==", "!=", "()", "[]", ":=", "::", "#include", "import ")

ACCEPT_THRESHOLD = 0.6


# ---------------------------------------------------------------------------
# Strong checks
# ---------------------------------------------------------------------------


def _json_confidence(s: str) -> float | None:
    if s[:1] not in ("{", "["):
        return None
    try:
        obj = json.loads(s)
    except ValueError:
        return None
    return 0.95 if isinstance(obj, (dict, list)) else None


def _html_confidence(s: str) -> float:
    lower = s.lower()
    if "<!doctype html" in lower or "<html" in lower:
        return 0.95
    if "<div" in lower or "<span" in lower or "</" in lower:
        return 0.9
    return 0.0


def _css_confidence(s: str) -> float:
    return 0.9 if all(c in s for c in "{:;}") else 0.0


def looks_like_code(s: str) -> bool:
    return "\n" in s or any(t in s for t in _CODE_TOKENS)


# ---------------------------------------------------------------------------
# Per-language scores
# ---------------------------------------------------------------------------


def _swift(s: str) -> float:
    score = 0.0
    if "import SwiftUI" in s or "import Foundation" in s:
        score += 0.6
    if "struct " in s or "enum " in s or "protocol " in s:
        score += 0.2
    if "func " in s:
        score += 0.2
    if "let " in s or "var " in s:
        score += 0.1
    if ": " in s and any(t in s for t in ("String", "Int", "Bool")):
        score += 0.1
    return min(0.95, score)


def _python(s: str) -> float:
    score = 0.0
    if "def " in s:
        score += 0.4
    if "import " in s or "from " in s:
        score += 0.2
    if "elif " in s or "None" in s or "self" in s:
        score += 0.2
    if ":\n" in s:
        score += 0.2
    if "    " in s:
        score += 0.1
    return min(0.95, score)


def _javascript(s: str) -> float:
    score = 0.0
    if "console." in s:
        score += 0.2
    if "const " in s or "let " in s or "var " in s:
        score += 0.2
    if "function " in s:
        score += 0.2
    if "=>" in s:
        score += 0.2
    if "export " in s or "import " in s:
        score += 0.1
    return min(0.9, score)


def _typescript(s: str) -> float:
    score = _javascript(s) * 0.8
    if "interface " in s or "type " in s:
        score += 0.4
    if ": number" in s or ": string" in s or ": boolean" in s:
        score += 0.3
    if " as " in s:
        score += 0.1
    return min(0.95, score)


def _go(s: str) -> float:
    score = 0.0
    if "package " in s:
        score += 0.4
    if "func " in s:
        score += 0.2
    if ":=" in s:
        score += 0.2
    if "import " in s:
        score += 0.1
    if "fmt." in s:
        score += 0.1
    return min(0.95, score)


def _rust(s: str) -> float:
    score = 0.0
    if "fn " in s:
        score += 0.3
    if "let mut" in s or "impl " in s:
        score += 0.2
    if "use " in s:
        score += 0.1
    if "::" in s:
        score += 0.2
    if "println!" in s:
        score += 0.3
    return min(0.95, score)


def _java(s: str) -> float:
    score = 0.0
    if "public class" in s:
        score += 0.5
    if "static void main" in s:
        score += 0.3
    if "System.out" in s:
        score += 0.2
    return min(0.95, score)


def _c_cpp(s: str) -> float:
    score = 0.0
    if "#include" in s:
        score += 0.6
    if "int main" in s:
        score += 0.2
    if "std::" in s:
        score += 0.2
    return min(0.95, score)


def _ruby(s: str) -> float:
    score = 0.0
    if "def " in s:
        score += 0.3
    if re.search(r"^\s*end\b", s, re.MULTILINE):
        score += 0.3
    if "puts " in s:
        score += 0.2
    if "require " in s:
        score += 0.1
    return min(0.9, score)


def _sql(s: str) -> float:
    upper = s.upper()
    score = 0.0
    if "SELECT " in upper:
        score += 0.4
    if "FROM " in upper:
        score += 0.2
    if "WHERE " in upper:
        score += 0.2
    if "INSERT " in upper or "UPDATE " in upper or "DELETE " in upper:
        score += 0.2
    if ";" in s:
        score += 0.1
    return min(0.95, score)


def _yaml(s: str) -> float:
    lines = [ln.strip() for ln in s.split("\n") if ln.strip()]
    if len(lines) < 2:
        return 0.0
    has_list = any(ln.startswith("-") for ln in lines)
    key_values = sum(1 for ln in lines if ":" in ln and "{" not in ln and "}" not in ln)
    if key_values >= 2:
        return 0.9 if has_list else 0.8
    return 0.0


def _shell(s: str) -> float:
    score = 0.0
    if s.startswith("#!/"):
        score += 0.5
    if "export " in s:
        score += 0.4
    if "set -e" in s:
        score += 0.2
    if "$(" in s or "`" in s:
        score += 0.1
    if "cd " in s or "echo " in s:
        score += 0.2
    return min(0.9, score)


# Ties resolve to the earlier entry.
_SCORERS: tuple[tuple[CodeLanguage, Callable[[str], float]], ...] = (
    (CodeLanguage.SWIFT, _swift),
    (CodeLanguage.PYTHON, _python),
    (CodeLanguage.TYPESCRIPT, _typescript),
    (CodeLanguage.JAVASCRIPT, _javascript),
    (CodeLanguage.GO, _go),
    (CodeLanguage.RUST, _rust),
    (CodeLanguage.JAVA, _java),
    (CodeLanguage.C_CPP, _c_cpp),
    (CodeLanguage.RUBY, _ruby),
    (CodeLanguage.SQL, _sql),
    (CodeLanguage.YAML, _yaml),
    (CodeLanguage.SHELL, _shell),
)


def classify_snippet(code: str) -> tuple[CodeLanguage, float]:
    """Return the most likely language for *code* and its score."""
    json_conf = _json_confidence(code)
    if json_conf is not None:
        return CodeLanguage.JSON, json_conf
    html = _html_confidence(code)
    if html >= 0.9:
        return CodeLanguage.HTML, html
    css = _css_confidence(code)
    if css >= 0.85:
        return CodeLanguage.CSS, css
    if not looks_like_code(code):
        return CodeLanguage.UNKNOWN, 0.0

    best_lang, best_score = CodeLanguage.UNKNOWN, 0.0
    for language, scorer in _SCORERS:
        score = scorer(code)
        if score > best_score:
            best_lang, best_score = language, score
    return best_lang, best_score


class CodeDetector(BaseDetector):
    """Guess the language of fenced blocks, or of the whole text when unfenced."""

    family = "code"

    def detect(self, text: str) -> list[CodeDetection]:
        candidates = [(m.group(2), m.span(2)) for m in _FENCE_RE.finditer(text)]
        if not candidates:
            candidates = [(text, (0, len(text)))]

        seen: set[str] = set()
        out: list[CodeDetection] = []
        for raw, (start, _end) in candidates:
            snippet = raw.strip()
            if not snippet or snippet in seen:
                continue
            seen.add(snippet)
            language, confidence = classify_snippet(snippet)
            if confidence < ACCEPT_THRESHOLD:
                continue
            offset = start + raw.index(snippet)
            out.append(
                CodeDetection(
                    code=snippet,
                    language=language,
                    confidence=confidence,
                    span=(offset, offset + len(snippet)),
                )
            )
        return out
