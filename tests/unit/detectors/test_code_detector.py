"""Tests for CodeDetector and language scoring."""

from __future__ import annotations

import pytest

from clipsift.detectors.code_detector import CodeDetector, classify_snippet
from clipsift.models import CodeLanguage


@pytest.mark.parametrize(
    ("snippet", "language"),
    [
        ('{"a": 1, "b": [1, 2]}', CodeLanguage.JSON),
        ('<div class="x">hi</div>', CodeLanguage.HTML),
        ("def greet(name):\n    return name.upper()\n", CodeLanguage.PYTHON),
        ('package main\n\nimport "fmt"\n\nfunc main() {\n\tfmt.Println("hi")\n}', CodeLanguage.GO),
        ('fn main() {\n    let mut x = 5;\n    println!("{}", x);\n}', CodeLanguage.RUST),
        ("SELECT id FROM users WHERE active = 1;", CodeLanguage.SQL),
        ('#include <stdio.h>\nint main() { return 0; }', CodeLanguage.C_CPP),
    ],
)
def test_classify_snippet(snippet: str, language: CodeLanguage) -> None:
    detected, score = classify_snippet(snippet)
    assert detected is language
    assert score >= 0.6


def test_plain_words_are_not_code() -> None:
    assert classify_snippet("hello world") == (CodeLanguage.UNKNOWN, 0.0)
    assert CodeDetector().detect("hello world") == []


def test_fenced_blocks_preferred() -> None:
    text = "Try this:\n```python\ndef add(a, b):\n    return a + b\n```\nthanks"
    [d] = CodeDetector().detect(text)
    assert d.language is CodeLanguage.PYTHON
    assert d.code == "def add(a, b):\n    return a + b"
    assert text[d.span[0]:d.span[1]] == d.code


def test_whole_text_when_unfenced() -> None:
    [d] = CodeDetector().detect('{"name": "clipsift"}')
    assert d.language is CodeLanguage.JSON
    assert d.confidence == 0.95
