"""Tests for ProseDetector."""

from __future__ import annotations

from clipsift.detectors.prose import ProseDetector, reading_time_seconds, word_count

_PARAGRAPH = (
    "The committee met on Tuesday to review the budget. "
    "Everyone agreed that the proposal needed more work before it could be approved."
)


def test_paragraph_is_prose() -> None:
    d = ProseDetector().detect(_PARAGRAPH)
    assert d is not None
    assert d.word_count == 22
    assert d.estimated_reading_time_seconds == 7
    assert 0.6 <= d.confidence <= 0.95


def test_common_english_words_are_not_code_signals() -> None:
    text = (
        "I got a letter from my sister where she explained that her class "
        "would visit the museum next week, and she asked us to come along."
    )
    assert ProseDetector().detect(text) is not None


def test_code_is_not_prose() -> None:
    code = "def load(path):\n    with open(path) as fh:\n        return fh.read()  # read the whole file at once"
    assert ProseDetector().detect(code) is None
    assert ProseDetector().detect("function add(a, b) { return a + b; } // adds two numbers together nicely") is None


def test_env_block_is_not_prose() -> None:
    text = "DATABASE_URL=postgres://localhost/app\nSECRET_NAME=some value here\nDEBUG=true and more words"
    assert ProseDetector().detect(text) is None


def test_short_text_rejected() -> None:
    assert ProseDetector().detect("Too short to be prose.") is None


def test_unpunctuated_needs_more_words() -> None:
    twenty = " ".join(["word"] * 20)
    assert ProseDetector().detect(twenty) is None
    assert ProseDetector().detect(" ".join(["word"] * 40)) is not None


def test_word_count_and_reading_time() -> None:
    assert word_count("don't stop me now") == 4
    assert reading_time_seconds(200) == 60
    assert reading_time_seconds(1) == 1
