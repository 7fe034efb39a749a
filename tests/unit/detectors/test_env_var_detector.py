"""Tests for EnvVarDetector."""

from __future__ import annotations

from clipsift.detectors.env_var import EnvVarDetector, unquote_value


def test_single_assignment() -> None:
    out = EnvVarDetector().detect("API_KEY=abc123")
    assert out is not None
    assert out.is_block is False
    [d] = out.detections
    assert (d.key, d.value, d.is_exported, d.confidence) == ("API_KEY", "abc123", False, 0.95)


def test_exported_double_quoted_value() -> None:
    out = EnvVarDetector().detect('export NAME="hello world"')
    assert out is not None
    [d] = out.detections
    assert d.is_exported is True
    assert d.value == "hello world"
    assert d.assignment == "export NAME=hello world"


def test_block_skips_comments_and_blank_lines() -> None:
    out = EnvVarDetector().detect("# comment\nFOO=bar\n\nBAZ='qux'")
    assert out is not None
    assert out.is_block is True
    assert [(d.key, d.value) for d in out.detections] == [("FOO", "bar"), ("BAZ", "qux")]
    assert out.confidence == 0.95


def test_mixed_lines_lower_confidence() -> None:
    out = EnvVarDetector().detect("FOO=bar\nthis line is not an assignment")
    assert out is not None
    assert out.confidence == 0.75
    assert out.is_block is False


def test_lowercase_keys_and_plain_text_rejected() -> None:
    assert EnvVarDetector().detect("lowercase=1") is None
    assert EnvVarDetector().detect("no assignments here") is None


def test_spans_point_at_lines() -> None:
    text = "  FOO=bar\nBAZ=1"
    out = EnvVarDetector().detect(text)
    assert out is not None
    assert [text[s:e] for s, e in (d.span for d in out.detections)] == ["FOO=bar", "BAZ=1"]


def test_unquote_value_escapes() -> None:
    assert unquote_value('"line1\\nline2"') == "line1\nline2"
    assert unquote_value('"say \\"hi\\""') == 'say "hi"'
    assert unquote_value("'raw \\n'") == "raw \\n"
    assert unquote_value("  bare  ") == "bare"
