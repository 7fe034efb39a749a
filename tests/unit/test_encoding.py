"""Tests for the encoding resolver."""

from __future__ import annotations

import pytest

from clipsift.encoding import EncodingResolver, decode_base64, decode_percent, printable_ratio

_NESTED = "aGVsbG8lMjB3b3JsZCE="  # base64 of "hello%20world!"


def test_nested_layers_peeled_in_order() -> None:
    result = EncodingResolver().resolve(_NESTED)
    assert result.changed
    assert result.decoded == "hello world!"
    assert result.encodings == ["base64", "url"]
    assert result.rounds == 2
    assert result.confidence == pytest.approx(0.9)
    assert result.metadata() == {
        "encoding": "nested",
        "steps": ["base64", "url"],
        "decodedPreview": "hello world!",
    }


def test_single_layer_metadata_names_the_encoding() -> None:
    result = EncodingResolver().resolve("caf%C3%A9%20au%20lait")
    assert result.decoded == "café au lait"
    assert result.metadata()["encoding"] == "url"
    assert result.confidence == pytest.approx(0.85)


def test_max_rounds_limits_depth() -> None:
    result = EncodingResolver(max_rounds=1).resolve(_NESTED)
    assert result.decoded == "hello%20world!"
    assert result.encodings == ["base64"]
    assert EncodingResolver(max_rounds=0).resolve(_NESTED).changed is False


def test_readable_url_left_alone() -> None:
    text = "https://example.com/search?q=a%20b"
    result = EncodingResolver().resolve(text)
    assert result.changed is False
    assert result.decoded == text
    assert result.metadata() is None


def test_binary_base64_rejected() -> None:
    # base64 of bytes 0x00..0x05
    assert EncodingResolver().resolve("AAECAwQF").changed is False


def test_plain_text_unchanged() -> None:
    result = EncodingResolver().resolve("hello world")
    assert result.decoded == "hello world"
    assert result.confidence == 0.0


def test_decoders() -> None:
    assert decode_base64("dGVzdA==") == "test"
    assert decode_base64("dGVz\ndA==") == "test"
    assert decode_base64("short") is None
    assert decode_base64("not base64!") is None
    assert decode_percent("a%2Fb") == "a/b"
    assert decode_percent("no escapes") is None
    assert decode_percent("%C3%28") is None  # invalid UTF-8


def test_printable_ratio() -> None:
    assert printable_ratio("") == 0.0
    assert printable_ratio("ab\n") == 1.0
    assert printable_ratio("a\x00") == 0.5


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        EncodingResolver(max_rounds=-1)
    with pytest.raises(ValueError):
        EncodingResolver(min_printable_ratio=1.5)
