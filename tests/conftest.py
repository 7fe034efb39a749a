"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from clipsift.cache import ContainmentCache
from clipsift.classifier import ContentClassifier
from clipsift.detectors import FilePathDetector, JwtDetector
from clipsift.metadata import MetadataCodec

FIXED_NOW = 1_700_000_000.0


@pytest.fixture
def codec() -> MetadataCodec:
    """Codec with its own small containment cache."""
    return MetadataCodec(ContainmentCache(capacity=8))


@pytest.fixture
def classifier(codec: MetadataCodec) -> ContentClassifier:
    """Classifier with a fixed JWT clock and no filesystem access for paths."""
    return ContentClassifier(
        jwt_detector=JwtDetector(now=lambda: FIXED_NOW),
        file_path_detector=FilePathDetector(exists=lambda _path: False),
        codec=codec,
    )
