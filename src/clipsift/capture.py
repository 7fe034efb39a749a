"""Capture adapter: turn one clipboard capture into the records handed to the store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from clipsift.classifier import ContentClassifier
from clipsift.models import ClipboardEntry, ContentType

logger = logging.getLogger(__name__)

_SCREENSHOT_MARKERS = ("screenshot", "screencapture")


@dataclass(frozen=True)
class CapturePolicy:
    """Host policy flags (config.yaml: capture:)."""

    extract_content: bool = True
    skip_api_keys: bool = False


@dataclass
class CaptureRequest:
    """One capture as observed by the host.

    ``payload`` is either text or raw bytes; bytes are decoded as UTF-8 with
    replacement unless ``is_image`` is set, in which case they are kept as
    the record's raw data.
    """

    payload: str | bytes
    source_app: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_image: bool = False

    @property
    def text(self) -> str:
        if isinstance(self.payload, bytes):
            return self.payload.decode("utf-8", errors="replace")
        return self.payload


@dataclass
class CaptureResult:
    """Records produced for one capture.

    Exactly one shape is populated: ``entry`` plus ``children``, or
    ``split_entries``. Both are empty when the capture was dropped by policy.
    """

    entry: ClipboardEntry | None = None
    children: list[ClipboardEntry] = field(default_factory=list)
    split_entries: list[ClipboardEntry] = field(default_factory=list)

    @property
    def records(self) -> list[ClipboardEntry]:
        if self.split_entries:
            return list(self.split_entries)
        if self.entry is None:
            return []
        return [self.entry, *self.children]

    @property
    def dropped(self) -> bool:
        return self.entry is None and not self.split_entries


def _image_type(source_app: str | None) -> ContentType:
    name = (source_app or "").lower()
    if any(marker in name for marker in _SCREENSHOT_MARKERS):
        return ContentType.SCREENSHOT
    return ContentType.IMAGE


def process_capture(
    request: CaptureRequest,
    classifier: ContentClassifier | None = None,
    policy: CapturePolicy | None = None,
) -> CaptureResult:
    """Classify *request* and build the resulting store records.

    Args:
        request: The capture to process.
        classifier: Classifier to use; a default one is built when omitted.
        policy: Host policy flags; defaults to ``CapturePolicy()``.

    Returns:
        A ``CaptureResult``. Image captures bypass text classification and
        yield a single ``image`` or ``screenshot`` record.
    """
    policy = policy or CapturePolicy()

    if request.is_image:
        raw = request.payload if isinstance(request.payload, bytes) else request.payload.encode("utf-8")
        entry = ClipboardEntry(
            content="",
            content_type=_image_type(request.source_app),
            timestamp=request.timestamp,
            source_app=request.source_app,
            raw_data=raw,
        )
        return CaptureResult(entry=entry)

    classifier = classifier or ContentClassifier()
    text = request.text
    output = classifier.classify(text, extract_content=policy.extract_content)

    if output.primary_type is ContentType.API_KEY and policy.skip_api_keys:
        logger.info("dropping apiKey capture from %s", request.source_app or "unknown source")
        return CaptureResult()

    if output.is_split:
        splits = [
            ClipboardEntry(
                content=split.content,
                content_type=split.content_type,
                timestamp=request.timestamp,
                source_app=request.source_app,
                metadata=split.metadata,
            )
            for split in output.split_entries
        ]
        return CaptureResult(split_entries=splits)

    entry = ClipboardEntry(
        content=text,
        content_type=output.primary_type,
        timestamp=request.timestamp,
        source_app=request.source_app,
        metadata=output.metadata,
    )
    children = [
        ClipboardEntry(
            content=item.content,
            content_type=item.content_type,
            timestamp=request.timestamp,
            source_app=request.source_app,
            metadata=item.metadata,
            parent_entry_id=entry.id,
        )
        for item in output.extracted_items
        if policy.extract_content
    ]
    if children:
        logger.debug("extracted %d child record(s) from %s", len(children), entry.id)
    return CaptureResult(entry=entry, children=children)
