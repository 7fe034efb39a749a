"""Classification orchestrator.

Runs the encoding resolver, then every family detector in a fixed scan order
over the decoded subject, and turns the detections into one
``ClassificationOutput``: a primary type picked by a total priority cascade,
the metadata document, and either split entries (environment-variable
blocks) or extracted child items.

Span exclusion
--------------
Higher-priority token families claim their character ranges before
lower-priority scanners run. Claimed spans are blanked (replaced with spaces,
offsets preserved) in the text handed to the later scanners:

- JWT spans are hidden from every later token scan.
- API key, UUID and hash spans are hidden from the hash and phone scans.
- IP, URL and email spans are hidden from the phone and file-path scans.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from clipsift.detectors import (
    ApiKeyDetector,
    BaseDetector,
    CodeDetector,
    EmailDetector,
    EnvVarDetector,
    FilePathDetector,
    HashDetector,
    IpAddressDetector,
    JwtDetector,
    PhoneNumberDetector,
    ProseDetector,
    ShellCommandDetector,
    UrlDetector,
    UuidDetector,
    blank_spans,
)
from clipsift.encoding import DecodeResult, EncodingResolver
from clipsift.metadata import EncodingInfo, MetadataCodec, MetadataDocument
from clipsift.models import (
    ClassificationOutput,
    ContentType,
    EnvOutput,
    ExtractedItem,
    SplitEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_EXTRACTED_ITEMS = 20
DEFAULT_MAX_INPUT_CHARS = 100_000
FALLBACK_CONFIDENCE = 0.5

# First family in this order whose best detection clears its minimum wins.
PRIORITY: tuple[ContentType, ...] = (
    ContentType.ENV_VAR_BLOCK,
    ContentType.JWT,
    ContentType.ENV_VAR,
    ContentType.API_KEY,
    ContentType.EMAIL,
    ContentType.UUID,
    ContentType.HASH,
    ContentType.IP_ADDRESS,
    ContentType.PHONE_NUMBER,
    ContentType.URL,
    ContentType.CODE,
    ContentType.FILE_PATH,
    ContentType.SHELL_COMMAND,
    ContentType.PROSE,
)

MIN_CONFIDENCE: dict[ContentType, float] = {
    ContentType.ENV_VAR_BLOCK: 0.75,
    ContentType.JWT: 0.9,
    ContentType.ENV_VAR: 0.75,
    ContentType.API_KEY: 0.6,
    ContentType.EMAIL: 0.9,
    ContentType.UUID: 0.85,
    ContentType.HASH: 0.7,
    ContentType.IP_ADDRESS: 0.8,
    ContentType.PHONE_NUMBER: 0.8,
    ContentType.URL: 0.9,
    ContentType.FILE_PATH: 0.6,
    ContentType.SHELL_COMMAND: 0.6,
    ContentType.CODE: 0.6,
    ContentType.PROSE: 0.6,
}

# ContentType -> MetadataDocument attribute for the list families.
_LIST_ATTRS: dict[ContentType, str] = {
    ContentType.EMAIL: "emails",
    ContentType.URL: "urls",
    ContentType.PHONE_NUMBER: "phone_numbers",
    ContentType.IP_ADDRESS: "ip_addresses",
    ContentType.UUID: "uuids",
    ContentType.HASH: "hashes",
    ContentType.API_KEY: "api_keys",
    ContentType.JWT: "jwt",
    ContentType.FILE_PATH: "file_paths",
    ContentType.SHELL_COMMAND: "shell_commands",
    ContentType.CODE: "code",
}

# Families whose values become child records, in emission order.
EXTRACTABLE: tuple[ContentType, ...] = (
    ContentType.EMAIL,
    ContentType.URL,
    ContentType.PHONE_NUMBER,
    ContentType.IP_ADDRESS,
    ContentType.UUID,
    ContentType.HASH,
    ContentType.API_KEY,
    ContentType.JWT,
    ContentType.FILE_PATH,
)


def _spans(items: Any) -> list[tuple[int, int]]:
    return [d.span for d in items]


class ContentClassifier:
    """Classify captured text and extract its structured sub-entities.

    Args:
        resolver: Encoding resolver run before the detectors.
        jwt_detector: JWT detector; inject one with a fixed clock in tests.
        file_path_detector: File-path detector; inject one with a fake
            existence check to keep tests off the filesystem.
        codec: Metadata codec used to serialise documents.
        max_extracted_items: Upper bound on extracted child items.
        max_input_chars: The analysis subject is truncated to this length.
    """

    def __init__(
        self,
        *,
        resolver: EncodingResolver | None = None,
        jwt_detector: JwtDetector | None = None,
        file_path_detector: FilePathDetector | None = None,
        codec: MetadataCodec | None = None,
        max_extracted_items: int = DEFAULT_MAX_EXTRACTED_ITEMS,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
    ) -> None:
        if max_extracted_items < 0:
            raise ValueError("max_extracted_items must be >= 0")
        if max_input_chars < 1:
            raise ValueError("max_input_chars must be >= 1")
        self.resolver = resolver or EncodingResolver()
        self.codec = codec or MetadataCodec()
        self.max_extracted_items = max_extracted_items
        self.max_input_chars = max_input_chars

        self.env_detector = EnvVarDetector()
        self.jwt_detector = jwt_detector or JwtDetector()
        self.api_key_detector = ApiKeyDetector()
        self.email_detector = EmailDetector()
        self.uuid_detector = UuidDetector()
        self.hash_detector = HashDetector()
        self.ip_detector = IpAddressDetector()
        self.url_detector = UrlDetector()
        self.phone_detector = PhoneNumberDetector()
        self.file_path_detector = file_path_detector or FilePathDetector()
        self.shell_detector = ShellCommandDetector()
        self.code_detector = CodeDetector()
        self.prose_detector = ProseDetector()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def classify(self, text: str, *, extract_content: bool = True) -> ClassificationOutput:
        """Classify *text*.

        Args:
            text: Captured text. Leading and trailing whitespace is ignored.
            extract_content: When False the metadata document holds only the
                primary family and no extracted items are produced.

        Returns:
            The classification. Never raises for any input string.
        """
        stripped = text.strip()
        if not stripped:
            return ClassificationOutput(primary_type=ContentType.UNKNOWN, confidence=0.0)

        decoded = self._resolve(stripped)
        subject = decoded.decoded if decoded.changed else stripped
        subject = subject[: self.max_input_chars]
        encoding_info = EncodingInfo.from_dict(decoded.metadata()) if decoded.changed else None

        env = self._run(self.env_detector, subject)
        if env is not None and env.is_block and env.confidence >= MIN_CONFIDENCE[ContentType.ENV_VAR_BLOCK]:
            return self._split_output(env, encoding_info, decoded)

        found = self._scan(subject)
        if env is not None and not env.is_block and env.confidence >= MIN_CONFIDENCE[ContentType.ENV_VAR]:
            found[ContentType.ENV_VAR] = env
        prose = self._run(self.prose_detector, subject)
        if prose is not None and prose.confidence >= MIN_CONFIDENCE[ContentType.PROSE]:
            found[ContentType.PROSE] = prose

        primary, confidence = self._select_primary(found, subject)
        included = found if extract_content else {k: v for k, v in found.items() if k is primary}
        document = self._document(included, encoding_info)

        items: tuple[ExtractedItem, ...] = ()
        if extract_content:
            items = self._extracted_items(found, stripped)

        logger.debug("classified %d chars as %s (%.2f)", len(stripped), primary.value, confidence)
        return ClassificationOutput(
            primary_type=primary,
            confidence=confidence,
            metadata=self.codec.serialize(document),
            extracted_items=items,
            decoded=decoded if decoded.changed else None,
        )

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _resolve(self, text: str) -> DecodeResult:
        try:
            return self.resolver.resolve(text)
        except Exception:
            logger.exception("encoding resolver failed; analysing raw text")
            return DecodeResult(original=text, decoded=text)

    def _run(self, detector: BaseDetector, text: str) -> Any:
        try:
            return detector.detect(text)
        except Exception:
            logger.exception("%s detector failed", detector.family or type(detector).__name__)
            return None

    def _run_list(self, detector: BaseDetector, text: str, content_type: ContentType) -> tuple[Any, ...]:
        threshold = MIN_CONFIDENCE[content_type]
        return tuple(d for d in self._run(detector, text) or () if d.confidence >= threshold)

    def _scan(self, subject: str) -> dict[ContentType, Any]:
        """Run the token and structural families in scan order with span exclusion."""
        jwts = self._run_list(self.jwt_detector, subject, ContentType.JWT)
        tokens = blank_spans(subject, _spans(jwts))

        api_keys = self._run_list(self.api_key_detector, tokens, ContentType.API_KEY)
        emails = self._run_list(self.email_detector, tokens, ContentType.EMAIL)
        uuids = self._run_list(self.uuid_detector, tokens, ContentType.UUID)

        hash_text = blank_spans(tokens, _spans(api_keys) + _spans(uuids))
        hashes = self._run_list(self.hash_detector, hash_text, ContentType.HASH)

        ips = self._run_list(self.ip_detector, tokens, ContentType.IP_ADDRESS)
        urls = self._run_list(self.url_detector, tokens, ContentType.URL)

        located = _spans(ips) + _spans(urls) + _spans(emails)
        phone_text = blank_spans(hash_text, _spans(hashes) + located)
        phones = self._run_list(self.phone_detector, phone_text, ContentType.PHONE_NUMBER)
        paths = self._run_list(self.file_path_detector, blank_spans(tokens, located), ContentType.FILE_PATH)

        shells = self._run_list(self.shell_detector, subject, ContentType.SHELL_COMMAND)
        code = self._run_list(self.code_detector, subject, ContentType.CODE)

        scanned = {
            ContentType.JWT: jwts,
            ContentType.API_KEY: api_keys,
            ContentType.EMAIL: emails,
            ContentType.UUID: uuids,
            ContentType.HASH: hashes,
            ContentType.IP_ADDRESS: ips,
            ContentType.URL: urls,
            ContentType.PHONE_NUMBER: phones,
            ContentType.FILE_PATH: paths,
            ContentType.SHELL_COMMAND: shells,
            ContentType.CODE: code,
        }
        return {k: v for k, v in scanned.items() if v}

    # ------------------------------------------------------------------
    # Output assembly
    # ------------------------------------------------------------------

    @staticmethod
    def _select_primary(found: dict[ContentType, Any], subject: str) -> tuple[ContentType, float]:
        for content_type in PRIORITY:
            result = found.get(content_type)
            if not result:
                continue
            if isinstance(result, tuple):
                return content_type, max(d.confidence for d in result)
            return content_type, result.confidence
        if len(subject.strip()) < 2:
            return ContentType.UNKNOWN, FALLBACK_CONFIDENCE
        return ContentType.TEXT, FALLBACK_CONFIDENCE

    @staticmethod
    def _document(found: dict[ContentType, Any], encoding_info: EncodingInfo | None) -> MetadataDocument:
        fields: dict[str, Any] = {
            attr: found[content_type] for content_type, attr in _LIST_ATTRS.items() if content_type in found
        }
        env = found.get(ContentType.ENV_VAR) or found.get(ContentType.ENV_VAR_BLOCK)
        return MetadataDocument(
            env=env,
            prose=found.get(ContentType.PROSE),
            encoding=encoding_info,
            **fields,
        )

    def _extracted_items(self, found: dict[ContentType, Any], content: str) -> tuple[ExtractedItem, ...]:
        items: list[ExtractedItem] = []
        seen: set[tuple[ContentType, str]] = set()
        for content_type in EXTRACTABLE:
            for detection in found.get(content_type, ()):
                if len(items) >= self.max_extracted_items:
                    return tuple(items)
                value = detection.value
                if value == content or (content_type, value) in seen:
                    continue
                seen.add((content_type, value))
                child_doc = MetadataDocument(**{_LIST_ATTRS[content_type]: (detection,)})
                items.append(ExtractedItem(value, content_type, self.codec.serialize(child_doc)))
        return tuple(items)

    def _split_output(
        self,
        env: EnvOutput,
        encoding_info: EncodingInfo | None,
        decoded: DecodeResult,
    ) -> ClassificationOutput:
        entries = tuple(
            SplitEntry(
                content=d.assignment,
                content_type=ContentType.ENV_VAR,
                metadata=json.dumps({"key": d.key, "isExported": d.is_exported}, separators=(",", ":")),
            )
            for d in env.detections
        )
        document = MetadataDocument(env=env, encoding=encoding_info)
        logger.debug("split env block into %d entries", len(entries))
        return ClassificationOutput(
            primary_type=ContentType.ENV_VAR_BLOCK,
            confidence=env.confidence,
            metadata=self.codec.serialize(document),
            split_entries=entries,
            decoded=decoded if decoded.changed else None,
        )
