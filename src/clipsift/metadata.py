"""Metadata document model and codec.

The metadata document is the JSON side-channel attached to every record:
an object keyed by family name, each value a list of family objects
(``env``, ``prose`` and ``encoding`` are single objects). Keys appear only
when their family found something. On the Python side the document is a
``MetadataDocument`` of typed per-family dataclasses.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from clipsift.cache import ContainmentCache
from clipsift.models import (
    ApiKeyDetection,
    CodeDetection,
    ContentType,
    EmailDetection,
    EnvOutput,
    EnvVarDetection,
    FilePathDetection,
    HashDetection,
    IpAddressDetection,
    JwtDetection,
    PhoneNumberDetection,
    ProseDetection,
    ShellCommandDetection,
    UrlDetection,
    UuidDetection,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EncodingInfo:
    """Decode chain summary stored under the ``encoding`` key."""

    encoding: str  # single step name, or "nested"
    steps: tuple[str, ...]
    decoded_preview: str

    def to_dict(self) -> dict[str, Any]:
        return {"encoding": self.encoding, "steps": list(self.steps), "decodedPreview": self.decoded_preview}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EncodingInfo:
        return cls(
            encoding=str(data["encoding"]),
            steps=tuple(str(s) for s in data.get("steps", [])),
            decoded_preview=str(data.get("decodedPreview", "")),
        )


@dataclass(frozen=True)
class MetadataDocument:
    emails: tuple[EmailDetection, ...] = ()
    urls: tuple[UrlDetection, ...] = ()
    phone_numbers: tuple[PhoneNumberDetection, ...] = ()
    ip_addresses: tuple[IpAddressDetection, ...] = ()
    uuids: tuple[UuidDetection, ...] = ()
    hashes: tuple[HashDetection, ...] = ()
    api_keys: tuple[ApiKeyDetection, ...] = ()
    jwt: tuple[JwtDetection, ...] = ()
    env: EnvOutput | None = None
    file_paths: tuple[FilePathDetection, ...] = ()
    shell_commands: tuple[ShellCommandDetection, ...] = ()
    code: tuple[CodeDetection, ...] = ()
    prose: ProseDetection | None = None
    encoding: EncodingInfo | None = None

    def is_empty(self) -> bool:
        return self == _EMPTY


_EMPTY = MetadataDocument()

# (wire key, attribute, item class), in serialisation and round-robin order.
LIST_FAMILIES: tuple[tuple[str, str, Any], ...] = (
    ("emails", "emails", EmailDetection),
    ("urls", "urls", UrlDetection),
    ("phoneNumbers", "phone_numbers", PhoneNumberDetection),
    ("ipAddresses", "ip_addresses", IpAddressDetection),
    ("uuids", "uuids", UuidDetection),
    ("hashes", "hashes", HashDetection),
    ("apiKeys", "api_keys", ApiKeyDetection),
    ("jwt", "jwt", JwtDetection),
    ("filePaths", "file_paths", FilePathDetection),
    ("shellCommands", "shell_commands", ShellCommandDetection),
    ("code", "code", CodeDetection),
)

FAMILY_KEYS: dict[ContentType, str] = {
    ContentType.EMAIL: "emails",
    ContentType.URL: "urls",
    ContentType.PHONE_NUMBER: "phoneNumbers",
    ContentType.IP_ADDRESS: "ipAddresses",
    ContentType.UUID: "uuids",
    ContentType.HASH: "hashes",
    ContentType.API_KEY: "apiKeys",
    ContentType.JWT: "jwt",
    ContentType.ENV_VAR: "env",
    ContentType.ENV_VAR_BLOCK: "env",
    ContentType.FILE_PATH: "filePaths",
    ContentType.SHELL_COMMAND: "shellCommands",
    ContentType.CODE: "code",
    ContentType.PROSE: "prose",
}

# Round-robin order used by extract_all().
EXTRACT_ORDER: tuple[ContentType, ...] = (
    ContentType.EMAIL,
    ContentType.URL,
    ContentType.PHONE_NUMBER,
    ContentType.IP_ADDRESS,
    ContentType.UUID,
    ContentType.HASH,
    ContentType.API_KEY,
    ContentType.JWT,
    ContentType.ENV_VAR,
    ContentType.FILE_PATH,
    ContentType.SHELL_COMMAND,
    ContentType.CODE,
)

_MASK_BITS: dict[ContentType, int] = {ct: 1 << i for i, ct in enumerate(FAMILY_KEYS)}


@dataclass(frozen=True)
class ExtractedValue:
    """One value pulled out of a stored document, with a short display form."""

    type: ContentType
    value: str
    display_value: str


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def _parse_items(raw: Any, item_cls: Any, key: str) -> tuple[Any, ...]:
    if not isinstance(raw, list):
        return ()
    items = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            items.append(item_cls.from_dict(entry))
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.debug("skipping malformed %s entry: %r", key, entry)
    return tuple(items)


def _parse_single(raw: Any, item_cls: Any, key: str) -> Any:
    if not isinstance(raw, dict):
        return None
    try:
        return item_cls.from_dict(raw)
    except (AttributeError, KeyError, TypeError, ValueError):
        logger.debug("skipping malformed %s object: %r", key, raw)
        return None


class MetadataCodec:
    """Serialise, parse and query metadata documents.

    Args:
        cache: Containment cache for ``contains_family``. A private cache is
            created when omitted.
    """

    def __init__(self, cache: ContainmentCache | None = None) -> None:
        self.cache = cache if cache is not None else ContainmentCache()

    # -- encode / decode ----------------------------------------------------

    def to_dict(self, document: MetadataDocument) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, attr, _cls in LIST_FAMILIES:
            items = getattr(document, attr)
            if items:
                out[key] = [item.to_dict() for item in items]
        if document.env is not None and document.env.detections:
            out["env"] = document.env.to_dict()
        if document.prose is not None:
            out["prose"] = document.prose.to_dict()
        if document.encoding is not None:
            out["encoding"] = document.encoding.to_dict()
        return out

    def serialize(self, document: MetadataDocument) -> str:
        """JSON text for *document*; the empty document becomes ``""``."""
        data = self.to_dict(document)
        if not data:
            return ""
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))

    def parse(self, json_str: str | None) -> MetadataDocument:
        """Parse stored JSON. Unknown keys are ignored; malformed input yields an empty document."""
        if not json_str:
            return _EMPTY
        try:
            data = json.loads(json_str)
        except ValueError:
            logger.debug("metadata is not valid JSON; treating as empty")
            return _EMPTY
        if not isinstance(data, dict):
            return _EMPTY

        fields: dict[str, Any] = {}
        for key, attr, cls in LIST_FAMILIES:
            if key in data:
                fields[attr] = _parse_items(data[key], cls, key)
        env = _parse_single(data.get("env"), EnvOutput, "env")
        if env is not None and env.detections:
            fields["env"] = env
        fields["prose"] = _parse_single(data.get("prose"), ProseDetection, "prose")
        fields["encoding"] = _parse_single(data.get("encoding"), EncodingInfo, "encoding")
        return MetadataDocument(**fields)

    # -- queries ------------------------------------------------------------

    def contains_family(self, content_type: ContentType, json_str: str | None) -> bool:
        """True when *json_str* holds at least one item of *content_type*'s family."""
        key = FAMILY_KEYS.get(content_type)
        if key is None or not json_str:
            return False
        if f'"{key}"' not in json_str:
            return False

        mask = self.cache.get(json_str)
        if mask is None:
            mask = self._mask(self.parse(json_str))
            self.cache.put(json_str, mask)
        return bool(mask & _MASK_BITS[content_type])

    def _mask(self, document: MetadataDocument) -> int:
        mask = 0
        for content_type in FAMILY_KEYS:
            if self._items(content_type, document):
                mask |= _MASK_BITS[content_type]
        return mask

    @staticmethod
    def _items(content_type: ContentType, document: MetadataDocument) -> tuple[Any, ...]:
        if content_type in (ContentType.ENV_VAR, ContentType.ENV_VAR_BLOCK):
            env = document.env
            if env is None or (content_type is ContentType.ENV_VAR_BLOCK and not env.is_block):
                return ()
            return env.detections
        if content_type is ContentType.PROSE:
            return (document.prose,) if document.prose is not None else ()
        for key, attr, _cls in LIST_FAMILIES:
            if FAMILY_KEYS.get(content_type) == key:
                return getattr(document, attr)
        return ()

    def count_items(self, content_type: ContentType, json_str: str | None) -> int:
        if content_type is ContentType.PROSE or content_type not in FAMILY_KEYS:
            return 0
        return len(self._items(content_type, self.parse(json_str)))

    def extract_values(
        self,
        content_type: ContentType,
        json_str: str | None,
        limit: int | None = None,
    ) -> list[ExtractedValue]:
        """Values of one family in document order, at most *limit* of them."""
        if limit is not None and limit <= 0:
            return []
        values = self._values(content_type, self.parse(json_str))
        return values if limit is None else values[:limit]

    def extract_all(self, json_str: str | None, limit: int | None = None) -> list[ExtractedValue]:
        """Interleave all families round-robin in ``EXTRACT_ORDER``; stop at *limit* overall."""
        if limit is not None and limit <= 0:
            return []
        document = self.parse(json_str)
        columns = [self._values(ct, document) for ct in EXTRACT_ORDER]
        out: list[ExtractedValue] = []
        depth = max((len(c) for c in columns), default=0)
        for i in range(depth):
            for column in columns:
                if i < len(column):
                    out.append(column[i])
                    if limit is not None and len(out) >= limit:
                        return out
        return out

    def _values(self, content_type: ContentType, document: MetadataDocument) -> list[ExtractedValue]:
        items = self._items(content_type, document)
        return [_to_value(content_type, item) for item in items] if content_type is not ContentType.PROSE else []


def _to_value(content_type: ContentType, item: Any) -> ExtractedValue:
    if isinstance(item, UrlDetection):
        return ExtractedValue(content_type, item.url, item.domain or item.url)
    if isinstance(item, IpAddressDetection):
        display = f"{item.address} ({item.version.upper()})" if item.version else item.address
        return ExtractedValue(content_type, item.address, display)
    if isinstance(item, HashDetection):
        return ExtractedValue(content_type, item.hash, f"{item.kind.upper()}: {item.hash}")
    if isinstance(item, ApiKeyDetection):
        display = f"{item.provider}: {item.key}" if item.provider else item.key
        return ExtractedValue(content_type, item.key, display)
    if isinstance(item, JwtDetection):
        return ExtractedValue(content_type, item.token, "JWT (expired)" if item.is_expired else "JWT")
    if isinstance(item, ShellCommandDetection):
        display = f"{item.executable}: {item.command}" if item.executable else item.command
        return ExtractedValue(content_type, item.command, display)
    if isinstance(item, CodeDetection):
        return ExtractedValue(content_type, item.language.value, item.language.value.upper())
    if isinstance(item, EnvVarDetection):
        text = f"{item.key}={item.value}" if item.value else item.key
        return ExtractedValue(ContentType.ENV_VAR, text, text)
    return ExtractedValue(content_type, item.value, item.value)
