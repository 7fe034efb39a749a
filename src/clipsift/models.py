"""Domain models for the clipsift classification engine.

Every family detection is a small frozen dataclass that knows how to turn
itself into (and back from) its wire object inside the metadata document.
Wire keys are camelCase to stay compatible with stored documents.
"""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

Span = tuple[int, int]


class ContentType(str, Enum):
    """Primary content type of a record; values are the stored wire names."""

    TEXT = "text"
    EMAIL = "email"
    PHONE_NUMBER = "phoneNumber"
    IP_ADDRESS = "ipAddress"
    UUID = "uuid"
    HASH = "hash"
    JWT = "jwt"
    API_KEY = "apiKey"
    ENV_VAR = "envVar"
    ENV_VAR_BLOCK = "envVarBlock"
    PROSE = "prose"
    IMAGE = "image"
    SCREENSHOT = "screenshot"
    FILE_PATH = "filePath"
    URL = "url"
    CODE = "code"
    SHELL_COMMAND = "shellCommand"
    UNKNOWN = "unknown"


class CodeLanguage(str, Enum):
    SWIFT = "swift"
    PYTHON = "python"
    JAVASCRIPT = "javaScript"
    TYPESCRIPT = "typeScript"
    GO = "go"
    RUST = "rust"
    JAVA = "java"
    C_CPP = "cCpp"
    RUBY = "ruby"
    SQL = "sql"
    JSON = "json"
    YAML = "yaml"
    HTML = "html"
    CSS = "css"
    SHELL = "shell"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Family detections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmailDetection:
    email: str
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.email

    def to_dict(self) -> dict[str, Any]:
        return {"email": self.email, "confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmailDetection:
        return cls(email=str(data["email"]), confidence=float(data.get("confidence", 0.0)))


@dataclass(frozen=True)
class UrlDetection:
    url: str
    domain: str
    category: str
    confidence: float
    hot_count: int = 1
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.url

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "domain": self.domain,
            "category": self.category,
            "hotCount": self.hot_count,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UrlDetection:
        return cls(
            url=str(data["url"]),
            domain=str(data.get("domain", "")),
            category=str(data.get("category", "other")),
            confidence=float(data.get("confidence", 0.0)),
            hot_count=int(data.get("hotCount", 1)),
        )


@dataclass(frozen=True)
class PhoneNumberDetection:
    number: str
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.number

    def to_dict(self) -> dict[str, Any]:
        return {"number": self.number, "confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PhoneNumberDetection:
        return cls(number=str(data["number"]), confidence=float(data.get("confidence", 0.0)))


@dataclass(frozen=True)
class IpAddressDetection:
    address: str
    version: str  # v4 | v6
    is_private: bool
    is_loopback: bool
    is_link_local: bool
    is_multicast: bool
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.address

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "version": self.version,
            "isPrivate": self.is_private,
            "isLoopback": self.is_loopback,
            "isLinkLocal": self.is_link_local,
            "isMulticast": self.is_multicast,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IpAddressDetection:
        return cls(
            address=str(data["address"]),
            version=str(data.get("version", "")),
            is_private=bool(data.get("isPrivate", False)),
            is_loopback=bool(data.get("isLoopback", False)),
            is_link_local=bool(data.get("isLinkLocal", False)),
            is_multicast=bool(data.get("isMulticast", False)),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class UuidDetection:
    uuid: str
    version: int | None
    variant: str
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.uuid

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "uuid": self.uuid,
            "variant": self.variant,
            "confidence": self.confidence,
        }
        if self.version is not None:
            out["version"] = self.version
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UuidDetection:
        version = data.get("version")
        return cls(
            uuid=str(data["uuid"]),
            version=int(version) if version is not None else None,
            variant=str(data.get("variant", "unknown")),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class HashDetection:
    hash: str
    kind: str
    bits: int
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.hash

    def to_dict(self) -> dict[str, Any]:
        return {"hash": self.hash, "kind": self.kind, "bits": self.bits, "confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HashDetection:
        return cls(
            hash=str(data["hash"]),
            kind=str(data.get("kind", "hash")),
            bits=int(data.get("bits", 0)),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class ApiKeyDetection:
    key: str
    provider: str
    confidence: float
    is_likely_live: bool = True
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.key

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "provider": self.provider,
            "isLikelyLive": self.is_likely_live,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApiKeyDetection:
        return cls(
            key=str(data["key"]),
            provider=str(data.get("provider", "")),
            confidence=float(data.get("confidence", 0.0)),
            is_likely_live=bool(data.get("isLikelyLive", True)),
        )


@dataclass(frozen=True)
class JwtClaims:
    sub: str | None = None
    iss: str | None = None
    iat: float | None = None  # seconds since epoch
    exp: float | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.exp is not None:
            out["exp"] = self.exp
        if self.iat is not None:
            out["iat"] = self.iat
        if self.sub is not None:
            out["sub"] = self.sub
        if self.iss is not None:
            out["iss"] = self.iss
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JwtClaims:
        return cls(
            sub=data.get("sub"),
            iss=data.get("iss"),
            iat=float(data["iat"]) if data.get("iat") is not None else None,
            exp=float(data["exp"]) if data.get("exp") is not None else None,
        )


@dataclass(frozen=True)
class JwtDetection:
    token: str
    header_json: str
    payload_json: str
    claims: JwtClaims
    is_expired: bool | None
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.token

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "token": self.token,
            "headerJSON": self.header_json,
            "payloadJSON": self.payload_json,
            "claims": self.claims.to_dict(),
            "confidence": self.confidence,
        }
        if self.is_expired is not None:
            out["isExpired"] = self.is_expired
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JwtDetection:
        is_expired = data.get("isExpired")
        return cls(
            token=str(data.get("token", "")),
            header_json=str(data.get("headerJSON", "{}")),
            payload_json=str(data.get("payloadJSON", "{}")),
            claims=JwtClaims.from_dict(data.get("claims") or {}),
            is_expired=bool(is_expired) if is_expired is not None else None,
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class EnvVarDetection:
    key: str
    value: str
    is_exported: bool
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def assignment(self) -> str:
        """``KEY=value`` (prefixed with ``export`` when exported)."""
        base = f"{self.key}={self.value}"
        return f"export {base}" if self.is_exported else base

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "isExported": self.is_exported,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnvVarDetection:
        return cls(
            key=str(data["key"]),
            value=str(data.get("value", "")),
            is_exported=bool(data.get("isExported", False)),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class EnvOutput:
    """Result of the environment-variable family: assignments plus block flag."""

    detections: tuple[EnvVarDetection, ...]
    is_block: bool

    @property
    def confidence(self) -> float:
        return max((d.confidence for d in self.detections), default=0.0)

    def to_dict(self) -> dict[str, Any]:
        return {"isBlock": self.is_block, "vars": [d.to_dict() for d in self.detections]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnvOutput:
        return cls(
            detections=tuple(EnvVarDetection.from_dict(v) for v in data.get("vars", [])),
            is_block=bool(data.get("isBlock", False)),
        )


@dataclass(frozen=True)
class FilePathDetection:
    path: str
    exists: bool
    filename: str
    extension: str | None
    file_type: str
    mime_type: str | None
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.path

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "path": self.path,
            "exists": self.exists,
            "filename": self.filename,
            "fileType": self.file_type,
            "confidence": self.confidence,
        }
        if self.extension is not None:
            out["extension"] = self.extension
        if self.mime_type is not None:
            out["mimeType"] = self.mime_type
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilePathDetection:
        return cls(
            path=str(data["path"]),
            exists=bool(data.get("exists", False)),
            filename=str(data.get("filename", "")),
            extension=data.get("extension"),
            file_type=str(data.get("fileType", "other")),
            mime_type=data.get("mimeType"),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class ShellCommandDetection:
    command: str
    executable: str
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.command

    def to_dict(self) -> dict[str, Any]:
        return {"command": self.command, "executable": self.executable, "confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ShellCommandDetection:
        return cls(
            command=str(data["command"]),
            executable=str(data.get("executable", "")),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class CodeDetection:
    code: str
    language: CodeLanguage
    confidence: float
    span: Span = field(default=(0, 0), compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.language.value

    def to_dict(self) -> dict[str, Any]:
        # The snippet itself is the record content; only the language is stored.
        return {"language": self.language.value, "confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CodeDetection:
        try:
            language = CodeLanguage(data.get("language", "unknown"))
        except ValueError:
            language = CodeLanguage.UNKNOWN
        return cls(code="", language=language, confidence=float(data.get("confidence", 0.0)))


@dataclass(frozen=True)
class ProseDetection:
    word_count: int
    estimated_reading_time_seconds: int
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "wordCount": self.word_count,
            "estimatedReadingTimeSeconds": self.estimated_reading_time_seconds,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProseDetection:
        return cls(
            word_count=int(data.get("wordCount", 0)),
            estimated_reading_time_seconds=int(data.get("estimatedReadingTimeSeconds", 0)),
            confidence=float(data.get("confidence", 0.0)),
        )


# ---------------------------------------------------------------------------
# Classification output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SplitEntry:
    """One independent record produced from an environment-variable block."""

    content: str
    content_type: ContentType
    metadata: str = ""


@dataclass(frozen=True)
class ExtractedItem:
    """A sub-entity that becomes a child record of the classified capture."""

    content: str
    content_type: ContentType
    metadata: str = ""


@dataclass(frozen=True)
class ClassificationOutput:
    primary_type: ContentType
    confidence: float
    metadata: str = ""
    split_entries: tuple[SplitEntry, ...] = ()
    extracted_items: tuple[ExtractedItem, ...] = ()
    decoded: Any = None  # encoding.DecodeResult | None

    @property
    def is_split(self) -> bool:
        return bool(self.split_entries)


# ---------------------------------------------------------------------------
# Records handed to the store
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ClipboardEntry:
    content: str
    content_type: ContentType
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=_utcnow)
    source_app: str | None = None
    metadata: str = ""
    parent_entry_id: str | None = None
    raw_data: bytes | None = None
    copy_count: int = 1

    @property
    def is_extracted(self) -> bool:
        return self.parent_entry_id is not None

    @property
    def content_hash(self) -> str:
        if self.content_type in (ContentType.IMAGE, ContentType.SCREENSHOT) and self.raw_data:
            return hashlib.sha256(self.raw_data).hexdigest()
        return hashlib.sha256(self.content.encode("utf-8")).hexdigest()
