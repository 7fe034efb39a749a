"""File path detector: POSIX, home-relative and Windows drive paths."""

from __future__ import annotations

import concurrent.futures
import logging
import os
import re
from collections.abc import Callable
from pathlib import PurePosixPath

from clipsift.detectors.base import BaseDetector
from clipsift.models import FilePathDetection

logger = logging.getLogger(__name__)

_WINDOWS_RE: re.Pattern[str] = re.compile(
    r"(?<![A-Z0-9_])([A-Z]:\\[^\s\"'<>|]+|[A-Z]:/[^\s\"'<>|]+)",
    re.IGNORECASE,
)
# The first look-behind keeps the "/..." tail of "C:/..." out of the POSIX scan;
# a preceding "/" keeps the tail of "scheme://..." out.
_POSIX_RE: re.Pattern[str] = re.compile(
    r"(?<![A-Za-z]:)(?<![A-Za-z0-9_\-/])((?:~|\.{1,2})?/[^\s\"']+)"
)

_TRIM_CHARS = ",.;:()[]{}<>\"'"
# Leading "." and "~" belong to relative and home paths.
_LEAD_TRIM_CHARS = "([{<\"'"

DEFAULT_STAT_TIMEOUT = 0.05

# Shared by all detector instances; stats are short and bounded by the timeout.
_STAT_POOL = concurrent.futures.ThreadPoolExecutor(max_workers=2, thread_name_prefix="clipsift-stat")

# ---------------------------------------------------------------------------
# File type tables
# ---------------------------------------------------------------------------

_FILE_TYPES: tuple[tuple[str, frozenset[str]], ...] = (
    ("image", frozenset({
        "png", "jpg", "jpeg", "gif", "bmp", "tiff", "tif", "webp", "heic", "heif",
        "svg", "ico", "icns", "raw", "cr2", "nef", "arw", "dng", "psd", "ai", "eps",
    })),
    ("video", frozenset({
        "mp4", "mov", "avi", "mkv", "wmv", "flv", "webm", "m4v", "mpeg", "mpg",
        "3gp", "ogv", "ts", "mts", "m2ts",
    })),
    ("audio", frozenset({
        "mp3", "wav", "aac", "flac", "ogg", "wma", "m4a", "aiff", "aif", "opus", "mid", "midi",
    })),
    ("document", frozenset({
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp",
        "rtf", "txt", "md", "markdown", "tex", "pages", "numbers", "key",
        "epub", "mobi", "azw", "csv",
    })),
    ("code", frozenset({
        "swift", "py", "js", "ts", "jsx", "tsx", "java", "kt", "c", "cpp", "h", "hpp",
        "cs", "go", "rs", "rb", "php", "pl", "sh", "bash", "zsh", "fish",
        "html", "htm", "css", "scss", "sass", "less", "json", "xml", "yaml", "yml",
        "toml", "ini", "conf", "config", "sql", "graphql", "proto", "thrift",
        "r", "m", "mm", "scala", "clj", "cljs", "erl", "ex", "exs", "hs", "ml",
        "vue", "svelte", "astro",
    })),
    ("archive", frozenset({
        "zip", "tar", "gz", "bz2", "xz", "7z", "rar", "dmg", "iso", "pkg", "deb", "rpm",
    })),
    ("data", frozenset({"db", "sqlite", "sqlite3", "mdb", "accdb", "json", "xml", "plist", "dat"})),
    ("executable", frozenset({"app", "exe", "msi", "bin", "command", "jar", "war", "apk", "ipa"})),
    ("font", frozenset({"ttf", "otf", "woff", "woff2", "eot"})),
)

_MIME_TYPES: dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",
    "webp": "image/webp",
    "heic": "image/heic",
    "heif": "image/heif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "psd": "image/vnd.adobe.photoshop",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "avi": "video/x-msvideo",
    "mkv": "video/x-matroska",
    "webm": "video/webm",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "ogg": "audio/ogg",
    "m4a": "audio/mp4",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "yaml": "application/x-yaml",
    "yml": "application/x-yaml",
    "zip": "application/zip",
    "tar": "application/x-tar",
    "gz": "application/gzip",
    "7z": "application/x-7z-compressed",
    "rar": "application/vnd.rar",
    "dmg": "application/x-apple-diskimage",
}


def classify_file_type(extension: str | None) -> str:
    if extension is None:
        return "other"
    for name, extensions in _FILE_TYPES:
        if extension in extensions:
            return name
    return "other"


def mime_type(extension: str | None) -> str | None:
    return _MIME_TYPES.get(extension) if extension else None


def _stat_exists(path: str, timeout: float) -> bool:
    """``os.path.exists`` bounded by *timeout* seconds; a slow stat reads as missing."""
    future = _STAT_POOL.submit(os.path.exists, path)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        logger.debug("stat timed out after %.3fs: %s", timeout, path)
        return False


class FilePathDetector(BaseDetector):
    """Find file paths and check whether they exist.

    Args:
        stat_timeout: Upper bound in seconds for each existence check.
        exists: Replacement existence check (tests, sandboxed hosts).
    """

    family = "filePaths"

    def __init__(
        self,
        stat_timeout: float = DEFAULT_STAT_TIMEOUT,
        exists: Callable[[str], bool] | None = None,
    ) -> None:
        self.stat_timeout = stat_timeout
        self._exists = exists

    def detect(self, text: str) -> list[FilePathDetection]:
        if "/" not in text and "\\" not in text:
            return []
        found = self._match(_WINDOWS_RE, text, windows=True)
        found.extend(self._match(_POSIX_RE, text, windows=False))

        seen: set[str] = set()
        out: list[FilePathDetection] = []
        for d in found:
            if d.path in seen:
                continue
            seen.add(d.path)
            out.append(d)
        return out

    def _match(self, pattern: re.Pattern[str], text: str, *, windows: bool) -> list[FilePathDetection]:
        results: list[FilePathDetection] = []
        for m in pattern.finditer(text):
            raw = m.group(1)
            lead = len(raw) - len(raw.lstrip(_LEAD_TRIM_CHARS))
            raw = raw.lstrip(_LEAD_TRIM_CHARS).rstrip(_TRIM_CHARS)
            if not raw.strip("/\\.~"):
                continue
            start = m.start(1) + lead

            if windows:
                path = raw
                probe = raw.replace("\\", "/")
            else:
                path = os.path.expanduser(raw) if raw.startswith("~") else raw
                probe = path

            name = PurePosixPath(probe).name
            suffix = PurePosixPath(probe).suffix
            extension = suffix[1:].lower() if len(suffix) > 1 else None
            exists = self._check(probe)

            results.append(
                FilePathDetection(
                    path=path,
                    exists=exists,
                    filename=name,
                    extension=extension,
                    file_type=classify_file_type(extension),
                    mime_type=mime_type(extension),
                    confidence=0.9 if exists else 0.7,
                    span=(start, start + len(raw)),
                )
            )
        return results

    def _check(self, path: str) -> bool:
        if self._exists is not None:
            return self._exists(path)
        return _stat_exists(path, self.stat_timeout)
