"""clipsift configuration loader.

Priority (high → low):
  1. CLI flags           (handled at the call site, not in this module)
  2. Environment variables  (CLIPSIFT_EXTRACT_CONTENT, CLIPSIFT_SKIP_API_KEYS)
  3. Per-project clipsift.yaml
  4. Global ~/.clipsift/config.yaml
  5. Hardcoded defaults

All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from clipsift.cache import ContainmentCache
from clipsift.capture import CapturePolicy
from clipsift.classifier import ContentClassifier
from clipsift.detectors import FilePathDetector
from clipsift.encoding import EncodingResolver
from clipsift.metadata import MetadataCodec

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".clipsift"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "clipsift.yaml"

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["capture", "encoding", "extraction", "file_paths", "metadata"]
)

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
_FALSE_VALUES = frozenset(["0", "false", "no", "off"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file or override contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class CaptureCfg:
    """Capture policy flags (clipsift.yaml: capture:)."""

    extract_content: bool = True
    skip_api_keys: bool = False


@dataclass
class EncodingCfg:
    """Encoding resolver tuning (clipsift.yaml: encoding:)."""

    max_rounds: int = 3
    min_printable_ratio: float = 0.85


@dataclass
class ExtractionCfg:
    """Classifier bounds (clipsift.yaml: extraction:).

    Attributes:
        max_items: Maximum number of extracted child records per capture.
        max_input_chars: Longer analysis subjects are truncated before scanning.
    """

    max_items: int = 20
    max_input_chars: int = 100_000


@dataclass
class FilePathsCfg:
    """File-path existence probe (clipsift.yaml: file_paths:)."""

    stat_timeout: float = 0.05  # seconds


@dataclass
class MetadataCfg:
    """Metadata codec (clipsift.yaml: metadata:)."""

    cache_capacity: int = 512


@dataclass
class ClipsiftConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    capture: CaptureCfg = field(default_factory=CaptureCfg)
    encoding: EncodingCfg = field(default_factory=EncodingCfg)
    extraction: ExtractionCfg = field(default_factory=ExtractionCfg)
    file_paths: FilePathsCfg = field(default_factory=FilePathsCfg)
    metadata: MetadataCfg = field(default_factory=MetadataCfg)

    def policy(self) -> CapturePolicy:
        return CapturePolicy(
            extract_content=self.capture.extract_content,
            skip_api_keys=self.capture.skip_api_keys,
        )

    def build_classifier(self) -> ContentClassifier:
        """Construct a ContentClassifier wired with this configuration."""
        return ContentClassifier(
            resolver=EncodingResolver(
                max_rounds=self.encoding.max_rounds,
                min_printable_ratio=self.encoding.min_printable_ratio,
            ),
            file_path_detector=FilePathDetector(stat_timeout=self.file_paths.stat_timeout),
            codec=MetadataCodec(ContainmentCache(self.metadata.cache_capacity)),
            max_extracted_items=self.extraction.max_items,
            max_input_chars=self.extraction.max_input_chars,
        )


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}'; ignored.",
                UserWarning,
                stacklevel=4,
            )


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (true/false), got {value!r}")


def _as_int(value: Any, name: str, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if number < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {number}")
    return number


def _as_float(value: Any, name: str, low: float, high: float | None = None) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if number < low or (high is not None and number > high):
        bounds = f"in [{low}, {high}]" if high is not None else f">= {low}"
        raise ConfigError(f"{name} must be {bounds}, got {number}")
    return number


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    raw = data.get(name) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping, got {type(raw).__name__}")
    return raw


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> ClipsiftConfig:
    """Build a *ClipsiftConfig* from a merged raw YAML dict."""
    cfg = ClipsiftConfig()

    if "capture" in data:
        c = _section(data, "capture")
        cfg.capture = CaptureCfg(
            extract_content=_as_bool(c.get("extract_content", cfg.capture.extract_content), "capture.extract_content"),
            skip_api_keys=_as_bool(c.get("skip_api_keys", cfg.capture.skip_api_keys), "capture.skip_api_keys"),
        )

    if "encoding" in data:
        e = _section(data, "encoding")
        cfg.encoding = EncodingCfg(
            max_rounds=_as_int(e.get("max_rounds", cfg.encoding.max_rounds), "encoding.max_rounds", 0),
            min_printable_ratio=_as_float(
                e.get("min_printable_ratio", cfg.encoding.min_printable_ratio),
                "encoding.min_printable_ratio",
                0.0,
                1.0,
            ),
        )

    if "extraction" in data:
        x = _section(data, "extraction")
        cfg.extraction = ExtractionCfg(
            max_items=_as_int(x.get("max_items", cfg.extraction.max_items), "extraction.max_items", 0),
            max_input_chars=_as_int(
                x.get("max_input_chars", cfg.extraction.max_input_chars), "extraction.max_input_chars", 1
            ),
        )

    if "file_paths" in data:
        f = _section(data, "file_paths")
        cfg.file_paths = FilePathsCfg(
            stat_timeout=_as_float(
                f.get("stat_timeout", cfg.file_paths.stat_timeout), "file_paths.stat_timeout", 0.0
            ),
        )

    if "metadata" in data:
        m = _section(data, "metadata")
        cfg.metadata = MetadataCfg(
            cache_capacity=_as_int(
                m.get("cache_capacity", cfg.metadata.cache_capacity), "metadata.cache_capacity", 1
            ),
        )

    return cfg


def _apply_env_overrides(cfg: ClipsiftConfig) -> ClipsiftConfig:
    """Apply CLIPSIFT_* environment variable overrides (layer 2)."""
    if (value := os.environ.get("CLIPSIFT_EXTRACT_CONTENT")) is not None:
        cfg.capture.extract_content = _as_bool(value, "CLIPSIFT_EXTRACT_CONTENT")
    if (value := os.environ.get("CLIPSIFT_SKIP_API_KEYS")) is not None:
        cfg.capture.skip_api_keys = _as_bool(value, "CLIPSIFT_SKIP_API_KEYS")
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file '{path}' is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ClipsiftConfig:
    """Load and return a merged *ClipsiftConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *clipsift.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *ClipsiftConfig* with env var overrides applied.

    Raises:
        ConfigError: If a config file is not a YAML mapping or holds an
            out-of-range value, or an env override is not a boolean.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    return _apply_env_overrides(cfg)


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.clipsift/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).

    Args:
        global_config_path: Override path (for testing).

    Returns:
        Path to the global config file.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# clipsift global configuration.\n"
            "# Per-project overrides go in ./clipsift.yaml.\n"
            "\n"
            "capture:\n"
            "  extract_content: true\n"
            "  skip_api_keys: false\n"
            "\n"
            "encoding:\n"
            "  max_rounds: 3\n"
            "  min_printable_ratio: 0.85\n"
            "\n"
            "extraction:\n"
            "  max_items: 20\n"
            "  max_input_chars: 100000\n"
            "\n"
            "file_paths:\n"
            "  stat_timeout: 0.05\n"
            "\n"
            "metadata:\n"
            "  cache_capacity: 512\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
