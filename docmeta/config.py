"""Configuration loading for docmeta (.docmeta.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docmeta.yml"


class ConfigError(RuntimeError):
    """Raised when a configuration or manifest file cannot be parsed."""


@dataclass
class AnnotationConfig:
    """Which annotation kinds to register at startup.

    ``enabled`` of ``None`` registers every built-in kind.
    """

    enabled: Optional[List[str]] = None
    modules: List[str] = field(default_factory=list)
    entry_points: bool = True


@dataclass
class LoggingConfig:
    verbose: bool = False
    file: Optional[Path] = None


@dataclass
class DocMetaConfig:
    """Represents the settings defined in .docmeta.yml."""

    root: Path
    annotations: AnnotationConfig = field(default_factory=AnnotationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path) -> DocMetaConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocMetaConfig(root=root)

    data = read_yaml(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    annotations = AnnotationConfig()
    annotation_data = _as_dict(data.get("annotations"))
    if annotation_data:
        if "enabled" in annotation_data and annotation_data["enabled"] is not None:
            annotations.enabled = _as_str_list(annotation_data.get("enabled"))
        annotations.modules = _as_str_list(annotation_data.get("modules"))
        entry_points = _as_bool(annotation_data.get("entry_points"))
        if entry_points is not None:
            annotations.entry_points = entry_points

    logging_config = LoggingConfig()
    logging_data = _as_dict(data.get("logging"))
    if logging_data:
        logging_config.verbose = _as_bool(logging_data.get("verbose")) or False
        log_file = logging_data.get("file")
        if isinstance(log_file, str) and log_file.strip():
            logging_config.file = root / log_file.strip()

    return DocMetaConfig(root=root, annotations=annotations, logging=logging_config)


def read_yaml(path: Path) -> Any:
    """Return the parsed YAML document at ``path``; empty files yield ``{}``."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AnnotationConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DocMetaConfig",
    "LoggingConfig",
    "load_config",
    "read_yaml",
]
