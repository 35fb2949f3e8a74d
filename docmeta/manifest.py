"""Load class manifests: documented classes and members described in YAML.

A manifest stands in for a reflection layer. It lists each class with its
doc comment, source location and ancestors, followed by its documented
members::

    classes:
      - name: UsersController
        file: app/users.py
        line: 3
        ancestors: [Controller]
        comment: "!RoutesPrefix users/"
        members:
          - kind: method
            name: show
            line: 12
            comment: "!Route GET, $id"
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .config import ConfigError, read_yaml
from .descriptor import ClassDescriptor
from .models import Target, TargetKind
from .processor import ClassSource, ElementSource


def load_manifest(path: Path) -> List[ClassSource]:
    """Read the manifest at ``path``."""
    if not path.exists():
        raise ConfigError(f"Manifest not found: {path}")
    return parse_manifest(read_yaml(path), default_file=str(path))


def parse_manifest(data: Any, *, default_file: Optional[str] = None) -> List[ClassSource]:
    """Build class sources from already-loaded manifest data."""
    if isinstance(data, Mapping):
        entries = data.get("classes", [])
    else:
        entries = data
    if not isinstance(entries, list):
        raise ConfigError("Manifest must contain a list of classes")
    return [_class_source(entry, default_file) for entry in entries]


def _class_source(entry: Any, default_file: Optional[str]) -> ClassSource:
    if not isinstance(entry, Mapping):
        raise ConfigError("Each manifest class must be a mapping")
    class_name = _required_str(entry, "name", "class")
    file = _optional_str(entry.get("file")) or default_file
    ancestors = tuple(str(item) for item in entry.get("ancestors") or ())
    target = Target.for_class(
        class_name,
        file=file,
        line=_optional_int(entry.get("line")),
        ancestors=ancestors,
    )
    members_data = entry.get("members") or []
    if not isinstance(members_data, list):
        raise ConfigError(f'Members of class "{class_name}" must be a list')
    members = [
        _member_source(member, class_name, file, ancestors) for member in members_data
    ]
    return ClassSource(target=target, comment=_comment(entry), members=members)


def _member_source(
    entry: Any, class_name: str, file: Optional[str], ancestors: tuple[str, ...]
) -> ElementSource:
    if not isinstance(entry, Mapping):
        raise ConfigError(f'Members of class "{class_name}" must be mappings')
    name = _required_str(entry, "name", f'member of "{class_name}"')
    try:
        kind = TargetKind.parse(str(entry.get("kind", "")))
    except ValueError as exc:
        raise ConfigError(f'Member "{class_name}.{name}": {exc}') from exc
    if kind is TargetKind.CLASS:
        raise ConfigError(f'Member "{class_name}.{name}" must be a method or a property')
    target = Target(
        kind=kind,
        class_name=class_name,
        name=name,
        file=_optional_str(entry.get("file")) or file,
        line=_optional_int(entry.get("line")),
        ancestors=ancestors,
    )
    return ElementSource(target=target, comment=_comment(entry))


def _comment(entry: Mapping[str, Any]) -> str:
    value = entry.get("comment", "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"Comment must be a string, got {type(value).__name__}")
    return value


def _required_str(entry: Mapping[str, Any], key: str, what: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Missing '{key}' for {what}")
    return value.strip()


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int)) and str(value).strip() else None


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def descriptors_to_dict(descriptors: List[ClassDescriptor]) -> Dict[str, Any]:
    return {descriptor.class_name: descriptor.to_dict() for descriptor in descriptors}


__all__ = ["descriptors_to_dict", "load_manifest", "parse_manifest"]
