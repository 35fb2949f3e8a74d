"""Shared metadata record mutated by annotation expansion."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import re
from typing import Any, Dict, List, Optional

_PARAM_PATTERN = re.compile(r"/\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class RouteDef:
    """One routing table entry contributed by a controller method."""

    method: str
    path: str
    function: str
    name: Optional[str] = None


@dataclass(frozen=True)
class ColumnDef:
    """Column mapping contributed by a model property."""

    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    auto_increment: bool = False
    default: Any = None


@dataclass(frozen=True)
class RelationDef:
    """Relationship between two model classes."""

    kind: str
    name: str
    target_class: str
    foreign_key: str
    through: Optional[str] = None
    on_delete: Optional[str] = None


@dataclass
class ClassDescriptor:
    """Metadata accumulated for one class during an expansion pass.

    Annotation kinds append routes, columns and relations, or set scalar
    attributes. Anything else goes through :meth:`set` / :meth:`get`.
    """

    class_name: str
    routes_prefix: str = ""
    table: Optional[str] = None
    source: Optional[str] = None
    primary_key: Optional[str] = None
    routes: List[RouteDef] = field(default_factory=list)
    columns: List[ColumnDef] = field(default_factory=list)
    relations: List[RelationDef] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)

    def add_route(self, route: RouteDef) -> None:
        self.routes.append(route)

    def add_column(self, column: ColumnDef) -> None:
        self.columns.append(column)
        if column.primary_key:
            self.primary_key = column.name

    def add_relation(self, relation: RelationDef) -> None:
        self.relations.append(relation)

    def column(self, name: str) -> Optional[ColumnDef]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def set(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_path(path: str) -> str:
    """Return a canonical route path, rewriting ``$param`` segments to ``{param}``."""
    if not path:
        return "/"
    result = path.strip()
    if not result.startswith("/"):
        result = "/" + result
    result = _PARAM_PATTERN.sub(r"/{\1}", result)
    result = re.sub(r"/{2,}", "/", result)
    if len(result) > 1 and result.endswith("/"):
        result = result[:-1]
    return result or "/"


def join_paths(prefix: str, route: str) -> str:
    """Combine a class-level prefix with a method-level route.

    Routes that start with ``/`` are absolute and ignore the prefix.
    """
    if route.startswith("/") or not prefix:
        return normalize_path(route)
    return normalize_path(f"{normalize_path(prefix)}/{route}")


__all__ = [
    "ClassDescriptor",
    "ColumnDef",
    "RelationDef",
    "RouteDef",
    "join_paths",
    "normalize_path",
]
