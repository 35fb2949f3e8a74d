"""Annotation kinds, the registry and registry population."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Type

from ..config import AnnotationConfig
from ..logging import get_logger
from .base import Annotation, AnnotationState, ApplicabilityError, Case, Field
from .orm import (
    BelongsToAnnotation,
    ColumnAnnotation,
    HasManyAnnotation,
    SourceAnnotation,
    TableAnnotation,
)
from .registry import (
    AnnotationRegistry,
    discover_entry_point_annotations,
    load_module_annotations,
)
from .routing import RouteAnnotation, RoutesPrefixAnnotation

logger = get_logger("annotations")

BUILTIN_ANNOTATIONS: Dict[str, Type[Annotation]] = {
    kind.identifier().lower(): kind
    for kind in (
        RouteAnnotation,
        RoutesPrefixAnnotation,
        TableAnnotation,
        SourceAnnotation,
        ColumnAnnotation,
        HasManyAnnotation,
        BelongsToAnnotation,
    )
}


def default_registry() -> AnnotationRegistry:
    """Return a frozen registry holding every built-in annotation kind."""
    return AnnotationRegistry(BUILTIN_ANNOTATIONS.values()).freeze()


def build_registry(config: Optional[AnnotationConfig] = None) -> AnnotationRegistry:
    """Populate a registry from configuration and freeze it.

    Built-ins come first, then configured modules, then entry-point plugins,
    so plugins may replace a built-in kind of the same name.
    """
    config = config or AnnotationConfig()
    registry = AnnotationRegistry()

    for kind in _select_builtins(config.enabled):
        registry.register(kind)
    for module_name in config.modules:
        load_module_annotations(module_name, registry)
    if config.entry_points:
        for kind in discover_entry_point_annotations():
            registry.register(kind)

    logger.debug("Annotation registry ready with %d kinds", len(registry))
    return registry.freeze()


def _select_builtins(enabled: Optional[Sequence[str]]) -> list[Type[Annotation]]:
    if enabled is None:
        return list(BUILTIN_ANNOTATIONS.values())
    requested = [name.strip().lower() for name in enabled]
    missing = sorted({name for name in requested if name not in BUILTIN_ANNOTATIONS})
    if missing:
        raise ValueError(f"Unknown annotations requested: {', '.join(missing)}")
    return [BUILTIN_ANNOTATIONS[name] for name in dict.fromkeys(requested)]


__all__ = [
    "Annotation",
    "AnnotationRegistry",
    "AnnotationState",
    "ApplicabilityError",
    "BUILTIN_ANNOTATIONS",
    "BelongsToAnnotation",
    "Case",
    "ColumnAnnotation",
    "Field",
    "HasManyAnnotation",
    "RouteAnnotation",
    "RoutesPrefixAnnotation",
    "SourceAnnotation",
    "TableAnnotation",
    "build_registry",
    "default_registry",
]
