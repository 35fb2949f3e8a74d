"""Annotation registry and plugin discovery."""

from __future__ import annotations

import importlib
from importlib import metadata
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Type

from ..errors import RegistryFrozenError, UnknownAnnotationError
from ..logging import get_logger
from ..models import ParameterList
from .base import Annotation

_ENTRY_POINT_GROUP = "docmeta.annotations"
_SUFFIX = "Annotation"

logger = get_logger("registry")


class AnnotationRegistry:
    """Maps ``<Identifier>Annotation`` names to annotation kinds.

    Populate it once, call :meth:`freeze`, then share it read-only with
    parsers and processors. Each registry is independent, so tests can build
    their own.
    """

    def __init__(self, kinds: Iterable[Type[Annotation]] = ()) -> None:
        self._kinds: Dict[str, Type[Annotation]] = {}
        self._frozen = False
        for kind in kinds:
            self.register(kind)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, kind: Type[Annotation]) -> Type[Annotation]:
        """Register ``kind`` under its canonical name; usable as a class decorator.

        Registering the same name again replaces the earlier kind.
        """
        if self._frozen:
            raise RegistryFrozenError(
                f'Cannot register "{kind.__name__}": the annotation registry is frozen.',
                annotation=kind.__name__,
            )
        if not (isinstance(kind, type) and issubclass(kind, Annotation)):
            raise TypeError(f"{kind!r} is not an Annotation subclass")
        if not int(getattr(kind, "applies_to", 0)):
            raise ValueError(f"{kind.__name__} must apply to at least one element kind")
        name = kind.canonical_name()
        if not name.endswith(_SUFFIX) or name == _SUFFIX:
            raise ValueError(
                f'Annotation class "{name}" must be named <Identifier>{_SUFFIX} so that '
                f"!{name} can be looked up"
            )
        if name in self._kinds and self._kinds[name] is not kind:
            logger.debug("Replacing annotation %s", name)
        self._kinds[name] = kind
        logger.debug("Registered annotation %s", name)
        return kind

    def freeze(self) -> "AnnotationRegistry":
        self._frozen = True
        return self

    def lookup(self, name: str) -> Type[Annotation]:
        """Return the kind for directive ``!name``."""
        kind = self._kinds.get(f"{name}Annotation")
        if kind is None:
            raise UnknownAnnotationError(
                f'Unknown annotation: "{name}". It must be registered before use, '
                f"for example with registry.register({name}Annotation).",
                annotation=name,
            )
        return kind

    def create(self, name: str, parameters: Optional[ParameterList] = None) -> Annotation:
        return self.lookup(name)(parameters)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and f"{name}Annotation" in self._kinds

    def __iter__(self) -> Iterator[Type[Annotation]]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)

    def names(self) -> List[str]:
        return [kind.identifier() for kind in self._kinds.values()]


def load_module_annotations(module_name: str, registry: AnnotationRegistry) -> None:
    """Import ``module_name`` and add its annotation kinds to ``registry``.

    The module either lists kinds in ``ANNOTATIONS`` or exposes a
    ``register(registry)`` hook; when it has both, the hook runs last.
    """
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise RuntimeError(f"Failed to import annotation module '{module_name}': {exc}") from exc
    kinds = getattr(module, "ANNOTATIONS", None)
    hook = getattr(module, "register", None)
    if kinds is None and not callable(hook):
        raise RuntimeError(
            f"Annotation module '{module_name}' defines neither ANNOTATIONS nor register()"
        )
    for kind in kinds or ():
        registry.register(_coerce_kind(kind, source=module_name))
    if callable(hook):
        logger.debug("Calling register() of annotation module %s", module_name)
        hook(registry)


def discover_entry_point_annotations() -> List[Type[Annotation]]:
    """Return annotation kinds advertised through the ``docmeta.annotations`` group."""
    kinds: List[Type[Annotation]] = []
    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - depends on installed plugins
            raise RuntimeError(f"Failed to load annotation entry point '{entry.name}': {exc}") from exc
        if isinstance(loaded, (list, tuple)):
            kinds.extend(_coerce_kind(kind, source=entry.name) for kind in loaded)
        else:
            kinds.append(_coerce_kind(loaded, source=entry.name))
    return kinds


def _coerce_kind(obj: object, *, source: str) -> Type[Annotation]:
    if isinstance(obj, type) and issubclass(obj, Annotation):
        return obj
    raise TypeError(f"'{source}' provided {obj!r}, which is not an Annotation subclass")


def _iter_entry_points() -> Sequence[metadata.EntryPoint]:
    entry_points = metadata.entry_points()
    if hasattr(entry_points, "select"):
        return list(entry_points.select(group=_ENTRY_POINT_GROUP))
    return list(entry_points.get(_ENTRY_POINT_GROUP, []))  # type: ignore[attr-defined]


__all__ = [
    "AnnotationRegistry",
    "discover_entry_point_annotations",
    "load_module_annotations",
]
