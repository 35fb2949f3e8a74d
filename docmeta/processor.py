"""Drive directive parsing and expansion for elements and whole classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from .annotations import Annotation, AnnotationRegistry, default_registry
from .descriptor import ClassDescriptor
from .errors import AnnotationError, AnnotationErrorGroup
from .logging import get_logger
from .models import RawInvocation, Target, TargetKind
from .syntax import evaluate_arguments, scan_directives

logger = get_logger("processor")


@dataclass
class ElementSource:
    """A documented element: its reflection metadata and its doc comment."""

    target: Target
    comment: str = ""


@dataclass
class ClassSource:
    """A class comment plus the documented members of that class, in source order."""

    target: Target
    comment: str = ""
    members: List[ElementSource] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.target.kind is not TargetKind.CLASS:
            raise ValueError(f"ClassSource target must be a class, got {self.target.kind.label}")

    def elements(self) -> Iterator[ElementSource]:
        yield ElementSource(target=self.target, comment=self.comment)
        yield from self.members


@dataclass
class ParseResult:
    """Annotations parsed from one comment and the directives that failed."""

    annotations: List[Annotation] = field(default_factory=list)
    errors: List[AnnotationError] = field(default_factory=list)


class AnnotationProcessor:
    """Parses doc comments and expands their annotations into class descriptors.

    A failing directive never stops its siblings. Once a pass finishes, a
    single failure is raised as-is and several are raised together as an
    :class:`AnnotationErrorGroup`.
    """

    def __init__(self, registry: Optional[AnnotationRegistry] = None) -> None:
        self.registry = registry if registry is not None else default_registry()

    def parse(self, comment: str, *, target: Optional[Target] = None) -> ParseResult:
        """Return the annotation instances declared in ``comment``."""
        result = ParseResult()
        for invocation in scan_directives(comment):
            try:
                result.annotations.append(self._instantiate(invocation))
            except AnnotationError as exc:
                result.errors.append(_locate(exc, target))
        return result

    def expand_element(
        self, element: ElementSource, descriptor: ClassDescriptor
    ) -> ClassDescriptor:
        errors = self._expand(element, descriptor)
        _raise_for(errors)
        return descriptor

    def expand_class(
        self, source: ClassSource, descriptor: Optional[ClassDescriptor] = None
    ) -> ClassDescriptor:
        """Expand the class comment, then every member, into one descriptor."""
        if descriptor is None:
            descriptor = ClassDescriptor(class_name=source.target.class_name)
        errors: List[AnnotationError] = []
        for element in source.elements():
            errors.extend(self._expand(element, descriptor))
        _raise_for(errors)
        return descriptor

    def _expand(self, element: ElementSource, descriptor: ClassDescriptor) -> List[AnnotationError]:
        errors: List[AnnotationError] = []
        target = element.target
        for invocation in scan_directives(element.comment):
            try:
                annotation = self._instantiate(invocation)
                annotation.expand_annotation(target, descriptor)
            except AnnotationError as exc:
                located = _locate(exc, target)
                logger.warning("%s", located.message)
                errors.append(located)
        return errors

    def _instantiate(self, invocation: RawInvocation) -> Annotation:
        logger.debug("Parsing !%s %s", invocation.name, invocation.argument_text)
        parameters = evaluate_arguments(invocation.argument_text, name=invocation.name)
        return self.registry.lookup(invocation.name)(parameters)


def _locate(error: AnnotationError, target: Optional[Target]) -> AnnotationError:
    if target is None:
        return error
    return error.located(target.file, target.line)


def _raise_for(errors: Sequence[AnnotationError]) -> None:
    if not errors:
        return
    if len(errors) == 1:
        raise errors[0]
    raise AnnotationErrorGroup(errors)


__all__ = ["AnnotationProcessor", "ClassSource", "ElementSource", "ParseResult"]
