"""Annotation directives embedded in doc comments, expanded into class metadata."""

from .annotations import Annotation, AnnotationRegistry, default_registry
from .descriptor import ClassDescriptor
from .errors import (
    AnnotationError,
    AnnotationErrorGroup,
    AnnotationValidationError,
    ParseError,
    UnknownAnnotationError,
)
from .models import ParameterList, RawInvocation, Target, TargetKind
from .processor import AnnotationProcessor, ClassSource, ElementSource

__all__ = [
    "Annotation",
    "AnnotationError",
    "AnnotationErrorGroup",
    "AnnotationProcessor",
    "AnnotationRegistry",
    "AnnotationValidationError",
    "ClassDescriptor",
    "ClassSource",
    "ElementSource",
    "ParameterList",
    "ParseError",
    "RawInvocation",
    "Target",
    "TargetKind",
    "UnknownAnnotationError",
    "default_registry",
]
