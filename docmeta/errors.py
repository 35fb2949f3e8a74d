"""Error taxonomy for annotation parsing and expansion."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence


class AnnotationError(RuntimeError):
    """Base error carrying the annotation name and source location."""

    def __init__(
        self,
        message: str,
        *,
        annotation: Optional[str] = None,
        file: Optional[str] = None,
        line: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.annotation = annotation
        self.file = file
        self.line = line

    def located(self, file: Optional[str], line: Optional[int]) -> "AnnotationError":
        """Fill in the source location when the raiser did not know it."""
        if self.file is None:
            self.file = file
        if self.line is None:
            self.line = line
        return self

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": type(self).__name__,
            "annotation": self.annotation,
            "message": self.message,
            "file": self.file,
            "line": self.line,
        }


class ParseError(AnnotationError):
    """Raised when directive arguments do not reduce to a literal list."""


class UnknownAnnotationError(AnnotationError):
    """Raised when a directive names an annotation that was never registered."""


class RegistryFrozenError(AnnotationError):
    """Raised when registering into a registry after population finished."""


class AnnotationValidationError(AnnotationError):
    """Raised with every rule violation found for one annotation instance."""

    def __init__(
        self,
        message: str,
        errors: Sequence[str],
        *,
        annotation: Optional[str] = None,
        usage: Optional[str] = None,
        type_error: bool = False,
        file: Optional[str] = None,
        line: Optional[int] = None,
    ) -> None:
        super().__init__(message, annotation=annotation, file=file, line=line)
        self.errors = list(errors)
        self.usage = usage
        self.type_error = type_error

    def to_dict(self) -> Dict[str, object]:
        data = super().to_dict()
        data["errors"] = list(self.errors)
        data["type_error"] = self.type_error
        return data


class AnnotationErrorGroup(AnnotationError):
    """Raised when more than one directive failed during one processing pass."""

    def __init__(self, errors: Sequence[AnnotationError]) -> None:
        self.errors: List[AnnotationError] = list(errors)
        lines = [f"{len(self.errors)} annotation errors:"]
        for error in self.errors:
            location = _format_location(error.file, error.line)
            lines.append(f" - {location}{error.message}")
        first = self.errors[0] if self.errors else None
        super().__init__(
            "\n".join(lines),
            file=first.file if first else None,
            line=first.line if first else None,
        )

    def to_dict(self) -> Dict[str, object]:
        data = super().to_dict()
        data["errors"] = [error.to_dict() for error in self.errors]
        return data


def _format_location(file: Optional[str], line: Optional[int]) -> str:
    if file is None:
        return ""
    if line is None:
        return f"{file}: "
    return f"{file}:{line}: "


__all__ = [
    "AnnotationError",
    "AnnotationErrorGroup",
    "AnnotationValidationError",
    "ParseError",
    "RegistryFrozenError",
    "UnknownAnnotationError",
]
