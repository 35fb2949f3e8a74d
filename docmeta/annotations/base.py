"""Base class for class, method and property annotations.

New annotation kinds subclass :class:`Annotation`, declare where they apply
and which keyed parameters they accept, and implement ``usage``,
``validate`` and ``expand``. :meth:`Annotation.expand_annotation` drives the
rest: applicability check, batched validation, parameter binding and the
final expansion against a :class:`~docmeta.descriptor.ClassDescriptor`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Mapping, Optional, Sequence

from ..descriptor import ClassDescriptor
from ..errors import AnnotationValidationError
from ..logging import get_logger
from ..models import ParameterList, Target, TargetKind, Value

_SUFFIX = "Annotation"

logger = get_logger("annotations")


class Case(Enum):
    """Case folding applied to a value before comparing it to allowed values."""

    LOWER = "lower"
    UPPER = "upper"

    def fold(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        return value.lower() if self is Case.LOWER else value.upper()


class AnnotationState(Enum):
    PARSED = "parsed"
    TYPE_CHECKED = "type_checked"
    VALIDATED = "validated"
    BOUND = "bound"
    EXPANDED = "expanded"
    FAILED = "failed"


class ApplicabilityError(AnnotationValidationError):
    """Validation failure whose report includes a target-kind mismatch."""


def as_str(value: Value) -> str:
    if isinstance(value, list):
        raise ValueError("must be a single value, not a list")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def as_bool(value: Value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "on"}:
            return True
        if lowered in {"false", "no", "off"}:
            return False
    raise ValueError("must be true or false")


def as_int(value: Value) -> int:
    if isinstance(value, bool):
        raise ValueError("must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise ValueError("must be an integer")


def as_list(value: Value) -> List[Any]:
    if isinstance(value, list):
        return list(value)
    return [value]


def as_any(value: Value) -> Value:
    return value


@dataclass(frozen=True)
class Field:
    """Typed setter for one keyed parameter."""

    attribute: str
    convert: Callable[[Value], Any] = as_any
    default: Any = None


class Annotation(ABC):
    """Base class for annotation kinds.

    Subclasses are named ``<Identifier>Annotation``; the directive ``!Route``
    resolves to ``RouteAnnotation`` through the registry.
    """

    applies_to: ClassVar[TargetKind]
    fields: ClassVar[Mapping[str, Field]] = {}

    def __init__(self, parameters: Optional[ParameterList] = None) -> None:
        self.parameters: Optional[ParameterList] = parameters if parameters is not None else ParameterList()
        self.errors: List[str] = []
        self.values: List[Value] = []
        self.target: Optional[Target] = None
        self.state = AnnotationState.PARSED
        self._converted: Dict[str, Any] = {}
        for field in self.fields.values():
            setattr(self, field.attribute, field.default)

    # ------------------------------------------------------------------
    # Hooks implemented by annotation kinds
    # ------------------------------------------------------------------

    @abstractmethod
    def usage(self) -> str:
        """Return a description of the directive's expected syntax."""

    @abstractmethod
    def validate(self, class_name: str) -> None:
        """Append rule violations to ``self.errors`` using the helpers below."""

    @abstractmethod
    def expand(self, target: Target, descriptor: ClassDescriptor) -> None:
        """Mutate ``descriptor`` using the bound fields and ``self.values``."""

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    @classmethod
    def canonical_name(cls) -> str:
        return cls.__name__

    @classmethod
    def identifier(cls) -> str:
        name = cls.__name__
        if name.endswith(_SUFFIX) and len(name) > len(_SUFFIX):
            return name[: -len(_SUFFIX)]
        return name

    @classmethod
    def is_for(cls) -> TargetKind:
        return cls.applies_to

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    @property
    def params(self) -> ParameterList:
        if self.parameters is None:
            raise RuntimeError(f"{self.canonical_name()} parameters were already bound")
        return self.parameters

    def accepted_keys(self, keys: Iterable[str]) -> None:
        """Every keyed parameter must be one of ``keys`` (case-insensitive)."""
        allowed = {key.lower() for key in keys}
        for key in self.params.keyed:
            if key not in allowed:
                self._error(f'Invalid parameter: "{key}".')

    def required_keys(self, keys: Iterable[str]) -> None:
        for key in keys:
            if not self.params.has(key):
                self._error(f"{self.canonical_name()} requires a '{key.lower()}' parameter.")

    def accepted_keyless_values(self, values: Sequence[Any], case: Optional[Case] = None) -> None:
        """Every positional value must be one of ``values``.

        Values are compared as written unless ``case`` folds them first.
        """
        for value in self.params.positional:
            candidate = case.fold(value) if case else value
            if not _contains(values, candidate):
                self._error(f'Unknown parameter: "{_display(value)}".')

    def accepted_indexed_values(
        self, index: int, values: Sequence[Any], case: Optional[Case] = None
    ) -> None:
        positional = self.params.positional
        valid = ", ".join(_display(value) for value in values)
        if index >= len(positional):
            self._error(f"Parameter {index} is missing. Valid values: {valid}.")
            return
        actual = positional[index]
        candidate = case.fold(actual) if case else actual
        if not _contains(values, candidate):
            self._error(f'Parameter {index} is set to "{_display(actual)}". Valid values: {valid}.')

    def accepted_values_for_key(
        self, key: str, values: Sequence[Any], case: Optional[Case] = None
    ) -> None:
        key = key.lower()
        if not self.params.has(key):
            return
        actual = self.params.get(key)
        candidate = case.fold(actual) if case else actual
        if not _contains(values, candidate):
            valid = ", ".join(_display(value) for value in values)
            self._error(
                f'The "{key}" parameter is set to "{_display(actual)}". Valid values: {valid}.'
            )

    def accepts_no_keyless_values(self) -> None:
        self.accepted_keyless_values(())

    def accepts_no_keyed_values(self) -> None:
        self.accepted_keys(())

    def valid_on_subclasses_of(self, annotated_class: str, base_class: str) -> None:
        ancestors: Sequence[str] = ()
        if self.target is not None and self.target.class_name == annotated_class:
            ancestors = self.target.ancestors
        if base_class not in ancestors:
            self._error(f"{self.canonical_name()} is only valid on objects of type {base_class}.")

    def minimum_parameter_count(self, count: int) -> None:
        if len(self.params) < count:
            self._error(f"{self.canonical_name()} takes at least {count} parameters.")

    def maximum_parameter_count(self, count: int) -> None:
        if len(self.params) > count:
            self._error(f"{self.canonical_name()} takes at most {count} parameters.")

    def exact_parameter_count(self, count: int) -> None:
        if len(self.params) != count:
            self._error(f"{self.canonical_name()} requires exactly {count} parameters.")

    # ------------------------------------------------------------------
    # Value helpers
    # ------------------------------------------------------------------

    def is_a_value(self, value: Any) -> bool:
        return _contains(self._all_values(), value)

    def value_not_in(self, values: Sequence[Any], case: Optional[Case] = None) -> Optional[Value]:
        """Return the first parameter value that is not one of ``values``.

        Column uses this to pick its type out from modifiers such as
        ``PrimaryKey`` and ``AutoIncrement``.
        """
        for value in self._all_values():
            candidate = case.fold(value) if case else value
            if not _contains(values, candidate):
                return value
        return None

    def _all_values(self) -> List[Value]:
        collected: List[Value] = []
        if self.parameters is not None:
            collected.extend(self.parameters.values())
        collected.extend(self.values)
        return collected

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def expand_annotation(self, target: Target, descriptor: ClassDescriptor) -> ClassDescriptor:
        """Check, validate, bind and expand this annotation against ``descriptor``.

        Raises :class:`AnnotationValidationError` carrying every error found;
        nothing is expanded in that case.
        """
        if self.state is not AnnotationState.PARSED:
            raise RuntimeError(f"{self.canonical_name()} was already expanded ({self.state.value})")
        self.target = target

        type_error = not (target.kind & self.applies_to)
        if type_error:
            allowed = ", ".join(kind.plural.title() for kind in TargetKind.members_of(self.applies_to))
            self._error(f"{self.canonical_name()} is only valid on {allowed}.")
        else:
            self.state = AnnotationState.TYPE_CHECKED

        self.validate(target.class_name)
        self._convert_fields()

        if self.errors:
            self.state = AnnotationState.FAILED
            raise self._failure(target, type_error)
        self.state = AnnotationState.VALIDATED

        self._bind()
        self.state = AnnotationState.BOUND

        logger.debug("Expanding %s on %s %s", self.canonical_name(), target.kind.label, target.name)
        self.expand(target, descriptor)
        self.state = AnnotationState.EXPANDED
        return descriptor

    def _convert_fields(self) -> None:
        for key, value in self.params.keyed.items():
            field = self.fields.get(key)
            if field is None:
                self._error(f'Invalid parameter: "{key}".')
                continue
            try:
                self._converted[field.attribute] = field.convert(value)
            except (TypeError, ValueError) as exc:
                self._error(f'The "{key}" parameter {exc}.')

    def _bind(self) -> None:
        for attribute, value in self._converted.items():
            setattr(self, attribute, value)
        self.values = list(self.params.positional)
        self._converted = {}
        self.parameters = None

    def _failure(self, target: Target, type_error: bool) -> AnnotationValidationError:
        if target.kind is TargetKind.PROPERTY:
            message = (
                f'Invalid {self.canonical_name()} on property "{target.name}" '
                f'of class "{target.class_name}". '
            )
        else:
            message = f'Invalid {self.canonical_name()} on {target.kind.label} "{target.name}". '
        usage = self.usage()
        if not type_error:
            message += "Expected usage: \n" + usage
        message += "\n == Errors == \n * " + "\n * ".join(self.errors)
        error_cls = ApplicabilityError if type_error else AnnotationValidationError
        return error_cls(
            message,
            self.errors,
            annotation=self.identifier(),
            usage=None if type_error else usage,
            type_error=type_error,
            file=target.file,
            line=target.line,
        )

    def _error(self, message: str) -> None:
        if message not in self.errors:
            self.errors.append(message)

    def __repr__(self) -> str:
        return f"<{self.canonical_name()} state={self.state.value}>"


def _contains(values: Iterable[Any], candidate: Any) -> bool:
    # ``True == 1`` in Python; keep booleans distinct from numbers.
    for value in values:
        if value == candidate and isinstance(value, bool) == isinstance(candidate, bool):
            return True
    return False


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "(" + ", ".join(_display(item) for item in value) + ")"
    return str(value)


__all__ = [
    "Annotation",
    "AnnotationState",
    "ApplicabilityError",
    "Case",
    "Field",
    "as_any",
    "as_bool",
    "as_int",
    "as_list",
    "as_str",
]
