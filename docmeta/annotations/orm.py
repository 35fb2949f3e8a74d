"""Model annotations: tables, data sources, columns and relationships."""

from __future__ import annotations

from typing import Optional

from ..descriptor import ClassDescriptor, ColumnDef, RelationDef
from ..models import Target, TargetKind
from .base import Annotation, Case, Field, as_any, as_bool, as_str

COLUMN_TYPES = (
    "integer",
    "string",
    "text",
    "float",
    "decimal",
    "boolean",
    "date",
    "time",
    "datetime",
    "timestamp",
    "blob",
)
COLUMN_MODIFIERS = ("primarykey", "autoincrement")
ON_DELETE_ACTIONS = ("cascade", "delete", "nullify")


class TableAnnotation(Annotation):
    """``!Table users`` names the table backing a model."""

    applies_to = TargetKind.CLASS

    def usage(self) -> str:
        return "!Table table_name"

    def validate(self, class_name: str) -> None:
        self.accepts_no_keyed_values()
        self.exact_parameter_count(1)

    def expand(self, target: Target, descriptor: ClassDescriptor) -> None:
        descriptor.table = as_str(self.values[0])


class SourceAnnotation(Annotation):
    """``!Source reporting`` selects a named data source for a model."""

    applies_to = TargetKind.CLASS

    def usage(self) -> str:
        return "!Source data_source_name"

    def validate(self, class_name: str) -> None:
        self.accepts_no_keyed_values()
        self.exact_parameter_count(1)

    def expand(self, target: Target, descriptor: ClassDescriptor) -> None:
        descriptor.source = as_str(self.values[0])


class ColumnAnnotation(Annotation):
    """``!Column integer, PrimaryKey, AutoIncrement`` on a model property.

    Exactly one unkeyed value is the column type; the others are modifiers.
    Primary keys default to not nullable.
    """

    applies_to = TargetKind.PROPERTY
    fields = {
        "nullable": Field("nullable", as_bool),
        "default": Field("default", as_any),
    }

    def usage(self) -> str:
        return (
            "!Column (" + "|".join(COLUMN_TYPES) + ")[, PrimaryKey][, AutoIncrement]"
            "[, nullable: true|false][, default: value]"
        )

    def validate(self, class_name: str) -> None:
        self.minimum_parameter_count(1)
        self.accepted_keys(self.fields)
        self.accepted_keyless_values(COLUMN_TYPES + COLUMN_MODIFIERS, Case.LOWER)
        types = [value for value in self.params.positional if Case.LOWER.fold(value) in COLUMN_TYPES]
        if len(types) > 1:
            self.errors.append(
                f"{self.canonical_name()} takes one column type, got: "
                + ", ".join(str(value) for value in types)
                + "."
            )
        elif not types:
            self.errors.append(f"{self.canonical_name()} requires a column type.")

    def expand(self, target: Target, descriptor: ClassDescriptor) -> None:
        column_type = as_str(self.value_not_in(COLUMN_MODIFIERS, Case.LOWER) or "").lower()
        modifiers = {Case.LOWER.fold(value) for value in self.values if isinstance(value, str)}
        primary_key = "primarykey" in modifiers
        nullable: Optional[bool] = self.nullable
        if nullable is None:
            nullable = not primary_key
        descriptor.add_column(
            ColumnDef(
                name=target.name,
                type=column_type,
                nullable=nullable,
                primary_key=primary_key,
                auto_increment="autoincrement" in modifiers,
                default=self.default,
            )
        )


class _RelationAnnotation(Annotation):
    applies_to = TargetKind.CLASS
    relation_kind = ""

    def validate(self, class_name: str) -> None:
        self.accepted_keys(self.fields)
        positional = self.params.positional
        if len(positional) != 1 or not isinstance(positional[0], str):
            self.errors.append(f"{self.canonical_name()} requires exactly one relationship name.")
        self.accepted_values_for_key("ondelete", ON_DELETE_ACTIONS, Case.LOWER)

    def expand(self, target: Target, descriptor: ClassDescriptor) -> None:
        name = as_str(self.values[0])
        descriptor.add_relation(
            RelationDef(
                kind=self.relation_kind,
                name=name,
                target_class=self.related_class or self.default_class(name),
                foreign_key=self.foreign_key or self.default_key(name, target),
                through=getattr(self, "through", None),
                on_delete=_title(getattr(self, "on_delete", None)),
            )
        )

    def default_class(self, name: str) -> str:
        return _upper_first(name)

    def default_key(self, name: str, target: Target) -> str:
        return f"{name}Id"


class HasManyAnnotation(_RelationAnnotation):
    """``!HasMany books, Class: Book, Key: authorId, OnDelete: Cascade``."""

    relation_kind = "has_many"
    fields = {
        "class": Field("related_class", as_str),
        "key": Field("foreign_key", as_str),
        "through": Field("through", as_str),
        "ondelete": Field("on_delete", as_str),
    }

    def usage(self) -> str:
        return (
            "!HasMany relationName[, Class: RelatedClass][, Key: foreignKey]"
            "[, Through: JoinClass][, OnDelete: (Cascade|Delete|Nullify)]"
        )

    def default_class(self, name: str) -> str:
        return _upper_first(_singular(name))

    def default_key(self, name: str, target: Target) -> str:
        return f"{_lower_first(target.class_name)}Id"


class BelongsToAnnotation(_RelationAnnotation):
    """``!BelongsTo author, Class: Person, Key: authorId, OnDelete: Nullify``."""

    relation_kind = "belongs_to"
    fields = {
        "class": Field("related_class", as_str),
        "key": Field("foreign_key", as_str),
        "ondelete": Field("on_delete", as_str),
    }

    def usage(self) -> str:
        return (
            "!BelongsTo relationName[, Class: RelatedClass][, Key: foreignKey]"
            "[, OnDelete: (Cascade|Delete|Nullify)]"
        )


def _singular(name: str) -> str:
    if name.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def _upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def _lower_first(value: str) -> str:
    return value[:1].lower() + value[1:]


def _title(value: Optional[str]) -> Optional[str]:
    return value.capitalize() if value else None


__all__ = [
    "BelongsToAnnotation",
    "COLUMN_MODIFIERS",
    "COLUMN_TYPES",
    "ColumnAnnotation",
    "HasManyAnnotation",
    "ON_DELETE_ACTIONS",
    "SourceAnnotation",
    "TableAnnotation",
]
