"""Tests for the built-in routing and model annotations."""

from __future__ import annotations

import pytest

from docmeta.descriptor import ColumnDef, RelationDef, RouteDef
from docmeta.errors import AnnotationValidationError
from docmeta.models import TargetKind
from docmeta.syntax import evaluate_arguments


def _expand(registry, text, target, descriptor):
    name, _, arguments = text.partition(" ")
    annotation = registry.create(name.lstrip("!"), evaluate_arguments(arguments))
    return annotation.expand_annotation(target, descriptor)


def test_column_appends_one_definition(registry, make_target, descriptor) -> None:
    _expand(registry, "!Column integer, nullable: true", make_target(TargetKind.PROPERTY, "age"), descriptor)

    assert descriptor.columns == [ColumnDef(name="age", type="integer", nullable=True)]


def test_column_modifiers_mark_primary_key(registry, make_target, descriptor) -> None:
    _expand(
        registry,
        "!Column PrimaryKey, Integer, AutoIncrement",
        make_target(TargetKind.PROPERTY, "id"),
        descriptor,
    )

    column = descriptor.column("id")
    assert column == ColumnDef(
        name="id", type="integer", nullable=False, primary_key=True, auto_increment=True
    )
    assert descriptor.primary_key == "id"


def test_column_rejects_unknown_type(registry, make_target, descriptor) -> None:
    with pytest.raises(AnnotationValidationError) as excinfo:
        _expand(registry, "!Column varchar", make_target(TargetKind.PROPERTY, "name"), descriptor)

    assert excinfo.value.errors == [
        'Unknown parameter: "varchar".',
        "ColumnAnnotation requires a column type.",
    ]


@pytest.mark.parametrize("column_type", ["decimal", "Timestamp"])
def test_column_accepts_decimal_and_timestamp(registry, make_target, descriptor, column_type) -> None:
    _expand(registry, f"!Column {column_type}", make_target(TargetKind.PROPERTY, "total"), descriptor)

    assert descriptor.column("total").type == column_type.lower()


def test_route_joins_class_prefix(registry, make_target, descriptor) -> None:
    _expand(registry, "!RoutesPrefix users/", make_target(TargetKind.CLASS), descriptor)
    _expand(registry, "!Route get, $id, name: users.show", make_target(TargetKind.METHOD, "show"), descriptor)
    _expand(registry, "!Route POST, /signup", make_target(TargetKind.METHOD, "signup"), descriptor)

    assert descriptor.routes_prefix == "/users"
    assert descriptor.routes == [
        RouteDef(method="GET", path="/users/{id}", function="show", name="users.show"),
        RouteDef(method="POST", path="/signup", function="signup"),
    ]


def test_route_validates_method_and_arity(registry, make_target, descriptor) -> None:
    with pytest.raises(AnnotationValidationError) as excinfo:
        _expand(registry, "!Route FETCH", make_target(TargetKind.METHOD, "show"), descriptor)

    assert excinfo.value.errors == [
        'Parameter 0 is set to "FETCH". Valid values: GET, POST, PUT, DELETE, PATCH, HEAD, OPTIONS.',
        "RouteAnnotation requires an HTTP method and a path, got 1 unkeyed values.",
    ]
    assert descriptor.routes == []


def test_table_and_source_set_descriptor(registry, make_target, descriptor) -> None:
    _expand(registry, "!Table users", make_target(TargetKind.CLASS), descriptor)
    _expand(registry, "!Source reporting", make_target(TargetKind.CLASS), descriptor)

    assert descriptor.table == "users"
    assert descriptor.source == "reporting"


def test_table_requires_exactly_one_value(registry, make_target, descriptor) -> None:
    with pytest.raises(AnnotationValidationError) as excinfo:
        _expand(registry, "!Table users, name: people", make_target(TargetKind.CLASS), descriptor)

    assert excinfo.value.errors == [
        'Invalid parameter: "name".',
        "TableAnnotation requires exactly 1 parameters.",
    ]


def test_has_many_fills_conventional_defaults(registry, make_target, descriptor) -> None:
    target = make_target(TargetKind.CLASS, "Author", class_name="Author")
    _expand(registry, "!HasMany stories", target, descriptor)
    _expand(registry, "!HasMany books, Class: Novel, Key: writerId, OnDelete: cascade", target, descriptor)

    assert descriptor.relations == [
        RelationDef(kind="has_many", name="stories", target_class="Story", foreign_key="authorId"),
        RelationDef(
            kind="has_many",
            name="books",
            target_class="Novel",
            foreign_key="writerId",
            on_delete="Cascade",
        ),
    ]


def test_has_many_rejects_unknown_on_delete(registry, make_target, descriptor) -> None:
    with pytest.raises(AnnotationValidationError) as excinfo:
        _expand(registry, "!HasMany books, OnDelete: Explode", make_target(TargetKind.CLASS), descriptor)

    assert excinfo.value.errors == [
        'The "ondelete" parameter is set to "Explode". Valid values: cascade, delete, nullify.'
    ]


def test_belongs_to_defaults_and_on_delete(registry, make_target, descriptor) -> None:
    target = make_target(TargetKind.CLASS, "Book", class_name="Book")
    _expand(registry, "!BelongsTo author", target, descriptor)
    _expand(registry, "!BelongsTo publisher, OnDelete: nullify", target, descriptor)

    assert descriptor.relations == [
        RelationDef(kind="belongs_to", name="author", target_class="Author", foreign_key="authorId"),
        RelationDef(
            kind="belongs_to",
            name="publisher",
            target_class="Publisher",
            foreign_key="publisherId",
            on_delete="Nullify",
        ),
    ]


def test_belongs_to_rejects_unknown_on_delete(registry, make_target, descriptor) -> None:
    with pytest.raises(AnnotationValidationError) as excinfo:
        _expand(registry, "!BelongsTo author, OnDelete: Orphan", make_target(TargetKind.CLASS), descriptor)

    assert excinfo.value.errors == [
        'The "ondelete" parameter is set to "Orphan". Valid values: cascade, delete, nullify.'
    ]
    assert descriptor.relations == []
