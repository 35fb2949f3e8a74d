"""Tests for AnnotationProcessor."""

from __future__ import annotations

import pytest

from docmeta.annotations import ApplicabilityError
from docmeta.descriptor import ClassDescriptor, ColumnDef, RouteDef
from docmeta.errors import (
    AnnotationErrorGroup,
    AnnotationValidationError,
    ParseError,
    UnknownAnnotationError,
)
from docmeta.models import Target, TargetKind
from docmeta.processor import ClassSource, ElementSource


def _users_controller() -> ClassSource:
    def method(name: str, line: int, comment: str) -> ElementSource:
        return ElementSource(
            target=Target(TargetKind.METHOD, "UsersController", name, file="app/users.py", line=line),
            comment=comment,
        )

    return ClassSource(
        target=Target.for_class("UsersController", file="app/users.py", line=3),
        comment="/**\n * Users resource.\n * !RoutesPrefix users/\n */",
        members=[
            method("index", 8, "/** !Route GET, '', name: users.index */"),
            method("show", 12, "/** !Route GET, $id */"),
            method("update", 16, "/**\n * !Route PUT, $id\n * !Route PATCH, $id\n */"),
        ],
    )


def test_expand_class_applies_directives_in_source_order(processor) -> None:
    descriptor = processor.expand_class(_users_controller())

    assert descriptor.class_name == "UsersController"
    assert descriptor.routes == [
        RouteDef(method="GET", path="/users", function="index", name="users.index"),
        RouteDef(method="GET", path="/users/{id}", function="show"),
        RouteDef(method="PUT", path="/users/{id}", function="update"),
        RouteDef(method="PATCH", path="/users/{id}", function="update"),
    ]


def test_expand_element_returns_the_same_descriptor(processor) -> None:
    descriptor = ClassDescriptor(class_name="User")
    element = ElementSource(
        target=Target(TargetKind.PROPERTY, "User", "age"),
        comment="/** !Column integer, nullable: true */",
    )

    assert processor.expand_element(element, descriptor) is descriptor
    assert descriptor.columns == [ColumnDef(name="age", type="integer", nullable=True)]


def test_unknown_annotation_carries_location(processor) -> None:
    element = ElementSource(
        target=Target(TargetKind.METHOD, "User", "save", file="app/user.py", line=20),
        comment="/** !Bogus x */",
    )

    with pytest.raises(UnknownAnnotationError) as excinfo:
        processor.expand_element(element, ClassDescriptor(class_name="User"))

    assert "Bogus" in excinfo.value.message
    assert (excinfo.value.file, excinfo.value.line) == ("app/user.py", 20)


def test_parse_error_does_not_abort_sibling_directives(processor) -> None:
    descriptor = ClassDescriptor(class_name="User")
    source = ClassSource(
        target=Target.for_class("User", file="app/user.py", line=1),
        comment="/**\n * !Source a,,b\n * !Table users\n */",
    )

    with pytest.raises(ParseError) as excinfo:
        processor.expand_class(source, descriptor)

    assert descriptor.table == "users"
    assert descriptor.source is None
    assert excinfo.value.file == "app/user.py"


def test_multiple_failures_are_grouped(processor) -> None:
    source = ClassSource(
        target=Target.for_class("User", file="app/user.py", line=1),
        comment="/** !Table */",
        members=[
            ElementSource(
                target=Target(TargetKind.PROPERTY, "User", "age", file="app/user.py", line=7),
                comment="/** !Route GET, /age */",
            ),
            ElementSource(
                target=Target(TargetKind.PROPERTY, "User", "name", file="app/user.py", line=9),
                comment="/** !Column string */",
            ),
        ],
    )

    descriptor = ClassDescriptor(class_name="User")
    with pytest.raises(AnnotationErrorGroup) as excinfo:
        processor.expand_class(source, descriptor)

    group = excinfo.value
    assert type(group.errors[0]) is AnnotationValidationError
    assert isinstance(group.errors[1], ApplicabilityError)
    assert group.errors[1].line == 7
    assert group.errors[1].type_error is True
    assert "app/user.py:7:" in group.message
    assert descriptor.columns == [ColumnDef(name="name", type="string")]


def test_parse_reports_annotations_and_errors_separately(processor) -> None:
    result = processor.parse("/**\n * !Table users\n * !Nope\n * !Source (a\n */")

    assert [annotation.identifier() for annotation in result.annotations] == ["Table"]
    assert [type(error) for error in result.errors] == [UnknownAnnotationError, ParseError]


def test_class_source_requires_class_target() -> None:
    with pytest.raises(ValueError):
        ClassSource(target=Target(TargetKind.METHOD, "User", "save"))
