"""Tests for descriptor path helpers and serialisation."""

from __future__ import annotations

from docmeta.descriptor import ClassDescriptor, ColumnDef, join_paths, normalize_path


def test_normalize_path_rewrites_parameters() -> None:
    assert normalize_path("users/$id/") == "/users/{id}"
    assert normalize_path("//a//b") == "/a/b"
    assert normalize_path("") == "/"


def test_join_paths_respects_absolute_routes() -> None:
    assert join_paths("/users", "$id/edit") == "/users/{id}/edit"
    assert join_paths("/users", "/login") == "/login"
    assert join_paths("", "status") == "/status"
    assert join_paths("/users", "") == "/users"


def test_descriptor_to_dict_and_attributes() -> None:
    descriptor = ClassDescriptor(class_name="User")
    descriptor.add_column(ColumnDef(name="id", type="integer", nullable=False, primary_key=True))
    descriptor.set("cache", 30)

    data = descriptor.to_dict()

    assert data["primary_key"] == "id"
    assert data["columns"][0]["type"] == "integer"
    assert descriptor.get("cache") == 30
