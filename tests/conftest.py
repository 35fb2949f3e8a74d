from __future__ import annotations

from typing import Callable

import pytest

from docmeta.annotations import AnnotationRegistry, default_registry
from docmeta.descriptor import ClassDescriptor
from docmeta.models import Target, TargetKind
from docmeta.processor import AnnotationProcessor


@pytest.fixture
def registry() -> AnnotationRegistry:
    """Provide a frozen registry of the built-in annotation kinds."""
    return default_registry()


@pytest.fixture
def processor(registry: AnnotationRegistry) -> AnnotationProcessor:
    return AnnotationProcessor(registry)


@pytest.fixture
def descriptor() -> ClassDescriptor:
    return ClassDescriptor(class_name="User")


@pytest.fixture
def make_target() -> Callable[..., Target]:
    """Build targets on class ``User`` declared in ``app/user.py``."""

    def _make(kind: TargetKind, name: str = "User", **kwargs: object) -> Target:
        defaults: dict[str, object] = {
            "class_name": "User",
            "file": "app/user.py",
            "line": 10,
        }
        defaults.update(kwargs)
        return Target(kind=kind, name=name, **defaults)  # type: ignore[arg-type]

    return _make
