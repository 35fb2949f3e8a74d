"""Routing annotations for controller classes."""

from __future__ import annotations

from ..descriptor import ClassDescriptor, RouteDef, join_paths, normalize_path
from ..models import Target, TargetKind
from .base import Annotation, Case, Field, as_str

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")


class RouteAnnotation(Annotation):
    """``!Route GET, users/$id, name: users.show`` on a controller method."""

    applies_to = TargetKind.METHOD
    fields = {"name": Field("route_name", as_str)}

    def usage(self) -> str:
        return "!Route (" + "|".join(HTTP_METHODS) + "), route/path[, name: route.name]"

    def validate(self, class_name: str) -> None:
        self.accepted_keys(["name"])
        self.accepted_indexed_values(0, HTTP_METHODS, Case.UPPER)
        positional = self.params.positional
        if len(positional) != 2:
            self.errors.append(
                f"{self.canonical_name()} requires an HTTP method and a path, "
                f"got {len(positional)} unkeyed values."
            )
        elif isinstance(positional[1], list):
            self.errors.append("The route path must be a single value.")

    def expand(self, target: Target, descriptor: ClassDescriptor) -> None:
        method = as_str(self.values[0]).upper()
        path = join_paths(descriptor.routes_prefix, as_str(self.values[1]))
        descriptor.add_route(
            RouteDef(method=method, path=path, function=target.name, name=self.route_name)
        )


class RoutesPrefixAnnotation(Annotation):
    """``!RoutesPrefix users/`` prefixes every relative ``!Route`` in the class."""

    applies_to = TargetKind.CLASS

    def usage(self) -> str:
        return "!RoutesPrefix prefix/of/routes/"

    def validate(self, class_name: str) -> None:
        self.accepts_no_keyed_values()
        self.exact_parameter_count(1)

    def expand(self, target: Target, descriptor: ClassDescriptor) -> None:
        descriptor.routes_prefix = normalize_path(as_str(self.values[0]))


__all__ = ["HTTP_METHODS", "RouteAnnotation", "RoutesPrefixAnnotation"]
