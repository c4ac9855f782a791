"""Route Table — (verb, path) bookkeeping on top of a FastAPI app or router.

Invariants:
    - The router's own route list is the single source of truth (no shadow copy)
    - Paths are compared as stored, prefix included
    - A (verb, path) pair can be added once; the second add raises DuplicateRouteError
    - add_all() checks the whole batch before adding anything
"""

from dataclasses import dataclass
from typing import Callable

from fastapi import APIRouter, FastAPI

from dynamic_api.core.descriptors import OperationDescriptor
from dynamic_api.core.domain_types import HttpVerb, ResourceName, RoutePath
from dynamic_api.core.errors import DuplicateRouteError


@dataclass(frozen=True)
class RouteEntry:
    """One compiled operation: where it lives and what it runs."""
    verb: HttpVerb
    path: RoutePath
    resource: ResourceName
    operation: OperationDescriptor


class RouteTable:
    """Registered routes of one FastAPI app or APIRouter."""

    def __init__(self, router: FastAPI | APIRouter):
        self._router = router

    def full_path(self, path: str) -> str:
        """Path as stored on the router, i.e. behind any APIRouter prefix."""
        return getattr(self._router, "prefix", "") + path

    def contains(self, verb: HttpVerb, path: str) -> bool:
        stored = self.full_path(path)
        return any(
            getattr(route, "path", None) == stored
            and verb.value in (getattr(route, "methods", None) or ())
            for route in self._router.routes
        )

    def add_all(
        self, entries: list[tuple[RouteEntry, Callable]],
    ) -> None:
        seen: set[tuple[HttpVerb, str]] = set()
        for entry, _ in entries:
            key = (entry.verb, self.full_path(entry.path))
            if key in seen or self.contains(entry.verb, entry.path):
                raise DuplicateRouteError(entry.verb.value, key[1])
            seen.add(key)
        for entry, endpoint in entries:
            self._router.add_api_route(
                entry.path,
                endpoint,
                methods=[entry.verb.value],
                name=f"{entry.resource}.{entry.operation.name}",
                tags=[entry.resource],
            )

    def listing(self) -> list[tuple[str, str]]:
        """(method, path) for every route on the router, in registration order."""
        return [
            (method, route.path)
            for route in self._router.routes
            for method in sorted(getattr(route, "methods", None) or ())
        ]
