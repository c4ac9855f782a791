"""Route Compiler — registers one FastAPI route per enabled operation of a capability interface.

Invariants:
    - Path is always {base_route}/{ResourceName}/{operation} (core/route_paths.py)
    - map_client() and map_dynamic_api() produce identical paths for the same
      interface and base route; only the way the target instance is obtained differs
    - Registration is all-or-nothing per interface: a duplicate (verb, path) raises
      DuplicateRouteError before any route of that interface is added
    - Handlers close over frozen descriptors only; no per-request state survives a request

Design Decisions:
    - map_client(): target resolved per request from an explicit ClientRegistry
    - map_dynamic_api(): target injected through FastAPI Depends(dependency)
    - Endpoints take the raw Request: binding is ours, FastAPI does not parse params
"""

import logging
from types import ModuleType
from typing import Any, Callable

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from dynamic_api.api.client_registry import ClientRegistry
from dynamic_api.api.route_table import RouteEntry, RouteTable
from dynamic_api.core.descriptors import (
    OperationDescriptor, discover_capability_interfaces, scan_operations,
)
from dynamic_api.core.domain_types import DEFAULT_LIMITS, BindingLimits
from dynamic_api.core.errors import DynamicApiError
from dynamic_api.core.route_paths import build_route_path, resource_name
from dynamic_api.services.invocation_dispatcher import dispatch
from dynamic_api.services.request_context import RequestContext

logger = logging.getLogger(__name__)

EndpointFactory = Callable[[OperationDescriptor], Callable[..., Any]]


def map_client(
    app: FastAPI | APIRouter,
    interface: type,
    base_route: str,
    registry: ClientRegistry,
    *,
    limits: BindingLimits = DEFAULT_LIMITS,
) -> list[RouteEntry]:
    """Map `interface`, resolving its implementation from `registry` per request."""
    if interface not in registry:
        logger.warning(
            f"{interface.__name__} mapped before an implementation was registered",
            extra={"resource": resource_name(interface.__name__)},
        )

    def make_endpoint(operation: OperationDescriptor):
        async def endpoint(request: Request) -> Response:
            target = registry.resolve(interface)
            return await _handle(target, operation, request, limits)
        return endpoint

    return _compile(app, interface, base_route, make_endpoint)


def map_dynamic_api(
    app: FastAPI | APIRouter,
    interface: type,
    base_route: str,
    *,
    dependency: Callable[..., Any],
    limits: BindingLimits = DEFAULT_LIMITS,
) -> list[RouteEntry]:
    """Map `interface`, receiving the implementation as a FastAPI dependency."""

    def make_endpoint(operation: OperationDescriptor):
        async def endpoint(request: Request, target: Any = Depends(dependency)) -> Response:
            return await _handle(target, operation, request, limits)
        return endpoint

    return _compile(app, interface, base_route, make_endpoint)


def map_all_clients(
    app: FastAPI | APIRouter,
    base_route: str,
    registry: ClientRegistry,
    *modules: ModuleType,
    limits: BindingLimits = DEFAULT_LIMITS,
) -> list[RouteEntry]:
    """Discover every capability interface in `modules` and map each one."""
    entries: list[RouteEntry] = []
    for interface in discover_capability_interfaces(*modules):
        entries.extend(
            map_client(app, interface, base_route, registry, limits=limits),
        )
    return entries


def _compile(
    app: FastAPI | APIRouter,
    interface: type,
    base_route: str,
    make_endpoint: EndpointFactory,
) -> list[RouteEntry]:
    resource = resource_name(interface.__name__)
    batch = [
        (
            RouteEntry(
                verb=operation.verb,
                path=build_route_path(base_route, interface, operation.name),
                resource=resource,
                operation=operation,
            ),
            make_endpoint(operation),
        )
        for operation in scan_operations(interface)
    ]
    RouteTable(app).add_all(batch)
    for entry, _ in batch:
        logger.info(
            f"Registered {entry.verb.value} {entry.path}",
            extra={
                "resource": entry.resource,
                "operation": entry.operation.name,
                "verb": entry.verb.value,
                "path": entry.path,
            },
        )
    return [entry for entry, _ in batch]


async def _handle(
    target: object,
    operation: OperationDescriptor,
    request: Request,
    limits: BindingLimits,
) -> Response:
    context = RequestContext.from_request(request)
    try:
        result = await dispatch(target, operation, context, limits)
    except DynamicApiError as e:
        e.context.operation = operation.name
        e.context.path = context.path
        raise
    return JSONResponse(content=jsonable_encoder(result))
