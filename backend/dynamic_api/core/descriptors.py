"""Descriptor Scanner — turns a capability interface into immutable operation descriptors.

Invariants:
    - Only RemoteClient subclasses are scanned (InvalidCapabilityTypeError otherwise)
    - scan_operations() preserves declaration order and drops disabled operations
    - Methods without @get/@post never reach the registry, so they are skipped silently
    - At most one parameter per operation binds from the body
    - Descriptors are frozen: computed once at registration, shared read-only by requests

Design Decisions:
    - Reads the decorator-built registry (markers.operations_of), not dir(cls):
      every routable member is visible in one mapping
    - *args / **kwargs rejected at scan time: a route cannot bind an open-ended signature
"""

import inspect
from collections.abc import Awaitable, Coroutine
from dataclasses import dataclass, replace
from types import ModuleType
from typing import Any, get_args, get_origin, get_type_hints

from dynamic_api.core.domain_types import (
    ArgumentKind, HttpVerb, ReturnShape,
)
from dynamic_api.core.errors import (
    InvalidCapabilityTypeError, NoCapabilityInterfacesError,
)
from dynamic_api.core.markers import OperationMarker, RemoteClient, operations_of
from dynamic_api.core.safe_convert import (
    classify_argument_kind, is_body_eligible, unwrap_optional,
)

_NO_DEFAULT = inspect.Parameter.empty


@dataclass(frozen=True)
class ParameterDescriptor:
    """One parameter of an operation, as seen by the binder."""
    name: str
    annotation: Any
    target_type: Any
    nullable: bool
    kind: ArgumentKind
    binds_body: bool = False
    keyword_only: bool = False
    default: Any = _NO_DEFAULT

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT


@dataclass(frozen=True)
class OperationDescriptor:
    """One routable method of a capability interface."""
    name: str
    verb: HttpVerb
    enabled: bool
    parameters: tuple[ParameterDescriptor, ...]
    return_shape: ReturnShape

    @property
    def body_parameter(self) -> ParameterDescriptor | None:
        return next((p for p in self.parameters if p.binds_body), None)


def is_capability_interface(candidate: object) -> bool:
    return (
        inspect.isclass(candidate)
        and issubclass(candidate, RemoteClient)
        and candidate is not RemoteClient
    )


def scan_operations(interface: type) -> tuple[OperationDescriptor, ...]:
    """Enabled operations of `interface`, in declaration order."""
    descriptors = build_operation_registry(interface)
    return tuple(d for d in descriptors if d.enabled)


def build_operation_registry(interface: type) -> tuple[OperationDescriptor, ...]:
    """All verb-decorated operations of `interface`, disabled ones included."""
    if not is_capability_interface(interface):
        raise InvalidCapabilityTypeError(
            getattr(interface, "__name__", repr(interface)),
            "type does not derive from RemoteClient",
        )
    return tuple(
        build_operation_descriptor(interface, name, marker)
        for name, marker in operations_of(interface).items()
    )


def build_operation_descriptor(
    interface: type, name: str, marker: OperationMarker,
) -> OperationDescriptor:
    func = marker.function
    try:
        hints = get_type_hints(func)
    except NameError as e:
        raise InvalidCapabilityTypeError(
            interface.__name__, f"unresolvable annotation on '{name}': {e}",
        ) from e

    signature = inspect.signature(func)
    params = list(signature.parameters.values())[1:]  # drop self
    parameters = [_describe_parameter(interface, name, p, hints) for p in params]
    parameters = _assign_body(interface, name, parameters, marker.body)

    return OperationDescriptor(
        name=name,
        verb=marker.verb,
        enabled=not marker.disabled,
        parameters=tuple(parameters),
        return_shape=_classify_return_shape(func, hints.get("return", Any)),
    )


def _describe_parameter(
    interface: type, operation: str, param: inspect.Parameter, hints: dict,
) -> ParameterDescriptor:
    if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
        raise InvalidCapabilityTypeError(
            interface.__name__,
            f"operation '{operation}' declares variadic parameter '{param.name}'",
        )
    annotation = hints.get(param.name, Any)
    target, nullable = unwrap_optional(annotation)
    return ParameterDescriptor(
        name=param.name,
        annotation=annotation,
        target_type=target,
        nullable=nullable,
        kind=classify_argument_kind(annotation),
        keyword_only=param.kind is param.KEYWORD_ONLY,
        default=param.default,
    )


def _assign_body(
    interface: type,
    operation: str,
    parameters: list[ParameterDescriptor],
    declared_body: str | None,
) -> list[ParameterDescriptor]:
    """Mark the single body parameter: the declared one if eligible, else the first eligible."""
    names = [p.name for p in parameters]
    if declared_body is not None and declared_body not in names:
        raise InvalidCapabilityTypeError(
            interface.__name__,
            f"operation '{operation}' names unknown body parameter '{declared_body}'",
        )
    eligible = [p.name for p in parameters if is_body_eligible(p.annotation)]
    if declared_body in eligible:
        chosen = declared_body
    else:
        chosen = eligible[0] if eligible else None
    return [
        replace(p, kind=ArgumentKind.BODY, binds_body=True) if p.name == chosen else p
        for p in parameters
    ]


def _classify_return_shape(func: Any, annotation: Any) -> ReturnShape:
    if inspect.iscoroutinefunction(func):
        return _deferred_shape(annotation)
    origin = get_origin(annotation)
    if origin is Awaitable or origin is Coroutine:
        args = get_args(annotation)
        return _deferred_shape(args[-1] if args else Any)
    if annotation is None or annotation is type(None):
        return ReturnShape.VOID
    return ReturnShape.VALUE


def _deferred_shape(payload: Any) -> ReturnShape:
    if payload is None or payload is type(None):
        return ReturnShape.DEFERRED
    return ReturnShape.DEFERRED_VALUE


# ─── Discovery ───────────────────────────────────────────────────

def discover_capability_interfaces(*modules: ModuleType) -> list[type]:
    """Abstract RemoteClient subclasses defined in `modules`, in definition order."""
    found: list[type] = []
    for module in modules:
        for member in vars(module).values():
            if (
                is_capability_interface(member)
                and member.__module__ == module.__name__
                and inspect.isabstract(member)
                and member not in found
            ):
                found.append(member)
    if not found:
        raise NoCapabilityInterfacesError([m.__name__ for m in modules])
    return found
