"""Operation Markers — RemoteClient base class and the @get / @post / @disabled decorators.

Invariants:
    - Only RemoteClient subclasses carry an operation registry
    - The registry is built once, at class-definition time, in declaration order
    - Inherited operations come first; an override keeps the slot of the base declaration
    - Undecorated overrides (implementations) never erase an inherited marker
    - Verb-decorated methods are abstract: interfaces are abstract, implementations concrete

Design Decisions:
    - Decorators write plain attributes on the function; __init_subclass__ collects
      them into an explicit name → OperationMarker mapping. The scanner reads only
      that mapping (no dir()/getattr sweep over the class)
    - @get and @post work bare or called: @get, @get(), @post(body="order")
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

from dynamic_api.core.domain_types import HttpVerb

_VERB_ATTR = "__remote_verb__"
_BODY_ATTR = "__remote_body__"
_DISABLED_ATTR = "__remote_disabled__"


@dataclass(frozen=True)
class OperationMarker:
    """Metadata declared on one interface method."""
    verb: HttpVerb
    function: Callable[..., Any]
    disabled: bool = False
    body: str | None = None


class RemoteClient(ABC):
    """Marker base for capability interfaces exposed as dynamic endpoints."""

    __remote_operations__: Mapping[str, OperationMarker] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        operations: dict[str, OperationMarker] = {}
        for base in reversed(cls.__mro__[1:]):
            operations.update(base.__dict__.get("__remote_operations__", {}))
        for name, member in cls.__dict__.items():
            marker = _read_marker(member)
            if marker is not None:
                operations[name] = marker
        cls.__remote_operations__ = MappingProxyType(operations)


def operations_of(cls: type) -> Mapping[str, OperationMarker]:
    """Declared operations of a RemoteClient subclass, in declaration order."""
    return cls.__dict__.get("__remote_operations__", MappingProxyType({}))


def _read_marker(member: object) -> OperationMarker | None:
    verb = getattr(member, _VERB_ATTR, None)
    if verb is None or not callable(member):
        return None
    return OperationMarker(
        verb=verb,
        function=member,
        disabled=getattr(member, _DISABLED_ATTR, False),
        body=getattr(member, _BODY_ATTR, None),
    )


def _verb_decorator(verb: HttpVerb):
    def decorator(func=None, *, body: str | None = None):
        def apply(f):
            setattr(f, _VERB_ATTR, verb)
            setattr(f, _BODY_ATTR, body)
            return abstractmethod(f)

        if func is None:
            return apply
        return apply(func)

    decorator.__name__ = verb.value.lower()
    decorator.__doc__ = (
        f"Expose the decorated method as a {verb.value} operation. "
        f"body= names the parameter read from the JSON body."
    )
    return decorator


get = _verb_decorator(HttpVerb.GET)
post = _verb_decorator(HttpVerb.POST)


def disabled(func):
    """Exclude an operation from route compilation. Order relative to @get/@post is free."""
    setattr(func, _DISABLED_ATTR, True)
    return func
