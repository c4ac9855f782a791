"""Client Registry — explicit interface → implementation factories for dynamic routes.

Invariants:
    - Only capability interfaces can be registered (InvalidCapabilityTypeError otherwise)
    - resolve() calls the factory on every request; instance lifetime is the factory's choice
    - Resolving an unregistered interface raises ClientNotRegisteredError (HTTP 500)

Design Decisions:
    - Passed to map_client()/create_app() by the caller, never a module-level singleton
"""

from typing import Callable, TypeVar

from dynamic_api.core.descriptors import is_capability_interface
from dynamic_api.core.errors import (
    ClientNotRegisteredError, InvalidCapabilityTypeError,
)

T = TypeVar("T")


class ClientRegistry:
    """Maps capability interfaces to the factories that build their implementations."""

    def __init__(self):
        self._factories: dict[type, Callable[[], object]] = {}

    def register(self, interface: type[T], factory: Callable[[], T]) -> "ClientRegistry":
        if not is_capability_interface(interface):
            raise InvalidCapabilityTypeError(
                getattr(interface, "__name__", repr(interface)),
                "only RemoteClient subclasses can be registered",
            )
        self._factories[interface] = factory
        return self

    def register_instance(self, interface: type[T], instance: T) -> "ClientRegistry":
        """Register a shared instance (same object for every request)."""
        return self.register(interface, lambda: instance)

    def resolve(self, interface: type[T]) -> T:
        factory = self._factories.get(interface)
        if factory is None:
            raise ClientNotRegisteredError(interface.__name__)
        return factory()

    def __contains__(self, interface: object) -> bool:
        return interface in self._factories
