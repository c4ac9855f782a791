"""Route Paths — resource naming and `{base}/{Resource}/{Operation}` path construction.

Invariants:
    - resource_name strips ONE leading "I" marker (only before an upper-case letter)
    - then at most ONE suffix, first match of ("Client", "Service", "Api")
    - build_route_path is the only place a dynamic route path is assembled

Design Decisions:
    - Deliberate path-compatibility deviation: the "I" marker is dropped only when
      an upper-case letter follows, so InventoryClient maps to "Inventory" and not
      "nventory" as a blind one-character trim would give. Paths of interfaces
      whose own name starts with "I" differ from hosts that trim unconditionally
"""

from dynamic_api.core.domain_types import ResourceName, RoutePath

MARKER_PREFIX = "I"
RESOURCE_SUFFIXES = ("Client", "Service", "Api")


def resource_name(type_name: str) -> ResourceName:
    """IKulupClient → Kulup, IOrderService → Order, IThing → Thing."""
    name = type_name
    if len(name) > 1 and name.startswith(MARKER_PREFIX) and name[1].isupper():
        name = name[1:]
    for suffix in RESOURCE_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            name = name[: -len(suffix)]
            break
    return ResourceName(name)


def build_route_path(base_route: str, interface: type, operation: str) -> RoutePath:
    base = base_route.rstrip("/")
    return RoutePath(f"{base}/{resource_name(interface.__name__)}/{operation}")
