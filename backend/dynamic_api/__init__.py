"""Dynamic API — HTTP endpoints compiled from RemoteClient capability interfaces.

Invariants:
    - Package root re-exports the declaration surface only (RemoteClient, get, post,
      disabled) plus the registration entry points

Design Decisions:
    - Interfaces import from `dynamic_api` directly; internals stay in their layers
"""

from dynamic_api.api.client_registry import ClientRegistry
from dynamic_api.api.route_compiler import (
    map_all_clients, map_client, map_dynamic_api,
)
from dynamic_api.core.markers import RemoteClient, disabled, get, post
from dynamic_api.main import create_app

__all__ = [
    "ClientRegistry",
    "RemoteClient",
    "create_app",
    "disabled",
    "get",
    "map_all_clients",
    "map_client",
    "map_dynamic_api",
    "post",
]
