"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ResourceName and RoutePath wrap str — never build paths from bare strings
    - All valid states encoded as Enums — no raw string matching
    - BindingLimits defaults: 1 MiB body, 32 levels of JSON nesting

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: HttpVerb.value is the exact method string FastAPI expects
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ResourceName = NewType("ResourceName", str)     # "IKulupClient" → "Kulup"
RoutePath = NewType("RoutePath", str)           # "/api/Kulup/list_members"


# ─── Enums ───────────────────────────────────────────────────────

class HttpVerb(str, Enum):
    """Verbs an operation can be exposed on."""
    GET = "GET"
    POST = "POST"


class ReturnShape(str, Enum):
    """Declared return shape of an operation — drives result normalization."""
    VOID = "void"
    VALUE = "value"
    DEFERRED = "deferred"              # awaitable, no payload
    DEFERRED_VALUE = "deferred_value"  # awaitable carrying a payload


class BindingSource(str, Enum):
    """Where a bound argument came from, in resolution priority order."""
    BODY = "body"
    QUERY = "query"
    ROUTE = "route"
    DEFAULT = "default"


class ArgumentKind(str, Enum):
    """Tag of the argument union — one per whitelisted type family."""
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    IDENTIFIER = "identifier"
    ENUMERATION = "enumeration"
    BODY = "body"
    UNSUPPORTED = "unsupported"


# ─── Limits ──────────────────────────────────────────────────────

MAX_BODY_BYTES = 1024 * 1024
MAX_JSON_DEPTH = 32


@dataclass(frozen=True)
class BindingLimits:
    """Safety limits applied while reading a JSON body."""
    max_body_bytes: int = MAX_BODY_BYTES
    max_json_depth: int = MAX_JSON_DEPTH


DEFAULT_LIMITS = BindingLimits()
