"""Safe Conversion — whitelisted string-to-value coercion for query and route inputs.

Invariants:
    - All functions are PURE: no IO, no async
    - Only enums and the scalar whitelist (str, int, Decimal, bool, datetime, UUID)
      are ever produced from query/route text — everything else raises
      UnsupportedParameterTypeError
    - int is bounded to the signed 64-bit range and accepts only ASCII digits with an
      optional sign; Decimal must be finite
    - zero_value() is an explicit table, never a constructor call on an arbitrary type

Design Decisions:
    - Exact type lookup (not issubclass): bool never matches int, str subclasses
      are not silently accepted
    - NewType aliases unwrap to their supertype before lookup
"""

import inspect
import re
import types
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import partial
from typing import Any, Union, get_args, get_origin
from uuid import UUID

from dynamic_api.core.domain_types import ArgumentKind
from dynamic_api.core.errors import (
    ParameterConversionError,
    UnsupportedParameterTypeError,
)
from dynamic_api.core.markers import RemoteClient

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1
_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")

_SCALAR_KINDS: dict[type, ArgumentKind] = {
    str: ArgumentKind.TEXT,
    int: ArgumentKind.INTEGER,
    Decimal: ArgumentKind.DECIMAL,
    bool: ArgumentKind.BOOLEAN,
    datetime: ArgumentKind.TIMESTAMP,
    UUID: ArgumentKind.IDENTIFIER,
}

# Types that are values, not bodies, even when they are outside the whitelist
_VALUE_TYPES = (
    str, bytes, bytearray, int, float, complex, Decimal, bool,
    date, time, timedelta, UUID, Enum,
)

_CALLABLE_TYPES = (
    types.FunctionType, types.MethodType, types.BuiltinFunctionType, partial,
)

_ZERO_VALUES: dict[type, Any] = {
    int: 0,
    Decimal: Decimal(0),
    bool: False,
    datetime: datetime.min,
    UUID: UUID(int=0),
}


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Return (inner type, nullable). `int | None` → (int, True)."""
    annotation = _unwrap_newtype(annotation)
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return _unwrap_newtype(args[0]), True
        return annotation, type(None) in get_args(annotation)
    return annotation, False


def _unwrap_newtype(annotation: Any) -> Any:
    while hasattr(annotation, "__supertype__"):
        annotation = annotation.__supertype__
    return annotation


def type_name(annotation: Any) -> str:
    target, _ = unwrap_optional(annotation)
    return getattr(target, "__name__", None) or repr(target)


def classify_argument_kind(annotation: Any) -> ArgumentKind:
    """Scalar kind of a parameter type; UNSUPPORTED outside the whitelist."""
    target, _ = unwrap_optional(annotation)
    if inspect.isclass(target) and issubclass(target, Enum):
        return ArgumentKind.ENUMERATION
    return _SCALAR_KINDS.get(target, ArgumentKind.UNSUPPORTED)


def is_body_eligible(annotation: Any) -> bool:
    """Concrete non-value classes, arrays (list/tuple) and dicts can bind from JSON."""
    target, _ = unwrap_optional(annotation)
    origin = get_origin(target) or target
    if origin in (list, tuple, dict):
        return True
    if origin is Any or origin is object or not inspect.isclass(origin):
        return False
    if issubclass(origin, _VALUE_TYPES) or issubclass(origin, _CALLABLE_TYPES):
        return False
    if issubclass(origin, RemoteClient):
        return False
    if getattr(origin, "_is_protocol", False):
        return False
    return not inspect.isabstract(origin)


def safe_convert(raw: Any, annotation: Any, parameter: str) -> Any:
    """Convert a query/route value to the parameter's declared type.

    Raises ParameterConversionError (or its UnsupportedParameterTypeError
    subclass) naming the parameter, the target type and the raw input.
    """
    if raw is None:
        return None
    target, _ = unwrap_optional(annotation)
    kind = classify_argument_kind(target)
    if kind is ArgumentKind.UNSUPPORTED:
        raise UnsupportedParameterTypeError(parameter, type_name(target), raw)
    if type(raw) is target:
        return raw
    text = raw if isinstance(raw, str) else str(raw)
    try:
        return _CONVERTERS[kind](text, target)
    except (ValueError, ArithmeticError) as e:
        raise ParameterConversionError(
            parameter, type_name(target), raw,
        ) from e


def zero_value(annotation: Any) -> Any:
    """Default for a parameter with no input and no declared default."""
    target, nullable = unwrap_optional(annotation)
    if nullable:
        return None
    if inspect.isclass(target) and issubclass(target, Enum):
        return next(iter(target), None)
    return _ZERO_VALUES.get(target)


# ─── Converters (raise ValueError on bad input) ─────────────────

def _to_text(text: str, target: type) -> str:
    return text


def _to_integer(text: str, target: type) -> int:
    text = text.strip()
    if not _INTEGER_TEXT.fullmatch(text):
        raise ValueError(f"'{text}' is not an integer")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"{value} is outside the 64-bit integer range")
    return value


def _to_decimal(text: str, target: type) -> Decimal:
    try:
        value = Decimal(text.strip())
    except InvalidOperation as e:
        raise ValueError(f"'{text}' is not a decimal") from e
    if not value.is_finite():
        raise ValueError(f"'{text}' is not a finite decimal")
    return value


def _to_boolean(text: str, target: type) -> bool:
    lowered = text.strip().casefold()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"'{text}' is not a boolean")


def _to_timestamp(text: str, target: type) -> datetime:
    return datetime.fromisoformat(text.strip())


def _to_identifier(text: str, target: type) -> UUID:
    return UUID(text.strip())


def _to_enumeration(text: str, target: type[Enum]) -> Enum:
    wanted = text.strip().casefold()
    for member in target:
        if member.name.casefold() == wanted:
            return member
    for member in target:
        if str(member.value) == text.strip():
            return member
    raise ValueError(f"'{text}' is not a member of {target.__name__}")


_CONVERTERS = {
    ArgumentKind.TEXT: _to_text,
    ArgumentKind.INTEGER: _to_integer,
    ArgumentKind.DECIMAL: _to_decimal,
    ArgumentKind.BOOLEAN: _to_boolean,
    ArgumentKind.TIMESTAMP: _to_timestamp,
    ArgumentKind.IDENTIFIER: _to_identifier,
    ArgumentKind.ENUMERATION: _to_enumeration,
}
