"""JSON Body Decoding — comment skipping, depth guard, case-insensitive field matching.

Invariants:
    - All functions are PURE: they work on already-read text, never on a stream
    - Comments (// and /* */) outside string literals are skipped, never rejected
    - Nesting deeper than max_depth is rejected BEFORE json.loads sees the text
    - NaN / Infinity literals are rejected (not valid JSON)
    - Field names match model fields case-insensitively; exact matches win

Design Decisions:
    - Stdlib json for parsing and pydantic TypeAdapter for typing: the decoder
      stays standard, only the pre-scan is ours
    - One pass does both comment stripping and depth counting, so an oversized
      nesting bomb costs O(n) and never reaches the recursive decoder
"""

import dataclasses
import inspect
import json
import types
from functools import lru_cache
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError

from dynamic_api.core.errors import InvalidBodyError
from dynamic_api.core.safe_convert import unwrap_optional


def strip_comments(text: str, max_depth: int) -> str:
    """Drop comments outside strings and enforce the nesting limit."""
    out: list[str] = []
    depth = 0
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
        elif ch == "/" and text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            out.append(" ")
            continue
        elif ch == "/" and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise InvalidBodyError("unterminated comment")
            i = end + 2
            out.append(" ")
            continue
        elif ch in "[{":
            depth += 1
            if depth > max_depth:
                raise InvalidBodyError(
                    f"nesting exceeds the maximum depth of {max_depth}",
                )
        elif ch in "]}":
            depth -= 1
        out.append(ch)
        i += 1
    return "".join(out)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode_json(raw: bytes, max_depth: int) -> Any:
    """Bytes → Python JSON value. Raises InvalidBodyError on any defect."""
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidBodyError("body is not valid UTF-8") from e
    text = strip_comments(text, max_depth)
    if not text.strip():
        return None
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise InvalidBodyError(str(e)) from e


def match_field_names(data: Any, annotation: Any) -> Any:
    """Rename JSON keys to the declared field names, ignoring case.

    Walks pydantic models and dataclasses, recursing into lists, tuples and
    dict values. Keys with no matching field are passed through untouched.
    """
    target, _ = unwrap_optional(annotation)
    origin = get_origin(target)
    args = get_args(target)

    if isinstance(data, list):
        if origin in (list, set, frozenset) and args:
            return [match_field_names(item, args[0]) for item in data]
        if origin is tuple and args:
            if len(args) == 2 and args[1] is Ellipsis:
                return [match_field_names(item, args[0]) for item in data]
            return [
                match_field_names(item, args[i]) if i < len(args) else item
                for i, item in enumerate(data)
            ]
        return data

    if not isinstance(data, dict):
        return data
    if origin is dict and len(args) == 2:
        return {k: match_field_names(v, args[1]) for k, v in data.items()}
    if origin is Union or origin is types.UnionType or not inspect.isclass(target):
        return data

    fields = _declared_fields(target)
    if not fields:
        return data
    folded = {key.casefold(): (key, field_type) for key, field_type in fields.items()}
    matched: dict[str, Any] = {}
    for key, value in data.items():
        if key in fields:
            matched[key] = match_field_names(value, fields[key])
            continue
        hit = folded.get(key.casefold()) if isinstance(key, str) else None
        if hit is None:
            matched[key] = value
        elif hit[0] not in matched:
            matched[hit[0]] = match_field_names(value, hit[1])
    return matched


def _declared_fields(target: type) -> dict[str, Any]:
    """JSON key → field annotation for models and dataclasses."""
    if issubclass(target, BaseModel):
        return {
            (info.alias or name): info.annotation
            for name, info in target.model_fields.items()
        }
    if dataclasses.is_dataclass(target):
        return {f.name: f.type for f in dataclasses.fields(target)}
    return {}


@lru_cache(maxsize=256)
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def validate_body(data: Any, annotation: Any) -> Any:
    """Validate decoded JSON against the parameter type."""
    if data is None:
        return None
    target, _ = unwrap_optional(annotation)
    try:
        return _adapter(target).validate_python(match_field_names(data, target))
    except ValidationError as e:
        raise InvalidBodyError(
            "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ),
        ) from e
