"""Parameter Binder — resolves every operation parameter from an inbound request.

Invariants:
    - One BoundArgument per ParameterDescriptor, in declared order
    - Resolution order per parameter: body → query → route → default; first hit wins
    - Only the descriptor's body parameter reads the body; it never falls through
    - Declared Content-Length above the limit → PayloadTooLargeError, body never read
    - Streams without Content-Length are cut off as soon as they cross the limit
    - All-or-nothing: any failure raises, no partial argument list escapes

Design Decisions:
    - Body absent / not JSON / JSON null → None for every body type (one rule, no
      per-type empty instances)
    - Declared Python defaults beat zero values: `limit: int = 10` binds 10, not 0
"""

import logging
from dataclasses import dataclass
from typing import Any

from dynamic_api.core.descriptors import OperationDescriptor, ParameterDescriptor
from dynamic_api.core.domain_types import (
    DEFAULT_LIMITS, ArgumentKind, BindingLimits, BindingSource,
)
from dynamic_api.core.errors import PayloadTooLargeError
from dynamic_api.core.json_body import decode_json, validate_body
from dynamic_api.core.safe_convert import safe_convert, zero_value
from dynamic_api.services.request_context import RequestContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundArgument:
    """A typed argument value tagged with its kind and where it came from."""
    name: str
    kind: ArgumentKind
    source: BindingSource
    value: Any


async def bind_arguments(
    operation: OperationDescriptor,
    context: RequestContext,
    limits: BindingLimits = DEFAULT_LIMITS,
) -> list[BoundArgument]:
    """Bind all parameters of `operation` or raise on the first failure."""
    arguments = [
        await _bind_parameter(param, context, limits)
        for param in operation.parameters
    ]
    logger.debug(
        f"Bound {len(arguments)} argument(s) for {operation.name}: "
        f"{[(a.name, a.source.value) for a in arguments]}",
        extra={"operation": operation.name, "path": context.path},
    )
    return arguments


async def _bind_parameter(
    param: ParameterDescriptor, context: RequestContext, limits: BindingLimits,
) -> BoundArgument:
    if param.binds_body:
        value = await read_json_body(context, param.annotation, limits)
        return BoundArgument(param.name, param.kind, BindingSource.BODY, value)

    raw = context.query_value(param.name)
    if raw is not None:
        return BoundArgument(
            param.name, param.kind, BindingSource.QUERY,
            safe_convert(raw, param.annotation, param.name),
        )

    raw = context.route_value(param.name)
    if raw is not None:
        return BoundArgument(
            param.name, param.kind, BindingSource.ROUTE,
            safe_convert(raw, param.annotation, param.name),
        )

    value = param.default if param.has_default else zero_value(param.annotation)
    return BoundArgument(param.name, param.kind, BindingSource.DEFAULT, value)


async def read_json_body(
    context: RequestContext, annotation: Any, limits: BindingLimits,
) -> Any:
    """Read, bound, decode and validate the JSON body for `annotation`."""
    if context.content_length == 0 or not context.is_json:
        return None
    if (
        context.content_length is not None
        and context.content_length > limits.max_body_bytes
    ):
        raise PayloadTooLargeError(limits.max_body_bytes)

    raw = await _read_limited(context, limits.max_body_bytes)
    if not raw:
        return None
    return validate_body(decode_json(raw, limits.max_json_depth), annotation)


async def _read_limited(context: RequestContext, max_bytes: int) -> bytes:
    buffer = bytearray()
    async for chunk in context.body:
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise PayloadTooLargeError(max_bytes)
    return bytes(buffer)
