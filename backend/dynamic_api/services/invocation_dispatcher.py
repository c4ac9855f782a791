"""Invocation Dispatcher — calls the target implementation and normalizes its result.

Invariants:
    - void and deferred (no payload) operations always yield None
    - deferred-value operations yield the awaited payload, unwrapped
    - Anything awaitable returned by the target is awaited, whatever the declared shape
    - Errors raised by the target propagate unchanged (no retry, no wrapping)
    - Sync target methods run in the worker threadpool, never on the event loop thread

Design Decisions:
    - Positional call for positional parameters, keyword call for keyword-only ones:
      mirrors the declared signature exactly
"""

import inspect
from typing import Any

from starlette.concurrency import run_in_threadpool

from dynamic_api.core.descriptors import OperationDescriptor
from dynamic_api.core.domain_types import (
    DEFAULT_LIMITS, BindingLimits, ReturnShape,
)
from dynamic_api.services.parameter_binder import BoundArgument, bind_arguments
from dynamic_api.services.request_context import RequestContext

_ABSENT_SHAPES = frozenset({ReturnShape.VOID, ReturnShape.DEFERRED})


async def invoke_operation(
    target: object,
    operation: OperationDescriptor,
    arguments: list[BoundArgument],
) -> Any:
    """Invoke `operation` on `target`; return its payload or None."""
    keyword_only = {p.name for p in operation.parameters if p.keyword_only}
    positional = [a.value for a in arguments if a.name not in keyword_only]
    keywords = {a.name: a.value for a in arguments if a.name in keyword_only}

    method = getattr(target, operation.name)
    if inspect.iscoroutinefunction(method):
        result = await method(*positional, **keywords)
    else:
        result = await run_in_threadpool(method, *positional, **keywords)
    if inspect.isawaitable(result):
        result = await result
    if operation.return_shape in _ABSENT_SHAPES:
        return None
    return result


async def dispatch(
    target: object,
    operation: OperationDescriptor,
    context: RequestContext,
    limits: BindingLimits = DEFAULT_LIMITS,
) -> Any:
    """Bind the request, then invoke. Binding failures never reach the target."""
    arguments = await bind_arguments(operation, context, limits)
    return await invoke_operation(target, operation, arguments)
