"""Invocation Dispatcher — tests for return-shape normalization and error propagation.

Tests cover:
    - Deferred value payload surfaced unchanged ({"id": 1})
    - Deferred without payload and void operations surface None
    - Sync values returned directly, computed in the worker threadpool
    - Blocking sync calls do not serialize concurrent requests
    - Keyword-only parameters passed by keyword
    - Target exceptions propagate unwrapped
    - Binding failures never reach the target
"""

import asyncio
import threading

import pytest

from dynamic_api.core.descriptors import scan_operations
from dynamic_api.core.domain_types import BindingSource, ArgumentKind
from dynamic_api.core.errors import ParameterConversionError
from dynamic_api.core.markers import RemoteClient, get
from dynamic_api.services.invocation_dispatcher import dispatch, invoke_operation
from dynamic_api.services.parameter_binder import BoundArgument
from dynamic_api.services.request_context import RequestContext
from tests.sample_clients import (
    FakeKulupClient, FakeOrderService, FakeWeatherApi, IKulupClient,
    IOrderService, IWeatherApi,
)


def _op(interface, name):
    return next(op for op in scan_operations(interface) if op.name == name)


@pytest.mark.asyncio
async def test_deferred_value_payload_surfaced():
    result = await dispatch(
        FakeKulupClient(), _op(IKulupClient, "get_member"),
        RequestContext(query={"member_id": "6f1c2a4e-8d3b-4b7a-9c51-0e2d9f6a1b23"}),
    )
    assert result == {"id": 1}


@pytest.mark.asyncio
async def test_deferred_without_payload_is_absent():
    client = FakeKulupClient()
    result = await dispatch(client, _op(IKulupClient, "ping"), RequestContext())
    assert result is None
    assert client.calls == [("ping",)]


@pytest.mark.asyncio
async def test_fire_and_forget_awaited_before_returning():
    weather = FakeWeatherApi()
    result = await dispatch(weather, _op(IWeatherApi, "refresh"), RequestContext())
    assert result is None
    assert weather.refreshed == 1


@pytest.mark.asyncio
async def test_sync_value_returned_directly():
    result = await dispatch(
        FakeOrderService(), _op(IOrderService, "count"), RequestContext(),
    )
    assert result == 42


@pytest.mark.asyncio
async def test_sync_method_returning_awaitable_is_awaited():
    class ILegacy(RemoteClient):
        @get
        def fetch(self) -> dict: ...

    async def payload():
        return {"ok": True}

    class Legacy(ILegacy):
        def fetch(self):
            return payload()

    result = await dispatch(Legacy(), scan_operations(ILegacy)[0], RequestContext())
    assert result == {"ok": True}


@pytest.mark.asyncio
async def test_sync_method_runs_off_the_event_loop_thread():
    class IWhereabouts(RemoteClient):
        @get
        def where(self) -> int: ...

    class Where(IWhereabouts):
        def where(self):
            return threading.get_ident()

    result = await dispatch(Where(), scan_operations(IWhereabouts)[0], RequestContext())
    assert result != threading.get_ident()


@pytest.mark.asyncio
async def test_blocking_sync_calls_overlap():
    class IBlocking(RemoteClient):
        @get
        def wait(self) -> str: ...

    barrier = threading.Barrier(2, timeout=5)

    class Blocking(IBlocking):
        def wait(self):
            barrier.wait()
            return "done"

    operation = scan_operations(IBlocking)[0]
    results = await asyncio.gather(
        dispatch(Blocking(), operation, RequestContext()),
        dispatch(Blocking(), operation, RequestContext()),
    )
    assert results == ["done", "done"]


@pytest.mark.asyncio
async def test_keyword_only_argument_passed_by_keyword():
    orders = FakeOrderService()
    arguments = [
        BoundArgument("order", ArgumentKind.BODY, BindingSource.BODY, None),
        BoundArgument("priority", ArgumentKind.INTEGER, BindingSource.QUERY, 5),
    ]
    result = await invoke_operation(orders, _op(IOrderService, "place"), arguments)
    assert result == {"customer": None, "lines": 0, "priority": 5}


@pytest.mark.asyncio
async def test_void_operation_error_propagates_unwrapped():
    with pytest.raises(RuntimeError, match="archive backend exploded"):
        await dispatch(
            FakeOrderService(), _op(IOrderService, "archive"), RequestContext(),
        )


@pytest.mark.asyncio
async def test_binding_failure_never_invokes_target():
    client = FakeKulupClient()
    with pytest.raises(ParameterConversionError):
        await dispatch(
            client, _op(IKulupClient, "list_members"),
            RequestContext(query={"club_id": "seven"}),
        )
    assert client.calls == []


@pytest.mark.asyncio
async def test_cancellation_propagates():
    class ISlow(RemoteClient):
        @get
        async def wait(self) -> int: ...

    started = asyncio.Event()

    class Slow(ISlow):
        async def wait(self):
            started.set()
            await asyncio.sleep(10)
            return 1

    task = asyncio.create_task(
        dispatch(Slow(), scan_operations(ISlow)[0], RequestContext()),
    )
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
