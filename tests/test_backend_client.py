import asyncio
import json

import httpx
import pytest

from sage_insights.services.backend_client import BackendClient, BackendError


def _client(handler):
    return BackendClient("http://backend.test", transport=httpx.MockTransport(handler))


def _call(handler, method, *args):
    async def go():
        client = _client(handler)
        try:
            return await getattr(client, method)(*args)
        finally:
            await client.aclose()

    return asyncio.run(go())


def test_labs_for_user_sends_user_id():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"labs": [{"_id": "L1", "name": "Shopfloor A"}]})

    labs = _call(handler, "get_labs_for_user", "u1")

    assert seen == {"path": "/api/labs/user", "params": {"userId": "u1"}}
    assert [(lab.id, lab.name) for lab in labs] == [("L1", "Shopfloor A")]


def test_machines_parse_upstream_fields():
    def handler(request):
        assert request.url.params["labId"] == "L1"
        return httpx.Response(200, json={"machines": [
            {"_id": "m1", "machineName": "Lathe", "labId": "L1", "status": "active", "extra": 1},
        ]})

    machines = _call(handler, "get_machines", "L1")

    assert machines[0].id == "m1"
    assert machines[0].name == "Lathe"
    assert machines[0].lab_id == "L1"
    assert machines[0].status == "active"


@pytest.mark.parametrize("body", [{}, {"machines": None}, {"machines": []}])
def test_missing_lists_are_empty(body):
    assert _call(lambda request: httpx.Response(200, json=body), "get_machines", "L1") == []


def test_work_orders_keep_both_timestamps():
    def handler(request):
        assert request.url.path == "/api/work-orders"
        return httpx.Response(200, json={"data": [
            {"machineId": "m1", "createdAt": "2026-10-01T00:00:00Z", "title": "oil change"},
            {"machineId": "m2", "_time": "2026-10-02T00:00:00Z"},
        ]})

    orders = _call(handler, "get_work_orders")

    assert [o.timestamp for o in orders] == ["2026-10-01T00:00:00Z", "2026-10-02T00:00:00Z"]


def test_malformed_work_orders_are_skipped():
    def handler(request):
        return httpx.Response(200, json={"data": [
            {"machineId": "m1", "createdAt": "2026-10-01T00:00:00Z"},
            {"machineId": {"_id": "x"}},
            {"machineId": 42},
            "not a record",
        ]})

    orders = _call(handler, "get_work_orders")

    assert [o.machine_id for o in orders] == ["m1"]


def test_downtime_sample_and_missing_data():
    def handler(request):
        assert request.url.params["timeRange"] == "-7d"
        if request.url.params["machineId"] == "m1":
            return httpx.Response(200, json={"data": {"totalDowntime": 10, "totalUptime": 90}})
        return httpx.Response(200, json={"data": None})

    sample = _call(handler, "get_downtime", "m1", "-7d")
    assert (sample.total_downtime, sample.total_uptime) == (10, 90)
    assert _call(handler, "get_downtime", "m2", "-7d") is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, content=b"<html>gateway</html>"),
        httpx.Response(200, content=json.dumps([1, 2]).encode()),
        httpx.Response(200, json={"machines": {"not": "a list"}}),
        httpx.Response(200, json={"machines": [{"machineName": "no id"}]}),
    ],
)
def test_bad_responses_raise_backend_error(response):
    with pytest.raises(BackendError) as excinfo:
        _call(lambda request: response, "get_machines", "L1")
    assert excinfo.value.endpoint == "/api/machines"


def test_transport_errors_raise_backend_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendError):
        _call(handler, "get_work_orders")


def test_malformed_downtime_sample_raises():
    def handler(request):
        return httpx.Response(200, json={"data": {"totalDowntime": "lots"}})

    with pytest.raises(BackendError):
        _call(handler, "get_downtime", "m1", "-7d")
