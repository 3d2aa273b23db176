import datetime

import pytest

from sage_insights.api.v1.schemas import DowntimeSample, Lab, Machine, WorkOrder

NOW = datetime.datetime(2026, 10, 19, 12, 0, tzinfo=datetime.timezone.utc)
WEEK_SECONDS = 7 * 86400


def _iso(days_ago):
    return (NOW - datetime.timedelta(days=days_ago)).isoformat().replace("+00:00", "Z")


def _machine(mid, lab_id="L1"):
    return Machine.model_validate({"_id": mid, "machineName": mid.upper(), "labId": lab_id, "status": "active"})


def _work_order(machine_id, days_ago=None, **raw):
    if days_ago is not None:
        raw.setdefault("createdAt", _iso(days_ago))
    return WorkOrder.model_validate({"machineId": machine_id, **raw})


def _sample(down, up):
    return DowntimeSample.model_validate({"totalDowntime": down, "totalUptime": up})


class FakeBackend:
    """In-memory BackendClient stand-in; exception values are raised when requested."""

    def __init__(self, labs=None, machines=None, work_orders=None, downtime=None):
        self.labs = labs if labs is not None else []
        self.machines = machines or {}
        self.work_orders = work_orders if work_orders is not None else []
        self.downtime = downtime or {}
        self.calls = []

    @staticmethod
    def _result(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def get_labs_for_user(self, user_id):
        self.calls.append(("labs", user_id))
        return self._result(self.labs)

    async def get_machines(self, lab_id):
        self.calls.append(("machines", lab_id))
        return self._result(self.machines.get(lab_id, []))

    async def get_work_orders(self):
        self.calls.append(("work_orders",))
        return self._result(self.work_orders)

    async def get_downtime(self, machine_id, time_range):
        self.calls.append(("downtime", machine_id, time_range))
        return self._result(self.downtime.get(machine_id))

    def called(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def make_lab():
    return lambda lid, name=None: Lab.model_validate({"_id": lid, "name": name or lid})


@pytest.fixture
def make_machine():
    return _machine


@pytest.fixture
def make_work_order():
    return _work_order


@pytest.fixture
def make_sample():
    return _sample
