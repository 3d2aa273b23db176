# Stand-in for the upstream labs/machines/work-orders/telemetry API.
# Run with: uvicorn sage_insights.tests.backend_mock:app --port 3000
import random
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import FastAPI, Query

app = FastAPI(title="Backend Mock Service")

LABS = [
    {"_id": "lab-1", "name": "Shopfloor A"},
    {"_id": "lab-2", "name": "Shopfloor B"},
    {"_id": "lab-empty", "name": "Empty Bay"},
]

MACHINES = [
    {"_id": "m-1", "machineName": "Lathe 1", "labId": "lab-1", "status": "active"},
    {"_id": "m-2", "machineName": "Mill 2", "labId": "lab-1", "status": "active"},
    {"_id": "m-3", "machineName": "Press 3", "labId": "lab-1", "status": "inactive"},
    {"_id": "m-4", "machineName": "Welder 4", "labId": "lab-2", "status": "active"},
]


def _iso(days_ago: int) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days_ago)).isoformat().replace("+00:00", "Z")


@app.get("/api/labs/user")
def labs_for_user(userId: str = Query(...)):
    return {"labs": LABS}


@app.get("/api/machines")
def machines(labId: str = Query(...)):
    return {"machines": [m for m in MACHINES if m["labId"] == labId]}


@app.get("/api/work-orders")
def work_orders():
    return {
        "data": [
            {"machineId": "m-1", "createdAt": _iso(3)},
            {"machineId": "m-1", "createdAt": _iso(20)},
            {"machineId": "m-2", "_time": _iso(10)},
            {"machineId": "m-3", "createdAt": _iso(60)},   # too old
            {"machineId": "m-4", "createdAt": _iso(5)},
        ]
    }


@app.get("/api/influxdb/downtime")
def downtime(machineId: str = Query(...), timeRange: Optional[str] = Query("-7d")):
    # m-3 has no telemetry
    if machineId == "m-3":
        return {"data": None}

    window = 7 * 24 * 60 * 60
    down = random.randint(0, window // 10)
    return {"data": {"totalDowntime": down, "totalUptime": window - down}}
