# sage_insights/services/backend_client.py
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from sage_insights.api.v1.schemas import DowntimeSample, Lab, Machine, WorkOrder

logger = logging.getLogger("backend_client")


class BackendError(Exception):
    """Upstream request failed, returned an error status, or sent an unreadable body."""

    def __init__(self, endpoint: str, message: str):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint


class BackendClient:
    """Async reader for the labs / machines / work-orders / telemetry API.

    Timeouts are left to httpx defaults and nothing is retried; callers decide
    how a failure degrades.
    """

    LABS_PATH = "/api/labs/user"
    MACHINES_PATH = "/api/machines"
    WORK_ORDERS_PATH = "/api/work-orders"
    DOWNTIME_PATH = "/api/influxdb/downtime"

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def aclose(self):
        await self._client.aclose()

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            r = await self._client.get(path, params=params)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(path, f"status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise BackendError(path, f"request failed: {e!r}") from e

        try:
            body = r.json()
        except ValueError as e:
            raise BackendError(path, "response is not JSON") from e
        if not isinstance(body, dict):
            raise BackendError(path, "unexpected response shape")
        return body

    @staticmethod
    def _parse_list(path: str, model, raw, skip_invalid: bool = False) -> List[Any]:
        if not raw:
            return []
        if not isinstance(raw, list):
            raise BackendError(path, "expected a list")

        out = []
        for item in raw:
            try:
                out.append(model.model_validate(item))
            except ValidationError as e:
                if not skip_invalid:
                    raise BackendError(path, f"invalid record: {e}") from e
                logger.warning("%s: skipping unreadable record %r: %s", path, item, e)
        return out

    async def get_labs_for_user(self, user_id: str) -> List[Lab]:
        body = await self._get_json(self.LABS_PATH, {"userId": user_id})
        return self._parse_list(self.LABS_PATH, Lab, body.get("labs"))

    async def get_machines(self, lab_id: str) -> List[Machine]:
        body = await self._get_json(self.MACHINES_PATH, {"labId": lab_id})
        return self._parse_list(self.MACHINES_PATH, Machine, body.get("machines"))

    async def get_work_orders(self) -> List[WorkOrder]:
        """All work orders system-wide; the caller filters."""
        body = await self._get_json(self.WORK_ORDERS_PATH)
        # one bad record elsewhere in the system must not sink every lab
        return self._parse_list(self.WORK_ORDERS_PATH, WorkOrder, body.get("data"), skip_invalid=True)

    async def get_downtime(self, machine_id: str, time_range: str) -> Optional[DowntimeSample]:
        body = await self._get_json(
            self.DOWNTIME_PATH, {"machineId": machine_id, "timeRange": time_range}
        )
        data = body.get("data")
        if not data:
            return None
        try:
            return DowntimeSample.model_validate(data)
        except ValidationError as e:
            raise BackendError(self.DOWNTIME_PATH, f"invalid sample: {e}") from e
