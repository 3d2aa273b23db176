# sage_insights/services/stats_aggregator.py
import asyncio
import datetime
import logging
from typing import Callable, Dict, List

from sage_insights.api.v1.insight_utils import months_before, parse_timestamp
from sage_insights.api.v1.schemas import LabInsights, MaintenanceStats, WorkOrder
from sage_insights.services.backend_client import BackendClient, BackendError
from sage_insights.services.notifications import Notifier

logger = logging.getLogger("stats_aggregator")

SECONDS_PER_DAY = 24 * 60 * 60
STATS_FAILED_MESSAGE = "Failed to load maintenance statistics"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class StatsAggregator:
    """Derives the maintenance summary for one lab from live upstream data.

    Every call recomputes from scratch; nothing is cached between calls.
    """

    def __init__(
        self,
        client: BackendClient,
        notifier: Notifier,
        downtime_time_range: str = "-7d",
        downtime_window_days: int = 7,
        lookback_months: int = 1,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ):
        self.client = client
        self.notifier = notifier
        self.downtime_time_range = downtime_time_range
        self.downtime_window_days = downtime_window_days
        self.lookback_months = lookback_months
        self.clock = clock

    async def compute_maintenance_stats(self, lab_id: str, last_known_machine_count: int = 0) -> MaintenanceStats:
        """Stats for ``lab_id``; a failed computation raises one error notification."""
        insights = await self.load_lab_insights(lab_id, last_known_machine_count)
        if insights.failed:
            self.notifier.error(STATS_FAILED_MESSAGE)
        return insights.stats

    async def load_lab_insights(self, lab_id: str, last_known_machine_count: int = 0) -> LabInsights:
        """Stats plus the raw machine list for ``lab_id``.

        Upstream failures on the machine or work-order calls yield the fallback
        stats with ``failed`` set; notifying is left to the caller, which may
        already have moved on to another lab. Telemetry failures only drop the
        affected machine's contribution.
        """
        try:
            return await self._collect(lab_id)
        except BackendError as e:
            logger.exception("stats for lab %s failed: %s", lab_id, e)
            return LabInsights(
                stats=MaintenanceStats.fallback(total_machines=last_known_machine_count),
                machines=[],
                failed=True,
            )

    async def _collect(self, lab_id: str) -> LabInsights:
        machines = await self.client.get_machines(lab_id)
        machine_ids = [m.id for m in machines]

        if not machine_ids:
            return LabInsights(stats=MaintenanceStats.fallback(total_machines=0), machines=[])

        work_orders = await self.client.get_work_orders()
        relevant = self._relevant_work_orders(work_orders, machine_ids)
        machines_with_maintenance = list(dict.fromkeys(wo.machine_id for wo in relevant))

        samples = await asyncio.gather(*(self._machine_window(mid) for mid in machine_ids))

        total_downtime = sum(s["downtime"] for s in samples)
        total_uptime = sum(s["uptime"] for s in samples)
        total_time_period = sum(s["total_time"] for s in samples)

        # no telemetry at all: treat every machine as up for the whole window
        if total_time_period == 0:
            total_time_period = self.downtime_window_days * SECONDS_PER_DAY * len(machine_ids)
            total_uptime = total_time_period
            total_downtime = 0

        if total_time_period > 0:
            downtime_percentage = total_downtime / total_time_period * 100
            uptime_percentage = total_uptime / total_time_period * 100
        else:
            downtime_percentage = 0
            uptime_percentage = 100

        stats = MaintenanceStats(
            total_machines=len(machines),
            scheduled_maintenance_count=len(relevant),
            machines_with_maintenance=machines_with_maintenance,
            total_downtime=total_downtime,
            total_uptime=total_uptime,
            total_time_period=total_time_period,
            downtime_percentage=downtime_percentage,
            uptime_percentage=uptime_percentage,
        )
        logger.debug("lab %s stats: %s", lab_id, stats)
        return LabInsights(stats=stats, machines=machines)

    def _relevant_work_orders(self, work_orders: List[WorkOrder], machine_ids: List[str]) -> List[WorkOrder]:
        cutoff = months_before(self.clock(), self.lookback_months)
        lab_machines = set(machine_ids)

        relevant = []
        for wo in work_orders:
            if wo.machine_id not in lab_machines:
                continue
            ts = parse_timestamp(wo.timestamp)
            if ts is not None and ts >= cutoff:
                relevant.append(wo)
        return relevant

    async def _machine_window(self, machine_id: str) -> Dict[str, float]:
        empty = {"downtime": 0, "uptime": 0, "total_time": 0}
        try:
            sample = await self.client.get_downtime(machine_id, self.downtime_time_range)
        except Exception as e:
            logger.warning("downtime for machine %s unavailable: %s", machine_id, e)
            return empty
        if sample is None:
            return empty

        downtime = sample.total_downtime or 0
        uptime = sample.total_uptime or 0
        return {"downtime": downtime, "uptime": uptime, "total_time": downtime + uptime}


def build_aggregator(client: BackendClient, notifier: Notifier, settings) -> StatsAggregator:
    return StatsAggregator(
        client,
        notifier,
        downtime_time_range=settings.DOWNTIME_TIME_RANGE,
        downtime_window_days=settings.DOWNTIME_WINDOW_DAYS,
        lookback_months=settings.WORK_ORDER_LOOKBACK_MONTHS,
    )
