# sage_insights/web/dashboard.py
import logging
from collections import OrderedDict
from enum import Enum
from typing import Dict, List, Optional

from sage_insights.api.v1.schemas import Lab, Machine, MaintenanceStats
from sage_insights.services.backend_client import BackendClient, BackendError
from sage_insights.services.notifications import Notifier
from sage_insights.services.stats_aggregator import STATS_FAILED_MESSAGE, StatsAggregator, build_aggregator

logger = logging.getLogger("dashboard")

NO_LABS_MESSAGE = "No labs found for this user"
LABS_FAILED_MESSAGE = "Failed to load labs"


class ViewState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    STATS_LOADING = "stats_loading"
    STATS_READY = "stats_ready"


class DashboardView:
    """Lab selector plus stat cards for one user.

    Each lab selection bumps a generation counter; a computation whose
    generation is no longer current when it resolves is dropped, so the last
    selection always wins.
    """

    def __init__(self, client: BackendClient, aggregator: StatsAggregator, notifier: Notifier):
        self.client = client
        self.aggregator = aggregator
        self.notifier = notifier

        self.state = ViewState.LOADING
        self.labs: List[Lab] = []
        self.selected_lab_id: Optional[str] = None
        self.machines: List[Machine] = []
        self.stats: Optional[MaintenanceStats] = None

        self._generation = 0
        self._machine_counts: Dict[str, int] = {}

    @property
    def selected_lab(self) -> Optional[Lab]:
        return next((lab for lab in self.labs if lab.id == self.selected_lab_id), None)

    @property
    def loading_stats(self) -> bool:
        return self.state == ViewState.STATS_LOADING

    async def mount(self, user_id: str, auto_select: bool = True):
        """Page load: fetch the user's labs and pick the first one."""
        self._generation += 1
        self.state = ViewState.LOADING
        self.selected_lab_id = None
        self.stats = None
        self.machines = []
        try:
            self.labs = await self.client.get_labs_for_user(user_id)
        except BackendError as e:
            logger.error("Error fetching labs for user %s: %s", user_id, e)
            self.labs = []
            self.notifier.error(LABS_FAILED_MESSAGE)
            self.state = ViewState.READY
            return

        self.state = ViewState.READY
        if not self.labs:
            self.notifier.error(NO_LABS_MESSAGE)
            return
        if auto_select:
            await self.select_lab(self.labs[0].id)

    async def select_lab(self, lab_id: str):
        self._generation += 1
        generation = self._generation

        self.selected_lab_id = lab_id
        self.stats = None
        self.machines = []
        self.state = ViewState.STATS_LOADING

        insights = await self.aggregator.load_lab_insights(
            lab_id, last_known_machine_count=self._machine_counts.get(lab_id, 0)
        )

        if generation != self._generation:
            logger.debug("discarding stale stats for lab %s (generation %s < %s)",
                         lab_id, generation, self._generation)
            return

        if insights.failed:
            self.notifier.error(STATS_FAILED_MESSAGE)
        self._machine_counts[lab_id] = insights.stats.total_machines
        self.machines = insights.machines
        self.stats = insights.stats
        self.state = ViewState.STATS_READY


class ViewRegistry:
    """One dashboard view per user, shared across that user's requests.

    Holds at most ``max_views`` views; the least recently used one is evicted.
    """

    def __init__(self, client: BackendClient, settings, max_views: Optional[int] = None):
        self.client = client
        self.settings = settings
        self.max_views = max_views or settings.MAX_DASHBOARD_VIEWS
        self._views: "OrderedDict[str, DashboardView]" = OrderedDict()

    def get(self, user_id: str) -> DashboardView:
        view = self._views.get(user_id)
        if view is not None:
            self._views.move_to_end(user_id)
            return view

        notifier = Notifier()
        aggregator = build_aggregator(self.client, notifier, self.settings)
        view = DashboardView(self.client, aggregator, notifier)
        self._views[user_id] = view
        while len(self._views) > self.max_views:
            evicted, _ = self._views.popitem(last=False)
            logger.debug("evicted dashboard view for user %s", evicted)
        return view
