# sage_insights/api/v1/schemas.py
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class UpstreamModel(BaseModel):
    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


# ==== Upstream records ====
class Lab(UpstreamModel):
    id: str = Field(alias="_id")
    name: str = ""


class Machine(UpstreamModel):
    id: str = Field(alias="_id")
    name: Optional[str] = Field(None, alias="machineName")
    lab_id: Optional[str] = Field(None, alias="labId")
    status: Optional[str] = None   # active | inactive


class WorkOrder(UpstreamModel):
    machine_id: Optional[str] = Field(None, alias="machineId")
    # raw values, parsed leniently by the aggregator
    created_at: Any = Field(None, alias="createdAt")
    time: Any = Field(None, alias="_time")

    @property
    def timestamp(self) -> Any:
        return self.created_at or self.time


class DowntimeSample(UpstreamModel):
    total_downtime: Optional[float] = Field(None, alias="totalDowntime")
    total_uptime: Optional[float] = Field(None, alias="totalUptime")


class SessionUser(UpstreamModel):
    id: str = Field(alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None


# ==== Dashboard ====
class MaintenanceStats(BaseModel):
    total_machines: int
    scheduled_maintenance_count: int
    machines_with_maintenance: List[str]
    total_downtime: float       # seconds
    total_uptime: float         # seconds
    total_time_period: float    # seconds
    downtime_percentage: float
    uptime_percentage: float

    @classmethod
    def fallback(cls, total_machines: int = 0) -> "MaintenanceStats":
        """Conservative stats: nothing scheduled, fully up."""
        return cls(
            total_machines=total_machines,
            scheduled_maintenance_count=0,
            machines_with_maintenance=[],
            total_downtime=0,
            total_uptime=0,
            total_time_period=0,
            downtime_percentage=0,
            uptime_percentage=100,
        )


class LabInsights(BaseModel):
    stats: MaintenanceStats
    machines: List[Machine]
    failed: bool = False     # fallback stats after an upstream failure


class Notification(BaseModel):
    level: str      # info | error
    message: str


class LabStatsResponse(BaseModel):
    lab_id: str
    stats: Optional[MaintenanceStats]
    machines: List[Machine]
    notifications: List[Notification]
