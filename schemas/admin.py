from pydantic import BaseModel
from typing import Dict, List, Literal, Optional
from datetime import datetime
from schemas.event import Event


class DashboardMetrics(BaseModel):
    pending_requests: int = 0
    new_users: int = 0
    active_services: int = 0
    total_vendors: int = 0


class ActivityItem(BaseModel):
    id: str
    type: Literal["user_registered", "service_added"]
    message: str
    timestamp: datetime
    user_name: Optional[str] = None
    service_name: Optional[str] = None


class VendorSummary(BaseModel):
    user_id: str
    name: str
    email: str
    created_at: Optional[datetime] = None
    services: List[Event] = []


class CascadeReport(BaseModel):
    target_id: str
    deleted: Dict[str, int]
