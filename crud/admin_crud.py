from typing import List
from schemas.admin import DashboardMetrics, ActivityItem, VendorSummary
from schemas.approval import ApprovalStatus
from schemas.event import Event
from schemas.user import Role, ROLE_LABELS
from config.database import Database
from crud.event_crud import ACTIVE_FILTER
from datetime import datetime, timedelta

RECENT_USERS = 5
RECENT_SERVICES = 5
ACTIVITY_LIMIT = 10


async def get_dashboard_metrics() -> DashboardMetrics:
    db = Database()
    week_ago = datetime.utcnow() - timedelta(days=7)

    return DashboardMetrics(
        pending_requests=await db.service_approval_requests.count_documents(
            {"status": ApprovalStatus.pending.value}
        ),
        new_users=await db.users.count_documents({"created_at": {"$gte": week_ago}}),
        active_services=await db.events.count_documents(ACTIVE_FILTER),
        total_vendors=await db.users.count_documents({"role": Role.vendor.value}),
    )


async def get_recent_activity() -> List[ActivityItem]:
    db = Database()
    users = await db.users.find({}, {"user_id": 1, "name": 1, "role": 1, "created_at": 1}).to_list(length=None)
    events = await db.events.find({}, {"event_id": 1, "name": 1, "vendor_name": 1, "created_at": 1}).to_list(length=None)

    users.sort(key=lambda u: u.get("created_at") or datetime.min, reverse=True)
    events.sort(key=lambda e: e.get("created_at") or datetime.min, reverse=True)

    activities = []
    for user in users[:RECENT_USERS]:
        label = ROLE_LABELS.get(Role(user.get("role", Role.participant.value)), user.get("role"))
        activities.append(ActivityItem(
            id=user["user_id"],
            type="user_registered",
            message=f"{user['name']} s-a înregistrat ca {label}",
            timestamp=user.get("created_at") or datetime.min,
            user_name=user["name"],
        ))
    for event in events[:RECENT_SERVICES]:
        activities.append(ActivityItem(
            id=event["event_id"],
            type="service_added",
            message=f'Serviciu nou adăugat: "{event["name"]}"',
            timestamp=event.get("created_at") or datetime.min,
            user_name=event.get("vendor_name"),
            service_name=event["name"],
        ))

    activities.sort(key=lambda a: a.timestamp, reverse=True)
    return activities[:ACTIVITY_LIMIT]


async def get_vendors_with_services() -> List[VendorSummary]:
    db = Database()
    vendors = await db.users.find({"role": Role.vendor.value}, {"password": 0, "notifications": 0}).to_list(length=None)
    events = await db.events.find({"vendor_id": {"$in": [v["user_id"] for v in vendors]}}).to_list(length=None)

    by_vendor = {}
    for event in events:
        by_vendor.setdefault(event["vendor_id"], []).append(Event(**event))

    summaries = [
        VendorSummary(
            user_id=vendor["user_id"],
            name=vendor["name"],
            email=vendor["email"],
            created_at=vendor.get("created_at"),
            services=by_vendor[vendor["user_id"]],
        )
        for vendor in vendors
        if by_vendor.get(vendor["user_id"])
    ]
    summaries.sort(key=lambda s: len(s.services), reverse=True)
    return summaries
