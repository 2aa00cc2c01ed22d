from fastapi import APIRouter, Depends
from typing import List
from schemas.admin import DashboardMetrics, ActivityItem, VendorSummary, CascadeReport
from schemas.approval import ServiceApprovalRequest, ApprovalDecision
from schemas.user import User, Role
from config.database import Database, get_db
from config.security import require_role
from crud import admin_crud, approval_crud
from services import cascade_service

router = APIRouter(
    prefix="/admin",
    tags=["admin"]
)

admin_only = require_role(Role.admin)


@router.get("/metrics", response_model=DashboardMetrics)
async def get_metrics(current_user: User = Depends(admin_only)):
    return await admin_crud.get_dashboard_metrics()


@router.get("/activity", response_model=List[ActivityItem])
async def get_recent_activity(current_user: User = Depends(admin_only)):
    return await admin_crud.get_recent_activity()


@router.get("/requests", response_model=List[ServiceApprovalRequest])
async def get_pending_requests(current_user: User = Depends(admin_only)):
    return await approval_crud.get_pending_requests()


@router.post("/requests/{request_id}/approve", response_model=ServiceApprovalRequest)
async def approve_request(
    request_id: str,
    decision: ApprovalDecision = ApprovalDecision(),
    current_user: User = Depends(admin_only),
):
    return await approval_crud.approve_request(request_id, decision.feedback)


@router.post("/requests/{request_id}/reject", response_model=ServiceApprovalRequest)
async def reject_request(
    request_id: str,
    decision: ApprovalDecision = ApprovalDecision(),
    current_user: User = Depends(admin_only),
):
    return await approval_crud.reject_request(request_id, decision.feedback)


@router.get("/vendors", response_model=List[VendorSummary])
async def get_vendors(current_user: User = Depends(admin_only)):
    return await admin_crud.get_vendors_with_services()


@router.delete("/vendors/{vendor_id}", response_model=CascadeReport)
async def delete_vendor(vendor_id: str, current_user: User = Depends(admin_only), db: Database = Depends(get_db)):
    return await cascade_service.delete_vendor(db, vendor_id)


@router.delete("/events/{event_id}", response_model=CascadeReport)
async def delete_event(event_id: str, current_user: User = Depends(admin_only), db: Database = Depends(get_db)):
    return await cascade_service.delete_listing(db, event_id)
