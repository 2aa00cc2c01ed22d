from fastapi import APIRouter, Depends
from schemas.approval import ServiceApprovalRequest, VendorSubmissions
from schemas.event import ServiceSubmission
from schemas.user import User, Role
from config.security import get_current_user, require_role
from crud import approval_crud

router = APIRouter(
    prefix="/approvals",
    tags=["approvals"]
)


@router.post("", response_model=ServiceApprovalRequest, status_code=201)
async def submit_service(data: ServiceSubmission, current_user: User = Depends(get_current_user)):
    return await approval_crud.submit_service(current_user, data)


@router.get("/mine", response_model=VendorSubmissions)
async def get_my_submissions(
    current_user: User = Depends(require_role(Role.vendor, detail="Doar furnizorii pot adăuga servicii"))
):
    return await approval_crud.get_vendor_submissions(current_user.user_id)
