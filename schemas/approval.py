from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum
import random
import string
from datetime import datetime
from schemas.event import ServiceSnapshot


class ApprovalStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ServiceApprovalRequest(BaseModel):
    request_id: str
    vendor_id: str
    vendor_name: str
    vendor_email: str
    vendor_phone: str
    service: ServiceSnapshot
    status: ApprovalStatus = ApprovalStatus.pending
    admin_feedback: Optional[str] = None
    event_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ApprovalDecision(BaseModel):
    feedback: Optional[str] = Field(None, description="Optional message shown to the vendor")


class VendorSubmissions(BaseModel):
    pending: List[ServiceApprovalRequest] = []
    approved: List[ServiceApprovalRequest] = []
    rejected: List[ServiceApprovalRequest] = []


def generate_approval_id(vendor_id: str) -> str:
    vendor_part = vendor_id[2:5]
    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"AR{vendor_part}{random_part}"
