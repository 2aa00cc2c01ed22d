from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from enum import Enum
import random
import string
from datetime import datetime


class RequestStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class RequestMessage(BaseModel):
    sender_id: str
    sender_name: str
    message: str
    timestamp: datetime


class BookingRequestCreate(BaseModel):
    phone: str = ""
    location: str = ""
    start_date: str = Field("", description="Format: YYYY-MM-DD")
    start_time: str = Field("10:00", description="Format: HH:MM in 24-hour format")
    end_date: str = Field("", description="Format: YYYY-MM-DD")
    end_time: str = Field("18:00", description="Format: HH:MM in 24-hour format")
    message: str = ""


class ServiceRequest(BaseModel):
    request_id: str
    event_id: str
    event_name: str
    vendor_id: str
    vendor_name: Optional[str] = None
    user_id: str
    user_name: str
    user_email: str
    user_phone: str
    message: str
    location: str
    start_date: datetime
    end_date: datetime
    status: RequestStatus = RequestStatus.pending
    messages: List[RequestMessage] = []
    confirmed_event_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


class StatusUpdate(BaseModel):
    status: Literal["accepted", "rejected"]


class MessageCreate(BaseModel):
    message: str = ""


def generate_request_id(event_id: str, user_id: str) -> str:
    # Take first characters after the prefix of both ids
    event_part = event_id[2:4]
    user_part = user_id[2:4]
    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"RQ{event_part}{user_part}{random_part}"
