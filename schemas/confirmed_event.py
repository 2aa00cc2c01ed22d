from pydantic import BaseModel, Field
from typing import Optional
import random
import string
from datetime import datetime
from schemas.event import Event, Price


class ConfirmedEvent(BaseModel):
    confirmed_event_id: str
    event_id: str
    request_id: str
    event_name: str
    user_id: str
    user_name: str
    vendor_id: str
    vendor_name: str
    service_type: str
    location: str
    start_date: datetime
    end_date: datetime
    price: Price
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ConfirmedEventDetail(ConfirmedEvent):
    event: Optional[Event] = Field(None, description="The listing, when it still exists")


def generate_confirmed_event_id(request_id: str) -> str:
    request_part = request_id[2:6]
    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"CE{request_part}{random_part}"
