from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum
import re
import random
import string
from datetime import datetime


class PriceUnit(str, Enum):
    per_hour = "per_hour"
    per_event = "per_event"
    per_person = "per_person"


class EventStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class SortOption(str, Enum):
    newest = "newest"
    price_asc = "price_asc"
    price_desc = "price_desc"
    name_asc = "name_asc"
    name_desc = "name_desc"
    rating_asc = "rating_asc"
    rating_desc = "rating_desc"


class Price(BaseModel):
    amount: float = 0
    type: PriceUnit = PriceUnit.per_event


class ServiceSnapshot(BaseModel):
    """The service as submitted by a vendor, copied into the listing on approval"""
    name: str
    description: str
    category_id: str
    subcategories: List[str] = []
    price: Price
    locations: List[str] = []
    date: datetime
    image_url: str
    tags: List[str] = []


class ServiceSubmission(BaseModel):
    name: str = ""
    description: str = ""
    category_id: str = ""
    subcategories: List[str] = []
    price: Price = Field(default_factory=Price)
    locations: List[str] = []
    date: str = Field("", description="Format: YYYY-MM-DD")
    image_url: str = ""
    phone: str = ""
    email: str = ""
    tags: List[str] = []


class Event(BaseModel):
    event_id: str
    name: str
    description: str
    category_id: str
    subcategories: List[str] = []
    tags: List[str] = []
    price: Price
    locations: List[str] = []
    date: datetime
    image_url: str
    vendor_id: str
    vendor_name: str
    vendor_phone: str
    vendor_email: str
    status: EventStatus = EventStatus.active
    rating: Optional[float] = None
    approval_request_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


class EventUpdate(BaseModel):
    name: str = ""
    description: str = ""
    price: Price = Field(default_factory=Price)
    locations: List[str] = []
    date: str = Field("", description="Format: YYYY-MM-DD")


class EventFilters(BaseModel):
    q: Optional[str] = None
    city: Optional[str] = None
    category_id: Optional[str] = None
    subcategory: Optional[str] = None
    tag: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    min_rating: Optional[float] = None
    sort: SortOption = SortOption.newest


class PaginationInfo(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_previous: bool


class EventPage(BaseModel):
    items: List[Event]
    pagination: PaginationInfo


def generate_event_id(name: str) -> str:
    # Remove special characters and spaces from name
    clean_name = re.sub(r'[^a-zA-Z0-9]', '', name)

    # Take first 3 characters of the name (or pad with 'X' if shorter)
    name_part = clean_name[:3].upper().ljust(3, 'X')

    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))

    return f"EV{name_part}{random_part}"
