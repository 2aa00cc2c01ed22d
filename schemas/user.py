from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from enum import Enum
import re
import random
import string
from datetime import datetime


class Role(str, Enum):
    participant = "participant"
    vendor = "vendor"
    admin = "admin"


# How roles are named in user-facing Romanian text
ROLE_LABELS = {
    Role.participant: "participant",
    Role.vendor: "furnizor",
    Role.admin: "administrator",
}


class NotificationType(str, Enum):
    service_approved = "service_approved"
    service_rejected = "service_rejected"
    request_accepted = "request_accepted"
    request_rejected = "request_rejected"
    event_confirmed = "event_confirmed"
    new_message = "new_message"
    request_received = "request_received"


class Notification(BaseModel):
    notification_id: str
    type: NotificationType
    message: str
    created_at: datetime
    read: bool = False
    request_id: Optional[str] = None
    event_name: Optional[str] = None
    confirmed_event_id: Optional[str] = None


class UserCreate(BaseModel):
    # Plain strings so the registration form gets its own messages
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    role: Role = Role.participant


class UserLogin(BaseModel):
    email: str = ""
    password: str = ""


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    email: str
    role: Role
    saved_events: List[str] = []
    notifications: List[Notification] = []
    disabled: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User


class SessionState(BaseModel):
    user: User
    unread_notifications: int = 0
    pending_requests_count: int = 0


class SessionCounters(BaseModel):
    unread_notifications: int = 0
    pending_requests_count: int = 0


class PasswordResetRequest(BaseModel):
    email: str


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str


class FavoriteToggle(BaseModel):
    saved_events: List[str]
    is_favorite: bool
    message: str


def generate_user_id(name: str) -> str:
    # Remove special characters and spaces from name
    clean_name = re.sub(r'[^a-zA-Z0-9]', '', name)

    # Take first 3 characters of the name (or pad with 'X' if shorter)
    name_part = clean_name[:3].upper().ljust(3, 'X')

    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))

    return f"US{name_part}{random_part}"


def generate_notification_id() -> str:
    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=10))
    return f"NT{random_part}"
