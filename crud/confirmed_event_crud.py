from typing import List
from schemas.confirmed_event import ConfirmedEvent, ConfirmedEventDetail
from schemas.event import Event
from schemas.user import User, Role
from config.database import Database
from core.exceptions import NotFoundError, PermissionDeniedError


async def get_user_confirmed_events(current_user: User) -> List[ConfirmedEvent]:
    db = Database()
    field = "vendor_id" if current_user.role == Role.vendor else "user_id"
    documents = await db.confirmed_events.find({field: current_user.user_id}).to_list(length=None)
    confirmed = [ConfirmedEvent(**d) for d in documents]
    confirmed.sort(key=lambda c: c.start_date)
    return confirmed


async def get_confirmed_event(current_user: User, confirmed_event_id: str) -> ConfirmedEventDetail:
    db = Database()
    confirmed = await db.confirmed_events.find_one({"confirmed_event_id": confirmed_event_id})
    if not confirmed:
        raise NotFoundError("Evenimentul confirmat nu a fost găsit")
    if current_user.user_id not in (confirmed["user_id"], confirmed["vendor_id"]) and current_user.role != Role.admin:
        raise PermissionDeniedError("Nu ai acces la acest eveniment")

    # The listing may have been deleted since the confirmation
    event = await db.events.find_one({"event_id": confirmed["event_id"]})
    return ConfirmedEventDetail(**confirmed, event=Event(**event) if event else None)
