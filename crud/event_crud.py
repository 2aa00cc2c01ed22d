from typing import List, Optional
from schemas.event import Event, EventUpdate, EventFilters, EventPage, PaginationInfo, SortOption, \
    EventStatus, generate_event_id
from schemas.user import User, Role
from config.database import Database
from config import settings
from core.documents import to_document
from core.exceptions import FormValidationError, NotFoundError, PermissionDeniedError
from services.validation import validate_event_update, remove_diacritics
from scripts.time_parse import date_to_datetime
from datetime import datetime
import logging
import math

logger = logging.getLogger(__name__)

# Listings without a status predate the field and count as active
ACTIVE_FILTER = {"$or": [{"status": EventStatus.active.value}, {"status": {"$exists": False}}]}

EVENT_NOT_FOUND_MESSAGE = "Evenimentul nu mai există"


def _matches_text(event: Event, q: str) -> bool:
    needle = remove_diacritics(q.strip())
    return any(
        needle in remove_diacritics(value or "")
        for value in (event.name, event.description, event.vendor_name)
    )


def _matches_city(event: Event, city: str) -> bool:
    needle = remove_diacritics(city.strip())
    return any(needle in remove_diacritics(location) for location in event.locations)


def sort_events(events: List[Event], sort: SortOption) -> List[Event]:
    if sort == SortOption.price_asc:
        return sorted(events, key=lambda e: e.price.amount)
    if sort == SortOption.price_desc:
        return sorted(events, key=lambda e: e.price.amount, reverse=True)
    if sort == SortOption.name_asc:
        return sorted(events, key=lambda e: remove_diacritics(e.name))
    if sort == SortOption.name_desc:
        return sorted(events, key=lambda e: remove_diacritics(e.name), reverse=True)
    if sort == SortOption.rating_asc:
        return sorted(events, key=lambda e: e.rating or 0)
    if sort == SortOption.rating_desc:
        return sorted(events, key=lambda e: e.rating or 0, reverse=True)
    return sorted(events, key=lambda e: e.created_at, reverse=True)


def paginate(events: List[Event], page: int, page_size: int) -> EventPage:
    page_size = max(1, min(page_size, settings.EVENTS_MAX_PAGE_SIZE))
    total_items = len(events)
    total_pages = max(1, math.ceil(total_items / page_size))
    page = max(1, page)

    start = (page - 1) * page_size
    return EventPage(
        items=events[start:start + page_size],
        pagination=PaginationInfo(
            current_page=page,
            total_pages=total_pages,
            total_items=total_items,
            items_per_page=page_size,
            has_next=page < total_pages,
            has_previous=page > 1,
        )
    )


async def search_events(filters: EventFilters, page: int = 1, page_size: int = settings.EVENTS_PAGE_SIZE) -> EventPage:
    db = Database()
    query = dict(ACTIVE_FILTER)
    if filters.category_id:
        query["category_id"] = filters.category_id
    if filters.subcategory:
        query["subcategories"] = filters.subcategory
    if filters.tag:
        query["tags"] = filters.tag

    documents = await db.events.find(query).to_list(length=None)
    events = [Event(**document) for document in documents]

    if filters.q:
        events = [e for e in events if _matches_text(e, filters.q)]
    if filters.city:
        events = [e for e in events if _matches_city(e, filters.city)]
    if filters.price_min is not None:
        events = [e for e in events if e.price.amount >= filters.price_min]
    if filters.price_max is not None:
        events = [e for e in events if e.price.amount <= filters.price_max]
    if filters.min_rating is not None:
        events = [e for e in events if (e.rating or 0) >= filters.min_rating]

    return paginate(sort_events(events, filters.sort), page, page_size)


async def get_event(event_id: str) -> Optional[Event]:
    db = Database()
    event = await db.events.find_one({"event_id": event_id})
    if event:
        return Event(**event)
    return None


async def get_vendor_events(vendor_id: str) -> List[Event]:
    db = Database()
    events = await db.events.find({"vendor_id": vendor_id}).to_list(length=None)
    return sort_events([Event(**e) for e in events], SortOption.newest)


async def create_event_from_approval(approval: dict) -> Event:
    """Publish an approved submission as an active listing."""
    db = Database()
    service = approval["service"]
    event = Event(
        event_id=generate_event_id(service["name"]),
        name=service["name"],
        description=service["description"],
        category_id=service["category_id"],
        subcategories=service.get("subcategories", []),
        tags=service.get("tags", []),
        price=service["price"],
        locations=service.get("locations", []),
        date=service["date"],
        image_url=service["image_url"],
        vendor_id=approval["vendor_id"],
        vendor_name=approval["vendor_name"],
        vendor_phone=approval["vendor_phone"],
        vendor_email=approval["vendor_email"],
        status=EventStatus.active,
        approval_request_id=approval["request_id"],
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )
    await db.events.insert_one(to_document(event))
    logger.info(f"Published listing {event.event_id} from approval {approval['request_id']}")
    return event


async def _get_owned_event(current_user: User, event_id: str, role_message: str, owner_message: str) -> dict:
    if current_user.role != Role.vendor:
        raise PermissionDeniedError(role_message)

    db = Database()
    event = await db.events.find_one({"event_id": event_id})
    if not event:
        raise NotFoundError(EVENT_NOT_FOUND_MESSAGE)
    if event["vendor_id"] != current_user.user_id:
        raise PermissionDeniedError(owner_message)
    return event


async def update_event(current_user: User, event_id: str, data: EventUpdate) -> Event:
    await _get_owned_event(
        current_user, event_id,
        "Doar furnizorii pot edita servicii",
        "Nu ai permisiunea să editezi acest serviciu"
    )

    errors = validate_event_update(data)
    if errors:
        raise FormValidationError(errors)

    db = Database()
    update_data = {
        "name": data.name.strip(),
        "description": data.description.strip(),
        "price": to_document(data.price),
        "locations": [location.strip() for location in data.locations if location.strip()],
        "date": date_to_datetime(data.date),
        "updated_at": datetime.utcnow(),
    }
    await db.events.update_one({"event_id": event_id}, {"$set": update_data})
    logger.info(f"Vendor {current_user.user_id} updated listing {event_id}")
    return await get_event(event_id)


async def delete_event_by_vendor(current_user: User, event_id: str) -> bool:
    await _get_owned_event(
        current_user, event_id,
        "Doar furnizorii pot șterge servicii",
        "Nu ai permisiunea să ștergi acest serviciu"
    )
    db = Database()
    result = await db.events.delete_one({"event_id": event_id, "vendor_id": current_user.user_id})
    logger.info(f"Vendor {current_user.user_id} deleted listing {event_id}")
    return bool(result.deleted_count)
