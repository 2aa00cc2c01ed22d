from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
from schemas.event import Event, EventUpdate, EventFilters, EventPage, SortOption
from schemas.request import BookingRequestCreate, ServiceRequest
from schemas.user import User, Role
from config import settings
from config.security import get_current_user, require_role
from crud import event_crud, request_crud

router = APIRouter(
    prefix="/events",
    tags=["events"]
)


@router.get("", response_model=EventPage)
async def search_events(
    q: Optional[str] = None,
    city: Optional[str] = None,
    category_id: Optional[str] = None,
    subcategory: Optional[str] = None,
    tag: Optional[str] = None,
    price_min: Optional[float] = Query(None, ge=0),
    price_max: Optional[float] = Query(None, ge=0),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    sort: SortOption = SortOption.newest,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.EVENTS_PAGE_SIZE, ge=1, le=settings.EVENTS_MAX_PAGE_SIZE),
):
    filters = EventFilters(
        q=q,
        city=city,
        category_id=category_id,
        subcategory=subcategory,
        tag=tag,
        price_min=price_min,
        price_max=price_max,
        min_rating=min_rating,
        sort=sort,
    )
    return await event_crud.search_events(filters, page, page_size)


@router.get("/vendor/me", response_model=List[Event])
async def get_my_events(
    current_user: User = Depends(require_role(Role.vendor, detail="Doar furnizorii au servicii proprii"))
):
    return await event_crud.get_vendor_events(current_user.user_id)


@router.get("/{event_id}", response_model=Event)
async def get_event(event_id: str):
    event = await event_crud.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Evenimentul nu mai există")
    return event


@router.put("/{event_id}", response_model=Event)
async def update_event(event_id: str, data: EventUpdate, current_user: User = Depends(get_current_user)):
    return await event_crud.update_event(current_user, event_id, data)


@router.delete("/{event_id}")
async def delete_event(event_id: str, current_user: User = Depends(get_current_user)):
    await event_crud.delete_event_by_vendor(current_user, event_id)
    return {"message": "Serviciul a fost șters cu succes"}


@router.post("/{event_id}/requests", response_model=ServiceRequest, status_code=201)
async def create_booking_request(
    event_id: str,
    data: BookingRequestCreate,
    current_user: User = Depends(get_current_user),
):
    return await request_crud.create_request(current_user, event_id, data)
