from fastapi import APIRouter, Depends
from typing import List
from schemas.confirmed_event import ConfirmedEvent, ConfirmedEventDetail
from schemas.user import User
from config.security import get_current_user
from crud import confirmed_event_crud

router = APIRouter(
    prefix="/confirmed-events",
    tags=["confirmed-events"]
)


@router.get("/mine", response_model=List[ConfirmedEvent])
async def get_my_confirmed_events(current_user: User = Depends(get_current_user)):
    return await confirmed_event_crud.get_user_confirmed_events(current_user)


@router.get("/{confirmed_event_id}", response_model=ConfirmedEventDetail)
async def get_confirmed_event(confirmed_event_id: str, current_user: User = Depends(get_current_user)):
    return await confirmed_event_crud.get_confirmed_event(current_user, confirmed_event_id)
