from fastapi import APIRouter, Depends
from typing import List
from schemas.request import ServiceRequest, StatusUpdate, MessageCreate
from schemas.confirmed_event import ConfirmedEvent
from schemas.user import User
from config.security import get_current_user
from crud import request_crud

router = APIRouter(
    prefix="/requests",
    tags=["requests"]
)


@router.get("/mine", response_model=List[ServiceRequest])
async def get_my_requests(current_user: User = Depends(get_current_user)):
    return await request_crud.list_requests(current_user)


@router.put("/{request_id}/status", response_model=ServiceRequest)
async def update_request_status(
    request_id: str,
    update: StatusUpdate,
    current_user: User = Depends(get_current_user),
):
    return await request_crud.change_status(current_user, request_id, update.status)


@router.post("/{request_id}/messages", response_model=ServiceRequest)
async def add_request_message(
    request_id: str,
    data: MessageCreate,
    current_user: User = Depends(get_current_user),
):
    return await request_crud.add_message(current_user, request_id, data.message)


@router.post("/{request_id}/confirm", response_model=ConfirmedEvent)
async def confirm_request(request_id: str, current_user: User = Depends(get_current_user)):
    return await request_crud.confirm_request(current_user, request_id)
