from fastapi import APIRouter, Depends, WebSocket, status
from typing import Any, Dict, List
from schemas.user import User, Role, SessionState, FavoriteToggle, Notification
from schemas.event import Event
from config.database import Database, get_db
from config.security import get_current_user, get_token_claims, revoke_token, authenticate_token
from core.exceptions import AuthError, NotFoundError
from crud import user_crud
from services import cascade_service
from services.notification_service import NotificationService
from services.session_service import get_session_state, stream_session

router = APIRouter(
    prefix="/users",
    tags=["users"]
)


@router.get("/me", response_model=User)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.delete("/me")
async def delete_me(
    current_user: User = Depends(get_current_user),
    claims: Dict[str, Any] = Depends(get_token_claims),
    db: Database = Depends(get_db),
):
    if current_user.role == Role.vendor:
        report = await cascade_service.delete_vendor(db, current_user.user_id)
        deleted = report.deleted
    else:
        await user_crud.delete_user(current_user.user_id)
        deleted = {"users": 1}
    await revoke_token(claims)
    return {"message": "Contul a fost șters", "deleted": deleted}


@router.get("/me/session", response_model=SessionState)
async def get_session(current_user: User = Depends(get_current_user), db: Database = Depends(get_db)):
    return await get_session_state(db, current_user)


@router.websocket("/me/stream")
async def session_stream(websocket: WebSocket, token: str = ""):
    await websocket.accept()
    try:
        user = await authenticate_token(token)
    except AuthError as e:
        await websocket.send_json({"detail": e.detail, "code": e.error_code})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await stream_session(websocket, Database.get_db(), user)


@router.get("/me/favorites", response_model=List[Event])
async def get_favorites(current_user: User = Depends(get_current_user)):
    return await user_crud.get_favorites(current_user.user_id)


@router.post("/me/favorites/{event_id}", response_model=FavoriteToggle)
async def toggle_favorite(event_id: str, current_user: User = Depends(get_current_user)):
    return await user_crud.toggle_favorite(current_user.user_id, event_id)


@router.get("/me/notifications", response_model=List[Notification])
async def get_notifications(current_user: User = Depends(get_current_user), db: Database = Depends(get_db)):
    return await NotificationService(db).list_notifications(current_user.user_id)


@router.post("/me/notifications/read-all")
async def mark_all_notifications_read(current_user: User = Depends(get_current_user), db: Database = Depends(get_db)):
    updated = await NotificationService(db).mark_all_read(current_user.user_id)
    return {"updated": updated}


@router.post("/me/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    if not await NotificationService(db).mark_read(current_user.user_id, notification_id):
        raise NotFoundError("Notificarea nu a fost găsită")
    return {"notification_id": notification_id, "read": True}
