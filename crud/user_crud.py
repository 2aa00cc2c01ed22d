from typing import List
from schemas.user import UserCreate, User, FavoriteToggle, generate_user_id
from schemas.event import Event
from config.database import Database
from config.security import hash_password, verify_password, create_password_reset_token, decode_token, \
    PASSWORD_RESET_PURPOSE
from core.exceptions import AuthError, FormValidationError, NotFoundError
from services.validation import validate_registration, validate_login, MIN_PASSWORD_LENGTH
from services.email_service import send_password_reset_email
from pymongo.errors import DuplicateKeyError
from datetime import datetime
import logging
import uuid

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND_MESSAGE = "Evenimentul nu mai există"


def _to_user(document: dict) -> User:
    document.pop("password", None)
    return User(**document)


async def create_user(user: UserCreate) -> User:
    errors = validate_registration(user)
    if errors:
        raise FormValidationError(errors)

    db = Database()
    email = user.email.strip().lower()
    if await db.users.find_one({"email": email}):
        raise AuthError("email-already-in-use", status_code=409)

    user_dict = {
        "user_id": generate_user_id(user.name),
        "name": user.name.strip(),
        "email": email,
        # Hash the password before storing
        "password": hash_password(user.password),
        "role": user.role.value,
        "saved_events": [],
        "notifications": [],
        "disabled": False,
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }

    try:
        await db.users.insert_one(user_dict)
    except DuplicateKeyError:
        raise AuthError("email-already-in-use", status_code=409)

    logger.info(f"Registered {user_dict['role']} {user_dict['user_id']}")
    return _to_user(user_dict)


async def authenticate_user(email: str, password: str) -> User:
    errors = validate_login(email, password)
    if errors:
        raise FormValidationError(errors)

    db = Database()
    user = await db.users.find_one({"email": email.strip().lower()})
    if not user or not verify_password(password, user.get("password", "")):
        raise AuthError("invalid-credential")
    if user.get("disabled"):
        raise AuthError("user-disabled", status_code=403)
    return _to_user(user)


async def delete_user(user_id: str) -> bool:
    db = Database()
    result = await db.users.delete_one({"user_id": user_id})
    if result.deleted_count:
        logger.info(f"Deleted user {user_id}")
    return bool(result.deleted_count)


async def request_password_reset(email: str) -> None:
    """Send a reset link when the account exists; callers answer the same either way."""
    db = Database()
    user = await db.users.find_one({"email": (email or "").strip().lower()})
    if not user:
        logger.info("Password reset requested for an unknown e-mail")
        return

    nonce = uuid.uuid4().hex
    await db.users.update_one(
        {"user_id": user["user_id"]},
        {"$set": {"password_reset_nonce": nonce, "updated_at": datetime.utcnow()}}
    )
    token = create_password_reset_token(user["user_id"], nonce)
    await send_password_reset_email(user["email"], user["name"], token)
    logger.info(f"Password reset issued for {user['user_id']}")


async def confirm_password_reset(token: str, new_password: str) -> None:
    payload = decode_token(token, purpose=PASSWORD_RESET_PURPOSE)

    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        raise AuthError("weak-password", status_code=422)

    db = Database()
    # The nonce is single use: the update only matches while it is still stored
    result = await db.users.update_one(
        {"user_id": payload["sub"], "password_reset_nonce": payload.get("nonce")},
        {
            "$set": {"password": hash_password(new_password), "updated_at": datetime.utcnow()},
            "$unset": {"password_reset_nonce": ""}
        }
    )
    if not result.matched_count:
        raise AuthError("invalid-token")
    logger.info(f"Password reset completed for {payload['sub']}")


async def toggle_favorite(user_id: str, event_id: str) -> FavoriteToggle:
    db = Database()

    added = await db.users.update_one(
        {"user_id": user_id, "saved_events": {"$ne": event_id}},
        {"$push": {"saved_events": event_id}}
    )
    if added.modified_count:
        if not await db.events.find_one({"event_id": event_id}):
            await db.users.update_one({"user_id": user_id}, {"$pull": {"saved_events": event_id}})
            raise NotFoundError(EVENT_NOT_FOUND_MESSAGE)
        is_favorite = True
    else:
        await db.users.update_one({"user_id": user_id}, {"$pull": {"saved_events": event_id}})
        is_favorite = False

    user = await db.users.find_one({"user_id": user_id}, {"saved_events": 1})
    return FavoriteToggle(
        saved_events=user.get("saved_events", []) if user else [],
        is_favorite=is_favorite,
        message="Eveniment adăugat la favorite!" if is_favorite else "Eveniment eliminat de la favorite!"
    )


async def get_favorites(user_id: str) -> List[Event]:
    db = Database()
    user = await db.users.find_one({"user_id": user_id}, {"saved_events": 1})
    if not user:
        raise NotFoundError("Utilizatorul nu a fost găsit")

    saved = user.get("saved_events", [])
    events = await db.events.find({"event_id": {"$in": saved}}).to_list(length=None)
    by_id = {event["event_id"]: Event(**event) for event in events}
    # Keep the order in which the listings were saved
    return [by_id[event_id] for event_id in saved if event_id in by_id]
