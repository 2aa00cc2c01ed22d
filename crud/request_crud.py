from typing import List, Optional
from schemas.request import ServiceRequest, BookingRequestCreate, RequestStatus, RequestMessage, generate_request_id
from schemas.confirmed_event import ConfirmedEvent, generate_confirmed_event_id
from schemas.event import Price
from schemas.user import User, Role, NotificationType
from config.database import Database
from core.documents import to_document
from core.exceptions import ConflictError, FormValidationError, NotFoundError, PermissionDeniedError
from services.notification_service import NotificationService, request_status_message, new_message_text, \
    confirmation_message
from services.transitions import REQUEST_TRANSITIONS, ALREADY_PROCESSED_MESSAGE, sources_for
from services.validation import validate_booking, clean_phone, capitalize_words
from scripts.time_parse import combine_date_time
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

REQUEST_NOT_FOUND_MESSAGE = "Cererea nu a fost găsită"
EVENT_NOT_FOUND_MESSAGE = "Evenimentul nu mai există"
NOT_ALLOWED_MESSAGE = "Nu ai permisiunea să modifici această cerere"
EMPTY_MESSAGE = "Te rugăm să introduceți un mesaj"
DEFAULT_SERVICE_TYPE = "Serviciu general"
UNKNOWN_VENDOR_NAME = "Furnizor necunoscut"
CONFIRM_ID_ATTEMPTS = 3


async def create_request(current_user: User, event_id: str, data: BookingRequestCreate) -> ServiceRequest:
    errors = validate_booking(data)
    if errors:
        raise FormValidationError(errors)

    db = Database()
    event = await db.events.find_one({"event_id": event_id})
    if not event:
        raise NotFoundError(EVENT_NOT_FOUND_MESSAGE)
    if event["vendor_id"] == current_user.user_id:
        raise PermissionDeniedError("Nu poți trimite o cerere pentru propriul serviciu")

    request = ServiceRequest(
        request_id=generate_request_id(event_id, current_user.user_id),
        event_id=event_id,
        event_name=event["name"],
        vendor_id=event["vendor_id"],
        vendor_name=event.get("vendor_name"),
        user_id=current_user.user_id,
        user_name=current_user.name,
        user_email=current_user.email,
        user_phone=clean_phone(data.phone),
        message=data.message.strip(),
        location=capitalize_words(data.location.strip()),
        start_date=combine_date_time(data.start_date, data.start_time),
        end_date=combine_date_time(data.end_date, data.end_time),
        status=RequestStatus.pending,
        messages=[],
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )

    try:
        await db.requests.insert_one(to_document(request))
        logger.info(f"Booking request {request.request_id} created for {event_id}")
    except Exception as e:
        logger.error(f"Error creating booking request for {event_id}: {str(e)}", exc_info=True)
        raise
    return request


async def list_requests(current_user: User) -> List[ServiceRequest]:
    """Requests addressed to a vendor, or sent by anyone else; orphans are hidden."""
    db = Database()
    field = "vendor_id" if current_user.role == Role.vendor else "user_id"
    documents = await db.requests.find({field: current_user.user_id}).to_list(length=None)

    event_ids = list({d["event_id"] for d in documents})
    existing = await db.events.find({"event_id": {"$in": event_ids}}, {"event_id": 1}).to_list(length=None)
    existing_ids = {e["event_id"] for e in existing}

    requests = [ServiceRequest(**d) for d in documents if d["event_id"] in existing_ids]
    requests.sort(key=lambda r: r.created_at, reverse=True)
    return requests


async def _get_request_document(request_id: str) -> dict:
    db = Database()
    request = await db.requests.find_one({"request_id": request_id})
    if not request:
        raise NotFoundError(REQUEST_NOT_FOUND_MESSAGE)
    return request


async def change_status(current_user: User, request_id: str, status: RequestStatus) -> ServiceRequest:
    request = await _get_request_document(request_id)
    if request["vendor_id"] != current_user.user_id:
        raise PermissionDeniedError(NOT_ALLOWED_MESSAGE)

    status = RequestStatus(status)
    db = Database()
    updated = await db.requests.find_one_and_update(
        {"request_id": request_id, "status": {"$in": sources_for(REQUEST_TRANSITIONS, status)}},
        {"$set": {"status": status.value, "updated_at": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER
    )
    if updated is None:
        raise ConflictError(ALREADY_PROCESSED_MESSAGE)

    message = request_status_message(updated["event_name"], status.value)
    notifications = NotificationService(db)
    await notifications.push(
        updated["user_id"],
        NotificationType.request_accepted if status == RequestStatus.accepted else NotificationType.request_rejected,
        message,
        request_id=request_id,
        event_name=updated["event_name"],
    )
    await notifications.mirror_sms(updated.get("user_phone"), message)

    logger.info(f"Booking request {request_id} moved to {status.value}")
    return ServiceRequest(**updated)


async def add_message(current_user: User, request_id: str, text: str) -> ServiceRequest:
    text = (text or "").strip()
    if not text:
        raise FormValidationError({"message": EMPTY_MESSAGE}, detail=EMPTY_MESSAGE)

    request = await _get_request_document(request_id)
    if current_user.user_id not in (request["vendor_id"], request["user_id"]):
        raise PermissionDeniedError(NOT_ALLOWED_MESSAGE)

    entry = RequestMessage(
        sender_id=current_user.user_id,
        sender_name=current_user.name,
        message=text,
        timestamp=datetime.utcnow(),
    )
    db = Database()
    updated = await db.requests.find_one_and_update(
        {"request_id": request_id},
        {"$push": {"messages": to_document(entry)}, "$set": {"updated_at": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER
    )

    recipient_id = request["user_id"] if current_user.user_id == request["vendor_id"] else request["vendor_id"]
    await NotificationService(db).push(
        recipient_id,
        NotificationType.new_message,
        new_message_text(current_user.name, request["event_name"]),
        request_id=request_id,
        event_name=request["event_name"],
    )
    return ServiceRequest(**updated)


async def _existing_confirmation(request_id: str) -> Optional[ConfirmedEvent]:
    db = Database()
    existing = await db.confirmed_events.find_one({"request_id": request_id})
    if existing:
        return ConfirmedEvent(**existing)
    return None


async def _insert_confirmation(db: Database, confirmed: ConfirmedEvent) -> Optional[ConfirmedEvent]:
    """Store the confirmed event; returns the earlier record when the request already has one."""
    request_id = confirmed.request_id
    for attempt in range(CONFIRM_ID_ATTEMPTS):
        try:
            await db.confirmed_events.insert_one(to_document(confirmed))
            return None
        except DuplicateKeyError:
            existing = await _existing_confirmation(request_id)
            if existing:
                await db.requests.update_one(
                    {"request_id": request_id},
                    {"$set": {"confirmed_event_id": existing.confirmed_event_id}}
                )
                return existing
            if attempt == CONFIRM_ID_ATTEMPTS - 1:
                raise
            # Only the generated id collided; move the claim to a fresh one
            fresh_id = generate_confirmed_event_id(request_id)
            await db.requests.update_one(
                {"request_id": request_id, "confirmed_event_id": confirmed.confirmed_event_id},
                {"$set": {"confirmed_event_id": fresh_id}}
            )
            logger.warning(f"Confirmed event id {confirmed.confirmed_event_id} taken, retrying as {fresh_id}")
            confirmed.confirmed_event_id = fresh_id


async def confirm_request(current_user: User, request_id: str) -> ConfirmedEvent:
    """
    Turn an accepted booking request into its confirmed event.

    Repeated calls return the record created by the first one and send no
    further notification.
    """
    request = await _get_request_document(request_id)
    if request["vendor_id"] != current_user.user_id:
        raise PermissionDeniedError(NOT_ALLOWED_MESSAGE)
    if request["status"] != RequestStatus.accepted.value:
        raise ConflictError("Doar cererile acceptate pot fi confirmate")

    if request.get("confirmed_event_id"):
        existing = await _existing_confirmation(request_id)
        if existing:
            return existing

    db = Database()
    event = await db.events.find_one({"event_id": request["event_id"]})
    if not event:
        raise NotFoundError(EVENT_NOT_FOUND_MESSAGE)

    vendor = await db.users.find_one({"user_id": request["vendor_id"]}, {"name": 1})
    subcategories = event.get("subcategories") or []
    confirmed = ConfirmedEvent(
        confirmed_event_id=generate_confirmed_event_id(request_id),
        event_id=request["event_id"],
        request_id=request_id,
        event_name=request["event_name"],
        user_id=request["user_id"],
        user_name=request["user_name"],
        vendor_id=request["vendor_id"],
        vendor_name=(vendor or {}).get("name") or UNKNOWN_VENDOR_NAME,
        service_type=subcategories[0] if subcategories else DEFAULT_SERVICE_TYPE,
        location=request["location"],
        start_date=request["start_date"],
        end_date=request["end_date"],
        price=event.get("price") or Price(),
        notes=request.get("message"),
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )

    # Claim the request; a concurrent confirmation loses here
    claim = await db.requests.update_one(
        {"request_id": request_id, "status": RequestStatus.accepted.value, "confirmed_event_id": None},
        {"$set": {"confirmed_event_id": confirmed.confirmed_event_id, "updated_at": datetime.utcnow()}}
    )
    if not claim.modified_count:
        existing = await _existing_confirmation(request_id)
        if existing:
            return existing
        raise ConflictError("Confirmarea acestei cereri este deja în curs")

    try:
        existing = await _insert_confirmation(db, confirmed)
    except Exception as e:
        logger.error(f"Error confirming booking request {request_id}: {str(e)}", exc_info=True)
        await db.requests.update_one(
            {"request_id": request_id, "confirmed_event_id": confirmed.confirmed_event_id},
            {"$set": {"confirmed_event_id": None}}
        )
        raise
    if existing:
        return existing

    message = confirmation_message(request["event_name"])
    notifications = NotificationService(db)
    await notifications.push(
        request["user_id"],
        NotificationType.event_confirmed,
        message,
        request_id=request_id,
        event_name=request["event_name"],
        confirmed_event_id=confirmed.confirmed_event_id,
    )
    await notifications.mirror_sms(request.get("user_phone"), message)

    logger.info(f"Booking request {request_id} confirmed as {confirmed.confirmed_event_id}")
    return confirmed
