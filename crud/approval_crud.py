from typing import List, Optional
from schemas.approval import ServiceApprovalRequest, ApprovalStatus, VendorSubmissions, generate_approval_id
from schemas.event import ServiceSubmission, ServiceSnapshot
from schemas.user import User, Role, NotificationType
from config.database import Database
from core.documents import to_document
from core.exceptions import ConflictError, FormValidationError, NotFoundError, PermissionDeniedError
from crud.category_crud import category_exists
from crud.event_crud import create_event_from_approval
from services.event_bus import APPROVAL_REQUESTS_TOPIC
from services.notification_service import NotificationService, approval_message, request_received_message
from services.transitions import APPROVAL_TRANSITIONS, ALREADY_PROCESSED_MESSAGE, sources_for
from services.validation import validate_service_submission, clean_phone
from scripts.time_parse import date_to_datetime
from pymongo import ReturnDocument
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

APPROVAL_NOT_FOUND_MESSAGE = "Cererea de aprobare nu a fost găsită"


async def submit_service(current_user: User, data: ServiceSubmission) -> ServiceApprovalRequest:
    if current_user.role != Role.vendor:
        raise PermissionDeniedError("Doar furnizorii pot adăuga servicii")

    errors = validate_service_submission(data)
    if "category_id" not in errors and not await category_exists(data.category_id):
        errors["category_id"] = "Categoria selectată nu există"
    if errors:
        raise FormValidationError(errors)

    db = Database()
    snapshot = ServiceSnapshot(
        name=data.name.strip(),
        description=data.description.strip(),
        category_id=data.category_id,
        subcategories=[s.strip() for s in data.subcategories if s.strip()],
        price=data.price,
        locations=[l.strip() for l in data.locations if l.strip()],
        date=date_to_datetime(data.date),
        image_url=data.image_url.strip(),
        tags=[t.strip() for t in data.tags if t.strip()],
    )
    approval = ServiceApprovalRequest(
        request_id=generate_approval_id(current_user.user_id),
        vendor_id=current_user.user_id,
        vendor_name=current_user.name,
        vendor_email=data.email.strip(),
        vendor_phone=clean_phone(data.phone),
        service=snapshot,
        status=ApprovalStatus.pending,
    )

    await db.service_approval_requests.insert_one(to_document(approval))
    logger.info(f"Vendor {current_user.user_id} submitted {approval.request_id}")

    await NotificationService(db).notify_admins(
        NotificationType.request_received,
        request_received_message(snapshot.name),
        request_id=approval.request_id,
        event_name=snapshot.name,
    )
    return approval


async def get_vendor_submissions(vendor_id: str) -> VendorSubmissions:
    db = Database()
    documents = await db.service_approval_requests.find({"vendor_id": vendor_id}).to_list(length=None)
    approvals = sorted((ServiceApprovalRequest(**d) for d in documents), key=lambda a: a.created_at, reverse=True)

    grouped = VendorSubmissions()
    for approval in approvals:
        getattr(grouped, approval.status.value).append(approval)
    return grouped


async def get_pending_requests() -> List[ServiceApprovalRequest]:
    db = Database()
    documents = await db.service_approval_requests.find({"status": ApprovalStatus.pending.value}).to_list(length=None)
    approvals = [ServiceApprovalRequest(**d) for d in documents]
    approvals.sort(key=lambda a: a.created_at, reverse=True)
    return approvals


async def _transition(request_id: str, target: ApprovalStatus, feedback: Optional[str]) -> dict:
    """Move a request out of pending; only one caller can win."""
    db = Database()
    updated = await db.service_approval_requests.find_one_and_update(
        {"request_id": request_id, "status": {"$in": sources_for(APPROVAL_TRANSITIONS, target)}},
        {"$set": {
            "status": target.value,
            "admin_feedback": feedback or None,
            "updated_at": datetime.utcnow(),
        }},
        return_document=ReturnDocument.AFTER
    )
    if updated is None:
        if not await db.service_approval_requests.find_one({"request_id": request_id}):
            raise NotFoundError(APPROVAL_NOT_FOUND_MESSAGE)
        raise ConflictError(ALREADY_PROCESSED_MESSAGE)
    return updated


async def approve_request(request_id: str, feedback: Optional[str] = None) -> ServiceApprovalRequest:
    db = Database()
    feedback = (feedback or "").strip() or None
    approval = await _transition(request_id, ApprovalStatus.approved, feedback)

    try:
        event = await create_event_from_approval(approval)
    except Exception as e:
        logger.error(f"Publishing approval {request_id} failed, reverting to pending: {e}", exc_info=True)
        # The insert may have landed before the error
        await db.events.delete_many({"approval_request_id": request_id})
        await db.service_approval_requests.update_one(
            {"request_id": request_id, "status": ApprovalStatus.approved.value},
            {"$set": {"status": ApprovalStatus.pending.value, "admin_feedback": None,
                      "updated_at": datetime.utcnow()}}
        )
        raise

    await db.service_approval_requests.update_one(
        {"request_id": request_id},
        {"$set": {"event_id": event.event_id}}
    )
    approval["event_id"] = event.event_id

    notifications = NotificationService(db)
    await notifications.push(
        approval["vendor_id"],
        NotificationType.service_approved,
        approval_message(approval["service"]["name"], True, feedback),
        request_id=request_id,
        event_name=approval["service"]["name"],
    )
    notifications.bus.publish(APPROVAL_REQUESTS_TOPIC, {"type": "approval_requests_changed"})
    logger.info(f"Approval {request_id} approved as listing {event.event_id}")
    return ServiceApprovalRequest(**approval)


async def reject_request(request_id: str, feedback: Optional[str] = None) -> ServiceApprovalRequest:
    db = Database()
    feedback = (feedback or "").strip() or None
    approval = await _transition(request_id, ApprovalStatus.rejected, feedback)

    notifications = NotificationService(db)
    await notifications.push(
        approval["vendor_id"],
        NotificationType.service_rejected,
        approval_message(approval["service"]["name"], False, feedback),
        request_id=request_id,
        event_name=approval["service"]["name"],
    )
    notifications.bus.publish(APPROVAL_REQUESTS_TOPIC, {"type": "approval_requests_changed"})
    logger.info(f"Approval {request_id} rejected")
    return ServiceApprovalRequest(**approval)
