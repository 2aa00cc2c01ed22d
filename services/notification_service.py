from config.database import Database
from config import settings
from core.documents import to_document
from schemas.user import Notification, NotificationType, Role, generate_notification_id
from services.event_bus import EventBus, event_bus, user_topic, APPROVAL_REQUESTS_TOPIC
from services.twilio_service import TwilioService, twilio_service
from datetime import datetime
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

MARK_ALL_ATTEMPTS = 3


def approval_message(service_name: str, approved: bool, feedback: Optional[str] = None) -> str:
    outcome = "aprobat" if approved else "respins"
    message = f'Serviciul "{service_name}" a fost {outcome}'
    if feedback:
        message += f": {feedback}"
    return message


def request_status_message(event_name: str, status: str) -> str:
    outcome = "acceptată" if status == "accepted" else "respinsă"
    return f'Cererea ta pentru "{event_name}" a fost {outcome} de furnizor'


def new_message_text(sender_name: str, event_name: str) -> str:
    return f'Mesaj nou de la {sender_name} pentru "{event_name}"'


def confirmation_message(event_name: str) -> str:
    return (
        f'Evenimentul "{event_name}" a fost confirmat! '
        f'Detaliile finale sunt disponibile în secțiunea "Furnizorii Mei"'
    )


def request_received_message(service_name: str) -> str:
    return f'Cerere nouă de aprobare pentru serviciul "{service_name}"'


class NotificationService:
    def __init__(self, db: Database, bus: EventBus = event_bus, sms: TwilioService = twilio_service):
        self.db = db
        self.bus = bus
        self.sms = sms

    async def push(
        self,
        user_id: str,
        type: NotificationType,
        message: str,
        request_id: Optional[str] = None,
        event_name: Optional[str] = None,
        confirmed_event_id: Optional[str] = None,
    ) -> Optional[Notification]:
        """Append a notification to the user's log, keeping only the newest entries"""
        notification = Notification(
            notification_id=generate_notification_id(),
            type=type,
            message=message,
            created_at=datetime.utcnow(),
            read=False,
            request_id=request_id,
            event_name=event_name,
            confirmed_event_id=confirmed_event_id,
        )

        result = await self.db.users.update_one(
            {"user_id": user_id},
            {"$push": {"notifications": {
                "$each": [to_document(notification)],
                "$slice": -settings.NOTIFICATIONS_LIMIT,
            }}}
        )
        if not result.matched_count:
            logger.warning(f"Notification for unknown user {user_id} dropped")
            return None

        logger.info(f"Notification {notification.type.value} sent to {user_id}")
        self.bus.publish(user_topic(user_id), {
            "type": "notification",
            "notification_id": notification.notification_id,
        })
        return notification

    async def notify_admins(self, type: NotificationType, message: str, **extra) -> int:
        admins = await self.db.users.find({"role": Role.admin.value}, {"user_id": 1}).to_list(length=None)
        for admin in admins:
            await self.push(admin["user_id"], type, message, **extra)
        self.bus.publish(APPROVAL_REQUESTS_TOPIC, {"type": "approval_requests_changed"})
        logger.info(f"Notified {len(admins)} admins")
        return len(admins)

    async def mirror_sms(self, phone: Optional[str], message: str) -> bool:
        if not phone:
            return False
        return await self.sms.send_sms(phone, message)

    async def list_notifications(self, user_id: str) -> List[Notification]:
        user = await self.db.users.find_one({"user_id": user_id}, {"notifications": 1})
        if not user:
            return []
        # Ties on created_at fall back to log position, newest appended last
        entries = list(enumerate(Notification(**n) for n in user.get("notifications", [])))
        entries.sort(key=lambda entry: (entry[1].created_at, entry[0]), reverse=True)
        return [notification for _, notification in entries]

    async def unread_count(self, user_id: str) -> int:
        notifications = await self.list_notifications(user_id)
        return sum(1 for n in notifications if not n.read)

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        result = await self.db.users.update_one(
            {"user_id": user_id, "notifications.notification_id": notification_id},
            {"$set": {"notifications.$.read": True}}
        )
        if not result.matched_count:
            return False
        self.bus.publish(user_topic(user_id), {"type": "notifications_read"})
        return True

    async def mark_all_read(self, user_id: str) -> int:
        """Flag every unread entry with a single update; retried when the log shifts in between"""
        for _ in range(MARK_ALL_ATTEMPTS):
            user = await self.db.users.find_one({"user_id": user_id}, {"notifications": 1})
            entries = (user or {}).get("notifications", [])
            unread = [index for index, entry in enumerate(entries) if not entry.get("read")]
            if not unread:
                return 0

            # Each position must still hold the entry read above
            query = {"user_id": user_id}
            query.update({f"notifications.{i}.notification_id": entries[i]["notification_id"] for i in unread})
            result = await self.db.users.update_one(
                query,
                {"$set": {f"notifications.{i}.read": True for i in unread}}
            )
            if result.matched_count:
                self.bus.publish(user_topic(user_id), {"type": "notifications_read"})
                return len(unread)

        logger.warning(f"Notifications of {user_id} kept changing, not all marked read")
        return 0
