"""
Session snapshot and the live counter stream behind /api/users/me/stream.
"""
import asyncio
import logging
from typing import Callable, Awaitable
from fastapi import WebSocket, WebSocketDisconnect
from config.database import Database
from schemas.approval import ApprovalStatus
from schemas.user import Role, User, SessionCounters, SessionState
from services.event_bus import EventBus, event_bus, user_topic, APPROVAL_REQUESTS_TOPIC
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)


async def compute_counters(db: Database, user: User) -> SessionCounters:
    unread = await NotificationService(db).unread_count(user.user_id)
    pending = 0
    if user.role == Role.admin:
        pending = await db.service_approval_requests.count_documents({"status": ApprovalStatus.pending.value})
    return SessionCounters(unread_notifications=unread, pending_requests_count=pending)


async def get_session_state(db: Database, user: User) -> SessionState:
    counters = await compute_counters(db, user)
    return SessionState(
        user=user,
        unread_notifications=counters.unread_notifications,
        pending_requests_count=counters.pending_requests_count,
    )


async def _safe_counters(db: Database, user: User) -> SessionCounters:
    try:
        return await compute_counters(db, user)
    except Exception as e:
        logger.error(f"Recomputing counters for {user.user_id} failed: {e}", exc_info=True)
        return SessionCounters()


async def stream_session(
    websocket: WebSocket,
    db: Database,
    user: User,
    bus: EventBus = event_bus,
    counters: Callable[[Database, User], Awaitable[SessionCounters]] = _safe_counters,
) -> None:
    """Push counters on connect and again whenever a message changes them."""
    # Subscribe before the first snapshot so no update falls between the two
    subscriptions = [bus.subscribe(user_topic(user.user_id))]
    if user.role == Role.admin:
        subscriptions.append(bus.subscribe(APPROVAL_REQUESTS_TOPIC))

    waiters = {}
    receive = None
    try:
        current = await counters(db, user)
        await websocket.send_json(current.dict())

        receive = asyncio.ensure_future(websocket.receive_text())
        for subscription in subscriptions:
            waiters[asyncio.ensure_future(subscription.get())] = subscription

        while True:
            done, _ = await asyncio.wait({receive, *waiters}, return_when=asyncio.FIRST_COMPLETED)

            if receive in done:
                # Raises WebSocketDisconnect once the client goes away
                receive.result()
                receive = asyncio.ensure_future(websocket.receive_text())

            changed = False
            for task in done:
                subscription = waiters.pop(task, None)
                if subscription is not None:
                    changed = True
                    waiters[asyncio.ensure_future(subscription.get())] = subscription

            if changed:
                updated = await counters(db, user)
                if updated != current:
                    current = updated
                    await websocket.send_json(current.dict())
    except WebSocketDisconnect:
        logger.info(f"Live session closed for {user.user_id}")
    finally:
        tasks = list(waiters)
        if receive is not None:
            tasks.append(receive)
        for task in tasks:
            task.cancel()
        for subscription in subscriptions:
            bus.unsubscribe(subscription)
