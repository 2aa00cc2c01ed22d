import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect
from main import app
from schemas.user import NotificationType, SessionCounters, User
from services.event_bus import event_bus, user_topic
from services.notification_service import NotificationService
from services.session_service import _safe_counters
from conftest import service_form


@pytest.fixture
def ws_client(db):
    return TestClient(app)


async def test_stream_sends_initial_counters(ws_client, participant):
    with ws_client.websocket_connect(f"/api/users/me/stream?token={participant['token']}") as ws:
        assert ws.receive_json() == {"unread_notifications": 0, "pending_requests_count": 0}


async def test_stream_pushes_new_notifications(ws_client, db, participant):
    user_id = participant["user"]["user_id"]

    with ws_client.websocket_connect(f"/api/users/me/stream?token={participant['token']}") as ws:
        ws.receive_json()
        assert event_bus.subscriber_count(user_topic(user_id)) == 1

        await NotificationService(db).push(user_id, NotificationType.new_message, "Mesaj nou")

        assert ws.receive_json() == {"unread_notifications": 1, "pending_requests_count": 0}


async def test_admin_stream_follows_pending_queue(ws_client, client, categories, vendor, admin):
    with ws_client.websocket_connect(f"/api/users/me/stream?token={admin['token']}") as ws:
        assert ws.receive_json() == {"unread_notifications": 0, "pending_requests_count": 0}

        response = await client.post("/api/approvals", json=service_form(), headers=vendor["headers"])
        assert response.status_code == 201

        assert ws.receive_json() == {"unread_notifications": 1, "pending_requests_count": 1}


async def test_stream_unsubscribes_on_close(ws_client, participant):
    topic = user_topic(participant["user"]["user_id"])

    with ws_client.websocket_connect(f"/api/users/me/stream?token={participant['token']}") as ws:
        ws.receive_json()

    assert event_bus.subscriber_count(topic) == 0


async def test_stream_refuses_invalid_token(ws_client, db):
    with ws_client.websocket_connect("/api/users/me/stream?token=nu-este-un-token") as ws:
        assert ws.receive_json() == {
            "detail": "Sesiunea a expirat. Vă rugăm să vă autentificați din nou.",
            "code": "invalid-token",
        }
        with pytest.raises(WebSocketDisconnect):
            ws.receive_json()


async def test_stream_pushes_zeroes_when_recount_fails(ws_client, db, participant, monkeypatch):
    user_id = participant["user"]["user_id"]

    with ws_client.websocket_connect(f"/api/users/me/stream?token={participant['token']}") as ws:
        ws.receive_json()
        await NotificationService(db).push(user_id, NotificationType.new_message, "Mesaj nou")
        assert ws.receive_json() == {"unread_notifications": 1, "pending_requests_count": 0}

        async def broken(self, user_id):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(NotificationService, "unread_count", broken)
        await NotificationService(db).push(user_id, NotificationType.new_message, "Alt mesaj")

        assert ws.receive_json() == {"unread_notifications": 0, "pending_requests_count": 0}


async def test_safe_counters_fall_back_to_zero(db, participant, monkeypatch):
    async def broken(self, user_id):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(NotificationService, "unread_count", broken)

    assert await _safe_counters(db, User(**participant["user"])) == SessionCounters()
