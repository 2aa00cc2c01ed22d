from datetime import date, timedelta
import pytest
import httpx
from mongomock_motor import AsyncMongoMockClient
from config.database import Database
from scripts.create_admin import create_admin
from scripts.populate_categories import populate_categories
from main import app

PASSWORD = "parola123"


@pytest.fixture
async def db():
    await Database.use_client(AsyncMongoMockClient(), "eventoria_test")
    yield Database()
    Database.client = None
    Database.db = None


@pytest.fixture
async def categories(db):
    await populate_categories(db)
    return db


@pytest.fixture
async def client(db):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client, name: str, email: str, role: str) -> dict:
    response = await client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": PASSWORD,
        "confirm_password": PASSWORD,
        "role": role,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return {"user": body["user"], "token": body["access_token"], "headers": auth_headers(body["access_token"])}


@pytest.fixture
async def participant(client):
    return await register(client, "Ana Popescu", "ana@example.ro", "participant")


@pytest.fixture
async def vendor(client):
    return await register(client, "Alex Ionescu", "alex@example.ro", "vendor")


@pytest.fixture
async def admin(client, db):
    await create_admin(db, "admin@eventoria.ro", PASSWORD)
    response = await client.post("/api/auth/login", json={"email": "admin@eventoria.ro", "password": PASSWORD})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"user": body["user"], "token": body["access_token"], "headers": auth_headers(body["access_token"])}


def future_day(days: int = 30) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def service_form(**overrides) -> dict:
    form = {
        "name": "DJ Alex Beats",
        "description": "DJ profesionist pentru nunți, botezuri și petreceri private.",
        "category_id": "muzica-entertainment",
        "subcategories": ["DJ"],
        "price": {"amount": 2500, "type": "per_event"},
        "locations": ["București", "Ilfov"],
        "date": future_day(),
        "image_url": "/media/dj.jpg",
        "phone": "0721 234 567",
        "email": "alex@example.ro",
        "tags": ["nunta", "petrecere-corporativa"],
    }
    form.update(overrides)
    return form


def booking_form(**overrides) -> dict:
    day = future_day(60)
    form = {
        "phone": "0721234567",
        "location": "Str. Lipscani 5, București",
        "start_date": day,
        "start_time": "18:00",
        "end_date": day,
        "end_time": "23:00",
        "message": "Bună ziua, ne căsătorim și căutăm un DJ pentru seară.",
    }
    form.update(overrides)
    return form


@pytest.fixture
async def listing(client, categories, vendor, admin):
    """An approved, active listing owned by the vendor fixture."""
    response = await client.post("/api/approvals", json=service_form(), headers=vendor["headers"])
    assert response.status_code == 201, response.text
    request_id = response.json()["request_id"]

    response = await client.post(
        f"/api/admin/requests/{request_id}/approve",
        json={"feedback": "Welcome!"},
        headers=admin["headers"],
    )
    assert response.status_code == 200, response.text
    return response.json()["event_id"]


@pytest.fixture
async def booking(client, listing, participant):
    response = await client.post(f"/api/events/{listing}/requests", json=booking_form(), headers=participant["headers"])
    assert response.status_code == 201, response.text
    return response.json()
