from datetime import datetime, timedelta
from services.cascade_service import CascadeDelete
from conftest import booking_form, register, service_form


def event_document(event_id, name, vendor_id, vendor_name, **overrides):
    document = {
        "event_id": event_id,
        "name": name,
        "description": "Serviciu complet pentru evenimente.",
        "category_id": "fotografie-video",
        "subcategories": ["Fotograf"],
        "tags": ["nunta"],
        "price": {"amount": 1000, "type": "per_event"},
        "locations": ["Cluj-Napoca"],
        "date": datetime.utcnow() + timedelta(days=30),
        "image_url": "/media/foto.jpg",
        "vendor_id": vendor_id,
        "vendor_name": vendor_name,
        "vendor_phone": "0731000000",
        "vendor_email": "dan@example.ro",
        "status": "active",
        "created_at": datetime.utcnow(),
    }
    document.update(overrides)
    return document


async def accept_and_confirm(client, booking, vendor):
    request_id = booking["request_id"]
    await client.put(f"/api/requests/{request_id}/status", json={"status": "accepted"}, headers=vendor["headers"])
    response = await client.post(f"/api/requests/{request_id}/confirm", headers=vendor["headers"])
    assert response.status_code == 200, response.text
    return response.json()


async def test_dashboard_metrics(client, db, listing, admin, vendor, participant):
    await db.users.update_one(
        {"user_id": participant["user"]["user_id"]},
        {"$set": {"created_at": datetime.utcnow() - timedelta(days=30)}}
    )
    await register(client, "Dan Vlad", "dan@example.ro", "vendor")

    response = await client.get("/api/admin/metrics", headers=admin["headers"])

    assert response.status_code == 200
    assert response.json() == {
        "pending_requests": 0,
        "new_users": 3,
        "active_services": 1,
        "total_vendors": 2,
    }


async def test_recent_activity(client, db, listing, admin):
    response = await client.get("/api/admin/activity", headers=admin["headers"])

    assert response.status_code == 200
    activity = response.json()
    assert len(activity) <= 10
    kinds = {item["type"] for item in activity}
    assert kinds == {"user_registered", "service_added"}
    service = next(item for item in activity if item["type"] == "service_added")
    assert service["message"] == 'Serviciu nou adăugat: "DJ Alex Beats"'
    vendor_entry = next(item for item in activity if item.get("user_name") == "Alex Ionescu" and item["type"] == "user_registered")
    assert vendor_entry["message"] == "Alex Ionescu s-a înregistrat ca furnizor"

    timestamps = [item["timestamp"] for item in activity]
    assert timestamps == sorted(timestamps, reverse=True)


async def test_recent_activity_is_capped(client, db, admin):
    now = datetime.utcnow()
    await db.users.insert_many([
        {"user_id": f"USX{i:09d}", "name": f"Utilizator {i}", "email": f"u{i}@example.ro",
         "role": "participant", "created_at": now - timedelta(minutes=i)}
        for i in range(8)
    ])
    await db.events.insert_many([
        {"event_id": f"EVX{i:09d}", "name": f"Serviciu {i}", "vendor_id": "USV000000000",
         "created_at": now - timedelta(minutes=i, seconds=30)}
        for i in range(8)
    ])

    activity = (await client.get("/api/admin/activity", headers=admin["headers"])).json()

    assert len(activity) == 10
    assert sum(1 for item in activity if item["type"] == "user_registered") == 5
    assert sum(1 for item in activity if item["type"] == "service_added") == 5


async def test_vendors_sorted_by_service_count(client, db, listing, admin, vendor):
    other = await register(client, "Dan Vlad", "dan@example.ro", "vendor")
    await register(client, "Fără Servicii", "gol@example.ro", "vendor")
    for i in range(2):
        await db.events.insert_one(event_document(f"EVDAN{i:07d}", f"Fotograf {i}", other["user"]["user_id"], "Dan Vlad"))

    response = await client.get("/api/admin/vendors", headers=admin["headers"])

    assert response.status_code == 200
    vendors = response.json()
    assert [v["name"] for v in vendors] == ["Dan Vlad", "Alex Ionescu"]
    assert [len(v["services"]) for v in vendors] == [2, 1]


async def test_delete_vendor_cascades(client, db, booking, vendor, participant, admin):
    await accept_and_confirm(client, booking, vendor)
    vendor_id = vendor["user"]["user_id"]

    response = await client.delete(f"/api/admin/vendors/{vendor_id}", headers=admin["headers"])

    assert response.status_code == 200
    report = response.json()
    assert report["target_id"] == vendor_id
    assert report["deleted"] == {
        "events": 1,
        "service_approval_requests": 1,
        "requests": 1,
        "confirmed_events": 1,
        "users": 1,
    }
    for collection in ("events", "service_approval_requests", "requests", "confirmed_events"):
        assert await db.db[collection].count_documents({"vendor_id": vendor_id}) == 0
    assert await db.users.find_one({"user_id": vendor_id}) is None
    assert await db.users.find_one({"user_id": participant["user"]["user_id"]}) is not None


async def test_failed_cascade_restores_everything(client, db, booking, vendor, admin, monkeypatch):
    await accept_and_confirm(client, booking, vendor)
    vendor_id = vendor["user"]["user_id"]
    before = {
        name: await db.db[name].count_documents({})
        for name in ("events", "service_approval_requests", "requests", "confirmed_events", "users")
    }

    original = CascadeDelete._delete_step

    async def flaky(self, collection, query):
        if collection == "requests":
            raise RuntimeError("connection reset")
        return await original(self, collection, query)

    monkeypatch.setattr(CascadeDelete, "_delete_step", flaky)

    response = await client.delete(f"/api/admin/vendors/{vendor_id}", headers=admin["headers"])

    assert response.status_code == 500
    assert response.json()["code"] == "cascade-failed"
    assert response.json()["detail"] == "Ștergerea a eșuat. Toate modificările au fost anulate."
    after = {name: await db.db[name].count_documents({}) for name in before}
    assert after == before
    assert (await db.events.find_one({"event_id": booking["event_id"]}))["name"] == "DJ Alex Beats"


async def test_cascade_restores_a_step_whose_delete_applied_before_failing(client, db, booking, vendor, admin, monkeypatch):
    await accept_and_confirm(client, booking, vendor)
    vendor_id = vendor["user"]["user_id"]
    before = {
        name: await db.db[name].count_documents({})
        for name in ("events", "service_approval_requests", "requests", "confirmed_events", "users")
    }

    original = CascadeDelete._delete_step

    async def deletes_then_fails(self, collection, query):
        deleted = await original(self, collection, query)
        if collection == "requests":
            raise RuntimeError("timeout after write")
        return deleted

    monkeypatch.setattr(CascadeDelete, "_delete_step", deletes_then_fails)

    response = await client.delete(f"/api/admin/vendors/{vendor_id}", headers=admin["headers"])

    assert response.status_code == 500
    assert response.json()["code"] == "cascade-failed"
    after = {name: await db.db[name].count_documents({}) for name in before}
    assert after == before
    assert await db.requests.find_one({"request_id": booking["request_id"]}) is not None


async def test_compensation_skips_documents_that_were_never_deleted(db, listing):
    events = await db.events.find({}).to_list(length=None)
    cascade = CascadeDelete(db, listing, [])
    cascade._completed = [("events", events)]

    assert await cascade._compensate() == []
    assert await db.events.count_documents({}) == 1


async def test_cascade_reports_data_it_could_not_restore(client, db, booking, vendor, admin, monkeypatch):
    vendor_id = vendor["user"]["user_id"]
    original = CascadeDelete._delete_step

    async def fails_after_listing_is_replaced(self, collection, query):
        deleted = await original(self, collection, query)
        if collection == "requests":
            # Another writer takes the listing's id while it is gone
            await db.events.insert_one({"event_id": booking["event_id"], "name": "Alt serviciu"})
            raise RuntimeError("connection reset")
        return deleted

    monkeypatch.setattr(CascadeDelete, "_delete_step", fails_after_listing_is_replaced)

    response = await client.delete(f"/api/admin/vendors/{vendor_id}", headers=admin["headers"])

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "cascade-incomplete"
    assert body["detail"] == "Ștergerea a eșuat și unele date nu au putut fi restaurate. Contactați echipa tehnică."
    assert list(body["errors"]) == ["events"]
    assert await db.requests.find_one({"request_id": booking["request_id"]}) is not None
    assert await db.users.find_one({"user_id": vendor_id}) is not None


async def test_delete_unknown_vendor(client, admin, participant):
    response = await client.delete("/api/admin/vendors/USNOPE000000", headers=admin["headers"])
    assert response.status_code == 404

    # Participants are not vendors
    response = await client.delete(f"/api/admin/vendors/{participant['user']['user_id']}", headers=admin["headers"])
    assert response.status_code == 404


async def test_admin_deletes_listing_with_bookings(client, db, booking, vendor, admin):
    await accept_and_confirm(client, booking, vendor)

    response = await client.delete(f"/api/admin/events/{booking['event_id']}", headers=admin["headers"])

    assert response.status_code == 200
    assert response.json()["deleted"] == {"events": 1, "requests": 1, "confirmed_events": 1}
    assert await db.requests.count_documents({"event_id": booking["event_id"]}) == 0
    assert await db.users.find_one({"user_id": vendor["user"]["user_id"]}) is not None


async def test_vendor_self_delete_cascades(client, db, booking, vendor, participant):
    response = await client.delete("/api/users/me", headers=vendor["headers"])

    assert response.status_code == 200
    assert response.json()["deleted"]["events"] == 1
    assert await db.events.count_documents({}) == 0
    assert await db.requests.count_documents({}) == 0
    assert (await client.get("/api/users/me", headers=vendor["headers"])).status_code == 401

    mine = await client.get("/api/requests/mine", headers=participant["headers"])
    assert mine.json() == []


async def test_pending_queue(client, categories, vendor, admin):
    for name in ("Primul Serviciu", "Al Doilea Serviciu"):
        await client.post("/api/approvals", json=service_form(name=name), headers=vendor["headers"])

    response = await client.get("/api/admin/requests", headers=admin["headers"])

    assert response.status_code == 200
    assert sorted(r["service"]["name"] for r in response.json()) == ["Al Doilea Serviciu", "Primul Serviciu"]


async def test_vendor_cannot_book_own_listing(client, listing, vendor):
    response = await client.post(f"/api/events/{listing}/requests", json=booking_form(), headers=vendor["headers"])
    assert response.status_code == 403
