from datetime import datetime, timedelta
import pytest


def listing_document(event_id, name, minutes_ago=0, **overrides):
    document = {
        "event_id": event_id,
        "name": name,
        "description": "Servicii pentru nunți și botezuri.",
        "category_id": "muzica-entertainment",
        "subcategories": ["DJ"],
        "tags": ["nunta"],
        "price": {"amount": 1000, "type": "per_event"},
        "locations": ["București"],
        "date": datetime.utcnow() + timedelta(days=30),
        "image_url": "/media/x.jpg",
        "vendor_id": "USALE000000",
        "vendor_name": "Alex Ionescu",
        "vendor_phone": "0721234567",
        "vendor_email": "alex@example.ro",
        "status": "active",
        "rating": None,
        "created_at": datetime.utcnow() - timedelta(minutes=minutes_ago),
    }
    document.update(overrides)
    return document


@pytest.fixture
async def catalog(categories):
    db = categories
    await db.events.insert_many([
        listing_document("EVDJA0000001", "DJ Alex Beats", minutes_ago=5,
                         price={"amount": 2500, "type": "per_event"}, rating=4.8),
        listing_document("EVFOT0000001", "Fotograf Nuntă Cluj", minutes_ago=3,
                         category_id="fotografie-video", subcategories=["Fotograf"],
                         locations=["Cluj-Napoca"], tags=["nunta", "botez"],
                         price={"amount": 1800, "type": "per_event"}, rating=4.5,
                         vendor_name="Dan Vlad"),
        listing_document("EVCAT0000001", "Catering Gustos", minutes_ago=1,
                         category_id="catering", subcategories=["Meniu complet"],
                         locations=["Iași"], tags=["botez"],
                         price={"amount": 150, "type": "per_person"}, rating=3.9),
        listing_document("EVBND0000001", "Formația Ritm", minutes_ago=10,
                         subcategories=["Formație live"], price={"amount": 4000, "type": "per_event"}),
        listing_document("EVOLD0000001", "Trupa Veche", minutes_ago=20, status="inactive"),
    ])
    legacy = listing_document("EVLEG0000001", "Saxofonist Timișoara", minutes_ago=30,
                              subcategories=["Instrumentist"], locations=["Timișoara"],
                              price={"amount": 900, "type": "per_event"})
    del legacy["status"]
    await db.events.insert_one(legacy)
    return db


async def search(client, **params):
    response = await client.get("/api/events", params=params)
    assert response.status_code == 200, response.text
    return response.json()


def names(page):
    return [item["name"] for item in page["items"]]


async def test_categories_are_listed_by_name(client, categories):
    response = await client.get("/api/categories")

    assert response.status_code == 200
    assert [c["category_id"] for c in response.json()] == [
        "catering",
        "decor-aranjamente",
        "fotografie-video",
        "locatie-eveniment",
        "muzica-entertainment",
        "rochii-costume",
    ]


async def test_unknown_category(client, categories):
    assert (await client.get("/api/categories/nu-exista")).status_code == 404
    assert (await client.get("/api/categories/nu-exista/events")).status_code == 404


async def test_category_events_skip_inactive(client, catalog):
    response = await client.get("/api/categories/muzica-entertainment/events")

    assert response.status_code == 200
    assert [e["name"] for e in response.json()] == [
        "DJ Alex Beats", "Formația Ritm", "Saxofonist Timișoara"
    ]

    response = await client.get("/api/categories/muzica-entertainment/events", params={"subcategory": "DJ"})
    assert [e["name"] for e in response.json()] == ["DJ Alex Beats"]


async def test_default_search_is_newest_first(client, catalog):
    page = await search(client)

    assert names(page) == [
        "Catering Gustos",
        "Fotograf Nuntă Cluj",
        "DJ Alex Beats",
        "Formația Ritm",
        "Saxofonist Timișoara",
    ]
    assert page["pagination"]["total_items"] == 5


async def test_text_search_ignores_diacritics(client, catalog):
    assert names(await search(client, q="nunta")) == ["Fotograf Nuntă Cluj"]
    assert names(await search(client, q="DAN VLAD")) == ["Fotograf Nuntă Cluj"]


async def test_city_filter(client, catalog):
    assert names(await search(client, city="timisoara")) == ["Saxofonist Timișoara"]
    assert names(await search(client, city="Cluj")) == ["Fotograf Nuntă Cluj"]


async def test_category_tag_and_subcategory_filters(client, catalog):
    assert names(await search(client, category_id="catering")) == ["Catering Gustos"]
    assert names(await search(client, tag="botez")) == ["Catering Gustos", "Fotograf Nuntă Cluj"]
    assert names(await search(client, subcategory="Formație live")) == ["Formația Ritm"]


async def test_price_and_rating_filters(client, catalog):
    assert names(await search(client, price_min=1000, price_max=2500, sort="price_asc")) == [
        "Fotograf Nuntă Cluj",
        "DJ Alex Beats",
    ]
    assert names(await search(client, min_rating=4.5, sort="rating_desc")) == [
        "DJ Alex Beats", "Fotograf Nuntă Cluj"
    ]


async def test_sorting(client, catalog):
    assert names(await search(client, sort="price_desc"))[0] == "Formația Ritm"
    assert names(await search(client, sort="price_asc"))[0] == "Catering Gustos"
    assert names(await search(client, sort="name_asc")) == [
        "Catering Gustos",
        "DJ Alex Beats",
        "Formația Ritm",
        "Fotograf Nuntă Cluj",
        "Saxofonist Timișoara",
    ]
    assert names(await search(client, sort="rating_desc"))[:3] == [
        "DJ Alex Beats", "Fotograf Nuntă Cluj", "Catering Gustos"
    ]


async def test_pagination(client, catalog):
    first = await search(client, page=1, page_size=2)
    last = await search(client, page=3, page_size=2)

    assert names(first) == ["Catering Gustos", "Fotograf Nuntă Cluj"]
    assert first["pagination"] == {
        "current_page": 1,
        "total_pages": 3,
        "total_items": 5,
        "items_per_page": 2,
        "has_next": True,
        "has_previous": False,
    }
    assert names(last) == ["Saxofonist Timișoara"]
    assert last["pagination"]["has_next"] is False
    assert last["pagination"]["has_previous"] is True

    beyond = await search(client, page=9, page_size=2)
    assert beyond["items"] == []


async def test_page_size_is_bounded(client, catalog):
    response = await client.get("/api/events", params={"page_size": 1000})
    assert response.status_code == 422


async def test_get_single_listing(client, catalog):
    response = await client.get("/api/events/EVDJA0000001")
    assert response.status_code == 200
    assert response.json()["price"] == {"amount": 2500.0, "type": "per_event"}

    response = await client.get("/api/events/EVNOPE000000")
    assert response.status_code == 404
    assert response.json()["detail"] == "Evenimentul nu mai există"


async def test_favorites_toggle(client, catalog, participant):
    url = "/api/users/me/favorites"

    added = await client.post(f"{url}/EVFOT0000001", headers=participant["headers"])
    assert added.status_code == 200
    assert added.json() == {
        "saved_events": ["EVFOT0000001"],
        "is_favorite": True,
        "message": "Eveniment adăugat la favorite!",
    }
    await client.post(f"{url}/EVDJA0000001", headers=participant["headers"])

    favorites = await client.get(url, headers=participant["headers"])
    assert [e["event_id"] for e in favorites.json()] == ["EVFOT0000001", "EVDJA0000001"]

    removed = await client.post(f"{url}/EVFOT0000001", headers=participant["headers"])
    assert removed.json()["is_favorite"] is False
    assert removed.json()["message"] == "Eveniment eliminat de la favorite!"
    assert removed.json()["saved_events"] == ["EVDJA0000001"]


async def test_favorite_of_missing_listing(client, catalog, participant):
    response = await client.post("/api/users/me/favorites/EVNOPE000000", headers=participant["headers"])

    assert response.status_code == 404
    me = await client.get("/api/users/me", headers=participant["headers"])
    assert me.json()["saved_events"] == []


async def test_favorites_skip_deleted_listings(client, catalog, participant):
    await client.post("/api/users/me/favorites/EVCAT0000001", headers=participant["headers"])
    await catalog.events.delete_one({"event_id": "EVCAT0000001"})

    favorites = await client.get("/api/users/me/favorites", headers=participant["headers"])
    assert favorites.json() == []


async def test_vendor_listings(client, listing, vendor, participant):
    response = await client.get("/api/events/vendor/me", headers=vendor["headers"])
    assert [e["event_id"] for e in response.json()] == [listing]

    response = await client.get("/api/events/vendor/me", headers=participant["headers"])
    assert response.status_code == 403
