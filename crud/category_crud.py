from typing import List, Optional
from schemas.category import Category
from schemas.event import Event
from config.database import Database
from crud.event_crud import ACTIVE_FILTER


async def get_all_categories() -> List[Category]:
    db = Database()
    categories = await db.categories.find().to_list(length=None)
    return sorted((Category(**c) for c in categories), key=lambda c: c.name)


async def get_category(category_id: str) -> Optional[Category]:
    db = Database()
    category = await db.categories.find_one({"category_id": category_id})
    if category:
        return Category(**category)
    return None


async def category_exists(category_id: str) -> bool:
    db = Database()
    return await db.categories.find_one({"category_id": category_id}, {"_id": 1}) is not None


async def get_category_events(category_id: str, subcategory: Optional[str] = None) -> List[Event]:
    db = Database()
    query = {"category_id": category_id, **ACTIVE_FILTER}
    if subcategory:
        query["subcategories"] = subcategory
    events = await db.events.find(query).to_list(length=None)
    items = [Event(**e) for e in events]
    items.sort(key=lambda e: e.created_at, reverse=True)
    return items
