from config.database import Database
from datetime import datetime
import asyncio
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

EVENT_TAGS = [
    'nunta', 'botez', 'cununie', 'eveniment-privat', 'eveniment-sportiv', 'festival',
    'inaugurare', 'petrecere-copii', 'petrecere-corporativa', 'revelion', 'zilele-orasului'
]

CATEGORIES = [
    {
        "category_id": "locatie-eveniment",
        "name": "Locație Eveniment",
        "description": "Spații premium pentru evenimente",
        "image_url": "https://images.pexels.com/photos/169193/pexels-photo-169193.jpeg",
        "price_range": {"min": 5000, "max": 50000},
        "subcategories": ["Săli de nuntă", "Conace și castele", "Grădini și terase"],
    },
    {
        "category_id": "fotografie-video",
        "name": "Fotografie și Video",
        "description": "Servicii profesionale de fotografie și videografie",
        "image_url": "https://images.pexels.com/photos/1444442/pexels-photo-1444442.jpeg",
        "price_range": {"min": 2000, "max": 15000},
        "subcategories": ["Fotografie de eveniment", "Videografie", "Drone & Echipamente speciale"],
    },
    {
        "category_id": "muzica-entertainment",
        "name": "Muzică și Entertainment",
        "description": "Servicii de sonorizare și entertainment",
        "image_url": "https://images.pexels.com/photos/2034851/pexels-photo-2034851.jpeg",
        "price_range": {"min": 1500, "max": 10000},
        "subcategories": ["DJ", "Formații live", "Artiști & Animatori"],
    },
    {
        "category_id": "catering",
        "name": "Catering",
        "description": "Servicii premium de catering",
        "image_url": "https://images.pexels.com/photos/5638732/pexels-photo-5638732.jpeg",
        "price_range": {"min": 100, "max": 500},
        "subcategories": ["Catering full-service", "Cofetărie & Patiserie", "Mixologie & Băuturi"],
    },
    {
        "category_id": "decor-aranjamente",
        "name": "Decor și Aranjamente",
        "description": "Decorațiuni și aranjamente pentru evenimente",
        "image_url": "https://images.pexels.com/photos/2306281/pexels-photo-2306281.jpeg",
        "price_range": {"min": 1000, "max": 20000},
        "subcategories": ["Florărie", "Decor tematic", "Iluminat decorativ"],
    },
    {
        "category_id": "rochii-costume",
        "name": "Rochii și Costume",
        "description": "Ținute pentru orice tip de eveniment",
        "image_url": "https://images.pexels.com/photos/291759/pexels-photo-291759.jpeg",
        "price_range": {"min": 1000, "max": 15000},
        "subcategories": ["Rochii de mireasă", "Costume pentru miri", "Accesorii"],
    },
]


async def populate_categories(db: Database) -> int:
    """Insert the catalogue categories that are missing; existing ones are left alone."""
    created = 0
    for category in CATEGORIES:
        result = await db.categories.update_one(
            {"category_id": category["category_id"]},
            {"$setOnInsert": {
                **category,
                "rating": 0.0,
                "tags": EVENT_TAGS,
                "created_at": datetime.utcnow(),
                "updated_at": datetime.utcnow(),
            }},
            upsert=True
        )
        if result.upserted_id is not None:
            created += 1
            logger.info(f"Created category: {category['name']}")
        else:
            logger.info(f"Category already exists: {category['name']}")
    return created


async def main():
    await Database.connect_db()
    try:
        created = await populate_categories(Database())
        logger.info(f"Categories created: {created}")
    finally:
        await Database.close_db()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Population interrupted by user")
    except Exception as e:
        logger.error(f"Population failed: {str(e)}")
