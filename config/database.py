from motor.motor_asyncio import AsyncIOMotorClient
from typing import AsyncGenerator
import logging
import asyncio
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger('database')

REQUIRED_COLLECTIONS = [
    'users',
    'categories',
    'events',
    'service_approval_requests',
    'requests',
    'confirmed_events',
    'revoked_tokens',
]

# (collection, field) pairs backed by a unique index
UNIQUE_INDEXES = [
    ('users', 'user_id'),
    ('users', 'email'),
    ('categories', 'category_id'),
    ('events', 'event_id'),
    ('service_approval_requests', 'request_id'),
    ('requests', 'request_id'),
    ('confirmed_events', 'confirmed_event_id'),
    ('confirmed_events', 'request_id'),
    ('revoked_tokens', 'jti'),
]


class Database:
    client = None
    db = None

    @classmethod
    async def connect_db(cls):
        """Connect to MongoDB, retrying while the server is unreachable."""
        if not settings.MONGODB_URL:
            raise ValueError("MONGODB_URL environment variable is not set")

        last_error = None
        for attempt in range(1, settings.MONGODB_CONNECT_RETRIES + 1):
            try:
                logger.info(f"Connecting to MongoDB (attempt {attempt}/{settings.MONGODB_CONNECT_RETRIES})")
                client = AsyncIOMotorClient(
                    settings.MONGODB_URL,
                    serverSelectionTimeoutMS=5000,
                    connectTimeoutMS=10000,
                    maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
                    retryWrites=True,
                    retryReads=True
                )
                await client[settings.DATABASE_NAME].command('ping')
                await cls.use_client(client, settings.DATABASE_NAME)
                logger.info(f"Connected to MongoDB database: {settings.DATABASE_NAME}")
                return
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                last_error = e
                if attempt < settings.MONGODB_CONNECT_RETRIES:
                    logger.warning(f"MongoDB unreachable, retrying in {settings.MONGODB_RETRY_DELAY}s: {e}")
                    await asyncio.sleep(settings.MONGODB_RETRY_DELAY)
            except Exception as e:
                logger.error(f"Unexpected error connecting to MongoDB: {str(e)}")
                raise

        logger.error(f"Failed to connect to MongoDB after {settings.MONGODB_CONNECT_RETRIES} attempts")
        raise last_error

    @classmethod
    async def use_client(cls, client, database_name: str):
        """Bind the class to a client and prepare collections and indexes."""
        cls.client = client
        cls.db = client[database_name]

        existing = await cls.db.list_collection_names()
        for collection in REQUIRED_COLLECTIONS:
            if collection not in existing:
                await cls.db.create_collection(collection)
                logger.info(f"Created collection: {collection}")
        await cls.ensure_indexes()

    @classmethod
    async def ensure_indexes(cls):
        """Create the unique indexes the workflows rely on."""
        for collection, field in UNIQUE_INDEXES:
            await cls.db[collection].create_index([(field, ASCENDING)], unique=True)
        await cls.db.events.create_index([("vendor_id", ASCENDING)])
        await cls.db.requests.create_index([("vendor_id", ASCENDING)])
        await cls.db.requests.create_index([("user_id", ASCENDING)])
        await cls.db.service_approval_requests.create_index([("status", ASCENDING)])
        logger.info("Database indexes ensured")

    @classmethod
    async def close_db(cls):
        """Close database connection."""
        if cls.client is not None:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("MongoDB connection closed.")

    def __init__(self):
        """Initialize database instance."""
        if self.db is None:
            raise Exception("Database not initialized. Call connect_db() first.")

        self.users = self.db.users
        self.categories = self.db.categories
        self.events = self.db.events
        self.service_approval_requests = self.db.service_approval_requests
        self.requests = self.db.requests
        self.confirmed_events = self.db.confirmed_events
        self.revoked_tokens = self.db.revoked_tokens

    @classmethod
    def get_db(cls) -> 'Database':
        """Get database instance."""
        if cls.db is None:
            raise Exception("Database not initialized. Call connect_db() first.")
        return cls()


async def get_db() -> AsyncGenerator[Database, None]:
    """FastAPI dependency for getting database instance."""
    if Database.db is None:
        await Database.connect_db()

    yield Database()
