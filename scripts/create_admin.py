from config.database import Database
from config.security import hash_password
from schemas.user import Role, generate_user_id
from datetime import datetime
import argparse
import asyncio
import logging
import os

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@eventoria.ro"
DEFAULT_ADMIN_NAME = "Administrator"


async def create_admin(db: Database, email: str, password: str, name: str = DEFAULT_ADMIN_NAME) -> str:
    """Create the admin account, or promote the existing account with this e-mail."""
    email = email.strip().lower()
    existing = await db.users.find_one({"email": email})
    if existing:
        await db.users.update_one(
            {"user_id": existing["user_id"]},
            {"$set": {"role": Role.admin.value, "disabled": False, "updated_at": datetime.utcnow()}}
        )
        logger.info(f"Promoted {email} to admin")
        return existing["user_id"]

    user_id = generate_user_id(name)
    await db.users.insert_one({
        "user_id": user_id,
        "name": name,
        "email": email,
        "password": hash_password(password),
        "role": Role.admin.value,
        "saved_events": [],
        "notifications": [],
        "disabled": False,
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    })
    logger.info(f"Created admin account {email}")
    return user_id


async def main(email: str, password: str, name: str):
    await Database.connect_db()
    try:
        await create_admin(Database(), email, password, name)
    finally:
        await Database.close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote the Eventoria admin account")
    parser.add_argument("--email", default=DEFAULT_ADMIN_EMAIL)
    parser.add_argument("--name", default=DEFAULT_ADMIN_NAME)
    parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))
    args = parser.parse_args()

    if not args.password:
        parser.error("--password or ADMIN_PASSWORD is required")
    try:
        asyncio.run(main(args.email, args.password, args.name))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Creating admin failed: {str(e)}")
