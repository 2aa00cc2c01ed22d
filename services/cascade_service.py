"""
Multi-collection deletes run as sagas.

Each step snapshots the documents it is about to delete. When a step
fails, every snapshot taken so far, the failing step included, is inserted
back in reverse order and a CascadeError is raised. Nothing is left half deleted;
if a snapshot cannot be put back the error says so and names the collections.
"""
import logging
from typing import Any, Dict, List, Tuple
from pymongo.errors import BulkWriteError
from config.database import Database
from core.exceptions import CascadeError, NotFoundError
from schemas.admin import CascadeReport
from schemas.user import Role

logger = logging.getLogger(__name__)

CASCADE_FAILED_MESSAGE = "Ștergerea a eșuat. Toate modificările au fost anulate."
CASCADE_INCOMPLETE_MESSAGE = "Ștergerea a eșuat și unele date nu au putut fi restaurate. Contactați echipa tehnică."

DUPLICATE_KEY = 11000

# (collection, filter) pairs, run in order
CascadeStep = Tuple[str, Dict[str, Any]]


class CascadeDelete:
    def __init__(self, db: Database, target_id: str, steps: List[CascadeStep]):
        self.db = db
        self.target_id = target_id
        self.steps = steps
        self._completed: List[Tuple[str, List[dict]]] = []

    async def _delete_step(self, collection: str, query: Dict[str, Any]) -> int:
        snapshot = await self.db.db[collection].find(query).to_list(length=None)
        # Recorded before the delete so a write that lands but errors is restored
        self._completed.append((collection, snapshot))
        if not snapshot:
            return 0
        ids = [document["_id"] for document in snapshot]
        await self.db.db[collection].delete_many({"_id": {"$in": ids}})
        return len(snapshot)

    async def _restore(self, collection: str, snapshot: List[dict]) -> bool:
        try:
            await self.db.db[collection].insert_many(snapshot, ordered=False)
        except BulkWriteError as e:
            errors = e.details.get("writeErrors", [])
            if any(error.get("code") != DUPLICATE_KEY for error in errors):
                logger.critical(f"Could not restore {collection} for {self.target_id}: {errors}")
                return False
            # A duplicate is fine only when the very same document was never deleted
            ids = [snapshot[error["index"]]["_id"] for error in errors]
            present = await self.db.db[collection].count_documents({"_id": {"$in": ids}})
            if present != len(ids):
                logger.critical(f"Could not restore {len(ids) - present} documents in {collection} for {self.target_id}")
                return False
        except Exception as e:
            logger.critical(f"Could not restore {collection} for {self.target_id}: {e}", exc_info=True)
            return False
        logger.info(f"Restored {len(snapshot)} documents in {collection}")
        return True

    async def _compensate(self) -> List[str]:
        """Put every snapshot back, newest step first; returns the collections left incomplete"""
        unrestored = []
        for collection, snapshot in reversed(self._completed):
            if snapshot and not await self._restore(collection, snapshot):
                unrestored.append(collection)
        self._completed = []
        return unrestored

    async def run(self) -> CascadeReport:
        deleted: Dict[str, int] = {}
        for collection, query in self.steps:
            try:
                deleted[collection] = await self._delete_step(collection, query)
            except Exception as e:
                logger.error(f"Cascade for {self.target_id} failed at {collection}: {e}", exc_info=True)
                unrestored = await self._compensate()
                if unrestored:
                    raise CascadeError(
                        CASCADE_INCOMPLETE_MESSAGE,
                        failed_step=collection,
                        unrestored=unrestored,
                    )
                raise CascadeError(CASCADE_FAILED_MESSAGE, failed_step=collection)

        logger.info(f"Cascade for {self.target_id} finished: {deleted}")
        return CascadeReport(target_id=self.target_id, deleted=deleted)


async def delete_vendor(db: Database, vendor_id: str) -> CascadeReport:
    vendor = await db.users.find_one({"user_id": vendor_id})
    if not vendor:
        raise NotFoundError("Furnizorul nu a fost găsit")
    if vendor.get("role") != Role.vendor.value:
        raise NotFoundError("Furnizorul nu a fost găsit")

    steps = [
        ("events", {"vendor_id": vendor_id}),
        ("service_approval_requests", {"vendor_id": vendor_id}),
        ("requests", {"vendor_id": vendor_id}),
        ("confirmed_events", {"vendor_id": vendor_id}),
        ("users", {"user_id": vendor_id}),
    ]
    return await CascadeDelete(db, vendor_id, steps).run()


async def delete_listing(db: Database, event_id: str) -> CascadeReport:
    if not await db.events.find_one({"event_id": event_id}):
        raise NotFoundError("Evenimentul nu mai există")

    steps = [
        ("events", {"event_id": event_id}),
        ("requests", {"event_id": event_id}),
        ("confirmed_events", {"event_id": event_id}),
    ]
    return await CascadeDelete(db, event_id, steps).run()
