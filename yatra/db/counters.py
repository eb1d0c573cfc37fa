# yatra/db/counters.py
from typing import Any, Optional

from loguru import logger
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from yatra.core.exceptions import StorageUnavailable
from yatra.models.counter import Counter


class MongoCounterStore:
    """Atomic named counters kept in the ``counters`` collection.

    ``increment`` is a single ``find_one_and_update``: MongoDB serialises
    concurrent updates to the same ``_id``, so no locking happens here.
    """

    def __init__(self, collection: Optional[Any] = None):
        self._collection = collection

    @property
    def collection(self):
        if self._collection is not None:
            return self._collection
        return Counter.get_pymongo_collection()

    async def increment(self, key: str, delta: int = 1, default: int = 1000) -> int:
        """Add ``delta`` to counter ``key`` and return the new value.

        A missing counter is created as ``default + delta``. The update is a
        pipeline so the default and the increment apply in the same write
        ($setOnInsert and $inc cannot target the same field).
        """
        logger.debug(f"Incrementing sequence counter '{key}' by {delta}")
        try:
            updated_doc = await self.collection.find_one_and_update(
                {"_id": key},
                [{"$set": {"seq": {"$add": [{"$ifNull": ["$seq", default]}, delta]}}}],
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Sequence counter '{key}' increment failed: {e}")
            raise StorageUnavailable(
                f"Could not allocate next value for sequence '{key}'",
                context={"sequence": key},
            ) from e

        if not updated_doc or "seq" not in updated_doc:
            logger.error(f"find_one_and_update returned no document for sequence '{key}'")
            raise StorageUnavailable(
                f"Could not allocate next value for sequence '{key}'",
                context={"sequence": key},
            )

        next_value = int(updated_doc["seq"])
        logger.debug(f"Next sequence value for '{key}': {next_value}")
        return next_value

