# database.py
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import BaseModel
from pymongo.server_api import ServerApi

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PAGE_SIZE = 9


def page_window(page: int) -> Tuple[int, int]:
    """Return (skip, limit) for a 1-based page number."""
    return (page - 1) * PAGE_SIZE, PAGE_SIZE


def to_object_id(value: Union[str, ObjectId]) -> ObjectId:
    # bson raises InvalidId for anything that isn't a 12-byte / 24-hex id
    if isinstance(value, ObjectId):
        return value
    return ObjectId(value)


def serialize(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


class UpdateOutcome(BaseModel):
    acknowledged: bool = True
    matchedCount: int
    modifiedCount: int
    upsertedId: Optional[str] = None


class DeleteOutcome(BaseModel):
    acknowledged: bool = True
    deletedCount: int


class DocumentCollection:
    """Thin wrapper around one motor collection."""

    def __init__(self, collection):
        self._collection = collection

    @staticmethod
    def _normalize(id_or_filter: Union[str, ObjectId, Dict[str, Any], None]) -> Dict[str, Any]:
        if id_or_filter is None:
            return {}
        if isinstance(id_or_filter, (str, ObjectId)):
            return {"_id": to_object_id(id_or_filter)}
        query = dict(id_or_filter)
        if "_id" in query:
            query["_id"] = to_object_id(query["_id"])
        return query

    async def insert_one(self, record: Dict[str, Any]) -> str:
        result = await self._collection.insert_one(dict(record))
        return str(result.inserted_id)

    async def find_one(self, id_or_filter) -> Optional[dict]:
        doc = await self._collection.find_one(self._normalize(id_or_filter))
        return serialize(doc)

    async def find(
        self,
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[List[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[dict]:
        cursor = self._collection.find(self._normalize(query))
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [serialize(doc) for doc in await cursor.to_list(None)]

    async def count_documents(self, query: Optional[Dict[str, Any]] = None) -> int:
        return await self._collection.count_documents(self._normalize(query))

    async def update_one(
        self,
        id_or_filter,
        fields: Dict[str, Any],
        upsert: bool = False,
        on_insert: Optional[Dict[str, Any]] = None,
    ) -> UpdateOutcome:
        """$set the fields; on_insert is only written when the upsert creates a document."""
        update = {"$set": fields}
        if on_insert:
            update["$setOnInsert"] = on_insert
        result = await self._collection.update_one(self._normalize(id_or_filter), update, upsert=upsert)
        return UpdateOutcome(
            matchedCount=result.matched_count,
            modifiedCount=result.modified_count,
            upsertedId=str(result.upserted_id) if result.upserted_id is not None else None,
        )

    async def delete_one(self, id_or_filter) -> DeleteOutcome:
        result = await self._collection.delete_one(self._normalize(id_or_filter))
        return DeleteOutcome(deletedCount=result.deleted_count)


class Database:
    """Owns the motor client and the two collections the handlers use."""

    def __init__(self, uri: str, name: str, client=None):
        self.client = client or AsyncIOMotorClient(
            uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
        )
        db = self.client[name]
        self.name = name
        self.assignments = DocumentCollection(db["assignments"])
        self.submissions = DocumentCollection(db["submissions"])

    async def connect(self):
        try:
            await self.client.admin.command("ping")
        except Exception as e:
            logger.error(f"Could not reach MongoDB: {str(e)}")
            raise
        logger.info(f"Pinged your deployment. Connected to MongoDB database {self.name}")

    def close(self):
        self.client.close()
        logger.info("MongoDB connection closed")
